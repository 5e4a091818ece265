"""Health check endpoints with Xero connectivity status."""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from xero_agent.api.deps import CurrentToolContext
from xero_agent.core.errors import format_error
from xero_agent.services.xero_client import XeroClient

logger = logging.getLogger(__name__)

router = APIRouter()


class ServiceStatus(BaseModel):
    """Status of an individual service."""
    available: bool
    message: Optional[str] = None
    latency_ms: Optional[float] = None


class HealthResponse(BaseModel):
    """Health check response with all service statuses."""
    status: str  # "healthy", "unhealthy"
    timestamp: str
    version: str
    services: Dict[str, ServiceStatus]


async def check_xero(client: XeroClient) -> ServiceStatus:
    """Check that the Xero credentials yield a token and a tenant."""
    try:
        start = datetime.now()
        await client.authenticate()
        latency = (datetime.now() - start).total_seconds() * 1000
        return ServiceStatus(available=True, latency_ms=latency)
    except Exception as e:
        logger.error(f"Xero health check failed: {e}")
        return ServiceStatus(available=False, message=format_error(e))


@router.get("/health", response_model=HealthResponse)
async def health_check(context: CurrentToolContext) -> HealthResponse:
    """Report whether the Xero API is reachable with the configured credentials.

    Status values:
    - "healthy": Xero authentication succeeded
    - "unhealthy": Xero authentication failed
    """
    services: Dict[str, ServiceStatus] = {"xero": await check_xero(context.client)}

    return HealthResponse(
        status="healthy" if services["xero"].available else "unhealthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version="0.1.0",
        services=services,
    )
