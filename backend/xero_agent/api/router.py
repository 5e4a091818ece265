"""Main API router that aggregates all endpoint routers."""

from fastapi import APIRouter

from xero_agent.api.endpoints import health, tools

# Create main API router
api_router = APIRouter(prefix="/api/v1")

# Include tools router
api_router.include_router(tools.router, prefix="/tools", tags=["Tools"])

# Include health router
api_router.include_router(health.router, tags=["Health"])


@api_router.get("/")
async def api_root():
    """API root endpoint."""
    return {
        "message": "Xero Agent Tools API v1",
        "endpoints": {
            "tools": "/api/v1/tools",
            "health": "/api/v1/health",
        },
    }
