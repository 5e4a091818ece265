"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from xero_agent.api.router import api_router
from xero_agent.core.config import settings
from xero_agent.core.logging import get_logger, setup_logging
from xero_agent.services.tool_factory import ToolContext
from xero_agent.services.xero_client import XeroClient

# Set up logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Xero API: {settings.xero_api_base_url}")

    app.state.tool_context = ToolContext(XeroClient.from_settings())
    logger.info("Xero client initialized")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")
    await app.state.tool_context.close()
    logger.info("Xero client closed")


app = FastAPI(
    title=settings.app_name,
    description="Xero bookkeeping tools for AI agents",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": "0.1.0",
        "debug": settings.debug,
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": settings.app_name,
        "docs": "/api/docs",
        "api": "/api/v1",
    }
