"""API endpoints package."""

from xero_agent.api.endpoints import health, tools

__all__ = ["health", "tools"]
