"""Core application modules."""

from xero_agent.core.config import settings
from xero_agent.core.errors import ErrorCode, format_error
from xero_agent.core.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "ErrorCode",
    "format_error",
    "get_logger",
    "setup_logging",
]
