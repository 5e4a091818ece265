"""Common dependencies for API endpoints."""

from typing import Annotated, Dict

from fastapi import Depends, Request, status
from langchain_core.tools import StructuredTool

from xero_agent.core.errors import AppException, ErrorCode
from xero_agent.services.agent_tools import get_all_tools
from xero_agent.services.tool_factory import ToolContext


def get_tool_context(request: Request) -> ToolContext:
    """Return the ToolContext created in the application lifespan."""
    context = getattr(request.app.state, "tool_context", None)
    if context is None:
        raise AppException(
            error_code=ErrorCode.INTERNAL_ERROR,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            message="Xero client is not initialised",
        )
    return context


def get_tools(context: Annotated[ToolContext, Depends(get_tool_context)]) -> Dict[str, StructuredTool]:
    """Return the agent tools keyed by name."""
    return {tool.name: tool for tool in get_all_tools(context)}


# Type aliases for endpoint signatures
CurrentToolContext = Annotated[ToolContext, Depends(get_tool_context)]
Tools = Annotated[Dict[str, StructuredTool], Depends(get_tools)]
