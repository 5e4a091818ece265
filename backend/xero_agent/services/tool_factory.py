"""Binding of tool handlers into LangChain structured tools.

A tool handler receives the shared Xero client and its validated argument
model and returns report text. create_xero_tool wraps it so the resulting
tool always returns a ToolResult dict: argument validation errors and
exceptions escaping the handler are rendered as ``Error {action}: ...``
instead of propagating to the caller.
"""

from typing import Any, Awaitable, Callable, Dict, Type, TypeVar

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, ValidationError

from xero_agent.core.errors import format_error
from xero_agent.core.logging import LoggerAdapter, get_logger
from xero_agent.models.tool import ToolResult
from xero_agent.services.xero_client import XeroClient

logger = get_logger(__name__)

A = TypeVar("A", bound=BaseModel)

ToolHandler = Callable[[XeroClient, A], Awaitable[str]]


class ToolContext:
    """Resources shared by all tools.

    Created once at startup and passed to get_all_tools(); tools never look
    up a global client.
    """

    def __init__(self, client: XeroClient):
        """Initialize ToolContext.

        Args:
            client: Xero client used by every tool
        """
        self.client = client

    async def close(self) -> None:
        """Close the Xero client."""
        await self.client.close()


def _describe_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        message = item.get("msg", "invalid value")
        problems.append(f"{location}: {message}" if location else message)
    return "; ".join(problems) or str(error)


def error_result(action: str, message: str) -> Dict[str, Any]:
    return ToolResult.from_text(f"Error {action}: {message}").to_dict()


def create_xero_tool(
    name: str,
    description: str,
    args_schema: Type[A],
    handler: ToolHandler,
    *,
    action: str,
    context: ToolContext,
) -> StructuredTool:
    """Create a structured tool around a tool handler.

    Args:
        name: Tool name, e.g. ``create-invoice``
        description: Description shown to the agent
        args_schema: Pydantic model the arguments are validated against
        handler: Coroutine producing the report text
        action: Verb phrase used in error text, e.g. ``creating invoice``
        context: Shared tool resources

    Returns:
        A StructuredTool whose coroutine returns ``{"content": [...]}``
    """
    log = LoggerAdapter(logger, {"tool": name})

    def handle_validation_error(error: ValidationError) -> Dict[str, Any]:
        log.warning(f"Invalid arguments: {error}")
        return error_result(action, _describe_validation_error(error))

    async def run(**kwargs: Any) -> Dict[str, Any]:
        try:
            args = args_schema.model_validate(kwargs)
        except ValidationError as e:
            return handle_validation_error(e)

        log.info("Running")
        try:
            text = await handler(context.client, args)
        except Exception as e:
            log.exception("Tool failed")
            return error_result(action, format_error(e))

        return ToolResult.from_text(text).to_dict()

    return StructuredTool.from_function(
        coroutine=run,
        name=name,
        description=description,
        args_schema=args_schema,
        handle_validation_error=handle_validation_error,
    )
