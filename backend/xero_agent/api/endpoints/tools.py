"""Tool listing and invocation endpoints.

Tools return their outcome as text, so invocation always answers 200 with a
ToolResult, even when the Xero call or an attachment failed. Only an unknown
tool name is an HTTP error.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body
from pydantic import BaseModel

from xero_agent.api.deps import Tools
from xero_agent.core.errors import ToolNotFoundError
from xero_agent.models.tool import ToolResult

logger = logging.getLogger(__name__)

router = APIRouter()


class ToolInfo(BaseModel):
    """Tool name, description and argument JSON schema."""
    name: str
    description: str
    args_schema: Dict[str, Any]


@router.get("", response_model=List[ToolInfo])
async def list_tools(tools: Tools) -> List[ToolInfo]:
    """List the available tools."""
    return [
        ToolInfo(
            name=tool.name,
            description=tool.description,
            args_schema=tool.args_schema.model_json_schema(),
        )
        for tool in tools.values()
    ]


@router.post("/{name}", response_model=ToolResult)
async def invoke_tool(
    name: str,
    tools: Tools,
    arguments: Dict[str, Any] = Body(default_factory=dict),
) -> ToolResult:
    """Invoke a tool with the request body as its arguments."""
    tool = tools.get(name)
    if tool is None:
        logger.warning(f"Unknown tool requested: {name}")
        raise ToolNotFoundError(name)

    result = await tool.ainvoke(arguments)
    return ToolResult.model_validate(result)
