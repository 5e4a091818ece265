"""Tool invocation result shape."""

from typing import Any, Dict, List, Literal

from pydantic import BaseModel


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """What every tool returns to the host: a single text block."""

    content: List[TextContent]

    @classmethod
    def from_text(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)])

    @property
    def text(self) -> str:
        return "\n".join(block.text for block in self.content)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
