"""Attachment models shared by the tools and the attachment pipeline."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class AttachmentInput(BaseModel):
    """A caller-supplied attachment, given by local path or inline base64.

    Accepts camelCase (``filePath``) or snake_case (``file_path``) keys.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_name: Optional[str] = Field(
        default=None,
        description="Override filename (required when using base64Content)",
    )
    mime_type: Optional[str] = Field(default=None, description="Override MIME type (optional)")
    file_path: Optional[str] = Field(default=None, description="Path to local file")
    base64_content: Optional[str] = Field(
        default=None,
        description="Direct base64 content (alternative to filePath)",
    )

    @model_validator(mode="after")
    def _check_source(self) -> "AttachmentInput":
        if bool(self.file_path) == bool(self.base64_content):
            raise ValueError("Exactly one of filePath or base64Content must be provided")
        if self.base64_content and not self.file_name:
            raise ValueError("fileName is required when using base64Content")
        return self


class InlineAttachment(BaseModel):
    """An attachment supplied only as inline base64 content."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_name: str = Field(min_length=1, description="File name with extension")
    mime_type: Optional[str] = Field(default=None, description="MIME type (optional)")
    base64_content: str = Field(description="Base64 encoded file")


class ProcessedAttachment(BaseModel):
    """An attachment ready for upload."""

    file_name: str = Field(min_length=1)
    mime_type: str = Field(min_length=1)
    base64_content: str


class AttachmentStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class AttachmentUploadResult(BaseModel):
    """Outcome of one attachment upload."""

    file_name: str
    status: AttachmentStatus
    error: Optional[str] = None

    def describe(self) -> str:
        if self.status == AttachmentStatus.FAILED and self.error:
            return f"{self.file_name} (failed: {self.error})"
        return f"{self.file_name} ({self.status.value})"
