"""Load local files as base64 attachments."""

import base64
import errno
import logging
import stat
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from pydantic import BaseModel

from xero_agent.core.config import settings
from xero_agent.core.errors import (
    AttachmentNotFoundError,
    AttachmentPermissionError,
    AttachmentReadError,
    AttachmentTooLargeError,
    NotAFileError,
)
from xero_agent.services.mime_type import detect_mime_type

logger = logging.getLogger(__name__)


class LoadedFile(BaseModel):
    """A local file read into memory."""
    content: bytes
    base64_content: str
    file_name: str
    mime_type: str


def _format_megabytes(size: int) -> str:
    return f"{size / 1024 / 1024:.1f}MB"


def _translate_os_error(error: OSError, file_path: str) -> Exception:
    # ENOTDIR: a parent component is a regular file, so the path does not exist
    if isinstance(error, (FileNotFoundError, NotADirectoryError)) or error.errno in (
        errno.ENOENT,
        errno.ENOTDIR,
    ):
        return AttachmentNotFoundError(f"File not found: {file_path}")
    if isinstance(error, PermissionError) or error.errno in (errno.EACCES, errno.EPERM):
        return AttachmentPermissionError(f"Permission denied: {file_path}")
    if isinstance(error, IsADirectoryError):
        return NotAFileError(f"Path is not a file: {file_path}")
    reason = error.strerror or str(error)
    return AttachmentReadError(f"Unable to read file: {file_path} - {reason}")


async def load_file(file_path: str, max_size: Optional[int] = None) -> LoadedFile:
    """Read a local file and return it base64 encoded.

    The size is checked against ``max_size`` (default: the configured
    attachment ceiling) before the content is read.

    Args:
        file_path: Path to the file, relative paths resolve against the cwd
        max_size: Optional size ceiling override in bytes

    Returns:
        LoadedFile with raw bytes, base64 content, file name and MIME type

    Raises:
        AttachmentNotFoundError: The path does not exist
        NotAFileError: The path is a directory or other non-regular entry
        AttachmentTooLargeError: The file is larger than the ceiling
        AttachmentPermissionError: The file cannot be read
        AttachmentReadError: Any other OS error
    """
    limit = max_size if max_size is not None else settings.max_attachment_size
    resolved = Path(file_path).expanduser().resolve()

    try:
        info = await aiofiles.os.stat(resolved)
    except OSError as e:
        raise _translate_os_error(e, file_path) from e

    if not stat.S_ISREG(info.st_mode):
        raise NotAFileError(f"Path is not a file: {file_path}")

    if info.st_size > limit:
        raise AttachmentTooLargeError(
            f"File too large: {file_path} is {_format_megabytes(info.st_size)} "
            f"(max: {_format_megabytes(limit)})",
            size=info.st_size,
            limit=limit,
        )

    try:
        async with aiofiles.open(resolved, "rb") as f:
            # Read one byte past the limit in case the file grew after stat
            content = await f.read(limit + 1)
    except OSError as e:
        raise _translate_os_error(e, file_path) from e

    if len(content) > limit:
        raise AttachmentTooLargeError(
            f"File too large: {file_path} exceeds {_format_megabytes(limit)}",
            size=len(content),
            limit=limit,
        )

    file_name = resolved.name
    logger.debug(f"Loaded attachment {file_name} ({len(content)} bytes) from {resolved}")

    return LoadedFile(
        content=content,
        base64_content=base64.b64encode(content).decode("ascii"),
        file_name=file_name,
        mime_type=detect_mime_type(file_name),
    )
