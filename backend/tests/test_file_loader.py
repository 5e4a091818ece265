"""Tests for loading local files as base64 attachments."""

import base64
import errno
from unittest.mock import AsyncMock, patch

import pytest

from xero_agent.core.errors import (
    AttachmentNotFoundError,
    AttachmentPermissionError,
    AttachmentReadError,
    AttachmentTooLargeError,
    ErrorCode,
    NotAFileError,
)
from xero_agent.services.file_loader import load_file


class TestLoadFile:
    """Tests for load_file."""

    @pytest.mark.asyncio
    async def test_loads_file_as_base64(self, receipt_file):
        loaded = await load_file(str(receipt_file))

        assert loaded.content == b"%PDF-1.4 receipt"
        assert base64.b64decode(loaded.base64_content) == b"%PDF-1.4 receipt"
        assert loaded.file_name == "receipt.pdf"
        assert loaded.mime_type == "application/pdf"

    @pytest.mark.asyncio
    async def test_relative_path_resolves_against_cwd(self, receipt_file, monkeypatch):
        monkeypatch.chdir(receipt_file.parent)

        loaded = await load_file("receipt.pdf")

        assert loaded.file_name == "receipt.pdf"

    @pytest.mark.asyncio
    async def test_unknown_extension_uses_octet_stream(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"\x00\x01")

        loaded = await load_file(str(path))

        assert loaded.mime_type == "application/octet-stream"

    @pytest.mark.asyncio
    async def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_bytes(b"")

        loaded = await load_file(str(path))

        assert loaded.content == b""
        assert loaded.base64_content == ""

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        missing = tmp_path / "missing.pdf"

        with pytest.raises(AttachmentNotFoundError) as exc_info:
            await load_file(str(missing))

        assert exc_info.value.message == f"File not found: {missing}"
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_path_below_a_regular_file_is_not_found(self, receipt_file):
        child = receipt_file / "child.pdf"

        with pytest.raises(AttachmentNotFoundError) as exc_info:
            await load_file(str(child))

        assert exc_info.value.message == f"File not found: {child}"
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_directory_is_not_a_file(self, tmp_path):
        with pytest.raises(NotAFileError) as exc_info:
            await load_file(str(tmp_path))

        assert "Path is not a file" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_file_over_limit_is_rejected(self, tmp_path):
        path = tmp_path / "big.pdf"
        path.write_bytes(b"x" * 11)

        with pytest.raises(AttachmentTooLargeError) as exc_info:
            await load_file(str(path), max_size=10)

        assert exc_info.value.size == 11
        assert exc_info.value.limit == 10
        assert "File too large" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_file_at_limit_is_accepted(self, tmp_path):
        path = tmp_path / "exact.pdf"
        path.write_bytes(b"x" * 10)

        loaded = await load_file(str(path), max_size=10)

        assert len(loaded.content) == 10

    @pytest.mark.asyncio
    async def test_configured_ceiling_applies(self, tmp_path):
        path = tmp_path / "huge.pdf"
        path.write_bytes(b"x" * 16)

        with patch("xero_agent.services.file_loader.settings") as mock_settings:
            mock_settings.max_attachment_size = 8
            with pytest.raises(AttachmentTooLargeError):
                await load_file(str(path))

    @pytest.mark.asyncio
    async def test_permission_denied(self, receipt_file):
        error = PermissionError(errno.EACCES, "Permission denied")

        with patch("xero_agent.services.file_loader.aiofiles.open", side_effect=error):
            with pytest.raises(AttachmentPermissionError) as exc_info:
                await load_file(str(receipt_file))

        assert exc_info.value.message == f"Permission denied: {receipt_file}"

    @pytest.mark.asyncio
    async def test_other_os_errors_are_read_errors(self, receipt_file):
        stat_mock = AsyncMock(side_effect=OSError(errno.EIO, "Input/output error"))

        with patch("xero_agent.services.file_loader.aiofiles.os.stat", stat_mock):
            with pytest.raises(AttachmentReadError) as exc_info:
                await load_file(str(receipt_file))

        assert exc_info.value.message == f"Unable to read file: {receipt_file} - Input/output error"
        assert exc_info.value.error_code == ErrorCode.READ_FAILED
