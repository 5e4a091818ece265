"""Pytest configuration and fixtures for tests.

Provides a fake Xero client, tools bound to it and small files on disk for
attachment tests.
"""

import os

# Set test environment variables BEFORE any app imports
os.environ.setdefault("XERO_CLIENT_ID", "test-client-id")
os.environ.setdefault("XERO_CLIENT_SECRET", "test-client-secret")

from typing import Dict
from unittest.mock import AsyncMock

import pytest
from langchain_core.tools import StructuredTool

from xero_agent.services.agent_tools import get_all_tools
from xero_agent.services.tool_factory import ToolContext
from xero_agent.services.xero_client import XeroClient


SHORT_CODE = "!abc12"


@pytest.fixture
def fake_client() -> AsyncMock:
    """Create a XeroClient double whose async methods are AsyncMocks."""
    client = AsyncMock(spec=XeroClient)
    client.authenticate.return_value = None
    client.get_short_code.return_value = SHORT_CODE
    client.upload_attachment.return_value = {}
    return client


@pytest.fixture
def tool_context(fake_client) -> ToolContext:
    """Create a ToolContext around the fake client."""
    return ToolContext(fake_client)


@pytest.fixture
def tools(tool_context) -> Dict[str, StructuredTool]:
    """All agent tools keyed by name."""
    return {tool.name: tool for tool in get_all_tools(tool_context)}


@pytest.fixture
def receipt_file(tmp_path):
    """A small PDF-named file on disk."""
    path = tmp_path / "receipt.pdf"
    path.write_bytes(b"%PDF-1.4 receipt")
    return path
