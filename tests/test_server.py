"""Tests for MCP server integration."""

import io
import json
import logging
from unittest.mock import patch

import pytest
from mcp.types import CallToolResult, TextContent, Tool

from mcp_realip.resolver import resolve_client_ip
from mcp_realip.server import MCPRealIPServer, build_log_formatter


@pytest.fixture
def mcp_server(settings):
    """Create MCP server instance for testing."""
    with patch('mcp_realip.server.Settings', return_value=settings):
        return MCPRealIPServer()


class TestMCPServerInitialization:
    """Test cases for MCP server initialization."""

    def test_server_initialization(self, mcp_server):
        assert mcp_server.settings is not None
        assert mcp_server.server is not None
        assert set(mcp_server.tools) == {"resolve_client_ip", "classify_ip"}


class TestToolsHandler:
    """Test cases for tools handler."""

    @pytest.mark.asyncio
    async def test_list_tools(self, mcp_server):
        tools = await mcp_server.list_tools()

        assert [tool.name for tool in tools] == ["resolve_client_ip", "classify_ip"]
        for tool in tools:
            assert isinstance(tool, Tool)
            assert tool.description is not None

    @pytest.mark.asyncio
    async def test_call_resolve_client_ip(self, mcp_server):
        content = await mcp_server.call_tool("resolve_client_ip", {
            "headers": {"x-forwarded-for": "127.0.0.1, 8.8.8.8"},
            "remote_addr": "10.0.0.1:1234",
        })

        assert isinstance(content[0], TextContent)
        assert "Client IP: 8.8.8.8" in content[0].text

    @pytest.mark.asyncio
    async def test_call_tool_error_raises(self, mcp_server):
        with pytest.raises(RuntimeError, match="Validation Error"):
            await mcp_server.call_tool("classify_ip", {})

    @pytest.mark.asyncio
    async def test_call_tool_unknown(self, mcp_server):
        with pytest.raises(ValueError, match="Unknown tool"):
            await mcp_server.call_tool("check_ip", {"ip_address": "8.8.8.8"})

    @pytest.mark.asyncio
    async def test_call_tool_delegates(self, mcp_server):
        with patch.object(mcp_server.tools["classify_ip"], "execute") as mock_execute:
            mock_execute.return_value = CallToolResult(
                content=[TextContent(type="text", text="Mock result")]
            )

            content = await mcp_server.call_tool("classify_ip", {"address": "8.8.8.8"})

            assert content[0].text == "Mock result"
            mock_execute.assert_called_once_with({"address": "8.8.8.8"})


class TestResources:
    """Test cases for resource content."""

    def test_private_ranges(self, mcp_server):
        ranges = mcp_server._get_private_ranges()

        assert ranges["ipv4"] == [
            "127.0.0.0/8",
            "10.0.0.0/8",
            "172.16.0.0/12",
            "192.168.0.0/16",
            "169.254.0.0/16",
        ]
        assert ranges["ipv6"] == ["::1/128", "fc00::/7", "fe80::/10"]
        json.dumps(ranges)

    def test_usage_documentation(self, mcp_server):
        doc = mcp_server._get_usage_documentation()

        assert "# MCP Real IP Usage Documentation" in doc
        assert "### resolve_client_ip" in doc
        assert "### classify_ip" in doc


class TestLogFormatting:
    """Test cases for log formatter selection."""

    def test_text_formatter(self):
        formatter = build_log_formatter("text")
        record = logging.LogRecord(
            "mcp_realip.resolver", logging.INFO, __file__, 1, "Starting %s", ("server",), None
        )

        line = formatter.format(record)

        assert line.endswith(" - mcp_realip.resolver - INFO - Starting server")

    def test_json_formatter_escapes_message(self):
        formatter = build_log_formatter("json")
        record = logging.LogRecord(
            "mcp_realip.resolver",
            logging.DEBUG,
            __file__,
            1,
            "Skipping candidate %r: %s",
            ("it's", 'address is not valid: "x"\\ \nnext'),
            None,
        )

        data = json.loads(formatter.format(record))

        assert data["message"] == 'Skipping candidate "it\'s": address is not valid: "x"\\ \nnext'
        assert data["level"] == "DEBUG"
        assert data["logger"] == "mcp_realip.resolver"
        assert "time" in data

    def test_json_lines_survive_hostile_forwarded_header(self):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(build_log_formatter("json"))
        resolver_logger = logging.getLogger("mcp_realip.resolver")
        previous_level = resolver_logger.level
        resolver_logger.addHandler(handler)
        resolver_logger.setLevel(logging.DEBUG)
        try:
            resolve_client_ip({"X-Forwarded-For": '"}, {"evil": 1\n\\'}, "10.0.0.1:80")
        finally:
            resolver_logger.removeHandler(handler)
            resolver_logger.setLevel(previous_level)

        lines = stream.getvalue().splitlines()
        assert lines
        for line in lines:
            assert "evil" not in json.loads(line)
