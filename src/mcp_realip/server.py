"""MCP Server for resolving real client IP addresses behind proxies."""

import asyncio
import json
import logging
import sys
from typing import Any

from mcp.server import Server, NotificationOptions
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import (
    Resource,
    Tool,
    TextContent,
    TextResourceContents,
    CallToolResult,
)
from pydantic import AnyUrl
from pythonjsonlogger import jsonlogger

from .settings import Settings
from .tools.classify_ip import ClassifyIPTool
from .tools.resolve_client_ip import ResolveClientIPTool
from .utils.ip_utils import PRIVATE_NETWORKS

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-realip"
SERVER_VERSION = "0.1.0"

TEXT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def build_log_formatter(log_format: str) -> logging.Formatter:
    """Return the formatter for the configured log format."""
    if log_format == "json":
        return jsonlogger.JsonFormatter(
            JSON_LOG_FORMAT,
            rename_fields={"asctime": "time", "name": "logger", "levelname": "level"},
        )
    return logging.Formatter(TEXT_LOG_FORMAT)


class MCPRealIPServer:
    """MCP Server exposing client IP resolution."""

    def __init__(self):
        self.settings = Settings()

        # Initialize MCP server
        self.server = Server(SERVER_NAME)

        # Initialize tools
        self.tools = {
            "resolve_client_ip": ResolveClientIPTool(self.settings),
            "classify_ip": ClassifyIPTool(self.settings),
        }

        # Register handlers
        self._register_handlers()

        logger.debug(f"Server initialized with tools: {', '.join(self.tools)}")

    def _register_handlers(self):
        """Register MCP handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            """List available tools."""
            return await self.list_tools()

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: dict) -> Any:
            """Handle tool calls."""
            return await self.call_tool(name, arguments)

        @self.server.list_resources()
        async def handle_list_resources() -> list[Resource]:
            """List available resources."""
            return [
                Resource(
                    uri=AnyUrl("ranges://private"),
                    name="Private Ranges",
                    description="CIDR blocks treated as private, loopback or link-local",
                    mimeType="application/json",
                ),
                Resource(
                    uri=AnyUrl("doc://usage"),
                    name="Usage Documentation",
                    description="Tool usage documentation and examples",
                    mimeType="text/markdown",
                ),
            ]

        @self.server.read_resource()
        async def handle_read_resource(uri: AnyUrl) -> list[TextResourceContents]:
            """Handle resource reads."""
            uri_str = str(uri)

            if uri_str == "ranges://private":
                payload = json.dumps(self._get_private_ranges(), indent=2)
                return [
                    TextResourceContents(
                        uri=uri,
                        text=payload,
                        mimeType="application/json",
                    )
                ]

            elif uri_str == "doc://usage":
                return [
                    TextResourceContents(
                        uri=uri,
                        text=self._get_usage_documentation(),
                        mimeType="text/markdown",
                    )
                ]

            else:
                raise ValueError(f"Unknown resource: {uri}")

    async def list_tools(self) -> list[Tool]:
        tools: list[Tool] = []
        for tool in self.tools.values():
            tools.append(await tool.get_tool_definition())
        return tools

    async def call_tool(self, name: str, arguments: dict) -> Any:
        """Run tool *name*, raising if it reports an error."""
        if name not in self.tools:
            raise ValueError(f"Unknown tool: {name}")

        result = await self.tools[name].execute(arguments or {})

        if isinstance(result, CallToolResult):
            if result.isError:
                message = 'Tool execution failed.'
                for block in result.content:
                    if isinstance(block, TextContent):
                        message = block.text
                        break
                raise RuntimeError(message)
            return list(result.content) if result.content else []

        return result

    def _get_private_ranges(self) -> dict:
        return {
            "ipv4": [str(network) for network in PRIVATE_NETWORKS if network.version == 4],
            "ipv6": [str(network) for network in PRIVATE_NETWORKS if network.version == 6],
        }

    def _get_usage_documentation(self) -> str:
        """Generate usage documentation."""
        return """# MCP Real IP Usage Documentation

## Available Tools

### resolve_client_ip
Find the originating public IP address of a client.
- **headers** (required): request headers; X-Forwarded-For, X-Real-Ip and X-Client-Ip are read
- **remote_addr** (optional): connection peer address, `host:port` or bare host
- **mode** (optional): `strict` (default) or `simple`

In `strict` mode the first public address among X-Forwarded-For entries,
X-Real-Ip, X-Client-Ip and the connection address wins, and the source is
reported. In `simple` mode the connection address is used when no forwarding
header is present, and X-Real-Ip is returned unvalidated as the last resort.

### classify_ip
Classify an address as public, private or invalid.
- **address** (required): IP literal, optionally with a port (`[::1]:8080` for IPv6)

## Available Resources

### ranges://private
CIDR blocks treated as private.

### doc://usage
This usage documentation.

## Examples

```json
{
  "tool": "resolve_client_ip",
  "arguments": {
    "headers": {"X-Forwarded-For": "10.0.0.1, 203.0.113.7"},
    "remote_addr": "10.0.0.2:51234"
  }
}
```
"""

    async def run(self):
        """Run the MCP server."""
        # Setup logging (stdout carries the MCP protocol)
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(build_log_formatter(self.settings.log_format))
        logging.basicConfig(
            level=getattr(logging, self.settings.log_level),
            handlers=[handler],
        )

        logger.info("Starting MCP real IP server")

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=SERVER_NAME,
                    server_version=SERVER_VERSION,
                    capabilities=self.server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                ),
            )


def main():
    """Main entry point."""
    server = MCPRealIPServer()
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Shutting down server")
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
