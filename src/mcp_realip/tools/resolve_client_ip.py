"""Tool for resolving the real client IP of a proxied request."""

import json
import logging
from typing import Any, Dict

from mcp.types import Tool, TextContent, CallToolResult
from pydantic import ValidationError

from ..settings import Settings
from ..models import ResolutionMode, ResolveRequest
from ..resolver import resolve_client_ip, simple_client_ip

logger = logging.getLogger(__name__)


class ResolveClientIPTool:
    """Tool for resolving the originating public IP of a request."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def get_tool_definition(self) -> Tool:
        """Get the tool definition for MCP."""
        return Tool(
            name="resolve_client_ip",
            description=(
                "Find the originating public IP address of an HTTP client from its "
                "forwarding headers and connection address"
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "headers": {
                        "type": "object",
                        "description": (
                            "Request headers, e.g. X-Forwarded-For, X-Real-Ip, X-Client-Ip. "
                            "Values may be strings or lists of strings"
                        ),
                        "additionalProperties": {
                            "anyOf": [
                                {"type": "string"},
                                {"type": "array", "items": {"type": "string"}},
                            ]
                        },
                    },
                    "remote_addr": {
                        "type": "string",
                        "description": "Connection peer address in host:port or bare host form",
                        "default": "",
                    },
                    "mode": {
                        "type": "string",
                        "description": (
                            "strict validates every source; simple keeps the legacy fallback "
                            "to an unvalidated X-Real-Ip"
                        ),
                        "enum": [mode.value for mode in ResolutionMode],
                        "default": self.settings.default_resolution_mode.value,
                    },
                },
                "required": ["headers"],
            },
        )

    async def execute(self, arguments: Dict[str, Any]) -> CallToolResult:
        """Execute the resolve_client_ip tool."""
        try:
            request = ResolveRequest.model_validate(arguments)
            mode = request.mode or self.settings.default_resolution_mode

            if mode is ResolutionMode.SIMPLE:
                address = simple_client_ip(request.headers, request.remote_addr)
                source = None
                found = bool(address)
            else:
                resolved = resolve_client_ip(request.headers, request.remote_addr)
                address, source = resolved.as_tuple()
                found = resolved.found

            result = {
                "client_ip": address,
                "source": source,
                "mode": mode.value,
                "found": found,
            }

            summary_lines = [f"Mode: {mode.value}"]
            if found:
                summary_lines.append(f"Client IP: {address}")
                if source:
                    summary_lines.append(f"Source: {source}")
            else:
                summary_lines.append("No public client IP address found")

            summary = "\n".join(summary_lines)

            return CallToolResult(
                content=[
                    TextContent(
                        type="text",
                        text=f"{summary}\n\nDetailed data:\n{json.dumps(result, indent=2)}"
                    )
                ]
            )

        except ValidationError as e:
            logger.error(f"Validation error in resolve_client_ip: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Validation Error: {e}")],
                isError=True,
            )
        except Exception as e:
            logger.error(f"Unexpected error in resolve_client_ip: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Unexpected Error: {e}")],
                isError=True,
            )
