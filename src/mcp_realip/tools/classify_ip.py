"""Tool for classifying a single address as public or private."""

import json
import logging
from typing import Any, Dict

from mcp.types import Tool, TextContent, CallToolResult
from pydantic import ValidationError

from ..settings import Settings
from ..models import AddressClassification, AddressParseError, ClassifyRequest
from ..utils.ip_utils import extract_host, parse_ip, private_network_for

logger = logging.getLogger(__name__)


class ClassifyIPTool:
    """Tool for checking whether an address is private, public or invalid."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def get_tool_definition(self) -> Tool:
        """Get the tool definition for MCP."""
        return Tool(
            name="classify_ip",
            description="Classify an IP address (optionally with a port) as public, private or invalid",
            inputSchema={
                "type": "object",
                "properties": {
                    "address": {
                        "type": "string",
                        "description": "Address to classify, e.g. 10.0.0.1, 8.8.8.8:443 or [::1]:8080",
                    },
                },
                "required": ["address"],
            },
        )

    def classify(self, candidate: str) -> AddressClassification:
        """Strip the port from *candidate* and classify the remaining host."""
        host = extract_host(candidate)
        try:
            ip = parse_ip(host)
        except AddressParseError as e:
            return AddressClassification(
                candidate=candidate,
                host=host,
                valid=False,
                error=str(e),
            )

        network = private_network_for(ip)
        return AddressClassification(
            candidate=candidate,
            host=str(ip),
            valid=True,
            private=network is not None,
            network=str(network) if network is not None else None,
        )

    async def execute(self, arguments: Dict[str, Any]) -> CallToolResult:
        """Execute the classify_ip tool."""
        try:
            request = ClassifyRequest.model_validate(arguments)
            classification = self.classify(request.address)

            if not classification.valid:
                verdict = "invalid"
            elif classification.is_public:
                verdict = "public"
            else:
                verdict = f"private ({classification.network})"

            summary = f"Address: {request.address}\nHost: {classification.host or '-'}\nClassification: {verdict}"
            payload = json.dumps(classification.model_dump(), indent=2)

            return CallToolResult(
                content=[
                    TextContent(
                        type="text",
                        text=f"{summary}\n\nDetailed data:\n{payload}"
                    )
                ]
            )

        except ValidationError as e:
            logger.error(f"Validation error in classify_ip: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Validation Error: {e}")],
                isError=True,
            )
        except Exception as e:
            logger.error(f"Unexpected error in classify_ip: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Unexpected Error: {e}")],
                isError=True,
            )
