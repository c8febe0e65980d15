"""
MCP application builder.

Builds the low-level MCP `Server` that both transports (stdio and
streamable HTTP) run. The server only translates protocol framing:
  - tools/list returns the tool catalog,
  - tools/call hands the call to the dispatcher and returns the envelope
    as a single text content block, flagged `isError` when the envelope
    reports a failure.

Because both transports share this builder and the same dispatcher, the
envelope text for a given call is identical whichever way it arrives.
"""

import logging
from typing import Any, List, Optional

import anyio
from mcp import types
from mcp.server.lowlevel import Server

from people_mcp.catalog import PEOPLE_CATALOG, ToolCatalog
from people_mcp.dispatcher import PeopleDispatcher
from people_mcp.models import Envelope

logger = logging.getLogger(__name__)


def to_call_result(envelope: Envelope) -> types.CallToolResult:
    """Wrap an envelope as a tool result, flagged `isError` on failure."""
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=envelope.to_json())],
        isError=not envelope.success,
    )


def timeout_envelope(max_duration: float) -> Envelope:
    return Envelope.failure(f"Tool call timed out after {max_duration:g}s")


def build_server(
    dispatcher: PeopleDispatcher,
    catalog: ToolCatalog = PEOPLE_CATALOG,
    name: str = "person-crud-server",
    version: str = "1.0.0",
    max_duration: Optional[float] = None,
) -> Server:
    """
    Create an MCP server exposing the catalog through the dispatcher.

    Args:
        dispatcher:   Dispatcher that runs each tool call.
        catalog:      Catalog advertised on tools/list.
        name:         Server name reported during initialization.
        version:      Server version reported during initialization.
        max_duration: Optional per-call limit in seconds. When the limit
                      expires the store call is cancelled and a timeout
                      envelope is returned instead.

    Returns:
        Server: The configured low-level MCP server.
    """
    server: Server = Server(name, version=version)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [
            types.Tool(
                name=tool.name,
                description=tool.description,
                inputSchema=tool.input_schema(),
            )
            for tool in catalog.list_tools()
        ]

    # The catalog validator owns argument checking and its messages
    @server.call_tool(validate_input=False)
    async def call_tool(tool_name: str, arguments: Any) -> types.CallToolResult:
        envelope: Optional[Envelope] = None
        if max_duration is None:
            envelope = await dispatcher.dispatch(tool_name, arguments)
        else:
            with anyio.move_on_after(max_duration) as scope:
                envelope = await dispatcher.dispatch(tool_name, arguments)
            if scope.cancelled_caught or envelope is None:
                logger.warning(f"Tool {tool_name} timed out after {max_duration:g}s")
                envelope = timeout_envelope(max_duration)

        return to_call_result(envelope)

    return server
