"""
MCP client helpers and the transport probe.

`people-mcp-probe` calls one tool over both transports (spawning the stdio
server as a subprocess and posting to a running HTTP server) and reports
whether the two envelopes match. Prefer read-only tools: a create or
delete run twice will legitimately differ on the second transport.

Usage:
    people-mcp-probe list_people --args '{"query": "jo"}'
    people-mcp-probe get_person --args '{"id": "missing"}' --url http://localhost:8000/mcp
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, Optional, Tuple

import anyio
from fastmcp import Client
from fastmcp.client.transports import StdioTransport

from people_mcp.config import settings

logger = logging.getLogger(__name__)


def make_client(mcp_url: str, api_key: Optional[str] = None) -> Client:
    """
    Create a FastMCP client for the HTTP transport.

    Args:
        mcp_url: Full URL of the MCP endpoint (e.g. http://localhost:8000/mcp).
        api_key: Bearer token, if the server requires one.
    """
    return Client(mcp_url, auth=api_key or None)


def make_stdio_client() -> Client:
    """Create a FastMCP client that spawns the stdio server in a subprocess."""
    transport = StdioTransport(
        command=sys.executable,
        args=["-m", "people_mcp.stdio_server"],
        # The server needs the same database settings as this process
        env=dict(os.environ),
    )
    return Client(transport)


async def call_envelope(client: Client, name: str, arguments: Dict[str, Any]) -> Tuple[bool, str]:
    """
    Call a tool and return (isError, envelope text) without raising on
    tool failures.
    """
    async with client:
        result = await client.call_tool_mcp(name, arguments)
    text = "".join(
        block.text for block in result.content if getattr(block, "type", None) == "text"
    )
    return bool(result.isError), text


def _parse(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return text


async def compare_transports(
    name: str,
    arguments: Dict[str, Any],
    http_client: Client,
    stdio_client: Client,
) -> Dict[str, Any]:
    """
    Run the same call over HTTP and stdio and compare the results.

    Returns:
        dict: {"tool", "match", "http", "stdio"} where each side holds the
              isError flag and the decoded envelope.
    """
    http_error, http_text = await call_envelope(http_client, name, arguments)
    stdio_error, stdio_text = await call_envelope(stdio_client, name, arguments)
    return {
        "tool": name,
        "match": http_error == stdio_error and http_text == stdio_text,
        "http": {"isError": http_error, "envelope": _parse(http_text)},
        "stdio": {"isError": stdio_error, "envelope": _parse(stdio_text)},
    }


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL, stream=sys.stderr)

    parser = argparse.ArgumentParser(
        description="Call one tool over stdio and HTTP and compare the envelopes"
    )
    parser.add_argument("tool", help="Tool name, e.g. list_people")
    parser.add_argument("--args", default="{}", help="Tool arguments as a JSON object")
    parser.add_argument(
        "--url",
        default=f"http://127.0.0.1:{settings.HTTP_PORT}{settings.MCP_PATH}",
        help="URL of the running HTTP transport",
    )
    parser.add_argument("--api-key", default=settings.MCP_API_KEY, help="API key for the HTTP transport")
    args = parser.parse_args()

    try:
        arguments = json.loads(args.args)
    except ValueError as e:
        parser.error(f"--args is not valid JSON: {e}")
    if not isinstance(arguments, dict):
        parser.error("--args must be a JSON object")

    report = anyio.run(
        compare_transports,
        args.tool,
        arguments,
        make_client(args.url, args.api_key),
        make_stdio_client(),
    )
    print(json.dumps(report, indent=2))
    if not report["match"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
