"""
people-mcp: a person directory exposed to AI agents as MCP tools.

The same dispatcher serves two transports: stdio for desktop agents and
stateless streamable HTTP for remote ones.
"""

__version__ = "1.0.0"
