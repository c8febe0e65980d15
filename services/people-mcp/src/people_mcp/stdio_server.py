"""
Entry point for the stdio transport.

Runs the people MCP server over stdin/stdout for a desktop agent process.
Logs go to stderr because stdout carries the protocol stream.

On SIGINT or SIGTERM the serve loop is cancelled and the database pool is
closed before the process exits.
"""

import logging
import signal
import sys
from typing import Optional

import anyio
from mcp.server.stdio import stdio_server

from people_mcp.config import Settings, settings as default_settings
from people_mcp.db import open_pool
from people_mcp.dispatcher import PeopleDispatcher
from people_mcp.mcp_app import build_server
from people_mcp.store import PersonStore, PostgresPersonStore

logger = logging.getLogger(__name__)


async def _cancel_on_signal(scope: anyio.CancelScope) -> None:
    with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
        async for signum in signals:
            logger.info(f"Received signal {signum}, shutting down")
            scope.cancel()
            return


async def serve_stdio(
    settings: Settings = default_settings,
    store: Optional[PersonStore] = None,
) -> None:
    """
    Serve the tool catalog over stdio until the channel closes or a
    shutdown signal arrives.

    Args:
        settings: Application settings.
        store:    Record store to use. When omitted, a PostgreSQL store is
                  created on a pool that lives as long as the server.
    """
    async with anyio.create_task_group() as tg:
        if store is None:
            async with open_pool(settings) as pool:
                await _serve(tg, settings, PostgresPersonStore(pool))
        else:
            await _serve(tg, settings, store)
        tg.cancel_scope.cancel()


async def _serve(tg, settings: Settings, store: PersonStore) -> None:
    server = build_server(
        PeopleDispatcher(store),
        name=settings.SERVER_NAME,
        version=settings.SERVER_VERSION,
    )
    tg.start_soon(_cancel_on_signal, tg.cancel_scope)

    logger.info(f"{settings.SERVER_NAME} running on stdio")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
    logger.info("stdio channel closed")


def main() -> None:
    """Configure logging on stderr and run the stdio server."""
    logging.basicConfig(level=default_settings.LOG_LEVEL, stream=sys.stderr)
    try:
        anyio.run(serve_stdio)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
