"""
Entry point for the HTTP transport.

Serves the people MCP server over streamable HTTP with Uvicorn. The
endpoint is stateless: every request is handled by a fresh protocol
session, so each call is a catalog advertisement plus a single dispatch.
GET, POST and DELETE on the MCP path are all handed to the MCP session
manager rather than mapped to REST verbs.

The Starlette app:
  1. Opens the database pool in its lifespan and closes it on shutdown.
  2. Enforces a maximum duration per tool call.
  3. Wraps everything in the API-key middleware; /health stays public.
"""

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Optional

import uvicorn
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.responses import JSONResponse
from starlette.routing import Route

from people_mcp.auth_middleware import ApiKeyMiddleware
from people_mcp.config import Settings, settings as default_settings
from people_mcp.db import open_pool
from people_mcp.dispatcher import PeopleDispatcher
from people_mcp.mcp_app import build_server
from people_mcp.store import PersonStore, PostgresPersonStore

logger = logging.getLogger(__name__)


class _McpEndpoint:
    """ASGI endpoint forwarding to the session manager started in the lifespan."""

    def __init__(self):
        self.session_manager: Optional[StreamableHTTPSessionManager] = None

    async def __call__(self, scope, receive, send):
        if self.session_manager is None:
            response = JSONResponse(
                {"error": "MCP session manager not initialized"}, status_code=503
            )
            await response(scope, receive, send)
            return
        await self.session_manager.handle_request(scope, receive, send)


def create_app(
    settings: Settings = default_settings,
    store: Optional[PersonStore] = None,
) -> Starlette:
    """
    Build the ASGI application.

    Args:
        settings: Application settings.
        store:    Record store to use. When omitted, a PostgreSQL store is
                  created on a pool opened for the app's lifetime.

    Returns:
        Starlette: The application, ready for Uvicorn.
    """
    endpoint = _McpEndpoint()

    @asynccontextmanager
    async def lifespan(app: Starlette):
        async with AsyncExitStack() as stack:
            record_store = store
            if record_store is None:
                pool = await stack.enter_async_context(open_pool(settings))
                record_store = PostgresPersonStore(pool)

            server = build_server(
                PeopleDispatcher(record_store),
                name=settings.SERVER_NAME,
                version=settings.SERVER_VERSION,
                max_duration=settings.MAX_DURATION,
            )
            session_manager = StreamableHTTPSessionManager(
                app=server,
                json_response=True,
                stateless=True,
            )
            async with session_manager.run():
                endpoint.session_manager = session_manager
                logger.info(f"MCP endpoint ready at {settings.MCP_PATH}")
                try:
                    yield
                finally:
                    endpoint.session_manager = None

    async def health(request):
        """Simple health-check endpoint."""
        return JSONResponse({"ok": True, "service": settings.SERVER_NAME})

    return Starlette(
        routes=[
            Route("/health", health, methods=["GET"]),
            Route(settings.MCP_PATH, endpoint, methods=["GET", "POST", "DELETE"]),
        ],
        middleware=[
            Middleware(ApiKeyMiddleware, api_key=settings.MCP_API_KEY),
        ],
        lifespan=lifespan,
    )


def main() -> None:
    """
    Build the ASGI application and start the Uvicorn server on the
    configured host and port.
    """
    logging.basicConfig(level=default_settings.LOG_LEVEL)
    if not default_settings.MCP_API_KEY:
        logger.warning("MCP_API_KEY is not set; the HTTP endpoint accepts all requests")

    uvicorn.run(
        create_app(default_settings),
        host=default_settings.HTTP_HOST,
        port=default_settings.HTTP_PORT,
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
