"""
API-key authentication for the HTTP transport.

The MCP endpoint trusts its caller to be already authorized; this
middleware is the optional guard in front of it. When an API key is
configured, requests must present it either as
'Authorization: Bearer <key>' or as an 'x-api-key' header.
"""

import secrets
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """
    Starlette middleware that enforces API-key authentication.

    Args:
        app:          The wrapped ASGI app.
        api_key:      Expected key. Empty disables the check.
        public_paths: Paths served without a key (e.g. health checks).
    """

    def __init__(self, app, api_key: str = "", public_paths: Iterable[str] = ("/health",)):
        super().__init__(app)
        self.api_key = (api_key or "").strip()
        self.public_paths = frozenset(public_paths)

    def _presented_key(self, request) -> Optional[str]:
        auth = request.headers.get("authorization", "")
        prefix = "Bearer "
        if auth.startswith(prefix):
            return auth[len(prefix):].strip()
        return request.headers.get("x-api-key")

    def is_authorized(self, request) -> bool:
        if not self.api_key:
            return True
        token = self._presented_key(request)
        return bool(token) and secrets.compare_digest(token, self.api_key)

    async def dispatch(self, request, call_next):
        """
        Intercept every incoming HTTP request and verify authentication.

        Args:
            request: The incoming HTTP request.
            call_next: Callable that forwards the request to the next handler.

        Returns:
            The response from the next handler, or a 401 JSON error.
        """
        if request.url.path in self.public_paths or self.is_authorized(request):
            return await call_next(request)

        # Reject with a JSON-RPC-style error so MCP clients
        # can parse the failure programmatically.
        return JSONResponse(
            {"jsonrpc": "2.0", "id": None,
             "error": {"code": -32001, "message": "Unauthorized"}},
            status_code=401,
        )
