"""Bearer token authentication for the HTTP transport."""

from __future__ import annotations

import logging
from typing import Iterable

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from todoist_mcp.config import HttpConfig

logger = logging.getLogger(__name__)

_auth_disabled_warned = False


def _warn_auth_disabled() -> None:
    global _auth_disabled_warned
    if _auth_disabled_warned:
        return
    _auth_disabled_warned = True
    logger.warning("Warning: MCP_AUTH_TOKEN not set, authentication disabled")


class BearerAuthMiddleware:
    """ASGI middleware rejecting requests without the shared bearer token.

    Requests to ``exempt_paths`` always pass. When no token is configured
    every request passes and a warning is logged once per process.
    """

    def __init__(
        self,
        app: ASGIApp,
        http_config: HttpConfig,
        exempt_paths: Iterable[str] = ("/health",),
    ):
        self.app = app
        self.http_config = http_config
        self.exempt_paths = frozenset(exempt_paths)
        if not http_config.auth_enabled:
            _warn_auth_disabled()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (
            scope["type"] != "http"
            or not self.http_config.auth_enabled
            or scope["path"] in self.exempt_paths
        ):
            await self.app(scope, receive, send)
            return

        authorization = Headers(scope=scope).get("authorization")
        if not authorization or not authorization.startswith("Bearer "):
            error = "Unauthorized: Missing Bearer token"
        elif not self.http_config.validate_auth_token(authorization[len("Bearer ") :]):
            error = "Unauthorized: Invalid token"
        else:
            await self.app(scope, receive, send)
            return

        logger.info("Rejected %s %s: %s", scope["method"], scope["path"], error)
        response = JSONResponse(
            {"error": error},
            status_code=401,
            headers={"WWW-Authenticate": "Bearer"},
        )
        await response(scope, receive, send)
