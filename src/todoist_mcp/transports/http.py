"""Streamable HTTP transport for todoist-mcp.

Routes:
    GET  /health  liveness probe, never authenticated
    POST /mcp     client -> server messages; opens a session when no known
                  ``mcp-session-id`` header is sent
    GET  /mcp     server -> client SSE stream of an existing session
    DELETE /mcp   terminate an existing session
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

import uvicorn
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import (
    MCP_SESSION_ID_HEADER,
    StreamableHTTPServerTransport,
)
from starlette.applications import Starlette
from starlette.datastructures import Headers
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.types import Message, Receive, Scope, Send

from todoist_mcp.config import ServerConfig
from todoist_mcp.core.client import TodoistClient
from todoist_mcp.server import create_client, create_server
from todoist_mcp.tools import TaskToolDispatcher
from todoist_mcp.transports.auth import BearerAuthMiddleware
from todoist_mcp.transports.sessions import SessionRegistry

logger = logging.getLogger(__name__)

SERVICE_NAME = "Todoist MCP Server"
MCP_PATH = "/mcp"
HEALTH_PATH = "/health"

_UVICORN_LOG_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}


class McpEndpoint:
    """ASGI app serving the MCP endpoint on top of a ``SessionRegistry``."""

    def __init__(self, registry: SessionRegistry):
        self.registry = registry

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        method = scope["method"]
        session_id = Headers(scope=scope).get(MCP_SESSION_ID_HEADER)
        transport = self.registry.get(session_id)

        if method == "POST":
            await self._handle_post(transport, scope, receive, send)
        elif method in ("GET", "DELETE"):
            if transport is None:
                response: Response = JSONResponse(
                    {"error": "Invalid or missing session ID"}, status_code=400
                )
                await response(scope, receive, send)
                return
            await transport.handle_request(scope, receive, send)
            if method == "DELETE":
                self.registry.remove(session_id)
        else:
            response = JSONResponse(
                {"error": "Method not allowed"},
                status_code=405,
                headers={"Allow": "GET, POST, DELETE"},
            )
            await response(scope, receive, send)

    async def _handle_post(
        self,
        transport: Optional[StreamableHTTPServerTransport],
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            if transport is not None:
                await transport.handle_request(scope, receive, tracking_send)
            else:
                await self.registry.open_session(scope, receive, tracking_send)
        except Exception:
            logger.exception("Error handling MCP request")
            if not response_started:
                response = JSONResponse({"error": "Internal server error"}, status_code=500)
                await response(scope, receive, send)


def create_app(config: ServerConfig, client: TodoistClient) -> Starlette:
    """Build the Starlette application for networked mode.

    The application owns the session registry (exposed as
    ``app.state.session_registry``) and closes ``client`` on shutdown.
    """
    dispatcher = TaskToolDispatcher(client)

    def server_factory(session_id: str) -> Server:
        return create_server(dispatcher, config, client_id=session_id)

    registry = SessionRegistry(server_factory, json_response=config.http.json_response)

    async def health(request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "status": "healthy",
                "service": SERVICE_NAME,
                "version": config.server_version,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "transport": "http",
                "auth_enabled": config.http.auth_enabled,
            }
        )

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        try:
            async with registry.run():
                yield
        finally:
            await client.aclose()

    app = Starlette(
        routes=[
            Route(HEALTH_PATH, health, methods=["GET"]),
            Route(MCP_PATH, endpoint=McpEndpoint(registry)),
        ],
        middleware=[
            Middleware(
                BearerAuthMiddleware,
                http_config=config.http,
                exempt_paths=(HEALTH_PATH,),
            )
        ],
        lifespan=lifespan,
    )
    app.state.session_registry = registry
    return app


def run_http_server(config: ServerConfig) -> None:
    """Serve the MCP endpoint over HTTP until interrupted."""
    app = create_app(config, create_client(config))
    host, port = config.http.host, config.http.port

    logger.info("Todoist MCP Server running on http://%s:%s", host, port)
    logger.info("Health check: http://%s:%s%s", host, port, HEALTH_PATH)
    logger.info("MCP endpoint: http://%s:%s%s", host, port, MCP_PATH)
    logger.info("Auth enabled: %s", config.http.auth_enabled)

    log_level = config.log_level.lower()
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=log_level if log_level in _UVICORN_LOG_LEVELS else "info",
    )
