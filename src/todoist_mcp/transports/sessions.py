"""Session registry for the streamable HTTP transport.

Each client session owns one MCP server and one
``StreamableHTTPServerTransport``. The server runs as a task in the
registry's task group for as long as the transport stays open. A session is
registered only once its transport has answered the initialization request
with a session ID, and unregistered when the transport closes or the client
terminates the session.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, Optional

import anyio
from anyio.abc import TaskGroup, TaskStatus
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import (
    MCP_SESSION_ID_HEADER,
    StreamableHTTPServerTransport,
)
from starlette.types import Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

ServerFactory = Callable[[str], Server]


def _confirms_session(message: Message, session_id: str) -> bool:
    """True for a successful response start that hands out ``session_id``."""
    if message["type"] != "http.response.start" or message["status"] >= 400:
        return False
    expected = (MCP_SESSION_ID_HEADER.encode("latin-1"), session_id.encode("latin-1"))
    return any(
        (name.lower(), value) == expected for name, value in message.get("headers", [])
    )


class SessionRegistry:
    """Maps session IDs to live transports.

    Only touched from the event loop thread, so no locking is needed.
    Use ``run()`` as an async context manager around the application's
    lifetime; sessions can only be opened while it is active.
    """

    def __init__(self, server_factory: ServerFactory, *, json_response: bool = False):
        """
        Args:
            server_factory: Builds a fresh MCP server for a new session ID
            json_response: Answer POSTs with JSON bodies instead of SSE streams
        """
        self._server_factory = server_factory
        self._json_response = json_response
        self._transports: Dict[str, StreamableHTTPServerTransport] = {}
        self._task_group: Optional[TaskGroup] = None

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._transports

    def __len__(self) -> int:
        return len(self._transports)

    def get(self, session_id: Optional[str]) -> Optional[StreamableHTTPServerTransport]:
        """Transport of a registered session, or None."""
        if session_id is None:
            return None
        return self._transports.get(session_id)

    def remove(self, session_id: str) -> bool:
        """Unregister a session. Returns False if it was not registered."""
        if self._transports.pop(session_id, None) is None:
            return False
        logger.info("Session closed: %s", session_id)
        return True

    @asynccontextmanager
    async def run(self) -> AsyncIterator["SessionRegistry"]:
        """Keep session servers running for the duration of the block."""
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            try:
                yield self
            finally:
                tg.cancel_scope.cancel()
                self._task_group = None
                self._transports.clear()

    async def open_session(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Start a new server/transport pair and hand it the request.

        The pair is registered when the transport's response carries the new
        session ID. If the request completes without that, the transport is
        terminated and the session is discarded.
        """
        if self._task_group is None:
            raise RuntimeError("Session registry is not running")

        session_id = str(uuid.uuid4())
        transport = StreamableHTTPServerTransport(
            mcp_session_id=session_id,
            is_json_response_enabled=self._json_response,
        )
        server = self._server_factory(session_id)

        async def run_server(*, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
            async with transport.connect() as (read_stream, write_stream):
                task_status.started()
                try:
                    await server.run(
                        read_stream,
                        write_stream,
                        server.create_initialization_options(),
                        stateless=False,
                    )
                except Exception:
                    logger.exception("Session %s failed", session_id)
                finally:
                    if self._transports.get(session_id) is transport:
                        self.remove(session_id)

        await self._task_group.start(run_server)

        registered = False

        async def send_and_register(message: Message) -> None:
            nonlocal registered
            if not registered and _confirms_session(message, session_id):
                self._transports[session_id] = transport
                registered = True
                logger.info("New session initialized: %s", session_id)
            await send(message)

        try:
            await transport.handle_request(scope, receive, send_and_register)
        finally:
            if not registered:
                await transport.terminate()
