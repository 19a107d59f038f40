"""Per-tool-call context for log correlation.

Each tool call runs inside ``request_context`` so that every log record
emitted while serving it carries the same correlation ID and the ID of the
session that issued it.

Usage:
    from todoist_mcp.core.context import request_context

    with request_context(client_id=session_id) as ctx:
        logger.info("Dispatching %s", ctx.correlation_id)
"""

from __future__ import annotations

import secrets
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator, Optional

ANONYMOUS = "anonymous"

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_client_id: ContextVar[str] = ContextVar("client_id", default=ANONYMOUS)
# 0.0 outside a tool call
_started_at: ContextVar[float] = ContextVar("started_at", default=0.0)


def generate_correlation_id() -> str:
    """Return a fresh ID such as ``req_a1b2c3d4e5f6``."""
    return f"req_{secrets.token_hex(6)}"


@dataclass(frozen=True)
class RequestContext:
    correlation_id: str
    client_id: str
    started_at: float


@contextmanager
def request_context(
    *,
    correlation_id: Optional[str] = None,
    client_id: Optional[str] = None,
) -> Iterator[RequestContext]:
    """Bind the context variables for the duration of the with block.

    Context variables are task-local under asyncio, so concurrent tool calls
    on different sessions never observe each other's IDs.
    """
    ctx = RequestContext(
        correlation_id=correlation_id or generate_correlation_id(),
        client_id=client_id or ANONYMOUS,
        started_at=time.time(),
    )
    tokens = (
        _correlation_id.set(ctx.correlation_id),
        _client_id.set(ctx.client_id),
        _started_at.set(ctx.started_at),
    )
    try:
        yield ctx
    finally:
        _correlation_id.reset(tokens[0])
        _client_id.reset(tokens[1])
        _started_at.reset(tokens[2])


def get_correlation_id() -> str:
    """Current correlation ID (empty string outside a tool call)."""
    return _correlation_id.get()


def get_client_id() -> str:
    return _client_id.get()


def get_started_at() -> float:
    return _started_at.get()
