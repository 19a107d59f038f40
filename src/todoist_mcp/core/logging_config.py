"""Logging setup for todoist-mcp.

All output goes to stderr: in stdio mode stdout carries the MCP protocol
stream and must never receive log lines.

Usage:
    from todoist_mcp.core.logging_config import configure_logging

    configure_logging(level="DEBUG", format="structured")
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO, Union

from todoist_mcp.core.context import get_client_id, get_correlation_id, get_started_at

ROOT_LOGGER_NAME = "todoist_mcp"

# LogRecord attributes that are not caller-supplied ``extra`` fields
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "taskName", "correlation_id", "client_id", "elapsed_ms"}


class ContextFilter(logging.Filter):
    """Stamp records with the current tool call's correlation and client IDs."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        record.client_id = get_client_id()
        started_at = get_started_at()
        record.elapsed_ms = (
            round((time.time() - started_at) * 1000, 2) if started_at else 0.0
        )
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per line.

    Example:
        {"timestamp": "2026-10-19T10:30:45.123+00:00", "level": "INFO",
         "logger": "todoist_mcp.tools.dispatcher", "message": "Deleted task 42",
         "correlation_id": "req_a1b2c3d4e5f6", "client_id": "3f2a...",
         "elapsed_ms": 42.5}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", "-"),
            "client_id": getattr(record, "client_id", "anonymous"),
            "elapsed_ms": getattr(record, "elapsed_ms", 0.0),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """``2026-10-19 10:30:45 [INFO] [req_a1b2c3] tools.dispatcher: Deleted task 42``"""

    def format(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith(ROOT_LOGGER_NAME + "."):
            name = name[len(ROOT_LOGGER_NAME) + 1 :]

        parts = [
            datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname}]",
        ]
        correlation_id = getattr(record, "correlation_id", "-")
        if correlation_id != "-":
            parts.append(f"[{correlation_id}]")
        parts.append(f"{name}: {record.getMessage()}")

        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    *,
    level: Union[int, str] = logging.INFO,
    format: str = "human",
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Send the ``todoist_mcp`` logger tree to ``stream`` (default stderr).

    Args:
        level: Log level
        format: "structured" for JSON lines, anything else for plain text
        stream: Output stream

    Returns:
        The configured ``todoist_mcp`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        StructuredFormatter() if format == "structured" else HumanReadableFormatter()
    )
    handler.addFilter(ContextFilter())
    logger.addHandler(handler)
    return logger
