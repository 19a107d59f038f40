"""Tests for request context propagation and log formatting."""

import io
import json
import logging

import pytest

from todoist_mcp.core.context import (
    get_client_id,
    get_correlation_id,
    request_context,
)
from todoist_mcp.core.logging_config import configure_logging


@pytest.fixture
def log_stream():
    stream = io.StringIO()
    yield stream
    logging.getLogger("todoist_mcp").handlers.clear()


class TestRequestContext:
    def test_sets_and_restores(self):
        assert get_correlation_id() == ""

        with request_context(client_id="session-1") as ctx:
            assert ctx.correlation_id.startswith("req_")
            assert get_correlation_id() == ctx.correlation_id
            assert get_client_id() == "session-1"

        assert get_correlation_id() == ""
        assert get_client_id() == "anonymous"

    def test_explicit_correlation_id(self):
        with request_context(correlation_id="req_fixed") as ctx:
            assert ctx.correlation_id == "req_fixed"
            assert ctx.client_id == "anonymous"


class TestConfigureLogging:
    def test_structured_output_carries_context(self, log_stream):
        configure_logging(level="INFO", format="structured", stream=log_stream)
        logger = logging.getLogger("todoist_mcp.tools.dispatcher")

        with request_context(correlation_id="req_abc", client_id="session-1"):
            logger.info("Deleted task %s", "42", extra={"tool": "todoist_delete_task"})

        entry = json.loads(log_stream.getvalue())
        assert entry["message"] == "Deleted task 42"
        assert entry["level"] == "INFO"
        assert entry["correlation_id"] == "req_abc"
        assert entry["client_id"] == "session-1"
        assert entry["extra"] == {"tool": "todoist_delete_task"}

    def test_human_output(self, log_stream):
        configure_logging(level="INFO", format="human", stream=log_stream)

        with request_context(correlation_id="req_abc"):
            logging.getLogger("todoist_mcp.server").info("Starting")

        line = log_stream.getvalue().strip()
        assert line.endswith("[INFO] [req_abc] server: Starting")

    def test_level_filters(self, log_stream):
        configure_logging(level=logging.WARNING, stream=log_stream)

        logging.getLogger("todoist_mcp.server").info("quiet")

        assert log_stream.getvalue() == ""
