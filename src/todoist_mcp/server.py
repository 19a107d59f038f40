"""MCP server for todoist-mcp.

Builds a low-level MCP server exposing the five Todoist task tools and runs
it over either stdio (one client, embedded by the host) or streamable HTTP
(many sessions, see ``todoist_mcp.transports.http``).
"""

from __future__ import annotations

import logging
import sys
from typing import List, Optional

import anyio
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, Tool

from todoist_mcp.config import ServerConfig, get_config
from todoist_mcp.core.client import TodoistClient
from todoist_mcp.core.errors import ConfigurationError
from todoist_mcp.tools import TOOLS, TaskToolDispatcher

logger = logging.getLogger(__name__)


def create_server(
    dispatcher: TaskToolDispatcher,
    config: Optional[ServerConfig] = None,
    *,
    client_id: Optional[str] = None,
) -> Server:
    """Create an MCP server instance bound to ``dispatcher``.

    Args:
        dispatcher: Executes tool calls
        config: Server configuration (defaults to the global config)
        client_id: Identifier attached to log records of this server's calls

    Returns:
        Configured low-level MCP server
    """
    if config is None:
        config = get_config()

    server: Server = Server(config.server_name, version=config.server_version)

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        return list(TOOLS)

    # Argument checking belongs to the dispatcher, not to JSON schema validation.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict) -> CallToolResult:
        return await dispatcher.dispatch(name, arguments, client_id=client_id)

    return server


def create_client(config: ServerConfig) -> TodoistClient:
    return TodoistClient(
        config.todoist.api_token,
        timeout=config.todoist.timeout,
    )


async def run_stdio_server(config: ServerConfig) -> None:
    """Serve a single client over stdin/stdout until the pipe closes."""
    async with create_client(config) as client:
        server = create_server(TaskToolDispatcher(client), config, client_id="stdio")
        async with stdio_server() as (read_stream, write_stream):
            logger.info("Todoist MCP Server running on stdio")
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )


def run(config: ServerConfig) -> None:
    """Validate configuration and start the configured transport."""
    config.setup_logging()
    config.validate()

    logger.info("Starting Todoist MCP Server v%s", config.server_version)
    logger.info("Transport mode: %s", config.transport)

    if config.transport == "http":
        from todoist_mcp.transports.http import run_http_server

        run_http_server(config)
    else:
        anyio.run(run_stdio_server, config)


def main(config: Optional[ServerConfig] = None) -> None:
    """Main entry point for the todoist-mcp server."""

    try:
        run(config or get_config())
    except ConfigurationError as exc:
        logger.error("Error: %s", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
        sys.exit(0)
    except Exception as exc:
        logger.error("Fatal error running server: %s: %s", type(exc).__name__, exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
