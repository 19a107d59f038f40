"""todoist-mcp command line entry point.

Flags override the configuration loaded from the environment and TOML file.
"""

from typing import Optional

import click

from todoist_mcp import __version__
from todoist_mcp.config import VALID_TRANSPORTS, ServerConfig, set_config
from todoist_mcp.server import main as run_server


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--transport",
    type=click.Choice(VALID_TRANSPORTS, case_sensitive=False),
    help="Transport to serve on (default: TRANSPORT_MODE or stdio)",
)
@click.option("--host", help="Interface to bind in http mode (default: HOST or 0.0.0.0)")
@click.option("--port", type=int, help="Port to listen on in http mode (default: PORT or 8000)")
@click.option(
    "--config",
    "config_file",
    envvar="TODOIST_MCP_CONFIG_FILE",
    type=click.Path(dir_okay=False),
    help="Path to a TOML config file",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override log level",
)
@click.option(
    "--json-response/--sse",
    default=None,
    help="Answer HTTP POSTs with JSON bodies instead of SSE streams",
)
@click.version_option(__version__, prog_name="todoist-mcp")
def main(
    transport: Optional[str],
    host: Optional[str],
    port: Optional[int],
    config_file: Optional[str],
    log_level: Optional[str],
    json_response: Optional[bool],
) -> None:
    """Todoist MCP server - manage Todoist tasks from an AI assistant.

    Requires TODOIST_API_TOKEN in the environment (or [todoist] api_token
    in the config file).
    """
    config = ServerConfig.from_env(config_file)

    if transport:
        config.transport = transport.lower()
    if host:
        config.http.host = host
    if port is not None:
        config.http.port = port
    if log_level:
        config.log_level = log_level.upper()
    if json_response is not None:
        config.http.json_response = json_response

    set_config(config)
    run_server(config)


if __name__ == "__main__":
    main()
