"""
Server configuration for todoist-mcp.

Supports configuration via:
1. Environment variables (highest priority)
2. TOML config file (todoist-mcp.toml)
3. Default values (lowest priority)

Environment variables:
- TODOIST_API_TOKEN: Todoist API token (required)
- TODOIST_API_TIMEOUT: Timeout in seconds for Todoist API requests
- TRANSPORT_MODE: "stdio" (default) or "http"
- HOST / PORT: Listen address for the HTTP transport (default 0.0.0.0:8000)
- MCP_AUTH_TOKEN: Shared bearer token for the HTTP transport (optional)
- MCP_JSON_RESPONSE: Answer POST requests with JSON instead of SSE (true/false)
- TODOIST_MCP_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
- TODOIST_MCP_STRUCTURED_LOGGING: Emit JSON log lines (true/false)
- TODOIST_MCP_CONFIG_FILE: Path to TOML config file
"""

import hmac
import logging
import os
from dataclasses import dataclass, field
from importlib.metadata import version as get_package_version, PackageNotFoundError
from pathlib import Path
from typing import Optional, Dict, Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from todoist_mcp.core.errors import ConfigurationError


logger = logging.getLogger(__name__)

VALID_TRANSPORTS = ("stdio", "http")


def _get_version() -> str:
    """Get package version from metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("todoist-mcp")
    except PackageNotFoundError:
        return "0.2.0"  # Fallback for dev without install


_PACKAGE_VERSION = _get_version()


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _normalize_transport(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in VALID_TRANSPORTS:
        logger.warning(
            "Unknown transport mode '%s'. Falling back to 'stdio'. Valid options: %s",
            value,
            ", ".join(VALID_TRANSPORTS),
        )
        return "stdio"
    return normalized


@dataclass
class TodoistConfig:
    """Connection settings for the Todoist API.

    Attributes:
        api_token: Personal API token sent as a bearer credential
        timeout: Per-request timeout in seconds
    """

    api_token: Optional[str] = None
    timeout: int = 30

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "TodoistConfig":
        """Create config from TOML dict (typically [todoist] section).

        Args:
            data: Dict from TOML parsing

        Returns:
            TodoistConfig instance
        """
        return cls(
            api_token=data.get("api_token") or None,
            timeout=int(data.get("timeout", 30)),
        )


@dataclass
class HttpConfig:
    """Configuration for the networked (streamable HTTP) transport.

    Attributes:
        host: Interface to bind
        port: Port to listen on
        auth_token: Shared bearer secret; None disables authentication
        json_response: Answer POST requests with JSON bodies instead of SSE
    """

    host: str = "0.0.0.0"
    port: int = 8000
    auth_token: Optional[str] = None
    json_response: bool = False

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "HttpConfig":
        """Create config from TOML dict (typically [http] section)."""
        return cls(
            host=str(data.get("host", "0.0.0.0")),
            port=int(data.get("port", 8000)),
            auth_token=data.get("auth_token") or None,
            json_response=_parse_bool(data.get("json_response", False)),
        )

    @property
    def auth_enabled(self) -> bool:
        return bool(self.auth_token)

    def validate_auth_token(self, token: Optional[str]) -> bool:
        """
        Validate an inbound bearer token.

        Args:
            token: Token extracted from the Authorization header

        Returns:
            True if valid (or auth disabled), False otherwise
        """
        if not self.auth_enabled:
            return True

        if not token:
            return False

        return hmac.compare_digest(token.encode(), self.auth_token.encode())


@dataclass
class ServerConfig:
    """Server configuration with support for env vars and TOML overrides."""

    # Remote service configuration
    todoist: TodoistConfig = field(default_factory=TodoistConfig)

    # Transport configuration
    transport: str = "stdio"
    http: HttpConfig = field(default_factory=HttpConfig)

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = False

    # Server configuration
    server_name: str = "todoist-mcp-server"
    server_version: str = field(default_factory=lambda: _PACKAGE_VERSION)

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "ServerConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. TOML config file
        3. Default values
        """
        config = cls()

        toml_path = config_file or os.environ.get("TODOIST_MCP_CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            for default_path in ["todoist-mcp.toml", ".todoist-mcp.toml"]:
                if Path(default_path).exists():
                    config._load_toml(Path(default_path))
                    break

        config._load_env()

        return config

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning("Config file not found: %s", path)
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)

            if "todoist" in data:
                self.todoist = TodoistConfig.from_toml_dict(data["todoist"])

            if "server" in data:
                srv = data["server"]
                if "transport" in srv:
                    self.transport = _normalize_transport(str(srv["transport"]))
                if "name" in srv:
                    self.server_name = srv["name"]

            if "http" in data:
                self.http = HttpConfig.from_toml_dict(data["http"])

            if "logging" in data:
                log = data["logging"]
                if "level" in log:
                    self.log_level = log["level"].upper()
                if "structured" in log:
                    self.structured_logging = _parse_bool(log["structured"])

        except (OSError, ValueError, tomllib.TOMLDecodeError) as e:
            logger.error("Error loading config file %s: %s", path, e)

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        if token := os.environ.get("TODOIST_API_TOKEN"):
            self.todoist.api_token = token

        if timeout := os.environ.get("TODOIST_API_TIMEOUT"):
            try:
                self.todoist.timeout = int(timeout)
            except ValueError:
                logger.warning("Ignoring invalid TODOIST_API_TIMEOUT: %s", timeout)

        if mode := os.environ.get("TRANSPORT_MODE"):
            self.transport = _normalize_transport(mode)

        if host := os.environ.get("HOST"):
            self.http.host = host

        if port := os.environ.get("PORT"):
            try:
                self.http.port = int(port)
            except ValueError:
                logger.warning("Ignoring invalid PORT: %s", port)

        if auth_token := os.environ.get("MCP_AUTH_TOKEN"):
            self.http.auth_token = auth_token

        if json_response := os.environ.get("MCP_JSON_RESPONSE"):
            self.http.json_response = _parse_bool(json_response)

        if level := os.environ.get("TODOIST_MCP_LOG_LEVEL"):
            self.log_level = level.upper()

        if structured := os.environ.get("TODOIST_MCP_STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)

    def validate(self) -> None:
        """Check settings required before any transport starts.

        Raises:
            ConfigurationError: If the Todoist API token is missing
        """
        if not self.todoist.api_token:
            raise ConfigurationError(
                "TODOIST_API_TOKEN environment variable is required"
            )

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        from todoist_mcp.core.logging_config import configure_logging

        configure_logging(
            level=getattr(logging, self.log_level, logging.INFO),
            format="structured" if self.structured_logging else "human",
        )


# Global configuration instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def set_config(config: Optional[ServerConfig]) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
