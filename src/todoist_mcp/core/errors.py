"""Exception hierarchy for todoist-mcp."""

from __future__ import annotations

from typing import Optional


class TodoistMCPError(Exception):
    """Base exception for todoist-mcp."""


class ConfigurationError(TodoistMCPError):
    """Required configuration is missing or invalid. Fatal at startup."""


class InvalidArgumentsError(TodoistMCPError, ValueError):
    """Tool arguments do not have the shape the tool requires.

    Attributes:
        tool_name: Tool whose arguments were rejected
    """

    def __init__(self, tool_name: str):
        super().__init__(f"Invalid arguments for {tool_name}")
        self.tool_name = tool_name


class UnknownToolError(TodoistMCPError):
    """No tool is registered under the requested name."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class TodoistAPIError(TodoistMCPError):
    """Failure reported by (or while reaching) the Todoist REST API.

    Attributes:
        status_code: HTTP status code if the API answered
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
