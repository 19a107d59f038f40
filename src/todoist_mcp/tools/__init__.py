"""Todoist task tools: descriptors and dispatcher."""

from todoist_mcp.tools.definitions import TOOLS
from todoist_mcp.tools.dispatcher import TaskToolDispatcher

__all__ = ["TOOLS", "TaskToolDispatcher"]
