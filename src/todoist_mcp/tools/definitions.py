"""Descriptors for the five Todoist task tools."""

from __future__ import annotations

from typing import Tuple

from mcp.types import Tool

from todoist_mcp.core.arguments import (
    COMPLETE_TASK,
    CREATE_TASK,
    DELETE_TASK,
    GET_TASKS,
    UPDATE_TASK,
)

_PRIORITY_VALUES = [1, 2, 3, 4]


CREATE_TASK_TOOL = Tool(
    name=CREATE_TASK,
    description="Create a new task in Todoist with optional description, due date, and priority",
    inputSchema={
        "type": "object",
        "properties": {
            "content": {
                "type": "string",
                "description": "The content/title of the task",
            },
            "description": {
                "type": "string",
                "description": "Detailed description of the task (optional)",
            },
            "due_string": {
                "type": "string",
                "description": "Natural language due date like 'tomorrow', 'next Monday', 'Jan 23' (optional)",
            },
            "priority": {
                "type": "number",
                "description": "Task priority from 1 (normal) to 4 (urgent) (optional)",
                "enum": _PRIORITY_VALUES,
            },
        },
        "required": ["content"],
    },
)

GET_TASKS_TOOL = Tool(
    name=GET_TASKS,
    description="Get a list of tasks from Todoist with various filters",
    inputSchema={
        "type": "object",
        "properties": {
            "project_id": {
                "type": "string",
                "description": "Filter tasks by project ID (optional)",
            },
            "filter": {
                "type": "string",
                "description": "Natural language filter like 'today', 'tomorrow', 'next week', 'priority 1', 'overdue' (optional)",
            },
            "priority": {
                "type": "number",
                "description": "Filter by priority level (1-4) (optional)",
                "enum": _PRIORITY_VALUES,
            },
            "limit": {
                "type": "number",
                "description": "Maximum number of tasks to return (optional)",
                "default": 10,
            },
        },
    },
)

UPDATE_TASK_TOOL = Tool(
    name=UPDATE_TASK,
    description="Update an existing task in Todoist by searching for it by name and then updating it",
    inputSchema={
        "type": "object",
        "properties": {
            "task_name": {
                "type": "string",
                "description": "Name/content of the task to search for and update",
            },
            "content": {
                "type": "string",
                "description": "New content/title for the task (optional)",
            },
            "description": {
                "type": "string",
                "description": "New description for the task (optional)",
            },
            "due_string": {
                "type": "string",
                "description": "New due date in natural language like 'tomorrow', 'next Monday' (optional)",
            },
            "priority": {
                "type": "number",
                "description": "New priority level from 1 (normal) to 4 (urgent) (optional)",
                "enum": _PRIORITY_VALUES,
            },
        },
        "required": ["task_name"],
    },
)

DELETE_TASK_TOOL = Tool(
    name=DELETE_TASK,
    description="Delete a task from Todoist by searching for it by name",
    inputSchema={
        "type": "object",
        "properties": {
            "task_name": {
                "type": "string",
                "description": "Name/content of the task to search for and delete",
            },
        },
        "required": ["task_name"],
    },
)

COMPLETE_TASK_TOOL = Tool(
    name=COMPLETE_TASK,
    description="Mark a task as complete by searching for it by name",
    inputSchema={
        "type": "object",
        "properties": {
            "task_name": {
                "type": "string",
                "description": "Name/content of the task to search for and complete",
            },
        },
        "required": ["task_name"],
    },
)

TOOLS: Tuple[Tool, ...] = (
    CREATE_TASK_TOOL,
    GET_TASKS_TOOL,
    UPDATE_TASK_TOOL,
    DELETE_TASK_TOOL,
    COMPLETE_TASK_TOOL,
)
