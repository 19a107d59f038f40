"""Tool argument validation.

Tool calls arrive with an untyped argument bag. ``parse_arguments`` is the
only place that bag is inspected: it either returns one of the typed records
below or raises ``InvalidArgumentsError``. Only the mandatory field of each
tool is type-checked; optional fields are passed on as supplied and left for
the Todoist API to judge.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable, ClassVar, Dict, Mapping, Optional, Type, Union

from todoist_mcp.core.errors import InvalidArgumentsError, UnknownToolError

CREATE_TASK = "todoist_create_task"
GET_TASKS = "todoist_get_tasks"
UPDATE_TASK = "todoist_update_task"
DELETE_TASK = "todoist_delete_task"
COMPLETE_TASK = "todoist_complete_task"


def _has_string_field(value: Any, key: str) -> bool:
    return isinstance(value, Mapping) and isinstance(value.get(key), str)


def is_create_task_args(value: Any) -> bool:
    return _has_string_field(value, "content")


def is_get_tasks_args(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_update_task_args(value: Any) -> bool:
    return _has_string_field(value, "task_name")


def is_delete_task_args(value: Any) -> bool:
    return _has_string_field(value, "task_name")


def is_complete_task_args(value: Any) -> bool:
    return _has_string_field(value, "task_name")


@dataclass(frozen=True)
class CreateTaskArgs:
    tool: ClassVar[str] = CREATE_TASK

    content: str
    description: Optional[str] = None
    due_string: Optional[str] = None
    priority: Optional[int] = None


@dataclass(frozen=True)
class GetTasksArgs:
    tool: ClassVar[str] = GET_TASKS

    project_id: Optional[str] = None
    filter: Optional[str] = None
    priority: Optional[int] = None
    limit: Optional[int] = None


@dataclass(frozen=True)
class UpdateTaskArgs:
    tool: ClassVar[str] = UPDATE_TASK

    task_name: str
    content: Optional[str] = None
    description: Optional[str] = None
    due_string: Optional[str] = None
    priority: Optional[int] = None

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly supplied for the update, keyed by API name."""
        supplied = {
            "content": self.content,
            "description": self.description,
            "due_string": self.due_string,
            "priority": self.priority,
        }
        return {key: value for key, value in supplied.items() if value is not None}


@dataclass(frozen=True)
class DeleteTaskArgs:
    tool: ClassVar[str] = DELETE_TASK

    task_name: str


@dataclass(frozen=True)
class CompleteTaskArgs:
    tool: ClassVar[str] = COMPLETE_TASK

    task_name: str


ToolArguments = Union[
    CreateTaskArgs, GetTasksArgs, UpdateTaskArgs, DeleteTaskArgs, CompleteTaskArgs
]

_PARSERS: Dict[str, tuple[Callable[[Any], bool], Type[Any]]] = {
    CREATE_TASK: (is_create_task_args, CreateTaskArgs),
    GET_TASKS: (is_get_tasks_args, GetTasksArgs),
    UPDATE_TASK: (is_update_task_args, UpdateTaskArgs),
    DELETE_TASK: (is_delete_task_args, DeleteTaskArgs),
    COMPLETE_TASK: (is_complete_task_args, CompleteTaskArgs),
}


def parse_arguments(tool_name: str, raw: Any) -> ToolArguments:
    """Validate an argument bag and build the typed record for ``tool_name``.

    Keys the record does not declare are ignored.

    Args:
        tool_name: Name of the invoked tool
        raw: Untyped arguments as received from the client

    Returns:
        Typed argument record

    Raises:
        UnknownToolError: If ``tool_name`` is not one of the task tools
        InvalidArgumentsError: If the mandatory field is missing or not a string
    """
    try:
        predicate, record_type = _PARSERS[tool_name]
    except KeyError:
        raise UnknownToolError(tool_name) from None

    if not predicate(raw):
        raise InvalidArgumentsError(tool_name)

    names = [f.name for f in fields(record_type)]
    return record_type(**{name: raw[name] for name in names if name in raw})
