"""
Root pytest configuration and shared fixtures.

Provides an in-memory stand-in for the Todoist client that records every
call, so tests can assert exactly which remote operations were issued.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import pytest

from todoist_mcp.config import HttpConfig, ServerConfig, TodoistConfig
from todoist_mcp.core.errors import TodoistAPIError
from todoist_mcp.core.responses import result_text

MUTATING_CALLS = {"add_task", "update_task", "delete_task", "complete_task"}


@dataclass
class StubDue:
    string: str


@dataclass
class StubTask:
    """The subset of the SDK Task model the tools read."""

    id: str
    content: str
    description: str = ""
    due: Optional[StubDue] = None
    priority: Optional[int] = 1
    project_id: Optional[str] = None


def make_task(
    content: str,
    *,
    id: Optional[str] = None,
    description: str = "",
    due: Optional[str] = None,
    priority: Optional[int] = 1,
    project_id: Optional[str] = None,
) -> StubTask:
    """Build a task the way the Todoist SDK would return it."""
    return StubTask(
        id=id or content.lower().replace(" ", "-"),
        content=content,
        description=description,
        due=StubDue(string=due) if due else None,
        priority=priority,
        project_id=project_id,
    )


class FakeTodoistClient:
    """Records calls and serves tasks from memory.

    Attributes:
        tasks: Tasks returned by get_tasks, in order
        calls: (method, args, kwargs) tuples, in call order
        fail_with: If set, every call raises this exception
    """

    def __init__(self, tasks: Optional[List[StubTask]] = None):
        self.tasks: List[StubTask] = list(tasks or [])
        self.calls: List[Tuple[str, Tuple[Any, ...], Dict[str, Any]]] = []
        self.fail_with: Optional[Exception] = None
        self.closed = False
        self._ids = itertools.count(1000)

    def _record(self, method: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((method, args, kwargs))
        if self.fail_with is not None:
            raise self.fail_with

    def calls_to(self, method: str) -> List[Tuple[Tuple[Any, ...], Dict[str, Any]]]:
        return [(args, kwargs) for name, args, kwargs in self.calls if name == method]

    @property
    def mutating_calls(self) -> List[str]:
        return [name for name, _, _ in self.calls if name in MUTATING_CALLS]

    async def get_tasks(
        self, *, project_id: Optional[str] = None, filter: Optional[str] = None
    ) -> List[StubTask]:
        self._record("get_tasks", project_id=project_id, filter=filter)
        return list(self.tasks)

    async def add_task(
        self,
        content: str,
        *,
        description: Optional[str] = None,
        due_string: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> StubTask:
        self._record(
            "add_task",
            content,
            description=description,
            due_string=due_string,
            priority=priority,
        )
        task = make_task(
            content,
            id=str(next(self._ids)),
            description=description or "",
            due=due_string,
            priority=priority or 1,
        )
        self.tasks.append(task)
        return task

    async def update_task(self, task_id: str, **fields: Any) -> StubTask:
        self._record("update_task", task_id, **fields)
        return next(task for task in self.tasks if task.id == task_id)

    async def delete_task(self, task_id: str) -> None:
        self._record("delete_task", task_id)

    async def complete_task(self, task_id: str) -> None:
        self._record("complete_task", task_id)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by configure_logging() during a test."""
    yield
    root = logging.getLogger("todoist_mcp")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def fake_client() -> FakeTodoistClient:
    return FakeTodoistClient(
        [
            make_task("Buy milk", id="1", description="2% please", due="tomorrow", priority=2),
            make_task("Call mom", id="2", priority=1),
            make_task("Write report", id="3", priority=4),
        ]
    )


@pytest.fixture
def failing_client() -> FakeTodoistClient:
    client = FakeTodoistClient([make_task("Buy milk", id="1")])
    client.fail_with = TodoistAPIError("Todoist API error 503: Service Unavailable", status_code=503)
    return client


@pytest.fixture
def server_config() -> ServerConfig:
    return ServerConfig(
        todoist=TodoistConfig(api_token="test-token"),
        http=HttpConfig(json_response=True),
        server_version="0.2.0-test",
    )


def text_of(result) -> str:
    """Text of a single-block CallToolResult."""
    return result_text(result)
