"""Todoist access through the official ``todoist-api-python`` SDK.

``TodoistClient`` is a thin adapter over ``TodoistAPIAsync``: it drains the
SDK's paginated listings into plain lists and turns the SDK's ``requests``
errors into ``TodoistAPIError``. Tasks are the SDK's own ``Task`` models.
Authoritative task state lives in Todoist; nothing here caches tasks.

Example usage:
    client = TodoistClient(api_token="0123abcd...")
    task = await client.add_task("Buy milk", due_string="tomorrow")
    await client.complete_task(task.id)
    await client.aclose()
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, AsyncIterable, Iterator, List, Optional

import requests
from todoist_api_python.api_async import TodoistAPIAsync
from todoist_api_python.models import Task

from todoist_mcp.core.errors import TodoistAPIError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise SDK transport and HTTP failures as TodoistAPIError."""
    try:
        yield
    except requests.HTTPError as e:
        response = e.response
        if response is None:
            raise TodoistAPIError(f"Todoist API error: {e}") from e
        detail = response.text.strip() or response.reason
        raise TodoistAPIError(
            f"Todoist API error {response.status_code}: {detail}",
            status_code=response.status_code,
        ) from e
    except requests.RequestException as e:
        raise TodoistAPIError(f"Request to Todoist failed: {e}") from e


async def _drain(pages: AsyncIterable[List[Task]]) -> List[Task]:
    return [task async for page in pages for task in page]


class TodoistClient:
    """Task operations used by the MCP tools.

    Each method issues its SDK call(s) and returns the SDK's results or
    raises TodoistAPIError. Retries are left to the SDK.
    """

    def __init__(
        self,
        api_token: str,
        timeout: int = DEFAULT_TIMEOUT,
        *,
        api: Optional[TodoistAPIAsync] = None,
    ):
        """Initialize the client.

        Args:
            api_token: Todoist API token
            timeout: Request timeout in seconds (default: 30)
            api: Pre-built SDK instance (used by tests)

        Raises:
            ValueError: If no API token is provided
        """
        if not api_token:
            raise ValueError("Todoist API token required")

        self._session: Optional[requests.Session] = None
        if api is None:
            self._session = requests.Session()
            api = TodoistAPIAsync(
                api_token, request_timeout=timeout, session=self._session
            )
        self._api = api

    async def aclose(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    async def __aenter__(self) -> "TodoistClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def get_tasks(
        self,
        *,
        project_id: Optional[str] = None,
        filter: Optional[str] = None,
    ) -> List[Task]:
        """Fetch all active tasks, optionally scoped.

        The filter endpoint takes no project, so when both are given the
        filtered tasks are narrowed to ``project_id`` here.

        Args:
            project_id: Only tasks of this project
            filter: Todoist filter query ("today", "overdue", "p1", ...)

        Returns:
            Tasks in the order the API returns them
        """
        with translate_errors():
            if filter:
                tasks = await _drain(await self._api.filter_tasks(query=filter))
                if project_id:
                    tasks = [task for task in tasks if task.project_id == project_id]
                return tasks
            return await _drain(await self._api.get_tasks(project_id=project_id))

    async def add_task(
        self,
        content: str,
        *,
        description: Optional[str] = None,
        due_string: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> Task:
        """Create a task and return it as stored by Todoist."""
        fields = {
            key: value
            for key, value in (
                ("description", description),
                ("due_string", due_string),
                ("priority", priority),
            )
            if value is not None
        }
        with translate_errors():
            task = await self._api.add_task(content, **fields)
        logger.debug("Created task %s", task.id)
        return task

    async def update_task(self, task_id: str, **fields: Any) -> Task:
        """Update the given fields of a task; unspecified fields are untouched."""
        with translate_errors():
            return await self._api.update_task(task_id, **fields)

    async def delete_task(self, task_id: str) -> None:
        with translate_errors():
            await self._api.delete_task(task_id)

    async def complete_task(self, task_id: str) -> None:
        with translate_errors():
            await self._api.complete_task(task_id)
