"""Fuzzy task lookup by name fragment.

Every lookup fetches the full task list again; nothing is cached between
calls, even within a single tool invocation.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol, Sequence

from todoist_api_python.models import Task

logger = logging.getLogger(__name__)


class TaskSource(Protocol):
    async def get_tasks(self) -> Sequence[Task]: ...


def match_task(tasks: Iterable[Task], fragment: str) -> Optional[Task]:
    """Return the first task whose content contains ``fragment``, ignoring case."""
    needle = fragment.lower()
    for task in tasks:
        if needle in task.content.lower():
            return task
    return None


async def find_task(client: TaskSource, fragment: str) -> Optional[Task]:
    """Fetch all tasks and return the first match for ``fragment``.

    Returns:
        The matching task, or None when no task matches
    """
    tasks = await client.get_tasks()
    task = match_task(tasks, fragment)
    if task is None:
        logger.debug("No task among %d matches %r", len(tasks), fragment)
    return task
