"""Dispatch of Todoist tool calls.

``TaskToolDispatcher.dispatch`` is the single entry point used by every
transport. It validates the argument bag, resolves the target task for
mutating tools, calls the Todoist API and formats the outcome into a
``CallToolResult``. It never raises: any failure becomes an error envelope.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from mcp.types import CallToolResult
from todoist_api_python.models import Task

from todoist_mcp.core.arguments import (
    COMPLETE_TASK,
    CREATE_TASK,
    DELETE_TASK,
    GET_TASKS,
    UPDATE_TASK,
    CompleteTaskArgs,
    CreateTaskArgs,
    DeleteTaskArgs,
    GetTasksArgs,
    UpdateTaskArgs,
    parse_arguments,
)
from todoist_mcp.core.client import TodoistClient
from todoist_mcp.core.context import request_context
from todoist_mcp.core.errors import TodoistMCPError, UnknownToolError
from todoist_mcp.core.resolver import find_task
from todoist_mcp.core.responses import error_result, text_result

logger = logging.getLogger(__name__)

NO_TASKS_MESSAGE = "No tasks found matching the criteria"


def not_found_message(fragment: str) -> str:
    return f'Could not find a task matching "{fragment}"'


def format_created_task(task: Task) -> str:
    text = f"Task created:\nTitle: {task.content}"
    if task.description:
        text += f"\nDescription: {task.description}"
    if task.due:
        text += f"\nDue: {task.due.string}"
    if task.priority:
        text += f"\nPriority: {task.priority}"
    return text


def format_task_line(task: Task) -> str:
    text = f"- {task.content}"
    if task.description:
        text += f"\n  Description: {task.description}"
    if task.due:
        text += f"\n  Due: {task.due.string}"
    if task.priority:
        text += f"\n  Priority: {task.priority}"
    return text


def format_task_list(tasks: List[Task]) -> str:
    if not tasks:
        return NO_TASKS_MESSAGE
    return "\n\n".join(format_task_line(task) for task in tasks)


def format_updated_task(original: Task, args: UpdateTaskArgs) -> str:
    text = f'Task "{original.content}" updated:'
    if args.content is not None:
        text += f"\nNew Title: {args.content}"
    if args.description is not None:
        text += f"\nNew Description: {args.description}"
    if args.due_string is not None:
        text += f"\nNew Due Date: {args.due_string}"
    if args.priority is not None:
        text += f"\nNew Priority: {args.priority}"
    return text


def filter_tasks(tasks: List[Task], args: GetTasksArgs) -> List[Task]:
    """Apply the client-side priority filter, then the limit."""
    if args.priority is not None:
        tasks = [task for task in tasks if task.priority == args.priority]
    if args.limit is not None and args.limit > 0:
        tasks = tasks[: int(args.limit)]
    return tasks


class TaskToolDispatcher:
    """Routes tool calls to the Todoist API.

    Holds no state besides the client, so one instance may serve any number
    of concurrent sessions.
    """

    def __init__(self, client: TodoistClient):
        self.client = client
        self._handlers: Dict[str, Callable[[Any], Awaitable[CallToolResult]]] = {
            CREATE_TASK: self._create_task,
            GET_TASKS: self._get_tasks,
            UPDATE_TASK: self._update_task,
            DELETE_TASK: self._delete_task,
            COMPLETE_TASK: self._complete_task,
        }

    async def dispatch(
        self,
        name: str,
        arguments: Optional[Mapping[str, Any]],
        *,
        client_id: Optional[str] = None,
    ) -> CallToolResult:
        """Execute one tool call.

        Args:
            name: Tool name
            arguments: Untyped argument bag (None is treated as empty)
            client_id: Identifier of the calling session, for log correlation

        Returns:
            Success or error envelope
        """
        with request_context(client_id=client_id):
            start = time.perf_counter()
            try:
                args = parse_arguments(name, arguments if arguments is not None else {})
                result = await self._handlers[name](args)
            except UnknownToolError as e:
                logger.warning("Rejected call to unknown tool %s", name)
                result = error_result(str(e))
            except TodoistMCPError as e:
                logger.warning("%s failed: %s", name, e)
                result = error_result(f"Error: {e}")
            except Exception as e:
                logger.exception("Unexpected error in %s", name)
                result = error_result(f"Error: {e}")

            logger.debug(
                "Tool %s finished in %.2fms (error=%s)",
                name,
                (time.perf_counter() - start) * 1000,
                result.isError,
            )
            return result

    async def _create_task(self, args: CreateTaskArgs) -> CallToolResult:
        task = await self.client.add_task(
            args.content,
            description=args.description,
            due_string=args.due_string,
            priority=args.priority,
        )
        logger.info("Created task %s", task.id)
        return text_result(format_created_task(task))

    async def _get_tasks(self, args: GetTasksArgs) -> CallToolResult:
        tasks = await self.client.get_tasks(
            project_id=args.project_id or None,
            filter=args.filter or None,
        )
        return text_result(format_task_list(filter_tasks(tasks, args)))

    async def _update_task(self, args: UpdateTaskArgs) -> CallToolResult:
        task = await find_task(self.client, args.task_name)
        if task is None:
            return error_result(not_found_message(args.task_name))

        await self.client.update_task(task.id, **args.changes())
        logger.info("Updated task %s", task.id)
        return text_result(format_updated_task(task, args))

    async def _delete_task(self, args: DeleteTaskArgs) -> CallToolResult:
        task = await find_task(self.client, args.task_name)
        if task is None:
            return error_result(not_found_message(args.task_name))

        await self.client.delete_task(task.id)
        logger.info("Deleted task %s", task.id)
        return text_result(f'Successfully deleted task: "{task.content}"')

    async def _complete_task(self, args: CompleteTaskArgs) -> CallToolResult:
        task = await find_task(self.client, args.task_name)
        if task is None:
            return error_result(not_found_message(args.task_name))

        await self.client.complete_task(task.id)
        logger.info("Completed task %s", task.id)
        return text_result(f'Successfully completed task: "{task.content}"')
