"""Tests for the Todoist SDK adapter."""

import pytest
import requests

from todoist_mcp.core import client as client_module
from todoist_mcp.core.client import TodoistClient, translate_errors
from todoist_mcp.core.errors import TodoistAPIError
from tests.conftest import make_task


def http_error(status, body, reason=""):
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response.encoding = "utf-8"
    response._content = body.encode()
    return requests.HTTPError(f"{status} error", response=response)


async def paginate(*pages):
    for page in pages:
        yield page


class FakeTodoistAPI:
    """Records SDK calls; listings come back as async page iterators."""

    def __init__(self, pages=None, fail_with=None):
        self.pages = pages or []
        self.fail_with = fail_with
        self.calls = []

    def _record(self, method, *args, **kwargs):
        self.calls.append((method, args, kwargs))
        if self.fail_with is not None:
            raise self.fail_with

    async def get_tasks(self, **kwargs):
        self._record("get_tasks", **kwargs)
        return paginate(*self.pages)

    async def filter_tasks(self, **kwargs):
        self._record("filter_tasks", **kwargs)
        return paginate(*self.pages)

    async def add_task(self, content, **kwargs):
        self._record("add_task", content, **kwargs)
        return make_task(content, id="7", priority=kwargs.get("priority", 1))

    async def update_task(self, task_id, **kwargs):
        self._record("update_task", task_id, **kwargs)
        return make_task(kwargs.get("content", "updated"), id=task_id)

    async def delete_task(self, task_id):
        self._record("delete_task", task_id)
        return True

    async def complete_task(self, task_id):
        self._record("complete_task", task_id)
        return True


class TestGetTasks:
    """Tests for TodoistClient.get_tasks()."""

    @pytest.mark.asyncio
    async def test_drains_every_page(self):
        api = FakeTodoistAPI(
            pages=[[make_task("Buy milk")], [make_task("Call mom"), make_task("Write report")]]
        )
        client = TodoistClient("secret-token", api=api)

        tasks = await client.get_tasks(project_id="p1")

        assert [task.content for task in tasks] == ["Buy milk", "Call mom", "Write report"]
        assert api.calls == [("get_tasks", (), {"project_id": "p1"})]

    @pytest.mark.asyncio
    async def test_filter_uses_filter_listing(self):
        api = FakeTodoistAPI(
            pages=[
                [
                    make_task("Buy milk", project_id="p1"),
                    make_task("Call mom", project_id="p2"),
                ]
            ]
        )
        client = TodoistClient("secret-token", api=api)

        tasks = await client.get_tasks(project_id="p2", filter="today")

        assert api.calls == [("filter_tasks", (), {"query": "today"})]
        assert [task.content for task in tasks] == ["Call mom"]

    @pytest.mark.asyncio
    async def test_empty_listing(self):
        client = TodoistClient("secret-token", api=FakeTodoistAPI(pages=[[]]))
        assert await client.get_tasks() == []


class TestMutations:
    """Tests for the task mutation calls."""

    @pytest.mark.asyncio
    async def test_add_task_passes_only_supplied_fields(self):
        api = FakeTodoistAPI()
        client = TodoistClient("secret-token", api=api)

        task = await client.add_task("Buy milk", priority=3)

        assert api.calls == [("add_task", ("Buy milk",), {"priority": 3})]
        assert task.id == "7"

    @pytest.mark.asyncio
    async def test_update_task(self):
        api = FakeTodoistAPI()
        client = TodoistClient("secret-token", api=api)

        task = await client.update_task("7", content="Buy oat milk")

        assert api.calls == [("update_task", ("7",), {"content": "Buy oat milk"})]
        assert task.content == "Buy oat milk"

    @pytest.mark.asyncio
    async def test_delete_and_complete(self):
        api = FakeTodoistAPI()
        client = TodoistClient("secret-token", api=api)

        assert await client.delete_task("7") is None
        assert await client.complete_task("8") is None

        assert api.calls == [
            ("delete_task", ("7",), {}),
            ("complete_task", ("8",), {}),
        ]


class TestErrors:
    """Tests for error translation."""

    @pytest.mark.asyncio
    async def test_http_error_keeps_status(self):
        api = FakeTodoistAPI(fail_with=http_error(404, "Task not found"))
        client = TodoistClient("secret-token", api=api)

        with pytest.raises(TodoistAPIError) as exc_info:
            await client.complete_task("missing")

        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == "Todoist API error 404: Task not found"

    @pytest.mark.asyncio
    async def test_empty_body_falls_back_to_reason(self):
        api = FakeTodoistAPI(fail_with=http_error(503, "", reason="Service Unavailable"))
        client = TodoistClient("secret-token", api=api)

        with pytest.raises(TodoistAPIError, match="503: Service Unavailable"):
            await client.get_tasks()

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        api = FakeTodoistAPI(fail_with=requests.ConnectionError("connection refused"))
        client = TodoistClient("secret-token", api=api)

        with pytest.raises(TodoistAPIError, match="Request to Todoist failed: connection refused"):
            await client.add_task("Buy milk")

    def test_other_exceptions_pass_through(self):
        with pytest.raises(KeyError):
            with translate_errors():
                raise KeyError("id")


class TestLifecycle:
    def test_requires_token(self):
        with pytest.raises(ValueError):
            TodoistClient("")

    @pytest.mark.asyncio
    async def test_builds_sdk_with_owned_session(self, monkeypatch):
        built = {}

        class RecordingAPI:
            def __init__(self, token, request_timeout, session):
                built.update(token=token, timeout=request_timeout, session=session)

        monkeypatch.setattr(client_module, "TodoistAPIAsync", RecordingAPI)

        async with TodoistClient("secret-token", timeout=5):
            assert built["token"] == "secret-token"
            assert built["timeout"] == 5
            assert isinstance(built["session"], requests.Session)
