"""Cross-tenant isolation tests.

User A owns a todo; User B tries to read, change and delete it. Every
attempt must look exactly like the todo does not exist, and A's data must
be unchanged afterwards.
"""

import uuid

import pytest

_TODOS_URL = "/api/v1/todos"


async def _a_todo(client) -> dict:
    response = await client.post(
        _TODOS_URL, json={"title": "A's secret", "description": "private"}
    )
    assert response.status_code == 201
    return response.json()["data"]


class TestTodoIsolation:
    """User B cannot see or touch User A's todos."""

    @pytest.mark.asyncio
    async def test_list_excludes_other_users(self, client, client_user_b):
        """Each user lists only their own todos."""
        await _a_todo(client)
        await client_user_b.post(_TODOS_URL, json={"title": "B's task"})

        a_titles = [t["title"] for t in (await client.get(_TODOS_URL)).json()["data"]]
        b_titles = [
            t["title"] for t in (await client_user_b.get(_TODOS_URL)).json()["data"]
        ]
        assert a_titles == ["A's secret"]
        assert b_titles == ["B's task"]

    @pytest.mark.asyncio
    async def test_get_other_users_todo_matches_missing(self, client, client_user_b):
        """Not-owned gives the same 404 body as nonexistent."""
        todo = await _a_todo(client)

        not_owned = await client_user_b.get(f"{_TODOS_URL}/{todo['id']}")
        missing = await client_user_b.get(f"{_TODOS_URL}/{uuid.uuid4()}")

        assert not_owned.status_code == 404
        assert not_owned.json() == missing.json()

    @pytest.mark.asyncio
    async def test_update_other_users_todo_is_404(self, client, client_user_b):
        """B's update is refused and A's todo is untouched."""
        todo = await _a_todo(client)

        response = await client_user_b.put(
            f"{_TODOS_URL}/{todo['id']}",
            json={"title": "pwned", "completed": True},
        )
        assert response.status_code == 404

        after = (await client.get(f"{_TODOS_URL}/{todo['id']}")).json()["data"]
        assert after == todo

    @pytest.mark.asyncio
    async def test_delete_other_users_todo_is_404(self, client, client_user_b):
        """B's delete is refused and A's todo still exists."""
        todo = await _a_todo(client)

        response = await client_user_b.delete(f"{_TODOS_URL}/{todo['id']}")
        assert response.status_code == 404

        assert (await client.get(f"{_TODOS_URL}/{todo['id']}")).status_code == 200
