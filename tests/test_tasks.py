# tests/test_tasks.py

from __future__ import annotations

import uuid

import pytest

TASKS = "/api/v1/tasks/"


@pytest.fixture()
def add_task(client, auth_headers):
    def _add(title: str = "Buy milk", **fields) -> dict:
        response = client.post(TASKS, json={"title": title, **fields}, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _add


def test_create_task_defaults(add_task) -> None:
    task = add_task("  Buy milk  ", description="  two litres ")

    assert task["title"] == "Buy milk"
    assert task["description"] == "two litres"
    assert task["category"] == "personal"
    assert task["completed"] is False
    assert uuid.UUID(task["id"])


def test_blank_description_is_stored_as_null(add_task) -> None:
    assert add_task("Stretch", description="   ")["description"] is None


def test_create_task_requires_title(client, auth_headers) -> None:
    response = client.post(TASKS, json={"title": "   "}, headers=auth_headers)

    assert response.status_code == 400
    assert client.get(TASKS, headers=auth_headers).json() == []


def test_create_task_rejects_unknown_category(client, auth_headers) -> None:
    response = client.post(TASKS, json={"title": "x", "category": "errands"}, headers=auth_headers)
    assert response.status_code == 422


def test_list_returns_only_own_tasks(client, add_task, register, login) -> None:
    add_task("mine")
    register(email="bob@example.com", name="Bob")
    bob = {"Authorization": f"Bearer {login(email='bob@example.com')}"}
    client.post(TASKS, json={"title": "bob's"}, headers=bob)

    mine = client.get(TASKS, headers={"Authorization": f"Bearer {login()}"}).json()
    assert [t["title"] for t in mine] == ["mine"]


def test_get_task_ownership(client, add_task, register, login) -> None:
    task = add_task()
    register(email="bob@example.com", name="Bob")
    bob = {"Authorization": f"Bearer {login(email='bob@example.com')}"}

    assert client.get(f"{TASKS}{task['id']}", headers=bob).status_code == 403
    assert client.patch(f"{TASKS}{task['id']}", json={"title": "x"}, headers=bob).status_code == 403
    assert client.delete(f"{TASKS}{task['id']}", headers=bob).status_code == 403


def test_missing_task(client, auth_headers) -> None:
    response = client.get(f"{TASKS}{uuid.uuid4()}", headers=auth_headers)
    assert response.status_code == 404


def test_patch_merges_fields(client, auth_headers, add_task) -> None:
    task = add_task("Gym", description="legs", category="health")

    response = client.patch(f"{TASKS}{task['id']}", json={"title": " Gym day "}, headers=auth_headers)

    assert response.status_code == 200
    updated = response.json()
    assert updated["title"] == "Gym day"
    assert updated["description"] == "legs"
    assert updated["category"] == "health"
    assert updated["completed"] is False


def test_patch_rejects_blank_title(client, auth_headers, add_task) -> None:
    task = add_task("Gym")

    response = client.patch(f"{TASKS}{task['id']}", json={"title": ""}, headers=auth_headers)

    assert response.status_code == 400
    assert client.get(f"{TASKS}{task['id']}", headers=auth_headers).json()["title"] == "Gym"


def test_toggle_flips_completion(client, auth_headers, add_task) -> None:
    task = add_task()

    first = client.post(f"{TASKS}{task['id']}/toggle", headers=auth_headers)
    second = client.post(f"{TASKS}{task['id']}/toggle", headers=auth_headers)

    assert first.json()["completed"] is True
    assert second.json()["completed"] is False


def test_delete_task(client, auth_headers, add_task) -> None:
    task = add_task()

    response = client.delete(f"{TASKS}{task['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert client.get(f"{TASKS}{task['id']}", headers=auth_headers).status_code == 404


def test_view_and_stats(client, auth_headers, add_task) -> None:
    report = add_task("draft report", category="work")
    invoice = add_task("send invoice", category="work")
    run = add_task("run 5k", category="health")
    client.post(f"{TASKS}{invoice['id']}/toggle", headers=auth_headers)

    stats = client.get(f"{TASKS}stats", headers=auth_headers).json()
    assert stats["total"] == 3
    assert stats["completed"] == 1
    assert stats["pending"] == 2
    assert stats["completion_rate"] == pytest.approx(100 / 3)

    def view_ids(key: str) -> set:
        body = client.get(f"{TASKS}view", params={"filter": key}, headers=auth_headers).json()
        assert body["filter"] == key
        assert body["stats"] == stats
        return {t["id"] for t in body["tasks"]}

    assert view_ids("work") == {report["id"]}
    assert view_ids("completed") == {invoice["id"]}
    assert view_ids("all") == {report["id"], run["id"]}
    assert view_ids("shopping") == set()


def test_view_defaults_to_all(client, auth_headers, add_task) -> None:
    add_task("a")
    body = client.get(f"{TASKS}view", headers=auth_headers).json()
    assert body["filter"] == "all"
    assert len(body["tasks"]) == 1


def test_view_rejects_unknown_filter(client, auth_headers) -> None:
    response = client.get(f"{TASKS}view", params={"filter": "someday"}, headers=auth_headers)
    assert response.status_code == 422


def test_stats_for_empty_list(client, auth_headers) -> None:
    stats = client.get(f"{TASKS}stats", headers=auth_headers).json()
    assert stats == {"total": 0, "completed": 0, "pending": 0, "completion_rate": 0.0}


def test_categories(client) -> None:
    categories = client.get("/api/v1/categories/").json()
    assert [c["id"] for c in categories] == ["personal", "work", "shopping", "health", "other"]
    assert categories[1] == {"id": "work", "label": "Work", "icon": "briefcase", "color": "#4ECDC4"}

    filters = client.get("/api/v1/categories/filters").json()
    assert [f["id"] for f in filters] == ["all", "personal", "work", "shopping", "health", "other", "completed"]
