from __future__ import annotations

import json
import threading

import pytest

from subtasker.errors import NotFound, UserNotFound
from subtasker.store import UserStore
from subtasker.tasks import TaskRepository

from .helpers import ALICE, read_users


def _create(client, **body):
    resp = client.post("/api/tasks", json={"title": "Plan trip", **body})
    assert resp.status_code == 201
    return resp.get_json()["task"]


def test_create_then_list(alice, users_file) -> None:
    task = _create(alice, date="2025-03-04", time="18:30")
    assert task["title"] == "Plan trip"
    assert task["subTasks"] == []
    assert task["percentage"] == 0

    listed = alice.get("/api/tasks").get_json()["tasks"]
    assert [t["id"] for t in listed] == [task["id"]]
    assert listed[0] == task

    stored = next(u for u in read_users(users_file) if u["id"] == ALICE["id"])
    assert stored["tasks"] == [task]


def test_create_requires_title(alice) -> None:
    resp = alice.post("/api/tasks", json={"title": "   "})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Title is required"}
    assert alice.post("/api/tasks").status_code == 400


def test_create_rejects_malformed_date(alice) -> None:
    assert alice.post("/api/tasks", json={"title": "x", "date": "tomorrow"}).status_code == 400


def test_update_normalises_subtasks(alice, users_file) -> None:
    task = _create(alice)
    resp = alice.put(
        f"/api/tasks/{task['id']}",
        json={
            "id": "not-allowed",
            "title": " Plan trip to Rome ",
            "percentage": 5,
            "subTasks": [
                {"title": " book flights ", "description": " cheap ", "completed": "yes"},
                {"id": "keep-me", "title": "hotel", "description": "", "completed": False},
                {"id": "x", "title": "visa", "description": None, "completed": True},
            ],
        },
    )
    assert resp.status_code == 200
    updated = resp.get_json()["task"]
    assert updated["id"] == task["id"]
    assert updated["title"] == "Plan trip to Rome"
    assert updated["percentage"] == 67

    first, second, third = updated["subTasks"]
    assert first["id"]
    assert first["title"] == "book flights"
    assert first["description"] == "cheap"
    assert first["completed"] is True
    assert second["id"] == "keep-me"
    assert third["description"] == ""

    stored = next(u for u in read_users(users_file) if u["id"] == ALICE["id"])
    assert stored["tasks"][0]["subTasks"][0]["id"] == first["id"]


def test_update_without_subtasks_keeps_them(alice) -> None:
    task = _create(alice)
    alice.put(f"/api/tasks/{task['id']}", json={"subTasks": [{"title": "a", "description": "b", "completed": True}]})
    resp = alice.put(f"/api/tasks/{task['id']}", json={"icon": "data:image/png;base64,AA"})
    updated = resp.get_json()["task"]
    assert updated["icon"] == "data:image/png;base64,AA"
    assert len(updated["subTasks"]) == 1
    assert updated["percentage"] == 100


def test_update_errors(alice) -> None:
    task = _create(alice)
    assert alice.put("/api/tasks/missing", json={"title": "x"}).status_code == 404
    assert alice.put(f"/api/tasks/{task['id']}", json=["x"]).status_code == 400
    assert alice.put(f"/api/tasks/{task['id']}", json={"subTasks": ["x"]}).status_code == 400


def test_delete_twice(alice) -> None:
    task = _create(alice)
    first = alice.delete(f"/api/tasks/{task['id']}")
    assert first.get_json() == {"message": "Task deleted"}
    for _ in range(2):
        resp = alice.delete(f"/api/tasks/{task['id']}")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Task not found"}
    assert alice.get("/api/tasks").get_json() == {"tasks": []}


def test_tasks_are_per_user(client) -> None:
    client.post("/api/login", json={"email": "alice@example.com", "password": "wonderland"})
    task = _create(client)
    client.post("/api/login", json={"email": "bob@example.com", "password": "builder"})
    assert client.get("/api/tasks").get_json() == {"tasks": []}
    assert client.delete(f"/api/tasks/{task['id']}").status_code == 404


def test_storage_failure_is_500(alice, users_file) -> None:
    users_file.write_text("garbage")
    resp = alice.get("/api/tasks")
    assert resp.status_code == 500
    assert "error" in resp.get_json()


# Repository


@pytest.fixture()
def repo(users_file) -> TaskRepository:
    return TaskRepository(UserStore(users_file))


def test_repository_unknown_user(repo) -> None:
    with pytest.raises(UserNotFound):
        repo.create("ghost", "x")
    with pytest.raises(UserNotFound):
        repo.list("ghost")


def test_repository_numeric_ids(repo) -> None:
    task = repo.create("2", "from string id")
    assert repo.list(2) == [task]
    with pytest.raises(NotFound):
        repo.delete(2, "missing")


def test_concurrent_updates_are_not_lost(repo) -> None:
    ids = [repo.create(ALICE["id"], f"task {i}")["id"] for i in range(8)]
    errors = []

    def work(task_id: str) -> None:
        try:
            repo.update(ALICE["id"], task_id, {"subTasks": [{"title": task_id, "description": "d", "completed": True}]})
        except Exception as exc:  # pragma: no cover - surfaced below
            errors.append(exc)

    threads = [threading.Thread(target=work, args=(task_id,)) for task_id in ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert all(t["percentage"] == 100 for t in repo.list(ALICE["id"]))


def test_update_rejects_malformed_date(alice) -> None:
    task = _create(alice, date="2025-03-04")
    resp = alice.put(f"/api/tasks/{task['id']}", json={"date": "4 March"})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid date"}
    assert alice.get("/api/tasks").get_json()["tasks"][0]["date"] == "2025-03-04"


def test_list_reads_current_store(alice, users_file) -> None:
    task = _create(alice)
    users = read_users(users_file)
    next(u for u in users if u["id"] == ALICE["id"])["tasks"][0]["title"] = "Edited on disk"
    users_file.write_text(json.dumps(users), encoding="utf-8")
    listed = alice.get("/api/tasks").get_json()["tasks"]
    assert [(t["id"], t["title"]) for t in listed] == [(task["id"], "Edited on disk")]
