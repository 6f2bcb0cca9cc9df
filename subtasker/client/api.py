"""HTTP client for the subtasker backend.

Every call mirrors its result into an ``AppStore``. Failures never raise to
the caller: they are logged, surfaced as a notification and recorded as the
tasks error, and the method returns ``None``. A 401 also drops the store
back to the anonymous state so the caller can show the login screen.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..model import compute_percentage, new_id
from . import views
from .state import AppStore

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001"


class ResponseError(Exception):
    """A 2xx response whose body is not what the endpoint returns."""


REQUEST_ERRORS = (httpx.HTTPError, ResponseError)


class TaskClient:
    def __init__(
        self,
        store: AppStore,
        base_url: str = DEFAULT_BASE_URL,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 10.0,
    ) -> None:
        self.store = store
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            transport=transport,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TaskClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ---- plumbing ----

    def _request(
        self, method: str, path: str, *, json: Any = None, key: Optional[str] = None
    ) -> dict[str, Any]:
        """Send a request and return its JSON object body.

        Raises httpx.HTTPError for transport and status failures and
        ResponseError when the body is not an object carrying ``key``.
        """
        response = self._client.request(method, path, json=json)
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError:
            raise ResponseError(f"{method} {path}: response is not JSON") from None
        if not isinstance(data, dict) or (key is not None and key not in data):
            raise ResponseError(f"{method} {path}: unexpected response body")
        return data

    @staticmethod
    def _error_message(response: httpx.Response, fallback: str) -> str:
        try:
            body = response.json()
        except ValueError:
            return fallback
        if isinstance(body, dict) and isinstance(body.get("error"), str):
            return body["error"] or fallback
        return fallback

    def _failed(self, exc: Exception, fallback: str) -> None:
        message = fallback
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            message = self._error_message(exc.response, fallback)
            logger.warning("%s: HTTP %s %s", fallback, status, message)
            if status == 401:
                self.store.logged_out()
        else:
            logger.warning("%s: %s", fallback, exc)
        self.store.set_error(message)
        self.store.notify("error", message)

    # ---- session ----

    def check_session(self) -> Optional[dict[str, Any]]:
        self.store.check_started()
        try:
            data = self._request("GET", "/api/check-session", key="user")
        except REQUEST_ERRORS as exc:
            logger.warning("Session check error: %s", exc)
            self.store.logged_out()
            self.store.notify("error", "Failed to verify session. Please log in.")
            return None
        user = data.get("user")
        if user:
            self.store.login_succeeded(user)
        else:
            self.store.logged_out()
            self.store.notify("error", "Please log in to sync tasks")
        return user

    def login(self, email: str, password: str, remember_me: bool = False) -> Optional[dict[str, Any]]:
        self.store.check_started()
        try:
            data = self._request(
                "POST",
                "/api/login",
                json={"email": email, "password": password, "rememberMe": remember_me},
                key="user",
            )
        except httpx.HTTPStatusError as exc:
            message = self._error_message(exc.response, "Login failed")
            self.store.login_failed(message)
            self.store.notify("error", message)
            return None
        except REQUEST_ERRORS as exc:
            logger.warning("Login error: %s", exc)
            self.store.login_failed("Login failed")
            self.store.notify("error", "Login failed")
            return None
        self.store.login_succeeded(data["user"])
        self.store.notify("success", "Login successful")
        return data["user"]

    def logout(self) -> None:
        try:
            self._request("POST", "/api/logout")
        except REQUEST_ERRORS as exc:
            logger.warning("Logout error: %s", exc)
            self.store.notify("error", "Failed to log out properly")
        else:
            self.store.notify("success", "Logged out successfully")
        # Cleared either way
        self.store.logged_out()

    # ---- tasks ----

    def fetch_tasks(self) -> Optional[list[dict[str, Any]]]:
        self.store.set_loading(True)
        try:
            data = self._request("GET", "/api/tasks", key="tasks")
        except REQUEST_ERRORS as exc:
            self._failed(exc, "Failed to fetch tasks")
            return None
        self.store.set_tasks(data["tasks"])
        return data["tasks"]

    def create_task(
        self,
        title: str,
        *,
        date: Optional[str] = None,
        time: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        body = {"title": title}
        for key, value in (("date", date), ("time", time), ("icon", icon)):
            if value:
                body[key] = value
        self.store.set_loading(True)
        try:
            data = self._request("POST", "/api/tasks", json=body, key="task")
        except REQUEST_ERRORS as exc:
            self._failed(exc, "Failed to create task")
            return None
        self.store.add_task(data["task"])
        self.store.set_loading(False)
        self.store.notify("success", "Task created")
        return data["task"]

    def update_task(self, task_id: str, changes: dict[str, Any]) -> Optional[dict[str, Any]]:
        self.store.set_loading(True)
        try:
            data = self._request("PUT", f"/api/tasks/{task_id}", json=changes, key="task")
        except REQUEST_ERRORS as exc:
            self._failed(exc, "Failed to save task")
            return None
        self.store.update_task(data["task"])
        self.store.set_loading(False)
        return data["task"]

    def delete_task(self, task_id: str) -> bool:
        self.store.set_loading(True)
        try:
            self._request("DELETE", f"/api/tasks/{task_id}")
        except REQUEST_ERRORS as exc:
            self._failed(exc, "Failed to delete task")
            return False
        self.store.delete_task(task_id)
        self.store.set_loading(False)
        self.store.notify("success", "Task deleted")
        return True

    # ---- subtasks (sent as a whole-task update) ----

    def _save_subtasks(
        self, task_id: str, subtasks: list[dict[str, Any]], message: str
    ) -> Optional[dict[str, Any]]:
        task = self.store.get_task(task_id)
        if task is None:
            self.store.notify("error", "Task not found. Cannot save changes.")
            return None
        body = {**task, "subTasks": subtasks, "percentage": compute_percentage(subtasks)}
        saved = self.update_task(task_id, body)
        if saved is not None:
            self.store.notify("success", message)
        return saved

    def _subtasks(self, task_id: str) -> list[dict[str, Any]]:
        task = self.store.get_task(task_id)
        return list(task.get("subTasks") or []) if task else []

    def add_subtask(self, task_id: str, title: str, description: str) -> Optional[dict[str, Any]]:
        subtask = {"id": new_id(), "title": title, "description": description, "completed": False}
        return self._save_subtasks(task_id, self._subtasks(task_id) + [subtask], "Subtask added")

    def edit_subtask(
        self, task_id: str, subtask_id: str, title: str, description: str
    ) -> Optional[dict[str, Any]]:
        if not title.strip() or not description.strip():
            self.store.notify("error", "Title and description are required")
            return None
        subtasks = [
            {**st, "title": title.strip(), "description": description.strip()}
            if st["id"] == subtask_id
            else st
            for st in self._subtasks(task_id)
        ]
        return self._save_subtasks(task_id, subtasks, "Subtask updated")

    def toggle_subtask(self, task_id: str, subtask_id: str) -> Optional[dict[str, Any]]:
        subtasks = [
            {**st, "completed": not st["completed"]} if st["id"] == subtask_id else st
            for st in self._subtasks(task_id)
        ]
        return self._save_subtasks(task_id, subtasks, "Subtask status updated")

    def delete_subtask(self, task_id: str, subtask_id: str) -> Optional[dict[str, Any]]:
        subtasks = [st for st in self._subtasks(task_id) if st["id"] != subtask_id]
        return self._save_subtasks(task_id, subtasks, "Subtask deleted")

    def reorder_subtasks(
        self, task_id: str, source: int, destination: Optional[int]
    ) -> Optional[dict[str, Any]]:
        if destination is None:
            return self.store.get_task(task_id)
        subtasks = self._subtasks(task_id)
        if not (0 <= source < len(subtasks) and 0 <= destination < len(subtasks)):
            self.store.notify("error", "Cannot move subtask: position out of range")
            return None
        subtasks = views.reorder(subtasks, source, destination)
        return self._save_subtasks(task_id, subtasks, "Subtasks reordered")
