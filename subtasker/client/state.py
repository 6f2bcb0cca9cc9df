"""Client-side state container.

Three slices (auth, tasks, preference) live on one ``AppStore`` that callers
receive explicitly. State changes only through the action methods below;
subscribers are called after every action.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .preferences import PreferenceFile

Listener = Callable[["AppStore"], None]

IDLE = "idle"
CHECKING = "checking"
AUTHENTICATED = "authenticated"
ANONYMOUS = "anonymous"


@dataclass
class AuthState:
    status: str = IDLE
    user: Optional[dict[str, Any]] = None
    error: Optional[str] = None


@dataclass
class TaskState:
    tasks: list[dict[str, Any]] = field(default_factory=list)
    is_loading: bool = False
    error: Optional[str] = None
    search_query: str = ""


@dataclass
class PreferenceState:
    dark_mode: bool = False


@dataclass
class Notification:
    level: str
    message: str


class AppStore:
    def __init__(self, preferences: Optional[PreferenceFile] = None) -> None:
        self.preferences = preferences
        self.auth = AuthState()
        self.tasks = TaskState()
        self.preference = PreferenceState(
            dark_mode=preferences.load_dark_mode() if preferences else False
        )
        self.notifications: list[Notification] = []
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that removes it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    @property
    def is_authenticated(self) -> bool:
        return self.auth.status == AUTHENTICATED

    # ---- auth ----

    def check_started(self) -> None:
        self.auth.status = CHECKING
        self.auth.error = None
        self._changed()

    def login_succeeded(self, user: dict[str, Any]) -> None:
        self.auth = AuthState(status=AUTHENTICATED, user=user)
        self.tasks.tasks = list(user.get("tasks") or [])
        self.tasks.is_loading = False
        self.tasks.error = None
        self._changed()

    def login_failed(self, message: str) -> None:
        self.auth = AuthState(status=ANONYMOUS, error=message)
        self._changed()

    def logged_out(self) -> None:
        self.auth = AuthState(status=ANONYMOUS)
        self.tasks.tasks = []
        self._changed()

    # ---- tasks ----

    def set_tasks(self, tasks: list[dict[str, Any]]) -> None:
        self.tasks.tasks = list(tasks)
        self.tasks.is_loading = False
        self.tasks.error = None
        self._changed()

    def add_task(self, task: dict[str, Any]) -> None:
        self.tasks.tasks.append(task)
        self._changed()

    def update_task(self, task: dict[str, Any]) -> None:
        for i, existing in enumerate(self.tasks.tasks):
            if existing["id"] == task["id"]:
                self.tasks.tasks[i] = task
                break
        self._changed()

    def delete_task(self, task_id: str) -> None:
        self.tasks.tasks = [t for t in self.tasks.tasks if t["id"] != task_id]
        self._changed()

    def get_task(self, task_id: str) -> Optional[dict[str, Any]]:
        return next((t for t in self.tasks.tasks if t["id"] == task_id), None)

    def set_loading(self, loading: bool) -> None:
        self.tasks.is_loading = loading
        self._changed()

    def set_error(self, message: Optional[str]) -> None:
        self.tasks.error = message
        self.tasks.is_loading = False
        self._changed()

    def set_search_query(self, query: str) -> None:
        self.tasks.search_query = query.strip()
        self._changed()

    def clear_search_query(self) -> None:
        self.tasks.search_query = ""
        self._changed()

    # ---- preference ----

    def set_dark_mode(self, dark_mode: bool) -> None:
        self.preference.dark_mode = dark_mode
        if self.preferences is not None:
            self.preferences.save_dark_mode(dark_mode)
        self._changed()

    def toggle_dark_mode(self) -> None:
        self.set_dark_mode(not self.preference.dark_mode)

    # ---- notifications ----

    def notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level, message))
        self._changed()

    def drain_notifications(self) -> list[Notification]:
        pending, self.notifications = self.notifications, []
        return pending
