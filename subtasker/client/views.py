"""Pure derivations used while rendering: search, filters, colours, drag and
keyboard handling. Nothing here touches the store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, TypeVar

T = TypeVar("T")

STATUSES = ("all", "to do", "done")
HOME_LIST_LIMIT = 10


def _matches(title: str, query: str) -> bool:
    return query == "" or query.lower() in title.lower()


def filter_tasks(tasks: Sequence[dict[str, Any]], query: str) -> list[dict[str, Any]]:
    return [t for t in tasks if _matches(t.get("title", ""), query)]


def visible_tasks(
    tasks: Sequence[dict[str, Any]], query: str, limit: int = HOME_LIST_LIMIT
) -> list[dict[str, Any]]:
    return filter_tasks(tasks, query)[:limit]


def filter_subtasks(
    subtasks: Sequence[dict[str, Any]], query: str, status: str = "all"
) -> list[dict[str, Any]]:
    if status not in STATUSES:
        raise ValueError(f"Unknown status filter: {status!r}")

    def keep(st: dict[str, Any]) -> bool:
        if not _matches(st.get("title", ""), query):
            return False
        if status == "to do":
            return not st.get("completed")
        if status == "done":
            return bool(st.get("completed"))
        return True

    return [st for st in subtasks if keep(st)]


def clamp_percentage(percentage: float) -> float:
    return min(max(percentage, 0), 100)


def progress_color(percentage: float, threshold: int = 50) -> str:
    return "green" if percentage >= threshold else "red"


def reorder(items: Sequence[T], source: int, destination: Optional[int]) -> list[T]:
    """Move ``items[source]`` to ``destination``; a drop outside the list
    (``destination is None``) leaves the order unchanged."""
    result = list(items)
    if destination is None:
        return result
    moved = result.pop(source)
    result.insert(destination, moved)
    return result


# Keyboard navigation

ADD = "add"
TOGGLE = "toggle"
EDIT = "edit"
DELETE = "delete"


@dataclass(frozen=True)
class KeyOutcome:
    selected: int
    action: Optional[str] = None


def handle_key(key: str, selected: int, count: int, ctrl: bool = False) -> KeyOutcome:
    """Map a key press on the subtask list to a new selection and action.

    ``selected`` is -1 when nothing is highlighted; ``count`` is the number
    of subtasks currently visible after filtering.
    """
    if ctrl and key.lower() == "q":
        return KeyOutcome(selected, ADD)
    if selected < 0 or count == 0:
        return KeyOutcome(selected)
    if key == "ArrowUp" and selected > 0:
        return KeyOutcome(selected - 1)
    if key == "ArrowDown" and selected < count - 1:
        return KeyOutcome(selected + 1)
    if key == " ":
        return KeyOutcome(selected, TOGGLE)
    if key == "Enter" or key.lower() == "e":
        return KeyOutcome(selected, EDIT)
    if key == "Delete":
        return KeyOutcome(selected, DELETE)
    return KeyOutcome(selected)


def selection_after_delete(selected: int) -> int:
    return selected - 1 if selected > 0 else -1
