import hmac
import uuid
from datetime import datetime

from werkzeug.security import check_password_hash

from .errors import ValidationError

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

# Prefixes produced by werkzeug.security.generate_password_hash
HASH_PREFIXES = ("scrypt:", "pbkdf2:")


def new_id():
    return str(uuid.uuid4())


# Users

def public_user(user):
    """Copy of a stored user without the password; tasks default to []."""
    data = {k: v for k, v in user.items() if k != "password"}
    data["tasks"] = data.get("tasks") or []
    return data


def verify_password(stored, given):
    if not stored or not isinstance(given, str):
        return False
    if stored.startswith(HASH_PREFIXES):
        return check_password_hash(stored, given)
    return hmac.compare_digest(stored.encode("utf-8"), given.encode("utf-8"))


def same_id(a, b):
    # Seed files may carry numeric ids
    return str(a) == str(b)


# Tasks

def compute_percentage(sub_tasks):
    """Rounded share of completed subtasks, 0 for an empty list.

    Halves round up: 1 of 8 gives 13, 2 of 3 gives 67.
    """
    total = len(sub_tasks)
    if total == 0:
        return 0
    done = sum(1 for st in sub_tasks if st.get("completed"))
    return (200 * done + total) // (2 * total)


def _clean_text(value):
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value.strip()


def normalize_subtask(raw):
    if not isinstance(raw, dict):
        raise ValidationError("Each subtask must be an object")
    return {
        "id": raw.get("id") or new_id(),
        "title": _clean_text(raw.get("title")),
        "description": _clean_text(raw.get("description")),
        "completed": bool(raw.get("completed")),
    }


def normalize_subtasks(raw):
    if not isinstance(raw, list):
        return []
    return [normalize_subtask(st) for st in raw]


def require_title(title):
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required")
    return title.strip()


def _check_format(value, fmt, field):
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {field}")
    try:
        datetime.strptime(value, fmt)
    except ValueError:
        raise ValidationError(f"Invalid {field}") from None
    return value


def new_task(title, date=None, time=None, icon=None, now=None):
    now = now or datetime.now()
    task = {
        "id": new_id(),
        "title": require_title(title),
        "subTasks": [],
        "percentage": 0,
        "date": _check_format(date, DATE_FORMAT, "date") if date else now.strftime(DATE_FORMAT),
        "time": _check_format(time, TIME_FORMAT, "time") if time else now.strftime(TIME_FORMAT),
    }
    if icon:
        task["icon"] = icon
    return task


def merge_task(original, updates):
    """Apply a partial update to a stored task.

    The stored id always wins and the percentage is recomputed from the
    normalised subtasks, whatever the body says.
    """
    if not isinstance(updates, dict):
        raise ValidationError("Invalid update payload")
    merged = {**original, **updates}
    merged["id"] = original["id"]
    if "title" in updates:
        merged["title"] = require_title(updates["title"])
    # Echoed-back stored values are accepted as-is
    if "date" in updates and updates["date"] != original.get("date"):
        _check_format(updates["date"], DATE_FORMAT, "date")
    if "time" in updates and updates["time"] != original.get("time"):
        _check_format(updates["time"], TIME_FORMAT, "time")
    sub_tasks = updates.get("subTasks")
    if sub_tasks is None:
        sub_tasks = original.get("subTasks")
    merged["subTasks"] = normalize_subtasks(sub_tasks)
    merged["percentage"] = compute_percentage(merged["subTasks"])
    return merged
