import logging

from flask import Blueprint, g, jsonify, request

from .auth import login_required, services
from .errors import NotFound, UserNotFound
from .model import merge_task, new_task, same_id

logger = logging.getLogger(__name__)


class TaskRepository:
    """CRUD on one user's embedded ``tasks`` list.

    Each write loads every user, mutates the caller's tasks and writes the
    whole collection back through ``UserStore.transaction``.
    """

    def __init__(self, store):
        self.store = store

    @staticmethod
    def _locate(users, user_id):
        for user in users:
            if same_id(user.get("id"), user_id):
                return user
        raise UserNotFound()

    @staticmethod
    def _index(tasks, task_id):
        for i, task in enumerate(tasks):
            if task.get("id") == task_id:
                return i
        raise NotFound("Task not found")

    def list(self, user_id):
        user = self._locate(self.store.read_users(), user_id)
        return user.get("tasks") or []

    def create(self, user_id, title, date=None, time=None, icon=None):
        task = new_task(title, date=date, time=time, icon=icon)
        with self.store.transaction() as users:
            user = self._locate(users, user_id)
            user["tasks"] = (user.get("tasks") or []) + [task]
        logger.debug("Created task %s for user %s", task["id"], user_id)
        return task

    def update(self, user_id, task_id, updates):
        with self.store.transaction() as users:
            tasks = self._locate(users, user_id).setdefault("tasks", [])
            i = self._index(tasks, task_id)
            tasks[i] = merge_task(tasks[i], updates)
            updated = tasks[i]
        return updated

    def delete(self, user_id, task_id):
        with self.store.transaction() as users:
            tasks = self._locate(users, user_id).setdefault("tasks", [])
            del tasks[self._index(tasks, task_id)]
        logger.debug("Deleted task %s for user %s", task_id, user_id)


bp = Blueprint("tasks", __name__, url_prefix="/api/tasks")


def repository():
    return services()["tasks"]


@bp.route("", methods=["GET"])
@login_required
def list_tasks():
    return jsonify({"tasks": repository().list(g.user["id"])})


@bp.route("", methods=["POST"])
@login_required
def create_task():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    task = repository().create(
        g.user["id"],
        data.get("title"),
        date=data.get("date"),
        time=data.get("time"),
        icon=data.get("icon"),
    )
    return jsonify({"message": "Task created", "task": task}), 201


@bp.route("/<task_id>", methods=["PUT"])
@login_required
def update_task(task_id):
    task = repository().update(g.user["id"], task_id, request.get_json(silent=True))
    return jsonify({"message": "Task updated", "task": task})


@bp.route("/<task_id>", methods=["DELETE"])
@login_required
def delete_task(task_id):
    repository().delete(g.user["id"], task_id)
    return jsonify({"message": "Task deleted"})
