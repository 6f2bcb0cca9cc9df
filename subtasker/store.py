import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path

from .errors import StorageError
from .model import same_id

logger = logging.getLogger(__name__)


class UserStore:
    """All users, with their tasks embedded, in one JSON array on disk.

    Every mutation rewrites the whole file. Read-modify-write cycles are
    serialised by a process-wide lock and the file is replaced atomically;
    writers in other processes are not coordinated.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.RLock()

    def initialize(self):
        """Create the file as an empty array if it does not exist yet."""
        with self._lock:
            if self.path.exists():
                return False
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.write_users([])
            logger.info("Created user store %s", self.path)
            return True

    def read_users(self):
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                users = json.load(fh)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            logger.error("Error reading users from %s: %s", self.path, exc)
            raise StorageError("Failed to read user store") from exc
        if not isinstance(users, list):
            raise StorageError("User store is not a JSON array")
        return users

    def write_users(self, users):
        tmp = None
        try:
            fd, tmp = tempfile.mkstemp(prefix=".users-", suffix=".json", dir=str(self.path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(users, fh, indent=2)
            os.replace(tmp, self.path)
        except OSError as exc:
            logger.error("Error writing users to %s: %s", self.path, exc)
            if tmp and os.path.exists(tmp):
                os.unlink(tmp)
            raise StorageError("Failed to write user store") from exc

    @contextmanager
    def transaction(self):
        """Yield the full user list; persist it if the block exits cleanly."""
        with self._lock:
            users = self.read_users()
            yield users
            self.write_users(users)

    def find_user(self, user_id):
        for user in self.read_users():
            if same_id(user.get("id"), user_id):
                return user
        return None

    def find_by_email(self, email):
        for user in self.read_users():
            if user.get("email") == email:
                return user
        return None

    def add_user(self, user):
        with self.transaction() as users:
            if any(u.get("email") == user["email"] for u in users):
                raise ValueError(f"A user with email {user['email']} already exists")
            users.append(user)
        return user
