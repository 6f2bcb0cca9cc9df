from __future__ import annotations

import base64
import json
from pathlib import Path

from werkzeug.security import generate_password_hash

ALICE = {
    "id": "u-alice",
    "email": "alice@example.com",
    "password": "wonderland",
    "name": "Alice",
    "tasks": [],
}

# Numeric id and a hashed password, as written by older seeds and `flask add-user`
BOB = {
    "id": 2,
    "email": "bob@example.com",
    "password": generate_password_hash("builder"),
}


def read_users(path: Path) -> list:
    return json.loads(path.read_text(encoding="utf-8"))


def b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def session_cleared(response) -> bool:
    return any(
        h.startswith("session=;") and "Max-Age=0" in h for h in response.headers.getlist("Set-Cookie")
    )
