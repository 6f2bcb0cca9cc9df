from __future__ import annotations

import json
from pathlib import Path

import pytest

from subtasker import create_app

from .helpers import ALICE, BOB


@pytest.fixture()
def users_file(tmp_path: Path) -> Path:
    path = tmp_path / "users.json"
    path.write_text(json.dumps([ALICE, BOB], indent=2), encoding="utf-8")
    return path


@pytest.fixture()
def app(tmp_path: Path, users_file: Path):
    public = tmp_path / "public"
    (public / "assets").mkdir(parents=True)
    (public / "index.html").write_text("<html>subtasker</html>", encoding="utf-8")
    (public / "assets" / "app.js").write_text("console.log('hi')", encoding="utf-8")
    return create_app(
        {"TESTING": True, "USERS_FILE": str(users_file), "PUBLIC_DIR": str(public)},
        instance_path=str(tmp_path / "instance"),
    )


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def alice(client):
    """Test client logged in as Alice."""
    resp = client.post("/api/login", json={"email": ALICE["email"], "password": ALICE["password"]})
    assert resp.status_code == 200
    return client
