"""Dark-mode preference kept outside the state store, in a small JSON file."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)


def default_path() -> Path:
    """$SUBTASKER_PREFS, else preferences.json in the per-user config dir."""
    override = os.getenv("SUBTASKER_PREFS")
    if override:
        return Path(override).expanduser()
    return Path(user_config_dir("subtasker")) / "preferences.json"


class PreferenceFile:
    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else default_path()

    def load_dark_mode(self) -> bool:
        """Saved preference, or False when missing or unreadable."""
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return False
        except (OSError, ValueError) as exc:
            logger.error("Failed to parse preferences %s: %s", self.path, exc)
            return False
        value = data.get("darkMode") if isinstance(data, dict) else None
        return value if isinstance(value, bool) else False

    def save_dark_mode(self, dark_mode: bool) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps({"darkMode": dark_mode}), encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to save preferences %s: %s", self.path, exc)
