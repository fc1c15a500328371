"""Settings file I/O for cc-history.

Manages a JSON settings file at XDG_CONFIG_HOME/cc-history/settings.json.
Values resolved here: projects_dir, resume_command, editor.

Resolution order for each value: explicit argument (CLI) → environment →
settings file → built-in default.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

import cc_history.io.paths

DEFAULT_RESUME_COMMAND = "claude"
DEFAULT_EDITOR = "vi"


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / cc-history / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "cc-history" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def save_settings(data: dict) -> None:
    """Atomic write of settings dict to JSON file.

    Creates parent directories if needed. Writes to temp file then renames
    to avoid partial writes on crash.
    """
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def load_setting(key: str, default=None):
    """Load a single setting by key. Returns default if absent."""
    return load_settings().get(key, default)


def resolve_projects_dir(explicit: Optional[str] = None) -> str:
    candidate = (
        explicit
        or os.environ.get("CC_HISTORY_PROJECTS_DIR")
        or load_setting("projects_dir")
        or cc_history.io.paths.get_projects_dir()
    )
    return os.path.expanduser(str(candidate))


def resolve_resume_command() -> str:
    return str(load_setting("resume_command") or DEFAULT_RESUME_COMMAND)


def resolve_editor() -> str:
    """Editor command line: $VISUAL, $EDITOR, the editor setting, then vi."""
    return (
        os.environ.get("VISUAL")
        or os.environ.get("EDITOR")
        or str(load_setting("editor") or DEFAULT_EDITOR)
    )
