"""External programs launched from the browser: session resume and editor.

Both run in the foreground with the terminal handed over (the caller makes
sure the TUI is gone or suspended first) and report the child's exit code.
"""

from __future__ import annotations

import logging
import shlex
import subprocess

logger = logging.getLogger(__name__)


def build_resume_argv(command: str, session_id: str) -> list[str]:
    return [*shlex.split(command), "--resume", session_id]


def build_editor_argv(editor: str, path: str) -> list[str]:
    return [*shlex.split(editor), path]


def _run(argv: list[str]) -> int:
    logger.info("running %s", shlex.join(argv))
    try:
        completed = subprocess.run(argv, check=False)
    except FileNotFoundError:
        logger.error("command not found: %s", argv[0])
        return 127
    except OSError as e:
        logger.error("failed to launch %s: %s", argv[0], e)
        return 1
    return completed.returncode


def resume_session(session_id: str, command: str) -> int:
    """Run ``<command> --resume <session_id>`` and return its exit code."""
    return _run(build_resume_argv(command, session_id))


def open_in_editor(path: str, editor: str) -> int:
    """Open ``path`` in ``editor`` (a command line, e.g. "code -w")."""
    return _run(build_editor_argv(editor, path))
