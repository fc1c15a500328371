"""Centralized logging bootstrap for cc-history runtime.

// [LAW:single-enforcer] Logger handler wiring is enforced in this module only.
// [LAW:one-source-of-truth] Runtime log path/level are derived here and returned to callers.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator


@dataclass(frozen=True)
class LoggingRuntime:
    """Resolved runtime logging configuration."""

    level_name: str
    level: int
    file_path: str


_RUNTIME: LoggingRuntime | None = None

# While the TUI owns the terminal, stderr writes would corrupt the screen.
_console_suspended = False


def _parse_level(raw: str) -> tuple[str, int]:
    normalized = str(raw or "INFO").strip().upper()
    level = getattr(logging, normalized, logging.INFO)
    level_name = logging.getLevelName(level)
    return str(level_name), int(level)


def _default_log_path() -> str:
    log_dir = Path(
        os.environ.get("CC_HISTORY_LOG_DIR", os.path.expanduser("~/.local/share/cc-history/logs"))
    )
    log_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return str(log_dir / f"cc-history-{ts}-{os.getpid()}.log")


def _make_stream_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
    handler.addFilter(lambda record: not _console_suspended)
    return handler


def _make_file_handler(level: int, file_path: str) -> logging.Handler:
    handler = RotatingFileHandler(
        file_path,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def configure() -> LoggingRuntime:
    """Configure cc_history logger hierarchy with stderr + rotating file handlers.

    Idempotent: repeated calls return the originally configured runtime.
    """
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    level_name, level = _parse_level(os.environ.get("CC_HISTORY_LOG_LEVEL", "INFO"))
    file_path = os.environ.get("CC_HISTORY_LOG_FILE") or _default_log_path()
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("cc_history")
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()
    # Console shows warnings only; the file gets the configured level.
    logger.addHandler(_make_stream_handler(max(level, logging.WARNING)))
    logger.addHandler(_make_file_handler(level, file_path))

    # Keep third-party logging quiet unless it is warning+.
    root = logging.getLogger()
    if root.level > logging.WARNING:
        root.setLevel(logging.WARNING)

    logging.captureWarnings(True)

    _RUNTIME = LoggingRuntime(level_name=level_name, level=level, file_path=file_path)
    return _RUNTIME


def get_runtime() -> LoggingRuntime | None:
    """Return configured logging runtime, if configure() has run."""
    return _RUNTIME


@contextmanager
def suspend_console() -> Iterator[None]:
    """Silence the stderr handler for the duration of the block."""
    global _console_suspended
    previous = _console_suspended
    _console_suspended = True
    try:
        yield
    finally:
        _console_suspended = previous
