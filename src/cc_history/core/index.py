"""Conversation index across all project directories.

Enumerates ``<projects_dir>/<encoded-project>/*.jsonl``, summarizes each file
and keeps the ones worth listing, newest first.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from cc_history.core.transcript import ConversationSummary, summarize_conversation
from cc_history.io.paths import decode_project_path, sidechain_filename

logger = logging.getLogger(__name__)

# First prompt of the warm-up probe some clients send on startup.
WARMUP_TOKEN = "warmup"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def is_warmup(conv: ConversationSummary) -> bool:
    first = (conv.first_user_message or "").strip().lower()
    return first == WARMUP_TOKEN and conv.message_count <= 2


def _timestamp_key(ts: str | None) -> datetime:
    if not ts:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _matches(conv: ConversationSummary, project_filter: str) -> bool:
    needle = project_filter.lower()
    return needle in conv.project_path.lower() or needle in conv.project_name.lower()


def _iter_project_dirs(root: Path):
    try:
        children = sorted(root.iterdir())
    except OSError as e:
        logger.warning("cannot list projects dir %s: %s", root, e)
        return
    for child in children:
        if child.is_dir():
            yield child


def _iter_conversation_files(project_dir: Path):
    try:
        files = sorted(project_dir.glob("*.jsonl"))
    except OSError as e:
        logger.warning("skipping inaccessible project dir %s: %s", project_dir, e)
        return
    yield from (f for f in files if f.is_file())


def load_conversations(
    projects_dir: str | Path,
    project_filter: Optional[str] = None,
) -> list[ConversationSummary]:
    """Load conversation summaries sorted by most recent activity.

    Sidechains, empty conversations and warm-up probes are dropped.
    Conversations with equal last timestamps are in undefined order.
    """
    root = Path(projects_dir).expanduser()
    conversations: list[ConversationSummary] = []
    if not root.is_dir():
        logger.info("projects dir %s does not exist", root)
        return conversations

    for project_dir in _iter_project_dirs(root):
        fallback_path = decode_project_path(project_dir.name)
        for file_path in _iter_conversation_files(project_dir):
            conv = summarize_conversation(file_path, fallback_path)
            if conv is None or conv.message_count == 0 or is_warmup(conv):
                continue
            if project_filter and not _matches(conv, project_filter):
                continue
            conversations.append(conv)

    conversations.sort(key=lambda c: _timestamp_key(c.last_timestamp), reverse=True)
    logger.info("indexed %d conversations under %s", len(conversations), root)
    return conversations


def find_sidechain_file(parent_file: str | Path, agent_id: str) -> Path | None:
    """Locate ``agent-<agent_id>.jsonl`` next to the parent conversation."""
    candidate = Path(parent_file).parent / sidechain_filename(agent_id)
    return candidate if candidate.is_file() else None
