"""Conversation log parsing.

Each conversation is an append-only JSONL file. Lines are decoded one at a
time; a line that is not a JSON object is skipped so that a single torn or
corrupt write never hides the rest of the file.

Two entry points share one event filter:
- load_conversation(): full message stream plus sidechain links (detail view)
- summarize_conversation(): metadata only, no content blocks built (index)

// [LAW:single-enforcer] _StreamFilter is the only place that decides which
//   events become messages; the index count and the detail view agree.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from cc_history.core.content import Message, extract_text, parse_content
from cc_history.io.paths import project_display_name

logger = logging.getLogger(__name__)


class ConversationLoadError(Exception):
    """A conversation file could not be read."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


# User turns that carry these markers are slash-command plumbing; the
# assistant reply that follows them is hidden too.
HIDDEN_COMMAND_MARKERS = (
    "<command-name>/release-notes</command-name>",
    "<local-command-stdout>",
)

_CAVEAT_RE = re.compile(r"^Caveat:.*?unless the user explicitly asks you to\.", re.DOTALL)
_STRIPPED_TAGS = (
    "system-reminder",
    "command-name",
    "command-message",
    "command-args",
    "local-command-stdout",
)
_TAG_RES = tuple(re.compile(rf"<{tag}>.*?</{tag}>", re.DOTALL) for tag in _STRIPPED_TAGS)


def clean_user_message(text: str) -> str | None:
    """Strip system-generated preambles and wrappers from a user message.

    Returns None when nothing the user actually typed remains.
    """
    result = text
    m = _CAVEAT_RE.match(result)
    if m:
        result = result[m.end():]
    for pattern in _TAG_RES:
        result = pattern.sub("", result)
    result = result.strip()
    return result or None


def is_hidden_command(text: str) -> bool:
    return any(marker in text for marker in HIDDEN_COMMAND_MARKERS)


# ─── Line decoding ───────────────────────────────────────────────────────────


def iter_events(path: Path | str) -> Iterator[dict]:
    """Yield decoded JSON objects from a JSONL file.

    Raises OSError if the file cannot be opened or read.
    """
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError as e:
                logger.debug("skipping malformed line %s:%d: %s", path, lineno, e)
                continue
            if isinstance(event, dict):
                yield event


def _message_of(event: dict) -> dict:
    msg = event.get("message")
    return msg if isinstance(msg, dict) else {}


def _agent_id_of(event: dict) -> str | None:
    result = event.get("toolUseResult")
    if isinstance(result, dict):
        agent_id = result.get("agentId")
        if agent_id:
            return str(agent_id)
    return None


# ─── Stream filter ───────────────────────────────────────────────────────────


@dataclass
class _StreamFilter:
    """Decides, event by event, which user/assistant events are emitted.

    Tracks the hidden-command suppression flag and the index of the last
    emitted assistant message (the anchor for sidechain links).
    """

    emitted: int = 0
    last_assistant_index: int | None = None
    suppress_next_assistant: bool = False
    links: dict[int, str] = field(default_factory=dict)
    agent_ids: list[str] = field(default_factory=list)

    def accept(self, event: dict) -> str | None:
        """Return the user text (for user events) or "" (assistant) if emitted, else None."""
        kind = event.get("type")
        if kind not in ("user", "assistant"):
            return None

        if kind == "user":
            agent_id = _agent_id_of(event)
            if agent_id is not None:
                self._link(agent_id)

        if event.get("isMeta") or not _message_of(event):
            return None

        if kind == "assistant":
            if self.suppress_next_assistant:
                self.suppress_next_assistant = False
                return None
            self.last_assistant_index = self.emitted
            self.emitted += 1
            return ""

        text = extract_text(_message_of(event).get("content"))
        if is_hidden_command(text):
            self.suppress_next_assistant = True
            return None
        self.suppress_next_assistant = False
        if not text.strip():
            # Tool approvals / tool results carry no text of their own.
            return None
        self.emitted += 1
        return text

    def _link(self, agent_id: str) -> None:
        if agent_id not in self.agent_ids:
            self.agent_ids.append(agent_id)
        if self.last_assistant_index is None:
            logger.debug("agent %s reported before any assistant message", agent_id)
            return
        self.links[self.last_assistant_index] = agent_id


# ─── Full load ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ParsedConversation:
    messages: tuple[Message, ...]
    sidechain_links: dict[int, str]
    agent_ids: tuple[str, ...] = ()
    is_sidechain: bool = False


def parse_events(events) -> ParsedConversation:
    """Build the message stream from already-decoded events."""
    stream = _StreamFilter()
    messages: list[Message] = []
    is_sidechain = False

    for event in events:
        if event.get("isSidechain"):
            is_sidechain = True
        if stream.accept(event) is None:
            continue
        msg = _message_of(event)
        model = msg.get("model")
        messages.append(
            Message(
                type=event["type"],
                content=parse_content(msg.get("content")),
                timestamp=event.get("timestamp"),
                model=str(model) if model else None,
            )
        )

    return ParsedConversation(
        messages=tuple(messages),
        sidechain_links=dict(stream.links),
        agent_ids=tuple(stream.agent_ids),
        is_sidechain=is_sidechain,
    )


def load_conversation(path: Path | str) -> ParsedConversation:
    """Load one conversation file into messages and sidechain links.

    Raises ConversationLoadError if the file cannot be read.
    """
    try:
        return parse_events(iter_events(path))
    except OSError as e:
        raise ConversationLoadError(path, e.strerror or str(e)) from e


# ─── Summary ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ConversationSummary:
    id: str
    file_path: str
    project_path: str
    project_name: str
    session_id: str
    summary: str | None
    first_user_message: str | None
    last_user_message: str | None
    first_timestamp: str | None
    last_timestamp: str | None
    message_count: int
    agent_ids: tuple[str, ...] = ()

    @property
    def title(self) -> str:
        return self.summary or "Conversation"


def summarize_events(events, file_path: Path | str, fallback_project_path: str) -> ConversationSummary | None:
    """Summarize decoded events. Returns None for sidechain conversations."""
    path = Path(file_path)
    stream = _StreamFilter()
    first_ts = last_ts = session_id = explicit_summary = cwd = None
    first_user = last_user = None

    for event in events:
        if event.get("isSidechain"):
            return None

        ts = event.get("timestamp")
        if ts:
            first_ts = first_ts or str(ts)
            last_ts = str(ts)
        if event.get("sessionId") and not session_id:
            session_id = str(event["sessionId"])
        if event.get("cwd") and not cwd:
            cwd = str(event["cwd"])
        if event.get("type") == "summary" and event.get("summary"):
            explicit_summary = str(event["summary"])

        text = stream.accept(event)
        if text:
            cleaned = clean_user_message(text)
            if cleaned:
                first_user = first_user or cleaned
                last_user = cleaned

    project_path = cwd or fallback_project_path
    return ConversationSummary(
        id=path.stem,
        file_path=str(path),
        project_path=project_path,
        project_name=project_display_name(project_path),
        session_id=session_id or path.stem,
        summary=explicit_summary or first_user,
        first_user_message=first_user,
        last_user_message=last_user,
        first_timestamp=first_ts,
        last_timestamp=last_ts,
        message_count=stream.emitted,
        agent_ids=tuple(stream.agent_ids),
    )


def summarize_conversation(path: Path | str, fallback_project_path: str) -> ConversationSummary | None:
    """Summarize one conversation file; None for sidechains and unreadable files."""
    try:
        return summarize_events(iter_events(path), path, fallback_project_path)
    except OSError as e:
        logger.warning("skipping unreadable conversation %s: %s", path, e)
        return None
