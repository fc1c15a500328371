"""Navigation stack for the detail view.

Each entry is one opened conversation (the top-level one, then any sidechains
descended into). Only the top entry is live; entries below it keep a frozen
ViewportState and collapse overrides, restored when the user comes back.

// [LAW:one-source-of-truth] Per-level view state lives on NavigationEntry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from cc_history.core.grouping import ListItem, MessageGroup, build_list_items, group_messages
from cc_history.core.index import find_sidechain_file
from cc_history.core.transcript import (
    ConversationLoadError,
    ConversationSummary,
    ParsedConversation,
    load_conversation,
)
from cc_history.core.viewport import ViewportState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationTarget:
    """What to open: a top-level conversation or a sidechain file."""

    file_path: str
    title: str
    project_name: str
    session_id: str
    agent_id: str | None = None

    @property
    def is_sidechain(self) -> bool:
        return self.agent_id is not None

    @classmethod
    def from_summary(cls, conv: ConversationSummary) -> "ConversationTarget":
        return cls(
            file_path=conv.file_path,
            title=conv.title,
            project_name=conv.project_name,
            session_id=conv.session_id,
        )


@dataclass(frozen=True)
class LoadedConversation:
    """Messages of one conversation grouped into selectable items."""

    parsed: ParsedConversation | None
    groups: tuple[MessageGroup, ...] = ()
    items: tuple[ListItem, ...] = ()
    error: str | None = None


def build_view(parsed: ParsedConversation) -> LoadedConversation:
    groups = group_messages(parsed.messages)
    items = build_list_items(groups, parsed.sidechain_links)
    return LoadedConversation(parsed=parsed, groups=tuple(groups), items=tuple(items))


def load_view(target: ConversationTarget) -> LoadedConversation:
    """Load and group a conversation; a read failure becomes ``error``."""
    try:
        parsed = load_conversation(target.file_path)
    except ConversationLoadError as e:
        logger.warning("conversation failed to load: %s", e)
        return LoadedConversation(parsed=None, error=e.reason)
    return build_view(parsed)


@dataclass
class NavigationEntry:
    target: ConversationTarget
    saved_state: ViewportState | None = None
    saved_heights: dict[int, int] = field(default_factory=dict)  # measured heights behind saved_state
    collapsed: dict[int, bool] = field(default_factory=dict)  # ListItem.key → collapsed
    conversation: LoadedConversation | None = None


class NavigationStack:
    def __init__(self):
        self._entries: list[NavigationEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def top(self) -> NavigationEntry | None:
        return self._entries[-1] if self._entries else None

    @property
    def depth(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[NavigationEntry, ...]:
        return tuple(self._entries)

    def reset(self, target: ConversationTarget) -> NavigationEntry:
        """Open a conversation from the index: any previous levels are dropped."""
        self._entries = [NavigationEntry(target)]
        return self._entries[0]

    def push(
        self,
        target: ConversationTarget,
        current_state: ViewportState | None = None,
        heights: dict[int, int] | None = None,
    ) -> NavigationEntry:
        if self._entries:
            self._entries[-1].saved_state = current_state
            self._entries[-1].saved_heights = dict(heights or {})
        entry = NavigationEntry(target)
        self._entries.append(entry)
        return entry

    def pop(self) -> NavigationEntry | None:
        """Drop the top entry. Returns the new top, or None to go back to the index."""
        if not self._entries:
            raise IndexError("pop from empty navigation stack")
        self._entries.pop()
        return self.top

    def descend(
        self,
        agent_id: str,
        current_state: ViewportState | None = None,
        heights: dict[int, int] | None = None,
    ) -> NavigationEntry | None:
        """Push the sidechain for ``agent_id``; None (no-op) if it has no file."""
        top = self.top
        if top is None:
            return None
        sidechain = find_sidechain_file(top.target.file_path, agent_id)
        if sidechain is None:
            logger.debug("no sidechain file for agent %s", agent_id)
            return None
        target = ConversationTarget(
            file_path=str(sidechain),
            title=f"Agent {agent_id}",
            project_name=top.target.project_name,
            session_id=top.target.session_id,
            agent_id=agent_id,
        )
        return self.push(target, current_state, heights)

    def breadcrumb(self) -> str:
        return " › ".join(
            Path(e.target.file_path).stem if e.target.is_sidechain else e.target.project_name
            for e in self._entries
        )
