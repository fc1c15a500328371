"""Collapse a flat message stream into display groups.

Rules, applied left to right:
- every user message is its own group and closes the pending assistant run
- consecutive assistant messages form a run
- in a run, everything up to the last tool_use message (extended through any
  thinking-only messages right after it) is one group; each message after
  that boundary stands alone
- a run without any tool_use yields one group per message

Tool chains are scaffolding and start collapsed; the natural-language reply
that follows them stands alone and starts expanded.

// [LAW:dataflow-not-control-flow] group_messages() is a pure function:
//   messages in, groups out. Same input, same boundaries.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Sequence

from cc_history.core.content import (
    Message,
    TextBlock,
    ToolUseBlock,
    extract_text,
    has_collapsible_content,
    has_text,
    has_tool_use,
    is_thinking_only,
    tool_uses,
)


class GroupKind(Enum):
    USER = "user"
    TOOL_RUN = "tool_run"  # run start through the operating boundary
    SOLO = "solo"  # assistant message standing alone


@dataclass(frozen=True)
class MessageGroup:
    kind: GroupKind
    members: tuple[tuple[int, Message], ...]

    def __post_init__(self):
        if not self.members:
            raise ValueError("MessageGroup must not be empty")

    @property
    def indices(self) -> tuple[int, ...]:
        return tuple(i for i, _ in self.members)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(m for _, m in self.members)

    @property
    def first_index(self) -> int:
        return self.members[0][0]

    def __len__(self) -> int:
        return len(self.members)


def _operating_boundary(run: Sequence[tuple[int, Message]]) -> int | None:
    """Run-relative index of the last message merged into the tool group."""
    last_tool = None
    for k in range(len(run) - 1, -1, -1):
        if has_tool_use(run[k][1]):
            last_tool = k
            break
    if last_tool is None:
        return None

    boundary = last_tool
    for k in range(last_tool + 1, len(run)):
        if not is_thinking_only(run[k][1]):
            break
        boundary = k
    return boundary


def _flush_run(run: list[tuple[int, Message]], groups: list[MessageGroup]) -> None:
    if not run:
        return
    boundary = _operating_boundary(run)
    if boundary is None:
        groups.extend(MessageGroup(GroupKind.SOLO, (pair,)) for pair in run)
    else:
        groups.append(MessageGroup(GroupKind.TOOL_RUN, tuple(run[: boundary + 1])))
        groups.extend(MessageGroup(GroupKind.SOLO, (pair,)) for pair in run[boundary + 1:])
    run.clear()


def group_messages(messages: Sequence[Message]) -> list[MessageGroup]:
    """Partition messages into ordered display groups."""
    groups: list[MessageGroup] = []
    run: list[tuple[int, Message]] = []

    for index, message in enumerate(messages):
        if message.type == "user":
            _flush_run(run, groups)
            groups.append(MessageGroup(GroupKind.USER, ((index, message),)))
        else:
            run.append((index, message))
    _flush_run(run, groups)
    return groups


# ─── Summaries ───────────────────────────────────────────────────────────────


def truncate(text: str | None, max_len: int = 50) -> str:
    """Single-line text, cut to max_len with a trailing '...'."""
    if not text:
        return ""
    single = text.replace("\n", " ").strip()
    if len(single) <= max_len:
        return single
    return single[: max(0, max_len - 3)] + "..."


def summarize_tool_input(value: object, max_len: int = 200) -> str:
    """Most telling field of a tool input, falling back to JSON."""
    if not value:
        return ""
    if isinstance(value, str):
        return truncate(value, max_len)
    if isinstance(value, dict):
        for key in ("command", "file_path", "pattern", "query"):
            if value.get(key):
                return truncate(str(value[key]), max_len)
    try:
        dumped = json.dumps(value, indent=2)
    except (TypeError, ValueError):
        dumped = str(value)
    return truncate(dumped, max_len)


def content_summary(message: Message) -> str:
    for block in message.blocks:
        if isinstance(block, TextBlock) and block.text:
            return block.text
    for block in message.blocks:
        if isinstance(block, ToolUseBlock):
            return f"[Tool: {block.name}]"
    return "[...]"


def message_summary(message: Message) -> str:
    if message.type == "user":
        return f"You: {truncate(extract_text(message.content), 60)}"
    return truncate(content_summary(message), 70)


def group_summary(group: MessageGroup) -> str:
    if len(group) == 1:
        return message_summary(group.messages[0])
    tool_count = sum(1 for m in group.messages if has_tool_use(m))
    if tool_count:
        first_tool = next(t for m in group.messages for t in tool_uses(m))
        plural = "s" if tool_count > 1 else ""
        more = ", ..." if tool_count > 1 else ""
        return f"[{tool_count} tool{plural}: {first_tool.name}{more}]"
    return f"[{len(group)} messages]"


# ─── List projection ─────────────────────────────────────────────────────────


class ItemKind(Enum):
    USER = "user"
    INTERMEDIATE = "intermediate"
    FINAL = "final"
    GROUP_HEADER = "group-header"


@dataclass(frozen=True)
class ListItem:
    kind: ItemKind
    group: MessageGroup
    agent_id: str | None = None

    @property
    def key(self) -> int:
        """Stable identity: index of the group's first message."""
        return self.group.first_index

    @property
    def summary(self) -> str:
        return group_summary(self.group)


def _item_kind(group: MessageGroup) -> ItemKind:
    if group.kind is GroupKind.USER:
        return ItemKind.USER
    if len(group) > 1:
        return ItemKind.GROUP_HEADER
    if group.kind is GroupKind.TOOL_RUN:
        return ItemKind.INTERMEDIATE
    return ItemKind.FINAL


def build_list_items(
    groups: Sequence[MessageGroup],
    sidechain_links: Mapping[int, str] | None = None,
) -> list[ListItem]:
    """Project groups into selectable items, attaching sidechain agent ids.

    A group with several linked messages exposes the first link.
    """
    links = sidechain_links or {}
    items: list[ListItem] = []
    for group in groups:
        agent_id = next((links[i] for i in group.indices if i in links), None)
        items.append(ListItem(_item_kind(group), group, agent_id))
    return items


def default_collapsed(item: ListItem) -> bool:
    if item.kind in (ItemKind.GROUP_HEADER, ItemKind.INTERMEDIATE):
        return True
    if item.kind is ItemKind.USER:
        return False
    message = item.group.messages[0]
    return has_collapsible_content(message) and not has_text(message)
