"""Typed content model for conversation messages.

Raw message content in the event log is either a plain string or a list of
JSON blocks discriminated by ``type``. parse_content() converts the list form
into a closed set of frozen dataclasses so callers dispatch with isinstance
instead of probing dict keys.

// [LAW:one-source-of-truth] Block kinds and text extraction live here only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union


@dataclass(frozen=True)
class TextBlock:
    text: str


@dataclass(frozen=True)
class ThinkingBlock:
    thinking: str


@dataclass(frozen=True)
class ToolUseBlock:
    name: str
    input: object = None
    id: str = ""


@dataclass(frozen=True)
class ToolResultBlock:
    """Parsed only to discover sub-agent ids; never displayed."""

    tool_use_id: str = ""
    agent_id: str | None = None


ContentBlock = Union[TextBlock, ThinkingBlock, ToolUseBlock, ToolResultBlock]
Content = Union[str, tuple[ContentBlock, ...]]

MessageType = Literal["user", "assistant"]


@dataclass(frozen=True)
class Message:
    type: MessageType
    content: Content = ""
    timestamp: str | None = None
    model: str | None = None
    blocks: tuple[ContentBlock, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Uniform block view: a plain string behaves like a single text block.
        if isinstance(self.content, str):
            blocks: tuple[ContentBlock, ...] = (TextBlock(self.content),) if self.content else ()
        else:
            blocks = tuple(self.content)
        object.__setattr__(self, "blocks", blocks)


def _parse_block(raw: object) -> ContentBlock | None:
    if not isinstance(raw, dict):
        return None
    kind = raw.get("type")
    if kind == "text":
        return TextBlock(str(raw.get("text") or ""))
    if kind == "thinking":
        return ThinkingBlock(str(raw.get("thinking") or ""))
    if kind == "tool_use":
        return ToolUseBlock(
            name=str(raw.get("name") or "unknown"),
            input=raw.get("input"),
            id=str(raw.get("id") or ""),
        )
    if kind == "tool_result":
        agent_id = raw.get("agentId")
        return ToolResultBlock(
            tool_use_id=str(raw.get("tool_use_id") or ""),
            agent_id=str(agent_id) if agent_id else None,
        )
    # Images and unknown kinds have no display or grouping role.
    return None


def parse_content(raw: object) -> Content:
    """Convert raw ``message.content`` into a str or a tuple of blocks."""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        blocks = (_parse_block(item) for item in raw)
        return tuple(b for b in blocks if b is not None)
    if raw is None:
        return ""
    return str(raw)


def extract_text(content: object, sep: str = " ") -> str:
    """Join the text blocks of raw or parsed content.

    Accepts both the raw JSON shape and parsed Content so the summarizer can
    skip building blocks.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, (list, tuple)):
        parts: list[str] = []
        for block in content:
            if isinstance(block, TextBlock):
                text = block.text
            elif isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text") or ""
            else:
                continue
            if text:
                parts.append(str(text))
        return sep.join(parts)
    if content is None:
        return ""
    return str(content)


def has_tool_use(message: Message) -> bool:
    if message.type == "user":
        return False
    return any(isinstance(b, ToolUseBlock) for b in message.blocks)


def has_text(message: Message) -> bool:
    return any(isinstance(b, TextBlock) and b.text.strip() for b in message.blocks)


def is_thinking_only(message: Message) -> bool:
    """Thinking present, and neither text nor tool_use."""
    if message.type == "user" or isinstance(message.content, str):
        return False
    kinds = {type(b) for b in message.blocks}
    return ThinkingBlock in kinds and TextBlock not in kinds and ToolUseBlock not in kinds


def has_collapsible_content(message: Message) -> bool:
    if message.type == "user":
        return False
    return any(isinstance(b, (ThinkingBlock, ToolUseBlock)) for b in message.blocks)


def tool_uses(message: Message) -> list[ToolUseBlock]:
    return [b for b in message.blocks if isinstance(b, ToolUseBlock)]
