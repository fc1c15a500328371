"""Rich rendering for conversation rows and message items.

Converts index summaries and ListItems into Rich renderables, then into
Strip lists for the Line API widgets. The number of strips an item renders to
is its measured height.

# [LAW:single-enforcer] Collapsed/expanded presentation is decided here only.
# Widgets never inspect message content.
"""

from __future__ import annotations

from datetime import datetime, timezone

from rich.console import Console, Group, RenderableType
from rich.markdown import Markdown
from rich.segment import Segment
from rich.style import Style
from rich.text import Text
from textual.strip import Strip

from cc_history.core.content import (
    Message,
    TextBlock,
    ThinkingBlock,
    ToolUseBlock,
    extract_text,
)
from cc_history.core.grouping import (
    ItemKind,
    ListItem,
    content_summary,
    summarize_tool_input,
    truncate,
)
from cc_history.core.transcript import ConversationSummary

CODE_THEME = "monokai"

# Gutter: selection bar + one space.
GUTTER_WIDTH = 2
_GUTTER_SELECTED = Segment("▌ ", Style(color="bright_blue", bold=True))  # ▌
_GUTTER_PLAIN = Segment("  ")

USER_STYLE = Style(color="bright_cyan")
DIM_STYLE = Style(color="bright_black")
TOOL_STYLE = Style(color="bright_yellow", bold=True)
AGENT_MARK = "◆"  # ◆
COLLAPSED_MARK = "▸"  # ▸
EXPANDED_MARK = "▾"  # ▾


def format_timestamp(timestamp: str | None, now: datetime | None = None) -> str:
    """Relative day for recent timestamps, a date otherwise."""
    if not timestamp:
        return "unknown"
    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return timestamp
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone()
    now = (now or datetime.now(timezone.utc)).astimezone()
    diff_days = (now.date() - local.date()).days
    if diff_days <= 0:
        return "Today " + local.strftime("%H:%M")
    if diff_days == 1:
        return "Yesterday"
    if diff_days < 7:
        return f"{diff_days} days ago"
    return local.strftime("%Y-%m-%d")


# ─── Strip conversion ────────────────────────────────────────────────────────


def render_to_strips(renderable: RenderableType, console: Console, width: int) -> list[Strip]:
    """Render at ``width`` cells. Always returns at least one strip."""
    width = max(1, width)
    options = console.options.update_width(width)
    segments = console.render(renderable, options)
    lines = list(Segment.split_lines(segments))
    strips = [s.adjust_cell_length(width) for s in Strip.from_lines(lines)]
    return strips or [Strip.blank(width)]


def gutter_strip(strip: Strip, selected: bool) -> Strip:
    gutter = _GUTTER_SELECTED if selected else _GUTTER_PLAIN
    return Strip([gutter, *strip], strip.cell_length + GUTTER_WIDTH)


# ─── Conversation list rows ──────────────────────────────────────────────────


def conversation_row_height(conv: ConversationSummary) -> int:
    return 3 if _distinct_last_message(conv) else 2


def _distinct_last_message(conv: ConversationSummary) -> bool:
    return bool(conv.last_user_message) and conv.last_user_message != conv.first_user_message


def conversation_row(conv: ConversationSummary, now: datetime | None = None) -> RenderableType:
    header = Text(no_wrap=True, overflow="ellipsis")
    header.append(conv.project_name, style="bold")
    header.append(
        f" · {format_timestamp(conv.last_timestamp, now)} · {conv.message_count} msgs",
        style=DIM_STYLE,
    )
    if conv.agent_ids:
        header.append(f" · {AGENT_MARK} {len(conv.agent_ids)}", style=DIM_STYLE)

    lines = [header, Text("  " + (conv.summary or "(no summary)").replace("\n", " "),
                          style=DIM_STYLE, no_wrap=True, overflow="ellipsis")]
    if _distinct_last_message(conv):
        last = Text("  ", no_wrap=True, overflow="ellipsis")
        last.append("→ ", style="grey35")
        last.append(conv.last_user_message.replace("\n", " "), style=DIM_STYLE)
        lines.append(last)
    return Group(*lines)


# ─── Message items ───────────────────────────────────────────────────────────


def _markdown(text: str) -> Markdown:
    return Markdown(text, code_theme=CODE_THEME)


def _user_message(message: Message, collapsed: bool) -> RenderableType:
    text = extract_text(message.content, sep="\n")
    if collapsed:
        line = Text("You: ", style=USER_STYLE + Style(bold=True), no_wrap=True, overflow="ellipsis")
        line.append(truncate(text, 70), style=USER_STYLE)
        return line
    return Group(Text("You:", style=USER_STYLE + Style(bold=True)), _markdown(text))


def _assistant_message(message: Message, collapsed: bool) -> RenderableType:
    if collapsed:
        return Text(truncate(content_summary(message), 70), no_wrap=True, overflow="ellipsis")
    if isinstance(message.content, str):
        return _markdown(message.content)

    parts: list[RenderableType] = []
    for block in message.blocks:
        if isinstance(block, TextBlock):
            if block.text:
                parts.append(_markdown(block.text))
        elif isinstance(block, ThinkingBlock):
            parts.append(Text(f"[Thinking: {truncate(block.thinking, 100)}]", style=DIM_STYLE + Style(italic=True)))
        elif isinstance(block, ToolUseBlock):
            parts.append(Text(f"Tool: {block.name}", style=TOOL_STYLE))
            summary = summarize_tool_input(block.input)
            if summary:
                parts.append(Text(summary, style=DIM_STYLE))
        # Tool results are never displayed.
    return Group(*parts) if parts else Text("[...]", style=DIM_STYLE)


def message_renderable(message: Message, collapsed: bool) -> RenderableType:
    if message.type == "user":
        return _user_message(message, collapsed)
    return _assistant_message(message, collapsed)


def _marker_line(item: ListItem, collapsed: bool) -> Text:
    marker = Text(no_wrap=True, overflow="ellipsis")
    marker.append(COLLAPSED_MARK if collapsed else EXPANDED_MARK, style=DIM_STYLE)
    if item.agent_id:
        marker.append(f" {AGENT_MARK}", style="bright_magenta")
    marker.append(" ")
    return marker


def item_renderable(item: ListItem, collapsed: bool) -> RenderableType:
    """Renderable for one list item in its collapsed or expanded state."""
    marker = _marker_line(item, collapsed)

    if item.kind is ItemKind.GROUP_HEADER:
        header = marker
        header.append(item.summary, style=DIM_STYLE)
        if collapsed:
            return header
        body: list[RenderableType] = [header]
        for n, message in enumerate(item.group.messages):
            if n:
                body.append(Text(""))
            body.append(message_renderable(message, collapsed=False))
        return Group(*body)

    message = item.group.messages[0]
    content = message_renderable(message, collapsed)
    if collapsed:
        marker.append_text(content)  # type: ignore[arg-type]
        return marker
    return Group(marker, content)


def render_item_strips(item: ListItem, collapsed: bool, console: Console, width: int) -> list[Strip]:
    return render_to_strips(item_renderable(item, collapsed), console, width)
