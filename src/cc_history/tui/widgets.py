"""Line API widgets backed by SelectableViewport.

SelectableListView paints rows straight from the viewport engine: the engine
says which item covers each screen line, the widget renders that item to
strips on demand and reports the strip count back as the measured height.

Height resolution never happens inside render_line - positions must not shift
while a frame is being painted - so measurements are queued and applied in a
deferred callback, followed by a refresh.
"""

from __future__ import annotations

from typing import Hashable

from rich.style import Style
from rich.text import Text
from textual.cache import LRUCache
from textual.message import Message
from textual.strip import Strip
from textual.widget import Widget
from textual.widgets import Static

from cc_history.core.grouping import ListItem, default_collapsed
from cc_history.core.navigation import NavigationEntry
from cc_history.core.transcript import ConversationSummary
from cc_history.core.viewport import SelectableViewport, ViewportState
from cc_history.tui import rendering
from cc_history.tui.input_modes import FOOTER_KEYS, InputMode


class SelectableListView(Widget, can_focus=True):
    """Virtualized list with one selected item. Subclasses supply items."""

    DEFAULT_CSS = """
    SelectableListView {
        height: 1fr;
        color: $foreground;
    }
    """

    class SelectionChanged(Message):
        """Posted when the selected item changes."""

        def __init__(self, view: "SelectableListView", index: int | None) -> None:
            super().__init__()
            self.view = view
            self.index = index

    def __init__(self, *, id: str | None = None):
        super().__init__(id=id)
        self.viewport = SelectableViewport()
        self._strip_cache: LRUCache = LRUCache(512)
        self._pending_heights: dict[int, int] = {}
        self._measure_scheduled = False
        self._last_width = 0
        self._placeholder: str | None = None

    # ─── Subclass hooks ────────────────────────────────────────────────

    def item_cache_key(self, index: int) -> Hashable:
        raise NotImplementedError

    def render_item(self, index: int, width: int) -> list[Strip]:
        raise NotImplementedError

    # ─── Content ───────────────────────────────────────────────────────

    @property
    def content_width(self) -> int:
        return max(1, self.size.width - rendering.GUTTER_WIDTH)

    def reset_items(
        self,
        item_count: int,
        height_hint=None,
        state: ViewportState | None = None,
        heights: dict[int, int] | None = None,
    ) -> None:
        """Switch to a new item list, dropping cached strips.

        Measurements are dropped too unless ``heights`` restores the ones
        saved with ``state``.
        """
        self._strip_cache.clear()
        self._pending_heights.clear()
        self._placeholder = None
        self.viewport.reset(item_count, height_hint=height_hint, state=state, heights=heights)
        self._changed()

    def show_placeholder(self, text: str) -> None:
        """Replace the list with a single message line."""
        self._strip_cache.clear()
        self._pending_heights.clear()
        self.viewport.reset(0)
        self._placeholder = text
        self._changed()

    @property
    def placeholder(self) -> str | None:
        return self._placeholder

    def invalidate_item(self, index: int) -> None:
        self.viewport.invalidate(index)
        self._changed()

    # ─── Navigation ────────────────────────────────────────────────────

    def move(self, delta: int) -> None:
        self.viewport.move_selection(delta)
        self._changed()

    def page(self, direction: int) -> None:
        self.viewport.page_move(direction)
        self._changed()

    def half_page(self, direction: int) -> None:
        self.viewport.half_page_move(direction)
        self._changed()

    def go_top(self) -> None:
        self.viewport.go_top()
        self._changed()

    def go_bottom(self) -> None:
        self.viewport.go_bottom()
        self._changed()

    def scroll_lines(self, delta: int) -> None:
        self.viewport.scroll_lines(delta)
        self._changed()

    def _changed(self) -> None:
        self.refresh()
        self.post_message(self.SelectionChanged(self, self.viewport.selected_index))

    # ─── Rendering ─────────────────────────────────────────────────────

    def _strips_for(self, index: int, width: int) -> list[Strip]:
        key = (self.item_cache_key(index), width)
        strips = self._strip_cache.get(key)
        if strips is None:
            strips = self.render_item(index, width)
            self._strip_cache[key] = strips
        if self.viewport.known_height(index) != len(strips):
            self._queue_measurement(index, len(strips))
        return strips

    def _queue_measurement(self, index: int, height: int) -> None:
        self._pending_heights[index] = height
        if not self._measure_scheduled:
            self._measure_scheduled = True
            # Cannot shift offsets while render_line() is still iterating.
            self.call_later(self._apply_measurements)

    def _apply_measurements(self) -> None:
        self._measure_scheduled = False
        pending, self._pending_heights = self._pending_heights, {}
        changed = False
        for index, height in pending.items():
            if index < self.viewport.item_count:
                changed = self.viewport.resolve_height(index, height) or changed
        if changed:
            self.refresh()

    def render_line(self, y: int) -> Strip:
        """Line API: render screen line y from the viewport engine."""
        width = self.size.width
        if self._placeholder is not None:
            if y == 0:
                text = Text(self._placeholder, style=rendering.DIM_STYLE, no_wrap=True, overflow="ellipsis")
                return rendering.render_to_strips(text, self.app.console, width)[0]
            return Strip.blank(width, self.rich_style)

        line = self.viewport.scroll_y + y
        index = self.viewport.item_at(line)
        if index is None:
            return Strip.blank(width, self.rich_style)

        strips = self._strips_for(index, self.content_width)
        local_y = line - self.viewport.position(index)
        if local_y < len(strips):
            strip = strips[local_y]
        else:
            strip = Strip.blank(self.content_width)
        strip = rendering.gutter_strip(strip, index == self.viewport.selected_index)
        return strip.adjust_cell_length(width, self.rich_style)

    def on_resize(self, event) -> None:
        self.viewport.set_viewport_height(event.size.height)
        width = event.size.width
        if width != self._last_width and width > 0:
            # Wrapped heights depend on width.
            self._last_width = width
            self._strip_cache.clear()
            self._pending_heights.clear()
            self.viewport.invalidate_all()
        self._changed()

    # ─── Mouse ─────────────────────────────────────────────────────────

    def on_mouse_scroll_down(self, event) -> None:
        event.stop()
        self.move(1)

    def on_mouse_scroll_up(self, event) -> None:
        event.stop()
        self.move(-1)

    def on_click(self, event) -> None:
        index = self.viewport.item_at(self.viewport.scroll_y + event.y)
        if index is not None:
            self.viewport.select(index)
            self._changed()


class ConversationListView(SelectableListView):
    """Index of conversations, newest first."""

    def __init__(self, *, id: str | None = None):
        super().__init__(id=id)
        self._conversations: list[ConversationSummary] = []

    def set_conversations(self, conversations: list[ConversationSummary]) -> None:
        self._conversations = list(conversations)
        if not self._conversations:
            self.show_placeholder("No conversations found.")
            return
        self.reset_items(len(self._conversations), height_hint=self._row_height)

    @property
    def conversations(self) -> list[ConversationSummary]:
        return self._conversations

    @property
    def selected_conversation(self) -> ConversationSummary | None:
        index = self.viewport.selected_index
        if index is None or self._placeholder is not None:
            return None
        return self._conversations[index]

    def _row_height(self, index: int) -> int | None:
        if index >= len(self._conversations):
            return None
        return rendering.conversation_row_height(self._conversations[index])

    def item_cache_key(self, index: int) -> Hashable:
        return self._conversations[index].id

    def render_item(self, index: int, width: int) -> list[Strip]:
        row = rendering.conversation_row(self._conversations[index])
        return rendering.render_to_strips(row, self.app.console, width)


class ConversationDetailView(SelectableListView):
    """Messages of the top navigation entry, grouped into collapsible items."""

    def __init__(self, *, id: str | None = None):
        super().__init__(id=id)
        self._entry: NavigationEntry | None = None

    @property
    def entry(self) -> NavigationEntry | None:
        return self._entry

    @property
    def items(self) -> tuple[ListItem, ...]:
        if self._entry is None or self._entry.conversation is None:
            return ()
        return self._entry.conversation.items

    def show_entry(self, entry: NavigationEntry) -> None:
        """Display ``entry``, restoring its saved position if it has one."""
        self._entry = entry
        conversation = entry.conversation
        if conversation is None:
            self.show_placeholder("Loading conversation...")
        elif conversation.error is not None:
            self.show_placeholder(f"Conversation failed to load: {conversation.error}")
        elif not conversation.items:
            self.show_placeholder("No messages.")
        else:
            self.reset_items(len(conversation.items), state=entry.saved_state, heights=entry.saved_heights)

    @property
    def selected_item(self) -> ListItem | None:
        index = self.viewport.selected_index
        items = self.items
        if index is None or self._placeholder is not None or index >= len(items):
            return None
        return items[index]

    def is_collapsed(self, item: ListItem) -> bool:
        if self._entry is None:
            return default_collapsed(item)
        return self._entry.collapsed.get(item.key, default_collapsed(item))

    def toggle_collapse(self) -> None:
        item = self.selected_item
        if item is None:
            return
        self._entry.collapsed[item.key] = not self.is_collapsed(item)
        self.invalidate_item(self.viewport.selected_index)

    def item_cache_key(self, index: int) -> Hashable:
        item = self.items[index]
        return (item.key, self.is_collapsed(item))

    def render_item(self, index: int, width: int) -> list[Strip]:
        item = self.items[index]
        return rendering.render_item_strips(item, self.is_collapsed(item), self.app.console, width)


class StatusBar(Static):
    """Context-sensitive key hints plus the current position."""

    _text: Text | None = None

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        background: $panel;
        color: $text-muted;
    }
    """

    def show(self, mode: InputMode, position: str = "", in_sidechain: bool = False,
             has_sidechain: bool = False) -> None:
        text = Text(no_wrap=True, overflow="ellipsis")
        for key, description in FOOTER_KEYS[mode]:
            if mode is InputMode.DETAIL and key == "q" and in_sidechain:
                description = "parent"
            if key == "s" and not has_sidechain:
                continue
            text.append(f" {key}", style=Style(bold=True))
            text.append(f" {description} ")
        if has_sidechain:
            text.append(f" {rendering.AGENT_MARK} sidechain ", style="bright_magenta")
        if position:
            text.append(f"  {position}")
        self._text = text
        self.update(text)

    @property
    def plain(self) -> str:
        return self._text.plain if self._text is not None else ""
