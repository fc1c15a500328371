"""Virtualized selection/scroll engine for variable-height lists.

SelectableViewport tracks a selected index and a scroll offset over items
whose heights may not be known yet. Heights arrive later through
resolve_height(), typically after the widget has rendered an item; until then
the engine works from estimates and corrects itself as measurements land.

No rendering happens here. Widgets ask for visible_range() and paint only
those items.

Auto-scroll invariant, re-applied after every mutation:
    the selected item's extent [pos, pos + h) lies inside
    [scroll_y, scroll_y + viewport_height), and
    0 <= scroll_y <= max(0, total_height - viewport_height).
An item taller than the viewport cannot fit; it then covers the viewport
entirely (scroll_y stays within [pos, pos + h - viewport_height]).

// [LAW:single-enforcer] _ensure_visible() is the only writer of scroll_y
//   outside of restore().
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import Callable, Optional

HeightHint = Callable[[int], Optional[int]]


@dataclass(frozen=True)
class ViewportState:
    """Snapshot of the user-visible position in a list."""

    selected_index: int = 0
    scroll_y: int = 0


class SelectableViewport:
    def __init__(
        self,
        item_count: int = 0,
        viewport_height: int = 1,
        height_hint: HeightHint | None = None,
        default_height: int = 1,
    ):
        if default_height < 1:
            raise ValueError("default_height must be >= 1")
        self._item_count = max(0, item_count)
        self._viewport_height = max(1, viewport_height)
        self._height_hint = height_hint
        self._default_height = default_height
        self._measured: dict[int, int] = {}
        self._offsets: list[int] | None = None  # prefix sums, len == item_count + 1
        self._selected = 0
        self._scroll_y = 0
        self._ensure_visible()

    # ─── Read-only state ───────────────────────────────────────────────

    @property
    def item_count(self) -> int:
        return self._item_count

    @property
    def viewport_height(self) -> int:
        return self._viewport_height

    @property
    def selected_index(self) -> int | None:
        return self._selected if self._item_count > 0 else None

    @property
    def scroll_y(self) -> int:
        return self._scroll_y

    def known_height(self, index: int) -> int | None:
        """Measured height, else the hint, else None (unknown)."""
        if index in self._measured:
            return self._measured[index]
        if self._height_hint is not None:
            hinted = self._height_hint(index)
            if hinted is not None and hinted > 0:
                return hinted
        return None

    def height(self, index: int) -> int:
        known = self.known_height(index)
        return known if known is not None else self._default_height

    def _prefix(self) -> list[int]:
        if self._offsets is None:
            offsets = [0]
            total = 0
            for i in range(self._item_count):
                total += self.height(i)
                offsets.append(total)
            self._offsets = offsets
        return self._offsets

    def position(self, index: int) -> int:
        """Top line of item ``index`` (index == item_count gives total height)."""
        return self._prefix()[index]

    @property
    def total_height(self) -> int:
        return self._prefix()[-1]

    @property
    def max_scroll(self) -> int:
        return max(0, self.total_height - self._viewport_height)

    def average_height(self) -> float:
        known = [h for h in (self.known_height(i) for i in range(self._item_count)) if h is not None]
        if not known:
            return float(self._default_height)
        return sum(known) / len(known)

    def page_size(self) -> int:
        """Estimated number of items per viewport."""
        return max(1, int(self._viewport_height // self.average_height()))

    def item_at(self, line: int) -> int | None:
        """Index of the item covering absolute line ``line``."""
        if self._item_count == 0 or line < 0 or line >= self.total_height:
            return None
        return bisect.bisect_right(self._prefix(), line) - 1

    def visible_range(self) -> tuple[int, int]:
        """(start, end) item indices intersecting the viewport, end exclusive."""
        if self._item_count == 0:
            return (0, 0)
        offsets = self._prefix()
        start = bisect.bisect_right(offsets, self._scroll_y) - 1
        bottom = self._scroll_y + self._viewport_height
        end = bisect.bisect_left(offsets, bottom)
        return (max(0, start), min(self._item_count, max(end, start + 1)))

    def snapshot(self) -> ViewportState:
        return ViewportState(selected_index=self._selected, scroll_y=self._scroll_y)

    def measurements(self) -> dict[int, int]:
        """Copy of the measured heights, for handing back to reset()."""
        return dict(self._measured)

    # ─── Mutations ─────────────────────────────────────────────────────

    def reset(
        self,
        item_count: int,
        height_hint: HeightHint | None = None,
        state: ViewportState | None = None,
        heights: dict[int, int] | None = None,
    ) -> None:
        """Switch to a different list.

        Measurements are dropped unless ``heights`` carries the ones taken
        alongside ``state``; a saved scroll_y only lines up with the item
        positions it was computed against.
        """
        self._item_count = max(0, item_count)
        self._height_hint = height_hint
        self._measured = {
            i: h for i, h in (heights or {}).items() if 0 <= i < self._item_count and h > 0
        }
        self._offsets = None
        self.restore(state)

    def restore(self, state: ViewportState | None) -> None:
        state = state or ViewportState()
        self._selected = state.selected_index
        self._scroll_y = state.scroll_y
        self._ensure_visible()

    def select(self, index: int) -> None:
        if self._item_count == 0:
            return
        self._selected = min(max(0, index), self._item_count - 1)
        self._ensure_visible()

    def move_selection(self, delta: int) -> None:
        self.select(self._selected + delta)

    def go_top(self) -> None:
        self.select(0)

    def go_bottom(self) -> None:
        self.select(self._item_count - 1)

    def page_move(self, direction: int) -> None:
        self.move_selection(direction * self.page_size())

    def half_page_move(self, direction: int) -> None:
        self.move_selection(direction * max(1, self.page_size() // 2))

    def scroll_lines(self, delta: int) -> None:
        """Scroll inside a selected item that is taller than the viewport."""
        if self._item_count == 0:
            return
        self._scroll_y += delta
        self._ensure_visible()

    def set_item_count(self, count: int) -> None:
        count = max(0, count)
        if count < self._item_count:
            self._measured = {i: h for i, h in self._measured.items() if i < count}
        self._item_count = count
        if count > 0 and self._selected >= count:
            self._selected = count - 1
        self._offsets = None
        self._ensure_visible()

    def set_viewport_height(self, height: int) -> None:
        self._viewport_height = max(1, height)
        self._ensure_visible()

    def resolve_height(self, index: int, measured: int) -> bool:
        """Record a measured height. Returns True if positions changed.

        A non-positive measurement means layout has not settled; the item
        stays unknown rather than caching a bogus value.
        """
        self._check_index(index)
        if index >= self._item_count:
            return False
        previous = self.height(index)
        if measured <= 0:
            self._measured.pop(index, None)
        else:
            self._measured[index] = measured
        changed = self.height(index) != previous
        if changed:
            self._offsets = None
        self._ensure_visible()
        return changed

    def invalidate(self, index: int) -> None:
        """Forget a measurement after the item's content changed."""
        self._check_index(index)
        self._measured.pop(index, None)
        self._offsets = None
        self._ensure_visible()

    def invalidate_all(self) -> None:
        self._measured.clear()
        self._offsets = None
        self._ensure_visible()

    # ─── Invariant ─────────────────────────────────────────────────────

    @staticmethod
    def _check_index(index: int) -> None:
        if index < 0:
            raise IndexError(f"negative item index {index}")

    def _ensure_visible(self) -> None:
        if self._item_count == 0:
            self._selected = 0
            self._scroll_y = 0
            return

        self._selected = min(max(0, self._selected), self._item_count - 1)
        top = self.position(self._selected)
        bottom = top + self.height(self._selected)
        # Window of scroll offsets that keep the item in view.
        show_bottom = bottom - self._viewport_height
        lo, hi = min(top, show_bottom), max(top, show_bottom)
        scroll = min(max(self._scroll_y, lo), hi)
        self._scroll_y = min(max(0, scroll), self.max_scroll)
