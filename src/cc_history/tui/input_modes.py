"""Pure mode system for key dispatch.

All keyboard input routes through HistoryApp.on_key based on current mode.
Textual BINDINGS are not used - on_key is the sole dispatcher.
"""

from enum import Enum, auto


class InputMode(Enum):
    """Which screen owns the keyboard."""
    LOADING = auto()
    LIST = auto()
    DETAIL = auto()


_NAVIGATION: dict[str, str] = {
    "up": "move(-1)",
    "k": "move(-1)",
    "down": "move(1)",
    "j": "move(1)",
    "pageup": "page(-1)",
    "pagedown": "page(1)",
    "ctrl+u": "half_page(-1)",
    "ctrl+d": "half_page(1)",
    "home": "go_top",
    "g": "go_top",
    "end": "go_bottom",
    "G": "go_bottom",
}


# [LAW:one-source-of-truth] Key→action mapping per mode.
MODE_KEYMAP: dict[InputMode, dict[str, str]] = {
    InputMode.LOADING: {
        "q": "back",
        "escape": "back",
    },

    InputMode.LIST: {
        **_NAVIGATION,
        "enter": "open",
        "e": "edit",
        "q": "back",
        "escape": "back",
    },

    InputMode.DETAIL: {
        **_NAVIGATION,
        # Line scrolling inside an item taller than the screen
        "ctrl+e": "scroll_lines(1)",
        "ctrl+y": "scroll_lines(-1)",
        "space": "toggle_collapse",
        "s": "open_sidechain",
        "enter": "resume",
        "e": "edit",
        "q": "back",
        "escape": "back",
    },
}


# [LAW:one-source-of-truth] Footer display per mode.
# Format: list of (key, description) tuples.
FOOTER_KEYS: dict[InputMode, list[tuple[str, str]]] = {
    InputMode.LOADING: [
        ("q", "quit"),
    ],
    InputMode.LIST: [
        ("↑↓/jk", "move"),
        ("PgUp/PgDn", "page"),
        ("g/G", "top/bottom"),
        ("enter", "open"),
        ("e", "edit"),
        ("q", "quit"),
    ],
    InputMode.DETAIL: [
        ("↑↓/jk", "move"),
        ("space", "expand"),
        ("s", "sidechain"),
        ("enter", "resume"),
        ("e", "edit"),
        ("q", "back"),
    ],
}
