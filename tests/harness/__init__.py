"""Textual in-process test harness for cc-history.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, list_selection, ...
"""

from tests.harness.app_runner import run_app
from tests.harness.interactions import (
    settle,
    press_and_settle,
    press_sequence,
    resize_and_settle,
)
from tests.harness.assertions import (
    get_mode,
    get_list_view,
    get_detail_view,
    list_selection,
    detail_selection,
    listed_session_ids,
    detail_items,
    detail_placeholder,
    nav_depth,
    is_detail_visible,
)
from tests.harness.content import (
    strips_to_text,
    view_text,
    status_text,
)
from tests.harness.builders import (
    user_event,
    assistant_event,
    tool_result_event,
    summary_event,
    text_block,
    thinking_block,
    tool_use_block,
    write_jsonl,
    write_conversation,
    write_sidechain,
)

__all__ = [
    "run_app",
    "settle",
    "press_and_settle",
    "press_sequence",
    "resize_and_settle",
    "get_mode",
    "get_list_view",
    "get_detail_view",
    "list_selection",
    "detail_selection",
    "listed_session_ids",
    "detail_items",
    "detail_placeholder",
    "nav_depth",
    "is_detail_visible",
    "strips_to_text",
    "view_text",
    "status_text",
    "user_event",
    "assistant_event",
    "tool_result_event",
    "summary_event",
    "text_block",
    "thinking_block",
    "tool_use_block",
    "write_jsonl",
    "write_conversation",
    "write_sidechain",
]
