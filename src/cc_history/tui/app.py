"""Main TUI application: conversation index, detail view, sidechain stack.

// [LAW:single-enforcer] on_key is the sole key dispatcher.
// [LAW:one-source-of-truth] Detail-view state lives on NavigationStack entries;
//   widgets only project it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from textual.app import App, ComposeResult, SuspendNotSupported
from textual.css.query import NoMatches
from textual.widgets import Header

from cc_history.app import launcher
from cc_history.core.index import load_conversations
from cc_history.core.navigation import (
    ConversationTarget,
    LoadedConversation,
    NavigationEntry,
    NavigationStack,
    load_view,
)
from cc_history.core.transcript import ConversationSummary
from cc_history.io.settings import DEFAULT_EDITOR, DEFAULT_RESUME_COMMAND
from cc_history.tui.input_modes import MODE_KEYMAP, InputMode
from cc_history.tui.widgets import (
    ConversationDetailView,
    ConversationListView,
    SelectableListView,
    StatusBar,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResumeRequest:
    """Returned from App.run() when the user chose to resume a session."""

    session_id: str
    command: str


class HistoryApp(App):
    TITLE = "cc-history"

    CSS = """
    #conversation-detail {
        display: none;
    }
    """

    def __init__(
        self,
        projects_dir: str,
        project_filter: str | None = None,
        resume_command: str = DEFAULT_RESUME_COMMAND,
        editor: str = DEFAULT_EDITOR,
    ):
        super().__init__()
        self._projects_dir = projects_dir
        self._project_filter = project_filter
        self._resume_command = resume_command
        self._editor = editor
        self._nav = NavigationStack()
        self._input_mode = InputMode.LOADING

        self._list_id = "conversation-list"
        self._detail_id = "conversation-detail"
        self._status_id = "status-bar"

    # ─── Widget access ─────────────────────────────────────────────────

    def _query_safe(self, selector):
        try:
            return self.query_one(selector)
        except NoMatches:
            return None

    def _get_list(self) -> ConversationListView | None:
        return self._query_safe("#" + self._list_id)

    def _get_detail(self) -> ConversationDetailView | None:
        return self._query_safe("#" + self._detail_id)

    def _get_status(self) -> StatusBar | None:
        return self._query_safe("#" + self._status_id)

    def _active_view(self) -> SelectableListView | None:
        if self._input_mode == InputMode.LIST:
            return self._get_list()
        if self._input_mode == InputMode.DETAIL:
            return self._get_detail()
        return None

    @property
    def input_mode(self) -> InputMode:
        return self._input_mode

    @property
    def navigation(self) -> NavigationStack:
        return self._nav

    # ─── Lifecycle ─────────────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        yield Header()
        yield ConversationListView(id=self._list_id)
        yield ConversationDetailView(id=self._detail_id)
        yield StatusBar(id=self._status_id)

    def on_mount(self):
        self.sub_title = self._projects_dir
        conv_list = self._get_list()
        conv_list.show_placeholder(f"Loading conversations from {self._projects_dir}...")
        conv_list.focus()
        self._refresh_status()
        self._load_index()

    def _load_index(self) -> None:
        projects_dir, project_filter = self._projects_dir, self._project_filter

        def _work():
            conversations = load_conversations(projects_dir, project_filter)
            self.call_from_thread(self._apply_index, conversations)

        self.run_worker(_work, thread=True, exclusive=True, group="index")

    def _apply_index(self, conversations: list[ConversationSummary]) -> None:
        logger.info("loaded %d conversations from %s", len(conversations), self._projects_dir)
        self._get_list().set_conversations(conversations)
        if self._input_mode == InputMode.LOADING:
            self._input_mode = InputMode.LIST
        self._refresh_status()

    def _load_entry(self, entry: NavigationEntry) -> None:
        target = entry.target

        def _work():
            loaded = load_view(target)
            self.call_from_thread(self._apply_conversation, entry, loaded)

        self.run_worker(_work, thread=True, exclusive=True, group="conversation")

    def _apply_conversation(self, entry: NavigationEntry, loaded: LoadedConversation) -> None:
        entry.conversation = loaded
        # The user may have navigated away while the file was loading.
        if self._nav.top is entry and self._input_mode == InputMode.DETAIL:
            self._get_detail().show_entry(entry)
            self._refresh_status()

    # ─── Screens ───────────────────────────────────────────────────────

    def _show_list(self) -> None:
        self._input_mode = InputMode.LIST
        self._get_detail().display = False
        conv_list = self._get_list()
        conv_list.display = True
        conv_list.focus()
        self.sub_title = self._projects_dir
        self._refresh_status()

    def _show_detail(self, entry: NavigationEntry) -> None:
        self._input_mode = InputMode.DETAIL
        self._get_list().display = False
        detail = self._get_detail()
        detail.display = True
        detail.focus()
        detail.show_entry(entry)
        self.sub_title = self._nav.breadcrumb()
        if entry.conversation is None:
            self._load_entry(entry)
        self._refresh_status()

    def _refresh_status(self) -> None:
        status = self._get_status()
        if status is None:
            return
        mode = self._input_mode
        view = self._active_view()
        position = ""
        if view is not None and view.viewport.item_count:
            position = f"{view.viewport.selected_index + 1}/{view.viewport.item_count}"
        has_sidechain = False
        in_sidechain = False
        if mode == InputMode.DETAIL:
            item = self._get_detail().selected_item
            has_sidechain = item is not None and item.agent_id is not None
            in_sidechain = self._nav.depth > 1
        status.show(mode, position, in_sidechain=in_sidechain, has_sidechain=has_sidechain)

    def on_selectable_list_view_selection_changed(self, message: SelectableListView.SelectionChanged) -> None:
        self._refresh_status()

    # ─── Key dispatch ──────────────────────────────────────────────────

    async def on_key(self, event) -> None:
        keymap = MODE_KEYMAP[self._input_mode]
        action_name = keymap.get(event.key)
        if action_name:
            event.prevent_default()
            event.stop()
            await self.run_action(action_name)

    # ─── Actions ───────────────────────────────────────────────────────

    def action_move(self, delta: int) -> None:
        view = self._active_view()
        if view is not None:
            view.move(delta)

    def action_page(self, direction: int) -> None:
        view = self._active_view()
        if view is not None:
            view.page(direction)

    def action_half_page(self, direction: int) -> None:
        view = self._active_view()
        if view is not None:
            view.half_page(direction)

    def action_go_top(self) -> None:
        view = self._active_view()
        if view is not None:
            view.go_top()

    def action_go_bottom(self) -> None:
        view = self._active_view()
        if view is not None:
            view.go_bottom()

    def action_scroll_lines(self, delta: int) -> None:
        view = self._active_view()
        if view is not None:
            view.scroll_lines(delta)

    def action_open(self) -> None:
        conv = self._get_list().selected_conversation
        if conv is None:
            return
        # A conversation opened from the index always starts at the top.
        entry = self._nav.reset(ConversationTarget.from_summary(conv))
        self._show_detail(entry)

    def action_toggle_collapse(self) -> None:
        self._get_detail().toggle_collapse()

    def action_open_sidechain(self) -> None:
        detail = self._get_detail()
        item = detail.selected_item
        if item is None or item.agent_id is None:
            return
        entry = self._nav.descend(item.agent_id, detail.viewport.snapshot(), detail.viewport.measurements())
        if entry is None:
            return
        self._show_detail(entry)

    def action_back(self) -> None:
        if self._input_mode != InputMode.DETAIL:
            self.exit()
            return
        previous = self._nav.pop()
        if previous is None:
            self._show_list()
        else:
            self._show_detail(previous)

    def action_resume(self) -> None:
        top = self._nav.top
        if top is None:
            return
        self.exit(result=ResumeRequest(session_id=top.target.session_id, command=self._resume_command))

    def action_edit(self) -> None:
        path = None
        if self._input_mode == InputMode.DETAIL and self._nav.top is not None:
            path = self._nav.top.target.file_path
        elif self._input_mode == InputMode.LIST:
            conv = self._get_list().selected_conversation
            path = conv.file_path if conv is not None else None
        if path is None:
            return
        try:
            with self.suspend():
                code = launcher.open_in_editor(path, self._editor)
        except SuspendNotSupported:
            self.notify("Cannot hand the terminal to an editor here", severity="warning")
            return
        if code != 0:
            self.notify("Editor exited with status {}".format(code), severity="warning")
