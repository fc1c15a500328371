"""Tests for the detail-view navigation stack."""

import pytest

from cc_history.core.grouping import ItemKind
from cc_history.core.index import load_conversations
from cc_history.core.navigation import ConversationTarget, NavigationStack, load_view
from cc_history.core.viewport import ViewportState


def target(name="a", path="/tmp/a.jsonl"):
    return ConversationTarget(file_path=path, title=name, project_name="proj", session_id=name)


class TestStack:
    def test_reset_starts_fresh(self):
        nav = NavigationStack()
        nav.reset(target("a"))
        nav.push(target("b"), ViewportState(3, 1))
        entry = nav.reset(target("c"))
        assert nav.depth == 1
        assert entry.saved_state is None
        assert nav.top.target.session_id == "c"

    def test_push_saves_state_on_previous_top(self):
        nav = NavigationStack()
        first = nav.reset(target("a"))
        second = nav.push(target("b"), ViewportState(selected_index=4, scroll_y=2))
        assert first.saved_state == ViewportState(4, 2)
        assert second.saved_state is None
        assert nav.top is second

    def test_push_keeps_measured_heights_with_state(self):
        nav = NavigationStack()
        first = nav.reset(target("a"))
        heights = {0: 4, 1: 7}
        nav.push(target("b"), ViewportState(1, 3), heights)
        heights[0] = 99
        assert nav.pop() is first
        assert first.saved_state == ViewportState(1, 3)
        assert first.saved_heights == {0: 4, 1: 7}

    def test_pop_returns_new_top_then_none(self):
        nav = NavigationStack()
        first = nav.reset(target("a"))
        nav.push(target("b"), ViewportState(2, 0))
        assert nav.pop() is first
        assert first.saved_state == ViewportState(2, 0)
        assert nav.pop() is None
        assert not nav

    def test_pop_empty_is_a_programmer_error(self):
        with pytest.raises(IndexError):
            NavigationStack().pop()


class TestDescend:
    def test_descend_into_existing_sidechain(self, sample_conversation):
        nav = NavigationStack()
        nav.reset(ConversationTarget(str(sample_conversation), "t", "webapp", "sess-new"))
        entry = nav.descend("abc123", ViewportState(1, 0), {0: 2, 1: 5})
        assert entry is not None
        assert entry.target.is_sidechain
        assert entry.target.title == "Agent abc123"
        assert entry.target.session_id == "sess-new"
        assert nav.entries[0].saved_state == ViewportState(1, 0)
        assert nav.entries[0].saved_heights == {0: 2, 1: 5}
        assert nav.breadcrumb() == "webapp › agent-abc123"

    def test_missing_sidechain_is_a_noop(self, sample_conversation):
        nav = NavigationStack()
        nav.reset(ConversationTarget(str(sample_conversation), "t", "webapp", "sess-new"))
        assert nav.descend("ghost", ViewportState(1, 0)) is None
        assert nav.depth == 1
        assert nav.top.saved_state is None

    def test_descend_on_empty_stack(self):
        assert NavigationStack().descend("abc") is None


class TestLoadView:
    def test_builds_items_with_sidechain_link(self, sample_projects):
        conv = load_conversations(sample_projects)[0]
        loaded = load_view(ConversationTarget.from_summary(conv))
        assert loaded.error is None
        assert [i.kind for i in loaded.items] == [
            ItemKind.USER,
            ItemKind.INTERMEDIATE,
            ItemKind.FINAL,
            ItemKind.USER,
            ItemKind.FINAL,
        ]
        assert loaded.items[1].agent_id == "abc123"

    def test_unreadable_file_becomes_error(self, tmp_path):
        loaded = load_view(target(path=str(tmp_path / "missing.jsonl")))
        assert loaded.parsed is None
        assert loaded.items == ()
        assert loaded.error
