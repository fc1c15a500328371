"""Tests for the typed content model."""

from cc_history.core.content import (
    Message,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
    extract_text,
    has_collapsible_content,
    has_text,
    has_tool_use,
    is_thinking_only,
    parse_content,
    tool_uses,
)


class TestParseContent:
    def test_string_passes_through(self):
        assert parse_content("hello") == "hello"

    def test_none_becomes_empty_string(self):
        assert parse_content(None) == ""

    def test_blocks_are_typed(self):
        content = parse_content([
            {"type": "text", "text": "hi"},
            {"type": "thinking", "thinking": "hmm", "signature": "x"},
            {"type": "tool_use", "id": "t1", "name": "Bash", "input": {"command": "ls"}},
            {"type": "tool_result", "tool_use_id": "t1", "agentId": "a1"},
        ])
        assert content == (
            TextBlock("hi"),
            ThinkingBlock("hmm"),
            ToolUseBlock(name="Bash", input={"command": "ls"}, id="t1"),
            ToolResultBlock(tool_use_id="t1", agent_id="a1"),
        )

    def test_unknown_and_malformed_blocks_are_dropped(self):
        content = parse_content([
            {"type": "image", "source": {}},
            "not a block",
            {"type": "text", "text": "kept"},
        ])
        assert content == (TextBlock("kept"),)

    def test_tool_use_without_name(self):
        (block,) = parse_content([{"type": "tool_use"}])
        assert block.name == "unknown"


class TestExtractText:
    def test_joins_text_blocks_only(self):
        content = (TextBlock("a"), ThinkingBlock("skip"), TextBlock("b"))
        assert extract_text(content) == "a b"
        assert extract_text(content, sep="\n") == "a\nb"

    def test_raw_dict_blocks(self):
        raw = [{"type": "tool_result", "content": "x"}, {"type": "text", "text": "y"}]
        assert extract_text(raw) == "y"

    def test_none(self):
        assert extract_text(None) == ""


class TestMessagePredicates:
    def test_string_content_has_text_block_view(self):
        msg = Message(type="assistant", content="plain")
        assert msg.blocks == (TextBlock("plain"),)
        assert has_text(msg)
        assert not has_tool_use(msg)

    def test_empty_string_has_no_blocks(self):
        assert Message(type="assistant", content="").blocks == ()

    def test_thinking_only(self):
        msg = Message(type="assistant", content=(ThinkingBlock("x"),))
        assert is_thinking_only(msg)
        assert has_collapsible_content(msg)

    def test_thinking_with_text_is_not_thinking_only(self):
        msg = Message(type="assistant", content=(ThinkingBlock("x"), TextBlock("y")))
        assert not is_thinking_only(msg)

    def test_thinking_with_tool_is_not_thinking_only(self):
        msg = Message(type="assistant", content=(ThinkingBlock("x"), ToolUseBlock("Read")))
        assert not is_thinking_only(msg)
        assert has_tool_use(msg)
        assert tool_uses(msg) == [ToolUseBlock("Read")]

    def test_user_messages_never_count_as_tool_or_thinking(self):
        msg = Message(type="user", content=(ToolUseBlock("Read"), ThinkingBlock("x")))
        assert not has_tool_use(msg)
        assert not is_thinking_only(msg)
        assert not has_collapsible_content(msg)

    def test_whitespace_text_is_not_text(self):
        assert not has_text(Message(type="assistant", content=(TextBlock("  \n"),)))
