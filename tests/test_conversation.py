"""
Tests for the conversation model.
"""

import pytest

from tool_agent.conversation import (
    ConversationState,
    Message,
    Role,
    StopReason,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    Usage,
)


class TestMessage:
    """Tests for Message."""

    def test_content_is_stored_as_tuple(self):
        """Any iterable of blocks is frozen into a tuple."""
        msg = Message(Role.USER, [TextBlock("hi")])
        assert msg.content == (TextBlock("hi"),)

    def test_text_joins_text_blocks(self):
        """Text blocks are joined with newlines, other blocks skipped."""
        msg = Message(
            Role.ASSISTANT,
            (TextBlock("one"), ToolUseBlock("t1", "echo", {}), TextBlock("two")),
        )
        assert msg.text == "one\ntwo"
        assert [u.id for u in msg.tool_uses] == ["t1"]

    def test_user_text_helper(self):
        msg = Message.user_text("hello")
        assert msg.role is Role.USER
        assert msg.text == "hello"

    def test_tool_results(self):
        msg = Message(Role.USER, (ToolResultBlock("t1", "ok"), ToolResultBlock("t2", "bad", True)))
        assert [r.is_error for r in msg.tool_results] == [False, True]


class TestStopReason:
    """Tests for StopReason parsing."""

    def test_known_values(self):
        assert StopReason.parse("tool_use") is StopReason.TOOL_USE
        assert StopReason.parse("end_turn") is StopReason.END_TURN
        assert StopReason.parse("max_tokens") is StopReason.MAX_TOKENS

    def test_unknown_value_maps_to_other(self):
        assert StopReason.parse("refusal") is StopReason.OTHER
        assert StopReason.parse(None) is StopReason.OTHER


class TestConversationState:
    """Tests for ConversationState."""

    def test_append_preserves_order(self):
        state = ConversationState()
        state.append(Message.user_text("a"))
        state.append(Message.assistant_text("b"))
        assert [m.text for m in state] == ["a", "b"]
        assert len(state) == 2
        assert state.last.text == "b"

    def test_clear_empties_history(self):
        state = ConversationState()
        state.append(Message.user_text("a"))
        state.clear()
        assert len(state) == 0
        assert state.messages == ()
        assert state.last is None

    def test_messages_is_a_snapshot(self):
        """Later appends do not change an earlier snapshot."""
        state = ConversationState()
        state.append(Message.user_text("a"))
        snapshot = state.messages
        state.append(Message.assistant_text("b"))
        assert len(snapshot) == 1

    def test_tool_use_in_user_message_rejected(self):
        state = ConversationState()
        with pytest.raises(ValueError):
            state.append(Message(Role.USER, (ToolUseBlock("t1", "echo", {}),)))
        assert len(state) == 0

    def test_tool_result_in_assistant_message_rejected(self):
        state = ConversationState()
        with pytest.raises(ValueError):
            state.append(Message(Role.ASSISTANT, (ToolResultBlock("t1", "x"),)))


class TestUsage:
    def test_total_tokens(self):
        assert Usage(10, 5).total_tokens == 15
