"""
Tests for the interactive session driver and entry point.
"""

import io
from unittest.mock import MagicMock, patch

import pytest

from tool_agent.conversation import ConversationState, Message
from tool_agent.interactive import InteractiveSession, main
from tool_agent.llm_call import InferenceError
from tool_agent.orchestration import OrchestrationLoop
from tool_agent.tools import CLEAR_CONTEXT_TOOL, ToolRegistry


@pytest.fixture
def make_session(scripted_client):
    """Build a session over scripted responses and canned input lines."""

    def _make(responses, lines, registry=None, conversation=None):
        client = scripted_client(responses)
        loop = OrchestrationLoop(client, registry or ToolRegistry())
        stdout, stderr = io.StringIO(), io.StringIO()
        session = InteractiveSession(
            loop,
            conversation if conversation is not None else ConversationState(),
            stdin=io.StringIO("".join(line + "\n" for line in lines)),
            stdout=stdout,
            stderr=stderr,
        )
        return session, client, stdout, stderr

    return _make


class TestInteractiveSession:
    """Tests for InteractiveSession."""

    def test_reply_printed(self, make_session, text_response):
        session, client, stdout, _ = make_session([text_response("Found 3 files")], ["list files in ."])

        assert session.run() == 0
        assert "Agent: Found 3 files\n" in stdout.getvalue()
        assert len(client.requests) == 1

    def test_eof_exits_zero(self, make_session):
        session, client, stdout, _ = make_session([], [])
        assert session.run() == 0
        assert client.requests == []

    def test_empty_lines_reprompt(self, make_session):
        session, client, stdout, stderr = make_session([], ["", "   "])

        session.run()

        assert stderr.getvalue().count("Please enter a message.") == 2
        assert client.requests == []
        assert stdout.getvalue().count("You: ") == 3

    def test_clear_and_reset(self, make_session):
        for command in ("/clear", "/reset", "  /clear  "):
            conversation = ConversationState()
            conversation.append(Message.user_text("old"))
            session, client, stdout, _ = make_session([], [command], conversation=conversation)

            session.run()

            assert len(conversation) == 0
            assert "Conversation cleared." in stdout.getvalue()
            assert client.requests == []

    def test_no_residual_context_after_clear(self, make_session, text_response):
        session, client, _, _ = make_session(
            [text_response("first"), text_response("second")],
            ["hello", "/clear", "again"],
        )

        session.run()

        sent, _ = client.requests[1]
        assert [m.text for m in sent] == ["again"]

    def test_inference_error_reported_and_session_continues(self, make_session, text_response):
        session, client, stdout, stderr = make_session(
            [InferenceError("service unavailable"), text_response("back")],
            ["one", "two"],
        )

        assert session.run() == 0
        assert "Error: service unavailable" in stderr.getvalue()
        assert "Agent: back" in stdout.getvalue()

    def test_tool_call_line(self, make_session, text_response, tool_use_response):
        session, _, stdout, _ = make_session(
            [tool_use_response(("c1", "clear_context", {})), text_response("Done.")],
            ["start over"],
            registry=ToolRegistry([CLEAR_CONTEXT_TOOL]),
        )

        session.run()

        assert "tool: clear_context({})" in stdout.getvalue()

    def test_clear_context_effect_applied_after_turn(self, make_session, text_response, tool_use_response):
        conversation = ConversationState()
        session, _, stdout, _ = make_session(
            [tool_use_response(("c1", "clear_context", {})), text_response("Done.")],
            ["start over"],
            registry=ToolRegistry([CLEAR_CONTEXT_TOOL]),
            conversation=conversation,
        )

        session.run()

        assert len(conversation) == 0
        assert "Agent: Done." in stdout.getvalue()

    def test_no_colours_when_not_a_tty(self, make_session, text_response):
        session, _, stdout, _ = make_session([text_response("plain")], ["hi"])
        session.run()
        assert "\033[" not in stdout.getvalue()


class TestMain:
    """Tests for the entry point."""

    @patch("tool_agent.interactive.create_llm_client")
    def test_startup_failure_exit_code(self, mock_create, capsys):
        mock_create.side_effect = InferenceError("no API key: set AGENT_API_KEY")

        assert main() == 1
        assert "no API key" in capsys.readouterr().err

    @patch("tool_agent.interactive.shutdown_tracing")
    @patch("tool_agent.interactive.create_llm_client")
    def test_startup_failure_shuts_down_tracing(self, mock_create, mock_shutdown):
        mock_create.side_effect = InferenceError("no API key")

        assert main() == 1
        mock_shutdown.assert_called_once()

    @patch("tool_agent.interactive.InteractiveSession")
    @patch("tool_agent.interactive.create_llm_client")
    def test_runs_session(self, mock_create, mock_session_cls):
        client = MagicMock()
        mock_create.return_value = client
        mock_session_cls.return_value.run.return_value = 0

        assert main() == 0
        client.close.assert_called_once()
        loop = mock_session_cls.call_args.args[0]
        assert "clear_context" in loop.registry

    @patch("tool_agent.interactive.InteractiveSession")
    @patch("tool_agent.interactive.create_llm_client")
    def test_keyboard_interrupt(self, mock_create, mock_session_cls):
        mock_create.return_value = MagicMock()
        mock_session_cls.return_value.run.side_effect = KeyboardInterrupt

        assert main() == 130
