"""
Pytest configuration and fixtures for tool-agent tests.
"""

from typing import Any, Sequence

import pytest

from tool_agent.conversation import (
    Message,
    ModelResponse,
    Role,
    StopReason,
    TextBlock,
    ToolUseBlock,
)
from tool_agent.llm_call import InferenceError, LLMClient
from tool_agent.tools import ToolRegistry, define_tool
from tool_agent.tools.schema import ToolInput


def _text_response(text: str, stop_reason: StopReason = StopReason.END_TURN) -> ModelResponse:
    """A final assistant response carrying one text block."""
    return ModelResponse(Message(Role.ASSISTANT, (TextBlock(text),)), stop_reason)


def _tool_use_response(*calls: tuple, text: str = "") -> ModelResponse:
    """An assistant response requesting tools; each call is (id, name, input)."""
    blocks: list = [TextBlock(text)] if text else []
    blocks.extend(ToolUseBlock(id_, name, input_) for id_, name, input_ in calls)
    return ModelResponse(Message(Role.ASSISTANT, tuple(blocks)), StopReason.TOOL_USE)


class ScriptedClient(LLMClient):
    """Inference client that replays a fixed list of responses.

    Each entry is a ModelResponse or an exception to raise. Every request is
    recorded as a snapshot of (messages, tool names).
    """

    provider = "scripted"

    def __init__(self, responses: Sequence[Any]):
        super().__init__(model="scripted-model", max_tokens=1024, system_prompt="")
        self.responses = list(responses)
        self.requests: list[tuple[tuple[Message, ...], list[str]]] = []
        self.closed = False

    def send(self, messages, tools):
        self.requests.append((tuple(messages), [t.name for t in tools]))
        if not self.responses:
            raise InferenceError("script exhausted")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


class EchoInput(ToolInput):
    text: str = ""


@pytest.fixture
def scripted_client():
    """Factory for ScriptedClient instances."""
    return ScriptedClient


@pytest.fixture
def text_response():
    """Builder for final text responses."""
    return _text_response


@pytest.fixture
def tool_use_response():
    """Builder for tool-use responses."""
    return _tool_use_response


@pytest.fixture
def echo_tool():
    return define_tool("echo", "Echo the text back.", EchoInput, lambda args: f"echo: {args.text}")


@pytest.fixture
def registry(echo_tool):
    """Registry with a single echo tool."""
    return ToolRegistry([echo_tool])
