"""
LLM Call Interface for tool-agent

Provides a unified ``send`` over two remote inference backends:
- Anthropic Messages API (default)
- OpenAI Chat Completions (and any OpenAI-compatible endpoint)

Both translate between the provider wire format and the conversation model
in ``tool_agent.conversation``.
"""

import json
import logging
import os
from typing import Any, Optional, Sequence

import anthropic
import openai

from .config import config
from .conversation import (
    Message,
    ModelResponse,
    Role,
    StopReason,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    Usage,
)
from .tools.registry import ToolSpec

logger = logging.getLogger(__name__)

DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-5",
    "openai": "gpt-4o",
}

OPENAI_FINISH_REASONS = {
    "tool_calls": StopReason.TOOL_USE,
    "function_call": StopReason.TOOL_USE,
    "stop": StopReason.END_TURN,
    "length": StopReason.MAX_TOKENS,
}


class InferenceError(Exception):
    """Raised when the remote inference service cannot produce a response."""


class LLMClient:
    """Base class for inference backends."""

    provider = ""

    def __init__(
        self,
        model: str,
        max_tokens: Optional[int] = None,
        system_prompt: Optional[str] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens if max_tokens is not None else config.inference.max_tokens
        self.system_prompt = (
            system_prompt if system_prompt is not None else config.inference.system_prompt
        )

    def send(self, messages: Sequence[Message], tools: Sequence[ToolSpec]) -> ModelResponse:
        """Send the whole conversation plus the tool specs; return one response.

        Raises:
            InferenceError: On any transport or API failure.
        """
        raise NotImplementedError

    def close(self) -> None:
        pass


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------


def _anthropic_block(block) -> dict:
    if isinstance(block, TextBlock):
        return {"type": "text", "text": block.text}
    if isinstance(block, ToolUseBlock):
        return {"type": "tool_use", "id": block.id, "name": block.name, "input": block.input}
    return {
        "type": "tool_result",
        "tool_use_id": block.tool_use_id,
        "content": block.content,
        "is_error": block.is_error,
    }


def to_anthropic_messages(messages: Sequence[Message]) -> list[dict]:
    return [
        {"role": m.role.value, "content": [_anthropic_block(b) for b in m.content]}
        for m in messages
    ]


def to_anthropic_tools(tools: Sequence[ToolSpec]) -> list[dict]:
    return [
        {"name": t.name, "description": t.description, "input_schema": t.input_schema}
        for t in tools
    ]


def from_anthropic_response(response: Any) -> ModelResponse:
    blocks = []
    for block in response.content:
        if block.type == "text":
            blocks.append(TextBlock(block.text))
        elif block.type == "tool_use":
            blocks.append(ToolUseBlock(block.id, block.name, block.input))
        else:
            logger.debug(f"Ignoring content block of type {block.type}")

    usage = None
    if getattr(response, "usage", None) is not None:
        usage = Usage(response.usage.input_tokens, response.usage.output_tokens)
    return ModelResponse(
        message=Message(Role.ASSISTANT, tuple(blocks)),
        stop_reason=StopReason.parse(response.stop_reason),
        model=getattr(response, "model", None),
        usage=usage,
    )


class AnthropicClient(LLMClient):
    """Backend for the Anthropic Messages API."""

    provider = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_tokens: Optional[int] = None,
        system_prompt: Optional[str] = None,
        client: Any = None,
    ):
        super().__init__(model or DEFAULT_MODELS["anthropic"], max_tokens, system_prompt)
        self.client = client or anthropic.Anthropic(
            api_key=api_key,
            base_url=base_url or None,
            timeout=timeout if timeout is not None else config.inference.timeout,
        )

    def send(self, messages: Sequence[Message], tools: Sequence[ToolSpec]) -> ModelResponse:
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": to_anthropic_messages(messages),
        }
        if tools:
            kwargs["tools"] = to_anthropic_tools(tools)
        if self.system_prompt:
            kwargs["system"] = self.system_prompt

        logger.debug(f"Anthropic request: {len(messages)} messages, {len(tools)} tools")
        try:
            response = self.client.messages.create(**kwargs)
        except anthropic.APIError as e:
            logger.error(f"Anthropic call failed: {e}")
            raise InferenceError(f"anthropic: {e}") from e
        return from_anthropic_response(response)

    def close(self) -> None:
        self.client.close()


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------


def _encode_arguments(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _decode_arguments(raw: Optional[str]) -> Any:
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        # handed to the tool as-is; the tool reports the bad input
        logger.warning(f"Tool call arguments are not valid JSON: {raw!r}")
        return raw


def to_openai_messages(messages: Sequence[Message], system_prompt: str = "") -> list[dict]:
    """
    Convert the conversation to Chat Completions messages.

    A user message carrying tool results becomes one ``tool`` message per
    result, followed by a ``user`` message for any text it also carries.
    """
    result: list[dict] = []
    if system_prompt:
        result.append({"role": "system", "content": system_prompt})

    for message in messages:
        if message.role is Role.ASSISTANT:
            entry: dict = {"role": "assistant", "content": message.text or None}
            if message.tool_uses:
                entry["tool_calls"] = [
                    {
                        "id": use.id,
                        "type": "function",
                        "function": {"name": use.name, "arguments": _encode_arguments(use.input)},
                    }
                    for use in message.tool_uses
                ]
            result.append(entry)
            continue

        for tool_result in message.tool_results:
            content = tool_result.content
            if tool_result.is_error:
                content = f"Error: {content}"
            result.append({"role": "tool", "tool_call_id": tool_result.tool_use_id, "content": content})
        if message.text_blocks:
            result.append({"role": "user", "content": message.text})
    return result


def to_openai_tools(tools: Sequence[ToolSpec]) -> list[dict]:
    return [
        {
            "type": "function",
            "function": {
                "name": t.name,
                "description": t.description,
                "parameters": t.input_schema,
            },
        }
        for t in tools
    ]


def from_openai_response(response: Any) -> ModelResponse:
    if not response.choices:
        raise InferenceError("openai: response contained no choices")
    choice = response.choices[0]
    blocks: list = []
    if choice.message.content:
        blocks.append(TextBlock(choice.message.content))
    for call in choice.message.tool_calls or []:
        blocks.append(
            ToolUseBlock(call.id, call.function.name, _decode_arguments(call.function.arguments))
        )

    # Some compatible servers (vLLM, Ollama) report "stop" alongside tool calls.
    if choice.message.tool_calls:
        stop_reason = StopReason.TOOL_USE
    else:
        stop_reason = OPENAI_FINISH_REASONS.get(choice.finish_reason, StopReason.OTHER)

    usage = None
    if getattr(response, "usage", None) is not None:
        usage = Usage(response.usage.prompt_tokens or 0, response.usage.completion_tokens or 0)
    return ModelResponse(
        message=Message(Role.ASSISTANT, tuple(blocks)),
        stop_reason=stop_reason,
        model=getattr(response, "model", None),
        usage=usage,
    )


class OpenAIClient(LLMClient):
    """Backend for OpenAI Chat Completions and compatible servers."""

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_tokens: Optional[int] = None,
        system_prompt: Optional[str] = None,
        client: Any = None,
    ):
        super().__init__(model or DEFAULT_MODELS["openai"], max_tokens, system_prompt)
        self.client = client or openai.OpenAI(
            api_key=api_key,
            base_url=base_url or None,
            timeout=timeout if timeout is not None else config.inference.timeout,
        )

    def send(self, messages: Sequence[Message], tools: Sequence[ToolSpec]) -> ModelResponse:
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": to_openai_messages(messages, self.system_prompt),
        }
        if tools:
            kwargs["tools"] = to_openai_tools(tools)

        logger.debug(f"OpenAI request: {len(messages)} messages, {len(tools)} tools")
        try:
            response = self.client.chat.completions.create(**kwargs)
        except openai.OpenAIError as e:
            logger.error(f"OpenAI call failed: {e}")
            raise InferenceError(f"openai: {e}") from e
        return from_openai_response(response)

    def close(self) -> None:
        self.client.close()


def create_llm_client(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
) -> LLMClient:
    """
    Build the configured inference backend.

    The API key comes from ``api_key``, then ``AGENT_API_KEY``, then the
    provider's own variable (``ANTHROPIC_API_KEY`` / ``OPENAI_API_KEY``).
    An OpenAI-compatible server behind ``base_url`` may run without one.

    Raises:
        InferenceError: Unknown provider or missing API key.
    """
    provider = (provider or config.inference.provider or "anthropic").lower()
    model = model or config.inference.model or None
    base_url = base_url or config.inference.base_url or None

    if provider == "anthropic":
        key = api_key or config.inference.api_key or os.getenv("ANTHROPIC_API_KEY", "")
        if not key:
            raise InferenceError("no API key: set AGENT_API_KEY or ANTHROPIC_API_KEY")
        return AnthropicClient(api_key=key, model=model, base_url=base_url)

    if provider == "openai":
        key = api_key or config.inference.api_key or os.getenv("OPENAI_API_KEY", "")
        if not key:
            if not base_url:
                raise InferenceError("no API key: set AGENT_API_KEY or OPENAI_API_KEY")
            key = "not-needed"
        return OpenAIClient(api_key=key, model=model, base_url=base_url)

    raise InferenceError(f"unknown provider: {provider}")
