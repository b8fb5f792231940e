"""
Core orchestration loop.

Turns one user utterance into zero or more tool-use rounds followed by a
final reply. The whole conversation is sent on every round together with the
registry's tool specs; tool requests in a response are dispatched through
the registry and answered in a single user message before the next send.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..conversation import (
    ConversationState,
    Message,
    ModelResponse,
    Role,
    StopReason,
    ToolResultBlock,
    ToolUseBlock,
)
from ..llm_call import InferenceError, LLMClient
from ..tools.registry import DispatchResult, SessionEffect, ToolRegistry
from ..tracing import TracingContext

logger = logging.getLogger(__name__)

# Upper bound on tool-use rounds per user turn.
MAX_TOOL_ROUNDS = 10

MAX_PARALLEL_TOOLS = 8


@dataclass
class ToolCallRecord:
    """One dispatched tool request."""

    round: int
    id: str
    name: str
    input: Any
    result: str
    is_error: bool = False


@dataclass
class TurnResult:
    """Outcome of one user turn."""

    text: str
    response: Optional[ModelResponse] = None
    rounds: int = 0
    tool_calls: list[ToolCallRecord] = field(default_factory=list)
    effects: list[SessionEffect] = field(default_factory=list)
    truncated: bool = False


def _final_message(message: Message) -> Message:
    """
    Drop tool requests from a message that ends the turn.

    A response cut off by the token limit can carry tool requests that are
    never dispatched; every tool request kept in history needs a result.
    """
    uses = message.tool_uses
    if not uses:
        return message
    logger.warning(
        "Dropping %d tool request(s) from a response that ended the turn: %s",
        len(uses),
        ", ".join(use.name for use in uses),
    )
    return Message(message.role, tuple(b for b in message.content if not isinstance(b, ToolUseBlock)))


class OrchestrationLoop:
    """
    Tool-use loop over a remote inference client.

    Per-turn flow:
        1. Append the user utterance
        2. Send conversation + tool specs
        3. While the model stops for tool use: append its message, dispatch
           every request, append all results in one user message, send again
        4. Append the final response, minus any tool requests it still
           carries; its text is the reply. Empty final responses are skipped

    The loop stops after ``max_rounds`` tool rounds without a further send.
    """

    def __init__(
        self,
        client: LLMClient,
        registry: ToolRegistry,
        max_rounds: int = MAX_TOOL_ROUNDS,
        parallel_tools: bool = False,
        tracing_context: Optional[TracingContext] = None,
        on_tool_call: Optional[Callable[[str, Any], None]] = None,
    ):
        if max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        self.client = client
        self.registry = registry
        self.max_rounds = max_rounds
        self.parallel_tools = parallel_tools
        self.tracing_context = tracing_context
        self.on_tool_call = on_tool_call

    def run_turn(self, conversation: ConversationState, user_text: str) -> TurnResult:
        """
        Run one user turn to completion.

        Args:
            conversation: Session history; mutated by appends only.
            user_text: The user's utterance.

        Returns:
            TurnResult with the visible reply and the tool calls made.

        Raises:
            InferenceError: If a send fails. The turn is abandoned and nothing
                is appended for the failed send.
        """
        conversation.append(Message.user_text(user_text))
        logger.debug(f"Starting turn ({len(conversation)} messages in history)")

        if self.tracing_context is None:
            return self._run_loop(conversation)

        self.tracing_context.start_trace(
            name="agent_turn",
            query=user_text,
            metadata={"max_rounds": self.max_rounds},
        )
        try:
            result = self._run_loop(conversation)
        except Exception:
            self.tracing_context.end_trace(status="error")
            raise
        self.tracing_context.end_trace(
            output=result.text[:2000],
            metadata={
                "rounds": result.rounds,
                "tool_calls": len(result.tool_calls),
                "truncated": result.truncated,
            },
        )
        return result

    def _run_loop(self, conversation: ConversationState) -> TurnResult:
        records: list[ToolCallRecord] = []
        effects: list[SessionEffect] = []
        rounds = 0

        response = self._send(conversation, rounds + 1)
        while response.stop_reason is StopReason.TOOL_USE:
            uses = response.message.tool_uses
            if not uses:
                logger.warning("Model stopped for tool use without requesting a tool")
                break

            conversation.append(response.message)
            results = self._dispatch_all(uses)
            rounds += 1

            blocks = []
            for use, result in zip(uses, results):
                blocks.append(ToolResultBlock(use.id, result.text, result.is_error))
                records.append(
                    ToolCallRecord(rounds, use.id, use.name, use.input, result.text, result.is_error)
                )
                if result.effect is not None:
                    effects.append(result.effect)
            conversation.append(Message(Role.USER, tuple(blocks)))

            if rounds >= self.max_rounds:
                logger.warning("Tool round limit (%d) reached, ending turn", self.max_rounds)
                return TurnResult(
                    text=response.message.text,
                    response=response,
                    rounds=rounds,
                    tool_calls=records,
                    effects=effects,
                    truncated=True,
                )
            response = self._send(conversation, rounds + 1)

        final = _final_message(response.message)
        if final.content:
            conversation.append(final)
        else:
            logger.debug("Empty final response not added to history")
        logger.debug("Turn finished after %d tool round(s), stop reason %s", rounds, response.stop_reason.value)
        return TurnResult(
            text=response.message.text,
            response=response,
            rounds=rounds,
            tool_calls=records,
            effects=effects,
        )

    def _send(self, conversation: ConversationState, round_number: int) -> ModelResponse:
        messages = conversation.messages
        tools = self.registry.specs()
        logger.debug(f"Round {round_number}: sending {len(messages)} messages")

        if self.tracing_context is None:
            return self.client.send(messages, tools)

        with self.tracing_context.generation(
            name=f"inference_round_{round_number}",
            model=getattr(self.client, "model", "unknown"),
            input=[{"role": m.role.value, "text": m.text} for m in messages],
            model_parameters={"max_tokens": getattr(self.client, "max_tokens", None)},
        ) as gen:
            try:
                response = self.client.send(messages, tools)
            except InferenceError:
                gen.set_status("error")
                raise
            gen.set_output(response.message.text[:2000])
            if response.usage:
                gen.set_usage(
                    input_tokens=response.usage.input_tokens,
                    output_tokens=response.usage.output_tokens,
                )
            return response

    def _dispatch_all(self, uses: list[ToolUseBlock]) -> list[DispatchResult]:
        """Dispatch the requests of one round; results are in request order."""
        if self.on_tool_call:
            for use in uses:
                self.on_tool_call(use.name, use.input)

        if not self.parallel_tools or len(uses) == 1:
            return [self._dispatch(use) for use in uses]

        with ThreadPoolExecutor(max_workers=min(len(uses), MAX_PARALLEL_TOOLS)) as pool:
            return list(pool.map(self._dispatch, uses))

    def _dispatch(self, use: ToolUseBlock) -> DispatchResult:
        if self.tracing_context is None:
            return self.registry.dispatch(use.name, use.input)

        with self.tracing_context.span(name=f"tool:{use.name}", input=use.input) as span:
            result = self.registry.dispatch(use.name, use.input)
            span.set_output({"result": result.text[:500]})
            if result.is_error:
                span.set_status("error")
            return result
