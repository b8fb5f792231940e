#!/usr/bin/env python3
"""
tool-agent Interactive CLI

Reads one line at a time from stdin, runs it through the orchestration loop
and prints the agent's reply. ``/clear`` or ``/reset`` empties the
conversation; end of input exits.
"""

import json
import logging
import sys
import uuid
from typing import Any, Optional, TextIO

from .config import config
from .conversation import ConversationState
from .llm_call import InferenceError, create_llm_client
from .orchestration import OrchestrationLoop, TurnResult
from .tools import SessionEffect, build_default_registry
from .tracing import TracingContext, init_tracing_client, shutdown_tracing

logger = logging.getLogger(__name__)

RESET_COMMANDS = ("/clear", "/reset")

BLUE = "\033[94m"
YELLOW = "\033[93m"
GREEN = "\033[92m"
RESET = "\033[0m"

BANNER = "Chat with the agent. Type /clear to start over, Ctrl+D to exit."


def setup_logging(level: str = "WARNING") -> None:
    """Configure logging to stderr at the given level name."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _colored(stream: TextIO, color: str, text: str) -> str:
    isatty = getattr(stream, "isatty", None)
    if isatty is not None and isatty():
        return f"{color}{text}{RESET}"
    return text


def _format_input(raw_input: Any) -> str:
    if isinstance(raw_input, str):
        return raw_input
    try:
        return json.dumps(raw_input)
    except (TypeError, ValueError):
        return repr(raw_input)


class InteractiveSession:
    """Line-oriented chat session over an orchestration loop."""

    def __init__(
        self,
        loop: OrchestrationLoop,
        conversation: Optional[ConversationState] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        self.loop = loop
        self.conversation = conversation if conversation is not None else ConversationState()
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        if self.loop.on_tool_call is None:
            self.loop.on_tool_call = self.print_tool_call

    def print_tool_call(self, name: str, raw_input: Any) -> None:
        line = f"tool: {name}({_format_input(raw_input)})"
        print(_colored(self.stdout, GREEN, line), file=self.stdout, flush=True)

    def _prompt(self) -> None:
        self.stdout.write(_colored(self.stdout, BLUE, "You") + ": ")
        self.stdout.flush()

    def clear(self) -> None:
        self.conversation.clear()
        logger.info("Conversation cleared")

    def handle_line(self, line: str) -> None:
        """Process one line of user input."""
        text = line.strip()
        if not text:
            print("Please enter a message.", file=self.stderr, flush=True)
            return

        if text in RESET_COMMANDS:
            self.clear()
            print("Conversation cleared.", file=self.stdout, flush=True)
            return

        try:
            result = self.loop.run_turn(self.conversation, text)
        except InferenceError as e:
            print(f"Error: {e}", file=self.stderr, flush=True)
            return

        if result.text:
            label = _colored(self.stdout, YELLOW, "Agent")
            print(f"{label}: {result.text}", file=self.stdout, flush=True)
        self._apply_effects(result)

    def _apply_effects(self, result: TurnResult) -> None:
        for effect in result.effects:
            if effect is SessionEffect.CLEAR_CONTEXT:
                self.clear()

    def run(self) -> int:
        """Run until input is exhausted. Returns the process exit code."""
        print(BANNER, file=self.stdout, flush=True)
        while True:
            self._prompt()
            line = self.stdin.readline()
            if not line:
                # EOF
                self.stdout.write("\n")
                self.stdout.flush()
                return 0
            self.handle_line(line)


def main() -> int:
    """Main entry point."""
    setup_logging(config.log_level)

    tracing = init_tracing_client()
    client = None
    try:
        client = create_llm_client()

        tracing_context = None
        if tracing.enabled:
            session_id = uuid.uuid4().hex
            tracing_context = TracingContext(execution_id=session_id[:8], session_id=session_id)

        loop = OrchestrationLoop(
            client,
            build_default_registry(),
            max_rounds=config.orchestration.max_tool_rounds,
            parallel_tools=config.orchestration.parallel_tools,
            tracing_context=tracing_context,
        )
        return InteractiveSession(loop, ConversationState()).run()
    except (InferenceError, ValueError) as e:
        # Only startup can raise these; the session reports turn errors itself.
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print(file=sys.stdout)
        return 130
    finally:
        if client is not None:
            client.close()
        shutdown_tracing()


if __name__ == "__main__":
    sys.exit(main())
