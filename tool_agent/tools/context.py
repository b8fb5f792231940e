"""
The clear_context tool.

The tool itself does not touch the conversation; it returns a
CLEAR_CONTEXT effect which the session driver applies once the turn is over.
"""

from .registry import SessionEffect, ToolOutput
from .schema import ToolInput, define_tool


class ClearContextInput(ToolInput):
    pass


def clear_context() -> ToolOutput:
    return ToolOutput("Context cleared.", SessionEffect.CLEAR_CONTEXT)


CLEAR_CONTEXT_TOOL = define_tool(
    "clear_context",
    "Clear the conversation history so the next user message starts a fresh context. "
    "Use when the user asks to start over, forget the past, or clear the chat.",
    ClearContextInput,
    lambda args: clear_context(),
)
