"""
Tool-use orchestration loop.
"""

from .loop import MAX_TOOL_ROUNDS, OrchestrationLoop, ToolCallRecord, TurnResult

__all__ = [
    "MAX_TOOL_ROUNDS",
    "OrchestrationLoop",
    "ToolCallRecord",
    "TurnResult",
]
