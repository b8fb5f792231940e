"""
tool-agent local tools

Available tools:
- files: read, create, edit, copy, move, remove, stat
- directories: list, recursive list, search by name, create, remove, cwd
- grep: substring search in one file or a tree
- shell: run_command
- web: fetch_html, fetch_file, search_internet (DuckDuckGo)
- context: clear_context
"""

from .registry import (
    DispatchResult,
    DuplicateToolError,
    SessionEffect,
    ToolDefinition,
    ToolError,
    ToolOutput,
    ToolRegistry,
    ToolSpec,
)
from .schema import ToolInput, ToolInputError, define_tool
from .files import FILE_TOOLS
from .directories import DIRECTORY_TOOLS
from .grep import GREP_TOOLS
from .shell import RUN_COMMAND_TOOL
from .web import WEB_TOOLS
from .context import CLEAR_CONTEXT_TOOL

DEFAULT_TOOLS = [
    *FILE_TOOLS,
    *DIRECTORY_TOOLS,
    *GREP_TOOLS,
    RUN_COMMAND_TOOL,
    *WEB_TOOLS,
]


def build_default_registry(include_clear_context: bool = True) -> ToolRegistry:
    """Registry holding the standard tool catalogue."""
    registry = ToolRegistry(DEFAULT_TOOLS)
    if include_clear_context:
        registry.register(CLEAR_CONTEXT_TOOL)
    return registry


__all__ = [
    "DispatchResult",
    "DuplicateToolError",
    "SessionEffect",
    "ToolDefinition",
    "ToolError",
    "ToolOutput",
    "ToolRegistry",
    "ToolSpec",
    "ToolInput",
    "ToolInputError",
    "define_tool",
    "DEFAULT_TOOLS",
    "CLEAR_CONTEXT_TOOL",
    "build_default_registry",
]
