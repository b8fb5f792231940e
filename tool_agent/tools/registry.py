"""
Tool Registry - single source of truth for the tools of a session.

A registry maps tool names to their definitions, advertises the declared
specs to the inference service and dispatches model-issued tool requests to
local handlers.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, Optional, Union

logger = logging.getLogger(__name__)


class DuplicateToolError(ValueError):
    """Raised when a tool name is registered twice."""


class ToolError(Exception):
    """Expected tool failure; reported back to the model as an error result."""


class SessionEffect(Enum):
    """Side effects a tool may request from the session driver."""

    CLEAR_CONTEXT = "clear_context"


@dataclass(frozen=True)
class ToolOutput:
    """Handler result carrying a session effect alongside its text."""

    text: str
    effect: Optional[SessionEffect] = None


HandlerResult = Union[str, ToolOutput]
Handler = Callable[[Any], HandlerResult]


@dataclass(frozen=True)
class ToolSpec:
    """What the inference service sees of a tool."""

    name: str
    description: str
    input_schema: dict


@dataclass(frozen=True)
class ToolDefinition:
    """Metadata for a tool - defined once, used everywhere."""

    name: str
    description: str
    input_schema: dict
    handler: Handler

    def spec(self) -> ToolSpec:
        return ToolSpec(self.name, self.description, self.input_schema)


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of dispatching one tool request."""

    text: str
    is_error: bool = False
    effect: Optional[SessionEffect] = None


class ToolRegistry:
    """Ordered collection of tool definitions keyed by name."""

    def __init__(self, tools: Iterable[ToolDefinition] = ()):
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools:
            self.register(tool)

    def register(self, definition: ToolDefinition) -> None:
        """
        Register a tool.

        Raises:
            DuplicateToolError: If a tool with the same name already exists.
        """
        if definition.name in self._tools:
            raise DuplicateToolError(f"tool already registered: {definition.name}")
        self._tools[definition.name] = definition

    def lookup(self, name: str) -> Optional[ToolDefinition]:
        """Get a tool by exact name."""
        return self._tools.get(name)

    def specs(self) -> list[ToolSpec]:
        """Tool specs in registration order."""
        return [tool.spec() for tool in self._tools.values()]

    def names(self) -> list[str]:
        return list(self._tools)

    def dispatch(self, name: str, raw_input: Any) -> DispatchResult:
        """
        Run the handler registered under ``name``.

        Never raises: an unknown name or a failing handler yields an error
        result the model can react to.

        Args:
            name: Tool name requested by the model.
            raw_input: Tool input as sent by the model, unvalidated.

        Returns:
            DispatchResult with the result text and error flag.
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.warning(f"Unknown tool requested: {name}")
            return DispatchResult(f"unknown tool: {name}", is_error=True)

        logger.debug(f"Dispatching tool '{name}' with input {raw_input!r}")
        try:
            result = tool.handler(raw_input)
        except Exception as e:
            logger.warning(f"Tool '{name}' failed: {e}")
            return DispatchResult(str(e) or type(e).__name__, is_error=True)

        if isinstance(result, ToolOutput):
            return DispatchResult(result.text, effect=result.effect)
        return DispatchResult(str(result))

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(list(self._tools.values()))
