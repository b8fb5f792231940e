"""
Conversation model.

Messages are immutable records of a role and an ordered tuple of content
blocks. ``ConversationState`` owns the history of one session and can only
grow by ``append`` or be emptied by ``clear``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional, Union


class Role(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"


class StopReason(str, Enum):
    """Why the inference service stopped generating."""

    TOOL_USE = "tool_use"
    END_TURN = "end_turn"
    MAX_TOKENS = "max_tokens"
    STOP_SEQUENCE = "stop_sequence"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str]) -> "StopReason":
        """Map a provider stop reason string onto the enum."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class TextBlock:
    """Human-visible text."""

    text: str


@dataclass(frozen=True)
class ToolUseBlock:
    """A tool invocation requested by the model."""

    id: str
    name: str
    input: Any = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResultBlock:
    """The outcome of a tool invocation, correlated by ``tool_use_id``."""

    tool_use_id: str
    content: str
    is_error: bool = False


ContentBlock = Union[TextBlock, ToolUseBlock, ToolResultBlock]


@dataclass(frozen=True)
class Message:
    """A single conversation turn."""

    role: Role
    content: tuple[ContentBlock, ...]

    def __post_init__(self) -> None:
        # Accept any iterable of blocks but always store a tuple.
        if not isinstance(self.content, tuple):
            object.__setattr__(self, "content", tuple(self.content))

    @classmethod
    def user_text(cls, text: str) -> "Message":
        return cls(Role.USER, (TextBlock(text),))

    @classmethod
    def assistant_text(cls, text: str) -> "Message":
        return cls(Role.ASSISTANT, (TextBlock(text),))

    @property
    def text_blocks(self) -> list[str]:
        return [b.text for b in self.content if isinstance(b, TextBlock)]

    @property
    def text(self) -> str:
        """All text blocks joined by newlines."""
        return "\n".join(self.text_blocks)

    @property
    def tool_uses(self) -> list[ToolUseBlock]:
        return [b for b in self.content if isinstance(b, ToolUseBlock)]

    @property
    def tool_results(self) -> list[ToolResultBlock]:
        return [b for b in self.content if isinstance(b, ToolResultBlock)]


@dataclass(frozen=True)
class Usage:
    """Token usage reported for one inference call."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class ModelResponse:
    """A single response from the inference service."""

    message: Message
    stop_reason: StopReason
    model: Optional[str] = None
    usage: Optional[Usage] = None


class ConversationState:
    """Ordered message history of one session."""

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def append(self, message: Message) -> None:
        """
        Append a message in chronological order.

        Raises:
            ValueError: If a tool block appears under the wrong role.
        """
        for block in message.content:
            if isinstance(block, ToolUseBlock) and message.role is not Role.ASSISTANT:
                raise ValueError("tool use blocks belong in assistant messages")
            if isinstance(block, ToolResultBlock) and message.role is not Role.USER:
                raise ValueError("tool result blocks belong in user messages")
        self._messages.append(message)

    def clear(self) -> None:
        """Drop the whole history."""
        self._messages.clear()

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of the history."""
        return tuple(self._messages)

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
