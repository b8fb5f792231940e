"""
tool-agent - interactive text agent with local tools

This package provides:
- Conversation model and tool registry with dispatch
- Inference clients for Anthropic and OpenAI-compatible services
- Tool-use orchestration loop
- Interactive CLI
"""

from .conversation import ConversationState
from .llm_call import InferenceError, LLMClient, create_llm_client
from .orchestration import OrchestrationLoop, TurnResult
from .tools import ToolRegistry, build_default_registry

__all__ = [
    "ConversationState",
    "InferenceError",
    "LLMClient",
    "create_llm_client",
    "OrchestrationLoop",
    "TurnResult",
    "ToolRegistry",
    "build_default_registry",
]

__version__ = "0.1.0"
