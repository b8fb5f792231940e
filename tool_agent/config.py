"""
Configuration management for tool-agent.

Loads all configuration from environment variables with sensible defaults
for local use. A ``.env`` file in the working directory is honoured.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


@dataclass
class InferenceConfig:
    """Configuration for the remote inference service."""
    provider: str = os.getenv("AGENT_PROVIDER", "anthropic")
    model: str = os.getenv("AGENT_MODEL", "")
    base_url: str = os.getenv("AGENT_BASE_URL", "")
    api_key: str = os.getenv("AGENT_API_KEY", "")
    max_tokens: int = int(os.getenv("AGENT_MAX_TOKENS", "1024"))
    timeout: float = float(os.getenv("AGENT_TIMEOUT", "120"))
    system_prompt: str = os.getenv("AGENT_SYSTEM_PROMPT", "")


@dataclass
class OrchestrationConfig:
    """Configuration for the tool-use loop."""
    max_tool_rounds: int = int(os.getenv("AGENT_MAX_TOOL_ROUNDS", "10"))
    parallel_tools: bool = _env_bool("AGENT_PARALLEL_TOOLS")


@dataclass
class ToolConfig:
    """Configuration for the local tools."""
    command_timeout: float = float(os.getenv("TOOL_COMMAND_TIMEOUT", "120"))
    fetch_timeout: float = float(os.getenv("TOOL_FETCH_TIMEOUT", "60"))
    html_timeout: float = float(os.getenv("TOOL_HTML_TIMEOUT", "30"))
    search_timeout: float = float(os.getenv("TOOL_SEARCH_TIMEOUT", "15"))
    search_url: str = os.getenv("TOOL_SEARCH_URL", "https://html.duckduckgo.com/html/")
    user_agent: str = os.getenv("TOOL_USER_AGENT", "tool-agent/0.1")


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse observability.

    Tracing auto-enables when both public_key and secret_key are provided.
    """
    public_key: str = os.getenv("LANGFUSE_PUBLIC_KEY", "")
    secret_key: str = os.getenv("LANGFUSE_SECRET_KEY", "")
    host: str = os.getenv("LANGFUSE_HOST", "")
    debug: bool = _env_bool("LANGFUSE_DEBUG")

    @property
    def enabled(self) -> bool:
        """Auto-enable when both keys are configured."""
        return bool(self.public_key and self.secret_key)


@dataclass
class Config:
    """Main configuration container."""
    inference: InferenceConfig
    orchestration: OrchestrationConfig
    tools: ToolConfig
    langfuse: LangfuseConfig
    log_level: str = os.getenv("LOG_LEVEL", "WARNING")


def get_config() -> Config:
    """Get the application configuration."""
    return Config(
        inference=InferenceConfig(),
        orchestration=OrchestrationConfig(),
        tools=ToolConfig(),
        langfuse=LangfuseConfig(),
    )


# Global config instance
config = get_config()
