"""
Process-wide Langfuse client for turn tracing.

Tracing is optional: without both keys, or when the server refuses the
credentials at startup, the agent runs untraced and every tracing call in
``context.py`` becomes a no-op.
"""

import logging
from typing import Optional

from langfuse import Langfuse

from ..config import LangfuseConfig, config

logger = logging.getLogger(__name__)


class TracingClient:
    """Holds the Langfuse SDK client once it has passed ``auth_check``."""

    def __init__(self, settings: LangfuseConfig):
        self.client: Optional[Langfuse] = None
        self.error: Optional[str] = None

        if not settings.enabled:
            self.error = "Langfuse credentials not configured"
            logger.debug(f"Tracing disabled: {self.error}")
            return

        try:
            client = Langfuse(
                public_key=settings.public_key,
                secret_key=settings.secret_key,
                host=settings.host or None,
                debug=settings.debug,
            )
            if not client.auth_check():
                self.error = "Langfuse auth_check() failed - check LANGFUSE_HOST and keys"
        except Exception as e:
            self.error = f"Langfuse unavailable: {e}"

        if self.error:
            logger.warning(f"Tracing disabled: {self.error}")
            return
        self.client = client
        logger.info(f"Langfuse tracing enabled (host: {settings.host or 'default'})")

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def shutdown(self) -> None:
        """Flush pending events and stop the SDK's exporter."""
        if self.client is None:
            return
        try:
            self.client.shutdown()
        except Exception as e:
            logger.warning(f"Error during tracing shutdown: {e}")
        self.client = None


_tracing_client: Optional[TracingClient] = None


def init_tracing_client(settings: Optional[LangfuseConfig] = None) -> TracingClient:
    """Create the process-wide client from ``settings`` (default: environment)."""
    global _tracing_client
    _tracing_client = TracingClient(settings or config.langfuse)
    return _tracing_client


def get_tracing_client() -> Optional[TracingClient]:
    return _tracing_client


def shutdown_tracing() -> None:
    global _tracing_client
    if _tracing_client:
        _tracing_client.shutdown()
        _tracing_client = None
