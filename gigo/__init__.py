"""
GIGO - Prompt Upscaler
======================

Rewrites lazy, terse prompts into precise ones. A host-managed model is tried
first, then the configured OpenAI- or Anthropic-compatible API, and every
rewrite is kept in a bounded history so the original can be restored.

Example Usage:
    >>> import asyncio
    >>> from gigo import PromptUpscaler, Settings, UserConfig, create_host_client
    >>>
    >>> async def main():
    ...     settings = Settings(UserConfig())
    ...     upscaler = PromptUpscaler(settings, create_host_client(settings))
    ...     outcome = await upscaler.upscale("add auth")
    ...     print(outcome.text if outcome.success else outcome.reason)
    >>>
    >>> asyncio.run(main())
"""

__version__ = "1.0.0"

from .cancellation import CancellationToken
from .commands import UpscaleCommands
from .config import MemoryConfig, Settings, UserConfig
from .exceptions import ConfigurationError, GigoError, StorageError
from .history import HistoryEntry, HistoryStore
from .outcome import (
    FailureKind,
    ProviderSource,
    UpscaleFailure,
    UpscaleOutcome,
    UpscaleSuccess,
)
from .providers import (
    AnthropicClient,
    HostModelClient,
    OllamaModelHost,
    OpenAIClient,
    ProviderClient,
    create_external_client,
    create_host_client,
)
from .routing import EnvironmentSnapshot, Route, RoutingDecision, decide_route
from .storage import SQLiteKeyValueStore
from .upscaler import SYSTEM_PROMPT, PromptUpscaler

__all__ = [
    # Version
    "__version__",

    # Orchestration
    "PromptUpscaler",
    "SYSTEM_PROMPT",
    "CancellationToken",
    "UpscaleCommands",

    # Outcomes
    "UpscaleOutcome",
    "UpscaleSuccess",
    "UpscaleFailure",
    "FailureKind",
    "ProviderSource",

    # Providers
    "ProviderClient",
    "HostModelClient",
    "OllamaModelHost",
    "OpenAIClient",
    "AnthropicClient",
    "create_external_client",
    "create_host_client",

    # History
    "HistoryEntry",
    "HistoryStore",
    "SQLiteKeyValueStore",

    # Routing
    "RoutingDecision",
    "EnvironmentSnapshot",
    "Route",
    "decide_route",

    # Configuration and errors
    "Settings",
    "UserConfig",
    "MemoryConfig",
    "GigoError",
    "ConfigurationError",
    "StorageError",
]
