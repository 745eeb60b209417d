"""
Credentials Lookup for GIGO
===========================
Resolves provider API keys when none is set in ``config.json``:
1. System keyring (OS credential store)
2. Environment variables (fallback)

Keys are only ever handled as opaque strings; the upscaler just needs to
know whether one is present.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

import keyring
from keyring.errors import KeyringError
from rich.console import Console
from rich.prompt import Prompt

logger = logging.getLogger(__name__)

SERVICE_NAME = "gigo"

PROVIDER_LABELS = {
    "openai": "OpenAI-compatible chat completions",
    "anthropic": "Anthropic-compatible messages",
}


class CredentialBackend(ABC):
    """Somewhere a provider key can be looked up"""

    persistent = True

    @abstractmethod
    def get(self, provider: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, provider: str, api_key: str) -> bool:
        pass

    @abstractmethod
    def delete(self, provider: str) -> bool:
        pass

    @property
    def is_available(self) -> bool:
        return True


class KeyringBackend(CredentialBackend):
    """OS keychain entries under the ``gigo`` service"""

    @property
    def is_available(self) -> bool:
        try:
            keyring.get_password(SERVICE_NAME, "__probe__")
        except KeyringError:
            return False
        return True

    def get(self, provider: str) -> Optional[str]:
        try:
            return keyring.get_password(SERVICE_NAME, provider)
        except KeyringError as e:
            logger.warning(f"Keyring lookup failed for {provider}: {e}")
            return None

    def set(self, provider: str, api_key: str) -> bool:
        try:
            keyring.set_password(SERVICE_NAME, provider, api_key)
        except KeyringError as e:
            logger.error(f"Keyring write failed for {provider}: {e}")
            return False
        logger.info(f"Stored {provider} key in keyring")
        return True

    def delete(self, provider: str) -> bool:
        try:
            keyring.delete_password(SERVICE_NAME, provider)
        except KeyringError as e:
            logger.warning(f"Keyring delete failed for {provider}: {e}")
            return False
        return True


class EnvironmentBackend(CredentialBackend):
    """``OPENAI_API_KEY`` / ``ANTHROPIC_API_KEY``; writes last for this process only"""

    persistent = False

    @staticmethod
    def variable_for(provider: str) -> str:
        return f"{provider.upper()}_API_KEY"

    def get(self, provider: str) -> Optional[str]:
        return os.environ.get(self.variable_for(provider))

    def set(self, provider: str, api_key: str) -> bool:
        os.environ[self.variable_for(provider)] = api_key
        logger.warning(f"{provider} key kept in the environment for this session only")
        return True

    def delete(self, provider: str) -> bool:
        os.environ.pop(self.variable_for(provider), None)
        return True


class CredentialManager:
    """Ordered lookup over backends, keyring first"""

    def __init__(self, backends: Optional[list[CredentialBackend]] = None):
        self._backends = backends or [KeyringBackend(), EnvironmentBackend()]

    def _available(self) -> list[CredentialBackend]:
        return [backend for backend in self._backends if backend.is_available]

    def get_api_key(self, provider: str) -> Optional[str]:
        provider = provider.lower()
        for backend in self._available():
            api_key = backend.get(provider)
            if api_key:
                logger.debug(f"Found {provider} key via {type(backend).__name__}")
                return api_key
        logger.debug(f"No stored key for {provider}")
        return None

    def set_credential(self, provider: str, api_key: str) -> bool:
        """Store in the first persistent backend, else the environment"""
        api_key = (api_key or "").strip()
        if not api_key:
            logger.error("Refusing to store an empty API key")
            return False

        provider = provider.lower()
        available = self._available()
        for backend in available:
            if backend.persistent and backend.set(provider, api_key):
                return True
        return EnvironmentBackend().set(provider, api_key)

    def delete_credential(self, provider: str) -> bool:
        provider = provider.lower()
        results = [backend.delete(provider) for backend in self._available()]
        return all(results)


_manager: Optional[CredentialManager] = None


def get_credential_manager() -> CredentialManager:
    global _manager
    if _manager is None:
        _manager = CredentialManager()
    return _manager


def get_api_key(provider: str) -> Optional[str]:
    return get_credential_manager().get_api_key(provider)


def configure_credentials_interactive(console: Optional[Console] = None) -> None:
    """Walk through each provider and store, replace or clear its key"""
    console = console or Console()
    manager = get_credential_manager()
    console.rule("GIGO Credential Configuration")

    for provider, label in PROVIDER_LABELS.items():
        status = "configured" if manager.get_api_key(provider) else "not set"
        console.print(f"\n[bold]{label}[/bold] [dim]({status})[/dim]")

        choice = Prompt.ask(
            f"Configure {provider}?",
            console=console,
            choices=["y", "n", "clear"],
            default="n",
        )
        if choice == "clear":
            manager.delete_credential(provider)
            console.print(f"  Cleared {provider} key")
        elif choice == "y":
            api_key = Prompt.ask(f"  API key for {provider}", console=console, password=True)
            if manager.set_credential(provider, api_key):
                console.print(f"  Saved {provider} key")
            else:
                console.print(f"  [red]Could not save {provider} key[/red]")

    console.rule("Done")
