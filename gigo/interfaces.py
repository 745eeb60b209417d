"""
Host Capability Contracts
=========================

Abstract collaborators supplied by the surrounding application. The core
(router, upscaler, history store) only ever talks to these interfaces;
``gigo.terminal`` and ``gigo.storage`` provide the bundled implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Selection:
    """
    Selected text in an active editor.

    ``span`` is opaque to the core and handed back to the editor unchanged.
    An empty ``text`` means the editor is active with only a cursor.
    """

    span: Any
    text: str

    @property
    def is_empty(self) -> bool:
        return not self.text


class EditingSurface(ABC):
    """Text editor the user is working in"""

    @abstractmethod
    def get_selection(self) -> Selection | None:
        """Current selection, or None when no editor is active"""
        pass

    @abstractmethod
    def replace(self, span: Any, text: str) -> None:
        pass

    @abstractmethod
    def insert_at_cursor(self, text: str) -> None:
        pass


class Clipboard(ABC):
    """System clipboard"""

    @abstractmethod
    def read(self) -> str:
        pass

    @abstractmethod
    def write(self, text: str) -> None:
        pass


class PromptUI(ABC):
    """Interactive prompts and notifications. Every method may suspend."""

    @abstractmethod
    async def ask_free_text(self, title: str, placeholder: str) -> str | None:
        """Entered text, or None if the user dismissed the prompt"""
        pass

    @abstractmethod
    async def pick_from_list(self, title: str, items: list[str]) -> int | None:
        """Index of the chosen item, or None if the user dismissed the list"""
        pass

    @abstractmethod
    async def notify(
        self, message: str, actions: list[str] | None = None, error: bool = False
    ) -> str | None:
        """Show a message; returns the chosen action, if any"""
        pass

    @abstractmethod
    async def show_document(self, content: str) -> None:
        """Display a markdown document"""
        pass

    @abstractmethod
    async def open_settings(self) -> None:
        pass


class KeyValueStore(ABC):
    """Persistent JSON-compatible key-value storage"""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass


class ConfigSource(ABC):
    """Read-only configuration lookups"""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        pass
