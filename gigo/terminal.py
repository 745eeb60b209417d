"""
Terminal Host
=============

Host surfaces for running GIGO from a shell: the system clipboard through
pyperclip and prompts rendered with rich. A terminal has no editing surface,
so commands route between the clipboard and manual entry only.

Blocking prompts run on a daemon thread and race the session's cancellation
token, so Ctrl-C dismisses a pending prompt instead of waiting for input.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from typing import Any, Callable

import pyperclip
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt

from .cancellation import CancellationToken, OperationCancelled, run_cancellable
from .config import CONFIG_FILE
from .exceptions import GigoError
from .interfaces import Clipboard, PromptUI

logger = logging.getLogger(__name__)


class SystemClipboard(Clipboard):
    """OS clipboard via pyperclip"""

    def read(self) -> str:
        try:
            return pyperclip.paste() or ""
        except pyperclip.PyperclipException as e:
            logger.warning(f"Clipboard unavailable: {e}")
            return ""

    def write(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise GigoError(f"Clipboard unavailable: {e}", "CLIPBOARD_ERROR") from e


def _resolve(future: asyncio.Future, result: Any = None, error: Exception | None = None) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


class ConsolePromptUI(PromptUI):
    """Prompts and notifications on a rich console"""

    def __init__(
        self,
        console: Console | None = None,
        interactive: bool | None = None,
        cancellation: CancellationToken | None = None,
    ):
        self.console = console or Console()
        self.interactive = sys.stdin.isatty() if interactive is None else interactive
        self.cancellation = cancellation

    async def _ask(self, ask: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a blocking rich prompt; None when the session is cancelled"""
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def target() -> None:
            try:
                result, error = ask(*args, console=self.console, **kwargs), None
            except Exception as e:
                result, error = None, e
            try:
                loop.call_soon_threadsafe(_resolve, future, result, error)
            except RuntimeError:
                # Loop already closed; the prompt was dismissed.
                pass

        threading.Thread(target=target, name="gigo-prompt", daemon=True).start()
        try:
            return await run_cancellable(future, self.cancellation)
        except OperationCancelled:
            self.console.print()
            logger.debug("Prompt dismissed by cancellation")
            return None
        except EOFError:
            return None

    async def _choose(self, items: list[str], question: str, default: int) -> int | None:
        for number, item in enumerate(items, start=1):
            self.console.print(f"  [cyan]{number}[/cyan]  {item}")
        if not self.interactive:
            return None

        choice = await self._ask(IntPrompt.ask, question, default=default)
        if choice is None or not 1 <= choice <= len(items):
            return None
        return choice - 1

    async def ask_free_text(self, title: str, placeholder: str) -> str | None:
        if not self.interactive:
            return None
        self.console.print(f"[bold]{title}[/bold] [dim]{placeholder}[/dim]")
        return await self._ask(Prompt.ask, "Prompt", default="")

    async def pick_from_list(self, title: str, items: list[str]) -> int | None:
        self.console.print(f"[bold]{title}[/bold]")
        return await self._choose(items, "Select (0 to cancel)", default=1)

    async def notify(
        self, message: str, actions: list[str] | None = None, error: bool = False
    ) -> str | None:
        style = "red" if error else "green"
        self.console.print(f"[{style}]{message}[/{style}]")
        if not actions:
            return None

        index = await self._choose(actions, "Action (0 to skip)", default=0)
        return None if index is None else actions[index]

    async def show_document(self, content: str) -> None:
        self.console.print(Panel(Markdown(content)))

    async def open_settings(self) -> None:
        self.console.print(
            f"Settings file: [bold]{CONFIG_FILE}[/bold]\n"
            "Store an API key with: [bold]gigo configure[/bold]"
        )
