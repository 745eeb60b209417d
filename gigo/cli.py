"""
GIGO Command Line
=================

Usage:
    gigo upscale [TEXT]   # TEXT, else clipboard, else prompt for input
    gigo clipboard        # upscale clipboard contents in place
    gigo restore          # restore an original prompt from history
    gigo history          # list recorded rewrites
    gigo configure        # store provider API keys
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

from rich.console import Console
from rich.table import Table

from .cancellation import CancellationToken
from .commands import UpscaleCommands
from .config import Settings, UserConfig, setup_logging
from .exceptions import GigoError
from .history import HistoryStore, format_timestamp, preview
from .providers import create_host_client
from .storage import SQLiteKeyValueStore
from .terminal import ConsolePromptUI, SystemClipboard
from .upscaler import PromptUpscaler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gigo", description="Upscale lazy prompts into precise ones"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    subparsers = parser.add_subparsers(dest="command")

    upscale = subparsers.add_parser("upscale", help="Upscale a prompt")
    upscale.add_argument("text", nargs="?", help="Prompt text to upscale")
    subparsers.add_parser("clipboard", help="Upscale clipboard contents")
    subparsers.add_parser("restore", help="Restore an original prompt")
    subparsers.add_parser("history", help="Show upscale history")
    subparsers.add_parser("configure", help="Configure API keys")
    return parser


def print_history(history: HistoryStore, console: Console) -> None:
    entries = history.list()
    if not entries:
        console.print("GIGO: No history available")
        return

    table = Table(title="GIGO History")
    table.add_column("#", justify="right")
    table.add_column("When")
    table.add_column("Original")
    table.add_column("Upscaled")
    for index, entry in enumerate(entries, start=1):
        table.add_row(
            str(index),
            format_timestamp(entry.timestamp),
            preview(entry.original, 60),
            preview(entry.upscaled, 80),
        )
    console.print(table)


async def run(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    history = HistoryStore(SQLiteKeyValueStore(), settings)

    if args.command == "history":
        print_history(history, console)
        return 0

    token = CancellationToken()
    host_client = create_host_client(settings)
    commands = UpscaleCommands(
        upscaler=PromptUpscaler(settings, host_client),
        history=history,
        clipboard=SystemClipboard(),
        prompt_ui=ConsolePromptUI(console, cancellation=token),
    )

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
    except (NotImplementedError, RuntimeError):
        pass

    try:
        if args.command == "restore":
            await commands.restore_original()
            return 130 if token.is_cancellation_requested else 0

        if args.command == "clipboard":
            outcome = await commands.upscale_clipboard(token)
        elif args.text:
            outcome = await commands.upscale_text(args.text, token)
        else:
            outcome = await commands.upscale_prompt(token)
    finally:
        await host_client.aclose()

    if outcome is None:
        return 130 if token.is_cancellation_requested else 0
    if outcome.success:
        return 0
    return 130 if outcome.cancelled else 1


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    settings = Settings(UserConfig())
    setup_logging(settings, verbose=args.verbose)

    if args.command == "configure":
        from .credentials import configure_credentials_interactive

        configure_credentials_interactive()
        return 0

    console = Console()
    try:
        return asyncio.run(run(args, settings, console))
    except GigoError as e:
        console.print(f"[red]{e}[/red]")
        return 2


if __name__ == "__main__":
    sys.exit(main())
