"""
GIGO Commands
=============

User-facing commands composed from the router, the upscaler, the history
store and the host surfaces:

- ``upscale_prompt``: selection, else clipboard, else manual entry
- ``upscale_clipboard``: clipboard contents only
- ``upscale_text``: text supplied directly by the caller
- ``restore_original``: put a recorded original back

Side effects happen only after a successful, non-cancelled upscale, and the
history entry is always written before the destination.
"""

from __future__ import annotations

import logging

from .cancellation import CancellationToken, is_cancelled
from .history import HistoryEntry, HistoryStore, format_timestamp, preview
from .interfaces import Clipboard, EditingSurface, PromptUI, Selection
from .outcome import UpscaleOutcome, UpscaleSuccess
from .routing import Route, RoutingDecision, resolve_route, take_snapshot
from .upscaler import PromptUpscaler

logger = logging.getLogger(__name__)

RESTORE_ORIGINAL = "Restore Original"
VIEW_ORIGINAL = "View Original"
VIEW_BOTH = "View Both"
VIEW_FULL_TEXT = "View Full Text"
OPEN_SETTINGS = "Open Settings"
DISMISS = "Dismiss"


def side_by_side(original: str, upscaled: str) -> str:
    return (
        f"# Original Prompt\n\n{original}\n\n---\n\n"
        f"# Upscaled Version\n\n{upscaled}"
    )


class UpscaleCommands:
    """Command handlers for one user session"""

    def __init__(
        self,
        upscaler: PromptUpscaler,
        history: HistoryStore,
        clipboard: Clipboard,
        prompt_ui: PromptUI,
        editor: EditingSurface | None = None,
    ) -> None:
        self.upscaler = upscaler
        self.history = history
        self.clipboard = clipboard
        self.prompt_ui = prompt_ui
        self.editor = editor

    async def upscale_prompt(
        self, cancellation: CancellationToken | None = None
    ) -> UpscaleOutcome | None:
        """Upscale the selection, clipboard or typed text. None if aborted."""
        snapshot = take_snapshot(self.editor, self.clipboard)
        route = await resolve_route(snapshot, self.prompt_ui)
        if route is None:
            logger.debug("Upscale aborted by user")
            return None
        return await self._perform(route, snapshot.selection, cancellation)

    async def upscale_clipboard(
        self, cancellation: CancellationToken | None = None
    ) -> UpscaleOutcome | None:
        text = self.clipboard.read() or ""
        if not text.strip():
            await self.prompt_ui.notify("GIGO: Clipboard is empty", error=True)
            return None
        route = Route(RoutingDecision.CLIPBOARD_ROUND_TRIP, text)
        return await self._perform(route, None, cancellation)

    async def upscale_text(
        self, text: str, cancellation: CancellationToken | None = None
    ) -> UpscaleOutcome | None:
        if not text.strip():
            return None
        route = Route(RoutingDecision.MANUAL_ENTRY_THEN_CLIPBOARD, text)
        return await self._perform(route, None, cancellation)

    async def _perform(
        self,
        route: Route,
        selection: Selection | None,
        cancellation: CancellationToken | None,
    ) -> UpscaleOutcome:
        outcome = await self.upscaler.upscale(route.source_text, cancellation)

        if is_cancelled(cancellation) or (not outcome.success and outcome.cancelled):
            logger.info("Upscale cancelled")
            return outcome

        if not outcome.success:
            await self._report_failure(outcome.reason, outcome.needs_configuration)
            return outcome

        assert isinstance(outcome, UpscaleSuccess)
        self.history.insert(route.source_text, outcome.text)
        await self._deliver(route, selection, outcome)
        return outcome

    async def _report_failure(self, reason: str, needs_configuration: bool) -> None:
        actions = [OPEN_SETTINGS, DISMISS] if needs_configuration else [DISMISS]
        action = await self.prompt_ui.notify(f"GIGO: {reason}", actions, error=True)
        if action == OPEN_SETTINGS:
            await self.prompt_ui.open_settings()

    async def _deliver(
        self, route: Route, selection: Selection | None, outcome: UpscaleSuccess
    ) -> None:
        text = outcome.text
        source = outcome.source.value

        if route.decision is RoutingDecision.SELECTION_REPLACE:
            assert self.editor is not None and selection is not None
            self.editor.replace(selection.span, text)
            action = await self.prompt_ui.notify(
                f"GIGO: Prompt upscaled via {source}", [RESTORE_ORIGINAL]
            )
            if action == RESTORE_ORIGINAL:
                await self.restore_original()
            return

        self.clipboard.write(text)

        if route.decision is RoutingDecision.CLIPBOARD_ROUND_TRIP:
            action = await self.prompt_ui.notify(
                f"GIGO: Upscaled prompt written to clipboard (via {source})",
                [VIEW_ORIGINAL, VIEW_BOTH],
            )
            if action == VIEW_ORIGINAL:
                self.clipboard.write(route.source_text)
                await self.prompt_ui.notify("GIGO: Original restored to clipboard")
            elif action == VIEW_BOTH:
                await self.prompt_ui.show_document(side_by_side(route.source_text, text))
            return

        action = await self.prompt_ui.notify(
            f"GIGO: Upscaled prompt copied to clipboard (via {source})",
            [VIEW_FULL_TEXT],
        )
        if action == VIEW_FULL_TEXT:
            await self.prompt_ui.show_document(text)

    async def restore_original(self) -> HistoryEntry | None:
        """Pick a history entry and write its original to the active destination"""
        entries = self.history.list()
        if not entries:
            await self.prompt_ui.notify("GIGO: No history available")
            return None

        items = [
            f"{preview(entry.original, 60)}  ({format_timestamp(entry.timestamp)})"
            f"  Upscaled to: {preview(entry.upscaled, 80)}"
            for entry in entries
        ]
        index = await self.prompt_ui.pick_from_list(
            "GIGO: Restore Original Prompt", items
        )
        if index is None:
            return None

        entry = self.history.get(index)
        if entry is None:
            logger.warning(f"History index {index} out of range")
            return None

        selection = self.editor.get_selection() if self.editor is not None else None

        if selection is not None and not selection.is_empty:
            assert self.editor is not None
            self.editor.replace(selection.span, entry.original)
            await self.prompt_ui.notify("GIGO: Original restored")
        elif selection is not None:
            assert self.editor is not None
            self.editor.insert_at_cursor(entry.original)
            await self.prompt_ui.notify("GIGO: Original inserted at cursor")
        else:
            self.clipboard.write(entry.original)
            action = await self.prompt_ui.notify(
                "GIGO: Original copied to clipboard (no editor open)", [VIEW_BOTH]
            )
            if action == VIEW_BOTH:
                await self.prompt_ui.show_document(
                    side_by_side(entry.original, entry.upscaled)
                )
        return entry
