"""
Input Routing
=============

Decides where the text to upscale comes from and where the result goes.
Selection and clipboard are read once into an ``EnvironmentSnapshot`` at the
start of a command; the decision is a pure function of that snapshot.

Priority: a non-empty selection beats the clipboard, which beats manual entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from .interfaces import Clipboard, EditingSurface, PromptUI, Selection

logger = logging.getLogger(__name__)


class RoutingDecision(Enum):
    SELECTION_REPLACE = auto()
    CLIPBOARD_ROUND_TRIP = auto()
    MANUAL_ENTRY_THEN_CLIPBOARD = auto()


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Selection and clipboard state captured at invocation start"""

    selection: Selection | None
    clipboard_text: str

    @property
    def has_selection(self) -> bool:
        return self.selection is not None and bool(self.selection.text.strip())

    @property
    def has_clipboard(self) -> bool:
        return bool(self.clipboard_text.strip())


@dataclass(frozen=True)
class Route:
    decision: RoutingDecision
    source_text: str


def take_snapshot(editor: EditingSurface | None, clipboard: Clipboard) -> EnvironmentSnapshot:
    selection = editor.get_selection() if editor is not None else None
    return EnvironmentSnapshot(selection=selection, clipboard_text=clipboard.read() or "")


def decide_route(snapshot: EnvironmentSnapshot) -> RoutingDecision:
    if snapshot.has_selection:
        return RoutingDecision.SELECTION_REPLACE
    if snapshot.has_clipboard:
        return RoutingDecision.CLIPBOARD_ROUND_TRIP
    return RoutingDecision.MANUAL_ENTRY_THEN_CLIPBOARD


async def resolve_route(snapshot: EnvironmentSnapshot, prompt_ui: PromptUI) -> Route | None:
    """
    Route plus source text for one invocation.

    Returns None when the user dismisses the manual-entry prompt or enters
    only whitespace; the command then ends without side effects.
    """
    decision = decide_route(snapshot)
    logger.debug(f"Routing decision: {decision.name}")

    if decision is RoutingDecision.SELECTION_REPLACE:
        assert snapshot.selection is not None
        return Route(decision, snapshot.selection.text)

    if decision is RoutingDecision.CLIPBOARD_ROUND_TRIP:
        return Route(decision, snapshot.clipboard_text)

    entered = await prompt_ui.ask_free_text(
        "GIGO: Upscale Prompt", 'e.g., "add auth to the api"'
    )
    if not entered or not entered.strip():
        return None
    return Route(decision, entered)
