"""
End-to-end tests for the user-facing commands
=============================================
"""

import pytest

from gigo.cancellation import CancellationToken
from gigo.commands import (
    OPEN_SETTINGS,
    RESTORE_ORIGINAL,
    VIEW_BOTH,
    VIEW_ORIGINAL,
    UpscaleCommands,
)
from gigo.history import HistoryStore
from gigo.outcome import FailureKind, ProviderSource, UpscaleFailure
from gigo.providers import HostModelClient
from gigo.upscaler import PromptUpscaler
from tests.fakes import (
    FakeChatModel,
    FakeClient,
    FakeClipboard,
    FakeEditor,
    FakeModelHost,
    FakePromptUI,
    MemoryStore,
    make_settings,
)


def never_called_external():
    return FakeClient(
        UpscaleFailure("should not run", FailureKind.TRANSPORT_ERROR),
        ProviderSource.OPENAI,
    )


def build(
    host_chunks=None,
    editor=None,
    clipboard="",
    ui=None,
    external=None,
    **settings,
):
    models = [FakeChatModel("gpt-4o", host_chunks)] if host_chunks is not None else []
    host = HostModelClient(FakeModelHost({"gpt-4o": models}))
    external = external or never_called_external()
    config = make_settings(**settings)
    storage = MemoryStore()
    history = HistoryStore(storage, config)
    commands = UpscaleCommands(
        upscaler=PromptUpscaler(config, host, lambda _s: external),
        history=history,
        clipboard=FakeClipboard(clipboard),
        prompt_ui=ui or FakePromptUI(),
        editor=editor,
    )
    return commands, history, storage, external


class TestUpscaleFlows:
    @pytest.mark.asyncio
    async def test_end_to_end_manual_entry(self):
        ui = FakePromptUI(free_text="yo fix this api")
        commands, history, _, external = build(
            host_chunks=[" Investigate and resolve ", "the reported API issue. "], ui=ui
        )

        outcome = await commands.upscale_prompt()

        expected = "Investigate and resolve the reported API issue."
        assert outcome.success is True
        assert outcome.source is ProviderSource.HOST_MODEL
        entry = history.list()[0]
        assert entry.original == "yo fix this api"
        assert entry.upscaled == expected
        assert commands.clipboard.writes == [expected]
        assert external.calls == []

    @pytest.mark.asyncio
    async def test_selection_replaced_in_place(self):
        editor = FakeEditor("please fix bug now", span=(7, 14))
        commands, history, _, _ = build(
            host_chunks=["Fix the bug."], editor=editor, clipboard="ignored"
        )

        await commands.upscale_prompt()

        assert editor.buffer == "please Fix the bug. now"
        assert commands.clipboard.writes == []
        assert history.list()[0].original == "fix bug"
        assert RESTORE_ORIGINAL in commands.prompt_ui.messages[-1][1]

    @pytest.mark.asyncio
    async def test_restore_offered_after_selection_replace(self):
        editor = FakeEditor("fix bug", span=(0, 7))
        ui = FakePromptUI(pick=0, actions={"GIGO: Prompt upscaled": RESTORE_ORIGINAL})
        commands, _, _, _ = build(host_chunks=["Fix the bug."], editor=editor, ui=ui)

        await commands.upscale_prompt()

        assert editor.buffer == "fix bug"

    @pytest.mark.asyncio
    async def test_clipboard_round_trip(self):
        commands, history, _, _ = build(
            host_chunks=["Refactor the module."], clipboard="refactor this"
        )

        await commands.upscale_prompt()

        assert commands.clipboard.writes == ["Refactor the module."]
        assert history.list()[0].original == "refactor this"

    @pytest.mark.asyncio
    async def test_view_original_puts_original_back(self):
        ui = FakePromptUI(actions={"GIGO: Upscaled prompt written": VIEW_ORIGINAL})
        commands, _, _, _ = build(host_chunks=["Better."], clipboard="meh", ui=ui)

        await commands.upscale_clipboard()

        assert commands.clipboard.writes == ["Better.", "meh"]

    @pytest.mark.asyncio
    async def test_view_both_shows_document(self):
        ui = FakePromptUI(actions={"GIGO: Upscaled prompt written": VIEW_BOTH})
        commands, _, _, _ = build(host_chunks=["Better."], clipboard="meh", ui=ui)

        await commands.upscale_clipboard()

        assert "# Original Prompt\n\nmeh" in ui.documents[0]
        assert "# Upscaled Version\n\nBetter." in ui.documents[0]

    @pytest.mark.asyncio
    async def test_empty_clipboard_command_warns(self):
        commands, history, storage, _ = build(host_chunks=["x"], clipboard="  ")

        outcome = await commands.upscale_clipboard()

        assert outcome is None
        assert commands.prompt_ui.messages[0][0] == "GIGO: Clipboard is empty"
        assert storage.writes == 0


class TestAbortAndFailure:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("entered", [None, "   "])
    async def test_abort_has_no_side_effects(self, entered):
        ui = FakePromptUI(free_text=entered)
        commands, _, storage, _ = build(host_chunks=["x"], ui=ui)

        outcome = await commands.upscale_prompt()

        assert outcome is None
        assert storage.writes == 0
        assert commands.clipboard.writes == []
        assert ui.messages == []

    @pytest.mark.asyncio
    async def test_cancelled_has_no_side_effects(self):
        token = CancellationToken()
        token.cancel()
        commands, _, storage, external = build(host_chunks=["x"], clipboard="text")

        outcome = await commands.upscale_prompt(token)

        assert outcome.kind is FailureKind.CANCELLED
        assert storage.writes == 0
        assert commands.clipboard.writes == []
        assert commands.prompt_ui.messages == []
        assert external.calls == []

    @pytest.mark.asyncio
    async def test_failure_offers_settings(self):
        ui = FakePromptUI(actions={"GIGO:": OPEN_SETTINGS})
        external = FakeClient(
            UpscaleFailure("No API key configured.", FailureKind.MISSING_CREDENTIAL),
            ProviderSource.OPENAI,
        )
        commands, _, storage, _ = build(clipboard="text", ui=ui, external=external)

        outcome = await commands.upscale_prompt()

        assert outcome.success is False
        message, actions, error = ui.messages[0]
        assert "host-model:" in message
        assert "openai: No API key configured." in message
        assert OPEN_SETTINGS in actions
        assert error is True
        assert ui.settings_opened == 1
        assert storage.writes == 0
        assert commands.clipboard.writes == []

    @pytest.mark.asyncio
    async def test_unknown_provider_is_reported_with_settings(self):
        ui = FakePromptUI(actions={"GIGO:": OPEN_SETTINGS})
        config = make_settings(apiProvider="cohere")
        storage = MemoryStore()
        commands = UpscaleCommands(
            upscaler=PromptUpscaler(config, HostModelClient(FakeModelHost({}))),
            history=HistoryStore(storage, config),
            clipboard=FakeClipboard("text"),
            prompt_ui=ui,
        )

        outcome = await commands.upscale_prompt()

        assert outcome.success is False
        message, actions, error = ui.messages[0]
        assert "apiProvider:" in message
        assert OPEN_SETTINGS in actions
        assert error is True
        assert ui.settings_opened == 1
        assert storage.writes == 0

    @pytest.mark.asyncio
    async def test_transport_failure_only_dismissable(self):
        external = FakeClient(
            UpscaleFailure("HTTP 500: boom", FailureKind.TRANSPORT_ERROR),
            ProviderSource.OPENAI,
        )
        commands, _, _, _ = build(host_chunks=["  "], clipboard="text", external=external)

        await commands.upscale_prompt()

        assert commands.prompt_ui.messages[0][1] == ["Dismiss"]


class TestRestoreOriginal:
    @pytest.mark.asyncio
    async def test_no_history(self):
        commands, _, _, _ = build()

        assert await commands.restore_original() is None
        assert commands.prompt_ui.messages[0][0] == "GIGO: No history available"

    @pytest.mark.asyncio
    async def test_picker_dismissed(self):
        commands, history, _, _ = build(ui=FakePromptUI(pick=None))
        history.insert("a", "A")

        assert await commands.restore_original() is None
        assert commands.clipboard.writes == []

    @pytest.mark.asyncio
    async def test_replaces_selection(self):
        editor = FakeEditor("Better text", span=(0, 11))
        commands, history, _, _ = build(editor=editor, ui=FakePromptUI(pick=1))
        history.insert("older", "Older.")
        history.insert("meh text", "Better text")

        entry = await commands.restore_original()

        assert entry.original == "older"
        assert editor.buffer == "older"

    @pytest.mark.asyncio
    async def test_inserts_at_cursor(self):
        editor = FakeEditor("abc")
        commands, history, _, _ = build(editor=editor, ui=FakePromptUI(pick=0))
        history.insert("orig", "Upscaled.")

        await commands.restore_original()

        assert editor.inserts == ["orig"]
        assert editor.buffer == "abcorig"

    @pytest.mark.asyncio
    async def test_no_editor_uses_clipboard_and_view_both(self):
        ui = FakePromptUI(pick=0, actions={"GIGO: Original copied": VIEW_BOTH})
        commands, history, _, _ = build(ui=ui)
        history.insert("orig", "Upscaled.")

        await commands.restore_original()

        assert commands.clipboard.writes == ["orig"]
        assert "Upscaled." in ui.documents[0]
