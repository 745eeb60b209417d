"""
Upscale Outcomes
================

Closed success/failure result type returned by every provider client and by
the fallback orchestrator. Faults are values here, never exceptions, so two
failures can be aggregated without nested exception handling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ProviderSource(Enum):
    """Which backend produced an upscaled prompt"""

    HOST_MODEL = "host-model"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class FailureKind(Enum):
    """Error taxonomy for provider failures"""

    PROVIDER_UNAVAILABLE = "provider_unavailable"
    EMPTY_RESPONSE = "empty_response"
    MISSING_CREDENTIAL = "missing_credential"
    TRANSPORT_ERROR = "transport_error"
    MALFORMED_RESPONSE = "malformed_response"
    INVALID_INPUT = "invalid_input"
    INVALID_CONFIGURATION = "invalid_configuration"
    CANCELLED = "cancelled"
    AGGREGATE = "aggregate"


# Failures the user fixes by editing settings rather than by retrying.
CONFIGURATION_KINDS = frozenset(
    {
        FailureKind.MISSING_CREDENTIAL,
        FailureKind.PROVIDER_UNAVAILABLE,
        FailureKind.INVALID_CONFIGURATION,
    }
)


@dataclass(frozen=True)
class UpscaleSuccess:
    """A non-empty, trimmed rewrite and the backend that produced it"""

    text: str
    source: ProviderSource

    def __post_init__(self) -> None:
        if not self.text or self.text != self.text.strip():
            raise ValueError("UpscaleSuccess.text must be non-empty and trimmed")

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class UpscaleFailure:
    """Human-readable failure reason plus its kind"""

    reason: str
    kind: FailureKind
    causes: tuple[UpscaleFailure, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return False

    @property
    def cancelled(self) -> bool:
        return self.kind is FailureKind.CANCELLED

    @property
    def needs_configuration(self) -> bool:
        """True when opening the settings is the way forward."""
        if self.kind in CONFIGURATION_KINDS:
            return True
        return any(cause.needs_configuration for cause in self.causes)


UpscaleOutcome = UpscaleSuccess | UpscaleFailure


def succeed(text: str, source: ProviderSource) -> UpscaleOutcome:
    """Trim ``text`` and wrap it, treating an empty result as a failure."""
    trimmed = (text or "").strip()
    if not trimmed:
        return UpscaleFailure(
            reason=f"Empty response from {source.value}",
            kind=FailureKind.EMPTY_RESPONSE,
        )
    return UpscaleSuccess(text=trimmed, source=source)


def cancelled_failure() -> UpscaleFailure:
    return UpscaleFailure(reason="Operation cancelled", kind=FailureKind.CANCELLED)


def aggregate_failures(
    labelled: list[tuple[str, UpscaleFailure]],
) -> UpscaleFailure:
    """Merge per-source failures into one message naming each source."""
    reason = "\n".join(f"{label}: {failure.reason}" for label, failure in labelled)
    return UpscaleFailure(
        reason=reason,
        kind=FailureKind.AGGREGATE,
        causes=tuple(failure for _, failure in labelled),
    )
