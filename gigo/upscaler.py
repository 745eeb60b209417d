"""
Prompt Upscaler
===============

Fallback orchestrator: the host-managed model is tried first, the configured
external provider second. Outcomes are combined as values:

- host success returns immediately; the external provider is never called
- host failure under a requested cancellation returns ``CANCELLED`` and stops
- external success returns that provider's text
- two failures merge into one ``AGGREGATE`` failure naming both sources

Nothing is retried; the user re-triggers the command to try again.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .cancellation import CancellationToken, is_cancelled
from .config import Settings
from .exceptions import ConfigurationError
from .outcome import (
    FailureKind,
    UpscaleFailure,
    UpscaleOutcome,
    aggregate_failures,
    cancelled_failure,
)
from .providers import ProviderClient, create_external_client
from .validation import InputValidator

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """Rewrite the user's sloppy/lazy request into a clean, clear, well-specified version.

Rules:
- Output ONLY the rewritten request. Nothing else.
- Fix typos and grammar.
- Clarify vague intent.
- Keep output length proportional to input complexity. A short input gets a short (but clearer) output.
- For technical/coding requests: add relevant details like edge cases, error handling, or constraints.
- Do NOT write a "system prompt" or "persona description" - just rewrite the actual request.

Examples:
"yo whats up" → "Hello, how are you?"
"add auth" → "Implement JWT-based authentication with login/logout endpoints, token validation middleware, password hashing (bcrypt), and proper error responses (401 for invalid/expired tokens)."
"make it faster" → "Optimize performance. Profile to identify bottlenecks, consider caching frequently accessed data, reduce unnecessary database queries, and evaluate algorithm complexity."
"fix teh bug" → "Debug and fix the issue. Identify the root cause, add appropriate error handling, and include a test to prevent regression."

Rewrite this:"""


class PromptUpscaler:
    """
    Rewrites terse prompts through the first provider that succeeds.

    ``external_client_factory`` is called once per fallback so that a changed
    ``apiProvider``, ``apiKey`` or ``model`` setting applies to the next call.
    """

    def __init__(
        self,
        settings: Settings,
        host_client: ProviderClient,
        external_client_factory: Callable[[Settings], ProviderClient] = create_external_client,
    ) -> None:
        self.settings = settings
        self.host_client = host_client
        self.external_client_factory = external_client_factory

    def effective_system_prompt(self) -> str:
        """Custom system prompt from settings, else the built-in one"""
        return self.settings.system_prompt() or SYSTEM_PROMPT

    async def upscale(
        self, text: str, cancellation: CancellationToken | None = None
    ) -> UpscaleOutcome:
        is_valid, error = InputValidator.validate_prompt(text)
        if not is_valid:
            return UpscaleFailure(reason=error, kind=FailureKind.INVALID_INPUT)

        system_prompt = self.effective_system_prompt()
        logger.debug(
            f"Upscaling prompt: {InputValidator.sanitize_for_logging(text, max_len=40)}"
        )

        host_result = await self.host_client.generate(system_prompt, text, cancellation)
        if host_result.success:
            return host_result

        if is_cancelled(cancellation) or host_result.cancelled:
            return cancelled_failure()

        logger.info(f"Host model unavailable, falling back: {host_result.reason}")

        try:
            external_client = self.external_client_factory(self.settings)
        except ConfigurationError as e:
            logger.warning(f"Cannot build external client: {e.message}")
            return aggregate_failures(
                [
                    (self.host_client.source.value, host_result),
                    (
                        e.config_key,
                        UpscaleFailure(
                            reason=e.reason, kind=FailureKind.INVALID_CONFIGURATION
                        ),
                    ),
                ]
            )

        external_result = await external_client.generate(
            system_prompt, text, cancellation
        )
        if external_result.success:
            return external_result

        if is_cancelled(cancellation) or external_result.cancelled:
            return cancelled_failure()

        logger.warning("All providers failed")
        return aggregate_failures(
            [
                (self.host_client.source.value, host_result),
                (external_client.source.value, external_result),
            ]
        )
