"""
Provider Clients
================

One client per text-generation backend. Every client implements
``generate(system_prompt, text, cancellation) -> UpscaleOutcome`` and reports
faults as ``UpscaleFailure`` values instead of raising.

- ``HostModelClient``: the host-managed model, reached through a ``ModelHost``.
  ``OllamaModelHost`` is the bundled host (a local Ollama server).
- ``OpenAIClient``: OpenAI-compatible chat completions.
- ``AnthropicClient``: Anthropic-compatible messages.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

import anthropic
import httpx
import openai

from .cancellation import (
    CancellationToken,
    OperationCancelled,
    is_cancelled,
    run_cancellable,
)
from .config import Settings
from .exceptions import ConfigurationError
from .outcome import (
    FailureKind,
    ProviderSource,
    UpscaleFailure,
    UpscaleOutcome,
    cancelled_failure,
    succeed,
)
from .validation import InputValidator

logger = logging.getLogger(__name__)

DEFAULT_MODELS = {
    "openai": "gpt-4o",
    "anthropic": "claude-sonnet-4-20250514",
}

ANTHROPIC_MAX_TOKENS = 4096
OPENAI_TEMPERATURE = 0.7

MISSING_KEY_REASON = "No API key configured. Set apiKey in the gigo settings."


class ProviderClient(ABC):
    """Abstract base class for text-generation clients"""

    @property
    @abstractmethod
    def source(self) -> ProviderSource:
        pass

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        text: str,
        cancellation: CancellationToken | None = None,
    ) -> UpscaleOutcome:
        """Rewrite ``text`` under ``system_prompt``"""
        pass


# ---------------------------------------------------------------------------
# Host-managed model
# ---------------------------------------------------------------------------


class ChatModel(ABC):
    """A chat model offered by the host"""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def stream(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        """Lazy, finite sequence of response text chunks"""
        pass


class ModelHost(ABC):
    """Supplies chat models without user configuration"""

    @abstractmethod
    async def select_chat_models(self, family: str | None = None) -> list[ChatModel]:
        """Available models, optionally filtered by family"""
        pass

    async def aclose(self) -> None:
        """Release host resources"""


def build_host_prompt(system_prompt: str, text: str) -> str:
    return f"{system_prompt}\n\n---\n\nUser's prompt to upscale:\n{text}"


class HostModelClient(ProviderClient):
    """First-priority client backed by the host-managed model"""

    def __init__(self, host: ModelHost, family: str = "gpt-4o") -> None:
        self.host = host
        self.family = family

    @property
    def source(self) -> ProviderSource:
        return ProviderSource.HOST_MODEL

    async def _select_model(self) -> ChatModel | None:
        models = await self.host.select_chat_models(self.family)
        if not models:
            logger.debug(f"No host models in family '{self.family}', trying any")
            models = await self.host.select_chat_models(None)
        return models[0] if models else None

    async def aclose(self) -> None:
        await self.host.aclose()

    @staticmethod
    async def _collect(
        model: ChatModel,
        messages: list[dict[str, str]],
        cancellation: CancellationToken | None,
    ) -> str:
        chunks: list[str] = []
        async for chunk in model.stream(messages):
            if is_cancelled(cancellation):
                raise OperationCancelled()
            chunks.append(chunk)
        return "".join(chunks)

    async def generate(
        self,
        system_prompt: str,
        text: str,
        cancellation: CancellationToken | None = None,
    ) -> UpscaleOutcome:
        if is_cancelled(cancellation):
            return cancelled_failure()

        try:
            model = await run_cancellable(self._select_model(), cancellation)
            if model is None:
                return UpscaleFailure(
                    reason="No language models available via host model",
                    kind=FailureKind.PROVIDER_UNAVAILABLE,
                )

            logger.info(f"Upscaling with host model: {model.name}")
            messages = [{"role": "user", "content": build_host_prompt(system_prompt, text)}]
            result = await run_cancellable(
                self._collect(model, messages, cancellation), cancellation
            )
        except OperationCancelled:
            logger.info("Host model request cancelled")
            return cancelled_failure()
        except Exception as e:
            logger.warning(
                f"Host model failed: {InputValidator.sanitize_for_logging(str(e))}"
            )
            return UpscaleFailure(
                reason=f"host model error: {e}",
                kind=FailureKind.PROVIDER_UNAVAILABLE,
            )

        if not result.strip():
            return UpscaleFailure(
                reason="Empty response from host model",
                kind=FailureKind.EMPTY_RESPONSE,
            )
        return succeed(result, self.source)


class OllamaChatModel(ChatModel):
    """Streaming chat against one Ollama model"""

    def __init__(self, client: httpx.AsyncClient, model_name: str) -> None:
        self._client = client
        self._name = model_name

    @property
    def name(self) -> str:
        return self._name

    async def stream(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        async with self._client.stream(
            "POST",
            "/api/chat",
            json={"model": self._name, "messages": messages, "stream": True},
        ) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                if not line.strip():
                    continue
                data = json.loads(line)
                if data.get("error"):
                    raise RuntimeError(data["error"])
                content = data.get("message", {}).get("content")
                if content:
                    yield content
                if data.get("done"):
                    break


class OllamaModelHost(ModelHost):
    """Local Ollama server as the host-managed model"""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=120.0)

    @staticmethod
    def _matches_family(entry: dict[str, Any], family: str) -> bool:
        details = entry.get("details") or {}
        families = [details.get("family")] + list(details.get("families") or [])
        name = str(entry.get("name", ""))
        return family in families or name.startswith(family)

    async def select_chat_models(self, family: str | None = None) -> list[ChatModel]:
        try:
            response = await self._client.get("/api/tags")
            response.raise_for_status()
            entries = response.json().get("models", [])
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Ollama not available at {self.base_url}: {e}")
            return []

        if family:
            entries = [e for e in entries if self._matches_family(e, family)]

        return [OllamaChatModel(self._client, str(e["name"])) for e in entries if e.get("name")]

    async def aclose(self) -> None:
        await self._client.aclose()


# ---------------------------------------------------------------------------
# External HTTP providers
# ---------------------------------------------------------------------------


class ExternalClient(ProviderClient):
    """Shared plumbing for API-key providers"""

    provider_name = ""

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = (api_key or "").strip()
        self.model = (model or "").strip() or DEFAULT_MODELS[self.provider_name]
        self.base_url = base_url
        self._http_client = http_client

    @property
    def source(self) -> ProviderSource:
        return ProviderSource(self.provider_name)

    @abstractmethod
    async def _request(self, system_prompt: str, text: str) -> UpscaleOutcome:
        pass

    async def generate(
        self,
        system_prompt: str,
        text: str,
        cancellation: CancellationToken | None = None,
    ) -> UpscaleOutcome:
        if not self.api_key:
            return UpscaleFailure(
                reason=MISSING_KEY_REASON, kind=FailureKind.MISSING_CREDENTIAL
            )

        logger.info(f"Upscaling with {self.provider_name} model: {self.model}")
        try:
            return await run_cancellable(self._request(system_prompt, text), cancellation)
        except OperationCancelled:
            logger.info(f"{self.provider_name} request cancelled")
            return cancelled_failure()


def _status_failure(status_code: int, body: str) -> UpscaleFailure:
    return UpscaleFailure(
        reason=f"HTTP {status_code}: {body}", kind=FailureKind.TRANSPORT_ERROR
    )


def _malformed_failure() -> UpscaleFailure:
    return UpscaleFailure(
        reason="No content in response", kind=FailureKind.MALFORMED_RESPONSE
    )


class OpenAIClient(ExternalClient):
    """OpenAI-compatible chat completions provider"""

    provider_name = "openai"

    async def _request(self, system_prompt: str, text: str) -> UpscaleOutcome:
        client = openai.AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            max_retries=0,
            http_client=self._http_client,
        )
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": text},
                ],
                temperature=OPENAI_TEMPERATURE,
            )
        except openai.APIStatusError as e:
            return _status_failure(e.status_code, e.response.text)
        except openai.APIError as e:
            return UpscaleFailure(
                reason=f"openai API error: {e}", kind=FailureKind.TRANSPORT_ERROR
            )
        finally:
            if self._http_client is None:
                await client.close()

        choices = getattr(response, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        content = getattr(message, "content", None)
        if not content:
            return _malformed_failure()
        return succeed(content, self.source)


class AnthropicClient(ExternalClient):
    """Anthropic-compatible messages provider"""

    provider_name = "anthropic"

    async def _request(self, system_prompt: str, text: str) -> UpscaleOutcome:
        client = anthropic.AsyncAnthropic(
            api_key=self.api_key,
            base_url=self.base_url,
            max_retries=0,
            http_client=self._http_client,
        )
        try:
            response = await client.messages.create(
                model=self.model,
                max_tokens=ANTHROPIC_MAX_TOKENS,
                system=system_prompt,
                messages=[{"role": "user", "content": text}],
            )
        except anthropic.APIStatusError as e:
            return _status_failure(e.status_code, e.response.text)
        except anthropic.APIError as e:
            return UpscaleFailure(
                reason=f"anthropic API error: {e}", kind=FailureKind.TRANSPORT_ERROR
            )
        finally:
            if self._http_client is None:
                await client.close()

        blocks = getattr(response, "content", None) or []
        text_block = next(
            (block for block in blocks if getattr(block, "type", None) == "text"),
            None,
        )
        content = getattr(text_block, "text", None)
        if not content:
            return _malformed_failure()
        return succeed(content, self.source)


EXTERNAL_CLIENTS: dict[str, type[ExternalClient]] = {
    "openai": OpenAIClient,
    "anthropic": AnthropicClient,
}


def create_external_client(
    settings: Settings, http_client: httpx.AsyncClient | None = None
) -> ExternalClient:
    """Build the configured external client from current settings"""
    provider = settings.api_provider()
    client_cls = EXTERNAL_CLIENTS.get(provider)
    if client_cls is None:
        raise ConfigurationError("apiProvider", f"unknown provider '{provider}'")
    return client_cls(
        api_key=settings.api_key(provider),
        model=settings.model(),
        base_url=settings.base_url(provider),
        http_client=http_client,
    )


def create_host_client(
    settings: Settings, client: httpx.AsyncClient | None = None
) -> HostModelClient:
    base_url, family = settings.host_model_settings()
    return HostModelClient(OllamaModelHost(base_url, client=client), family=family)
