"""
GIGO Configuration
==================

User settings live in ``~/.gigo/config.json`` (``GIGO_CONFIG_DIR`` overrides
the directory). The file is re-read on every lookup so that edits, such as a
new ``historySize``, take effect on the next operation without a restart.

Recognised keys::

    {
        "apiKey": "",
        "apiProvider": "openai",
        "model": "",
        "systemPrompt": "",
        "historySize": 5,
        "hostModel": {"baseUrl": "http://localhost:11434", "family": "gpt-4o"},
        "openaiBaseUrl": null,
        "anthropicBaseUrl": null,
        "logging": {"level": "INFO", "file": null}
    }
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .credentials import get_api_key
from .exceptions import ConfigurationError
from .interfaces import ConfigSource

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(os.environ.get("GIGO_CONFIG_DIR", Path.home() / ".gigo"))
CONFIG_FILE = CONFIG_DIR / "config.json"

PROVIDERS = ("openai", "anthropic")
DEFAULT_PROVIDER = "openai"
DEFAULT_HISTORY_SIZE = 5
DEFAULT_HOST_URL = "http://localhost:11434"
DEFAULT_HOST_FAMILY = "gpt-4o"


class UserConfig(ConfigSource):
    """JSON file configuration, read fresh on each lookup"""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or CONFIG_FILE

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with self.path.open("r", encoding="utf-8") as config_file:
                loaded = json.load(config_file)
        except (OSError, ValueError) as exc:
            logger.warning(f"Failed to load config from {self.path}: {exc}")
            return {}

        if not isinstance(loaded, dict):
            logger.warning(f"Config file {self.path} did not contain an object.")
            return {}

        return loaded

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)


class MemoryConfig(ConfigSource):
    """Dict-backed configuration for embedding applications"""

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self.values: dict[str, Any] = dict(values or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)


class Settings:
    """Typed accessors over a ConfigSource"""

    def __init__(
        self,
        source: ConfigSource,
        credential_lookup: Callable[[str], str | None] = get_api_key,
    ) -> None:
        self.source = source
        self._credential_lookup = credential_lookup

    def _get_str(self, key: str) -> str:
        value = self.source.get(key, "")
        return value.strip() if isinstance(value, str) else ""

    def api_provider(self) -> str:
        value = self.source.get("apiProvider", DEFAULT_PROVIDER)
        if not isinstance(value, str) or not value.strip():
            return DEFAULT_PROVIDER

        normalized = value.strip().lower()
        if normalized not in PROVIDERS:
            raise ConfigurationError(
                "apiProvider", f"expected one of {', '.join(PROVIDERS)}, got '{value}'"
            )
        return normalized

    def api_key(self, provider: str | None = None) -> str:
        configured = self._get_str("apiKey")
        if configured:
            return configured
        return self._credential_lookup(provider or self.api_provider()) or ""

    def model(self) -> str:
        return self._get_str("model")

    def system_prompt(self) -> str:
        return self._get_str("systemPrompt")

    def history_size(self) -> int:
        value = self.source.get("historySize", DEFAULT_HISTORY_SIZE)
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            logger.warning(
                f"Ignoring invalid historySize {value!r}; using {DEFAULT_HISTORY_SIZE}"
            )
            return DEFAULT_HISTORY_SIZE
        return value

    def host_model_settings(self) -> tuple[str, str]:
        """(base_url, preferred model family) for the host-managed model"""
        host = self.source.get("hostModel", {})
        if not isinstance(host, dict):
            host = {}
        base_url = host.get("baseUrl") or DEFAULT_HOST_URL
        family = host.get("family") or DEFAULT_HOST_FAMILY
        return str(base_url), str(family)

    def base_url(self, provider: str) -> str | None:
        value = self._get_str(f"{provider}BaseUrl")
        return value or None

    def logging_settings(self) -> dict[str, Any]:
        log_config = self.source.get("logging", {})
        return log_config if isinstance(log_config, dict) else {}


def setup_logging(settings: Settings, verbose: bool = False) -> None:
    """Configure the root logger from the ``logging`` config section"""
    level = logging.DEBUG if verbose else logging.WARNING

    log_config = settings.logging_settings()
    if not verbose and "level" in log_config:
        level_name = str(log_config["level"]).upper()
        level = getattr(logging, level_name, logging.WARNING)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    log_file = log_config.get("file")
    if log_file:
        try:
            expanded_path = os.path.expanduser(log_file)
            handlers.append(logging.FileHandler(expanded_path, encoding="utf-8"))
        except OSError as e:
            print(f"Failed to setup log file {log_file}: {e}")

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )
