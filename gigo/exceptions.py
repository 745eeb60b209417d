"""
GIGO Exceptions
===============

Raised for programmer and environment errors only. Provider faults are never
raised; they travel as ``UpscaleFailure`` values (see ``gigo.outcome``).
"""

from __future__ import annotations

from typing import Any


class GigoError(Exception):
    """Base exception for the upscaler."""

    def __init__(
        self,
        message: str,
        error_code: str = "GENERIC_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(GigoError):
    """A configuration value is present but unusable."""

    def __init__(self, config_key: str, reason: str) -> None:
        super().__init__(
            message=f"Configuration error for key '{config_key}': {reason}",
            error_code="CONFIG_ERROR",
            details={"config_key": config_key, "reason": reason},
        )
        self.config_key = config_key
        self.reason = reason


class StorageError(GigoError):
    """A persisted value could not be read back."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(
            message=f"Stored value for '{key}' is unreadable: {reason}",
            error_code="STORAGE_ERROR",
            details={"key": key, "reason": reason},
        )
        self.key = key
