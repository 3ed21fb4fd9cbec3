"""Exception hierarchy shared by the Layr planning pipeline."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "AIServiceError",
    "APIKeyMissingError",
    "ApiKeyMissingError",
    "ConfigError",
    "LayrError",
    "PlanProvenanceError",
]


class LayrError(RuntimeError):
    """Base error carrying a human-readable message and an optional cause."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ApiKeyMissingError(LayrError):
    """Raised before any network call when a provider has no usable API key."""

    def __init__(self, provider: Optional[str] = None) -> None:
        label = provider or "the selected AI provider"
        super().__init__(
            f"API key is missing for {label}. "
            "Set ai.api_key in layr.yaml or export the provider's API key environment variable."
        )
        self.provider = provider


# Spelling used by the editor add-on.
APIKeyMissingError = ApiKeyMissingError


class AIServiceError(LayrError):
    """Raised when the backend, the transport or response parsing fails."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        *,
        raw_text: Optional[str] = None,
    ) -> None:
        super().__init__(message, cause)
        self.raw_text = raw_text


class ConfigError(LayrError):
    """Raised when ``layr.yaml`` cannot be read or has the wrong shape."""


class PlanProvenanceError(LayrError):
    """Raised when a document without the Layr watermark is handed off."""
