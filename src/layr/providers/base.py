"""Capability contract shared by all AI provider adapters."""

from __future__ import annotations

import logging
from typing import ClassVar, List, Optional, Tuple

from ..config import ProviderConfig, ProviderType
from ..errors import AIServiceError, ApiKeyMissingError
from ..prompts import render_plan_prompt

__all__ = ["AIProvider"]

LOGGER = logging.getLogger(__name__)


class AIProvider:
    """Send the plan prompt to one backend and return its raw text.

    Subclasses implement :meth:`_raw_invoke` and :meth:`_probe`; key checks,
    prompt rendering and error wrapping live here.
    """

    name: ClassVar[str] = "AI provider"
    provider_type: ClassVar[ProviderType]
    default_model: ClassVar[str] = ""
    supported_models: ClassVar[Tuple[str, ...]] = ()

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        LOGGER.debug(
            "%s: API key %s (length %d)",
            self.name,
            "***configured***" if config.has_usable_key else "missing or placeholder",
            len(config.api_key or ""),
        )

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def model(self) -> str:
        """Return the model override or the provider default."""
        return self._config.model or self.default_model

    def is_available(self) -> bool:
        """Report whether a usable key is configured. Never touches the network."""
        return self._config.has_usable_key

    def get_supported_models(self) -> List[str]:
        return list(self.supported_models)

    def generate(self, request: str) -> str:
        """Return the backend's raw text for ``request``.

        Raises :class:`ApiKeyMissingError` before any network traffic when the
        key is unusable and :class:`AIServiceError` for every backend failure.
        """
        if not self.is_available():
            raise ApiKeyMissingError(self.provider_type.value)

        prompt = render_plan_prompt(request)
        try:
            text = self._raw_invoke(prompt)
        except (ApiKeyMissingError, AIServiceError):
            raise
        except Exception as error:
            LOGGER.error("%s: error generating plan: %s", self.name, error)
            raise AIServiceError(
                f"Failed to generate plan with {self.name}: {error}",
                error,
            ) from error

        if not text or not text.strip():
            raise AIServiceError(f"Empty response from {self.name} API")

        LOGGER.debug("%s: raw AI response length %d", self.name, len(text))
        return text

    def validate_api_key(self, api_key: Optional[str] = None) -> bool:
        """Send a trivial request with ``api_key`` (default: configured key).

        Returns ``False`` on any failure instead of raising.
        """
        key = api_key if api_key is not None else self._config.api_key
        try:
            self._probe(key)
        except Exception as error:
            LOGGER.warning("%s: API key validation failed: %s", self.name, error)
            return False
        return True

    def _raw_invoke(self, prompt: str) -> str:
        """Perform the backend call. Subclasses must implement."""
        raise NotImplementedError("Subclasses must implement _raw_invoke().")

    def _probe(self, api_key: str) -> None:
        """Issue a minimal authenticated request, raising on failure."""
        raise NotImplementedError("Subclasses must implement _probe().")
