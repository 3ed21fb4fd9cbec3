"""Google Gemini provider backed by the ``google-genai`` SDK."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from google import genai
from google.genai import types

from ..config import ProviderConfig, ProviderType
from ..errors import AIServiceError
from .base import AIProvider

__all__ = ["GeminiProvider"]

LOGGER = logging.getLogger(__name__)

ClientFactory = Callable[[str], Any]

_SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)


def _default_client_factory(api_key: str) -> Any:
    return genai.Client(api_key=api_key)


def _generation_config() -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        temperature=0.7,
        top_k=40,
        top_p=0.95,
        max_output_tokens=8192,
        safety_settings=[
            types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_NONE)
            for category in _SAFETY_CATEGORIES
        ],
    )


def _enum_name(value: Any) -> Optional[str]:
    """Return the upper-case name of an SDK enum (or plain string)."""
    if value is None:
        return None
    name = getattr(value, "name", None)
    if isinstance(name, str) and name:
        return name.upper()
    text = str(value).strip()
    return text.rsplit(".", 1)[-1].upper() or None


class GeminiProvider(AIProvider):
    """Cloud-SDK provider for the Gemini model family."""

    name = "Gemini"
    provider_type = ProviderType.GEMINI
    default_model = "gemini-2.5-flash"
    supported_models = ("gemini-2.5-flash", "gemini-2.5-pro", "gemini-pro")

    def __init__(
        self,
        config: ProviderConfig,
        *,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        super().__init__(config)
        self._client_factory = client_factory or _default_client_factory
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = self._client_factory(self._config.api_key)
            LOGGER.debug("Gemini: client initialised")
        return self._client

    def _raw_invoke(self, prompt: str) -> str:
        response = self._get_client().models.generate_content(
            model=self.model,
            contents=prompt,
            config=_generation_config(),
        )
        candidates = getattr(response, "candidates", None) or []
        finish_reason = _enum_name(getattr(candidates[0], "finish_reason", None)) if candidates else None
        LOGGER.debug("Gemini: %d candidate(s), finish reason %s", len(candidates), finish_reason)

        text = getattr(response, "text", None)
        if text and text.strip():
            return text

        if finish_reason == "SAFETY":
            raise AIServiceError("Content was blocked by safety filters. Please try a different prompt.")
        if finish_reason == "RECITATION":
            raise AIServiceError("Content was blocked due to recitation concerns. Please try a different prompt.")

        feedback = getattr(response, "prompt_feedback", None)
        block_reason = _enum_name(getattr(feedback, "block_reason", None))
        if block_reason:
            raise AIServiceError(f"Prompt was blocked by the Gemini API. Block reason: {block_reason}")

        raise AIServiceError(f"Empty response from Gemini API. Finish reason: {finish_reason or 'unknown'}")

    def _probe(self, api_key: str) -> None:
        client = self._client_factory(api_key)
        client.models.generate_content(model=self.model, contents="Hello")
