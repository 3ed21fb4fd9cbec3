"""AI provider adapters and the factory that selects one from configuration."""

from __future__ import annotations

from typing import Dict, List

from ..config import ProviderConfig, ProviderType
from .base import AIProvider
from .gemini import GeminiProvider
from .openai_chat import OpenAIChatProvider

PROVIDER_CLASSES: Dict[ProviderType, type[AIProvider]] = {
    ProviderType.GEMINI: GeminiProvider,
    ProviderType.OPENAI: OpenAIChatProvider,
}


def create_provider(config: ProviderConfig) -> AIProvider:
    """Instantiate the adapter for ``config.provider``."""
    return PROVIDER_CLASSES[config.provider](config)


def supported_models() -> Dict[ProviderType, List[str]]:
    """Return the advertised models per provider family."""
    return {provider: list(cls.supported_models) for provider, cls in PROVIDER_CLASSES.items()}


__all__ = [
    "AIProvider",
    "GeminiProvider",
    "OpenAIChatProvider",
    "PROVIDER_CLASSES",
    "create_provider",
    "supported_models",
]
