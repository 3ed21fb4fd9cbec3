"""Settings loading and per-invocation provider configuration."""

from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigError

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_CONFIG_TEMPLATE",
    "DEFAULT_MODEL",
    "LayrSettings",
    "PLACEHOLDER_KEYS",
    "PROVIDER_ENV_KEYS",
    "ProviderConfig",
    "ProviderType",
    "is_usable_key",
    "load_settings",
    "mask_key",
    "resolve_provider",
    "write_config",
]

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "layr.yaml"
DEFAULT_MODEL = "gemini-2.5-flash"

DEFAULT_CONFIG_TEMPLATE: Dict[str, Any] = {
    "ai": {
        "model": DEFAULT_MODEL,
        "api_key": "",
        "openai_organization": "",
        "base_url": "",
        "timeout": 120,
    },
    "paths": {
        "logs": ".layr/logs",
    },
}

PLACEHOLDER_KEYS = frozenset(
    {
        "your_api_key_here",
        "your-api-key-here",
        "your_api_key",
        "<your_api_key>",
        "changeme",
    }
)


class ProviderType(str, Enum):
    """Backend families Layr can talk to."""

    GEMINI = "gemini"
    OPENAI = "openai"


DEFAULT_PROVIDER = ProviderType.GEMINI

PROVIDER_ENV_KEYS: Dict[ProviderType, str] = {
    ProviderType.GEMINI: "GEMINI_API_KEY",
    ProviderType.OPENAI: "OPENAI_API_KEY",
}

# OpenAI-compatible chat-completions families are served by the HTTP provider.
_MODEL_PREFIXES = (
    ("gemini", ProviderType.GEMINI),
    ("gpt", ProviderType.OPENAI),
    ("o1", ProviderType.OPENAI),
    ("o3", ProviderType.OPENAI),
    ("o4", ProviderType.OPENAI),
    ("kimi", ProviderType.OPENAI),
    ("deepseek", ProviderType.OPENAI),
    ("grok", ProviderType.OPENAI),
)


def resolve_provider(model: Optional[str]) -> ProviderType:
    """Map a model name onto its provider family, falling back to Gemini."""
    name = (model or "").strip().lower()
    for prefix, provider in _MODEL_PREFIXES:
        if name.startswith(prefix):
            return provider
    return DEFAULT_PROVIDER


def is_usable_key(api_key: Optional[str]) -> bool:
    """Return ``True`` for a non-blank key that is not a known placeholder."""
    if not api_key or not api_key.strip():
        return False
    return api_key.strip().lower() not in PLACEHOLDER_KEYS


def mask_key(api_key: Optional[str]) -> str:
    """Describe a key for display without revealing it."""
    if not api_key or not api_key.strip():
        return "not set"
    if not is_usable_key(api_key):
        return "placeholder"
    return "***configured***"


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Immutable provider settings captured once per command invocation."""

    provider: ProviderType
    api_key: str = ""
    model: Optional[str] = None
    organization: Optional[str] = None
    base_url: Optional[str] = None
    timeout: Optional[float] = None

    @property
    def has_usable_key(self) -> bool:
        return is_usable_key(self.api_key)

    @classmethod
    def from_settings(
        cls,
        settings: "LayrSettings",
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ProviderConfig":
        """Resolve the provider from the model name and pick its key.

        A usable configured key wins; the provider's environment variable is
        the fallback when the configured key is blank or a placeholder.
        """
        env = os.environ if environ is None else environ
        provider = resolve_provider(settings.model)
        api_key = settings.api_key.strip()
        if not is_usable_key(api_key):
            env_key = (env.get(PROVIDER_ENV_KEYS[provider]) or "").strip()
            if env_key:
                api_key = env_key
        return cls(
            provider=provider,
            api_key=api_key,
            model=settings.model or None,
            organization=settings.organization or None,
            base_url=settings.base_url or None,
            timeout=settings.timeout,
        )


@dataclass(frozen=True, slots=True)
class LayrSettings:
    """Typed view over ``layr.yaml``."""

    model: str = DEFAULT_MODEL
    api_key: str = ""
    organization: str = ""
    base_url: str = ""
    timeout: Optional[float] = 120.0
    logs_dir: Optional[Path] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, base_dir: Optional[Path] = None) -> "LayrSettings":
        """Build settings from a parsed config mapping, ignoring malformed values."""
        ai_cfg = _section(data, "ai")
        paths_cfg = _section(data, "paths")

        timeout = float(DEFAULT_CONFIG_TEMPLATE["ai"]["timeout"])
        timeout_value = ai_cfg.get("timeout")
        if isinstance(timeout_value, (int, float)) and not isinstance(timeout_value, bool) and timeout_value > 0:
            timeout = float(timeout_value)
        else:
            LOGGER.warning("Ignoring invalid ai.timeout %r; using %s seconds", timeout_value, timeout)

        logs_dir: Optional[Path] = None
        logs_value = paths_cfg.get("logs")
        if isinstance(logs_value, str) and logs_value.strip():
            logs_dir = Path(logs_value.strip())
            if not logs_dir.is_absolute() and base_dir is not None:
                logs_dir = base_dir / logs_dir

        return cls(
            model=_string(ai_cfg.get("model")) or DEFAULT_MODEL,
            api_key=_string(ai_cfg.get("api_key")),
            organization=_string(ai_cfg.get("openai_organization")),
            base_url=_string(ai_cfg.get("base_url")),
            timeout=timeout,
            logs_dir=logs_dir,
        )


def _section(data: Mapping[str, Any], name: str) -> Dict[str, Any]:
    """Overlay one config section on its defaults; unset or null keys keep the default."""
    section = data.get(name)
    if section is None:
        section = {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"The '{name}' section must be a mapping.")
    merged = dict(DEFAULT_CONFIG_TEMPLATE[name])
    merged.update({key: value for key, value in section.items() if value is not None})
    return merged


def _string(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    return ""


def load_settings(config_path: Path, *, required: bool = False) -> LayrSettings:
    """Load ``layr.yaml``; a missing optional file yields the defaults."""
    if not config_path.exists():
        if required:
            raise ConfigError(f"Config file not found: {config_path}")
        LOGGER.debug("No config file at %s; using defaults", config_path)
        return LayrSettings.from_mapping(DEFAULT_CONFIG_TEMPLATE, base_dir=config_path.parent)

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as error:
        raise ConfigError(f"Failed to parse config: {error}", error) from error
    except OSError as error:
        raise ConfigError(f"Failed to read config {config_path}: {error}", error) from error

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping at the top level.")

    return LayrSettings.from_mapping(data, base_dir=config_path.parent)


def write_config(config_path: Path, config_data: Optional[Dict[str, Any]] = None) -> None:
    """Persist configuration data to disk with stable formatting."""
    payload = copy.deepcopy(config_data if config_data is not None else DEFAULT_CONFIG_TEMPLATE)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(payload, handle, sort_keys=False)
