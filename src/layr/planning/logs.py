"""Structured JSON logs for each AI plan generation."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

__all__ = ["GenerationLogEntry", "load_generation_log", "write_generation_log"]

LOGGER = logging.getLogger(__name__)

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


@dataclass(slots=True)
class GenerationLogEntry:
    """Everything recorded about one generation attempt."""

    provider: str
    model: str
    request: str
    prompt: Optional[str] = None
    raw_response: Optional[str] = None
    extracted_json: Optional[str] = None
    plan: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_payload(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "provider": self.provider,
            "model": self.model,
            "request": self.request,
            "prompt": self.prompt,
            "raw_response": self.raw_response,
            "extracted_json": self.extracted_json,
            "plan": self.plan,
            "error": self.error,
        }


def _slug(value: str, max_length: int = 40) -> str:
    slug = _SLUG_PATTERN.sub("-", value.lower()).strip("-")
    return slug[:max_length].rstrip("-") or "plan"


def write_generation_log(logs_dir: Path, entry: GenerationLogEntry) -> Optional[Path]:
    """Persist ``entry`` as JSON; returns ``None`` when the log cannot be written."""
    target_dir = logs_dir / "generations"
    stamp = entry.timestamp.strftime("%Y%m%dT%H%M%S%fZ")
    path = target_dir / f"{stamp}-{entry.provider}-{_slug(entry.request)}.json"
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(entry.to_payload(), indent=2), encoding="utf-8")
    except OSError as error:
        LOGGER.warning("Failed to write generation log to %s: %s", path, error)
        return None
    LOGGER.debug("Wrote generation log %s", path)
    return path


def load_generation_log(path: Path | str) -> Mapping[str, Any]:
    """Load a stored generation log."""
    log_path = Path(path).resolve()
    with log_path.open("r", encoding="utf-8") as handle:
        return json.load(handle)
