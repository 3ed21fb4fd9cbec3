from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from layr.providers.openai_chat import HttpResponse  # noqa: E402


@dataclass(slots=True)
class RecordingTransport:
    """Transport double that replays canned responses and records each call."""

    responses: List[HttpResponse] = field(default_factory=list)
    calls: List[Dict[str, object]] = field(default_factory=list)

    def __call__(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Optional[bytes] = None,
    ) -> HttpResponse:
        self.calls.append({"method": method, "url": url, "headers": dict(headers), "data": data})
        if not self.responses:
            raise AssertionError("Transport invoked without a prepared response.")
        return self.responses.pop(0)


def _forbidden(*args: object, **kwargs: object) -> None:
    pytest.fail("Network access attempted by a provider that should not call out.")


@pytest.fixture()
def forbidden_transport():
    """Transport/client factory that fails the test when invoked."""
    return _forbidden


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove provider keys from the environment."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


@pytest.fixture()
def make_transport():
    """Build a :class:`RecordingTransport` from ``(status, body)`` pairs."""

    def _factory(*responses: tuple[int, str]) -> RecordingTransport:
        return RecordingTransport(responses=[HttpResponse(status, body) for status, body in responses])

    return _factory
