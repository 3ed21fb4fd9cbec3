"""OpenAI-compatible chat-completions provider spoken over plain HTTP."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable, Dict, Optional

from ..config import ProviderConfig, ProviderType
from ..errors import AIServiceError
from .base import AIProvider

__all__ = ["HttpResponse", "OpenAIChatProvider", "Transport", "UrllibTransport"]

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"


@dataclass(slots=True)
class HttpResponse:
    """Status and decoded body returned by a transport."""

    status: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


Transport = Callable[[str, str, Dict[str, str], Optional[bytes]], HttpResponse]


class UrllibTransport:
    """Default transport built on ``urllib``; HTTP error statuses are returned, not raised."""

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._timeout = timeout

    def __call__(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Optional[bytes] = None,
    ) -> HttpResponse:
        import urllib.error
        import urllib.request

        request = urllib.request.Request(url, data=data, headers=headers, method=method)
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                raw = response.read()
                status = getattr(response, "status", 200)
        except urllib.error.HTTPError as error:  # pragma: no cover - network-dependent
            body = error.read().decode("utf-8", errors="ignore")
            return HttpResponse(status=error.code, body=body)
        except TimeoutError as error:  # pragma: no cover - network-dependent
            raise AIServiceError("OpenAI request timed out.", error) from error
        except urllib.error.URLError as error:  # pragma: no cover - network-dependent
            raise AIServiceError(f"Failed to reach OpenAI endpoint: {error.reason}", error) from error
        return HttpResponse(status=status, body=raw.decode("utf-8"))


def _status_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


def _error_detail(body: str) -> str:
    """Pull ``error.message`` out of an API error body when present."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return ""
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
    return ""


class OpenAIChatProvider(AIProvider):
    """HTTP chat-completions provider for OpenAI and compatible backends."""

    name = "OpenAI"
    provider_type = ProviderType.OPENAI
    default_model = "gpt-4"
    supported_models = ("gpt-4", "gpt-4-turbo", "gpt-3.5-turbo")

    def __init__(self, config: ProviderConfig, *, transport: Optional[Transport] = None) -> None:
        super().__init__(config)
        self._base_url = (config.base_url or DEFAULT_BASE_URL).rstrip("/")
        self._transport = transport or UrllibTransport(timeout=config.timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self, api_key: str) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        if self._config.organization:
            headers["OpenAI-Organization"] = self._config.organization
        return headers

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        """Render the chat-completions request body."""
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.7,
            "max_tokens": 4000,
            "top_p": 0.95,
        }

    def _raw_invoke(self, prompt: str) -> str:
        data = json.dumps(self.build_payload(prompt)).encode("utf-8")
        response = self._transport(
            "POST",
            f"{self._base_url}/chat/completions",
            self._headers(self._config.api_key),
            data,
        )
        if not response.ok:
            detail = _error_detail(response.body)
            raise AIServiceError(
                f"OpenAI API error: {response.status} {_status_phrase(response.status)}. {detail}".rstrip()
            )

        try:
            payload = json.loads(response.body)
        except json.JSONDecodeError as error:
            raise AIServiceError("OpenAI API returned a non-JSON response body.", error) from error

        return self._message_content(payload)

    @staticmethod
    def _message_content(payload: Any) -> str:
        if not isinstance(payload, dict):
            return ""
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            return ""
        content = message.get("content")
        return content if isinstance(content, str) else ""

    def _probe(self, api_key: str) -> None:
        response = self._transport("GET", f"{self._base_url}/models", {"Authorization": f"Bearer {api_key}"}, None)
        if not response.ok:
            raise AIServiceError(f"OpenAI API key rejected with HTTP {response.status}")
