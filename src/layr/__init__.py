"""Layr turns a one-line feature request into a structured project plan."""

from .errors import AIServiceError, APIKeyMissingError, ApiKeyMissingError, LayrError

__version__ = "0.2.0"

__all__ = [
    "AIServiceError",
    "APIKeyMissingError",
    "ApiKeyMissingError",
    "LayrError",
    "__version__",
]
