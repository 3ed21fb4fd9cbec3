"""Recover a JSON plan payload from free-text model output."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from ..errors import AIServiceError

__all__ = ["extract_json", "parse_with_repair", "repair_json"]

LOGGER = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
_OUTER_OBJECT = re.compile(r"\{[\s\S]*\}")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_ADJACENT_OBJECTS = re.compile(r"}\s*{")
_ADJACENT_ARRAYS = re.compile(r"]\s*\[")
_UNQUOTED_KEY = re.compile(r"([{,]\s*)([a-zA-Z_][a-zA-Z0-9_]*)\s*:")

_DECODER = json.JSONDecoder()
_WHITESPACE = re.compile(r"\s*")


def extract_json(raw_text: str) -> str:
    """Return the JSON candidate embedded in ``raw_text``.

    A ```json fence wins, then the greedy first-``{``-to-last-``}`` span,
    then the whole trimmed text when it already parses.
    """
    fenced = _FENCED_JSON.search(raw_text)
    if fenced:
        LOGGER.debug("Found JSON in code block")
        return fenced.group(1).strip()

    outer = _OUTER_OBJECT.search(raw_text)
    if outer:
        LOGGER.debug("Found JSON object in response text")
        return outer.group(0)

    stripped = raw_text.strip()
    try:
        json.loads(stripped)
    except (json.JSONDecodeError, RecursionError) as error:
        LOGGER.debug("No valid JSON found in response: %s", raw_text[:200])
        raise AIServiceError(
            "Invalid response format from AI service - no JSON found",
            error,
            raw_text=raw_text,
        ) from error
    LOGGER.debug("Entire response is valid JSON")
    return stripped


def repair_json(json_text: str) -> str:
    """Apply the textual repairs in their fixed order.

    Known limitation: ``}{`` or ``][`` inside string values gets a comma too.
    """
    repaired = _TRAILING_COMMA.sub(r"\1", json_text)
    repaired = _ADJACENT_OBJECTS.sub("},{", repaired)
    repaired = _ADJACENT_ARRAYS.sub("],[", repaired)
    return _UNQUOTED_KEY.sub(r'\1"\2":', repaired)


def parse_with_repair(json_text: str) -> Any:
    """Parse ``json_text``, retrying once after :func:`repair_json`."""
    try:
        return json.loads(json_text)
    except (json.JSONDecodeError, RecursionError) as error:
        LOGGER.debug("JSON parse error: %s; attempting repair", error)

    repaired = repair_json(json_text)
    try:
        value = _loads_value_sequence(repaired)
    except (json.JSONDecodeError, RecursionError) as error:
        LOGGER.warning("Failed to repair JSON: %s", error)
        LOGGER.debug("Original JSON for debugging: %s", json_text)
        raise AIServiceError(
            "Failed to parse AI response as JSON",
            error,
            raw_text=json_text,
        ) from error
    LOGGER.debug("Successfully repaired and parsed JSON")
    return value


def _loads_value_sequence(text: str) -> Any:
    """Decode one JSON value, or several comma-separated ones as a list."""
    values: list[Any] = []
    index = _WHITESPACE.match(text, 0).end()
    while True:
        value, index = _DECODER.raw_decode(text, index)
        values.append(value)
        index = _WHITESPACE.match(text, index).end()
        if index == len(text):
            break
        if text[index] != ",":
            raise json.JSONDecodeError("Extra data", text, index)
        index = _WHITESPACE.match(text, index + 1).end()
    if len(values) == 1:
        return values[0]
    return values
