"""Provenance check and chat hand-off for previously generated plans."""

from __future__ import annotations

import logging

from ..errors import PlanProvenanceError
from .markdown import WATERMARK

__all__ = ["HANDOFF_PREAMBLE", "build_chat_handoff", "has_watermark"]

LOGGER = logging.getLogger(__name__)

HANDOFF_PREAMBLE = (
    "Please implement the following project plan. "
    "Work through the next steps in order and respect the proposed file structure.\n\n"
)


def has_watermark(markdown: str) -> bool:
    """Return ``True`` when ``markdown`` was produced by Layr."""
    return WATERMARK in markdown


def build_chat_handoff(markdown: str) -> str:
    """Wrap a watermarked plan as a message for a chat-based coding assistant."""
    if not has_watermark(markdown):
        raise PlanProvenanceError(
            "This document was not generated by Layr. Create a plan with 'layr plan' first."
        )
    LOGGER.debug("Plan provenance confirmed (%d characters)", len(markdown))
    return f"{HANDOFF_PREAMBLE}{markdown.strip()}\n"
