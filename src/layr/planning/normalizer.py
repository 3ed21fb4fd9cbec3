"""Coerce loosely typed model output into a fully populated :class:`ProjectPlan`.

Every function here is total: wrong-shaped input is replaced by a default
instead of raising, so a plan that leaves this module is always well formed.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, List, Optional

from .schemas import (
    FileStructureItem,
    ItemType,
    PlanSource,
    PlanStep,
    ProjectPlan,
    StepPriority,
    utc_now,
)

__all__ = [
    "DEFAULT_OVERVIEW",
    "DEFAULT_TITLE",
    "MAX_TREE_DEPTH",
    "normalize_file_structure",
    "normalize_next_steps",
    "normalize_plan",
]

DEFAULT_TITLE = "Generated Project Plan"
DEFAULT_OVERVIEW = "No overview provided"
# Children nested deeper than this are dropped.
MAX_TREE_DEPTH = 32

_PRIORITIES = {priority.value: priority for priority in StepPriority}
_TRUE_STRINGS = {"true", "1", "yes", "on", "done", "completed"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


def normalize_plan(
    parsed: Any,
    *,
    generated_at: Optional[datetime] = None,
    source: PlanSource = PlanSource.AI,
) -> ProjectPlan:
    """Map a parsed JSON value onto a :class:`ProjectPlan`, defaulting every gap."""
    data = parsed if isinstance(parsed, Mapping) else {}
    return ProjectPlan(
        title=_text(data.get("title")) or DEFAULT_TITLE,
        overview=_text(data.get("overview")) or DEFAULT_OVERVIEW,
        requirements=_text_list(data.get("requirements")),
        file_structure=normalize_file_structure(data.get("fileStructure")),
        next_steps=normalize_next_steps(data.get("nextSteps")),
        generated_at=generated_at or utc_now(),
        generated_by=source,
    )


def normalize_file_structure(items: Any, depth: int = 1) -> List[FileStructureItem]:
    """Normalise a file tree; children below :data:`MAX_TREE_DEPTH` levels are dropped."""
    if not isinstance(items, list):
        return []
    return [_file_item(item, index, depth) for index, item in enumerate(items)]


def _file_item(item: Any, index: int, depth: int) -> FileStructureItem:
    if isinstance(item, str) and item.strip():
        # Bare strings are treated as file names.
        item = {"name": item.strip()}
    data = item if isinstance(item, Mapping) else {}

    fallback_name = f"item-{index}"
    name = _text(data.get("name"))
    children = data.get("children")
    if depth >= MAX_TREE_DEPTH:
        children = None
    return FileStructureItem(
        name=name or fallback_name,
        type=ItemType.DIRECTORY if data.get("type") == ItemType.DIRECTORY.value else ItemType.FILE,
        path=_text(data.get("path")) or name or fallback_name,
        description=_text(data.get("description")) or None,
        children=normalize_file_structure(children, depth + 1) if isinstance(children, list) else None,
    )


def normalize_next_steps(steps: Any) -> List[PlanStep]:
    """Normalise the ordered next steps, numbering defaults from ``step-1``."""
    if not isinstance(steps, list):
        return []
    return [_plan_step(step, position) for position, step in enumerate(steps, start=1)]


def _plan_step(step: Any, position: int) -> PlanStep:
    data = step if isinstance(step, Mapping) else {}
    return PlanStep(
        id=_text(data.get("id")) or f"step-{position}",
        description=_text(data.get("description")) or f"Step {position}",
        completed=_flag(data.get("completed")),
        priority=_priority(data.get("priority")),
        estimated_time=_text(data.get("estimatedTime")) or None,
        dependencies=_text_list(data.get("dependencies")),
    )


def _text(value: Any) -> str:
    """Return ``value`` as stripped text, or an empty string for non-scalars."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def _text_list(values: Any) -> List[str]:
    if not isinstance(values, list):
        return []
    cleaned = [_text(value) for value in values]
    return [value for value in cleaned if value]


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    if isinstance(value, (int, float)):
        return bool(value)
    return False


def _priority(value: Any) -> StepPriority:
    if isinstance(value, str):
        return _PRIORITIES.get(value.strip().lower(), StepPriority.MEDIUM)
    return StepPriority.MEDIUM
