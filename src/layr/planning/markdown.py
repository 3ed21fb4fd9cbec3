"""Render a :class:`ProjectPlan` as a Markdown document."""

from __future__ import annotations

from typing import List, Sequence

from .schemas import FileStructureItem, PlanStep, ProjectPlan

__all__ = ["WATERMARK", "plan_to_markdown", "render_watermark"]

# Downstream provenance checks do exact substring matching on this literal.
WATERMARK = "*Generated by Layr AI"

_INDENT = "  "


def plan_to_markdown(plan: ProjectPlan) -> str:
    """Return the Markdown document for ``plan``; always ends with the watermark."""
    lines: List[str] = [f"# {plan.title}", "", "## Overview", "", plan.overview, ""]

    lines.extend(["## Requirements", ""])
    if plan.requirements:
        lines.extend(f"- {requirement}" for requirement in plan.requirements)
    else:
        lines.append("_No requirements listed._")
    lines.append("")

    lines.extend(["## File Structure", ""])
    if plan.file_structure:
        lines.extend(_render_tree(plan.file_structure, depth=0))
    else:
        lines.append("_No file structure proposed._")
    lines.append("")

    lines.extend(["## Next Steps", ""])
    if plan.next_steps:
        for step in plan.next_steps:
            lines.extend(_render_step(step))
    else:
        lines.append("_No next steps defined._")
    lines.append("")

    lines.extend(["---", "", render_watermark(plan), ""])
    return "\n".join(lines)


def render_watermark(plan: ProjectPlan) -> str:
    """Return the trailing provenance line for ``plan``."""
    timestamp = plan.generated_at.strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    return f"{WATERMARK} on {timestamp} ({plan.generated_by.value})*"


def _render_tree(items: Sequence[FileStructureItem], depth: int) -> List[str]:
    lines: List[str] = []
    for item in items:
        prefix = _INDENT * depth
        if item.is_directory:
            label = f"**{item.name.rstrip('/')}/**"
        else:
            label = f"`{item.name}`"
        entry = f"{prefix}- {label}"
        if item.path and item.path.rstrip("/") != item.name.rstrip("/"):
            entry += f" ({item.path})"
        if item.description:
            entry += f" - {item.description}"
        lines.append(entry)
        if item.children:
            lines.extend(_render_tree(item.children, depth + 1))
    return lines


def _render_step(step: PlanStep) -> List[str]:
    mark = "x" if step.completed else " "
    details = [f"Priority: {step.priority.value}"]
    if step.estimated_time:
        details.append(f"Estimated time: {step.estimated_time}")
    lines = [
        f"- [{mark}] **{step.id}**: {step.description}",
        f"{_INDENT}- {' | '.join(details)}",
    ]
    if step.dependencies:
        lines.append(f"{_INDENT}- Depends on: {', '.join(step.dependencies)}")
    return lines
