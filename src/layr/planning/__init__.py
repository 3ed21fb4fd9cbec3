"""Plan generation pipeline: parse, normalise, render and hand off."""

from .generator import PlanGenerator
from .handoff import build_chat_handoff, has_watermark
from .markdown import WATERMARK, plan_to_markdown
from .normalizer import normalize_plan
from .parser import extract_json, parse_with_repair, repair_json
from .schemas import FileStructureItem, ItemType, PlanSource, PlanStep, ProjectPlan, StepPriority
from .templates import build_template_plan

__all__ = [
    "FileStructureItem",
    "ItemType",
    "PlanGenerator",
    "PlanSource",
    "PlanStep",
    "ProjectPlan",
    "StepPriority",
    "WATERMARK",
    "build_chat_handoff",
    "build_template_plan",
    "extract_json",
    "has_watermark",
    "normalize_plan",
    "parse_with_repair",
    "plan_to_markdown",
    "repair_json",
]
