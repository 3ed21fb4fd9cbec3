"""Typed records describing a generated project plan."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


class RecordModel(BaseModel):
    """Base model accepting both snake_case names and the camelCase wire aliases."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class PlanSource(str, Enum):
    """Where a plan came from."""

    AI = "ai"
    TEMPLATE = "template"


class ItemType(str, Enum):
    """Kind of entry in the proposed file layout."""

    FILE = "file"
    DIRECTORY = "directory"


class StepPriority(str, Enum):
    """Priority attached to a next step."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FileStructureItem(RecordModel):
    """Single file or directory in the proposed layout."""

    name: str
    type: ItemType = ItemType.FILE
    path: str
    description: Optional[str] = None
    children: Optional[List["FileStructureItem"]] = None

    @property
    def is_directory(self) -> bool:
        return self.type is ItemType.DIRECTORY


class PlanStep(RecordModel):
    """Ordered next step. Dependency ids are not checked against other steps."""

    id: str
    description: str
    completed: bool = False
    priority: StepPriority = StepPriority.MEDIUM
    estimated_time: Optional[str] = Field(default=None, alias="estimatedTime")
    dependencies: List[str] = Field(default_factory=list)


class ProjectPlan(RecordModel):
    """Fully populated plan handed from the normalizer to the formatter."""

    title: str
    overview: str
    requirements: List[str] = Field(default_factory=list)
    file_structure: List[FileStructureItem] = Field(default_factory=list, alias="fileStructure")
    next_steps: List[PlanStep] = Field(default_factory=list, alias="nextSteps")
    generated_at: datetime = Field(default_factory=utc_now, alias="generatedAt")
    generated_by: PlanSource = Field(default=PlanSource.AI, alias="generatedBy")

    def to_wire(self) -> dict:
        """Dump using the camelCase keys the model is prompted with."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


FileStructureItem.model_rebuild()

__all__ = [
    "FileStructureItem",
    "ItemType",
    "PlanSource",
    "PlanStep",
    "ProjectPlan",
    "StepPriority",
    "utc_now",
]
