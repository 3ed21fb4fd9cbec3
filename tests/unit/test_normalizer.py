from __future__ import annotations

from datetime import datetime, timezone

import pytest

from layr.planning.markdown import plan_to_markdown
from layr.planning.normalizer import DEFAULT_OVERVIEW, DEFAULT_TITLE, MAX_TREE_DEPTH, normalize_plan
from layr.planning.schemas import ItemType, PlanSource, ProjectPlan, StepPriority


def test_empty_object_yields_fully_populated_plan() -> None:
    plan = normalize_plan({})

    assert isinstance(plan, ProjectPlan)
    assert plan.title == DEFAULT_TITLE
    assert plan.overview == DEFAULT_OVERVIEW
    assert plan.requirements == []
    assert plan.file_structure == []
    assert plan.next_steps == []
    assert plan.generated_by is PlanSource.AI
    assert plan.generated_at.tzinfo is not None


@pytest.mark.parametrize("value", [None, [], "text", 42, [{"title": "x"}]])
def test_non_mapping_input_falls_back_to_defaults(value) -> None:
    plan = normalize_plan(value)
    assert plan.title == DEFAULT_TITLE
    assert plan.next_steps == []


def test_invalid_priority_and_missing_id_are_defaulted() -> None:
    plan = normalize_plan({"nextSteps": [{"priority": "urgent"}]})

    (step,) = plan.next_steps
    assert step.priority is StepPriority.MEDIUM
    assert step.id == "step-1"
    assert step.description == "Step 1"
    assert step.completed is False
    assert step.dependencies == []
    assert step.estimated_time is None


def test_step_fields_are_coerced() -> None:
    plan = normalize_plan(
        {
            "nextSteps": [
                {"id": "a", "description": "Set up", "priority": "HIGH", "completed": "true", "estimatedTime": 30},
                {"description": "Build", "priority": "low", "dependencies": ["a", 3, None, {"x": 1}]},
                "not a step",
            ]
        }
    )

    first, second, third = plan.next_steps
    assert first.priority is StepPriority.HIGH
    assert first.completed is True
    assert first.estimated_time == "30"
    assert second.id == "step-2"
    assert second.dependencies == ["a", "3"]
    assert third.id == "step-3"


def test_dangling_dependencies_are_kept() -> None:
    plan = normalize_plan({"nextSteps": [{"id": "s1", "dependencies": ["missing-step"]}]})
    assert plan.next_steps[0].dependencies == ["missing-step"]


def test_file_structure_is_normalised_recursively() -> None:
    plan = normalize_plan(
        {
            "fileStructure": [
                {
                    "name": "src",
                    "type": "directory",
                    "path": "src/",
                    "children": [{"type": "folder"}, {"name": "app.py", "description": "Entry point"}],
                },
                {"path": "README.md"},
                "setup.cfg",
            ]
        }
    )

    src, readme, setup = plan.file_structure
    assert src.type is ItemType.DIRECTORY
    assert src.path == "src/"
    assert src.children is not None
    unnamed, app = src.children
    assert unnamed.name == "item-0"
    assert unnamed.path == "item-0"
    assert unnamed.type is ItemType.FILE
    assert app.path == "app.py"
    assert app.description == "Entry point"
    assert app.children is None
    assert readme.name == "item-1"
    assert readme.path == "README.md"
    assert setup.name == "setup.cfg"


def test_wrong_shaped_arrays_become_empty() -> None:
    plan = normalize_plan(
        {"title": 7, "overview": ["x"], "requirements": "one", "fileStructure": {}, "nextSteps": "later"}
    )
    assert plan.title == "7"
    assert plan.overview == DEFAULT_OVERVIEW
    assert plan.requirements == []
    assert plan.file_structure == []
    assert plan.next_steps == []


def test_generation_metadata_is_applied() -> None:
    stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    plan = normalize_plan({"title": "Todo"}, generated_at=stamp, source=PlanSource.TEMPLATE)
    assert plan.generated_at == stamp
    assert plan.generated_by is PlanSource.TEMPLATE
    assert plan.to_wire()["generatedBy"] == "template"


def test_deep_file_tree_is_truncated() -> None:
    node = {"name": "leaf.txt"}
    for level in range(400):
        node = {"name": f"dir{level}", "type": "directory", "children": [node]}

    plan = normalize_plan({"title": "Deep", "fileStructure": [node]})

    depth = 0
    items = plan.file_structure
    while items:
        depth += 1
        items = items[0].children
    assert depth == MAX_TREE_DEPTH
    assert "*Generated by Layr AI" in plan_to_markdown(plan)
