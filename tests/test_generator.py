from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List

import pytest

from layr.config import ProviderConfig, ProviderType
from layr.errors import AIServiceError, ApiKeyMissingError
from layr.planning import PlanGenerator, PlanSource, StepPriority, build_template_plan, plan_to_markdown
from layr.planning.logs import load_generation_log
from layr.providers.base import AIProvider

STAMP = datetime(2025, 1, 1, tzinfo=timezone.utc)


class _ScriptedProvider(AIProvider):
    name = "Scripted"
    provider_type = ProviderType.GEMINI
    default_model = "scripted-1"

    def __init__(self, replies: List[str], *, api_key: str = "key") -> None:
        super().__init__(ProviderConfig(provider=ProviderType.GEMINI, api_key=api_key))
        self._replies = replies
        self.prompts: List[str] = []

    def _raw_invoke(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._replies.pop(0)


def test_generate_plan_handles_fenced_and_malformed_output() -> None:
    reply = (
        "Sure! Here is the plan:\n```json\n"
        '{title: "Todo App", "overview": "Tracks tasks.", "requirements": ["Auth",],'
        ' "nextSteps": [{"id": "s1", "priority": "urgent"} {"description": "Ship"}]}\n```'
    )
    provider = _ScriptedProvider([reply])
    generator = PlanGenerator(provider, clock=lambda: STAMP)

    plan = generator.generate_plan("A todo app with authentication")

    assert plan.title == "Todo App"
    assert plan.requirements == ["Auth"]
    assert [step.id for step in plan.next_steps] == ["s1", "step-2"]
    assert plan.next_steps[0].priority is StepPriority.MEDIUM
    assert plan.generated_at == STAMP
    assert plan.generated_by is PlanSource.AI
    assert "A todo app with authentication" in provider.prompts[0]


def test_generate_plan_propagates_missing_key() -> None:
    provider = _ScriptedProvider([], api_key="")
    with pytest.raises(ApiKeyMissingError):
        PlanGenerator(provider).generate_plan("A todo app with authentication")
    assert provider.prompts == []


def test_generate_plan_reports_unparseable_output(tmp_path: Path) -> None:
    provider = _ScriptedProvider(["I cannot help with that."])
    generator = PlanGenerator(provider, logs_dir=tmp_path)

    with pytest.raises(AIServiceError) as excinfo:
        generator.generate_plan("A todo app with authentication")
    assert "no JSON found" in excinfo.value.message

    (log_path,) = (tmp_path / "generations").glob("*.json")
    entry = load_generation_log(log_path)
    assert entry["raw_response"] == "I cannot help with that."
    assert entry["plan"] is None
    assert "no JSON found" in entry["error"]


def test_generate_plan_writes_generation_log(tmp_path: Path) -> None:
    provider = _ScriptedProvider([json.dumps({"title": "Weather CLI"})])
    generator = PlanGenerator(provider, logs_dir=tmp_path / "logs", clock=lambda: STAMP)

    generator.generate_plan("A weather command line tool")

    (log_path,) = (tmp_path / "logs" / "generations").glob("*.json")
    assert "a-weather-command-line-tool" in log_path.name
    entry = load_generation_log(log_path)
    assert entry["provider"] == "gemini"
    assert entry["model"] == "scripted-1"
    assert entry["plan"]["title"] == "Weather CLI"
    assert entry["error"] is None
    assert "A weather command line tool" in entry["prompt"]


def test_concurrent_generators_do_not_share_state() -> None:
    first = PlanGenerator(_ScriptedProvider(['{"title": "One"}']))
    second = PlanGenerator(_ScriptedProvider(['{"title": "Two"}']))

    assert first.generate_plan("first request text").title == "One"
    assert second.generate_plan("second request text").title == "Two"


def test_template_plan_is_complete_and_watermarked() -> None:
    plan = build_template_plan("Build a React dashboard for sales data", generated_at=STAMP)

    assert plan.generated_by is PlanSource.TEMPLATE
    assert plan.title == "React Dashboard Sales Data Project"
    assert any(item.name == "package.json" for item in plan.file_structure)
    assert plan.next_steps[0].id == "step-1"

    markdown = plan_to_markdown(plan)
    assert "*Generated by Layr AI" in markdown
    assert "(template)*" in markdown


def test_template_plan_picks_python_layout() -> None:
    plan = build_template_plan("A python script that renames photos")
    assert any(item.name == "pyproject.toml" for item in plan.file_structure)


def test_generate_plan_logs_deeply_nested_output(tmp_path: Path) -> None:
    provider = _ScriptedProvider(["[" * 100000 + "]" * 100000])
    generator = PlanGenerator(provider, logs_dir=tmp_path)

    with pytest.raises(AIServiceError):
        generator.generate_plan("A todo app with authentication")

    (log_path,) = (tmp_path / "generations").glob("*.json")
    assert load_generation_log(log_path)["error"]
