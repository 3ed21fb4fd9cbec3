"""End-to-end plan generation: provider call, JSON recovery, normalisation."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from ..errors import AIServiceError
from ..prompts import render_plan_prompt
from ..providers.base import AIProvider
from .logs import GenerationLogEntry, write_generation_log
from .normalizer import normalize_plan
from .parser import extract_json, parse_with_repair
from .schemas import PlanSource, ProjectPlan, utc_now

__all__ = ["PlanGenerator"]

LOGGER = logging.getLogger(__name__)


class PlanGenerator:
    """Run one request through a provider and return a normalised plan.

    The generator owns no shared state; build one per invocation.
    """

    def __init__(
        self,
        provider: AIProvider,
        *,
        logs_dir: Optional[Path] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._provider = provider
        self._logs_dir = logs_dir
        self._clock = clock

    @property
    def provider(self) -> AIProvider:
        return self._provider

    def is_ai_available(self) -> bool:
        return self._provider.is_available()

    def generate_plan(self, request: str) -> ProjectPlan:
        """Generate a plan for ``request``.

        Propagates :class:`~layr.errors.ApiKeyMissingError` and
        :class:`~layr.errors.AIServiceError` unchanged.
        """
        entry = GenerationLogEntry(
            provider=self._provider.provider_type.value,
            model=self._provider.model,
            request=request,
            prompt=render_plan_prompt(request),
        )
        LOGGER.info("Generating plan with %s (%s)", self._provider.name, self._provider.model)
        try:
            entry.raw_response = self._provider.generate(request)
            entry.extracted_json = extract_json(entry.raw_response)
            parsed = parse_with_repair(entry.extracted_json)
        except AIServiceError as error:
            entry.error = error.message
            self._record(entry)
            raise

        plan = normalize_plan(parsed, generated_at=self._clock(), source=PlanSource.AI)
        entry.plan = plan.to_wire()
        self._record(entry)
        LOGGER.info(
            "Generated plan '%s' with %d requirement(s) and %d step(s)",
            plan.title,
            len(plan.requirements),
            len(plan.next_steps),
        )
        return plan

    def _record(self, entry: GenerationLogEntry) -> None:
        if self._logs_dir is None:
            return
        write_generation_log(self._logs_dir, entry)
