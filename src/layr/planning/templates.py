"""Offline, template-based plans used when no AI provider is usable."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from .normalizer import normalize_plan
from .schemas import PlanSource, ProjectPlan

__all__ = ["build_template_plan", "derive_title"]

_STOPWORDS = {
    "a",
    "an",
    "the",
    "and",
    "or",
    "for",
    "to",
    "of",
    "with",
    "on",
    "in",
    "by",
    "from",
    "into",
    "that",
    "which",
    "i",
    "want",
    "need",
    "build",
    "create",
    "make",
    "simple",
    "basic",
}

_STACK_KEYWORDS = (
    ("web", ("react", "vue", "svelte", "next", "frontend", "website", "web app", "dashboard", "ui")),
    ("python", ("python", "django", "flask", "fastapi", "script", "data", "machine learning", "ml")),
    ("api", ("api", "backend", "server", "express", "node", "rest", "graphql", "service")),
)


def derive_title(request: str) -> str:
    """Build a short Title Case name from the request text."""
    tokens = re.findall(r"[A-Za-z0-9]+", request)
    filtered = [token for token in tokens if token.lower() not in _STOPWORDS] or tokens
    if not filtered:
        return "New Project"
    words = [token if token.isupper() else token.capitalize() for token in filtered[:5]]
    if "Project" not in words:
        words.append("Project")
    return " ".join(words)


def _detect_stack(request: str) -> str:
    lowered = request.lower()
    for stack, keywords in _STACK_KEYWORDS:
        if any(re.search(rf"\b{re.escape(keyword)}\b", lowered) for keyword in keywords):
            return stack
    return "generic"


def _entry(name: str, description: str, *, path: Optional[str] = None, children: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "name": name,
        "type": "directory" if children is not None else "file",
        "path": path or name,
        "description": description,
    }
    if children is not None:
        entry["children"] = children
    return entry


_FILE_TREES: Dict[str, List[Dict[str, Any]]] = {
    "web": [
        _entry(
            "src",
            "Application source code",
            path="src/",
            children=[
                _entry("components", "Reusable UI components", path="src/components/", children=[]),
                _entry("pages", "Route-level views", path="src/pages/", children=[]),
                _entry("main.tsx", "Application entry point", path="src/main.tsx"),
            ],
        ),
        _entry("public", "Static assets", path="public/", children=[]),
        _entry("package.json", "Dependencies and scripts"),
        _entry("README.md", "Setup and usage guide"),
    ],
    "python": [
        _entry(
            "src",
            "Package source code",
            path="src/",
            children=[_entry("__init__.py", "Package marker", path="src/__init__.py")],
        ),
        _entry("tests", "Automated tests", path="tests/", children=[]),
        _entry("pyproject.toml", "Packaging metadata and dependencies"),
        _entry("README.md", "Setup and usage guide"),
    ],
    "api": [
        _entry(
            "src",
            "Service source code",
            path="src/",
            children=[
                _entry("routes", "HTTP route handlers", path="src/routes/", children=[]),
                _entry("models", "Data models and persistence", path="src/models/", children=[]),
                _entry("server.ts", "Service entry point", path="src/server.ts"),
            ],
        ),
        _entry("tests", "Automated tests", path="tests/", children=[]),
        _entry("package.json", "Dependencies and scripts"),
        _entry(".env.example", "Environment variables template"),
    ],
    "generic": [
        _entry("src", "Source code", path="src/", children=[]),
        _entry("tests", "Automated tests", path="tests/", children=[]),
        _entry("README.md", "Setup and usage guide"),
    ],
}

_STEPS: List[Dict[str, Any]] = [
    {"id": "step-1", "description": "Set up the repository, tooling and core dependencies", "priority": "high", "estimatedTime": "30 minutes"},
    {"id": "step-2", "description": "Create the directory layout and initial scaffolding", "priority": "high", "estimatedTime": "45 minutes", "dependencies": ["step-1"]},
    {"id": "step-3", "description": "Implement the core features described in the requirements", "priority": "high", "estimatedTime": "4-6 hours", "dependencies": ["step-2"]},
    {"id": "step-4", "description": "Add automated tests for the core features", "priority": "medium", "estimatedTime": "2 hours", "dependencies": ["step-3"]},
    {"id": "step-5", "description": "Write documentation and prepare deployment", "priority": "low", "estimatedTime": "1 hour", "dependencies": ["step-4"]},
]


def build_template_plan(request: str, *, generated_at: Optional[datetime] = None) -> ProjectPlan:
    """Return a deterministic plan for ``request`` without calling any AI backend."""
    cleaned = request.strip().rstrip(".")
    stack = _detect_stack(cleaned)
    payload: Dict[str, Any] = {
        "title": derive_title(cleaned),
        "overview": (
            f"This project will {cleaned[0].lower() + cleaned[1:]}." if cleaned else ""
        )
        + " This plan was produced from a built-in template; configure an AI provider for a tailored plan.",
        "requirements": [
            f"Deliver the requested functionality: {cleaned}" if cleaned else "Describe the requested functionality",
            "Keep the codebase organised with a clear module layout",
            "Cover core behaviour with automated tests",
            "Document setup and usage in the README",
        ],
        "fileStructure": _FILE_TREES[stack],
        "nextSteps": _STEPS,
    }
    return normalize_plan(payload, generated_at=generated_at, source=PlanSource.TEMPLATE)
