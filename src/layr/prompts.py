"""Prompt template shared by every AI provider."""

from __future__ import annotations

import json
from typing import Any, Dict

JSON_RESPONSE_INSTRUCTION = (
    "CRITICAL: Return ONLY valid JSON. Do not wrap in markdown code blocks. "
    "Do not include any explanatory text before or after the JSON. "
    "Start your response with { and end with }."
)

PLAN_BRIEF = (
    "You are an expert software architect and project manager. "
    "Generate a thorough, professional project plan that includes:\n"
    "- A detailed overview explaining the project's purpose, target audience, and key features\n"
    "- Comprehensive requirements covering functional, technical, and non-functional aspects\n"
    "- A well-structured file organization with clear descriptions\n"
    "- Detailed next steps with realistic time estimates and clear dependencies"
)


def _directory(name: str, path: str, description: str) -> Dict[str, Any]:
    return {"name": name, "type": "directory", "path": path, "description": description}


def _file(name: str, description: str) -> Dict[str, Any]:
    return {"name": name, "type": "file", "path": name, "description": description}


def _step(index: int, description: str, priority: str, estimate: str, *depends: int) -> Dict[str, Any]:
    return {
        "id": f"step{index}",
        "description": description,
        "completed": False,
        "priority": priority,
        "estimatedTime": estimate,
        "dependencies": [f"step{dependency}" for dependency in depends],
    }


PLAN_EXAMPLE: Dict[str, Any] = {
    "title": "Descriptive Project Title",
    "overview": (
        "Provide a comprehensive 3-4 sentence description explaining what this project does, "
        "who it's for, what problems it solves, and what makes it unique or valuable. "
        "Include key features and technologies that will be used."
    ),
    "requirements": [
        "Detailed functional requirement with specific features",
        "Technical requirement specifying frameworks, libraries, or tools",
        "Performance requirement with measurable criteria",
        "Security requirement addressing data protection",
        "User experience requirement for interface design",
        "Testing requirement for quality assurance",
        "Deployment requirement for production readiness",
        "Documentation requirement for maintainability",
    ],
    "fileStructure": [
        _directory("src", "src/", "Main source code directory containing all application logic"),
        _directory("components", "src/components/", "Reusable UI components and their associated styles"),
        _directory("pages", "src/pages/", "Main application pages and route components"),
        _directory("utils", "src/utils/", "Utility functions and helper modules"),
        _directory("styles", "src/styles/", "Global styles, themes, and CSS modules"),
        _file("package.json", "Project dependencies, scripts, and metadata configuration"),
        _file("README.md", "Project documentation with setup instructions and usage guide"),
        _file(".env.example", "Environment variables template for configuration"),
    ],
    "nextSteps": [
        _step(
            1,
            "Initialize project structure and install core dependencies including framework, "
            "build tools, and essential libraries",
            "high",
            "45 minutes",
        ),
        _step(
            2,
            "Set up development environment with linting, formatting, and testing configuration",
            "high",
            "30 minutes",
            1,
        ),
        _step(
            3,
            "Create basic project structure with main directories and initial component scaffolding",
            "medium",
            "60 minutes",
            1,
            2,
        ),
        _step(4, "Implement core functionality and main features as outlined in requirements", "high", "4-6 hours", 3),
        _step(5, "Add comprehensive testing suite including unit tests and integration tests", "medium", "2-3 hours", 4),
        _step(6, "Optimize performance, add error handling, and implement security best practices", "medium", "2 hours", 4),
        _step(7, "Create comprehensive documentation and deployment configuration", "low", "90 minutes", 5, 6),
    ],
}


def render_plan_prompt(request: str) -> str:
    """Return the single instruction prompt sent to every provider."""
    example = json.dumps(PLAN_EXAMPLE, indent=2)
    return (
        f'Create a comprehensive and detailed project plan in JSON format for: "{request.strip()}"\n\n'
        f"{PLAN_BRIEF}\n\n"
        f"{JSON_RESPONSE_INSTRUCTION}\n\n"
        f"{example}"
    )


__all__ = [
    "JSON_RESPONSE_INSTRUCTION",
    "PLAN_BRIEF",
    "PLAN_EXAMPLE",
    "render_plan_prompt",
]
