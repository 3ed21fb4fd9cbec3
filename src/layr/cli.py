"""CLI commands for generating, inspecting and handing off Layr project plans."""

from __future__ import annotations

import json
import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from .config import (
    DEFAULT_CONFIG_NAME,
    PROVIDER_ENV_KEYS,
    LayrSettings,
    ProviderConfig,
    ProviderType,
    is_usable_key,
    load_settings,
    mask_key,
    resolve_provider,
    write_config,
)
from .errors import AIServiceError, ApiKeyMissingError, ConfigError, PlanProvenanceError
from .planning import (
    PlanGenerator,
    ProjectPlan,
    build_chat_handoff,
    build_template_plan,
    extract_json,
    normalize_plan,
    parse_with_repair,
    plan_to_markdown,
)
from .planning.logs import load_generation_log
from .providers import AIProvider, create_provider, supported_models

APP_HELP = "Layr: turn a one-line feature request into a project plan."
MIN_REQUEST_LENGTH = 10

LOGGER = logging.getLogger(__name__)

app = typer.Typer(help=APP_HELP)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_settings(config: str) -> LayrSettings:
    """Load settings, treating only an explicitly named config as required."""
    config_path = Path(config)
    try:
        return load_settings(config_path, required=config != DEFAULT_CONFIG_NAME)
    except ConfigError as error:
        typer.echo(error.message)
        raise typer.Exit(code=1) from error


def _build_provider(settings: LayrSettings) -> AIProvider:
    provider_config = ProviderConfig.from_settings(settings)
    provider = create_provider(provider_config)
    LOGGER.debug("Selected %s provider for model %s", provider.name, provider.model)
    return provider


def validate_request(request: str) -> str:
    """Apply the input rules the editor's input box enforced."""
    cleaned = request.strip()
    if not cleaned:
        raise typer.BadParameter("Please enter a description of what you want to build")
    if len(cleaned) < MIN_REQUEST_LENGTH:
        raise typer.BadParameter(
            f"Please provide a more detailed description (at least {MIN_REQUEST_LENGTH} characters)"
        )
    return cleaned


def _slugify(value: str, fallback: str = "plan") -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug[:60].rstrip("-") or fallback


def _emit(text: str, output: Optional[Path]) -> None:
    if output is None:
        typer.echo(text, nl=False)
        return
    if output.is_dir():
        raise typer.BadParameter(f"Output path is a directory: {output}")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    typer.echo(f"Wrote {output}", err=True)


@app.command()
def init(
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Where to write the configuration file.",
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing configuration."),
) -> None:
    """Write a default configuration file."""
    config_path = Path(config)
    if config_path.exists() and not force:
        typer.echo(f"Configuration already exists at {config_path}; use --force to overwrite.")
        raise typer.Exit(code=1)
    write_config(config_path)
    typer.echo(f"Created configuration at {config_path}.")
    typer.echo("Set ai.api_key (or GEMINI_API_KEY / OPENAI_API_KEY) to enable AI planning.")


@app.command()
def plan(
    request: str = typer.Argument(..., help="What do you want to build?"),
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the Layr configuration file.",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the Markdown plan to this file, or '.' for plans/<title>.md.",
    ),
    offline: bool = typer.Option(False, "--offline/--no-offline", help="Skip the AI provider and use a template."),
    fallback: bool = typer.Option(
        True,
        "--fallback/--no-fallback",
        help="Use a template plan when no API key is configured.",
    ),
) -> None:
    """Generate a project plan and render it as Markdown."""
    cleaned = validate_request(request)
    settings = _load_settings(config)

    project_plan: ProjectPlan
    if offline:
        project_plan = build_template_plan(cleaned)
    else:
        generator = PlanGenerator(_build_provider(settings), logs_dir=settings.logs_dir)
        try:
            project_plan = generator.generate_plan(cleaned)
        except ApiKeyMissingError as error:
            typer.echo(error.message, err=True)
            if not fallback:
                raise typer.Exit(code=1) from error
            typer.echo("Falling back to a template-based plan.", err=True)
            project_plan = build_template_plan(cleaned)
        except AIServiceError as error:
            LOGGER.error("Plan generation error: %s", error.message, exc_info=error.cause)
            typer.echo(f"Failed to generate plan: {error.message}", err=True)
            raise typer.Exit(code=1) from error

    if output is not None and output == Path("."):
        output = Path("plans") / f"{_slugify(project_plan.title)}.md"
    _emit(plan_to_markdown(project_plan), output)


@app.command()
def execute(
    plan_path: Path = typer.Argument(..., help="Markdown plan produced by 'layr plan'."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the chat hand-off message to this file instead of stdout.",
    ),
) -> None:
    """Check a plan's provenance and emit it as a chat hand-off message."""
    try:
        markdown = plan_path.read_text(encoding="utf-8")
    except OSError as error:
        typer.echo(f"Unable to read plan {plan_path}: {error}", err=True)
        raise typer.Exit(code=1) from error

    try:
        message = build_chat_handoff(markdown)
    except PlanProvenanceError as error:
        typer.echo(error.message, err=True)
        raise typer.Exit(code=1) from error

    _emit(message, output)


@app.command()
def replay(
    log_path: Path = typer.Argument(..., help="Generation log written under <logs>/generations/."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the Markdown plan to this file instead of stdout.",
    ),
) -> None:
    """Re-parse a logged AI response and render it without calling the provider."""
    try:
        entry = load_generation_log(log_path)
    except (OSError, ValueError) as error:
        typer.echo(f"Unable to read generation log {log_path}: {error}", err=True)
        raise typer.Exit(code=1) from error
    if not isinstance(entry, dict):
        typer.echo(f"Generation log {log_path} is not a JSON object.", err=True)
        raise typer.Exit(code=1)

    raw_response = entry.get("raw_response")
    if not isinstance(raw_response, str) or not raw_response.strip():
        typer.echo("Log does not include a raw AI response; nothing to replay.", err=True)
        raise typer.Exit(code=1)

    try:
        parsed = parse_with_repair(extract_json(raw_response))
    except AIServiceError as error:
        typer.echo(f"Failed to replay plan: {error.message}", err=True)
        raise typer.Exit(code=1) from error

    generated_at = None
    timestamp = entry.get("timestamp")
    if isinstance(timestamp, str):
        try:
            generated_at = datetime.fromisoformat(timestamp)
        except ValueError:
            LOGGER.debug("Ignoring malformed log timestamp %r", timestamp)

    _emit(plan_to_markdown(normalize_plan(parsed, generated_at=generated_at)), output)


@app.command()
def debug(
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the Layr configuration file.",
    ),
    check_key: bool = typer.Option(
        True,
        "--check-key/--no-check-key",
        help="Send a minimal request to confirm the API key works.",
    ),
) -> None:
    """Report the resolved model, provider and API key status."""
    settings = _load_settings(config)
    provider = _build_provider(settings)
    selected = resolve_provider(settings.model)

    typer.echo("Layr Debug Information")
    typer.echo("")
    typer.echo(f"Selected Model: {settings.model}")
    typer.echo(f"Determined Provider: {selected.value}")
    typer.echo(f"API Key: {mask_key(settings.api_key)}")
    typer.echo(f"OpenAI Org: {settings.organization or 'not set'}")
    typer.echo("")
    typer.echo("Provider Status:")
    for provider_type in ProviderType:
        if provider_type is selected and is_usable_key(settings.api_key):
            status = f"{mask_key(settings.api_key)} (layr.yaml)"
        else:
            env_name = PROVIDER_ENV_KEYS[provider_type]
            status = f"{mask_key(os.environ.get(env_name))} ({env_name})"
        typer.echo(f"- {provider_type.value}: {status}")

    available = provider.is_available()
    typer.echo("")
    typer.echo(f"AI Generator: {'available' if available else 'not available'}")
    if available and check_key:
        result = "API key works!" if provider.validate_api_key() else "API key rejected (see logs)"
    else:
        result = "not tested"
    typer.echo(f"Test Result: {result}")

    LOGGER.debug(
        "Debug summary: %s",
        json.dumps(
            {
                "selectedModel": settings.model,
                "determinedProvider": selected.value,
                "apiKey": mask_key(provider.config.api_key),
                "available": available,
            }
        ),
    )


@app.command()
def models() -> None:
    """List the models each provider advertises."""
    for provider_type, names in supported_models().items():
        typer.echo(f"{provider_type.value}:")
        for name in names:
            typer.echo(f"- {name}")


if __name__ == "__main__":
    app()
