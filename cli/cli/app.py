"""featuregate CLI application -- Typer-based developer interface.

Provides commands to list registered features, inspect the deployment
snapshot derived from a set of inputs, and check whether a feature is
enabled.  Human-readable output goes to *stderr* via Rich; machine-readable
output goes to *stdout* in ``--json`` mode so that scripts can compose
cleanly.

Exit codes: ``0`` success / feature enabled, ``1`` feature disabled,
``3`` invalid input or unknown feature.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from cli.display import display_feature_list, display_snapshot, display_verdict
from gate_engine.compatibility.registry import FeatureRegistry, UnknownFeatureError, check_feature
from gate_engine.config import GateSettings, load_settings
from gate_engine.context.deployment import DeploymentContext
from gate_engine.context.models import CliMode
from gate_engine.loader import context_from_settings, registry_from_settings
from gate_engine.logging_config import configure_logging

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App & global state
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="featuregate",
    help="featuregate - edition-aware feature compatibility checks",
    no_args_is_help=True,
)
console = Console(stderr=True)

# Mutable global options populated by the Typer callback.
_json_output: bool = False


# ---------------------------------------------------------------------------
# Callback -- global options
# ---------------------------------------------------------------------------


@app.callback()
def _global_options(
    json_mode: bool = typer.Option(
        False,
        "--json/--no-json",
        help="Emit structured JSON to stdout instead of human-readable output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging.",
        envvar="FEATUREGATE_DEBUG",
    ),
) -> None:
    """Global options applied to every command."""
    global _json_output  # noqa: PLW0603
    _json_output = json_mode
    try:
        settings = load_settings(debug=debug)
    except ValidationError as exc:
        console.print(f"[red]Invalid FEATUREGATE_* settings: {escape(str(exc))}[/red]")
        raise typer.Exit(code=3) from exc
    configure_logging(settings)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_EDITION_OPTION = typer.Option(
    None,
    "--edition",
    "-e",
    help="Edition code (oss | pro-lite | cloud | pro).  Defaults to FEATUREGATE_EDITION_CODE.",
)
_MODE_OPTION = typer.Option(
    None,
    "--mode",
    "-m",
    help="Invocation mode.  Defaults to FEATUREGATE_MODE.",
)
_LICENSE_OPTION = typer.Option(
    None,
    "--license",
    help="Path to a trial license JSON/YAML document.",
)
_ENTITLEMENTS_OPTION = typer.Option(
    None,
    "--entitlements",
    help="Path to an entitlement feed JSON/YAML document.",
)
_REGISTRY_OPTION = typer.Option(
    None,
    "--registry",
    help="Path to a descriptor catalogue replacing the built-in features.",
)


def _settings(
    edition: str | None = None,
    mode: CliMode | None = None,
    license_path: Path | None = None,
    entitlements_path: Path | None = None,
    registry_path: Path | None = None,
) -> GateSettings:
    """Load settings from the environment, letting explicit options win."""
    overrides: dict[str, Any] = {}
    if edition is not None:
        overrides["edition_code"] = edition
    if mode is not None:
        overrides["mode"] = mode
    if license_path is not None:
        overrides["license_path"] = license_path
    if entitlements_path is not None:
        overrides["entitlements_path"] = entitlements_path
    if registry_path is not None:
        overrides["registry_path"] = registry_path
    return load_settings(**overrides)


def _build_context(settings: GateSettings) -> DeploymentContext:
    try:
        return context_from_settings(settings)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Invalid deployment input: {escape(str(exc))}[/red]")
        raise typer.Exit(code=3) from exc


def _build_registry(settings: GateSettings) -> FeatureRegistry:
    try:
        return registry_from_settings(settings)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Failed to load feature registry: {escape(str(exc))}[/red]")
        raise typer.Exit(code=3) from exc


def _write_json(data: Any) -> None:
    sys.stdout.write(json.dumps(data, indent=2, sort_keys=True) + "\n")


# ---------------------------------------------------------------------------
# features
# ---------------------------------------------------------------------------


@app.command()
def features(
    registry_path: Path | None = _REGISTRY_OPTION,
) -> None:
    """List registered features and their compatibility descriptors."""
    registry = _build_registry(_settings(registry_path=registry_path))

    if _json_output:
        _write_json({feature_id: descriptor.to_dict() for feature_id, descriptor in registry.items()})
    else:
        display_feature_list(console, registry)


# ---------------------------------------------------------------------------
# snapshot
# ---------------------------------------------------------------------------


@app.command()
def snapshot(
    edition: str | None = _EDITION_OPTION,
    mode: CliMode | None = _MODE_OPTION,
    license_path: Path | None = _LICENSE_OPTION,
    entitlements_path: Path | None = _ENTITLEMENTS_OPTION,
) -> None:
    """Show the deployment snapshot derived from the given inputs."""
    settings = _settings(edition, mode, license_path, entitlements_path)
    current = _build_context(settings).snapshot()

    if _json_output:
        _write_json(current.to_dict())
    else:
        display_snapshot(console, current)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@app.command()
def check(
    feature: str = typer.Argument(..., help="Feature identifier, e.g. 'prometheus'."),
    edition: str | None = _EDITION_OPTION,
    mode: CliMode | None = _MODE_OPTION,
    license_path: Path | None = _LICENSE_OPTION,
    entitlements_path: Path | None = _ENTITLEMENTS_OPTION,
    registry_path: Path | None = _REGISTRY_OPTION,
) -> None:
    """Check whether FEATURE is enabled for the given deployment.

    Examples::

        featuregate check prometheus --edition pro-lite --license license.json
        featuregate check neon --edition cloud --entitlements entitlements.json
        featuregate --json check neon --edition cloud
    """
    settings = _settings(edition, mode, license_path, entitlements_path, registry_path)
    registry = _build_registry(settings)
    context = _build_context(settings)

    try:
        verdict = check_feature(context, registry, feature)
    except UnknownFeatureError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        known = ", ".join(registry.feature_ids()) or "(none)"
        console.print(f"[dim]Registered features: {known}[/dim]")
        raise typer.Exit(code=3) from exc

    logger.debug("check %s -> %s", feature, verdict.status.value, extra={"feature": feature})

    if _json_output:
        _write_json({"feature": feature, **verdict.to_dict()})
    else:
        display_verdict(console, feature, verdict)

    if not verdict.is_enabled:
        raise typer.Exit(code=1)
