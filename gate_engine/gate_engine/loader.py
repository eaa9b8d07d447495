"""Load raw feeds and descriptor catalogues from disk.

The feature gate never fetches anything itself.  Local tooling (the CLI,
tests, development setups) keeps the raw documents in JSON or YAML files;
this module parses them into the payload models and assembles a
:class:`DeploymentContext` from a :class:`GateSettings`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from gate_engine.compatibility.features import default_registry
from gate_engine.compatibility.registry import FeatureRegistry
from gate_engine.config import GateSettings
from gate_engine.context.deployment import DeploymentContext
from gate_engine.context.license import Clock, TrialLicensePayload
from gate_engine.context.models import EntitlementsPayload, EnvironmentFacts

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def load_document(path: Path) -> dict[str, Any]:
    """Read a JSON or YAML mapping from *path*.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file cannot be parsed or does not hold a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    raw = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            data = yaml.safe_load(raw)
        else:
            data = json.loads(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ValueError(f"Could not parse {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top level of {path}, got {type(data).__name__}")
    return data


def load_license(path: Path) -> TrialLicensePayload:
    """Parse a trial license document."""
    return TrialLicensePayload.model_validate(load_document(path))


def load_entitlements(path: Path) -> EntitlementsPayload:
    """Parse an entitlement feed document."""
    return EntitlementsPayload.model_validate(load_document(path))


def load_registry(path: Path) -> FeatureRegistry:
    """Build a :class:`FeatureRegistry` from a descriptor catalogue file."""
    registry = FeatureRegistry.from_mapping(load_document(path))
    logger.info("Loaded %d feature descriptor(s) from %s", len(registry), path)
    return registry


def registry_from_settings(settings: GateSettings) -> FeatureRegistry:
    """Return the catalogue named by settings, or the built-in features."""
    if settings.registry_path is None:
        return default_registry()
    return load_registry(settings.registry_path)


def context_from_settings(settings: GateSettings, clock: Clock | None = None) -> DeploymentContext:
    """Assemble a :class:`DeploymentContext` from settings and feed files.

    Raises
    ------
    InvalidEnvironmentError
        If ``settings.edition_code`` is unknown.
    """
    context = DeploymentContext(clock=clock)
    context.set_environment_facts(EnvironmentFacts(edition_code=settings.edition_code, mode=settings.mode))

    if settings.entitlements_path is not None:
        context.set_entitlements(load_entitlements(settings.entitlements_path))
    if settings.license_path is not None:
        context.set_license(load_license(settings.license_path))

    return context
