"""Compatibility descriptors and verdicts.

A :class:`CompatibilityDescriptor` is a fully-populated record of axes.  The
plan axes (``ce``, ``ee_lite``, ``cloud``, ``self_hosted_cloud``) are OR'd
together; ``entitlements`` narrows the cloud axes, ``ee_lite_license``
narrows the eeLite axis, and ``cli_mode`` gates everything.

None of the descriptor fields have defaults.  Adding an axis therefore
breaks every existing descriptor at construction time until it is
revisited, which is the point.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gate_engine.context.models import DeploymentSnapshot


class Availability(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class Requirement(str, Enum):
    REQUIRED = "required"
    NOT_REQUIRED = "notRequired"


class ModeCompatibility(str, Enum):
    CLI_ONLY = "cliOnly"
    SERVER_ONLY = "serverOnly"
    CLI_OR_SERVER = "cliOrServer"


class FeatureStatus(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class MatchingReason(str, Enum):
    """Tag identifying a descriptor axis in a verdict's reason trail."""

    CE = "ce"
    EE_LITE = "eeLite"
    EE_LITE_LICENSE = "eeLiteLicense"
    CLOUD = "cloud"
    SELF_HOSTED_CLOUD = "selfHostedCloud"
    CLI_MODE = "cliMode"
    NEON_DATABASE_INTEGRATION = "entitlements.NeonDatabaseIntegration"
    DATADOG_INTEGRATION = "entitlements.DatadogIntegration"


@dataclass(frozen=True, slots=True)
class EntitlementRequirements:
    neon_database_integration: Requirement
    datadog_integration: Requirement


@dataclass(frozen=True, slots=True)
class CompatibilityDescriptor:
    """Per-feature compatibility rules.  Every axis must be given."""

    ce: Availability
    ee_lite: Availability
    ee_lite_license: Requirement
    cloud: Availability
    self_hosted_cloud: Availability
    entitlements: EntitlementRequirements
    cli_mode: ModeCompatibility

    def to_dict(self) -> dict[str, Any]:
        """Render in the descriptor authoring format."""
        return {
            "ce": self.ce.value,
            "eeLite": self.ee_lite.value,
            "eeLiteLicense": self.ee_lite_license.value,
            "cloud": self.cloud.value,
            "selfHostedCloud": self.self_hosted_cloud.value,
            "entitlements": {
                "NeonDatabaseIntegration": self.entitlements.neon_database_integration.value,
                "DatadogIntegration": self.entitlements.datadog_integration.value,
            },
            "cliMode": self.cli_mode.value,
        }


@dataclass(frozen=True, slots=True)
class Verdict:
    """Outcome of evaluating a descriptor against a snapshot."""

    status: FeatureStatus
    matched: frozenset[MatchingReason]
    unmatched: frozenset[MatchingReason]
    snapshot: DeploymentSnapshot

    @property
    def is_enabled(self) -> bool:
        return self.status is FeatureStatus.ENABLED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "reasons": {
                "matched": sorted(r.value for r in self.matched),
                "unmatched": sorted(r.value for r in self.unmatched),
            },
            "current": self.snapshot.to_dict(),
        }


# ---------------------------------------------------------------------------
# Authoring format
# ---------------------------------------------------------------------------


class _EntitlementRequirementsDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    NeonDatabaseIntegration: Requirement
    DatadogIntegration: Requirement


class DescriptorDocument(BaseModel):
    """Strict parser for descriptors authored in JSON or YAML.

    Unknown keys are rejected and no key has a default.
    """

    model_config = ConfigDict(extra="forbid")

    ce: Availability
    ee_lite: Availability = Field(..., alias="eeLite")
    ee_lite_license: Requirement = Field(..., alias="eeLiteLicense")
    cloud: Availability
    self_hosted_cloud: Availability = Field(..., alias="selfHostedCloud")
    entitlements: _EntitlementRequirementsDocument
    cli_mode: ModeCompatibility = Field(..., alias="cliMode")

    def to_descriptor(self) -> CompatibilityDescriptor:
        return CompatibilityDescriptor(
            ce=self.ce,
            ee_lite=self.ee_lite,
            ee_lite_license=self.ee_lite_license,
            cloud=self.cloud,
            self_hosted_cloud=self.self_hosted_cloud,
            entitlements=EntitlementRequirements(
                neon_database_integration=self.entitlements.NeonDatabaseIntegration,
                datadog_integration=self.entitlements.DatadogIntegration,
            ),
            cli_mode=self.cli_mode,
        )
