"""Canonical types for the deployment context.

Raw inputs arrive as loosely-shaped JSON documents.  Environment facts and
the entitlement feed are parsed into Pydantic payload models here; the trial
license feed lives beside its state derivation in
:mod:`gate_engine.context.license`.  :class:`DeploymentContext` normalizes
them into the immutable value types the evaluator reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from gate_engine.context.license import LicenseState, NoLicense


class Plan(str, Enum):
    """Product edition a deployment runs under."""

    CE = "ce"
    EE_LITE = "eeLite"
    CLOUD = "cloud"
    SELF_HOSTED_CLOUD = "selfHostedCloud"


class CliMode(str, Enum):
    """Invocation context of the running product."""

    CLI = "cli"
    SERVER = "server"


# Fixed edition code -> plan table.  Codes outside this table are rejected.
EDITION_PLANS: dict[str, Plan] = {
    "oss": Plan.CE,
    "pro-lite": Plan.EE_LITE,
    "cloud": Plan.CLOUD,
    "pro": Plan.SELF_HOSTED_CLOUD,
}


# ---------------------------------------------------------------------------
# Raw payloads
# ---------------------------------------------------------------------------


class EnvironmentFacts(BaseModel):
    """Raw environment facts supplied once at startup.

    ``edition_code`` stays a plain string so that an unknown code reaches the
    context model and is rejected there rather than during parsing.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    edition_code: str = Field(
        ...,
        validation_alias="editionCode",
        description="Edition code, one of 'oss', 'pro-lite', 'cloud', 'pro'.",
    )
    mode: CliMode = Field(default=CliMode.SERVER, description="Invocation mode.")

    @model_validator(mode="before")
    @classmethod
    def _accept_console_type(cls, data: object) -> object:
        # Older environments publish the edition under ``consoleType``.
        if isinstance(data, dict) and "consoleType" in data and "editionCode" not in data:
            data = {**data, "editionCode": data["consoleType"]}
            data.pop("consoleType")
        return data


class EntitlementsPayload(BaseModel):
    """Entitlement feed document.  Missing flags are treated as not granted."""

    model_config = ConfigDict(extra="ignore")

    NeonDatabaseIntegration: bool = False
    DatadogIntegration: bool = False

    def to_entitlements(self) -> Entitlements:
        return Entitlements(
            neon_database_integration=self.NeonDatabaseIntegration,
            datadog_integration=self.DatadogIntegration,
        )


# ---------------------------------------------------------------------------
# Canonical values
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Entitlements:
    """Add-on capability flags.  Replaced wholesale, never merged."""

    neon_database_integration: bool = False
    datadog_integration: bool = False

    def to_dict(self) -> dict[str, bool]:
        return {
            "NeonDatabaseIntegration": self.neon_database_integration,
            "DatadogIntegration": self.datadog_integration,
        }


@dataclass(frozen=True, slots=True)
class DeploymentSnapshot:
    """Point-in-time deployment facts read by the evaluator.

    The default value is the most conservative combination: Community
    edition, no entitlements, no license, server mode.
    """

    plan: Plan = Plan.CE
    entitlements: Entitlements = field(default_factory=Entitlements)
    license: LicenseState = field(default_factory=NoLicense)
    mode: CliMode = CliMode.SERVER

    def to_dict(self) -> dict[str, object]:
        return {
            "plan": self.plan.value,
            "entitlements": self.entitlements.to_dict(),
            "license": self.license.to_dict(),
            "mode": self.mode.value,
        }
