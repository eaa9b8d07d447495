"""Deployment context model.

Normalizes raw environment, entitlement, and trial license facts into an
immutable :class:`DeploymentSnapshot` held by a :class:`DeploymentContext`.
"""

from gate_engine.context.deployment import DeploymentContext, InvalidEnvironmentError
from gate_engine.context.license import (
    ActiveLicense,
    ExpiredLicense,
    GracePeriodLicense,
    LicenseState,
    NoLicense,
    RawLicenseState,
    TrialLicensePayload,
    derive_license_state,
    is_license_valid,
)
from gate_engine.context.models import (
    EDITION_PLANS,
    CliMode,
    DeploymentSnapshot,
    Entitlements,
    EntitlementsPayload,
    EnvironmentFacts,
    Plan,
)

__all__ = [
    "EDITION_PLANS",
    "ActiveLicense",
    "CliMode",
    "DeploymentContext",
    "DeploymentSnapshot",
    "Entitlements",
    "EntitlementsPayload",
    "EnvironmentFacts",
    "ExpiredLicense",
    "GracePeriodLicense",
    "InvalidEnvironmentError",
    "LicenseState",
    "NoLicense",
    "Plan",
    "RawLicenseState",
    "TrialLicensePayload",
    "derive_license_state",
    "is_license_valid",
]
