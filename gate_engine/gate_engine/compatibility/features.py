"""Built-in feature catalogue.

* **prometheus** -- Prometheus metrics export.  Available on the EE Lite
  plan with a valid (active or grace-period) trial license.
* **neon** -- Neon database integration.  Available on Cloud when the
  project holds the Neon entitlement.

Both are available from the CLI and from the server.
"""

from __future__ import annotations

from gate_engine.compatibility.models import (
    Availability,
    CompatibilityDescriptor,
    EntitlementRequirements,
    ModeCompatibility,
    Requirement,
)
from gate_engine.compatibility.registry import FeatureRegistry

PROMETHEUS = CompatibilityDescriptor(
    ce=Availability.DISABLED,
    ee_lite=Availability.ENABLED,
    ee_lite_license=Requirement.REQUIRED,
    cloud=Availability.DISABLED,
    self_hosted_cloud=Availability.DISABLED,
    entitlements=EntitlementRequirements(
        neon_database_integration=Requirement.NOT_REQUIRED,
        datadog_integration=Requirement.NOT_REQUIRED,
    ),
    cli_mode=ModeCompatibility.CLI_OR_SERVER,
)

NEON = CompatibilityDescriptor(
    ce=Availability.DISABLED,
    ee_lite=Availability.DISABLED,
    ee_lite_license=Requirement.NOT_REQUIRED,
    cloud=Availability.ENABLED,
    self_hosted_cloud=Availability.DISABLED,
    entitlements=EntitlementRequirements(
        neon_database_integration=Requirement.REQUIRED,
        datadog_integration=Requirement.NOT_REQUIRED,
    ),
    cli_mode=ModeCompatibility.CLI_OR_SERVER,
)

BUILTIN_FEATURES: dict[str, CompatibilityDescriptor] = {
    "prometheus": PROMETHEUS,
    "neon": NEON,
}


def default_registry() -> FeatureRegistry:
    """Return a registry holding the built-in features."""
    return FeatureRegistry(BUILTIN_FEATURES)
