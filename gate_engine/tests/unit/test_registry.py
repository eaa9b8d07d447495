"""Tests for the feature registry and built-in catalogue."""

from __future__ import annotations

import dataclasses

import pytest

from gate_engine.compatibility import (
    BUILTIN_FEATURES,
    Availability,
    CompatibilityDescriptor,
    EntitlementRequirements,
    FeatureRegistry,
    FeatureStatus,
    MatchingReason,
    ModeCompatibility,
    Requirement,
    UnknownFeatureError,
    check_feature,
    default_registry,
)
from gate_engine.context import DeploymentContext, Entitlements, EnvironmentFacts, TrialLicensePayload

NOW = 1_700_000_000_000
ONE_DAY = 24 * 60 * 60 * 1000

_PROMETHEUS_DOCUMENT = {
    "ce": "disabled",
    "eeLite": "enabled",
    "eeLiteLicense": "required",
    "cloud": "disabled",
    "selfHostedCloud": "disabled",
    "entitlements": {"NeonDatabaseIntegration": "notRequired", "DatadogIntegration": "notRequired"},
    "cliMode": "cliOrServer",
}


class TestDescriptorConstruction:
    def test_missing_axis_fails(self) -> None:
        with pytest.raises(TypeError):
            CompatibilityDescriptor(  # type: ignore[call-arg]
                ce=Availability.ENABLED,
                ee_lite=Availability.DISABLED,
                cloud=Availability.DISABLED,
                self_hosted_cloud=Availability.DISABLED,
                entitlements=EntitlementRequirements(
                    neon_database_integration=Requirement.NOT_REQUIRED,
                    datadog_integration=Requirement.NOT_REQUIRED,
                ),
                cli_mode=ModeCompatibility.CLI_OR_SERVER,
            )

    def test_missing_entitlement_axis_fails(self) -> None:
        with pytest.raises(TypeError):
            EntitlementRequirements(neon_database_integration=Requirement.REQUIRED)  # type: ignore[call-arg]

    def test_descriptor_is_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            BUILTIN_FEATURES["neon"].cloud = Availability.DISABLED  # type: ignore[misc]

    def test_to_dict_round_trips_authoring_format(self) -> None:
        assert BUILTIN_FEATURES["prometheus"].to_dict() == _PROMETHEUS_DOCUMENT


class TestFeatureRegistry:
    def test_lookup(self) -> None:
        registry = default_registry()
        assert registry.lookup("neon") is BUILTIN_FEATURES["neon"]

    def test_unknown_feature(self) -> None:
        registry = default_registry()
        with pytest.raises(UnknownFeatureError) as exc_info:
            registry.lookup("time-travel")
        assert exc_info.value.code == "unknown-feature"
        assert exc_info.value.feature_id == "time-travel"
        assert "time-travel" in str(exc_info.value)

    def test_unknown_feature_is_a_key_error(self) -> None:
        with pytest.raises(KeyError):
            default_registry().lookup("missing")

    def test_feature_ids_sorted(self) -> None:
        assert default_registry().feature_ids() == ["neon", "prometheus"]

    def test_len_and_contains(self) -> None:
        registry = default_registry()
        assert len(registry) == 2
        assert "prometheus" in registry
        assert "grafana" not in registry

    def test_registry_copies_input(self) -> None:
        source = dict(BUILTIN_FEATURES)
        registry = FeatureRegistry(source)
        source.pop("neon")
        assert "neon" in registry

    def test_rejects_non_descriptor(self) -> None:
        with pytest.raises(TypeError, match="bogus"):
            FeatureRegistry({"bogus": {"ce": "enabled"}})  # type: ignore[dict-item]

    def test_from_mapping(self) -> None:
        registry = FeatureRegistry.from_mapping({"prometheus": _PROMETHEUS_DOCUMENT})
        assert registry.lookup("prometheus") == BUILTIN_FEATURES["prometheus"]

    def test_from_mapping_missing_axis(self) -> None:
        body = {k: v for k, v in _PROMETHEUS_DOCUMENT.items() if k != "cliMode"}
        with pytest.raises(ValueError, match="prometheus"):
            FeatureRegistry.from_mapping({"prometheus": body})

    def test_from_mapping_unknown_key(self) -> None:
        body = {**_PROMETHEUS_DOCUMENT, "enterprise": "enabled"}
        with pytest.raises(ValueError, match="enterprise"):
            FeatureRegistry.from_mapping({"prometheus": body})

    def test_from_mapping_bad_value(self) -> None:
        body = {**_PROMETHEUS_DOCUMENT, "ce": "maybe"}
        with pytest.raises(ValueError):
            FeatureRegistry.from_mapping({"prometheus": body})


class TestCheckFeature:
    @pytest.fixture()
    def context(self) -> DeploymentContext:
        return DeploymentContext(clock=lambda: NOW)

    def test_prometheus_on_ee_lite_with_license(self, context: DeploymentContext) -> None:
        context.set_environment_facts(EnvironmentFacts(edition_code="pro-lite", mode="server"))
        context.set_license(TrialLicensePayload(state="active", expiry_at=NOW + ONE_DAY))
        verdict = check_feature(context, default_registry(), "prometheus")
        assert verdict.status == FeatureStatus.ENABLED

    def test_prometheus_on_ee_lite_after_grace(self, context: DeploymentContext) -> None:
        context.set_environment_facts(EnvironmentFacts(edition_code="pro-lite", mode="server"))
        context.set_license(TrialLicensePayload(state="expired", expiry_at=NOW - 2 * ONE_DAY, grace_at=NOW - ONE_DAY))
        verdict = check_feature(context, default_registry(), "prometheus")
        assert verdict.status == FeatureStatus.DISABLED
        assert MatchingReason.EE_LITE_LICENSE in verdict.unmatched

    def test_neon_on_cloud(self, context: DeploymentContext) -> None:
        context.set_environment_facts(EnvironmentFacts(edition_code="cloud", mode="server"))
        assert check_feature(context, default_registry(), "neon").status == FeatureStatus.DISABLED

        context.set_entitlements(Entitlements(neon_database_integration=True))
        assert check_feature(context, default_registry(), "neon").status == FeatureStatus.ENABLED

    def test_defaults_disable_everything(self, context: DeploymentContext) -> None:
        registry = default_registry()
        for feature_id in registry.feature_ids():
            assert check_feature(context, registry, feature_id).status == FeatureStatus.DISABLED

    def test_unknown_feature_raises_before_evaluation(self, context: DeploymentContext) -> None:
        with pytest.raises(UnknownFeatureError):
            check_feature(context, default_registry(), "nope")
