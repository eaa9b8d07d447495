"""Feature compatibility evaluation.

Quick start::

    from gate_engine.compatibility import check_feature, default_registry
    from gate_engine.context import DeploymentContext, EnvironmentFacts

    context = DeploymentContext()
    context.set_environment_facts(EnvironmentFacts(edition_code="cloud"))
    verdict = check_feature(context, default_registry(), "neon")
    print(verdict.status, verdict.matched, verdict.unmatched)
"""

from gate_engine.compatibility.evaluator import evaluate
from gate_engine.compatibility.features import BUILTIN_FEATURES, default_registry
from gate_engine.compatibility.models import (
    Availability,
    CompatibilityDescriptor,
    DescriptorDocument,
    EntitlementRequirements,
    FeatureStatus,
    MatchingReason,
    ModeCompatibility,
    Requirement,
    Verdict,
)
from gate_engine.compatibility.registry import FeatureRegistry, UnknownFeatureError, check_feature

__all__ = [
    "BUILTIN_FEATURES",
    "Availability",
    "CompatibilityDescriptor",
    "DescriptorDocument",
    "EntitlementRequirements",
    "FeatureRegistry",
    "FeatureStatus",
    "MatchingReason",
    "ModeCompatibility",
    "Requirement",
    "UnknownFeatureError",
    "Verdict",
    "check_feature",
    "default_registry",
    "evaluate",
]
