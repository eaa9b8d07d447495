"""Compatibility evaluator.

:func:`evaluate` is the only place feature policy lives.  It is a pure
function of its two arguments: no shared state is read or written, so it is
safe to call from any number of threads, and identical inputs always yield
equal verdicts.

Evaluation order
----------------
1. Plan axes: each ``enabled`` plan axis matches when it equals the
   snapshot's plan.
2. License gate: a required eeLite license matches when the license is
   active or in its grace period; otherwise the eeLite axis is vetoed.
3. Entitlement gates: each required entitlement matches when granted;
   otherwise both cloud axes are vetoed.
4. Mode gate: ``cliOnly`` / ``serverOnly`` match the invocation mode;
   ``cliOrServer`` always matches.
5. Decision, first rule wins:

   a. mode gate unmatched -> disabled;
   b. any veto from 2-3 -> disabled;
   c. the mode gate is the only match -> disabled;
   d. license gate matched but eeLite plan axis did not -> disabled;
   e. enabled if anything matched, disabled otherwise.
"""

from __future__ import annotations

from gate_engine.compatibility.models import (
    Availability,
    CompatibilityDescriptor,
    FeatureStatus,
    MatchingReason,
    ModeCompatibility,
    Requirement,
    Verdict,
)
from gate_engine.context.license import is_license_valid
from gate_engine.context.models import CliMode, DeploymentSnapshot, Plan


def evaluate(snapshot: DeploymentSnapshot, descriptor: CompatibilityDescriptor) -> Verdict:
    """Evaluate *descriptor* against *snapshot*.

    Parameters
    ----------
    snapshot:
        Deployment facts to evaluate against.  Echoed unmodified in the
        verdict.
    descriptor:
        The feature's compatibility rules.

    Returns
    -------
    Verdict
        The enabled/disabled status with the matched and unmatched axes.
    """
    matched: set[MatchingReason] = set()
    unmatched: set[MatchingReason] = set()

    def record(reason: MatchingReason, ok: bool) -> bool:
        (matched if ok else unmatched).add(reason)
        return ok

    # 1. Plan axes.
    plan_axes: tuple[tuple[Availability, Plan, MatchingReason], ...] = (
        (descriptor.ce, Plan.CE, MatchingReason.CE),
        (descriptor.ee_lite, Plan.EE_LITE, MatchingReason.EE_LITE),
        (descriptor.cloud, Plan.CLOUD, MatchingReason.CLOUD),
        (descriptor.self_hosted_cloud, Plan.SELF_HOSTED_CLOUD, MatchingReason.SELF_HOSTED_CLOUD),
    )
    for availability, plan, reason in plan_axes:
        if availability is Availability.ENABLED:
            record(reason, snapshot.plan is plan)

    # 2. License gate.
    veto_ee_lite = False
    if descriptor.ee_lite_license is Requirement.REQUIRED:
        if not record(MatchingReason.EE_LITE_LICENSE, is_license_valid(snapshot.license)):
            veto_ee_lite = True

    # 3. Entitlement gates.
    veto_cloud = False
    entitlement_gates: tuple[tuple[Requirement, bool, MatchingReason], ...] = (
        (
            descriptor.entitlements.neon_database_integration,
            snapshot.entitlements.neon_database_integration,
            MatchingReason.NEON_DATABASE_INTEGRATION,
        ),
        (
            descriptor.entitlements.datadog_integration,
            snapshot.entitlements.datadog_integration,
            MatchingReason.DATADOG_INTEGRATION,
        ),
    )
    for requirement, granted, reason in entitlement_gates:
        if requirement is Requirement.REQUIRED and not record(reason, granted):
            veto_cloud = True

    # 4. Mode gate.
    mode_ok = record(MatchingReason.CLI_MODE, _mode_matches(descriptor.cli_mode, snapshot.mode))

    # 5. Decision.
    if not mode_ok:
        status = FeatureStatus.DISABLED
    elif veto_ee_lite or veto_cloud:
        status = FeatureStatus.DISABLED
    elif matched == {MatchingReason.CLI_MODE}:
        status = FeatureStatus.DISABLED
    elif MatchingReason.EE_LITE_LICENSE in matched and MatchingReason.EE_LITE in unmatched:
        status = FeatureStatus.DISABLED
    elif matched:
        status = FeatureStatus.ENABLED
    else:
        status = FeatureStatus.DISABLED

    return Verdict(
        status=status,
        matched=frozenset(matched),
        unmatched=frozenset(unmatched),
        snapshot=snapshot,
    )


def _mode_matches(compatibility: ModeCompatibility, mode: CliMode) -> bool:
    match compatibility:
        case ModeCompatibility.CLI_ONLY:
            return mode is CliMode.CLI
        case ModeCompatibility.SERVER_ONLY:
            return mode is CliMode.SERVER
        case ModeCompatibility.CLI_OR_SERVER:
            return True
