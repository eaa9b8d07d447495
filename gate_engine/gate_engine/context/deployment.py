"""Deployment context -- the owned holder of the current snapshot.

A :class:`DeploymentContext` is created by whoever bootstraps the process and
passed by reference to the code that writes new facts (startup, entitlement
refreshes, license refreshes) and to the code that evaluates features.  Each
setter normalizes its raw input and swaps in a new immutable
:class:`DeploymentSnapshot` in a single assignment, so readers never see a
half-applied update.  Ordering between concurrent writers is the caller's
responsibility.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from typing import Any

from gate_engine.context.license import Clock, TrialLicensePayload, derive_license_state, system_clock
from gate_engine.context.models import (
    EDITION_PLANS,
    DeploymentSnapshot,
    Entitlements,
    EntitlementsPayload,
    EnvironmentFacts,
)

logger = logging.getLogger(__name__)


class InvalidEnvironmentError(ValueError):
    """Raised when environment facts carry an unrecognized edition code.

    The update is refused and the previous snapshot stays authoritative.
    """

    code = "invalid-input"

    def __init__(self, edition_code: str) -> None:
        self.edition_code = edition_code
        known = ", ".join(sorted(EDITION_PLANS))
        super().__init__(f"Unknown edition code '{edition_code}' (expected one of: {known})")


class DeploymentContext:
    """Holds the current deployment snapshot and normalizes incoming facts.

    Parameters
    ----------
    clock:
        Callable returning the current time in epoch milliseconds.  Used
        to resolve the license grace window when a license is applied.
        Defaults to the system wall clock.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock: Clock = clock or system_clock
        self._snapshot = DeploymentSnapshot()
        self._environment_facts: EnvironmentFacts | None = None

    @property
    def environment_facts(self) -> EnvironmentFacts | None:
        """The last accepted raw environment facts, or ``None``."""
        return self._environment_facts

    def snapshot(self) -> DeploymentSnapshot:
        """Return the current snapshot.  The value is immutable."""
        return self._snapshot

    def set_environment_facts(self, raw: EnvironmentFacts) -> DeploymentSnapshot:
        """Apply edition and invocation mode from the environment.

        Raises
        ------
        InvalidEnvironmentError
            If ``raw.edition_code`` is not one of the known edition codes.
        """
        plan = EDITION_PLANS.get(raw.edition_code)
        if plan is None:
            logger.error("Rejected environment facts with unknown edition code '%s'", raw.edition_code)
            raise InvalidEnvironmentError(raw.edition_code)

        self._snapshot = dataclasses.replace(self._snapshot, plan=plan, mode=raw.mode)
        self._environment_facts = raw
        logger.info("Deployment plan set to %s (mode=%s)", plan.value, raw.mode.value)
        return self._snapshot

    def set_entitlements(
        self, entitlements: Entitlements | EntitlementsPayload | Mapping[str, Any]
    ) -> DeploymentSnapshot:
        """Replace the entitlement set wholesale.

        Accepts the canonical :class:`Entitlements`, a parsed
        :class:`EntitlementsPayload`, or the raw feed mapping of flag name to
        boolean.  The input is normalized before the snapshot is swapped, so
        a malformed mapping raises ``ValidationError`` and leaves the current
        snapshot in place.
        """
        if isinstance(entitlements, EntitlementsPayload):
            normalized = entitlements.to_entitlements()
        elif isinstance(entitlements, Entitlements):
            normalized = entitlements
        else:
            normalized = EntitlementsPayload.model_validate(dict(entitlements)).to_entitlements()
        self._snapshot = dataclasses.replace(self._snapshot, entitlements=normalized)
        logger.debug("Entitlements replaced: %s", normalized.to_dict())
        return self._snapshot

    def set_license(self, payload: TrialLicensePayload) -> DeploymentSnapshot:
        """Derive the license state from *payload* at the current clock time."""
        license_state = derive_license_state(payload, self._clock())
        self._snapshot = dataclasses.replace(self._snapshot, license=license_state)
        logger.info("License state set to %s", license_state.status)
        return self._snapshot

    def reset(self) -> DeploymentSnapshot:
        """Restore the conservative default snapshot."""
        self._snapshot = DeploymentSnapshot()
        self._environment_facts = None
        logger.debug("Deployment context reset to defaults")
        return self._snapshot
