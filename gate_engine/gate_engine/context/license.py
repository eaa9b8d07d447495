"""Trial license state derivation.

The license endpoint reports one of three raw states (``none``, ``active``,
``expired``).  An expired license still counts as valid while its grace
window is open, so the canonical state has four variants:

* **none** -- no license was ever issued.
* **active** -- valid, with an expiration timestamp.
* **gracePeriod** -- nominally expired, but ``grace_at`` is still in the
  future relative to the evaluation clock.
* **expired** -- the grace window has elapsed.

Derivation is a pure function of the payload and the current time.  It is
re-run every time a payload is applied; nothing ticks in the background.
All timestamps are epoch milliseconds.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, assert_never

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def system_clock() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class RawLicenseState(str, Enum):
    NONE = "none"
    ACTIVE = "active"
    EXPIRED = "expired"


class TrialLicensePayload(BaseModel):
    """Trial license document as published by the license endpoint.

    Timestamps are epoch milliseconds.  ``active`` carries ``expiry_at``;
    ``expired`` carries both ``expiry_at`` and ``grace_at``.  Instances are
    frozen, so a validated payload keeps its shape.
    """

    model_config = ConfigDict(frozen=True)

    type: str = Field(default="trial", pattern="^trial$")
    state: RawLicenseState
    expiry_at: int | None = None
    grace_at: int | None = None

    @model_validator(mode="after")
    def _check_timestamps(self) -> TrialLicensePayload:
        if self.state == RawLicenseState.ACTIVE and self.expiry_at is None:
            raise ValueError("an active license must carry expiry_at")
        if self.state == RawLicenseState.EXPIRED and (self.expiry_at is None or self.grace_at is None):
            raise ValueError("an expired license must carry expiry_at and grace_at")
        return self


@dataclass(frozen=True, slots=True)
class NoLicense:
    status: ClassVar[str] = "none"

    def to_dict(self) -> dict[str, object]:
        return {"status": self.status}


@dataclass(frozen=True, slots=True)
class ActiveLicense:
    status: ClassVar[str] = "active"

    expires_at: int

    def to_dict(self) -> dict[str, object]:
        return {"status": self.status, "expires_at": self.expires_at}


@dataclass(frozen=True, slots=True)
class GracePeriodLicense:
    status: ClassVar[str] = "gracePeriod"

    expires_at: int
    grace_ends_at: int

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status,
            "expires_at": self.expires_at,
            "grace_ends_at": self.grace_ends_at,
        }


@dataclass(frozen=True, slots=True)
class ExpiredLicense:
    status: ClassVar[str] = "expired"

    expires_at: int
    grace_ends_at: int

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status,
            "expires_at": self.expires_at,
            "grace_ends_at": self.grace_ends_at,
        }


LicenseState = NoLicense | ActiveLicense | GracePeriodLicense | ExpiredLicense


def derive_license_state(payload: TrialLicensePayload, now_ms: int) -> LicenseState:
    """Resolve a raw trial license payload into a :data:`LicenseState`.

    Parameters
    ----------
    payload:
        The parsed license document.
    now_ms:
        Evaluation time in epoch milliseconds.

    Returns
    -------
    LicenseState
        ``GracePeriodLicense`` when an expired license's ``grace_at`` is
        strictly after *now_ms*, ``ExpiredLicense`` otherwise.  ``none`` and
        ``active`` map one-to-one.

    Raises
    ------
    ValueError
        If the payload bypassed validation and lacks the timestamps its
        state requires.
    """
    match payload:
        case TrialLicensePayload(state=RawLicenseState.NONE):
            return NoLicense()
        case TrialLicensePayload(state=RawLicenseState.ACTIVE, expiry_at=int(expiry_at)):
            return ActiveLicense(expires_at=expiry_at)
        case TrialLicensePayload(state=RawLicenseState.EXPIRED, expiry_at=int(expiry_at), grace_at=int(grace_at)):
            if grace_at > now_ms:
                logger.debug("License expired at %d but grace runs until %d", expiry_at, grace_at)
                return GracePeriodLicense(expires_at=expiry_at, grace_ends_at=grace_at)
            return ExpiredLicense(expires_at=expiry_at, grace_ends_at=grace_at)
        case _:
            raise ValueError("License payload is missing the timestamps its state requires")


def is_license_valid(license_state: LicenseState) -> bool:
    """Return ``True`` when the license currently grants access."""
    match license_state:
        case ActiveLicense() | GracePeriodLicense():
            return True
        case NoLicense() | ExpiredLicense():
            return False
        case _:
            assert_never(license_state)
