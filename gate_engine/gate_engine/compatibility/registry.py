"""Feature registry mapping feature identifiers to compatibility descriptors.

The registry is populated once at startup and never mutated afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from gate_engine.compatibility.evaluator import evaluate
from gate_engine.compatibility.models import CompatibilityDescriptor, DescriptorDocument, Verdict
from gate_engine.context.deployment import DeploymentContext

logger = logging.getLogger(__name__)


class UnknownFeatureError(KeyError):
    """Raised when a feature identifier is not registered."""

    code = "unknown-feature"

    def __init__(self, feature_id: str) -> None:
        self.feature_id = feature_id
        super().__init__(feature_id)

    def __str__(self) -> str:
        return f"Feature '{self.feature_id}' is not registered."


class FeatureRegistry:
    """Immutable mapping of feature id to :class:`CompatibilityDescriptor`.

    Parameters
    ----------
    descriptors:
        Descriptors keyed by feature id.  The mapping is copied.
    """

    def __init__(self, descriptors: Mapping[str, CompatibilityDescriptor]) -> None:
        for feature_id, descriptor in descriptors.items():
            if not isinstance(descriptor, CompatibilityDescriptor):
                raise TypeError(
                    f"Descriptor for feature '{feature_id}' must be a CompatibilityDescriptor, "
                    f"got {type(descriptor).__name__}"
                )
        self._descriptors: Mapping[str, CompatibilityDescriptor] = MappingProxyType(dict(descriptors))
        logger.debug("Feature registry built with %d feature(s)", len(self._descriptors))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> FeatureRegistry:
        """Build a registry from descriptors in the authoring format.

        Raises
        ------
        ValueError
            If any descriptor is missing an axis, carries an unknown key, or
            uses an unknown value.
        """
        descriptors: dict[str, CompatibilityDescriptor] = {}
        for feature_id, body in raw.items():
            try:
                descriptors[str(feature_id)] = DescriptorDocument.model_validate(body).to_descriptor()
            except ValidationError as exc:
                raise ValueError(f"Invalid descriptor for feature '{feature_id}': {exc}") from exc
        return cls(descriptors)

    def lookup(self, feature_id: str) -> CompatibilityDescriptor:
        """Return the descriptor registered for *feature_id*.

        Raises
        ------
        UnknownFeatureError
            If the feature is not registered.
        """
        try:
            return self._descriptors[feature_id]
        except KeyError:
            raise UnknownFeatureError(feature_id) from None

    def feature_ids(self) -> list[str]:
        """Return all registered feature ids, sorted."""
        return sorted(self._descriptors)

    def items(self) -> Iterator[tuple[str, CompatibilityDescriptor]]:
        for feature_id in self.feature_ids():
            yield feature_id, self._descriptors[feature_id]

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, feature_id: object) -> bool:
        return feature_id in self._descriptors


def check_feature(context: DeploymentContext, registry: FeatureRegistry, feature_id: str) -> Verdict:
    """Evaluate a registered feature against the context's current snapshot.

    The lookup happens before evaluation, so an unknown feature raises
    :class:`UnknownFeatureError` without evaluating anything.
    """
    descriptor = registry.lookup(feature_id)
    verdict = evaluate(context.snapshot(), descriptor)
    logger.debug("Feature '%s' is %s", feature_id, verdict.status.value)
    return verdict
