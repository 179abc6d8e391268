"""Enumerated registry of spatial strategies.

``create`` returns either a ready strategy or an ``Unsupported`` marker, so
callers have to decide explicitly what to do when a key has no
implementation.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Literal

from lsf_errors.config import settings
from lsf_errors.core.spatial.manipulation import SpatialManipulationService
from lsf_errors.core.spatial.strategies import (
    GenericDegradationStrategy,
    MAX_ZONE_REDUCTION,
    LocationOmissionStrategy,
    RandomPlacementStrategy,
    ReducedSpaceStrategy,
    ReferenceManipulationStrategy,
    ReferenceViolationStrategy,
    SpaceStrategy,
    ZoneConfusionStrategy,
)
from lsf_errors.core.spatial.zones import ZoneManager
from lsf_errors.exceptions import UnsupportedStrategyError

logger = logging.getLogger(__name__)

LearningLevel = Literal["beginner", "intermediate", "advanced"]


class StrategyKey(str, Enum):
    ZONE_CONFUSION = "zone_confusion"
    REFERENCE_VIOLATION = "reference_violation"
    REDUCED_SPACE = "reduced_space"
    RANDOM_PLACEMENT = "random_placement"
    LOCATION_OMISSION = "location_omission"
    AMBIGUOUS_REFERENCE = "ambiguous_reference"
    INCONSISTENT_REFERENCE = "inconsistent_reference"
    REFERENCE_OMISSION = "reference_omission"
    PRONOUN_CONFUSION = "pronoun_confusion"
    SPATIAL_REORGANIZATION = "spatial_reorganization"


@dataclass(frozen=True)
class Unsupported:
    """No strategy is available for ``key``."""

    key: str
    reason: str


DEFAULT_MAX_DEGRADATION = 0.8

MAX_DEGRADATION: dict[str, float] = {
    StrategyKey.ZONE_CONFUSION.value: MAX_ZONE_REDUCTION,
    StrategyKey.REFERENCE_VIOLATION.value: 0.5,
    StrategyKey.REDUCED_SPACE.value: 0.4,
    StrategyKey.RANDOM_PLACEMENT.value: 0.9,
    StrategyKey.LOCATION_OMISSION.value: 0.7,
}

LEVEL_ADJUSTMENTS: dict[str, float] = {
    "beginner": 0.6,
    "intermediate": 0.8,
    "advanced": 1.0,
}

# Strategies whose reduction ladder already encodes severity; the learner
# level does not scale their ceiling.
SELF_LIMITED_KEYS = {StrategyKey.ZONE_CONFUSION.value}

REFERENCE_KEYS = [
    StrategyKey.AMBIGUOUS_REFERENCE,
    StrategyKey.INCONSISTENT_REFERENCE,
    StrategyKey.REFERENCE_OMISSION,
    StrategyKey.PRONOUN_CONFUSION,
    StrategyKey.SPATIAL_REORGANIZATION,
]

StrategyBuilder = Callable[[float], SpaceStrategy]


class StrategyRegistry:
    """Builds strategies for one zone manager at one learner level."""

    def __init__(
        self,
        zone_manager: ZoneManager,
        rng: random.Random | None = None,
        level: LearningLevel | None = None,
    ):
        self.zone_manager = zone_manager
        self.rng = rng or random.Random()
        self.level = level or settings.spatial_default_level
        self.manipulation = SpatialManipulationService(zone_manager, self.rng)
        self._builders: dict[str, StrategyBuilder] = {
            StrategyKey.ZONE_CONFUSION.value: lambda cap: ZoneConfusionStrategy(cap, self.rng),
            StrategyKey.REFERENCE_VIOLATION.value: lambda cap: ReferenceViolationStrategy(cap, self.rng),
            StrategyKey.REDUCED_SPACE.value: lambda cap: ReducedSpaceStrategy(cap, self.rng),
            StrategyKey.RANDOM_PLACEMENT.value: lambda cap: RandomPlacementStrategy(cap, self.rng),
            StrategyKey.LOCATION_OMISSION.value: lambda cap: LocationOmissionStrategy(cap, self.rng),
        }
        for key in REFERENCE_KEYS:
            operation = getattr(self.manipulation, f"apply_{key.value}")
            self._builders[key.value] = (
                lambda cap, name=key.value, op=operation: ReferenceManipulationStrategy(name, op)
            )

    @property
    def keys(self) -> list[str]:
        return list(self._builders)

    def max_degradation(self, key: StrategyKey | str) -> float:
        """Per-key degradation ceiling scaled for the learner level."""
        raw = key.value if isinstance(key, StrategyKey) else key
        base = MAX_DEGRADATION.get(raw, DEFAULT_MAX_DEGRADATION)
        if raw in SELF_LIMITED_KEYS:
            return base
        return base * LEVEL_ADJUSTMENTS[self.level]

    def create(self, key: StrategyKey | str) -> SpaceStrategy | Unsupported:
        raw = key.value if isinstance(key, StrategyKey) else str(key)
        builder = self._builders.get(raw)
        if builder is None:
            reason = "not implemented" if raw in {k.value for k in StrategyKey} else "unknown key"
            logger.debug("No spatial strategy for '%s' (%s)", raw, reason)
            return Unsupported(key=raw, reason=reason)
        return builder(self.max_degradation(raw))

    def require(self, key: StrategyKey | str) -> SpaceStrategy:
        """Like ``create`` but raises for unsupported keys.

        Raises:
            UnsupportedStrategyError: no strategy is registered for *key*
        """
        created = self.create(key)
        if isinstance(created, Unsupported):
            raise UnsupportedStrategyError(created.key)
        return created

    def create_default(self) -> GenericDegradationStrategy:
        return GenericDegradationStrategy(DEFAULT_MAX_DEGRADATION * LEVEL_ADJUSTMENTS[self.level], self.rng)

    def register(self, key: StrategyKey | str, builder: StrategyBuilder) -> None:
        raw = key.value if isinstance(key, StrategyKey) else key
        self._builders[raw] = builder

    def unregister(self, key: StrategyKey | str) -> bool:
        raw = key.value if isinstance(key, StrategyKey) else key
        return self._builders.pop(raw, None) is not None
