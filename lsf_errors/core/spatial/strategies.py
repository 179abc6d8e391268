"""Strategies that degrade the ``space`` parameter.

A strategy exposes ``async apply(space, context)``, ``validate(space)`` and
an ``impact_score`` read after ``apply``. Strategies never raise for bad
luck in random choices; a strategy that cannot run raises
``StrategyExecutionError`` so the coordinating transformer can fall back.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

from lsf_errors.core.accuracy import Parameter, current_accuracy, reduce_accuracy
from lsf_errors.core.spatial.zones import ALL_ZONE_VALUES, ZONE_CONFUSIONS, SpatialZoneType
from lsf_errors.exceptions import StrategyExecutionError
from lsf_errors.models.reports import ManipulationResult

logger = logging.getLogger(__name__)


@dataclass
class SpaceTransformationContext:
    """Inputs shared by every strategy for one transformation request."""

    transformation_type: str
    severity: float
    factor: float | None = None
    original_accuracy: float = 1.0
    preserve_semantics: bool = True
    spatial_complexity: float = 0.0
    semantic_density: float = 0.0
    context_type: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class SpaceStrategy(Protocol):
    name: str

    async def apply(self, space: Parameter, context: SpaceTransformationContext) -> None: ...

    def validate(self, space: Parameter) -> bool: ...

    @property
    def impact_score(self) -> float: ...


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _has_valid_accuracy(space: Parameter) -> bool:
    accuracy = space.get("accuracy")
    return accuracy is None or (isinstance(accuracy, (int, float)) and 0.0 <= accuracy <= 1.0)


def _has_positive_scale(space: Parameter, minimum: float = 0.0) -> bool:
    scale = space.get("scale")
    return scale is None or (isinstance(scale, (int, float)) and scale > minimum)


class _Strategy:
    """Impact bookkeeping and capped accuracy reduction."""

    name = "strategy"

    def __init__(self, max_degradation: float = 1.0, rng: random.Random | None = None):
        self.max_degradation = max_degradation
        self.rng = rng or random.Random()
        self._impact_score = 0.0

    @property
    def impact_score(self) -> float:
        return self._impact_score

    def reset(self) -> None:
        self._impact_score = 0.0

    def validate(self, space: Parameter) -> bool:
        return isinstance(space, dict) and _has_valid_accuracy(space) and _has_positive_scale(space)

    def _degrade(self, space: Parameter, amount: float) -> float:
        """Reduce accuracy by *amount* capped at ``max_degradation``; returns the applied amount."""
        before = current_accuracy(space)
        after = reduce_accuracy(space, min(amount, self.max_degradation), "space")
        return before - after

    @staticmethod
    def _stamp(space: Parameter, key: str, data: dict) -> None:
        space.setdefault("metadata", {})[key] = {**data, "timestamp": _timestamp()}


# ------------------------------------------------------------------
# Zone confusion
# ------------------------------------------------------------------


class DegradationLevel(str, Enum):
    MINIMAL = "minimal"
    MODERATE = "moderate"
    SEVERE = "severe"
    CRITICAL = "critical"


DEGRADATION_ORDER = list(DegradationLevel)

ZONE_REDUCTION = {
    DegradationLevel.MINIMAL: 0.15,
    DegradationLevel.MODERATE: 0.35,
    DegradationLevel.SEVERE: 0.55,
    DegradationLevel.CRITICAL: 0.8,
}

# Smallest scale the validator still accepts
MIN_CONFUSED_SCALE = 0.1

# The level ladder carries its own ceiling
MAX_ZONE_REDUCTION = 0.9

LEVEL_WEIGHTS = {
    DegradationLevel.MINIMAL: 0.2,
    DegradationLevel.MODERATE: 0.4,
    DegradationLevel.SEVERE: 0.7,
    DegradationLevel.CRITICAL: 1.0,
}


def degradation_level(severity: float) -> DegradationLevel:
    if severity <= 0.25:
        return DegradationLevel.MINIMAL
    if severity <= 0.5:
        return DegradationLevel.MODERATE
    if severity <= 0.75:
        return DegradationLevel.SEVERE
    return DegradationLevel.CRITICAL


class ZoneConfusionStrategy(_Strategy):
    """Mixes up the zones a referent was placed in."""

    name = "zone_confusion"

    def validate(self, space: Parameter) -> bool:
        return super().validate(space) and not space.get("critical_error")

    async def apply(self, space: Parameter, context: SpaceTransformationContext) -> None:
        if not self.validate(space):
            raise StrategyExecutionError("Space parameter cannot take a zone confusion")

        level = degradation_level(context.severity)
        space["zone_confusion"] = True
        self._behaviors[level](self, space, context)

        applied = self._degrade(space, self.accuracy_reduction(level, context))
        self._impact_score = min(1.0, applied + LEVEL_WEIGHTS[level])
        logger.debug("Zone confusion (%s) applied", level.value)

    @staticmethod
    def accuracy_reduction(level: DegradationLevel, context: SpaceTransformationContext) -> float:
        reduction = ZONE_REDUCTION[level]
        if context.preserve_semantics:
            reduction *= 0.8
        if context.spatial_complexity:
            reduction *= 1 + context.spatial_complexity * 0.2
        return min(MAX_ZONE_REDUCTION, reduction)

    def _minimal(self, space: Parameter, context: SpaceTransformationContext) -> None:
        zones = space.get("zones") or []
        if not zones:
            return
        current = zones[0]
        options = ZONE_CONFUSIONS.get(current)
        probability = 0.2 if context.preserve_semantics else 0.3
        if options and self.rng.random() < probability:
            confused = self.rng.choice(options)
            space["zones"] = [confused]
            space["confusion_details"] = {
                "original": current,
                "confused": confused,
                "level": DegradationLevel.MINIMAL.value,
                "timestamp": _timestamp(),
            }

    def _moderate(self, space: Parameter, context: SpaceTransformationContext) -> None:
        space["reference_consistency"] = False
        zones = space.get("zones")
        if zones:
            shuffled = list(zones)
            self.rng.shuffle(shuffled)
            space["zones"] = shuffled[:max(1, len(shuffled) // 2)]
        if space.get("scale") is not None:
            base = 0.6 + context.spatial_complexity * 0.1 if context.spatial_complexity else 0.7
            space["scale"] = max(MIN_CONFUSED_SCALE, space["scale"] * (base + self.rng.random() * 0.2))

    def _severe(self, space: Parameter, context: SpaceTransformationContext) -> None:
        space["random_placement"] = True
        space["reference_consistency"] = False
        zones = space.get("zones")
        if zones:
            count = min(1 if context.preserve_semantics else 2, len(zones))
            replacements = [z for z in ALL_ZONE_VALUES if z not in zones][:count]
            self.rng.shuffle(replacements)
            space["zones"] = replacements
            space["metadata"] = {
                **space.get("metadata", {}),
                "context_type": context.context_type or "unknown",
                "preserve_semantics": context.preserve_semantics,
                "severity": context.severity,
                "transformation_type": "severe_confusion",
            }
        if space.get("scale") is not None:
            space["scale"] = max(MIN_CONFUSED_SCALE, space["scale"] * 0.4)

    def _critical(self, space: Parameter, context: SpaceTransformationContext) -> None:
        space["location_omission"] = True
        space["random_placement"] = True
        space["reference_consistency"] = False
        space["zones"] = []
        space["scale"] = 0.2 if context.preserve_semantics else 0.1
        space["critical_error"] = {
            "type": "TOTAL_SPATIAL_BREAKDOWN",
            "severity": "CRITICAL",
            "timestamp": _timestamp(),
            "description": "Complete spatial reference breakdown with total zone confusion",
            "metadata": {
                "semantic_preservation": context.preserve_semantics,
                "linguistic_complexity": context.spatial_complexity,
                "transformation_trigger": context.context_type or "unknown",
                "original_accuracy": context.original_accuracy,
                "degradation_factor": context.severity,
            },
        }

    _behaviors = {
        DegradationLevel.MINIMAL: _minimal,
        DegradationLevel.MODERATE: _moderate,
        DegradationLevel.SEVERE: _severe,
        DegradationLevel.CRITICAL: _critical,
    }


# ------------------------------------------------------------------
# Reduced space
# ------------------------------------------------------------------


@dataclass(frozen=True)
class ScaleReductionConfig:
    reduction_type: str
    constraint_level: str
    min_factor: float
    max_factor: float
    accuracy_impact: float
    compensable: bool


SCALE_CONFIGS = {
    "minimal": ScaleReductionConfig("adaptive", "minimal", 0.85, 0.95, 0.05, True),
    "moderate": ScaleReductionConfig("uniform", "moderate", 0.65, 0.85, 0.15, True),
    "severe": ScaleReductionConfig("peripheral", "severe", 0.40, 0.65, 0.30, False),
    "extreme": ScaleReductionConfig("horizontal", "extreme", 0.20, 0.40, 0.50, False),
}


def constraint_level(severity: float) -> str:
    if severity >= 0.8:
        return "extreme"
    if severity >= 0.6:
        return "severe"
    if severity >= 0.3:
        return "moderate"
    return "minimal"


class ReducedSpaceStrategy(_Strategy):
    """Shrinks the signing space as a cramped signer would."""

    name = "reduced_space"

    def validate(self, space: Parameter) -> bool:
        return isinstance(space, dict) and _has_valid_accuracy(space) and _has_positive_scale(space, 0.1)

    async def apply(self, space: Parameter, context: SpaceTransformationContext) -> None:
        config = SCALE_CONFIGS[constraint_level(context.severity)]
        factor = self.reduction_factor(config, context)
        original_scale = space.get("scale", 1.0)
        final_scale = max(0.1, original_scale * factor)
        space["scale"] = final_scale

        compensated = self._apply_reduction_effects(space, config, context)
        applied = self._degrade(space, config.accuracy_impact * (1 - factor))

        bonus = 0.2 if compensated else 0.0
        self._impact_score = min(1.0, max(0.0, (1 - final_scale + applied - bonus) * context.severity))
        self._stamp(space, "scale_transformation", {
            "reduction_type": config.reduction_type,
            "constraint_level": config.constraint_level,
            "original_scale": original_scale,
            "final_scale": final_scale,
        })
        logger.debug("Space reduced (%s) to scale %.3f", config.reduction_type, final_scale)

    @staticmethod
    def reduction_factor(config: ScaleReductionConfig, context: SpaceTransformationContext) -> float:
        spread = config.max_factor - config.min_factor
        adjustment = 1.0 if context.factor is None else context.factor
        return config.min_factor + spread * (1 - context.severity) * adjustment

    @staticmethod
    def _apply_reduction_effects(
        space: Parameter, config: ScaleReductionConfig, context: SpaceTransformationContext
    ) -> bool:
        """Flag side effects of the reduction; returns whether the signer can compensate."""
        if config.reduction_type == "uniform":
            if config.constraint_level != "minimal":
                space["zone_confusion"] = True
            return config.compensable
        if config.reduction_type == "horizontal":
            space["zone_confusion"] = True
            space["reference_consistency"] = False
            return False
        if config.reduction_type == "peripheral":
            space["zone_confusion"] = True
            space["random_placement"] = True
            return False
        # adaptive
        if context.preserve_semantics:
            return True
        space["zone_confusion"] = True
        return False


# ------------------------------------------------------------------
# Random placement
# ------------------------------------------------------------------


@dataclass(frozen=True)
class PlacementConfig:
    placement_type: str
    level: str
    spatial_variance: float
    coherence_impact: float
    affected_zones: list[str]
    auto_correctible: bool


PLACEMENT_CONFIGS = {
    "subtle": PlacementConfig("drift", "subtle", 0.15, 0.10, [SpatialZoneType.PERIPHERAL.value], True),
    "moderate": PlacementConfig(
        "scatter", "moderate", 0.35, 0.25,
        [SpatialZoneType.DOMINANT_SIDE.value, SpatialZoneType.NON_DOMINANT_SIDE.value], True,
    ),
    "strong": PlacementConfig(
        "cluster", "strong", 0.60, 0.45,
        [SpatialZoneType.CENTER.value, SpatialZoneType.UPPER.value, SpatialZoneType.LOWER.value], False,
    ),
    "extreme": PlacementConfig("chaos", "extreme", 0.85, 0.70, list(ALL_ZONE_VALUES), False),
}


def randomization_level(severity: float) -> str:
    if severity >= 0.8:
        return "extreme"
    if severity >= 0.6:
        return "strong"
    if severity >= 0.3:
        return "moderate"
    return "subtle"


class RandomPlacementStrategy(_Strategy):
    """Places referents where they were never established."""

    name = "random_placement"

    async def apply(self, space: Parameter, context: SpaceTransformationContext) -> None:
        config = PLACEMENT_CONFIGS[randomization_level(context.severity)]
        space["random_placement"] = True

        factor = 1.0 if context.factor is None else context.factor
        variance = min(1.0, config.spatial_variance * context.severity * factor)
        impacted = self._apply_placement_effects(space, config.placement_type, variance)

        coherence_loss = config.coherence_impact * variance
        coherence = max(0.0, 1 - coherence_loss)
        correction = 0.0
        if config.auto_correctible and coherence <= 0.7:
            correction = min(0.3, 0.7 - coherence)
        self._degrade(space, coherence_loss * (1 - correction))

        zone_share = len(impacted) / len(ALL_ZONE_VALUES)
        self._impact_score = min(1.0, max(
            0.0, (variance + (1 - coherence) + zone_share - correction * 0.3) * context.severity
        ))
        self._stamp(space, "placement_transformation", {
            "placement_type": config.placement_type,
            "randomization_level": config.level,
            "applied_variance": variance,
            "affected_zones": list(config.affected_zones),
        })

    @staticmethod
    def _apply_placement_effects(space: Parameter, placement_type: str, variance: float) -> list[str]:
        if placement_type == "drift":
            if variance > 0.2:
                space["reference_consistency"] = False
            return [SpatialZoneType.PERIPHERAL.value]
        if placement_type == "scatter":
            space["zone_confusion"] = True
            if variance > 0.4:
                space["reference_consistency"] = False
            return [SpatialZoneType.DOMINANT_SIDE.value, SpatialZoneType.NON_DOMINANT_SIDE.value]
        if placement_type == "cluster":
            space["zone_confusion"] = True
            space["reference_consistency"] = False
            space["scale"] = max(0.3, space.get("scale", 1.0) - variance * 0.4)
            return [SpatialZoneType.CENTER.value, SpatialZoneType.UPPER.value, SpatialZoneType.LOWER.value]
        # chaos
        space["zone_confusion"] = True
        space["reference_consistency"] = False
        space["location_omission"] = True
        space["scale"] = max(0.2, space.get("scale", 1.0) - variance * 0.6)
        return list(ALL_ZONE_VALUES)


# ------------------------------------------------------------------
# Location omission
# ------------------------------------------------------------------


INFORMATION_TYPES = ["position", "orientation", "distance", "reference", "context"]


@dataclass(frozen=True)
class OmissionConfig:
    omission_type: str
    loss_level: str
    information_types: list[str]
    vulnerable_zones: list[str]
    probability: float
    comprehension_impact: float
    recoverable: bool


OMISSION_CONFIGS = {
    "minimal": OmissionConfig(
        "partial", "minimal", ["context"], [SpatialZoneType.PERIPHERAL.value], 0.20, 0.10, True,
    ),
    "moderate": OmissionConfig(
        "selective", "moderate", ["distance", "orientation"],
        [SpatialZoneType.DOMINANT_SIDE.value, SpatialZoneType.NON_DOMINANT_SIDE.value], 0.40, 0.25, True,
    ),
    "substantial": OmissionConfig(
        "systematic", "substantial", ["position", "reference", "distance"],
        [SpatialZoneType.UPPER.value, SpatialZoneType.LOWER.value, SpatialZoneType.CENTER.value],
        0.65, 0.50, False,
    ),
    "critical": OmissionConfig(
        "progressive", "critical", list(INFORMATION_TYPES), list(ALL_ZONE_VALUES), 0.85, 0.75, False,
    ),
}


def loss_level(severity: float) -> str:
    if severity >= 0.8:
        return "critical"
    if severity >= 0.6:
        return "substantial"
    if severity >= 0.3:
        return "moderate"
    return "minimal"


class LocationOmissionStrategy(_Strategy):
    """Drops pieces of spatial information the addressee needs."""

    name = "location_omission"

    async def apply(self, space: Parameter, context: SpaceTransformationContext) -> None:
        config = OMISSION_CONFIGS[loss_level(context.severity)]
        space["location_omission"] = True

        omitted = self.select_information(config, context.severity)
        affected: list[str] = []
        contextual_loss = 0.0
        for info in omitted:
            if info == "context":
                contextual_loss += config.comprehension_impact * 0.2
            for zone in self._omit(space, info, config):
                if zone not in affected:
                    affected.append(zone)

        information_loss = min(1.0, len(omitted) / len(config.information_types) * config.comprehension_impact)
        recovery = max(0.0, 1 - information_loss * 1.5) if config.recoverable else 0.0
        applied = self._degrade(space, contextual_loss + information_loss * config.comprehension_impact)

        zone_share = len(affected) / len(ALL_ZONE_VALUES)
        self._impact_score = min(1.0, max(
            0.0, (information_loss + zone_share + applied - recovery * 0.2) * context.severity
        ))
        self._stamp(space, "location_omission", {
            "omission_type": config.omission_type,
            "loss_level": config.loss_level,
            "omitted_information": omitted,
            "vulnerable_zones": list(config.vulnerable_zones),
        })

    def select_information(self, config: OmissionConfig, severity: float) -> list[str]:
        probability = config.probability * severity
        omitted = [info for info in config.information_types if self.rng.random() < probability]
        if not omitted and severity > 0.5:
            omitted.append(config.information_types[0])
        return omitted

    @staticmethod
    def _omit(space: Parameter, info: str, config: OmissionConfig) -> list[str]:
        if info == "position":
            space["zone_confusion"] = True
            space["random_placement"] = True
            return [SpatialZoneType.CENTER.value, SpatialZoneType.PERIPHERAL.value]
        if info == "orientation":
            space["reference_consistency"] = False
            return [SpatialZoneType.DOMINANT_SIDE.value, SpatialZoneType.NON_DOMINANT_SIDE.value]
        if info == "distance":
            space["scale"] = max(0.3, space.get("scale", 1.0) - config.comprehension_impact * 0.3)
            return [SpatialZoneType.UPPER.value, SpatialZoneType.LOWER.value]
        if info == "reference":
            space["reference_consistency"] = False
            space["zone_confusion"] = True
            return list(config.vulnerable_zones)
        return [SpatialZoneType.PERIPHERAL.value]


# ------------------------------------------------------------------
# Generic degradation and reference violation
# ------------------------------------------------------------------


class GenericDegradationStrategy(_Strategy):
    """Universal fallback: lower accuracy by the severity, flag a generic error."""

    name = "generic_degradation"

    def __init__(self, max_degradation: float = 0.8, rng: random.Random | None = None):
        super().__init__(max_degradation, rng)

    def validate(self, space: Parameter) -> bool:
        return isinstance(space, dict)

    async def apply(self, space: Parameter, context: SpaceTransformationContext) -> None:
        self._impact_score = self._degrade(space, context.severity)
        if context.severity > 0.5:
            space["reference_consistency"] = False
        if context.severity > 0.7:
            space["zone_confusion"] = True
        space["generic_error"] = True


class ReferenceViolationStrategy(GenericDegradationStrategy):
    name = "reference_violation"

    async def apply(self, space: Parameter, context: SpaceTransformationContext) -> None:
        await super().apply(space, context)
        if context.severity > 0.4:
            space["reference_consistency"] = False
            space["pronoun_confusion"] = True
            space["ambiguous_reference"] = True
            if context.severity > 0.7:
                space["reference_omission"] = True


# ------------------------------------------------------------------
# Reference manipulations
# ------------------------------------------------------------------


Manipulation = Callable[[Parameter, float], Awaitable[ManipulationResult]]


class ReferenceManipulationStrategy(_Strategy):
    """Adapts one ``SpatialManipulationService`` operation to the strategy interface."""

    def __init__(self, name: str, operation: Manipulation):
        super().__init__()
        self.name = name
        self.operation = operation
        self.last_result: ManipulationResult | None = None

    async def apply(self, space: Parameter, context: SpaceTransformationContext) -> None:
        self.last_result = await self.operation(space, context.severity)
        if not self.last_result.success:
            raise StrategyExecutionError(self.last_result.error_message or f"{self.name} failed")
        self._impact_score = self.last_result.accuracy_impact
