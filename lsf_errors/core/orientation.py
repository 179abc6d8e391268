"""Palm orientation transformer.

Orientation parameters look like::

    {"type": "up", "angles": {"x": 180, "y": 0, "z": 0}, "accuracy": 1.0}

Angles are degrees on three axes, always kept in (-180, 180].
"""

import logging
import math
import random

from lsf_errors.core.accuracy import (
    Content,
    Parameter,
    current_accuracy,
    get_parameter,
    normalize_angle,
    reduce_accuracy,
)
from lsf_errors.models.catalog import (
    ErrorCatalogEntry,
    ErrorCategory,
    FactorTransformation,
    RotationTransformation,
    SubstitutionTransformation,
    Transformation,
    TransformationType,
)
from lsf_errors.models.reports import ParameterAnalysis

logger = logging.getLogger(__name__)

UNDEFINED_ORIENTATION = "indefinie"

PALM_ANGLES: dict[str, tuple[float, float, float]] = {
    "down": (0, 0, 0),
    "up": (180, 0, 0),
    "forward": (90, 0, 0),
    "backward": (-90, 0, 0),
    "left": (0, 0, 90),
    "right": (0, 0, -90),
    "diagonal_up": (45, 0, 45),
    "diagonal_down": (-45, 0, -45),
}

# Ordered from most to least similar; the first tier with an entry wins.
CONFUSION_TIERS: list[dict[str, list[str]]] = [
    {
        "up": ["diagonal_up"],
        "down": ["diagonal_down"],
        "forward": ["diagonal_up"],
        "backward": ["diagonal_down"],
    },
    {
        "left": ["right"],
        "up": ["forward"],
        "down": ["backward"],
    },
    {
        "up": ["down"],
        "forward": ["backward"],
        "left": ["right"],
    },
]

TOLERANCE_ZONES: dict[str, float] = {
    "precise": 5,
    "acceptable": 15,
    "approximate": 30,
    "incorrect": 90,
}

DIFFICULTY_BANDS: dict[str, list[str]] = {
    "beginner": ["up", "down", "forward", "backward"],
    "intermediate": ["left", "right", "diagonal_up", "diagonal_down"],
    "advanced": ["complex_rotation", "multi_axis", "dynamic_orientation"],
}

NAMED_ROTATIONS: dict[str, tuple[str, float]] = {
    "clockwise": ("z", 45),
    "counter_clockwise": ("z", -45),
    "tilt_forward": ("x", 30),
    "tilt_backward": ("x", -30),
    "turn_left": ("y", -30),
    "turn_right": ("y", 30),
}

SUBSTITUTION_PENALTY = 0.5
SUBSTITUTION_EXTRA_PENALTY = 0.4
OMISSION_PENALTY = 0.9
ROTATION_PENALTY = 0.3
FALLBACK_PENALTY = 0.2


def confusable_orientations(orientation_type: str) -> list[str]:
    """Confusable values from the most similar tier that knows *orientation_type*."""
    for tier in CONFUSION_TIERS:
        candidates = [c for c in tier.get(orientation_type, []) if c != orientation_type]
        if candidates:
            return candidates
    return []


def angular_distance(a: dict[str, float], b: dict[str, float]) -> float:
    """Euclidean distance between two angle triples, per-axis wrapped."""
    total = 0.0
    for axis in ("x", "y", "z"):
        delta = abs(normalize_angle(a.get(axis, 0) - b.get(axis, 0)))
        total += delta * delta
    return round(math.sqrt(total), 2)


class OrientationTransformer:
    """Simulates palm orientation mistakes."""

    category = ErrorCategory.ORIENTATION

    def __init__(self, entry: ErrorCatalogEntry, rng: random.Random | None = None):
        self.entry = entry
        self.rng = rng or random.Random()

    def get_target_parameter(self, content: Content) -> Parameter | None:
        return get_parameter(content, "orientation")

    def apply_transformation(self, content: Content, transform: Transformation) -> None:
        orientation = self.get_target_parameter(content)
        if orientation is None:
            logger.warning("No orientation parameter found in content")
            return

        kind = transform.type
        if kind == TransformationType.SUBSTITUTION and isinstance(transform, SubstitutionTransformation):
            self._apply_substitution(orientation, transform)
        elif kind == TransformationType.INTENSITY and isinstance(transform, FactorTransformation):
            if transform.factor is not None:
                self._apply_intensity(orientation, transform.factor)
        elif kind == TransformationType.OMISSION:
            self._apply_omission(orientation)
        elif isinstance(transform, RotationTransformation):
            self._apply_rotation(orientation, transform)
        else:
            logger.warning("Unsupported orientation transformation '%s'", kind.value)
            reduce_accuracy(orientation, FALLBACK_PENALTY, "orientation")

    def apply_default_transformation(self, content: Content) -> None:
        orientation = self.get_target_parameter(content)
        if orientation is None:
            logger.warning("No orientation parameter found for default transformation")
            return
        reduce_accuracy(orientation, self.entry.default_transformation.severity, "orientation")

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------

    def _apply_substitution(self, orientation: Parameter, transform: SubstitutionTransformation) -> None:
        original = orientation.get("type")
        if transform.from_value and transform.to_value and original == transform.from_value:
            self._substitute(orientation, transform.to_value)
        elif original:
            candidates = confusable_orientations(original)
            if candidates:
                self._substitute(orientation, self.rng.choice(candidates))
            else:
                self._substitute(orientation, self._fallback_orientation(original))
        reduce_accuracy(orientation, SUBSTITUTION_EXTRA_PENALTY, "orientation")

    def _substitute(self, orientation: Parameter, new_type: str) -> None:
        old_type = orientation.get("type")
        orientation["type"] = new_type
        if new_type in PALM_ANGLES:
            x, y, z = PALM_ANGLES[new_type]
            orientation["angles"] = {"x": x, "y": y, "z": z}
        reduce_accuracy(orientation, SUBSTITUTION_PENALTY, "orientation")
        logger.debug("Orientation substituted: %s -> %s", old_type, new_type)

    def _fallback_orientation(self, original: str) -> str:
        options = [o for o in DIFFICULTY_BANDS["beginner"] if o != original]
        return self.rng.choice(options)

    def _apply_intensity(self, orientation: Parameter, factor: float) -> None:
        angles = orientation.setdefault("angles", {"x": 0, "y": 0, "z": 0})
        for axis in ("x", "y", "z"):
            angles[axis] = normalize_angle(angles.get(axis, 0) * factor)
        reduce_accuracy(orientation, min(0.5, abs(1 - factor) * 0.5), "orientation")

    def _apply_omission(self, orientation: Parameter) -> None:
        orientation["type"] = UNDEFINED_ORIENTATION
        orientation.pop("angles", None)
        reduce_accuracy(orientation, OMISSION_PENALTY, "orientation")
        logger.debug("Orientation omitted")

    def _apply_rotation(self, orientation: Parameter, transform: RotationTransformation) -> None:
        if transform.axis is not None and transform.degrees is not None:
            axis, degrees = transform.axis.value, transform.degrees
        elif transform.rotation in NAMED_ROTATIONS:
            axis, degrees = NAMED_ROTATIONS[transform.rotation]
            if transform.degrees is not None:
                degrees = math.copysign(transform.degrees, degrees)
        else:
            logger.warning("Rotation without axis or known name: %s", transform.rotation)
            reduce_accuracy(orientation, FALLBACK_PENALTY, "orientation")
            return

        angles = orientation.setdefault("angles", {"x": 0, "y": 0, "z": 0})
        angles[axis] = normalize_angle(angles.get(axis, 0) + degrees)
        reduce_accuracy(orientation, ROTATION_PENALTY, "orientation")
        logger.debug("Orientation rotated %s degrees on %s", degrees, axis)

    # ------------------------------------------------------------------
    # Analysis (read-only)
    # ------------------------------------------------------------------

    @staticmethod
    def difficulty(orientation_type: str) -> str:
        for band, values in DIFFICULTY_BANDS.items():
            if orientation_type in values:
                return band
        return "intermediate"

    @staticmethod
    def evaluate_tolerance(deviation: float) -> str:
        """Name of the tightest tolerance zone containing *deviation* degrees."""
        for zone, limit in TOLERANCE_ZONES.items():
            if abs(deviation) <= limit:
                return zone
        return "incorrect"

    @staticmethod
    def orientation_stats() -> dict[str, int]:
        return {
            "orientations": len(PALM_ANGLES),
            "confusion_tiers": len(CONFUSION_TIERS),
            "named_rotations": len(NAMED_ROTATIONS),
            "tolerance_zones": len(TOLERANCE_ZONES),
        }

    def analyze(self, orientation: Parameter) -> ParameterAnalysis:
        issues: list[str] = []
        recommendations: list[str] = []
        accuracy = current_accuracy(orientation)
        orientation_type = orientation.get("type")
        angles = orientation.get("angles") or {}

        if accuracy < 0.5:
            issues.append("Low orientation accuracy")
            recommendations.append("Practise the reference palm orientations slowly")
        if any(abs(v) > 90 for v in angles.values()):
            issues.append("Extreme wrist rotation")
            recommendations.append("Reduce wrist rotation to a comfortable range")
        if orientation_type in (None, UNDEFINED_ORIENTATION):
            issues.append("Orientation is undefined")
            recommendations.append("Fix the palm orientation before moving")

        metrics: dict = {}
        if orientation_type in PALM_ANGLES and angles:
            x, y, z = PALM_ANGLES[orientation_type]
            deviation = angular_distance(angles, {"x": x, "y": y, "z": z})
            metrics["deviation"] = deviation
            metrics["tolerance"] = self.evaluate_tolerance(deviation)

        return ParameterAnalysis(
            category=self.category.value,
            value=orientation_type,
            accuracy=accuracy,
            difficulty=self.difficulty(orientation_type) if orientation_type else None,
            issues=issues,
            recommendations=recommendations,
            metrics=metrics,
        )
