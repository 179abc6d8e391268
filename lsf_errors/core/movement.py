"""Hand movement transformer.

Movement parameters look like::

    {
        "type": "linear",
        "amplitude": 0.5,          # 0..1
        "distance": 0.3,           # metres
        "direction": {"deviation": 0},
        "repetitions": 1,
        "accuracy": 1.0,
    }
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

AMPLITUDE_BANDS: dict[str, tuple[float, float]] = {
    "micro": (0.01, 0.05),
    "small": (0.05, 0.15),
    "medium": (0.15, 0.35),
    "large": (0.35, 0.65),
    "macro": (0.65, 1.0),
}

SPEED_MULTIPLIERS: dict[str, float] = {
    "very_slow": 0.3,
    "slow": 0.6,
    "normal": 1.0,
    "fast": 1.5,
    "very_fast": 2.5,
}

FLUIDITY_LEVELS: dict[str, float] = {
    "jerky": 0.2,
    "hesitant": 0.4,
    "smooth": 0.8,
    "flowing": 1.0,
}

DIFFICULTY_BANDS: dict[str, list[str]] = {
    "beginner": ["linear", "simple_arc", "single_direction"],
    "intermediate": ["circular", "diagonal", "repeated_patterns"],
    "advanced": ["complex_trajectory", "multi_directional", "coordinated_sequences"],
}

CONFUSABLE_MOVEMENTS: dict[str, list[str]] = {
    "linear": ["simple_arc", "diagonal"],
    "simple_arc": ["linear", "circular"],
    "circular": ["simple_arc"],
    "diagonal": ["linear"],
    "single_direction": ["multi_directional"],
    "repeated_patterns": ["single_direction"],
}

NAMED_DEVIATIONS: dict[str, float] = {
    "slight_left": -15,
    "slight_right": 15,
    "left": -45,
    "right": 45,
    "sharp_left": -90,
    "sharp_right": 90,
    "reverse": 180,
}

MAX_REPETITIONS = 10
SUBSTITUTION_PENALTY = 0.35
AMPLITUDE_PENALTY = 0.3
DIRECTION_PENALTY = 0.35
REPETITION_PENALTY = 0.25
OMISSION_PENALTY = 0.8
FALLBACK_PENALTY = 0.3


class MovementTransformer:
    """Simulates movement execution mistakes."""

    category = ErrorCategory.MOVEMENT

    def __init__(self, entry: ErrorCatalogEntry, rng: random.Random | None = None):
        self.entry = entry
        self.rng = rng or random.Random()

    def get_target_parameter(self, content: Content) -> Parameter | None:
        return get_parameter(content, "movement")

    def apply_transformation(self, content: Content, transform: Transformation) -> None:
        movement = self.get_target_parameter(content)
        if movement is None:
            logger.warning("No movement parameter found in content")
            return

        kind = transform.type
        factor = getattr(transform, "factor", None)

        if kind == TransformationType.SUBSTITUTION and isinstance(transform, SubstitutionTransformation):
            self._apply_substitution(movement, transform)
        elif isinstance(transform, RotationTransformation):
            self._apply_direction(movement, transform)
        elif kind == TransformationType.OMISSION:
            self._apply_omission(movement)
        elif isinstance(transform, FactorTransformation) and kind in self._factor_handlers:
            if factor is not None:
                self._factor_handlers[kind](self, movement, factor)
        else:
            logger.warning("Unsupported movement transformation '%s'", kind.value)
            reduce_accuracy(movement, FALLBACK_PENALTY, "movement")

    def apply_default_transformation(self, content: Content) -> None:
        movement = self.get_target_parameter(content)
        if movement is None:
            logger.warning("No movement parameter found for default transformation")
            return
        reduce_accuracy(movement, self.entry.default_transformation.severity, "movement")

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------

    def _apply_substitution(self, movement: Parameter, transform: SubstitutionTransformation) -> None:
        original = movement.get("type")
        if transform.from_value and transform.to_value and original == transform.from_value:
            movement["type"] = transform.to_value
        elif original:
            candidates = [c for c in CONFUSABLE_MOVEMENTS.get(original, []) if c != original]
            if not candidates:
                candidates = [m for m in DIFFICULTY_BANDS["beginner"] if m != original]
            movement["type"] = self.rng.choice(candidates)
        logger.debug("Movement substituted: %s -> %s", original, movement.get("type"))
        reduce_accuracy(movement, SUBSTITUTION_PENALTY, "movement")

    def _apply_amplitude(self, movement: Parameter, factor: float) -> None:
        self._scale_extent(movement, factor)
        reduce_accuracy(movement, AMPLITUDE_PENALTY, "movement")

    def _apply_direction(self, movement: Parameter, transform: RotationTransformation) -> None:
        direction = movement.setdefault("direction", {"deviation": 0})
        delta = 0.0
        if transform.degrees is not None:
            delta = transform.degrees
        elif transform.rotation:
            delta = NAMED_DEVIATIONS.get(transform.rotation, 0.0)
        if delta:
            before = direction.get("deviation", 0)
            direction["deviation"] = normalize_angle(before + delta)
            logger.debug("Movement deviation: %s -> %s", before, direction["deviation"])
        reduce_accuracy(movement, DIRECTION_PENALTY, "movement")

    def _apply_repetition(self, movement: Parameter, factor: float) -> None:
        if movement.get("repetitions") is not None:
            repetitions = round(movement["repetitions"] * factor)
            movement["repetitions"] = max(0, min(MAX_REPETITIONS, repetitions))
        reduce_accuracy(movement, REPETITION_PENALTY, "movement")

    def _apply_intensity(self, movement: Parameter, factor: float) -> None:
        self._scale_extent(movement, factor)
        reduce_accuracy(movement, min(0.5, abs(1 - factor) * 0.5), "movement")

    def _apply_omission(self, movement: Parameter) -> None:
        movement["amplitude"] = (movement.get("amplitude") or 1) * 0.1
        movement["distance"] = (movement.get("distance") or 1) * 0.1
        reduce_accuracy(movement, OMISSION_PENALTY, "movement")
        logger.debug("Movement omitted: amplitude and distance collapsed")

    def _apply_fluidity(self, movement: Parameter, factor: float) -> None:
        loss = max(0.0, 1 - factor)
        direction = movement.get("direction")
        if direction is not None:
            # Jerky execution shows up as a small drift of the trajectory
            direction["deviation"] = normalize_angle(direction.get("deviation", 0) + loss * 5)
        reduce_accuracy(movement, loss * 0.4, "movement")

    def _apply_acceleration(self, movement: Parameter, factor: float) -> None:
        if movement.get("amplitude") is not None:
            movement["amplitude"] = min(1.0, movement["amplitude"] * (1 + (factor - 1) * 0.5))
        reduce_accuracy(movement, abs(factor - 1) * 0.3, "movement")

    def _apply_deceleration(self, movement: Parameter, factor: float) -> None:
        if movement.get("amplitude") is not None:
            movement["amplitude"] = max(0.0, min(1.0, movement["amplitude"] * factor))
        if movement.get("distance") is not None:
            movement["distance"] = max(0.0, movement["distance"] * factor)
        reduce_accuracy(movement, max(0.0, (1 - factor) * 0.4), "movement")

    @staticmethod
    def _scale_extent(movement: Parameter, factor: float) -> None:
        if movement.get("amplitude") is not None:
            movement["amplitude"] = max(0.0, min(1.0, movement["amplitude"] * factor))
        if movement.get("distance") is not None:
            movement["distance"] = max(0.0, movement["distance"] * factor)

    _factor_handlers = {
        TransformationType.AMPLITUDE: _apply_amplitude,
        TransformationType.REPETITION: _apply_repetition,
        TransformationType.INTENSITY: _apply_intensity,
        TransformationType.FLUIDITY: _apply_fluidity,
        TransformationType.ACCELERATION: _apply_acceleration,
        TransformationType.DECELERATION: _apply_deceleration,
    }

    # ------------------------------------------------------------------
    # Analysis (read-only)
    # ------------------------------------------------------------------

    @staticmethod
    def difficulty(movement_type: str) -> str:
        for band, values in DIFFICULTY_BANDS.items():
            if movement_type in values:
                return band
        return "intermediate"

    @staticmethod
    def amplitude_band(amplitude: float) -> str:
        for band, (low, high) in AMPLITUDE_BANDS.items():
            if low <= amplitude <= high:
                return band
        return "micro" if amplitude < AMPLITUDE_BANDS["micro"][0] else "macro"

    @staticmethod
    def complexity(movement: Parameter) -> str:
        score = 0
        if (movement.get("repetitions") or 0) > 1:
            score += 1
        if (movement.get("direction") or {}).get("deviation", 0) != 0:
            score += 1
        if (movement.get("amplitude") or 0) > 0.7:
            score += 1
        if (movement.get("distance") or 0) > 0.5:
            score += 1
        if score <= 1:
            return "simple"
        if score <= 2:
            return "moderate"
        return "complex"

    @staticmethod
    def is_feasible(movement: Parameter) -> bool:
        amplitude = movement.get("amplitude")
        if amplitude is not None and not 0 <= amplitude <= 1:
            return False
        distance = movement.get("distance")
        if distance is not None and distance < 0:
            return False
        repetitions = movement.get("repetitions")
        if repetitions is not None and not 0 <= repetitions <= 20:
            return False
        return True

    @staticmethod
    def magnitude(movement: Parameter) -> float:
        amplitude = movement.get("amplitude") or 0
        distance = movement.get("distance") or 0
        return math.sqrt(amplitude * amplitude + distance * distance)

    def analyze(self, movement: Parameter) -> ParameterAnalysis:
        issues: list[str] = []
        recommendations: list[str] = []
        accuracy = current_accuracy(movement)
        deviation = (movement.get("direction") or {}).get("deviation", 0)

        if abs(deviation) > 45:
            issues.append("Strong deviation from the expected direction")
            recommendations.append("Trace the movement path slowly before speeding up")
        if accuracy < 0.5:
            issues.append("Low movement accuracy")
            recommendations.append("Break the movement into simpler segments")
        if not self.is_feasible(movement):
            issues.append("Movement values are outside a feasible range")

        movement_type = movement.get("type")
        return ParameterAnalysis(
            category=self.category.value,
            value=movement_type,
            accuracy=accuracy,
            difficulty=self.difficulty(movement_type) if movement_type else None,
            issues=issues,
            recommendations=recommendations,
            metrics={
                "complexity": self.complexity(movement),
                "magnitude": round(self.magnitude(movement), 3),
                "feasible": self.is_feasible(movement),
            },
        )
