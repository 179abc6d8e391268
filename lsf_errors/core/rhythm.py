"""Rhythm and timing transformer.

Timing parameters look like::

    {
        "speed": 1.0,           # multiplier, 1.0 = natural pace
        "duration": 0.8,        # seconds
        "fluidity": 0.9,        # 0..1
        "inappropriate_pauses": False,
        "hesitations": False,
        "accuracy": 1.0,
    }

Pause and hesitation patterns are drawn at random from static tables; pass a
seeded ``random.Random`` to get reproducible output.
"""

import logging
import random
from dataclasses import dataclass

from lsf_errors.core.accuracy import (
    Content,
    Parameter,
    current_accuracy,
    get_parameter,
    reduce_accuracy,
)
from lsf_errors.models.catalog import (
    DesynchronizationTransformation,
    ErrorCatalogEntry,
    ErrorCategory,
    Transformation,
    TransformationType,
)
from lsf_errors.models.reports import ContextCompatibility, RhythmAnalysis

logger = logging.getLogger(__name__)

PENALTY_FACTORS: dict[str, float] = {
    "default": 0.25,
    "speed": 0.3,
    "pause": 0.4,
    "hesitation": 0.5,
    "fluidity": 0.4,
    "intensity": 0.3,
    "desynchronization": 0.6,
    "omission": 0.8,
}

MIN_SPEED = 0.1
MAX_SPEED = 3.0


@dataclass(frozen=True)
class PausePattern:
    name: str
    duration: float
    accuracy_impact: float
    fluidity_impact: float


@dataclass(frozen=True)
class HesitationPattern:
    name: str
    speed_reduction: float
    fluidity_multiplier: float
    accuracy_impact: float


PAUSE_PATTERNS: tuple[PausePattern, ...] = (
    PausePattern("mid_sign", 0.4, 0.15, 0.2),
    PausePattern("within_compound", 0.3, 0.2, 0.25),
    PausePattern("before_verb", 0.5, 0.12, 0.15),
    PausePattern("long_between_constituents", 0.8, 0.1, 0.15),
)

HESITATION_PATTERNS: tuple[HesitationPattern, ...] = (
    HesitationPattern("hold", 0.8, 0.7, 0.2),
    HesitationPattern("restart", 0.7, 0.6, 0.3),
    HesitationPattern("false_start", 0.6, 0.5, 0.35),
)

# (level, upper value); a fluidity matches the first level it does not exceed by 0.1
FLUIDITY_LEVELS: tuple[tuple[str, float], ...] = (
    ("choppy", 0.2),
    ("hesitant", 0.4),
    ("moderate", 0.6),
    ("fluid", 0.8),
)

CONTEXT_REQUIREMENTS: dict[str, dict] = {
    "conversational": {"ideal_speed": (0.8, 1.2), "min_fluidity": 0.7, "description": "relaxed conversation"},
    "formal": {"ideal_speed": (0.6, 1.0), "min_fluidity": 0.8, "description": "formal presentation"},
    "artistic": {"ideal_speed": (0.4, 1.8), "min_fluidity": 0.9, "description": "artistic expression"},
    "pedagogical": {"ideal_speed": (0.5, 0.8), "min_fluidity": 0.6, "description": "teaching"},
    "emergency": {"ideal_speed": (1.2, 2.0), "min_fluidity": 0.5, "description": "emergency"},
}


def classify_tempo(speed: float) -> str:
    if speed <= 0.4:
        return "very_slow"
    if speed <= 0.7:
        return "slow"
    if speed <= 1.3:
        return "moderate"
    if speed <= 1.7:
        return "fast"
    return "very_fast"


def fluidity_level(fluidity: float) -> str:
    for level, value in FLUIDITY_LEVELS:
        if fluidity <= value + 0.1:
            return level
    return "expert"


def speed_severity(speed: float) -> str:
    """How much a signing speed hampers communication: low, medium or high."""
    if speed <= 0.3 or speed >= 2.0:
        return "high"
    if speed <= 0.6 or speed >= 1.5:
        return "medium"
    return "low"


class RhythmTransformer:
    """Simulates tempo, pause and fluidity mistakes."""

    category = ErrorCategory.RHYTHM

    def __init__(self, entry: ErrorCatalogEntry, rng: random.Random | None = None):
        self.entry = entry
        self.rng = rng or random.Random()

    def get_target_parameter(self, content: Content) -> Parameter | None:
        return get_parameter(content, "timing")

    def apply_transformation(self, content: Content, transform: Transformation) -> None:
        timing = self.get_target_parameter(content)
        if timing is None:
            logger.warning("No timing parameter found in content")
            return

        kind = transform.type
        factor = getattr(transform, "factor", None)

        if kind in (TransformationType.ACCELERATION, TransformationType.DECELERATION, TransformationType.SPEED):
            if factor is not None:
                self._apply_speed(timing, factor)
        elif kind == TransformationType.PAUSE:
            self._apply_pause(timing, 0.5 if factor is None else factor)
        elif kind == TransformationType.HESITATION:
            self._apply_hesitation(timing, 1.0 if factor is None else factor)
        elif kind == TransformationType.FLUIDITY:
            if factor is not None:
                self._apply_fluidity(timing, factor)
        elif kind == TransformationType.INTENSITY:
            if factor is not None:
                self._apply_intensity(timing, factor)
        elif isinstance(transform, DesynchronizationTransformation):
            if transform.offset is not None:
                self._apply_desynchronization(timing, transform.offset)
        elif kind == TransformationType.OMISSION:
            self._apply_omission(timing)
        else:
            logger.warning("Unsupported rhythm transformation '%s'", kind.value)
            reduce_accuracy(timing, PENALTY_FACTORS["default"], "timing")

    def apply_default_transformation(self, content: Content) -> None:
        timing = self.get_target_parameter(content)
        if timing is None:
            logger.warning("No timing parameter found for default transformation")
            return
        reduce_accuracy(timing, self.entry.default_transformation.severity, "timing")

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------

    def _apply_speed(self, timing: Parameter, factor: float) -> None:
        if factor <= 0:
            logger.warning("Ignoring non-positive speed factor %s", factor)
            return
        drift = abs(1 - factor)
        if timing.get("speed") is not None:
            timing["speed"] = max(MIN_SPEED, min(MAX_SPEED, timing["speed"] * factor))
        if timing.get("duration") is not None:
            timing["duration"] = max(0.1, timing["duration"] / factor)
        if timing.get("fluidity") is not None:
            timing["fluidity"] = max(0.0, min(1.0, timing["fluidity"] - min(0.3, drift * 0.3)))
        logger.debug("Speed changed by factor %s", factor)
        reduce_accuracy(timing, min(0.5, drift * PENALTY_FACTORS["speed"]), "timing")

    def _apply_pause(self, timing: Parameter, severity: float) -> None:
        pattern = self.rng.choice(PAUSE_PATTERNS)
        timing["inappropriate_pauses"] = True
        if timing.get("fluidity") is not None:
            timing["fluidity"] = max(0.1, timing["fluidity"] - pattern.fluidity_impact)
        logger.debug("Inappropriate pause added: %s (%.1fs)", pattern.name, pattern.duration)
        reduce_accuracy(timing, pattern.accuracy_impact * (1 + severity), "timing")

    def _apply_hesitation(self, timing: Parameter, intensity: float) -> None:
        pattern = self.rng.choice(HESITATION_PATTERNS)
        timing["hesitations"] = True
        if timing.get("speed") is not None:
            timing["speed"] *= max(0.1, pattern.speed_reduction * intensity)
        if timing.get("fluidity") is not None:
            timing["fluidity"] = max(0.1, timing["fluidity"] * pattern.fluidity_multiplier * min(1, intensity))
        logger.debug("Hesitation added: %s", pattern.name)
        reduce_accuracy(timing, pattern.accuracy_impact * intensity, "timing")

    def _apply_fluidity(self, timing: Parameter, factor: float) -> None:
        fluidity = max(0.0, min(1.0, timing.get("fluidity", 1.0) * factor))
        timing["fluidity"] = fluidity
        level = fluidity_level(fluidity)
        if level == "choppy" and timing.get("speed") is not None:
            timing["speed"] *= 0.8
        if level == "hesitant":
            timing["hesitations"] = True
        reduce_accuracy(timing, max(0.0, 1 - factor) * PENALTY_FACTORS["fluidity"], "timing")

    def _apply_intensity(self, timing: Parameter, factor: float) -> None:
        if timing.get("speed") is not None:
            timing["speed"] = max(MIN_SPEED, timing["speed"] * (1 + (factor - 1) * 0.5))
        if timing.get("fluidity") is not None and factor > 1.2:
            timing["fluidity"] = max(0.2, timing["fluidity"] - (factor - 1.2) * 0.3)
        reduce_accuracy(timing, abs(factor - 1) * PENALTY_FACTORS["intensity"], "timing")

    def _apply_desynchronization(self, timing: Parameter, offset: float) -> None:
        severity = abs(offset)
        if timing.get("fluidity") is not None:
            timing["fluidity"] = max(0.1, timing["fluidity"] - min(0.5, severity / 1000))
        logger.debug("Desynchronization applied: %sms", offset)
        reduce_accuracy(timing, min(0.7, severity / 500), "timing")

    def _apply_omission(self, timing: Parameter) -> None:
        timing["inappropriate_pauses"] = True
        timing["hesitations"] = True
        if timing.get("speed") is not None:
            timing["speed"] *= 0.6
        if timing.get("fluidity") is not None:
            timing["fluidity"] *= 0.3
        if timing.get("duration") is not None:
            timing["duration"] *= 1.4
        reduce_accuracy(timing, PENALTY_FACTORS["omission"], "timing")

    # ------------------------------------------------------------------
    # Analysis (read-only)
    # ------------------------------------------------------------------

    def analyze(self, timing: Parameter) -> RhythmAnalysis:
        issues: list[str] = []
        recommendations: list[str] = []
        speed = timing.get("speed", 1.0)
        fluidity = timing.get("fluidity", 1.0)
        accuracy = current_accuracy(timing)

        if speed_severity(speed) == "high":
            issues.append("Speed too high" if speed > 1.5 else "Speed too low")
            recommendations.append("Move towards a steadier, natural pace")
        level = fluidity_level(fluidity)
        if level in ("choppy", "hesitant"):
            issues.append(f"Insufficient fluidity ({level})")
            recommendations.append("Work on continuity between signs")
        if timing.get("inappropriate_pauses"):
            issues.append("Inappropriate pauses")
            recommendations.append("Place pauses at constituent boundaries")
        if timing.get("hesitations"):
            issues.append("Frequent hesitations")
            recommendations.append("Consolidate vocabulary to sign without searching")

        overall = speed * 0.3 + fluidity * 0.4 + accuracy * 0.3
        if overall >= 0.9:
            diagnosis = "Excellent rhythmic control"
        elif overall >= 0.7:
            diagnosis = "Good rhythmic control, minor adjustments possible"
        elif overall >= 0.5:
            diagnosis = "Moderate rhythmic control, fluidity work recommended"
        else:
            diagnosis = "Significant rhythm difficulties, guided practice needed"

        return RhythmAnalysis(
            overall_score=overall,
            tempo=classify_tempo(speed),
            fluidity_level=level,
            issues=issues,
            recommendations=recommendations,
            metrics={
                "speed": speed,
                "fluidity": fluidity,
                "accuracy": accuracy,
                "duration": timing.get("duration"),
            },
            diagnosis=diagnosis,
        )

    @staticmethod
    def suggest_exercises(timing: Parameter) -> list[str]:
        exercises: list[str] = []
        if timing.get("fluidity") is not None and timing["fluidity"] < 0.6:
            exercises.append("Continuity drills with a metronome")
        if timing.get("speed") is not None and (timing["speed"] < 0.5 or timing["speed"] > 1.8):
            exercises.append("Tempo control with progressive speed changes")
        if timing.get("inappropriate_pauses"):
            exercises.append("Study of LSF clause structure and pause placement")
        if timing.get("hesitations"):
            exercises.append("Active vocabulary reinforcement")
        if not exercises:
            exercises.append("Keep up regular practice and explore expressive variation")
        return exercises

    @staticmethod
    def evaluate_context_compatibility(timing: Parameter, context: str = "conversational") -> ContextCompatibility:
        speed = timing.get("speed", 1.0)
        fluidity = timing.get("fluidity", 1.0)
        requirement = CONTEXT_REQUIREMENTS.get(context, CONTEXT_REQUIREMENTS["conversational"])
        low, high = requirement["ideal_speed"]

        if low <= speed <= high:
            speed_fit = 1.0
        else:
            speed_fit = max(0.0, 1 - abs(speed - (low + high) / 2) * 0.5)
        min_fluidity = requirement["min_fluidity"]
        fluidity_fit = 1.0 if fluidity >= min_fluidity else fluidity / min_fluidity
        overall = speed_fit * 0.6 + fluidity_fit * 0.4

        if overall >= 0.9:
            appropriateness = "perfectly suited"
        elif overall >= 0.7:
            appropriateness = "well suited"
        elif overall >= 0.5:
            appropriateness = "partially suited"
        else:
            appropriateness = "poorly suited"

        suggestions: list[str] = []
        if speed_fit < 0.8:
            verb = "Speed up" if speed < low else "Slow down"
            suggestions.append(f"{verb} for {requirement['description']}")
        if fluidity_fit < 0.8:
            suggestions.append(f"Improve fluidity for {requirement['description']}")

        return ContextCompatibility(
            compatibility=overall,
            appropriateness=appropriateness,
            suggestions=suggestions,
        )
