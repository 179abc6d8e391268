"""Facial expression (non-manual marker) transformer.

Facial expression parameters look like::

    {
        "expression": "interrogative_partial",
        "intensity": 0.8,
        "active": True,
        "timing_offset": 0,      # ms relative to the manual sign
        "accuracy": 1.0,
    }

Many expressions carry grammar (questions, negation, conditionals), so
dropping one is penalised harder than any manual error.
"""

import logging
import random

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
    FactorTransformation,
    SubstitutionTransformation,
    Transformation,
    TransformationType,
)
from lsf_errors.models.reports import ParameterAnalysis

logger = logging.getLogger(__name__)

NEUTRAL_EXPRESSION = "neutral"

GRAMMATICAL_EXPRESSIONS = {
    "interrogative_partial",
    "interrogative_total",
    "negation",
    "affirmation",
    "conditional",
}

CONFUSION_TIERS: list[dict[str, list[str]]] = [
    {
        "interrogative_partial": ["interrogative_total"],
        "interrogative_total": ["interrogative_partial"],
        "doubt": ["interrogative_total"],
        "surprise": ["intensifier"],
    },
    {
        "negation": ["doubt"],
        "affirmation": ["intensifier"],
        "conditional": ["interrogative_total"],
        "intensifier": ["surprise"],
    },
    {
        "negation": ["affirmation"],
        "affirmation": ["negation"],
        "conditional": ["neutral"],
    },
]

DIFFICULTY_BANDS: dict[str, list[str]] = {
    "beginner": ["affirmation", "negation", "surprise", "neutral"],
    "intermediate": ["interrogative_total", "interrogative_partial", "intensifier"],
    "advanced": ["conditional", "doubt"],
}

SUBSTITUTION_PENALTY = 0.45
OMISSION_PENALTY = 0.9
FALLBACK_PENALTY = 0.25


def _number(facial: Parameter, key: str, default: float) -> float:
    """Numeric field of *facial*; missing, null or non-numeric values read as *default*."""
    value = facial.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


def confusable_expressions(expression: str) -> list[str]:
    for tier in CONFUSION_TIERS:
        candidates = [c for c in tier.get(expression, []) if c != expression]
        if candidates:
            return candidates
    return []


class FacialExpressionTransformer:
    """Simulates missing, weak, wrong or mistimed facial expressions."""

    category = ErrorCategory.FACIAL_EXPRESSION

    def __init__(self, entry: ErrorCatalogEntry, rng: random.Random | None = None):
        self.entry = entry
        self.rng = rng or random.Random()

    def get_target_parameter(self, content: Content) -> Parameter | None:
        return get_parameter(content, "facial_expression")

    def apply_transformation(self, content: Content, transform: Transformation) -> None:
        facial = self.get_target_parameter(content)
        if facial is None:
            logger.warning("No facial expression parameter found in content")
            return

        kind = transform.type
        if kind == TransformationType.SUBSTITUTION and isinstance(transform, SubstitutionTransformation):
            self._apply_substitution(facial, transform)
        elif kind == TransformationType.INTENSITY and isinstance(transform, FactorTransformation):
            if transform.factor is not None:
                self._apply_intensity(facial, transform.factor)
        elif kind == TransformationType.OMISSION:
            self._apply_omission(facial)
        elif isinstance(transform, DesynchronizationTransformation):
            if transform.offset is not None:
                self._apply_desynchronization(facial, transform.offset)
        else:
            logger.warning("Unsupported facial expression transformation '%s'", kind.value)
            reduce_accuracy(facial, FALLBACK_PENALTY, "facial expression")

    def apply_default_transformation(self, content: Content) -> None:
        facial = self.get_target_parameter(content)
        if facial is None:
            logger.warning("No facial expression parameter found for default transformation")
            return
        reduce_accuracy(facial, self.entry.default_transformation.severity, "facial expression")

    def _apply_substitution(self, facial: Parameter, transform: SubstitutionTransformation) -> None:
        original = facial.get("expression")
        if transform.from_value and transform.to_value and original == transform.from_value:
            facial["expression"] = transform.to_value
        elif original:
            candidates = confusable_expressions(original)
            if not candidates:
                band = self.difficulty(original)
                candidates = [e for e in DIFFICULTY_BANDS[band] if e != original]
            facial["expression"] = self.rng.choice(candidates)
        logger.debug("Facial expression substituted: %s -> %s", original, facial.get("expression"))
        reduce_accuracy(facial, SUBSTITUTION_PENALTY, "facial expression")

    def _apply_intensity(self, facial: Parameter, factor: float) -> None:
        intensity = _number(facial, "intensity", 1.0)
        facial["intensity"] = max(0.0, min(1.0, intensity * factor))
        reduce_accuracy(facial, min(0.6, abs(1 - factor) * 0.6), "facial expression")

    def _apply_omission(self, facial: Parameter) -> None:
        facial["active"] = False
        facial["expression"] = NEUTRAL_EXPRESSION
        facial["intensity"] = 0.0
        reduce_accuracy(facial, OMISSION_PENALTY, "facial expression")
        logger.debug("Facial expression omitted")

    def _apply_desynchronization(self, facial: Parameter, offset: float) -> None:
        facial["timing_offset"] = _number(facial, "timing_offset", 0) + offset
        reduce_accuracy(facial, min(0.6, abs(offset) / 500), "facial expression")
        logger.debug("Facial expression shifted by %sms", offset)

    @staticmethod
    def difficulty(expression: str) -> str:
        for band, values in DIFFICULTY_BANDS.items():
            if expression in values:
                return band
        return "beginner"

    def analyze(self, facial: Parameter) -> ParameterAnalysis:
        issues: list[str] = []
        recommendations: list[str] = []
        accuracy = current_accuracy(facial)
        expression = facial.get("expression")

        if facial.get("active") is False:
            issues.append("Facial expression missing")
            recommendations.append("Mark the sentence type with the face, not only the hands")
        if _number(facial, "intensity", 1.0) < 0.4 and expression in GRAMMATICAL_EXPRESSIONS:
            issues.append("Grammatical marker too weak to be perceived")
            recommendations.append("Exaggerate eyebrow and head movements while practising")
        if abs(_number(facial, "timing_offset", 0)) > 100:
            issues.append("Expression out of sync with the manual sign")
            recommendations.append("Start the expression together with the first sign of the clause")
        if accuracy < 0.5:
            issues.append("Low facial expression accuracy")

        return ParameterAnalysis(
            category=self.category.value,
            value=expression,
            accuracy=accuracy,
            difficulty=self.difficulty(expression) if expression else None,
            issues=issues,
            recommendations=recommendations,
            metrics={
                "grammatical": expression in GRAMMATICAL_EXPRESSIONS,
                "timing_offset": _number(facial, "timing_offset", 0),
            },
        )
