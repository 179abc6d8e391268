"""Proforme (classifier) transformer.

Classifier parameters look like::

    {"type": "cylindrical", "accuracy": 1.0}

A proforme stands for a class of objects by shape, size or the way it is
handled. Error flags (``inappropriate``, ``confusion``, ``oversimplified``,
``omission``, ``inconsistent_usage``) are added to the parameter as errors
are injected.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Literal

from lsf_errors.core.accuracy import (
    Content,
    Parameter,
    current_accuracy,
    get_parameter,
    reduce_accuracy,
)
from lsf_errors.models.catalog import (
    ErrorCatalogEntry,
    ErrorCategory,
    FactorTransformation,
    SubstitutionTransformation,
    Transformation,
    TransformationType,
)
from lsf_errors.models.reports import ParameterAnalysis

logger = logging.getLogger(__name__)

SubstitutionQuality = Literal["good", "acceptable", "poor", "invalid"]

CLASSIFIER_TYPES: dict[str, list[str]] = {
    "shape": ["flat_surface", "spherical", "cylindrical", "thin_object", "small_round"],
    "handling": ["holding_small", "holding_thin", "holding_large"],
    "entity": ["person_walking", "animal_moving", "vehicle"],
}

ALL_CLASSIFIERS = [name for names in CLASSIFIER_TYPES.values() for name in names]

DIFFICULTY_BANDS: dict[str, list[str]] = {
    "beginner": ["flat_surface", "spherical", "vehicle", "person_walking"],
    "intermediate": ["cylindrical", "thin_object", "small_round", "holding_small", "holding_thin"],
    "advanced": ["holding_large", "animal_moving"],
}

SPECIALIZED_CONTEXTS = ["manipulation", "spatial_description", "narrative_action", "movement"]


@dataclass(frozen=True)
class ClassifierConfusion:
    source: str
    target: str
    reason: str


PLAUSIBLE_CONFUSIONS = [
    ClassifierConfusion("cylindrical", "spherical", "round_shape"),
    ClassifierConfusion("flat_surface", "thin_object", "flat_object"),
    ClassifierConfusion("holding_small", "holding_thin", "handling"),
    ClassifierConfusion("person_walking", "animal_moving", "movement"),
]


@dataclass(frozen=True)
class ClassifierSuggestion:
    primary: str
    alternatives: list[str]
    reason: str
    difficulty: str


@dataclass(frozen=True)
class _ObjectClassifiers:
    primary: str
    alternatives: list[str]
    reason: str
    by_context: dict[str, str] = field(default_factory=dict)


OBJECT_CLASSIFIERS: dict[str, _ObjectClassifiers] = {
    "livre": _ObjectClassifiers(
        "flat_surface", ["thin_object"], "Flat rectangular object",
        {"manipulation": "holding_thin", "spatial_description": "flat_surface"},
    ),
    "balle": _ObjectClassifiers(
        "spherical", ["small_round"], "Spherical object",
        {"manipulation": "holding_large", "movement": "spherical"},
    ),
    "voiture": _ObjectClassifiers(
        "vehicle", [], "Moving vehicle",
        {"narrative_action": "vehicle", "spatial_description": "flat_surface"},
    ),
    "crayon": _ObjectClassifiers(
        "thin_object", ["holding_thin"], "Thin elongated object",
        {"manipulation": "holding_thin", "spatial_description": "thin_object"},
    ),
}

DEFAULT_OBJECT_CLASSIFIERS = _ObjectClassifiers("flat_surface", ["spherical"], "Default classifier")

# Accuracy cost of a substitution by how plausible the replacement is
QUALITY_IMPACT: dict[str, float] = {
    "good": 0.1,
    "acceptable": 0.3,
    "poor": 0.6,
    "invalid": 0.9,
}

REDUCTIONS: dict[TransformationType, float] = {
    TransformationType.INAPPROPRIATE_PROFORME: 0.5,
    TransformationType.PROFORME_CONFUSION: 0.4,
    TransformationType.EXCESSIVE_SIMPLIFICATION: 0.35,
    TransformationType.PROFORME_OMISSION: 0.6,
    TransformationType.INCONSISTENT_USAGE: 0.45,
    TransformationType.SUBSTITUTION: 0.4,
    TransformationType.INTENSITY: 0.3,
}
FALLBACK_PENALTY = 0.5

ERROR_FLAGS = [
    ("inappropriate", "Inappropriate classifier",
     "Classifier does not fit the object", "Choose the classifier from the object's shape"),
    ("confusion", "Classifier confusion",
     "Similar classifiers mixed up", "Contrast the features of the objects being described"),
    ("oversimplified", "Excessive simplification",
     "Classification lost its specificity", "Use a more precise classifier"),
    ("omission", "Classifier omission",
     "Classifier missing from the description", "Insert the classifiers the description needs"),
    ("inconsistent_usage", "Inconsistent usage",
     "Classifier changes for the same referent", "Keep the same classifier for a referent"),
]


def classifier_category(classifier: str | None) -> str | None:
    for category, names in CLASSIFIER_TYPES.items():
        if classifier in names:
            return category
    return None


def is_valid_classifier(classifier: str | None) -> bool:
    return classifier in ALL_CLASSIFIERS


def classifier_difficulty(classifier: str) -> str:
    for band, names in DIFFICULTY_BANDS.items():
        if classifier in names:
            return band
    return "intermediate"


def evaluate_substitution_quality(source: str, target: str) -> SubstitutionQuality:
    """How plausible it is to produce *target* when *source* was intended."""
    if source == target:
        return "good"
    source_category = classifier_category(source)
    target_category = classifier_category(target)
    if source_category is not None and source_category == target_category:
        return "acceptable"
    if source_category and target_category:
        return "poor"
    return "invalid"


def suggest_classifier(object_name: str, context: str = "general") -> ClassifierSuggestion:
    """Classifier a fluent signer would pick for *object_name* in *context*."""
    known = OBJECT_CLASSIFIERS.get(object_name.lower(), DEFAULT_OBJECT_CLASSIFIERS)
    primary = known.by_context.get(context, known.primary)
    return ClassifierSuggestion(
        primary=primary,
        alternatives=list(known.alternatives),
        reason=known.reason,
        difficulty=classifier_difficulty(primary),
    )


def classifier_stats() -> dict:
    return {
        "total_classifiers": len(ALL_CLASSIFIERS),
        "by_category": {category: len(names) for category, names in CLASSIFIER_TYPES.items()},
        "by_difficulty": {band: len(names) for band, names in DIFFICULTY_BANDS.items()},
        "common_mistakes": len(PLAUSIBLE_CONFUSIONS),
        "specialized_contexts": len(SPECIALIZED_CONTEXTS),
    }


class ProformeTransformer:
    """Simulates inappropriate, confused, simplified or missing classifiers."""

    category = ErrorCategory.PROFORME

    def __init__(self, entry: ErrorCatalogEntry, rng: random.Random | None = None):
        self.entry = entry
        self.rng = rng or random.Random()

    def get_target_parameter(self, content: Content) -> Parameter | None:
        return get_parameter(content, "classifiers")

    def apply_transformation(self, content: Content, transform: Transformation) -> None:
        classifiers = self.get_target_parameter(content)
        if classifiers is None:
            logger.warning("No classifiers parameter found in content")
            return

        kind = transform.type
        factor = getattr(transform, "factor", None)

        if kind == TransformationType.INAPPROPRIATE_PROFORME:
            self._apply_inappropriate(classifiers, getattr(transform, "to_value", None))
        elif kind == TransformationType.PROFORME_CONFUSION:
            self._apply_confusion(classifiers, transform)
        elif kind == TransformationType.EXCESSIVE_SIMPLIFICATION:
            self._flag(classifiers, "oversimplified", "simplification_level", factor, 0.7)
        elif kind == TransformationType.PROFORME_OMISSION:
            self._flag(classifiers, "omission", "omission_severity", factor, 0.8)
        elif kind == TransformationType.INCONSISTENT_USAGE:
            self._flag(classifiers, "inconsistent_usage", "inconsistency_level", factor, 0.6)
        elif kind == TransformationType.SUBSTITUTION and isinstance(transform, SubstitutionTransformation):
            self._apply_substitution(classifiers, transform)
        elif kind == TransformationType.INTENSITY and isinstance(transform, FactorTransformation):
            if factor is not None:
                reduce_accuracy(classifiers, (1 - factor) * REDUCTIONS[kind], "classifiers")
        else:
            logger.warning("Unsupported classifier transformation '%s'", kind.value)
            reduce_accuracy(classifiers, FALLBACK_PENALTY, "classifiers")
            return

        if kind in REDUCTIONS and kind not in (TransformationType.SUBSTITUTION, TransformationType.INTENSITY):
            reduce_accuracy(classifiers, REDUCTIONS[kind], "classifiers")

    def apply_default_transformation(self, content: Content) -> None:
        classifiers = self.get_target_parameter(content)
        if classifiers is None:
            logger.warning("No classifiers parameter found for default transformation")
            return
        reduce_accuracy(classifiers, self.entry.default_transformation.severity, "classifiers")

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------

    def _apply_inappropriate(self, classifiers: Parameter, target: str | None) -> None:
        classifiers["inappropriate"] = True
        original = classifiers.get("type")
        if is_valid_classifier(target):
            chosen = target
        else:
            chosen = self.select_inappropriate(original)
        classifiers["type"] = chosen
        logger.debug("Inappropriate classifier: %s -> %s", original, chosen)

    def _apply_confusion(self, classifiers: Parameter, transform: SubstitutionTransformation) -> None:
        classifiers["confusion"] = True
        original = classifiers.get("type")
        if transform.from_value and transform.to_value:
            if original == transform.from_value:
                classifiers["type"] = transform.to_value
        else:
            confusion = self.plausible_confusion(original)
            classifiers["type"] = confusion.target
            classifiers["confusion_reason"] = confusion.reason
        logger.debug("Classifier confusion: %s -> %s", original, classifiers.get("type"))

    def _apply_substitution(self, classifiers: Parameter, transform: SubstitutionTransformation) -> None:
        original = classifiers.get("type")
        if transform.from_value and transform.to_value:
            quality = evaluate_substitution_quality(transform.from_value, transform.to_value)
            if original == transform.from_value:
                classifiers["type"] = transform.to_value
            reduce_accuracy(classifiers, QUALITY_IMPACT[quality], "classifiers")
            logger.debug("Classifier substitution %s -> %s (%s)", transform.from_value, transform.to_value, quality)
            return

        options = [c for c in ALL_CLASSIFIERS if c != original]
        classifiers["type"] = self.rng.choice(options)
        logger.debug("Random classifier substitution: %s -> %s", original, classifiers["type"])
        reduce_accuracy(classifiers, REDUCTIONS[TransformationType.SUBSTITUTION], "classifiers")

    @staticmethod
    def _flag(
        classifiers: Parameter, flag: str, level_key: str, factor: float | None, default: float
    ) -> None:
        classifiers[flag] = True
        classifiers[level_key] = default if factor is None else factor

    def select_inappropriate(self, original: str | None) -> str:
        """A classifier from another category than *original* when it is known."""
        category = classifier_category(original)
        options = [c for c in ALL_CLASSIFIERS if classifier_category(c) != category] if category else []
        return self.rng.choice(options or [c for c in ALL_CLASSIFIERS if c != original])

    def plausible_confusion(self, original: str | None) -> ClassifierConfusion:
        for confusion in PLAUSIBLE_CONFUSIONS:
            if confusion.source == original:
                return confusion
        return self.rng.choice(PLAUSIBLE_CONFUSIONS)

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze(self, classifiers: Parameter) -> ParameterAnalysis:
        error_types: list[str] = []
        issues: list[str] = []
        recommendations: list[str] = []
        for flag, error_type, issue, recommendation in ERROR_FLAGS:
            if classifiers.get(flag):
                error_types.append(error_type)
                issues.append(issue)
                recommendations.append(recommendation)

        accuracy = current_accuracy(classifiers)
        if accuracy < 0.3:
            severity = "high"
        elif accuracy < 0.6:
            severity = "medium"
        else:
            severity = "low"

        classifier = classifiers.get("type")
        return ParameterAnalysis(
            category=self.category.value,
            value=classifier,
            accuracy=accuracy,
            difficulty=classifier_difficulty(classifier) if classifier else None,
            issues=issues,
            recommendations=recommendations,
            metrics={"error_types": error_types, "severity": severity},
        )
