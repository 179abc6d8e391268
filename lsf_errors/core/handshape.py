"""Hand configuration (handshape) transformer."""

import logging
import random

from lsf_errors.core.accuracy import Content, Parameter, get_parameter, reduce_accuracy
from lsf_errors.models.catalog import (
    ErrorCatalogEntry,
    ErrorCategory,
    FactorTransformation,
    SubstitutionTransformation,
    Transformation,
    TransformationType,
)

logger = logging.getLogger(__name__)

UNDEFINED_HANDSHAPE = "indefinie"

BASIC_HANDSHAPES = ["main_plate", "poing", "index", "ok", "victoire"]

CONFUSABLE_HANDSHAPES: dict[str, list[str]] = {
    "index": ["majeur", "auriculaire"],
    "ok": ["pince", "c"],
    "victoire": ["corne", "y"],
    "main_plate": ["b", "four"],
    "poing": ["a", "s"],
}

DIFFICULTY_BANDS: dict[str, list[str]] = {
    "beginner": ["main_plate", "poing", "index", "ok"],
    "intermediate": ["victoire", "corne", "y", "c", "pince"],
    "advanced": ["w", "q", "x", "z", "classificateur"],
}

ALL_HANDSHAPES = {
    *BASIC_HANDSHAPES,
    *(h for values in CONFUSABLE_HANDSHAPES.values() for h in values),
    *(h for values in DIFFICULTY_BANDS.values() for h in values),
}

DIRECT_SUBSTITUTION_PENALTY = 0.5
SUBSTITUTION_EXTRA_PENALTY = 0.4
OMISSION_PENALTY = 0.7
FALLBACK_PENALTY = 0.3


class HandConfigurationTransformer:
    """Simulates handshape confusions."""

    category = ErrorCategory.HAND_CONFIGURATION

    def __init__(self, entry: ErrorCatalogEntry, rng: random.Random | None = None):
        self.entry = entry
        self.rng = rng or random.Random()

    def get_target_parameter(self, content: Content) -> Parameter | None:
        return get_parameter(content, "handshape")

    def apply_transformation(self, content: Content, transform: Transformation) -> None:
        handshape = self.get_target_parameter(content)
        if handshape is None:
            logger.warning("No handshape parameter found in content")
            return

        kind = transform.type
        if kind == TransformationType.SUBSTITUTION and isinstance(transform, SubstitutionTransformation):
            self._apply_substitution(handshape, transform)
        elif kind == TransformationType.INTENSITY and isinstance(transform, FactorTransformation):
            if transform.factor is not None:
                reduce_accuracy(handshape, abs(1 - transform.factor), "handshape")
        elif kind == TransformationType.OMISSION:
            handshape["type"] = UNDEFINED_HANDSHAPE
            reduce_accuracy(handshape, OMISSION_PENALTY, "handshape")
        else:
            logger.warning("Unsupported handshape transformation '%s'", kind.value)
            reduce_accuracy(handshape, FALLBACK_PENALTY, "handshape")

    def apply_default_transformation(self, content: Content) -> None:
        handshape = self.get_target_parameter(content)
        if handshape is None:
            logger.warning("No handshape parameter found for default transformation")
            return
        reduce_accuracy(handshape, self.entry.default_transformation.severity, "handshape")

    def _apply_substitution(self, handshape: Parameter, transform: SubstitutionTransformation) -> None:
        original = handshape.get("type")
        if transform.from_value and transform.to_value and original == transform.from_value:
            self._substitute(handshape, transform.to_value)
        elif original:
            candidates = CONFUSABLE_HANDSHAPES.get(original)
            if candidates:
                self._substitute(handshape, self.rng.choice(candidates))
            else:
                options = [h for h in BASIC_HANDSHAPES if h != original]
                self._substitute(handshape, self.rng.choice(options))
        reduce_accuracy(handshape, SUBSTITUTION_EXTRA_PENALTY, "handshape")

    def _substitute(self, handshape: Parameter, new_type: str) -> None:
        logger.debug("Handshape substituted: %s -> %s", handshape.get("type"), new_type)
        handshape["type"] = new_type
        reduce_accuracy(handshape, DIRECT_SUBSTITUTION_PENALTY, "handshape")

    @staticmethod
    def difficulty(handshape_type: str) -> str:
        for band, values in DIFFICULTY_BANDS.items():
            if handshape_type in values:
                return band
        return "intermediate"

    @staticmethod
    def is_valid(handshape_type: str) -> bool:
        return handshape_type == UNDEFINED_HANDSHAPE or handshape_type in ALL_HANDSHAPES

    @staticmethod
    def configuration_stats() -> dict:
        return {
            "total_configurations": len(ALL_HANDSHAPES),
            "by_difficulty": {band: len(values) for band, values in DIFFICULTY_BANDS.items()},
            "confusable_pairs": len(CONFUSABLE_HANDSHAPES),
        }
