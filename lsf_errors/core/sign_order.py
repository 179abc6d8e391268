"""Sign-order transformer operating on ``content["sequence"]``.

All mutations happen in place on the caller's list. After each attempt a
``SyntaxAnalysis`` report is stored under ``content["syntax_analysis"]``.
"""

import copy
import logging
import math
import random
from dataclasses import dataclass, field

from lsf_errors.core.syntax_analysis import (
    Sign,
    identify_roles,
    is_modifier,
    is_structurally_valid,
    is_subject,
    is_verb,
    move_to_front,
)
from lsf_errors.models.catalog import (
    ErrorCatalogEntry,
    ErrorCategory,
    Transformation,
    TransformationType,
    transformation_factor,
)
from lsf_errors.models.reports import SyntaxAnalysis

logger = logging.getLogger(__name__)

DEFAULT_SEVERITY = 0.5
DEFAULT_ACCURACY_PENALTY = 0.4

SUGGESTIONS: dict[str, list[str]] = {
    TransformationType.INVERSION.value: [
        "Check the expected LSF sign order",
        "Practise typical SOV structures",
    ],
    TransformationType.OMISSION.value: [
        "Identify the essential elements that are missing",
        "Make sure every clause is complete",
    ],
    TransformationType.FRENCH_STRUCTURE.value: [
        "Avoid calques of French word order",
        "Use authentic LSF syntactic structures",
    ],
}


@dataclass
class TransformationStats:
    total: int = 0
    successful: int = 0
    by_type: dict[str, int] = field(default_factory=dict)


class SignOrderTransformer:
    """Simulates word-order errors over a sequence of sign units."""

    category = ErrorCategory.SIGN_ORDER

    def __init__(self, entry: ErrorCatalogEntry, rng: random.Random | None = None):
        self.entry = entry
        self.rng = rng or random.Random()
        self.stats = TransformationStats()

    def get_target_parameter(self, content: dict) -> list[Sign] | None:
        """The sign sequence, if it has at least two well-formed units."""
        sequence = content.get("sequence")
        if not isinstance(sequence, list) or len(sequence) <= 1:
            return None
        if not all(isinstance(s, dict) and "id" in s for s in sequence):
            return None
        return sequence

    def apply_transformation(self, content: dict, transform: Transformation) -> None:
        sequence = self.get_target_parameter(content)
        if sequence is None:
            logger.warning("No valid sign sequence found in content")
            return

        kind = transform.type
        severity = transformation_factor(transform, DEFAULT_SEVERITY)
        original_order = [s["id"] for s in sequence]

        handler = self._handlers.get(kind)
        if handler is None:
            logger.warning("Unsupported sign-order transformation '%s'", kind.value)
            success = False
        else:
            success = handler(self, sequence, severity)

        if success:
            content["syntax_error"] = kind.value
            penalty = transformation_factor(transform, DEFAULT_ACCURACY_PENALTY)
            content["syntax_accuracy"] = max(0.0, content.get("syntax_accuracy", 1.0) - penalty)
            if kind == TransformationType.FRENCH_STRUCTURE:
                content["french_structure"] = True
        else:
            logger.info("Sign-order transformation '%s' left the sequence unchanged", kind.value)

        self._record(kind.value, success)
        content["syntax_analysis"] = self.build_analysis(
            content, original_order, kind.value, success
        ).model_dump()

    def apply_default_transformation(self, content: dict) -> None:
        if self.get_target_parameter(content) is None:
            logger.warning("No valid sign sequence found for default transformation")
            return
        severity = self.entry.default_transformation.severity
        content["syntax_accuracy"] = max(0.0, content.get("syntax_accuracy", 1.0) - severity)
        logger.debug("Syntax accuracy lowered by default to %s", content["syntax_accuracy"])

    # ------------------------------------------------------------------
    # Algorithms
    # ------------------------------------------------------------------

    def apply_intelligent_inversion(self, sequence: list[Sign], severity: float) -> bool:
        """Swap two positions without breaking structural validity."""
        if len(sequence) < 2:
            return False

        if severity >= 0.7:
            critical = [
                i for i, s in enumerate(sequence)
                if i in (0, len(sequence) - 1) or is_verb(s) or is_subject(s)
            ]
            first, second = critical[:2] if len(critical) >= 2 else (0, 1)
        else:
            first = self.rng.randrange(len(sequence) - 1)
            second = first + 1

        if not self._swap_keeps_validity(sequence, first, second):
            alternative = next(
                (i for i in range(len(sequence) - 1) if self._swap_keeps_validity(sequence, i, i + 1)),
                None,
            )
            if alternative is None:
                logger.debug("No inversion preserves a valid structure")
                return False
            first, second = alternative, alternative + 1

        sequence[first], sequence[second] = sequence[second], sequence[first]
        logger.debug("Inverted positions %d and %d", first, second)
        return True

    def apply_contextual_omission(self, sequence: list[Sign], severity: float) -> bool:
        """Drop interior modifiers, least redundant first; endpoints are never removed."""
        if len(sequence) < 3:
            return False

        eligible = [
            i for i in range(1, len(sequence) - 1)
            if is_modifier(sequence[i]) and not is_verb(sequence[i])
        ]
        if not eligible:
            return False

        count = math.ceil(len(eligible) * severity)
        if count <= 0:
            return False

        ranked = sorted(eligible, key=lambda i: self._omission_priority(sequence, i))
        for index in sorted(ranked[:count], reverse=True):
            del sequence[index]
        return True

    def apply_strategic_addition(self, sequence: list[Sign], severity: float) -> bool:
        if not sequence:
            return False

        additions = 2 if severity > 0.7 else 1
        for n in range(additions):
            source = self.rng.randrange(len(sequence))
            duplicate = copy.deepcopy(sequence[source])
            duplicate["id"] = f"{duplicate['id']}_added_{len(sequence)}_{n}"
            if severity > 0.5:
                position = self.rng.randrange(len(sequence) + 1)
            else:
                position = source + 1
            sequence.insert(position, duplicate)
        return True

    def apply_realistic_repetition(self, sequence: list[Sign], severity: float) -> bool:
        if not sequence:
            return False

        source = 0 if severity > 0.7 else self.rng.randrange(len(sequence))
        template = sequence[source]
        repetitions = max(1, math.floor(severity * 3))
        for i in range(repetitions):
            clone = copy.deepcopy(template)
            clone["id"] = f"{template['id']}_repeat_{i + 1}"
            sequence.insert(source + i + 1, clone)
        return True

    def apply_french_interference(self, sequence: list[Sign], severity: float) -> bool:
        """Pull subject, verb and object to the front in a French-like order."""
        roles = identify_roles(sequence)
        if not roles.complete:
            return False

        if severity > 0.5:
            front = [roles.subject, roles.verb, roles.object]
        else:
            front = [roles.subject, roles.object, roles.verb]
        move_to_front(sequence, front)
        return True

    _handlers = {
        TransformationType.INVERSION: apply_intelligent_inversion,
        TransformationType.OMISSION: apply_contextual_omission,
        TransformationType.SUPERFLUOUS_ADDITION: apply_strategic_addition,
        TransformationType.UNNECESSARY_REPETITION: apply_realistic_repetition,
        TransformationType.FRENCH_STRUCTURE: apply_french_interference,
    }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _swap_keeps_validity(sequence: list[Sign], first: int, second: int) -> bool:
        candidate = list(sequence)
        candidate[first], candidate[second] = candidate[second], candidate[first]
        return is_structurally_valid(candidate)

    @staticmethod
    def _omission_priority(sequence: list[Sign], index: int) -> int:
        sign = sequence[index]
        priority = 0
        if 0 < index < len(sequence) - 1:
            priority += 1
        if is_modifier(sign):
            priority += 2
        if sum(1 for s in sequence if s.get("type") == sign.get("type")) > 1:
            priority += 3
        return priority

    def _record(self, transformation_type: str, success: bool) -> None:
        self.stats.total += 1
        if success:
            self.stats.successful += 1
        self.stats.by_type[transformation_type] = self.stats.by_type.get(transformation_type, 0) + 1

    def reset_stats(self) -> None:
        self.stats = TransformationStats()

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    @staticmethod
    def build_analysis(
        content: dict,
        original_order: list[str],
        error_type: str,
        success: bool,
    ) -> SyntaxAnalysis:
        accuracy = content.get("syntax_accuracy", 1.0)
        french = bool(content.get("french_structure"))

        if accuracy < 0.3:
            impact = "critical"
        elif accuracy < 0.5:
            impact = "severe"
        elif french or accuracy < 0.7:
            impact = "moderate"
        else:
            impact = "minimal"

        score = accuracy * 0.7 if french else accuracy
        suggestions = list(SUGGESTIONS.get(error_type, ["Improve overall syntactic accuracy"]))
        if french and error_type != TransformationType.FRENCH_STRUCTURE.value:
            suggestions.append("Unlearn French syntactic habits")

        return SyntaxAnalysis(
            original_order=original_order,
            modified_order=[s["id"] for s in content.get("sequence") or []],
            error_type=error_type,
            success=success,
            linguistic_impact=impact,
            comprehensibility_score=max(0.0, min(1.0, score)),
            suggestions=suggestions,
        )
