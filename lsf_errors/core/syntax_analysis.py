"""Syntactic role detection and sequence diagnostics for sign sequences.

A sign unit is a dict with a stable ``id`` and optional ``type``
(noun, verb, pronoun, adjective, adverb, ...), ``role`` (subject/object),
``category`` (action, modifier, temporal, classifier, ...) and
``duration``.
"""

from dataclasses import dataclass, field
from typing import Any

from lsf_errors.models.reports import (
    OptimizationResult,
    SyntaxComplexity,
    SyntaxValidation,
)

Sign = dict[str, Any]

FRENCH_INTERFERENCE_TYPES = {"auxiliary", "article"}


def _type(sign: Sign) -> str:
    return sign.get("type") or "unknown"


def _role(sign: Sign) -> str:
    return sign.get("role") or "unknown"


def _category(sign: Sign) -> str:
    return sign.get("category") or "unknown"


def is_subject(sign: Sign) -> bool:
    return _type(sign) == "pronoun" or (_type(sign) == "noun" and _role(sign) == "subject")


def is_verb(sign: Sign) -> bool:
    return _type(sign) == "verb" or _category(sign) == "action"


def is_object(sign: Sign) -> bool:
    return _type(sign) == "noun" and _role(sign) == "object"


def is_modifier(sign: Sign) -> bool:
    return _type(sign) in ("adjective", "adverb") or _category(sign) == "modifier"


def is_french_interference(sign: Sign) -> bool:
    return _category(sign) == "french_interference" or _type(sign) in FRENCH_INTERFERENCE_TYPES


@dataclass
class SyntacticRoles:
    """Index of the last unit holding each role."""

    subject: int | None = None
    verb: int | None = None
    object: int | None = None
    modifiers: list[int] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return None not in (self.subject, self.verb, self.object)


def identify_roles(sequence: list[Sign]) -> SyntacticRoles:
    """Single pass; each unit takes the first matching role of subject, verb, object."""
    roles = SyntacticRoles()
    for index, sign in enumerate(sequence):
        if is_subject(sign):
            roles.subject = index
        elif is_verb(sign):
            roles.verb = index
        elif is_object(sign):
            roles.object = index
        if is_modifier(sign):
            roles.modifiers.append(index)
    return roles


def consecutive_duplicates(sequence: list[Sign]) -> list[int]:
    return [i for i in range(1, len(sequence)) if sequence[i].get("id") == sequence[i - 1].get("id")]


def is_structurally_valid(sequence: list[Sign]) -> bool:
    """At least one verb and no two identical consecutive unit ids."""
    return any(is_verb(s) for s in sequence) and not consecutive_duplicates(sequence)


# ------------------------------------------------------------------
# Diagnostics
# ------------------------------------------------------------------


def base_complexity(sequence: list[Sign]) -> float:
    if not sequence:
        return 0.0
    complexity = min(len(sequence) / 10, 0.5)
    complexity += len({s.get("type") for s in sequence}) / 10
    complex_units = [s for s in sequence if _category(s) == "classifier" or _type(s) == "complex_verb"]
    complexity += len(complex_units) / len(sequence) * 0.3
    return min(complexity, 1.0)


def structural_elements(sequence: list[Sign]) -> list[str]:
    elements = []
    if any(is_verb(s) for s in sequence):
        elements.append("verb_structure")
    if any(_category(s) == "temporal" for s in sequence):
        elements.append("temporal_marking")
    if any(_category(s) == "spatial" for s in sequence):
        elements.append("spatial_reference")
    if any(_category(s) == "classifier" for s in sequence):
        elements.append("classifier_construction")
    return elements


def interference_level(content: dict[str, Any]) -> float:
    level = 0.0
    if content.get("french_structure"):
        level += 0.4
    if content.get("syntax_error"):
        level += 0.3
    level += (1 - content.get("syntax_accuracy", 1.0)) * 0.3
    return min(level, 1.0)


def analyze_complexity(content: dict[str, Any]) -> SyntaxComplexity:
    sequence = content.get("sequence") or []
    complexity = base_complexity(sequence)
    elements = structural_elements(sequence)
    interference = interference_level(content)

    recommendations = []
    if complexity > 0.7:
        recommendations.append("Simplify the syntactic structure")
    if interference > 0.5:
        recommendations.append("Reduce French word-order interference")
        recommendations.append("Reinforce authentic LSF structures")
    if "classifier_construction" in elements:
        recommendations.append("Pay particular attention to classifiers")
    if not elements:
        recommendations.append("Enrich the syntactic structure")

    return SyntaxComplexity(
        base_complexity=complexity,
        structural_elements=elements,
        interference_level=interference,
        adaptation_recommendations=recommendations,
    )


def validate_transformed_sequence(content: dict[str, Any]) -> SyntaxValidation:
    sequence = content.get("sequence") or []
    errors: list[str] = []
    warnings: list[str] = []

    if not sequence:
        errors.append("Empty sequence")
    elif not is_structurally_valid(sequence):
        errors.append("Invalid syntactic structure")
    duplicates = consecutive_duplicates(sequence)
    if duplicates:
        warnings.append(f"Consecutive duplicates at positions: {', '.join(map(str, duplicates))}")

    if errors:
        quality = 0.0
    else:
        quality = 1.0 - len(warnings) * 0.1
        quality += len({s.get("type") for s in sequence}) / len(sequence) * 0.2
        quality = max(0.0, min(1.0, quality))

    suggestions = []
    if "Empty sequence" in errors:
        suggestions.append("Add at least one sign to the sequence")
    if "Invalid syntactic structure" in errors:
        suggestions.append("Review sign order against LSF rules")
    if warnings:
        suggestions.append("Remove unnecessary repetitions")

    return SyntaxValidation(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        quality=quality,
        suggestions=suggestions,
    )


def identify_used_patterns(content: dict[str, Any]) -> list[str]:
    sequence = content.get("sequence") or []
    roles = identify_roles(sequence)
    patterns = []
    if roles.complete:
        if roles.subject < roles.object < roles.verb:
            patterns.append("SOV_structure")
        elif roles.subject < roles.verb < roles.object:
            patterns.append("SVO_structure")
    if content.get("french_structure"):
        patterns.append("french_interference")
    if any(_category(s) == "classifier" for s in sequence):
        patterns.append("classifier_construction")
    if any(_category(s) == "temporal" for s in sequence):
        patterns.append("temporal_marking")
    return patterns


def calculate_overall_quality(complexity: SyntaxComplexity, validation: SyntaxValidation) -> float:
    quality = validation.quality * 0.6
    quality += max(0.0, 1 - complexity.base_complexity) * 0.2
    quality += max(0.0, 1 - complexity.interference_level) * 0.2
    return min(1.0, quality)


# ------------------------------------------------------------------
# Repair
# ------------------------------------------------------------------


def move_to_front(sequence: list[Sign], front: list[int]) -> None:
    """Move the units at *front* to the head, others keep their relative order."""
    picked = set(front)
    reordered = [sequence[i] for i in front] + [s for i, s in enumerate(sequence) if i not in picked]
    sequence[:] = reordered


def optimize_sequence(sequence: list[Sign]) -> OptimizationResult:
    """Undo common learner errors in place: duplicates, non-SOV order, French tokens."""
    if not sequence:
        return OptimizationResult(success=False, modifications_count=0)

    modifications = []

    removed = False
    for i in range(len(sequence) - 1, 0, -1):
        if sequence[i].get("id") == sequence[i - 1].get("id"):
            del sequence[i]
            removed = True
    if removed:
        modifications.append("Removed consecutive duplicates")

    roles = identify_roles(sequence)
    if roles.complete and not (roles.subject < roles.object < roles.verb):
        move_to_front(sequence, [roles.subject, roles.object, roles.verb])
        modifications.append("Restored SOV order")

    before = len(sequence)
    sequence[:] = [s for s in sequence if not is_french_interference(s)]
    if len(sequence) != before:
        modifications.append("Removed French interference units")

    return OptimizationResult(
        success=bool(modifications),
        modifications_count=len(modifications),
        modifications=modifications,
    )
