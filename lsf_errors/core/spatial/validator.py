"""Validation rules for the ``space`` parameter."""

from typing import Any

from lsf_errors.core.spatial.zones import ALL_ZONE_VALUES, SpatialZoneType
from lsf_errors.exceptions import InvalidSpaceConfigurationError

Space = dict[str, Any]

MIN_ACCURACY = 0.0
MAX_ACCURACY = 1.0
MIN_SCALE = 0.1
MAX_SCALE = 2.0

BOOLEAN_FLAGS = (
    "zone_confusion",
    "reference_consistency",
    "random_placement",
    "location_omission",
    "ambiguous_reference",
    "reference_omission",
    "pronoun_confusion",
    "spatial_reorganization",
)

# Highest accuracy still plausible once a given error flag is set
ACCURACY_CEILINGS = {
    "zone_confusion": 0.6,
    "random_placement": 0.5,
    "location_omission": 0.55,
    "spatial_reorganization": 0.65,
    "ambiguous_reference": 0.7,
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class SyntacticSpaceValidator:
    """Range, coherence, reference and linguistic checks for a space parameter.

    Range checks guard every mutation. The coherence and linguistic rules
    describe a plausible learner production and are diagnostics only.
    """

    def range_errors(self, space: Space) -> list[str]:
        errors = []
        accuracy = space.get("accuracy")
        if accuracy is not None:
            if not _is_number(accuracy):
                errors.append("Accuracy must be a number")
            elif not MIN_ACCURACY <= accuracy <= MAX_ACCURACY:
                errors.append(f"Accuracy must be between {MIN_ACCURACY} and {MAX_ACCURACY}")

        scale = space.get("scale")
        if scale is not None:
            if not _is_number(scale):
                errors.append("Scale must be a number")
            elif not MIN_SCALE <= scale <= MAX_SCALE:
                errors.append(f"Scale must be between {MIN_SCALE} and {MAX_SCALE}")

        for flag in BOOLEAN_FLAGS:
            if space.get(flag) is not None and not isinstance(space[flag], bool):
                errors.append(f"'{flag}' must be a boolean")
        return errors

    def validate_coherence(self, space: Space) -> bool:
        if space.get("zone_confusion") and space.get("reference_consistency"):
            return False
        if space.get("random_placement") and space.get("location_omission"):
            return False
        if space.get("pronoun_confusion") and space.get("reference_consistency"):
            return False
        scale, accuracy = space.get("scale"), space.get("accuracy")
        if scale is not None and accuracy is not None and scale < 0.5 and accuracy > 0.8:
            return False
        return True

    def validate_references(self, space: Space) -> bool:
        accuracy = space.get("accuracy")
        if space.get("reference_consistency") is False and accuracy is not None and accuracy > 0.7:
            return False
        if space.get("reference_omission") and space.get("reference_consistency"):
            return False
        zones = space.get("zones")
        if zones:
            return self.validate_zones(zones)
        return True

    def validate_linguistic_constraints(self, space: Space) -> bool:
        accuracy = space.get("accuracy")
        if accuracy is None:
            return True
        return not any(space.get(flag) and accuracy > ceiling for flag, ceiling in ACCURACY_CEILINGS.items())

    @staticmethod
    def validate_zones(zones: Any) -> bool:
        if not isinstance(zones, list):
            return False
        if any(zone not in ALL_ZONE_VALUES for zone in zones):
            return False
        # centre and periphery are mutually exclusive
        return not (SpatialZoneType.CENTER.value in zones and SpatialZoneType.PERIPHERAL.value in zones)

    def is_valid_space(self, space: Any) -> bool:
        if not isinstance(space, dict):
            return False
        return (
            not self.range_errors(space)
            and self.validate_coherence(space)
            and self.validate_references(space)
            and self.validate_linguistic_constraints(space)
        )

    def validate_compatibility(self, first: Space, second: Space) -> bool:
        """Whether two spaces could belong to the same discourse."""
        if not self.is_valid_space(first) or not self.is_valid_space(second):
            return False
        if first.get("reference_consistency") != second.get("reference_consistency"):
            return False
        if first.get("scale") is not None and second.get("scale") is not None:
            if abs(first["scale"] - second["scale"]) > 0.5:
                return False
        if first.get("zones") is not None and second.get("zones") is not None:
            if not set(first["zones"]) & set(second["zones"]):
                return False
        return True

    def get_validation_errors(self, space: Any) -> list[str]:
        if not isinstance(space, dict):
            return ["Space parameter missing or not a mapping"]
        errors = self.range_errors(space)
        if space.get("zones") is not None and not self.validate_zones(space["zones"]):
            errors.append("Invalid or contradictory spatial zones")
        if not self.validate_coherence(space):
            errors.append("Incoherent spatial properties")
        if not self.validate_references(space):
            errors.append("Incoherent spatial references")
        if not self.validate_linguistic_constraints(space):
            errors.append("LSF linguistic constraints violated")
        return errors

    def has_critical_errors(self, space: Any) -> bool:
        if not isinstance(space, dict):
            return True
        if space.get("critical_error"):
            return True
        accuracy = space.get("accuracy")
        if accuracy is not None and accuracy < 0.1:
            return True
        scale = space.get("scale")
        if scale is not None and scale <= 0:
            return True
        return bool(
            space.get("location_omission") and space.get("random_placement") and space.get("reference_omission")
        )

    def quality_score(self, space: Space) -> float:
        if not self.is_valid_space(space):
            return 0.0
        score = space.get("accuracy", 1.0)
        penalties = {
            "zone_confusion": 0.8,
            "random_placement": 0.7,
            "location_omission": 0.6,
            "pronoun_confusion": 0.85,
            "ambiguous_reference": 0.9,
        }
        for flag, multiplier in penalties.items():
            if space.get(flag):
                score *= multiplier
        if not space.get("reference_consistency"):
            score *= 0.75
        return min(1.0, max(0.0, score * 1.1))

    def ensure_valid(self, space: Space, ranges_only: bool = False) -> None:
        """Raise when *space* fails validation.

        Args:
            space: The space parameter to check
            ranges_only: Check numeric ranges and flag types only

        Raises:
            InvalidSpaceConfigurationError: with every failed rule
        """
        errors = self.range_errors(space) if ranges_only else self.get_validation_errors(space)
        if errors:
            raise InvalidSpaceConfigurationError(errors)
