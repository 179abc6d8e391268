"""Body location transformer.

Location parameters look like::

    {"type": "visage", "position": [0.0, 1.7, 0.1], "accuracy": 1.0}

Positions are metres relative to the signer, x lateral, y vertical, z depth.
"""

import logging
import math
import random
from dataclasses import dataclass, field

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
    RotationTransformation,
    SubstitutionTransformation,
    Transformation,
    TransformationType,
)
from lsf_errors.models.reports import ParameterAnalysis

logger = logging.getLogger(__name__)

UNDEFINED_LOCATION = "indefini"


@dataclass(frozen=True)
class BodyZone:
    """A region of the signer's body with its named sub-locations."""

    name: str
    subzones: tuple[str, ...]
    coordinates: tuple[float, float, float]
    bounds: tuple[float, float, float] = field(default=(0.2, 0.2, 0.2))


BODY_ZONES: dict[str, BodyZone] = {
    "head": BodyZone("tete", ("front", "tempe", "joue", "menton", "oreille"), (0, 1.8, 0), (0.4, 0.3, 0.2)),
    "face": BodyZone("visage", ("oeil", "nez", "bouche", "levre"), (0, 1.7, 0.1)),
    "neck": BodyZone("cou", ("gorge", "nuque"), (0, 1.5, 0)),
    "chest": BodyZone("poitrine", ("haut_poitrine", "coeur", "sternum"), (0, 1.2, 0)),
    "abdomen": BodyZone("ventre", ("estomac", "nombril"), (0, 0.9, 0)),
    "neutral": BodyZone(
        "espace_neutre", ("devant_corps", "cote_droit", "cote_gauche"), (0, 1.0, 0.3), (0.8, 0.6, 0.4)
    ),
}

CONFUSABLE_LOCATIONS: dict[str, list[str]] = {
    "visage": ["tete", "cou", "front"],
    "poitrine": ["coeur", "ventre", "sternum"],
    "tete": ["visage", "front", "tempe"],
    "cou": ["gorge", "poitrine", "menton"],
    "ventre": ["poitrine", "estomac", "nombril"],
    "espace_neutre": ["devant_corps", "cote_droit", "cote_gauche"],
}

DIFFICULTY_BANDS: dict[str, list[str]] = {
    "beginner": ["poitrine", "visage", "tete", "espace_neutre"],
    "intermediate": ["cou", "ventre", "front", "joue"],
    "advanced": ["tempe", "levre", "sternum", "nuque", "oreille"],
}

NAMED_DIRECTIONS: dict[str, float] = {
    "gauche": -30,
    "droite": 30,
    "haut": 15,
    "bas": -15,
    "arriere": 45,
    "avant": -45,
}

SUBSTITUTION_PENALTY = 0.6
SUBSTITUTION_EXTRA_PENALTY = 0.4
OMISSION_PENALTY = 0.8
DIRECTION_PENALTY = 0.3
FALLBACK_PENALTY = 0.25


def find_zone(location_type: str) -> BodyZone | None:
    """The body zone named *location_type* or containing it as a sub-location."""
    for zone in BODY_ZONES.values():
        if zone.name == location_type or location_type in zone.subzones:
            return zone
    return None


def is_valid_location(location_type: str) -> bool:
    return location_type == UNDEFINED_LOCATION or find_zone(location_type) is not None


def spatial_distance(pos1: list[float] | None, pos2: list[float] | None) -> float:
    """Euclidean distance; missing or short positions are infinitely far apart."""
    if not pos1 or not pos2 or len(pos1) < 2 or len(pos2) < 2:
        return math.inf
    dx = pos1[0] - pos2[0]
    dy = pos1[1] - pos2[1]
    dz = (pos1[2] if len(pos1) > 2 else 0) - (pos2[2] if len(pos2) > 2 else 0)
    return math.sqrt(dx * dx + dy * dy + dz * dz)


class LocationTransformer:
    """Simulates sign placement mistakes on or around the body."""

    category = ErrorCategory.LOCATION

    def __init__(self, entry: ErrorCatalogEntry, rng: random.Random | None = None):
        self.entry = entry
        self.rng = rng or random.Random()

    def get_target_parameter(self, content: Content) -> Parameter | None:
        return get_parameter(content, "location")

    def apply_transformation(self, content: Content, transform: Transformation) -> None:
        location = self.get_target_parameter(content)
        if location is None:
            logger.warning("No location parameter found in content")
            return

        kind = transform.type
        if kind == TransformationType.SUBSTITUTION and isinstance(transform, SubstitutionTransformation):
            self._apply_substitution(location, transform)
        elif kind == TransformationType.INTENSITY and isinstance(transform, FactorTransformation):
            if transform.factor is not None:
                self._apply_intensity(location, transform.factor)
        elif kind == TransformationType.OMISSION:
            self._apply_omission(location)
        elif isinstance(transform, RotationTransformation):
            self._apply_direction(location, transform)
        else:
            logger.warning("Unsupported location transformation '%s'", kind.value)
            self._shift_position(location, 0.1)
            reduce_accuracy(location, FALLBACK_PENALTY, "location")

    def apply_default_transformation(self, content: Content) -> None:
        location = self.get_target_parameter(content)
        if location is None:
            logger.warning("No location parameter found for default transformation")
            return
        reduce_accuracy(location, self.entry.default_transformation.severity, "location")

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------

    def _apply_substitution(self, location: Parameter, transform: SubstitutionTransformation) -> None:
        original = location.get("type")
        if transform.from_value and transform.to_value and original == transform.from_value:
            self._substitute(location, transform.to_value)
        elif original:
            candidates = [c for c in CONFUSABLE_LOCATIONS.get(original, []) if c != original]
            if candidates:
                self._substitute(location, self.rng.choice(candidates))
            else:
                options = [o for o in DIFFICULTY_BANDS["beginner"] if o != original]
                self._substitute(location, self.rng.choice(options))
        reduce_accuracy(location, SUBSTITUTION_EXTRA_PENALTY, "location")

    def _substitute(self, location: Parameter, new_type: str) -> None:
        old_type = location.get("type")
        location["type"] = new_type
        zone = find_zone(new_type)
        if zone is not None and not location.get("position"):
            location["position"] = list(zone.coordinates)
        reduce_accuracy(location, SUBSTITUTION_PENALTY, "location")
        logger.debug("Location substituted: %s -> %s", old_type, new_type)

    def _apply_intensity(self, location: Parameter, factor: float) -> None:
        magnitude = abs(1 - factor) * 0.3
        self._shift_position(location, magnitude)
        reduce_accuracy(location, magnitude, "location")

    def _apply_omission(self, location: Parameter) -> None:
        location["type"] = UNDEFINED_LOCATION
        location["position"] = None
        reduce_accuracy(location, OMISSION_PENALTY, "location")
        logger.debug("Location omitted")

    def _apply_direction(self, location: Parameter, transform: RotationTransformation) -> None:
        degrees = 0.0
        if transform.degrees is not None:
            degrees = transform.degrees
        elif transform.rotation:
            degrees = NAMED_DIRECTIONS.get(transform.rotation, 0.0)

        if degrees == 0:
            logger.warning("Direction transformation without usable rotation: %s", transform.rotation)
            reduce_accuracy(location, FALLBACK_PENALTY, "location")
            return

        position = location.get("position")
        if position and len(position) >= 2:
            x, y = position[0], position[1]
            z = position[2] if len(position) > 2 else 0
            radians = math.radians(degrees)
            location["position"] = [
                round(x * math.cos(radians) - y * math.sin(radians), 3),
                round(x * math.sin(radians) + y * math.cos(radians), 3),
                z,
            ]
        reduce_accuracy(location, DIRECTION_PENALTY, "location")
        logger.debug("Location rotated by %s degrees", degrees)

    def _shift_position(self, location: Parameter, magnitude: float) -> None:
        """Drift every coordinate outward by *magnitude*."""
        position = location.get("position")
        if not position:
            return
        location["position"] = [round(c + magnitude, 3) for c in position]

    # ------------------------------------------------------------------
    # Analysis (read-only)
    # ------------------------------------------------------------------

    @staticmethod
    def difficulty(location_type: str) -> str:
        for band, values in DIFFICULTY_BANDS.items():
            if location_type in values:
                return band
        return "intermediate"

    def analyze(self, location: Parameter) -> ParameterAnalysis:
        issues: list[str] = []
        recommendations: list[str] = []
        accuracy = current_accuracy(location)
        location_type = location.get("type")
        metrics: dict = {}

        if accuracy < 0.5:
            issues.append("Low location accuracy")
            recommendations.append("Anchor the sign on a clear body landmark")
        if location_type in (None, UNDEFINED_LOCATION):
            issues.append("Location is undefined")
            recommendations.append("Choose an explicit location for the sign")
        elif not is_valid_location(location_type):
            issues.append(f"Unknown location '{location_type}'")

        zone = find_zone(location_type) if location_type else None
        if zone is not None and location.get("position"):
            distance = spatial_distance(location["position"], list(zone.coordinates))
            metrics["distance_from_zone"] = round(distance, 3)
            if distance > max(zone.bounds):
                issues.append("Position drifts outside the expected zone")
                recommendations.append(f"Bring the hand back to the {zone.name} area")

        return ParameterAnalysis(
            category=self.category.value,
            value=location_type,
            accuracy=accuracy,
            difficulty=self.difficulty(location_type) if location_type else None,
            issues=issues,
            recommendations=recommendations,
            metrics=metrics,
        )
