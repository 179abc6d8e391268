"""Error catalog: categories, transformation types and transformation variants.

A transformation is a tagged union keyed on ``type``. Each variant carries
only the fields that make sense for its shape:

  substitution        -> from / to (also inappropriate_proforme, proforme_confusion)
  factor-driven types -> factor
  omission            -> optional factor (severity for sequence omission)
  direction/rotation  -> axis + degrees, or a named rotation
  desynchronization   -> offset
"""

from enum import Enum
from typing import Annotated, Any, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    ValidationError,
)

from lsf_errors.exceptions import InvalidTransformationError


class ErrorCategory(str, Enum):
    HAND_CONFIGURATION = "hand_configuration"
    LOCATION = "location"
    MOVEMENT = "movement"
    ORIENTATION = "orientation"
    FACIAL_EXPRESSION = "facial_expression"
    RHYTHM = "rhythm"
    SYNTACTIC_SPACE = "syntactic_space"
    SIGN_ORDER = "sign_order"
    PROFORME = "proforme"


class TransformationType(str, Enum):
    SUBSTITUTION = "substitution"
    INTENSITY = "intensity"
    OMISSION = "omission"
    DIRECTION = "direction"
    ROTATION = "rotation"
    DESYNCHRONIZATION = "desynchronization"
    AMPLITUDE = "amplitude"
    REPETITION = "repetition"
    FLUIDITY = "fluidity"
    ACCELERATION = "acceleration"
    DECELERATION = "deceleration"
    SPEED = "speed"
    PAUSE = "pause"
    HESITATION = "hesitation"
    INVERSION = "inversion"
    SUPERFLUOUS_ADDITION = "superfluous_addition"
    UNNECESSARY_REPETITION = "unnecessary_repetition"
    FRENCH_STRUCTURE = "french_structure"
    ZONE_CONFUSION = "zone_confusion"
    REFERENCE_VIOLATION = "reference_violation"
    REDUCED_SPACE = "reduced_space"
    RANDOM_PLACEMENT = "random_placement"
    LOCATION_OMISSION = "location_omission"
    AMBIGUOUS_REFERENCE = "ambiguous_reference"
    INCONSISTENT_REFERENCE = "inconsistent_reference"
    REFERENCE_OMISSION = "reference_omission"
    PRONOUN_CONFUSION = "pronoun_confusion"
    SPATIAL_REORGANIZATION = "spatial_reorganization"
    INAPPROPRIATE_PROFORME = "inappropriate_proforme"
    PROFORME_CONFUSION = "proforme_confusion"
    EXCESSIVE_SIMPLIFICATION = "excessive_simplification"
    PROFORME_OMISSION = "proforme_omission"
    INCONSISTENT_USAGE = "inconsistent_usage"


class Axis(str, Enum):
    X = "x"
    Y = "y"
    Z = "z"


# ------------------------------------------------------------------
# Transformation variants
# ------------------------------------------------------------------


class _TransformationBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: TransformationType
    probability: float = Field(default=1.0, ge=0.0, le=1.0)


class SubstitutionTransformation(_TransformationBase):
    """Replace a categorical value, optionally with an explicit pair."""

    from_value: str | None = Field(default=None, alias="from")
    to_value: str | None = Field(default=None, alias="to")


class FactorTransformation(_TransformationBase):
    """Scale a continuous quantity; ``factor`` doubles as severity."""

    factor: float | None = None


class OmissionTransformation(_TransformationBase):
    factor: float | None = None


class RotationTransformation(_TransformationBase):
    """Angular delta, either explicit (axis + degrees) or named."""

    axis: Axis | None = None
    degrees: float | None = None
    rotation: str | None = None


class DesynchronizationTransformation(_TransformationBase):
    offset: float | None = None


_SHAPE_BY_TYPE: dict[str, str] = {
    TransformationType.SUBSTITUTION.value: "substitution",
    TransformationType.INAPPROPRIATE_PROFORME.value: "substitution",
    TransformationType.PROFORME_CONFUSION.value: "substitution",
    TransformationType.OMISSION.value: "omission",
    TransformationType.DIRECTION.value: "rotation",
    TransformationType.ROTATION.value: "rotation",
    TransformationType.DESYNCHRONIZATION.value: "desynchronization",
}


def _transformation_shape(value: Any) -> str:
    if isinstance(value, dict):
        raw = value.get("type")
    else:
        raw = getattr(value, "type", None)
    if isinstance(raw, Enum):
        raw = raw.value
    return _SHAPE_BY_TYPE.get(raw, "factor")


Transformation = Annotated[
    Union[
        Annotated[SubstitutionTransformation, Tag("substitution")],
        Annotated[FactorTransformation, Tag("factor")],
        Annotated[OmissionTransformation, Tag("omission")],
        Annotated[RotationTransformation, Tag("rotation")],
        Annotated[DesynchronizationTransformation, Tag("desynchronization")],
    ],
    Discriminator(_transformation_shape),
]

_transformation_adapter: TypeAdapter = TypeAdapter(Transformation)


def parse_transformation(payload: dict[str, Any] | BaseModel) -> Transformation:
    """Validate a mapping into the matching transformation variant.

    Raises:
        InvalidTransformationError: unknown type or malformed fields
    """
    if isinstance(payload, _TransformationBase):
        return payload
    try:
        return _transformation_adapter.validate_python(payload)
    except ValidationError as e:
        raise InvalidTransformationError(str(e)) from e


def transformation_factor(transform: Transformation, default: float) -> float:
    """The transform's factor, or *default* when the variant has none."""
    factor = getattr(transform, "factor", None)
    return default if factor is None else factor


# ------------------------------------------------------------------
# Catalog entries
# ------------------------------------------------------------------


class DefaultTransformation(BaseModel):
    """Severity-only transformation used when no specific type applies."""

    model_config = ConfigDict(frozen=True)

    severity: float = Field(ge=0.0, le=1.0)
    description: str = ""


class ErrorCatalogEntry(BaseModel):
    """Declares how one category may be perturbed."""

    model_config = ConfigDict(frozen=True)

    category: ErrorCategory
    transformations: list[Transformation] = Field(default_factory=list)
    default_transformation: DefaultTransformation

    def supports(self, transformation_type: TransformationType) -> bool:
        return any(t.type == transformation_type for t in self.transformations)


def _entry(
    category: ErrorCategory,
    description: str,
    severity: float,
    transformations: list[dict[str, Any]],
) -> ErrorCatalogEntry:
    return ErrorCatalogEntry(
        category=category,
        transformations=[parse_transformation(t) for t in transformations],
        default_transformation=DefaultTransformation(
            severity=severity, description=description
        ),
    )


def build_default_catalog(severity: float | None = None) -> dict[ErrorCategory, ErrorCatalogEntry]:
    """One catalog entry per category.

    Args:
        severity: Overrides every default severity when set (the engine passes
            settings.default_severity)
    """

    def sev(value: float) -> float:
        return value if severity is None else severity

    return {
        ErrorCategory.HAND_CONFIGURATION: _entry(
            ErrorCategory.HAND_CONFIGURATION, "Imprecise handshape", sev(0.3),
            [
                {"type": "substitution", "probability": 0.5},
                {"type": "intensity", "factor": 0.7, "probability": 0.3},
                {"type": "omission", "probability": 0.2},
            ],
        ),
        ErrorCategory.LOCATION: _entry(
            ErrorCategory.LOCATION, "Imprecise location", sev(0.3),
            [
                {"type": "substitution", "probability": 0.4},
                {"type": "intensity", "factor": 0.6, "probability": 0.3},
                {"type": "direction", "rotation": "gauche", "probability": 0.2},
                {"type": "omission", "probability": 0.1},
            ],
        ),
        ErrorCategory.MOVEMENT: _entry(
            ErrorCategory.MOVEMENT, "Imprecise movement", sev(0.3),
            [
                {"type": "amplitude", "factor": 0.5, "probability": 0.3},
                {"type": "direction", "rotation": "slight_left", "probability": 0.2},
                {"type": "repetition", "factor": 2.0, "probability": 0.2},
                {"type": "fluidity", "factor": 0.6, "probability": 0.2},
                {"type": "omission", "probability": 0.1},
            ],
        ),
        ErrorCategory.ORIENTATION: _entry(
            ErrorCategory.ORIENTATION, "Imprecise palm orientation", sev(0.3),
            [
                {"type": "substitution", "probability": 0.4},
                {"type": "rotation", "rotation": "clockwise", "probability": 0.3},
                {"type": "intensity", "factor": 0.7, "probability": 0.2},
                {"type": "omission", "probability": 0.1},
            ],
        ),
        ErrorCategory.FACIAL_EXPRESSION: _entry(
            ErrorCategory.FACIAL_EXPRESSION, "Missing or weak non-manual marking", sev(0.35),
            [
                {"type": "substitution", "probability": 0.3},
                {"type": "intensity", "factor": 0.5, "probability": 0.3},
                {"type": "desynchronization", "offset": 200, "probability": 0.2},
                {"type": "omission", "probability": 0.2},
            ],
        ),
        ErrorCategory.RHYTHM: _entry(
            ErrorCategory.RHYTHM, "Irregular timing", sev(0.25),
            [
                {"type": "acceleration", "factor": 1.5, "probability": 0.2},
                {"type": "deceleration", "factor": 0.6, "probability": 0.2},
                {"type": "pause", "factor": 0.5, "probability": 0.2},
                {"type": "hesitation", "factor": 0.8, "probability": 0.2},
                {"type": "desynchronization", "offset": 150, "probability": 0.2},
            ],
        ),
        ErrorCategory.SYNTACTIC_SPACE: _entry(
            ErrorCategory.SYNTACTIC_SPACE, "Incoherent use of signing space", sev(0.4),
            [
                {"type": "zone_confusion", "factor": 0.5, "probability": 0.3},
                {"type": "reference_violation", "factor": 0.5, "probability": 0.2},
                {"type": "reduced_space", "factor": 0.5, "probability": 0.2},
                {"type": "random_placement", "factor": 0.5, "probability": 0.15},
                {"type": "location_omission", "factor": 0.5, "probability": 0.15},
            ],
        ),
        ErrorCategory.SIGN_ORDER: _entry(
            ErrorCategory.SIGN_ORDER, "Non-LSF sign order", sev(0.3),
            [
                {"type": "inversion", "factor": 0.5, "probability": 0.3},
                {"type": "omission", "factor": 0.5, "probability": 0.2},
                {"type": "superfluous_addition", "factor": 0.5, "probability": 0.15},
                {"type": "unnecessary_repetition", "factor": 0.5, "probability": 0.15},
                {"type": "french_structure", "factor": 0.8, "probability": 0.2},
            ],
        ),
        ErrorCategory.PROFORME: _entry(
            ErrorCategory.PROFORME, "Inappropriate or confused classifier", sev(0.35),
            [
                {"type": "inappropriate_proforme", "probability": 0.25},
                {"type": "proforme_confusion", "probability": 0.25},
                {"type": "excessive_simplification", "factor": 0.7, "probability": 0.2},
                {"type": "proforme_omission", "factor": 0.8, "probability": 0.15},
                {"type": "inconsistent_usage", "factor": 0.6, "probability": 0.15},
            ],
        ),
    }
