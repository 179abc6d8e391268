"""Helpers shared by every category transformer.

Parameters are plain dicts inside the caller's content record and are
mutated in place. Accuracy only ever goes down and always stays in [0, 1].
"""

import logging
from typing import Any, Protocol, runtime_checkable

from lsf_errors.models.catalog import ErrorCategory, Transformation

logger = logging.getLogger(__name__)

Parameter = dict[str, Any]
Content = dict[str, Any]


@runtime_checkable
class ParameterTransformer(Protocol):
    """Capability every category transformer implements."""

    category: ErrorCategory

    def apply_transformation(self, content: Content, transform: Transformation) -> None: ...

    def apply_default_transformation(self, content: Content) -> None: ...

    def get_target_parameter(self, content: Content) -> Any: ...


def clamp_accuracy(value: float) -> float:
    return max(0.0, min(1.0, value))


def current_accuracy(param: Parameter) -> float:
    """Accuracy of *param*; a missing value counts as fully accurate."""
    value = param.get("accuracy")
    if value is None:
        return 1.0
    return clamp_accuracy(float(value))


def reduce_accuracy(param: Parameter, amount: float, label: str = "parameter") -> float:
    """Lower ``param["accuracy"]`` by *amount* (negative amounts are ignored).

    Returns:
        The new accuracy
    """
    before = current_accuracy(param)
    after = clamp_accuracy(before - max(0.0, amount))
    param["accuracy"] = after
    logger.debug("%s accuracy reduced: %.3f -> %.3f", label, before, after)
    return after


def normalize_angle(angle: float) -> float:
    """Fold *angle* into (-180, 180], rounded to 2 decimals."""
    normalized = round(angle, 2) % 360
    if normalized > 180:
        normalized -= 360
    return round(normalized, 2)


def get_parameters(content: Content) -> dict[str, Any] | None:
    parameters = content.get("parameters")
    return parameters if isinstance(parameters, dict) else None


def get_parameter(content: Content, key: str) -> Parameter | None:
    """The ``parameters[key]`` sub-record, or None when absent."""
    parameters = get_parameters(content)
    if parameters is None:
        return None
    param = parameters.get(key)
    return param if isinstance(param, dict) else None
