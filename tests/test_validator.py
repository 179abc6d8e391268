"""Tests for space parameter validation."""

import pytest

from lsf_errors.core.spatial.validator import SyntacticSpaceValidator
from lsf_errors.exceptions import InvalidSpaceConfigurationError


@pytest.fixture
def validator():
    return SyntacticSpaceValidator()


@pytest.fixture
def space():
    return {"accuracy": 1.0, "scale": 1.0, "zones": ["dominant_side"], "reference_consistency": True}


# ---------------------------------------------------------------------------
# Individual rules
# ---------------------------------------------------------------------------


def test_clean_space_is_valid(validator, space):
    assert validator.is_valid_space(space)
    assert validator.get_validation_errors(space) == []
    assert validator.quality_score(space) == 1.0
    assert not validator.has_critical_errors(space)


def test_range_errors(validator):
    errors = validator.range_errors({"accuracy": 1.5, "scale": 5, "zone_confusion": "yes"})
    assert errors == [
        "Accuracy must be between 0.0 and 1.0",
        "Scale must be between 0.1 and 2.0",
        "'zone_confusion' must be a boolean",
    ]
    assert validator.range_errors({"accuracy": True}) == ["Accuracy must be a number"]


def test_coherence_rules(validator, space):
    assert not validator.validate_coherence({**space, "zone_confusion": True})
    assert not validator.validate_coherence({"random_placement": True, "location_omission": True})
    assert not validator.validate_coherence({"scale": 0.4, "accuracy": 0.9})
    assert validator.validate_coherence({"scale": 0.4, "accuracy": 0.5})


def test_reference_rules(validator):
    assert not validator.validate_references({"reference_consistency": False, "accuracy": 0.8})
    assert validator.validate_references({"reference_consistency": False, "accuracy": 0.6})
    assert not validator.validate_references({"reference_omission": True, "reference_consistency": True})
    assert not validator.validate_references({"zones": ["bogus"]})


def test_zone_rules():
    assert SyntacticSpaceValidator.validate_zones([])
    assert SyntacticSpaceValidator.validate_zones(["upper", "lower"])
    assert not SyntacticSpaceValidator.validate_zones(["center", "peripheral"])
    assert not SyntacticSpaceValidator.validate_zones("center")


def test_linguistic_ceilings(validator):
    space = {"accuracy": 0.7, "zone_confusion": True, "reference_consistency": False}
    assert not validator.validate_linguistic_constraints(space)
    assert validator.get_validation_errors(space) == ["LSF linguistic constraints violated"]
    assert validator.validate_linguistic_constraints({**space, "accuracy": 0.5})


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


def test_non_mapping_space(validator):
    assert validator.get_validation_errors(None) == ["Space parameter missing or not a mapping"]
    assert not validator.is_valid_space([])
    assert validator.has_critical_errors("space")


def test_critical_errors(validator):
    assert validator.has_critical_errors({"critical_error": {"type": "TOTAL_SPATIAL_BREAKDOWN"}})
    assert validator.has_critical_errors({"accuracy": 0.05})
    assert validator.has_critical_errors({"scale": 0})
    assert validator.has_critical_errors(
        {"location_omission": True, "random_placement": True, "reference_omission": True}
    )


def test_quality_score_penalties(validator):
    space = {"accuracy": 0.5, "zone_confusion": True, "reference_consistency": False}
    assert validator.quality_score(space) == pytest.approx(0.33)
    assert validator.quality_score({"accuracy": 2.0}) == 0.0


def test_compatibility(validator, space):
    assert validator.validate_compatibility(space, {**space, "scale": 0.8})
    assert not validator.validate_compatibility(space, {**space, "scale": 1.6})
    assert not validator.validate_compatibility(space, {**space, "zones": ["upper"]})
    assert not validator.validate_compatibility(space, {**space, "reference_consistency": False})


def test_ensure_valid(validator, space):
    validator.ensure_valid(space)
    incoherent = {**space, "zone_confusion": True, "accuracy": 0.5}
    validator.ensure_valid(incoherent, ranges_only=True)
    with pytest.raises(InvalidSpaceConfigurationError) as exc_info:
        validator.ensure_valid(incoherent)
    assert "Incoherent spatial properties" in exc_info.value.errors
