"""Tests for the syntactic space transformer."""

import copy

import pytest

from lsf_errors.core.spatial.transformer import (
    DEFAULT_TRANSFORMATION_TYPE,
    FALLBACK_STRATEGY,
    SyntacticSpaceTransformer,
    semantic_density,
    spatial_complexity,
)
from lsf_errors.models.catalog import ErrorCategory, parse_transformation


class ExplodingStrategy:
    name = "exploding"
    impact_score = 0.0

    def validate(self, space):
        return True

    async def apply(self, space, context):
        raise RuntimeError("boom")


@pytest.fixture
def transformer(entry, rng):
    return SyntacticSpaceTransformer(
        entry(ErrorCategory.SYNTACTIC_SPACE), rng, level="advanced", preserve_semantics=True
    )


@pytest.fixture
def content(make_content):
    return make_content("space")


def _space(content):
    return content["parameters"]["space"]


async def _apply(transformer, content, payload):
    await transformer.apply_transformation(content, parse_transformation(payload))
    return content


# ---------------------------------------------------------------------------
# Strategy dispatch
# ---------------------------------------------------------------------------


async def test_critical_zone_confusion(transformer, content):
    await _apply(transformer, content, {"type": "zone_confusion", "factor": 0.9})
    space = _space(content)
    assert space["zones"] == []
    assert space["scale"] == 0.2
    assert space["critical_error"]["type"] == "TOTAL_SPATIAL_BREAKDOWN"
    assert space["accuracy"] == pytest.approx(0.36)

    analysis = content["spatial_analysis"]
    assert analysis["strategy"] == "zone_confusion"
    assert analysis["fallback_applied"] is False
    assert analysis["accuracy_before"] == 1.0
    assert analysis["accuracy_after"] == pytest.approx(0.36)
    assert "Inconsistent spatial reference" in analysis["issues"]


async def test_zone_confusion_without_semantic_preservation(entry, rng, content):
    transformer = SyntacticSpaceTransformer(
        entry(ErrorCategory.SYNTACTIC_SPACE), rng, level="advanced", preserve_semantics=False
    )
    await _apply(transformer, content, {"type": "zone_confusion", "factor": 0.9})
    assert _space(content)["scale"] == 0.1
    assert _space(content)["accuracy"] == pytest.approx(0.2)


async def test_learner_level_caps_generic_degradation(entry, rng, make_content):
    transformer = SyntacticSpaceTransformer(
        entry(ErrorCategory.SYNTACTIC_SPACE), rng, level="beginner", preserve_semantics=True
    )
    content = make_content("space")
    await _apply(transformer, content, {"type": "reference_violation", "factor": 0.9})
    assert _space(content)["accuracy"] == pytest.approx(0.7)

    content = make_content("space")
    await _apply(transformer, content, {"type": "zone_confusion", "factor": 0.9})
    assert _space(content)["accuracy"] == pytest.approx(0.36)


async def test_repeated_zone_confusion_keeps_scale_valid(transformer, content):
    for _ in range(5):
        await _apply(transformer, content, {"type": "zone_confusion", "factor": 0.7})
        assert _space(content)["scale"] >= 0.1
        assert content["spatial_analysis"]["strategy"] == "zone_confusion"
    assert _space(content)["scale"] == pytest.approx(0.1)
    assert transformer.metrics.total == 5
    assert transformer.metrics.overall_success_rate() == 1.0


async def test_reference_strategy_succeeds_on_canonical_zones(transformer, content):
    await _apply(transformer, content, {"type": "reference_omission", "factor": 0.5})
    assert _space(content)["reference_omission"] is True
    assert content["spatial_analysis"]["strategy"] == "reference_omission"


async def test_ambiguous_reference_uses_placed_zones(transformer, make_content):
    space = {"accuracy": 1.0, "scale": 1.0, "zones": ["dominant_side", "upper"], "reference_consistency": True}
    content = make_content(space=space)
    await _apply(transformer, content, {"type": "ambiguous_reference", "factor": 0.5})
    analysis = content["spatial_analysis"]
    assert analysis["strategy"] == "ambiguous_reference"
    assert analysis["strategy"] != FALLBACK_STRATEGY
    assert analysis["fallback_applied"] is False
    assert _space(content)["ambiguous_zones"] == ["modal_zone", "object_zone", "secondary_object_zone"]
    assert _space(content)["accuracy"] == pytest.approx(0.775)


async def test_inconsistent_reference_detects_overlapping_loci(transformer, make_content):
    space = {"accuracy": 1.0, "scale": 1.0, "zones": ["dominant_side", "upper"], "reference_consistency": True}
    content = make_content(space=space)
    await _apply(transformer, content, {"type": "inconsistent_reference", "factor": 0.5})
    assert content["spatial_analysis"]["strategy"] == "inconsistent_reference"
    assert _space(content)["inconsistency_type"] == "zone_overlap"
    assert _space(content)["affected_zones"] == ["future_zone", "modal_zone"]
    assert _space(content)["accuracy"] == pytest.approx(0.6)


# ---------------------------------------------------------------------------
# Fallback
# ---------------------------------------------------------------------------


async def test_unregistered_strategy_falls_back(transformer, content):
    transformer.registry.unregister("reduced_space")
    await _apply(transformer, content, {"type": "reduced_space", "factor": 0.5})
    space = _space(content)
    assert space["accuracy"] == pytest.approx(0.6)
    assert space["scale"] == 1.0
    analysis = content["spatial_analysis"]
    assert analysis["strategy"] == FALLBACK_STRATEGY
    assert analysis["fallback_applied"] is True
    assert analysis["impact_score"] == pytest.approx(0.4)


async def test_non_spatial_type_falls_back_with_catalog_severity(transformer, content):
    await _apply(transformer, content, {"type": "substitution"})
    assert _space(content)["accuracy"] == pytest.approx(0.6)
    assert content["spatial_analysis"]["fallback_applied"] is True


async def test_reference_strategy_without_placed_zones_falls_back(transformer, make_content):
    content = make_content(
        space={"accuracy": 1.0, "scale": 1.0, "zones": [], "reference_consistency": True}
    )
    await _apply(transformer, content, {"type": "ambiguous_reference", "factor": 0.5})
    space = _space(content)
    assert "ambiguous_reference" not in space
    assert space["accuracy"] == pytest.approx(0.6)
    assert transformer.metrics.overall_success_rate() == 0.0


async def test_rejected_space_falls_back(transformer, content):
    _space(content)["critical_error"] = {"type": "TOTAL_SPATIAL_BREAKDOWN"}
    await _apply(transformer, content, {"type": "zone_confusion", "factor": 0.2})
    assert _space(content)["accuracy"] == pytest.approx(0.8)
    assert content["spatial_analysis"]["strategy"] == FALLBACK_STRATEGY


async def test_unexpected_strategy_error_falls_back(transformer, content):
    transformer.registry.register("zone_confusion", lambda cap: ExplodingStrategy())
    await _apply(transformer, content, {"type": "zone_confusion", "factor": 0.3})
    assert _space(content)["accuracy"] == pytest.approx(0.7)
    assert content["spatial_analysis"]["fallback_applied"] is True


# ---------------------------------------------------------------------------
# Guards and default transformation
# ---------------------------------------------------------------------------


async def test_out_of_range_space_is_left_untouched(transformer, make_content):
    content = make_content(space={"accuracy": 1.5, "scale": 1.0})
    before = copy.deepcopy(content)
    await _apply(transformer, content, {"type": "zone_confusion", "factor": 0.9})
    await transformer.apply_default_transformation(content)
    assert content == before


async def test_missing_space_is_a_noop(transformer, make_content):
    content = make_content("handshape")
    before = copy.deepcopy(content)
    await _apply(transformer, content, {"type": "zone_confusion", "factor": 0.9})
    assert content == before
    assert transformer.metrics.total == 0


async def test_default_transformation(transformer, content):
    await transformer.apply_default_transformation(content)
    space = _space(content)
    assert space["accuracy"] == pytest.approx(0.6)
    assert space["generic_error"] is True
    assert space["reference_consistency"] is True
    analysis = content["spatial_analysis"]
    assert analysis["transformation_type"] == DEFAULT_TRANSFORMATION_TYPE
    assert analysis["strategy"] == "generic_degradation"


async def test_accuracy_never_increases(transformer, content):
    payloads = [
        {"type": "reduced_space", "factor": 0.3},
        {"type": "random_placement", "factor": 0.4},
        {"type": "location_omission", "factor": 0.6},
        {"type": "pronoun_confusion", "factor": 0.5},
        {"type": "spatial_reorganization", "factor": 0.5},
        {"type": "reference_violation", "factor": 0.6},
        {"type": "zone_confusion", "factor": 0.9},
    ]
    previous = 1.0
    for payload in payloads:
        await _apply(transformer, content, payload)
        accuracy = _space(content)["accuracy"]
        assert 0.0 <= accuracy <= previous
        previous = accuracy
    assert transformer.metrics.total == len(payloads)


# ---------------------------------------------------------------------------
# Read-back helpers
# ---------------------------------------------------------------------------


async def test_metrics_read_back(transformer, content):
    await _apply(transformer, content, {"type": "zone_confusion", "factor": 0.5})
    report = transformer.get_metrics()
    assert report["detailed"]["transformations_by_type"] == {"zone_confusion": 1}
    transformer.reset_metrics()
    assert transformer.metrics.total == 0


def test_strategy_listing(transformer):
    assert transformer.has_strategy("zone_confusion")
    assert not transformer.has_strategy("teleportation")
    assert len(transformer.available_strategies()) == 10


def test_context_helpers(transformer):
    space = {"zone_confusion": True, "random_placement": True, "scale": 0.5, "accuracy": 0.8}
    assert spatial_complexity(space) == pytest.approx(0.8)
    assert semantic_density({"accuracy": 1.0, "scale": 1.0, "reference_consistency": True}) == pytest.approx(1.0)

    context = transformer.build_context(space, "zone_confusion", 1.7, 0.5)
    assert context.severity == 1.0
    assert context.original_accuracy == 0.8
    assert context.extra == {"has_referential_elements": False}
