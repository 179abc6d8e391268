"""Tests for the spatial degradation strategies."""

import random

import pytest

from lsf_errors.core.spatial.manipulation import SpatialManipulationService
from lsf_errors.core.spatial.strategies import (
    DEGRADATION_ORDER,
    MAX_ZONE_REDUCTION,
    MIN_CONFUSED_SCALE,
    ZONE_REDUCTION,
    DegradationLevel,
    GenericDegradationStrategy,
    LocationOmissionStrategy,
    RandomPlacementStrategy,
    ReducedSpaceStrategy,
    ReferenceManipulationStrategy,
    ReferenceViolationStrategy,
    SpaceStrategy,
    SpaceTransformationContext,
    ZoneConfusionStrategy,
    degradation_level,
)
from lsf_errors.core.spatial.zones import ALL_ZONE_VALUES, ZoneManager
from lsf_errors.exceptions import StrategyExecutionError


def _space(**overrides):
    space = {"accuracy": 1.0, "scale": 1.0, "zones": ["dominant_side"], "reference_consistency": True}
    space.update(overrides)
    return space


def _context(severity, preserve_semantics=True, **kwargs):
    return SpaceTransformationContext(
        transformation_type="test", severity=severity, preserve_semantics=preserve_semantics, **kwargs
    )


# ---------------------------------------------------------------------------
# Zone confusion
# ---------------------------------------------------------------------------


class TestZoneConfusion:
    async def test_critical_without_semantic_preservation(self, rng):
        space = _space()
        await ZoneConfusionStrategy(rng=rng).apply(space, _context(0.9, preserve_semantics=False))
        assert space["zones"] == []
        assert space["scale"] == 0.1
        assert space["critical_error"]["type"] == "TOTAL_SPATIAL_BREAKDOWN"
        assert space["critical_error"]["metadata"]["semantic_preservation"] is False
        assert space["location_omission"] and space["random_placement"]
        assert space["reference_consistency"] is False
        assert space["accuracy"] == pytest.approx(0.2)

    async def test_critical_with_semantic_preservation(self, rng):
        space = _space()
        strategy = ZoneConfusionStrategy(rng=rng)
        await strategy.apply(space, _context(0.9, preserve_semantics=True))
        assert space["zones"] == []
        assert space["scale"] == 0.2
        assert space["critical_error"]["severity"] == "CRITICAL"
        assert space["accuracy"] == pytest.approx(0.36)
        assert strategy.impact_score == 1.0

    async def test_refuses_space_with_critical_error(self, rng):
        space = _space(critical_error={"type": "TOTAL_SPATIAL_BREAKDOWN"})
        with pytest.raises(StrategyExecutionError):
            await ZoneConfusionStrategy(rng=rng).apply(space, _context(0.5))

    async def test_moderate_breaks_consistency(self, rng):
        space = _space(zones=["dominant_side", "upper"])
        await ZoneConfusionStrategy(rng=rng).apply(space, _context(0.5))
        assert space["zone_confusion"] is True
        assert space["reference_consistency"] is False
        assert len(space["zones"]) == 1
        assert 0.7 <= space["scale"] <= 0.9

    async def test_severe_replaces_zones(self, rng):
        space = _space()
        await ZoneConfusionStrategy(rng=rng).apply(space, _context(0.7))
        assert space["random_placement"] is True
        assert len(space["zones"]) == 1
        assert space["zones"][0] != "dominant_side"
        assert space["scale"] == pytest.approx(0.4)
        assert space["metadata"]["transformation_type"] == "severe_confusion"

    @pytest.mark.parametrize("severity", [0.5, 0.7])
    async def test_scale_never_drops_below_floor(self, rng, severity):
        space = _space(scale=0.11)
        await ZoneConfusionStrategy(rng=rng).apply(space, _context(severity))
        assert space["scale"] == pytest.approx(MIN_CONFUSED_SCALE)

    def test_ceiling_is_the_ladder_top(self):
        context = _context(1.0, preserve_semantics=False, spatial_complexity=1.0)
        assert ZoneConfusionStrategy.accuracy_reduction(DegradationLevel.CRITICAL, context) == MAX_ZONE_REDUCTION

    async def test_reduction_is_capped(self, rng):
        space = _space()
        await ZoneConfusionStrategy(max_degradation=0.3, rng=rng).apply(space, _context(0.9))
        assert space["accuracy"] == pytest.approx(0.7)

    def test_degradation_levels_are_monotonic(self):
        severities = [0.0, 0.1, 0.25, 0.3, 0.5, 0.6, 0.75, 0.8, 1.0]
        levels = [degradation_level(s) for s in severities]
        assert levels[0] == DegradationLevel.MINIMAL
        assert levels[-1] == DegradationLevel.CRITICAL
        ranks = [DEGRADATION_ORDER.index(level) for level in levels]
        assert ranks == sorted(ranks)
        reductions = [ZONE_REDUCTION[level] for level in levels]
        assert reductions == sorted(reductions)

    async def test_accuracy_drop_grows_with_severity(self):
        drops = []
        for severity in (0.2, 0.4, 0.7, 0.9):
            space = _space()
            await ZoneConfusionStrategy(rng=random.Random(1)).apply(space, _context(severity))
            drops.append(1.0 - space["accuracy"])
        assert drops == sorted(drops)


# ---------------------------------------------------------------------------
# Reduced space, random placement, location omission
# ---------------------------------------------------------------------------


class TestScaleAndPlacement:
    async def test_reduced_space_moderate(self, rng):
        space = _space()
        strategy = ReducedSpaceStrategy(rng=rng)
        await strategy.apply(space, _context(0.5))
        assert space["scale"] == pytest.approx(0.75)
        assert space["zone_confusion"] is True
        assert space["accuracy"] == pytest.approx(0.9625)
        assert space["metadata"]["scale_transformation"]["constraint_level"] == "moderate"
        assert strategy.impact_score == pytest.approx(0.04375)

    async def test_reduced_space_never_below_floor(self, rng):
        space = _space(scale=0.2)
        await ReducedSpaceStrategy(rng=rng).apply(space, _context(0.95))
        assert space["scale"] == 0.1
        assert space["reference_consistency"] is False

    def test_reduced_space_rejects_tiny_scale(self):
        assert not ReducedSpaceStrategy().validate(_space(scale=0.1))

    async def test_random_placement_extreme(self, rng):
        space = _space()
        strategy = RandomPlacementStrategy(rng=rng)
        await strategy.apply(space, _context(0.9))
        assert space["random_placement"] and space["location_omission"] and space["zone_confusion"]
        assert space["scale"] == pytest.approx(1.0 - 0.765 * 0.6)
        assert space["accuracy"] == pytest.approx(1.0 - 0.7 * 0.765)
        details = space["metadata"]["placement_transformation"]
        assert details["placement_type"] == "chaos"
        assert details["affected_zones"] == ALL_ZONE_VALUES
        assert 0.0 < strategy.impact_score <= 1.0

    async def test_location_omission_always_omits_at_high_severity(self):
        for seed in range(10):
            space = _space()
            await LocationOmissionStrategy(rng=random.Random(seed)).apply(space, _context(0.9))
            details = space["metadata"]["location_omission"]
            assert space["location_omission"] is True
            assert details["loss_level"] == "critical"
            assert details["omitted_information"]
            assert space["accuracy"] < 1.0


# ---------------------------------------------------------------------------
# Generic degradation and reference strategies
# ---------------------------------------------------------------------------


class TestGenericAndReference:
    async def test_generic_degradation_is_capped(self):
        space = _space()
        strategy = GenericDegradationStrategy()
        await strategy.apply(space, _context(0.9))
        assert space["accuracy"] == pytest.approx(0.2)
        assert strategy.impact_score == pytest.approx(0.8)
        assert space["generic_error"] is True
        assert space["zone_confusion"] is True
        assert space["reference_consistency"] is False

    async def test_reference_violation_flags(self):
        space = _space()
        await ReferenceViolationStrategy().apply(space, _context(0.8))
        assert space["pronoun_confusion"] and space["ambiguous_reference"] and space["reference_omission"]

    async def test_reference_strategy_raises_on_failed_manipulation(self, rng):
        service = SpatialManipulationService(ZoneManager(10), rng)
        strategy = ReferenceManipulationStrategy("ambiguous_reference", service.apply_ambiguous_reference)
        space = _space()
        with pytest.raises(StrategyExecutionError):
            await strategy.apply(space, _context(0.5))
        assert strategy.last_result.success is False
        assert space["accuracy"] == 1.0

    async def test_reference_strategy_reports_impact(self, rng):
        service = SpatialManipulationService(ZoneManager(10), rng)
        strategy = ReferenceManipulationStrategy("reference_omission", service.apply_reference_omission)
        space = _space()
        await strategy.apply(space, _context(0.5))
        assert strategy.impact_score == pytest.approx(0.4)
        assert space["reference_omission"] is True

    def test_strategies_satisfy_protocol(self):
        assert isinstance(ZoneConfusionStrategy(), SpaceStrategy)
        assert isinstance(GenericDegradationStrategy(), SpaceStrategy)
