"""Tests for the spatial strategy registry."""

import pytest

from lsf_errors.core.spatial.registry import StrategyKey, StrategyRegistry, Unsupported
from lsf_errors.core.spatial.strategies import (
    GenericDegradationStrategy,
    ReferenceManipulationStrategy,
    ZoneConfusionStrategy,
)
from lsf_errors.core.spatial.zones import ZoneManager
from lsf_errors.exceptions import UnsupportedStrategyError


@pytest.fixture
def registry(rng):
    return StrategyRegistry(ZoneManager(10), rng, level="advanced")


def test_every_key_is_registered(registry):
    assert sorted(registry.keys) == sorted(k.value for k in StrategyKey)


def test_create_returns_capped_strategy(registry):
    strategy = registry.create(StrategyKey.ZONE_CONFUSION)
    assert isinstance(strategy, ZoneConfusionStrategy)
    assert strategy.max_degradation == pytest.approx(0.9)
    assert registry.create("random_placement").max_degradation == pytest.approx(0.9)


def test_learner_level_scales_caps(rng):
    registry = StrategyRegistry(ZoneManager(10), rng, level="beginner")
    assert registry.max_degradation("reference_violation") == pytest.approx(0.3)
    assert registry.max_degradation("pronoun_confusion") == pytest.approx(0.48)
    assert registry.create_default().max_degradation == pytest.approx(0.48)


def test_zone_confusion_ceiling_ignores_level(rng):
    for level in ("beginner", "intermediate", "advanced"):
        registry = StrategyRegistry(ZoneManager(10), rng, level=level)
        assert registry.max_degradation("zone_confusion") == pytest.approx(0.9)


def test_reference_keys_wrap_manipulations(registry):
    strategy = registry.create("pronoun_confusion")
    assert isinstance(strategy, ReferenceManipulationStrategy)
    assert strategy.name == "pronoun_confusion"
    assert strategy.operation == registry.manipulation.apply_pronoun_confusion


def test_unknown_and_unregistered_keys(registry):
    unknown = registry.create("teleportation")
    assert unknown == Unsupported(key="teleportation", reason="unknown key")

    assert registry.unregister(StrategyKey.REDUCED_SPACE)
    assert not registry.unregister(StrategyKey.REDUCED_SPACE)
    missing = registry.create(StrategyKey.REDUCED_SPACE)
    assert isinstance(missing, Unsupported)
    assert missing.reason == "not implemented"


def test_require_raises_for_unsupported(registry):
    with pytest.raises(UnsupportedStrategyError) as exc_info:
        registry.require("teleportation")
    assert exc_info.value.key == "teleportation"
    assert isinstance(registry.require("zone_confusion"), ZoneConfusionStrategy)


def test_create_default(registry):
    strategy = registry.create_default()
    assert isinstance(strategy, GenericDegradationStrategy)
    assert strategy.max_degradation == pytest.approx(0.8)


def test_register_custom_builder(registry):
    registry.register("gentle", lambda cap: GenericDegradationStrategy(cap / 2))
    assert "gentle" in registry.keys
    assert registry.create("gentle").max_degradation == pytest.approx(0.4)
