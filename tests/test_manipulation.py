"""Tests for reference-level spatial manipulations."""

import pytest

from lsf_errors.core.spatial.manipulation import SpatialManipulationService
from lsf_errors.core.spatial.zones import ReferentialZone, ZoneManager


@pytest.fixture
def manager():
    return ZoneManager(50)


@pytest.fixture
def service(manager, rng):
    return SpatialManipulationService(manager, rng)


@pytest.fixture
def space():
    return {"accuracy": 1.0, "scale": 1.0, "zones": ["dominant_side"], "reference_consistency": True}


def _establish(manager, *zone_ids, usage=1.0):
    for zone_id in zone_ids:
        manager.establish_zone(zone_id)
        manager.record_usage(zone_id, usage)


# ---------------------------------------------------------------------------
# Ambiguous reference
# ---------------------------------------------------------------------------


async def test_ambiguity_needs_established_zones(service, space):
    result = await service.apply_ambiguous_reference(space, 0.5)
    assert not result.success
    assert result.error_message == "Not enough established zones to create an ambiguity"
    assert "ambiguous_reference" not in space


async def test_ambiguity_on_established_zones(manager, service, space):
    _establish(manager, "subject_zone", "object_zone")
    result = await service.apply_ambiguous_reference(space, 0.5)
    assert result.success
    assert result.accuracy_impact == pytest.approx(0.15)
    assert space["ambiguous_zones"] == ["object_zone", "subject_zone"]
    assert space["accuracy"] == pytest.approx(0.85)
    assert manager.get_zone("subject_zone").consistency == pytest.approx(0.8)


async def test_ambiguity_ignores_worn_out_zones(manager, service, space):
    _establish(manager, "subject_zone", "object_zone")
    manager.update_consistency("object_zone", 0.5)
    result = await service.apply_ambiguous_reference(space, 0.5)
    assert not result.success


def test_same_role_ambiguity_costs_more(manager):
    objects = [manager.get_zone("object_zone"), manager.get_zone("secondary_object_zone")]
    mixed = [manager.get_zone("object_zone"), manager.get_zone("subject_zone")]
    assert SpatialManipulationService.ambiguity_impact(objects, 1.0) > SpatialManipulationService.ambiguity_impact(
        mixed, 1.0
    )


# ---------------------------------------------------------------------------
# Inconsistent reference
# ---------------------------------------------------------------------------


async def test_inconsistency_needs_a_target(service, space):
    result = await service.apply_inconsistent_reference(space, 0.7)
    assert not result.success
    assert space["reference_consistency"] is True


async def test_inconsistency_with_two_subjects(manager, service, space):
    manager.add_zone(ReferentialZone("second_subject", "Second subject", (-50.0, 10.0), "subject"))
    result = await service.apply_inconsistent_reference(space, 0.7)
    assert result.success
    assert space["reference_consistency"] is False
    assert space["inconsistency_type"] == "multiple_subjects"
    assert result.affected_zones == ["subject_zone", "second_subject"]
    assert result.accuracy_impact == pytest.approx(0.63)
    assert manager.get_zone("second_subject").consistency == pytest.approx(0.79)


async def test_overlapping_established_zones_are_targets(manager, service):
    manager.add_zone(ReferentialZone("near_subject", "Near subject", (-25.0, 0.0), "object"))
    _establish(manager, "subject_zone", "near_subject")
    kinds = {t.type for t in service.inconsistency_targets()}
    assert "zone_overlap" in kinds


# ---------------------------------------------------------------------------
# Omission, pronouns, reorganisation
# ---------------------------------------------------------------------------


async def test_reference_omission(service, space):
    result = await service.apply_reference_omission(space, 0.5)
    assert result.success
    assert len(space["omitted_references"]) == 4
    assert all(ref.startswith("ref_") for ref in space["omitted_references"])
    assert space["accuracy"] == pytest.approx(0.6)


async def test_reference_omission_with_zero_severity(service, space):
    result = await service.apply_reference_omission(space, 0.0)
    assert not result.success
    assert result.error_message == "Severity too low to omit any reference"


async def test_pronoun_confusion(service, space):
    patterns = {p.pattern_id for p in service.pronoun_confusion_patterns()}
    assert patterns == {"subject_object_confusion", "temporal_confusion", "proximity_confusion"}

    result = await service.apply_pronoun_confusion(space, 0.5)
    assert result.success
    assert space["pronoun_confusion"] is True
    assert space["confusion_pattern"] in patterns
    assert space["accuracy"] < 1.0


async def test_pronoun_confusion_without_zones(manager, service, space):
    for zone in manager.all_zones():
        manager.remove_zone(zone.id)
    result = await service.apply_pronoun_confusion(space, 0.5)
    assert not result.success


async def test_spatial_reorganization(manager, service, space):
    result = await service.apply_spatial_reorganization(space, 0.5)
    assert result.success
    assert len(result.affected_zones) == 4
    assert space["spatial_reorganization"] is True
    assert space["original_organization"]["complexity_level"] == "expert"
    assert space["new_organization"]["type"] == "minor_reorganization"
    assert space["accuracy"] == pytest.approx(0.75)
    assert manager.get_zone(result.affected_zones[0]).consistency == pytest.approx(0.8)


# ---------------------------------------------------------------------------
# Generic degradation and diagnostics
# ---------------------------------------------------------------------------


def test_generic_degradation(space):
    result = SpatialManipulationService.apply_generic_degradation(space, 0.3)
    assert result.success
    assert space["accuracy"] == pytest.approx(0.7)
    assert space["generic_error"] is True
    assert space["error_severity"] == 0.3


def test_coherence_analysis():
    analysis = SpatialManipulationService.analyze_coherence(
        {"ambiguous_reference": True, "reference_consistency": False}
    )
    assert analysis.coherence_score == pytest.approx(0.5)
    assert analysis.errors == ["Inconsistent spatial reference"]
    assert analysis.warnings == ["Ambiguous spatial references"]
    assert analysis.suggestions == ["Clarify spatial references", "Restore reference consistency"]


def test_validate_config():
    assert SpatialManipulationService.validate_config(0.5, max_zones_affected=2, min_accuracy_threshold=0.1)
    assert not SpatialManipulationService.validate_config(1.5)
    assert not SpatialManipulationService.validate_config(0.5, max_zones_affected=0)
    assert not SpatialManipulationService.validate_config(0.5, min_accuracy_threshold=2.0)
