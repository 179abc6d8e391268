"""Tests for the engine facade."""

import copy
import random

import pytest

from lsf_errors.config import settings
from lsf_errors.core.engine import ErrorTransformationEngine
from lsf_errors.core.orientation import OrientationTransformer
from lsf_errors.core.proforme import ProformeTransformer
from lsf_errors.core.spatial.transformer import SyntacticSpaceTransformer
from lsf_errors.models.catalog import ErrorCategory, build_default_catalog, parse_transformation


@pytest.fixture
def engine(catalog):
    return ErrorTransformationEngine(catalog=catalog, rng=random.Random(7))


@pytest.fixture
def full_content(make_content, svo_sequence):
    content = make_content(
        "handshape", "location", "movement", "orientation", "facial_expression", "timing", "space",
        "classifiers",
    )
    content["sequence"] = svo_sequence
    return content


def test_one_transformer_per_category(engine):
    assert set(engine.transformers) == set(ErrorCategory)
    assert isinstance(engine.transformer_for(ErrorCategory.ORIENTATION), OrientationTransformer)
    assert isinstance(engine.transformer_for("syntactic_space"), SyntacticSpaceTransformer)
    assert isinstance(engine.transformer_for(ErrorCategory.PROFORME), ProformeTransformer)
    assert engine.transformer_for("telepathy") is None


def test_default_catalog_keeps_category_severities():
    engine = ErrorTransformationEngine()
    expected = build_default_catalog()
    severities = {c: e.default_transformation.severity for c, e in engine.catalog.items()}
    assert severities == {c: e.default_transformation.severity for c, e in expected.items()}
    assert severities[ErrorCategory.FACIAL_EXPRESSION] == pytest.approx(0.35)
    assert severities[ErrorCategory.RHYTHM] == pytest.approx(0.25)
    assert severities[ErrorCategory.SYNTACTIC_SPACE] == pytest.approx(0.4)
    assert severities[ErrorCategory.PROFORME] == pytest.approx(0.35)


def test_configured_severity_overrides_every_category(monkeypatch):
    monkeypatch.setattr(settings, "default_severity", 0.5)
    engine = ErrorTransformationEngine()
    assert {e.default_transformation.severity for e in engine.catalog.values()} == {0.5}


async def test_sync_transformer_through_engine(engine, full_content):
    await engine.apply(full_content, ErrorCategory.ORIENTATION, {"type": "substitution"})
    orientation = full_content["parameters"]["orientation"]
    assert orientation["type"] != "up"
    assert orientation["accuracy"] <= 0.6


async def test_async_transformer_through_engine(engine, full_content):
    await engine.apply(full_content, "syntactic_space", {"type": "zone_confusion", "factor": 0.9})
    assert full_content["parameters"]["space"]["zones"] == []
    assert full_content["spatial_analysis"]["strategy"] == "zone_confusion"


async def test_parsed_transformation_is_accepted(engine, full_content):
    transform = parse_transformation({"type": "french_structure", "factor": 0.3})
    await engine.apply(full_content, ErrorCategory.SIGN_ORDER, transform)
    assert [s["id"] for s in full_content["sequence"]] == ["moi", "pomme", "manger", "vite"]


async def test_invalid_payload_applies_default(engine, full_content):
    await engine.apply(full_content, ErrorCategory.ORIENTATION, {"type": "teleport"})
    assert full_content["parameters"]["orientation"]["accuracy"] == pytest.approx(0.7)

    await engine.apply(full_content, ErrorCategory.SYNTACTIC_SPACE, {"type": "zone_confusion", "factor": "lots"})
    assert full_content["parameters"]["space"]["accuracy"] == pytest.approx(0.6)


async def test_unknown_category_is_ignored(engine, full_content):
    before = copy.deepcopy(full_content)
    await engine.apply(full_content, "telepathy", {"type": "substitution"})
    await engine.apply_default(full_content, "telepathy")
    assert full_content == before


async def test_apply_default(engine, full_content):
    await engine.apply_default(full_content, ErrorCategory.RHYTHM)
    assert full_content["parameters"]["timing"]["accuracy"] == pytest.approx(0.75)
    await engine.apply_default(full_content, ErrorCategory.SYNTACTIC_SPACE)
    assert full_content["parameters"]["space"]["accuracy"] == pytest.approx(0.6)


async def test_whole_catalog_keeps_accuracies_in_range(engine, full_content):
    for category, entry in engine.catalog.items():
        for transform in entry.transformations:
            await engine.apply(full_content, category, transform)

    for key, param in full_content["parameters"].items():
        assert 0.0 <= param["accuracy"] <= 1.0, key
    assert 0.0 <= full_content["syntax_accuracy"] <= 1.0
