"""Shared fixtures for the error engine tests.

Provides the default catalog, a seeded random source and factories for
content records.
"""

import copy
import random

import pytest

from lsf_errors.models.catalog import ErrorCategory, build_default_catalog


@pytest.fixture
def catalog():
    return build_default_catalog()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def entry(catalog):
    """Factory returning the catalog entry of a category."""

    def _entry(category: ErrorCategory):
        return catalog[category]

    return _entry


# ---------------------------------------------------------------------------
# Content factories
# ---------------------------------------------------------------------------

BASE_PARAMETERS = {
    "handshape": {"type": "index", "accuracy": 1.0},
    "location": {"type": "menton", "position": [0.0, 0.3, 0.2], "accuracy": 1.0},
    "movement": {
        "type": "linear",
        "amplitude": 0.5,
        "distance": 0.3,
        "direction": {"deviation": 0},
        "repetitions": 1,
        "accuracy": 1.0,
    },
    "orientation": {"type": "up", "angles": {"x": 180, "y": 0, "z": 0}, "accuracy": 1.0},
    "facial_expression": {
        "expression": "interrogative_partial",
        "intensity": 0.8,
        "active": True,
        "timing_offset": 0,
        "accuracy": 1.0,
    },
    "timing": {"speed": 1.0, "duration": 0.8, "fluidity": 0.9, "accuracy": 1.0},
    "space": {"accuracy": 1.0, "scale": 1.0, "zones": ["dominant_side"], "reference_consistency": True},
    "classifiers": {"type": "flat_surface", "accuracy": 1.0},
}


@pytest.fixture
def make_content():
    """Build a content record holding only the requested parameters."""

    def _make(*keys: str, **overrides):
        parameters = {k: copy.deepcopy(BASE_PARAMETERS[k]) for k in keys}
        for key, value in overrides.items():
            parameters[key] = value
        return {"parameters": parameters}

    return _make


@pytest.fixture
def svo_sequence():
    """Subject, verb, object, modifier: the French order."""
    return [
        {"id": "moi", "type": "pronoun"},
        {"id": "manger", "type": "verb", "category": "action"},
        {"id": "pomme", "type": "noun", "role": "object"},
        {"id": "vite", "type": "adverb"},
    ]


@pytest.fixture
def sov_sequence():
    return [
        {"id": "moi", "type": "pronoun"},
        {"id": "rouge", "type": "adjective"},
        {"id": "pomme", "type": "noun", "role": "object"},
        {"id": "beaucoup", "type": "adverb"},
        {"id": "manger", "type": "verb"},
    ]
