"""Tests for the shared accuracy helpers."""

import pytest

from lsf_errors.core.accuracy import (
    clamp_accuracy,
    current_accuracy,
    get_parameter,
    normalize_angle,
    reduce_accuracy,
)


def test_missing_accuracy_counts_as_perfect():
    assert current_accuracy({}) == 1.0


def test_reduce_accuracy_returns_new_value():
    param = {"accuracy": 0.8}
    assert reduce_accuracy(param, 0.3) == pytest.approx(0.5)
    assert param["accuracy"] == pytest.approx(0.5)


def test_reduce_accuracy_never_goes_below_zero():
    param = {"accuracy": 0.2}
    reduce_accuracy(param, 5)
    assert param["accuracy"] == 0.0


def test_negative_reduction_is_ignored():
    param = {"accuracy": 0.6}
    reduce_accuracy(param, -0.5)
    assert param["accuracy"] == 0.6


def test_clamp():
    assert clamp_accuracy(-1) == 0.0
    assert clamp_accuracy(2) == 1.0
    assert clamp_accuracy(0.4) == 0.4


@pytest.mark.parametrize(
    "angle, expected",
    [(0, 0), (180, 180), (-180, 180), (190, -170), (540, 180), (-90, -90), (10.5, 10.5),
     (180.004, 180.0), (-179.996, 180.0), (359.999, 0.0)],
)
def test_normalize_angle(angle, expected):
    assert normalize_angle(angle) == expected


def test_get_parameter():
    content = {"parameters": {"handshape": {"type": "index"}, "broken": "x"}}
    assert get_parameter(content, "handshape") == {"type": "index"}
    assert get_parameter(content, "broken") is None
    assert get_parameter(content, "location") is None
    assert get_parameter({}, "handshape") is None
