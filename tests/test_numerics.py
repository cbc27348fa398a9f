import logging

import numpy as np

from shuttle_sim.numerics import (
    finite_or, finite_vector_or_zero, is_finite_scalar, is_finite_vector, unit_vector,
)


def test_is_finite_scalar():
    assert is_finite_scalar(1.5)
    assert not is_finite_scalar(float("nan"))
    assert not is_finite_scalar(float("inf"))
    assert not is_finite_scalar(None)


def test_is_finite_vector():
    assert is_finite_vector(np.array([1.0, 2.0, 3.0]))
    assert not is_finite_vector(np.array([1.0, np.nan, 3.0]))


def test_finite_or_passthrough():
    assert finite_or(2.0, 0.0) == 2.0


def test_finite_or_fallback_logs(caplog):
    with caplog.at_level(logging.WARNING):
        assert finite_or(float("nan"), 7.0, "Mass") == 7.0
    assert "Mass" in caplog.text


def test_finite_vector_or_zero(caplog):
    good = np.array([1.0, 2.0, 3.0])
    assert finite_vector_or_zero(good) is good
    with caplog.at_level(logging.WARNING):
        out = finite_vector_or_zero(np.array([np.inf, 0.0, 0.0]), "Drag")
    np.testing.assert_array_equal(out, np.zeros(3))
    assert "Drag" in caplog.text


def test_unit_vector():
    np.testing.assert_allclose(unit_vector(np.array([3.0, 4.0, 0.0])), [0.6, 0.8, 0.0])
    np.testing.assert_array_equal(unit_vector(np.zeros(3)), np.zeros(3))
