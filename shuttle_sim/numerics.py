"""
Shuttle Ascent Simulation - Numeric Guards

Finite-or-fallback helpers applied at every force/integration boundary so a
NaN or Infinity is substituted and logged at the point it appears instead of
propagating through the state.
"""

import logging
import math

import numpy as np

logger = logging.getLogger(__name__)


def is_finite_scalar(value) -> bool:
    """True for a real number that is neither NaN nor infinite."""
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def is_finite_vector(vec) -> bool:
    """True if every component of `vec` is finite."""
    return bool(np.all(np.isfinite(vec)))


def finite_or(value, fallback: float, label: str = "value") -> float:
    """
    Return `value` as a float if finite, otherwise log a fault and return `fallback`.
    """
    if is_finite_scalar(value):
        return float(value)
    logger.warning(f"{label} became {value!r}; substituting {fallback}")
    return float(fallback)


def finite_vector_or_zero(vec: np.ndarray, label: str = "vector") -> np.ndarray:
    """
    Return `vec` if all components are finite, otherwise log a fault and
    return a zero vector of the same shape.
    """
    if is_finite_vector(vec):
        return vec
    logger.warning(f"{label} became non-finite ({vec}); substituting zero")
    return np.zeros_like(vec, dtype=np.float64)


def unit_vector(vec: np.ndarray) -> np.ndarray:
    """Normalize `vec`; the zero vector maps to itself."""
    norm = np.linalg.norm(vec)
    if norm == 0.0 or not np.isfinite(norm):
        return np.zeros(3)
    return vec / norm
