"""
Shuttle Ascent Simulation - Type Definitions

This module provides TypedDict / NamedTuple definitions for structured
return types passed between the force model, state machine and logger.
"""

from typing import NamedTuple, TypedDict

import numpy as np
from numpy.typing import NDArray


class ForceBreakdown(TypedDict):
    """Return type for force computation details (+Y up, Earth-centred)."""
    gravity: NDArray[np.float64]  # Gravity force vector (N)
    normal: NDArray[np.float64]  # Ground reaction, zero unless resting on the pad (N)
    drag: NDArray[np.float64]  # Drag force vector (N)
    thrust: NDArray[np.float64]  # Thrust force vector (N)
    total: NDArray[np.float64]  # Net force vector (N)
    gravity_magnitude: float  # (N)
    normal_magnitude: float  # (N)
    drag_magnitude: float  # (N)
    thrust_magnitude: float  # (N)


class StageObservation(NamedTuple):
    """Everything the stage transition function looks at after a step."""
    altitude: float  # m above the surface
    speed: float  # m/s
    acceleration_sq: float  # |a|^2, (m/s^2)^2
    thrust_sq: float  # |thrust|^2 for the current stage, N^2
    engine_startup_timer: float  # s
    srb_detached: bool
    et_detached: bool
