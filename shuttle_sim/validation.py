"""
Shuttle Ascent Simulation - Validation Checks

This module implements flight-invariant checks over a single state or a
recorded flight:
- Finite kinematics
- Fuel within [0, 100]
- Total mass positive and non-increasing
- Stage sequence forward-only (free space <-> maneuvering excepted)
- Attachment flags never re-attach
- No ground penetration beyond a small epsilon

The engine itself never raises; these checks are for the driver loop (when
validation is requested) and for tests.
"""

from typing import Optional, Sequence, Tuple

import numpy as np

from . import constants as C
from .stages import FlightStage, is_allowed_transition, parse_stage
from .state import FlightState


class ValidationError(Exception):
    """Raised when a flight invariant check fails."""
    pass


def check_state_finite(state: FlightState) -> bool:
    """
    Check that position, velocity and acceleration are all finite.

    Returns:
        True if valid, raises ValidationError otherwise
    """
    for name in ('position', 'velocity', 'acceleration'):
        vec = getattr(state, name)
        if not np.all(np.isfinite(vec)):
            raise ValidationError(f"Non-finite {name}: {vec}")
    return True


def check_fuel_bounds(fuel_percentages: Sequence[float]) -> bool:
    """
    Check every fuel sample is within [0, 100].

    Returns:
        True if valid, raises ValidationError otherwise
    """
    for i, fuel in enumerate(fuel_percentages):
        if not (0.0 <= fuel <= C.FUEL_PERCENT_MAX):
            raise ValidationError(f"Fuel out of bounds at sample {i}: {fuel:.4f}%")
    return True


def check_mass_positive(masses: Sequence[float]) -> bool:
    """
    Check every total-mass sample is positive and finite.

    Returns:
        True if valid, raises ValidationError otherwise
    """
    for i, m in enumerate(masses):
        if not np.isfinite(m) or m <= 0.0:
            raise ValidationError(f"Invalid total mass at sample {i}: {m}")
    return True


def check_mass_non_increasing(masses: Sequence[float], tolerance: float = 1e-6) -> bool:
    """
    Check total mass never grows from one sample to the next.

    Returns:
        True if valid, raises ValidationError otherwise
    """
    for i in range(1, len(masses)):
        if masses[i] > masses[i - 1] + tolerance:
            raise ValidationError(
                f"Mass increased at sample {i}: {masses[i-1]:.3f} -> {masses[i]:.3f} kg"
            )
    return True


def check_stage_sequence(stages: Sequence) -> bool:
    """
    Check the visited stages only move forward through the canonical order.

    Accepts FlightStage members or their names.

    Returns:
        True if valid, raises ValidationError otherwise
    """
    previous: Optional[FlightStage] = None
    for i, raw in enumerate(stages):
        stage = parse_stage(raw)
        if stage is None:
            raise ValidationError(f"Unknown stage at sample {i}: {raw!r}")
        if previous is not None and not is_allowed_transition(previous, stage):
            raise ValidationError(
                f"Backward stage transition at sample {i}: {previous.name} -> {stage.name}"
            )
        previous = stage
    return True


def check_attachment_monotonic(flags: Sequence[bool], name: str = "component") -> bool:
    """
    Check an attachment flag goes True -> False at most once and never back.

    Returns:
        True if valid, raises ValidationError otherwise
    """
    detached = False
    for i, attached in enumerate(flags):
        if detached and attached:
            raise ValidationError(f"{name} re-attached at sample {i}")
        if not attached:
            detached = True
    return True


def check_above_ground(altitudes: Sequence[float], epsilon: float = 1e-6) -> bool:
    """
    Check no altitude sample is below the surface by more than `epsilon`.

    Returns:
        True if valid, raises ValidationError otherwise
    """
    for i, alt in enumerate(altitudes):
        if alt < -epsilon:
            raise ValidationError(f"Vehicle below ground at sample {i}: {alt:.6f} m")
    return True


def validate_state(state: FlightState, abort_on_error: bool = True) -> Tuple[bool, Optional[str]]:
    """
    Run the per-step checks on one state.

    Args:
        state: State to check
        abort_on_error: If True, re-raise the ValidationError

    Returns:
        (is_valid, error_message)
    """
    try:
        check_state_finite(state)
        check_fuel_bounds([state.fuel_percentage])
    except ValidationError as e:
        if abort_on_error:
            raise
        return False, str(e)
    return True, None


def validate_flight_log(log, ground_epsilon: float = C.GROUND_SNAP_TOLERANCE) -> Tuple[bool, Optional[str]]:
    """
    Run every trajectory-level check on a FlightLog.

    Returns:
        (is_valid, error_message); never raises
    """
    try:
        check_fuel_bounds(log.fuel_percentage)
        check_mass_positive(log.mass)
        check_mass_non_increasing(log.mass)
        check_stage_sequence(log.stage)
        check_attachment_monotonic(log.rocket1_attached, "rocket1")
        check_attachment_monotonic(log.rocket2_attached, "rocket2")
        check_attachment_monotonic(log.fuel_tank_attached, "fuelTank")
        check_above_ground(log.altitude, ground_epsilon)
    except ValidationError as e:
        return False, str(e)
    return True, None
