"""
Shuttle Ascent Simulation - Numerical Integration

This module implements the fixed-timestep semi-implicit Euler step and the
numerical safety guards applied after it (timestep clamp, ground clamp,
non-finite recovery).
"""

import logging
from typing import NamedTuple, Optional

import numpy as np

from .config import PhysicalConstants
from .numerics import finite_vector_or_zero, is_finite_scalar, is_finite_vector

logger = logging.getLogger(__name__)


class Kinematics(NamedTuple):
    """Position / velocity / acceleration triple produced by one step."""
    position: np.ndarray
    velocity: np.ndarray
    acceleration: np.ndarray


def clamp_timestep(dt: float, constants: PhysicalConstants) -> Optional[float]:
    """
    Limit `dt` to the largest stable step.

    Returns:
        The usable step, or None if `dt` is not positive and finite (the
        caller treats that as a no-op frame).
    """
    if not is_finite_scalar(dt) or dt <= 0.0:
        return None
    if dt > constants.max_dt:
        logger.debug(f"dt {dt:.4f}s capped to {constants.max_dt:.4f}s for stability.")
        return constants.max_dt
    return float(dt)


def compute_acceleration(force: np.ndarray, total_mass: float) -> np.ndarray:
    """
    a = F / m, or zero (logged) if the mass is not positive and finite.
    """
    if total_mass > 0.0 and is_finite_scalar(total_mass):
        return force / total_mass
    logger.error(f"Invalid mass detected ({total_mass}); acceleration set to zero.")
    return np.zeros(3)


def semi_implicit_euler_step(position: np.ndarray, velocity: np.ndarray,
                             force: np.ndarray, total_mass: float,
                             dt: float) -> Kinematics:
    """
    Perform a single semi-implicit (symplectic) Euler step.

        a     = F / m
        v_new = v + a * dt
        r_new = r + v_new * dt

    Args:
        position: Current position (m)
        velocity: Current velocity (m/s)
        force: Net force for this step (N)
        total_mass: Current vehicle mass (kg)
        dt: Time step (s), already clamped

    Returns:
        New Kinematics; inputs are not modified
    """
    acceleration = compute_acceleration(force, total_mass)
    velocity_new = velocity + acceleration * dt
    position_new = position + velocity_new * dt
    return Kinematics(position_new, velocity_new, acceleration)


def apply_ground_clamp(kin: Kinematics, constants: PhysicalConstants) -> Kinematics:
    """
    Snap a vehicle that overshot below the surface back onto it.

    Only triggers more than `ground_snap_tolerance` below the surface; any
    downward velocity / acceleration component is removed.
    """
    altitude = kin.position[1] - constants.earth_radius
    if altitude >= -constants.ground_snap_tolerance:
        return kin

    logger.warning(f"Vehicle significantly below ground ({altitude:.2f}m) during flight! "
                   f"Snapping back.")
    position = kin.position.copy()
    velocity = kin.velocity.copy()
    acceleration = kin.acceleration.copy()
    position[1] = constants.earth_radius
    velocity[1] = max(0.0, velocity[1])
    acceleration[1] = max(0.0, acceleration[1])
    return Kinematics(position, velocity, acceleration)


def recover_non_finite(kin: Kinematics, constants: PhysicalConstants) -> Kinematics:
    """
    Replace NaN/Infinity in the kinematic state with a defined fallback.

    - bad position: back to the launch position, at rest
    - bad velocity: zero velocity and acceleration
    - bad acceleration: zero acceleration
    """
    position, velocity, acceleration = kin

    if not is_finite_vector(position):
        logger.error("Position became NaN/Infinity. Resetting to initial ground position.")
        return Kinematics(constants.initial_position, np.zeros(3), np.zeros(3))

    if not is_finite_vector(velocity):
        logger.error("Velocity became NaN/Infinity. Resetting to zero.")
        return Kinematics(position, np.zeros(3), np.zeros(3))

    if not is_finite_vector(acceleration):
        return Kinematics(position, velocity, finite_vector_or_zero(acceleration, "Acceleration"))

    return kin
