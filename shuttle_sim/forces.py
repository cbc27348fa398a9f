"""
Shuttle Ascent Simulation - Force Computations

This module implements the force model as pure functions (state in, force
out, no mutation):
- Central gravity
- Exponential-atmosphere drag
- Ground reaction (normal force) on the pad
- Stage-scheduled thrust along the local up axis

Every function substitutes a zero vector for a non-finite result and logs
the fault, so the integrator never sees NaN/Infinity from here.
"""

import logging

import numpy as np

from . import constants as C
from .config import PhysicalConstants
from .numerics import finite_or, finite_vector_or_zero, unit_vector
from .stages import FlightStage
from .state import BOOSTERS, AttachmentState, Component
from .types import ForceBreakdown

logger = logging.getLogger(__name__)


# =============================================================================
# ATMOSPHERE MODEL (exponential)
# =============================================================================

def compute_air_density(altitude: float, constants: PhysicalConstants) -> float:
    """
    Air density at `altitude`: rho = rho0 * exp(-h / H).

    Args:
        altitude: Height above the surface (m)

    Returns:
        Density in kg/m^3, or 0.0 above the atmosphere / for invalid input
    """
    if altitude > constants.atmosphere_height:
        return 0.0
    rho = constants.air_density_sea_level * np.exp(-altitude / constants.scale_height)
    return max(0.0, finite_or(rho, 0.0, "Air density"))


# =============================================================================
# FORCE MODELS
# =============================================================================

def compute_gravity_force(position: np.ndarray, total_mass: float,
                          constants: PhysicalConstants) -> np.ndarray:
    """
    Compute central gravitational force.

        F = -G * M * m / |r|^2 * r_hat

    Args:
        position: Position from Earth's centre (m)
        total_mass: Vehicle mass (kg)

    Returns:
        Gravitational force vector (N); zero inside the singularity guard
    """
    distance = finite_or(np.linalg.norm(position), 0.0, "Gravity distance")
    if distance < constants.min_gravity_distance:
        logger.warning("Invalid distance for gravity calculation. Returning zero force.")
        return np.zeros(3)

    magnitude = finite_or(
        constants.gravity_constant * constants.earth_mass * total_mass / (distance * distance),
        0.0, "Gravity magnitude"
    )

    return -magnitude * (position / distance)


def compute_drag_force(velocity: np.ndarray, altitude: float,
                       constants: PhysicalConstants) -> np.ndarray:
    """
    Compute atmospheric drag.

        F_drag = -0.5 * rho * Cd * A * |v|^2 * v_hat

    Zero above the atmosphere height, for zero velocity, or if any
    intermediate value is non-finite.
    """
    if altitude > constants.atmosphere_height:
        return np.zeros(3)

    rho = compute_air_density(altitude, constants)
    speed_sq = finite_or(np.dot(velocity, velocity), 0.0, "Speed squared")
    if speed_sq == 0.0:
        return np.zeros(3)

    drag_magnitude = finite_or(
        0.5 * rho * constants.drag_coefficient * constants.cross_sectional_area * speed_sq,
        0.0, "Drag force magnitude"
    )

    return -drag_magnitude * unit_vector(velocity)


def compute_normal_force(total_mass: float, position: np.ndarray,
                         constants: PhysicalConstants) -> np.ndarray:
    """
    Ground reaction for a vehicle resting on the pad.

    The magnitude is the vehicle's weight along the up axis at its current
    radius, so on the pad it exactly cancels compute_gravity_force; the
    caller applies it only while IDLE on the surface.
    """
    weight = -float(np.dot(compute_gravity_force(position, total_mass, constants), C.UP_AXIS))
    return max(0.0, finite_or(weight, 0.0, "Normal force magnitude")) * C.UP_AXIS


def compute_thrust_magnitude(stage: FlightStage, attachment: dict,
                             fuel_percentage: float,
                             constants: PhysicalConstants) -> float:
    """
    Thrust magnitude scheduled by flight stage.

    Args:
        stage: Current flight stage
        attachment: Component -> AttachmentState mapping
        fuel_percentage: External tank fuel remaining (0-100)

    Returns:
        Thrust magnitude (N), 0.0 if the result is non-finite
    """
    has_fuel = fuel_percentage > 0.0
    magnitude = 0.0

    if stage == FlightStage.ENGINE_STARTUP:
        magnitude = constants.startup_thrust
    elif stage == FlightStage.LIFTOFF:
        if has_fuel:
            magnitude += constants.thrust_main_engines
        for booster in BOOSTERS:
            if _is_attached(attachment, booster):
                magnitude += constants.thrust_solid_rockets / 2.0
    elif stage == FlightStage.ATMOSPHERIC_ASCENT:
        if has_fuel:
            magnitude += constants.thrust_main_engines
    elif stage == FlightStage.ORBITAL_INSERTION:
        if has_fuel:
            magnitude += constants.thrust_main_engines * constants.insertion_thrust_fraction
    elif stage == FlightStage.ORBITAL_MANEUVERING:
        magnitude += constants.thrust_main_engines * constants.maneuvering_thrust_fraction

    return finite_or(magnitude, 0.0, "Thrust magnitude")


def compute_thrust_force(stage: FlightStage, attachment: dict,
                         fuel_percentage: float,
                         constants: PhysicalConstants) -> np.ndarray:
    """Thrust vector, always along the local up axis (no gimbal)."""
    return compute_thrust_magnitude(stage, attachment, fuel_percentage, constants) * C.UP_AXIS


def _is_attached(attachment: dict, component: Component) -> bool:
    return attachment[component] is AttachmentState.ATTACHED


def compute_force_breakdown(position: np.ndarray, velocity: np.ndarray,
                            stage: FlightStage, attachment: dict,
                            fuel_percentage: float, total_mass: float,
                            constants: PhysicalConstants) -> ForceBreakdown:
    """
    Compute all forces acting at the start of a step and return them as a
    dictionary for the integrator and for logging.

    Normal force applies only while IDLE on the ground; drag only while
    airborne inside the atmosphere and not IDLE.
    """
    altitude = float(position[1] - constants.earth_radius)

    F_grav = compute_gravity_force(position, total_mass, constants)

    if stage == FlightStage.IDLE and altitude <= 0.0:
        F_normal = compute_normal_force(total_mass, position, constants)
    else:
        F_normal = np.zeros(3)

    if stage != FlightStage.IDLE and 0.0 < altitude < constants.atmosphere_height:
        F_drag = compute_drag_force(velocity, altitude, constants)
    else:
        F_drag = np.zeros(3)

    F_thrust = compute_thrust_force(stage, attachment, fuel_percentage, constants)

    return {
        'gravity': F_grav,
        'normal': F_normal,
        'drag': F_drag,
        'thrust': F_thrust,
        'total': finite_vector_or_zero(F_grav + F_normal + F_drag + F_thrust, "Net force"),
        'gravity_magnitude': float(np.linalg.norm(F_grav)),
        'normal_magnitude': float(np.linalg.norm(F_normal)),
        'drag_magnitude': float(np.linalg.norm(F_drag)),
        'thrust_magnitude': float(np.linalg.norm(F_thrust)),
    }
