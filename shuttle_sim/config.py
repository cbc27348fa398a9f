"""
Shuttle Ascent Simulation - Configuration

This module provides the PhysicalConstants dataclass that is injected into
the physics engine at construction. It is read-only: different vehicles or
test scenarios are described by building a new instance (dataclasses.replace
or create_test_config), never by mutating one.
"""

from dataclasses import dataclass

import numpy as np

from . import constants as C


@dataclass(frozen=True)
class PhysicalConstants:
    """
    Immutable physical and vehicle configuration.

    Section grouping:
      1. Earth / gravitating body
      2. Atmosphere
      3. Vehicle masses
      4. Propulsion
      5. Aerodynamics
      6. Orbit targets
      7. Detachment thresholds
      8. Launch sequence
      9. Timing and numerical guards
    """

    # ── 1. Earth ─────────────────────────────────────────────────────────
    earth_radius: float = C.EARTH_RADIUS
    earth_mass: float = C.EARTH_MASS
    gravity_constant: float = C.GRAVITY_CONSTANT
    gravity: float = C.GRAVITY

    # ── 2. Atmosphere ────────────────────────────────────────────────────
    atmosphere_height: float = C.ATMOSPHERE_HEIGHT
    air_density_sea_level: float = C.AIR_DENSITY_SEA_LEVEL
    scale_height: float = C.SCALE_HEIGHT

    # ── 3. Vehicle masses ────────────────────────────────────────────────
    shuttle_mass: float = C.SHUTTLE_MASS
    fuel_tank_mass: float = C.FUEL_TANK_MASS
    rocket_mass: float = C.ROCKET_MASS

    # ── 4. Propulsion ────────────────────────────────────────────────────
    thrust_main_engines: float = C.THRUST_MAIN_ENGINES
    thrust_solid_rockets: float = C.THRUST_SOLID_ROCKETS  # both boosters
    startup_thrust_margin: float = C.STARTUP_THRUST_MARGIN
    insertion_thrust_fraction: float = C.INSERTION_THRUST_FRACTION
    maneuvering_thrust_fraction: float = C.MANEUVERING_THRUST_FRACTION
    fuel_consumption_rate: float = C.FUEL_CONSUMPTION_RATE

    # ── 5. Aerodynamics ──────────────────────────────────────────────────
    drag_coefficient: float = C.DRAG_COEFFICIENT
    cross_sectional_area: float = C.CROSS_SECTIONAL_AREA

    # ── 6. Orbit targets ─────────────────────────────────────────────────
    leo_altitude: float = C.LOW_EARTH_ORBIT_ALTITUDE
    leo_velocity: float = C.ORBITAL_VELOCITY_LEO
    leo_velocity_tolerance: float = C.ORBITAL_VELOCITY_TOLERANCE
    leo_altitude_window: float = C.LEO_ALTITUDE_WINDOW
    stabilization_accel_sq_threshold: float = C.STABILIZATION_ACCEL_SQ_THRESHOLD
    stabilization_speed_fraction: float = C.STABILIZATION_SPEED_FRACTION

    # ── 7. Detachment ────────────────────────────────────────────────────
    srb_detach_altitude: float = C.SRB_DETACH_ALTITUDE
    srb_detach_time: float = C.SRB_DETACH_TIME
    fuel_tank_detach_altitude: float = C.FUEL_TANK_DETACH_ALTITUDE
    fuel_tank_detach_time: float = C.FUEL_TANK_DETACH_TIME
    fuel_tank_detach_fuel_percent: float = C.FUEL_TANK_DETACH_FUEL_PERCENT
    fuel_tank_detach_speed_fraction: float = C.FUEL_TANK_DETACH_SPEED_FRACTION

    # ── 8. Launch sequence ───────────────────────────────────────────────
    engine_startup_duration: float = C.ENGINE_STARTUP_DURATION
    tower_tilt_lead_time: float = C.TOWER_TILT_LEAD_TIME
    tower_tilt_angle_deg: float = C.TOWER_TILT_ANGLE_DEG

    # ── 9. Timing / numerical guards ─────────────────────────────────────
    max_dt: float = C.MAX_DT
    fallback_mass: float = C.FALLBACK_MASS
    min_gravity_distance: float = C.MIN_GRAVITY_DISTANCE
    ground_snap_tolerance: float = C.GROUND_SNAP_TOLERANCE
    negligible_thrust_sq: float = C.NEGLIGIBLE_THRUST_SQ

    @property
    def full_stack_mass(self) -> float:
        """Orbiter + full tank + both boosters (kg)."""
        return self.shuttle_mass + self.fuel_tank_mass + 2.0 * self.rocket_mass

    @property
    def startup_thrust(self) -> float:
        """Hold-down thrust during engine startup (N)."""
        return self.full_stack_mass * self.gravity * self.startup_thrust_margin

    @property
    def tower_tilt_time(self) -> float:
        """Startup-timer value at which the service tower starts tilting (s)."""
        return self.engine_startup_duration - self.tower_tilt_lead_time

    @property
    def initial_position(self) -> np.ndarray:
        """Launch position on the surface, +Y up (m)."""
        return np.array([0.0, self.earth_radius, 0.0])


def create_default_config() -> PhysicalConstants:
    """Create a PhysicalConstants with default values from constants."""
    return PhysicalConstants()


def create_test_config(**overrides) -> PhysicalConstants:
    """Create a configuration for testing.

    Any keyword arg accepted by PhysicalConstants can be passed as an override.
    """
    return PhysicalConstants(**overrides)
