"""
Shuttle Ascent Simulation - Physical Constants and Vehicle Parameters

This module defines the default physical constants, vehicle masses, thrust
levels and stage-transition thresholds used throughout the simulation.
The values are read once into a PhysicalConstants object (see config.py);
nothing here is mutated at runtime.

Coordinate convention: +Y is local "up", the vehicle starts on the surface
at (0, R_EARTH, 0) measured from Earth's centre.
"""

import numpy as np

# =============================================================================
# EARTH PARAMETERS
# =============================================================================

# Earth mean radius (m)
EARTH_RADIUS = 6371000.0

# Earth mass (kg)
EARTH_MASS = 5.972e24

# Universal gravitational constant (m^3/(kg·s^2))
GRAVITY_CONSTANT = 6.67430e-11

# Standard gravitational acceleration at sea level (m/s^2)
GRAVITY = 9.81

# =============================================================================
# ATMOSPHERE (exponential model)
# =============================================================================

ATMOSPHERE_HEIGHT = 100000.0      # m - drag is zero above this
AIR_DENSITY_SEA_LEVEL = 1.225     # kg/m^3
SCALE_HEIGHT = 8500.0             # m

# =============================================================================
# VEHICLE MASSES
# =============================================================================

SHUTTLE_MASS = 110000.0           # kg (orbiter dry mass)
FUEL_TANK_MASS = 760000.0         # kg (external tank, full, including fuel)
ROCKET_MASS = 590000.0            # kg (ONE solid rocket booster, including fuel)

FULL_STACK_MASS = SHUTTLE_MASS + FUEL_TANK_MASS + 2 * ROCKET_MASS  # 2,050,000 kg

# =============================================================================
# PROPULSION
# =============================================================================

THRUST_MAIN_ENGINES = 3 * 1.75e6   # N (three main engines) = 5.25 MN
THRUST_SOLID_ROCKETS = 2 * 14.7e6  # N (both boosters together) = 29.4 MN

# Hold-down thrust during engine startup: full-stack weight plus a small margin
# so the stack does not sink through the pad while the engines spool up.
STARTUP_THRUST_MARGIN = 1.005
THRUST_ENGINE_STARTUP = FULL_STACK_MASS * GRAVITY * STARTUP_THRUST_MARGIN  # ~20.2 MN

INSERTION_THRUST_FRACTION = 0.5     # main engines during orbital insertion
MANEUVERING_THRUST_FRACTION = 0.001  # station-keeping thrust

FUEL_CONSUMPTION_RATE = 460.0      # kg/s (main engines)

# =============================================================================
# AERODYNAMICS
# =============================================================================

DRAG_COEFFICIENT = 0.2
CROSS_SECTIONAL_AREA = 200.0       # m^2, largest cross-section during ascent

# =============================================================================
# ORBIT TARGETS
# =============================================================================

LOW_EARTH_ORBIT_ALTITUDE = 200000.0   # m
ORBITAL_VELOCITY_LEO = 7800.0         # m/s
ORBITAL_VELOCITY_TOLERANCE = 50.0     # m/s
LEO_ALTITUDE_WINDOW = 10000.0         # m, +/- around the target altitude

# Stabilization -> free space: |a|^2 below this and speed above the fraction
STABILIZATION_ACCEL_SQ_THRESHOLD = 0.1   # (m/s^2)^2
STABILIZATION_SPEED_FRACTION = 0.9

# =============================================================================
# DETACHMENT
# =============================================================================

SRB_DETACH_ALTITUDE = 11000.0      # m
SRB_DETACH_TIME = 60.0             # s

FUEL_TANK_DETACH_ALTITUDE = 15000.0  # m
FUEL_TANK_DETACH_TIME = 60.0         # s
FUEL_TANK_DETACH_FUEL_PERCENT = 5.0  # % fuel remaining at detachment
FUEL_TANK_DETACH_SPEED_FRACTION = 0.95  # of ORBITAL_VELOCITY_LEO

# =============================================================================
# LAUNCH SEQUENCE
# =============================================================================

ENGINE_STARTUP_DURATION = 3.0      # s of spool-up before liftoff
TOWER_TILT_LEAD_TIME = 2.0         # s before liftoff the service tower tilts
TOWER_TILT_ANGLE_DEG = 90.0

# =============================================================================
# SIMULATION PARAMETERS
# =============================================================================

DT = 1.0 / 60.0                    # s, one rendering frame
MAX_DT = 1.0 / 60.0                # s, largest stable step
MAX_TIME = 600.0                   # s, default headless run length

INITIAL_POSITION = np.array([0.0, EARTH_RADIUS, 0.0])
INITIAL_VELOCITY = np.array([0.0, 0.0, 0.0])
UP_AXIS = np.array([0.0, 1.0, 0.0])

# =============================================================================
# NUMERICAL TOLERANCES
# =============================================================================

FALLBACK_MASS = 1.0                 # kg substituted for an invalid total mass
MIN_GRAVITY_DISTANCE = 1.0          # m, gravity singularity guard
GROUND_SNAP_TOLERANCE = 1.0         # m below the surface before snapping back
NEGLIGIBLE_THRUST_SQ = 0.1          # N^2, thrust below this counts as "off"
FUEL_PERCENT_MAX = 100.0


def print_config():
    """Print configuration summary."""
    print("=" * 60)
    print("Shuttle Ascent Configuration")
    print("=" * 60)
    print(f"Full stack mass: {FULL_STACK_MASS:,.0f} kg")
    print(f"Orbiter dry mass: {SHUTTLE_MASS:,.0f} kg")
    print(f"Main engine thrust: {THRUST_MAIN_ENGINES/1e6:.2f} MN")
    print(f"Booster thrust (both): {THRUST_SOLID_ROCKETS/1e6:.1f} MN")
    print(f"Startup hold thrust: {THRUST_ENGINE_STARTUP/1e6:.2f} MN")
    print(f"Fuel burn rate: {FUEL_CONSUMPTION_RATE:.0f} kg/s")
    print(f"Target LEO: {LOW_EARTH_ORBIT_ALTITUDE/1000:.0f} km @ {ORBITAL_VELOCITY_LEO:.0f} m/s")
    print("=" * 60)
