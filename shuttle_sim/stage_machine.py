"""
Shuttle Flight Stage Machine

This module holds the guarded transitions between flight stages and the
one-shot events tied to them:

  - ENGINE_STARTUP -> LIFTOFF:              startup timer elapsed
  - LIFTOFF -> ATMOSPHERIC_ASCENT:          above SRB altitude, boosters gone
  - ATMOSPHERIC_ASCENT -> ORBITAL_INSERTION: above the atmosphere, tank gone
  - ORBITAL_INSERTION -> ORBITAL_STABILIZATION: inside the LEO altitude and
                                            velocity windows
  - ORBITAL_STABILIZATION -> FREE_SPACE_MOTION: coasting near orbital speed
  - FREE_SPACE_MOTION <-> ORBITAL_MANEUVERING: thrust present / absent

The windows are configured thresholds, not derived from vis-viva.

next_stage() is pure so the table can be tested without an engine.
"""

import logging

from .config import PhysicalConstants
from .stages import FlightStage
from .state import Component, FlightState
from .types import StageObservation

logger = logging.getLogger(__name__)


def next_stage(stage: FlightStage, obs: StageObservation,
               constants: PhysicalConstants) -> FlightStage:
    """
    Return the stage that follows `stage` given the post-step observation.

    At most one transition is taken per call; if no guard holds the stage
    is returned unchanged. IDLE never advances on its own.
    """
    if stage == FlightStage.ENGINE_STARTUP:
        if obs.engine_startup_timer >= constants.engine_startup_duration:
            return FlightStage.LIFTOFF

    elif stage == FlightStage.LIFTOFF:
        if obs.altitude > constants.srb_detach_altitude and obs.srb_detached:
            return FlightStage.ATMOSPHERIC_ASCENT

    elif stage == FlightStage.ATMOSPHERIC_ASCENT:
        if obs.altitude > constants.atmosphere_height and obs.et_detached:
            return FlightStage.ORBITAL_INSERTION

    elif stage == FlightStage.ORBITAL_INSERTION:
        in_altitude_window = (
            constants.leo_altitude - constants.leo_altitude_window
            <= obs.altitude
            <= constants.leo_altitude + constants.leo_altitude_window
        )
        in_velocity_window = (
            abs(obs.speed - constants.leo_velocity) < constants.leo_velocity_tolerance
        )
        if in_altitude_window and in_velocity_window:
            return FlightStage.ORBITAL_STABILIZATION

    elif stage == FlightStage.ORBITAL_STABILIZATION:
        coasting = obs.acceleration_sq < constants.stabilization_accel_sq_threshold
        fast_enough = obs.speed > constants.leo_velocity * constants.stabilization_speed_fraction
        if coasting and fast_enough:
            return FlightStage.FREE_SPACE_MOTION

    elif stage == FlightStage.FREE_SPACE_MOTION:
        if obs.thrust_sq > constants.negligible_thrust_sq:
            return FlightStage.ORBITAL_MANEUVERING

    elif stage == FlightStage.ORBITAL_MANEUVERING:
        if obs.thrust_sq < constants.negligible_thrust_sq:
            return FlightStage.FREE_SPACE_MOTION

    return stage


def should_tilt_tower(state: FlightState, constants: PhysicalConstants) -> bool:
    """True on the first startup frame at or past the tower-tilt time."""
    return (
        state.stage == FlightStage.ENGINE_STARTUP
        and not state.tower_tilted
        and state.engine_startup_timer >= constants.tower_tilt_time
    )


def should_detach_boosters(state: FlightState, altitude: float,
                           constants: PhysicalConstants) -> bool:
    """Booster separation: time and altitude both past their thresholds."""
    return (
        not state.srb_detached
        and state.is_attached(Component.ROCKET1)
        and state.time >= constants.srb_detach_time
        and altitude >= constants.srb_detach_altitude
    )


def should_detach_fuel_tank(state: FlightState, altitude: float, speed: float,
                            constants: PhysicalConstants) -> bool:
    """
    External tank separation: time, altitude, near-orbital speed and an
    almost empty tank.
    """
    return (
        not state.et_detached
        and state.is_attached(Component.FUEL_TANK)
        and state.time >= constants.fuel_tank_detach_time
        and altitude >= constants.fuel_tank_detach_altitude
        and speed >= constants.leo_velocity * constants.fuel_tank_detach_speed_fraction
        and state.fuel_percentage <= constants.fuel_tank_detach_fuel_percent
    )
