"""
Shuttle Ascent Simulation - Physics Engine

ShuttlePhysics owns one FlightState and advances it once per frame:

    update(dt) -> forces -> semi-implicit Euler -> ground clamp / NaN recovery
               -> fuel burn -> clocks -> stage transition -> detachment

The engine never raises out of update(); numeric faults are substituted and
logged where they occur. It does not call into any rendering code: the
service-tower tilt and component separations are announced through the
optional callbacks passed at construction.
"""

import logging
from typing import Callable, Optional, Union

import numpy as np

from .config import PhysicalConstants, create_default_config
from .forces import compute_force_breakdown, compute_thrust_force
from .integrators import (
    apply_ground_clamp, clamp_timestep, recover_non_finite,
    semi_implicit_euler_step,
)
from .mass import burn_fuel, burns_fuel, compute_total_mass
from .stage_machine import (
    next_stage, should_detach_boosters, should_detach_fuel_tank, should_tilt_tower,
)
from .stages import FlightStage, get_stage_label, parse_stage
from .state import (
    AttachmentState, Component, FlightSnapshot, FlightState, create_initial_state,
)
from .types import StageObservation

logger = logging.getLogger(__name__)

TowerTiltCallback = Callable[[float], None]
DetachCallback = Callable[[Component], None]


class ShuttlePhysics:
    """
    Staged launch vehicle flight physics engine.

    Args:
        constants: Read-only physical configuration (defaults if None)
        on_tower_tilt: Called once per flight with the tilt angle in degrees
            when the startup timer reaches the tower-tilt time
        on_detach: Called once per component when it separates
        initial_state: Optional starting state (copied); defaults to IDLE on
            the pad, fully fuelled
    """

    def __init__(self, constants: Optional[PhysicalConstants] = None,
                 on_tower_tilt: Optional[TowerTiltCallback] = None,
                 on_detach: Optional[DetachCallback] = None,
                 initial_state: Optional[FlightState] = None):
        self.constants = constants or create_default_config()
        self.on_tower_tilt = on_tower_tilt
        self.on_detach = on_detach

        if initial_state is not None:
            self._state = initial_state.copy()
        else:
            self._state = create_initial_state(self.constants.earth_radius)

        logger.info("ShuttlePhysics initialized: position=%s m, altitude=%.0f m, mass=%.2f kg",
                    np.array2string(self._state.position, precision=0),
                    self.get_altitude(), self.calculate_total_mass())

    # =========================================================================
    # PUBLIC READ ACCESSORS
    # =========================================================================

    @property
    def state(self) -> FlightState:
        """Deep copy of the full internal state."""
        return self._state.copy()

    @property
    def position(self) -> np.ndarray:
        return self._state.position.copy()

    @property
    def velocity(self) -> np.ndarray:
        return self._state.velocity.copy()

    @property
    def acceleration(self) -> np.ndarray:
        return self._state.acceleration.copy()

    @property
    def stage(self) -> FlightStage:
        return self._state.stage

    @property
    def time(self) -> float:
        return self._state.time

    @property
    def engine_startup_timer(self) -> float:
        return self._state.engine_startup_timer

    @property
    def fuel_percentage(self) -> float:
        return self._state.fuel_percentage

    @property
    def srb_detached(self) -> bool:
        return self._state.srb_detached

    @property
    def et_detached(self) -> bool:
        return self._state.et_detached

    @property
    def tower_tilted(self) -> bool:
        return self._state.tower_tilted

    @property
    def rocket1_attached(self) -> bool:
        return self._state.is_attached(Component.ROCKET1)

    @property
    def rocket2_attached(self) -> bool:
        return self._state.is_attached(Component.ROCKET2)

    @property
    def fuel_tank_attached(self) -> bool:
        return self._state.is_attached(Component.FUEL_TANK)

    @property
    def total_mass(self) -> float:
        return self.calculate_total_mass()

    def get_altitude(self) -> float:
        """Height above the surface along the up axis (m)."""
        return self._state.altitude(self.constants.earth_radius)

    def calculate_total_mass(self) -> float:
        return compute_total_mass(self._state, self.constants)

    def calculate_thrust(self) -> np.ndarray:
        """Thrust vector for the current stage, attachments and fuel level."""
        s = self._state
        return compute_thrust_force(s.stage, s.attachment, s.fuel_percentage, self.constants)

    def snapshot(self) -> FlightSnapshot:
        """Immutable copy of the public state for collaborators."""
        s = self._state
        position = s.position.copy()
        velocity = s.velocity.copy()
        position.flags.writeable = False
        velocity.flags.writeable = False
        return FlightSnapshot(
            position=position,
            velocity=velocity,
            stage=s.stage,
            time=s.time,
            altitude=self.get_altitude(),
            fuel_percentage=s.fuel_percentage,
            total_mass=self.calculate_total_mass(),
            srb_detached=s.srb_detached,
            et_detached=s.et_detached,
            rocket1_attached=self.rocket1_attached,
            rocket2_attached=self.rocket2_attached,
            fuel_tank_attached=self.fuel_tank_attached,
        )

    # =========================================================================
    # SIMULATION STEP
    # =========================================================================

    def update(self, dt: float) -> None:
        """
        Advance the simulation by one frame.

        Args:
            dt: Frame period (s); capped at constants.max_dt, ignored if <= 0
        """
        dt = clamp_timestep(dt, self.constants)
        if dt is None:
            return

        s = self._state
        c = self.constants
        altitude_start = self.get_altitude()

        # Hold the vehicle on the pad before and during engine startup
        if s.stage == FlightStage.IDLE and altitude_start <= 0.0:
            s.position = c.initial_position
            s.velocity = np.zeros(3)
            s.acceleration = np.zeros(3)
        elif s.stage == FlightStage.ENGINE_STARTUP and altitude_start <= 0.0:
            s.position[1] = c.earth_radius
            s.velocity[1] = max(0.0, s.velocity[1])
            s.acceleration[1] = max(0.0, s.acceleration[1])

        total_mass = self.calculate_total_mass()
        forces = compute_force_breakdown(
            s.position, s.velocity, s.stage, s.attachment,
            s.fuel_percentage, total_mass, c
        )

        kin = semi_implicit_euler_step(s.position, s.velocity, forces['total'], total_mass, dt)
        if s.stage != FlightStage.IDLE:
            kin = apply_ground_clamp(kin, c)
        kin = recover_non_finite(kin, c)
        s.position, s.velocity, s.acceleration = (np.array(v, dtype=np.float64) for v in kin)

        thrust = forces['thrust']
        thrust_sq = float(np.dot(thrust, thrust))
        if burns_fuel(s.stage, s.fuel_percentage, thrust_sq, c):
            s.fuel_percentage = burn_fuel(s.fuel_percentage, dt, thrust[1], c)

        s.time += dt
        if s.stage == FlightStage.ENGINE_STARTUP:
            s.engine_startup_timer += dt
        else:
            s.engine_startup_timer = 0.0

        altitude = self.get_altitude()
        speed = s.speed
        self._update_stage(altitude, speed)
        self._handle_component_detachment(altitude, speed)

        logger.debug(
            f"t={s.time:.2f}s | {get_stage_label(s.stage)} | alt={altitude:.2f}m | "
            f"v={speed:.2f}m/s | vy={s.velocity[1]:.2f}m/s | "
            f"a={np.linalg.norm(s.acceleration):.2f}m/s^2 | "
            f"m={self.calculate_total_mass():.2f}kg | fuel={s.fuel_percentage:.2f}% | "
            f"Fy={forces['total'][1]:.2f}N"
        )

    def _update_stage(self, altitude: float, speed: float) -> None:
        """Fire the tower-tilt event if due, then take at most one stage transition."""
        s = self._state

        if should_tilt_tower(s, self.constants):
            self._tilt_tower()

        thrust = self.calculate_thrust()
        obs = StageObservation(
            altitude=altitude,
            speed=speed,
            acceleration_sq=float(np.dot(s.acceleration, s.acceleration)),
            thrust_sq=float(np.dot(thrust, thrust)),
            engine_startup_timer=s.engine_startup_timer,
            srb_detached=s.srb_detached,
            et_detached=s.et_detached,
        )
        new_stage = next_stage(s.stage, obs, self.constants)
        if new_stage != s.stage:
            logger.info(f"Shuttle Stage: {new_stage.label} (from {s.stage.label}) "
                        f"at t={s.time:.2f}s, Alt={altitude:.0f}m, Speed={speed:.0f}m/s")
            s.stage = new_stage

    def _tilt_tower(self) -> None:
        s = self._state
        s.tower_tilted = True
        if self.on_tower_tilt is None:
            logger.warning("Tower tilt due but no launch tower is attached; nothing to tilt.")
            return
        logger.info(f"Launch pad tower tilt initiated at startup t={s.engine_startup_timer:.2f}s")
        try:
            self.on_tower_tilt(self.constants.tower_tilt_angle_deg)
        except Exception:
            logger.exception("Tower tilt callback failed")

    def _handle_component_detachment(self, altitude: float, speed: float) -> None:
        s = self._state
        c = self.constants

        if should_detach_boosters(s, altitude, c):
            self.detach_component(Component.ROCKET1)
            self.detach_component(Component.ROCKET2)
            s.srb_detached = True
            logger.info(f"SRBs detached at {s.time:.2f}s, Altitude: {altitude:.0f}m")

        if should_detach_fuel_tank(s, altitude, speed, c):
            self.detach_component(Component.FUEL_TANK)
            s.et_detached = True
            logger.info(f"External Fuel Tank detached at {s.time:.2f}s, Altitude: {altitude:.0f}m")

    # =========================================================================
    # EXTERNAL COMMANDS
    # =========================================================================

    def set_stage(self, stage: Union[FlightStage, str]) -> None:
        """
        Jump directly to `stage` (manual launch trigger / reset).

        Entering ENGINE_STARTUP or IDLE restarts the startup timer and
        re-arms the tower tilt; IDLE also clears the separation milestones.
        Attachment state and position are never touched.
        """
        resolved = parse_stage(stage)
        if resolved is None:
            return

        s = self._state
        s.stage = resolved
        if resolved in (FlightStage.ENGINE_STARTUP, FlightStage.IDLE):
            s.engine_startup_timer = 0.0
            s.tower_tilted = False
        if resolved == FlightStage.IDLE:
            s.srb_detached = False
            s.et_detached = False
        logger.info(f"Shuttle Stage manually set to: {resolved.label}")

    def detach_component(self, component: Union[Component, str]) -> bool:
        """
        Separate one component. Idempotent.

        Detaching the external tank also empties it: the main engines lose
        their propellant feed along with the tank.

        Returns:
            True if the component was attached and is now detached
        """
        resolved = _parse_component(component)
        if resolved is None:
            logger.warning(f"Attempted to detach unknown component: {component!r}")
            return False

        s = self._state
        if not s.is_attached(resolved):
            return False

        s.attachment[resolved] = AttachmentState.DETACHED
        if resolved is Component.FUEL_TANK:
            s.fuel_percentage = 0.0
        if self.on_detach is not None:
            try:
                self.on_detach(resolved)
            except Exception:
                logger.exception(f"Detach callback failed for {resolved.value}")
        return True

    def __repr__(self) -> str:
        return f"ShuttlePhysics({self._state})"


def _parse_component(component) -> Optional[Component]:
    if isinstance(component, Component):
        return component
    for candidate in Component:
        if component in (candidate.value, candidate.name):
            return candidate
    return None
