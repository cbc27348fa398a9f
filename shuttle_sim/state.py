"""
Shuttle Ascent Simulation - Flight State

This module defines the single state dataclass owned by the physics engine
and the immutable snapshot handed to collaborators after each frame.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict

import numpy as np

from . import constants as C
from .stages import FlightStage


class Component(Enum):
    """Detachable structural components."""
    FUEL_TANK = 'fuelTank'
    ROCKET1 = 'rocket1'
    ROCKET2 = 'rocket2'


class AttachmentState(Enum):
    ATTACHED = 'attached'
    DETACHED = 'detached'


BOOSTERS = (Component.ROCKET1, Component.ROCKET2)


def _all_attached() -> Dict[Component, AttachmentState]:
    return {component: AttachmentState.ATTACHED for component in Component}


@dataclass
class FlightState:
    """
    Complete mutable state of one flight attempt.

    Attributes:
        position: Position from Earth's centre, +Y up (m) [3]
        velocity: Velocity (m/s) [3]
        acceleration: Acceleration from the last step (m/s^2) [3]
        stage: Current flight stage
        time: Simulation time since construction (s)
        engine_startup_timer: Time spent in the current ENGINE_STARTUP stage (s)
        fuel_percentage: External tank fuel remaining, 0-100
        attachment: Component -> AttachmentState
        srb_detached: Booster separation milestone latch
        et_detached: External tank separation milestone latch
        tower_tilted: Service tower notification latch
    """

    position: np.ndarray = field(default_factory=lambda: C.INITIAL_POSITION.copy())
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    acceleration: np.ndarray = field(default_factory=lambda: np.zeros(3))

    stage: FlightStage = FlightStage.IDLE
    time: float = 0.0
    engine_startup_timer: float = 0.0

    fuel_percentage: float = C.FUEL_PERCENT_MAX
    attachment: Dict[Component, AttachmentState] = field(default_factory=_all_attached)

    srb_detached: bool = False
    et_detached: bool = False
    tower_tilted: bool = False

    def __post_init__(self):
        """Ensure arrays are numpy arrays with correct dtype."""
        for attr in ['position', 'velocity', 'acceleration']:
            setattr(self, attr, np.asarray(getattr(self, attr), dtype=np.float64))

    def is_attached(self, component: Component) -> bool:
        return self.attachment[component] is AttachmentState.ATTACHED

    def attached_boosters(self) -> int:
        """Number of solid rocket boosters still attached."""
        return sum(1 for booster in BOOSTERS if self.is_attached(booster))

    @property
    def speed(self) -> float:
        """Magnitude of velocity (m/s)."""
        return float(np.linalg.norm(self.velocity))

    def altitude(self, earth_radius: float = C.EARTH_RADIUS) -> float:
        """Height above the surface along the up axis (m)."""
        return float(self.position[1] - earth_radius)

    def copy(self) -> 'FlightState':
        """Create a deep copy of the state."""
        return FlightState(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            acceleration=self.acceleration.copy(),
            stage=self.stage,
            time=self.time,
            engine_startup_timer=self.engine_startup_timer,
            fuel_percentage=self.fuel_percentage,
            attachment=dict(self.attachment),
            srb_detached=self.srb_detached,
            et_detached=self.et_detached,
            tower_tilted=self.tower_tilted,
        )

    def __str__(self) -> str:
        return (
            f"FlightState(t={self.time:.2f}s, "
            f"stage={self.stage.label}, "
            f"alt={self.altitude()/1000:.2f}km, "
            f"v={self.speed:.1f}m/s, "
            f"fuel={self.fuel_percentage:.1f}%)"
        )


@dataclass(frozen=True)
class FlightSnapshot:
    """Read-only view of the public flight state for rendering and effects.

    The position and velocity arrays are non-writeable copies.
    """
    position: np.ndarray
    velocity: np.ndarray
    stage: FlightStage
    time: float
    altitude: float
    fuel_percentage: float
    total_mass: float
    srb_detached: bool
    et_detached: bool
    rocket1_attached: bool
    rocket2_attached: bool
    fuel_tank_attached: bool


def create_initial_state(earth_radius: float = C.EARTH_RADIUS) -> FlightState:
    """
    Create the launch-pad state: IDLE on the surface, at rest, fully fuelled.
    """
    return FlightState(
        position=np.array([0.0, earth_radius, 0.0]),
        velocity=C.INITIAL_VELOCITY.copy(),
    )
