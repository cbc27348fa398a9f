"""
Shuttle Ascent Simulation - Flight Stages

Discrete flight-configuration modes and their canonical ordering.
"""

from enum import Enum
import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)


class FlightStage(Enum):
    IDLE = 'IDLE'
    ENGINE_STARTUP = 'ENGINE_STARTUP'
    LIFTOFF = 'LIFTOFF'
    ATMOSPHERIC_ASCENT = 'ATMOSPHERIC_ASCENT'
    ORBITAL_INSERTION = 'ORBITAL_INSERTION'
    ORBITAL_STABILIZATION = 'ORBITAL_STABILIZATION'
    FREE_SPACE_MOTION = 'FREE_SPACE_MOTION'
    ORBITAL_MANEUVERING = 'ORBITAL_MANEUVERING'

    @property
    def label(self) -> str:
        return _STAGE_LABELS[self]

    @property
    def order(self) -> int:
        """Position in the canonical flight sequence."""
        return STAGE_ORDER.index(self)


STAGE_ORDER = tuple(FlightStage)

_STAGE_LABELS = {
    FlightStage.IDLE: 'Idle',
    FlightStage.ENGINE_STARTUP: 'Engine Startup',
    FlightStage.LIFTOFF: 'Liftoff',
    FlightStage.ATMOSPHERIC_ASCENT: 'Atmospheric Ascent',
    FlightStage.ORBITAL_INSERTION: 'Orbital Insertion',
    FlightStage.ORBITAL_STABILIZATION: 'Orbital Stabilization',
    FlightStage.FREE_SPACE_MOTION: 'Free Space Motion',
    FlightStage.ORBITAL_MANEUVERING: 'Orbital Maneuvering',
}

# The only pair allowed to alternate in both directions.
OSCILLATING_PAIR = frozenset({FlightStage.FREE_SPACE_MOTION, FlightStage.ORBITAL_MANEUVERING})

# Stages whose thrust draws on the external tank.
FUEL_BURNING_STAGES = frozenset({
    FlightStage.LIFTOFF,
    FlightStage.ATMOSPHERIC_ASCENT,
    FlightStage.ORBITAL_INSERTION,
    FlightStage.ORBITAL_MANEUVERING,
})


def get_stage_label(stage) -> str:
    """Human-readable stage name; tolerates raw strings and None."""
    if isinstance(stage, FlightStage):
        return stage.label
    return stage or 'Unknown'


def parse_stage(stage: Union[FlightStage, str]) -> Optional[FlightStage]:
    """
    Resolve a FlightStage from an enum member or its name.

    Returns None (and logs a warning) for unknown names.
    """
    if isinstance(stage, FlightStage):
        return stage
    try:
        return FlightStage[str(stage).upper()]
    except KeyError:
        logger.warning(f"Unknown flight stage requested: {stage!r}")
        return None


def is_allowed_transition(previous: FlightStage, current: FlightStage) -> bool:
    """
    True if moving from `previous` to `current` respects the forward-only rule.

    Staying put is allowed; the free-space/maneuvering pair may alternate.
    """
    if previous == current:
        return True
    if {previous, current} == OSCILLATING_PAIR:
        return True
    return current.order > previous.order
