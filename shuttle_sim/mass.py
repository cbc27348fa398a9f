"""
Shuttle Ascent Simulation - Mass bookkeeping and fuel burn.
"""

import logging

from .config import PhysicalConstants
from .numerics import finite_or
from .stages import FUEL_BURNING_STAGES
from .state import Component, FlightState

logger = logging.getLogger(__name__)


def compute_total_mass(state: FlightState, constants: PhysicalConstants) -> float:
    """
    Orbiter dry mass plus whatever is still attached.

    The external tank contributes in proportion to its fuel level; each
    attached booster contributes its full mass. An invalid result is
    replaced by constants.fallback_mass and logged.
    """
    total = constants.shuttle_mass

    if state.is_attached(Component.FUEL_TANK):
        total += constants.fuel_tank_mass * (state.fuel_percentage / 100.0)
    total += state.attached_boosters() * constants.rocket_mass

    total = finite_or(total, constants.fallback_mass, "Total mass")
    if total <= 0.0:
        logger.warning(f"Total mass {total} is not positive; clamping to fallback mass")
        return constants.fallback_mass
    return float(total)


def fuel_mass_in_tank(fuel_percentage: float, constants: PhysicalConstants) -> float:
    """Fuel mass (kg) represented by a tank percentage."""
    return constants.fuel_tank_mass * (fuel_percentage / 100.0)


def burns_fuel(stage, fuel_percentage: float, thrust_sq: float,
               constants: PhysicalConstants) -> bool:
    """True if the main engines are drawing on the tank this step."""
    return (
        fuel_percentage > 0.0
        and thrust_sq > constants.negligible_thrust_sq
        and stage in FUEL_BURNING_STAGES
    )


def burn_fuel(fuel_percentage: float, dt: float, thrust_up: float,
              constants: PhysicalConstants) -> float:
    """
    Return the fuel percentage left after burning for `dt` seconds.

    Burn rate is limited so a single step never consumes more than what is
    in the tank; the step that would overdraw it empties it exactly. A
    non-finite fuel level is clamped to 0 and logged.
    """
    fuel_percentage = finite_or(fuel_percentage, 0.0, "Fuel percentage")

    burn_rate = constants.fuel_consumption_rate if thrust_up > 0.0 else 0.0

    tank_fuel = fuel_mass_in_tank(fuel_percentage, constants)
    if burn_rate > 0.0 and burn_rate * dt >= tank_fuel:
        return 0.0

    consumed_percent = (burn_rate * dt / constants.fuel_tank_mass) * 100.0
    remaining = max(0.0, fuel_percentage - consumed_percent)
    return min(remaining, 100.0)
