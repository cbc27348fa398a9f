"""
Shuttle Ascent Simulation Package

A deterministic, fixed-timestep flight physics engine for a staged launch
vehicle (orbiter + external tank + two solid rocket boosters).

Modules:
    - constants: Physical constants and vehicle parameters
    - config: Immutable PhysicalConstants injected into the engine
    - stages: Flight stage enum and ordering
    - numerics: Finite-or-fallback guards
    - state: Flight state, attachment map, public snapshot
    - mass: Total mass and fuel burn
    - forces: Gravity, drag, normal force, thrust
    - integrators: Semi-implicit Euler step and safety guards
    - stage_machine: Stage transitions and detachment triggers
    - physics: ShuttlePhysics engine (update / set_stage)
    - validation: Flight invariant checks
    - main: Headless driver loop and telemetry log
    - plotting: matplotlib figures
    - cli: Command-line entry point
"""

from .config import PhysicalConstants, create_default_config, create_test_config
from .stages import FlightStage, get_stage_label
from .state import Component, AttachmentState, FlightState, FlightSnapshot, create_initial_state
from .physics import ShuttlePhysics
from .main import run_simulation, FlightLog

__version__ = "1.0.0"
__author__ = "Shuttle Simulation Team"

__all__ = [
    'PhysicalConstants',
    'create_default_config',
    'create_test_config',
    'FlightStage',
    'get_stage_label',
    'Component',
    'AttachmentState',
    'FlightState',
    'FlightSnapshot',
    'create_initial_state',
    'ShuttlePhysics',
    'run_simulation',
    'FlightLog',
]
