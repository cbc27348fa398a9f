"""
Shuttle Ascent Simulation - Headless Driver

This module plays the part of the rendering loop without rendering:
- Builds one ShuttlePhysics per flight
- Fires the manual launch trigger (set_stage(ENGINE_STARTUP))
- Calls update(dt) once per frame at a fixed frame period
- Records public state into a FlightLog for plots / CSV

Coordinate frame: Earth-centred, +Y up at the launch site.
"""

import csv
import logging
import os
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from . import constants as C
from .config import PhysicalConstants, create_default_config
from .numerics import is_finite_scalar
from .physics import ShuttlePhysics, TowerTiltCallback
from .stages import FlightStage
from .validation import validate_flight_log, validate_state

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass
class FlightLog:
    """Container for per-frame telemetry."""
    time: List[float] = field(default_factory=list)
    altitude: List[float] = field(default_factory=list)  # m
    speed: List[float] = field(default_factory=list)
    velocity_y: List[float] = field(default_factory=list)
    acceleration: List[float] = field(default_factory=list)
    mass: List[float] = field(default_factory=list)
    fuel_percentage: List[float] = field(default_factory=list)
    stage: List[str] = field(default_factory=list)
    rocket1_attached: List[bool] = field(default_factory=list)
    rocket2_attached: List[bool] = field(default_factory=list)
    fuel_tank_attached: List[bool] = field(default_factory=list)

    def append(self, engine: ShuttlePhysics):
        """Log the public state of `engine` after a frame."""
        snap = engine.snapshot()
        self.time.append(snap.time)
        self.altitude.append(snap.altitude)
        self.speed.append(float(np.linalg.norm(snap.velocity)))
        self.velocity_y.append(float(snap.velocity[1]))
        self.acceleration.append(float(np.linalg.norm(engine.acceleration)))
        self.mass.append(snap.total_mass)
        self.fuel_percentage.append(snap.fuel_percentage)
        self.stage.append(snap.stage.name)
        self.rocket1_attached.append(snap.rocket1_attached)
        self.rocket2_attached.append(snap.rocket2_attached)
        self.fuel_tank_attached.append(snap.fuel_tank_attached)

    def __len__(self) -> int:
        return len(self.time)

    def stage_sequence(self) -> List[str]:
        """Distinct stages in the order they were visited."""
        sequence: List[str] = []
        for name in self.stage:
            if not sequence or sequence[-1] != name:
                sequence.append(name)
        return sequence

    def stage_entry_times(self) -> List[Tuple[str, float]]:
        """(stage name, first logged time) for each stage change."""
        entries: List[Tuple[str, float]] = []
        for t, name in zip(self.time, self.stage):
            if not entries or entries[-1][0] != name:
                entries.append((name, t))
        return entries

    def to_csv(self, filename: str):
        """Write logged telemetry to CSV for offline analysis."""
        os.makedirs(os.path.dirname(filename) or '.', exist_ok=True)
        header = [
            'time', 'altitude_m', 'speed_mps', 'velocity_y_mps', 'acceleration_mps2',
            'mass_kg', 'fuel_percent', 'stage',
            'rocket1_attached', 'rocket2_attached', 'fuel_tank_attached',
        ]
        with open(filename, 'w', newline='') as fh:
            writer = csv.writer(fh)
            writer.writerow(header)
            for i in range(len(self.time)):
                writer.writerow([
                    self.time[i], self.altitude[i], self.speed[i], self.velocity_y[i],
                    self.acceleration[i], self.mass[i], self.fuel_percentage[i],
                    self.stage[i], int(self.rocket1_attached[i]),
                    int(self.rocket2_attached[i]), int(self.fuel_tank_attached[i]),
                ])


def check_termination(engine: ShuttlePhysics, max_time: float) -> Tuple[bool, str]:
    """
    Check if the run should stop.

    Returns:
        (should_terminate, reason)
    """
    if engine.stage == FlightStage.FREE_SPACE_MOTION:
        return True, "free space motion reached"
    if engine.time >= max_time:
        return True, "max_time reached"
    return False, ""


def run_simulation(constants: Optional[PhysicalConstants] = None, dt: float = C.DT,
                   max_time: float = C.MAX_TIME, launch_time: float = 0.0,
                   verbose: bool = True, validate: bool = False,
                   on_tower_tilt: Optional[TowerTiltCallback] = None,
                   print_interval: float = 10.0) -> Tuple[ShuttlePhysics, FlightLog, str]:
    """
    Run one flight from the pad.

    Args:
        constants: PhysicalConstants instance. If None a default is created.
        dt: Frame period (s)
        max_time: Stop once simulation time reaches this (s)
        launch_time: Simulation time at which the launch trigger fires (s)
        verbose: Print a progress table
        validate: Check per-step and trajectory invariants; a failure ends
            the run with a "Validation failure" reason
        on_tower_tilt: Forwarded to the engine
        print_interval: Seconds of simulation time between progress rows

    Returns:
        (engine, log, termination_reason) tuple

    Raises:
        ValueError: If dt is not positive and finite (no frame would advance)
    """
    if not is_finite_scalar(dt) or dt <= 0.0:
        raise ValueError(f"dt must be positive and finite, got {dt}")
    if constants is None:
        constants = create_default_config()

    engine = ShuttlePhysics(constants, on_tower_tilt=on_tower_tilt)
    log = FlightLog()
    launched = False

    logger.info(f"Starting simulation: dt={dt:.4f}s, max_time={max_time}s, launch at t={launch_time}s")

    if verbose:
        print("\n" + "=" * 80)
        print(f"SHUTTLE ASCENT SIMULATION | dt={dt:.4f}s | T_max={max_time}s")
        print("=" * 80)
        print(f"{'Time (s)':^10} | {'Alt (km)':^10} | {'Vel (m/s)':^10} | {'Mass (kg)':^12} | "
              f"{'Fuel (%)':^8} | {'Stage':<20}")
        print("-" * 80)

    start_time = time.time()
    step_count = 0
    last_print_time = -print_interval

    while True:
        should_terminate, reason = check_termination(engine, max_time)
        if should_terminate:
            break

        if not launched and engine.time >= launch_time:
            engine.set_stage(FlightStage.ENGINE_STARTUP)
            launched = True

        engine.update(dt)
        log.append(engine)
        step_count += 1

        if validate:
            valid, message = validate_state(engine.state, abort_on_error=False)
            if not valid:
                reason = f"Validation failure: {message}"
                logger.error(reason)
                break

        if verbose and engine.time - last_print_time >= print_interval:
            _print_status(engine)
            last_print_time = engine.time

    if validate and not reason.startswith("Validation failure"):
        valid, message = validate_flight_log(log)
        if not valid:
            reason = f"Validation failure: {message}"
            logger.error(reason)

    _log_completion(engine, step_count, time.time() - start_time, reason, verbose)
    return engine, log, reason


def _print_status(engine: ShuttlePhysics):
    """Print a formatted status row."""
    msg = (f"{engine.time:10.1f} | {engine.get_altitude()/1000:10.2f} | "
           f"{np.linalg.norm(engine.velocity):10.1f} | {engine.total_mass:12.1f} | "
           f"{engine.fuel_percentage:8.2f} | {engine.stage.label:<20}")
    print(msg)
    logger.info(msg)


def _log_completion(engine: ShuttlePhysics, steps: int, elapsed: float, reason: str,
                    verbose: bool):
    """Log and print completion statistics."""
    logger.info(f"Simulation terminated: {reason}")
    logger.info(f"Simulation complete: {steps} steps in {elapsed:.2f}s")

    if verbose:
        print("-" * 80)
        print(f"SIMULATION COMPLETED ({reason})")
        print("-" * 80)
        print(f"Final Time:     {engine.time:.2f} s")
        print(f"Final Stage:    {engine.stage.label}")
        print(f"Final Altitude: {engine.get_altitude()/1000:.2f} km")
        print(f"Final Velocity: {np.linalg.norm(engine.velocity):.2f} m/s")
        print(f"Final Mass:     {engine.total_mass:.1f} kg")
        print(f"Fuel:           {engine.fuel_percentage:.2f} %")
        print("-" * 80)
        print(f"Steps:       {steps:,}")
        print(f"Wall Time:   {elapsed:.2f} s")
        print(f"Performance: {steps/elapsed:.0f} steps/s" if elapsed > 0 else "Performance: N/A")
        print("=" * 80)
