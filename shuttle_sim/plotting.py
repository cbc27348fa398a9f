"""
Shuttle Ascent Trajectory Visualization

Figures for a recorded FlightLog: altitude, speed, mass / fuel, and a stage
timeline. Uses the non-interactive Agg backend so it works headless.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend for batch processing
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure
import numpy as np

from .stages import STAGE_ORDER, FlightStage

logger = logging.getLogger(__name__)


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class TrajectoryData:
    """Container for processed trajectory data used in plotting.

    Attributes:
        time: Time array in seconds
        altitude_km: Altitude in kilometers
        speed: Velocity magnitude in m/s
        mass: Total vehicle mass in kg
        fuel: External tank fuel in percent
        stage_index: Canonical stage index per sample
    """
    time: np.ndarray
    altitude_km: np.ndarray
    speed: np.ndarray
    mass: np.ndarray
    fuel: np.ndarray
    stage_index: np.ndarray


def extract_log_data(log) -> TrajectoryData:
    """Convert FlightLog lists into numpy arrays."""
    return TrajectoryData(
        time=np.asarray(log.time, dtype=float),
        altitude_km=np.asarray(log.altitude, dtype=float) / 1000.0,
        speed=np.asarray(log.speed, dtype=float),
        mass=np.asarray(log.mass, dtype=float),
        fuel=np.asarray(log.fuel_percentage, dtype=float),
        stage_index=np.array([FlightStage[name].order for name in log.stage], dtype=int),
    )


def _style_axes(ax: Axes, title: str, ylabel: str):
    ax.set_title(title, fontsize=12, fontweight='bold')
    ax.set_xlabel("Time (s)")
    ax.set_ylabel(ylabel)
    ax.grid(True, alpha=0.3)


def plot_altitude(data: TrajectoryData) -> Figure:
    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(data.time, data.altitude_km, color='tab:blue', linewidth=1.5)
    _style_axes(ax, "Altitude vs Time", "Altitude (km)")
    return fig


def plot_speed(data: TrajectoryData) -> Figure:
    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(data.time, data.speed, color='tab:red', linewidth=1.5)
    _style_axes(ax, "Speed vs Time", "Speed (m/s)")
    return fig


def plot_mass_and_fuel(data: TrajectoryData) -> Figure:
    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(data.time, data.mass / 1000.0, color='tab:green', linewidth=1.5, label="Total mass")
    _style_axes(ax, "Mass and Fuel vs Time", "Mass (t)")
    ax_fuel = ax.twinx()
    ax_fuel.plot(data.time, data.fuel, color='tab:orange', linestyle='--', label="Fuel")
    ax_fuel.set_ylabel("Fuel (%)")
    ax_fuel.set_ylim(0.0, 105.0)
    lines = ax.get_lines() + ax_fuel.get_lines()
    ax.legend(lines, [line.get_label() for line in lines], loc='upper right')
    return fig


def plot_stage_timeline(data: TrajectoryData) -> Figure:
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.step(data.time, data.stage_index, where='post', color='tab:purple')
    ax.set_yticks(range(len(STAGE_ORDER)))
    ax.set_yticklabels([stage.label for stage in STAGE_ORDER])
    _style_axes(ax, "Flight Stage Timeline", "Stage")
    fig.tight_layout()
    return fig


def generate_flight_plots(log, output_dir: str) -> Dict[str, str]:
    """
    Render every figure for `log` into `output_dir` as PNG.

    Returns:
        Mapping of plot name -> written file path (empty if the log is empty)
    """
    if len(log.time) == 0:
        logger.warning("Flight log is empty; no plots generated.")
        return {}

    os.makedirs(output_dir, exist_ok=True)
    data = extract_log_data(log)
    figures = {
        'altitude': plot_altitude(data),
        'speed': plot_speed(data),
        'mass_fuel': plot_mass_and_fuel(data),
        'stage_timeline': plot_stage_timeline(data),
    }

    written: Dict[str, str] = {}
    for name, fig in figures.items():
        path = os.path.join(output_dir, f"{name}.png")
        fig.savefig(path, dpi=120)
        plt.close(fig)
        written[name] = path
        logger.info(f"Saved {path}")
    return written
