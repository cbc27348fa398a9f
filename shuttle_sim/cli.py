"""
Shuttle Ascent Simulation - CLI

The single entry point for running a headless flight, exporting telemetry
and generating plots.
"""

import argparse
import logging
import os
import sys

from . import constants as C
from .main import run_simulation
from .numerics import is_finite_scalar
from .plotting import generate_flight_plots

logger = logging.getLogger(__name__)


def positive_float(value: str) -> float:
    """argparse type: a finite float greater than zero."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not a number")
    if not is_finite_scalar(number) or number <= 0.0:
        raise argparse.ArgumentTypeError(f"{value!r} must be positive and finite")
    return number


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Shuttle Ascent Flight Simulation",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--max-time", "-t",
        type=float,
        default=C.MAX_TIME,
        help="Simulation time to run for (s)"
    )
    parser.add_argument(
        "--dt",
        type=positive_float,
        default=C.DT,
        help="Frame period (s)"
    )
    parser.add_argument(
        "--output-dir", "-o",
        type=str,
        default="plots",
        help="Directory to save output plots"
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Write per-frame telemetry to this CSV file"
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip plot generation"
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Check flight invariants during and after the run"
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress verbose output"
    )
    verbosity.add_argument(
        "--debug",
        action="store_true",
        help="Log per-frame physics telemetry"
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Main execution flow."""
    args = parse_args(argv)

    level = logging.INFO
    if args.quiet:
        level = logging.WARNING
    elif args.debug:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        logger.info("Starting simulation...")
        engine, log, reason = run_simulation(
            dt=args.dt, max_time=args.max_time,
            verbose=not args.quiet, validate=args.validate,
        )

        if args.csv:
            log.to_csv(args.csv)
            logger.info(f"Telemetry written to {args.csv}")

        if not args.no_plots and len(log.time) > 0:
            plot_dir = os.path.abspath(args.output_dir)
            logger.info(f"Generating plots in {plot_dir}")
            generate_flight_plots(log, plot_dir)

        if reason.startswith("Validation failure"):
            return 2

    except Exception as e:
        logger.error(f"Simulation failed: {e}", exc_info=True)
        print(f"\n[ERROR] Simulation failed: {e}")
        sys.exit(1)

    return 0


if __name__ == "__main__":
    sys.exit(main())
