#!/usr/bin/env python3
"""
main.py
=======
Command-line entry point: runs repeated rounds of the crossroads
experiment and reports the success rate.

Usage::

    python main.py -r 10 -c unprotected_left_turn.yaml -l info
    python main.py -n -f            # no animation, save figures + rounds.csv

Exit codes: 0 success, 2 configuration error, 3 invariant violation.
"""

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from config import (
    CONFIG_DIR,
    DEFAULT_CONFIG_NAME,
    DEFAULT_LOG_LEVEL,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_ROUNDS,
    ROUNDS_CSV_NAME,
    RUN_DIR_FORMAT,
    TARGET_FPS,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
)
from logging_setup import LEVELS, parse_level, setup_logging
from sim.orchestrator import InvariantViolation, TickOrchestrator
from sim.settings import ConfigError, load_config
from telemetry import TelemetryBus
from ui import RoundViewer

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2
EXIT_INVARIANT_VIOLATION = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Level-k MCTS negotiation at an unprotected-left-turn crossroads.",
    )
    parser.add_argument("-r", "--rounds", type=int, default=DEFAULT_ROUNDS,
                        help="number of rounds to run (default: %(default)s)")
    parser.add_argument("-o", "--output-path", default=DEFAULT_OUTPUT_PATH,
                        help="directory for logs, figures and statistics (default: %(default)s)")
    parser.add_argument("-l", "--log-level", default=DEFAULT_LOG_LEVEL, choices=list(LEVELS),
                        help="log level (default: %(default)s)")
    parser.add_argument("-c", "--config", default=DEFAULT_CONFIG_NAME,
                        help="scenario file: a path, or a name under configs/ (default: %(default)s)")
    parser.add_argument("-n", "--no-animation", action="store_true",
                        help="do not open the live animation window")
    parser.add_argument("-f", "--save-fig", action="store_true",
                        help="save one figure per round and rounds.csv in a timestamped directory")
    return parser


def resolve_config_path(name: str) -> Path:
    """*name* as given if it exists, else looked up under ``configs/``."""
    path = Path(name)
    if path.exists():
        return path
    candidate = Path(CONFIG_DIR) / name
    if not candidate.suffix:
        candidate = candidate.with_suffix(".yaml")
    return candidate


def prepare_output_dir(base: str, save_fig: bool) -> Path:
    out = Path(base)
    if save_fig:
        out = out / datetime.now().strftime(RUN_DIR_FORMAT)
    os.makedirs(out, exist_ok=True)
    return out


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    out_dir = prepare_output_dir(args.output_path, args.save_fig)
    setup_logging(parse_level(args.log_level), str(out_dir))
    log = logging.getLogger("main")

    try:
        config = load_config(resolve_config_path(args.config))
    except ConfigError as exc:
        log.error("configuration error: %s", exc)
        return EXIT_CONFIG_ERROR

    bus = TelemetryBus()
    viewer: Optional[RoundViewer] = None
    if not args.no_animation or args.save_fig:
        viewer = RoundViewer(
            config.env,
            config.vehicle,
            width=WINDOW_WIDTH,
            height=WINDOW_HEIGHT,
            fps=TARGET_FPS,
            animate=not args.no_animation,
            save_dir=out_dir if args.save_fig else None,
        ).attach(bus)

    try:
        with TickOrchestrator(config, bus=bus) as orchestrator:
            summary = orchestrator.run(args.rounds)
    except ConfigError as exc:
        log.error("configuration error: %s", exc)
        return EXIT_CONFIG_ERROR
    except InvariantViolation as exc:
        log.critical("invariant violation: %s", exc)
        return EXIT_INVARIANT_VIOLATION
    finally:
        if viewer is not None:
            viewer.close()

    if args.save_fig:
        path = summary.save_csv(out_dir / ROUNDS_CSV_NAME)
        log.info("round statistics written to %s", path)
    log.debug("bus metrics: %s", bus.metrics.report())
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
