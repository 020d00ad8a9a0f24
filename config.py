#!/usr/bin/env python3
"""
config.py
=========
Application-wide configuration constants.

Scenario values (map, vehicles, planner budgets) live in the YAML files
under ``configs/``; this module only holds the command-line defaults.
It is a thin, import-safe leaf: it never imports from other project
packages.
"""

import os

# ── Experiment defaults ──────────────────────────────────────────────────────
DEFAULT_ROUNDS: int = 5
DEFAULT_CONFIG_NAME: str = "unprotected_left_turn.yaml"
DEFAULT_OUTPUT_PATH: str = "logs"
DEFAULT_LOG_LEVEL: str = "info"

# ── Paths (relative to project root) ─────────────────────────────────────────
PROJECT_ROOT: str = os.path.abspath(os.path.dirname(__file__))
CONFIG_DIR: str = os.path.join(PROJECT_ROOT, "configs")

# ── UI defaults ──────────────────────────────────────────────────────────────
WINDOW_WIDTH: int = 900
WINDOW_HEIGHT: int = 900
TARGET_FPS: int = 20

# ── Output ───────────────────────────────────────────────────────────────────
RUN_DIR_FORMAT: str = "%Y-%m-%d_%H-%M-%S"
ROUNDS_CSV_NAME: str = "rounds.csv"
