#!/usr/bin/env python3
"""
sim/settings.py
===============
Immutable configuration for the crossroads experiment.

Every tunable lives in a frozen dataclass so that one configuration value
can be built once at startup and handed by reference to every planner
invocation without any risk of a task mutating shared state.

The YAML file is parsed with PyYAML and validated with pydantic schema
models before being converted into the dataclasses below.  Any problem is
reported as a :class:`ConfigError` carrying a readable diagnostic.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sim.env import EnvCrossroads
from sim.physics import Action, Pose, State, VehicleSpec

log = logging.getLogger("settings")

ColorRGB = Tuple[int, int, int]

# Palette used when a vehicle entry does not name its colour.
VEHICLE_COLORS: Tuple[ColorRGB, ...] = (
    (86, 168, 255),
    (255, 88, 88),
    (100, 226, 170),
    (246, 191, 90),
    (180, 120, 255),
    (255, 160, 100),
)


class ConfigError(Exception):
    """Raised when a configuration cannot be read or is not valid."""


# ── Runtime configuration (frozen) ────────────────────────────────────────────

@dataclass(frozen=True)
class RewardWeights:
    """Weights of the planner's per-transition reward.

    Penalties are given as positive magnitudes and subtracted.
    """

    progress: float = 1.0
    """Reward per normalised metre of progress toward the goal."""

    heading: float = 0.5
    """Penalty per radian between heading and bearing to the goal."""

    goal: float = 10.0
    """Terminal bonus for reaching the goal."""

    collision: float = 100.0
    """Terminal penalty for a predicted collision."""

    proximity: float = 5.0
    """Penalty when the safety envelopes of two vehicles overlap."""

    comfort: float = 1.0
    """Penalty for a hard brake."""

    off_road: float = 50.0
    """Penalty for leaving the drivable road or the map."""


@dataclass(frozen=True)
class PlannerConfig:
    """Search budget and shape of the per-agent tree search."""

    computation_budget: int = 300
    """Search iterations per planning call."""

    prediction_budget: int = 60
    """Iterations of the reduced search used to predict a level-k opponent."""

    time_budget_s: Optional[float] = None
    """Optional wall-clock ceiling per search; *None* keeps runs deterministic."""

    max_step: int = 8
    """Maximum search depth in simulation steps."""

    exploration_constant: float = 0.5
    """Scale of the upper-confidence exploration term."""

    discount_factor: float = 0.9
    """Per-step discount applied to transition rewards."""

    rollout_noise: float = 0.0
    """Probability that a rollout step picks a random longitudinal action."""

    fallback_action: Action = Action.BRAKE
    """Safety action returned when the search yields no viable choice."""

    weights: RewardWeights = field(default_factory=RewardWeights)


@dataclass(frozen=True)
class ResetNoise:
    """Per-round perturbation of the initial states."""

    position: float = 0.0
    """Max shift (m) of the initial position along the initial heading."""

    speed: float = 0.0
    """Max change (m/s) of the initial speed."""


@dataclass(frozen=True)
class AgentConfig:
    """Static description of one vehicle in the scenario."""

    name: str
    initial_state: State
    goal: Pose
    level: int = 0
    color: ColorRGB = VEHICLE_COLORS[0]


@dataclass(frozen=True)
class SimulationConfig:
    """The whole experiment configuration.

    Groups: time stepping, map geometry, goal test, reproducibility,
    vehicle class, planner, scenario vehicles.
    """

    # ── Time stepping ─────────────────────────────────────────────────────
    delta_t: float = 0.25
    """Simulation step in seconds."""

    max_simulation_time: float = 25.0
    """A round times out once simulated time exceeds this ceiling."""

    # ── Geometry ──────────────────────────────────────────────────────────
    map_size: float = 25.0
    lane_width: float = 4.0

    # ── Goal test ─────────────────────────────────────────────────────────
    goal_tolerance: float = 2.0
    """Radius (m) around the goal position that counts as arrived."""

    # ── Reproducibility / execution ───────────────────────────────────────
    random_seed: int = 0
    workers: Optional[int] = None
    """Planner threads; *None* means one per vehicle."""

    reset_noise: ResetNoise = field(default_factory=ResetNoise)

    # ── Vehicles and planner ──────────────────────────────────────────────
    vehicle: VehicleSpec = field(default_factory=VehicleSpec)
    planner: PlannerConfig = field(default_factory=PlannerConfig)
    agents: Tuple[AgentConfig, ...] = ()

    @property
    def env(self) -> EnvCrossroads:
        return EnvCrossroads(map_size=self.map_size, lane_width=self.lane_width)

    def with_planner(self, **changes: Any) -> "SimulationConfig":
        """Copy with some :class:`PlannerConfig` fields replaced."""
        return replace(self, planner=replace(self.planner, **changes))


# ── File schema (pydantic) ────────────────────────────────────────────────────

class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid")


class _VehicleModel(_Strict):
    length: float = Field(5.0, gt=0)
    width: float = Field(2.0, gt=0)
    wheelbase: float = Field(2.8, gt=0)
    max_speed: float = Field(6.0, gt=0)
    max_acceleration: float = Field(2.0, gt=0)
    max_deceleration: float = Field(4.0, gt=0)
    max_steer: float = Field(0.5, gt=0, lt=math.pi / 2)
    safe_length: float = Field(8.0, gt=0)
    safe_width: float = Field(2.4, gt=0)


class _WeightsModel(_Strict):
    progress: float = Field(1.0, ge=0)
    heading: float = Field(0.5, ge=0)
    goal: float = Field(10.0, ge=0)
    collision: float = Field(100.0, ge=0)
    proximity: float = Field(5.0, ge=0)
    comfort: float = Field(1.0, ge=0)
    off_road: float = Field(50.0, ge=0)


class _PlannerModel(_Strict):
    computation_budget: int = Field(300, ge=0)
    prediction_budget: int = Field(60, ge=0)
    time_budget_s: Optional[float] = Field(None, gt=0)
    max_step: int = Field(8, ge=0)
    exploration_constant: float = Field(0.5, ge=0)
    discount_factor: float = Field(0.9, gt=0, le=1)
    rollout_noise: float = Field(0.0, ge=0, le=1)
    fallback_action: Action = Action.BRAKE
    weights: _WeightsModel = Field(default_factory=_WeightsModel)

    @field_validator("fallback_action", mode="before")
    @classmethod
    def _action_by_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            name = value.strip().upper().replace(" ", "_")
            if name not in Action.__members__:
                raise ValueError(
                    f"unknown action {value!r}; choose from {', '.join(Action.__members__)}"
                )
            return Action[name]
        return value


class _ResetNoiseModel(_Strict):
    position: float = Field(0.0, ge=0)
    speed: float = Field(0.0, ge=0)


class _VehicleEntryModel(_Strict):
    init: List[float] = Field(min_length=4, max_length=4)
    target: List[float] = Field(min_length=2, max_length=3)
    level: int = Field(0, ge=0)
    color: Optional[List[int]] = Field(None, min_length=3, max_length=3)


class _ConfigFileModel(_Strict):
    delta_t: float = Field(gt=0)
    max_simulation_time: float = Field(gt=0)
    map_size: float = Field(gt=0)
    lane_width: float = Field(gt=0)
    goal_tolerance: float = Field(2.0, gt=0)
    random_seed: int = 0
    workers: Optional[int] = Field(None, ge=1)
    reset_noise: _ResetNoiseModel = Field(default_factory=_ResetNoiseModel)
    vehicle: _VehicleModel = Field(default_factory=_VehicleModel)
    planner: _PlannerModel = Field(default_factory=_PlannerModel)
    vehicle_list: Dict[str, _VehicleEntryModel] = Field(min_length=1)


def _format_validation_error(exc: ValidationError) -> str:
    lines = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
        lines.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(lines)


def _agent_from_entry(index: int, name: str, entry: _VehicleEntryModel) -> AgentConfig:
    x, y, heading, speed = entry.init
    target = list(entry.target)
    goal = Pose(x=target[0], y=target[1], heading=target[2] if len(target) > 2 else 0.0)
    if entry.color is not None:
        color = tuple(max(0, min(255, int(c))) for c in entry.color)
    else:
        color = VEHICLE_COLORS[index % len(VEHICLE_COLORS)]
    return AgentConfig(
        name=name,
        initial_state=State(x=x, y=y, heading=heading, speed=speed, timestamp=0.0),
        goal=goal,
        level=entry.level,
        color=color,  # type: ignore[arg-type]
    )


def _check_scenario(config: SimulationConfig) -> None:
    env = config.env
    if config.lane_width >= config.map_size:
        raise ConfigError(
            f"lane_width ({config.lane_width}) must be smaller than map_size ({config.map_size})"
        )
    for agent in config.agents:
        s = agent.initial_state
        if not s.is_finite():
            raise ConfigError(f"vehicle_list.{agent.name}.init: values must be finite")
        if not env.is_drivable(s.x, s.y):
            raise ConfigError(
                f"vehicle_list.{agent.name}.init: ({s.x:.2f}, {s.y:.2f}) is not on the road"
            )
        if s.speed < 0.0 or s.speed > config.vehicle.max_speed:
            raise ConfigError(
                f"vehicle_list.{agent.name}.init: speed {s.speed} outside [0, {config.vehicle.max_speed}]"
            )
        if not env.in_bounds(agent.goal.x, agent.goal.y):
            raise ConfigError(
                f"vehicle_list.{agent.name}.target: ({agent.goal.x:.2f}, {agent.goal.y:.2f}) is off the map"
            )
        # Reset shifts the start along its heading by up to reset_noise.position.
        shift = config.reset_noise.position
        for sign in (-1.0, 1.0):
            x = s.x + sign * shift * math.cos(s.heading)
            y = s.y + sign * shift * math.sin(s.heading)
            if not env.is_drivable(x, y):
                raise ConfigError(
                    f"reset_noise.position: {shift} can move {agent.name} off the road "
                    f"to ({x:.2f}, {y:.2f})"
                )


def config_from_dict(data: Any, source: str = "<dict>") -> SimulationConfig:
    """Validate a parsed configuration mapping and build the frozen config.

    Raises
    ------
    ConfigError
        If *data* is not a mapping or any value fails validation.
    """
    if not isinstance(data, Mapping):
        raise ConfigError(f"{source}: top level must be a mapping, got {type(data).__name__}")
    try:
        model = _ConfigFileModel.model_validate(dict(data))
    except ValidationError as exc:
        raise ConfigError(f"{source}: {_format_validation_error(exc)}") from exc

    weights = RewardWeights(**model.planner.weights.model_dump())
    planner_fields = model.planner.model_dump(exclude={"weights"})
    config = SimulationConfig(
        delta_t=model.delta_t,
        max_simulation_time=model.max_simulation_time,
        map_size=model.map_size,
        lane_width=model.lane_width,
        goal_tolerance=model.goal_tolerance,
        random_seed=model.random_seed,
        workers=model.workers,
        reset_noise=ResetNoise(**model.reset_noise.model_dump()),
        vehicle=VehicleSpec(**model.vehicle.model_dump()),
        planner=PlannerConfig(weights=weights, **planner_fields),
        agents=tuple(
            _agent_from_entry(idx, name, entry)
            for idx, (name, entry) in enumerate(model.vehicle_list.items())
        ),
    )
    _check_scenario(config)
    return config


def load_config(path: Union[str, Path]) -> SimulationConfig:
    """Read and validate a YAML configuration file.

    Raises
    ------
    ConfigError
        If the file cannot be read, is not valid YAML, or fails validation.
    """
    path = Path(path)
    log.info("config path: %s", path)
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"error parsing YAML file {path}: {exc}") from exc
    config = config_from_dict(data, source=str(path))
    log.debug(
        "config loaded: %d vehicles, dt=%.3f, budget=%d, max_step=%d",
        len(config.agents), config.delta_t,
        config.planner.computation_budget, config.planner.max_step,
    )
    return config
