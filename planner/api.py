"""
planner/api.py
==============
Optional FastAPI server that exposes the planner as a REST endpoint.

Start the server::

    python -m planner.api configs/unprotected_left_turn.yaml   # → http://localhost:8000/plan

The ``/plan`` endpoint accepts a snapshot (the ego vehicle name plus the
state of every vehicle) and returns the chosen manoeuvre and the expected
trajectory.  ``/health`` reports the loaded scenario.

.. note::

   This server is **not** required to run the simulation.
   It exists for external integrations and testing.
"""

import logging
import sys
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from planner.mcts import decide
from sim.physics import Pose, State
from sim.settings import SimulationConfig, load_config
from sim.vehicle import AgentView

log = logging.getLogger("planner.api")

# ── Pydantic request schemas ─────────────────────────────────────────────────


class StateModel(BaseModel):
    """Kinematic state of one vehicle."""
    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float
    heading: float
    speed: float = Field(ge=0)
    timestamp: float = 0.0


class PoseModel(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float
    heading: float = 0.0


class VehicleModel(BaseModel):
    """Single vehicle in the request payload."""
    name: str
    state: StateModel
    goal: Optional[PoseModel] = None
    level: Optional[int] = Field(None, ge=0)
    goal_reached: bool = False


class PlanRequest(BaseModel):
    """Snapshot submitted to ``/plan``."""
    ego: str
    vehicles: List[VehicleModel]
    tick: int = 0


class PlanResponse(BaseModel):
    action: str
    expected_trajectory: List[StateModel]
    iterations: int
    fallback: bool


# ── Conversion ───────────────────────────────────────────────────────────────


def _views(request: PlanRequest, config: SimulationConfig) -> List[AgentView]:
    known = {agent.name: agent for agent in config.agents}
    views = []
    for index, vehicle in enumerate(request.vehicles):
        cfg = known.get(vehicle.name)
        if vehicle.goal is not None:
            goal = Pose(**vehicle.goal.model_dump())
        elif cfg is not None:
            goal = cfg.goal
        else:
            raise HTTPException(status_code=422, detail=f"no goal known for {vehicle.name}")
        if vehicle.level is not None:
            level = vehicle.level
        else:
            level = cfg.level if cfg is not None else 0
        views.append(
            AgentView(
                name=vehicle.name,
                index=index,
                state=State(**vehicle.state.model_dump()),
                goal=goal,
                level=level,
                spec=config.vehicle,
                goal_reached=vehicle.goal_reached,
            )
        )
    return views


# ── FastAPI application ──────────────────────────────────────────────────────


def create_app(config: SimulationConfig) -> FastAPI:
    """Build the application around one immutable configuration."""
    app = FastAPI(
        title="Level-k Crossroads Planner API",
        description="Chooses the next manoeuvre of one vehicle at the crossroads.",
        version="1.0",
    )

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "vehicles": [agent.name for agent in config.agents],
            "computation_budget": config.planner.computation_budget,
        }

    @app.post("/plan", response_model=PlanResponse)
    def plan_action(request: PlanRequest):
        """Run one planning call on the provided snapshot."""
        views = _views(request, config)
        ego = next((v for v in views if v.name == request.ego), None)
        if ego is None:
            raise HTTPException(status_code=404, detail=f"unknown ego vehicle {request.ego}")
        if not ego.state.is_finite():
            raise HTTPException(status_code=422, detail="ego state must be finite")
        decision = decide(ego, views, config, request.tick)
        log.info("plan ego=%s action=%s", ego.name, decision.action.label)
        return PlanResponse(
            action=decision.action.name,
            expected_trajectory=[
                StateModel(x=s.x, y=s.y, heading=s.heading, speed=s.speed, timestamp=s.timestamp)
                for s in decision.expected_trajectory
            ],
            iterations=decision.iterations,
            fallback=decision.fallback,
        )

    return app


# ── Standalone entry point ───────────────────────────────────────────────────

if __name__ == "__main__":
    path = sys.argv[1] if len(sys.argv) > 1 else "configs/unprotected_left_turn.yaml"
    print("Starting planner server on http://0.0.0.0:8000 …")
    uvicorn.run(create_app(load_config(path)), host="0.0.0.0", port=8000)
