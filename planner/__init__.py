"""
planner — Per-vehicle decision making
=====================================

Modules
-------
mcts
    :func:`decide` / :func:`plan` and the :class:`MonteCarloTreeSearch` engine.
levelk
    Recursive level-k prediction of the other vehicles.
reward
    Per-transition reward and :class:`Prediction` trajectories.
tree
    :class:`SearchTree` node arena.
api
    Optional FastAPI server around :func:`decide`.
"""

from planner.mcts import Decision, MonteCarloTreeSearch, decide, plan

__all__ = ["Decision", "MonteCarloTreeSearch", "decide", "plan"]
