"""
sim — Simulation core
=====================

Modules
-------
physics
    :class:`State`, :class:`Action` and the kinematic :func:`step`.
env
    :class:`EnvCrossroads` map geometry.
vehicle
    :class:`Agent` records and frozen :class:`AgentView` snapshots.
collision
    Oriented-rectangle collision test and goal predicates.
settings
    Frozen configuration dataclasses and the YAML loader.
orchestrator
    :class:`TickOrchestrator` bulk-synchronous round loop.
stats
    :class:`RoundResult` and :class:`ExperimentSummary`.
"""
