"""Core components for the AegisSim trajectory simulator.

This package holds the step loop that synthesizes glucose trajectories,
the data structures it produces and the cooperative cancellation flag
threaded through it.

Key Contents:
    - `TrajectorySimulator`: Advances glucose over 5-minute steps.
    - `SimulationConfig`, `SimulationResult`, `TrajectorySample`,
      `VariabilityMetrics`, `SimulationReport`: Plain data records.
    - `CancellationToken`: Stops a running simulation at a step boundary.
"""

from .cancellation import CancellationToken
from .data_types import (
    STEPS_PER_HOUR,
    SimulationConfig,
    TrajectorySample,
    SimulationResult,
    VariabilityMetrics,
    SimulationReport,
)
from .simulation_engine import TrajectorySimulator, regime_multiplier, meal_excursion

__all__ = [
    "CancellationToken",
    "STEPS_PER_HOUR",
    "SimulationConfig",
    "TrajectorySample",
    "SimulationResult",
    "VariabilityMetrics",
    "SimulationReport",
    "TrajectorySimulator",
    "regime_multiplier",
    "meal_excursion",
]
