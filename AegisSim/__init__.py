"""
AegisSim: Batch glucose-trajectory simulation for decision-support UIs

Synthesizes multi-hour blood-glucose traces for a chosen patient archetype,
meal plan and physiological challenge, then summarises them with standard
glycemic variability metrics (TIR, TBR, TAR, severe hypoglycemia, mean, CV).
The output is plain data; rendering is left to the caller.

Example usage:
    >>> import AegisSim as sim
    >>>
    >>> config = sim.build_simulation_config("adult_avg", 24, "standard", "none")
    >>> result = sim.TrajectorySimulator(config, seed=7, step_delay=0).run_sync()
    >>> metrics = sim.compute_variability_metrics(result)
    >>> metrics.time_in_range_pct
"""

__version__ = "1.0.0"
__author__ = "AegisSim Team"
__license__ = "MIT"

from .exceptions import (
    AegisSimError,
    ConfigurationError,
    InsufficientDataError,
    SimulationCancelledError,
)
from .core import (
    CancellationToken,
    SimulationConfig,
    SimulationReport,
    SimulationResult,
    TrajectorySample,
    TrajectorySimulator,
    VariabilityMetrics,
)
from .data_generation import (
    ChallengeScenario,
    MealEvent,
    MealPlan,
    PatientArchetype,
    SimulationCatalog,
)
from .utils.metrics import compute_variability_metrics
from .utils.config import ConfigManager
from .sdk.batch_simulation import BatchSimulationRunner, build_simulation_config

__all__ = [
    # Errors
    "AegisSimError",
    "ConfigurationError",
    "InsufficientDataError",
    "SimulationCancelledError",

    # Simulation
    "TrajectorySimulator",
    "CancellationToken",
    "BatchSimulationRunner",
    "build_simulation_config",
    "compute_variability_metrics",
    "ConfigManager",

    # Data
    "SimulationConfig",
    "SimulationResult",
    "SimulationReport",
    "TrajectorySample",
    "VariabilityMetrics",
    "ChallengeScenario",
    "MealEvent",
    "MealPlan",
    "PatientArchetype",
    "SimulationCatalog",

    # Metadata
    "__version__",
    "__author__",
    "__license__",
]
