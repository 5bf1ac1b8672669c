"""
AegisSim Data Types
Plain data structures exchanged between the simulator, the analyzer and
whatever presentation layer consumes them.
"""

from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, Tuple

import numpy as np
import pandas as pd

from ..exceptions import ConfigurationError
from ..data_generation.patient_catalog import (
    PatientArchetype, MealPlan, ChallengeScenario
)

STEPS_PER_HOUR = 12  # 5-minute resolution


@dataclass(frozen=True)
class SimulationConfig:
    """Parameters of a single simulation run."""
    archetype: PatientArchetype
    meal_plan: MealPlan
    challenge: ChallengeScenario
    duration_hours: int

    def __post_init__(self):
        if not isinstance(self.archetype, PatientArchetype):
            raise ConfigurationError(f"archetype must be a PatientArchetype, got {type(self.archetype).__name__}.")
        if not isinstance(self.meal_plan, MealPlan):
            raise ConfigurationError(f"meal_plan must be a MealPlan, got {type(self.meal_plan).__name__}.")
        if not isinstance(self.challenge, ChallengeScenario):
            raise ConfigurationError(f"challenge must be a ChallengeScenario, got {type(self.challenge).__name__}.")
        if not isinstance(self.duration_hours, int) or isinstance(self.duration_hours, bool):
            raise ConfigurationError(f"duration_hours must be an integer, got {self.duration_hours!r}.")
        if self.duration_hours <= 0:
            raise ConfigurationError(f"duration_hours must be positive, got {self.duration_hours}.")

    @property
    def total_steps(self) -> int:
        return self.duration_hours * STEPS_PER_HOUR


@dataclass(frozen=True)
class TrajectorySample:
    """Glucose value (mg/dL) at a point in simulated time."""
    time_hours: float
    glucose: float


@dataclass(frozen=True)
class SimulationResult:
    """Output of a completed (or cancelled) simulation run."""
    config: SimulationConfig
    trajectory: Tuple[TrajectorySample, ...]
    meal_decisions: int = 0
    hypo_violations: int = 0
    seed: Optional[int] = None

    def glucose_values(self) -> np.ndarray:
        return np.array([s.glucose for s in self.trajectory], dtype=float)

    def time_values(self) -> np.ndarray:
        return np.array([s.time_hours for s in self.trajectory], dtype=float)

    def to_dataframe(self) -> pd.DataFrame:
        """Returns the trajectory as a two-column frame (time_hours, glucose)."""
        return pd.DataFrame(
            {"time_hours": self.time_values(), "glucose": self.glucose_values()}
        )

    def __len__(self) -> int:
        return len(self.trajectory)


@dataclass(frozen=True)
class VariabilityMetrics:
    """Glycemic variability summary of a trajectory."""
    time_in_range_pct: float
    time_below_range_pct: float
    severe_hypo_pct: float
    time_above_range_pct: float
    mean_glucose: float
    std_glucose: float
    coefficient_of_variation_pct: float
    sample_count: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SimulationReport:
    """A finished run handed to the presentation layer."""
    result: SimulationResult
    metrics: VariabilityMetrics

    @property
    def meal_decisions(self) -> int:
        return self.result.meal_decisions

    @property
    def hypo_violations(self) -> int:
        return self.result.hypo_violations
