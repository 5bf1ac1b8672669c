"""
AegisSim SDK - Batch glucose-trajectory simulation

Quick Start:
    from AegisSim.sdk import BatchSimulationRunner

    runner = BatchSimulationRunner()
    report = runner.run_sync(
        patient="adult_avg",
        duration_hours=24,
        meal_plan="standard",
        challenge="dawn",
        seed=42,
    )

    print(f"TIR: {report.metrics.time_in_range_pct:.1f}%")
    print(f"Hypo violations: {report.hypo_violations}")
"""

from .batch_simulation import BatchSimulationRunner, build_simulation_config
from ..core.data_types import (
    SimulationConfig,
    SimulationResult,
    SimulationReport,
    TrajectorySample,
    VariabilityMetrics,
)

__version__ = "1.0.0"
