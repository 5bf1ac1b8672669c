"""
AegisSim SDK - Batch Simulation
Turns UI selections into a validated run and hands the finished trajectory
to the variability analyzer.
"""

from typing import Any, Dict, Optional
import asyncio
import logging

from ..core.cancellation import CancellationToken
from ..core.data_types import SimulationConfig, SimulationReport
from ..core.simulation_engine import (
    TrajectorySimulator, ProgressCallback, DEFAULT_STEP_DELAY_SECONDS, validate_seed
)
from ..data_generation.patient_catalog import ChallengeScenario, SimulationCatalog
from ..exceptions import ConfigurationError
from ..utils.config import ConfigManager
from ..utils.metrics import compute_variability_metrics


def _parse_duration(duration_hours: Any) -> int:
    """Accepts an int or an integer-valued string; anything else is an error."""
    if isinstance(duration_hours, bool):
        raise ConfigurationError(f"duration_hours must be an integer, got {duration_hours!r}.")
    if isinstance(duration_hours, int):
        parsed = duration_hours
    elif isinstance(duration_hours, str):
        try:
            parsed = int(duration_hours.strip())
        except ValueError as e:
            raise ConfigurationError(
                f"duration_hours must be an integer, got {duration_hours!r}."
            ) from e
    else:
        raise ConfigurationError(f"duration_hours must be an integer, got {duration_hours!r}.")
    if parsed <= 0:
        raise ConfigurationError(f"duration_hours must be positive, got {parsed}.")
    return parsed


def build_simulation_config(patient: Any, duration_hours: Any, meal_plan: Any,
                            challenge: Any,
                            catalog: Optional[SimulationCatalog] = None) -> SimulationConfig:
    """
    Map the four user selections to a `SimulationConfig`.

    Args:
        patient: Archetype key, e.g. "adult_avg"
        duration_hours: Positive integer (or integer string)
        meal_plan: Meal plan key, e.g. "standard"
        challenge: Challenge key or `ChallengeScenario`
        catalog: Registry to resolve keys against (built-ins by default)

    Returns:
        SimulationConfig: Validated run parameters

    Raises:
        ConfigurationError: On any unknown key or invalid duration
    """
    catalog = catalog or SimulationCatalog()
    return SimulationConfig(
        archetype=catalog.get_archetype(patient),
        meal_plan=catalog.get_meal_plan(meal_plan),
        challenge=ChallengeScenario.from_key(challenge),
        duration_hours=_parse_duration(duration_hours),
    )


class BatchSimulationRunner:
    """
    Runs a batch glucose simulation and its variability analysis.

    Settings are read from the `simulation` section of a `ConfigManager`
    (`seed`, `step_delay_seconds`) and catalog extensions from its
    `catalog` section. Each call builds its own simulator, so nothing is
    shared between runs.
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None,
                 catalog: Optional[SimulationCatalog] = None):
        """Initialize the runner from optional configuration."""
        self.config_manager = config_manager or ConfigManager.from_dict({})
        self.logger = logging.getLogger(__name__)
        self.catalog = catalog or SimulationCatalog.from_config(
            self.config_manager.get_section("catalog")
        )

        self.default_seed: Optional[int] = validate_seed(
            self.config_manager.get("simulation.seed"), "simulation.seed"
        )
        step_delay = self.config_manager.get(
            "simulation.step_delay_seconds", DEFAULT_STEP_DELAY_SECONDS
        )
        if isinstance(step_delay, bool) or not isinstance(step_delay, (int, float)) or step_delay < 0:
            raise ConfigurationError(
                f"simulation.step_delay_seconds must be a non-negative number, got {step_delay!r}."
            )
        self.step_delay = float(step_delay)

    def selections_from_config(self) -> Dict[str, Any]:
        """
        Read the four run selections from the `simulation` section.

        Raises:
            ConfigurationError: If any selection is missing
        """
        selections = {}
        for key in ("patient", "duration_hours", "meal_plan", "challenge"):
            value = self.config_manager.get(f"simulation.{key}")
            if value is None:
                raise ConfigurationError(f"Missing required setting 'simulation.{key}'.")
            selections[key] = value
        return selections

    def build_config(self, patient: Any, duration_hours: Any, meal_plan: Any,
                     challenge: Any) -> SimulationConfig:
        return build_simulation_config(
            patient, duration_hours, meal_plan, challenge, catalog=self.catalog
        )

    async def run(
        self,
        patient: Any,
        duration_hours: Any,
        meal_plan: Any,
        challenge: Any,
        seed: Optional[int] = None,
        rng: Optional[Any] = None,
        cancel_token: Optional[CancellationToken] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> SimulationReport:
        """
        Validate selections, simulate, then analyze.

        Args:
            patient: Archetype key
            duration_hours: Simulated hours
            meal_plan: Meal plan key
            challenge: Challenge key
            seed: Noise seed (falls back to `simulation.seed`)
            rng: Explicit noise source, overrides `seed`
            cancel_token: Checked before every step
            progress_callback: Called with (completed, total) after every step

        Returns:
            SimulationReport: Trajectory, counters and metrics

        Raises:
            ConfigurationError: Invalid selections, before any step runs
            SimulationCancelledError: If `cancel_token` was set
        """
        config = self.build_config(patient, duration_hours, meal_plan, challenge)
        validate_seed(seed)
        effective_seed = seed if seed is not None else self.default_seed

        simulator = TrajectorySimulator(
            config, seed=effective_seed, rng=rng, step_delay=self.step_delay
        )
        result = await simulator.run(
            cancel_token=cancel_token, progress_callback=progress_callback
        )
        metrics = compute_variability_metrics(result)

        self.logger.info(
            f"Batch simulation finished: TIR {metrics.time_in_range_pct:.1f}%, "
            f"mean {metrics.mean_glucose:.1f} mg/dL, CV {metrics.coefficient_of_variation_pct:.1f}%, "
            f"{result.hypo_violations} violations, {result.meal_decisions} decisions"
        )
        return SimulationReport(result=result, metrics=metrics)

    def run_sync(self, *args, **kwargs) -> SimulationReport:
        """Blocking wrapper around `run()` for callers without an event loop."""
        return asyncio.run(self.run(*args, **kwargs))
