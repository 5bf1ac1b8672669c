# AegisSim Simulation Engine
# Advances a scalar glucose state over 5-minute steps under a patient
# archetype, a meal plan and a challenge scenario.

import asyncio
import logging
from typing import Any, Callable, List, Optional

import numpy as np

from .cancellation import CancellationToken
from .data_types import (
    STEPS_PER_HOUR, SimulationConfig, SimulationResult, TrajectorySample
)
from ..exceptions import ConfigurationError, SimulationCancelledError
from ..data_generation.patient_catalog import ChallengeScenario, PatientArchetype, MealEvent

# Policy constants. Empirical values, reproduced exactly.
INITIAL_GLUCOSE = 100.0
BASELINE_GLUCOSE = 100.0
MEAN_REVERSION_RATE = 0.02
MEAL_TOLERANCE_HOURS = 0.1
CARB_GLUCOSE_RISE_PER_GRAM = 4.0
INSULIN_OFFSET_PER_UNIT = 25.0
NOISE_AMPLITUDE = 5.0
GLUCOSE_FLOOR = 50.0
GLUCOSE_CEILING = 350.0
HYPO_INTERVENTION_THRESHOLD = 54.0
HYPO_RESCUE_GLUCOSE = 70.0
DEFAULT_STEP_DELAY_SECONDS = 0.005

ProgressCallback = Callable[[int, int], None]


def validate_seed(seed: Any, setting: str = "seed") -> Optional[int]:
    """Returns `seed` unchanged if it is None or a non-negative int."""
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int) or seed < 0):
        raise ConfigurationError(f"{setting} must be a non-negative integer, got {seed!r}.")
    return seed


def meal_excursion(meal: MealEvent, archetype: PatientArchetype) -> float:
    """Glucose change (mg/dL) applied on the step a meal is detected.

    A carbohydrate-driven rise offset by the insulin covering it:
    `carbs * 4 - carbs / (500 / TDI) * 25`.
    """
    return (meal.carb_grams * CARB_GLUCOSE_RISE_PER_GRAM
            - meal.carb_grams / archetype.insulin_sensitivity_proxy * INSULIN_OFFSET_PER_UNIT)


def regime_multiplier(challenge: ChallengeScenario, hour: float) -> float:
    """Multiplier applied after mean reversion. First matching rule wins."""
    if challenge is ChallengeScenario.EXERCISE and 3 <= hour <= 4:
        return 0.7
    elif challenge is ChallengeScenario.STRESS:
        return 1.15
    elif challenge is ChallengeScenario.ILLNESS:
        return 1.25
    elif challenge is ChallengeScenario.DAWN and 4 <= hour <= 7:
        return 1.1
    return 1.0


class TrajectorySimulator:
    """Generates a synthetic glucose trajectory for one `SimulationConfig`.

    Each run starts at 100 mg/dL and takes `duration_hours * 12` steps. A
    step applies, in order: meal excursion, mean reversion toward 100 mg/dL,
    the challenge multiplier, uniform noise in [-5, 5), clamping to
    [50, 350] and the hypoglycemia rescue (values below 54 are reset to 70
    and counted as a violation).

    `run()` is a coroutine that sleeps for `step_delay` after every step so
    that an event loop hosting it stays responsive. A `CancellationToken` is
    checked at the top of each step.

    Attributes:
        config (SimulationConfig): The immutable parameters of the run.
        seed (Optional[int]): Seed used to build the default noise source.
        step_delay (float): Seconds to sleep between steps.
    """
    def __init__(self, config: SimulationConfig, seed: Optional[int] = None,
                 rng: Optional[Any] = None,
                 step_delay: float = DEFAULT_STEP_DELAY_SECONDS):
        """Initializes the simulator.

        Args:
            config (SimulationConfig): Validated run parameters.
            seed (Optional[int]): Seed for `np.random.default_rng`. Ignored
                when `rng` is given. Runs with the same seed and config are
                identical.
            rng (Optional[Any]): Noise source exposing `uniform(low, high)`,
                e.g. a `numpy.random.Generator`.
            step_delay (float): Seconds to sleep after each step. Zero
                still yields control to the event loop.

        Raises:
            ConfigurationError: If `config` is not a `SimulationConfig`,
                `seed` is not a non-negative integer, or `step_delay` is
                negative.
        """
        if not isinstance(config, SimulationConfig):
            raise ConfigurationError(
                f"TrajectorySimulator requires a SimulationConfig, got {type(config).__name__}."
            )
        if step_delay < 0:
            raise ConfigurationError(f"step_delay must be non-negative, got {step_delay}.")
        validate_seed(seed)
        self.config = config
        self.seed = seed
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.step_delay = float(step_delay)
        self.logger = logging.getLogger(__name__)

    def _step(self, glucose: float, hour: float) -> tuple:
        """Advances glucose by one step.

        Returns:
            tuple: (new_glucose, meal_detected, hypo_intervention)
        """
        meal = self.config.meal_plan.meal_at(hour, MEAL_TOLERANCE_HOURS)
        if meal is not None:
            glucose += meal_excursion(meal, self.config.archetype)
            self.logger.debug(f"Meal of {meal.carb_grams}g detected at {hour:.2f}h -> {glucose:.1f} mg/dL")

        mod = regime_multiplier(self.config.challenge, hour)
        glucose = glucose * (1 - MEAN_REVERSION_RATE) + BASELINE_GLUCOSE * MEAN_REVERSION_RATE
        glucose *= mod
        glucose += float(self.rng.uniform(-NOISE_AMPLITUDE, NOISE_AMPLITUDE))
        glucose = max(GLUCOSE_FLOOR, min(GLUCOSE_CEILING, glucose))

        hypo = glucose < HYPO_INTERVENTION_THRESHOLD
        if hypo:
            self.logger.debug(f"Glucose {glucose:.1f} mg/dL at {hour:.2f}h below "
                              f"{HYPO_INTERVENTION_THRESHOLD}; rescued to {HYPO_RESCUE_GLUCOSE}.")
            glucose = HYPO_RESCUE_GLUCOSE
        return glucose, meal is not None, hypo

    def _build_result(self, trajectory: List[TrajectorySample], meal_decisions: int,
                      hypo_violations: int) -> SimulationResult:
        return SimulationResult(
            config=self.config,
            trajectory=tuple(trajectory),
            meal_decisions=meal_decisions,
            hypo_violations=hypo_violations,
            seed=self.seed,
        )

    async def run(self, cancel_token: Optional[CancellationToken] = None,
                  progress_callback: Optional[ProgressCallback] = None) -> SimulationResult:
        """Runs the simulation to completion.

        Args:
            cancel_token (Optional[CancellationToken]): Checked before every
                step.
            progress_callback (Optional[ProgressCallback]): Called with
                `(completed_steps, total_steps)` after every step.

        Returns:
            SimulationResult: The full trajectory and event counters.

        Raises:
            SimulationCancelledError: If `cancel_token` is set during the
                run. The steps completed so far are attached as
                `partial_result`.
        """
        total_steps = self.config.duration_hours * STEPS_PER_HOUR
        self.logger.info(
            f"Simulation started: patient={self.config.archetype.name}, "
            f"meals={self.config.meal_plan.name}, challenge={self.config.challenge.value}, "
            f"{self.config.duration_hours}h ({total_steps} steps), seed={self.seed}."
        )

        trajectory: List[TrajectorySample] = []
        glucose = INITIAL_GLUCOSE
        meal_decisions = 0
        hypo_violations = 0

        for step_idx in range(total_steps):
            if cancel_token is not None and cancel_token.cancelled:
                self.logger.info(f"Simulation cancelled at step {step_idx}/{total_steps}.")
                raise SimulationCancelledError(
                    f"Simulation cancelled after {step_idx} of {total_steps} steps.",
                    partial_result=self._build_result(trajectory, meal_decisions, hypo_violations),
                )

            hour = step_idx / STEPS_PER_HOUR
            glucose, meal_detected, hypo = self._step(glucose, hour)
            if meal_detected:
                meal_decisions += 1
            if hypo:
                hypo_violations += 1
            trajectory.append(TrajectorySample(time_hours=hour, glucose=glucose))

            if progress_callback is not None:
                progress_callback(step_idx + 1, total_steps)
            await asyncio.sleep(self.step_delay)

        result = self._build_result(trajectory, meal_decisions, hypo_violations)
        self.logger.info(
            f"Simulation complete: {len(trajectory)} samples, "
            f"{meal_decisions} meal decisions, {hypo_violations} hypo violations."
        )
        return result

    def run_sync(self, cancel_token: Optional[CancellationToken] = None,
                 progress_callback: Optional[ProgressCallback] = None) -> SimulationResult:
        """Runs `run()` on a fresh event loop. Not usable inside a running loop."""
        return asyncio.run(self.run(cancel_token=cancel_token, progress_callback=progress_callback))
