# Tests for AegisSim.utils.metrics

import numpy as np
import pytest

from AegisSim.core.data_types import SimulationConfig, SimulationResult, TrajectorySample
from AegisSim.core.simulation_engine import TrajectorySimulator
from AegisSim.data_generation.patient_catalog import (
    ChallengeScenario, DEFAULT_MEAL_PLANS, DEFAULT_PATIENT_ARCHETYPES
)
from AegisSim.exceptions import InsufficientDataError
from AegisSim.utils import metrics


def test_compute_variability_metrics_known_values():
    glucose = [50, 60, 70, 100, 180, 200]
    m = metrics.compute_variability_metrics(glucose)
    assert m.sample_count == 6
    # In range (70-180 inclusive): 70, 100, 180
    assert m.time_in_range_pct == pytest.approx(50.0)
    assert m.time_below_range_pct == pytest.approx(2 / 6 * 100)
    assert m.severe_hypo_pct == pytest.approx(1 / 6 * 100)
    assert m.time_above_range_pct == pytest.approx(1 / 6 * 100)
    mean = np.mean(glucose)
    assert m.mean_glucose == pytest.approx(mean)
    assert m.std_glucose == pytest.approx(np.std(glucose))
    assert m.coefficient_of_variation_pct == pytest.approx(np.std(glucose) / mean * 100)


def test_band_boundaries():
    m = metrics.compute_variability_metrics([54, 69.99, 70, 180, 180.01])
    assert m.severe_hypo_pct == 0.0
    assert m.time_below_range_pct == pytest.approx(40.0)
    assert m.time_in_range_pct == pytest.approx(40.0)
    assert m.time_above_range_pct == pytest.approx(20.0)


def test_constant_trajectory_has_zero_cv():
    m = metrics.compute_variability_metrics([120.0] * 10)
    assert m.coefficient_of_variation_pct == 0.0
    assert m.time_in_range_pct == 100.0


def test_accepts_samples_and_results():
    samples = (TrajectorySample(0.0, 100.0), TrajectorySample(1 / 12, 200.0))
    config = SimulationConfig(
        DEFAULT_PATIENT_ARCHETYPES["adult_avg"], DEFAULT_MEAL_PLANS["standard"],
        ChallengeScenario.NONE, 1
    )
    result = SimulationResult(config=config, trajectory=samples)
    assert metrics.compute_variability_metrics(samples).mean_glucose == pytest.approx(150.0)
    assert metrics.compute_variability_metrics(result).time_above_range_pct == pytest.approx(50.0)


@pytest.mark.parametrize("empty", [[], np.array([]), ()])
def test_empty_trajectory_raises(empty):
    with pytest.raises(InsufficientDataError, match="Insufficient data"):
        metrics.compute_variability_metrics(empty)


def test_zero_mean_and_non_finite_raise():
    with pytest.raises(InsufficientDataError):
        metrics.compute_variability_metrics([0.0, 0.0])
    with pytest.raises(InsufficientDataError):
        metrics.calculate_coefficient_of_variation([0.0])
    with pytest.raises(InsufficientDataError):
        metrics.compute_variability_metrics([100.0, float("nan")])
    with pytest.raises(InsufficientDataError):
        metrics.compute_variability_metrics([-100.0, -50.0])
    with pytest.raises(InsufficientDataError):
        metrics.calculate_coefficient_of_variation([-80.0, 20.0])


def test_mixed_sample_and_raw_input_raises():
    with pytest.raises(InsufficientDataError, match="mixes"):
        metrics.compute_variability_metrics([TrajectorySample(0.0, 100.0), 120.0])
    with pytest.raises(InsufficientDataError, match="mixes"):
        metrics.compute_variability_metrics([120.0, TrajectorySample(0.0, 100.0)])


@pytest.mark.parametrize("challenge", list(ChallengeScenario))
def test_bands_partition_simulated_trajectories(challenge):
    config = SimulationConfig(
        DEFAULT_PATIENT_ARCHETYPES["child"], DEFAULT_MEAL_PLANS["high_carb"], challenge, 24
    )
    result = TrajectorySimulator(config, seed=7, step_delay=0).run_sync()
    m = metrics.compute_variability_metrics(result)
    total = m.time_in_range_pct + m.time_below_range_pct + m.time_above_range_pct
    assert total == pytest.approx(100.0)
    assert m.severe_hypo_pct <= m.time_below_range_pct
    assert m.coefficient_of_variation_pct >= 0.0
    for pct in (m.time_in_range_pct, m.time_below_range_pct, m.severe_hypo_pct, m.time_above_range_pct):
        assert 0.0 <= pct <= 100.0


def test_band_helpers_match_analyzer():
    glucose = np.array([60, 75, 150, 190, 250, 52])
    m = metrics.compute_variability_metrics(glucose)
    assert metrics.calculate_tir(glucose) == pytest.approx(m.time_in_range_pct)
    assert metrics.calculate_time_below_range(glucose) == pytest.approx(m.time_below_range_pct)
    assert metrics.calculate_severe_hypo(glucose) == pytest.approx(m.severe_hypo_pct)
    assert metrics.calculate_time_above_range(glucose) == pytest.approx(m.time_above_range_pct)
    assert metrics.calculate_coefficient_of_variation(glucose) == pytest.approx(m.coefficient_of_variation_pct)
    assert metrics.calculate_tir(glucose, lower_bound=50, upper_bound=200) == pytest.approx(5 / 6 * 100)
    with pytest.raises(InsufficientDataError):
        metrics.calculate_tir([])


def test_as_dict_round_trip_keys():
    m = metrics.compute_variability_metrics([100, 120])
    d = m.as_dict()
    assert set(d) == {
        "time_in_range_pct", "time_below_range_pct", "severe_hypo_pct",
        "time_above_range_pct", "mean_glucose", "std_glucose",
        "coefficient_of_variation_pct", "sample_count",
    }
