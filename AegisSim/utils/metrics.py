# AegisSim Metrics
# Glycemic variability metrics computed over a finished glucose trajectory.

import logging
from typing import Any, Iterable, Union

import numpy as np

from ..core.data_types import SimulationResult, TrajectorySample, VariabilityMetrics
from ..exceptions import InsufficientDataError

logger = logging.getLogger(__name__)

TARGET_RANGE_LOW = 70.0
TARGET_RANGE_HIGH = 180.0
SEVERE_HYPO_THRESHOLD = 54.0

GlucoseInput = Union[SimulationResult, Iterable[TrajectorySample], Iterable[float], np.ndarray]


def _as_glucose_array(trajectory: Any) -> np.ndarray:
    """Normalises the accepted trajectory shapes to a 1-D float array.

    Accepts a `SimulationResult`, a sequence of `TrajectorySample`, or a
    sequence/array of glucose values in mg/dL.

    Raises:
        InsufficientDataError: If there are no samples or any sample is
            not finite, or samples are mixed with raw values.
    """
    if isinstance(trajectory, SimulationResult):
        values = trajectory.glucose_values()
    else:
        items = list(trajectory)
        is_sample = [isinstance(item, TrajectorySample) for item in items]
        if any(is_sample) and not all(is_sample):
            raise InsufficientDataError(
                "Insufficient data: trajectory mixes TrajectorySample items with raw values."
            )
        if items and all(is_sample):
            values = np.array([s.glucose for s in items], dtype=float)
        else:
            values = np.asarray(items, dtype=float).ravel()

    if values.size == 0:
        raise InsufficientDataError(
            "Insufficient data: cannot compute glycemic metrics for an empty trajectory."
        )
    if not np.all(np.isfinite(values)):
        raise InsufficientDataError(
            "Insufficient data: trajectory contains non-finite glucose values."
        )
    return values


def _positive_mean(values: np.ndarray) -> float:
    mean = float(np.mean(values))
    if mean <= 0:
        raise InsufficientDataError(
            f"Insufficient data: mean glucose is {mean}, coefficient of variation is undefined."
        )
    return mean


def calculate_tir(y_true: GlucoseInput, lower_bound: float = TARGET_RANGE_LOW,
                  upper_bound: float = TARGET_RANGE_HIGH) -> float:
    """Calculates Time In Range (TIR).

    TIR is the percentage of samples that fall within a target range,
    70-180 mg/dL by default.

    Args:
        y_true (GlucoseInput): Glucose samples.
        lower_bound (float): Lower bound of the range (inclusive).
        upper_bound (float): Upper bound of the range (inclusive).

    Returns:
        float: TIR in percent.
    """
    values = _as_glucose_array(y_true)
    in_range_count = np.sum((values >= lower_bound) & (values <= upper_bound))
    return float(in_range_count) / values.size * 100


def calculate_time_below_range(y_true: GlucoseInput,
                               threshold: float = TARGET_RANGE_LOW) -> float:
    """Percentage of samples strictly below `threshold` (TBR)."""
    values = _as_glucose_array(y_true)
    return float(np.sum(values < threshold)) / values.size * 100


def calculate_severe_hypo(y_true: GlucoseInput,
                          threshold: float = SEVERE_HYPO_THRESHOLD) -> float:
    """Percentage of samples strictly below the severe hypoglycemia threshold."""
    return calculate_time_below_range(y_true, threshold=threshold)


def calculate_time_above_range(y_true: GlucoseInput,
                               threshold: float = TARGET_RANGE_HIGH) -> float:
    """Percentage of samples strictly above `threshold` (TAR)."""
    values = _as_glucose_array(y_true)
    return float(np.sum(values > threshold)) / values.size * 100


def calculate_coefficient_of_variation(y_true: GlucoseInput) -> float:
    """Calculates the coefficient of variation (CV) in percent.

    Formula: CV = 100 * population_std / mean

    Raises:
        InsufficientDataError: If the trajectory is empty or its mean is
            not positive.
    """
    values = _as_glucose_array(y_true)
    mean = _positive_mean(values)
    return float(np.std(values)) / mean * 100


def compute_variability_metrics(trajectory: GlucoseInput) -> VariabilityMetrics:
    """Summarises a trajectory into `VariabilityMetrics`.

    Bands are `[70, 180]` in range, `< 70` below, `< 54` severe and
    `> 180` above, so in/below/above always sum to 100%. The standard
    deviation is the population one (ddof=0).

    Args:
        trajectory (GlucoseInput): A `SimulationResult`, a sequence of
            `TrajectorySample`, or raw glucose values.

    Returns:
        VariabilityMetrics: The summary statistics.

    Raises:
        InsufficientDataError: For an empty trajectory, non-finite values,
            or a mean that is not positive.
    """
    values = _as_glucose_array(trajectory)
    n = values.size

    mean = _positive_mean(values)
    std = float(np.std(values))

    metrics = VariabilityMetrics(
        time_in_range_pct=float(np.sum((values >= TARGET_RANGE_LOW) & (values <= TARGET_RANGE_HIGH))) / n * 100,
        time_below_range_pct=float(np.sum(values < TARGET_RANGE_LOW)) / n * 100,
        severe_hypo_pct=float(np.sum(values < SEVERE_HYPO_THRESHOLD)) / n * 100,
        time_above_range_pct=float(np.sum(values > TARGET_RANGE_HIGH)) / n * 100,
        mean_glucose=mean,
        std_glucose=std,
        coefficient_of_variation_pct=std / mean * 100,
        sample_count=int(n),
    )
    logger.debug(
        f"Variability metrics over {n} samples: TIR={metrics.time_in_range_pct:.1f}%, "
        f"mean={mean:.1f} mg/dL, CV={metrics.coefficient_of_variation_pct:.1f}%"
    )
    return metrics
