"""Utility functions for calculating cohort statistics."""

from collections import Counter
from typing import Sequence

import numpy as np

from app.schemas.analysis import BandCount, FrequencyBucket, StatisticsReport
from app.utils.score_utils import BAND_ORDER, classify_total

FREQUENCY_BUCKET_WIDTH = 10
DEFAULT_PERCENTILES = [25.0, 50.0, 75.0, 90.0]


def calculate_percentiles(data: Sequence[float], percentiles: list[float]) -> dict[str, float]:
    """
    Calculate percentiles for a dataset.

    Args:
        data: Sequence of numeric values
        percentiles: List of percentile values (e.g., [25, 50, 75, 90])

    Returns:
        Dictionary mapping percentile names to values (e.g., {"25th": 45.5, ...})
    """
    if not data:
        return {f"{int(p)}th": 0.0 for p in percentiles}

    sorted_data = sorted(data)
    n = len(sorted_data)

    result = {}
    for p in percentiles:
        # Calculate index using linear interpolation
        index = (p / 100.0) * (n - 1)
        lower = int(index)
        upper = min(lower + 1, n - 1)
        weight = index - lower

        if lower == upper:
            value = sorted_data[lower]
        else:
            value = sorted_data[lower] * (1 - weight) + sorted_data[upper] * weight

        result[f"{int(p)}th"] = round(float(value), 2)

    return result


def calculate_median(data: Sequence[float]) -> float:
    """Middle value after sorting, or the mean of the two middle values for even counts."""
    if not data:
        raise ValueError("Median of an empty cohort is undefined")
    sorted_data = sorted(data)
    n = len(sorted_data)
    middle = n // 2
    if n % 2 == 0:
        return (sorted_data[middle - 1] + sorted_data[middle]) / 2
    return float(sorted_data[middle])


def calculate_modes(data: Sequence[int]) -> list[int]:
    """
    Return the most frequent values in ascending order.

    Returns an empty list ("no mode") when more than one value is present and
    none of them repeats.
    """
    if not data:
        raise ValueError("Mode of an empty cohort is undefined")
    frequencies = Counter(data)
    max_frequency = max(frequencies.values())
    modes = sorted(value for value, freq in frequencies.items() if freq == max_frequency)
    if len(data) > 1 and len(modes) == len(data):
        return []
    return modes


def calculate_population_std(data: Sequence[float]) -> float:
    """Population standard deviation (divides by n, not n - 1)."""
    if not data:
        raise ValueError("Standard deviation of an empty cohort is undefined")
    return float(np.std(np.array(data, dtype=float), ddof=0))


def describe_spread(std_deviation: float) -> str:
    if std_deviation < 10:
        return "close"
    if std_deviation < 20:
        return "moderate"
    return "wide"


def build_frequency_distribution(totals: Sequence[int], final_total_max: int) -> list[FrequencyBucket]:
    """
    Bucket totals into 10-point ranges covering [0, final_total_max].

    Bucket k spans [10k, min(10k + 9, final_total_max)], both ends inclusive.
    Buckets are created while the lower bound does not exceed final_total_max,
    so the last one always ends on final_total_max and may be narrower than
    10 points (the 100 bucket on the 100-point scale).
    """
    count_all = len(totals)
    buckets: list[FrequencyBucket] = []
    for lower in range(0, final_total_max + 1, FREQUENCY_BUCKET_WIDTH):
        upper = min(lower + FREQUENCY_BUCKET_WIDTH - 1, final_total_max)
        count = sum(1 for t in totals if lower <= t <= upper)
        percentage = round((count / count_all) * 100, 2) if count_all > 0 else 0.0
        buckets.append(
            FrequencyBucket(label=f"{lower}-{upper}", lower=lower, upper=upper, count=count, percentage=percentage)
        )
    return buckets


def build_band_distribution(totals: Sequence[int], final_total_max: int) -> list[BandCount]:
    """Count totals per grade band, every band listed in order."""
    count_all = len(totals)
    counts = Counter(classify_total(t, final_total_max) for t in totals)
    return [
        BandCount(
            band=band,
            count=counts.get(band, 0),
            percentage=round((counts.get(band, 0) / count_all) * 100, 2) if count_all > 0 else 0.0,
        )
        for band in BAND_ORDER
    ]


def analyze_totals(totals: Sequence[int], final_total_max: int) -> StatisticsReport:
    """
    Build the statistics report for a cohort's totals.

    Args:
        totals: Computed totals, one per student
        final_total_max: Maximum total of the grade's scale (60 or 100)

    Returns:
        StatisticsReport

    Raises:
        ValueError: If totals is empty or final_total_max is not positive
    """
    if not totals:
        raise ValueError("Cannot analyze an empty cohort")
    if final_total_max <= 0:
        raise ValueError(f"final_total_max must be positive, got {final_total_max}")

    values = [int(t) for t in totals]
    scores_array = np.array(values, dtype=float)
    count = len(values)
    total_sum = int(scores_array.sum())
    mean = total_sum / count
    std_deviation = calculate_population_std(values)
    modes = calculate_modes(values)

    return StatisticsReport(
        count=count,
        sum=total_sum,
        mean=mean,
        max=max(values),
        min=min(values),
        achievement_percentage=(mean / final_total_max) * 100,
        median=calculate_median(values),
        mode=modes,
        has_mode=bool(modes),
        standard_deviation=std_deviation,
        spread=describe_spread(std_deviation),
        percentiles=calculate_percentiles(values, DEFAULT_PERCENTILES),
        frequency_distribution=build_frequency_distribution(values, final_total_max),
        band_distribution=build_band_distribution(values, final_total_max),
        final_total_max=final_total_max,
    )
