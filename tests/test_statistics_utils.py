import math

import pytest

from app.models import GradeBand
from app.utils.statistics_utils import (
    analyze_totals,
    build_frequency_distribution,
    calculate_median,
    calculate_modes,
    calculate_percentiles,
    calculate_population_std,
    describe_spread,
)


def test_single_student():
    report = analyze_totals([75], 100)
    assert report.count == 1
    assert report.sum == 75
    assert report.mean == 75.0
    assert report.median == 75.0
    assert report.mode == [75]
    assert report.has_mode is True
    assert report.standard_deviation == 0.0
    assert report.spread == "close"
    assert report.achievement_percentage == 75.0
    assert report.max == 75 and report.min == 75

    bucket = next(b for b in report.frequency_distribution if b.count)
    assert bucket.label == "70-79"
    assert bucket.percentage == 100.0


def test_evenly_spread_cohort():
    report = analyze_totals([60, 70, 80, 90, 100], 100)
    assert report.mean == 80.0
    assert report.median == 80.0
    assert report.mode == []
    assert report.has_mode is False
    assert math.isclose(report.standard_deviation, math.sqrt(200), rel_tol=1e-9)
    assert report.spread == "moderate"

    counts = {b.label: b.count for b in report.frequency_distribution}
    for label in ("60-69", "70-79", "80-89", "90-99", "100-100"):
        assert counts[label] == 1
    assert sum(counts.values()) == 5
    assert all(b.percentage == 20.0 for b in report.frequency_distribution if b.count)

    bands = {b.band: b.count for b in report.band_distribution}
    assert bands == {
        GradeBand.EXCELLENT: 2,
        GradeBand.VERY_GOOD: 1,
        GradeBand.GOOD: 2,
        GradeBand.ACCEPTABLE: 0,
        GradeBand.WEAK: 0,
    }


def test_modes():
    assert calculate_modes([50, 50, 60, 70]) == [50]
    assert calculate_modes([50, 60, 70, 80]) == []
    assert calculate_modes([60, 50, 60, 50]) == [50, 60]
    assert calculate_modes([42]) == [42]


def test_median():
    assert calculate_median([50, 50, 60, 70]) == 55.0
    assert calculate_median([3, 1, 2]) == 2.0


def test_population_std():
    assert calculate_population_std([10, 10, 10]) == 0.0
    assert calculate_population_std([0, 10]) == 5.0


def test_describe_spread():
    assert describe_spread(9.99) == "close"
    assert describe_spread(10) == "moderate"
    assert describe_spread(19.99) == "moderate"
    assert describe_spread(20) == "wide"


def test_percentiles():
    result = calculate_percentiles([10, 20, 30, 40, 50], [25, 50, 75])
    assert result == {"25th": 20.0, "50th": 30.0, "75th": 40.0}


def test_frequency_buckets_hundred_scale():
    buckets = build_frequency_distribution([100, 0, 9, 10], 100)
    assert len(buckets) == 11
    assert (buckets[0].lower, buckets[0].upper, buckets[0].count) == (0, 9, 2)
    assert (buckets[1].lower, buckets[1].upper, buckets[1].count) == (10, 19, 1)
    assert (buckets[-1].label, buckets[-1].count) == ("100-100", 1)


def test_frequency_buckets_sixty_scale():
    buckets = build_frequency_distribution([60, 55], 60)
    assert [b.label for b in buckets] == ["0-9", "10-19", "20-29", "30-39", "40-49", "50-59", "60-60"]
    assert buckets[-1].count == 1
    assert buckets[-2].count == 1


def test_frequency_buckets_cover_uneven_maximum():
    buckets = build_frequency_distribution([65, 61], 65)
    assert buckets[-1].label == "60-65"
    assert buckets[-1].count == 2


def test_every_total_lands_in_one_bucket():
    totals = list(range(0, 101))
    buckets = build_frequency_distribution(totals, 100)
    assert sum(b.count for b in buckets) == len(totals)


def test_sixty_scale_report():
    report = analyze_totals([54, 30], 60)
    assert report.final_total_max == 60
    assert report.achievement_percentage == pytest.approx(70.0)
    bands = {b.band: b.count for b in report.band_distribution}
    assert bands[GradeBand.EXCELLENT] == 1
    assert bands[GradeBand.ACCEPTABLE] == 1


def test_empty_cohort_raises():
    with pytest.raises(ValueError):
        analyze_totals([], 100)
    with pytest.raises(ValueError):
        calculate_median([])
    with pytest.raises(ValueError):
        calculate_modes([])


def test_non_positive_maximum_raises():
    with pytest.raises(ValueError):
        analyze_totals([10], 0)
