import pytest
from pydantic import ValidationError

from app.models import GradeBand
from app.schemas.score_config import ScoreConfiguration
from app.utils.score_utils import (
    band_ranges,
    clamp_score,
    classify_total,
    compute_exam_total,
    compute_task_total,
    compute_total,
    field_max,
    included_score_fields,
    record_value,
)

FULL_MARKS = {
    "performance_tasks": 20,
    "participation": 10,
    "book": 10,
    "homework": 10,
    "exam1": 30,
    "exam2": 30,
}


def test_clamp_score():
    assert clamp_score(15, 10) == 10
    assert clamp_score(-3, 10) == 0
    assert clamp_score("7.9", 10) == 7
    assert clamp_score("abc", 10) == 0
    assert clamp_score(None, 10) == 0
    assert clamp_score("", 10) == 0
    assert clamp_score(float("inf"), 10) == 10
    assert clamp_score(float("-inf"), 10) == 0
    assert clamp_score(float("nan"), 10) == 0


def test_clamp_score_handles_values_of_any_size():
    assert clamp_score(10**400, 30) == 30
    assert clamp_score(-(10**400), 30) == 0
    assert clamp_score(str(10**400), 30) == 30
    assert clamp_score(True, 10) == 1


def test_compute_total_with_huge_exam_score():
    config = ScoreConfiguration()
    record = {"exam1": 10**400, "exam2": float("inf")}
    assert compute_exam_total(record, config) == 60
    assert compute_total(record, config) == 60


def test_record_value_reads_dicts_and_objects():
    config = ScoreConfiguration()
    assert record_value({"exam1": 12}, "exam1") == 12
    assert record_value({}, "exam1", 0) == 0
    assert record_value(config, "exam1_max") == 30
    assert record_value(config, "missing", "x") == "x"


def test_clamp_score_is_idempotent():
    for value in (-5, 0, 4, 10, 25):
        once = clamp_score(value, 10)
        assert clamp_score(once, 10) == once


def test_field_max():
    config = ScoreConfiguration(performance_tasks_max=20, exam1_max=20, exam2_max=0)
    assert field_max("performance_tasks", config) == 20
    assert field_max("exam1", config) == 20
    assert field_max("exam2", config) == 0
    assert field_max("homework", config) == 10
    with pytest.raises(ValueError):
        field_max("attendance", config)


def test_default_configuration():
    config = ScoreConfiguration()
    assert config.final_total_max == 100
    assert included_score_fields(config) == ["performance_tasks", "participation", "book", "homework", "exam1", "exam2"]
    assert compute_total(FULL_MARKS, config) == 100


def test_twenty_point_tasks_drop_participation():
    config = ScoreConfiguration(performance_tasks_max=20)
    assert "participation" not in included_score_fields(config)
    assert compute_task_total(FULL_MARKS, config) == 40
    assert compute_total(FULL_MARKS, config) == 100
    assert compute_total({**FULL_MARKS, "participation": 0}, config) == 100


def test_twenty_point_exam_switches_to_sixty_scale():
    config = ScoreConfiguration(performance_tasks_max=10, exam1_max=20)
    assert config.final_total_max == 60
    assert "exam2" not in included_score_fields(config)
    assert compute_exam_total(FULL_MARKS, config) == 20
    assert compute_total(FULL_MARKS, config) == 60

    config = ScoreConfiguration(performance_tasks_max=20, exam1_max=20)
    assert compute_total(FULL_MARKS, config) == 60


def test_zero_point_exam_keeps_hundred_scale():
    config = ScoreConfiguration(exam1_max=0, exam2_max=30)
    assert config.final_total_max == 100
    assert compute_exam_total(FULL_MARKS, config) == 30


def test_compute_total_clamps_out_of_range_fields():
    config = ScoreConfiguration()
    record = {"performance_tasks": 50, "participation": -4, "book": "x", "homework": 10, "exam1": 31, "exam2": 0}
    assert compute_total(record, config) == 10 + 0 + 0 + 10 + 30


def test_compute_total_reads_attributes():
    class Row:
        performance_tasks = 8
        participation = 9
        book = 10
        homework = 7
        exam1 = 25
        exam2 = 22

    assert compute_total(Row(), ScoreConfiguration()) == 81


def test_invalid_configuration():
    with pytest.raises(ValidationError):
        ScoreConfiguration(performance_tasks_max=15)
    with pytest.raises(ValidationError):
        ScoreConfiguration(exam1_max=25)
    with pytest.raises(ValidationError):
        ScoreConfiguration(exam2_max=10)


@pytest.mark.parametrize(
    "total, band",
    [
        (100, GradeBand.EXCELLENT),
        (90, GradeBand.EXCELLENT),
        (89, GradeBand.VERY_GOOD),
        (80, GradeBand.VERY_GOOD),
        (79, GradeBand.GOOD),
        (60, GradeBand.GOOD),
        (59, GradeBand.ACCEPTABLE),
        (50, GradeBand.ACCEPTABLE),
        (49, GradeBand.WEAK),
        (0, GradeBand.WEAK),
    ],
)
def test_classify_total_hundred_scale(total, band):
    assert classify_total(total, 100) == band


@pytest.mark.parametrize(
    "total, band",
    [
        (60, GradeBand.EXCELLENT),
        (54, GradeBand.EXCELLENT),
        (53, GradeBand.VERY_GOOD),
        (48, GradeBand.VERY_GOOD),
        (47, GradeBand.GOOD),
        (36, GradeBand.GOOD),
        (35, GradeBand.ACCEPTABLE),
        (30, GradeBand.ACCEPTABLE),
        (29, GradeBand.WEAK),
    ],
)
def test_classify_total_sixty_scale(total, band):
    assert classify_total(total, 60) == band


def test_band_ranges_hundred_scale():
    ranges = band_ranges(100)
    assert [(r["band"], r["min"], r["max"]) for r in ranges] == [
        (GradeBand.EXCELLENT, 90, 100),
        (GradeBand.VERY_GOOD, 80, 89),
        (GradeBand.GOOD, 60, 79),
        (GradeBand.ACCEPTABLE, 50, 59),
        (GradeBand.WEAK, 0, 49),
    ]


@pytest.mark.parametrize("final_total_max", [60, 100])
def test_band_ranges_partition_the_scale(final_total_max):
    ranges = band_ranges(final_total_max)
    for total in range(final_total_max + 1):
        matching = [r for r in ranges if r["min"] <= total <= r["max"]]
        assert len(matching) == 1
        assert matching[0]["band"] == classify_total(total, final_total_max)
