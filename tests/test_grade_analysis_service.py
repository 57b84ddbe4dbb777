import pytest

from app.models import GradeBand, GradeLevel, GradeSetting
from app.schemas.score_config import ScoreConfiguration
from app.schemas.student import StudentRecord
from app.services.grade_analysis_service import GradeAnalysisService


def _records() -> list[StudentRecord]:
    return [
        StudentRecord(
            id=1,
            name="Ali",
            performance_tasks=10,
            participation=10,
            book=10,
            homework=10,
            exam1=30,
            exam2=30,
            attendance={"present": [True, True, False, False], "absent": [False, False, True, False]},
        ),
        StudentRecord(id=2, name="Sara", performance_tasks=8, book=9, homework=7, exam1=20, exam2=18),
        StudentRecord(id=3, name="Omar", exam1=25),
    ]


def test_build_report():
    report = GradeAnalysisService.build_report(_records(), ScoreConfiguration(), GradeLevel.PRIMARY_FIFTH, "math", 1)

    assert report.grade == GradeLevel.PRIMARY_FIFTH
    assert report.final_total_max == 100
    assert [s.total for s in report.students] == [100, 62, 25]
    assert [s.band for s in report.students] == [GradeBand.EXCELLENT, GradeBand.GOOD, GradeBand.WEAK]
    assert report.students[1].task_total == 24
    assert report.students[1].exam_total == 38
    assert report.students[0].attendance_present == 2
    assert report.students[0].attendance_absent == 1

    assert report.statistics.count == 3
    assert report.statistics.sum == 187
    assert report.statistics.max == 100
    assert report.statistics.min == 25
    assert report.statistics.has_mode is False
    assert len(report.band_ranges) == 5
    assert [a.field for a in report.category_averages] == report.included_fields


def test_build_report_on_sixty_scale():
    config = ScoreConfiguration(performance_tasks_max=20, exam1_max=20)
    report = GradeAnalysisService.build_report(_records(), config)

    assert report.final_total_max == 60
    assert report.included_fields == ["performance_tasks", "book", "homework", "exam1"]
    assert report.students[0].total == 50
    assert report.students[0].band == GradeBand.VERY_GOOD
    assert report.band_ranges[0].min == 54
    assert report.statistics.frequency_distribution[-1].label == "60-60"


def test_build_report_accepts_dicts():
    report = GradeAnalysisService.build_report([{"name": "Ali", "exam1": 30, "exam2": 30}], ScoreConfiguration())
    assert report.students[0].total == 60
    assert report.students[0].student_id is None
    assert report.statistics.mode == [60]


def test_empty_cohort_raises():
    with pytest.raises(ValueError):
        GradeAnalysisService.build_report([], ScoreConfiguration())


def test_config_from_setting():
    assert GradeAnalysisService.config_from_setting(None) == ScoreConfiguration()

    setting = GradeSetting(grade=GradeLevel.MIDDLE_SECOND, performance_tasks_max=20, exam1_max=20, exam2_max=0)
    config = GradeAnalysisService.config_from_setting(setting)
    assert config.performance_tasks_max == 20
    assert config.final_total_max == 60
