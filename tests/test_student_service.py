import pytest

from app.models import DEFAULT_SUBJECT, EducationStage, GradeLevel
from app.schemas.score_config import ScoreConfiguration
from app.schemas.student import StudentRecord
from app.services.student_service import (
    apply_score_update,
    category_averages,
    duplicate_records,
    grade_sections,
    grades_for_stage,
    new_student_values,
    parse_names,
    set_all,
    transfer_values,
)
from app.utils.attendance_utils import empty_attendance, mark_all_present


def test_parse_names():
    assert parse_names("Ali\n\n  Sara  \n") == ["Ali", "Sara"]
    assert parse_names("") == []
    assert parse_names(None) == []


def test_new_student_values():
    values = new_student_values(["Ali", "  "], GradeLevel.PRIMARY_FIRST)
    assert len(values) == 1
    row = values[0]
    assert row["name"] == "Ali"
    assert row["subject"] == DEFAULT_SUBJECT
    assert row["section_number"] == 1
    assert row["attendance"] == empty_attendance()
    assert row["exam1"] == 0 and row["performance_tasks"] == 0


def test_apply_score_update_clamps_to_grade_maxima():
    config = ScoreConfiguration(exam1_max=20)
    updates = apply_score_update({"exam1": 45, "book": None, "homework": -2, "name": "Sara"}, config)
    assert updates == {"exam1": 20, "homework": 0, "name": "Sara"}


def test_apply_score_update_pins_huge_scores_to_the_maximum():
    config = ScoreConfiguration()
    assert apply_score_update({"exam1": 10**400}, config) == {"exam1": 30}
    assert apply_score_update({"exam2": float("inf"), "book": float("-inf")}, config) == {"exam2": 30, "book": 0}


def test_apply_score_update_normalizes_attendance():
    updates = apply_score_update({"attendance": {"present": [True]}}, ScoreConfiguration())
    assert updates["attendance"]["present"] == [True, False, False, False]


def test_set_all():
    records = [{"id": 1}, {"id": 2}]
    assert set_all(records, "homework", 15, ScoreConfiguration()) == {1: {"homework": 10}, 2: {"homework": 10}}
    with pytest.raises(ValueError):
        set_all(records, "attendance", 1, ScoreConfiguration())


def test_duplicate_without_scores():
    source = [{"id": 7, "name": "Ali", "exam1": 25, "attendance": mark_all_present()}]
    copies = duplicate_records(source, GradeLevel.MIDDLE_FIRST, "science", 2)
    assert copies == new_student_values(["Ali"], GradeLevel.MIDDLE_FIRST, "science", 2)
    assert "id" not in copies[0]


def test_duplicate_with_scores():
    source = [StudentRecord(id=7, name="Ali", exam1=25, attendance=mark_all_present())]
    copies = duplicate_records(source, GradeLevel.MIDDLE_FIRST, include_scores=True)
    assert copies[0]["exam1"] == 25
    assert copies[0]["grade"] == GradeLevel.MIDDLE_FIRST
    assert copies[0]["attendance"] == mark_all_present()
    assert "id" not in copies[0]


def test_transfer_values():
    assert transfer_values(GradeLevel.SECONDARY_FIRST) == {"grade": GradeLevel.SECONDARY_FIRST}
    assert transfer_values(GradeLevel.SECONDARY_FIRST, "math") == {
        "grade": GradeLevel.SECONDARY_FIRST,
        "subject": "math",
    }


def test_category_averages_follow_included_fields():
    config = ScoreConfiguration(performance_tasks_max=20, exam1_max=20)
    records = [
        {"performance_tasks": 20, "participation": 10, "book": 10, "homework": 8, "exam1": 20},
        {"performance_tasks": 10, "participation": 10, "book": 5, "homework": 4, "exam1": 25},
    ]
    averages = {a.field: (a.average, a.max) for a in category_averages(records, config)}
    assert averages == {
        "performance_tasks": (15.0, 20),
        "book": (7.5, 10),
        "homework": (6.0, 10),
        "exam1": (20.0, 20),
    }
    assert category_averages([], config) == []


def test_grade_sections_are_ordered_by_stage_then_section():
    records = [
        {"grade": GradeLevel.MIDDLE_FIRST, "subject": "math", "section_number": 1},
        {"grade": GradeLevel.PRIMARY_FIRST, "subject": "math", "section_number": 2},
        {"grade": GradeLevel.PRIMARY_FIRST, "subject": "math", "section_number": 1},
        {"grade": GradeLevel.PRIMARY_FIRST, "subject": "math", "section_number": 1},
    ]
    sections = grade_sections(records)
    assert [(s["grade"], s["section_number"], s["student_count"]) for s in sections] == [
        (GradeLevel.PRIMARY_FIRST, 1, 2),
        (GradeLevel.PRIMARY_FIRST, 2, 1),
        (GradeLevel.MIDDLE_FIRST, 1, 1),
    ]


def test_grades_for_stage():
    assert grades_for_stage(EducationStage.MIDDLE) == [
        GradeLevel.MIDDLE_FIRST,
        GradeLevel.MIDDLE_SECOND,
        GradeLevel.MIDDLE_THIRD,
    ]
    assert len(grades_for_stage(EducationStage.PRIMARY)) == 6
