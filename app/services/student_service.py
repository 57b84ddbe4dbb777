"""Batch operations over student records.

Every function here is pure: it reads records (ORM rows, schemas or dicts)
and returns new column values. Persisting them is the caller's job.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from app.models import DEFAULT_SUBJECT, EducationStage, GradeLevel
from app.schemas.analysis import CategoryAverage
from app.schemas.score_config import ScoreConfiguration
from app.utils.attendance_utils import empty_attendance, normalize_attendance
from app.utils.score_utils import SCORE_FIELDS, clamp_score, field_max, included_score_fields, record_value

logger = logging.getLogger(__name__)

GRADE_ORDER = list(GradeLevel)


def parse_names(text: str | None) -> list[str]:
    """Split a names text box into names, one per line, dropping blank lines."""
    if not text:
        return []
    return [name.strip() for name in text.splitlines() if name.strip()]


def new_student_values(
    names: Iterable[str], grade: GradeLevel, subject: str = DEFAULT_SUBJECT, section_number: int = 1
) -> list[dict[str, Any]]:
    """Build column values for new students: zero scores, empty attendance."""
    values = []
    for name in names:
        name = name.strip()
        if not name:
            continue
        row: dict[str, Any] = {
            "name": name,
            "grade": grade,
            "subject": subject or DEFAULT_SUBJECT,
            "section_number": section_number,
            "attendance": empty_attendance(),
        }
        row.update({field: 0 for field in SCORE_FIELDS})
        values.append(row)
    return values


def apply_score_update(updates: dict[str, Any], config: ScoreConfiguration) -> dict[str, Any]:
    """
    Clamp the score fields of a partial update to the grade maxima.

    Non-score keys pass through unchanged; None values are dropped.
    """
    clamped: dict[str, Any] = {}
    for key, value in updates.items():
        if value is None:
            continue
        if key in SCORE_FIELDS:
            clamped[key] = clamp_score(value, field_max(key, config))
        elif key == "attendance":
            clamped[key] = normalize_attendance(value)
        else:
            clamped[key] = value
    return clamped


def set_all(records: Sequence[Any], field: str, value: int, config: ScoreConfiguration) -> dict[Any, dict[str, int]]:
    """
    Set one score field to the same value for every record.

    Returns {record id: {field: clamped value}}.
    """
    if field not in SCORE_FIELDS:
        raise ValueError(f"Unknown score field: {field}")
    clamped = clamp_score(value, field_max(field, config))
    if clamped != value:
        logger.info(f"Bulk value {value} for {field} clamped to {clamped}")
    return {record_value(record, "id"): {field: clamped} for record in records}


def duplicate_records(
    records: Sequence[Any],
    target_grade: GradeLevel,
    target_subject: str = DEFAULT_SUBJECT,
    target_section_number: int = 1,
    include_scores: bool = False,
) -> list[dict[str, Any]]:
    """
    Build column values for copies of records in another grade/subject/section.

    Copies always get new ids. Without include_scores they start from zero
    scores and empty attendance, as if added by name.
    """
    if include_scores:
        copies = []
        for record in records:
            row: dict[str, Any] = {
                "name": record_value(record, "name"),
                "grade": target_grade,
                "subject": target_subject or DEFAULT_SUBJECT,
                "section_number": target_section_number,
                "attendance": normalize_attendance(record_value(record, "attendance")),
            }
            row.update({field: int(record_value(record, field, 0) or 0) for field in SCORE_FIELDS})
            copies.append(row)
        return copies
    return new_student_values(
        (record_value(record, "name") for record in records), target_grade, target_subject, target_section_number
    )


def transfer_values(target_grade: GradeLevel, target_subject: str | None = None) -> dict[str, Any]:
    """Column values for moving a record to another grade; the id is kept."""
    values: dict[str, Any] = {"grade": target_grade}
    if target_subject:
        values["subject"] = target_subject
    return values


def category_averages(records: Sequence[Any], config: ScoreConfiguration) -> list[CategoryAverage]:
    """Average of each field that counts towards the total."""
    if not records:
        return []
    averages = []
    for field in included_score_fields(config):
        field_total = sum(clamp_score(record_value(record, field, 0), field_max(field, config)) for record in records)
        averages.append(
            CategoryAverage(field=field, average=round(field_total / len(records), 2), max=field_max(field, config))
        )
    return averages


def section_sort_key(grade: GradeLevel, section_number: int, subject: str = "") -> tuple[int, int, str]:
    return (GRADE_ORDER.index(grade), section_number, subject)


def grade_sections(records: Iterable[Any]) -> list[dict[str, Any]]:
    """
    Distinct (grade, subject, section_number) keys with student counts.

    Ordered by grade (stage order), then section number, then subject.
    """
    counts: dict[tuple[GradeLevel, str, int], int] = {}
    for record in records:
        key = (record_value(record, "grade"), record_value(record, "subject") or DEFAULT_SUBJECT, record_value(record, "section_number") or 1)
        counts[key] = counts.get(key, 0) + 1
    ordered = sorted(counts, key=lambda k: section_sort_key(k[0], k[2], k[1]))
    return [
        {"grade": grade, "subject": subject, "section_number": section_number, "student_count": counts[(grade, subject, section_number)]}
        for grade, subject, section_number in ordered
    ]


def grades_for_stage(stage: EducationStage) -> list[GradeLevel]:
    return [grade for grade in GRADE_ORDER if grade.stage == stage]
