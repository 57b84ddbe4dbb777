from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from app.models import DEFAULT_SUBJECT, GradeBand, GradeLevel
from app.utils.attendance_utils import normalize_attendance


class ScoreField(str, Enum):
    """Score fields that can be edited or bulk-set."""

    PERFORMANCE_TASKS = "performance_tasks"
    PARTICIPATION = "participation"
    BOOK = "book"
    HOMEWORK = "homework"
    EXAM1 = "exam1"
    EXAM2 = "exam2"


class AttendanceRecord(BaseModel):
    """Four present/absent slots."""

    present: list[bool] = Field(default_factory=lambda: [False] * 4)
    absent: list[bool] = Field(default_factory=lambda: [False] * 4)


def _non_negative(v: object) -> object:
    # Upper bounds depend on the grade configuration and are applied by the service
    if isinstance(v, (int, float)) and v < 0:
        return 0
    return v


class StudentScores(BaseModel):
    """The six raw score fields."""

    performance_tasks: int = 0
    participation: int = 0
    book: int = 0
    homework: int = 0
    exam1: int = 0
    exam2: int = 0

    @field_validator("performance_tasks", "participation", "book", "homework", "exam1", "exam2", mode="before")
    @classmethod
    def _clamp_negative(cls, v: object) -> object:
        return _non_negative(v)


class StudentRecord(StudentScores):
    """One student's performance in a grade/subject/section, as fed to the analysis core."""

    id: int | None = None
    name: str = Field(..., min_length=1, max_length=255)
    grade: GradeLevel | None = None
    subject: str = DEFAULT_SUBJECT
    section_number: int = Field(1, ge=1, le=2)
    attendance: AttendanceRecord = Field(default_factory=AttendanceRecord)

    @field_validator("attendance", mode="before")
    @classmethod
    def _normalize_attendance(cls, v: object) -> object:
        return normalize_attendance(v)

    class Config:
        from_attributes = True


class StudentCreate(BaseModel):
    """Schema for adding students to a cohort from a list of names."""

    names: list[str] = Field(default_factory=list, description="One name per entry")
    names_text: str | None = Field(None, description="Names separated by new lines")
    grade: GradeLevel
    subject: str = Field(DEFAULT_SUBJECT, min_length=1, max_length=255)
    section_number: int = Field(1, ge=1, le=2)


class StudentUpdate(BaseModel):
    """Schema for editing a student. Score fields are clamped to the grade maxima."""

    name: str | None = Field(None, min_length=1, max_length=255)
    performance_tasks: int | None = None
    participation: int | None = None
    book: int | None = None
    homework: int | None = None
    exam1: int | None = None
    exam2: int | None = None
    attendance: AttendanceRecord | None = None

    @field_validator("performance_tasks", "participation", "book", "homework", "exam1", "exam2", mode="before")
    @classmethod
    def _clamp_negative(cls, v: object) -> object:
        return _non_negative(v)


class StudentResponse(StudentScores):
    """Schema for student response, with computed results."""

    id: int
    name: str
    grade: GradeLevel
    subject: str
    section_number: int
    attendance: AttendanceRecord
    task_total: int
    exam_total: int
    total: int
    band: GradeBand
    created_at: datetime
    updated_at: datetime


class AttendanceToggleRequest(BaseModel):
    """Toggle one attendance slot."""

    slot: int = Field(..., ge=0, le=3)
    status: str = Field(..., pattern="^(present|absent)$")


class BulkScoreRequest(BaseModel):
    """Set one score field for every student in a cohort."""

    grade: GradeLevel
    subject: str = DEFAULT_SUBJECT
    section_number: int = Field(1, ge=1, le=2)
    field: ScoreField
    value: int = Field(..., ge=0)


class BulkAttendanceRequest(BaseModel):
    """Mark every student in a cohort present, or clear the cohort's attendance."""

    grade: GradeLevel
    subject: str = DEFAULT_SUBJECT
    section_number: int = Field(1, ge=1, le=2)
    action: str = Field("present", pattern="^(present|reset)$")


class DuplicateRequest(BaseModel):
    """Copy a cohort to another grade, subject or section."""

    grade: GradeLevel
    subject: str = DEFAULT_SUBJECT
    section_number: int = Field(1, ge=1, le=2)
    target_grade: GradeLevel
    target_subject: str = Field(DEFAULT_SUBJECT, min_length=1, max_length=255)
    target_section_number: int = Field(1, ge=1, le=2)
    include_scores: bool = False


class TransferRequest(BaseModel):
    """Move a student to another grade, optionally another subject."""

    target_grade: GradeLevel
    target_subject: str | None = Field(None, min_length=1, max_length=255)


class BulkDeleteRequest(BaseModel):
    student_ids: list[int] = Field(..., min_length=1)


class BulkDeleteResponse(BaseModel):
    deleted: int


class GradeSectionResponse(BaseModel):
    """A grade/subject/section cohort key and its size."""

    grade: GradeLevel
    subject: str
    section_number: int
    student_count: int


class StudentBulkUploadError(BaseModel):
    """Schema for bulk upload error details."""

    row_number: int
    error_message: str
    field: str | None = None


class StudentBulkUploadResponse(BaseModel):
    """Schema for bulk upload response."""

    total_rows: int
    successful: int
    failed: int
    errors: list[StudentBulkUploadError]
