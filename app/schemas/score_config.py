"""Schemas for per-grade score configuration."""

from datetime import datetime

from pydantic import BaseModel, Field, computed_field, field_validator

from app.models import GradeLevel

PERFORMANCE_TASKS_MAX_OPTIONS = (10, 20)
EXAM_MAX_OPTIONS = (0, 20, 30)


class ScoreConfiguration(BaseModel):
    """
    Configurable maxima for one grade.

    performance_tasks_max and exam1_max are structural switches: 20 performance
    task points drop participation from the total, and a 20-point first exam
    drops the second exam and moves the grade onto the 60-point scale.
    """

    performance_tasks_max: int = Field(10, description="10 or 20")
    exam1_max: int = Field(30, description="0, 20 or 30")
    exam2_max: int = Field(30, description="0, 20 or 30")

    @field_validator("performance_tasks_max")
    @classmethod
    def _check_tasks_max(cls, v: int) -> int:
        if v not in PERFORMANCE_TASKS_MAX_OPTIONS:
            raise ValueError(f"performance_tasks_max must be one of {PERFORMANCE_TASKS_MAX_OPTIONS}, got {v}")
        return v

    @field_validator("exam1_max", "exam2_max")
    @classmethod
    def _check_exam_max(cls, v: int) -> int:
        if v not in EXAM_MAX_OPTIONS:
            raise ValueError(f"exam maximum must be one of {EXAM_MAX_OPTIONS}, got {v}")
        return v

    @computed_field  # type: ignore[misc]
    @property
    def final_total_max(self) -> int:
        return 60 if self.exam1_max == 20 else 100

    @property
    def includes_participation(self) -> bool:
        return self.performance_tasks_max == 10

    @property
    def includes_exam2(self) -> bool:
        return self.exam1_max != 20

    class Config:
        frozen = True
        from_attributes = True


class GradeSettingResponse(BaseModel):
    """Schema for grade setting response."""

    grade: GradeLevel
    performance_tasks_max: int
    exam1_max: int
    exam2_max: int
    final_total_max: int
    included_fields: list[str]
    updated_at: datetime | None = None
