"""Schemas for cohort grade analysis."""

from pydantic import BaseModel, Field

from app.models import GradeBand, GradeLevel
from app.schemas.score_config import ScoreConfiguration
from app.schemas.student import StudentRecord


class FrequencyBucket(BaseModel):
    """A 10-point range of totals."""

    label: str = Field(..., description='Range label, e.g. "60-69"')
    lower: int = Field(..., description="Inclusive lower bound")
    upper: int = Field(..., description="Inclusive upper bound")
    count: int
    percentage: float


class BandCount(BaseModel):
    """Number of students in a grade band."""

    band: GradeBand
    count: int
    percentage: float


class StatisticsReport(BaseModel):
    """Descriptive statistics for a cohort's totals."""

    count: int
    sum: int
    mean: float
    max: int
    min: int
    achievement_percentage: float = Field(..., description="mean / final_total_max * 100")
    median: float
    mode: list[int] = Field(default_factory=list, description="Most frequent totals; empty when no value repeats")
    has_mode: bool
    standard_deviation: float = Field(..., description="Population standard deviation")
    spread: str = Field(..., description="close, moderate or wide, from the standard deviation")
    percentiles: dict[str, float]
    frequency_distribution: list[FrequencyBucket]
    band_distribution: list[BandCount]
    final_total_max: int


class BandRange(BaseModel):
    """One row of the band table for a scale."""

    band: GradeBand
    min: int
    max: int
    description: str


class StudentResult(BaseModel):
    """Computed results for one student."""

    student_id: int | None = None
    name: str
    task_total: int
    exam_total: int
    total: int
    band: GradeBand
    attendance_present: int
    attendance_absent: int


class CategoryAverage(BaseModel):
    """Average of one score field across the cohort."""

    field: str
    average: float
    max: int


class CohortReport(BaseModel):
    """Full analysis of one grade/subject/section cohort."""

    grade: GradeLevel | None = None
    subject: str | None = None
    section_number: int | None = None
    final_total_max: int
    included_fields: list[str]
    students: list[StudentResult]
    statistics: StatisticsReport
    band_ranges: list[BandRange]
    category_averages: list[CategoryAverage]


class AnalysisPreviewRequest(BaseModel):
    """Analyze records without storing them."""

    records: list[StudentRecord] = Field(..., min_length=1)
    config: ScoreConfiguration = Field(default_factory=ScoreConfiguration)
