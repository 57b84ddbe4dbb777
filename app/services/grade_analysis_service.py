"""Service for computing cohort results and statistics."""

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import DEFAULT_SUBJECT, GradeLevel, GradeSetting, Student
from app.schemas.analysis import BandRange, CohortReport, StudentResult
from app.schemas.score_config import ScoreConfiguration
from app.services.student_service import category_averages
from app.utils.attendance_utils import attendance_tally
from app.utils.score_utils import (
    band_ranges,
    classify_total,
    compute_exam_total,
    compute_task_total,
    compute_total,
    included_score_fields,
    record_value,
)
from app.utils.statistics_utils import analyze_totals

logger = logging.getLogger(__name__)


class GradeAnalysisService:
    """Service for turning a cohort's raw scores into totals, bands and statistics."""

    @staticmethod
    def config_from_setting(setting: GradeSetting | None) -> ScoreConfiguration:
        """Build the configuration for a grade; grades without a stored setting use the defaults."""
        if setting is None:
            return ScoreConfiguration()
        return ScoreConfiguration(
            performance_tasks_max=setting.performance_tasks_max,
            exam1_max=setting.exam1_max,
            exam2_max=setting.exam2_max,
        )

    @staticmethod
    async def get_config(session: AsyncSession, grade: GradeLevel) -> ScoreConfiguration:
        stmt = select(GradeSetting).where(GradeSetting.grade == grade)
        result = await session.execute(stmt)
        return GradeAnalysisService.config_from_setting(result.scalar_one_or_none())

    @staticmethod
    async def get_cohort(
        session: AsyncSession, grade: GradeLevel, subject: str = DEFAULT_SUBJECT, section_number: int = 1
    ) -> list[Student]:
        stmt = (
            select(Student)
            .where(Student.grade == grade, Student.subject == subject, Student.section_number == section_number)
            .order_by(Student.id)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    def student_result(record: Any, config: ScoreConfiguration) -> StudentResult:
        total = compute_total(record, config)
        tally = attendance_tally(record_value(record, "attendance"))
        return StudentResult(
            student_id=record_value(record, "id"),
            name=record_value(record, "name", ""),
            task_total=compute_task_total(record, config),
            exam_total=compute_exam_total(record, config),
            total=total,
            band=classify_total(total, config.final_total_max),
            attendance_present=tally["present"],
            attendance_absent=tally["absent"],
        )

    @staticmethod
    def build_report(
        records: Sequence[Any],
        config: ScoreConfiguration,
        grade: GradeLevel | None = None,
        subject: str | None = None,
        section_number: int | None = None,
    ) -> CohortReport:
        """
        Build the full analysis of one cohort.

        Args:
            records: ORM students, StudentRecord schemas or dicts with the six score fields
            config: The grade's ScoreConfiguration
            grade, subject, section_number: Cohort key echoed back in the report

        Returns:
            CohortReport

        Raises:
            ValueError: If the cohort has no students
        """
        if not records:
            raise ValueError("No students in this cohort")

        students = [GradeAnalysisService.student_result(record, config) for record in records]
        statistics = analyze_totals([s.total for s in students], config.final_total_max)

        logger.info(
            f"Analyzed {statistics.count} students for {grade.value if grade else 'preview'} "
            f"(scale {config.final_total_max}, mean {statistics.mean:.2f})"
        )

        return CohortReport(
            grade=grade,
            subject=subject,
            section_number=section_number,
            final_total_max=config.final_total_max,
            included_fields=included_score_fields(config),
            students=students,
            statistics=statistics,
            band_ranges=[BandRange(**row) for row in band_ranges(config.final_total_max)],
            category_averages=category_averages(records, config),
        )
