import logging

from fastapi import APIRouter, status
from sqlalchemy import select

from app.dependencies.database import DBSessionDep
from app.models import GradeLevel, GradeSetting
from app.schemas.score_config import GradeSettingResponse, ScoreConfiguration
from app.services.grade_analysis_service import GradeAnalysisService
from app.utils.score_utils import included_score_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/grade-settings", tags=["grade-settings"])


def _to_response(grade: GradeLevel, setting: GradeSetting | None) -> GradeSettingResponse:
    config = GradeAnalysisService.config_from_setting(setting)
    return GradeSettingResponse(
        grade=grade,
        performance_tasks_max=config.performance_tasks_max,
        exam1_max=config.exam1_max,
        exam2_max=config.exam2_max,
        final_total_max=config.final_total_max,
        included_fields=included_score_fields(config),
        updated_at=setting.updated_at if setting else None,
    )


@router.get("", response_model=list[GradeSettingResponse])
async def list_grade_settings(session: DBSessionDep) -> list[GradeSettingResponse]:
    """List the score configuration of every grade, defaults included."""
    result = await session.execute(select(GradeSetting))
    stored = {setting.grade: setting for setting in result.scalars().all()}
    return [_to_response(grade, stored.get(grade)) for grade in GradeLevel]


@router.get("/{grade}", response_model=GradeSettingResponse)
async def get_grade_setting(grade: GradeLevel, session: DBSessionDep) -> GradeSettingResponse:
    """Get the score configuration of a grade."""
    stmt = select(GradeSetting).where(GradeSetting.grade == grade)
    result = await session.execute(stmt)
    return _to_response(grade, result.scalar_one_or_none())


@router.put("/{grade}", response_model=GradeSettingResponse, status_code=status.HTTP_200_OK)
async def update_grade_setting(
    grade: GradeLevel, config: ScoreConfiguration, session: DBSessionDep
) -> GradeSettingResponse:
    """Create or replace the score configuration of a grade."""
    stmt = select(GradeSetting).where(GradeSetting.grade == grade)
    result = await session.execute(stmt)
    setting = result.scalar_one_or_none()
    if setting is None:
        setting = GradeSetting(grade=grade)
        session.add(setting)

    setting.performance_tasks_max = config.performance_tasks_max
    setting.exam1_max = config.exam1_max
    setting.exam2_max = config.exam2_max

    await session.commit()
    await session.refresh(setting)
    logger.info(f"Updated score configuration for {grade.value}: final total out of {config.final_total_max}")
    return _to_response(grade, setting)
