from fastapi import APIRouter, HTTPException, Query, status

from app.dependencies.database import DBSessionDep
from app.models import DEFAULT_SUBJECT, GradeLevel
from app.schemas.analysis import AnalysisPreviewRequest, BandRange, CohortReport
from app.services.grade_analysis_service import GradeAnalysisService
from app.utils.score_utils import band_ranges

router = APIRouter(prefix="/api/v1/analysis", tags=["analysis"])


@router.get("/cohort", response_model=CohortReport)
async def get_cohort_report(
    session: DBSessionDep,
    grade: GradeLevel = Query(...),
    subject: str = Query(DEFAULT_SUBJECT),
    section_number: int = Query(1, ge=1, le=2),
) -> CohortReport:
    """Get totals, grade bands and statistics for one grade/subject/section."""
    students = await GradeAnalysisService.get_cohort(session, grade, subject, section_number)
    config = await GradeAnalysisService.get_config(session, grade)
    try:
        return GradeAnalysisService.build_report(students, config, grade, subject, section_number)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No students found")


@router.post("/preview", response_model=CohortReport)
def preview_report(request: AnalysisPreviewRequest) -> CohortReport:
    """Analyze records sent in the request body without storing anything."""
    try:
        return GradeAnalysisService.build_report(request.records, request.config)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/band-ranges", response_model=list[BandRange])
def get_band_ranges(final_total_max: int = Query(100)) -> list[BandRange]:
    """Get the grade band table for the 100-point or 60-point scale."""
    if final_total_max not in (60, 100):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="final_total_max must be 60 or 100")
    return [BandRange(**row) for row in band_ranges(final_total_max)]
