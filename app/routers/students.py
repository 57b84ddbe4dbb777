import logging

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy import delete, select

from app.config import settings
from app.dependencies.database import DBSessionDep
from app.models import DEFAULT_SUBJECT, EducationStage, GradeLevel, Student
from app.schemas.score_config import ScoreConfiguration
from app.schemas.student import (
    AttendanceToggleRequest,
    BulkAttendanceRequest,
    BulkDeleteRequest,
    BulkDeleteResponse,
    BulkScoreRequest,
    DuplicateRequest,
    GradeSectionResponse,
    StudentBulkUploadError,
    StudentBulkUploadResponse,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
    TransferRequest,
)
from app.services.grade_analysis_service import GradeAnalysisService
from app.services.roster_upload import (
    RosterUploadParseError,
    RosterUploadValidationError,
    parse_roster_row,
    parse_upload_file,
    validate_required_columns,
)
from app.services.student_service import (
    apply_score_update,
    duplicate_records,
    grade_sections,
    grades_for_stage,
    new_student_values,
    parse_names,
    set_all,
    transfer_values,
)
from app.utils.attendance_utils import mark_all_present, normalize_attendance, reset_attendance, toggle_absent, toggle_present
from app.utils.score_utils import SCORE_FIELDS, classify_total, compute_exam_total, compute_task_total, compute_total

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/students", tags=["students"])


def student_to_response(student: Student, config: ScoreConfiguration) -> StudentResponse:
    total = compute_total(student, config)
    return StudentResponse(
        id=student.id,
        name=student.name,
        grade=student.grade,
        subject=student.subject,
        section_number=student.section_number,
        attendance=normalize_attendance(student.attendance),
        task_total=compute_task_total(student, config),
        exam_total=compute_exam_total(student, config),
        total=total,
        band=classify_total(total, config.final_total_max),
        created_at=student.created_at,
        updated_at=student.updated_at,
        **{field: getattr(student, field) or 0 for field in SCORE_FIELDS},
    )


async def _get_student(session: DBSessionDep, student_id: int) -> Student:
    stmt = select(Student).where(Student.id == student_id)
    result = await session.execute(stmt)
    student = result.scalar_one_or_none()
    if not student:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return student


@router.get("", response_model=list[StudentResponse])
async def list_students(
    session: DBSessionDep,
    grade: GradeLevel = Query(...),
    subject: str = Query(DEFAULT_SUBJECT),
    section_number: int = Query(1, ge=1, le=2),
) -> list[StudentResponse]:
    """List the students of one grade/subject/section, with computed totals."""
    students = await GradeAnalysisService.get_cohort(session, grade, subject, section_number)
    config = await GradeAnalysisService.get_config(session, grade)
    return [student_to_response(student, config) for student in students]


@router.get("/sections", response_model=list[GradeSectionResponse])
async def list_sections(session: DBSessionDep, stage: EducationStage | None = Query(None)) -> list[GradeSectionResponse]:
    """List grade/subject/section cohorts that have students, optionally for one stage."""
    stmt = select(Student.grade, Student.subject, Student.section_number)
    if stage is not None:
        stmt = stmt.where(Student.grade.in_(grades_for_stage(stage)))
    result = await session.execute(stmt)
    rows = [{"grade": row[0], "subject": row[1], "section_number": row[2]} for row in result.all()]
    return [GradeSectionResponse(**section) for section in grade_sections(rows)]


@router.post("", response_model=list[StudentResponse], status_code=status.HTTP_201_CREATED)
async def create_students(student_create: StudentCreate, session: DBSessionDep) -> list[StudentResponse]:
    """Add students to a cohort from a list of names and/or a newline separated names text."""
    names = [name for name in student_create.names if name.strip()] + parse_names(student_create.names_text)
    if not names:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No student names provided")
    if len(names) > settings.names_batch_max:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Too many names ({len(names)}); at most {settings.names_batch_max} per request",
        )

    students = [
        Student(**values)
        for values in new_student_values(
            names, student_create.grade, student_create.subject, student_create.section_number
        )
    ]
    session.add_all(students)
    await session.commit()
    for student in students:
        await session.refresh(student)

    logger.info(f"Added {len(students)} students to {student_create.grade.value}/{student_create.subject}")
    config = await GradeAnalysisService.get_config(session, student_create.grade)
    return [student_to_response(student, config) for student in students]


@router.post("/bulk-upload", response_model=StudentBulkUploadResponse, status_code=status.HTTP_200_OK)
async def bulk_upload_students(
    session: DBSessionDep,
    file: UploadFile = File(...),
    grade: GradeLevel = Form(...),
    subject: str = Form(DEFAULT_SUBJECT),
    section_number: int = Form(1, ge=1, le=2),
) -> StudentBulkUploadResponse:
    """Bulk upload a roster from Excel or CSV file. Score columns are optional."""
    file_content = await file.read()
    if len(file_content) > settings.roster_max_size:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File is too large")

    try:
        df = parse_upload_file(file_content, file.filename or "unknown")
        validate_required_columns(df)
    except (RosterUploadParseError, RosterUploadValidationError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if len(df) > settings.roster_max_rows:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Roster has {len(df)} rows; at most {settings.roster_max_rows} are allowed",
        )

    config = await GradeAnalysisService.get_config(session, grade)

    total_rows = len(df)
    successful = 0
    failed = 0
    errors: list[StudentBulkUploadError] = []

    for idx, row in df.iterrows():
        row_number = int(idx) + 2  # +2 because Excel rows are 1-indexed and header is row 1
        try:
            row_data = parse_roster_row(row)
        except ValueError as e:
            errors.append(StudentBulkUploadError(row_number=row_number, error_message=str(e)))
            failed += 1
            continue

        name = row_data.pop("name")
        if not name:
            errors.append(StudentBulkUploadError(row_number=row_number, error_message="Name is required", field="name"))
            failed += 1
            continue

        values = new_student_values([name], grade, subject, section_number)[0]
        values.update(apply_score_update(row_data, config))
        session.add(Student(**values))
        successful += 1

    await session.commit()
    logger.info(f"Roster upload for {grade.value}/{subject}: {successful} added, {failed} failed")

    return StudentBulkUploadResponse(total_rows=total_rows, successful=successful, failed=failed, errors=errors)


@router.post("/set-all", response_model=list[StudentResponse])
async def set_all_scores(request: BulkScoreRequest, session: DBSessionDep) -> list[StudentResponse]:
    """Set one score field to the same value for the whole cohort."""
    students = await GradeAnalysisService.get_cohort(session, request.grade, request.subject, request.section_number)
    if not students:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No students found")

    config = await GradeAnalysisService.get_config(session, request.grade)
    updates = set_all(students, request.field.value, request.value, config)
    for student in students:
        for field, value in updates[student.id].items():
            setattr(student, field, value)

    await session.commit()
    return [student_to_response(student, config) for student in students]


@router.post("/bulk-attendance", response_model=list[StudentResponse])
async def bulk_attendance(request: BulkAttendanceRequest, session: DBSessionDep) -> list[StudentResponse]:
    """Mark the whole cohort present in every slot, or clear its attendance."""
    students = await GradeAnalysisService.get_cohort(session, request.grade, request.subject, request.section_number)
    if not students:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No students found")

    for student in students:
        student.attendance = mark_all_present() if request.action == "present" else reset_attendance()

    await session.commit()
    config = await GradeAnalysisService.get_config(session, request.grade)
    return [student_to_response(student, config) for student in students]


@router.post("/duplicate", response_model=list[StudentResponse], status_code=status.HTTP_201_CREATED)
async def duplicate_students(request: DuplicateRequest, session: DBSessionDep) -> list[StudentResponse]:
    """Copy a cohort into another grade/subject/section, with or without scores."""
    source = await GradeAnalysisService.get_cohort(session, request.grade, request.subject, request.section_number)
    if not source:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No students found")

    copies = [
        Student(**values)
        for values in duplicate_records(
            source,
            request.target_grade,
            request.target_subject,
            request.target_section_number,
            include_scores=request.include_scores,
        )
    ]
    session.add_all(copies)
    await session.commit()
    for student in copies:
        await session.refresh(student)

    logger.info(f"Duplicated {len(copies)} students from {request.grade.value} to {request.target_grade.value}")
    config = await GradeAnalysisService.get_config(session, request.target_grade)
    return [student_to_response(student, config) for student in copies]


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_students(request: BulkDeleteRequest, session: DBSessionDep) -> BulkDeleteResponse:
    """Delete several students at once."""
    stmt = delete(Student).where(Student.id.in_(request.student_ids))
    result = await session.execute(stmt)
    await session.commit()
    return BulkDeleteResponse(deleted=result.rowcount or 0)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(student_id: int, session: DBSessionDep) -> StudentResponse:
    """Get student details."""
    student = await _get_student(session, student_id)
    config = await GradeAnalysisService.get_config(session, student.grade)
    return student_to_response(student, config)


@router.patch("/{student_id}", response_model=StudentResponse)
async def update_student(student_id: int, student_update: StudentUpdate, session: DBSessionDep) -> StudentResponse:
    """Update a student. Scores above the grade maxima are clamped."""
    student = await _get_student(session, student_id)
    config = await GradeAnalysisService.get_config(session, student.grade)

    updates = student_update.model_dump(exclude_unset=True)
    for field, value in apply_score_update(updates, config).items():
        setattr(student, field, value)

    await session.commit()
    await session.refresh(student)
    return student_to_response(student, config)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(student_id: int, session: DBSessionDep) -> None:
    """Delete student."""
    student = await _get_student(session, student_id)
    await session.delete(student)
    await session.commit()


@router.post("/{student_id}/attendance", response_model=StudentResponse)
async def toggle_attendance(
    student_id: int, request: AttendanceToggleRequest, session: DBSessionDep
) -> StudentResponse:
    """Toggle one present or absent slot."""
    student = await _get_student(session, student_id)
    toggle = toggle_present if request.status == "present" else toggle_absent
    try:
        student.attendance = toggle(student.attendance, request.slot)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    await session.commit()
    await session.refresh(student)
    config = await GradeAnalysisService.get_config(session, student.grade)
    return student_to_response(student, config)


@router.post("/{student_id}/transfer", response_model=StudentResponse)
async def transfer_student(student_id: int, request: TransferRequest, session: DBSessionDep) -> StudentResponse:
    """Move a student to another grade, optionally another subject. Scores are kept."""
    student = await _get_student(session, student_id)
    for field, value in transfer_values(request.target_grade, request.target_subject).items():
        setattr(student, field, value)

    await session.commit()
    await session.refresh(student)
    config = await GradeAnalysisService.get_config(session, student.grade)
    return student_to_response(student, config)
