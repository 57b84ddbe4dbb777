import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.dependencies.database import DBSessionDep
from app.models import (
    DEFAULT_SUBJECT,
    BehaviorCategory,
    BehaviorRecord,
    ClassroomGroup,
    ClassroomNote,
    DailyFollowUp,
    GradeLevel,
    Student,
)
from app.schemas.classroom import (
    BehaviorStarsResponse,
    FollowUpDayRequest,
    FollowUpMarkAllRequest,
    FollowUpResponse,
    FollowUpSlotRequest,
    GroupCreate,
    GroupPointsRequest,
    GroupResponse,
    NoteCreate,
    NoteResponse,
    StarToggleRequest,
)
from app.services.grade_analysis_service import GradeAnalysisService
from app.utils.attendance_utils import (
    apply_daily_mark_all,
    cycle_performance_tasks,
    cycle_star,
    empty_daily_record,
    fill_all_green,
    mark_first_red,
    normalize_daily_record,
    normalize_stars,
    reset_stars,
    star_tally,
    toggle_daily_attendance,
    toggle_daily_status,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/classroom", tags=["classroom"])


async def _get_student(session: DBSessionDep, student_id: int) -> Student:
    stmt = select(Student).where(Student.id == student_id)
    result = await session.execute(stmt)
    student = result.scalar_one_or_none()
    if not student:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return student


async def _get_group(session: DBSessionDep, group_id: int) -> ClassroomGroup:
    stmt = select(ClassroomGroup).where(ClassroomGroup.id == group_id).options(selectinload(ClassroomGroup.members))
    result = await session.execute(stmt)
    group = result.scalar_one_or_none()
    if not group:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return group


def _stars_response(student_id: int, category: BehaviorCategory, stars: Any) -> BehaviorStarsResponse:
    stars = normalize_stars(stars)
    return BehaviorStarsResponse(student_id=student_id, category=category, stars=stars, **star_tally(stars))


def _group_response(group: ClassroomGroup) -> GroupResponse:
    return GroupResponse(
        id=group.id,
        name=group.name,
        points=group.points,
        section_key=group.section_key,
        members=sorted(member.id for member in group.members),
        created_at=group.created_at,
        updated_at=group.updated_at,
    )


async def _update_stars(
    session: DBSessionDep, student_id: int, category: BehaviorCategory, update: Callable[[Any], list[int]]
) -> BehaviorStarsResponse:
    """Apply a star update to a student's record for a category, creating the record if needed."""
    await _get_student(session, student_id)
    stmt = select(BehaviorRecord).where(BehaviorRecord.student_id == student_id, BehaviorRecord.category == category)
    result = await session.execute(stmt)
    record = result.scalar_one_or_none()
    if record is None:
        record = BehaviorRecord(student_id=student_id, category=category, stars=reset_stars())
        session.add(record)

    try:
        record.stars = update(record.stars)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    await session.commit()
    return _stars_response(student_id, category, record.stars)


def _follow_up_response(student: Student, day: date, record: Any) -> FollowUpResponse:
    return FollowUpResponse(
        student_id=student.id, student_name=student.name, day=day, **normalize_daily_record(record)
    )


def _store_follow_up(row: DailyFollowUp, values: dict[str, Any]) -> None:
    row.attendance = values["attendance"]
    row.homework = values["homework"]
    row.participation = values["participation"]
    row.performance_tasks = values["performance_tasks"]


async def _get_follow_up(session: DBSessionDep, student_id: int, day: date) -> DailyFollowUp:
    stmt = select(DailyFollowUp).where(DailyFollowUp.student_id == student_id, DailyFollowUp.day == day)
    result = await session.execute(stmt)
    row = result.scalar_one_or_none()
    if row is None:
        row = DailyFollowUp(student_id=student_id, day=day, **empty_daily_record())
        session.add(row)
    return row


async def _update_follow_up(
    session: DBSessionDep, student_id: int, day: date | None, update: Callable[[Any], dict[str, Any]]
) -> FollowUpResponse:
    """Apply an update to a student's follow-up sheet for a day, creating the sheet if needed."""
    student = await _get_student(session, student_id)
    day = day or date.today()
    row = await _get_follow_up(session, student_id, day)

    try:
        _store_follow_up(row, update(row))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    await session.commit()
    return _follow_up_response(student, day, row)


# Behavior stars


@router.get("/students/{student_id}/stars", response_model=list[BehaviorStarsResponse])
async def get_student_stars(student_id: int, session: DBSessionDep) -> list[BehaviorStarsResponse]:
    """Get a student's stars in every category; categories never touched read as empty."""
    await _get_student(session, student_id)
    stmt = select(BehaviorRecord).where(BehaviorRecord.student_id == student_id)
    result = await session.execute(stmt)
    stored = {record.category: record.stars for record in result.scalars().all()}
    return [_stars_response(student_id, category, stored.get(category)) for category in BehaviorCategory]


@router.post("/students/{student_id}/stars/{category}/cycle", response_model=BehaviorStarsResponse)
async def cycle_student_star(
    student_id: int, category: BehaviorCategory, request: StarToggleRequest, session: DBSessionDep
) -> BehaviorStarsResponse:
    """Advance one star: empty, green, red, then empty again."""
    return await _update_stars(session, student_id, category, lambda stars: cycle_star(stars, request.slot))


@router.post("/students/{student_id}/stars/{category}/fill-green", response_model=BehaviorStarsResponse)
async def fill_student_stars_green(
    student_id: int, category: BehaviorCategory, session: DBSessionDep
) -> BehaviorStarsResponse:
    return await _update_stars(session, student_id, category, fill_all_green)


@router.post("/students/{student_id}/stars/{category}/first-red", response_model=BehaviorStarsResponse)
async def mark_student_first_star_red(
    student_id: int, category: BehaviorCategory, session: DBSessionDep
) -> BehaviorStarsResponse:
    return await _update_stars(session, student_id, category, mark_first_red)


@router.post("/students/{student_id}/stars/{category}/reset", response_model=BehaviorStarsResponse)
async def reset_student_stars(
    student_id: int, category: BehaviorCategory, session: DBSessionDep
) -> BehaviorStarsResponse:
    return await _update_stars(session, student_id, category, reset_stars)


# Groups


@router.get("/groups", response_model=list[GroupResponse])
async def list_groups(session: DBSessionDep, section_key: str = Query(...)) -> list[GroupResponse]:
    """List the groups of a section."""
    stmt = (
        select(ClassroomGroup)
        .where(ClassroomGroup.section_key == section_key)
        .options(selectinload(ClassroomGroup.members))
        .order_by(ClassroomGroup.id)
    )
    result = await session.execute(stmt)
    return [_group_response(group) for group in result.scalars().all()]


@router.post("/groups", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(group: GroupCreate, session: DBSessionDep) -> GroupResponse:
    db_group = ClassroomGroup(name=group.name, section_key=group.section_key, points=0, members=[])
    session.add(db_group)
    await session.commit()
    logger.info(f"Created group {db_group.name!r} for section {db_group.section_key}")
    return _group_response(await _get_group(session, db_group.id))


@router.delete("/groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(group_id: int, session: DBSessionDep) -> None:
    group = await _get_group(session, group_id)
    await session.delete(group)
    await session.commit()


@router.post("/groups/{group_id}/points", response_model=GroupResponse)
async def add_group_points(group_id: int, request: GroupPointsRequest, session: DBSessionDep) -> GroupResponse:
    """Add (or subtract) points; the balance may go negative."""
    group = await _get_group(session, group_id)
    group.points = group.points + request.amount
    await session.commit()
    return _group_response(await _get_group(session, group_id))


@router.post("/groups/{group_id}/members/{student_id}", response_model=GroupResponse)
async def toggle_group_member(group_id: int, student_id: int, session: DBSessionDep) -> GroupResponse:
    """Add the student to the group, or remove them if already a member."""
    group = await _get_group(session, group_id)
    student = await _get_student(session, student_id)
    if student in group.members:
        group.members.remove(student)
    else:
        group.members.append(student)
    await session.commit()
    return _group_response(await _get_group(session, group_id))


# Notes


@router.get("/notes", response_model=list[NoteResponse])
async def list_notes(session: DBSessionDep, student_id: int | None = Query(None)) -> list[NoteResponse]:
    """List notes, newest first."""
    stmt = select(ClassroomNote).order_by(ClassroomNote.created_at.desc(), ClassroomNote.id.desc())
    if student_id is not None:
        stmt = stmt.where(ClassroomNote.student_id == student_id)
    result = await session.execute(stmt)
    return [NoteResponse.model_validate(note) for note in result.scalars().all()]


@router.post("/notes", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(note: NoteCreate, session: DBSessionDep) -> NoteResponse:
    student = await _get_student(session, note.student_id)
    db_note = ClassroomNote(
        student_id=student.id, student_name=student.name, text=note.text, note_type=note.note_type
    )
    session.add(db_note)
    await session.commit()
    await session.refresh(db_note)
    return NoteResponse.model_validate(db_note)


@router.delete("/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(note_id: int, session: DBSessionDep) -> None:
    stmt = select(ClassroomNote).where(ClassroomNote.id == note_id)
    result = await session.execute(stmt)
    note = result.scalar_one_or_none()
    if not note:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    await session.delete(note)
    await session.commit()


# Daily follow-up


@router.get("/follow-up", response_model=list[FollowUpResponse])
async def list_follow_ups(
    session: DBSessionDep,
    grade: GradeLevel = Query(...),
    subject: str = Query(DEFAULT_SUBJECT),
    section_number: int = Query(1, ge=1, le=2),
    day: date | None = Query(None),
) -> list[FollowUpResponse]:
    """Get the follow-up sheet of every student in a cohort; students without one read as unmarked."""
    day = day or date.today()
    students = await GradeAnalysisService.get_cohort(session, grade, subject, section_number)
    stmt = select(DailyFollowUp).where(
        DailyFollowUp.day == day, DailyFollowUp.student_id.in_([student.id for student in students])
    )
    result = await session.execute(stmt)
    stored = {row.student_id: row for row in result.scalars().all()}
    return [_follow_up_response(student, day, stored.get(student.id)) for student in students]


@router.post("/follow-up/students/{student_id}/toggle", response_model=FollowUpResponse)
async def toggle_follow_up_slot(
    student_id: int, request: FollowUpSlotRequest, session: DBSessionDep
) -> FollowUpResponse:
    """Attendance flips between present and absent; homework and participation between done and not done."""
    if request.field == "attendance":
        return await _update_follow_up(
            session, student_id, request.day, lambda record: toggle_daily_attendance(record, request.slot)
        )
    return await _update_follow_up(
        session, student_id, request.day, lambda record: toggle_daily_status(record, request.field, request.slot)
    )


@router.post("/follow-up/students/{student_id}/performance-tasks", response_model=FollowUpResponse)
async def cycle_follow_up_performance_tasks(
    student_id: int, request: FollowUpDayRequest, session: DBSessionDep
) -> FollowUpResponse:
    return await _update_follow_up(session, student_id, request.day, cycle_performance_tasks)


@router.post("/follow-up/mark-all", response_model=list[FollowUpResponse])
async def mark_all_follow_ups(request: FollowUpMarkAllRequest, session: DBSessionDep) -> list[FollowUpResponse]:
    """Apply a shortcut (all present, all homework done, ...) to every student of a cohort."""
    day = request.day or date.today()
    students = await GradeAnalysisService.get_cohort(
        session, request.grade, request.subject, request.section_number
    )
    responses = []
    for student in students:
        row = await _get_follow_up(session, student.id, day)
        _store_follow_up(row, apply_daily_mark_all(row, request.action))
        responses.append(_follow_up_response(student, day, row))

    await session.commit()
    logger.info(f"Applied follow-up {request.action!r} to {len(students)} students on {day}")
    return responses
