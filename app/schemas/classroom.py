from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from app.models import DEFAULT_SUBJECT, BehaviorCategory, GradeLevel, NoteType


class StarToggleRequest(BaseModel):
    slot: int = Field(..., ge=0, le=9)


class BehaviorStarsResponse(BaseModel):
    """Ten stars for one student and category: 0 empty, 1 green, 2 red."""

    student_id: int
    category: BehaviorCategory
    stars: list[int]
    green: int
    red: int
    empty: int


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    section_key: str = Field(..., min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Group name cannot be blank")
        return v


class GroupPointsRequest(BaseModel):
    amount: int = Field(..., description="Points to add; negative to subtract")


class GroupResponse(BaseModel):
    id: int
    name: str
    points: int
    section_key: str
    members: list[int]
    created_at: datetime
    updated_at: datetime


class NoteCreate(BaseModel):
    student_id: int
    text: str = Field(..., min_length=1)
    note_type: NoteType = NoteType.GENERAL

    @field_validator("text")
    @classmethod
    def _strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Note text cannot be blank")
        return v


class NoteResponse(BaseModel):
    id: int
    student_id: int
    student_name: str
    text: str
    note_type: NoteType
    created_at: datetime

    class Config:
        from_attributes = True


class FollowUpResponse(BaseModel):
    """One student's follow-up sheet for a day."""

    student_id: int
    student_name: str
    day: date
    attendance: list[str] = Field(..., description="none, present or absent per slot")
    homework: list[str] = Field(..., description="none, done or not_done per slot")
    participation: list[str] = Field(..., description="none, done or not_done per slot")
    performance_tasks: str


class FollowUpSlotRequest(BaseModel):
    """Toggle one slot of a student's attendance, homework or participation."""

    field: str = Field(..., pattern="^(attendance|homework|participation)$")
    slot: int = Field(..., ge=0, le=3)
    day: date | None = Field(None, description="Defaults to today")


class FollowUpDayRequest(BaseModel):
    day: date | None = Field(None, description="Defaults to today")


class FollowUpMarkAllRequest(BaseModel):
    """Apply a follow-up shortcut to every student of a cohort."""

    grade: GradeLevel
    subject: str = DEFAULT_SUBJECT
    section_number: int = Field(1, ge=1, le=2)
    action: str = Field(..., pattern="^(present|homework|participation|performance_tasks)$")
    day: date | None = Field(None, description="Defaults to today")
