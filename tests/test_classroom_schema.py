from datetime import date

import pytest
from pydantic import ValidationError

from app.models import DEFAULT_SUBJECT, GradeLevel
from app.schemas.classroom import FollowUpMarkAllRequest, FollowUpResponse, FollowUpSlotRequest
from app.utils.attendance_utils import normalize_daily_record


def test_follow_up_slot_request_limits():
    request = FollowUpSlotRequest(field="homework", slot=3)
    assert request.day is None
    with pytest.raises(ValidationError):
        FollowUpSlotRequest(field="book", slot=0)
    with pytest.raises(ValidationError):
        FollowUpSlotRequest(field="attendance", slot=4)


def test_follow_up_mark_all_request():
    request = FollowUpMarkAllRequest(grade="primary_first", action="present", day="2026-10-19")
    assert request.grade == GradeLevel.PRIMARY_FIRST
    assert request.subject == DEFAULT_SUBJECT
    assert request.section_number == 1
    assert request.day == date(2026, 10, 19)
    with pytest.raises(ValidationError):
        FollowUpMarkAllRequest(grade="primary_first", action="everything")


def test_follow_up_response_from_daily_record():
    response = FollowUpResponse(
        student_id=1, student_name="Ali", day=date(2026, 10, 19), **normalize_daily_record({"homework": ["done"]})
    )
    assert response.homework == ["done", "none", "none", "none"]
    assert response.attendance == ["none"] * 4
