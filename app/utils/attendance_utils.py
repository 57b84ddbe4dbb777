"""Utility functions for attendance slots, behavior stars and the daily follow-up sheet."""

from collections.abc import Iterable
from typing import Any

from app.utils.score_utils import record_value

ATTENDANCE_SLOTS = 4
STAR_SLOTS = 10

# Star values
STAR_EMPTY = 0
STAR_GREEN = 1
STAR_RED = 2


def _pad_flags(values: Any) -> list[bool]:
    if not isinstance(values, (list, tuple)):
        values = []
    flags = [bool(v) for v in values[:ATTENDANCE_SLOTS]]
    return flags + [False] * (ATTENDANCE_SLOTS - len(flags))


def empty_attendance() -> dict[str, list[bool]]:
    return {"present": [False] * ATTENDANCE_SLOTS, "absent": [False] * ATTENDANCE_SLOTS}


def normalize_attendance(raw: Any) -> dict[str, list[bool]]:
    """
    Return a 4-slot {"present": [...], "absent": [...]} record.

    Missing or short arrays are padded with unset slots and long ones are
    truncated. Objects exposing present/absent attributes are read like
    mappings; anything else reads as an empty record. A slot stored as both
    present and absent reads as absent only.
    """
    if not isinstance(raw, dict):
        if not (hasattr(raw, "present") and hasattr(raw, "absent")):
            return empty_attendance()
        raw = {"present": raw.present, "absent": raw.absent}
    present = _pad_flags(raw.get("present"))
    absent = _pad_flags(raw.get("absent"))
    present = [p and not a for p, a in zip(present, absent)]
    return {"present": present, "absent": absent}


def _check_slot(index: int) -> None:
    if not 0 <= index < ATTENDANCE_SLOTS:
        raise ValueError(f"Attendance slot must be between 0 and {ATTENDANCE_SLOTS - 1}, got {index}")


def toggle_present(raw: Any, index: int) -> dict[str, list[bool]]:
    """Flip the present flag of a slot. Marking present clears absent at that slot."""
    _check_slot(index)
    record = normalize_attendance(raw)
    record["present"][index] = not record["present"][index]
    if record["present"][index]:
        record["absent"][index] = False
    return record


def toggle_absent(raw: Any, index: int) -> dict[str, list[bool]]:
    """Flip the absent flag of a slot. Marking absent clears present at that slot."""
    _check_slot(index)
    record = normalize_attendance(raw)
    record["absent"][index] = not record["absent"][index]
    if record["absent"][index]:
        record["present"][index] = False
    return record


def mark_all_present(raw: Any = None) -> dict[str, list[bool]]:
    return {"present": [True] * ATTENDANCE_SLOTS, "absent": [False] * ATTENDANCE_SLOTS}


def reset_attendance(raw: Any = None) -> dict[str, list[bool]]:
    return empty_attendance()


def count_present(raw: Any) -> int:
    return sum(normalize_attendance(raw)["present"])


def count_absent(raw: Any) -> int:
    return sum(normalize_attendance(raw)["absent"])


def count_unset(raw: Any) -> int:
    record = normalize_attendance(raw)
    return sum(1 for p, a in zip(record["present"], record["absent"]) if not p and not a)


def attendance_tally(raw: Any) -> dict[str, int]:
    return {"present": count_present(raw), "absent": count_absent(raw), "unset": count_unset(raw)}


def cohort_attendance(records: Iterable[Any]) -> dict[str, int]:
    """Sum slot tallies across a cohort (the section header counters)."""
    totals = {"present": 0, "absent": 0, "unset": 0}
    for raw in records:
        for key, value in attendance_tally(raw).items():
            totals[key] += value
    return totals


# Behavior stars


def normalize_stars(raw: Any) -> list[int]:
    """Return a 10-slot star array; anything malformed reads as all empty."""
    if isinstance(raw, (list, tuple)) and len(raw) == STAR_SLOTS and all(v in (0, 1, 2) for v in raw):
        return [int(v) for v in raw]
    return [STAR_EMPTY] * STAR_SLOTS


def cycle_star(raw: Any, index: int) -> list[int]:
    """Advance one star: empty -> green -> red -> empty."""
    if not 0 <= index < STAR_SLOTS:
        raise ValueError(f"Star slot must be between 0 and {STAR_SLOTS - 1}, got {index}")
    stars = normalize_stars(raw)
    stars[index] = (stars[index] + 1) % 3
    return stars


def fill_all_green(raw: Any = None) -> list[int]:
    return [STAR_GREEN] * STAR_SLOTS


def mark_first_red(raw: Any) -> list[int]:
    stars = normalize_stars(raw)
    stars[0] = STAR_RED
    return stars


def reset_stars(raw: Any = None) -> list[int]:
    return [STAR_EMPTY] * STAR_SLOTS


def star_tally(raw: Any) -> dict[str, int]:
    stars = normalize_stars(raw)
    return {
        "green": stars.count(STAR_GREEN),
        "red": stars.count(STAR_RED),
        "empty": stars.count(STAR_EMPTY),
    }


# Daily follow-up

FOLLOW_UP_NONE = "none"
FOLLOW_UP_DONE = "done"
FOLLOW_UP_NOT_DONE = "not_done"
FOLLOW_UP_STATUSES = (FOLLOW_UP_NONE, FOLLOW_UP_DONE, FOLLOW_UP_NOT_DONE)

DAILY_PRESENT = "present"
DAILY_ABSENT = "absent"
DAILY_ATTENDANCE_VALUES = (FOLLOW_UP_NONE, DAILY_PRESENT, DAILY_ABSENT)

# Fields holding one status per slot
FOLLOW_UP_SLOT_FIELDS = ("homework", "participation")


def _pad_values(values: Any, allowed: tuple[str, ...]) -> list[str]:
    if not isinstance(values, (list, tuple)):
        values = []
    padded = [v if v in allowed else FOLLOW_UP_NONE for v in values[:ATTENDANCE_SLOTS]]
    return padded + [FOLLOW_UP_NONE] * (ATTENDANCE_SLOTS - len(padded))


def empty_daily_record() -> dict[str, Any]:
    return {
        "attendance": [FOLLOW_UP_NONE] * ATTENDANCE_SLOTS,
        "homework": [FOLLOW_UP_NONE] * ATTENDANCE_SLOTS,
        "participation": [FOLLOW_UP_NONE] * ATTENDANCE_SLOTS,
        "performance_tasks": FOLLOW_UP_NONE,
    }


def normalize_daily_record(raw: Any) -> dict[str, Any]:
    """
    Return a full daily follow-up record.

    Reads dicts or objects with attendance/homework/participation/performance_tasks;
    missing slots and unknown values read as "none".
    """
    performance = record_value(raw, "performance_tasks")
    return {
        "attendance": _pad_values(record_value(raw, "attendance"), DAILY_ATTENDANCE_VALUES),
        "homework": _pad_values(record_value(raw, "homework"), FOLLOW_UP_STATUSES),
        "participation": _pad_values(record_value(raw, "participation"), FOLLOW_UP_STATUSES),
        "performance_tasks": performance if performance in FOLLOW_UP_STATUSES else FOLLOW_UP_NONE,
    }


def toggle_daily_attendance(raw: Any, index: int) -> dict[str, Any]:
    """Unmarked or absent becomes present; present becomes absent."""
    _check_slot(index)
    record = normalize_daily_record(raw)
    current = record["attendance"][index]
    record["attendance"][index] = DAILY_ABSENT if current == DAILY_PRESENT else DAILY_PRESENT
    return record


def toggle_daily_status(raw: Any, field: str, index: int) -> dict[str, Any]:
    """Unmarked or not done becomes done; done becomes not done."""
    if field not in FOLLOW_UP_SLOT_FIELDS:
        raise ValueError(f"Follow-up field must be one of {FOLLOW_UP_SLOT_FIELDS}, got {field}")
    _check_slot(index)
    record = normalize_daily_record(raw)
    current = record[field][index]
    record[field][index] = FOLLOW_UP_NOT_DONE if current == FOLLOW_UP_DONE else FOLLOW_UP_DONE
    return record


def cycle_performance_tasks(raw: Any) -> dict[str, Any]:
    """none -> done -> not_done -> done; the unmarked state is never returned to."""
    record = normalize_daily_record(raw)
    current = record["performance_tasks"]
    record["performance_tasks"] = FOLLOW_UP_NOT_DONE if current == FOLLOW_UP_DONE else FOLLOW_UP_DONE
    return record


def mark_daily_all_present(raw: Any) -> dict[str, Any]:
    record = normalize_daily_record(raw)
    record["attendance"] = [DAILY_PRESENT] * ATTENDANCE_SLOTS
    return record


def mark_daily_all_done(raw: Any, field: str) -> dict[str, Any]:
    """Mark every slot of homework or participation as done."""
    if field not in FOLLOW_UP_SLOT_FIELDS:
        raise ValueError(f"Follow-up field must be one of {FOLLOW_UP_SLOT_FIELDS}, got {field}")
    record = normalize_daily_record(raw)
    record[field] = [FOLLOW_UP_DONE] * ATTENDANCE_SLOTS
    return record


def mark_daily_performance_done(raw: Any) -> dict[str, Any]:
    record = normalize_daily_record(raw)
    record["performance_tasks"] = FOLLOW_UP_DONE
    return record


def apply_daily_mark_all(raw: Any, action: str) -> dict[str, Any]:
    """Apply one of the cohort-wide shortcuts: present, homework, participation, performance_tasks."""
    if action == "present":
        return mark_daily_all_present(raw)
    if action in FOLLOW_UP_SLOT_FIELDS:
        return mark_daily_all_done(raw, action)
    if action == "performance_tasks":
        return mark_daily_performance_done(raw)
    raise ValueError(f"Unknown follow-up action: {action}")
