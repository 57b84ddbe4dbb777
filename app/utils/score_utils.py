"""Utility functions for score clamping, totals and grade bands."""

import math
from typing import TYPE_CHECKING, Any

from app.models import GradeBand

if TYPE_CHECKING:
    from app.schemas.score_config import ScoreConfiguration


SCORE_FIELDS = ("performance_tasks", "participation", "book", "homework", "exam1", "exam2")

# Fields whose maximum does not depend on the grade configuration
FIXED_FIELD_MAX = {"participation": 10, "book": 10, "homework": 10}

# Inclusive lower bounds, highest band first
BAND_THRESHOLDS_100: list[tuple[GradeBand, int]] = [
    (GradeBand.EXCELLENT, 90),
    (GradeBand.VERY_GOOD, 80),
    (GradeBand.GOOD, 60),
    (GradeBand.ACCEPTABLE, 50),
]
BAND_THRESHOLDS_60: list[tuple[GradeBand, int]] = [
    (GradeBand.EXCELLENT, 54),
    (GradeBand.VERY_GOOD, 48),
    (GradeBand.GOOD, 36),
    (GradeBand.ACCEPTABLE, 30),
]

BAND_ORDER = [GradeBand.EXCELLENT, GradeBand.VERY_GOOD, GradeBand.GOOD, GradeBand.ACCEPTABLE, GradeBand.WEAK]

BAND_DESCRIPTIONS = {
    GradeBand.EXCELLENT: "High mastery",
    GradeBand.VERY_GOOD: "Elevated mastery",
    GradeBand.GOOD: "Average mastery",
    GradeBand.ACCEPTABLE: "Basic mastery",
    GradeBand.WEAK: "Needs remedial support",
}


def clamp_score(value: Any, max_value: int) -> int:
    """
    Clamp a raw score into [0, max_value].

    Non-numeric input (None, empty string, garbage, NaN) is treated as 0, the
    same way the score sheet treats a blank cell. Fractions are truncated.
    Values of any size clamp to the nearest bound, infinities included.
    """
    upper = max(0, max_value)
    if isinstance(value, int):
        return min(max(0, int(value)), upper)
    try:
        num_value = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(num_value):
        return 0
    if math.isinf(num_value):
        return upper if num_value > 0 else 0
    return min(max(0, int(num_value)), upper)


def field_max(field: str, config: "ScoreConfiguration") -> int:
    """Return the maximum allowed value of a score field under a configuration."""
    if field == "performance_tasks":
        return config.performance_tasks_max
    if field == "exam1":
        return config.exam1_max
    if field == "exam2":
        return config.exam2_max
    if field in FIXED_FIELD_MAX:
        return FIXED_FIELD_MAX[field]
    raise ValueError(f"Unknown score field: {field}")


def included_score_fields(config: "ScoreConfiguration") -> list[str]:
    """List the score fields that participate in the total for this configuration."""
    fields = ["performance_tasks"]
    if config.includes_participation:
        fields.append("participation")
    fields.extend(["book", "homework", "exam1"])
    if config.includes_exam2:
        fields.append("exam2")
    return fields


def record_value(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from a dict, a schema or an ORM row."""
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def _field(record: Any, name: str, config: "ScoreConfiguration") -> int:
    return clamp_score(record_value(record, name, 0), field_max(name, config))


def compute_task_total(record: Any, config: "ScoreConfiguration") -> int:
    """Sum of the coursework fields; participation only counts in 10-point task mode."""
    total = _field(record, "performance_tasks", config) + _field(record, "book", config) + _field(record, "homework", config)
    if config.includes_participation:
        total += _field(record, "participation", config)
    return total


def compute_exam_total(record: Any, config: "ScoreConfiguration") -> int:
    """Sum of exam fields; exam2 is ignored in single-exam mode (exam1_max == 20)."""
    total = _field(record, "exam1", config)
    if config.includes_exam2:
        total += _field(record, "exam2", config)
    return total


def compute_total(record: Any, config: "ScoreConfiguration") -> int:
    """
    Calculate a student's final total.

    Args:
        record: Anything exposing the six score fields as attributes or dict keys
            (ORM Student, StudentRecord schema, plain dict)
        config: The grade's ScoreConfiguration

    Returns:
        Total in [0, config.final_total_max]
    """
    raw_total = compute_task_total(record, config) + compute_exam_total(record, config)
    if config.final_total_max == 60:
        return min(raw_total, 60)
    return raw_total


def classify_total(total: float, final_total_max: int) -> GradeBand:
    """
    Map a total to its grade band.

    The 60-point table is used when final_total_max is 60, the 100-point table
    otherwise. Anything below the lowest threshold is Weak.
    """
    thresholds = BAND_THRESHOLDS_60 if final_total_max == 60 else BAND_THRESHOLDS_100
    for band, lower_bound in thresholds:
        if total >= lower_bound:
            return band
    return GradeBand.WEAK


def band_ranges(final_total_max: int) -> list[dict[str, Any]]:
    """
    Return the band table for a scale as [{"band", "min", "max", "description"}, ...].

    Bounds are inclusive; "max" of the top band is final_total_max and "min" of
    Weak is 0.
    """
    thresholds = BAND_THRESHOLDS_60 if final_total_max == 60 else BAND_THRESHOLDS_100
    ranges = []
    upper = final_total_max
    for band, lower_bound in thresholds:
        ranges.append(
            {"band": band, "min": lower_bound, "max": upper, "description": BAND_DESCRIPTIONS[band]}
        )
        upper = lower_bound - 1
    ranges.append({"band": GradeBand.WEAK, "min": 0, "max": upper, "description": BAND_DESCRIPTIONS[GradeBand.WEAK]})
    return ranges
