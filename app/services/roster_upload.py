"""Service for parsing and validating student roster upload files."""

import io
import math
from typing import Any

import pandas as pd

from app.utils.score_utils import SCORE_FIELDS

REQUIRED_COLUMNS = {"name"}


class RosterUploadParseError(Exception):
    """Raised when a roster file cannot be read."""


class RosterUploadValidationError(Exception):
    """Raised when a roster file is readable but lacks required columns."""


def _read_frame(file_content: bytes, filename: str) -> pd.DataFrame:
    buffer = io.BytesIO(file_content)
    suffix = filename.lower().rsplit(".", 1)[-1] if "." in filename else ""
    if suffix in ("xlsx", "xls"):
        return pd.read_excel(buffer, engine="openpyxl", dtype=str)
    if suffix == "csv":
        return pd.read_csv(buffer, dtype=str)
    raise RosterUploadParseError(f"Unsupported roster file {filename!r}; upload .xlsx, .xls or .csv")


def parse_upload_file(file_content: bytes, filename: str) -> pd.DataFrame:
    """
    Read a roster spreadsheet into a DataFrame of strings, blank rows dropped.

    Raises:
        RosterUploadParseError: If the file type is unsupported, the file
            cannot be read, or it holds no data rows
    """
    try:
        df = _read_frame(file_content, filename)
    except RosterUploadParseError:
        raise
    except pd.errors.EmptyDataError:
        raise RosterUploadParseError("Roster file is empty")
    except Exception as e:
        raise RosterUploadParseError(f"Could not read roster file: {e}")

    df = df.dropna(how="all")
    if df.empty:
        raise RosterUploadParseError("Roster file is empty")
    return df


def validate_required_columns(df: pd.DataFrame) -> None:
    """Raise RosterUploadValidationError unless the roster has a name column (any case)."""
    found = {str(col).lower().strip() for col in df.columns}
    missing = REQUIRED_COLUMNS - found
    if missing:
        raise RosterUploadValidationError(
            f"Roster is missing column(s) {', '.join(sorted(missing))}; found {', '.join(sorted(found))}"
        )


def _cell(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return None
    return text


def parse_roster_row(row: pd.Series) -> dict[str, Any]:
    """
    Parse a single row into student values.

    Returns:
        Dictionary with "name" (str, may be empty) and any score columns present
        in the row, left unclamped. Blank score cells are omitted.

    Raises:
        ValueError: If a score cell is not a number
    """
    row_dict = {str(col).lower().strip(): val for col, val in row.items()}

    values: dict[str, Any] = {"name": _cell(row_dict.get("name")) or ""}
    for field in SCORE_FIELDS:
        cell = _cell(row_dict.get(field))
        if cell is None:
            continue
        try:
            number = float(cell)
        except ValueError:
            raise ValueError(f"Invalid number for {field}: {cell}")
        # Infinite cells are left for clamp_score to pin to a bound
        values[field] = int(number) if math.isfinite(number) else number
    return values
