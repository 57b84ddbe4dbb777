import io

import pandas as pd
import pytest

from app.services.roster_upload import (
    RosterUploadParseError,
    RosterUploadValidationError,
    parse_roster_row,
    parse_upload_file,
    validate_required_columns,
)


def test_parse_csv_roster():
    content = b"Name,exam1,homework\nAli,25,9\nSara,,\n,,\n"
    df = parse_upload_file(content, "roster.csv")
    validate_required_columns(df)
    assert len(df) == 2

    rows = [parse_roster_row(row) for _, row in df.iterrows()]
    assert rows[0] == {"name": "Ali", "exam1": 25, "homework": 9}
    assert rows[1] == {"name": "Sara"}


def test_parse_excel_roster():
    buffer = io.BytesIO()
    pd.DataFrame({"name": ["Ali", "Sara"], "exam2": [12, 30]}).to_excel(buffer, index=False, engine="openpyxl")
    df = parse_upload_file(buffer.getvalue(), "roster.xlsx")
    rows = [parse_roster_row(row) for _, row in df.iterrows()]
    assert rows == [{"name": "Ali", "exam2": 12}, {"name": "Sara", "exam2": 30}]


def test_missing_name_column():
    df = parse_upload_file(b"student,exam1\nAli,20\n", "roster.csv")
    with pytest.raises(RosterUploadValidationError):
        validate_required_columns(df)


def test_unsupported_file_type():
    with pytest.raises(RosterUploadParseError):
        parse_upload_file(b"name\nAli\n", "roster.txt")


def test_empty_file():
    with pytest.raises(RosterUploadParseError):
        parse_upload_file(b"", "roster.csv")
    with pytest.raises(RosterUploadParseError):
        parse_upload_file(b"name,exam1\n", "roster.csv")


def test_invalid_score_cell():
    df = parse_upload_file(b"name,exam1\nAli,abc\n", "roster.csv")
    row = next(df.iterrows())[1]
    with pytest.raises(ValueError):
        parse_roster_row(row)


def test_overflowing_score_cell_is_kept_for_clamping():
    df = parse_upload_file(b"name,exam1,exam2\nAli,1e400,-1e400\n", "roster.csv")
    row = parse_roster_row(next(df.iterrows())[1])
    assert row["exam1"] == float("inf")
    assert row["exam2"] == float("-inf")
