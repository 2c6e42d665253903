"""Roster file parsing, column auto-detection and the Excel template."""

import csv
from collections.abc import Sequence
from io import BytesIO, StringIO
from pathlib import PurePath

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font

from hallpass.core.exceptions import UploadError, ValidationError
from hallpass.schemas.student import ColumnMapping

# (field, header, required)
ROSTER_TEMPLATE_COLUMNS = [
    ("name", "Name", True),
    ("student_id", "Student ID", True),
    ("grade", "Grade", True),
    ("gender", "Gender", False),
    ("course", "Course", False),
]


def _cell_text(value) -> str:
    if value is None:
        return ""
    # Excel hands back 10.0 for a cell typed as 10
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_csv(content: bytes) -> list[list[str]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise UploadError("CSV file must be UTF-8 encoded", details={"error": str(e)})
    return [[cell.strip() for cell in row] for row in csv.reader(StringIO(text))]


def parse_xlsx(content: bytes) -> list[list[str]]:
    try:
        wb = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise UploadError(f"Invalid Excel file: {str(e)}")
    try:
        ws = wb.active
        return [[_cell_text(v) for v in row] for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def parse_upload(content: bytes, filename: str) -> list[list[str]]:
    """Turn an uploaded .csv or .xlsx roster into rows of strings."""
    suffix = PurePath(filename).suffix.lower()
    if suffix == ".csv":
        rows = parse_csv(content)
    elif suffix == ".xlsx":
        rows = parse_xlsx(content)
    else:
        raise UploadError("Only .csv and .xlsx files are allowed", details={"file_name": filename})

    if not any(any(cell for cell in row) for row in rows):
        raise ValidationError("CSV is empty.")
    return rows


def auto_detect_columns(headers: Sequence[str]) -> ColumnMapping:
    """Guess the column for each roster field from header text.

    The first matching header wins for each field.
    """
    detected: dict[str, int | None] = {
        "name": None,
        "student_id": None,
        "grade": None,
        "gender": None,
        "course": None,
    }

    for idx, header in enumerate(headers):
        h = str(header or "").strip().lower()
        if not h:
            continue
        if detected["student_id"] is None and (
            h == "id" or "studentid" in h or "student id" in h or "student_id" in h
        ):
            detected["student_id"] = idx
            continue
        if detected["name"] is None and ("name" in h or "student" in h):
            detected["name"] = idx
        if detected["grade"] is None and "grade" in h:
            detected["grade"] = idx
        if detected["gender"] is None and ("gender" in h or "sex" in h):
            detected["gender"] = idx
        if detected["course"] is None and ("course" in h or "class" in h or "period" in h):
            detected["course"] = idx

    return ColumnMapping(**detected)


def require_mapped_columns(mapping: ColumnMapping) -> None:
    """Raise unless name, student id and grade all have a column."""
    missing = [
        header
        for field, header, required in ROSTER_TEMPLATE_COLUMNS
        if required and getattr(mapping, field) is None
    ]
    if missing:
        raise ValidationError(
            f"Missing required columns: {', '.join(missing)}",
            details={"missing_columns": missing},
        )


def generate_template() -> bytes:
    """Generate Excel template for roster import."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Students"

    headers = [col[1] for col in ROSTER_TEMPLATE_COLUMNS]
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)

    sample_data = ["Jane Doe", "100234", "10", "F", "Biology - P3"]
    for col_idx, value in enumerate(sample_data, start=1):
        ws.cell(row=2, column=col_idx, value=value)

    column_widths = [25, 15, 10, 10, 25]
    for col_idx, width in enumerate(column_widths, start=1):
        ws.column_dimensions[chr(64 + col_idx)].width = width

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()
