import pytest

from hallpass.core.exceptions import UploadError, ValidationError
from hallpass.schemas.student import ColumnMapping
from hallpass.services.importer import (
    auto_detect_columns,
    generate_template,
    parse_upload,
    require_mapped_columns,
)


def test_detect_columns_from_template_headers():
    mapping = auto_detect_columns(["Student Name", "Student ID", "Grade", "Gender", "Course"])
    assert mapping == ColumnMapping(name=0, student_id=1, grade=2, gender=3, course=4)


def test_detect_columns_alternate_headers():
    mapping = auto_detect_columns(["ID", "Name", "Grade Level", "Sex", "Class Period"])
    assert mapping == ColumnMapping(name=1, student_id=0, grade=2, gender=3, course=4)


def test_detect_columns_leaves_unknown_unmapped():
    mapping = auto_detect_columns(["Name", "Email"])
    assert mapping.name == 0
    assert mapping.student_id is None
    with pytest.raises(ValidationError) as exc_info:
        require_mapped_columns(mapping)
    assert exc_info.value.details["missing_columns"] == ["Student ID", "Grade"]


def test_parse_csv_upload():
    content = "\ufeffName,Student ID,Grade\nAda, 1 ,10\n".encode("utf-8")
    assert parse_upload(content, "roster.CSV") == [["Name", "Student ID", "Grade"], ["Ada", "1", "10"]]


def test_parse_empty_csv():
    with pytest.raises(ValidationError):
        parse_upload(b"\n\n", "roster.csv")


def test_unsupported_extension():
    with pytest.raises(UploadError):
        parse_upload(b"whatever", "roster.txt")


def test_template_round_trips_through_xlsx_parser():
    rows = parse_upload(generate_template(), "template.xlsx")
    assert rows[0] == ["Name", "Student ID", "Grade", "Gender", "Course"]
    assert rows[1][1] == "100234"


def test_invalid_xlsx():
    with pytest.raises(UploadError):
        parse_upload(b"not a workbook", "roster.xlsx")
