import pytest

from hallpass.core.exceptions import DuplicateKeyError, ValidationError
from hallpass.schemas.student import ColumnMapping, StudentInput

from tests.conftest import NOW

MAPPING = ColumnMapping(name=0, student_id=1, grade=2, gender=3, course=4)


def test_create_trims_fields(roster):
    saved = roster.create_or_update(StudentInput(name="  Ada ", student_id=" 7 ", grade="10"))
    assert (saved.name, saved.student_id, saved.grade) == ("Ada", "7", "10")
    assert saved.state == "IN"


def test_missing_required_fields_are_all_reported(roster, store):
    with pytest.raises(ValidationError) as exc_info:
        roster.create_or_update(StudentInput(name="Ada"))
    assert exc_info.value.message == "Student ID, Grade are required"
    assert exc_info.value.details["missing_fields"] == ["student_id", "grade"]
    assert store.get_all_students() == []


def test_duplicate_natural_id_is_rejected(roster, student):
    with pytest.raises(DuplicateKeyError):
        roster.create_or_update(StudentInput(name="Other", student_id="1001", grade="9"))


def test_edit_keeps_sign_out_state(roster, machine, student):
    machine.sign_out("1001", "Nurse", now=NOW)
    edited = roster.create_or_update(
        StudentInput(id=student.id, name="Ada King", student_id="1001", grade="11")
    )
    assert edited.name == "Ada King"
    assert edited.is_signed_out
    assert edited.sign_out_destination == "Nurse"


def test_edit_cannot_steal_another_id(roster, student, other_student):
    with pytest.raises(DuplicateKeyError):
        roster.create_or_update(
            StudentInput(id=other_student.id, name="Bob", student_id="1001", grade="11")
        )


def test_list_is_sorted_by_name(roster, student, other_student):
    roster.create_or_update(StudentInput(name="aaron", student_id="1003", grade="9"))
    assert [s.name for s in roster.list_students()] == ["aaron", "Ada Lovelace", "Bob Babbage"]


def test_bulk_import_reports_bad_rows(roster, store):
    rows = [
        ["Ada", "1", "10", "F", "Math"],
        ["Bob", "", "11", "M", "Art"],
        ["Cy", "3", "9", "", ""],
    ]
    result = roster.bulk_import(rows, MAPPING, skip_count=0)

    assert result.successful_rows == 2
    assert result.failed_rows == 1
    assert str(result.errors[0]) == "Row 2: Student ID is required"
    assert result.message == "Imported 2 of 3 students. 1 rows failed."
    assert sorted(s.student_id for s in store.get_all_students()) == ["1", "3"]


def test_bulk_import_skips_header_and_blank_rows(roster, store):
    rows = [
        ["Name", "Student ID", "Grade", "Gender", "Course"],
        ["Ada", "1", "10", "F", "Math"],
        ["", "  ", "", "", ""],
        [],
    ]
    result = roster.bulk_import(rows, MAPPING)
    assert result.total_rows == 1
    assert result.successful_rows == 1
    assert result.errors == []


def test_reimport_updates_fields_but_not_state(roster, machine, store, student):
    machine.sign_out("1001", "Nurse", now=NOW)

    roster.bulk_import([["Ada L.", "1001", "11", "F", ""]], MAPPING, skip_count=0)

    updated = store.get_student_by_natural_id("1001")
    assert updated.name == "Ada L."
    assert updated.grade == "11"
    assert updated.course == "Math - P1"
    assert updated.is_signed_out
    assert updated.sign_out_destination == "Nurse"
    assert updated.sign_out_time == NOW
    assert len(store.get_all_students()) == 1


def test_same_id_twice_in_one_file_is_merged(roster, store):
    rows = [["Ada", "1", "10"], ["Ada Two", "1", "11"]]
    roster.bulk_import(rows, ColumnMapping(name=0, student_id=1, grade=2), skip_count=0)
    students = store.get_all_students()
    assert len(students) == 1
    assert students[0].name == "Ada Two"


def test_import_without_valid_rows_writes_nothing(roster, store):
    with pytest.raises(ValidationError) as exc_info:
        roster.bulk_import([["Ada", "", ""]], MAPPING, skip_count=0)
    assert exc_info.value.message == "No valid student data found."
    assert store.get_all_students() == []


def test_delete(roster, store, student):
    assert roster.delete(student.id) is True
    assert roster.delete(student.id) is False
    assert store.find_student_by_natural_id("1001") is None
