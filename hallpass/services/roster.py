"""Roster management: add/edit/delete students and best-effort bulk import."""

import logging
from collections.abc import Sequence
from datetime import datetime

from hallpass.core.exceptions import DuplicateKeyError, ValidationError
from hallpass.schemas.student import (
    ColumnMapping,
    ImportRowError,
    StudentImportResult,
    StudentInput,
    StudentRecord,
)
from hallpass.services.period import now_local
from hallpass.services.store import SignoutStore

logger = logging.getLogger(__name__)

# (field, label) pairs that must be non-empty after trimming
REQUIRED_FIELDS = (
    ("name", "Name"),
    ("student_id", "Student ID"),
    ("grade", "Grade"),
)


def _missing_message(labels: Sequence[str]) -> str:
    if len(labels) == 1:
        return f"{labels[0]} is required"
    return f"{', '.join(labels)} are required"


def _cell(row: Sequence[str | None], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    value = row[index]
    return str(value).strip() if value is not None else ""


class RosterManager:
    """Create/update/delete roster records; natural-key uniqueness lives here."""

    def __init__(self, store: SignoutStore):
        self.store = store

    def list_students(self) -> list[StudentRecord]:
        """All students sorted by name."""
        return sorted(self.store.get_all_students(), key=lambda s: (s.name.lower(), s.student_id))

    def create_or_update(self, fields: StudentInput, *, now: datetime | None = None) -> StudentRecord:
        now = now or now_local()
        values = {
            "name": (fields.name or "").strip(),
            "student_id": (fields.student_id or "").strip(),
            "grade": (fields.grade or "").strip(),
            "gender": (fields.gender or "").strip(),
            "course": (fields.course or "").strip(),
        }

        missing = [field for field, _ in REQUIRED_FIELDS if not values[field]]
        if missing:
            labels = [label for field, label in REQUIRED_FIELDS if field in missing]
            raise ValidationError(_missing_message(labels), details={"missing_fields": missing})

        holder = self.store.find_student_by_natural_id(values["student_id"])

        if fields.id:
            current = self.store.get_student(fields.id)
            if holder and holder.id != current.id:
                raise DuplicateKeyError(values["student_id"])
            student = current.model_copy(update={**values, "updated_at": now})
            saved = self.store.save_student(student)
            logger.info("Student %s updated", saved.student_id)
            return saved

        if holder:
            raise DuplicateKeyError(values["student_id"])

        student = StudentRecord(
            **values,
            is_signed_out=False,
            sign_out_time=None,
            sign_out_destination=None,
            sign_out_reason="",
            created_at=now,
            updated_at=now,
        )
        saved = self.store.save_student(student)
        logger.info("Student %s created", saved.student_id)
        return saved

    def delete(self, internal_id: str) -> bool:
        """Hard delete; the student's ledger history stays."""
        deleted = self.store.delete_student(internal_id)
        if deleted:
            logger.info("Student %s deleted", internal_id)
        return deleted

    def bulk_import(
        self,
        rows: Sequence[Sequence[str | None]],
        mapping: ColumnMapping,
        skip_count: int = 1,
        *,
        now: datetime | None = None,
    ) -> StudentImportResult:
        """Import every valid row; invalid rows are reported, not fatal.

        Row numbers are 1-based positions in ``rows``. Existing students keep
        their sign-out state; only roster fields are refreshed.
        """
        now = now or now_local()
        to_save: dict[str, StudentRecord] = {}
        errors: list[ImportRowError] = []
        total = 0
        successful = 0

        for index in range(max(skip_count, 0), len(rows)):
            row = rows[index] or []
            if all(not str(c if c is not None else "").strip() for c in row):
                continue

            total += 1
            row_number = index + 1
            name = _cell(row, mapping.name)
            student_id = _cell(row, mapping.student_id)
            grade = _cell(row, mapping.grade)
            gender = _cell(row, mapping.gender)
            course = _cell(row, mapping.course)

            present = {"name": name, "student_id": student_id, "grade": grade}
            missing = [label for field, label in REQUIRED_FIELDS if not present[field]]
            if missing:
                errors.append(ImportRowError(row=row_number, message=_missing_message(missing)))
                continue

            existing = to_save.get(student_id) or self.store.find_student_by_natural_id(student_id)
            if existing:
                student = existing.model_copy(
                    update={
                        "name": name,
                        "grade": grade,
                        "gender": gender or existing.gender or "",
                        "course": course or existing.course or "",
                        "updated_at": now,
                    }
                )
            else:
                student = StudentRecord(
                    student_id=student_id,
                    name=name,
                    grade=grade,
                    gender=gender,
                    course=course,
                    created_at=now,
                    updated_at=now,
                )
            to_save[student_id] = student
            successful += 1

        for error in errors:
            logger.warning("Import skipped %s", error)

        if not to_save:
            raise ValidationError(
                "No valid student data found.",
                details={"errors": [str(e) for e in errors]},
            )

        self.store.batch_save_students(list(to_save.values()))

        message = f"Imported {successful} of {total} students."
        if errors:
            message += f" {len(errors)} rows failed."
        logger.info(message)

        return StudentImportResult(
            total_rows=total,
            successful_rows=successful,
            failed_rows=len(errors),
            errors=errors,
            message=message,
        )
