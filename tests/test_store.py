from datetime import datetime, timedelta

import pytest

from hallpass.core.exceptions import DuplicateKeyError, NotFoundError
from hallpass.models.ledger import LedgerEntryType
from hallpass.schemas.ledger import LedgerEntryRecord
from hallpass.schemas.student import StudentRecord
from hallpass.services.store import SignoutStore

from tests.conftest import NOW


def _entry(student_id, ts, entry_type=LedgerEntryType.SIGNOUT, destination="Bathroom"):
    return LedgerEntryRecord(
        student_id=student_id,
        student_name="Someone",
        type=entry_type,
        destination=destination,
        timestamp=ts,
        date=ts.date(),
    )


def test_init_store_migrates_to_head(store):
    assert store.schema_revision() == "0002_secondary_indexes"


def test_migrate_is_idempotent_and_keeps_data(store, student):
    SignoutStore(store.engine).migrate()
    assert store.get_student_by_natural_id("1001").name == "Ada Lovelace"


def test_save_assigns_internal_id(store):
    saved = store.save_student(StudentRecord(student_id="9", name="Cy", grade="9"))
    assert saved.id
    assert store.get_student(saved.id).student_id == "9"


def test_returned_records_are_copies(store, student):
    copy = store.get_student(student.id)
    copy.name = "Changed"
    assert store.get_student(student.id).name == "Ada Lovelace"


def test_unique_index_rejects_duplicate_natural_id(store, student):
    with pytest.raises(DuplicateKeyError):
        store.save_student(StudentRecord(student_id="1001", name="Other", grade="9"))


def test_missing_student_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.get_student("nope")
    with pytest.raises(NotFoundError):
        store.get_student_by_natural_id("nope")
    assert store.find_student_by_natural_id("nope") is None


def test_delete_is_idempotent_and_keeps_ledger(store, student):
    store.append_ledger_entry(_entry("1001", NOW))
    assert store.delete_student(student.id) is True
    assert store.delete_student(student.id) is False
    assert [e.student_id for e in store.get_recent_ledger_entries()] == ["1001"]


def test_batch_save_returns_count(store):
    records = [StudentRecord(student_id=str(i), name=f"S{i}", grade="9") for i in range(5)]
    assert store.batch_save_students(records) == 5
    assert len(store.get_all_students()) == 5
    assert store.batch_save_students([]) == 0


def test_ledger_entries_are_write_once(store):
    saved = store.append_ledger_entry(_entry("1001", NOW))
    with pytest.raises(ValueError):
        store.append_ledger_entry(saved)


def test_recent_is_newest_first_with_insertion_tiebreak(store):
    first = store.append_ledger_entry(_entry("a", NOW))
    second = store.append_ledger_entry(_entry("b", NOW))
    older = store.append_ledger_entry(_entry("c", NOW - timedelta(hours=1)))

    recent = store.get_recent_ledger_entries(10)
    assert [e.id for e in recent] == [second.id, first.id, older.id]
    assert len(store.get_recent_ledger_entries(2)) == 2
    assert store.get_recent_ledger_entries(0) == []


def test_range_query_is_inclusive(store):
    start = datetime(2025, 8, 1)
    end = datetime(2025, 10, 15, 23, 59, 59, 999999)
    store.append_ledger_entry(_entry("1001", start))
    store.append_ledger_entry(_entry("1001", end))
    store.append_ledger_entry(_entry("1001", end + timedelta(microseconds=1)))
    store.append_ledger_entry(_entry("2002", NOW))

    entries = store.get_ledger_entries_for_student_in_range("1001", start, end)
    assert [e.timestamp for e in entries] == [start, end]


def test_iter_ledger_pages_through_everything(store):
    for i in range(7):
        store.append_ledger_entry(_entry("1001", NOW + timedelta(minutes=i)))

    walked = list(store.iter_ledger(page_size=3))
    assert len(walked) == 7
    assert walked == sorted(walked, key=lambda e: (e.timestamp, e.id))
    # restartable
    assert len(list(store.iter_ledger(page_size=3))) == 7


def test_commit_transition_writes_both(store, student):
    updated = student.model_copy(
        update={"is_signed_out": True, "sign_out_time": NOW, "sign_out_destination": "Nurse"}
    )
    saved, entry = store.commit_transition(updated, _entry("1001", NOW, destination="Nurse"))
    assert saved.is_signed_out
    assert entry.id is not None
    assert [e.id for e in store.get_active_signouts()] == [student.id]


def test_reset_all_clears_everything(store, student):
    store.append_ledger_entry(_entry("1001", NOW))
    store.reset_all()
    assert store.get_all_students() == []
    assert store.get_recent_ledger_entries() == []
