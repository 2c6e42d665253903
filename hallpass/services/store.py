"""Persistent store for the roster and the sign-out ledger."""

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from itertools import islice
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Engine, and_, delete, or_, select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from hallpass.core.database import build_engine, build_session_factory
from hallpass.core.exceptions import DuplicateKeyError, NotFoundError, StorageError
from hallpass.models.base import new_internal_id
from hallpass.models.ledger import LedgerEntry
from hallpass.models.student import Student
from hallpass.schemas.ledger import LedgerEntryRecord
from hallpass.schemas.student import StudentRecord
from hallpass.services.period import now_local

logger = logging.getLogger(__name__)

ALEMBIC_DIR = Path(__file__).resolve().parents[2] / "alembic"

STUDENT_FIELDS = (
    "student_id",
    "name",
    "grade",
    "gender",
    "course",
    "is_signed_out",
    "sign_out_time",
    "sign_out_destination",
    "sign_out_reason",
    "created_at",
    "updated_at",
)

LEDGER_PAGE_SIZE = 200


def _is_unique_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig).lower()
    return "unique" in text or "duplicate" in text


class SignoutStore:
    """Durable students / ledger_entries collections.

    Every public call runs in its own transaction under a process-wide lock and
    returns detached pydantic copies, never ORM instances.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = build_session_factory(engine)
        self._lock = threading.RLock()

    @contextmanager
    def _session(self, operation: str, duplicate_key: str | None = None) -> Iterator[Session]:
        with self._lock:
            session = self._session_factory()
            try:
                yield session
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                if duplicate_key is not None and _is_unique_violation(exc):
                    raise DuplicateKeyError(duplicate_key) from exc
                logger.exception("Integrity failure during %s", operation)
                raise StorageError(
                    f"Could not {operation}",
                    details={"operation": operation},
                ) from exc
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("Storage failure during %s", operation)
                raise StorageError(
                    f"Could not {operation}",
                    details={"operation": operation},
                ) from exc
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    # ---------------- Schema ----------------

    def migrate(self) -> str | None:
        """Upgrade the schema to the newest revision; returns that revision."""
        cfg = Config()
        cfg.set_main_option("script_location", str(ALEMBIC_DIR))
        try:
            with self._lock, self.engine.begin() as connection:
                cfg.attributes["connection"] = connection
                command.upgrade(cfg, "head")
        except SQLAlchemyError as exc:
            logger.exception("Schema migration failed")
            raise StorageError("Could not migrate schema") from exc
        return self.schema_revision()

    def schema_revision(self) -> str | None:
        """Current schema revision id (None for an empty database)."""
        try:
            with self.engine.connect() as connection:
                return MigrationContext.configure(connection).get_current_revision()
        except SQLAlchemyError as exc:
            raise StorageError("Could not read schema revision") from exc

    # ---------------- Students ----------------

    def get_all_students(self) -> list[StudentRecord]:
        with self._session("load students") as session:
            rows = session.execute(select(Student)).scalars().all()
            return [StudentRecord.model_validate(s) for s in rows]

    def get_student(self, internal_id: str) -> StudentRecord:
        with self._session("load student") as session:
            student = session.get(Student, internal_id)
            if not student:
                raise NotFoundError("Student", internal_id)
            return StudentRecord.model_validate(student)

    def find_student_by_natural_id(self, student_id: str) -> StudentRecord | None:
        with self._session("look up student") as session:
            student = session.execute(
                select(Student).where(Student.student_id == student_id)
            ).scalar_one_or_none()
            return StudentRecord.model_validate(student) if student else None

    def get_student_by_natural_id(self, student_id: str) -> StudentRecord:
        student = self.find_student_by_natural_id(student_id)
        if not student:
            raise NotFoundError("Student", student_id)
        return student

    def _apply_student(self, session: Session, record: StudentRecord) -> Student:
        if record.id is None:
            record.id = new_internal_id()
        now = now_local()
        if record.created_at is None:
            record.created_at = now
        if record.updated_at is None:
            record.updated_at = now

        student = session.get(Student, record.id)
        if student is None:
            student = Student(id=record.id)
            session.add(student)
        for field in STUDENT_FIELDS:
            setattr(student, field, getattr(record, field))
        return student

    def save_student(self, record: StudentRecord) -> StudentRecord:
        """Upsert by internal id."""
        record = record.model_copy()
        with self._session("save student", duplicate_key=record.student_id) as session:
            student = self._apply_student(session, record)
            session.flush()
            return StudentRecord.model_validate(student)

    def batch_save_students(self, records: Iterable[StudentRecord]) -> int:
        """Upsert every record in one transaction; returns the number written."""
        records = [r.model_copy() for r in records]
        if not records:
            return 0
        with self._session("save students", duplicate_key="batch") as session:
            for record in records:
                self._apply_student(session, record)
        logger.info("Saved %d students", len(records))
        return len(records)

    def delete_student(self, internal_id: str) -> bool:
        """Hard delete; deleting a missing id is not an error. Ledger rows are kept."""
        with self._session("delete student") as session:
            result = session.execute(delete(Student).where(Student.id == internal_id))
            return result.rowcount > 0

    def get_active_signouts(self) -> list[StudentRecord]:
        with self._session("load active sign-outs") as session:
            rows = session.execute(
                select(Student).where(Student.is_signed_out.is_(True))
            ).scalars().all()
            return [StudentRecord.model_validate(s) for s in rows]

    # ---------------- Ledger ----------------

    @staticmethod
    def _new_ledger_row(entry: LedgerEntryRecord) -> LedgerEntry:
        if entry.id is not None:
            raise ValueError("Ledger entries are write-once; this entry already has an id")
        return LedgerEntry(
            student_id=entry.student_id,
            student_name=entry.student_name,
            type=entry.type,
            destination=entry.destination,
            reason=entry.reason,
            override=entry.override,
            timestamp=entry.timestamp,
            date=entry.date,
        )

    def append_ledger_entry(self, entry: LedgerEntryRecord) -> LedgerEntryRecord:
        row = self._new_ledger_row(entry)
        with self._session("append ledger entry") as session:
            session.add(row)
            session.flush()
            return LedgerEntryRecord.model_validate(row)

    def commit_transition(
        self,
        student: StudentRecord,
        entry: LedgerEntryRecord,
    ) -> tuple[StudentRecord, LedgerEntryRecord]:
        """Write a roster update and its ledger entry atomically."""
        student = student.model_copy()
        row = self._new_ledger_row(entry)
        with self._session("record transition", duplicate_key=student.student_id) as session:
            orm_student = self._apply_student(session, student)
            session.add(row)
            session.flush()
            return (
                StudentRecord.model_validate(orm_student),
                LedgerEntryRecord.model_validate(row),
            )

    def _ledger_page(
        self,
        *,
        newest_first: bool,
        after: tuple[datetime, int] | None,
        student_id: str | None,
        start: datetime | None,
        end: datetime | None,
        page_size: int,
    ) -> list[LedgerEntryRecord]:
        query = select(LedgerEntry)
        if student_id is not None:
            query = query.where(LedgerEntry.student_id == student_id)
        if start is not None:
            query = query.where(LedgerEntry.timestamp >= start)
        if end is not None:
            query = query.where(LedgerEntry.timestamp <= end)

        if after is not None:
            ts, last_id = after
            if newest_first:
                query = query.where(
                    or_(
                        LedgerEntry.timestamp < ts,
                        and_(LedgerEntry.timestamp == ts, LedgerEntry.id < last_id),
                    )
                )
            else:
                query = query.where(
                    or_(
                        LedgerEntry.timestamp > ts,
                        and_(LedgerEntry.timestamp == ts, LedgerEntry.id > last_id),
                    )
                )

        if newest_first:
            query = query.order_by(LedgerEntry.timestamp.desc(), LedgerEntry.id.desc())
        else:
            query = query.order_by(LedgerEntry.timestamp.asc(), LedgerEntry.id.asc())

        with self._session("read ledger") as session:
            rows = session.execute(query.limit(page_size)).scalars().all()
            return [LedgerEntryRecord.model_validate(r) for r in rows]

    def iter_ledger(
        self,
        *,
        newest_first: bool = False,
        student_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        page_size: int = LEDGER_PAGE_SIZE,
    ) -> Iterator[LedgerEntryRecord]:
        """Lazily walk ledger entries in (timestamp, id) order.

        Each call starts a fresh scan; pages are fetched in separate short
        transactions so a slow consumer never holds the store lock.
        """
        after: tuple[datetime, int] | None = None
        while True:
            page = self._ledger_page(
                newest_first=newest_first,
                after=after,
                student_id=student_id,
                start=start,
                end=end,
                page_size=page_size,
            )
            if not page:
                return
            yield from page
            if len(page) < page_size:
                return
            last = page[-1]
            after = (last.timestamp, last.id)

    def get_recent_ledger_entries(self, limit: int = 10) -> list[LedgerEntryRecord]:
        """Newest-first; ties on timestamp go to the later insertion."""
        if limit <= 0:
            return []
        return list(islice(self.iter_ledger(newest_first=True, page_size=limit), limit))

    def get_ledger_entries_for_student_in_range(
        self,
        student_id: str,
        start_inclusive: datetime,
        end_inclusive: datetime,
    ) -> list[LedgerEntryRecord]:
        return list(
            self.iter_ledger(student_id=student_id, start=start_inclusive, end=end_inclusive)
        )

    # ---------------- Maintenance ----------------

    def reset_all(self) -> None:
        """Wipe both collections. Operator/debug use only."""
        try:
            with self._session("reset storage") as session:
                session.execute(delete(LedgerEntry))
                session.execute(delete(Student))
        except StorageError as exc:
            if isinstance(exc.__cause__, OperationalError):
                raise StorageError(
                    "Storage is in use elsewhere and could not be cleared. "
                    "Close other sessions using this database and try again.",
                    details={"operation": "reset storage"},
                ) from exc.__cause__
            raise
        logger.warning("All students and ledger entries were deleted")


def init_store(database_url: str, *, echo: bool = False) -> SignoutStore:
    """Open the store and bring its schema up to date.

    Failure here is fatal for the application.
    """
    try:
        engine = build_engine(database_url, echo=echo)
    except SQLAlchemyError as exc:
        raise StorageError("Could not open storage", details={"url": database_url}) from exc
    store = SignoutStore(engine)
    revision = store.migrate()
    logger.info("Store ready (schema revision %s)", revision)
    return store
