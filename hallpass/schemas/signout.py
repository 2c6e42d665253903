"""Sign-out / sign-in schemas."""

from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field

from hallpass.schemas.common import BaseSchema
from hallpass.schemas.ledger import LedgerEntryRecord
from hallpass.schemas.student import StudentRecord


class SignOutRequest(BaseSchema):
    """Sign a student out to a destination."""

    student_id: str = Field(..., min_length=1, description="Natural student id")
    destination: str = Field(..., min_length=1, max_length=100)
    reason: str = ""


class SignInRequest(BaseSchema):
    """Sign a student back in."""

    student_id: str = Field(..., min_length=1, description="Natural student id")


class OverrideConfirmRequest(BaseSchema):
    """Teacher PIN submitted for the pending override."""

    model_config = ConfigDict(str_strip_whitespace=False)

    pin: str = ""


class PendingOverride(BaseSchema):
    """Sign-out held back until a teacher PIN is supplied."""

    student: StudentRecord
    destination: str
    reason: str = ""
    pass_count: int
    requested_at: datetime


class SignOutOutcome(BaseSchema):
    """Result of a sign-out attempt or override confirmation."""

    status: Literal["signed_out", "override_required"]
    student: StudentRecord
    entry: LedgerEntryRecord | None = None
    pending: PendingOverride | None = None
    replaced_pending: str | None = Field(
        None, description="Student id of a pending override this attempt replaced"
    )


class SignInOutcome(BaseSchema):
    """Result of a sign-in."""

    student: StudentRecord
    entry: LedgerEntryRecord


class ActiveSignout(BaseSchema):
    """Row of the currently-out list."""

    student: StudentRecord
    minutes_out: int
