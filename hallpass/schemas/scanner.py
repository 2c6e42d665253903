"""Scanner schemas."""

from typing import Literal

from pydantic import Field

from hallpass.schemas.common import BaseSchema
from hallpass.schemas.signout import SignInOutcome, SignOutOutcome
from hallpass.schemas.student import StudentRecord


class ScanRequest(BaseSchema):
    """Raw value read by a barcode/badge scanner."""

    scanned_id: str = Field(..., min_length=1)


class ScanResult(BaseSchema):
    """What the scanner collaborator did with a scan."""

    mode: Literal["select", "toggle"]
    action: Literal["selected", "signed_in", "signed_out", "override_required"]
    student: StudentRecord
    sign_out: SignOutOutcome | None = None
    sign_in: SignInOutcome | None = None
