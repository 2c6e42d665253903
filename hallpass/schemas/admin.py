"""Admin session schemas."""

from pydantic import Field

from hallpass.schemas.common import BaseSchema


class AdminLoginRequest(BaseSchema):
    """Admin password submitted to enter admin mode."""

    password: str = Field(..., min_length=1)


class AdminStatus(BaseSchema):
    """Whether the application session is in admin mode."""

    is_admin: bool
