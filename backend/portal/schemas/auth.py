"""Authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class PinLoginRequest(BaseModel):
    """Producer PIN entry (numeric, up to 4 digits)."""

    pin: str = Field(..., min_length=1, max_length=4, pattern=r"^\d+$")


class PinStatusResponse(BaseModel):
    """State of the PIN gate for the calling browser."""

    authenticated: bool
    locked: bool = False
    remaining_attempts: int
    lockout_seconds: int | None = None
    session_expires_at: datetime | None = None


class ProducerInfo(BaseModel):
    """Producer credentials behind the current request.

    email is null for PIN sessions.
    """

    email: str | None = None
    via_pin: bool = False
