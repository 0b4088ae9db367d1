"""Share link schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from portal.schemas.common import BaseSchema
from portal.schemas.shoot import ShootPublicResponse


class ShareLinkCreateRequest(BaseModel):
    """Issue a share link. ttl_hours is floored to whole hours and clamped server-side."""

    shoot_id: str = Field(..., min_length=1, max_length=100)
    ttl_hours: float | None = None

    @field_validator("shoot_id")
    @classmethod
    def strip_shoot_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("shoot_id is required")
        return v


class ShareLinkCreateResponse(BaseModel):
    """Returned once; the plaintext token only ever appears in share_url."""

    id: str
    share_url: str
    expires_at: datetime


class ShareLinkResolveRequest(BaseModel):
    shoot_id: str = Field(..., min_length=1, max_length=100)
    token: str = Field(..., min_length=1, max_length=256)


class ShareLinkResolveResponse(BaseModel):
    shoot: ShootPublicResponse
    expires_at: datetime


class ShareLinkResponse(BaseSchema):
    """Share link metadata for producers (never the hash or token)."""

    id: str
    shoot_id: str
    expires_at: datetime
    revoked: bool
    revoked_at: datetime | None = None
    created_by_email: str | None = None
    created_at: datetime
