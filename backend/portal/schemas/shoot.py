"""Shoot schemas."""

import re
from datetime import datetime
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, EmailStr, Field, field_validator

from portal.schemas.common import BaseSchema
from portal.workflow.phases import Phase
from portal.workflow.status import PhotoStatus, ProjectType, ShootStatus, VideoStatus

# Schemes that must never be rendered as links
DANGEROUS_URL_PATTERN = re.compile(r"^\s*(javascript|data|vbscript|file):", re.IGNORECASE)

SHOOT_ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]{0,99}$"

URL_FIELDS = (
    "cover_image",
    "location_map_url",
    "moodboard_url",
    "call_sheet_url",
    "styling_url",
    "photo_selection_url",
    "selected_photos_url",
    "final_photos_url",
    "video_url",
)


def is_valid_url(url: str) -> bool:
    """Empty is allowed (optional field); otherwise http(s) only."""
    if not url:
        return True
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def sanitize_url(url: str | None) -> str:
    """Strip whitespace and drop script/data/file URLs entirely."""
    if not url:
        return ""
    if DANGEROUS_URL_PATTERN.match(url):
        return ""
    return url.strip()


def is_valid_phone(phone: str | None) -> bool:
    """Optional field; at least 7 digits when given."""
    if not phone:
        return True
    return len(re.sub(r"\D", "", phone)) >= 7


def _check_url(value: str | None) -> str | None:
    if value is None:
        return None
    if DANGEROUS_URL_PATTERN.match(value):
        raise ValueError("URL scheme is not allowed")
    value = value.strip()
    if not is_valid_url(value):
        raise ValueError("must be an http(s) URL")
    return value


class TeamMember(BaseModel):
    role: str = Field(..., max_length=100)
    name: str = Field(..., max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        return v or None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        if not is_valid_phone(v):
            raise ValueError("phone number must contain at least 7 digits")
        return v


class TalentSizes(BaseModel):
    height: str | None = None
    clothing: str | None = None
    shoes: str | None = None


class Talent(BaseModel):
    """Model, actor or other person being photographed."""

    name: str = Field(..., max_length=255)
    role: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=50)
    email: EmailStr | None = None
    agency_url: str | None = None
    photo: str | None = None
    arrival_time: str | None = Field(None, max_length=20)
    sizes: TalentSizes | None = None
    notes: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        return v or None

    @field_validator("agency_url", "photo")
    @classmethod
    def validate_urls(cls, v: str | None) -> str | None:
        return _check_url(v)


class TimelineEvent(BaseModel):
    time: str = Field(..., max_length=20)
    activity: str = Field(..., max_length=500)


class Document(BaseModel):
    """Producer-only attachment (contract, release, permit)."""

    name: str = Field(..., max_length=255)
    type: Literal["client_contract", "model_release", "location_permit", "nda", "other"] = "other"
    url: str

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return _check_url(v)


class ShootFields(BaseModel):
    """Editable shoot fields shared by create and update."""

    project_type: str | None = None
    status: str | None = None
    # Raw values accepted, legacy vocabularies included; normalized on save
    photo_status: str | None = None
    video_status: str | None = None

    client_email: EmailStr | None = None
    start_time: str | None = Field(None, max_length=20)
    end_time: str | None = Field(None, max_length=20)
    description: str | None = None
    cover_image: str | None = None

    location_name: str | None = Field(None, max_length=255)
    location_address: str | None = Field(None, max_length=500)
    location_map_url: str | None = None

    moodboard_url: str | None = None
    moodboard_images: list[str] | None = None
    call_sheet_url: str | None = None
    styling_url: str | None = None
    styling_notes: str | None = None
    hair_makeup_notes: str | None = None

    photo_selection_url: str | None = None
    selected_photos_url: str | None = None
    final_photos_url: str | None = None
    video_url: str | None = None
    revision_notes: str | None = None

    team: list[TeamMember] | None = None
    talent: list[Talent] | None = None
    timeline: list[TimelineEvent] | None = None
    documents: list[Document] | None = None

    @field_validator("client_email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        return v or None

    @field_validator(*URL_FIELDS)
    @classmethod
    def validate_urls(cls, v: str | None) -> str | None:
        return _check_url(v)

    @field_validator("moodboard_images")
    @classmethod
    def validate_moodboard_images(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return None
        return [_check_url(url) for url in v if url]


class ShootCreate(ShootFields):
    """Create a shoot. The access token is always generated server-side."""

    id: str | None = Field(None, pattern=SHOOT_ID_PATTERN)
    title: str = Field(..., max_length=255)
    client: str = Field(..., max_length=255)
    date: str = Field(..., max_length=20)

    @field_validator("title", "client", "date")
    @classmethod
    def required_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("is required")
        return v


class ShootUpdate(ShootFields):
    """Partial update; only fields present in the request are changed."""

    title: str | None = Field(None, max_length=255)
    client: str | None = Field(None, max_length=255)
    date: str | None = Field(None, max_length=20)

    @field_validator("title", "client", "date")
    @classmethod
    def required_not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ShootPublicResponse(BaseSchema):
    """What a client viewer may see.

    Excludes the access token, client e-mail, producer documents and the
    IP recorded at terms acceptance.
    """

    id: str
    project_type: ProjectType
    status: ShootStatus
    photo_status: PhotoStatus | None = None
    video_status: VideoStatus | None = None

    title: str
    client: str
    date: str
    start_time: str
    end_time: str
    description: str
    cover_image: str

    location_name: str
    location_address: str
    location_map_url: str

    moodboard_url: str
    moodboard_images: list[str]
    call_sheet_url: str
    styling_url: str
    styling_notes: str
    hair_makeup_notes: str

    photo_selection_url: str
    selected_photos_url: str
    final_photos_url: str
    video_url: str
    revision_notes: str

    team: list[dict]
    talent: list[dict]
    timeline: list[dict]

    client_accepted_terms: bool
    terms_accepted_at: datetime | None = None


class ShootAdminResponse(ShootPublicResponse):
    """Full shoot record for producers."""

    access_token: str
    client_email: str | None = None
    documents: list[dict]
    terms_accepted_ip: str | None = None
    created_at: datetime
    updated_at: datetime


class PhaseInfo(BaseModel):
    visible: list[Phase]
    default: Phase


class ShootViewResponse(BaseModel):
    """Client-facing shoot page payload."""

    shoot: ShootPublicResponse
    phases: PhaseInfo
    # Set when access was granted through a share link
    expires_at: datetime | None = None


class AcceptTermsRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=256)


class AcceptTermsResponse(BaseModel):
    client_accepted_terms: bool
    terms_accepted_at: datetime
