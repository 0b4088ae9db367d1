"""Shoot service.

Status fields are normalized on every write (apply_fields) and again on
every read (to_public_response / to_admin_response), so rows written by
older clients never surface a legacy value.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.errors import ConflictError, NotFoundError
from portal.core.logging_config import format_security_event
from portal.core.security import generate_secure_token
from portal.models.shoot import Shoot
from portal.schemas.shoot import (
    ShootAdminResponse,
    ShootCreate,
    ShootPublicResponse,
    ShootUpdate,
    URL_FIELDS,
    sanitize_url,
)
from portal.workflow.status import (
    normalize_optional_photo_status,
    normalize_optional_video_status,
    normalize_project_type,
    normalize_shoot_status,
)

access_logger = logging.getLogger("security.access")

# Column defaults for rows written before a column existed
FIELD_DEFAULTS: dict[str, Any] = {
    "start_time": "09:00",
    "end_time": "18:00",
    "moodboard_images": [],
    "team": [],
    "talent": [],
    "timeline": [],
    "documents": [],
    "client_accepted_terms": False,
}

LIST_FIELDS = {"moodboard_images", "team", "talent", "timeline", "documents"}

# Never written through create/update
IMMUTABLE_FIELDS = ("id", "access_token", "client_accepted_terms", "terms_accepted_at", "terms_accepted_ip")


def normalize_status_fields(values: dict[str, Any]) -> dict[str, Any]:
    """Normalize whichever status fields are present in values."""
    normalized = dict(values)
    if "project_type" in normalized:
        normalized["project_type"] = normalize_project_type(normalized["project_type"]).value
    if "status" in normalized:
        normalized["status"] = normalize_shoot_status(normalized["status"]).value
    if "photo_status" in normalized:
        photo_status = normalize_optional_photo_status(normalized["photo_status"])
        normalized["photo_status"] = photo_status.value if photo_status else None
    if "video_status" in normalized:
        video_status = normalize_optional_video_status(normalized["video_status"])
        normalized["video_status"] = video_status.value if video_status else None
    return normalized


NULLABLE_FIELDS = {
    "photo_status",
    "video_status",
    "client_email",
    "terms_accepted_at",
    "terms_accepted_ip",
}


def _read_fields(shoot: Shoot, field_names) -> dict[str, Any]:
    data = {}
    for name in field_names:
        value = getattr(shoot, name, None)
        if value is None and name not in NULLABLE_FIELDS:
            # Text columns on legacy rows read as empty strings
            value = FIELD_DEFAULTS.get(name, [] if name in LIST_FIELDS else "")
        data[name] = value
    return normalize_status_fields(data)


def to_public_response(shoot: Shoot) -> ShootPublicResponse:
    """Client-safe view of a shoot with canonical statuses."""
    return ShootPublicResponse.model_validate(
        _read_fields(shoot, ShootPublicResponse.model_fields)
    )


def to_admin_response(shoot: Shoot) -> ShootAdminResponse:
    """Full producer view of a shoot with canonical statuses."""
    return ShootAdminResponse.model_validate(
        _read_fields(shoot, ShootAdminResponse.model_fields)
    )


class ShootService:
    """Service for shoot CRUD and client terms acceptance."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_shoots(self) -> list[Shoot]:
        """All shoots, newest first."""
        result = await self.db.execute(select(Shoot).order_by(Shoot.created_at.desc()))
        return list(result.scalars().all())

    async def get_shoot(self, shoot_id: str) -> Shoot | None:
        result = await self.db.execute(select(Shoot).where(Shoot.id == shoot_id))
        return result.scalar_one_or_none()

    async def get_shoot_or_404(self, shoot_id: str) -> Shoot:
        shoot = await self.get_shoot(shoot_id)
        if shoot is None:
            raise NotFoundError("Shoot", shoot_id)
        return shoot

    def apply_fields(self, shoot: Shoot, values: dict[str, Any]) -> Shoot:
        """Copy editable values onto a shoot, normalizing statuses first.

        The access token and the terms acceptance trail are not editable
        and are ignored if present.
        """
        values = normalize_status_fields(values)
        for name in IMMUTABLE_FIELDS:
            values.pop(name, None)

        for name, value in values.items():
            if name in URL_FIELDS:
                value = sanitize_url(value)
            elif name in LIST_FIELDS and value is None:
                value = []
            elif value is None and name not in ("photo_status", "video_status", "client_email"):
                continue
            setattr(shoot, name, value)
        return shoot

    async def create_shoot(self, data: ShootCreate) -> Shoot:
        """Create a shoot with a freshly generated access token."""
        if data.id and await self.get_shoot(data.id) is not None:
            raise ConflictError(f"Shoot with id '{data.id}' already exists")

        values = data.model_dump(mode="json", exclude_none=True)
        shoot = Shoot(access_token=generate_secure_token())
        if data.id:
            shoot.id = data.id
        self.apply_fields(shoot, values)

        self.db.add(shoot)
        await self.db.commit()
        await self.db.refresh(shoot)
        return shoot

    async def update_shoot(self, shoot_id: str, data: ShootUpdate) -> Shoot:
        """Apply a partial update; only fields sent by the caller change."""
        shoot = await self.get_shoot_or_404(shoot_id)
        self.apply_fields(shoot, data.model_dump(mode="json", exclude_unset=True))
        shoot.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(shoot)
        return shoot

    async def delete_shoot(self, shoot_id: str) -> None:
        """Delete a shoot and, with it, all of its share links."""
        shoot = await self.get_shoot_or_404(shoot_id)
        await self.db.delete(shoot)
        await self.db.commit()

    async def accept_terms(self, shoot: Shoot, ip_address: str | None = None) -> Shoot:
        """Record the client's terms acceptance.

        The first acceptance is kept; repeated calls leave the original
        timestamp and IP untouched.
        """
        if shoot.client_accepted_terms and shoot.terms_accepted_at:
            return shoot

        shoot.client_accepted_terms = True
        shoot.terms_accepted_at = datetime.now(timezone.utc)
        shoot.terms_accepted_ip = ip_address
        await self.db.commit()
        await self.db.refresh(shoot)

        access_logger.info(
            "Client accepted terms",
            extra=format_security_event(
                event_type="security.access.terms_accepted",
                severity="info",
                description="Client accepted shoot terms",
                ip_address=ip_address,
                resource_type="shoot",
                resource_id=shoot.id,
            ),
        )
        return shoot
