"""Share link service.

Issues, resolves and revokes share links. The plaintext token is returned
exactly once, inside the share URL built by create(); only its SHA-256
digest is persisted.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import settings
from portal.core.errors import InternalError, InvalidLinkError, NotFoundError
from portal.core.logging_config import format_security_event
from portal.core.security import (
    generate_share_token,
    hash_share_token,
    is_valid_share_token_format,
)
from portal.models.share_link import ShootShareLink, as_utc
from portal.models.shoot import Shoot

logger = logging.getLogger("security.access")


@dataclass
class IssuedShareLink:
    link: ShootShareLink
    share_url: str


@dataclass
class ResolvedShareLink:
    shoot: Shoot
    expires_at: datetime


def clamp_ttl_hours(ttl_hours: float | None) -> int:
    """Round a requested lifetime down to whole hours and clamp it to
    [1, SHARE_LINK_MAX_TTL_HOURS].

    Missing, non-numeric, non-finite or non-positive values fall back to
    the default lifetime.
    """
    default = int(settings.SHARE_LINK_DEFAULT_TTL_HOURS)
    if ttl_hours is None or isinstance(ttl_hours, bool):
        return default
    try:
        ttl = float(ttl_hours)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(ttl) or ttl <= 0:
        return default
    return min(max(math.floor(ttl), 1), int(settings.SHARE_LINK_MAX_TTL_HOURS))


def resolve_app_origin(request_origin: str | None, allowed_origins: list[str] | None = None) -> str:
    """Pick the origin share URLs point at.

    The caller's Origin is used when it is allow-listed; otherwise the
    first allowed origin.
    """
    allowed = [o.rstrip("/") for o in (allowed_origins if allowed_origins is not None else settings.CORS_ORIGINS) if o]
    if request_origin and request_origin.rstrip("/") in allowed:
        return request_origin.rstrip("/")
    if not allowed:
        raise InternalError("No application origin configured for share links")
    return allowed[0]


def build_share_url(origin: str, shoot_id: str, token: str) -> str:
    return f"{origin}/#/shoot/{shoot_id}?token={token}"


class ShareLinkService:
    """Service for server-issued share links."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        shoot_id: str,
        ttl_hours: float | None = None,
        created_by_email: str | None = None,
        origin: str | None = None,
    ) -> IssuedShareLink:
        """Issue a new share link for a shoot."""
        shoot = await self.db.get(Shoot, shoot_id)
        if shoot is None:
            raise NotFoundError("Shoot", shoot_id)

        app_origin = resolve_app_origin(origin)
        ttl = clamp_ttl_hours(ttl_hours)
        token = generate_share_token()

        link = ShootShareLink(
            shoot_id=shoot.id,
            token_hash=hash_share_token(token),
            expires_at=datetime.now(timezone.utc) + timedelta(hours=ttl),
            revoked=False,
            created_by_email=created_by_email,
        )
        self.db.add(link)
        await self.db.commit()
        await self.db.refresh(link)

        logger.info(
            "Share link created",
            extra=format_security_event(
                event_type="security.access.share_link_created",
                severity="info",
                description="Share link issued",
                actor=created_by_email,
                resource_type="shoot",
                resource_id=shoot.id,
                metadata={"share_link_id": link.id, "ttl_hours": ttl},
            ),
        )
        return IssuedShareLink(link=link, share_url=build_share_url(app_origin, shoot.id, token))

    async def resolve(
        self,
        shoot_id: str,
        token: str | None,
        ip_address: str | None = None,
    ) -> ResolvedShareLink:
        """Resolve a presented token to its shoot.

        A wrong, expired or revoked token raises the same InvalidLinkError.
        The hash match and the validity checks run as one query.
        """
        if not is_valid_share_token_format(token):
            self._log_failure(shoot_id, ip_address, "malformed")
            raise InvalidLinkError()

        now = datetime.now(timezone.utc)
        result = await self.db.execute(
            select(ShootShareLink, Shoot)
            .join(Shoot, Shoot.id == ShootShareLink.shoot_id)
            .where(
                ShootShareLink.shoot_id == shoot_id,
                ShootShareLink.token_hash == hash_share_token(token),
                ShootShareLink.revoked.is_(False),
                ShootShareLink.expires_at > now,
            )
        )
        row = result.first()
        if row is None:
            self._log_failure(shoot_id, ip_address, "no_match")
            raise InvalidLinkError()

        link, shoot = row
        return ResolvedShareLink(shoot=shoot, expires_at=as_utc(link.expires_at))

    async def revoke(self, link_id: str, revoked_by: str | None = None) -> ShootShareLink:
        """Revoke a link. Revoking twice keeps the first revocation time."""
        link = await self.db.get(ShootShareLink, link_id)
        if link is None:
            raise NotFoundError("Share link", link_id)

        if not link.revoked:
            link.revoked = True
            link.revoked_at = datetime.now(timezone.utc)
            await self.db.commit()
            await self.db.refresh(link)

            logger.info(
                "Share link revoked",
                extra=format_security_event(
                    event_type="security.access.share_link_revoked",
                    severity="info",
                    description="Share link revoked",
                    actor=revoked_by,
                    resource_type="shoot",
                    resource_id=link.shoot_id,
                    metadata={"share_link_id": link.id},
                ),
            )
        return link

    async def list_for_shoot(self, shoot_id: str) -> list[ShootShareLink]:
        result = await self.db.execute(
            select(ShootShareLink)
            .where(ShootShareLink.shoot_id == shoot_id)
            .order_by(ShootShareLink.created_at.desc())
        )
        return list(result.scalars().all())

    def _log_failure(self, shoot_id: str, ip_address: str | None, reason: str) -> None:
        # reason stays in the log only; callers always get InvalidLinkError
        logger.warning(
            "Share link resolution failed",
            extra=format_security_event(
                event_type="security.access.share_link_invalid",
                severity="warning",
                description="Invalid or expired share link presented",
                ip_address=ip_address,
                resource_type="shoot",
                resource_id=shoot_id,
                metadata={"reason": reason},
            ),
        )
