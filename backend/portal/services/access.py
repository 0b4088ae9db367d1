"""Client gate for shoot pages.

A client reaches a shoot with either its permanent access token or a
share link token. The two formats do not overlap, so the presented value
is routed by shape before any database work. Every failure surfaces as
the same InvalidLinkError.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.errors import InvalidLinkError
from portal.core.logging_config import format_security_event
from portal.core.security import (
    access_tokens_match,
    is_valid_share_token_format,
    is_valid_token_format,
)
from portal.models.shoot import Shoot
from portal.services.share_link_service import ShareLinkService

logger = logging.getLogger("security.access")


async def resolve_viewer_access(
    db: AsyncSession,
    shoot_id: str,
    token: str | None,
    ip_address: str | None = None,
) -> tuple[Shoot, datetime | None]:
    """Return the shoot and, for share link access, the link's expiry."""
    if is_valid_token_format(token):
        shoot = await db.get(Shoot, shoot_id)
        if shoot is not None and access_tokens_match(token, shoot.access_token):
            return shoot, None
        logger.warning(
            "Access token rejected",
            extra=format_security_event(
                event_type="security.access.token_invalid",
                severity="warning",
                description="Access token did not match shoot",
                ip_address=ip_address,
                resource_type="shoot",
                resource_id=shoot_id,
            ),
        )
        raise InvalidLinkError()

    if is_valid_share_token_format(token):
        resolved = await ShareLinkService(db).resolve(shoot_id, token, ip_address=ip_address)
        return resolved.shoot, resolved.expires_at

    logger.warning(
        "Malformed token rejected",
        extra=format_security_event(
            event_type="security.access.token_malformed",
            severity="warning",
            description="Malformed client token presented",
            ip_address=ip_address,
            resource_type="shoot",
            resource_id=shoot_id,
        ),
    )
    raise InvalidLinkError()
