"""Business logic services."""

from portal.services.share_link_service import ShareLinkService
from portal.services.shoot_service import ShootService

__all__ = ["ShareLinkService", "ShootService"]
