"""Database models for the Studio Client Portal."""

from portal.models.share_link import ShootShareLink
from portal.models.shoot import Shoot

__all__ = [
    "Shoot",
    "ShootShareLink",
]
