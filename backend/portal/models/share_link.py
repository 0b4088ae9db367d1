"""Share link model.

A share link is a revocable, time-boxed grant of read access to one shoot,
separate from the shoot's permanent access token.

Security Properties:
- Only the SHA-256 digest of the token is stored; the plaintext exists only
  in the issuance response and the URL handed to the client
- Write-once: after creation the only permitted change is revocation
- Expired or revoked links are indistinguishable from unknown ones to callers
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.session import Base
from portal.models.base import TimestampMixin, UUIDMixin


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ShootShareLink(Base, UUIDMixin, TimestampMixin):
    """Hash-stored, expiring share link for a shoot."""

    __tablename__ = "shoot_share_links"

    shoot_id: Mapped[str] = mapped_column(
        String(100), ForeignKey("shoots.id", ondelete="CASCADE"), nullable=False
    )

    # hex SHA-256 of the plaintext token
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_by_email: Mapped[str | None] = mapped_column(String(255))

    shoot: Mapped["Shoot"] = relationship(back_populates="share_links")

    __table_args__ = (
        Index("ix_shoot_share_links_shoot_id", "shoot_id"),
        Index("ix_shoot_share_links_lookup", "shoot_id", "token_hash"),
    )


from portal.models.shoot import Shoot  # noqa: E402
