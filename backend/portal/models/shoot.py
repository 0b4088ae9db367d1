"""Shoot model.

A shoot is a photo/video project. Nested collections (team, talent,
timeline, documents, moodboard images) are ordered JSON arrays owned
entirely by the shoot; they have no identity of their own.

Status columns hold canonical values only (see portal.workflow.status);
photo_status / video_status are NULL until post-production starts.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import JSON, Boolean, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.session import Base
from portal.models.base import TimestampMixin
from portal.workflow.status import ProjectType, ShootStatus

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Shoot(Base, TimestampMixin):
    """Photo/video shoot shared with a client through a tokenized page."""

    __tablename__ = "shoots"

    # Producer-chosen slug or generated UUID; addressable in URLs
    id: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    # Permanent per-shoot secret (32 lowercase hex); set once at creation
    access_token: Mapped[str] = mapped_column(String(32), nullable=False)

    project_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProjectType.PHOTO_SHOOT.value
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ShootStatus.PENDING.value
    )
    photo_status: Mapped[str | None] = mapped_column(String(30))
    video_status: Mapped[str | None] = mapped_column(String(30))

    # Overview
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    client: Mapped[str] = mapped_column(String(255), nullable=False)
    client_email: Mapped[str | None] = mapped_column(String(255))
    date: Mapped[str] = mapped_column(String(20), nullable=False)  # ISO date
    start_time: Mapped[str] = mapped_column(String(20), default="09:00")
    end_time: Mapped[str] = mapped_column(String(20), default="18:00")
    description: Mapped[str] = mapped_column(Text, default="")
    cover_image: Mapped[str] = mapped_column(String(2048), default="")

    # Location
    location_name: Mapped[str] = mapped_column(String(255), default="")
    location_address: Mapped[str] = mapped_column(String(500), default="")
    location_map_url: Mapped[str] = mapped_column(String(2048), default="")

    # Creative
    moodboard_url: Mapped[str] = mapped_column(String(2048), default="")
    moodboard_images: Mapped[list] = mapped_column(JSONType, default=list)
    call_sheet_url: Mapped[str] = mapped_column(String(2048), default="")
    styling_url: Mapped[str] = mapped_column(String(2048), default="")
    styling_notes: Mapped[str] = mapped_column(Text, default="")
    hair_makeup_notes: Mapped[str] = mapped_column(Text, default="")

    # Photo deliverables
    photo_selection_url: Mapped[str] = mapped_column(String(2048), default="")
    selected_photos_url: Mapped[str] = mapped_column(String(2048), default="")
    final_photos_url: Mapped[str] = mapped_column(String(2048), default="")

    # Video deliverables
    video_url: Mapped[str] = mapped_column(String(2048), default="")
    revision_notes: Mapped[str] = mapped_column(Text, default="")

    # Nested collections
    team: Mapped[list] = mapped_column(JSONType, default=list)
    talent: Mapped[list] = mapped_column(JSONType, default=list)
    timeline: Mapped[list] = mapped_column(JSONType, default=list)
    documents: Mapped[list] = mapped_column(JSONType, default=list)  # Producer-only

    # Terms acceptance audit trail - set once by the client, never cleared
    client_accepted_terms: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    terms_accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    terms_accepted_ip: Mapped[str | None] = mapped_column(String(45))  # IPv6 length

    share_links: Mapped[list["ShootShareLink"]] = relationship(
        back_populates="shoot",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_shoots_created_at", "created_at"),
    )


from portal.models.share_link import ShootShareLink  # noqa: E402
