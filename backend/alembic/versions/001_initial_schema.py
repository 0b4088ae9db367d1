"""Initial schema: shoots and share links.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _url_column(name: str) -> sa.Column:
    return sa.Column(name, sa.String(2048), server_default="")


def upgrade() -> None:
    """Create shoots and shoot_share_links."""

    # ==========================================================================
    # SHOOTS
    # ==========================================================================
    op.create_table(
        "shoots",
        sa.Column("id", sa.String(100), primary_key=True),
        sa.Column("access_token", sa.String(32), nullable=False),
        sa.Column("project_type", sa.String(20), nullable=False, server_default="photo_shoot"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("photo_status", sa.String(30)),
        sa.Column("video_status", sa.String(30)),
        # Overview
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("client", sa.String(255), nullable=False),
        sa.Column("client_email", sa.String(255)),
        sa.Column("date", sa.String(20), nullable=False),
        sa.Column("start_time", sa.String(20), server_default="09:00"),
        sa.Column("end_time", sa.String(20), server_default="18:00"),
        sa.Column("description", sa.Text, server_default=""),
        _url_column("cover_image"),
        # Location
        sa.Column("location_name", sa.String(255), server_default=""),
        sa.Column("location_address", sa.String(500), server_default=""),
        _url_column("location_map_url"),
        # Creative
        _url_column("moodboard_url"),
        sa.Column("moodboard_images", JSONType),
        _url_column("call_sheet_url"),
        _url_column("styling_url"),
        sa.Column("styling_notes", sa.Text, server_default=""),
        sa.Column("hair_makeup_notes", sa.Text, server_default=""),
        # Deliverables
        _url_column("photo_selection_url"),
        _url_column("selected_photos_url"),
        _url_column("final_photos_url"),
        _url_column("video_url"),
        sa.Column("revision_notes", sa.Text, server_default=""),
        # Nested collections
        sa.Column("team", JSONType),
        sa.Column("talent", JSONType),
        sa.Column("timeline", JSONType),
        sa.Column("documents", JSONType),
        # Terms acceptance
        sa.Column("client_accepted_terms", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("terms_accepted_at", sa.DateTime(timezone=True)),
        sa.Column("terms_accepted_ip", sa.String(45)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_shoots_created_at", "shoots", ["created_at"])

    # ==========================================================================
    # SHARE LINKS
    # ==========================================================================
    op.create_table(
        "shoot_share_links",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "shoot_id",
            sa.String(100),
            sa.ForeignKey("shoots.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("token_hash", sa.String(64), nullable=False, unique=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("revoked_at", sa.DateTime(timezone=True)),
        sa.Column("created_by_email", sa.String(255)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_shoot_share_links_shoot_id", "shoot_share_links", ["shoot_id"])
    op.create_index("ix_shoot_share_links_lookup", "shoot_share_links", ["shoot_id", "token_hash"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("ix_shoot_share_links_lookup", table_name="shoot_share_links")
    op.drop_index("ix_shoot_share_links_shoot_id", table_name="shoot_share_links")
    op.drop_table("shoot_share_links")
    op.drop_index("ix_shoots_created_at", table_name="shoots")
    op.drop_table("shoots")
