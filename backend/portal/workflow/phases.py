"""Workflow phase visibility for the shoot detail page.

Phases are ordered and cumulative:

    pre-production  -> always visible
    production      -> status in_progress / completed / delivered
    post-production -> status completed / delivered, or status in_progress
                       with a photo or video status already set (early
                       access to deliverables before the shoot is closed)

The default phase is the most advanced visible one.
"""

from enum import Enum
from typing import Any, Sequence

from portal.workflow.status import (
    ShootStatus,
    normalize_optional_photo_status,
    normalize_optional_video_status,
    normalize_shoot_status,
)


class Phase(str, Enum):
    PRE_PRODUCTION = "pre-production"
    PRODUCTION = "production"
    POST_PRODUCTION = "post-production"


PRODUCTION_STATUSES = frozenset(
    {ShootStatus.IN_PROGRESS, ShootStatus.COMPLETED, ShootStatus.DELIVERED}
)
FINISHED_STATUSES = frozenset({ShootStatus.COMPLETED, ShootStatus.DELIVERED})


def get_visible_phases(
    status: Any = None,
    photo_status: Any = None,
    video_status: Any = None,
) -> list[Phase]:
    """Visible phases, in order, for a combination of status fields."""
    shoot_status = normalize_shoot_status(status)
    has_deliverable_status = (
        normalize_optional_photo_status(photo_status) is not None
        or normalize_optional_video_status(video_status) is not None
    )

    phases = [Phase.PRE_PRODUCTION]

    if shoot_status in PRODUCTION_STATUSES:
        phases.append(Phase.PRODUCTION)

    if shoot_status in FINISHED_STATUSES or (
        shoot_status == ShootStatus.IN_PROGRESS and has_deliverable_status
    ):
        phases.append(Phase.POST_PRODUCTION)

    return phases


def get_shoot_phases(shoot: Any) -> list[Phase]:
    """Visible phases for any object carrying status/photo_status/video_status."""
    return get_visible_phases(
        getattr(shoot, "status", None),
        getattr(shoot, "photo_status", None),
        getattr(shoot, "video_status", None),
    )


def get_default_phase(visible_phases: Sequence[Phase]) -> Phase:
    """The furthest-along visible phase; pre-production when none given."""
    if not visible_phases:
        return Phase.PRE_PRODUCTION
    return visible_phases[-1]
