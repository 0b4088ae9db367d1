"""Canonical shoot status vocabularies and normalization.

Status strings arrive from the database, older clients and hand edits in
several historical vocabularies. Every read and every write goes through the
normalizers below so only the canonical enum values reach business logic.
Unknown input degrades to PENDING rather than raising.
"""

from enum import Enum


class ProjectType(str, Enum):
    """Which optional sections of a shoot are meaningful."""

    PHOTO_SHOOT = "photo_shoot"
    VIDEO_PROJECT = "video_project"
    HYBRID = "hybrid"


class ShootStatus(str, Enum):
    """
    Overall shoot lifecycle, producer controlled.

    PENDING -> IN_PROGRESS -> COMPLETED -> DELIVERED
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELIVERED = "delivered"


class PhotoStatus(str, Enum):
    """Photo deliverable workflow."""

    PENDING = "pending"
    SELECTION_READY = "selection_ready"
    SELECTION_IN_PROGRESS = "selection_in_progress"
    SELECTED = "selected"
    EDITING = "editing"
    DELIVERED = "delivered"


class VideoStatus(str, Enum):
    """Video deliverable workflow."""

    PENDING = "pending"
    DRAFT = "draft"
    EDITING = "editing"
    REVIEW = "review"
    FINAL = "final"


# Legacy value -> canonical value
LEGACY_PHOTO_STATUSES: dict[str, PhotoStatus] = {
    "editing_in_progress": PhotoStatus.EDITING,
    "completed": PhotoStatus.DELIVERED,
}

LEGACY_VIDEO_STATUSES: dict[str, VideoStatus] = {
    "in_progress": VideoStatus.EDITING,
    "in_review": VideoStatus.REVIEW,
    "revision_requested": VideoStatus.REVIEW,
    "approved": VideoStatus.FINAL,
    "delivered": VideoStatus.FINAL,
}

_PHOTO_VALUES = {s.value: s for s in PhotoStatus}
_VIDEO_VALUES = {s.value: s for s in VideoStatus}
_SHOOT_VALUES = {s.value: s for s in ShootStatus}
_PROJECT_TYPE_VALUES = {t.value: t for t in ProjectType}


def _raw(value: object) -> str | None:
    if isinstance(value, Enum):
        value = value.value
    return value if isinstance(value, str) else None


def normalize_photo_status(value: object = None) -> PhotoStatus:
    """Map any raw photo status to its canonical value (default PENDING)."""
    raw = _raw(value)
    if raw in _PHOTO_VALUES:
        return _PHOTO_VALUES[raw]
    return LEGACY_PHOTO_STATUSES.get(raw, PhotoStatus.PENDING)


def normalize_video_status(value: object = None) -> VideoStatus:
    """Map any raw video status to its canonical value (default PENDING)."""
    raw = _raw(value)
    if raw in _VIDEO_VALUES:
        return _VIDEO_VALUES[raw]
    return LEGACY_VIDEO_STATUSES.get(raw, VideoStatus.PENDING)


def normalize_shoot_status(value: object = None) -> ShootStatus:
    return _SHOOT_VALUES.get(_raw(value), ShootStatus.PENDING)


def normalize_project_type(value: object = None) -> ProjectType:
    return _PROJECT_TYPE_VALUES.get(_raw(value), ProjectType.PHOTO_SHOOT)


def normalize_optional_photo_status(value: object = None) -> PhotoStatus | None:
    """Like normalize_photo_status, but an absent value stays absent.

    None and "" mean post-production has not started for photos.
    """
    if value is None or value == "":
        return None
    return normalize_photo_status(value)


def normalize_optional_video_status(value: object = None) -> VideoStatus | None:
    if value is None or value == "":
        return None
    return normalize_video_status(value)
