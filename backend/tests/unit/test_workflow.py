"""Unit tests for status normalization and phase visibility."""

import pytest

from portal.workflow.phases import Phase, get_default_phase, get_shoot_phases, get_visible_phases
from portal.workflow.status import (
    PhotoStatus,
    ProjectType,
    ShootStatus,
    VideoStatus,
    normalize_optional_photo_status,
    normalize_optional_video_status,
    normalize_photo_status,
    normalize_project_type,
    normalize_shoot_status,
    normalize_video_status,
)


class TestPhotoStatusNormalization:
    """Tests for normalize_photo_status."""

    @pytest.mark.parametrize("status", [s.value for s in PhotoStatus])
    def test_canonical_values_pass_through(self, status):
        assert normalize_photo_status(status) == PhotoStatus(status)

    def test_legacy_editing_in_progress_maps_to_editing(self):
        assert normalize_photo_status("editing_in_progress") == PhotoStatus.EDITING

    def test_legacy_completed_maps_to_delivered(self):
        assert normalize_photo_status("completed") == PhotoStatus.DELIVERED

    @pytest.mark.parametrize("value", [None, "", "nonsense", 42, "EDITING"])
    def test_unknown_values_default_to_pending(self, value):
        assert normalize_photo_status(value) == PhotoStatus.PENDING

    def test_accepts_enum_members(self):
        assert normalize_photo_status(PhotoStatus.SELECTED) == PhotoStatus.SELECTED

    def test_is_idempotent(self):
        once = normalize_photo_status("editing_in_progress")
        assert normalize_photo_status(once) == once


class TestVideoStatusNormalization:
    """Tests for normalize_video_status."""

    @pytest.mark.parametrize(
        "legacy,expected",
        [
            ("in_progress", VideoStatus.EDITING),
            ("in_review", VideoStatus.REVIEW),
            ("revision_requested", VideoStatus.REVIEW),
            ("approved", VideoStatus.FINAL),
            ("delivered", VideoStatus.FINAL),
        ],
    )
    def test_legacy_values(self, legacy, expected):
        assert normalize_video_status(legacy) == expected

    def test_canonical_values_pass_through(self):
        for status in VideoStatus:
            assert normalize_video_status(status.value) == status

    def test_unknown_defaults_to_pending(self):
        assert normalize_video_status("rendering") == VideoStatus.PENDING
        assert normalize_video_status(None) == VideoStatus.PENDING


class TestOptionalNormalization:
    def test_absent_values_stay_absent(self):
        assert normalize_optional_photo_status(None) is None
        assert normalize_optional_photo_status("") is None
        assert normalize_optional_video_status(None) is None
        assert normalize_optional_video_status("") is None

    def test_present_values_are_normalized(self):
        assert normalize_optional_photo_status("completed") == PhotoStatus.DELIVERED
        assert normalize_optional_video_status("approved") == VideoStatus.FINAL

    def test_unknown_present_value_reads_as_pending(self):
        assert normalize_optional_photo_status("garbage") == PhotoStatus.PENDING


class TestShootStatusAndProjectType:
    def test_shoot_status(self):
        assert normalize_shoot_status("delivered") == ShootStatus.DELIVERED
        assert normalize_shoot_status("archived") == ShootStatus.PENDING
        assert normalize_shoot_status(None) == ShootStatus.PENDING

    def test_project_type(self):
        assert normalize_project_type("hybrid") == ProjectType.HYBRID
        assert normalize_project_type("wedding") == ProjectType.PHOTO_SHOOT
        assert normalize_project_type(None) == ProjectType.PHOTO_SHOOT


class TestVisiblePhases:
    """Tests for get_visible_phases."""

    def test_pending_shows_only_pre_production(self):
        assert get_visible_phases("pending") == [Phase.PRE_PRODUCTION]

    def test_pending_ignores_deliverable_statuses(self):
        assert get_visible_phases("pending", "editing", "draft") == [Phase.PRE_PRODUCTION]

    def test_in_progress_without_deliverables(self):
        assert get_visible_phases("in_progress") == [Phase.PRE_PRODUCTION, Phase.PRODUCTION]

    def test_in_progress_with_photo_status_unlocks_post_production(self):
        assert get_visible_phases("in_progress", photo_status="selection_ready") == [
            Phase.PRE_PRODUCTION,
            Phase.PRODUCTION,
            Phase.POST_PRODUCTION,
        ]

    def test_in_progress_with_video_status_unlocks_post_production(self):
        assert Phase.POST_PRODUCTION in get_visible_phases("in_progress", video_status="draft")

    def test_empty_string_deliverable_status_counts_as_unset(self):
        assert get_visible_phases("in_progress", "", "") == [Phase.PRE_PRODUCTION, Phase.PRODUCTION]

    @pytest.mark.parametrize("status", ["completed", "delivered"])
    def test_finished_shows_all_phases(self, status):
        assert get_visible_phases(status) == list(Phase)

    def test_legacy_deliverable_status_is_normalized_first(self):
        phases = get_visible_phases("in_progress", video_status="in_review")
        assert phases[-1] == Phase.POST_PRODUCTION

    def test_unknown_status_behaves_like_pending(self):
        assert get_visible_phases("on_hold") == [Phase.PRE_PRODUCTION]

    def test_phases_are_ordered_and_cumulative(self):
        order = list(Phase)
        for status in ShootStatus:
            visible = get_visible_phases(status.value, "editing")
            assert visible == order[: len(visible)]

    def test_get_shoot_phases_reads_attributes(self):
        class FakeShoot:
            status = "in_progress"
            photo_status = None
            video_status = "review"

        assert get_shoot_phases(FakeShoot()) == list(Phase)


class TestDefaultPhase:
    def test_default_is_last_visible(self):
        assert get_default_phase([Phase.PRE_PRODUCTION, Phase.PRODUCTION]) == Phase.PRODUCTION

    def test_empty_list_falls_back_to_pre_production(self):
        assert get_default_phase([]) == Phase.PRE_PRODUCTION
