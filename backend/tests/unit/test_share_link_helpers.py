"""Unit tests for share link TTL clamping, origin choice and URL shape."""

import math

import pytest

from portal.core.errors import InternalError
from portal.services.share_link_service import build_share_url, clamp_ttl_hours, resolve_app_origin


class TestClampTtl:
    def test_default_when_missing(self):
        assert clamp_ttl_hours(None) == 336

    @pytest.mark.parametrize("value", [0, -5, math.nan, math.inf, "abc", True])
    def test_invalid_values_fall_back_to_default(self, value):
        assert clamp_ttl_hours(value) == 336

    def test_below_one_hour_is_raised_to_one(self):
        assert clamp_ttl_hours(0.25) == 1

    def test_above_max_is_capped(self):
        assert clamp_ttl_hours(10_000) == 720

    def test_in_range_kept(self):
        assert clamp_ttl_hours(48) == 48

    def test_numeric_string_accepted(self):
        assert clamp_ttl_hours("24") == 24

    def test_fractional_hours_round_down(self):
        assert clamp_ttl_hours(1.5) == 1
        assert clamp_ttl_hours(47.9) == 47

    def test_result_is_whole_hours(self):
        assert isinstance(clamp_ttl_hours(12.7), int)
        assert isinstance(clamp_ttl_hours(None), int)


class TestResolveAppOrigin:
    ALLOWED = ["https://portal.example.com", "http://localhost:5173/"]

    def test_allowed_request_origin_is_used(self):
        assert resolve_app_origin("http://localhost:5173", self.ALLOWED) == "http://localhost:5173"

    def test_unknown_origin_falls_back_to_first_allowed(self):
        assert resolve_app_origin("https://evil.example.net", self.ALLOWED) == "https://portal.example.com"

    def test_missing_origin_falls_back_to_first_allowed(self):
        assert resolve_app_origin(None, self.ALLOWED) == "https://portal.example.com"

    def test_no_allowed_origins_is_an_error(self):
        with pytest.raises(InternalError):
            resolve_app_origin("https://portal.example.com", [])


def test_share_url_shape():
    url = build_share_url("https://portal.example.com", "spring", "tok")
    assert url == "https://portal.example.com/#/shoot/spring?token=tok"
