"""Tests for route_planner core helpers.

Tests: GeometryKernel, GeoCalculator, call_with_retry, error taxonomy
"""

from math import cos, radians, sqrt

import pytest
from hypothesis import given, settings, strategies as st

from route_planner.constants import GeometryConfig
from route_planner.core.errors import (
    InvalidInput,
    LookupFailure,
    MalformedResponse,
    RoutePlannerError,
    TransientNetworkFailure,
)
from route_planner.core.geo_calculator import GeoCalculator
from route_planner.core.geometry import GeometryKernel
from route_planner.core.retry import call_with_retry

coords = st.floats(min_value=-80.0, max_value=80.0, allow_nan=False, allow_infinity=False)


class TestDistanceToSegment:
    """GeometryKernel.distance_to_segment - flat-plane point/segment distance."""

    def test_perpendicular_distance(self) -> None:
        """Point beside the middle of a segment: perpendicular distance."""
        assert GeometryKernel.distance_to_segment((1.0, 5.0), (0.0, 0.0), (0.0, 10.0)) == pytest.approx(1.0)

    def test_beyond_end_clamps_to_endpoint(self) -> None:
        """Projection past the segment end falls back to the endpoint distance."""
        distance = GeometryKernel.distance_to_segment((0.0, 13.0), (0.0, 0.0), (0.0, 10.0))
        assert distance == pytest.approx(3.0)

    def test_before_start_clamps_to_startpoint(self) -> None:
        distance = GeometryKernel.distance_to_segment((3.0, -4.0), (0.0, 0.0), (0.0, 10.0))
        assert distance == pytest.approx(5.0)

    @given(px=coords, py=coords, sx=coords, sy=coords)
    @settings(max_examples=50)
    def test_degenerate_segment_is_euclidean_distance(self, px: float, py: float, sx: float, sy: float) -> None:
        """Segment with start == end: distance to that point."""
        expected = sqrt((px - sx) ** 2 + (py - sy) ** 2)
        assert GeometryKernel.distance_to_segment((px, py), (sx, sy), (sx, sy)) == pytest.approx(expected)

    def test_point_on_segment_is_zero(self) -> None:
        assert GeometryKernel.distance_to_segment((0.0, 4.0), (0.0, 0.0), (0.0, 10.0)) == 0.0


class TestFindNearestSegment:
    """GeometryKernel.find_nearest_segment - insertion index of the closest pair."""

    PATH = [(0.0, 0.0), (0.0, 10.0), (10.0, 10.0)]

    def test_click_near_first_segment(self) -> None:
        """[1, 5] is 1 away from the first segment and 5 from the second."""
        assert GeometryKernel.find_nearest_segment((1.0, 5.0), self.PATH) == 1

    def test_click_near_second_segment(self) -> None:
        assert GeometryKernel.find_nearest_segment((5.0, 11.0), self.PATH) == 2

    @pytest.mark.parametrize("path", [[], [(0.0, 0.0)]])
    def test_short_path_returns_none(self, path: list) -> None:
        assert GeometryKernel.find_nearest_segment((1.0, 1.0), path) is None

    def test_tie_keeps_earliest_segment(self) -> None:
        """The shared vertex is equally close to both segments."""
        assert GeometryKernel.find_nearest_segment((0.0, 10.0), self.PATH) == 1


class TestHitThreshold:
    """GeometryKernel.hit_threshold - zoom-adaptive click tolerance."""

    def test_reference_zoom_floored_at_minimum(self) -> None:
        """At the reference zoom base (0.0005) is below the floor (0.001)."""
        assert GeometryKernel.hit_threshold(zoom=GeometryConfig.REFERENCE_ZOOM) == GeometryConfig.MIN_THRESHOLD_DEG

    def test_doubles_per_zoom_level_out(self) -> None:
        assert GeometryKernel.hit_threshold(zoom=11) == pytest.approx(0.002)
        assert GeometryKernel.hit_threshold(zoom=10) == pytest.approx(0.004)

    def test_high_zoom_never_below_minimum(self) -> None:
        assert GeometryKernel.hit_threshold(zoom=19) == GeometryConfig.MIN_THRESHOLD_DEG

    @given(z1=st.floats(min_value=0, max_value=22), z2=st.floats(min_value=0, max_value=22))
    @settings(max_examples=50)
    def test_monotonic_in_zoom(self, z1: float, z2: float) -> None:
        """Zooming in never makes the threshold larger."""
        low, high = sorted((z1, z2))
        assert GeometryKernel.hit_threshold(zoom=high) <= GeometryKernel.hit_threshold(zoom=low)


class TestFindInsertIndex:
    """GeometryKernel.find_insert_index - click-to-insert decision."""

    PATH = [(51.50, -0.10), (51.50, -0.08), (51.52, -0.08)]

    def test_click_on_line_inserts(self) -> None:
        assert GeometryKernel.find_insert_index((51.5004, -0.09), self.PATH, zoom=13) == 1

    def test_click_far_from_line_returns_none(self) -> None:
        assert GeometryKernel.find_insert_index((51.40, -0.30), self.PATH, zoom=13) is None

    def test_low_zoom_is_more_forgiving(self) -> None:
        """0.003 deg away: outside the threshold at zoom 13, inside at zoom 10."""
        point = (51.503, -0.09)
        assert GeometryKernel.find_insert_index(point, self.PATH, zoom=13) is None
        assert GeometryKernel.find_insert_index(point, self.PATH, zoom=10) == 1

    def test_unknown_zoom_uses_fallback(self) -> None:
        point = (51.5004, -0.09)
        expected = GeometryKernel.find_insert_index(point, self.PATH, zoom=GeometryConfig.DEFAULT_ZOOM_FALLBACK)
        assert GeometryKernel.find_insert_index(point, self.PATH, zoom=None) == expected


class TestGeoCalculator:
    """GeoCalculator - geodesic calculations on Earth's surface."""

    def test_haversine_distance_one_degree_latitude(self) -> None:
        """1 degree latitude ≈ 111km."""
        dist = GeoCalculator.haversine_distance_m(lat1=46.0, lon1=10.0, lat2=47.0, lon2=10.0)
        assert 110_000 < dist < 112_000

    def test_haversine_distance_one_degree_longitude(self) -> None:
        """1 degree longitude at 46°N ≈ 77km."""
        dist = GeoCalculator.haversine_distance_m(lat1=46.0, lon1=10.0, lat2=46.0, lon2=11.0)
        expected = 111_000 * cos(radians(46))
        assert abs(dist - expected) < 2000

    @pytest.mark.parametrize(
        "end, low, high",
        [
            ((47.0, 10.0), -1, 1),  # north
            ((46.0, 11.0), 89, 91),  # east
            ((45.0, 10.0), 179, 181),  # south
            ((46.0, 9.0), 269, 271),  # west
        ],
    )
    def test_bearing_cardinal_directions(self, end: tuple, low: float, high: float) -> None:
        bearing = GeoCalculator.initial_bearing_deg(lat1=46.0, lon1=10.0, lat2=end[0], lon2=end[1])
        if low < 0:
            assert bearing < high or bearing > 360 + low
        else:
            assert low < bearing < high

    def test_lerp_midpoint(self) -> None:
        assert GeoCalculator.lerp((0.0, 0.0), (2.0, 4.0), 0.5) == (1.0, 2.0)

    def test_path_length_sums_legs(self) -> None:
        points = [(46.0, 10.0), (47.0, 10.0), (48.0, 10.0)]
        one_leg = GeoCalculator.haversine_distance_m(lat1=46.0, lon1=10.0, lat2=47.0, lon2=10.0)
        assert GeoCalculator.path_length_m(points) == pytest.approx(2 * one_leg, rel=1e-3)


class TestCallWithRetry:
    """call_with_retry - bounded retries on LookupFailure."""

    def test_success_first_try_never_sleeps(self, sleep_calls: list) -> None:
        assert call_with_retry(lambda: 42, delays_s=(1.0, 2.0, 3.0), sleep=sleep_calls.append) == 42
        assert sleep_calls == []

    def test_retries_until_success(self, sleep_calls: list) -> None:
        attempts = []

        def flaky() -> str:
            attempts.append(1)
            if len(attempts) < 3:
                raise TransientNetworkFailure("timeout")
            return "ok"

        assert call_with_retry(flaky, delays_s=(1.0, 2.0, 3.0), sleep=sleep_calls.append) == "ok"
        assert sleep_calls == [1.0, 2.0]

    def test_exhaustion_raises_last_error(self, sleep_calls: list) -> None:
        """(1, 2, 3) delays: four attempts, three pauses, then the error."""
        attempts = []

        def broken() -> None:
            attempts.append(1)
            raise MalformedResponse("no results", provider="opentopodata")

        with pytest.raises(MalformedResponse):
            call_with_retry(broken, delays_s=(1.0, 2.0, 3.0), sleep=sleep_calls.append)
        assert len(attempts) == 4
        assert sleep_calls == [1.0, 2.0, 3.0]

    def test_other_errors_are_not_retried(self, sleep_calls: list) -> None:
        def bug() -> None:
            raise KeyError("oops")

        with pytest.raises(KeyError):
            call_with_retry(bug, delays_s=(1.0,), sleep=sleep_calls.append)
        assert sleep_calls == []


class TestErrorTaxonomy:
    def test_lookup_failures_share_base(self) -> None:
        assert issubclass(TransientNetworkFailure, LookupFailure)
        assert issubclass(MalformedResponse, LookupFailure)
        assert issubclass(LookupFailure, RoutePlannerError)

    def test_invalid_input_is_value_error(self) -> None:
        assert issubclass(InvalidInput, ValueError)
        assert not issubclass(InvalidInput, LookupFailure)

    def test_provider_is_kept(self) -> None:
        assert TransientNetworkFailure("down", provider="openelevation").provider == "openelevation"
