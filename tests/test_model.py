"""Tests for route_planner data model.

Tests: WaypointHistory, waypoint edits, route sharing, RoutePath, messages
"""

import json
from urllib.parse import quote, unquote

import pytest
from hypothesis import given, settings, strategies as st

from route_planner.constants import StyleConfig
from route_planner.core.errors import InvalidInput
from route_planner.core.geocoding import GeolocationError
from route_planner.model.message import (
    ElevationUnavailableMessage,
    GeolocationErrorMessage,
    MessageLevel,
    RouteTooShortMessage,
)
from route_planner.model.route_path import RoutePath, format_distance
from route_planner.model.route_share import (
    build_share_url,
    decode_route_param,
    encode_route_param,
    waypoints_from_url,
)
from route_planner.model.waypoint_edits import (
    append_waypoint,
    click_waypoint,
    insert_waypoint,
    move_waypoint,
    remove_waypoint,
    waypoint_marker_color,
)
from route_planner.model.waypoint_history import WaypointHistory

coordinate = st.tuples(
    st.floats(min_value=-90, max_value=90, allow_nan=False, allow_infinity=False),
    st.floats(min_value=-180, max_value=180, allow_nan=False, allow_infinity=False),
)
waypoint_lists = st.lists(coordinate, max_size=8).map(tuple)

A = ((51.50, -0.10),)
B = ((51.50, -0.10), (51.51, -0.11))
C = ((51.50, -0.10), (51.51, -0.11), (51.52, -0.12))


# =============================================================================
# HISTORY
# =============================================================================


def _assert_invariants(history: WaypointHistory) -> None:
    assert 0 <= history.cursor <= len(history) - 1
    assert history.current == history.snapshots[history.cursor]
    assert history.can_undo == (history.cursor > 0)
    assert history.can_redo == (history.cursor < len(history) - 1)


class TestWaypointHistory:
    """WaypointHistory - undo/redo over immutable snapshots."""

    def test_starts_with_single_empty_snapshot(self) -> None:
        history = WaypointHistory()
        assert history.current == ()
        assert len(history) == 1
        assert not history.can_undo
        assert not history.can_redo

    def test_initial_waypoints(self) -> None:
        history = WaypointHistory(initial=[[51.5, -0.1]])
        assert history.current == ((51.5, -0.1),)

    def test_commit_advances_cursor(self) -> None:
        history = WaypointHistory()
        assert history.commit(A)
        assert history.commit(B)
        assert history.current == B
        assert history.cursor == 2

    def test_commit_same_list_is_noop(self) -> None:
        history = WaypointHistory()
        history.commit(B)
        assert not history.commit(list(B))
        assert len(history) == 2

    @given(waypoints=waypoint_lists)
    @settings(max_examples=50)
    def test_repeated_commit_keeps_length(self, waypoints: tuple) -> None:
        history = WaypointHistory()
        history.commit(waypoints)
        length = len(history)
        history.commit(waypoints)
        assert len(history) == length

    def test_undo_redo(self) -> None:
        history = WaypointHistory()
        history.commit(A)
        history.commit(B)
        assert history.undo()
        assert history.current == A
        assert history.redo()
        assert history.current == B

    def test_undo_at_start_and_redo_at_end_are_noops(self) -> None:
        history = WaypointHistory()
        assert not history.undo()
        history.commit(A)
        assert not history.redo()
        assert history.current == A

    def test_commit_after_undo_truncates_redo_branch(self) -> None:
        history = WaypointHistory()
        history.commit(A)
        history.commit(B)
        history.undo()
        history.commit(C)
        assert history.snapshots == ((), A, C)
        assert not history.can_redo

    def test_clear(self) -> None:
        history = WaypointHistory()
        history.commit(A)
        history.commit(B)
        history.clear()
        assert history.snapshots == ((),)
        assert history.cursor == 0

    def test_listeners_notified_on_change_only(self) -> None:
        history = WaypointHistory()
        seen = []
        history.subscribe(lambda h: seen.append(h.current))
        history.commit(A)
        history.commit(A)
        history.undo()
        history.undo()
        assert seen == [A, ()]

    @given(
        ops=st.lists(
            st.one_of(
                st.tuples(st.just("commit"), waypoint_lists),
                st.tuples(st.just("undo"), st.none()),
                st.tuples(st.just("redo"), st.none()),
                st.tuples(st.just("clear"), st.none()),
            ),
            max_size=30,
        )
    )
    @settings(max_examples=100)
    def test_invariants_hold_for_any_sequence(self, ops: list) -> None:
        history = WaypointHistory()
        for op, arg in ops:
            if op == "commit":
                history.commit(arg)
            else:
                getattr(history, op)()
            _assert_invariants(history)


# =============================================================================
# WAYPOINT EDITS
# =============================================================================


class TestWaypointEdits:
    """Edits produce new lists; out-of-range indices produce None."""

    WAYPOINTS = ((0.0, 0.0), (0.0, 0.01), (0.01, 0.01))

    def test_append(self) -> None:
        assert append_waypoint(A, (1.0, 2.0)) == (*A, (1.0, 2.0))

    def test_insert_on_line(self) -> None:
        result = insert_waypoint(self.WAYPOINTS, (0.0002, 0.005), zoom=13)
        assert result == ((0.0, 0.0), (0.0002, 0.005), (0.0, 0.01), (0.01, 0.01))

    def test_insert_off_line(self) -> None:
        assert insert_waypoint(self.WAYPOINTS, (0.5, 0.5), zoom=13) is None

    def test_click_appends_when_off_line(self) -> None:
        assert click_waypoint(self.WAYPOINTS, (0.5, 0.5), zoom=13)[-1] == (0.5, 0.5)

    def test_click_on_empty_list_appends(self) -> None:
        assert click_waypoint((), (1.0, 1.0), zoom=13) == ((1.0, 1.0),)

    def test_move(self) -> None:
        assert move_waypoint(self.WAYPOINTS, 1, (9.0, 9.0))[1] == (9.0, 9.0)

    def test_remove(self) -> None:
        assert remove_waypoint(self.WAYPOINTS, 0) == self.WAYPOINTS[1:]

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_out_of_range(self, index: int) -> None:
        assert move_waypoint(self.WAYPOINTS, index, (1.0, 1.0)) is None
        assert remove_waypoint(self.WAYPOINTS, index) is None

    @pytest.mark.parametrize(
        "index, count, expected",
        [
            (0, 3, StyleConfig.WAYPOINT_START_COLOR),
            (1, 3, StyleConfig.WAYPOINT_MIDDLE_COLOR),
            (2, 3, StyleConfig.WAYPOINT_END_COLOR),
            (0, 1, StyleConfig.WAYPOINT_START_COLOR),
        ],
    )
    def test_marker_colors(self, index: int, count: int, expected: str) -> None:
        assert waypoint_marker_color(index=index, count=count) == expected


# =============================================================================
# SHARING
# =============================================================================


class TestRouteShare:
    """Share links carry the waypoint list as escaped JSON."""

    @given(waypoints=waypoint_lists)
    @settings(max_examples=100)
    def test_round_trip(self, waypoints: tuple) -> None:
        assert decode_route_param(encode_route_param(waypoints)) == waypoints

    def test_round_trip_through_full_url(self) -> None:
        url = build_share_url(origin="https://example.org/", waypoints=C)
        assert url.startswith("https://example.org/route?route=")
        assert waypoints_from_url(url) == C

    def test_param_is_fully_escaped(self) -> None:
        param = encode_route_param(B)
        assert "[" not in param and "," not in param
        assert json.loads(unquote(param)) == [list(p) for p in B]

    def test_already_unescaped_param_decodes(self) -> None:
        assert decode_route_param("[[51.5,-0.1],[51.6,-0.2]]") == ((51.5, -0.1), (51.6, -0.2))

    @pytest.mark.parametrize("param", [None, "", "not-json", quote("{\"a\": 1}"), quote("[[1]]"), quote("[1, 2]")])
    def test_invalid_param_gives_empty_list(self, param: str | None) -> None:
        assert decode_route_param(param) == ()

    def test_empty_route_cannot_be_shared(self) -> None:
        with pytest.raises(InvalidInput, match="create a route"):
            build_share_url(origin="https://example.org", waypoints=())

    def test_url_without_param(self) -> None:
        assert waypoints_from_url("https://example.org/route") == ()


# =============================================================================
# ROUTE PATH AND MESSAGES
# =============================================================================


class TestRoutePath:
    def test_bounds(self) -> None:
        path = RoutePath(points=((1.0, 5.0), (3.0, 2.0), (2.0, 4.0)), distance_m=1500.0)
        assert path.bounds() == (1.0, 2.0, 3.0, 5.0)
        assert path.distance_km == 1.5
        assert len(path) == 3

    def test_empty(self) -> None:
        assert RoutePath().is_empty
        assert RoutePath().bounds() is None

    @pytest.mark.parametrize(
        "km, miles, expected",
        [(5.2, False, "5.20 km"), (10.0, True, "6.21 mi"), (0.0, False, "0.00 km")],
    )
    def test_format_distance(self, km: float, miles: bool, expected: str) -> None:
        assert format_distance(distance_km=km, use_miles=miles) == expected


class TestMessages:
    @pytest.mark.parametrize("error", list(GeolocationError))
    def test_each_geolocation_error_has_distinct_text(self, error: GeolocationError) -> None:
        texts = {GeolocationErrorMessage(error=e).message for e in GeolocationError}
        assert len(texts) == len(GeolocationError)
        assert GeolocationErrorMessage(error=error, used_ip_fallback=True).message.endswith("approximate location instead.")

    def test_elevation_unavailable_is_warning(self) -> None:
        assert ElevationUnavailableMessage().level == MessageLevel.WARNING

    def test_route_too_short_mentions_count(self) -> None:
        assert "1 point" in RouteTooShortMessage(point_count=1).message
