"""Shared pytest fixtures for route_planner tests.

Provides fakes for the remote collaborators and the map surface so tests
run without network access, Streamlit or a browser:

- FakeSurface: records everything drawn on the map
- FakeElevationClient: scripted per-provider answers and failures
- FakeRoutingClient: returns the waypoints themselves as the route
- ManualFrameScheduler: animation frames ticked by the test

COORDINATE SYSTEM:
    Tests use small coordinates near lat=0/lon=0 where the flat-plane
    geometry is easy to check by hand.
"""

from unittest import mock

import pytest
import requests

from route_planner.core.elevation_pipeline import ElevationPipeline
from route_planner.core.errors import MalformedResponse, TransientNetworkFailure
from route_planner.core.geocoding import GeocodeResult
from route_planner.model.route_path import RoutePath
from route_planner.ui.gradient_renderer import RouteSegmentVisual
from route_planner.ui.playback import ManualFrameScheduler, PlaybackAnimator
from route_planner.ui.session import RouteSession


# =============================================================================
# FAKE MAP SURFACE
# =============================================================================


class FakeSurface:
    """RenderSurface that records calls instead of drawing."""

    def __init__(self, zoom: float = 13) -> None:
        self.zoom = zoom
        self.segments: dict[int, RouteSegmentVisual] = {}
        self.removed_handles: list[int] = []
        self._next_handle = 1
        self.waypoints: tuple = ()
        self.waypoint_updates: list[tuple] = []
        self.player = None
        self.intermediate_opacity = 1.0
        self.hover = None
        self.view = None
        self.fitted_bounds: list = []

    def draw_segment(self, segment: RouteSegmentVisual) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self.segments[handle] = segment
        return handle

    def remove_segment(self, handle: int) -> None:
        self.removed_handles.append(handle)
        self.segments.pop(handle, None)

    def set_waypoints(self, waypoints) -> None:
        self.waypoints = tuple(waypoints)
        self.waypoint_updates.append(self.waypoints)

    def show_player_marker(self, position, heading_deg: float) -> None:
        self.player = (position, heading_deg)

    def remove_player_marker(self) -> None:
        self.player = None

    def set_intermediate_waypoint_opacity(self, opacity: float) -> None:
        self.intermediate_opacity = opacity

    def show_hover_marker(self, position) -> None:
        self.hover = position

    def remove_hover_marker(self) -> None:
        self.hover = None

    def set_view(self, lat: float, lon: float, zoom: float | None = None) -> None:
        self.view = (lat, lon, zoom)

    def fit_bounds(self, bounds) -> None:
        self.fitted_bounds.append(bounds)


# =============================================================================
# FAKE REMOTE COLLABORATORS
# =============================================================================


class FakeElevationClient:
    """Elevation lookup with scripted behavior per provider.

    Args:
        failing: Providers that always raise TransientNetworkFailure
        malformed: Providers that always raise MalformedResponse
        elevation_fn: (lat, lon) -> elevation for successful lookups
    """

    def __init__(self, failing=(), malformed=(), elevation_fn=None) -> None:
        self.failing = set(failing)
        self.malformed = set(malformed)
        self.elevation_fn = elevation_fn or (lambda lat, lon: 100.0 + lat * 1000)
        self.calls: list[tuple[str, int]] = []

    def lookup(self, locations, api: str) -> list[float]:
        self.calls.append((api, len(locations)))
        if api in self.failing:
            raise TransientNetworkFailure("connection refused", provider=api)
        if api in self.malformed:
            raise MalformedResponse("missing results", provider=api)
        return [self.elevation_fn(lat, lon) for lat, lon in locations]


class FakeRoutingClient:
    """Routes straight through the waypoints; distance is 1 km per leg."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple] = []

    def route(self, waypoints) -> RoutePath:
        self.calls.append(tuple(waypoints))
        if self.fail:
            raise TransientNetworkFailure("routing down", provider="osrm")
        return RoutePath(points=tuple(waypoints), distance_m=1000.0 * max(0, len(waypoints) - 1))


class FakeGeocoder:
    """Geocoder returning fixed results; empty query handled like the real one."""

    def __init__(self, results=None) -> None:
        self.results = results if results is not None else [GeocodeResult(name="Somewhere", lat=1.0, lon=2.0)]

    def search(self, query: str):
        from route_planner.core.errors import InvalidInput

        if not query.strip():
            raise InvalidInput("Please enter an address to search.")
        return list(self.results)


class FakeIpLocator:
    def __init__(self, location=(48.0, 11.0), fail: bool = False) -> None:
        self.location = location
        self.fail = fail

    def locate(self):
        if self.fail:
            raise TransientNetworkFailure("ip lookup failed", provider="ipapi")
        return self.location


def mock_response(json_data=None, status: int = 200, json_error: bool = False) -> mock.Mock:
    """Stand-in for requests.Response, for patching requests.get/post."""
    response = mock.Mock()
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    else:
        response.raise_for_status.return_value = None
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = json_data
    return response


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def sleep_calls() -> list[float]:
    """Pass sleep=sleep_calls.append to record backoff delays without waiting."""
    return []


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def scheduler() -> ManualFrameScheduler:
    return ManualFrameScheduler()


@pytest.fixture
def animator(scheduler: ManualFrameScheduler) -> PlaybackAnimator:
    return PlaybackAnimator(scheduler=scheduler)


@pytest.fixture
def elevation_client() -> FakeElevationClient:
    return FakeElevationClient()


@pytest.fixture
def pipeline(elevation_client: FakeElevationClient) -> ElevationPipeline:
    return ElevationPipeline(client=elevation_client, sleep=lambda s: None)


@pytest.fixture
def routing() -> FakeRoutingClient:
    return FakeRoutingClient()


@pytest.fixture
def session(surface, routing, pipeline, animator) -> RouteSession:
    return RouteSession(
        surface=surface,
        routing=routing,
        pipeline=pipeline,
        animator=animator,
        geocoder=FakeGeocoder(),
        ip_locator=FakeIpLocator(),
    )
