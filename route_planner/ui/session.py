"""RouteSession - Wires waypoint edits to routing, elevation, rendering and playback.

Control flow:

1. A map interaction produces a new waypoint list (waypoint_edits)
2. WaypointHistory.commit() records it and notifies the session
3. The surface gets the new waypoints immediately, before routing, so the
   markers never lag behind the edit
4. The routing client resolves the waypoints into a RoutePath
5. GradientRenderer redraws the route, ElevationPipeline rebuilds the profile
6. PlaybackAnimator replays the route on demand

Remote failures and rejected input never escape to the host: they are
turned into messages collected in `messages` (toasts) and
`status_messages()` (inline).
"""

import logging
from dataclasses import dataclass
from typing import Callable

from route_planner.constants import MapConfig, PlaybackConfig
from route_planner.core.elevation_pipeline import ElevationPipeline
from route_planner.core.errors import InvalidInput, LookupFailure
from route_planner.core.geo_calculator import LatLon
from route_planner.core.geocoding import (
    GeocodeResult,
    GeolocationError,
    IpLocationClient,
    NominatimGeocoder,
    locate_with_fallback,
)
from route_planner.core.routing_client import RoutingProvider
from route_planner.model.message import (
    AddressNotFoundMessage,
    ElevationUnavailableMessage,
    EmptyAddressMessage,
    EmptyRouteShareMessage,
    GeolocationErrorMessage,
    LookupFailedMessage,
    Message,
    RouteDistanceMessage,
    RouteTooShortMessage,
    ShareLinkReadyMessage,
    ToastMessage,
    ViewOnlyEditMessage,
    ViewOnlyRouteMessage,
)
from route_planner.model.route_path import RoutePath, format_distance
from route_planner.model.route_share import build_share_url, decode_route_param
from route_planner.model.waypoint_edits import (
    append_waypoint,
    click_waypoint,
    move_waypoint,
    remove_waypoint,
)
from route_planner.model.waypoint_history import WaypointHistory, WaypointList
from route_planner.ui.gradient_renderer import GradientRenderer
from route_planner.ui.map_surface import RenderSurface
from route_planner.ui.playback import PlaybackAnimator, PlaybackFrame, PlaybackMarkerListener

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HoverInfo:
    """Elevation profile hover resolved to the route.

    Attributes:
        ratio: Position along the route (0-1)
        elevation: Smoothed elevation in meters
        path_index: Index into the full route polyline
        position: Route coordinate at path_index (lat, lon)
    """

    ratio: float
    elevation: float
    path_index: int
    position: LatLon


class RouteSession:
    """One user's planning session.

    Example:
        session = RouteSession(surface=surface, routing=OsrmRoutingClient(),
                               pipeline=pipeline, animator=animator)
        session.click_map(lat=51.50, lon=-0.10)
        session.click_map(lat=51.51, lon=-0.11)
        session.play(duration_s=5)
    """

    def __init__(
        self,
        surface: RenderSurface,
        routing: RoutingProvider,
        pipeline: ElevationPipeline,
        animator: PlaybackAnimator,
        geocoder: NominatimGeocoder | None = None,
        ip_locator: IpLocationClient | None = None,
        history: WaypointHistory | None = None,
        view_only: bool = False,
    ) -> None:
        self.surface = surface
        self.routing = routing
        self.pipeline = pipeline
        self.animator = animator
        self.geocoder = geocoder or NominatimGeocoder()
        self.ip_locator = ip_locator or IpLocationClient()
        self.history = history or WaypointHistory()
        self.renderer = GradientRenderer(surface=surface)

        self.route = RoutePath()
        self.view_only = view_only
        self.use_miles = False
        self.messages: list[ToastMessage] = []
        self._fit_on_route = view_only
        self._listeners: list[Callable[["RouteSession"], None]] = []

        self.history.subscribe(self._on_history_change)
        self.animator.add_listener(PlaybackMarkerListener(surface=surface))
        self.animator.subscribe(self._on_playback_frame)

        self.surface.set_waypoints(self.history.current)

    @classmethod
    def from_share_param(cls, param: str | None, **kwargs) -> "RouteSession":
        """Open a shared route in view-only mode.

        An invalid or missing parameter opens an empty, editable session.
        """
        waypoints = decode_route_param(param)
        session = cls(history=WaypointHistory(initial=waypoints), view_only=bool(waypoints), **kwargs)
        if waypoints:
            logger.info(f"Opened shared route with {len(waypoints)} waypoints (view-only)")
            session.refresh_route()
        return session

    # =========================================================================
    # State
    # =========================================================================

    @property
    def waypoints(self) -> WaypointList:
        return self.history.current

    @property
    def distance_text(self) -> str:
        return format_distance(distance_km=self.route.distance_km, use_miles=self.use_miles)

    def status_messages(self) -> list[Message]:
        """Inline status for the current state."""
        status: list[Message] = []
        if self.view_only:
            status.append(ViewOnlyRouteMessage(waypoint_count=len(self.waypoints)))
        if not self.route.is_empty:
            status.append(RouteDistanceMessage(distance_text=self.distance_text))
        if self.pipeline.unavailable:
            status.append(ElevationUnavailableMessage())
        return status

    def pop_messages(self) -> list[ToastMessage]:
        """Return and forget the pending toast messages."""
        messages, self.messages = self.messages, []
        return messages

    # =========================================================================
    # Waypoint edits
    # =========================================================================

    def click_map(self, lat: float, lon: float) -> bool:
        """Insert on the route line if the click is close to it, else append."""
        if not self._check_editable():
            return False
        return self.history.commit(click_waypoint(waypoints=self.waypoints, point=(lat, lon), zoom=self.surface.zoom))

    def add_waypoint(self, lat: float, lon: float) -> bool:
        if not self._check_editable():
            return False
        return self.history.commit(append_waypoint(waypoints=self.waypoints, point=(lat, lon)))

    def move_waypoint(self, index: int, lat: float, lon: float) -> bool:
        if not self._check_editable():
            return False
        new_list = move_waypoint(waypoints=self.waypoints, index=index, point=(lat, lon))
        if new_list is None:
            logger.warning(f"Ignoring move of waypoint {index}: only {len(self.waypoints)} waypoints")
            return False
        return self.history.commit(new_list)

    def remove_waypoint(self, index: int) -> bool:
        if not self._check_editable():
            return False
        new_list = remove_waypoint(waypoints=self.waypoints, index=index)
        if new_list is None:
            logger.warning(f"Ignoring removal of waypoint {index}: only {len(self.waypoints)} waypoints")
            return False
        return self.history.commit(new_list)

    def undo(self) -> bool:
        if not self._check_editable():
            return False
        return self.history.undo()

    def redo(self) -> bool:
        if not self._check_editable():
            return False
        return self.history.redo()

    def clear(self) -> None:
        """Drop the route and its history; also leaves view-only mode."""
        self.animator.stop()
        self.view_only = False
        self._fit_on_route = False
        self.history.clear()

    def _check_editable(self) -> bool:
        if self.view_only:
            self.messages.append(ViewOnlyEditMessage())
            return False
        return True

    def _on_history_change(self, history: WaypointHistory) -> None:
        self.surface.set_waypoints(history.current)
        self.refresh_route()

    # =========================================================================
    # Route
    # =========================================================================

    def refresh_route(self) -> None:
        """Resolve the current waypoints and rebuild everything derived from them."""
        waypoints = self.waypoints
        self.animator.stop()

        if not waypoints:
            self.route = RoutePath()
            self.renderer.clear()
            self.pipeline.reset()
            self.surface.remove_hover_marker()
            logger.info("Route cleared")
            self._notify()
            return

        try:
            route = self.routing.route(waypoints)
        except LookupFailure as e:
            logger.warning(f"Routing failed for {len(waypoints)} waypoints: {e}")
            # Nothing derived from the previous waypoints may outlive the edit
            self.route = RoutePath()
            self.renderer.clear()
            self.pipeline.reset()
            self.surface.remove_hover_marker()
            self.messages.append(LookupFailedMessage(action="find a route"))
            self._notify()
            return

        self.route = route
        self.renderer.render(route.points)
        self.pipeline.load(route.points)

        bounds = route.bounds()
        if self._fit_on_route and bounds is not None:
            self.surface.fit_bounds(bounds)
            self._fit_on_route = False
        self._notify()

    def on_zoom_end(self, zoom: float) -> None:
        """Redraw the gradient for the new zoom level."""
        self.surface.zoom = zoom
        self.renderer.rerender()

    def toggle_units(self) -> str:
        self.use_miles = not self.use_miles
        return self.distance_text

    # =========================================================================
    # Playback
    # =========================================================================

    def play(self, duration_s: float = PlaybackConfig.DEFAULT_DURATION_S) -> bool:
        """Start playback of the current route and fit the map to it."""
        try:
            self.animator.start(route=self.route.points, duration_s=duration_s)
        except InvalidInput as e:
            logger.warning(f"Playback rejected: {e}")
            self.messages.append(RouteTooShortMessage(point_count=len(self.route)))
            return False

        bounds = self.route.bounds()
        if bounds is not None:
            self.surface.fit_bounds(bounds)
        self._notify()
        return True

    def stop_playback(self) -> bool:
        stopped = self.animator.stop()
        if stopped:
            self._notify()
        return stopped

    def _on_playback_frame(self, frame: PlaybackFrame) -> None:
        self.surface.show_player_marker(position=frame.position, heading_deg=frame.heading_deg)

    # =========================================================================
    # Elevation profile hover
    # =========================================================================

    def hover(self, ratio: float) -> HoverInfo | None:
        """Resolve a profile position to an elevation and a route coordinate."""
        elevation = self.pipeline.sample_at(ratio)
        path_index = self.pipeline.path_index_at(ratio)
        if elevation is None or path_index is None:
            return None
        position = self.pipeline.path[path_index]
        self.surface.show_hover_marker(position)
        return HoverInfo(ratio=max(0.0, min(1.0, ratio)), elevation=elevation, path_index=path_index, position=position)

    def clear_hover(self) -> None:
        self.surface.remove_hover_marker()

    # =========================================================================
    # Share, search and location
    # =========================================================================

    def share_url(self, origin: str) -> str | None:
        try:
            url = build_share_url(origin=origin, waypoints=self.waypoints)
        except InvalidInput as e:
            logger.warning(f"Share rejected: {e}")
            self.messages.append(EmptyRouteShareMessage())
            return None
        self.messages.append(ShareLinkReadyMessage(url=url))
        return url

    def search_address(self, query: str) -> list[GeocodeResult]:
        """Search an address and center the map on the best match."""
        try:
            results = self.geocoder.search(query)
        except InvalidInput as e:
            logger.warning(f"Address search rejected: {e}")
            self.messages.append(EmptyAddressMessage())
            return []
        except LookupFailure as e:
            logger.warning(f"Address search failed: {e}")
            self.messages.append(LookupFailedMessage(action="search the address"))
            return []

        if not results:
            self.messages.append(AddressNotFoundMessage(query=query.strip()))
            return []

        best = results[0]
        self.surface.set_view(lat=best.lat, lon=best.lon, zoom=MapConfig.LOCATED_ZOOM)
        self._notify()
        return results

    def on_geolocation(
        self,
        position: LatLon | None = None,
        error: GeolocationError | None = None,
    ) -> LatLon | None:
        """Center on the browser location, or fall back to IP location on error."""
        if position is not None:
            self.surface.set_view(lat=position[0], lon=position[1], zoom=MapConfig.LOCATED_ZOOM)
            self._notify()
            return position

        error = error or GeolocationError.UNAVAILABLE
        logger.warning(f"Geolocation failed: {error.name}")
        fallback = locate_with_fallback(self.ip_locator)
        self.messages.append(GeolocationErrorMessage(error=error, used_ip_fallback=fallback is not None))
        if fallback is not None:
            self.surface.set_view(lat=fallback[0], lon=fallback[1], zoom=MapConfig.LOCATED_ZOOM)
        self._notify()
        return fallback

    def locate_on_start(self) -> LatLon | None:
        """Center a fresh, editable session on the user's approximate location.

        Silent on failure: the map keeps its default view.
        """
        if self.view_only or self.waypoints:
            return None
        location = locate_with_fallback(self.ip_locator)
        if location is not None:
            self.surface.set_view(lat=location[0], lon=location[1], zoom=MapConfig.LOCATED_ZOOM)
            self._notify()
        return location

    # =========================================================================
    # Listeners
    # =========================================================================

    def subscribe(self, callback: Callable[["RouteSession"], None]) -> None:
        """Call callback(session) after every completed operation."""
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in self._listeners:
            callback(self)

    def __repr__(self) -> str:
        return (
            f"RouteSession(waypoints={len(self.waypoints)}, route={len(self.route)} pts, "
            f"view_only={self.view_only}, playing={self.animator.is_playing})"
        )
