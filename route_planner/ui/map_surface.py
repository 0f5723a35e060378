"""Map rendering surface for the route planner.

RenderSurface is what the session, the gradient renderer and the playback
listener draw on. PydeckSurface keeps the drawn objects and turns them into
a pydeck.Deck on every Streamlit rerun.

Key pydeck conventions:
- Uses [lon, lat] coordinate order (GeoJSON standard)
- Colors as RGBA lists [R, G, B, A] (0-255)
- Data prepared as list[dict] for GPU streaming
- pickable=True enables click detection

Z-order (back to front): waypoint line -> gradient -> hover -> waypoints -> player
"""

import logging
import math
from typing import Protocol

import pydeck as pdk

from route_planner.constants import MapConfig, StyleConfig
from route_planner.core.geo_calculator import LatLon
from route_planner.model.waypoint_edits import waypoint_marker_color
from route_planner.model.waypoint_history import WaypointList
from route_planner.ui.gradient_renderer import RouteSegmentVisual

logger = logging.getLogger(__name__)

Bounds = tuple[float, float, float, float]  # (min_lat, min_lon, max_lat, max_lon)


class RenderSurface(Protocol):
    """Drawable map: segments, markers and view control."""

    zoom: float

    def draw_segment(self, segment: RouteSegmentVisual) -> int: ...

    def remove_segment(self, handle: int) -> None: ...

    def set_waypoints(self, waypoints: WaypointList) -> None: ...

    def show_player_marker(self, position: LatLon, heading_deg: float) -> None: ...

    def remove_player_marker(self) -> None: ...

    def set_intermediate_waypoint_opacity(self, opacity: float) -> None: ...

    def show_hover_marker(self, position: LatLon) -> None: ...

    def remove_hover_marker(self) -> None: ...

    def set_view(self, lat: float, lon: float, zoom: float | None = None) -> None: ...

    def fit_bounds(self, bounds: Bounds) -> None: ...


def hex_to_rgba(hex_color: str, alpha: float = 1.0) -> list[int]:
    """'#4CAF50' -> [76, 175, 80, 255]."""
    value = hex_color.lstrip("#")
    return [int(value[i : i + 2], 16) for i in (0, 2, 4)] + [int(round(alpha * 255))]


def raster_map_style(style: str) -> dict[str, object]:
    """Mapbox GL style dict rendering one of the XYZ raster tile sets."""
    return {
        "version": 8,
        "sources": {
            style: {
                "type": "raster",
                "tiles": [MapConfig.TILE_STYLES[style]],
                "tileSize": 256,
                "attribution": MapConfig.TILE_ATTRIBUTIONS[style],
            }
        },
        "layers": [{"id": style, "type": "raster", "source": style, "minzoom": 0, "maxzoom": MapConfig.MAX_ZOOM}],
    }


def _mercator_y(lat: float) -> float:
    lat = max(-85.0511, min(85.0511, lat))
    return math.log(math.tan(math.pi / 4 + math.radians(lat) / 2))


def fit_zoom(
    bounds: Bounds,
    width_px: int = MapConfig.MAP_WIDTH_PX,
    height_px: int = MapConfig.MAP_HEIGHT_PX,
    padding_px: int = MapConfig.FIT_PADDING_PX,
) -> float:
    """Largest Web Mercator zoom at which bounds fit into the viewport."""
    min_lat, min_lon, max_lat, max_lon = bounds
    usable_w = max(1, width_px - 2 * padding_px)
    usable_h = max(1, height_px - 2 * padding_px)

    lon_fraction = (max_lon - min_lon) / 360
    lat_fraction = (_mercator_y(max_lat) - _mercator_y(min_lat)) / (2 * math.pi)

    zoom = float(MapConfig.MAX_ZOOM)
    if lon_fraction > 0:
        zoom = min(zoom, math.log2(usable_w / 256 / lon_fraction))
    if lat_fraction > 0:
        zoom = min(zoom, math.log2(usable_h / 256 / lat_fraction))
    return max(float(MapConfig.MIN_ZOOM), zoom)


class PydeckSurface:
    """RenderSurface backed by pydeck.

    Example:
        surface = PydeckSurface()
        surface.set_waypoints(((51.50, -0.10), (51.51, -0.11)))
        deck = surface.to_deck()
    """

    def __init__(
        self,
        center_lat: float = MapConfig.START_CENTER_LAT,
        center_lon: float = MapConfig.START_CENTER_LON,
        zoom: float = MapConfig.DEFAULT_ZOOM,
        tile_style: str = "standard",
    ) -> None:
        self.center_lat = center_lat
        self.center_lon = center_lon
        self.zoom = zoom
        self.tile_style = tile_style

        self.segments: dict[int, RouteSegmentVisual] = {}
        self._next_handle = 1
        self.waypoints: WaypointList = ()
        self.intermediate_opacity = 1.0
        self.player: tuple[LatLon, float] | None = None
        self.hover: LatLon | None = None

    # =========================================================================
    # RenderSurface
    # =========================================================================

    def draw_segment(self, segment: RouteSegmentVisual) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self.segments[handle] = segment
        return handle

    def remove_segment(self, handle: int) -> None:
        self.segments.pop(handle, None)

    def set_waypoints(self, waypoints: WaypointList) -> None:
        self.waypoints = tuple(waypoints)

    def show_player_marker(self, position: LatLon, heading_deg: float) -> None:
        self.player = (position, heading_deg)

    def remove_player_marker(self) -> None:
        self.player = None

    def set_intermediate_waypoint_opacity(self, opacity: float) -> None:
        self.intermediate_opacity = opacity

    def show_hover_marker(self, position: LatLon) -> None:
        self.hover = position

    def remove_hover_marker(self) -> None:
        self.hover = None

    def set_view(self, lat: float, lon: float, zoom: float | None = None) -> None:
        self.center_lat = lat
        self.center_lon = lon
        if zoom is not None:
            self.zoom = zoom

    def fit_bounds(self, bounds: Bounds) -> None:
        min_lat, min_lon, max_lat, max_lon = bounds
        self.set_view(lat=(min_lat + max_lat) / 2, lon=(min_lon + max_lon) / 2, zoom=fit_zoom(bounds))
        logger.debug(f"Fit map to bounds {bounds}: zoom {self.zoom:.1f}")

    def set_tile_style(self, style: str) -> None:
        if style not in MapConfig.TILE_STYLES:
            raise ValueError(f"Unknown tile style '{style}'. Expected one of {list(MapConfig.TILE_STYLES)}")
        self.tile_style = style

    # =========================================================================
    # Deck
    # =========================================================================

    def get_view_state(self) -> pdk.ViewState:
        return pdk.ViewState(latitude=self.center_lat, longitude=self.center_lon, zoom=self.zoom, pitch=0, bearing=0)

    def to_deck(self) -> pdk.Deck:
        """Build the deck for the current drawing."""
        layers = [
            *self._waypoint_line_layers(),
            *self._segment_layers(),
            *self._hover_layers(),
            *self._waypoint_layers(),
            *self._player_layers(),
        ]
        return pdk.Deck(
            map_style=raster_map_style(self.tile_style),
            map_provider="mapbox",
            initial_view_state=self.get_view_state(),
            layers=layers,
            tooltip={"html": "<b>{name}</b>"},
            parameters={"pickingRadius": MapConfig.PICKING_RADIUS_PX},
        )

    def _waypoint_line_layers(self) -> list[pdk.Layer]:
        # Straight waypoint-to-waypoint line, shown until the route resolves
        if len(self.waypoints) < 2 or self.segments:
            return []
        data = [{"path": [[lon, lat] for lat, lon in self.waypoints], "name": "Route"}]
        return [
            pdk.Layer(
                "PathLayer",
                data,
                get_path="path",
                get_color=hex_to_rgba(StyleConfig.ROUTE_LINE_COLOR, StyleConfig.ROUTE_LINE_OPACITY),
                get_width=StyleConfig.ROUTE_LINE_WEIGHT,
                width_units="pixels",
                id="waypoint_line",
            )
        ]

    def _segment_layers(self) -> list[pdk.Layer]:
        if not self.segments:
            return []
        data = [
            {
                "type": "route",
                "id": handle,
                "path": [[s.start[1], s.start[0]], [s.end[1], s.end[0]]],
                "color": s.rgba,
                "width": s.weight,
                "name": "Route",
            }
            for handle, s in self.segments.items()
        ]
        return [
            pdk.Layer(
                "PathLayer",
                data,
                get_path="path",
                get_color="color",
                get_width="width",
                width_units="pixels",
                cap_rounded=True,
                joint_rounded=True,
                pickable=True,
                id="route_gradient",
            )
        ]

    def _waypoint_layers(self) -> list[pdk.Layer]:
        if not self.waypoints:
            return []
        count = len(self.waypoints)
        data = []
        for i, (lat, lon) in enumerate(self.waypoints):
            is_intermediate = 0 < i < count - 1
            alpha = self.intermediate_opacity if is_intermediate else 1.0
            data.append(
                {
                    "type": "waypoint",
                    "id": i,
                    "position": [lon, lat],
                    "color": hex_to_rgba(waypoint_marker_color(index=i, count=count), alpha),
                    "label": str(i + 1) if alpha > 0 else "",
                    "name": f"Waypoint {i + 1}",
                }
            )
        return [
            pdk.Layer(
                "ScatterplotLayer",
                data,
                get_position="position",
                get_fill_color="color",
                get_line_color=[255, 255, 255, 255],
                get_radius=StyleConfig.WAYPOINT_RADIUS_PX,
                radius_units="pixels",
                stroked=True,
                line_width_min_pixels=2,
                pickable=True,
                auto_highlight=True,
                id="waypoints",
            ),
            pdk.Layer(
                "TextLayer",
                data,
                get_position="position",
                get_text="label",
                get_size=12,
                get_color=[255, 255, 255, 255],
                get_alignment_baseline="'center'",
                id="waypoint_labels",
            ),
        ]

    def _player_layers(self) -> list[pdk.Layer]:
        if self.player is None:
            return []
        (lat, lon), heading = self.player
        data = [{"position": [lon, lat], "angle": -heading, "arrow": "▲", "name": "Playback"}]
        return [
            pdk.Layer(
                "ScatterplotLayer",
                data,
                get_position="position",
                get_fill_color=hex_to_rgba(StyleConfig.PLAYER_COLOR),
                get_line_color=[255, 255, 255, 255],
                get_radius=StyleConfig.PLAYER_RADIUS_PX,
                radius_units="pixels",
                stroked=True,
                line_width_min_pixels=2,
                id="player",
            ),
            pdk.Layer(
                "TextLayer",
                data,
                get_position="position",
                get_text="arrow",
                get_angle="angle",
                get_size=14,
                get_color=[255, 255, 255, 255],
                id="player_heading",
            ),
        ]

    def _hover_layers(self) -> list[pdk.Layer]:
        if self.hover is None:
            return []
        lat, lon = self.hover
        return [
            pdk.Layer(
                "ScatterplotLayer",
                [{"position": [lon, lat], "name": "Profile position"}],
                get_position="position",
                get_fill_color=hex_to_rgba(StyleConfig.HOVER_COLOR),
                get_radius=6,
                radius_units="pixels",
                id="hover",
            )
        ]
