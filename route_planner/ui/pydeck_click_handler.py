"""Map click capture for the route map.

st.pydeck_chart only reports picked objects, so a click on empty map (the
way waypoints are added) would be lost. st_deckgl from streamlit-deckgl
forwards the raw deck.gl onClick event instead, which always carries the
clicked [lon, lat] and, for pickable layers, the picked object's fields.

Waypoint markers are tagged {"type": "waypoint", "id": index}; gradient
segments are tagged {"type": "route", "id": handle}.
"""

import logging
from dataclasses import dataclass
from typing import Any

import pydeck as pdk
import streamlit as st
from streamlit_deckgl import st_deckgl  # type: ignore[import-untyped]

from route_planner.constants import MapConfig
from route_planner.core.geo_calculator import LatLon

logger = logging.getLogger(__name__)

# Event keys added by deck.gl itself rather than by our layer data
_EVENT_KEYS = ("coordinate", "eventType")


@dataclass
class PydeckClickResult:
    """One map click.

    Attributes:
        clicked_object: Fields of the picked marker or segment, None on empty map
        clicked_coordinate: [lon, lat] under the pointer
    """

    clicked_object: dict[str, Any] | None
    clicked_coordinate: list[float] | None

    @property
    def is_object_click(self) -> bool:
        return self.clicked_object is not None

    @property
    def is_map_click(self) -> bool:
        return self.clicked_object is None and self.clicked_coordinate is not None

    @property
    def waypoint_index(self) -> int | None:
        if self.clicked_object is None or self.clicked_object.get("type") != "waypoint":
            return None
        return int(self.clicked_object["id"])

    @property
    def lat_lon(self) -> LatLon | None:
        if self.clicked_coordinate is None:
            return None
        lon, lat = self.clicked_coordinate
        return (lat, lon)

    @staticmethod
    def empty() -> "PydeckClickResult":
        return PydeckClickResult(clicked_object=None, clicked_coordinate=None)


def parse_click_event(event: dict[str, Any] | None) -> PydeckClickResult:
    """Split a st_deckgl event into the picked object and the coordinate.

    The picked object's fields arrive flattened into the event itself:
    {"type": "waypoint", "id": 2, "coordinate": [lon, lat], "eventType": "click"}.
    """
    if not isinstance(event, dict) or not event:
        return PydeckClickResult.empty()

    coordinate = None
    raw = event.get("coordinate")
    if isinstance(raw, (list, tuple)) and len(raw) >= 2:
        coordinate = [float(raw[0]), float(raw[1])]

    picked = None
    if event.get("type") not in (None, "", "click"):
        picked = {key: value for key, value in event.items() if key not in _EVENT_KEYS}
        logger.debug(f"Picked {picked.get('type')} {picked.get('id')}")

    return PydeckClickResult(clicked_object=picked, clicked_coordinate=coordinate)


def render_pydeck_map(deck: pdk.Deck, key: str, height: int = MapConfig.MAP_HEIGHT_PX) -> PydeckClickResult:
    """Draw the map and return the click made since the previous rerun.

    The component returns its last event again on every rerun, so a click
    already handled is reported as empty.

    Args:
        deck: Deck built by PydeckSurface.to_deck()
        key: Component key; changing it discards the remembered click
        height: Map height in pixels
    """
    seen_key = f"_route_map_last_click_{key}"
    st.session_state.setdefault(seen_key, None)

    # Without events=["click"] the component reports nothing
    result = parse_click_event(st_deckgl(deck, key=key, height=height, events=["click"]))
    if not result.is_object_click and not result.is_map_click:
        return PydeckClickResult.empty()

    click_id = _get_click_id(obj=result.clicked_object, coord=result.clicked_coordinate)
    if st.session_state[seen_key] == click_id:
        return PydeckClickResult.empty()
    st.session_state[seen_key] = click_id

    logger.debug(f"New map click: {click_id}")
    return result


def _get_click_id(obj: dict[str, Any] | None, coord: list[float] | None) -> str:
    """Identity of a click, used to skip the component's replayed event."""
    parts = []
    if obj:
        parts.append(f"{obj.get('type', '')}:{obj.get('id', '')}")
    if coord:
        parts.append(f"{coord[0]:.6f},{coord[1]:.6f}")
    return "@".join(parts)
