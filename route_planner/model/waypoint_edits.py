"""Waypoint list edits triggered by map interactions.

Each function returns a new WaypointList (or None when the edit does not
apply); the caller commits it to WaypointHistory.

- Click on the map: append, or insert if the click is close to the line
- Drag end: move the dragged waypoint
- Drag onto the trash area: remove the dragged waypoint
"""

from route_planner.constants import StyleConfig
from route_planner.core.geo_calculator import LatLon
from route_planner.core.geometry import GeometryKernel
from route_planner.model.waypoint_history import WaypointList


def append_waypoint(waypoints: WaypointList, point: LatLon) -> WaypointList:
    """Add point at the end of the route."""
    return (*waypoints, point)


def insert_waypoint(waypoints: WaypointList, point: LatLon, zoom: float | None) -> WaypointList | None:
    """Insert point into the segment it was clicked on.

    Returns:
        New list with point inserted, or None if the click is not within
        the zoom-dependent hit threshold of any waypoint segment.
    """
    index = GeometryKernel.find_insert_index(point=point, path=list(waypoints), zoom=zoom)
    if index is None:
        return None
    return (*waypoints[:index], point, *waypoints[index:])


def click_waypoint(waypoints: WaypointList, point: LatLon, zoom: float | None) -> WaypointList:
    """Insert point if it lands on the route line, otherwise append it."""
    inserted = insert_waypoint(waypoints=waypoints, point=point, zoom=zoom)
    return inserted if inserted is not None else append_waypoint(waypoints=waypoints, point=point)


def move_waypoint(waypoints: WaypointList, index: int, point: LatLon) -> WaypointList | None:
    """Replace waypoint at index with point. None if index is out of range."""
    if not 0 <= index < len(waypoints):
        return None
    return (*waypoints[:index], point, *waypoints[index + 1 :])


def remove_waypoint(waypoints: WaypointList, index: int) -> WaypointList | None:
    """Drop waypoint at index. None if index is out of range."""
    if not 0 <= index < len(waypoints):
        return None
    return (*waypoints[:index], *waypoints[index + 1 :])


def waypoint_marker_color(index: int, count: int) -> str:
    """Marker color by position: green start, red end, grey in between."""
    if index == 0:
        return StyleConfig.WAYPOINT_START_COLOR
    if index == count - 1:
        return StyleConfig.WAYPOINT_END_COLOR
    return StyleConfig.WAYPOINT_MIDDLE_COLOR
