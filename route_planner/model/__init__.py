"""Data model classes for the route planner.

- WaypointHistory: Undo/redo snapshots of the user's waypoint list
- waypoint_edits: Append/insert/move/remove producing new waypoint lists
- RoutePath: Routed polyline with its distance
- route_share: Encode/decode waypoints in a share link
- Message / ToastMessage: User-facing feedback
"""

from route_planner.model.route_path import RoutePath, format_distance
from route_planner.model.route_share import build_share_url, decode_route_param, encode_route_param
from route_planner.model.waypoint_history import WaypointHistory, WaypointList, as_waypoint_list

__all__ = [
    "WaypointHistory",
    "WaypointList",
    "as_waypoint_list",
    "RoutePath",
    "format_distance",
    "build_share_url",
    "decode_route_param",
    "encode_route_param",
]
