"""Shareable route links.

A route is shared as its waypoint list, JSON-encoded and percent-escaped
into a single query parameter:

    https://example.org/route?route=%5B%5B51.505%2C-0.09%5D%2C...%5D

Decoding reproduces the same ordered coordinates. Shared routes open in
view-only mode.
"""

import json
import logging
from urllib.parse import parse_qs, quote, unquote, urlparse

from route_planner.constants import ShareConfig
from route_planner.core.errors import InvalidInput
from route_planner.model.waypoint_history import WaypointList, as_waypoint_list

logger = logging.getLogger(__name__)


def encode_route_param(waypoints: WaypointList) -> str:
    """Encode waypoints as a percent-escaped JSON array of [lat, lon] pairs."""
    payload = json.dumps([[lat, lon] for lat, lon in waypoints], separators=(",", ":"))
    return quote(payload, safe="")


def decode_route_param(param: str | None) -> WaypointList:
    """Decode a route parameter back into a waypoint list.

    Invalid input is logged and yields an empty list, so a broken link opens
    an empty map instead of failing.

    Args:
        param: Value of the route query parameter (escaped or already unescaped)
    """
    if not param:
        return ()
    try:
        data = json.loads(unquote(param))
        return as_waypoint_list(data)
    except (ValueError, TypeError) as e:
        logger.warning(f"Error parsing shared route: {e}")
        return ()


def build_share_url(origin: str, waypoints: WaypointList) -> str:
    """Build the full share link for waypoints.

    Raises:
        InvalidInput: If there are no waypoints to share.
    """
    if not waypoints:
        raise InvalidInput("Please create a route before sharing.")
    return f"{origin.rstrip('/')}{ShareConfig.ROUTE_PATH}?{ShareConfig.QUERY_PARAM}={encode_route_param(waypoints)}"


def waypoints_from_url(url: str) -> WaypointList:
    """Extract the shared waypoints from a full share link."""
    query = parse_qs(urlparse(url).query)
    values = query.get(ShareConfig.QUERY_PARAM)
    # parse_qs already unescapes the value once
    return decode_route_param(values[0]) if values else ()
