"""Routing service client resolving waypoints into a walkable route.

Uses the public OSRM foot-routing instance run by the OpenStreetMap
community. OSRM takes coordinates in (lon, lat) order and returns the
route geometry as GeoJSON.
"""

import logging
from typing import Protocol

import requests

from route_planner.constants import RoutingConfig
from route_planner.core.errors import MalformedResponse, TransientNetworkFailure
from route_planner.core.geo_calculator import LatLon
from route_planner.model.route_path import RoutePath

logger = logging.getLogger(__name__)


class RoutingProvider(Protocol):
    """Resolves an ordered waypoint list into a RoutePath."""

    def route(self, waypoints: tuple[LatLon, ...]) -> RoutePath: ...


class OsrmRoutingClient:
    """OSRM route service client.

    Example:
        client = OsrmRoutingClient()
        path = client.route(waypoints=((51.505, -0.09), (51.51, -0.1)))
    """

    def __init__(
        self,
        service_url: str = RoutingConfig.SERVICE_URL,
        profile: str = RoutingConfig.PROFILE,
        timeout_s: float = RoutingConfig.REQUEST_TIMEOUT_S,
    ) -> None:
        self.service_url = service_url.rstrip("/")
        self.profile = profile
        self.timeout_s = timeout_s

    def route(self, waypoints: tuple[LatLon, ...]) -> RoutePath:
        """Resolve waypoints into a detailed route.

        Zero waypoints give an empty path and a single waypoint gives a
        one-point path; neither needs the service.

        Raises:
            TransientNetworkFailure: On transport errors or non-2xx status.
            MalformedResponse: If the response carries no usable route.
        """
        if len(waypoints) < 2:
            return RoutePath(points=tuple(waypoints), distance_m=0.0)

        coords = ";".join(f"{lon},{lat}" for lat, lon in waypoints)
        url = f"{self.service_url}/{self.profile}/{coords}"
        params = {"overview": "full", "geometries": "geojson", "alternatives": "false", "steps": "false"}

        try:
            response = requests.get(url, params=params, timeout=self.timeout_s)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise TransientNetworkFailure(f"Routing request failed: {e}", provider="osrm") from e
        except ValueError as e:
            raise MalformedResponse("Routing response is not valid JSON", provider="osrm") from e

        if data.get("code") != "Ok" or not data.get("routes"):
            raise MalformedResponse(f"Routing returned no route (code={data.get('code')})", provider="osrm")

        route = data["routes"][0]
        try:
            # GeoJSON is [lon, lat]
            points = tuple((float(lat), float(lon)) for lon, lat in route["geometry"]["coordinates"])
            distance_m = float(route["distance"])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponse(f"Routing response missing geometry: {e}", provider="osrm") from e

        logger.info(f"Route resolved: {len(waypoints)} waypoints -> {len(points)} points, {distance_m / 1000:.2f} km")
        return RoutePath(points=points, distance_m=distance_m)
