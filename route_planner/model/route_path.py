"""RoutePath - The resolved polyline between the user's waypoints.

Produced by the routing service; much finer-grained than the waypoint list.
Treated as read-only by the elevation pipeline, the gradient renderer and
the playback animator.
"""

from dataclasses import dataclass

from route_planner.constants import UnitConfig
from route_planner.core.geo_calculator import LatLon


@dataclass(frozen=True)
class RoutePath:
    """Resolved route geometry.

    Attributes:
        points: Route coordinates (lat, lon) in travel order
        distance_m: Route length in meters as reported by the routing service
    """

    points: tuple[LatLon, ...] = ()
    distance_m: float = 0.0

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return len(self.points) == 0

    @property
    def distance_km(self) -> float:
        return self.distance_m / 1000

    def bounds(self) -> tuple[float, float, float, float] | None:
        """Return (min_lat, min_lon, max_lat, max_lon), or None for an empty path."""
        if not self.points:
            return None
        lats = [p[0] for p in self.points]
        lons = [p[1] for p in self.points]
        return min(lats), min(lons), max(lats), max(lons)


def format_distance(distance_km: float, use_miles: bool = False) -> str:
    """Format a route distance for the distance badge (e.g. "5.20 km" or "3.23 mi")."""
    if use_miles:
        return f"{distance_km * UnitConfig.KM_TO_MILES:.2f} mi"
    return f"{distance_km:.2f} km"
