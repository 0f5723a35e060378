"""Spherical-Earth helpers used by playback and route statistics.

- haversine_distance_m: great-circle distance between two coordinates
- initial_bearing_deg: heading of the player marker along a segment
- lerp: marker position between two route points
- path_length_m: length of a polyline

Coordinates are (lat, lon) in decimal degrees; the Earth is a sphere of
radius 6,371 km.
"""

from math import atan2, cos, degrees, radians, sin, sqrt

EARTH_RADIUS_M = 6_371_000

# (lat, lon) in decimal degrees
LatLon = tuple[float, float]


class GeoCalculator:
    """Geodesy on a spherical Earth. Distances in meters, bearings in degrees from North."""

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Great-circle distance in meters from (lat1, lon1) to (lat2, lon2)."""
        phi1, phi2 = radians(lat1), radians(lat2)
        half_dphi = (phi2 - phi1) / 2
        half_dlambda = radians(lon2 - lon1) / 2
        h = sin(half_dphi) ** 2 + cos(phi1) * cos(phi2) * sin(half_dlambda) ** 2
        return 2 * EARTH_RADIUS_M * atan2(sqrt(h), sqrt(1 - h))

    @staticmethod
    def initial_bearing_deg(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Initial compass heading on the great circle from the first point to the second.

        Returns:
            Degrees in [0, 360), clockwise from true North (90 = East).
        """
        phi1, phi2 = radians(lat1), radians(lat2)
        dlambda = radians(lon2 - lon1)
        east = sin(dlambda) * cos(phi2)
        north = cos(phi1) * sin(phi2) - sin(phi1) * cos(phi2) * cos(dlambda)
        return degrees(atan2(east, north)) % 360

    @staticmethod
    def lerp(a: LatLon, b: LatLon, t: float) -> LatLon:
        """Point at fraction t of the way from a to b, interpolated in the lat/lon plane.

        Args:
            a: Start coordinate (lat, lon)
            b: End coordinate (lat, lon)
            t: 0 gives a, 1 gives b
        """
        return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)

    @staticmethod
    def path_length_m(points: list[LatLon]) -> float:
        """Sum of haversine distances along a polyline of (lat, lon) points."""
        total = 0.0
        for (lat1, lon1), (lat2, lon2) in zip(points, points[1:]):
            total += GeoCalculator.haversine_distance_m(lat1=lat1, lon1=lon1, lat2=lat2, lon2=lon2)
        return total
