"""Point-to-polyline queries for click and hover interactions.

Distances are measured in a flat lat/lon plane (degrees), not on the sphere.
This is an approximation that is only accurate at local map scale and gets
worse towards the poles where a degree of longitude shrinks. Click hit
behavior is tuned to this metric, so it stays as is.
"""

import logging
from math import sqrt

from route_planner.constants import GeometryConfig
from route_planner.core.geo_calculator import LatLon

logger = logging.getLogger(__name__)


class GeometryKernel:
    """Pure geometric helpers on (lat, lon) coordinates.

    Example:
        idx = GeometryKernel.find_insert_index(point=(51.5, -0.1), path=waypoints, zoom=14)
        if idx is not None:
            waypoints.insert(idx, point)
    """

    @staticmethod
    def distance_to_segment(point: LatLon, seg_start: LatLon, seg_end: LatLon) -> float:
        """Distance from point to the closest point of segment seg_start-seg_end.

        The projection parameter is clamped to [0, 1], so for a degenerate
        segment (start == end) this is the distance to that endpoint.

        Args:
            point: Query point (lat, lon)
            seg_start: Segment start (lat, lon)
            seg_end: Segment end (lat, lon)

        Returns:
            Distance in degrees (same units as the input).
        """
        x, y = point
        x1, y1 = seg_start
        x2, y2 = seg_end

        dx_seg = x2 - x1
        dy_seg = y2 - y1
        len_sq = dx_seg * dx_seg + dy_seg * dy_seg

        param = 0.0
        if len_sq != 0:
            param = ((x - x1) * dx_seg + (y - y1) * dy_seg) / len_sq
            param = max(0.0, min(1.0, param))

        nearest_x = x1 + param * dx_seg
        nearest_y = y1 + param * dy_seg

        return sqrt((x - nearest_x) ** 2 + (y - nearest_y) ** 2)

    @staticmethod
    def nearest_segment(point: LatLon, path: list[LatLon]) -> tuple[int, float] | None:
        """Find the segment of path closest to point.

        Returns:
            (insert_index, distance) where insert_index = i + 1 for the pair
            (path[i], path[i + 1]), or None if path has fewer than 2 points.
            Ties keep the earliest segment.
        """
        if len(path) < 2:
            return None

        best_index = -1
        best_distance = float("inf")
        for i in range(len(path) - 1):
            distance = GeometryKernel.distance_to_segment(point, path[i], path[i + 1])
            if distance < best_distance:
                best_distance = distance
                best_index = i + 1

        return best_index, best_distance

    @staticmethod
    def find_nearest_segment(point: LatLon, path: list[LatLon]) -> int | None:
        """Insertion index (i + 1) of the segment closest to point, or None if path has < 2 points."""
        nearest = GeometryKernel.nearest_segment(point=point, path=path)
        return nearest[0] if nearest is not None else None

    @staticmethod
    def hit_threshold(
        zoom: float,
        base_threshold: float = GeometryConfig.BASE_THRESHOLD_DEG,
        min_threshold: float = GeometryConfig.MIN_THRESHOLD_DEG,
        reference_zoom: float = GeometryConfig.REFERENCE_ZOOM,
    ) -> float:
        """Zoom-adaptive "click near a line" distance.

        threshold = max(min_threshold, base_threshold * 2 ** (reference_zoom - zoom))

        Doubles with each zoom level out, halves with each level in, and
        never drops below min_threshold.
        """
        return max(min_threshold, base_threshold * 2 ** (reference_zoom - zoom))

    @staticmethod
    def find_insert_index(point: LatLon, path: list[LatLon], zoom: float | None) -> int | None:
        """Insertion index if point is within the hit threshold of path, else None.

        Args:
            point: Clicked point (lat, lon)
            path: Waypoint polyline
            zoom: Current map zoom, or None if unknown (uses DEFAULT_ZOOM_FALLBACK)
        """
        nearest = GeometryKernel.nearest_segment(point=point, path=path)
        if nearest is None:
            return None

        insert_index, distance = nearest
        current_zoom = zoom if zoom is not None else GeometryConfig.DEFAULT_ZOOM_FALLBACK
        threshold = GeometryKernel.hit_threshold(zoom=current_zoom)
        logger.debug(f"Click near route: zoom={current_zoom}, threshold={threshold:.6f}, distance={distance:.6f}")

        return insert_index if distance < threshold else None
