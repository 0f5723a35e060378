"""GradientRenderer - Route line colored from dark to light blue along its length.

One segment is drawn per consecutive pair of route points, each with its
own interpolated color. The full set is replaced on every render; the map
surface redraws geometry per zoom level, so the host calls rerender() on
every zoom end.
"""

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from route_planner.constants import StyleConfig
from route_planner.core.geo_calculator import LatLon

logger = logging.getLogger(__name__)

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class RouteSegmentVisual:
    """One colored line segment between two consecutive route points."""

    start: LatLon
    end: LatLon
    color: RGB
    weight: float = StyleConfig.SEGMENT_WEIGHT
    opacity: float = StyleConfig.SEGMENT_OPACITY

    @property
    def hex_color(self) -> str:
        return "#{:02x}{:02x}{:02x}".format(*self.color)

    @property
    def rgba(self) -> list[int]:
        """Color as deck.gl [R, G, B, A]."""
        return [*self.color, int(round(self.opacity * 255))]


def interpolate_color(start_rgb: RGB, end_rgb: RGB, t: float) -> RGB:
    """Linear per-channel blend, rounded half up to whole channel values."""
    return tuple(int(math.floor(s + (e - s) * t + 0.5)) for s, e in zip(start_rgb, end_rgb))  # type: ignore[return-value]


def gradient_segments(
    path: Sequence[LatLon],
    start_rgb: RGB = StyleConfig.GRADIENT_START_RGB,
    end_rgb: RGB = StyleConfig.GRADIENT_END_RGB,
    weight: float = StyleConfig.SEGMENT_WEIGHT,
    opacity: float = StyleConfig.SEGMENT_OPACITY,
) -> list[RouteSegmentVisual]:
    """Colored segments for path, t = i / (len - 2) for segment i.

    Fewer than two points give no segments. A two-point path has a single
    segment in the start color.
    """
    if len(path) < 2:
        return []
    span = len(path) - 2
    return [
        RouteSegmentVisual(
            start=path[i],
            end=path[i + 1],
            color=interpolate_color(start_rgb=start_rgb, end_rgb=end_rgb, t=i / span if span else 0.0),
            weight=weight,
            opacity=opacity,
        )
        for i in range(len(path) - 1)
    ]


class GradientRenderer:
    """Draws the gradient route line on a RenderSurface.

    Example:
        renderer = GradientRenderer(surface=surface)
        renderer.render(path=route.points)
        renderer.rerender()  # after zoom end
    """

    def __init__(self, surface) -> None:
        self.surface = surface
        self._path: tuple[LatLon, ...] = ()
        self._handles: list[int] = []

    @property
    def segment_count(self) -> int:
        return len(self._handles)

    def render(self, path: Sequence[LatLon]) -> list[RouteSegmentVisual]:
        """Replace all drawn segments with the gradient for path."""
        self._remove_segments()
        self._path = tuple(path)
        segments = gradient_segments(self._path)
        self._handles = [self.surface.draw_segment(segment) for segment in segments]
        logger.debug(f"Gradient rendered: {len(segments)} segments")
        return segments

    def rerender(self) -> list[RouteSegmentVisual]:
        """Redraw the last rendered path from scratch."""
        return self.render(self._path)

    def clear(self) -> None:
        """Remove all segments and forget the path."""
        self._remove_segments()
        self._path = ()

    def _remove_segments(self) -> None:
        for handle in self._handles:
            self.surface.remove_segment(handle)
        self._handles = []
