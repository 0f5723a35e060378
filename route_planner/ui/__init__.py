"""User interface components for the route planner.

- session.py: RouteSession, the control flow from waypoint edit to playback
- playback.py: PlaybackStateMachine + PlaybackAnimator
- gradient_renderer.py: Per-segment colored route line
- map_surface.py: RenderSurface protocol and the pydeck implementation
- profile_chart.py: Plotly elevation profile
- pydeck_click_handler.py: Map click capture (imports streamlit; import directly)
"""

from route_planner.ui.gradient_renderer import GradientRenderer, RouteSegmentVisual, interpolate_color
from route_planner.ui.map_surface import PydeckSurface, RenderSurface
from route_planner.ui.playback import (
    ManualFrameScheduler,
    PlaybackAnimator,
    PlaybackFrame,
    PlaybackState,
    PlaybackStateMachine,
)
from route_planner.ui.profile_chart import ProfileChart
from route_planner.ui.session import HoverInfo, RouteSession

__all__ = [
    "RouteSession",
    "HoverInfo",
    "PlaybackAnimator",
    "PlaybackStateMachine",
    "PlaybackState",
    "PlaybackFrame",
    "ManualFrameScheduler",
    "GradientRenderer",
    "RouteSegmentVisual",
    "interpolate_color",
    "PydeckSurface",
    "RenderSurface",
    "ProfileChart",
]
