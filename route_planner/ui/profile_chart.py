"""ProfileChart - Plotly elevation profile of the current route.

Renders the smoothed elevation curve against distance along the route,
with an optional marker at the hovered position.
"""

import logging

import numpy as np
import plotly.graph_objects as go

from route_planner.constants import ChartConfig, StyleConfig
from route_planner.core.elevation_pipeline import SmoothedCurve
from route_planner.ui.map_surface import hex_to_rgba

logger = logging.getLogger(__name__)


def distance_axis_km(curve: SmoothedCurve, distance_km: float) -> np.ndarray:
    """Distance (km) of every curve sample, evenly spread over the route."""
    return np.linspace(0.0, distance_km, len(curve))


def elevation_axis_range(curve: SmoothedCurve) -> list[float]:
    """Y-axis range padded around the curve, never starting from 0."""
    padding = max(
        (curve.max_elevation - curve.min_elevation) * ChartConfig.ELEVATION_PADDING_FACTOR,
        ChartConfig.ELEVATION_PADDING_MIN_M,
    )
    return [curve.min_elevation - padding, curve.max_elevation + padding]


class ProfileChart:
    """Renders the route elevation profile using Plotly.

    Example:
        chart = ProfileChart()
        fig = chart.render(curve=pipeline.curve, distance_km=route.distance_km)
        st.plotly_chart(fig)
    """

    def __init__(self, width: int = ChartConfig.DEFAULT_WIDTH, height: int = ChartConfig.PROFILE_HEIGHT) -> None:
        self.width = width
        self.height = height

    def render(
        self,
        curve: SmoothedCurve,
        distance_km: float,
        hover_ratio: float | None = None,
        hover_elevation: float | None = None,
    ) -> go.Figure:
        """Render the elevation profile.

        Args:
            curve: Smoothed elevation curve
            distance_km: Route length, used for the x axis
            hover_ratio: Position along the route (0-1) to mark, if any
            hover_elevation: Elevation at hover_ratio

        Returns:
            Plotly Figure object.
        """
        if len(curve) == 0:
            raise ValueError("Curve must have values to render")

        distances = distance_axis_km(curve=curve, distance_km=distance_km)
        start_rgb = StyleConfig.GRADIENT_START_RGB

        fig = go.Figure()
        fig.add_trace(
            go.Scatter(
                x=distances,
                y=curve.values,
                fill="tozeroy",
                fillcolor=f"rgba({start_rgb[0]}, {start_rgb[1]}, {start_rgb[2]}, 0.25)",
                line=dict(color=f"rgb{start_rgb}", width=2),
                name="Elevation",
                hovertemplate="Distance: %{x:.2f} km<br>Elevation: %{y:.0f} m<extra></extra>",
            )
        )

        if hover_ratio is not None and hover_elevation is not None:
            r, g, b, _ = hex_to_rgba(StyleConfig.HOVER_COLOR)
            fig.add_trace(
                go.Scatter(
                    x=[hover_ratio * distance_km],
                    y=[hover_elevation],
                    mode="markers",
                    marker=dict(color=f"rgb({r}, {g}, {b})", size=10, line=dict(color="white", width=2)),
                    name="Position",
                    hovertemplate="%{y:.0f} m<extra></extra>",
                )
            )
            fig.add_vline(x=hover_ratio * distance_km, line=dict(color="rgba(0, 0, 0, 0.3)", dash="dot", width=1))

        fig.update_layout(
            xaxis=dict(title="Distance (km)", showgrid=True, gridcolor="rgba(200, 200, 200, 0.3)"),
            yaxis=dict(
                title="Elevation (m)",
                showgrid=True,
                gridcolor="rgba(200, 200, 200, 0.3)",
                range=elevation_axis_range(curve),
            ),
            showlegend=False,
            width=self.width,
            height=self.height,
            margin=dict(l=50, r=20, t=20, b=40),
            plot_bgcolor="white",
        )
        return fig
