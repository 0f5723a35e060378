"""Smoke tests for module imports and configuration validation.

Quick tests that verify the system is correctly installed and configured.
"""

import importlib

import pytest

from route_planner.constants import ElevationConfig, GeometryConfig, MapConfig, PlaybackConfig, StyleConfig


class TestModuleImports:
    """Parametrized smoke tests for module imports."""

    @pytest.mark.parametrize(
        "module_path,class_name",
        [
            # Core modules
            pytest.param("route_planner.core.elevation_client", "DirectElevationClient", id="core_elevation_client"),
            pytest.param("route_planner.core.elevation_pipeline", "ElevationPipeline", id="core_pipeline"),
            pytest.param("route_planner.core.geo_calculator", "GeoCalculator", id="core_geo"),
            pytest.param("route_planner.core.geometry", "GeometryKernel", id="core_geometry"),
            pytest.param("route_planner.core.geocoding", "NominatimGeocoder", id="core_geocoding"),
            pytest.param("route_planner.core.routing_client", "OsrmRoutingClient", id="core_routing"),
            # Model modules
            pytest.param("route_planner.model.route_path", "RoutePath", id="model_route_path"),
            pytest.param("route_planner.model.waypoint_history", "WaypointHistory", id="model_history"),
            # UI modules
            pytest.param("route_planner.ui.gradient_renderer", "GradientRenderer", id="ui_gradient"),
            pytest.param("route_planner.ui.map_surface", "PydeckSurface", id="ui_surface"),
            pytest.param("route_planner.ui.playback", "PlaybackAnimator", id="ui_playback"),
            pytest.param("route_planner.ui.profile_chart", "ProfileChart", id="ui_profile"),
            pytest.param("route_planner.ui.session", "RouteSession", id="ui_session"),
        ],
    )
    def test_module_exports_class(self, module_path: str, class_name: str) -> None:
        module = importlib.import_module(module_path)
        assert hasattr(module, class_name)


class TestConfiguration:
    """Sanity checks on configuration constants."""

    def test_hit_threshold_floor_above_base(self) -> None:
        assert GeometryConfig.MIN_THRESHOLD_DEG >= GeometryConfig.BASE_THRESHOLD_DEG

    def test_elevation_limits(self) -> None:
        assert 0 < ElevationConfig.CHUNK_SIZE <= ElevationConfig.MAX_SAMPLES
        assert ElevationConfig.CURVE_RESOLUTION >= 2
        assert len(ElevationConfig.PROVIDERS) >= 1

    def test_playback_duration_range(self) -> None:
        assert PlaybackConfig.MIN_DURATION_S <= PlaybackConfig.DEFAULT_DURATION_S <= PlaybackConfig.MAX_DURATION_S

    def test_zoom_range(self) -> None:
        assert MapConfig.MIN_ZOOM <= MapConfig.DEFAULT_ZOOM <= MapConfig.MAX_ZOOM

    @pytest.mark.parametrize("rgb", [StyleConfig.GRADIENT_START_RGB, StyleConfig.GRADIENT_END_RGB])
    def test_gradient_channels_in_range(self, rgb: tuple) -> None:
        assert len(rgb) == 3
        assert all(0 <= channel <= 255 for channel in rgb)
