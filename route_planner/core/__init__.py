"""Core foundation classes for route geometry and remote lookups.

- GeoCalculator: Geodesic calculations (distances, bearings, interpolation)
- GeometryKernel: Nearest-segment search and zoom-dependent hit threshold
- ElevationPipeline: Down-sample, fetch, fail over and smooth elevations
- NominatimGeocoder / IpLocationClient: Address search and coarse location
- OsrmRoutingClient: Waypoints to routed path (import directly from
  routing_client, it depends on model.route_path)
"""

from route_planner.core.elevation_client import DirectElevationClient, ElevationEndpointClient
from route_planner.core.elevation_pipeline import ElevationPipeline, ElevationSample, SmoothedCurve
from route_planner.core.errors import (
    InvalidInput,
    LookupFailure,
    MalformedResponse,
    RoutePlannerError,
    TransientNetworkFailure,
)
from route_planner.core.geo_calculator import GeoCalculator, LatLon
from route_planner.core.geocoding import GeocodeResult, GeolocationError, IpLocationClient, NominatimGeocoder
from route_planner.core.geometry import GeometryKernel

__all__ = [
    # Geometry
    "GeoCalculator",
    "GeometryKernel",
    "LatLon",
    # Elevation
    "DirectElevationClient",
    "ElevationEndpointClient",
    "ElevationPipeline",
    "ElevationSample",
    "SmoothedCurve",
    # Geocoding
    "GeocodeResult",
    "GeolocationError",
    "IpLocationClient",
    "NominatimGeocoder",
    # Errors
    "RoutePlannerError",
    "LookupFailure",
    "TransientNetworkFailure",
    "MalformedResponse",
    "InvalidInput",
]
