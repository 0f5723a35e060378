"""Configuration constants for Route Planner.

All configurable parameters are centralized here for easy tuning.

Classes:
    AppConfig: UI application settings
    MapConfig: Default map view and tile styles
    GeometryConfig: Click-near-line hit thresholds
    ElevationConfig: Elevation sampling, retry and smoothing parameters
    RoutingConfig: Routing service endpoint
    GeocodingConfig: Address search and IP location endpoints
    PlaybackConfig: Route animation parameters
    StyleConfig: Visual colors and styling
    ShareConfig: Shareable link format
    UnitConfig: Distance unit conversion
    ChartConfig: Elevation profile chart dimensions
"""


class AppConfig:
    """UI application settings."""

    TITLE = "Route Planner"
    ICON = "🏃"
    LAYOUT = "wide"

    # Origin used for share links
    PUBLIC_ORIGIN = "http://localhost:8501"


class MapConfig:
    """Default map view parameters."""

    # Initial center before the user's location is known: central London
    START_CENTER_LAT = 51.505
    START_CENTER_LON = -0.09

    DEFAULT_ZOOM = 13
    LOCATED_ZOOM = 13  # Zoom after centering on the user's location
    MIN_ZOOM = 1
    MAX_ZOOM = 19

    # Padding (pixels) kept around the route when fitting the map to it
    FIT_PADDING_PX = 60

    MAP_HEIGHT_PX = 560
    MAP_WIDTH_PX = 1000  # Assumed viewport width for fitting bounds
    PICKING_RADIUS_PX = 8

    TILE_STYLES = {
        "standard": "https://tile.openstreetmap.org/{z}/{x}/{y}.png",
        "satellite": "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        "terrain": "https://tile.opentopomap.org/{z}/{x}/{y}.png",
    }
    TILE_ATTRIBUTIONS = {
        "standard": "© OpenStreetMap contributors",
        "satellite": "© Esri, i-cubed, USDA, USGS, AEX, GeoEye, Getmapping, Aerogrid, IGN, IGP, UPR-EGP",
        "terrain": "© OpenStreetMap contributors, SRTM | © OpenTopoMap (CC-BY-SA)",
    }
    TILE_STYLE_NAMES = {
        "standard": "Standard Map",
        "satellite": "Satellite",
        "terrain": "Terrain",
    }
    assert set(TILE_STYLE_NAMES.keys()) == set(TILE_STYLES.keys())
    assert set(TILE_ATTRIBUTIONS.keys()) == set(TILE_STYLES.keys())


class GeometryConfig:
    """Hit threshold for deciding whether a click lands on the route line.

    Distances are in degrees (flat lat/lon plane). At the reference zoom the
    base threshold is about 50 m; each zoom level out doubles it.
    """

    BASE_THRESHOLD_DEG = 0.0005
    MIN_THRESHOLD_DEG = 0.001  # ~100 m, never less forgiving than this
    REFERENCE_ZOOM = 13

    # Used when the map has not reported a zoom level yet
    DEFAULT_ZOOM_FALLBACK = 13


class ElevationConfig:
    """Elevation sampling pipeline parameters."""

    # Down-sampled route points sent for lookup
    MAX_SAMPLES = 512

    # Coordinates per remote request (provider batch limit)
    CHUNK_SIZE = 100

    # Length of the smoothed profile curve
    CURVE_RESOLUTION = 512

    # Catmull-Rom tension; half of it is the tangent scale (0.165 ~ uniform 1/6)
    TENSION = 0.33

    # Sleep between attempts of one chunk; len() is the number of retries
    RETRY_DELAYS_S = (1.0, 2.0, 3.0)

    # Tried in order; the next one is used only if the previous failed completely
    PROVIDERS = ("opentopodata", "openelevation")

    PROVIDER_URLS = {
        "opentopodata": "https://api.opentopodata.org/v1/srtm90m",
        "openelevation": "https://api.open-elevation.com/api/v1/lookup",
    }
    assert set(PROVIDER_URLS.keys()) == set(PROVIDERS)

    REQUEST_TIMEOUT_S = 30


class RoutingConfig:
    """Routing service (OSRM) for walkable paths."""

    SERVICE_URL = "https://routing.openstreetmap.de/routed-foot/route/v1"
    PROFILE = "foot"
    REQUEST_TIMEOUT_S = 30


class GeocodingConfig:
    """Address search and coarse IP-based location."""

    NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
    USER_AGENT = "RoutePlanner/0.1"
    RESULT_LIMIT = 5
    REQUEST_TIMEOUT_S = 10

    IP_LOCATION_URL = "https://ipapi.co/json/"

    RETRY_DELAYS_S = (1.0, 2.0)


class PlaybackConfig:
    """Route playback animation parameters."""

    DEFAULT_DURATION_S = 5
    MIN_DURATION_S = 1
    MAX_DURATION_S = 60

    # A route needs at least two points to move along
    MIN_ROUTE_POINTS = 2

    # Host frame interval when driving the animation (seconds, ~30 fps)
    FRAME_INTERVAL_S = 1 / 30


class StyleConfig:
    """Visual colors and styling."""

    # Route gradient from dark blue (start) to light blue (end)
    GRADIENT_START_RGB = (0, 117, 190)
    GRADIENT_END_RGB = (128, 196, 255)
    SEGMENT_WEIGHT = 5
    SEGMENT_OPACITY = 1.0

    # Plain route line drawn under the gradient while routing
    ROUTE_LINE_COLOR = "#80C4FF"
    ROUTE_LINE_WEIGHT = 4
    ROUTE_LINE_OPACITY = 0.75

    # Waypoint markers
    WAYPOINT_START_COLOR = "#4CAF50"  # Green
    WAYPOINT_END_COLOR = "#f44336"  # Red
    WAYPOINT_MIDDLE_COLOR = "#9e9e9e"  # Grey
    WAYPOINT_RADIUS_PX = 12

    # Playback marker
    PLAYER_COLOR = "#FF9800"  # Orange
    PLAYER_RADIUS_PX = 10

    # Elevation profile hover marker
    HOVER_COLOR = "#E91E63"


class ShareConfig:
    """Shareable route link format: {origin}/route?route=<escaped JSON>."""

    ROUTE_PATH = "/route"
    QUERY_PARAM = "route"


class UnitConfig:
    """Distance unit conversion."""

    KM_TO_MILES = 0.621371


class ChartConfig:
    """Elevation profile chart rendering."""

    PROFILE_HEIGHT = 220
    DEFAULT_WIDTH = 800

    # Y-axis padding settings
    ELEVATION_PADDING_FACTOR = 0.1  # 10% padding above/below
    ELEVATION_PADDING_MIN_M = 10  # Minimum padding in meters
