"""Route Planner - Plan walking routes on an interactive map.

Click to place waypoints, drag to reshape, and get a routed path with its
elevation profile, a gradient-colored route line and an animated playback.

Modules:
    core: Foundation (geometry, geodesy, elevation pipeline, service clients)
    model: Data structures (waypoint history, route path, share links, messages)
    ui: Streamlit interface components (session, playback, renderers)

Example:
    from route_planner.core import GeometryKernel, ElevationPipeline
    from route_planner.model import WaypointHistory
    from route_planner.ui import RouteSession
"""
