"""Route Planner - Interactive walking route planning application.

Click the map to place waypoints, click near the route line to insert one,
and get a routed path with its elevation profile. Routes can be replayed
as an animation and shared as a link.

Run: streamlit run route_planner/app.py
"""

import logging
import time
import traceback

import streamlit as st

from route_planner.constants import AppConfig, ChartConfig, MapConfig, PlaybackConfig
from route_planner.core.elevation_client import DirectElevationClient
from route_planner.core.elevation_pipeline import ElevationPipeline
from route_planner.core.geocoding import GeolocationError
from route_planner.core.routing_client import OsrmRoutingClient
from route_planner.ui import ManualFrameScheduler, PlaybackAnimator, ProfileChart, PydeckSurface, RouteSession
from route_planner.ui.pydeck_click_handler import PydeckClickResult, render_pydeck_map

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# SESSION STATE
# =============================================================================


def init_session_state() -> None:
    """Create the planning session once per browser session."""
    if "session" not in st.session_state:
        surface = PydeckSurface()
        scheduler = ManualFrameScheduler()
        st.session_state.scheduler = scheduler
        st.session_state.session = RouteSession.from_share_param(
            st.query_params.get("route"),
            surface=surface,
            routing=OsrmRoutingClient(),
            pipeline=ElevationPipeline(client=DirectElevationClient()),
            animator=PlaybackAnimator(scheduler=scheduler),
        )
        st.session_state.session.locate_on_start()

    if "selected_waypoint" not in st.session_state:
        st.session_state.selected_waypoint = None

    if "map_version" not in st.session_state:
        st.session_state.map_version = 0


def bump_map_version() -> None:
    """Force a fresh map component (drops the stale last click)."""
    st.session_state.map_version += 1


def show_messages(session: RouteSession) -> None:
    for message in session.pop_messages():
        message.display()


# =============================================================================
# SIDEBAR
# =============================================================================


def render_sidebar(session: RouteSession) -> None:
    with st.sidebar:
        st.subheader("🔍 Find a place")
        query = st.text_input("Address", key="address_query")
        col_search, col_locate = st.columns(2)
        if col_search.button("Search", use_container_width=True):
            if session.search_address(query):
                bump_map_version()
        if col_locate.button("📍 Locate me", use_container_width=True):
            # The browser position never reaches the server, so go straight to the IP fallback
            session.on_geolocation(error=GeolocationError.UNAVAILABLE)
            bump_map_version()

        st.subheader("🗺️ Map")
        style = st.selectbox(
            "Map style",
            options=list(MapConfig.TILE_STYLES),
            format_func=lambda s: MapConfig.TILE_STYLE_NAMES[s],
            index=list(MapConfig.TILE_STYLES).index(session.surface.tile_style),
        )
        session.surface.set_tile_style(style)
        zoom = st.slider(
            "Zoom", MapConfig.MIN_ZOOM, MapConfig.MAX_ZOOM, int(round(session.surface.zoom)), key="zoom_slider"
        )
        if zoom != int(round(session.surface.zoom)):
            session.on_zoom_end(zoom)

        st.subheader("✏️ Route")
        col_undo, col_redo, col_clear = st.columns(3)
        if col_undo.button("↩️ Undo", disabled=not session.history.can_undo, use_container_width=True):
            session.undo()
        if col_redo.button("↪️ Redo", disabled=not session.history.can_redo, use_container_width=True):
            session.redo()
        if col_clear.button("🗑️ Clear", disabled=not session.waypoints, use_container_width=True):
            session.clear()
            st.session_state.selected_waypoint = None
            bump_map_version()

        selected = st.session_state.selected_waypoint
        if selected is not None and selected < len(session.waypoints):
            st.caption(f"Waypoint {selected + 1} selected. Click the map to move it there.")
            if st.button("Remove waypoint", use_container_width=True):
                session.remove_waypoint(selected)
                st.session_state.selected_waypoint = None

        if not session.route.is_empty:
            use_miles = st.toggle("Miles", value=session.use_miles)
            if use_miles != session.use_miles:
                session.toggle_units()

        st.subheader("▶️ Playback")
        duration = st.slider(
            "Duration (s)",
            PlaybackConfig.MIN_DURATION_S,
            PlaybackConfig.MAX_DURATION_S,
            PlaybackConfig.DEFAULT_DURATION_S,
        )
        col_play, col_stop = st.columns(2)
        if col_play.button("Play", use_container_width=True):
            session.play(duration_s=duration)
        if col_stop.button("Stop", disabled=not session.animator.is_playing, use_container_width=True):
            session.stop_playback()

        st.subheader("🔗 Share")
        if st.button("Create share link", use_container_width=True):
            st.session_state.share_url = session.share_url(origin=AppConfig.PUBLIC_ORIGIN)
        if st.session_state.get("share_url"):
            st.code(st.session_state.share_url, language=None)


# =============================================================================
# MAP
# =============================================================================


def apply_click(session: RouteSession, result: PydeckClickResult, selected: int | None) -> int | None:
    """Apply one map click and return the waypoint selected afterwards.

    A click on a marker selects it. Any other click with a coordinate,
    including one that picked a route segment, moves the selected waypoint
    there or goes to click_map (insert near the line, else append).
    """
    if result.waypoint_index is not None:
        return result.waypoint_index

    lat_lon = result.lat_lon
    if lat_lon is None:
        return selected

    if selected is not None:
        session.move_waypoint(index=selected, lat=lat_lon[0], lon=lat_lon[1])
    else:
        session.click_map(lat=lat_lon[0], lon=lat_lon[1])
    return None


def handle_map_click(session: RouteSession) -> None:
    result = render_pydeck_map(
        deck=session.surface.to_deck(),
        key=f"route_map_{st.session_state.map_version}",
    )
    if result.waypoint_index is None and result.lat_lon is None:
        return
    st.session_state.selected_waypoint = apply_click(
        session=session, result=result, selected=st.session_state.selected_waypoint
    )
    st.rerun()


def run_playback(session: RouteSession) -> None:
    """Drive the animation frame by frame until it completes or is stopped."""
    scheduler: ManualFrameScheduler = st.session_state.scheduler
    placeholder = st.empty()
    while session.animator.is_playing:
        scheduler.tick(timestamp_ms=time.monotonic() * 1000)
        placeholder.pydeck_chart(session.surface.to_deck(), height=MapConfig.MAP_HEIGHT_PX)
        time.sleep(PlaybackConfig.FRAME_INTERVAL_S)
    st.rerun()


def render_profile(session: RouteSession) -> None:
    curve = session.pipeline.curve
    if curve is None:
        return
    percent = st.slider("Position along route (%)", 0, 100, 0, key="profile_hover")
    hover = session.hover(ratio=percent / 100) if percent > 0 else None
    if hover is None:
        session.clear_hover()
    chart = ProfileChart(height=ChartConfig.PROFILE_HEIGHT, width=ChartConfig.DEFAULT_WIDTH)
    fig = chart.render(
        curve=curve,
        distance_km=session.route.distance_km,
        hover_ratio=hover.ratio if hover else None,
        hover_elevation=hover.elevation if hover else None,
    )
    st.plotly_chart(fig, key="route_profile")


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Application entry point."""
    st.set_page_config(page_title=AppConfig.TITLE, page_icon=AppConfig.ICON, layout=AppConfig.LAYOUT)
    init_session_state()

    st.title(AppConfig.TITLE)

    try:
        _run_app_ui()
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        logger.error(f"[UI] UI error caught: {error_msg}\n{traceback.format_exc()}")
        st.error(f"⚠️ Something went wrong: {error_msg}")
        if st.button("🔄 Reset and Continue", type="primary"):
            st.session_state.pop("session", None)
            st.rerun()


def _run_app_ui() -> None:
    session: RouteSession = st.session_state.session
    logger.info(f"[MAIN] Render cycle: {session!r}")

    render_sidebar(session)

    for message in session.status_messages():
        message.display()
    show_messages(session)

    if session.animator.is_playing:
        run_playback(session)
    else:
        handle_map_click(session)

    render_profile(session)


if __name__ == "__main__":
    main()
