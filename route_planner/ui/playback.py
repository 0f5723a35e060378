"""Route playback animation.

Uses python-statemachine for the playback lifecycle:

States:
    IDLE: Nothing playing, progress 0 (initial)
    PLAYING: A frame is scheduled, progress advances with wall-clock time
    COMPLETED: Progress reached 1; immediately rewound to IDLE

Transitions:
    IDLE -> PLAYING: play (start a run)
    PLAYING -> COMPLETED: finish (progress reached 1)
    COMPLETED -> IDLE: rewind
    PLAYING -> IDLE: stop (user cancelled)

Frames are driven by a FrameScheduler. The start timestamp is taken from
the first frame, not from start(), so a slow first frame does not eat into
the run. Listeners added with add_listener() receive after_transition()
calls, which the host uses to hide and restore markers.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from route_planner.constants import PlaybackConfig
from route_planner.core.errors import InvalidInput
from route_planner.core.geo_calculator import GeoCalculator, LatLon

logger = logging.getLogger(__name__)


@dataclass
class PlaybackState:
    """Playback model owned by PlaybackAnimator.

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model. It stores the current state value.
    """

    state: str | None = None
    progress: float = 0.0
    start_timestamp_ms: float | None = None
    duration_s: float = PlaybackConfig.DEFAULT_DURATION_S
    route: tuple[LatLon, ...] = ()

    @property
    def is_playing(self) -> bool:
        return self.state == "playing"

    def reset_progress(self) -> None:
        """Reset progress and forget the start timestamp."""
        self.progress = 0.0
        self.start_timestamp_ms = None

    def __repr__(self) -> str:
        return f"PlaybackState(state={self.state}, progress={self.progress:.3f}, route={len(self.route)} pts)"


@dataclass(frozen=True)
class PlaybackFrame:
    """Where the player marker is on one animation frame.

    Attributes:
        progress: Fraction of the run completed (0-1)
        position: Interpolated (lat, lon)
        heading_deg: Initial bearing of the current route segment
        index: Index of the segment start point in the route
    """

    progress: float
    position: LatLon
    heading_deg: float
    index: int


class PlaybackStateMachine(StateMachine):
    """Idle -> Playing -> Completed -> Idle, with Playing -> Idle on stop."""

    idle = State("Idle", initial=True)
    playing = State("Playing")
    completed = State("Completed")

    play = idle.to(playing)
    finish = playing.to(completed)
    rewind = completed.to(idle)
    stop = playing.to(idle)

    def before_play(self, route: tuple[LatLon, ...], duration_s: float) -> None:
        self.model.route = route
        self.model.duration_s = duration_s
        self.model.reset_progress()

    def on_enter_completed(self) -> None:
        self.model.progress = 1.0

    def on_enter_idle(self) -> None:
        self.model.reset_progress()

    def __init__(self, model: PlaybackState | None = None) -> None:
        super().__init__(model=model or PlaybackState())

    @property
    def is_idle(self) -> bool:
        return self.idle.is_active

    @property
    def is_playing(self) -> bool:
        return self.playing.is_active

    def try_transition(self, event: str, **kwargs) -> bool:
        """Attempt a transition, returning success/failure."""
        try:
            self.send(event, **kwargs)
            return True
        except TransitionNotAllowed:
            logger.warning(f"Playback transition '{event}' not allowed from {self.current_state.name}")
            return False


class FrameScheduler(Protocol):
    """Schedules one callback per display refresh (requestAnimationFrame style)."""

    def request_frame(self, callback: Callable[[float], None]) -> int: ...

    def cancel_frame(self, handle: int) -> None: ...


class ManualFrameScheduler:
    """FrameScheduler driven explicitly by tick(timestamp_ms).

    Used by tests and by the Streamlit host, which ticks it from its own
    render loop.
    """

    def __init__(self) -> None:
        self._pending: dict[int, Callable[[float], None]] = {}
        self._next_handle = 1

    def request_frame(self, callback: Callable[[float], None]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def tick(self, timestamp_ms: float) -> int:
        """Run every callback requested before this tick.

        Callbacks requested during the tick run on the next one.

        Returns:
            Number of callbacks run.
        """
        callbacks = list(self._pending.values())
        self._pending.clear()
        for callback in callbacks:
            callback(timestamp_ms)
        return len(callbacks)


def frame_at(route: Sequence[LatLon], progress: float) -> PlaybackFrame:
    """Interpolated position and heading at a fraction of the route.

    At the final point the heading of the last segment is kept.

    Args:
        route: At least two (lat, lon) points
        progress: Fraction of the route (0-1)
    """
    float_index = progress * (len(route) - 1)
    i = min(int(math.floor(float_index)), len(route) - 2)
    a, b = route[i], route[i + 1]
    position = GeoCalculator.lerp(a=a, b=b, t=float_index - i)
    heading = GeoCalculator.initial_bearing_deg(lat1=a[0], lon1=a[1], lat2=b[0], lon2=b[1])
    return PlaybackFrame(progress=progress, position=position, heading_deg=heading, index=i)


class PlaybackAnimator:
    """Replays a route as a moving marker, one frame at a time.

    At most one run is active; start() stops a previous run first.

    Example:
        scheduler = ManualFrameScheduler()
        animator = PlaybackAnimator(scheduler=scheduler)
        animator.start(route=path.points, duration_s=5)
        scheduler.tick(timestamp_ms=0)     # progress 0
        scheduler.tick(timestamp_ms=2500)  # progress 0.5
    """

    def __init__(self, scheduler: FrameScheduler) -> None:
        self.scheduler = scheduler
        self.state = PlaybackState()
        self.machine = PlaybackStateMachine(model=self.state)
        self._frame_handle: int | None = None
        self._frame_listeners: list[Callable[[PlaybackFrame], None]] = []

    @property
    def is_playing(self) -> bool:
        return self.machine.is_playing

    @property
    def progress(self) -> float:
        return self.state.progress

    def add_listener(self, listener: object) -> None:
        """Attach a python-statemachine listener (after_transition etc.)."""
        self.machine.add_listener(listener)

    def subscribe(self, callback: Callable[[PlaybackFrame], None]) -> None:
        """Call callback(frame) on every animation frame."""
        self._frame_listeners.append(callback)

    def start(self, route: Sequence[LatLon], duration_s: float = PlaybackConfig.DEFAULT_DURATION_S) -> None:
        """Begin a run over route lasting duration_s seconds.

        Raises:
            InvalidInput: If route has fewer than two points or duration is not positive.
        """
        if len(route) < PlaybackConfig.MIN_ROUTE_POINTS:
            raise InvalidInput(f"Playback needs at least {PlaybackConfig.MIN_ROUTE_POINTS} route points")
        if duration_s <= 0:
            raise InvalidInput(f"Playback duration must be positive, got {duration_s}")

        if self.is_playing:
            self.stop()

        self.machine.play(route=tuple(route), duration_s=float(duration_s))
        self._frame_handle = self.scheduler.request_frame(self._on_frame)

    def stop(self) -> bool:
        """Cancel the pending frame and return to idle. Safe when idle.

        Returns:
            True if a run was stopped.
        """
        if self._frame_handle is not None:
            self.scheduler.cancel_frame(self._frame_handle)
            self._frame_handle = None
        if not self.is_playing:
            return False
        self.machine.stop()
        return True

    def _on_frame(self, timestamp_ms: float) -> None:
        self._frame_handle = None
        if not self.is_playing:
            return

        state = self.state
        if state.start_timestamp_ms is None:
            state.start_timestamp_ms = timestamp_ms
        elapsed_ms = max(0.0, timestamp_ms - state.start_timestamp_ms)
        progress = min(elapsed_ms / (state.duration_s * 1000), 1.0)
        state.progress = progress

        frame = frame_at(route=state.route, progress=progress)
        for callback in self._frame_listeners:
            callback(frame)

        if progress < 1.0:
            self._frame_handle = self.scheduler.request_frame(self._on_frame)
        else:
            self.machine.finish()
            self.machine.rewind()


class PlaybackMarkerListener:
    """Listener that updates map markers after playback transitions.

    Entering Playing hides the intermediate waypoint markers; returning to
    Idle removes the player marker and restores them.
    """

    def __init__(self, surface) -> None:
        self.surface = surface

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.info(f"[PLAYBACK] {source.name} --({event})--> {target.name}")
        if target.id == "playing":
            self.surface.set_intermediate_waypoint_opacity(0.0)
        elif target.id == "idle":
            self.surface.remove_player_marker()
            self.surface.set_intermediate_waypoint_opacity(1.0)
