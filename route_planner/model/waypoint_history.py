"""WaypointHistory - Undo/redo history of the user's waypoint list.

The history is the single source of truth for the current waypoints. Every
edit goes through commit(); undo/redo only move a cursor over immutable
snapshots.

Invariants (hold after every operation):
- 0 <= cursor <= len(snapshots) - 1
- current == snapshots[cursor]
- can_undo == (cursor > 0), can_redo == (cursor < len(snapshots) - 1)
"""

import logging
from typing import Callable, Iterable

from route_planner.core.geo_calculator import LatLon

logger = logging.getLogger(__name__)

# Immutable waypoint list (lat, lon) in path order
WaypointList = tuple[LatLon, ...]


def as_waypoint_list(points: Iterable[Iterable[float]]) -> WaypointList:
    """Normalize any sequence of [lat, lon] pairs to an immutable WaypointList."""
    return tuple((float(lat), float(lon)) for lat, lon in points)


class WaypointHistory:
    """Ordered waypoint snapshots with an undo/redo cursor.

    Example:
        history = WaypointHistory()
        history.commit([(51.50, -0.10)])
        history.commit([(51.50, -0.10), (51.51, -0.11)])
        history.undo()
        assert history.current == ((51.50, -0.10),)
    """

    def __init__(self, initial: Iterable[Iterable[float]] = ()) -> None:
        """Initialize history with a single snapshot.

        Args:
            initial: Starting waypoints (e.g. decoded from a share link)
        """
        self._snapshots: list[WaypointList] = [as_waypoint_list(initial)]
        self._cursor = 0
        self._listeners: list[Callable[["WaypointHistory"], None]] = []

    # =========================================================================
    # State
    # =========================================================================

    @property
    def current(self) -> WaypointList:
        """The current waypoint list (snapshot at the cursor)."""
        return self._snapshots[self._cursor]

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def snapshots(self) -> tuple[WaypointList, ...]:
        return tuple(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    # =========================================================================
    # Operations
    # =========================================================================

    def commit(self, new_list: Iterable[Iterable[float]]) -> bool:
        """Record a new waypoint list as the current one.

        No-op if new_list equals the current list, so redundant events do not
        create duplicate history entries. Otherwise everything after the
        cursor is discarded before the new snapshot is appended.

        Returns:
            True if a snapshot was added.
        """
        snapshot = as_waypoint_list(new_list)
        if snapshot == self.current:
            return False

        del self._snapshots[self._cursor + 1 :]
        self._snapshots.append(snapshot)
        self._cursor = len(self._snapshots) - 1
        logger.info(f"History commit: {len(snapshot)} waypoints (step {self._cursor + 1}/{len(self._snapshots)})")
        self._notify()
        return True

    def undo(self) -> bool:
        """Step back one snapshot. No-op at the oldest snapshot.

        Returns:
            True if the cursor moved.
        """
        if not self.can_undo:
            return False
        self._cursor -= 1
        logger.info(f"History undo: step {self._cursor + 1}/{len(self._snapshots)}")
        self._notify()
        return True

    def redo(self) -> bool:
        """Step forward one snapshot. No-op at the newest snapshot.

        Returns:
            True if the cursor moved.
        """
        if not self.can_redo:
            return False
        self._cursor += 1
        logger.info(f"History redo: step {self._cursor + 1}/{len(self._snapshots)}")
        self._notify()
        return True

    def clear(self) -> None:
        """Reset to a single empty snapshot."""
        self._snapshots = [()]
        self._cursor = 0
        logger.info("History cleared")
        self._notify()

    # =========================================================================
    # Listeners
    # =========================================================================

    def subscribe(self, callback: Callable[["WaypointHistory"], None]) -> None:
        """Call callback(history) after every change of the current list."""
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in self._listeners:
            callback(self)

    def __repr__(self) -> str:
        return f"WaypointHistory(cursor={self._cursor}, snapshots={len(self._snapshots)}, current={len(self.current)} pts)"
