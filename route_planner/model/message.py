"""Message - User-facing messages for the route planner UI.

Architecture:
- Toasts: brief feedback about a user action (share link copied, empty
  address, geolocation failure, route too short to play)
- Inline: persistent status under the map or in the sidebar (elevation
  unavailable, view-only route, route distance)

The session only creates messages; the Streamlit host displays them, so the
session stays testable without a running Streamlit app.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from route_planner.core.geocoding import GeolocationError


class MessageLevel(Enum):
    """Which Streamlit alert box an inline message uses."""

    INFO = "info"  # Blue - status
    WARNING = "warning"  # Yellow - degraded data
    ERROR = "error"  # Red - failed action


@dataclass(frozen=True)
class Message(ABC):
    """Status shown inline for as long as the condition holds.

    Rendered as st.info/st.warning/st.error blocks that persist until the
    next rerun replaces them.
    """

    @property
    @abstractmethod
    def message(self) -> str:
        """Text of the alert box."""
        raise NotImplementedError

    @property
    @abstractmethod
    def level(self) -> MessageLevel:
        """Display level."""
        raise NotImplementedError

    def display(self) -> None:
        """Draw as st.info / st.warning / st.error."""
        import streamlit as st

        render_fn = {
            MessageLevel.INFO: st.info,
            MessageLevel.WARNING: st.warning,
            MessageLevel.ERROR: st.error,
        }[self.level]
        render_fn(self.message)


@dataclass(frozen=True)
class ToastMessage(ABC):
    """Short-lived feedback on a single user action.

    Shown once, then dropped by RouteSession.pop_messages().
    """

    @property
    @abstractmethod
    def message(self) -> str:
        """Text of the toast."""
        raise NotImplementedError

    @property
    @abstractmethod
    def icon(self) -> str:
        """Emoji shown before the text."""
        raise NotImplementedError

    def display(self) -> None:
        """Log and show as st.toast."""
        import streamlit as st

        logger = logging.getLogger(__name__)
        logger.info(f"[TOAST] {self.icon} {self.message}")
        st.toast(f"{self.icon} {self.message}")


# =============================================================================
# TOAST MESSAGES
# =============================================================================


@dataclass(frozen=True)
class EmptyRouteShareMessage(ToastMessage):
    """User tried to share without any waypoints."""

    @property
    def icon(self) -> str:
        return "⚠️"

    @property
    def message(self) -> str:
        return "Please create a route before sharing."


@dataclass(frozen=True)
class ShareLinkReadyMessage(ToastMessage):
    """Share link was generated."""

    url: str

    @property
    def icon(self) -> str:
        return "🔗"

    @property
    def message(self) -> str:
        return "Share link ready. Copy it from the sidebar."


@dataclass(frozen=True)
class RouteTooShortMessage(ToastMessage):
    """Playback needs at least two route points."""

    point_count: int

    @property
    def icon(self) -> str:
        return "⚠️"

    @property
    def message(self) -> str:
        return f"Add at least two waypoints to play the route (route has {self.point_count} point(s))."


@dataclass(frozen=True)
class EmptyAddressMessage(ToastMessage):
    """Address search submitted with an empty query."""

    @property
    def icon(self) -> str:
        return "✏️"

    @property
    def message(self) -> str:
        return "Please enter an address to search."


@dataclass(frozen=True)
class AddressNotFoundMessage(ToastMessage):
    """Address search returned no results."""

    query: str

    @property
    def icon(self) -> str:
        return "🔍"

    @property
    def message(self) -> str:
        return f"No results for '{self.query}'."


@dataclass(frozen=True)
class LookupFailedMessage(ToastMessage):
    """A remote service failed after retries (routing, search, location)."""

    action: str  # e.g. "find a route", "search the address"

    @property
    def icon(self) -> str:
        return "❌"

    @property
    def message(self) -> str:
        return f"Could not {self.action}. Please try again later."


@dataclass(frozen=True)
class GeolocationErrorMessage(ToastMessage):
    """Browser geolocation failed; text depends on the failure kind."""

    error: GeolocationError
    used_ip_fallback: bool = False

    @property
    def icon(self) -> str:
        return "📍"

    @property
    def message(self) -> str:
        text = {
            GeolocationError.DENIED: "Location access denied. Please allow location access in your browser.",
            GeolocationError.UNAVAILABLE: "Location information is unavailable.",
            GeolocationError.TIMEOUT: "Location request timed out.",
        }[self.error]
        if self.used_ip_fallback:
            text += " Showing your approximate location instead."
        return text


@dataclass(frozen=True)
class ViewOnlyEditMessage(ToastMessage):
    """User tried to edit a shared (view-only) route."""

    @property
    def icon(self) -> str:
        return "🔒"

    @property
    def message(self) -> str:
        return "This shared route is view-only. Clear it to plan your own route."


# =============================================================================
# INLINE MESSAGES
# =============================================================================


@dataclass(frozen=True)
class ElevationUnavailableMessage(Message):
    """All elevation providers failed for the current route."""

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.WARNING

    @property
    def message(self) -> str:
        return "Elevation data unavailable for this route."


@dataclass(frozen=True)
class ViewOnlyRouteMessage(Message):
    """Shown while a shared route is opened read-only."""

    waypoint_count: int

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        return f"Viewing a shared route with {self.waypoint_count} waypoints. Editing is disabled."


@dataclass(frozen=True)
class RouteDistanceMessage(Message):
    """Distance badge for the resolved route."""

    distance_text: str

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        return f"Route distance: **{self.distance_text}**"
