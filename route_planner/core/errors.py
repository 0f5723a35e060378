"""Error types raised by route planner clients and components.

Remote-call failures derive from LookupFailure and are retried, failed over
and finally turned into an "unavailable" state by their caller. InvalidInput
is a local rejection that never mutates state.
"""


class RoutePlannerError(Exception):
    """Base class for all route planner errors."""


class LookupFailure(RoutePlannerError):
    """A remote lookup (elevation, routing, geocoding) did not produce a usable result.

    Attributes:
        provider: Name of the remote service that failed (e.g. "opentopodata")
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


class TransientNetworkFailure(LookupFailure):
    """Connection error, timeout or non-2xx response from a remote service."""


class MalformedResponse(LookupFailure):
    """Remote service answered but the payload is missing expected fields."""


class InvalidInput(RoutePlannerError, ValueError):
    """Operation rejected locally because its input cannot be used."""
