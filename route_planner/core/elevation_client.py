"""Remote elevation lookup for batches of coordinates.

Two interchangeable clients share the same lookup(locations, api) contract:

- ElevationEndpointClient: POSTs {"locations": [[lat, lon], ...], "api": ...}
  to an elevation proxy endpoint that answers {"results": [{"elevation": m}, ...]}.
- DirectElevationClient: queries the public providers directly
  (OpenTopoData SRTM 90m or Open-Elevation) with a GET request.

Both raise TransientNetworkFailure for transport errors and non-2xx status,
and MalformedResponse when results are missing or misaligned.
"""

import logging
from typing import Any, Protocol

import requests

from route_planner.constants import ElevationConfig
from route_planner.core.errors import MalformedResponse, TransientNetworkFailure
from route_planner.core.geo_calculator import LatLon

logger = logging.getLogger(__name__)


class ElevationLookup(Protocol):
    """Anything that can resolve elevations for one batch of coordinates."""

    def lookup(self, locations: list[LatLon], api: str) -> list[float]: ...


def parse_elevation_results(data: Any, expected: int, provider: str) -> list[float]:
    """Extract elevations from a {"results": [{"elevation": ...}]} payload.

    A null elevation (no data for that point) is read as 0.0 m. A missing
    results list, a count mismatch or a result without an "elevation" key
    makes the whole payload malformed.

    Args:
        data: Decoded JSON response
        expected: Number of coordinates that were requested
        provider: Provider name for error reporting

    Returns:
        Elevations in meters, aligned 1:1 with the request.

    Raises:
        MalformedResponse: If the payload does not match the contract.
    """
    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        raise MalformedResponse("Response has no results list", provider=provider)

    results = data["results"]
    if len(results) != expected:
        raise MalformedResponse(f"Expected {expected} results, got {len(results)}", provider=provider)

    elevations = []
    for result in results:
        if not isinstance(result, dict) or "elevation" not in result:
            raise MalformedResponse("Result without elevation", provider=provider)
        elev = result["elevation"]
        if elev is None:
            elevations.append(0.0)
            continue
        try:
            elevations.append(float(elev))
        except (TypeError, ValueError) as e:
            raise MalformedResponse(f"Non-numeric elevation {elev!r}", provider=provider) from e

    return elevations


def _decode_json(response: requests.Response, provider: str) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponse("Response is not valid JSON", provider=provider) from e


class ElevationEndpointClient:
    """Client for an elevation proxy endpoint.

    Example:
        client = ElevationEndpointClient(endpoint_url="http://localhost:3000/api/elevation")
        elevations = client.lookup(locations=[(46.98, 10.31)], api="opentopodata")
    """

    def __init__(self, endpoint_url: str, timeout_s: float = ElevationConfig.REQUEST_TIMEOUT_S) -> None:
        self.endpoint_url = endpoint_url
        self.timeout_s = timeout_s

    def lookup(self, locations: list[LatLon], api: str) -> list[float]:
        """POST one batch of coordinates and return their elevations in meters."""
        body = {"locations": [[lat, lon] for lat, lon in locations], "api": api}
        try:
            response = requests.post(self.endpoint_url, json=body, timeout=self.timeout_s)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransientNetworkFailure(f"Elevation endpoint request failed: {e}", provider=api) from e

        return parse_elevation_results(_decode_json(response, provider=api), expected=len(locations), provider=api)


class DirectElevationClient:
    """Client that queries the public elevation providers directly.

    Example:
        client = DirectElevationClient()
        elevations = client.lookup(locations=[(46.98, 10.31)], api="openelevation")
    """

    def __init__(
        self,
        provider_urls: dict[str, str] | None = None,
        timeout_s: float = ElevationConfig.REQUEST_TIMEOUT_S,
    ) -> None:
        self.provider_urls = provider_urls or dict(ElevationConfig.PROVIDER_URLS)
        self.timeout_s = timeout_s

    def lookup(self, locations: list[LatLon], api: str) -> list[float]:
        """GET one batch of coordinates from the selected provider."""
        url = self.provider_urls.get(api)
        if url is None:
            raise ValueError(f"Unknown elevation API: {api}")

        # Build locations string
        location_string = "|".join(f"{lat},{lon}" for lat, lon in locations)

        try:
            response = requests.get(url, params={"locations": location_string}, timeout=self.timeout_s)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransientNetworkFailure(f"{api} request failed: {e}", provider=api) from e

        return parse_elevation_results(_decode_json(response, provider=api), expected=len(locations), provider=api)
