"""Address search and coarse location lookup.

- NominatimGeocoder: free-text address -> candidate locations (OpenStreetMap Nominatim)
- IpLocationClient: best-effort IP-based location, used when the browser
  geolocation is denied, unavailable or times out
- GeolocationError: the browser geolocation failure kinds
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

import requests

from route_planner.constants import GeocodingConfig
from route_planner.core.errors import InvalidInput, LookupFailure, MalformedResponse, TransientNetworkFailure
from route_planner.core.geo_calculator import LatLon
from route_planner.core.retry import call_with_retry

logger = logging.getLogger(__name__)


class GeolocationError(Enum):
    """Browser geolocation failure kinds (W3C PositionError codes)."""

    DENIED = 1
    UNAVAILABLE = 2
    TIMEOUT = 3


@dataclass(frozen=True)
class GeocodeResult:
    """A candidate location for an address query."""

    name: str
    lat: float
    lon: float

    @property
    def lat_lon(self) -> LatLon:
        return (self.lat, self.lon)


class NominatimGeocoder:
    """Forward geocoding through the Nominatim search API.

    Example:
        geocoder = NominatimGeocoder()
        results = geocoder.search(query="Tower Bridge, London")
    """

    def __init__(
        self,
        base_url: str = GeocodingConfig.NOMINATIM_URL,
        limit: int = GeocodingConfig.RESULT_LIMIT,
        retry_delays_s: Sequence[float] = GeocodingConfig.RETRY_DELAYS_S,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = base_url
        self.limit = limit
        self.retry_delays_s = tuple(retry_delays_s)
        self._sleep = sleep

    def search(self, query: str) -> list[GeocodeResult]:
        """Find locations matching a free-text address.

        Returns:
            Candidates in relevance order (may be empty).

        Raises:
            InvalidInput: If query is empty or whitespace.
            LookupFailure: If the service keeps failing after retries.
        """
        query = query.strip()
        if not query:
            raise InvalidInput("Please enter an address to search.")

        return call_with_retry(
            lambda: self._search_once(query=query),
            delays_s=self.retry_delays_s,
            sleep=self._sleep,
            description="address search",
        )

    def _search_once(self, query: str) -> list[GeocodeResult]:
        params = {"q": query, "format": "json", "limit": self.limit}
        headers = {"User-Agent": GeocodingConfig.USER_AGENT}
        try:
            response = requests.get(
                self.base_url, params=params, headers=headers, timeout=GeocodingConfig.REQUEST_TIMEOUT_S
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise TransientNetworkFailure(f"Nominatim request failed: {e}", provider="nominatim") from e
        except ValueError as e:
            raise MalformedResponse("Nominatim response is not valid JSON", provider="nominatim") from e

        if not isinstance(data, list):
            raise MalformedResponse("Nominatim response is not a list", provider="nominatim")

        results = []
        for item in data:
            try:
                results.append(
                    GeocodeResult(name=item.get("display_name", ""), lat=float(item["lat"]), lon=float(item["lon"]))
                )
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.debug(f"Skipping geocode result without coordinates: {item}")
        logger.info(f"Address search '{query}': {len(results)} result(s)")
        return results


class IpLocationClient:
    """Coarse location from the client's IP address (city level)."""

    def __init__(self, url: str = GeocodingConfig.IP_LOCATION_URL) -> None:
        self.url = url

    def locate(self) -> LatLon:
        """Return the approximate (lat, lon) of the current IP.

        Raises:
            LookupFailure: If the service fails or returns no coordinates.
        """
        try:
            response = requests.get(self.url, timeout=GeocodingConfig.REQUEST_TIMEOUT_S)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise TransientNetworkFailure(f"IP location request failed: {e}", provider="ipapi") from e
        except ValueError as e:
            raise MalformedResponse("IP location response is not valid JSON", provider="ipapi") from e

        try:
            return float(data["latitude"]), float(data["longitude"])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponse("IP location response has no coordinates", provider="ipapi") from e


def locate_with_fallback(ip_locator: IpLocationClient) -> LatLon | None:
    """Best-effort IP location; None if that fails too."""
    try:
        location = ip_locator.locate()
    except LookupFailure as e:
        logger.warning(f"IP location fallback failed: {e}")
        return None
    logger.info(f"Using IP-based location ({location[0]:.3f}, {location[1]:.3f})")
    return location
