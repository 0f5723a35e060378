"""Elevation profile pipeline for a resolved route.

Turns a fine-grained route polyline into a smooth, fixed-resolution
elevation curve:

1. Down-sample the route to at most MAX_SAMPLES points (uniform stride)
2. Split the samples into CHUNK_SIZE batches for the remote lookup
3. Look up each batch with bounded retries, sequentially
4. Fail over to the next provider if one provider is exhausted
5. Resample the raw elevations to CURVE_RESOLUTION points with
   Catmull-Rom tangents evaluated as cubic Bezier segments

If every provider fails the pipeline flags itself unavailable; the host
hides the profile until a new route is loaded. Each load() is stamped with
a generation number so a slow, superseded run can never overwrite the
result of a newer one.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from route_planner.constants import ElevationConfig
from route_planner.core.elevation_client import ElevationLookup
from route_planner.core.errors import LookupFailure
from route_planner.core.geo_calculator import LatLon
from route_planner.core.retry import call_with_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElevationSample:
    """Raw elevations aligned 1:1 with the down-sampled route points.

    Attributes:
        locations: Down-sampled route coordinates (lat, lon)
        elevations: Elevation in meters for each location
        provider: Provider that answered
    """

    locations: tuple[LatLon, ...]
    elevations: tuple[float, ...]
    provider: str


@dataclass(frozen=True)
class SmoothedCurve:
    """Fixed-length smoothed elevation profile.

    Attributes:
        values: Elevation in meters, CURVE_RESOLUTION samples
        min_elevation: Lowest value of the curve (for axis scaling)
        max_elevation: Highest value of the curve (for axis scaling)
    """

    values: np.ndarray
    min_elevation: float
    max_elevation: float

    def __len__(self) -> int:
        return len(self.values)

    @staticmethod
    def from_values(values: np.ndarray) -> "SmoothedCurve":
        return SmoothedCurve(
            values=values,
            min_elevation=float(values.min()),
            max_elevation=float(values.max()),
        )


def downsample_path(path: Sequence[LatLon], max_samples: int = ElevationConfig.MAX_SAMPLES) -> list[LatLon]:
    """Uniformly stride through path to keep at most max_samples points.

    The stride is max(1, len // max_samples). When that stride would still
    yield more than max_samples points it is raised to ceil(len / max_samples).
    The stride is by index, not by distance.
    """
    n = len(path)
    if n == 0:
        return []
    step = max(1, n // max_samples)
    if math.ceil(n / step) > max_samples:
        step = math.ceil(n / max_samples)
    return list(path[::step])


def chunk_points(points: Sequence[LatLon], chunk_size: int = ElevationConfig.CHUNK_SIZE) -> list[list[LatLon]]:
    """Split points into consecutive batches of at most chunk_size."""
    return [list(points[i : i + chunk_size]) for i in range(0, len(points), chunk_size)]


def smooth_catmull_rom(
    samples: Sequence[float],
    resolution: int = ElevationConfig.CURVE_RESOLUTION,
    tension: float = ElevationConfig.TENSION,
) -> np.ndarray:
    """Resample raw elevations to a smooth curve of fixed length.

    For every pair of neighboring samples (p1, p2) the Bezier control points
    are built from the surrounding four samples p0..p3 (indices clamped to
    the array):

        cp1 = p1 + (p2 - p0) * tension / 2
        cp2 = p2 - (p3 - p1) * tension / 2

    The curve is evaluated at `resolution` uniform parameter steps spanning
    all segments. The first and last output values equal the first and last
    samples exactly.

    Args:
        samples: Raw elevations in meters
        resolution: Number of output values
        tension: Catmull-Rom tension

    Returns:
        Array of `resolution` elevations (empty if samples is empty).
    """
    values = np.asarray(samples, dtype=float)
    n = len(values)
    if n == 0:
        return np.empty(0)
    if n == 1:
        return np.full(resolution, values[0])

    idx = np.arange(n - 1)
    p0 = values[np.maximum(idx - 1, 0)]
    p1 = values[idx]
    p2 = values[idx + 1]
    p3 = values[np.minimum(idx + 2, n - 1)]

    cp1 = p1 + (p2 - p0) * tension / 2
    cp2 = p2 - (p3 - p1) * tension / 2

    u = np.linspace(0.0, n - 1, resolution)
    seg = np.minimum(np.floor(u).astype(int), n - 2)
    t = u - seg
    mt = 1.0 - t

    return mt**3 * p1[seg] + 3 * mt**2 * t * cp1[seg] + 3 * mt * t**2 * cp2[seg] + t**3 * p2[seg]


class ElevationPipeline:
    """Builds and serves the smoothed elevation profile of the current route.

    The pipeline is rebuilt wholesale by every load(); there is no
    incremental update.

    Example:
        pipeline = ElevationPipeline(client=DirectElevationClient())
        pipeline.load(path=route.points)
        if pipeline.unavailable:
            ...  # hide the profile
        elevation = pipeline.sample_at(ratio=0.5)
    """

    def __init__(
        self,
        client: ElevationLookup,
        providers: Sequence[str] = ElevationConfig.PROVIDERS,
        max_samples: int = ElevationConfig.MAX_SAMPLES,
        chunk_size: int = ElevationConfig.CHUNK_SIZE,
        resolution: int = ElevationConfig.CURVE_RESOLUTION,
        tension: float = ElevationConfig.TENSION,
        retry_delays_s: Sequence[float] = ElevationConfig.RETRY_DELAYS_S,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.providers = tuple(providers)
        self.max_samples = max_samples
        self.chunk_size = chunk_size
        self.resolution = resolution
        self.tension = tension
        self.retry_delays_s = tuple(retry_delays_s)
        self._sleep = sleep

        self._lock = threading.Lock()
        self._generation = 0

        self.path: tuple[LatLon, ...] = ()
        self.sample: ElevationSample | None = None
        self.curve: SmoothedCurve | None = None
        self.unavailable = False

    @property
    def generation(self) -> int:
        """Number of load()/reset() calls so far; identifies the current run."""
        return self._generation

    @property
    def has_curve(self) -> bool:
        return self.curve is not None

    def reset(self) -> None:
        """Drop the current profile and clear the unavailable flag."""
        with self._lock:
            self._generation += 1
            self.path = ()
            self.sample = None
            self.curve = None
            self.unavailable = False

    def load(self, path: Sequence[LatLon]) -> SmoothedCurve | None:
        """Sample, fetch and smooth the elevation profile of path.

        Never raises for remote failures: total exhaustion of all providers
        sets `unavailable` instead. A result is only applied if no newer
        load() or reset() started in the meantime.

        Args:
            path: Resolved route polyline (lat, lon)

        Returns:
            The new SmoothedCurve, or None if the path is too short, all
            providers failed, or the run was superseded.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
            self.path = tuple(path)
            self.sample = None
            self.curve = None
            self.unavailable = False

        locations = downsample_path(path, max_samples=self.max_samples)
        if len(locations) < 2:
            logger.info(f"Elevation profile skipped: route has {len(locations)} point(s)")
            return None

        logger.info(f"Fetching elevation for {len(locations)} of {len(path)} route points")

        sample = None
        for provider in self.providers:
            try:
                elevations = self._fetch_provider(locations=locations, provider=provider)
            except LookupFailure as e:
                logger.warning(f"Elevation provider '{provider}' exhausted: {e}")
                continue
            sample = ElevationSample(locations=tuple(locations), elevations=tuple(elevations), provider=provider)
            break

        with self._lock:
            if generation != self._generation:
                logger.warning(f"Discarding stale elevation result (run {generation}, current {self._generation})")
                return None

            if sample is None:
                logger.warning("Elevation profile unavailable: all providers failed")
                self.unavailable = True
                return None

            curve = SmoothedCurve.from_values(
                smooth_catmull_rom(sample.elevations, resolution=self.resolution, tension=self.tension)
            )
            self.sample = sample
            self.curve = curve

        logger.info(
            f"Elevation profile ready from {sample.provider}: "
            f"{curve.min_elevation:.0f}m - {curve.max_elevation:.0f}m"
        )
        return curve

    def _fetch_provider(self, locations: list[LatLon], provider: str) -> list[float]:
        """Fetch all chunks from one provider, one request at a time.

        Raises:
            LookupFailure: If any chunk fails after all retries.
        """
        chunks = chunk_points(locations, chunk_size=self.chunk_size)
        elevations: list[float] = []
        for i, chunk in enumerate(chunks):
            logger.debug(f"{provider}: chunk {i + 1}/{len(chunks)} ({len(chunk)} points)")
            elevations.extend(
                call_with_retry(
                    lambda chunk=chunk: self.client.lookup(locations=chunk, api=provider),
                    delays_s=self.retry_delays_s,
                    sleep=self._sleep,
                    description=f"{provider} elevation chunk {i + 1}/{len(chunks)}",
                )
            )
        return elevations

    def sample_at(self, ratio: float) -> float | None:
        """Smoothed elevation at a position along the route.

        Args:
            ratio: Fraction of the route (clamped to [0, 1])

        Returns:
            Elevation in meters at the nearest curve index, or None without a curve.
        """
        curve = self.curve
        if curve is None or len(curve) == 0:
            return None
        ratio = max(0.0, min(1.0, ratio))
        index = int(round(ratio * (len(curve) - 1)))
        return float(curve.values[index])

    def path_index_at(self, ratio: float) -> int | None:
        """Index into the full route polyline for a position along the route.

        index = floor(ratio * (len(path) - 1)), ratio clamped to [0, 1].
        """
        if not self.path:
            return None
        ratio = max(0.0, min(1.0, ratio))
        return math.floor(ratio * (len(self.path) - 1))
