"""Bounded retry with growing delays for remote lookups."""

import logging
import time
from typing import Callable, Sequence, TypeVar

from route_planner.core.errors import LookupFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_retry(
    fn: Callable[[], T],
    delays_s: Sequence[float],
    sleep: Callable[[float], None] = time.sleep,
    description: str = "lookup",
) -> T:
    """Call fn, retrying on LookupFailure once per entry in delays_s.

    The delay before retry n is delays_s[n - 1], so (1.0, 2.0, 3.0) means
    four attempts in total with 1s, 2s and 3s pauses in between.

    Args:
        fn: Zero-argument callable performing the remote call
        delays_s: Pause before each retry, in seconds
        sleep: Sleep function (injectable for tests)
        description: Label used in log messages

    Returns:
        The first successful result of fn.

    Raises:
        LookupFailure: The error of the last attempt once all retries are used.
    """
    attempts = len(delays_s) + 1
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except LookupFailure as e:
            logger.warning(f"{description} failed (attempt {attempt}/{attempts}): {e}")
            if attempt == attempts:
                raise
            sleep(delays_s[attempt - 1])
    raise RuntimeError("unreachable")  # loop always returns or raises
