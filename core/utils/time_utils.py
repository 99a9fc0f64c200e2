"""
Epoch-second clock helpers
"""
import time
from typing import Callable

# Clock returning the current time as integer epoch seconds
Clock = Callable[[], int]


def now_ts() -> int:
    """Current time as integer seconds since the epoch"""
    return int(time.time())


def seconds_since(timestamp: int, now: int = None) -> int:
    """
    Age of an epoch-second timestamp

    Args:
        timestamp: Past timestamp (epoch seconds)
        now: Reference time (defaults to the current time)

    Returns:
        Elapsed seconds, negative if the timestamp lies in the future
    """
    if now is None:
        now = now_ts()
    return now - timestamp
