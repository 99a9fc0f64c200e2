"""
Utility modules for the external metrics cache
"""
from .logger import setup_logger, get_logger
from .time_utils import Clock, now_ts, seconds_since

__all__ = [
    "setup_logger",
    "get_logger",
    "Clock",
    "now_ts",
    "seconds_since",
]
