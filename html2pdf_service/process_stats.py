"""Process uptime and memory figures reported by /health and the heartbeat."""

import time
from typing import Dict

import psutil

_STARTED_AT = time.monotonic()


def uptime_seconds() -> float:
    """Seconds since the service module was first imported."""
    return round(time.monotonic() - _STARTED_AT, 3)


def memory_usage() -> Dict[str, float]:
    """
    Memory used by the service process.

    Returns:
        rss and vms in bytes, percent of total system memory
    """
    process = psutil.Process()
    info = process.memory_info()
    return {
        "rss": info.rss,
        "vms": info.vms,
        "percent": round(process.memory_percent(), 2),
    }
