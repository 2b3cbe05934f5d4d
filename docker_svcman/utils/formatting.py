"""
Formatting utilities for the Docker Service Manager.
"""

from datetime import datetime
from typing import Optional


BYTE_UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB")

INTERVAL_UNITS = (("d", 86400), ("h", 3600), ("m", 60), ("s", 1))


def format_time(timestamp: Optional[float]) -> str:
    """
    Format a maintenance run time for display.

    Args:
        timestamp: Unix timestamp in seconds, or None if it never happened

    Returns:
        str: Local time as ``YYYY-MM-DD HH:MM:SS``, or "never"
    """
    if timestamp is None:
        return "never"
    return datetime.fromtimestamp(timestamp).strftime('%Y-%m-%d %H:%M:%S')


def format_bytes(size: float) -> str:
    """Byte count in IEC units with one decimal, e.g. ``15.6 GiB``."""
    for unit in BYTE_UNITS[:-1]:
        if abs(size) < 1024:
            break
        size /= 1024
    else:
        unit = BYTE_UNITS[-1]

    if unit == "B":
        return f"{int(size)} B"
    return f"{size:.1f} {unit}"


def format_interval(seconds: float) -> str:
    """
    Format a scheduling interval by its two largest whole units.

    ``86400`` gives ``1d``, ``7500`` gives ``2h 5m`` and ``45`` gives ``45s``.
    """
    remaining = int(round(seconds))
    if remaining <= 0:
        return "0s"

    parts = []
    for suffix, length in INTERVAL_UNITS:
        count, remaining = divmod(remaining, length)
        if count:
            parts.append(f"{count}{suffix}")
    return " ".join(parts[:2])


def usage_color(percent: float) -> str:
    """Rich color for a usage percentage."""
    if percent > 85:
        return "red"
    if percent > 60:
        return "yellow"
    return "green"
