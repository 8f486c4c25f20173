"""
Utilities for rendering elapsed time for humans.
"""
from datetime import timedelta

_UNITS = [
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
]

def format_duration(elapsed: timedelta) -> str:
    """
    Formats a duration using its largest whole unit, e.g. '3 hours'.
    """
    seconds = int(elapsed.total_seconds())
    if seconds < 1:
        return "less than a second"
    for unit, size in _UNITS:
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'s' if count != 1 else ''}"
    return f"{seconds} seconds"
