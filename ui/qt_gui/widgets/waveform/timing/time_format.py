"""
Time Format

Display strings for times in seconds. Pure functions; seconds are the only
internal unit.
"""

import math


def format_clock(seconds: float) -> str:
    """
    Format as m:ss for transport and waveform labels.

    Negative and non-finite inputs render as 0:00.
    """
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"


def format_section_time(seconds: float) -> str:
    """Format as m:ss.cc (centiseconds truncated), used by the section list."""
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    centis = int(math.floor((seconds % 1) * 100))
    return f"{mins}:{secs:02d}.{centis:02d}"


def format_duration(seconds: float) -> str:
    """Section length with two decimals, e.g. '12.50s'."""
    return f"{seconds:.2f}s"
