"""
Timing System

Seconds are the single internal unit; everything here derives display
strings or grid positions from seconds.

Modules:
- time_format: m:ss / m:ss.cc / duration strings
- beat_grid: tempo grid, tick classification and snapping
"""

from .beat_grid import BarLabel, BeatGrid, GridSettings, GridTick, SnapUnit, snap_to_grid
from .time_format import format_clock, format_duration, format_section_time

__all__ = [
    'BarLabel',
    'BeatGrid',
    'GridSettings',
    'GridTick',
    'SnapUnit',
    'snap_to_grid',
    'format_clock',
    'format_duration',
    'format_section_time',
]
