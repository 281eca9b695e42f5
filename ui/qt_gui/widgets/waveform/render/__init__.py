"""
Waveform Renderers

Pure painters: each takes a Canvas, a logical SurfaceSize and plain data,
and draws. No widget state lives here.
"""

from .bars import bar_heights, is_bar_played, render_bars
from .detailed import bucket_indices, column_segments, render_detailed, time_to_x
from .grid import render_grid, tick_pen
from .peaks import render_peaks
from .sections import (
    delete_button_rect,
    header_rect,
    rect_contains,
    render_creation_preview,
    render_sections,
    section_span,
)

__all__ = [
    'bar_heights',
    'is_bar_played',
    'render_bars',
    'bucket_indices',
    'column_segments',
    'render_detailed',
    'time_to_x',
    'render_grid',
    'tick_pen',
    'render_peaks',
    'delete_button_rect',
    'header_rect',
    'rect_contains',
    'render_creation_preview',
    'render_sections',
    'section_span',
]
