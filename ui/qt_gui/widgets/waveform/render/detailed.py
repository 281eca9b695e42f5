"""
Detailed Waveform Renderer

Per-pixel waveform: one column per logical pixel, each drawn from the
(min, max) pair of the bucket that column maps to. The played region is
the same columns redrawn in the played colour, clipped to the playhead.
"""

import math
from typing import Optional, Tuple

import numpy as np

from ..constants import HOVER_DASH_PATTERN, MIN_SEGMENT_HEIGHT, PLAYHEAD_WIDTH, WAVEFORM_SCALE
from ..core.canvas import Canvas
from ..core.style import WaveformStyle, with_alpha
from ..types import HoverState, SurfaceSize


def bucket_indices(width: int, peak_count: int) -> np.ndarray:
    """Bucket index for every column: floor(i * peak_count / width)."""
    if width <= 0 or peak_count <= 0:
        return np.zeros(0, dtype=np.int64)
    columns = np.arange(width, dtype=np.int64)
    return np.minimum((columns * peak_count) // width, peak_count - 1)


def column_segments(
    peaks: np.ndarray,
    width: int,
    height: float,
    scale: float = WAVEFORM_SCALE,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Vertical segment of every column.

    Returns:
        (tops, heights) arrays of length width. Heights are at least
        MIN_SEGMENT_HEIGHT so silent columns still show a hairline.
    """
    center = height / 2.0
    indices = bucket_indices(width, len(peaks))
    if indices.size == 0:
        empty = np.zeros(0, dtype=np.float64)
        return empty, empty
    mins = peaks[indices, 0].astype(np.float64)
    maxs = peaks[indices, 1].astype(np.float64)
    tops = center - maxs * center * scale
    bottoms = center - mins * center * scale
    heights = np.maximum(MIN_SEGMENT_HEIGHT, bottoms - tops)
    return tops, heights


def time_to_x(time_seconds: float, duration_seconds: float, width: float) -> float:
    if duration_seconds <= 0:
        return 0.0
    return (time_seconds / duration_seconds) * width


def _draw_columns(canvas: Canvas, tops: np.ndarray, heights: np.ndarray, color, limit: int) -> None:
    for i in range(limit):
        canvas.fill_rect(i, float(tops[i]), 1, float(heights[i]), color)


def render_detailed(
    canvas: Canvas,
    size: SurfaceSize,
    peaks: Optional[np.ndarray],
    duration_seconds: float,
    is_active: bool,
    position_seconds: float,
    hover: Optional[HoverState] = None,
    style=WaveformStyle,
) -> None:
    """
    Paint the detailed waveform in logical coordinates.

    Draw order: background, center line, waveform columns, played overlay
    (active resource only), playhead, hover line.
    """
    width, height = size.width, size.height
    center = size.center

    canvas.fill_rect(0, 0, width, height, style.BG_COLOR)
    canvas.fill_rect(0, math.floor(center), width, 1, style.CENTER_LINE)

    if peaks is None or len(peaks) == 0 or width <= 0:
        return

    tops, heights = column_segments(peaks, width, height)
    _draw_columns(canvas, tops, heights, with_alpha(style.WAVE_COLOR, style.WAVE_ALPHA), width)

    if is_active and duration_seconds > 0:
        playhead_x = time_to_x(min(position_seconds, duration_seconds), duration_seconds, width)
        if playhead_x > 0:
            canvas.set_clip(0, 0, playhead_x, height)
            played = with_alpha(style.PLAYED_COLOR, style.PLAYED_ALPHA)
            _draw_columns(canvas, tops, heights, played, min(width, int(math.ceil(playhead_x))))
            canvas.clear_clip()
        canvas.line(playhead_x, 0, playhead_x, height, style.PLAYHEAD_COLOR, PLAYHEAD_WIDTH)

    if hover is not None and hover.visible and duration_seconds > 0:
        hover_x = time_to_x(hover.time_seconds, duration_seconds, width)
        canvas.line(
            hover_x, 0, hover_x, height,
            with_alpha(style.HOVER_COLOR, style.HOVER_ALPHA),
            1.0,
            dash=HOVER_DASH_PATTERN,
        )
