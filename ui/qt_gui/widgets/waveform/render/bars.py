"""
Bar Waveform Renderer

Compact waveform of a fixed number of rounded bars, for list rows and the
player bar. Bar height is the bucket's peak amplitude relative to the
loudest bucket.
"""

from typing import List, Optional

import numpy as np

from ..constants import BAR_GAP, BARS_PADDING, DRAG_HANDLE_RADIUS, MIN_BAR_HEIGHT
from ..core.canvas import Canvas
from ..core.style import WaveformStyle, with_alpha
from ..types import SurfaceSize


def bar_heights(peaks: Optional[np.ndarray], available_height: float) -> List[float]:
    """
    Pixel height of each bar, at least MIN_BAR_HEIGHT.

    amplitude = max(|min|, |max|), normalised to the loudest bar. All-silent
    input gives minimum-height bars.
    """
    if peaks is None or len(peaks) == 0:
        return []
    amplitudes = np.max(np.abs(np.asarray(peaks, dtype=np.float64)), axis=1)
    loudest = float(amplitudes.max())
    if loudest <= 0:
        return [float(MIN_BAR_HEIGHT)] * len(amplitudes)
    return [max(float(MIN_BAR_HEIGHT), float(a) / loudest * available_height) for a in amplitudes]


def is_bar_played(index: int, count: int, progress: float) -> bool:
    return count > 0 and (index / count) <= progress


def bar_geometry(width: float, count: int):
    """(x of first bar, bar width, step) for count bars across width."""
    inner = max(0.0, width - 2 * BARS_PADDING)
    if count <= 0:
        return BARS_PADDING, 0.0, 0.0
    bar_width = max(1.0, (inner - BAR_GAP * (count - 1)) / count)
    return BARS_PADDING, bar_width, bar_width + BAR_GAP


def render_bars(
    canvas: Canvas,
    size: SurfaceSize,
    peaks: Optional[np.ndarray],
    progress: float,
    show_playhead: bool,
    style=WaveformStyle,
) -> None:
    """
    Paint bars, then the playhead line and drag handle.

    Args:
        progress: Fraction played (0 when this track is not the active one)
        show_playhead: True for the active track with a known duration
    """
    width, height = size.width, size.height
    canvas.fill_rect(0, 0, width, height, style.PEAK_BG_COLOR)

    available = max(0.0, height - 2 * BARS_PADDING)
    heights = bar_heights(peaks, available)
    count = len(heights)
    if count == 0:
        return

    x0, bar_width, step = bar_geometry(width, count)
    center = size.center
    played = style.PEAK_PRIMARY
    unplayed = with_alpha(style.PEAK_PRIMARY, style.BAR_UNPLAYED_ALPHA)
    for i, bar_height in enumerate(heights):
        color = played if is_bar_played(i, count, progress) else unplayed
        canvas.fill_rect(x0 + i * step, center - bar_height / 2.0, bar_width, bar_height, color)

    if show_playhead:
        x = max(0.0, min(1.0, progress)) * width
        canvas.line(x, 0, x, height, style.PEAK_PRIMARY, 2.0)
        canvas.circle(x, center, DRAG_HANDLE_RADIUS, style.PEAK_PRIMARY)
