"""
Peak Visualization Renderer

Mirrored bars for a fixed number of buckets: the top half from the
bucket's max, the bottom half from its min.
"""

from typing import Optional

import numpy as np

from ..constants import PEAK_HOVER_DASH_PATTERN, PEAK_VIEW_SCALE, PLAYHEAD_WIDTH
from ..core.canvas import Canvas
from ..core.style import WaveformStyle, with_alpha
from ..types import SurfaceSize


def render_peaks(
    canvas: Canvas,
    size: SurfaceSize,
    peaks: Optional[np.ndarray],
    duration_seconds: float,
    is_active: bool,
    position_seconds: float,
    hover_time: Optional[float] = None,
    style=WaveformStyle,
) -> None:
    width, height = size.width, size.height
    canvas.fill_rect(0, 0, width, height, style.PEAK_BG_COLOR)
    if peaks is None or len(peaks) == 0:
        return

    count = len(peaks)
    bar_width = width / count
    center = size.center
    progress = position_seconds / duration_seconds if is_active and duration_seconds > 0 else 0.0

    played = style.PEAK_PRIMARY
    unplayed = with_alpha(style.PEAK_PRIMARY, style.PEAK_UNPLAYED_ALPHA)
    for i in range(count):
        x = i * bar_width
        top = abs(float(peaks[i, 1])) * center * PEAK_VIEW_SCALE
        bottom = abs(float(peaks[i, 0])) * center * PEAK_VIEW_SCALE
        color = played if (i / count) <= progress else unplayed
        canvas.fill_rect(x, center - top, bar_width - 1, top, color)
        canvas.fill_rect(x, center, bar_width - 1, bottom, color)

    if is_active and duration_seconds > 0:
        x = (position_seconds / duration_seconds) * width
        canvas.line(x, 0, x, height, style.PEAK_PRIMARY, PLAYHEAD_WIDTH)

    if hover_time is not None and duration_seconds > 0:
        x = (hover_time / duration_seconds) * width
        canvas.line(
            x, 0, x, height,
            with_alpha(style.PEAK_PRIMARY, style.PEAK_HOVER_ALPHA),
            1.0,
            dash=PEAK_HOVER_DASH_PATTERN,
        )
