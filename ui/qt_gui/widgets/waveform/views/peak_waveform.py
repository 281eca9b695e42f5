"""
Peak Waveform View

Mirrored-bar peak visualization at a fixed 200 buckets. When extraction
fails it keeps drawing the placeholder peaks and adds the error as an
inline caption, so the layout does not jump.
"""

from PyQt6.QtCore import QRectF, Qt

from ..constants import PEAK_BUCKET_COUNT, PEAK_VIEW_HEIGHT
from ..core.style import WaveformStyle
from ..render.peaks import render_peaks
from ..types import SurfaceSize
from .base import WaveformViewBase


class PeakWaveformView(WaveformViewBase):
    """Peak bars, 2 px progress line, dashed hover line, click-to-seek."""

    def __init__(self, engine, extractor=None, bucket_count: int = PEAK_BUCKET_COUNT,
                 canvas_height: int = PEAK_VIEW_HEIGHT, parent=None):
        self._bucket_count = bucket_count
        super().__init__(engine, extractor, canvas_height, parent)

    def bucket_count(self) -> int:
        return self._bucket_count

    def time_labels(self):
        duration = self.duration
        if duration <= 0:
            return "", "", ""
        left, _, right = super().time_labels()
        return left, "", right

    def paint_canvas(self, canvas, size: SurfaceSize) -> None:
        data = self.loader.data
        render_peaks(
            canvas,
            size,
            data.peaks if data is not None else None,
            self.duration,
            self.is_active,
            self.position,
            self.hover.time_seconds if self.hover.visible else None,
        )

    def paint_overlay(self, painter, size: SurfaceSize) -> None:
        error = self.loader.error
        if not error:
            return
        painter.setPen(WaveformStyle.PLAYHEAD_COLOR)
        painter.setFont(WaveformStyle.small_font(10))
        painter.drawText(
            QRectF(0, size.height - 16, size.width, 16),
            Qt.AlignmentFlag.AlignCenter,
            error,
        )
