"""
Detailed Waveform View

Full-width per-pixel waveform for the track detail panel and the
arrangement editor. Peaks are extracted at the laid-out width, so a resize
to a new width requests a new extraction.
"""

from typing import Optional

from PyQt6.QtCore import QTimer

from ..constants import DETAILED_HEIGHT, FALLBACK_SURFACE_WIDTH
from ..render.detailed import render_detailed
from ..types import SurfaceSize
from .base import WaveformViewBase

RESIZE_DEBOUNCE_MS = 150


class DetailedWaveformView(WaveformViewBase):
    """Per-pixel waveform with played overlay, playhead and hover line."""

    def __init__(self, engine, extractor=None, canvas_height: int = DETAILED_HEIGHT, parent=None):
        super().__init__(engine, extractor, canvas_height, parent)
        self._resize_timer = QTimer(self)
        self._resize_timer.setSingleShot(True)
        self._resize_timer.setInterval(RESIZE_DEBOUNCE_MS)
        self._resize_timer.timeout.connect(self._on_resize_settled)

    def bucket_count(self) -> int:
        # Not yet laid out: Qt reports the default 640x480 geometry before show
        if not self.isVisible() or self.width() <= 1:
            return FALLBACK_SURFACE_WIDTH
        return self.width()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        if self.track is not None and event.oldSize().width() != event.size().width():
            self._resize_timer.start()

    def showEvent(self, event):
        super().showEvent(event)
        if self.track is not None:
            self._resize_timer.start()

    def _on_resize_settled(self) -> None:
        self.request_peaks()

    def status_text(self) -> Optional[str]:
        text = super().status_text()
        if text is not None:
            return text
        return self.loader.error

    def paint_canvas(self, canvas, size: SurfaceSize) -> None:
        data = self.loader.data
        render_detailed(
            canvas,
            size,
            data.peaks if data is not None else None,
            self.duration,
            self.is_active,
            self.position,
            self.hover,
        )
