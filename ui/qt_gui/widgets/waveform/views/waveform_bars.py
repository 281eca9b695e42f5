"""
Waveform Bars View

Compact bar-style waveform with a draggable playhead, used in track rows
and the transport bar. Fixed bucket count, so a resize only repaints.
"""

from typing import Optional

from PyQt6.QtCore import Qt

from ..constants import BAR_COUNT, BARS_HEIGHT
from ..render.bars import render_bars
from ..timing.time_format import format_clock
from ..types import HoverState, SurfaceSize
from .base import WaveformViewBase

ERROR_TEXT = "Unable to load waveform"


class WaveformBarsView(WaveformViewBase):
    """Bars coloured by progress; press or drag anywhere to seek."""

    SHOW_HOVER_TOOLTIP = False

    def __init__(self, engine, extractor=None, bar_count: int = BAR_COUNT,
                 canvas_height: int = BARS_HEIGHT, parent=None):
        self._bar_count = bar_count
        super().__init__(engine, extractor, canvas_height, parent)

    def bucket_count(self) -> int:
        return self._bar_count

    @property
    def progress(self) -> float:
        duration = self.duration
        if not self.is_active or duration <= 0:
            return 0.0
        return self.position / duration

    @property
    def is_dragging(self) -> bool:
        return self._hover.dragging

    def status_text(self) -> Optional[str]:
        text = super().status_text()
        if text is not None:
            return text
        return ERROR_TEXT if self.loader.error else None

    def paint_canvas(self, canvas, size: SurfaceSize) -> None:
        data = self.loader.data
        render_bars(
            canvas,
            size,
            data.peaks if data is not None else None,
            self.progress,
            self.is_active and self.duration > 0,
        )

    def time_labels(self):
        duration = self.duration
        if not self.is_active:
            return "0:00", "", format_clock(duration) if duration > 0 else ""
        elapsed = format_clock(self.position)
        if duration <= 0:
            return elapsed, "", ""
        return elapsed, "", f"-{format_clock(duration - self.position)}"

    # =========================================================================
    # Press / drag seeking
    # =========================================================================

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton or self.duration <= 0:
            super().mousePressEvent(event)
            return
        self._hover = HoverState(None, dragging=True)
        self.seek_to(self.time_at(event.position().x()))
        event.accept()

    def mouseMoveEvent(self, event):
        if self._hover.dragging:
            self.seek_to(self.time_at(event.position().x()))
            event.accept()
            return
        event.ignore()

    def mouseReleaseEvent(self, event):
        if self._hover.dragging:
            self._hover = HoverState()
            event.accept()
            return
        super().mouseReleaseEvent(event)
