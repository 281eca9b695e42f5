"""
Waveform View Base

Shared widget plumbing for the waveform variants:
- one PeakLoader per view (the view owns its peaks, not the engine)
- extraction on a PeakExtractionThread, applied only if still current
- a BackingStore sized to logical size * device pixel ratio
- playback state pulled from the PlaybackEngine's signals
- hover tracking and click-to-seek

Subclasses choose the bucket count and paint through a Canvas.
"""

from typing import Optional, Set

from PyQt6.QtCore import QRectF, Qt, pyqtSignal
from PyQt6.QtGui import QPainter
from PyQt6.QtWidgets import QWidget

from src.shared.application.services.waveform_service import (
    PeakData,
    PeakExtractor,
    PeakLoader,
    PeakRequestKey,
    get_peak_extractor,
)
from src.shared.domain.entities.track import TrackRecord
from ui.qt_gui.core.peak_extraction_thread import PeakExtractionThread

from ..constants import TIME_LABEL_HEIGHT
from ..core.canvas import BackingStore, QPainterCanvas
from ..core.style import WaveformStyle
from src.utils.message import Log
from ..playback.controller import PlaybackEngine
from ..timing.time_format import format_clock
from ..types import HoverState, PlaybackState, SurfaceSize

LOADING_TEXT = "Loading waveform..."


class WaveformViewBase(QWidget):
    """
    Base class for waveform widgets bound to one track.

    Signals:
        seek_requested(seconds): Emitted on click, before the engine seeks
        peaks_changed(): The loader published new data or a new loading state
    """

    seek_requested = pyqtSignal(float)
    peaks_changed = pyqtSignal()

    SHOW_TIME_LABELS = True
    SHOW_HOVER_TOOLTIP = True

    def __init__(
        self,
        engine: PlaybackEngine,
        extractor: Optional[PeakExtractor] = None,
        canvas_height: int = 120,
        parent=None,
    ):
        super().__init__(parent)
        self._engine = engine
        self._extractor = extractor
        self._canvas_height = canvas_height
        self._track: Optional[TrackRecord] = None
        self._state: PlaybackState = engine.state
        self._hover = HoverState()
        self._backing = BackingStore()
        self._dirty = True
        self._threads: Set = set()

        self._loader = PeakLoader(extractor, name=type(self).__name__)
        self._loader.add_listener(self._on_loader_changed)

        engine.state_changed.connect(self._on_playback_state)

        self.setMouseTracking(True)
        self.setMinimumWidth(100)
        label_height = TIME_LABEL_HEIGHT if self.SHOW_TIME_LABELS else 0
        self.setFixedHeight(canvas_height + label_height)
        self.setCursor(Qt.CursorShape.PointingHandCursor)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def track(self) -> Optional[TrackRecord]:
        return self._track

    @property
    def loader(self) -> PeakLoader:
        return self._loader

    @property
    def backing_store(self) -> BackingStore:
        return self._backing

    @property
    def hover(self) -> HoverState:
        return self._hover

    @property
    def is_active(self) -> bool:
        return self._track is not None and self._state.is_active(self._track.id)

    @property
    def duration(self) -> float:
        """Engine duration for the active track, else the decoded duration."""
        if self.is_active and self._state.duration_seconds > 0:
            return self._state.duration_seconds
        data = self._loader.data
        if data is not None and data.duration_seconds > 0:
            return data.duration_seconds
        if self._track is not None and self._track.duration:
            return float(self._track.duration)
        return 0.0

    @property
    def position(self) -> float:
        return self._state.position_seconds if self.is_active else 0.0

    def canvas_size(self) -> SurfaceSize:
        return SurfaceSize(max(1, self.width()), self._canvas_height, self.devicePixelRatioF())

    # =========================================================================
    # Peaks
    # =========================================================================

    def bucket_count(self) -> int:
        raise NotImplementedError

    def set_track(self, track: Optional[TrackRecord]) -> None:
        """Bind to a track and request its peaks."""
        self._track = track
        self._hover = HoverState()
        if track is None:
            self._loader.invalidate()
            return
        self.request_peaks()

    def request_peaks(self) -> None:
        """Start extraction for the current key unless it is cached or in flight."""
        if self._track is None:
            return
        key = PeakRequestKey(self._track.id, self._track.url, self.bucket_count())
        generation = self._loader.begin(key)
        if generation is None:
            return

        extractor = self._extractor or get_peak_extractor()
        thread = PeakExtractionThread(extractor, key, generation, self._track)
        thread.extraction_complete.connect(self._on_extraction_complete)
        thread.extraction_failed.connect(self._on_extraction_failed)
        thread.finished.connect(lambda t=thread: self._threads.discard(t))
        self._threads.add(thread)
        Log.debug(f"{type(self).__name__}: Requesting {key.bucket_count} peaks for {key.resource_id}")
        thread.start()

    def _on_extraction_complete(self, generation: int, data: PeakData) -> None:
        self._loader.complete(generation, data)

    def _on_extraction_failed(self, generation: int, error) -> None:
        self._loader.fail(generation, error)

    def _on_loader_changed(self, loader: PeakLoader) -> None:
        self._dirty = True
        self.peaks_changed.emit()
        self.update()

    def wait_for_extraction(self, timeout_ms: int = 5000) -> bool:
        """Block until in-flight extraction threads finish. True if all did."""
        done = True
        for thread in list(self._threads):
            done = thread.wait(timeout_ms) and done
        return done

    def shutdown(self) -> None:
        """Make pending results stale and wait for worker threads."""
        self._loader.invalidate()
        self.wait_for_extraction()
        try:
            self._engine.state_changed.disconnect(self._on_playback_state)
        except TypeError:
            pass  # Already disconnected

    # =========================================================================
    # Playback state
    # =========================================================================

    def _on_playback_state(self, state: PlaybackState) -> None:
        was_active = self.is_active
        self._state = state
        if was_active or self.is_active:
            self._dirty = True
            self.update()

    # =========================================================================
    # Pointer
    # =========================================================================

    def time_at(self, x: float) -> float:
        width = max(1, self.width())
        ratio = max(0.0, min(1.0, x / width))
        return ratio * self.duration

    def seek_to(self, seconds: float) -> None:
        """Emit seek_requested and move the engine if this track is active."""
        self.seek_requested.emit(seconds)
        if self.is_active:
            self._engine.seek(seconds)

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton and self.duration > 0:
            self.seek_to(self.time_at(event.position().x()))
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        if self.duration > 0:
            self._hover = HoverState(self.time_at(event.position().x()), self._hover.dragging)
            self._dirty = True
            self.update()
        super().mouseMoveEvent(event)

    def leaveEvent(self, event):
        self._hover = HoverState()
        self._dirty = True
        self.update()
        super().leaveEvent(event)

    # =========================================================================
    # Painting
    # =========================================================================

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._dirty = True

    def paint_canvas(self, canvas: QPainterCanvas, size: SurfaceSize) -> None:
        raise NotImplementedError

    def status_text(self) -> Optional[str]:
        """Message drawn instead of the canvas, or None to draw the canvas."""
        if self._loader.loading:
            return LOADING_TEXT
        return None

    def _render_backing(self, size: SurfaceSize) -> None:
        image = self._backing.image
        painter = QPainter(image)
        try:
            self.paint_canvas(QPainterCanvas(painter), size)
        finally:
            painter.end()

    def paintEvent(self, event):
        size = self.canvas_size()
        painter = QPainter(self)
        try:
            message = self.status_text()
            if message is not None:
                self._paint_message(painter, size, message)
                return

            if self._backing.ensure(size) or self._dirty:
                self._render_backing(size)
                self._dirty = False
            painter.drawImage(QRectF(0, 0, size.width, size.height), self._backing.image)

            self.paint_overlay(painter, size)
            if self.SHOW_HOVER_TOOLTIP:
                self.paint_hover_tooltip(painter, size)
            if self.SHOW_TIME_LABELS:
                self.paint_time_labels(painter, size)
        finally:
            painter.end()

    def _paint_message(self, painter: QPainter, size: SurfaceSize, message: str) -> None:
        painter.fillRect(QRectF(0, 0, size.width, size.height), WaveformStyle.PEAK_BG_COLOR)
        painter.setPen(WaveformStyle.TEXT_MUTED)
        painter.setFont(WaveformStyle.small_font(12))
        painter.drawText(QRectF(0, 0, size.width, size.height), Qt.AlignmentFlag.AlignCenter, message)

    def paint_overlay(self, painter: QPainter, size: SurfaceSize) -> None:
        """Drawn over the backing image on every paint."""

    def time_labels(self):
        """(left, middle, right) label strings; empty strings are skipped."""
        duration = self.duration
        if duration <= 0:
            return "", "", ""
        return "0:00", format_clock(duration / 2.0), format_clock(duration)

    def paint_time_labels(self, painter: QPainter, size: SurfaceSize) -> None:
        left, middle, right = self.time_labels()
        rect = QRectF(0, size.height, size.width, TIME_LABEL_HEIGHT)
        painter.setPen(WaveformStyle.TEXT_MUTED)
        painter.setFont(WaveformStyle.small_font(10))
        if left:
            painter.drawText(rect, Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter, left)
        if middle:
            painter.drawText(rect, Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignVCenter, middle)
        if right:
            painter.drawText(rect, Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter, right)

    def paint_hover_tooltip(self, painter: QPainter, size: SurfaceSize) -> None:
        """Small m:ss bubble above the hover line."""
        if not self._hover.visible or self.duration <= 0:
            return
        x = self._hover.time_seconds / self.duration * size.width
        text = format_clock(self._hover.time_seconds)
        painter.setFont(WaveformStyle.small_font(10))
        text_width = painter.fontMetrics().horizontalAdvance(text) + 8
        left = max(0.0, min(size.width - text_width, x - text_width / 2.0))
        bubble = QRectF(left, 2, text_width, 16)
        painter.fillRect(bubble, WaveformStyle.BG_COLOR)
        painter.setPen(WaveformStyle.TEXT_PRIMARY)
        painter.drawText(bubble, Qt.AlignmentFlag.AlignCenter, text)
