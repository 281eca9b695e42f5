"""
Main Window

Library browser for the tracks passed on the command line.

Layout:
- Track list on the left
- Transport row (play/pause, position, volume)
- Detailed waveform, bars and peak views of the selected track
- Arrangement view (tempo grid and sections)
- Status bar fed by the notification center
"""
from typing import List, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QPushButton,
    QSlider,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from src.application.bootstrap import ApplicationContext
from src.shared.domain.entities.audio_section import SectionDraft
from src.shared.domain.entities.track import TrackRecord
from src.utils.message import Log
from ui.qt_gui.core import StreamingUrlThread, start_library_playback
from ui.qt_gui.widgets.waveform.arrangement import ArrangementView
from ui.qt_gui.widgets.waveform.timing import format_clock
from ui.qt_gui.widgets.waveform.types import PlaybackState
from ui.qt_gui.widgets.waveform.views import (
    DetailedWaveformView,
    PeakWaveformView,
    WaveformBarsView,
)

STATUS_TIMEOUT_MS = 5000


class MainWindow(QMainWindow):
    """
    One window, one engine. Every view shares context.engine, so selecting
    a track never starts a second audio stream.
    """

    def __init__(self, context: ApplicationContext):
        super().__init__()
        self.context = context
        self._current: Optional[TrackRecord] = None
        self._url_threads: List[StreamingUrlThread] = []

        self.setWindowTitle("TrackShelf")
        self.setMinimumSize(900, 600)

        self._create_central()
        self._create_status_bar()

        engine = context.engine
        engine.state_changed.connect(self._on_state_changed)
        engine.track_ended.connect(self._on_track_ended)
        context.notifications.notification_posted.connect(self._on_notification)

        self.refresh_tracks()
        self._on_state_changed(engine.state)

    # ==================== Construction ====================

    def _create_central(self):
        context = self.context
        settings = context.settings
        engine = context.engine
        extractor = context.extractor

        self.track_list = QListWidget()
        self.track_list.setMinimumWidth(200)
        self.track_list.currentItemChanged.connect(self._on_track_selected)
        self.track_list.itemDoubleClicked.connect(lambda _item: self.toggle_playback())

        self.play_button = QPushButton("Play")
        self.play_button.setEnabled(False)
        self.play_button.clicked.connect(self.toggle_playback)

        self.position_label = QLabel("0:00 / 0:00")

        self.volume_slider = QSlider(Qt.Orientation.Horizontal)
        self.volume_slider.setRange(0, 100)
        self.volume_slider.setFixedWidth(140)
        self.volume_slider.setValue(round(engine.volume * 100))
        self.volume_slider.valueChanged.connect(self._on_volume_changed)

        transport = QHBoxLayout()
        transport.addWidget(self.play_button)
        transport.addWidget(self.position_label)
        transport.addStretch()
        transport.addWidget(QLabel("Volume"))
        transport.addWidget(self.volume_slider)

        self.detailed_view = DetailedWaveformView(engine, extractor, settings.waveform_height)
        self.bars_view = WaveformBarsView(engine, extractor, bar_count=settings.bar_count)
        self.peak_view = PeakWaveformView(engine, extractor, bucket_count=settings.peak_bucket_count)
        self.arrangement_view = ArrangementView(engine, extractor, settings.arrangement_height)

        self.arrangement_view.section_create_requested.connect(self._on_section_create)
        self.arrangement_view.section_update_requested.connect(self._on_section_update)
        self.arrangement_view.section_delete_requested.connect(self._on_section_delete)

        right = QWidget()
        right_layout = QVBoxLayout(right)
        right_layout.setContentsMargins(8, 8, 8, 8)
        right_layout.setSpacing(12)
        right_layout.addLayout(transport)
        right_layout.addWidget(self.detailed_view)
        right_layout.addWidget(self.bars_view)
        right_layout.addWidget(self.peak_view)
        right_layout.addWidget(self.arrangement_view)
        right_layout.addStretch()

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self.track_list)
        splitter.addWidget(right)
        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)

    def _create_status_bar(self):
        self.statusBar().showMessage("Ready")

    @property
    def views(self):
        return (self.detailed_view, self.bars_view, self.peak_view)

    # ==================== Tracks ====================

    def refresh_tracks(self):
        """Rebuild the track list from the context's library."""
        self.track_list.clear()
        for track in self.context.tracks.values():
            item = QListWidgetItem(track.name or track.id)
            item.setData(Qt.ItemDataRole.UserRole, track.id)
            self.track_list.addItem(item)
        if self.track_list.count():
            self.track_list.setCurrentRow(0)

    @property
    def current_track(self) -> Optional[TrackRecord]:
        return self._current

    def _on_track_selected(self, current: Optional[QListWidgetItem], _previous=None):
        track = None
        if current is not None:
            track = self.context.get_track(current.data(Qt.ItemDataRole.UserRole))
        self.select_track(track)

    def select_track(self, track: Optional[TrackRecord]):
        self._current = track
        for view in self.views:
            view.set_track(track)
        self.arrangement_view.set_track(track)
        if track is not None:
            self.arrangement_view.set_sections(self.context.sections.list_sections(track.id))
        self.play_button.setEnabled(track is not None)
        self._update_transport(self.context.engine.state)

    # ==================== Transport ====================

    def toggle_playback(self):
        """Pause the selected track if it is playing, otherwise play it."""
        track = self._current
        if track is None:
            return
        engine = self.context.engine
        if engine.active_resource_id == track.id:
            # Resume or pause in place; the resource is already loaded
            engine.toggle_playback(track.id, track.url or "")
            return
        thread = start_library_playback(engine, track.id, parent=self)
        if thread is not None:
            self._url_threads.append(thread)
            thread.finished.connect(lambda: self._forget_url_thread(thread))

    def _forget_url_thread(self, thread: StreamingUrlThread):
        if thread in self._url_threads:
            self._url_threads.remove(thread)
        thread.deleteLater()

    def _on_volume_changed(self, value: int):
        volume = value / 100.0
        self.context.engine.set_volume(volume)
        self.context.settings.default_volume = volume

    def _on_state_changed(self, state: PlaybackState):
        self._update_transport(state)

    def _update_transport(self, state: PlaybackState):
        track = self._current
        is_current = track is not None and state.active_resource_id == track.id
        self.play_button.setText("Pause" if is_current and state.is_playing else "Play")
        if is_current:
            self.position_label.setText(
                f"{format_clock(state.position_seconds)} / {format_clock(state.duration_seconds)}"
            )
        else:
            duration = track.duration if track is not None and track.duration else 0.0
            self.position_label.setText(f"0:00 / {format_clock(duration)}")

    def _on_track_ended(self, resource_id: str):
        track = self.context.get_track(resource_id)
        name = track.name if track is not None and track.name else resource_id
        self.statusBar().showMessage(f"Finished: {name}", STATUS_TIMEOUT_MS)

    # ==================== Sections ====================

    def _reload_sections(self, track_id: str):
        if self._current is not None and self._current.id == track_id:
            self.arrangement_view.set_sections(self.context.sections.list_sections(track_id))

    def _on_section_create(self, draft: SectionDraft):
        section = self.context.sections.create_section(draft)
        self._reload_sections(section.track_id)
        self.statusBar().showMessage(f"Created {section.name}", STATUS_TIMEOUT_MS)

    def _on_section_update(self, section):
        if self.context.sections.update_section(section):
            self._reload_sections(section.track_id)

    def _on_section_delete(self, section_id: str):
        if self._current is None:
            return
        if self.context.sections.delete_section(self._current.id, section_id):
            self._reload_sections(self._current.id)

    # ==================== Notifications ====================

    def _on_notification(self, notification: dict):
        severity = notification.get("severity", "info")
        message = notification.get("message", "")
        prefix = "" if severity == "info" else f"{severity.capitalize()}: "
        self.statusBar().showMessage(f"{prefix}{message}", STATUS_TIMEOUT_MS)

    # ==================== Shutdown ====================

    def shutdown(self):
        for thread in list(self._url_threads):
            thread.wait()
        for view in self.views:
            view.shutdown()
        self.arrangement_view.shutdown()
        Log.info("MainWindow: Views shut down")

    def closeEvent(self, event):
        self.shutdown()
        super().closeEvent(event)
