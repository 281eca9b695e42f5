"""
Arrangement View

Detailed waveform with a tempo grid and editable section markers on top.

Layout:
    [BPM: 120] [Snap to: Bar v] [x] Show Grid [x] Snap
    instructions
    ArrangementCanvas (waveform + grid + sections)

A track without a tempo shows an explanatory placeholder instead and no
grid is computed.
"""

from typing import List, Optional

from PyQt6.QtCore import QRectF, Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from src.shared.domain.entities.audio_section import AudioSection
from src.shared.domain.entities.track import TrackRecord

from ..constants import ARRANGEMENT_HEIGHT
from src.utils.message import Log
from ..render.detailed import render_detailed
from ..render.grid import render_grid
from ..render.sections import header_rect, render_creation_preview, render_sections
from ..timing.beat_grid import BeatGrid, GridSettings, SnapUnit
from ..types import PlaybackState, SurfaceSize
from ..views.detailed_waveform import DetailedWaveformView
from .section_editor import EditMode, HitKind, SectionEditor

NO_BPM_TITLE = "BPM is required to use the Arrangements feature"
NO_BPM_HINT = "Please set the BPM for this track in the track details"

HINT_CREATING = "Click again to mark the end of the section"
HINT_FIRST = "Click on the waveform to mark the start and end of your first section"
HINT_EDIT = "Click on sections to select and edit them. Create new sections by clicking in empty areas."


class ArrangementCanvas(DetailedWaveformView):
    """
    Waveform surface that routes pointer input to a SectionEditor instead
    of seeking.

    Signals:
        duration_changed(seconds): Effective duration changed
    """

    duration_changed = pyqtSignal(float)

    SHOW_HOVER_TOOLTIP = False

    def __init__(self, engine, extractor=None, canvas_height: int = ARRANGEMENT_HEIGHT, parent=None):
        super().__init__(engine, extractor, canvas_height, parent)
        self.editor = SectionEditor("", self)
        self.editor.changed.connect(self._on_editor_changed)
        self.editor.rename_started.connect(self._open_rename)
        self._grid: Optional[BeatGrid] = None
        self._known_duration = 0.0

        self._rename_edit = QLineEdit(self)
        self._rename_edit.hide()
        self._rename_edit.returnPressed.connect(self._commit_rename)
        self._rename_edit.installEventFilter(self)

        self.setFocusPolicy(Qt.FocusPolicy.ClickFocus)
        self.setCursor(Qt.CursorShape.CrossCursor)

    @property
    def grid(self) -> Optional[BeatGrid]:
        return self._grid

    @property
    def rename_editor(self) -> QLineEdit:
        return self._rename_edit

    def set_grid(self, grid: Optional[BeatGrid]) -> None:
        self._grid = grid
        self.editor.set_grid(grid)
        self._dirty = True
        self.update()

    def set_track(self, track: Optional[TrackRecord]) -> None:
        if track is not None and track.id != self.editor.track_id:
            self._rename_edit.hide()
            self.editor.reset(track.id)
        super().set_track(track)
        self._sync_duration()

    # =========================================================================
    # Duration tracking
    # =========================================================================

    def _sync_duration(self) -> None:
        duration = self.duration
        if duration == self._known_duration:
            return
        self._known_duration = duration
        self.editor.set_duration(duration)
        self.duration_changed.emit(duration)

    def _on_loader_changed(self, loader) -> None:
        super()._on_loader_changed(loader)
        self._sync_duration()

    def _on_playback_state(self, state: PlaybackState) -> None:
        super()._on_playback_state(state)
        self._sync_duration()

    def _on_editor_changed(self) -> None:
        self._dirty = True
        self.update()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.editor.set_width(self.width())

    # =========================================================================
    # Painting
    # =========================================================================

    def paint_canvas(self, canvas, size: SurfaceSize) -> None:
        data = self.loader.data
        duration = self.duration
        render_detailed(
            canvas, size,
            data.peaks if data is not None else None,
            duration, self.is_active, self.position, self.hover,
        )
        if self._grid is not None:
            render_grid(canvas, size, self._grid)
        render_sections(
            canvas, size,
            self.editor.display_sections(),
            duration,
            selected_id=self.editor.selected_id,
            editing_id=self.editor.renaming_id,
        )
        if self.editor.is_creating:
            render_creation_preview(canvas, size, self.editor.create_start, duration)

    # =========================================================================
    # Pointer / keyboard
    # =========================================================================

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        self.editor.set_width(self.width())
        pos = event.position()
        self.editor.press(pos.x(), pos.y())
        event.accept()

    def mouseDoubleClickEvent(self, event):
        pos = event.position()
        self.editor.double_click(pos.x(), pos.y())
        event.accept()

    def mouseMoveEvent(self, event):
        pos = event.position()
        if self.editor.mode == EditMode.RESIZING:
            self.editor.move(pos.x())
            self.setCursor(Qt.CursorShape.SizeHorCursor)
        else:
            hit = self.editor.hit_test(pos.x(), pos.y())
            if hit.kind in (HitKind.START_EDGE, HitKind.END_EDGE):
                self.setCursor(Qt.CursorShape.SizeHorCursor)
            elif hit.kind != HitKind.NONE:
                self.setCursor(Qt.CursorShape.PointingHandCursor)
            else:
                self.setCursor(Qt.CursorShape.CrossCursor)
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        if self.editor.mode == EditMode.RESIZING:
            self.editor.release(event.position().x())
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def keyPressEvent(self, event):
        if event.key() == Qt.Key.Key_Escape:
            self.editor.escape()
            event.accept()
            return
        if event.key() in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace) and self.editor.selected_id:
            self.editor.delete(self.editor.selected_id)
            event.accept()
            return
        super().keyPressEvent(event)

    # =========================================================================
    # Inline rename
    # =========================================================================

    def _open_rename(self, section_id: str) -> None:
        section = self.editor.find(section_id)
        if section is None:
            return
        x, y, w, h = header_rect(section, self.duration, self.width())
        self._rename_edit.setGeometry(QRectF(x + 2, y + 1, max(60.0, w - 24), h - 2).toRect())
        self._rename_edit.setText(section.name)
        self._rename_edit.selectAll()
        self._rename_edit.show()
        self._rename_edit.setFocus()

    def _commit_rename(self) -> None:
        if self.editor.commit_rename(self._rename_edit.text()):
            self._rename_edit.hide()

    def _cancel_rename(self) -> None:
        self.editor.cancel_rename()
        self._rename_edit.hide()

    def eventFilter(self, obj, event):
        if obj is self._rename_edit and event.type() == event.Type.KeyPress:
            if event.key() == Qt.Key.Key_Escape:
                self._cancel_rename()
                return True
        return super().eventFilter(obj, event)


class ArrangementView(QWidget):
    """
    Grid controls plus the arrangement canvas for one track.

    Section persistence belongs to the host: it listens to the request
    signals and hands the resulting list back through set_sections().

    Signals:
        section_create_requested(SectionDraft)
        section_update_requested(AudioSection)
        section_delete_requested(str)
    """

    section_create_requested = pyqtSignal(object)
    section_update_requested = pyqtSignal(object)
    section_delete_requested = pyqtSignal(str)

    def __init__(self, engine, extractor=None, canvas_height: int = ARRANGEMENT_HEIGHT, parent=None):
        super().__init__(parent)
        self._track: Optional[TrackRecord] = None
        self._settings = GridSettings()

        self._stack = QStackedWidget(self)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._stack)

        self._placeholder = self._build_placeholder()
        self._stack.addWidget(self._placeholder)

        editor_page = QWidget()
        page_layout = QVBoxLayout(editor_page)
        page_layout.setContentsMargins(0, 0, 0, 0)
        page_layout.setSpacing(8)
        page_layout.addLayout(self._build_controls())

        self._hint = QLabel()
        self._hint.setObjectName("arrangementHint")
        page_layout.addWidget(self._hint)

        self.canvas = ArrangementCanvas(engine, extractor, canvas_height)
        page_layout.addWidget(self.canvas)
        page_layout.addStretch()
        self._stack.addWidget(editor_page)
        self._editor_page = editor_page

        editor = self.canvas.editor
        editor.section_created.connect(self.section_create_requested)
        editor.section_updated.connect(self.section_update_requested)
        editor.section_deleted.connect(self.section_delete_requested)
        editor.changed.connect(self._update_hint)
        self.canvas.duration_changed.connect(lambda _d: self._rebuild_grid())

        self._stack.setCurrentWidget(self._placeholder)
        self._update_hint()

    # =========================================================================
    # Construction
    # =========================================================================

    def _build_placeholder(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(32, 32, 32, 32)
        title = QLabel(NO_BPM_TITLE)
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        hint = QLabel(NO_BPM_HINT)
        hint.setAlignment(Qt.AlignmentFlag.AlignCenter)
        hint.setStyleSheet("font-size: 11px; color: rgba(235, 234, 232, 153);")
        layout.addStretch()
        layout.addWidget(title)
        layout.addWidget(hint)
        layout.addStretch()
        self._placeholder_labels = (title, hint)
        return page

    def _build_controls(self) -> QHBoxLayout:
        row = QHBoxLayout()
        row.setSpacing(12)

        self._bpm_label = QLabel("BPM: -")
        row.addWidget(self._bpm_label)

        row.addWidget(QLabel("Snap to:"))
        self._snap_combo = QComboBox()
        for unit in SnapUnit:
            self._snap_combo.addItem(unit.label, unit.value)
        self._snap_combo.setCurrentIndex(self._snap_combo.findData(self._settings.snap_unit.value))
        self._snap_combo.currentIndexChanged.connect(self._on_snap_unit_changed)
        row.addWidget(self._snap_combo)

        self._show_grid = QCheckBox("Show Grid")
        self._show_grid.setChecked(self._settings.visible)
        self._show_grid.toggled.connect(self._on_show_grid_toggled)
        row.addWidget(self._show_grid)

        self._snap_enabled = QCheckBox("Snap")
        self._snap_enabled.setChecked(self._settings.snap_enabled)
        self._snap_enabled.toggled.connect(self._on_snap_enabled_toggled)
        row.addWidget(self._snap_enabled)

        row.addStretch()
        return row

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def track(self) -> Optional[TrackRecord]:
        return self._track

    @property
    def grid_settings(self) -> GridSettings:
        return self._settings

    @property
    def grid(self) -> Optional[BeatGrid]:
        return self.canvas.grid

    @property
    def editor(self) -> SectionEditor:
        return self.canvas.editor

    @property
    def showing_placeholder(self) -> bool:
        return self._stack.currentWidget() is self._placeholder

    def set_track(self, track: Optional[TrackRecord]) -> None:
        self._track = track
        if track is None or not track.has_tempo:
            self._stack.setCurrentWidget(self._placeholder)
            self.canvas.set_grid(None)
            self.canvas.set_track(None)
            return

        self._settings = GridSettings(
            bpm=float(track.bpm),
            beats_per_bar=self._settings.beats_per_bar,
            snap_unit=self._settings.snap_unit,
            visible=self._settings.visible,
            snap_enabled=self._settings.snap_enabled,
        )
        self._bpm_label.setText(f"BPM: {track.bpm:g}")
        self._stack.setCurrentWidget(self._editor_page)
        self.canvas.set_track(track)
        self._rebuild_grid()

    def set_sections(self, sections: List[AudioSection]) -> None:
        self.canvas.editor.set_sections(sections)

    def set_grid_settings(self, settings: GridSettings) -> None:
        self._settings = settings
        self._rebuild_grid()

    # =========================================================================
    # Grid
    # =========================================================================

    def _rebuild_grid(self) -> None:
        if self._track is None or not self._track.has_tempo:
            self.canvas.set_grid(None)
            return
        duration = self.canvas.duration
        try:
            grid = BeatGrid.build(self._settings, duration)
        except ValueError as e:
            Log.warning(f"ArrangementView: Invalid grid settings: {e}")
            grid = None
        self.canvas.set_grid(grid)

    def _on_snap_unit_changed(self, index: int) -> None:
        value = self._snap_combo.itemData(index)
        if value is None:
            return
        self._settings.snap_unit = SnapUnit(value)
        self._rebuild_grid()

    def _on_show_grid_toggled(self, checked: bool) -> None:
        self._settings.visible = checked
        self._rebuild_grid()

    def _on_snap_enabled_toggled(self, checked: bool) -> None:
        self._settings.snap_enabled = checked
        self._rebuild_grid()

    def _update_hint(self) -> None:
        editor = self.canvas.editor
        if editor.is_creating:
            text = HINT_CREATING
        elif not editor.sections:
            text = HINT_FIRST
        else:
            text = HINT_EDIT
        self._hint.setText(text)

    def shutdown(self) -> None:
        self.canvas.shutdown()
