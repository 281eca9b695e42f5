"""
Section Editor
==============

Pointer and keyboard logic for arrangement sections, independent of any
widget. The arrangement view forwards logical coordinates and keys here
and repaints on ``changed``.

The editor never mutates the section list itself: create, update and
delete go out as signals, and the owner of the sections hands the result
back through set_sections().

State Machine:
    IDLE -> (click empty area) -> CREATING -> (click) -> IDLE (section_created)
    IDLE -> (press selected edge) -> RESIZING -> (release) -> IDLE (section_updated)
    IDLE -> (double click header) -> RENAMING -> (Enter / Escape) -> IDLE
    Escape cancels CREATING and RESIZING as well.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from src.shared.domain.entities.audio_section import (
    MIN_SECTION_SECONDS,
    AudioSection,
    SectionColor,
    SectionDraft,
    sort_sections,
)

from ..constants import SECTION_EDGE_HANDLE_PX, SECTION_HEADER_HEIGHT
from src.utils.message import Log
from ..render.sections import delete_button_rect, rect_contains, section_span
from ..timing.beat_grid import BeatGrid


class EditMode(Enum):
    IDLE = auto()
    CREATING = auto()
    RESIZING = auto()
    RENAMING = auto()


class HitKind(Enum):
    NONE = auto()
    BODY = auto()
    HEADER = auto()
    START_EDGE = auto()
    END_EDGE = auto()
    DELETE = auto()


@dataclass(frozen=True)
class HitResult:
    kind: HitKind = HitKind.NONE
    section_id: Optional[str] = None


def clamp_created_range(start: float, end: float, duration_seconds: float):
    """
    Keep a new section inside [0, duration] without going under the minimum
    length. Tracks shorter than the minimum keep the minimum instead.
    """
    start = max(0.0, start)
    if duration_seconds >= MIN_SECTION_SECONDS:
        end = min(end, duration_seconds)
        start = min(start, end - MIN_SECTION_SECONDS)
    end = max(end, start + MIN_SECTION_SECONDS)
    return start, end


class SectionEditor(QObject):
    """
    Create, select, resize, rename and delete sections on one track.

    Signals:
        section_created(SectionDraft): Second click of a two-click create
        section_updated(AudioSection): Resize or rename committed
        section_deleted(str): Delete requested for a section id
        selection_changed(object): Selected section id or None
        rename_started(str): Inline editor should open for a section id
        changed(): Anything visible changed; repaint
    """

    section_created = pyqtSignal(object)
    section_updated = pyqtSignal(object)
    section_deleted = pyqtSignal(str)
    selection_changed = pyqtSignal(object)
    rename_started = pyqtSignal(str)
    changed = pyqtSignal()

    def __init__(self, track_id: str, parent=None):
        super().__init__(parent)
        self._track_id = track_id
        self._sections: List[AudioSection] = []
        self._duration = 0.0
        self._width = 0.0
        self._grid: Optional[BeatGrid] = None

        self._mode = EditMode.IDLE
        self._selected_id: Optional[str] = None
        self._create_start: Optional[float] = None
        self._renaming_id: Optional[str] = None

        self._resize_id: Optional[str] = None
        self._resize_edge: HitKind = HitKind.NONE
        self._resize_preview: Optional[AudioSection] = None

    # =========================================================================
    # Inputs from the owner
    # =========================================================================

    @property
    def track_id(self) -> str:
        return self._track_id

    def reset(self, track_id: str) -> None:
        """Switch to another track, dropping sections and any edit in progress."""
        self._track_id = track_id
        self._sections = []
        self._mode = EditMode.IDLE
        self._create_start = None
        self._renaming_id = None
        self._resize_id = None
        self._resize_edge = HitKind.NONE
        self._resize_preview = None
        self._select(None)
        self.changed.emit()

    def set_sections(self, sections: List[AudioSection]) -> None:
        self._sections = sort_sections(sections)
        ids = {s.id for s in self._sections}
        if self._selected_id is not None and self._selected_id not in ids:
            self._select(None)
        if self._renaming_id is not None and self._renaming_id not in ids:
            self._renaming_id = None
            self._mode = EditMode.IDLE
        self.changed.emit()

    def set_duration(self, duration_seconds: float) -> None:
        self._duration = max(0.0, duration_seconds)
        self.changed.emit()

    def set_width(self, width: float) -> None:
        self._width = max(0.0, width)

    def set_grid(self, grid: Optional[BeatGrid]) -> None:
        self._grid = grid

    # =========================================================================
    # State
    # =========================================================================

    @property
    def mode(self) -> EditMode:
        return self._mode

    @property
    def is_creating(self) -> bool:
        return self._mode == EditMode.CREATING

    @property
    def create_start(self) -> Optional[float]:
        return self._create_start

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def renaming_id(self) -> Optional[str]:
        return self._renaming_id

    @property
    def sections(self) -> List[AudioSection]:
        return list(self._sections)

    def display_sections(self) -> List[AudioSection]:
        """Sections as they should be drawn, with any live resize applied."""
        if self._resize_preview is None:
            return list(self._sections)
        return [self._resize_preview if s.id == self._resize_preview.id else s for s in self._sections]

    def find(self, section_id: Optional[str]) -> Optional[AudioSection]:
        for section in self._sections:
            if section.id == section_id:
                return section
        return None

    # =========================================================================
    # Coordinates
    # =========================================================================

    def time_at(self, x: float) -> float:
        """Time under x, clamped into [0, duration]."""
        if self._width <= 0 or self._duration <= 0:
            return 0.0
        return max(0.0, min(self._duration, x / self._width * self._duration))

    def snap(self, time_seconds: float) -> float:
        if self._grid is None:
            return time_seconds
        return self._grid.snap(time_seconds)

    def hit_test(self, x: float, y: float) -> HitResult:
        """What is under (x, y); the selected section wins over others."""
        if self._duration <= 0 or self._width <= 0:
            return HitResult()

        selected = self.find(self._selected_id)
        if selected is not None:
            if rect_contains(delete_button_rect(selected, self._duration, self._width), x, y):
                return HitResult(HitKind.DELETE, selected.id)
            start_x, end_x = section_span(selected, self._duration, self._width)
            if abs(x - start_x) <= SECTION_EDGE_HANDLE_PX:
                return HitResult(HitKind.START_EDGE, selected.id)
            if abs(x - end_x) <= SECTION_EDGE_HANDLE_PX:
                return HitResult(HitKind.END_EDGE, selected.id)
            if start_x <= x < end_x:
                kind = HitKind.HEADER if y < SECTION_HEADER_HEIGHT else HitKind.BODY
                return HitResult(kind, selected.id)

        for section in reversed(self._sections):
            start_x, end_x = section_span(section, self._duration, self._width)
            if start_x <= x < end_x:
                kind = HitKind.HEADER if y < SECTION_HEADER_HEIGHT else HitKind.BODY
                return HitResult(kind, section.id)
        return HitResult()

    # =========================================================================
    # Pointer
    # =========================================================================

    def press(self, x: float, y: float) -> None:
        if self._mode == EditMode.RENAMING:
            self.cancel_rename()

        if self._mode == EditMode.CREATING:
            self.complete_creation(self.snap(self.time_at(x)))
            return

        hit = self.hit_test(x, y)
        if hit.kind == HitKind.DELETE:
            self.delete(hit.section_id)
        elif hit.kind in (HitKind.START_EDGE, HitKind.END_EDGE):
            self._begin_resize(hit.section_id, hit.kind)
        elif hit.kind in (HitKind.BODY, HitKind.HEADER):
            self._select(hit.section_id)
        else:
            self.begin_creation(self.snap(self.time_at(x)))

    def move(self, x: float) -> None:
        if self._mode != EditMode.RESIZING:
            return
        section = self.find(self._resize_id)
        if section is None:
            self._end_resize()
            return
        t = self.snap(self.time_at(x))
        self._resize_preview = self._resized(section, self._resize_edge, t)
        self.changed.emit()

    def release(self, x: float) -> None:
        if self._mode != EditMode.RESIZING:
            return
        self.move(x)
        section = self.find(self._resize_id)
        preview = self._resize_preview
        self._end_resize()
        if section is None or preview is None:
            return
        if (preview.start_seconds, preview.end_seconds) != (section.start_seconds, section.end_seconds):
            Log.debug(
                f"SectionEditor: Resized {section.id} to "
                f"{preview.start_seconds:.3f}-{preview.end_seconds:.3f}"
            )
            self.section_updated.emit(preview)

    def double_click(self, x: float, y: float) -> None:
        hit = self.hit_test(x, y)
        if hit.kind in (HitKind.HEADER, HitKind.BODY):
            self._select(hit.section_id)
            self.begin_rename(hit.section_id)

    def escape(self) -> None:
        if self._mode == EditMode.CREATING:
            self.cancel_creation()
        elif self._mode == EditMode.RESIZING:
            self._end_resize()
        elif self._mode == EditMode.RENAMING:
            self.cancel_rename()

    # =========================================================================
    # Create
    # =========================================================================

    def begin_creation(self, start_seconds: float) -> None:
        self._select(None)
        self._mode = EditMode.CREATING
        self._create_start = start_seconds
        self.changed.emit()

    def cancel_creation(self) -> None:
        if self._mode != EditMode.CREATING:
            return
        self._mode = EditMode.IDLE
        self._create_start = None
        self.changed.emit()

    def complete_creation(self, click_seconds: float) -> Optional[SectionDraft]:
        """Second click: build the draft, emit it and leave creating mode."""
        if self._mode != EditMode.CREATING or self._create_start is None:
            return None
        start = self._create_start
        end = max(click_seconds, start + MIN_SECTION_SECONDS)
        begin = min(start, click_seconds)
        if self._duration > 0:
            begin, end = clamp_created_range(begin, end, self._duration)

        ordinal = len(self._sections) + 1
        draft = SectionDraft(
            track_id=self._track_id,
            name=f"Section {ordinal}",
            start_seconds=begin,
            end_seconds=end,
            color=SectionColor.for_ordinal(ordinal),
        )
        self._mode = EditMode.IDLE
        self._create_start = None
        Log.debug(f"SectionEditor: Created '{draft.name}' {begin:.3f}-{end:.3f}")
        self.section_created.emit(draft)
        self.changed.emit()
        return draft

    # =========================================================================
    # Resize
    # =========================================================================

    def _begin_resize(self, section_id: str, edge: HitKind) -> None:
        self._mode = EditMode.RESIZING
        self._resize_id = section_id
        self._resize_edge = edge
        self._resize_preview = None

    def _end_resize(self) -> None:
        self._mode = EditMode.IDLE
        self._resize_id = None
        self._resize_edge = HitKind.NONE
        self._resize_preview = None
        self.changed.emit()

    def _resized(self, section: AudioSection, edge: HitKind, t: float) -> AudioSection:
        start, end = section.start_seconds, section.end_seconds
        if edge == HitKind.START_EDGE:
            start = max(0.0, min(t, end - MIN_SECTION_SECONDS))
        else:
            if self._duration > 0:
                t = min(t, self._duration)
            end = max(t, start + MIN_SECTION_SECONDS)
        return section.with_range(start, end)

    def resize(self, section_id: str, edge: HitKind, t: float) -> Optional[AudioSection]:
        """Resize one edge to t directly (keyboard and tests) and emit the update."""
        section = self.find(section_id)
        if section is None or edge not in (HitKind.START_EDGE, HitKind.END_EDGE):
            return None
        updated = self._resized(section, edge, t)
        self.section_updated.emit(updated)
        return updated

    # =========================================================================
    # Rename
    # =========================================================================

    def begin_rename(self, section_id: Optional[str]) -> None:
        if self.find(section_id) is None:
            return
        self._mode = EditMode.RENAMING
        self._renaming_id = section_id
        self.rename_started.emit(section_id)
        self.changed.emit()

    def commit_rename(self, text: str) -> bool:
        """
        Enter: apply the trimmed name. Blank text keeps the editor open.

        Returns:
            True when the rename was committed
        """
        section = self.find(self._renaming_id)
        if section is None:
            self.cancel_rename()
            return False
        name = text.strip()
        if not name:
            return False
        self._mode = EditMode.IDLE
        self._renaming_id = None
        if name != section.name:
            self.section_updated.emit(section.with_name(name))
        self.changed.emit()
        return True

    def cancel_rename(self) -> None:
        if self._mode != EditMode.RENAMING:
            return
        self._mode = EditMode.IDLE
        self._renaming_id = None
        self.changed.emit()

    # =========================================================================
    # Select / delete
    # =========================================================================

    def _select(self, section_id: Optional[str]) -> None:
        if section_id == self._selected_id:
            return
        self._selected_id = section_id
        self.selection_changed.emit(section_id)
        self.changed.emit()

    def select(self, section_id: Optional[str]) -> None:
        if section_id is not None and self.find(section_id) is None:
            return
        self._select(section_id)

    def delete(self, section_id: Optional[str]) -> None:
        if self.find(section_id) is None:
            return
        if self._selected_id == section_id:
            self._select(None)
        Log.debug(f"SectionEditor: Delete requested for {section_id}")
        self.section_deleted.emit(section_id)
