"""
Unit tests for SectionEditor.

Geometry: 1000 px wide over 100 s, so 10 px per second. The editor only
emits requests; tests feed results back with set_sections() the way the
owning store would.
"""
import pytest

from src.shared.domain.entities.audio_section import AudioSection, SectionColor
from ui.qt_gui.widgets.waveform.arrangement.section_editor import (
    EditMode,
    HitKind,
    SectionEditor,
    clamp_created_range,
)
from ui.qt_gui.widgets.waveform.timing.beat_grid import BeatGrid, GridSettings

BODY_Y = 50
HEADER_Y = 10


@pytest.fixture
def editor(qapp):
    editor = SectionEditor("track-1")
    editor.set_width(1000)
    editor.set_duration(100.0)
    return editor


@pytest.fixture
def recorder(editor):
    events = {"created": [], "updated": [], "deleted": [], "selection": [], "rename": []}
    editor.section_created.connect(events["created"].append)
    editor.section_updated.connect(events["updated"].append)
    editor.section_deleted.connect(events["deleted"].append)
    editor.selection_changed.connect(events["selection"].append)
    editor.rename_started.connect(events["rename"].append)
    return events


def section(section_id="s1", start=10.0, end=20.0, name="Verse"):
    return AudioSection(
        id=section_id,
        track_id="track-1",
        name=name,
        start_seconds=start,
        end_seconds=end,
        color=SectionColor.BLUE,
    )


class TestCreation:
    """Two-click creation."""

    def test_first_click_enters_creating(self, editor):
        editor.press(100, BODY_Y)
        assert editor.mode is EditMode.CREATING
        assert editor.create_start == pytest.approx(10.0)

    def test_second_click_emits_draft(self, editor, recorder):
        editor.press(100, BODY_Y)
        editor.press(300, BODY_Y)

        (draft,) = recorder["created"]
        assert draft.track_id == "track-1"
        assert draft.start_seconds == pytest.approx(10.0)
        assert draft.end_seconds == pytest.approx(30.0)
        assert draft.name == "Section 1"
        assert draft.color is SectionColor.for_ordinal(1)
        assert editor.mode is EditMode.IDLE

    def test_minimum_length_floor(self, editor, recorder):
        editor.press(100, BODY_Y)
        editor.press(101, BODY_Y)

        draft = recorder["created"][0]
        assert draft.start_seconds == pytest.approx(10.0)
        assert draft.end_seconds == pytest.approx(10.5)

    def test_second_click_before_start(self, editor, recorder):
        editor.press(300, BODY_Y)
        editor.press(200, BODY_Y)

        draft = recorder["created"][0]
        assert draft.start_seconds == pytest.approx(20.0)
        assert draft.end_seconds == pytest.approx(30.5)

    def test_range_clamped_at_track_end(self, editor, recorder):
        editor.press(998, BODY_Y)
        editor.press(999, BODY_Y)

        draft = recorder["created"][0]
        assert draft.end_seconds == pytest.approx(100.0)
        assert draft.start_seconds == pytest.approx(99.5)

    def test_names_and_colors_follow_count(self, editor, recorder):
        editor.set_sections([section("s1"), section("s2", 40, 50)])
        editor.press(700, BODY_Y)
        editor.press(800, BODY_Y)

        draft = recorder["created"][0]
        assert draft.name == "Section 3"
        assert draft.color is SectionColor.for_ordinal(3)

    def test_clicks_snap_to_grid(self, editor, recorder):
        editor.set_grid(BeatGrid.build(GridSettings(bpm=120), 100.0))
        editor.press(109, BODY_Y)
        editor.press(153, BODY_Y)

        draft = recorder["created"][0]
        assert draft.start_seconds == pytest.approx(10.0)
        assert draft.end_seconds == pytest.approx(16.0)

    def test_escape_cancels(self, editor, recorder):
        editor.press(100, BODY_Y)
        editor.escape()
        assert editor.mode is EditMode.IDLE
        assert editor.create_start is None
        assert recorder["created"] == []


class TestClampCreatedRange:
    """clamp_created_range()."""

    def test_inside_duration_unchanged(self):
        assert clamp_created_range(10.0, 20.0, 100.0) == (10.0, 20.0)

    def test_negative_start(self):
        assert clamp_created_range(-1.0, 2.0, 100.0) == (0.0, 2.0)

    def test_track_shorter_than_minimum_keeps_floor(self):
        start, end = clamp_created_range(0.1, 0.2, 0.3)
        assert end - start == pytest.approx(0.5)


class TestSelectionAndDelete:
    """Select by clicking, delete by button."""

    def test_click_selects(self, editor, recorder):
        editor.set_sections([section()])
        editor.press(150, BODY_Y)
        assert editor.selected_id == "s1"
        assert recorder["selection"] == ["s1"]
        assert editor.mode is EditMode.IDLE

    def test_hit_test_kinds(self, editor):
        editor.set_sections([section()])
        assert editor.hit_test(150, HEADER_Y).kind is HitKind.HEADER
        assert editor.hit_test(150, BODY_Y).kind is HitKind.BODY
        assert editor.hit_test(500, BODY_Y).kind is HitKind.NONE

    def test_edges_only_on_selected(self, editor):
        editor.set_sections([section()])
        assert editor.hit_test(200, BODY_Y).kind is HitKind.NONE
        editor.select("s1")
        assert editor.hit_test(100, BODY_Y).kind is HitKind.START_EDGE
        assert editor.hit_test(200, BODY_Y).kind is HitKind.END_EDGE

    def test_delete_button(self, editor, recorder):
        editor.set_sections([section()])
        editor.select("s1")
        assert editor.hit_test(190, HEADER_Y).kind is HitKind.DELETE

        editor.press(190, HEADER_Y)

        assert recorder["deleted"] == ["s1"]
        assert editor.selected_id is None

    def test_delete_unknown_is_ignored(self, editor, recorder):
        editor.delete("missing")
        assert recorder["deleted"] == []

    def test_selection_cleared_when_section_removed(self, editor):
        editor.set_sections([section()])
        editor.select("s1")
        editor.set_sections([])
        assert editor.selected_id is None

    def test_sections_sorted(self, editor):
        editor.set_sections([section("late", 50, 60), section("early", 5, 8)])
        assert [s.id for s in editor.sections] == ["early", "late"]


class TestResize:
    """Edge drag on the selected section."""

    def test_drag_end_edge(self, editor, recorder):
        editor.set_sections([section()])
        editor.select("s1")

        editor.press(200, BODY_Y)
        assert editor.mode is EditMode.RESIZING
        editor.move(240)
        assert editor.display_sections()[0].end_seconds == pytest.approx(24.0)
        editor.release(250)

        (updated,) = recorder["updated"]
        assert updated.id == "s1"
        assert updated.start_seconds == pytest.approx(10.0)
        assert updated.end_seconds == pytest.approx(25.0)
        assert editor.mode is EditMode.IDLE

    def test_start_edge_keeps_minimum(self, editor, recorder):
        editor.set_sections([section()])
        editor.select("s1")

        editor.press(100, BODY_Y)
        editor.release(198)

        updated = recorder["updated"][0]
        assert updated.start_seconds == pytest.approx(19.5)
        assert updated.end_seconds == pytest.approx(20.0)

    def test_end_edge_clamped_to_duration(self, editor):
        editor.set_sections([section()])
        updated = editor.resize("s1", HitKind.END_EDGE, 130.0)
        assert updated.end_seconds == pytest.approx(100.0)

    def test_start_edge_not_negative(self, editor):
        editor.set_sections([section()])
        updated = editor.resize("s1", HitKind.START_EDGE, -4.0)
        assert updated.start_seconds == 0.0

    def test_release_without_change_emits_nothing(self, editor, recorder):
        editor.set_sections([section()])
        editor.select("s1")
        editor.press(200, BODY_Y)
        editor.release(200)
        assert recorder["updated"] == []

    def test_escape_cancels_resize(self, editor, recorder):
        editor.set_sections([section()])
        editor.select("s1")
        editor.press(200, BODY_Y)
        editor.move(300)
        editor.escape()
        assert editor.mode is EditMode.IDLE
        assert editor.display_sections()[0].end_seconds == pytest.approx(20.0)
        assert recorder["updated"] == []


class TestRename:
    """Inline rename."""

    def test_double_click_starts_rename(self, editor, recorder):
        editor.set_sections([section()])
        editor.double_click(150, HEADER_Y)
        assert editor.mode is EditMode.RENAMING
        assert editor.renaming_id == "s1"
        assert recorder["rename"] == ["s1"]

    def test_commit_trims_name(self, editor, recorder):
        editor.set_sections([section()])
        editor.double_click(150, HEADER_Y)

        assert editor.commit_rename("  Chorus  ") is True

        (updated,) = recorder["updated"]
        assert updated.name == "Chorus"
        assert editor.mode is EditMode.IDLE

    def test_blank_name_keeps_editing(self, editor, recorder):
        editor.set_sections([section()])
        editor.double_click(150, HEADER_Y)

        assert editor.commit_rename("   ") is False
        assert editor.mode is EditMode.RENAMING
        assert recorder["updated"] == []

    def test_unchanged_name_emits_nothing(self, editor, recorder):
        editor.set_sections([section()])
        editor.double_click(150, HEADER_Y)
        assert editor.commit_rename("Verse") is True
        assert recorder["updated"] == []

    def test_escape_cancels_rename(self, editor, recorder):
        editor.set_sections([section()])
        editor.double_click(150, HEADER_Y)
        editor.escape()
        assert editor.mode is EditMode.IDLE
        assert editor.renaming_id is None
        assert recorder["updated"] == []


class TestCoordinates:
    """time_at() clamping."""

    def test_time_at_clamped(self, editor):
        assert editor.time_at(-50) == 0.0
        assert editor.time_at(500) == pytest.approx(50.0)
        assert editor.time_at(5000) == pytest.approx(100.0)

    def test_zero_width(self, qapp):
        editor = SectionEditor("t")
        assert editor.time_at(100) == 0.0
