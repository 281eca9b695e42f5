"""
Unit tests for the waveform renderers.

Renderers paint onto a RecordingCanvas so every test asserts on the
recorded draw operations rather than on pixels.
"""
import numpy as np
import pytest

from src.shared.domain.entities.audio_section import AudioSection, SectionColor
from ui.qt_gui.widgets.waveform.constants import (
    DELETE_BUTTON_SIZE,
    HOVER_DASH_PATTERN,
    MIN_BAR_HEIGHT,
    MIN_SEGMENT_HEIGHT,
)
from ui.qt_gui.widgets.waveform.core.canvas import BackingStore, RecordingCanvas
from ui.qt_gui.widgets.waveform.core.style import WaveformStyle
from ui.qt_gui.widgets.waveform.render import (
    bar_heights,
    bucket_indices,
    column_segments,
    delete_button_rect,
    is_bar_played,
    render_bars,
    render_creation_preview,
    render_detailed,
    render_grid,
    render_peaks,
    render_sections,
    section_span,
    tick_pen,
)
from ui.qt_gui.widgets.waveform.render.bars import bar_geometry
from ui.qt_gui.widgets.waveform.timing.beat_grid import BeatGrid, GridSettings, SnapUnit
from ui.qt_gui.widgets.waveform.types import HoverState, SurfaceSize


def _peaks(*pairs):
    return np.array(pairs, dtype=np.float32)


# =============================================================================
# Bars
# =============================================================================

class TestBarHeights:
    def test_heights_relative_to_loudest(self):
        heights = bar_heights(_peaks((-0.5, 0.5), (-1.0, 0.2), (-0.1, 0.25)), 48)
        assert heights[0] == pytest.approx(24.0)
        assert heights[1] == pytest.approx(48.0)
        assert heights[2] == pytest.approx(12.0)

    def test_silent_input_gives_minimum_bars(self):
        heights = bar_heights(np.zeros((5, 2), dtype=np.float32), 48)
        assert heights == [float(MIN_BAR_HEIGHT)] * 5

    def test_quiet_bar_is_raised_to_minimum(self):
        heights = bar_heights(_peaks((-1.0, 1.0), (0.0, 0.01)), 48)
        assert heights[1] == float(MIN_BAR_HEIGHT)

    def test_no_peaks_no_bars(self):
        assert bar_heights(None, 48) == []
        assert bar_heights(np.zeros((0, 2)), 48) == []


class TestBarPlayed:
    @pytest.mark.parametrize("index,progress,expected", [
        (0, 0.0, True),
        (1, 0.0, False),
        (2, 0.5, True),
        (3, 0.5, False),
        (3, 1.0, True),
    ])
    def test_played_threshold(self, index, progress, expected):
        assert is_bar_played(index, 4, progress) is expected

    def test_empty_count_never_played(self):
        assert is_bar_played(0, 0, 1.0) is False

    def test_geometry_fills_inner_width(self):
        x0, bar_width, step = bar_geometry(216, 10)
        assert x0 == 8
        assert step == pytest.approx(bar_width + 2)
        assert x0 + 9 * step + bar_width == pytest.approx(216 - 8)


class TestRenderBars:
    def test_background_then_one_rect_per_bar(self):
        canvas = RecordingCanvas()
        render_bars(canvas, SurfaceSize(200, 64), _peaks(*[(-0.5, 0.5)] * 4), 0.0, False)

        rects = canvas.of_kind("fill_rect")
        assert rects[0].args["color"] == WaveformStyle.PEAK_BG_COLOR
        assert len(rects) == 5
        assert canvas.of_kind("line") == []
        assert canvas.of_kind("circle") == []

    def test_played_bars_are_opaque(self):
        canvas = RecordingCanvas()
        render_bars(canvas, SurfaceSize(200, 64), _peaks(*[(-0.5, 0.5)] * 4), 0.5, True)

        alphas = [op.args["color"].alpha() for op in canvas.of_kind("fill_rect")[1:]]
        assert alphas[:3] == [255, 255, 255]
        assert alphas[3] < 255

    def test_playhead_and_handle_at_progress(self):
        canvas = RecordingCanvas()
        render_bars(canvas, SurfaceSize(200, 64), _peaks(*[(-0.5, 0.5)] * 4), 0.25, True)

        (line,) = canvas.of_kind("line")
        (circle,) = canvas.of_kind("circle")
        assert line.args["x1"] == pytest.approx(50.0)
        assert circle.args["cx"] == pytest.approx(50.0)
        assert circle.args["cy"] == pytest.approx(32.0)

    def test_no_peaks_draws_background_only(self):
        canvas = RecordingCanvas()
        render_bars(canvas, SurfaceSize(200, 64), None, 0.5, True)
        assert len(canvas.ops) == 1


# =============================================================================
# Detailed
# =============================================================================

class TestColumnMapping:
    def test_bucket_indices_stretch_buckets_across_columns(self):
        assert list(bucket_indices(10, 5)) == [0, 0, 1, 1, 2, 2, 3, 3, 4, 4]

    def test_bucket_indices_compress_when_more_buckets_than_columns(self):
        assert list(bucket_indices(4, 8)) == [0, 2, 4, 6]

    def test_bucket_indices_empty_for_zero_width(self):
        assert bucket_indices(0, 5).size == 0

    def test_full_scale_column_spans_height(self):
        tops, heights = column_segments(_peaks((-1.0, 1.0)), 1, 100)
        assert tops[0] == pytest.approx(0.0)
        assert heights[0] == pytest.approx(100.0)

    def test_silent_columns_keep_hairline(self):
        tops, heights = column_segments(np.zeros((4, 2), dtype=np.float32), 4, 100)
        assert list(tops) == [50.0] * 4
        assert list(heights) == [MIN_SEGMENT_HEIGHT] * 4


class TestRenderDetailed:
    def _render(self, **kwargs):
        canvas = RecordingCanvas()
        args = dict(
            peaks=np.full((5, 2), [-0.5, 0.5], dtype=np.float32),
            duration_seconds=10.0,
            is_active=False,
            position_seconds=0.0,
        )
        args.update(kwargs)
        render_detailed(canvas, SurfaceSize(10, 100), **args)
        return canvas

    def test_inactive_draws_columns_without_playhead(self):
        canvas = self._render()
        rects = canvas.of_kind("fill_rect")
        # background, center line, ten columns
        assert len(rects) == 12
        assert rects[0].args["color"] == WaveformStyle.BG_COLOR
        assert canvas.of_kind("line") == []

    def test_played_overlay_is_clipped_to_playhead(self):
        canvas = self._render(is_active=True, position_seconds=5.0)

        clipped = [op for op in canvas.of_kind("fill_rect") if op.clip is not None]
        assert len(clipped) == 5
        assert all(op.clip == (0, 0, 5.0, 100) for op in clipped)
        (playhead,) = canvas.of_kind("line")
        assert playhead.args["x1"] == pytest.approx(5.0)
        assert playhead.args["color"] == WaveformStyle.PLAYHEAD_COLOR

    def test_position_zero_has_no_played_overlay(self):
        canvas = self._render(is_active=True, position_seconds=0.0)
        assert all(op.clip is None for op in canvas.ops)
        assert len(canvas.of_kind("line")) == 1

    def test_hover_draws_dashed_line(self):
        canvas = self._render(hover=HoverState(time_seconds=2.0))
        (hover,) = canvas.of_kind("line")
        assert hover.args["x1"] == pytest.approx(2.0)
        assert hover.args["dash"] == HOVER_DASH_PATTERN

    def test_hover_hidden_while_dragging(self):
        canvas = self._render(hover=HoverState(time_seconds=2.0, dragging=True))
        assert canvas.of_kind("line") == []

    def test_no_peaks_draws_background_and_center_line(self):
        canvas = self._render(peaks=None)
        assert len(canvas.ops) == 2


# =============================================================================
# Peaks
# =============================================================================

class TestRenderPeaks:
    def test_mirrored_rects_per_bucket(self):
        canvas = RecordingCanvas()
        render_peaks(canvas, SurfaceSize(40, 100), _peaks(*[(-0.5, 1.0)] * 4), 10.0, False, 0.0)

        rects = canvas.of_kind("fill_rect")
        assert len(rects) == 1 + 8
        top, bottom = rects[1], rects[2]
        assert top.args["h"] == pytest.approx(45.0)
        assert top.args["y"] == pytest.approx(5.0)
        assert bottom.args["y"] == pytest.approx(50.0)
        assert bottom.args["h"] == pytest.approx(22.5)
        assert top.args["w"] == pytest.approx(9.0)

    def test_progress_colours_and_playhead(self):
        canvas = RecordingCanvas()
        render_peaks(canvas, SurfaceSize(40, 100), _peaks(*[(-0.5, 0.5)] * 4), 10.0, True, 5.0)

        alphas = [op.args["color"].alpha() for op in canvas.of_kind("fill_rect")[1::2]]
        assert alphas[:3] == [255, 255, 255]
        assert alphas[3] < 255
        (playhead,) = canvas.of_kind("line")
        assert playhead.args["x1"] == pytest.approx(20.0)

    def test_hover_line(self):
        canvas = RecordingCanvas()
        render_peaks(canvas, SurfaceSize(40, 100), _peaks((-0.5, 0.5)), 10.0, False, 0.0, hover_time=5.0)
        (hover,) = canvas.of_kind("line")
        assert hover.args["x1"] == pytest.approx(20.0)
        assert hover.args["dash"] is not None


# =============================================================================
# Grid
# =============================================================================

class TestRenderGrid:
    def test_tick_lines_and_bar_labels(self):
        grid = BeatGrid.build(GridSettings(bpm=120.0, snap_unit=SnapUnit.BAR), 20.0)
        canvas = RecordingCanvas()
        render_grid(canvas, SurfaceSize(200, 100), grid)

        lines = canvas.of_kind("line")
        assert len(lines) == 10
        assert [op.args["x1"] for op in lines[:3]] == pytest.approx([0.0, 20.0, 40.0])
        phrase_lines = [op for op in lines if op.args["width"] == WaveformStyle.GRID_PHRASE_WIDTH]
        assert len(phrase_lines) == 3
        assert canvas.texts() == ["4", "8"]

    def test_hidden_grid_draws_nothing(self):
        settings = GridSettings(bpm=120.0, visible=False)
        canvas = RecordingCanvas()
        render_grid(canvas, SurfaceSize(200, 100), BeatGrid.build(settings, 20.0))
        assert canvas.ops == []

    def test_tick_pen_weights(self):
        assert tick_pen(SnapUnit.PHRASE)[1] > tick_pen(SnapUnit.BAR)[1] > tick_pen(SnapUnit.BEAT)[1]


# =============================================================================
# Sections
# =============================================================================

@pytest.fixture
def section():
    return AudioSection("s1", "track-1", "Intro", 10.0, 20.0, SectionColor.GREEN)


class TestSectionGeometry:
    def test_span_maps_seconds_to_pixels(self, section):
        assert section_span(section, 100.0, 1000) == (100.0, 200.0)

    def test_span_empty_without_duration(self, section):
        assert section_span(section, 0.0, 1000) == (0.0, 0.0)

    def test_delete_button_in_header_corner(self, section):
        x, y, w, h = delete_button_rect(section, 100.0, 1000)
        assert (x, y, w, h) == (183.0, 3.0, DELETE_BUTTON_SIZE, DELETE_BUTTON_SIZE)


class TestRenderSections:
    def test_unselected_section_shows_name_only(self, section):
        canvas = RecordingCanvas()
        render_sections(canvas, SurfaceSize(1000, 200), [section], 100.0)
        assert canvas.texts() == ["Intro"]

    def test_selected_section_shows_delete_and_range(self, section):
        canvas = RecordingCanvas()
        render_sections(canvas, SurfaceSize(1000, 200), [section], 100.0, selected_id="s1")
        assert canvas.texts() == ["Intro", "×", "0:10 - 0:20"]

    def test_editing_section_hides_name(self, section):
        canvas = RecordingCanvas()
        render_sections(canvas, SurfaceSize(1000, 200), [section], 100.0,
                        selected_id="s1", editing_id="s1")
        assert "Intro" not in canvas.texts()

    def test_selected_section_drawn_last(self, section):
        other = AudioSection("s2", "track-1", "Drop", 30.0, 40.0)
        canvas = RecordingCanvas()
        render_sections(canvas, SurfaceSize(1000, 200), [section, other], 100.0, selected_id="s1")
        assert canvas.texts()[0] == "Drop"

    def test_nothing_without_duration(self, section):
        canvas = RecordingCanvas()
        render_sections(canvas, SurfaceSize(1000, 200), [section], 0.0)
        assert canvas.ops == []

    def test_creation_preview_marker(self):
        canvas = RecordingCanvas()
        render_creation_preview(canvas, SurfaceSize(1000, 200), 25.0, 100.0)
        (marker,) = canvas.of_kind("line")
        assert marker.args["x1"] == pytest.approx(250.0)

        canvas = RecordingCanvas()
        render_creation_preview(canvas, SurfaceSize(1000, 200), None, 100.0)
        assert canvas.ops == []


# =============================================================================
# Backing store
# =============================================================================

class TestBackingStore:
    def test_reallocates_only_on_mismatch(self, qapp):
        store = BackingStore()
        assert store.ensure(SurfaceSize(100, 50)) is True
        assert store.ensure(SurfaceSize(100, 50)) is False
        assert store.resize_count == 1

    def test_device_pixel_ratio_sizes_backing_image(self, qapp):
        store = BackingStore()
        store.ensure(SurfaceSize(100, 50))
        assert store.ensure(SurfaceSize(100, 50, 2.0)) is True
        assert store.image.width() == 200
        assert store.image.height() == 100
        assert store.resize_count == 2

    def test_release_forces_reallocation(self, qapp):
        store = BackingStore()
        store.ensure(SurfaceSize(100, 50))
        store.release()
        assert store.image is None
        assert store.ensure(SurfaceSize(100, 50)) is True
