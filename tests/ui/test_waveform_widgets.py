"""
Widget tests for the waveform views and the arrangement view.

Views run offscreen against a fake extractor; extraction threads are joined
with wait_for_extraction() and their queued results delivered with
processEvents().
"""
import numpy as np
import pytest

from src.shared.application.services.waveform_service import PeakData
from src.shared.domain.entities.audio_section import AudioSection
from src.shared.domain.entities.track import TrackRecord
from src.shared.domain.errors import ResourceFetchError
from ui.qt_gui.widgets.waveform.arrangement import ArrangementView
from ui.qt_gui.widgets.waveform.arrangement.arrangement_view import NO_BPM_TITLE
from ui.qt_gui.widgets.waveform.constants import FALLBACK_SURFACE_WIDTH
from ui.qt_gui.widgets.waveform.playback import PlaybackEngine
from ui.qt_gui.widgets.waveform.timing.beat_grid import GridSettings, SnapUnit
from ui.qt_gui.widgets.waveform.views.base import LOADING_TEXT
from ui.qt_gui.widgets.waveform.views import (
    ERROR_TEXT,
    DetailedWaveformView,
    PeakWaveformView,
    WaveformBarsView,
)

TRACK = TrackRecord("t1", name="Song", url="file:///music/song.wav", bpm=120.0, duration=20.0)


class FakeExtractor:
    """Async extractor returning flat peaks, or raising when told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.requests = []

    async def extract(self, resource_id, url, bucket_count, track=None):
        self.requests.append((resource_id, bucket_count))
        if self.fail:
            raise ResourceFetchError("HTTP 404", resource_id, status_code=404)
        peaks = np.tile(np.array([[-0.5, 0.5]], dtype=np.float32), (bucket_count, 1))
        return PeakData(peaks=peaks, duration_seconds=20.0)


class FakeResource:
    def __init__(self):
        self.position = 0.0
        self.on_metadata = self.on_time = self.on_ended = self.on_error = None

    def bind(self, on_metadata, on_time, on_ended, on_error):
        self.on_metadata = on_metadata
        self.on_time = on_time
        self.on_ended = on_ended
        self.on_error = on_error

    def load(self, url):
        pass

    def play(self):
        pass

    def pause(self):
        pass

    def set_position(self, seconds):
        self.position = seconds

    def set_volume(self, volume):
        pass

    def release(self):
        pass


@pytest.fixture
def resources():
    return []


@pytest.fixture
def engine(qapp, resources):
    def factory():
        resource = FakeResource()
        resources.append(resource)
        return resource

    engine = PlaybackEngine(resource_factory=factory)
    yield engine
    engine.cleanup()


def settle(qapp, view):
    assert view.wait_for_extraction()
    qapp.processEvents()


def start_playback(engine, resources, position):
    engine.play(TRACK.id, TRACK.url)
    resources[-1].on_metadata(20.0)
    resources[-1].on_time(position)


@pytest.fixture
def make_view(qapp):
    views = []

    def make(cls, extractor, **kwargs):
        view = cls(**kwargs, extractor=extractor)
        view.resize(400, view.height())
        views.append(view)
        return view

    yield make
    for view in views:
        view.shutdown()


class TestPeakLoading:
    def test_bars_view_loads_bar_count_buckets(self, qapp, engine, make_view):
        extractor = FakeExtractor()
        view = make_view(WaveformBarsView, extractor, engine=engine, bar_count=24)
        view.set_track(TRACK)
        settle(qapp, view)

        assert extractor.requests == [("t1", 24)]
        assert view.loader.data.peaks.shape == (24, 2)
        assert view.status_text() is None

    def test_detailed_view_uses_fallback_width_before_layout(self, qapp, engine, make_view):
        extractor = FakeExtractor()
        view = make_view(DetailedWaveformView, extractor, engine=engine)
        view.set_track(TRACK)
        settle(qapp, view)

        assert extractor.requests == [("t1", FALLBACK_SURFACE_WIDTH)]

    def test_same_key_is_not_requested_twice(self, qapp, engine, make_view):
        extractor = FakeExtractor()
        view = make_view(PeakWaveformView, extractor, engine=engine, bucket_count=50)
        view.set_track(TRACK)
        settle(qapp, view)
        view.request_peaks()
        settle(qapp, view)

        assert len(extractor.requests) == 1

    def test_loading_text_while_in_flight(self, qapp, engine, make_view):
        view = make_view(WaveformBarsView, FakeExtractor(), engine=engine)
        view.set_track(TRACK)
        assert view.loader.loading
        assert view.status_text() == LOADING_TEXT
        settle(qapp, view)
        assert not view.loader.loading


class TestErrors:
    def test_bars_view_shows_fixed_error_text(self, qapp, engine, make_view):
        view = make_view(WaveformBarsView, FakeExtractor(fail=True), engine=engine)
        view.set_track(TRACK)
        settle(qapp, view)

        assert view.status_text() == ERROR_TEXT

    def test_detailed_view_shows_error_message(self, qapp, engine, make_view):
        view = make_view(DetailedWaveformView, FakeExtractor(fail=True), engine=engine)
        view.set_track(TRACK)
        settle(qapp, view)

        assert "HTTP 404" in view.status_text()

    def test_peak_view_falls_back_to_placeholder(self, qapp, engine, make_view):
        view = make_view(PeakWaveformView, FakeExtractor(fail=True), engine=engine, bucket_count=40)
        view.set_track(TRACK)
        settle(qapp, view)

        data = view.loader.data
        assert data.is_placeholder
        assert data.peaks.shape == (40, 2)
        assert view.status_text() is None

    def test_failed_view_still_paints(self, qapp, engine, make_view):
        view = make_view(PeakWaveformView, FakeExtractor(fail=True), engine=engine)
        view.set_track(TRACK)
        settle(qapp, view)
        view.grab()


class TestPlaybackBinding:
    def test_progress_follows_active_track(self, qapp, engine, resources, make_view):
        view = make_view(WaveformBarsView, FakeExtractor(), engine=engine)
        view.set_track(TRACK)
        settle(qapp, view)
        assert view.progress == 0.0

        start_playback(engine, resources, 5.0)

        assert view.is_active
        assert view.progress == pytest.approx(0.25)

    def test_other_track_is_not_active(self, qapp, engine, resources, make_view):
        view = make_view(WaveformBarsView, FakeExtractor(), engine=engine)
        view.set_track(TrackRecord("t2", url="file:///music/other.wav"))
        settle(qapp, view)
        start_playback(engine, resources, 5.0)

        assert not view.is_active
        assert view.progress == 0.0
        assert view.position == 0.0

    def test_seek_moves_engine_for_active_track(self, qapp, engine, resources, make_view):
        view = make_view(PeakWaveformView, FakeExtractor(), engine=engine)
        view.set_track(TRACK)
        settle(qapp, view)
        start_playback(engine, resources, 1.0)
        requested = []
        view.seek_requested.connect(requested.append)

        view.seek_to(8.0)

        assert requested == [8.0]
        assert resources[-1].position == pytest.approx(8.0)

    def test_seek_on_inactive_track_only_emits(self, qapp, engine, resources, make_view):
        view = make_view(PeakWaveformView, FakeExtractor(), engine=engine)
        view.set_track(TRACK)
        settle(qapp, view)
        requested = []
        view.seek_requested.connect(requested.append)

        view.seek_to(8.0)

        assert requested == [8.0]
        assert resources == []

    def test_time_at_maps_width_to_duration(self, qapp, engine, make_view):
        view = make_view(PeakWaveformView, FakeExtractor(), engine=engine)
        view.set_track(TRACK)
        settle(qapp, view)

        assert view.time_at(view.width() / 2) == pytest.approx(10.0)
        assert view.time_at(-50) == 0.0


class TestArrangementView:
    @pytest.fixture
    def arrangement(self, qapp, engine):
        view = ArrangementView(engine, FakeExtractor())
        view.resize(800, 300)
        yield view
        view.shutdown()

    def test_placeholder_without_bpm(self, arrangement):
        arrangement.set_track(TrackRecord("t9", url="file:///music/nobpm.wav", duration=30.0))

        assert arrangement.showing_placeholder
        assert arrangement.grid is None
        assert arrangement._placeholder_labels[0].text() == NO_BPM_TITLE

    def test_grid_built_from_track_tempo(self, qapp, arrangement):
        arrangement.set_track(TRACK)
        settle(qapp, arrangement.canvas)

        assert not arrangement.showing_placeholder
        grid = arrangement.grid
        assert grid.settings.bpm == 120.0
        assert grid.duration_seconds == pytest.approx(20.0)
        assert grid.ticks[1].time == pytest.approx(2.0)

    def test_grid_settings_change_rebuilds(self, qapp, arrangement):
        arrangement.set_track(TRACK)
        settle(qapp, arrangement.canvas)

        arrangement.set_grid_settings(GridSettings(bpm=120.0, snap_unit=SnapUnit.BEAT))

        assert arrangement.grid.ticks[1].time == pytest.approx(0.5)

    def test_editor_requests_are_forwarded(self, qapp, arrangement):
        arrangement.set_track(TRACK)
        settle(qapp, arrangement.canvas)
        deleted = []
        arrangement.section_delete_requested.connect(deleted.append)
        arrangement.set_sections([AudioSection("s1", "t1", "Intro", 2.0, 6.0)])

        arrangement.editor.select("s1")
        arrangement.editor.delete(arrangement.editor.selected_id)

        assert deleted == ["s1"]

    def test_switching_to_no_bpm_track_hides_editor(self, qapp, arrangement):
        arrangement.set_track(TRACK)
        settle(qapp, arrangement.canvas)
        arrangement.set_track(TrackRecord("t9"))

        assert arrangement.showing_placeholder
        assert arrangement.grid is None
