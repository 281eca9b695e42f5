"""
Unit tests for SectionService.
"""
import json

import pytest

from src.application.services import SectionService
from src.infrastructure.persistence.json_preferences_repository import PreferencesRepository
from src.shared.domain.entities.audio_section import AudioSection, SectionColor, SectionDraft


def draft(start, end, name="Section 1", track_id="track-1", color=SectionColor.BLUE):
    return SectionDraft(track_id, name, start, end, color)


@pytest.fixture
def prefs_path(tmp_path):
    return tmp_path / "preferences.json"


@pytest.fixture
def service(prefs_path):
    return SectionService(PreferencesRepository(prefs_path))


class TestCreate:
    def test_assigns_id_and_keeps_draft_fields(self, service):
        section = service.create_section(draft(10.0, 20.0, "Intro", color=SectionColor.GREEN))
        assert section.id
        assert (section.track_id, section.name, section.start_seconds, section.end_seconds) == (
            "track-1", "Intro", 10.0, 20.0,
        )
        assert section.color is SectionColor.GREEN

    def test_list_sorted_by_start(self, service):
        service.create_section(draft(30.0, 40.0, "Drop"))
        service.create_section(draft(5.0, 10.0, "Intro"))
        assert [s.name for s in service.list_sections("track-1")] == ["Intro", "Drop"]

    def test_tracks_are_independent(self, service):
        service.create_section(draft(0.0, 5.0))
        assert service.list_sections("track-2") == []

    def test_list_returns_copy(self, service):
        service.create_section(draft(0.0, 5.0))
        service.list_sections("track-1").clear()
        assert len(service.list_sections("track-1")) == 1


class TestUpdateDelete:
    def test_update_replaces_by_id(self, service):
        section = service.create_section(draft(10.0, 20.0, "Verse"))
        assert service.update_section(section.with_name("Chorus").with_range(12.0, 24.0)) is True

        stored = service.get_section("track-1", section.id)
        assert stored.name == "Chorus"
        assert (stored.start_seconds, stored.end_seconds) == (12.0, 24.0)

    def test_update_unknown_section(self, service):
        stranger = AudioSection("nope", "track-1", "Ghost", 1.0, 2.0)
        assert service.update_section(stranger) is False
        assert service.list_sections("track-1") == []

    def test_delete(self, service):
        keep = service.create_section(draft(0.0, 5.0, "Keep"))
        gone = service.create_section(draft(5.0, 10.0, "Gone"))
        assert service.delete_section("track-1", gone.id) is True
        assert service.delete_section("track-1", gone.id) is False
        assert service.list_sections("track-1") == [keep]


class TestPersistence:
    def test_sections_written_under_track_key(self, service, prefs_path):
        service.create_section(draft(1.5, 3.0, "Intro"))
        stored = json.loads(prefs_path.read_text(encoding="utf-8"))
        (entry,) = stored["sections.track-1"]
        assert entry["start_time"] == 1.5
        assert entry["end_time"] == 3.0
        assert entry["color"] == SectionColor.BLUE.value

    def test_new_service_reloads(self, service, prefs_path):
        created = service.create_section(draft(1.5, 3.0, "Intro"))
        reloaded = SectionService(PreferencesRepository(prefs_path))
        assert reloaded.list_sections("track-1") == [created]

    def test_invalid_entries_skipped(self, prefs_path):
        prefs_path.write_text(json.dumps({"sections.track-1": [
            {"id": "ok", "track_id": "track-1", "name": "Intro", "start_time": 0, "end_time": 4},
            {"id": "backwards", "track_id": "track-1", "name": "Bad", "start_time": 9, "end_time": 2},
            {"name": "no id"},
        ]}), encoding="utf-8")
        sections = SectionService(PreferencesRepository(prefs_path)).list_sections("track-1")
        assert [s.id for s in sections] == ["ok"]

    def test_in_memory_without_repository(self):
        service = SectionService()
        service.create_section(draft(0.0, 1.0))
        assert len(service.list_sections("track-1")) == 1
