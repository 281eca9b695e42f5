"""
Tests for settings validation and the playback settings manager.

Covers FieldValidator rules, PlaybackSettings/GridSettings validation and
PlaybackSettingsManager persistence through a JSON PreferencesRepository.
"""
import json
from dataclasses import dataclass

import pytest

from src.application.settings import PlaybackSettings, PlaybackSettingsManager
from src.application.settings.base_settings import (
    BaseSettings,
    FieldValidator,
    ValidationResult,
    validated_field,
)
from src.infrastructure.persistence.json_preferences_repository import PreferencesRepository
from ui.qt_gui.widgets.waveform.timing.beat_grid import GridSettings, SnapUnit


class TestValidationResult:
    """Tests for ValidationResult class."""

    def test_errors_make_result_invalid(self):
        """Errors flip validity; warnings do not."""
        result = ValidationResult()
        result.add_warning("slow endpoint")
        assert result.valid is True
        result.add_error("bpm: must be positive")
        assert result.valid is False
        assert bool(result) is False

    def test_merge_keeps_invalid(self):
        """Merging an invalid result into a valid one makes it invalid."""
        target = ValidationResult()
        other = ValidationResult()
        other.add_error("bar_count: below minimum")
        target.merge(other)
        assert target.valid is False
        assert target.errors == ["bar_count: below minimum"]


class TestFieldValidator:
    """Tests for FieldValidator rules used by the settings schemas."""

    def test_range(self):
        validator = FieldValidator(min_value=0.0, max_value=1.0)
        assert validator.validate(0.5, "default_volume").valid
        assert "below minimum" in validator.validate(-0.1, "default_volume").errors[0]
        assert "above maximum" in validator.validate(1.5, "default_volume").errors[0]

    def test_greater_than_is_exclusive(self):
        validator = FieldValidator(greater_than=0)
        assert validator.validate(0.001, "bpm").valid
        result = validator.validate(0, "bpm")
        assert result.valid is False
        assert "must be greater than" in result.errors[0]

    def test_enum_choices_compare_by_value(self):
        """Enum values and their stored strings both satisfy enum choices."""
        validator = FieldValidator(choices=list(SnapUnit))
        assert validator.validate(SnapUnit.BEAT, "snap_unit").valid
        assert validator.validate("phrase", "snap_unit").valid
        assert "not in allowed choices" in validator.validate("half-bar", "snap_unit").errors[0]

    def test_pattern_message(self):
        validator = FieldValidator(pattern=r"^(https?://.*)?$", pattern_message="Endpoint must be an http(s) URL")
        assert validator.validate("", "signed_url_endpoint").valid
        assert validator.validate("https://api.example.com/sign", "signed_url_endpoint").valid
        result = validator.validate("ftp://example.com", "signed_url_endpoint")
        assert "Endpoint must be an http(s) URL" in result.errors[0]

    def test_allow_none_false(self):
        validator = FieldValidator(allow_none=False)
        assert "Cannot be None" in validator.validate(None, "bpm").errors[0]

    def test_custom_rule(self):
        """Custom validators return an error message or None."""
        def even_only(value, field_name):
            return None if value % 2 == 0 else f"{field_name}: Must be even"

        validator = FieldValidator(custom=even_only)
        assert validator.validate(4, "bar_count").valid
        assert "Must be even" in validator.validate(3, "bar_count").errors[0]


class TestBaseSettings:
    """Tests for BaseSettings helpers on a small schema."""

    @dataclass
    class ViewSettings(BaseSettings):
        height: int = validated_field(120, min_value=32)
        title: str = "Waveform"

    def test_validators_only_for_validated_fields(self):
        validators = self.ViewSettings.get_field_validators()
        assert "height" in validators
        assert "title" not in validators

    def test_from_dict_ignores_unknown_and_fills_missing(self):
        settings = self.ViewSettings.from_dict({"height": 64, "legacy_option": True})
        assert settings.height == 64
        assert settings.title == "Waveform"

    def test_from_dict_does_not_validate(self):
        """Loading keeps the raw value; validate() reports it."""
        settings = self.ViewSettings.from_dict({"height": 8})
        assert settings.height == 8
        assert settings.is_valid() is False


class TestPlaybackSettings:
    """Tests for the PlaybackSettings schema."""

    def test_defaults_are_valid(self):
        assert PlaybackSettings().validate().valid

    @pytest.mark.parametrize("field_name,value", [
        ("default_volume", 1.2),
        ("peak_bucket_count", 0),
        ("bar_count", 0),
        ("fetch_timeout_seconds", 0),
        ("signed_url_endpoint", "not a url"),
        ("waveform_height", 10),
    ])
    def test_invalid_values(self, field_name, value):
        settings = PlaybackSettings(**{field_name: value})
        result = settings.validate()
        assert result.valid is False
        assert field_name in result.errors[0]


class TestGridSettings:
    """Tests for GridSettings validation."""

    def test_zero_bpm_invalid(self):
        assert GridSettings(bpm=0).is_valid() is False

    def test_zero_beats_per_bar_invalid(self):
        assert GridSettings(beats_per_bar=0).is_valid() is False

    def test_stored_snap_unit_string_restored(self):
        settings = GridSettings.from_dict({"bpm": 90.0, "snap_unit": "beat"})
        assert settings.snap_unit is SnapUnit.BEAT
        assert settings.to_dict()["snap_unit"] == "beat"


class TestPlaybackSettingsManager:
    """Tests for PlaybackSettingsManager persistence."""

    @pytest.fixture
    def prefs_path(self, tmp_path):
        return tmp_path / "preferences.json"

    def test_in_memory_without_repository(self, qapp):
        manager = PlaybackSettingsManager()
        assert manager.is_loaded()
        assert manager.default_volume == pytest.approx(0.8)

    def test_volume_setter_clamps_and_saves(self, qapp, prefs_path):
        manager = PlaybackSettingsManager(PreferencesRepository(prefs_path))
        changed = []
        manager.settings_changed.connect(changed.append)

        manager.default_volume = 1.7
        assert manager.default_volume == 1.0
        assert changed == ["default_volume"]
        assert manager.has_pending_save()

        manager.force_save()
        stored = json.loads(prefs_path.read_text(encoding="utf-8"))
        assert stored["playback.settings"]["default_volume"] == 1.0
        assert not manager.has_pending_save()

    def test_reload_reads_saved_values(self, qapp, prefs_path):
        first = PlaybackSettingsManager(PreferencesRepository(prefs_path))
        first.default_volume = 0.25
        first.force_save()

        second = PlaybackSettingsManager(PreferencesRepository(prefs_path))
        assert second.default_volume == pytest.approx(0.25)

    def test_invalid_stored_settings_fall_back_to_defaults(self, qapp, prefs_path):
        prefs_path.write_text(json.dumps({"playback.settings": {"bar_count": -5}}), encoding="utf-8")
        manager = PlaybackSettingsManager(PreferencesRepository(prefs_path))
        assert manager.bar_count == 50

    def test_set_validated_rejects_and_keeps_old_value(self, qapp):
        manager = PlaybackSettingsManager()
        failures = []
        manager.validation_failed.connect(failures.append)

        result = manager.set_validated("peak_bucket_count", 0)
        assert result.valid is False
        assert manager.peak_bucket_count == 200
        assert len(failures) == 1

    def test_set_validated_unknown_key(self, qapp):
        result = PlaybackSettingsManager().set_validated("theme", "dark")
        assert result.errors == ["Unknown setting: theme"]

    def test_endpoint_setter_rejects_non_http_url(self, qapp):
        manager = PlaybackSettingsManager()
        manager.signed_url_endpoint = "ftp://example.com/sign"
        assert manager.signed_url_endpoint == ""

        manager.signed_url_endpoint = "https://api.example.com/sign"
        assert manager.signed_url_endpoint == "https://api.example.com/sign"

    def test_save_failure_emits_signal(self, qapp, prefs_path):
        class FailingRepository(PreferencesRepository):
            def set(self, key, value):
                raise OSError("disk full")

        manager = PlaybackSettingsManager(FailingRepository(prefs_path))
        failures = []
        manager.settings_save_failed.connect(failures.append)

        manager.default_volume = 0.1
        manager.force_save()

        assert failures == ["disk full"]
        assert manager.has_pending_save()
