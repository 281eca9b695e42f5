"""
Playback Settings Manager

Settings for the playback engine, peak extraction and waveform views.

Usage:
    playback_settings = PlaybackSettingsManager(preferences_repo)

    volume = playback_settings.default_volume
    playback_settings.default_volume = 0.5  # auto-saves
"""
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from src.utils.message import Log

from .base_settings import BaseSettings, BaseSettingsManager, validated_field

if TYPE_CHECKING:
    from src.infrastructure.persistence.json_preferences_repository import PreferencesRepository


@dataclass
class PlaybackSettings(BaseSettings):
    """
    Playback and waveform settings schema.

    All fields have defaults so older preference files keep loading.
    """

    # Engine
    default_volume: float = validated_field(0.8, min_value=0.0, max_value=1.0)

    # Peak extraction
    peak_bucket_count: int = validated_field(200, min_value=1)
    bar_count: int = validated_field(50, min_value=1)
    fallback_surface_width: int = validated_field(800, min_value=1)
    fetch_timeout_seconds: float = validated_field(30.0, greater_than=0)

    # Storage
    signed_url_ttl_seconds: int = validated_field(3600, min_value=1)
    url_cache_ttl_seconds: int = validated_field(3000, min_value=0)
    signed_url_endpoint: str = validated_field(
        "",
        pattern=r"^(https?://.*)?$",
        pattern_message="Endpoint must be an http(s) URL",
    )

    # Views
    waveform_height: int = validated_field(120, min_value=32)
    arrangement_height: int = validated_field(200, min_value=64)


class PlaybackSettingsManager(BaseSettingsManager):
    """Manager for playback settings."""

    NAMESPACE = "playback"
    SETTINGS_CLASS = PlaybackSettings

    def __init__(self, preferences_repo: Optional['PreferencesRepository'] = None, parent=None):
        super().__init__(preferences_repo, parent)

    @property
    def default_volume(self) -> float:
        return self._settings.default_volume

    @default_volume.setter
    def default_volume(self, value: float):
        value = min(1.0, max(0.0, float(value)))
        if value != self._settings.default_volume:
            self._settings.default_volume = value
            self._save_setting('default_volume')

    @property
    def peak_bucket_count(self) -> int:
        return self._settings.peak_bucket_count

    @property
    def bar_count(self) -> int:
        return self._settings.bar_count

    @property
    def fallback_surface_width(self) -> int:
        return self._settings.fallback_surface_width

    @property
    def fetch_timeout_seconds(self) -> float:
        return self._settings.fetch_timeout_seconds

    @property
    def signed_url_ttl_seconds(self) -> int:
        return self._settings.signed_url_ttl_seconds

    @property
    def url_cache_ttl_seconds(self) -> int:
        return self._settings.url_cache_ttl_seconds

    @property
    def signed_url_endpoint(self) -> str:
        return self._settings.signed_url_endpoint

    @signed_url_endpoint.setter
    def signed_url_endpoint(self, value: str):
        result = self.set_validated("signed_url_endpoint", value)
        if not result.valid:
            Log.warning(f"PlaybackSettingsManager: {'; '.join(result.errors)}")

    @property
    def waveform_height(self) -> int:
        return self._settings.waveform_height

    @property
    def arrangement_height(self) -> int:
        return self._settings.arrangement_height
