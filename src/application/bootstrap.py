"""
Application Bootstrap

Centralized service initialization and dependency injection.
Builds the one ApplicationContext the Qt entry point hands to its widgets:
settings, notification center, URL resolver, peak extractor and the single
PlaybackEngine shared by every waveform view.
"""
import atexit
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Optional

from src.application.services.section_service import SectionService
from src.application.settings import PlaybackSettingsManager
from src.infrastructure.persistence.json_preferences_repository import PreferencesRepository
from src.infrastructure.storage.streaming_url_resolver import (
    CachingUrlResolver,
    DirectUrlResolver,
    HttpStreamingUrlResolver,
)
from src.shared.application.services.waveform_service import PeakExtractor, set_peak_extractor
from src.shared.application.status import QtNotificationCenter
from src.shared.domain.entities.track import TrackRecord
from src.utils.message import Log
from ui.qt_gui.widgets.waveform.playback import PlaybackEngine


ENDPOINT_ENV = "TRACKSHELF_SIGNED_URL_ENDPOINT"
API_KEY_ENV = "TRACKSHELF_API_KEY"


class ApplicationContext:
    """Container for all application services"""

    def __init__(
        self,
        settings: PlaybackSettingsManager,
        notifications: QtNotificationCenter,
        url_resolver,
        extractor: PeakExtractor,
        engine: PlaybackEngine,
        sections: Optional[SectionService] = None,
        tracks: Optional[Dict[str, TrackRecord]] = None,
    ):
        self.settings = settings
        self.notifications = notifications
        self.url_resolver = url_resolver
        self.extractor = extractor
        self.engine = engine
        self.sections = sections if sections is not None else SectionService()
        self._tracks: Dict[str, TrackRecord] = tracks if tracks is not None else {}
        self._cleaned_up = False

    # =========================================================================
    # Track library
    # =========================================================================

    @property
    def tracks(self) -> Dict[str, TrackRecord]:
        return dict(self._tracks)

    def add_track(self, track: TrackRecord) -> TrackRecord:
        self._tracks[track.id] = track
        return track

    def add_tracks(self, tracks: Iterable[TrackRecord]) -> None:
        for track in tracks:
            self.add_track(track)

    def get_track(self, track_id: str) -> Optional[TrackRecord]:
        return self._tracks.get(track_id)

    def cleanup(self) -> None:
        """
        Release playback resources and flush pending settings.
        Safe to call more than once.
        """
        if self._cleaned_up:
            return
        self._cleaned_up = True
        Log.info("ApplicationContext: Starting cleanup")

        self.engine.cleanup()
        try:
            self.settings.force_save()
        except (OSError, ValueError) as e:
            Log.warning(f"ApplicationContext: Error saving settings: {e}")

        Log.remove_notification_sink()
        set_peak_extractor(None)
        Log.info("ApplicationContext: Cleanup complete")


def build_url_resolver(settings: PlaybackSettingsManager):
    """
    Backend-signed URLs when an endpoint is configured (environment first,
    then settings); otherwise tracks play from their stored URL.
    """
    endpoint = (os.getenv(ENDPOINT_ENV) or "").strip() or settings.signed_url_endpoint
    if not endpoint:
        Log.info("Bootstrap: No signed URL endpoint configured, using stored track URLs")
        return DirectUrlResolver()

    Log.info(f"Bootstrap: Signed URLs from {endpoint}")
    inner = HttpStreamingUrlResolver(
        endpoint,
        api_key=(os.getenv(API_KEY_ENV) or "").strip() or None,
        timeout=settings.fetch_timeout_seconds,
        signed_url_ttl_seconds=settings.signed_url_ttl_seconds,
    )
    return CachingUrlResolver(inner, ttl_seconds=settings.url_cache_ttl_seconds)


def initialize_services(
    preferences_path: Optional[Path] = None,
    resource_factory=None,
    register_atexit: bool = True,
) -> ApplicationContext:
    """
    Build the application context.

    Args:
        preferences_path: JSON preferences file (defaults to the user config dir)
        resource_factory: MediaResource factory for the engine (tests pass fakes)
        register_atexit: Register context cleanup with atexit

    Returns:
        ApplicationContext with every service wired
    """
    Log.enable_repetitive_filter(True)

    preferences_repo = PreferencesRepository(preferences_path)
    settings = PlaybackSettingsManager(preferences_repo)
    Log.info("Bootstrap: Settings loaded")

    notifications = QtNotificationCenter()
    # Components post their own user-facing notifications; only fatal log
    # records are forwarded
    Log.set_notification_sink(notifications, level=logging.CRITICAL)
    settings.settings_save_failed.connect(
        lambda message: notifications.notify(f"Could not save settings: {message}", "error")
    )

    url_resolver = build_url_resolver(settings)

    extractor = PeakExtractor(
        signed_url_provider=url_resolver,
        timeout=settings.fetch_timeout_seconds,
    )
    set_peak_extractor(extractor)

    tracks: Dict[str, TrackRecord] = {}

    engine = PlaybackEngine(
        resource_factory=resource_factory,
        track_provider=tracks.get,
        url_resolver=url_resolver,
        notifier=notifications,
        default_volume=settings.default_volume,
    )

    context = ApplicationContext(
        settings=settings,
        notifications=notifications,
        url_resolver=url_resolver,
        extractor=extractor,
        engine=engine,
        sections=SectionService(preferences_repo),
        tracks=tracks,
    )
    Log.info("Bootstrap: Playback engine ready")

    if register_atexit:
        def cleanup_handler():
            try:
                context.cleanup()
            except RuntimeError as e:
                # Qt objects may already be gone at interpreter exit
                Log.warning(f"Bootstrap: Error in atexit cleanup handler: {e}")
        atexit.register(cleanup_handler)

    return context
