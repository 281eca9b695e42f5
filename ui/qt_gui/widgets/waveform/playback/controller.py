"""
Playback Engine

Single source of truth for "what is playing and where".

The engine owns exactly one media resource at a time. Switching tracks tears
the old resource down and builds a new one; playback starts once the new
resource reports its duration. Every resource callback is bound to the
generation the resource was created under, so callbacks from a superseded
resource are dropped and a newer play() always wins over a pending load.
"""

from typing import Callable, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from src.shared.domain.entities.track import TrackRecord
from src.shared.domain.errors import PlaybackStartError

from src.utils.message import Log
from ..constants import DEFAULT_VOLUME
from ..interfaces import MediaResource, MediaResourceFactory, TrackProvider
from ..types import PlaybackState, PlaybackStatus


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class PlaybackEngine(QObject):
    """
    Coordinates the single media resource with every mounted view.

    Views never touch the resource; they call the transport methods here and
    repaint from the published PlaybackState.

    Signals:
        state_changed(PlaybackState): Any field of the state changed
        position_changed(seconds): Position moved (time update or seek)
        track_ended(resource_id): Resource reached its natural end
        error_occurred(message): Load or playback failure (already logged)
    """

    state_changed = pyqtSignal(object)
    position_changed = pyqtSignal(float)
    track_ended = pyqtSignal(str)
    error_occurred = pyqtSignal(str)

    def __init__(
        self,
        resource_factory: Optional[MediaResourceFactory] = None,
        track_provider: Optional[TrackProvider] = None,
        url_resolver=None,
        notifier=None,
        default_volume: float = DEFAULT_VOLUME,
        on_track_end: Optional[Callable[[str], None]] = None,
        parent=None,
    ):
        """
        Args:
            resource_factory: Creates a fresh MediaResource (defaults to QtMediaResource)
            track_provider: Looks up a TrackRecord by id
            url_resolver: Object with async resolve_streaming_url(track)
            notifier: Notification sink with notify(message, severity)
            default_volume: Initial volume, clamped into [0, 1]
            on_track_end: Called with the resource id after a natural end
            parent: Parent QObject
        """
        super().__init__(parent)

        if resource_factory is None:
            from .media_resource import QtMediaResource
            resource_factory = QtMediaResource

        self._resource_factory = resource_factory
        self._track_provider = track_provider
        self._url_resolver = url_resolver
        self._notifier = notifier
        self._on_track_end = on_track_end

        self._resource: Optional[MediaResource] = None
        self._generation = 0
        self._request_counter = 0
        self._pending_start = False
        self._state = PlaybackState(volume=_clamp(float(default_volume), 0.0, 1.0))

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def active_resource_id(self) -> Optional[str]:
        return self._state.active_resource_id

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def position(self) -> float:
        return self._state.position_seconds

    @property
    def duration(self) -> float:
        return self._state.duration_seconds

    @property
    def volume(self) -> float:
        return self._state.volume

    @property
    def generation(self) -> int:
        return self._generation

    def set_on_track_end(self, callback: Optional[Callable[[str], None]]) -> None:
        self._on_track_end = callback

    def _update(self, **changes) -> None:
        new_state = self._state.evolve(**changes)
        if new_state != self._state:
            self._state = new_state
            self.state_changed.emit(new_state)

    def _surface_error(self, message: str) -> None:
        Log.error(f"PlaybackEngine: {message}")
        if self._notifier is not None:
            self._notifier.notify(message, "error")
        self.error_occurred.emit(message)

    # =========================================================================
    # Transport
    # =========================================================================

    def play(self, resource_id: str, resource_url: str) -> None:
        """
        Play resource_id from resource_url.

        The active resource resumes in place (no reload, position kept); any
        other id tears the current resource down and loads a new one, which
        starts once its metadata has loaded.
        """
        if resource_id == self._state.active_resource_id and self._resource is not None:
            if self._state.is_playing:
                return
            if self._state.status == PlaybackStatus.LOADING:
                self._pending_start = True
                return
            self._start()
            return

        self._teardown()
        self._generation += 1
        generation = self._generation

        resource = self._resource_factory()
        resource.bind(
            on_metadata=lambda duration: self._on_metadata(generation, duration),
            on_time=lambda seconds: self._on_time(generation, seconds),
            on_ended=lambda: self._on_ended(generation),
            on_error=lambda message: self._on_error(generation, message),
        )
        resource.set_volume(self._state.volume)
        self._resource = resource
        self._pending_start = True

        self._update(
            active_resource_id=resource_id,
            is_playing=False,
            position_seconds=0.0,
            duration_seconds=0.0,
            status=PlaybackStatus.LOADING,
        )
        Log.info(f"PlaybackEngine: Loading {resource_id}")
        resource.load(resource_url)

    def toggle_playback(self, resource_id: str, resource_url: str) -> None:
        """Transport button: pause if this track is playing, otherwise play it."""
        if self._state.is_playing and self._state.active_resource_id == resource_id:
            self.pause()
        else:
            self.play(resource_id, resource_url)

    async def play_from_library_entry(self, resource_id: str) -> bool:
        """
        Resolve resource_id to a streaming URL and play it.

        Failure to find the track or a URL is surfaced and leaves the state
        untouched. A newer call made while this one awaits supersedes it.

        Returns:
            True if play() was called
        """
        started = self.begin_library_request(resource_id)
        if started is None:
            return False
        request, track = started
        url = await self.resolve_library_url(track)
        return self.finish_library_request(request, track, url)

    def begin_library_request(self, resource_id: str) -> Optional[Tuple[int, TrackRecord]]:
        """
        Register a library request and look up its track.

        Every call supersedes earlier requests still resolving.

        Returns:
            (request, track), or None if the track is unknown (already surfaced)
        """
        self._request_counter += 1
        request = self._request_counter

        track = self._track_provider(resource_id) if self._track_provider is not None else None
        if track is None:
            Log.warning(f"PlaybackEngine: No track record for {resource_id}")
            if self._notifier is not None:
                self._notifier.notify("Track not found", "warning")
            return None
        return request, track

    async def resolve_library_url(self, track: TrackRecord) -> Optional[str]:
        """Streaming URL for track. Touches no engine state, so any thread may await it."""
        if self._url_resolver is None:
            return track.url
        return await self._url_resolver.resolve_streaming_url(track)

    def finish_library_request(self, request: int, track: TrackRecord, url: Optional[str]) -> bool:
        """
        Play a resolved library request unless a newer one superseded it.

        Returns:
            True if play() was called
        """
        resource_id = track.id
        if request != self._request_counter:
            Log.debug(f"PlaybackEngine: Superseded library request for {resource_id}")
            return False

        if not url:
            Log.warning(f"PlaybackEngine: No streaming URL for {resource_id}")
            if self._notifier is not None:
                self._notifier.notify(f"Could not get a streaming URL for \"{track.name or track.id}\"", "warning")
            return False

        self.play(track.id, url)
        return True

    def pause(self) -> None:
        """Pause the current resource; no-op if already paused or idle."""
        if self._resource is None:
            return
        if self._state.status == PlaybackStatus.LOADING:
            self._pending_start = False
            self._update(status=PlaybackStatus.PAUSED)
            return
        if not self._state.is_playing:
            return

        self._resource.pause()
        self._update(is_playing=False, status=PlaybackStatus.PAUSED)
        Log.debug(f"PlaybackEngine: Pause at {self._state.position_seconds:.3f}s")

    def stop(self) -> None:
        """Release the resource and return to IDLE with nothing active."""
        self._teardown()

    def seek(self, seconds: float) -> None:
        """
        Move to seconds, clamped into [0, duration].

        The position updates immediately whether or not audio is playing.
        Before the duration is known the only valid position is 0.
        """
        target = _clamp(float(seconds), 0.0, self._state.duration_seconds)
        if self._resource is not None:
            self._resource.set_position(target)
        self._update(position_seconds=target)
        self.position_changed.emit(target)
        Log.debug(f"PlaybackEngine: Seek to {target:.3f}s")

    def set_volume(self, volume: float) -> None:
        """Clamp into [0, 1], apply to the active resource and keep for the next one."""
        value = _clamp(float(volume), 0.0, 1.0)
        if self._resource is not None:
            self._resource.set_volume(value)
        self._update(volume=value)

    # =========================================================================
    # Internals
    # =========================================================================

    def _start(self) -> None:
        resource = self._resource
        if resource is None:
            return
        self._pending_start = False
        try:
            resource.play()
        except PlaybackStartError as e:
            Log.warning(f"PlaybackEngine: Playback did not start: {e}")
            if self._notifier is not None:
                self._notifier.notify(f"Playback did not start: {e}", "warning")
            self.error_occurred.emit(str(e))
            self._update(is_playing=False, status=PlaybackStatus.PAUSED)
            return
        self._update(is_playing=True, status=PlaybackStatus.PLAYING)
        Log.debug(f"PlaybackEngine: Play {self._state.active_resource_id} from {self._state.position_seconds:.3f}s")

    def _teardown(self) -> None:
        resource = self._resource
        self._resource = None
        self._pending_start = False
        # Invalidate callbacks still queued by the released resource
        self._generation += 1
        if resource is not None:
            resource.release()
            Log.debug(f"PlaybackEngine: Released {self._state.active_resource_id}")
        self._update(
            active_resource_id=None,
            is_playing=False,
            position_seconds=0.0,
            duration_seconds=0.0,
            status=PlaybackStatus.IDLE,
        )

    def _is_stale(self, generation: int, what: str) -> bool:
        if generation != self._generation:
            Log.debug(f"PlaybackEngine: Dropped {what} from superseded resource (gen {generation})")
            return True
        return False

    def _on_metadata(self, generation: int, duration: float) -> None:
        if self._is_stale(generation, "metadata"):
            return
        duration = max(0.0, float(duration))
        self._update(
            duration_seconds=duration,
            position_seconds=min(self._state.position_seconds, duration),
        )
        Log.info(f"PlaybackEngine: Loaded {self._state.active_resource_id} ({duration:.2f}s)")

        if self._state.status == PlaybackStatus.LOADING:
            if self._pending_start:
                self._start()
            else:
                self._update(status=PlaybackStatus.PAUSED)
        elif self._state.status == PlaybackStatus.PAUSED and self._pending_start:
            self._start()

    def _on_time(self, generation: int, seconds: float) -> None:
        if generation != self._generation:
            return
        position = max(0.0, float(seconds))
        if self._state.duration_seconds > 0:
            position = min(position, self._state.duration_seconds)
        self._update(position_seconds=position)
        self.position_changed.emit(position)

    def _on_ended(self, generation: int) -> None:
        if self._is_stale(generation, "end of track"):
            return
        resource_id = self._state.active_resource_id
        if self._resource is not None:
            self._resource.set_position(0.0)
        # Resource stays loaded so replaying the same track does not reload
        self._update(is_playing=False, position_seconds=0.0, status=PlaybackStatus.IDLE)
        self.position_changed.emit(0.0)
        Log.info(f"PlaybackEngine: Track ended {resource_id}")

        if resource_id is not None:
            self.track_ended.emit(resource_id)
            if self._on_track_end is not None:
                self._on_track_end(resource_id)

    def _on_error(self, generation: int, message: str) -> None:
        if self._is_stale(generation, "error"):
            return
        resource_id = self._state.active_resource_id
        self._teardown()
        self._surface_error(f"Playback failed for {resource_id}: {message}")

    def cleanup(self) -> None:
        """Release resources at application shutdown."""
        self._teardown()
        Log.debug("PlaybackEngine: Cleanup complete")
