"""
Waveform Interfaces

Protocol definitions for the waveform package's integration points.
These allow the playback engine to drive different media backends and
pull track metadata from whatever library store the application uses.
"""

from typing import Callable, Optional, Protocol, runtime_checkable

from src.shared.domain.entities.track import TrackRecord


@runtime_checkable
class MediaResource(Protocol):
    """
    One playable media resource, owned exclusively by the PlaybackEngine.

    The engine binds callbacks once right after creating the resource.
    Callbacks fire on the resource's own cadence: on_metadata when the
    duration is known, on_time on every native time update, on_ended at
    the natural end and on_error on load or playback failure.
    """

    def bind(
        self,
        on_metadata: Callable[[float], None],
        on_time: Callable[[float], None],
        on_ended: Callable[[], None],
        on_error: Callable[[str], None],
    ) -> None:
        ...

    def load(self, url: str) -> None:
        """Start loading url; completion is reported through on_metadata."""
        ...

    def play(self) -> None:
        """
        Start or resume.

        Raises:
            PlaybackStartError: The backend refused to start
        """
        ...

    def pause(self) -> None:
        ...

    def set_position(self, seconds: float) -> None:
        ...

    def set_volume(self, volume: float) -> None:
        ...

    def release(self) -> None:
        """Stop and free the resource; no callbacks may fire afterwards."""
        ...


MediaResourceFactory = Callable[[], MediaResource]

TrackProvider = Callable[[str], Optional[TrackRecord]]
