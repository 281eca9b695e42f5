"""
Waveform Data Types
===================

Public data contracts shared by the playback engine, the renderers and the
arrangement view. All are immutable dataclasses so a published snapshot can
be handed to any number of views without copying.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class PlaybackStatus(Enum):
    """Engine lifecycle: IDLE -> LOADING -> PLAYING <-> PAUSED -> IDLE."""
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(frozen=True)
class PlaybackState:
    """
    Snapshot of what is playing and where.

    Attributes:
        active_resource_id: Track owning the single media resource, or None
        is_playing: True while audio is audibly advancing
        position_seconds: Current position (0 until duration is known)
        duration_seconds: Known after metadata loads, 0 before
        volume: Output volume in [0, 1]
        status: Lifecycle status
    """
    active_resource_id: Optional[str] = None
    is_playing: bool = False
    position_seconds: float = 0.0
    duration_seconds: float = 0.0
    volume: float = 0.8
    status: PlaybackStatus = PlaybackStatus.IDLE

    @property
    def progress(self) -> float:
        """Position as a fraction of duration, 0 when duration is unknown."""
        if self.duration_seconds <= 0:
            return 0.0
        return min(1.0, max(0.0, self.position_seconds / self.duration_seconds))

    def is_active(self, resource_id: Optional[str]) -> bool:
        return resource_id is not None and resource_id == self.active_resource_id

    def evolve(self, **changes) -> "PlaybackState":
        return replace(self, **changes)


@dataclass(frozen=True)
class HoverState:
    """Pointer hover over a waveform; time is None when not hovering."""
    time_seconds: Optional[float] = None
    dragging: bool = False

    @property
    def visible(self) -> bool:
        return self.time_seconds is not None and not self.dragging


@dataclass(frozen=True)
class SurfaceSize:
    """Logical (device independent) size of a paint surface plus its pixel ratio."""
    width: int
    height: int
    device_pixel_ratio: float = 1.0

    @property
    def backing_width(self) -> int:
        return max(1, int(round(self.width * self.device_pixel_ratio)))

    @property
    def backing_height(self) -> int:
        return max(1, int(round(self.height * self.device_pixel_ratio)))

    @property
    def center(self) -> float:
        return self.height / 2.0
