"""
Beat Grid

Tempo grid for the arrangement view. Tick times are derived from integer
indices (index * interval) so they never accumulate floating point drift,
and each tick is tagged with the largest musical unit it falls on.

Design:
- GridSettings holds the per-view configuration (validated like the
  application settings)
- BeatGrid is rebuilt from scratch whenever the settings or the duration
  change; it holds no mutable state
- snap_to_grid is a pure helper shared by section create and edge drag
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from src.application.settings.base_settings import BaseSettings, validated_field
from src.shared.domain.entities.track import TrackRecord

from ..constants import BAR_LABEL_EVERY, BARS_PER_PHRASE, DEFAULT_BEATS_PER_BAR


class SnapUnit(Enum):
    """Grid and snap resolution. A phrase is four bars."""
    BEAT = "beat"
    BAR = "bar"
    PHRASE = "phrase"

    @property
    def label(self) -> str:
        return _SNAP_LABELS[self]

    @property
    def rank(self) -> int:
        """Larger units rank higher; used to tag coinciding ticks."""
        return _SNAP_RANKS[self]


_SNAP_LABELS = {
    SnapUnit.BEAT: "Beat",
    SnapUnit.BAR: "Bar",
    SnapUnit.PHRASE: "4 Bars",
}

_SNAP_RANKS = {
    SnapUnit.BEAT: 0,
    SnapUnit.BAR: 1,
    SnapUnit.PHRASE: 2,
}


@dataclass
class GridSettings(BaseSettings):
    """Arrangement grid configuration. Lives as long as the view does."""
    bpm: float = validated_field(120.0, greater_than=0, allow_none=False)
    beats_per_bar: int = validated_field(DEFAULT_BEATS_PER_BAR, min_value=1, allow_none=False)
    snap_unit: SnapUnit = validated_field(SnapUnit.BAR, choices=list(SnapUnit))
    visible: bool = True
    snap_enabled: bool = True

    def __post_init__(self):
        # Stored dicts carry the enum's value
        if isinstance(self.snap_unit, str):
            self.snap_unit = SnapUnit(self.snap_unit)

    @property
    def seconds_per_beat(self) -> float:
        return 60.0 / self.bpm

    @property
    def seconds_per_bar(self) -> float:
        return self.seconds_per_beat * self.beats_per_bar

    @property
    def seconds_per_phrase(self) -> float:
        return self.seconds_per_bar * BARS_PER_PHRASE

    def interval_for(self, unit: SnapUnit) -> float:
        if unit == SnapUnit.BEAT:
            return self.seconds_per_beat
        if unit == SnapUnit.BAR:
            return self.seconds_per_bar
        return self.seconds_per_phrase

    @property
    def snap_interval(self) -> float:
        return self.interval_for(self.snap_unit)


@dataclass(frozen=True)
class GridTick:
    """One vertical grid line."""
    index: int
    time: float
    unit: SnapUnit


@dataclass(frozen=True)
class BarLabel:
    """Bar number drawn along the top edge."""
    bar: int
    time: float


def snap_to_grid(time_seconds: float, interval: float) -> float:
    """
    Round time to the nearest multiple of interval (halves round up).

    A non-positive interval leaves the time unchanged.
    """
    if interval <= 0:
        return time_seconds
    return math.floor(time_seconds / interval + 0.5) * interval


@dataclass(frozen=True)
class BeatGrid:
    """
    Grid lines and bar labels for one (settings, duration) pair.

    Ticks run from 0 while time < duration at the snap unit's interval.
    """
    settings: GridSettings
    duration_seconds: float
    ticks: List[GridTick] = field(default_factory=list, compare=False)
    bar_labels: List[BarLabel] = field(default_factory=list, compare=False)

    @classmethod
    def build(cls, settings: GridSettings, duration_seconds: float) -> "BeatGrid":
        """Compute ticks and labels. Raises ValueError for invalid settings."""
        result = settings.validate()
        if not result.valid:
            raise ValueError("; ".join(result.errors))
        return cls(
            settings=settings,
            duration_seconds=duration_seconds,
            ticks=_compute_ticks(settings, duration_seconds),
            bar_labels=_compute_bar_labels(settings, duration_seconds),
        )

    @classmethod
    def from_track(
        cls,
        track: TrackRecord,
        duration_seconds: float,
        settings: Optional[GridSettings] = None,
    ) -> Optional["BeatGrid"]:
        """Grid for a track, or None when the track has no tempo."""
        if not track.has_tempo:
            return None
        if settings is None:
            settings = GridSettings(bpm=float(track.bpm))
        elif settings.bpm != track.bpm:
            settings = GridSettings(
                bpm=float(track.bpm),
                beats_per_bar=settings.beats_per_bar,
                snap_unit=settings.snap_unit,
                visible=settings.visible,
                snap_enabled=settings.snap_enabled,
            )
        return cls.build(settings, duration_seconds)

    def snap(self, time_seconds: float) -> float:
        """Snap to the current unit, or pass through when snapping is off."""
        if not self.settings.snap_enabled:
            return time_seconds
        return snap_to_grid(time_seconds, self.settings.snap_interval)

    def x_for(self, time_seconds: float, width: float) -> float:
        if self.duration_seconds <= 0:
            return 0.0
        return (time_seconds / self.duration_seconds) * width


def _classify(index: int, unit: SnapUnit, beats_per_bar: int) -> SnapUnit:
    if unit == SnapUnit.PHRASE:
        return SnapUnit.PHRASE
    if unit == SnapUnit.BAR:
        return SnapUnit.PHRASE if index % BARS_PER_PHRASE == 0 else SnapUnit.BAR
    if index % (beats_per_bar * BARS_PER_PHRASE) == 0:
        return SnapUnit.PHRASE
    if index % beats_per_bar == 0:
        return SnapUnit.BAR
    return SnapUnit.BEAT


def _compute_ticks(settings: GridSettings, duration_seconds: float) -> List[GridTick]:
    if duration_seconds <= 0:
        return []
    interval = settings.snap_interval
    count = int(math.ceil(duration_seconds / interval))
    ticks = []
    for index in range(count + 1):
        time = index * interval
        if time >= duration_seconds:
            break
        ticks.append(GridTick(index, time, _classify(index, settings.snap_unit, settings.beats_per_bar)))
    return ticks


def _compute_bar_labels(settings: GridSettings, duration_seconds: float) -> List[BarLabel]:
    if duration_seconds <= 0:
        return []
    seconds_per_bar = settings.seconds_per_bar
    labels = []
    bar = 0
    while bar * seconds_per_bar < duration_seconds:
        if bar > 0 and bar % BAR_LABEL_EVERY == 0:
            labels.append(BarLabel(bar, bar * seconds_per_bar))
        bar += 1
    return labels
