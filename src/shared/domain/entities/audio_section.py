"""
Audio section entities.

A section is a named, coloured time range on a track (intro, verse, drop...).
Sections belong to the track and are persisted by the library store; the
arrangement view only projects them and emits create/update/delete requests.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

MIN_SECTION_SECONDS = 0.5


class SectionColor(Enum):
    """Fixed section palette, in round-robin order."""
    BLUE = "#3B82F6"
    RED = "#EF4444"
    GREEN = "#10B981"
    YELLOW = "#F59E0B"
    PURPLE = "#8B5CF6"
    PINK = "#EC4899"

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def for_ordinal(cls, ordinal: int) -> "SectionColor":
        palette = list(cls)
        return palette[ordinal % len(palette)]

    @classmethod
    def from_value(cls, value: str) -> "SectionColor":
        """Look up by hex value (case-insensitive); unknown values are BLUE."""
        for color in cls:
            if color.value.lower() == str(value).lower():
                return color
        return cls.BLUE


@dataclass(frozen=True)
class SectionDraft:
    """A section the user has drawn but the store has not persisted yet."""
    track_id: str
    name: str
    start_seconds: float
    end_seconds: float
    color: SectionColor


@dataclass(frozen=True)
class AudioSection:
    """A persisted time-range annotation on a track."""
    id: str
    track_id: str
    name: str
    start_seconds: float
    end_seconds: float
    color: SectionColor = SectionColor.BLUE

    def __post_init__(self):
        if self.start_seconds < 0:
            raise ValueError(f"Section start must be >= 0, got {self.start_seconds}")
        if self.end_seconds <= self.start_seconds:
            raise ValueError(
                f"Section end ({self.end_seconds}) must be after start ({self.start_seconds})"
            )

    @property
    def duration_seconds(self) -> float:
        return self.end_seconds - self.start_seconds

    def contains(self, t: float) -> bool:
        return self.start_seconds <= t < self.end_seconds

    def with_range(self, start_seconds: float, end_seconds: float) -> "AudioSection":
        return replace(self, start_seconds=start_seconds, end_seconds=end_seconds)

    def with_name(self, name: str) -> "AudioSection":
        return replace(self, name=name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "track_id": self.track_id,
            "name": self.name,
            "start_time": self.start_seconds,
            "end_time": self.end_seconds,
            "color": self.color.value,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "AudioSection":
        return AudioSection(
            id=str(data["id"]),
            track_id=str(data.get("track_id") or ""),
            name=data.get("name") or "",
            start_seconds=float(data["start_time"]),
            end_seconds=float(data["end_time"]),
            color=SectionColor.from_value(data.get("color") or SectionColor.BLUE.value),
        )


def sort_sections(sections: Iterable[AudioSection]) -> List[AudioSection]:
    """Sections ordered by start time, then end time."""
    return sorted(sections, key=lambda s: (s.start_seconds, s.end_seconds))


def section_at(sections: Iterable[AudioSection], t: float) -> Optional[AudioSection]:
    """Topmost (last drawn) section containing t."""
    hit = None
    for section in sort_sections(sections):
        if section.contains(t):
            hit = section
    return hit
