"""
Track record.

Read-only view of the library's track metadata that the playback core needs.
The library store owns tracks; the core never writes back to it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class TrackRecord:
    """Track metadata as supplied by the track metadata provider."""
    id: str
    name: str = ""
    url: Optional[str] = None
    bpm: Optional[float] = None
    duration: Optional[float] = None
    storage_path: Optional[str] = None
    storage_provider: Optional[str] = None
    provider_file_id: Optional[str] = None

    @property
    def has_tempo(self) -> bool:
        return self.bpm is not None and self.bpm > 0

    @property
    def is_backend_hosted(self) -> bool:
        """True for tracks in the backend's own storage buckets (the default provider)."""
        return self.storage_provider in (None, "", "supabase")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "bpm": self.bpm,
            "duration": self.duration,
            "storage_path": self.storage_path,
            "storage_provider": self.storage_provider,
            "provider_file_id": self.provider_file_id,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "TrackRecord":
        bpm = data.get("bpm")
        duration = data.get("duration")
        return TrackRecord(
            id=str(data["id"]),
            name=data.get("name") or "",
            url=data.get("url") or None,
            bpm=float(bpm) if bpm is not None else None,
            duration=float(duration) if duration is not None else None,
            storage_path=data.get("storage_path"),
            storage_provider=data.get("storage_provider"),
            provider_file_id=data.get("provider_file_id"),
        )
