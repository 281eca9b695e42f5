"""
Section Service

Owns the arrangement sections of every track. The arrangement editor only
emits requests; this service applies them and hands back the sorted list.
Sections persist under "sections.<track_id>" when a preferences repository
is supplied, otherwise they live for the session only.
"""
from __future__ import annotations

import uuid
from typing import Dict, List, Optional

from src.shared.domain.entities.audio_section import AudioSection, SectionDraft, sort_sections
from src.utils.message import Log


class SectionService:
    """Create/update/delete sections per track, optionally repo-backed."""

    KEY_PREFIX = "sections."

    def __init__(self, preferences_repo=None):
        self._repo = preferences_repo
        self._sections: Dict[str, List[AudioSection]] = {}

    def _key(self, track_id: str) -> str:
        return f"{self.KEY_PREFIX}{track_id}"

    def _load(self, track_id: str) -> List[AudioSection]:
        if track_id in self._sections:
            return self._sections[track_id]

        sections: List[AudioSection] = []
        if self._repo is not None:
            for raw in self._repo.get(self._key(track_id), []) or []:
                try:
                    sections.append(AudioSection.from_dict(raw))
                except (KeyError, TypeError, ValueError) as e:
                    Log.warning(f"SectionService: Skipping invalid section for {track_id}: {e}")
        self._sections[track_id] = sort_sections(sections)
        return self._sections[track_id]

    def _save(self, track_id: str, sections: List[AudioSection]) -> List[AudioSection]:
        ordered = sort_sections(sections)
        self._sections[track_id] = ordered
        if self._repo is not None:
            self._repo.set(self._key(track_id), [s.to_dict() for s in ordered])
        return list(ordered)

    def list_sections(self, track_id: str) -> List[AudioSection]:
        return list(self._load(track_id))

    def get_section(self, track_id: str, section_id: str) -> Optional[AudioSection]:
        for section in self._load(track_id):
            if section.id == section_id:
                return section
        return None

    def create_section(self, draft: SectionDraft) -> AudioSection:
        section = AudioSection(
            id=str(uuid.uuid4()),
            track_id=draft.track_id,
            name=draft.name,
            start_seconds=draft.start_seconds,
            end_seconds=draft.end_seconds,
            color=draft.color,
        )
        self._save(draft.track_id, self._load(draft.track_id) + [section])
        Log.info(f"SectionService: Created '{section.name}' on {draft.track_id}")
        return section

    def update_section(self, section: AudioSection) -> bool:
        """Replace the stored section with the same id; False if unknown."""
        current = self._load(section.track_id)
        if not any(s.id == section.id for s in current):
            Log.warning(f"SectionService: Update for unknown section {section.id}")
            return False
        self._save(section.track_id, [section if s.id == section.id else s for s in current])
        return True

    def delete_section(self, track_id: str, section_id: str) -> bool:
        current = self._load(track_id)
        remaining = [s for s in current if s.id != section_id]
        if len(remaining) == len(current):
            return False
        self._save(track_id, remaining)
        Log.info(f"SectionService: Deleted {section_id} from {track_id}")
        return True
