"""
Shared domain entities.

Contains:
- TrackRecord - a library entry with its storage location and tempo
- AudioSection / SectionDraft - named time ranges on a track
- SectionColor - the section palette
"""
from src.shared.domain.entities.track import TrackRecord
from src.shared.domain.entities.audio_section import (
    MIN_SECTION_SECONDS,
    AudioSection,
    SectionColor,
    SectionDraft,
    section_at,
    sort_sections,
)

__all__ = [
    'TrackRecord',
    'MIN_SECTION_SECONDS',
    'AudioSection',
    'SectionColor',
    'SectionDraft',
    'section_at',
    'sort_sections',
]
