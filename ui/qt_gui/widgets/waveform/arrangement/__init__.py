"""
Arrangement Components

Tempo grid overlay and section editing on top of the detailed waveform.
"""

from .arrangement_view import NO_BPM_HINT, NO_BPM_TITLE, ArrangementCanvas, ArrangementView
from .section_editor import EditMode, HitKind, HitResult, SectionEditor, clamp_created_range

__all__ = [
    'NO_BPM_HINT',
    'NO_BPM_TITLE',
    'ArrangementCanvas',
    'ArrangementView',
    'EditMode',
    'HitKind',
    'HitResult',
    'SectionEditor',
    'clamp_created_range',
]
