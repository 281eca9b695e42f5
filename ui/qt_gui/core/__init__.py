"""
Core Qt Components

Background threads shared by the widgets.

Components:
- PeakExtractionThread: Runs peak extraction off the UI thread
- StreamingUrlThread: Resolves library streaming URLs off the UI thread
"""

from .peak_extraction_thread import PeakExtractionThread
from .streaming_url_thread import StreamingUrlThread, start_library_playback

__all__ = [
    'PeakExtractionThread',
    'StreamingUrlThread',
    'start_library_playback',
]
