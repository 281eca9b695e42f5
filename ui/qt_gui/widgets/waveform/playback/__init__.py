"""
Waveform Playback Components

The app-wide playback engine and its Qt Multimedia resource.
QtMediaResource is imported lazily so tests can drive the engine with a
fake resource without touching audio devices.
"""

from .controller import PlaybackEngine

__all__ = [
    'PlaybackEngine',
]
