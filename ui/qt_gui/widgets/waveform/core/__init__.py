"""
Waveform Core Components

Drawing surface abstraction, backing store and style tokens.
"""

from .canvas import BackingStore, Canvas, DrawOp, QPainterCanvas, RecordingCanvas
from .style import WaveformStyle, with_alpha

__all__ = [
    'BackingStore',
    'Canvas',
    'DrawOp',
    'QPainterCanvas',
    'RecordingCanvas',
    'WaveformStyle',
    'with_alpha',
]
