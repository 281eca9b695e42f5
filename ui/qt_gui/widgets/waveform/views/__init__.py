"""
Waveform Views

Qt widgets for the three waveform variants. Each owns its peaks and reads
playback state from the shared PlaybackEngine.
"""

from .base import LOADING_TEXT, WaveformViewBase
from .detailed_waveform import DetailedWaveformView
from .peak_waveform import PeakWaveformView
from .waveform_bars import ERROR_TEXT, WaveformBarsView

__all__ = [
    'LOADING_TEXT',
    'ERROR_TEXT',
    'WaveformViewBase',
    'DetailedWaveformView',
    'PeakWaveformView',
    'WaveformBarsView',
]
