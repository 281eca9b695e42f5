"""
Waveform Widget Package
=======================

Playback engine, peak-driven waveform views and the arrangement overlay
for the TrackShelf player.

Directory Structure
-------------------
- core/         - Canvas abstraction, backing store, style tokens
- playback/     - PlaybackEngine and its Qt Multimedia resource
- render/       - Pure painters (detailed, bars, peaks, grid, sections)
- timing/       - Time formatting, beat grid and snapping
- views/        - Qt widgets for the three waveform variants
- arrangement/  - Section editor logic and the arrangement view

Import Examples
---------------
    from ui.qt_gui.widgets.waveform.playback import PlaybackEngine
    from ui.qt_gui.widgets.waveform.views import DetailedWaveformView, WaveformBarsView
    from ui.qt_gui.widgets.waveform.arrangement import ArrangementView
    from ui.qt_gui.widgets.waveform.timing import BeatGrid, GridSettings
    from ui.qt_gui.widgets.waveform.types import PlaybackState, PlaybackStatus
"""

__version__ = "1.0.0"
