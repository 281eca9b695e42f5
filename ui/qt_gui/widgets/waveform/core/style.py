"""
Waveform Style Configuration

Colour, font and opacity tokens for the waveform views and the
arrangement overlay. Views read these class attributes at paint time, so
overriding one takes effect on the next repaint.
"""

from PyQt6.QtGui import QColor, QFont


def with_alpha(color: QColor, alpha: float) -> QColor:
    """Copy of color with alpha in [0, 1]."""
    result = QColor(color)
    result.setAlphaF(max(0.0, min(1.0, alpha)))
    return result


class WaveformStyle:
    """
    Style configuration for waveform widgets.
    """

    # =========================================================================
    # Detailed waveform
    # =========================================================================
    BG_COLOR = QColor("#1a2e26")
    CENTER_LINE = QColor("#243830")
    WAVE_COLOR = QColor("#ebeae8")
    WAVE_ALPHA = 0.6
    PLAYED_COLOR = QColor("#e4da38")
    PLAYED_ALPHA = 0.8
    PLAYHEAD_COLOR = QColor("#d27556")
    HOVER_COLOR = QColor("#ebeae8")
    HOVER_ALPHA = 0.8

    # =========================================================================
    # Peak visualization / bars
    # =========================================================================
    PEAK_BG_COLOR = QColor("#1E3429")
    PEAK_PRIMARY = QColor("#F7CE3B")
    PEAK_UNPLAYED_ALPHA = 0x66 / 255.0
    PEAK_HOVER_ALPHA = 0x88 / 255.0
    BAR_UNPLAYED_ALPHA = 0.3

    # =========================================================================
    # Text
    # =========================================================================
    TEXT_MUTED = QColor(235, 234, 232, 153)  # Silver at 60%
    TEXT_PRIMARY = QColor("#ebeae8")

    # =========================================================================
    # Arrangement grid
    # =========================================================================
    GRID_PHRASE = QColor(228, 218, 56, 77)  # 0.3
    GRID_PHRASE_WIDTH = 2.0
    GRID_BAR = QColor(235, 234, 232, 51)  # 0.2
    GRID_BAR_WIDTH = 1.0
    GRID_BEAT = QColor(235, 234, 232, 26)  # 0.1
    GRID_BEAT_WIDTH = 0.5
    BAR_LABEL_COLOR = QColor(235, 234, 232, 153)  # 0.6

    # =========================================================================
    # Sections
    # =========================================================================
    SECTION_FILL_ALPHA = 0.2
    SECTION_SELECTED_FILL_ALPHA = 0.35
    SECTION_BORDER_ALPHA = 0.8
    SECTION_PREVIEW = QColor("#ebeae8")
    SECTION_PREVIEW_ALPHA = 0.6

    # =========================================================================
    # Fonts
    # =========================================================================
    @staticmethod
    def small_font(pixel_size: int = 10) -> QFont:
        font = QFont()
        font.setFamily("Quicksand, SF Pro Text, Segoe UI, sans-serif")
        font.setPixelSize(pixel_size)
        return font

    @staticmethod
    def label_font() -> QFont:
        font = WaveformStyle.small_font(12)
        font.setBold(True)
        return font
