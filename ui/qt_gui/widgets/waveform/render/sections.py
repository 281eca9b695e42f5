"""
Section Renderer

Coloured bands for arrangement sections, the creation preview line, and
the geometry the editor uses for hit testing. Geometry and painting share
the helpers below so what is drawn is exactly what is clickable.
"""

from typing import Iterable, Optional, Tuple

from PyQt6.QtGui import QColor

from src.shared.domain.entities.audio_section import AudioSection

from ..constants import DELETE_BUTTON_SIZE, HOVER_DASH_PATTERN, SECTION_HEADER_HEIGHT
from ..core.canvas import Canvas
from ..core.style import WaveformStyle, with_alpha
from ..timing.time_format import format_clock
from ..types import SurfaceSize

Rect = Tuple[float, float, float, float]


def section_span(section: AudioSection, duration_seconds: float, width: float) -> Tuple[float, float]:
    """[start_x, end_x) of a section band."""
    if duration_seconds <= 0:
        return 0.0, 0.0
    start_x = section.start_seconds / duration_seconds * width
    end_x = section.end_seconds / duration_seconds * width
    return start_x, end_x


def header_rect(section: AudioSection, duration_seconds: float, width: float) -> Rect:
    start_x, end_x = section_span(section, duration_seconds, width)
    return start_x, 0.0, end_x - start_x, float(SECTION_HEADER_HEIGHT)


def delete_button_rect(section: AudioSection, duration_seconds: float, width: float) -> Rect:
    """Delete control in the top-right corner of the header."""
    start_x, end_x = section_span(section, duration_seconds, width)
    inset = (SECTION_HEADER_HEIGHT - DELETE_BUTTON_SIZE) / 2.0
    x = max(start_x, end_x - DELETE_BUTTON_SIZE - inset)
    return x, inset, float(DELETE_BUTTON_SIZE), float(DELETE_BUTTON_SIZE)


def rect_contains(rect: Rect, x: float, y: float) -> bool:
    rx, ry, rw, rh = rect
    return rx <= x < rx + rw and ry <= y < ry + rh


def render_sections(
    canvas: Canvas,
    size: SurfaceSize,
    sections: Iterable[AudioSection],
    duration_seconds: float,
    selected_id: Optional[str] = None,
    editing_id: Optional[str] = None,
    style=WaveformStyle,
) -> None:
    """
    Paint section bands. The selected section is drawn last, with its
    delete control and time range.
    """
    if duration_seconds <= 0:
        return

    ordered = sorted(sections, key=lambda s: (s.id == selected_id, s.start_seconds))
    for section in ordered:
        _render_section(canvas, size, section, duration_seconds, section.id == selected_id,
                        section.id == editing_id, style)


def _render_section(canvas, size, section, duration_seconds, selected, editing, style) -> None:
    width, height = size.width, size.height
    start_x, end_x = section_span(section, duration_seconds, width)
    band_width = end_x - start_x
    base = QColor(section.color.value)

    fill_alpha = style.SECTION_SELECTED_FILL_ALPHA if selected else style.SECTION_FILL_ALPHA
    canvas.fill_rect(start_x, 0, band_width, height, with_alpha(base, fill_alpha))

    border = with_alpha(base, 1.0 if selected else style.SECTION_BORDER_ALPHA)
    border_width = 2.0
    canvas.line(start_x, 0, start_x, height, border, border_width)
    canvas.line(end_x, 0, end_x, height, border, border_width)

    canvas.set_clip(start_x, 0, band_width, height)
    canvas.fill_rect(start_x, 0, band_width, SECTION_HEADER_HEIGHT, with_alpha(base, 0.25))
    if not editing:
        canvas.text(start_x + 6, 14, section.name, style.TEXT_PRIMARY, 11)

    if selected:
        bx, by, bw, bh = delete_button_rect(section, duration_seconds, width)
        canvas.fill_rect(bx, by, bw, bh, with_alpha(style.PLAYHEAD_COLOR, 0.6))
        canvas.text(bx + bw / 2.0, by + bh - 3, "×", style.TEXT_PRIMARY, 11, align="center")
        canvas.text(
            start_x + 6, height - 6,
            f"{format_clock(section.start_seconds)} - {format_clock(section.end_seconds)}",
            style.TEXT_MUTED, 10,
        )
    canvas.clear_clip()


def render_creation_preview(
    canvas: Canvas,
    size: SurfaceSize,
    start_seconds: Optional[float],
    duration_seconds: float,
    style=WaveformStyle,
) -> None:
    """Dashed marker at the pending section start."""
    if start_seconds is None or duration_seconds <= 0:
        return
    x = start_seconds / duration_seconds * size.width
    canvas.line(
        x, 0, x, size.height,
        with_alpha(style.SECTION_PREVIEW, style.SECTION_PREVIEW_ALPHA),
        2.0,
        dash=HOVER_DASH_PATTERN,
    )
