"""
Grid Renderer

Draws the arrangement tempo grid from a BeatGrid: one vertical line per
tick, weighted by the unit it falls on, plus bar numbers along the top.
"""

from ..constants import BAR_LABEL_BASELINE_Y, BAR_LABEL_OFFSET_X
from ..core.canvas import Canvas
from ..core.style import WaveformStyle
from ..timing.beat_grid import BeatGrid, SnapUnit
from ..types import SurfaceSize


def tick_pen(unit: SnapUnit, style=WaveformStyle):
    """(colour, width) for a tick of the given unit."""
    if unit == SnapUnit.PHRASE:
        return style.GRID_PHRASE, style.GRID_PHRASE_WIDTH
    if unit == SnapUnit.BAR:
        return style.GRID_BAR, style.GRID_BAR_WIDTH
    return style.GRID_BEAT, style.GRID_BEAT_WIDTH


def render_grid(canvas: Canvas, size: SurfaceSize, grid: BeatGrid, style=WaveformStyle) -> None:
    """Paint ticks then bar labels. Nothing is drawn while the grid is hidden."""
    if not grid.settings.visible or grid.duration_seconds <= 0:
        return

    width, height = size.width, size.height
    for tick in grid.ticks:
        x = grid.x_for(tick.time, width)
        color, pen_width = tick_pen(tick.unit, style)
        canvas.line(x, 0, x, height, color, pen_width)

    for label in grid.bar_labels:
        x = grid.x_for(label.time, width)
        canvas.text(x + BAR_LABEL_OFFSET_X, BAR_LABEL_BASELINE_Y, str(label.bar), style.BAR_LABEL_COLOR, 10)
