"""
Canvas abstraction

The render functions in ``render/`` draw through the small Canvas protocol
instead of a QPainter directly. QPainterCanvas adapts a QPainter for the
widgets; RecordingCanvas keeps a list of draw operations so render output
can be checked without a window.

BackingStore tracks the offscreen image a view paints into. Its logical
size and its pixel size (logical * device pixel ratio) are tracked
separately and only a mismatch reallocates it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QImage, QPainter, QPen

from ..types import SurfaceSize
from .style import WaveformStyle


@runtime_checkable
class Canvas(Protocol):
    """Minimal 2D drawing surface used by the waveform painters."""

    def fill_rect(self, x: float, y: float, w: float, h: float, color: QColor) -> None:
        ...

    def line(
        self,
        x1: float, y1: float, x2: float, y2: float,
        color: QColor,
        width: float = 1.0,
        dash: Optional[Sequence[float]] = None,
    ) -> None:
        ...

    def circle(self, cx: float, cy: float, radius: float, color: QColor) -> None:
        ...

    def text(
        self,
        x: float, y: float, text: str,
        color: QColor,
        pixel_size: int = 10,
        align: str = "left",
    ) -> None:
        ...

    def set_clip(self, x: float, y: float, w: float, h: float) -> None:
        ...

    def clear_clip(self) -> None:
        ...


class QPainterCanvas:
    """Canvas backed by an active QPainter."""

    def __init__(self, painter: QPainter):
        self._painter = painter
        self._painter.setRenderHint(QPainter.RenderHint.Antialiasing, False)

    def fill_rect(self, x, y, w, h, color):
        self._painter.fillRect(QRectF(x, y, w, h), color)

    def line(self, x1, y1, x2, y2, color, width=1.0, dash=None):
        pen = QPen(color, width)
        if dash:
            # Qt dash lengths are in units of the pen width
            unit = width if width > 0 else 1.0
            pen.setDashPattern([d / unit for d in dash])
        self._painter.setPen(pen)
        self._painter.drawLine(QPointF(x1, y1), QPointF(x2, y2))

    def circle(self, cx, cy, radius, color):
        self._painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self._painter.setPen(Qt.PenStyle.NoPen)
        self._painter.setBrush(QBrush(color))
        self._painter.drawEllipse(QPointF(cx, cy), radius, radius)
        self._painter.setBrush(Qt.BrushStyle.NoBrush)
        self._painter.setRenderHint(QPainter.RenderHint.Antialiasing, False)

    def text(self, x, y, text, color, pixel_size=10, align="left"):
        self._painter.setPen(color)
        self._painter.setFont(WaveformStyle.small_font(pixel_size))
        if align == "left":
            self._painter.drawText(QPointF(x, y), text)
            return
        metrics = self._painter.fontMetrics()
        text_width = metrics.horizontalAdvance(text)
        offset = text_width if align == "right" else text_width / 2.0
        self._painter.drawText(QPointF(x - offset, y), text)

    def set_clip(self, x, y, w, h):
        self._painter.setClipRect(QRectF(x, y, w, h))

    def clear_clip(self):
        self._painter.setClipping(False)


@dataclass
class DrawOp:
    """One recorded draw call."""
    kind: str
    args: Dict[str, Any] = field(default_factory=dict)
    clip: Optional[Tuple[float, float, float, float]] = None


class RecordingCanvas:
    """Canvas that records operations instead of drawing."""

    def __init__(self):
        self.ops: List[DrawOp] = []
        self._clip: Optional[Tuple[float, float, float, float]] = None

    def _record(self, kind: str, **args) -> None:
        self.ops.append(DrawOp(kind, args, self._clip))

    def fill_rect(self, x, y, w, h, color):
        self._record("fill_rect", x=x, y=y, w=w, h=h, color=QColor(color))

    def line(self, x1, y1, x2, y2, color, width=1.0, dash=None):
        self._record(
            "line", x1=x1, y1=y1, x2=x2, y2=y2, color=QColor(color),
            width=width, dash=list(dash) if dash else None,
        )

    def circle(self, cx, cy, radius, color):
        self._record("circle", cx=cx, cy=cy, radius=radius, color=QColor(color))

    def text(self, x, y, text, color, pixel_size=10, align="left"):
        self._record("text", x=x, y=y, text=text, color=QColor(color), pixel_size=pixel_size, align=align)

    def set_clip(self, x, y, w, h):
        self._clip = (x, y, w, h)

    def clear_clip(self):
        self._clip = None

    def of_kind(self, kind: str) -> List[DrawOp]:
        return [op for op in self.ops if op.kind == kind]

    def texts(self) -> List[str]:
        return [op.args["text"] for op in self.of_kind("text")]


class BackingStore:
    """
    Offscreen image sized to logical size * device pixel ratio.

    ensure() reallocates only on a size or ratio mismatch and reports
    whether it did, so callers know when a full repaint is due.
    """

    def __init__(self):
        self._size: Optional[SurfaceSize] = None
        self._image: Optional[QImage] = None
        self.resize_count = 0

    @property
    def size(self) -> Optional[SurfaceSize]:
        return self._size

    @property
    def image(self) -> Optional[QImage]:
        return self._image

    def ensure(self, size: SurfaceSize) -> bool:
        """Match the backing image to size. Returns True if it was reallocated."""
        if self._image is not None and size == self._size:
            return False
        image = QImage(size.backing_width, size.backing_height, QImage.Format.Format_ARGB32_Premultiplied)
        image.setDevicePixelRatio(size.device_pixel_ratio)
        image.fill(Qt.GlobalColor.transparent)
        self._image = image
        self._size = size
        self.resize_count += 1
        return True

    def release(self) -> None:
        self._image = None
        self._size = None
