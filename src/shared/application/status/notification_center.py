"""
Notification Center

User-facing notification channel for playback, fetch and decode failures.

Any object with ``notify(message, severity)`` can act as a notification sink;
NotificationCenter is the default one. It fans notifications out to
subscribed handlers (status bar, toast widget, tests) and keeps a bounded
history.

Usage:
    center = NotificationCenter()
    center.subscribe(lambda n: print(f"[{n.severity.name}] {n.message}"))
    center.notify("Could not load waveform", Severity.ERROR)

    # Route Log warnings/errors into the same channel
    Log.set_notification_sink(center)
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from threading import Lock
from typing import Callable, Dict, Any, List, Optional, Protocol, Union, runtime_checkable

from PyQt6.QtCore import QObject, pyqtSignal

from src.utils.message import Log


class Severity(Enum):
    """Notification severity, ordered lowest to highest."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def color(self) -> str:
        colors = {
            Severity.INFO: "#2196F3",
            Severity.WARNING: "#FF9800",
            Severity.ERROR: "#F44336",
        }
        return colors[self]

    @classmethod
    def coerce(cls, value: Union["Severity", str, None]) -> "Severity":
        """
        Accept a Severity, a severity name, or a logging level name.

        CRITICAL maps to ERROR and DEBUG to INFO; unknown values are INFO.
        """
        if isinstance(value, Severity):
            return value
        if not value:
            return cls.INFO
        name = str(value).strip().upper()
        if name == "CRITICAL":
            return cls.ERROR
        try:
            return cls[name]
        except KeyError:
            return cls.INFO


@runtime_checkable
class NotificationSink(Protocol):
    """Anything that accepts a human-readable message and a severity."""

    def notify(self, message: str, severity: Union[Severity, str] = Severity.INFO) -> None:
        ...


@dataclass
class Notification:
    """
    A single user-facing notification.

    Attributes:
        message: Human-readable text
        severity: Severity level
        source: Component that raised it (e.g. "PlaybackEngine")
        timestamp: When it was posted
    """
    message: str
    severity: Severity = Severity.INFO
    source: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "severity": self.severity.value,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
        }


NotificationHandler = Callable[[Notification], None]


class NotificationCenter:
    """
    Thread-safe publish/subscribe notification channel with history.

    Handlers are called outside the lock; a failing handler is logged and
    does not stop delivery to the others.
    """

    def __init__(self, max_history: int = 100):
        self._max_history = max_history
        self._history: List[Notification] = []
        self._handlers: List[NotificationHandler] = []
        self._lock = Lock()

    @property
    def history(self) -> List[Notification]:
        with self._lock:
            return self._history.copy()

    @property
    def latest(self) -> Optional[Notification]:
        with self._lock:
            return self._history[-1] if self._history else None

    def notify(
        self,
        message: str,
        severity: Union[Severity, str] = Severity.INFO,
        source: str = "",
    ) -> Notification:
        """
        Post a notification to every subscriber.

        Args:
            message: Human-readable text
            severity: Severity or level name ("warning", "ERROR", ...)
            source: Optional originating component name
        """
        notification = Notification(
            message=message,
            severity=Severity.coerce(severity),
            source=source,
        )

        with self._lock:
            self._history.append(notification)
            if len(self._history) > self._max_history:
                self._history = self._history[-self._max_history:]
            handlers_to_notify = self._handlers.copy()

        for handler in handlers_to_notify:
            try:
                handler(notification)
            except Exception as e:
                Log.debug(f"NotificationCenter: Handler failed: {e}")

        return notification

    def subscribe(self, handler: NotificationHandler) -> None:
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)

    def unsubscribe(self, handler: NotificationHandler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()


class QtNotificationCenter(QObject, NotificationCenter):
    """
    NotificationCenter that also emits a Qt signal, for wiring widgets
    (status bar, toast) directly.
    """

    notification_posted = pyqtSignal(dict)

    def __init__(self, max_history: int = 100, parent: Optional[QObject] = None):
        QObject.__init__(self, parent)
        NotificationCenter.__init__(self, max_history=max_history)

    def notify(
        self,
        message: str,
        severity: Union[Severity, str] = Severity.INFO,
        source: str = "",
    ) -> Notification:
        notification = super().notify(message, severity, source)
        self.notification_posted.emit(notification.to_dict())
        return notification
