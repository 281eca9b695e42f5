"""
Shared status module.

User-facing notification channel:
- NotificationCenter: publish/subscribe channel with history
- QtNotificationCenter: same, plus a Qt signal for widgets
- Notification / Severity: the message structure and its levels
"""
from .notification_center import (
    Notification,
    NotificationCenter,
    NotificationSink,
    QtNotificationCenter,
    Severity,
)

__all__ = [
    'Notification',
    'NotificationCenter',
    'NotificationSink',
    'QtNotificationCenter',
    'Severity',
]
