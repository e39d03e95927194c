"""Push registration, foreground listeners and notification dispatch."""

from capsync.notify.push import ExpoPushService, PushSender
from capsync.notify.registrar import ForegroundListener, NotificationRegistrar

__all__ = ["ExpoPushService", "ForegroundListener", "NotificationRegistrar", "PushSender"]
