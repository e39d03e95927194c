"""Sync module: content loading and the record sync orchestrator."""

from capsync.sync.content import load_image_bytes
from capsync.sync.orchestrator import NotificationStatus, SyncOrchestrator, SyncResult

__all__ = ["NotificationStatus", "SyncOrchestrator", "SyncResult", "load_image_bytes"]
