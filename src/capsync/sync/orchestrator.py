"""Sync orchestrator: upload, persist, verify, notify."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from capsync.config import Settings
from capsync.errors import SyncError, UploadFailed, WriteFailed
from capsync.interfaces import DocumentStore, ObjectStore
from capsync.logging import (
    log_document_written,
    log_notification_skipped,
    log_upload_failed,
    log_upload_success,
    sync_logger,
)
from capsync.models import CapturedImage, CaptureRecord, CaptureSnapshot
from capsync.notify.push import PushSender
from capsync.sync.content import load_image_bytes

ContentLoader = Callable[[CapturedImage], Awaitable[bytes]]


class NotificationStatus(str, Enum):
    """What happened to the post-sync notification."""

    NOT_ATTEMPTED = "not_attempted"  # the sync aborted before step 6
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class SyncResult:
    """Result of one sync attempt."""

    success: bool
    document_id: str | None = None
    document: dict[str, Any] | None = None
    error: SyncError | None = None
    notification: NotificationStatus = NotificationStatus.NOT_ATTEMPTED


class SyncOrchestrator:
    """Composes a record from captured state and persists it.

    Steps run strictly in order and each commits on its own:

    1. upload the held image (if any) and resolve its download URL
    2. attach coordinates (if any)
    3. insert the record into the collection
    4. read the document back by id
    5. notify the device if a token is cached and the read-back succeeded

    A failed upload aborts before anything is written. A failed insert
    aborts the sync. Read-back and notification problems never fail it.

    Example:
        orchestrator = SyncOrchestrator.from_settings(settings, objects, documents, sender)
        result = await orchestrator.sync_record(state.snapshot(), token)
    """

    def __init__(
        self,
        object_store: ObjectStore,
        document_store: DocumentStore,
        push_sender: PushSender,
        identity: dict[str, Any],
        collection: str = "users",
        namespace: str = "test-app",
        object_name: str = "newImage",
        content_loader: ContentLoader = load_image_bytes,
    ) -> None:
        self._objects = object_store
        self._documents = document_store
        self._push = push_sender
        # Fails at construction, not halfway through a sync
        self._base_record = CaptureRecord(**identity)
        self.identity = dict(identity)
        self.collection = collection
        self.namespace = namespace.strip("/")
        self.object_name = object_name
        self._load_content = content_loader
        self._log = sync_logger()

    @classmethod
    def from_settings(
        cls,
        config: Settings,
        object_store: ObjectStore,
        document_store: DocumentStore,
        push_sender: PushSender,
    ) -> SyncOrchestrator:
        return cls(
            object_store,
            document_store,
            push_sender,
            identity=config.load_identity(),
            collection=config.collection,
            namespace=config.storage_namespace,
            object_name=config.image_object_name,
        )

    def image_key(self, image: CapturedImage) -> str:
        """Fixed destination key; every upload overwrites the same object."""
        return f"{self.namespace}/{self.object_name}.{image.extension}"

    def build_record(
        self,
        state: CaptureSnapshot,
        image_locator: str | None = None,
    ) -> CaptureRecord:
        """Build the record for ``state``.

        ``image_locator`` must be given exactly when the state holds an image.

        Raises:
            ValueError: If the locator does not match the held image
        """
        if (state.image is None) != (image_locator is None):
            raise ValueError("image_locator must be given iff the state holds an image")

        record = self._base_record
        if image_locator is not None:
            record = record.with_image(image_locator)
        if state.coordinates is not None:
            record = record.with_coordinates(state.coordinates)
        return record

    async def upload_image(self, image: CapturedImage) -> str:
        """Upload the image bytes and return their download URL.

        Raises:
            UploadFailed: If reading, uploading or resolving the URL fails
        """
        key = self.image_key(image)
        started = time.monotonic()
        self._log.debug("Uploading image: uri=%s, key=%s", image.uri, key)

        try:
            data = await self._load_content(image)
            ref = await self._objects.put(key, data, image.content_type)
            url = await self._objects.get_download_url(ref)
        except Exception as e:
            log_upload_failed(self._log, key, str(e))
            raise UploadFailed(key, str(e)) from e

        log_upload_success(self._log, key, len(data), (time.monotonic() - started) * 1000)
        return url

    async def sync_record(
        self,
        state: CaptureSnapshot,
        token: str | None = None,
    ) -> SyncResult:
        """Run one sync attempt for ``state``.

        Args:
            state: Snapshot of the captured image and coordinates
            token: Cached device push token, if any

        Returns:
            SyncResult; ``error`` is UploadFailed or WriteFailed on abort
        """
        image_locator = None
        if state.image is not None:
            try:
                image_locator = await self.upload_image(state.image)
            except UploadFailed as e:
                return SyncResult(success=False, error=e)

        record = self.build_record(state, image_locator)
        document = record.to_document()

        try:
            document_id = await self._documents.insert(self.collection, document)
        except Exception as e:
            self._log.error("Error adding document: %s", e)
            return SyncResult(success=False, error=WriteFailed(self.collection, str(e)))

        log_document_written(self._log, self.collection, document_id, sorted(document))

        persisted = await self._read_back(document_id)

        if token and persisted is not None:
            sent = await self._push.send_notification(token, persisted)
            notification = NotificationStatus.SENT if sent else NotificationStatus.FAILED
        else:
            reason = "no_token" if not token else "document_not_found"
            log_notification_skipped(self._log, reason)
            notification = NotificationStatus.SKIPPED

        return SyncResult(
            success=True,
            document_id=document_id,
            document=persisted,
            notification=notification,
        )

    async def _read_back(self, document_id: str) -> dict[str, Any] | None:
        try:
            persisted = await self._documents.get_by_id(self.collection, document_id)
        except Exception as e:
            self._log.warning("Read-back failed: document_id=%s, error=%s", document_id, e)
            return None

        if persisted is None:
            self._log.warning("Read-back found no document: document_id=%s", document_id)
        return persisted
