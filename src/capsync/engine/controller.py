"""Application controller wiring capture state, adapters and sync."""

from __future__ import annotations

import asyncio
from typing import Any

from capsync.capture import CaptureOutcome, LocationCapture, PhotoCapture
from capsync.config import Settings
from capsync.interfaces import (
    DocumentStore,
    GeolocationProvider,
    ImagePicker,
    ObjectStore,
    PermissionSubsystem,
    PhotoConstraints,
    PositionOptions,
    PushDeliveryService,
    PushRegistrationProvider,
)
from capsync.logging import sync_logger
from capsync.models import (
    CapturedImage,
    CaptureSnapshot,
    CaptureState,
    GeoCoordinates,
    PhotoSource,
)
from capsync.notify import ExpoPushService, NotificationRegistrar, PushSender
from capsync.permissions import PermissionGate
from capsync.sync import NotificationStatus, SyncOrchestrator, SyncResult


class CaptureController:
    """Owns the capture state and drives every user-triggered action.

    This is the entry point a UI binds its buttons to. Capture actions only
    touch their own state field; ``sync`` hands a snapshot of the state and
    the cached push token to the orchestrator.

    Example:
        controller = CaptureController.from_settings(settings, ...)
        await controller.start()
        await controller.take_photo()
        await controller.locate()
        result = await controller.sync()
        await controller.aclose()
    """

    def __init__(
        self,
        gate: PermissionGate,
        photos: PhotoCapture,
        location: LocationCapture,
        registrar: NotificationRegistrar,
        orchestrator: SyncOrchestrator,
        push_sender: PushSender | None = None,
        notification_echo_timeout: float = 0.0,
    ) -> None:
        self.gate = gate
        self.state = CaptureState()
        self._photos = photos
        self._location = location
        self._registrar = registrar
        self._orchestrator = orchestrator
        self._push_sender = push_sender
        self._echo_timeout = notification_echo_timeout
        self._log = sync_logger()

        self._sync_task: asyncio.Task | None = None
        self._last_result: SyncResult | None = None
        self._last_echo: dict[str, Any] | None = None

    @classmethod
    def from_settings(
        cls,
        config: Settings,
        permissions: PermissionSubsystem,
        picker: ImagePicker,
        geolocation: GeolocationProvider,
        push_registration: PushRegistrationProvider,
        object_store: ObjectStore,
        document_store: DocumentStore,
        push_delivery: PushDeliveryService | None = None,
    ) -> CaptureController:
        """Build a controller from settings and platform bindings.

        When no push delivery service is given, the Expo push client is
        used with the configured endpoint and message text.
        """
        gate = PermissionGate(permissions, runtime_permissions=config.runtime_permissions)
        photos = PhotoCapture(
            picker,
            gate,
            PhotoConstraints(
                max_width=config.photo_max_width,
                max_height=config.photo_max_height,
            ),
        )
        location = LocationCapture(
            geolocation,
            gate,
            PositionOptions(
                timeout_ms=config.location_timeout_ms,
                maximum_age_ms=config.location_maximum_age_ms,
                distance_filter=config.location_distance_filter,
                enable_high_accuracy=config.location_high_accuracy,
            ),
        )
        if push_delivery is None:
            push_delivery = ExpoPushService(
                url=config.push_url,
                title=config.push_title,
                body=config.push_body,
                timeout=config.push_timeout,
            )
        push_sender = PushSender(push_delivery)
        orchestrator = SyncOrchestrator.from_settings(
            config, object_store, document_store, push_sender
        )
        return cls(
            gate,
            photos,
            location,
            NotificationRegistrar(push_registration),
            orchestrator,
            push_sender=push_sender,
            notification_echo_timeout=config.notification_echo_timeout,
        )

    @property
    def token(self) -> str | None:
        return self._registrar.token

    @property
    def is_syncing(self) -> bool:
        return self._sync_task is not None and not self._sync_task.done()

    @property
    def last_result(self) -> SyncResult | None:
        return self._last_result

    @property
    def last_echo(self) -> dict[str, Any] | None:
        """Foreground notification received during the last sync, if any."""
        return self._last_echo

    async def start(self) -> str | None:
        """One-time startup: register for push notifications.

        A missing token is not an error; every other capability keeps working.
        """
        return await self._registrar.register()

    async def take_photo(self) -> CaptureOutcome[CapturedImage]:
        return await self._capture_photo(PhotoSource.CAMERA)

    async def pick_photo(self) -> CaptureOutcome[CapturedImage]:
        return await self._capture_photo(PhotoSource.GALLERY)

    async def _capture_photo(self, source: PhotoSource) -> CaptureOutcome[CapturedImage]:
        outcome = await self._photos.capture(source)
        if outcome.ok:
            self.state.set_image(outcome.value)
        return outcome

    async def locate(self) -> CaptureOutcome[GeoCoordinates]:
        outcome = await self._location.capture()
        if outcome.ok:
            self.state.set_coordinates(outcome.value)
        return outcome

    def clear_image(self) -> None:
        self.state.set_image(None)

    async def sync(self) -> SyncResult:
        """Persist the current state.

        A trigger that arrives while a sync is running joins that sync and
        gets its result instead of starting another one.
        """
        if self.is_syncing:
            self._log.info("Sync already in flight, joining it")
            return await asyncio.shield(self._sync_task)

        self._sync_task = asyncio.create_task(
            self._run_sync(self.state.snapshot(), self._registrar.token)
        )
        return await asyncio.shield(self._sync_task)

    async def _run_sync(self, snapshot: CaptureSnapshot, token: str | None) -> SyncResult:
        self._last_echo = None
        async with self._registrar.foreground_listener() as listener:
            result = await self._orchestrator.sync_record(snapshot, token)

            if result.notification is NotificationStatus.SENT and self._echo_timeout > 0:
                self._last_echo = await listener.wait(self._echo_timeout)
            else:
                self._last_echo = listener.received

        if result.success:
            self._log.info("Document written with ID: %s", result.document_id)
        else:
            self._log.error(
                "Sync failed: code=%s, error=%s",
                result.error.code if result.error else None,
                result.error,
            )
        self._last_result = result
        return result

    async def aclose(self) -> None:
        """Wait for an in-flight sync and close owned network clients."""
        if self._sync_task is not None and not self._sync_task.done():
            await asyncio.gather(self._sync_task, return_exceptions=True)
        if self._push_sender is not None:
            await self._push_sender.close()
