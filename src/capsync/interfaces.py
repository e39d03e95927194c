"""Interfaces of the external collaborators consumed by capsync.

Kept small and framework-agnostic so platform bindings and tests can supply
simple implementations. Nothing here is implemented by capsync itself except
the push delivery client in ``capsync.notify.push``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from capsync.models import Capability, PermissionStatus, PhotoSource


@dataclass(frozen=True)
class ObjectRef:
    """Reference to an uploaded object, as returned by ``ObjectStore.put``."""

    key: str
    bucket: str | None = None


class ObjectStore(Protocol):
    async def put(self, key: str, data: bytes, content_type: str) -> ObjectRef: ...

    async def get_download_url(self, ref: ObjectRef) -> str: ...


class DocumentStore(Protocol):
    async def insert(self, collection: str, record: dict[str, Any]) -> str: ...

    async def get_by_id(self, collection: str, document_id: str) -> dict[str, Any] | None: ...


class PushDeliveryService(Protocol):
    """Best-effort push transport. No delivery receipt is consumed."""

    async def send(self, token: str, payload: dict[str, Any]) -> None: ...


@dataclass(frozen=True)
class PermissionRationale:
    """Text shown in the OS dialog when a capability is requested."""

    title: str
    message: str
    button_neutral: str | None = None
    button_negative: str | None = None
    button_positive: str | None = None


class PermissionSubsystem(Protocol):
    async def check(self, capability: Capability) -> bool: ...

    async def request(
        self,
        capability: Capability,
        rationale: PermissionRationale | None = None,
    ) -> PermissionStatus: ...


@dataclass(frozen=True)
class PhotoConstraints:
    max_width: int = 2000
    max_height: int = 2000
    media_type: str = "photo"
    include_base64: bool = False


@dataclass(frozen=True)
class PickedAsset:
    uri: str | None
    width: int | None = None
    height: int | None = None
    file_name: str | None = None


@dataclass(frozen=True)
class PickerResponse:
    """What the camera or gallery picker reports back."""

    did_cancel: bool = False
    error_code: str | None = None
    error_message: str | None = None
    assets: list[PickedAsset] = field(default_factory=list)


class ImagePicker(Protocol):
    async def launch(self, source: PhotoSource, constraints: PhotoConstraints) -> PickerResponse: ...


@dataclass(frozen=True)
class PositionOptions:
    timeout_ms: int = 15_000
    maximum_age_ms: int = 10_000
    distance_filter: float = 0.0
    enable_high_accuracy: bool = False


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float
    accuracy: float | None = None
    timestamp: float | None = None


@dataclass(frozen=True)
class PositionError:
    code: int
    message: str


class GeolocationProvider(Protocol):
    """Callback-based geolocation, as exposed by the platform."""

    def set_configuration(self, skip_permission_requests: bool) -> None: ...

    def get_current_position(
        self,
        on_success: Callable[[Position], None],
        on_error: Callable[[PositionError], None],
        options: PositionOptions,
    ) -> None: ...


ForegroundHandler = Callable[[dict[str, Any]], Any]


class PushRegistrationProvider(Protocol):
    async def get_device_token(self) -> str | None: ...

    def add_listener(self, handler: ForegroundHandler) -> Callable[[], None]: ...

