"""In-memory stand-ins for the external collaborators."""

import threading
from typing import Any, Callable

from capsync.errors import NotificationSendFailed
from capsync.interfaces import (
    ObjectRef,
    PermissionRationale,
    PhotoConstraints,
    PickerResponse,
    Position,
    PositionError,
    PositionOptions,
)
from capsync.models import Capability, PermissionStatus, PhotoSource


class FakePermissionSubsystem:
    """OS permission subsystem with scripted request answers."""

    def __init__(
        self,
        granted: set[Capability] | None = None,
        answers: dict[Capability, PermissionStatus] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.granted = set(granted or ())
        self.answers = dict(answers or {})
        self.error = error
        self.checks: list[Capability] = []
        self.prompts: list[tuple[Capability, PermissionRationale | None]] = []

    async def check(self, capability: Capability) -> bool:
        self.checks.append(capability)
        if self.error is not None:
            raise self.error
        return capability in self.granted

    async def request(
        self,
        capability: Capability,
        rationale: PermissionRationale | None = None,
    ) -> PermissionStatus:
        self.prompts.append((capability, rationale))
        if self.error is not None:
            raise self.error
        status = self.answers.get(capability, PermissionStatus.DENIED)
        if status is PermissionStatus.GRANTED:
            self.granted.add(capability)
        return status


class FakePicker:
    def __init__(self, response: PickerResponse, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.launches: list[tuple[PhotoSource, PhotoConstraints]] = []

    async def launch(self, source: PhotoSource, constraints: PhotoConstraints) -> PickerResponse:
        self.launches.append((source, constraints))
        if self.error is not None:
            raise self.error
        return self.response


class FakeGeolocation:
    """Callback-based provider. Can answer inline, from a thread, or never."""

    def __init__(
        self,
        result: Position | PositionError | None,
        threaded: bool = False,
        error: Exception | None = None,
    ) -> None:
        self.result = result
        self.threaded = threaded
        self.error = error
        self.configurations: list[bool] = []
        self.requests: list[PositionOptions] = []

    def set_configuration(self, skip_permission_requests: bool) -> None:
        self.configurations.append(skip_permission_requests)

    def get_current_position(
        self,
        on_success: Callable[[Position], None],
        on_error: Callable[[PositionError], None],
        options: PositionOptions,
    ) -> None:
        self.requests.append(options)
        if self.error is not None:
            raise self.error
        if self.result is None:
            return

        def answer() -> None:
            if isinstance(self.result, PositionError):
                on_error(self.result)
            else:
                on_success(self.result)

        if self.threaded:
            threading.Thread(target=answer).start()
        else:
            answer()


class FakePushRegistration:
    def __init__(self, token: str | None = None, error: Exception | None = None) -> None:
        self.token = token
        self.error = error
        self.token_requests = 0
        self.listeners: list[Callable[[dict[str, Any]], Any]] = []

    async def get_device_token(self) -> str | None:
        self.token_requests += 1
        if self.error is not None:
            raise self.error
        return self.token

    def add_listener(self, handler: Callable[[dict[str, Any]], Any]) -> Callable[[], None]:
        self.listeners.append(handler)

        def remove() -> None:
            self.listeners.remove(handler)

        return remove

    def emit(self, event: dict[str, Any]) -> None:
        for handler in list(self.listeners):
            handler(event)


class InMemoryObjectStore:
    def __init__(
        self,
        url_prefix: str = "https://store/",
        fixed_url: str | None = None,
        fail: bool = False,
    ) -> None:
        self.url_prefix = url_prefix
        self.fixed_url = fixed_url
        self.fail = fail
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.puts: list[str] = []

    async def put(self, key: str, data: bytes, content_type: str) -> ObjectRef:
        self.puts.append(key)
        if self.fail:
            raise ConnectionError("object store unavailable")
        self.objects[key] = (data, content_type)
        return ObjectRef(key=key, bucket="test-bucket")

    async def get_download_url(self, ref: ObjectRef) -> str:
        if self.fixed_url is not None:
            return self.fixed_url
        return f"{self.url_prefix}{ref.key}"


class InMemoryDocumentStore:
    def __init__(
        self,
        fail_insert: bool = False,
        fail_read: bool = False,
        lose_writes: bool = False,
    ) -> None:
        self.fail_insert = fail_insert
        self.fail_read = fail_read
        self.lose_writes = lose_writes
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.inserts: list[tuple[str, dict[str, Any]]] = []
        self._next_id = 0

    async def insert(self, collection: str, record: dict[str, Any]) -> str:
        self.inserts.append((collection, dict(record)))
        if self.fail_insert:
            raise ConnectionError("document store unavailable")
        self._next_id += 1
        document_id = f"doc-{self._next_id}"
        if not self.lose_writes:
            self.collections.setdefault(collection, {})[document_id] = dict(record)
        return document_id

    async def get_by_id(self, collection: str, document_id: str) -> dict[str, Any] | None:
        if self.fail_read:
            raise TimeoutError("read timed out")
        document = self.collections.get(collection, {}).get(document_id)
        return dict(document) if document is not None else None


class RecordingPushService:
    def __init__(self, fail: bool = False, error: Exception | None = None) -> None:
        self.fail = fail
        self.error = error
        self.sent: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    async def send(self, token: str, payload: dict[str, Any]) -> None:
        self.sent.append((token, payload))
        if self.error is not None:
            raise self.error
        if self.fail:
            raise NotificationSendFailed("device not registered")

    async def close(self) -> None:
        self.closed = True
