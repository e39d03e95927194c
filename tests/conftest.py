"""Shared fixtures for capsync tests."""

import pytest

from capsync.config import get_settings
from capsync.models import CapturedImage
from capsync.notify import PushSender
from capsync.sync import SyncOrchestrator

from fakes import InMemoryDocumentStore, InMemoryObjectStore, RecordingPushService

IDENTITY = {"first": "A", "last": "B", "born": 1990}


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch, tmp_path):
    """Isolate tests from the developer's environment and profile file."""
    monkeypatch.setenv("CAPSYNC_PROFILE_FILE", str(tmp_path / "missing-profile.yaml"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def object_store():
    return InMemoryObjectStore()


@pytest.fixture
def document_store():
    return InMemoryDocumentStore()


@pytest.fixture
def push_service():
    return RecordingPushService()


@pytest.fixture
def image_file(tmp_path):
    """A small JPEG-named file on disk."""
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg")
    return path


@pytest.fixture
def image(image_file):
    return CapturedImage.from_uri(f"file://{image_file}")


@pytest.fixture
def orchestrator(object_store, document_store, push_service):
    return SyncOrchestrator(
        object_store,
        document_store,
        PushSender(push_service),
        identity=IDENTITY,
    )
