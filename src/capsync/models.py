"""Data model: captured inputs and the record persisted to the document store."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Capability(str, Enum):
    """A gated device feature."""

    CAMERA = "camera"
    LOCATION = "location"


class PermissionStatus(str, Enum):
    """Permission state for one capability."""

    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"
    PERMANENTLY_DENIED = "permanently_denied"


class PhotoSource(str, Enum):
    CAMERA = "camera"
    GALLERY = "gallery"


def extension_of(uri: str) -> str:
    """Return the lower-cased file extension of a path, file URI or URL.

    Query strings and fragments are ignored. Returns an empty string when
    the last path segment has no extension.
    """
    path = urlparse(uri).path if "://" in uri else uri
    return PurePosixPath(path).suffix.lstrip(".").lower()


@dataclass(frozen=True)
class CapturedImage:
    """A local image handle picked from the camera or the gallery."""

    uri: str
    content_type: str
    extension: str
    width: int | None = None
    height: int | None = None

    @classmethod
    def from_uri(
        cls,
        uri: str,
        width: int | None = None,
        height: int | None = None,
    ) -> CapturedImage:
        """Build an image handle, inferring the content type from the extension.

        Raises:
            ValueError: If the URI has no file extension
        """
        ext = extension_of(uri)
        if not ext:
            raise ValueError(f"Cannot infer content type, no extension: {uri}")
        return cls(
            uri=uri,
            content_type=f"image/{ext}",
            extension=ext,
            width=width,
            height=height,
        )


@dataclass(frozen=True)
class GeoCoordinates:
    """A single position fix. Both values are always present."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class CaptureSnapshot:
    """Immutable view of the capture state taken at sync time."""

    image: CapturedImage | None = None
    coordinates: GeoCoordinates | None = None


@dataclass
class CaptureState:
    """Mutable capture state owned by the controller.

    Each field is replaced wholesale; the orchestrator only ever sees a
    snapshot.
    """

    image: CapturedImage | None = None
    coordinates: GeoCoordinates | None = None

    def set_image(self, image: CapturedImage | None) -> None:
        self.image = image

    def set_coordinates(self, coordinates: GeoCoordinates) -> None:
        self.coordinates = coordinates

    def snapshot(self) -> CaptureSnapshot:
        return CaptureSnapshot(image=self.image, coordinates=self.coordinates)


class CaptureRecord(BaseModel):
    """The logical record written to the document store.

    Serialized with the persisted key names (``imageLocator``, ``latitude``,
    ``longitude``); absent optional fields are omitted from the document.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    first: str
    last: str
    born: int
    image_locator: str | None = Field(default=None, alias="imageLocator")
    latitude: float | None = None
    longitude: float | None = None

    @model_validator(mode="after")
    def check_coordinates(self) -> CaptureRecord:
        """Latitude and longitude are set together or not at all."""
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be set together")
        return self

    def with_image(self, locator: str) -> CaptureRecord:
        return self.model_copy(update={"image_locator": locator})

    def with_coordinates(self, coordinates: GeoCoordinates) -> CaptureRecord:
        return self.model_copy(
            update={
                "latitude": coordinates.latitude,
                "longitude": coordinates.longitude,
            }
        )

    def to_document(self) -> dict[str, Any]:
        """Return the document payload with persisted key names."""
        return self.model_dump(by_alias=True, exclude_none=True)
