"""Tests for the data model."""

import pytest
from pydantic import ValidationError

from capsync.models import (
    CapturedImage,
    CaptureRecord,
    CaptureState,
    GeoCoordinates,
    extension_of,
)


class TestExtension:
    @pytest.mark.parametrize(
        "uri, expected",
        [
            ("/data/user/0/cache/photo.JPG", "jpg"),
            ("file:///storage/emulated/0/DCIM/IMG_20240101.jpeg", "jpeg"),
            ("https://cdn.example.com/a/b/pic.png?token=abc#x", "png"),
            ("content://media/external/images/42", ""),
            ("relative/no_extension", ""),
        ],
    )
    def test_extension_of(self, uri, expected):
        assert extension_of(uri) == expected


class TestCapturedImage:
    def test_content_type_from_extension(self):
        image = CapturedImage.from_uri("file:///tmp/shot.HEIC", width=10, height=20)

        assert image.content_type == "image/heic"
        assert image.extension == "heic"
        assert (image.width, image.height) == (10, 20)

    def test_missing_extension_rejected(self):
        with pytest.raises(ValueError):
            CapturedImage.from_uri("content://media/1")

    def test_is_immutable(self):
        image = CapturedImage.from_uri("/tmp/a.jpg")

        with pytest.raises(AttributeError):
            image.uri = "/tmp/b.jpg"


class TestCaptureRecord:
    def test_document_uses_persisted_names(self):
        record = CaptureRecord(first="A", last="B", born=1990).with_image("https://store/img1")

        assert record.to_document() == {
            "first": "A",
            "last": "B",
            "born": 1990,
            "imageLocator": "https://store/img1",
        }

    def test_absent_fields_are_omitted(self):
        document = CaptureRecord(first="A", last="B", born=1990).to_document()

        assert set(document) == {"first", "last", "born"}

    def test_coordinates_must_come_together(self):
        with pytest.raises(ValidationError):
            CaptureRecord(first="A", last="B", born=1990, latitude=1.0)

    def test_with_coordinates(self):
        record = CaptureRecord(first="A", last="B", born=1990).with_coordinates(
            GeoCoordinates(latitude=-33.9, longitude=151.2)
        )

        assert (record.latitude, record.longitude) == (-33.9, 151.2)

    def test_accepts_alias_and_field_name(self):
        by_alias = CaptureRecord(first="A", last="B", born=1990, imageLocator="u")
        by_name = CaptureRecord(first="A", last="B", born=1990, image_locator="u")

        assert by_alias == by_name

    def test_is_frozen(self):
        record = CaptureRecord(first="A", last="B", born=1990)

        with pytest.raises(ValidationError):
            record.first = "C"

    def test_born_is_coerced_from_profile_strings(self):
        assert CaptureRecord(first="A", last="B", born="1990").born == 1990


class TestCaptureState:
    def test_snapshot_is_detached(self):
        state = CaptureState()
        state.set_image(CapturedImage.from_uri("/tmp/a.jpg"))
        snapshot = state.snapshot()

        state.set_image(None)
        state.set_coordinates(GeoCoordinates(latitude=1.0, longitude=2.0))

        assert snapshot.image.uri == "/tmp/a.jpg"
        assert snapshot.coordinates is None
