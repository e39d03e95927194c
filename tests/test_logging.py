"""Tests for structured logging."""

import json
import logging

import pytest

import capsync.logging as capsync_logging
from capsync import __version__
from capsync.logging import (
    CapsyncJsonFormatter,
    log_document_written,
    log_notification_sent,
    log_push_unavailable,
    mask_token,
    notify_logger,
    setup_logging,
    sync_logger,
)


@pytest.fixture
def restore_root_logger(monkeypatch):
    monkeypatch.setattr(capsync_logging, "_device_id", None)
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, CapsyncJsonFormatter):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def make_record(msg="hello %s", args=("world",), **extra) -> logging.LogRecord:
    record = logging.LogRecord("capsync.sync", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatter:
    def test_standard_fields(self, monkeypatch):
        monkeypatch.setattr(capsync_logging, "_device_id", None)

        output = json.loads(CapsyncJsonFormatter().format(make_record()))

        assert output["message"] == "hello world"
        assert output["level"] == "INFO"
        assert output["logger"] == "capsync.sync"
        assert output["app_version"] == __version__
        assert output["timestamp"].endswith("+00:00")
        assert "device_id" not in output

    def test_extra_fields_are_included(self):
        output = json.loads(CapsyncJsonFormatter().format(make_record(document_id="doc-1")))

        assert output["document_id"] == "doc-1"

    def test_device_id(self, monkeypatch):
        monkeypatch.setattr(capsync_logging, "_device_id", None)
        capsync_logging.set_device_id("pixel-7")

        output = json.loads(CapsyncJsonFormatter().format(make_record()))

        assert output["device_id"] == "pixel-7"


class TestMaskToken:
    @pytest.mark.parametrize(
        "token, expected",
        [
            (None, None),
            ("", None),
            ("short", "***"),
            ("ExponentPushToken[abc]", "Expone..."),
        ],
    )
    def test_mask(self, token, expected):
        assert mask_token(token) == expected


class TestSetupLogging:
    def test_writes_json_to_file(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "capsync.log"

        setup_logging("info", log_file=log_file, device_id="dev-1")
        sync_logger().info("Upload successful", extra={"key": "test-app/newImage.jpg"})
        for handler in restore_root_logger.handlers:
            handler.flush()

        line = log_file.read_text().strip().splitlines()[-1]
        output = json.loads(line)
        assert output["message"] == "Upload successful"
        assert output["key"] == "test-app/newImage.jpg"
        assert output["device_id"] == "dev-1"
        assert restore_root_logger.level == logging.INFO

    def test_replaces_existing_handlers(self, restore_root_logger):
        setup_logging("WARNING")
        setup_logging("WARNING")

        assert len(restore_root_logger.handlers) == 1


class TestAuditEvents:
    def test_notification_token_is_masked(self, caplog):
        caplog.set_level(logging.INFO, logger="capsync.notify")

        log_notification_sent(notify_logger(), "ExponentPushToken[abc]")

        record = caplog.records[-1]
        assert record.event == "notification_sent"
        assert record.token == "Expone..."

    def test_push_unavailable_without_reason(self, caplog):
        caplog.set_level(logging.INFO, logger="capsync.notify")

        log_push_unavailable(notify_logger())

        record = caplog.records[-1]
        assert record.event == "push_unavailable"
        assert not hasattr(record, "reason")

    def test_document_written(self, caplog):
        caplog.set_level(logging.INFO, logger="capsync.sync")

        log_document_written(sync_logger(), "users", "doc-1", ["born", "first", "last"])

        record = caplog.records[-1]
        assert record.collection == "users"
        assert record.document_id == "doc-1"
        assert record.fields == ["born", "first", "last"]
