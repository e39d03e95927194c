"""Structured JSON logging for capsync.

Provides audit-friendly logging with contextual fields for permission
prompts, captures, uploads, document writes and notifications. Device tokens
are never logged in full.

Usage:
    from capsync.logging import setup_logging, get_logger

    setup_logging("INFO")
    log = get_logger("capsync.sync")
    log.info("document_written", extra={"document_id": "abc123"})
"""

from __future__ import annotations

import logging
import sys
from functools import lru_cache
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pythonjsonlogger import jsonlogger

from capsync import __version__

# Optional device identifier added to every record
_device_id: str | None = None


class CapsyncJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that adds app context to all log records."""

    def add_fields(
        self,
        log_record: dict,
        record: logging.LogRecord,
        message_dict: dict,
    ) -> None:
        """Add standard fields to every log record."""
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        log_record["app_version"] = __version__
        if _device_id:
            log_record["device_id"] = _device_id

        if "message" not in log_record and record.getMessage():
            log_record["message"] = record.getMessage()

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        """Format time as ISO 8601."""
        from datetime import datetime, timezone

        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return dt.isoformat()


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    device_id: str | None = None,
    max_bytes: int = 10_000_000,  # 10MB
    backup_count: int = 5,
) -> None:
    """Configure root logger with JSON formatting.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path for rotating file handler
        device_id: Identifier for this device, added to every record
        max_bytes: Max size per log file for rotation
        backup_count: Number of backup files to keep
    """
    global _device_id
    if device_id:
        _device_id = device_id

    formatter = CapsyncJsonFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


@lru_cache(maxsize=32)
def get_logger(name: str) -> logging.Logger:
    """Get a named logger.

    Args:
        name: Logger name (e.g., 'capsync.capture', 'capsync.sync')

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def set_device_id(device_id: str) -> None:
    """Set the device identifier for log context."""
    global _device_id
    _device_id = device_id


def permission_logger() -> logging.Logger:
    """Get logger for permission prompts and checks."""
    return get_logger("capsync.permissions")


def capture_logger() -> logging.Logger:
    """Get logger for capture events."""
    return get_logger("capsync.capture")


def sync_logger() -> logging.Logger:
    """Get logger for upload and document store events."""
    return get_logger("capsync.sync")


def notify_logger() -> logging.Logger:
    """Get logger for push registration and delivery."""
    return get_logger("capsync.notify")


def mask_token(token: str | None) -> str | None:
    """Shorten a device token to a loggable prefix."""
    if not token:
        return None
    if len(token) <= 8:
        return "***"
    return f"{token[:6]}..."


# --- Audit Event Functions ---


def log_permission_result(
    logger: logging.Logger,
    capability: str,
    status: str,
    prompted: bool,
) -> None:
    """Log the outcome of a permission check or request.

    Args:
        logger: Logger instance
        capability: Capability name (camera, location)
        status: Resulting permission status
        prompted: Whether an OS dialog was shown
    """
    level = logging.INFO if status == "granted" else logging.WARNING
    logger.log(
        level,
        "Permission %s",
        status,
        extra={
            "event": "permission_result",
            "capability": capability,
            "status": status,
            "prompted": prompted,
        },
    )


def log_capture_taken(
    logger: logging.Logger,
    kind: str,
    source: str | None = None,
) -> None:
    """Log a successful capture.

    Args:
        logger: Logger instance
        kind: What was captured (photo, location)
        source: Optional capture source (camera, gallery)
    """
    extra = {"event": "capture_taken", "kind": kind}
    if source:
        extra["source"] = source
    logger.info("Capture taken", extra=extra)


def log_capture_skipped(
    logger: logging.Logger,
    kind: str,
    reason: str,
    error_code: str | None = None,
    error_message: str | None = None,
) -> None:
    """Log a capture that ended without a value.

    Args:
        logger: Logger instance
        kind: What was being captured (photo, location)
        reason: cancelled, failed or denied
        error_code: Provider error code, if any
        error_message: Provider error message, if any
    """
    extra = {"event": "capture_skipped", "kind": kind, "reason": reason}
    if error_code is not None:
        extra["error_code"] = error_code
    if error_message:
        extra["error_message"] = error_message
    level = logging.WARNING if reason == "failed" else logging.INFO
    logger.log(level, "Capture skipped", extra=extra)


def log_upload_success(
    logger: logging.Logger,
    key: str,
    size: int,
    duration_ms: float,
) -> None:
    """Log a successful object upload.

    Args:
        logger: Logger instance
        key: Object storage key
        size: Payload size in bytes
        duration_ms: Upload plus locator lookup time in milliseconds
    """
    logger.info(
        "Upload successful",
        extra={
            "event": "upload_success",
            "key": key,
            "size": size,
            "duration_ms": duration_ms,
        },
    )


def log_upload_failed(logger: logging.Logger, key: str, error: str) -> None:
    """Log a failed object upload."""
    logger.error(
        "Upload failed",
        extra={"event": "upload_failed", "key": key, "error": error},
    )


def log_document_written(
    logger: logging.Logger,
    collection: str,
    document_id: str,
    fields: list[str],
) -> None:
    """Log a document insert.

    Args:
        logger: Logger instance
        collection: Target collection
        document_id: Generated document identifier
        fields: Names of the fields written (values are not logged)
    """
    logger.info(
        "Document written",
        extra={
            "event": "document_written",
            "collection": collection,
            "document_id": document_id,
            "fields": fields,
        },
    )


def log_notification_sent(logger: logging.Logger, token: str) -> None:
    """Log a dispatched push notification."""
    logger.info(
        "Notification sent",
        extra={"event": "notification_sent", "token": mask_token(token)},
    )


def log_notification_skipped(logger: logging.Logger, reason: str) -> None:
    """Log a notification that was not attempted."""
    logger.info(
        "Notification skipped",
        extra={"event": "notification_skipped", "reason": reason},
    )


def log_notification_failed(logger: logging.Logger, token: str, error: str) -> None:
    """Log a failed push dispatch. Never surfaced to the user."""
    logger.warning(
        "Notification failed",
        extra={
            "event": "notification_failed",
            "token": mask_token(token),
            "error": error,
        },
    )


def log_push_registered(logger: logging.Logger, token: str) -> None:
    """Log an acquired device push token (masked)."""
    logger.info(
        "Notification token acquired",
        extra={"event": "push_registered", "token": mask_token(token)},
    )


def log_push_unavailable(logger: logging.Logger, reason: str | None = None) -> None:
    """Log that the platform gave no push token.

    Args:
        logger: Logger instance
        reason: Provider error text, if registration raised
    """
    extra = {"event": "push_unavailable"}
    if reason:
        extra["reason"] = reason
    logger.info("No notification token found", extra=extra)
