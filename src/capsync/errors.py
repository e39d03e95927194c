"""Error taxonomy for capture and sync failures."""


class CapsyncError(Exception):
    """Base error. ``code`` is a stable machine-readable identifier."""

    code = "capsync_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# --- Capture-level errors: terminate one capture attempt only ---


class CaptureError(CapsyncError):
    code = "capture_error"


class PermissionDenied(CaptureError):
    code = "permission_denied"

    def __init__(self, capability: str, permanent: bool = False) -> None:
        state = "permanently denied" if permanent else "denied"
        super().__init__(f"{capability} permission {state}")
        self.capability = capability
        self.permanent = permanent


class CaptureCancelled(CaptureError):
    code = "capture_cancelled"

    def __init__(self, kind: str) -> None:
        super().__init__(f"{kind} capture cancelled by user")
        self.kind = kind


class CaptureFailed(CaptureError):
    code = "capture_failed"

    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(f"[{error_code}] {message}")
        self.error_code = error_code
        self.message = message


# --- Sync-level errors: abort the whole sync attempt ---


class SyncError(CapsyncError):
    code = "sync_error"


class UploadFailed(SyncError):
    code = "upload_failed"

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Upload of {key} failed: {reason}")
        self.key = key
        self.reason = reason


class WriteFailed(SyncError):
    code = "write_failed"

    def __init__(self, collection: str, reason: str) -> None:
        super().__init__(f"Write to {collection} failed: {reason}")
        self.collection = collection
        self.reason = reason


# --- Notification errors: always swallowed ---


class NotificationSendFailed(CapsyncError):
    code = "notification_send_failed"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Notification dispatch failed: {reason}")
        self.reason = reason
