"""Photo capture from the camera or the gallery."""

from capsync.capture.outcome import CaptureOutcome
from capsync.interfaces import ImagePicker, PhotoConstraints, PickerResponse
from capsync.logging import capture_logger, log_capture_skipped, log_capture_taken
from capsync.models import Capability, CapturedImage, PermissionStatus, PhotoSource
from capsync.permissions import PermissionGate

PERMISSION_ERROR = "permission_error"
PICKER_ERROR = "picker_error"


class PhotoCapture:
    """Acquires one image from the platform picker.

    The camera source asks for the camera permission right before launching
    the picker; the gallery source is not gated.

    Example:
        photos = PhotoCapture(picker, gate)
        outcome = await photos.capture(PhotoSource.CAMERA)
        if outcome.ok:
            print(outcome.value.uri)
    """

    def __init__(
        self,
        picker: ImagePicker,
        gate: PermissionGate,
        constraints: PhotoConstraints | None = None,
    ) -> None:
        self._picker = picker
        self._gate = gate
        self.constraints = constraints or PhotoConstraints()
        self._log = capture_logger()

    async def capture(self, source: PhotoSource) -> CaptureOutcome[CapturedImage]:
        """Launch the picker for ``source`` and interpret its response.

        Errors raised by the permission subsystem or the picker are logged
        and reported as a failed outcome.
        """
        if source is PhotoSource.CAMERA:
            try:
                status = await self._gate.request_capability(Capability.CAMERA)
            except Exception as e:
                return self._failed(PERMISSION_ERROR, e)
            if status is not PermissionStatus.GRANTED:
                outcome = CaptureOutcome.denied(
                    Capability.CAMERA.value,
                    permanent=status is PermissionStatus.PERMANENTLY_DENIED,
                )
                log_capture_skipped(self._log, "photo", outcome.kind.value)
                return outcome

        try:
            response = await self._picker.launch(source, self.constraints)
        except Exception as e:
            return self._failed(PICKER_ERROR, e)
        outcome = self.interpret(response)

        if outcome.ok:
            log_capture_taken(self._log, "photo", source.value)
        else:
            error = outcome.error
            log_capture_skipped(
                self._log,
                "photo",
                outcome.kind.value,
                error_code=getattr(error, "error_code", None),
                error_message=error.message if error else None,
            )
        return outcome

    def _failed(self, code: str, error: Exception) -> CaptureOutcome[CapturedImage]:
        self._log.warning("Photo capture error: %s", error, exc_info=True)
        log_capture_skipped(self._log, "photo", "failed", error_code=code, error_message=str(error))
        return CaptureOutcome.failed(code, str(error))

    @staticmethod
    def interpret(response: PickerResponse) -> CaptureOutcome[CapturedImage]:
        """Map a picker response onto a capture outcome.

        Cancellation wins over errors, errors win over assets, and only the
        first asset is considered.
        """
        if response.did_cancel:
            return CaptureOutcome.cancelled("photo")

        if response.error_code:
            return CaptureOutcome.failed(
                response.error_code,
                response.error_message or "image picker error",
            )

        if not response.assets:
            return CaptureOutcome.failed("no_assets", "No assets found in the response")

        asset = response.assets[0]
        if not asset.uri:
            return CaptureOutcome.failed("no_uri", "No uri found in the response")

        try:
            image = CapturedImage.from_uri(asset.uri, width=asset.width, height=asset.height)
        except ValueError as e:
            return CaptureOutcome.failed("no_extension", str(e))

        return CaptureOutcome.captured(image)
