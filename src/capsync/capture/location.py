"""Single-fix location capture on top of a callback-based provider."""

import asyncio

from capsync.capture.outcome import CaptureOutcome
from capsync.interfaces import GeolocationProvider, Position, PositionError, PositionOptions
from capsync.logging import capture_logger, log_capture_skipped, log_capture_taken
from capsync.models import Capability, GeoCoordinates, PermissionStatus
from capsync.permissions import PermissionGate

# W3C geolocation error code for an expired timeout
TIMEOUT_CODE = 3

# Extra time granted to the provider to report its own timeout
PROVIDER_GRACE_SECONDS = 1.0

PERMISSION_ERROR = "permission_error"
PROVIDER_ERROR = "provider_error"


class LocationCapture:
    """Requests one current position fix.

    The provider reports through success/error callbacks, possibly from a
    platform thread. The adapter turns that into a single awaitable outcome.
    """

    def __init__(
        self,
        provider: GeolocationProvider,
        gate: PermissionGate,
        options: PositionOptions | None = None,
    ) -> None:
        self._provider = provider
        self._gate = gate
        self.options = options or PositionOptions()
        self._log = capture_logger()

    async def capture(self) -> CaptureOutcome[GeoCoordinates]:
        """Acquire coordinates, or report why none were obtained.

        Errors raised by the permission subsystem or the provider are logged
        and reported as a failed outcome.
        """
        try:
            allowed = await self._gate.ensure_capability(Capability.LOCATION)
        except Exception as e:
            return self._failed(PERMISSION_ERROR, e)

        if not allowed:
            outcome = CaptureOutcome.denied(
                Capability.LOCATION.value,
                permanent=self._gate.state(Capability.LOCATION) is PermissionStatus.PERMANENTLY_DENIED,
            )
            log_capture_skipped(self._log, "location", outcome.kind.value)
            return outcome

        try:
            # The gate already asked; the provider must not prompt again
            self._provider.set_configuration(skip_permission_requests=True)
            result = await self._current_position()
        except Exception as e:
            return self._failed(PROVIDER_ERROR, e)

        if isinstance(result, PositionError):
            log_capture_skipped(
                self._log,
                "location",
                "failed",
                error_code=str(result.code),
                error_message=result.message,
            )
            return CaptureOutcome.failed(str(result.code), result.message)

        log_capture_taken(self._log, "location")
        return CaptureOutcome.captured(
            GeoCoordinates(latitude=result.latitude, longitude=result.longitude)
        )

    def _failed(self, code: str, error: Exception) -> CaptureOutcome[GeoCoordinates]:
        self._log.warning("Location capture error: %s", error, exc_info=True)
        log_capture_skipped(self._log, "location", "failed", error_code=code, error_message=str(error))
        return CaptureOutcome.failed(code, str(error))

    async def _current_position(self) -> Position | PositionError:
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def resolve(result: Position | PositionError) -> None:
            if not future.done():
                future.set_result(result)

        def on_success(position: Position) -> None:
            loop.call_soon_threadsafe(resolve, position)

        def on_error(error: PositionError) -> None:
            loop.call_soon_threadsafe(resolve, error)

        self._provider.get_current_position(on_success, on_error, self.options)

        timeout = self.options.timeout_ms / 1000 + PROVIDER_GRACE_SECONDS
        try:
            return await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError:
            return PositionError(
                code=TIMEOUT_CODE,
                message=f"No position within {self.options.timeout_ms} ms",
            )
