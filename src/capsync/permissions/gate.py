"""Permission gate in front of the OS permission subsystem."""

from capsync.interfaces import PermissionRationale, PermissionSubsystem
from capsync.logging import log_permission_result, permission_logger
from capsync.models import Capability, PermissionStatus

CAMERA_RATIONALE = PermissionRationale(
    title="Camera Permission",
    message="This app needs access to your camera to take photos",
    button_neutral="Ask Me Later",
    button_negative="Cancel",
    button_positive="OK",
)


class PermissionGate:
    """Checks and requests capability grants.

    The gate keeps the last known status per capability. Once a request
    comes back ``PERMANENTLY_DENIED`` the OS dialog is never shown again for
    that capability; later requests return the cached status immediately.

    Example:
        gate = PermissionGate(subsystem)
        if await gate.ensure_capability(Capability.LOCATION):
            ...
    """

    def __init__(
        self,
        subsystem: PermissionSubsystem,
        runtime_permissions: bool = True,
    ) -> None:
        """Initialize the gate.

        Args:
            subsystem: OS permission subsystem
            runtime_permissions: False on platforms that grant location at
                install time; location checks then short-circuit to granted
        """
        self._subsystem = subsystem
        self._runtime_permissions = runtime_permissions
        self._states: dict[Capability, PermissionStatus] = {}
        self._log = permission_logger()

    def state(self, capability: Capability) -> PermissionStatus:
        """Last known status for a capability."""
        return self._states.get(capability, PermissionStatus.UNKNOWN)

    def _short_circuits(self, capability: Capability) -> bool:
        return capability is Capability.LOCATION and not self._runtime_permissions

    async def has_capability(self, capability: Capability) -> PermissionStatus:
        """Check the current grant without prompting.

        Returns:
            GRANTED or DENIED
        """
        if self._short_circuits(capability):
            self._states[capability] = PermissionStatus.GRANTED
            return PermissionStatus.GRANTED

        granted = await self._subsystem.check(capability)
        if granted:
            self._states[capability] = PermissionStatus.GRANTED
            return PermissionStatus.GRANTED

        # A failed check never downgrades a known permanent denial
        if self.state(capability) is not PermissionStatus.PERMANENTLY_DENIED:
            self._states[capability] = PermissionStatus.DENIED
        return PermissionStatus.DENIED

    async def request_capability(self, capability: Capability) -> PermissionStatus:
        """Prompt for a capability, at most once per call.

        Returns:
            GRANTED, DENIED or PERMANENTLY_DENIED
        """
        if self._short_circuits(capability):
            self._states[capability] = PermissionStatus.GRANTED
            return PermissionStatus.GRANTED

        if self.state(capability) is PermissionStatus.PERMANENTLY_DENIED:
            log_permission_result(
                self._log, capability.value, PermissionStatus.PERMANENTLY_DENIED.value, prompted=False
            )
            return PermissionStatus.PERMANENTLY_DENIED

        rationale = CAMERA_RATIONALE if capability is Capability.CAMERA else None
        status = PermissionStatus(await self._subsystem.request(capability, rationale))
        if status is PermissionStatus.UNKNOWN:
            status = PermissionStatus.DENIED

        self._states[capability] = status
        log_permission_result(self._log, capability.value, status.value, prompted=True)
        return status

    async def ensure_capability(self, capability: Capability) -> bool:
        """Check first, then request only if not already granted."""
        if await self.has_capability(capability) is PermissionStatus.GRANTED:
            return True

        status = await self.request_capability(capability)
        if status is PermissionStatus.GRANTED:
            return True

        if status is PermissionStatus.PERMANENTLY_DENIED:
            self._log.info("%s permission revoked by user", capability.value)
        else:
            self._log.info("%s permission denied by user", capability.value)
        return False
