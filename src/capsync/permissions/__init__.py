"""Permission gating for device capabilities."""

from capsync.permissions.gate import CAMERA_RATIONALE, PermissionGate

__all__ = ["CAMERA_RATIONALE", "PermissionGate"]
