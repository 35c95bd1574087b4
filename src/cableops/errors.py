"""Exception hierarchy for CableOps.

All exceptions inherit from CableOpsError for consistent handling.
Engine queries return structured results instead of raising; these
exceptions surface at the edges (snapshot loading, strict parsing, CLI).
"""

from typing import Any


class CableOpsError(Exception):
    """Base exception for all CableOps errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# Addressing Errors
class AddressFormatError(CableOpsError):
    """IP or CIDR string does not match the expected grammar."""

    def __init__(self, value: str, expected: str = "a.b.c.d/n") -> None:
        super().__init__(
            f"Invalid address format: {value!r} (expected {expected})",
            {"value": value, "expected": expected},
        )
        self.value = value


# Topology Errors
class TopologyError(CableOpsError):
    """Base exception for topology-related errors."""


class SnapshotLoadError(TopologyError):
    """Failed to read a workspace snapshot file."""


class SnapshotValidationError(TopologyError):
    """Snapshot data failed validation."""


class DeviceNotFoundError(TopologyError):
    """Referenced device does not exist in the snapshot."""

    def __init__(self, device_id: str) -> None:
        super().__init__(f"Device not found: {device_id}", {"device": device_id})
        self.device_id = device_id


class InterfaceNotFoundError(TopologyError):
    """Referenced interface does not exist in the snapshot."""

    def __init__(self, device_id: str, port_number: int) -> None:
        super().__init__(
            f"Interface not found: {device_id} port {port_number}",
            {"device": device_id, "port": port_number},
        )
        self.device_id = device_id
        self.port_number = port_number


class WiringError(TopologyError):
    """A proposed connection breaks a wiring rule."""


# Configuration Errors
class ConfigError(CableOpsError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Failed to load configuration."""


class ConfigValidationError(ConfigError):
    """Configuration failed validation."""
