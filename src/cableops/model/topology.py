"""Workspace topology data models.

Pydantic models for the records the engine reads:
- Devices (switches, routers, endpoints, ...)
- Interfaces (per-port configuration, port 0 being the Wi-Fi interface)
- Connections (wired cables and Wi-Fi associations)

Field names are snake_case; camelCase keys from exported workspace
snapshots are accepted through aliases.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator
from pydantic.alias_generators import to_camel

from cableops.model.capabilities import normalize_device_type

WIFI_PORT = 0


class ConnectionType(str, Enum):
    """Physical medium of a connection."""

    WIRED = "wired"
    WIFI = "wifi"


class PortMode(str, Enum):
    ACCESS = "access"
    TRUNK = "trunk"
    HYBRID = "hybrid"


class PortRole(str, Enum):
    UPLINK = "uplink"
    DOWNLINK = "downlink"


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Device(_Record):
    """A device placed in the workspace.

    Device-level fields are only meaningful for device types whose
    capabilities allow them; the engine ignores the rest.
    """

    id: str = Field(..., min_length=1, description="Opaque unique identifier")
    name: str = Field(default="", description="Display name")
    device_type: str = Field(..., description="Device type (see DeviceType)")
    port_count: int = Field(default=0, ge=0, description="Physical ports; 0 means Wi-Fi only")
    color: str | None = Field(default=None, description="Display color")
    max_speed: str | None = Field(default=None, description="Fastest supported port speed")
    management_ip: str | None = Field(default=None, description="Management or public IP")
    nat_enabled: bool = False
    gateway: str | None = Field(default=None, description="Default gateway IP")
    dhcp_enabled: bool = False
    dhcp_range_start: str | None = None
    dhcp_range_end: str | None = None
    ssid: str | None = None
    wifi_password: str | None = None

    @field_validator("device_type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return normalize_device_type(v)
        return v

    @property
    def label(self) -> str:
        """Name for display, falling back to the id."""
        return self.name or self.id


class Interface(_Record):
    """Configuration of one port, keyed by (device_id, port_number)."""

    device_id: str = Field(..., min_length=1)
    port_number: int = Field(..., ge=0, description="0 is the virtual Wi-Fi interface")
    alias: str | None = None
    reserved: bool = False
    reserved_label: str | None = None
    speed: str | None = None
    vlan: int | None = Field(default=None, ge=1, le=4094)
    ip_address: str | None = Field(default=None, description="Address in CIDR notation")
    mac_address: str | None = None
    port_mode: PortMode | None = None
    port_role: PortRole | None = None
    dhcp_enabled: bool = False
    dhcp_range_start: str | None = None
    dhcp_range_end: str | None = None
    ssid: str | None = None
    wifi_password: str | None = None
    nat_enabled: bool = False
    gateway: str | None = None

    @field_validator("port_mode", "port_role", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        # Exported snapshots store unset enums as empty strings
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @field_validator(
        "dhcp_enabled", "nat_enabled", "reserved", mode="before"
    )
    @classmethod
    def null_to_false(cls, v: Any) -> Any:
        return False if v is None else v

    @property
    def key(self) -> tuple[str, int]:
        return (self.device_id, self.port_number)

    @property
    def is_wifi(self) -> bool:
        return self.port_number == WIFI_PORT


class Connection(_Record):
    """An undirected link between two ports."""

    id: str = Field(..., min_length=1)
    device_a_id: str = Field(..., alias="deviceAId")
    port_a: int = Field(..., ge=0)
    device_b_id: str = Field(..., alias="deviceBId")
    port_b: int = Field(..., ge=0)
    connection_type: ConnectionType = ConnectionType.WIRED
    speed: str | None = None

    @field_validator("connection_type", mode="before")
    @classmethod
    def normalize_connection_type(cls, v: Any) -> Any:
        if v is None:
            return ConnectionType.WIRED
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def is_self_loop(self) -> bool:
        """Both ends on the same device; tolerated but never traversed."""
        return self.device_a_id == self.device_b_id

    @property
    def is_wifi(self) -> bool:
        return self.connection_type == ConnectionType.WIFI

    def touches(self, device_id: str, port_number: int | None = None) -> bool:
        """Check whether this connection ends on a device (and optionally port)."""
        if port_number is None:
            return device_id in (self.device_a_id, self.device_b_id)
        return (self.device_a_id, self.port_a) == (device_id, port_number) or (
            self.device_b_id,
            self.port_b,
        ) == (device_id, port_number)

    def local_port(self, device_id: str) -> int:
        """Port on `device_id`'s side of the connection."""
        return self.port_a if self.device_a_id == device_id else self.port_b

    def peer_of(self, device_id: str) -> tuple[str, int]:
        """The (device, port) at the other end from `device_id`."""
        if self.device_a_id == device_id:
            return self.device_b_id, self.port_b
        return self.device_a_id, self.port_a


class SnapshotFile(BaseModel):
    """Root model for an exported workspace snapshot.

    Routes and annotations are carried for round-tripping but the engine
    does not read them.
    """

    model_config = ConfigDict(extra="ignore")

    version: Literal[1] = Field(default=1, description="Snapshot format version")
    workspace: dict[str, Any] = Field(default_factory=dict)
    devices: list[Device] = Field(default_factory=list)
    interfaces: list[Interface] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)
    routes: list[dict[str, Any]] = Field(default_factory=list)
    annotations: list[dict[str, Any]] = Field(default_factory=list)


class Topology(BaseModel):
    """Indexed workspace snapshot.

    The input to every engine query. Lookups for ids that are not in the
    snapshot return None rather than raising, since workspaces are user
    edited and may briefly reference stale ids.
    """

    devices: dict[str, Device] = Field(default_factory=dict, description="Devices by id")
    interfaces: list[Interface] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)

    _interface_index: dict[tuple[str, int], Interface] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._interface_index = {iface.key: iface for iface in self.interfaces}

    @classmethod
    def from_records(
        cls,
        devices: list[Device],
        interfaces: list[Interface] | None = None,
        connections: list[Connection] | None = None,
    ) -> "Topology":
        """Build a topology from plain record lists."""
        return cls(
            devices={d.id: d for d in devices},
            interfaces=interfaces or [],
            connections=connections or [],
        )

    @property
    def device_count(self) -> int:
        return len(self.devices)

    @property
    def connection_count(self) -> int:
        return len(self.connections)

    def get_device(self, device_id: str) -> Device | None:
        """Get device by id."""
        return self.devices.get(device_id)

    def get_interface(self, device_id: str, port_number: int) -> Interface | None:
        """Get the interface configured on a port, if any."""
        return self._interface_index.get((device_id, port_number))

    def interfaces_of(self, device_id: str) -> list[Interface]:
        """All configured interfaces of a device."""
        return [i for i in self.interfaces if i.device_id == device_id]

    def get_connection(self, connection_id: str) -> Connection | None:
        for conn in self.connections:
            if conn.id == connection_id:
                return conn
        return None

    def connections_at(self, device_id: str, port_number: int | None = None) -> list[Connection]:
        """Connections ending on a device, or on one of its ports."""
        return [c for c in self.connections if c.touches(device_id, port_number)]

    def device_name(self, device_id: str) -> str:
        device = self.devices.get(device_id)
        return device.label if device else "Unknown"
