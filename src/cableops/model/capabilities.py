"""Device capability table.

One immutable Capabilities record per device type. Every algorithm that
needs to know whether a device routes, bridges, serves DHCP or hosts
Wi-Fi asks this table instead of looking at the device type itself.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cableops.errors import ConfigValidationError

Layer = Literal[1, 2, 3, "endpoint", "cloud"]


class DeviceType(str, Enum):
    """Supported device types."""

    SWITCH = "switch"
    ROUTER = "router"
    PC = "pc"
    SERVER = "server"
    IP_PHONE = "ip-phone"
    SMARTPHONE = "smartphone"
    CAMERA = "camera"
    FIREWALL = "firewall"
    ACCESS_POINT = "access-point"
    CLOUD = "cloud"
    HUB = "hub"
    PATCH_PANEL = "patch-panel"
    NAS = "nas"
    PRINTER = "printer"
    LOAD_BALANCER = "load-balancer"
    MODEM = "modem"
    LAPTOP = "laptop"
    TABLET = "tablet"


DEVICE_TYPE_ALIASES: dict[str, DeviceType] = {
    "ap": DeviceType.ACCESS_POINT,
    "accesspoint": DeviceType.ACCESS_POINT,
    "phone": DeviceType.IP_PHONE,
}


def normalize_device_type(raw: str) -> str:
    """Lower-case a device type string and resolve known aliases."""
    lowered = raw.strip().lower()
    if lowered in DEVICE_TYPE_ALIASES:
        return DEVICE_TYPE_ALIASES[lowered].value
    return lowered


class Capabilities(BaseModel):
    """What a device type can do.

    `layer` is the OSI layer the device operates at; endpoints and the
    cloud are their own categories.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    layer: Layer = Field(..., description="OSI layer or 'endpoint' / 'cloud'")
    per_port_ip: bool = False
    management_ip: bool = False
    vlan_support: bool = False
    nat_capable: bool = False
    dhcp_capable: bool = False
    mac_per_port: bool = False
    can_be_gateway: bool = False
    port_mode_support: bool = False
    wifi_host: bool = False
    wifi_client: bool = False

    @property
    def is_routing(self) -> bool:
        """True when the device terminates broadcast domains."""
        return self.layer == 3

    @property
    def is_cloud(self) -> bool:
        return self.layer == "cloud"


def _endpoint(*, wifi: bool, dhcp: bool = False) -> Capabilities:
    return Capabilities(
        layer="endpoint",
        per_port_ip=True,
        mac_per_port=True,
        dhcp_capable=dhcp,
        wifi_client=wifi,
    )


DEFAULT_CAPABILITIES: dict[DeviceType, Capabilities] = {
    DeviceType.SWITCH: Capabilities(
        layer=2,
        management_ip=True,
        vlan_support=True,
        mac_per_port=True,
        port_mode_support=True,
    ),
    DeviceType.ROUTER: Capabilities(
        layer=3,
        per_port_ip=True,
        nat_capable=True,
        dhcp_capable=True,
        mac_per_port=True,
        can_be_gateway=True,
        wifi_host=True,
    ),
    DeviceType.FIREWALL: Capabilities(
        layer=3,
        per_port_ip=True,
        vlan_support=True,
        nat_capable=True,
        dhcp_capable=True,
        mac_per_port=True,
        can_be_gateway=True,
    ),
    DeviceType.MODEM: Capabilities(
        layer=3,
        per_port_ip=True,
        nat_capable=True,
        dhcp_capable=True,
        mac_per_port=True,
        can_be_gateway=True,
        wifi_host=True,
    ),
    DeviceType.LOAD_BALANCER: Capabilities(
        layer=3,
        per_port_ip=True,
        management_ip=True,
        nat_capable=True,
        mac_per_port=True,
    ),
    DeviceType.ACCESS_POINT: Capabilities(
        layer=2,
        management_ip=True,
        vlan_support=True,
        dhcp_capable=True,
        wifi_host=True,
    ),
    DeviceType.HUB: Capabilities(layer=1),
    DeviceType.PATCH_PANEL: Capabilities(layer=1),
    DeviceType.CLOUD: Capabilities(
        layer="cloud",
        per_port_ip=True,
        management_ip=True,
    ),
    DeviceType.PC: _endpoint(wifi=True),
    DeviceType.LAPTOP: _endpoint(wifi=True),
    DeviceType.TABLET: _endpoint(wifi=True),
    DeviceType.SMARTPHONE: _endpoint(wifi=True),
    DeviceType.PRINTER: _endpoint(wifi=True),
    DeviceType.CAMERA: _endpoint(wifi=True),
    DeviceType.IP_PHONE: _endpoint(wifi=False),
    DeviceType.NAS: _endpoint(wifi=False),
    DeviceType.SERVER: _endpoint(wifi=False, dhcp=True),
}


class CapabilityTable:
    """Lookup from device type to Capabilities.

    Unknown device types resolve to the PC profile. Tables are immutable;
    `with_overrides` returns a new table.

    Example:
        table = CapabilityTable().with_overrides({"switch": {"layer": 3}})
        table.lookup("switch").is_routing  # True
    """

    def __init__(self, entries: Mapping[DeviceType, Capabilities] | None = None):
        self._entries: dict[DeviceType, Capabilities] = dict(
            entries if entries is not None else DEFAULT_CAPABILITIES
        )

    def lookup(self, device_type: DeviceType | str) -> Capabilities:
        """Get capabilities for a device type, falling back to PC."""
        if not isinstance(device_type, DeviceType):
            try:
                device_type = DeviceType(normalize_device_type(device_type))
            except ValueError:
                return self._entries[DeviceType.PC]
        return self._entries.get(device_type, self._entries[DeviceType.PC])

    def with_overrides(self, overrides: Mapping[str, Mapping[str, Any]]) -> "CapabilityTable":
        """Build a new table with per-type field overrides applied.

        Raises:
            ConfigValidationError: If a type is unknown or a field is invalid
        """
        entries = dict(self._entries)
        for raw_type, fields in overrides.items():
            try:
                device_type = DeviceType(normalize_device_type(raw_type))
            except ValueError as e:
                raise ConfigValidationError(
                    f"Unknown device type in capability overrides: {raw_type}",
                    {"device_type": raw_type},
                ) from e
            try:
                entries[device_type] = Capabilities.model_validate(
                    {**entries[device_type].model_dump(), **dict(fields)}
                )
            except ValidationError as e:
                raise ConfigValidationError(
                    f"Invalid capability override for {device_type.value}: "
                    f"{e.error_count()} errors",
                    {"errors": e.errors()},
                ) from e
        return CapabilityTable(entries)

    def items(self):
        return self._entries.items()


DEFAULT_TABLE = CapabilityTable()


def capabilities_of(device_type: DeviceType | str) -> Capabilities:
    """Look up capabilities in the default table."""
    return DEFAULT_TABLE.lookup(device_type)
