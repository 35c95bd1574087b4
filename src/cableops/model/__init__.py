"""Topology model components."""

from cableops.model.addressing import (
    ParsedCidr,
    parse_cidr,
    parse_ipv4,
    same_subnet,
    strip_cidr,
    to_ip_string,
    usable_hosts,
)
from cableops.model.capabilities import (
    Capabilities,
    CapabilityTable,
    DeviceType,
    capabilities_of,
)
from cableops.model.loader import SnapshotLoader
from cableops.model.topology import (
    WIFI_PORT,
    Connection,
    ConnectionType,
    Device,
    Interface,
    PortMode,
    PortRole,
    Topology,
)

__all__ = [
    "WIFI_PORT",
    "Capabilities",
    "CapabilityTable",
    "Connection",
    "ConnectionType",
    "Device",
    "DeviceType",
    "Interface",
    "ParsedCidr",
    "PortMode",
    "PortRole",
    "SnapshotLoader",
    "Topology",
    "capabilities_of",
    "parse_cidr",
    "parse_ipv4",
    "same_subnet",
    "strip_cidr",
    "to_ip_string",
    "usable_hosts",
]
