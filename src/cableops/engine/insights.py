"""Summaries for the network-insights display.

Groups interfaces by subnet and by VLAN, and condenses segments into
display rows.
"""

from dataclasses import dataclass, field

from cableops.engine.segments import Segment, discover_segments
from cableops.engine.view import TopologyView
from cableops.model.addressing import parse_cidr, to_ip_string
from cableops.model.topology import WIFI_PORT

NO_GATEWAY = "No gateway (no L3 device)"


@dataclass(frozen=True)
class SubnetMember:
    device_id: str
    port_number: int
    ip_address: str
    alias: str | None = None
    is_gateway: bool = False


@dataclass
class SubnetEntry:
    """All addresses that fall in one network."""

    network: str
    cidr: int
    mask: str
    gateway_ip: str | None = None
    gateway_device_id: str | None = None
    members: list[SubnetMember] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.network}/{self.cidr}"


@dataclass(frozen=True)
class VlanMember:
    device_id: str
    port_number: int
    alias: str | None = None


@dataclass(frozen=True)
class SegmentSummary:
    """One segment condensed for display."""

    index: int
    device_names: list[str]
    port_count: int
    gateway: str
    viable: bool
    issue: str | None


def subnet_map(view: TopologyView) -> dict[str, SubnetEntry]:
    """Group interface addresses by subnet, sorted by subnet key.

    The first gateway-capable interface in a subnet becomes its gateway.
    Device management addresses (assumed /24 without a prefix) are
    attached to subnets that already exist, as port 0 "mgmt" entries.
    """
    subnets: dict[str, SubnetEntry] = {}
    for iface in view.topology.interfaces:
        masked = view.effective_interface(iface.device_id, iface.port_number)
        parsed = parse_cidr(masked.ip_address if masked else None)
        if masked is None or parsed is None:
            continue
        is_gateway = view.capabilities(iface.device_id).can_be_gateway
        entry = subnets.setdefault(
            parsed.network_string,
            SubnetEntry(
                network=to_ip_string(parsed.network),
                cidr=parsed.cidr,
                mask=parsed.mask_string,
            ),
        )
        if is_gateway and entry.gateway_ip is None:
            entry.gateway_ip = masked.ip_address
            entry.gateway_device_id = iface.device_id
        entry.members.append(
            SubnetMember(
                device_id=iface.device_id,
                port_number=iface.port_number,
                ip_address=masked.ip_address,
                alias=masked.alias,
                is_gateway=is_gateway,
            )
        )

    for device in view.topology.devices.values():
        if not device.management_ip or not view.capabilities(device.id).management_ip:
            continue
        ip = device.management_ip if "/" in device.management_ip else f"{device.management_ip}/24"
        parsed = parse_cidr(ip)
        if parsed is None:
            continue
        entry = subnets.get(parsed.network_string)
        if entry is None:
            continue
        if not any(m.device_id == device.id and m.ip_address == ip for m in entry.members):
            entry.members.append(
                SubnetMember(device_id=device.id, port_number=WIFI_PORT, ip_address=ip, alias="mgmt")
            )

    return dict(sorted(subnets.items()))


def vlan_map(view: TopologyView) -> dict[int, list[VlanMember]]:
    """Ports by configured VLAN, for VLAN-capable devices only."""
    vlans: dict[int, list[VlanMember]] = {}
    for iface in view.topology.interfaces:
        masked = view.effective_interface(iface.device_id, iface.port_number)
        if masked is None or masked.vlan is None:
            continue
        vlans.setdefault(masked.vlan, []).append(
            VlanMember(iface.device_id, iface.port_number, masked.alias)
        )
    return dict(sorted(vlans.items()))


def summarize_segment(view: TopologyView, segment: Segment) -> SegmentSummary:
    gateway = segment.gateway
    return SegmentSummary(
        index=segment.index,
        device_names=[view.topology.device_name(d) for d in segment.device_ids],
        port_count=segment.size,
        gateway=(
            f"{gateway.ip_address} ({gateway.device_name} P{gateway.port_number})"
            if gateway
            else NO_GATEWAY
        ),
        viable=segment.viable,
        issue=segment.issue.value if segment.issue else None,
    )


def describe_segments(view: TopologyView, include_isolated: bool = False) -> list[SegmentSummary]:
    """Segment rows for display.

    Args:
        include_isolated: Also list single-port segments (unused ports of
            routing devices, lone endpoints)
    """
    return [
        summarize_segment(view, s)
        for s in discover_segments(view)
        if include_isolated or s.size > 1
    ]
