"""Segment discovery and viability.

Partitions every port in the snapshot into broadcast domains and decides
whether each domain has enough configuration to plausibly carry traffic.

A segment is viable when any of these hold:
1. A gateway resolves inside it
2. Two member interfaces carry addresses in the same subnet
3. A DHCP server with a complete range serves it and it has more than
   one port

Non-viable segments get a single diagnostic tag. Precedence matters and
is fixed: "Subnet", then "No DHCP", then "No GW".

Segments are recomputed on every call, costing O(segments x graph size).
Callers running many queries against one snapshot should cache the
result themselves.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from itertools import combinations

from cableops.engine.broadcast import walk_segment
from cableops.engine.gateway import Gateway, find_gateway
from cableops.engine.view import PortKey, TopologyView
from cableops.model.addressing import parse_cidr, same_subnet

logger = logging.getLogger(__name__)


class SegmentIssue(str, Enum):
    """Why traffic cannot flow on a segment or connection."""

    SUBNET = "Subnet"
    NO_DHCP = "No DHCP"
    NO_GW = "No GW"
    VLAN = "VLAN"


@dataclass(frozen=True)
class Segment:
    """One broadcast domain, derived from the snapshot."""

    index: int
    ports: tuple[PortKey, ...]
    gateway: Gateway | None
    viable: bool
    issue: SegmentIssue | None = None

    @property
    def device_ids(self) -> list[str]:
        """Member devices in discovery order."""
        return list(dict.fromkeys(device_id for device_id, _ in self.ports))

    @property
    def size(self) -> int:
        return len(self.ports)

    def contains(self, device_id: str, port_number: int) -> bool:
        return (device_id, port_number) in self.ports


def _has_dhcp_server(view: TopologyView, ports: tuple[PortKey, ...]) -> bool:
    for device_id, port_number in ports:
        iface = view.effective_interface(device_id, port_number)
        if iface and iface.dhcp_enabled and iface.dhcp_range_start and iface.dhcp_range_end:
            return True
    return False


def build_segment(view: TopologyView, index: int, ports: tuple[PortKey, ...]) -> Segment:
    """Evaluate gateway and viability for a set of member ports."""
    gateway = find_gateway(view, ports)
    ips = [ip for ip in (view.ip_of(d, p) for d, p in ports) if parse_cidr(ip) is not None]
    has_matching_ips = any(same_subnet(a, b) for a, b in combinations(ips, 2))
    has_dhcp = _has_dhcp_server(view, ports)

    viable = gateway is not None or has_matching_ips or (has_dhcp and len(ports) > 1)

    issue = None
    if not viable:
        if len(ips) >= 2:
            issue = SegmentIssue.SUBNET
        elif not has_dhcp:
            issue = SegmentIssue.NO_DHCP
        else:
            issue = SegmentIssue.NO_GW

    return Segment(index=index, ports=ports, gateway=gateway, viable=viable, issue=issue)


def discover_segments(view: TopologyView) -> list[Segment]:
    """Partition all ports of the snapshot into segments.

    Returns:
        Segments in discovery order (devices in snapshot order, ports
        ascending). Every port of every known device belongs to exactly
        one segment.
    """
    visited: set[PortKey] = set()
    segments: list[Segment] = []

    for device_id in view.topology.devices:
        for port_number in view.ports_of(device_id):
            if (device_id, port_number) in visited:
                continue
            members = tuple(walk_segment(view, device_id, port_number))
            visited.update(members)
            segments.append(build_segment(view, len(segments), members))

    logger.debug(
        "Discovered %d segments (%d viable)",
        len(segments),
        sum(1 for s in segments if s.viable),
    )
    return segments


def index_segments(segments: list[Segment]) -> dict[PortKey, Segment]:
    """Map each port to the segment containing it."""
    return {port: segment for segment in segments for port in segment.ports}


def segment_of(view: TopologyView, device_id: str, port_number: int) -> Segment | None:
    """The segment containing one port, or None for an unknown device."""
    members = tuple(walk_segment(view, device_id, port_number))
    if not members:
        return None
    return build_segment(view, 0, members)
