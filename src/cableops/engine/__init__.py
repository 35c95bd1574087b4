"""Topology semantics engine."""

from cableops.engine.dhcp import next_dhcp_ip, next_dhcp_ip_for
from cableops.engine.flow import FlowReport, classify_active_flows
from cableops.engine.gateway import Gateway, resolve_gateway
from cableops.engine.paths import reachable_from, shortest_path
from cableops.engine.ping import PingHop, PingResult, simulate_ping
from cableops.engine.segments import Segment, SegmentIssue, discover_segments, segment_of
from cableops.engine.validation import (
    InterfaceCheck,
    IpValidationResult,
    check_interface_update,
    validate_port_ip,
)
from cableops.engine.view import Neighbor, TopologyView

__all__ = [
    "FlowReport",
    "Gateway",
    "InterfaceCheck",
    "IpValidationResult",
    "Neighbor",
    "PingHop",
    "PingResult",
    "Segment",
    "SegmentIssue",
    "TopologyView",
    "check_interface_update",
    "classify_active_flows",
    "discover_segments",
    "next_dhcp_ip",
    "next_dhcp_ip_for",
    "reachable_from",
    "resolve_gateway",
    "segment_of",
    "shortest_path",
    "simulate_ping",
    "validate_port_ip",
]
