"""Active-flow classification.

Decides which connections carry "live" traffic for display: connections
on a shortest path between two traffic endpoints, over viable segments
only. Connections that cannot carry traffic get an issue tag.
"""

import logging
from dataclasses import dataclass, field
from itertools import combinations

from cableops.engine.paths import connections_between, shortest_path
from cableops.engine.segments import Segment, SegmentIssue, discover_segments, index_segments
from cableops.engine.view import PortKey, TopologyView

logger = logging.getLogger(__name__)


@dataclass
class FlowReport:
    """Result of classifying connections."""

    active: set[str] = field(default_factory=set)
    issues: dict[str, SegmentIssue] = field(default_factory=dict)
    endpoints: list[str] = field(default_factory=list)
    used_fallback: bool = False
    segments: list[Segment] = field(default_factory=list)

    def is_active(self, connection_id: str) -> bool:
        return connection_id in self.active


def _is_traffic_interface(view: TopologyView, device_id: str, port_number: int) -> bool:
    iface = view.effective_interface(device_id, port_number)
    if iface is None:
        return False
    return bool(iface.ip_address or iface.gateway or iface.dhcp_enabled or iface.nat_enabled)


def _viable_ports(by_port: dict[PortKey, Segment]) -> set[PortKey]:
    return {port for port, segment in by_port.items() if segment.viable}


def classify_active_flows(view: TopologyView) -> FlowReport:
    """Classify every connection as active, idle or broken.

    Returns:
        FlowReport with the active connection ids, an issue tag for each
        connection whose segment is not viable ("VLAN" when its two ports
        fall in different segments), and the traffic endpoints used.
    """
    segments = discover_segments(view)
    by_port = index_segments(segments)
    report = FlowReport(segments=segments)

    viable_connections: set[str] = set()
    for conn in view.connections:
        seg_a = by_port.get((conn.device_a_id, conn.port_a))
        seg_b = by_port.get((conn.device_b_id, conn.port_b))
        if seg_a is None or seg_b is None or seg_a.index != seg_b.index:
            report.issues[conn.id] = SegmentIssue.VLAN
        elif not seg_a.viable:
            report.issues[conn.id] = seg_a.issue or SegmentIssue.NO_GW
        else:
            viable_connections.add(conn.id)

    viable_ports = _viable_ports(by_port)
    graph = view.device_graph(viable_connections)

    for device_id in view.topology.devices:
        if view.capabilities(device_id).is_cloud or any(
            _is_traffic_interface(view, device_id, port)
            for port in view.ports_of(device_id)
            if (device_id, port) in viable_ports
        ):
            report.endpoints.append(device_id)

    if len(report.endpoints) < 2:
        # TODO: this ignores the link's own segment viability; define single-endpoint display instead
        report.used_fallback = True
        ip_devices = {
            device_id
            for device_id, port in viable_ports
            if view.ip_of(device_id, port)
        }
        for conn in view.connections:
            if conn.device_a_id in ip_devices and conn.device_b_id in ip_devices:
                report.active.add(conn.id)
        logger.debug(
            "Fewer than two traffic endpoints; fallback marked %d connections active",
            len(report.active),
        )
        return report

    for src, dst in combinations(report.endpoints, 2):
        path = shortest_path(view, src, dst, graph=graph)
        if not path:
            continue
        for u, v in zip(path, path[1:]):
            linking = connections_between(graph, u, v)
            if linking:
                report.active.add(linking[0])

    logger.debug(
        "%d traffic endpoints, %d active connections, %d with issues",
        len(report.endpoints),
        len(report.active),
        len(report.issues),
    )
    return report
