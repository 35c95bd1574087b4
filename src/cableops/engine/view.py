"""Per-query adjacency view over a topology snapshot.

A TopologyView pairs a Topology with a CapabilityTable and answers the
structural questions every algorithm needs: who is connected to whom,
which ports a device has, and what an interface looks like once fields
outside the device's capabilities are masked out.

Views hold no state beyond the snapshot they were built from. Build one
per query; nothing is cached across snapshots.
"""

import logging
from typing import NamedTuple

import networkx as nx

from cableops.model.capabilities import DEFAULT_TABLE, Capabilities, CapabilityTable
from cableops.model.topology import Connection, Interface, PortMode, Topology

logger = logging.getLogger(__name__)

DEFAULT_VLAN = 1

PortKey = tuple[str, int]


class Neighbor(NamedTuple):
    """One hop from a device across a connection."""

    peer_id: str
    peer_port: int
    local_port: int
    connection_id: str


class TopologyView:
    """Read-only adjacency and capability view of one snapshot.

    Self-loop connections and connections that reference devices missing
    from the snapshot are dropped here, so no algorithm ever sees them.

    Example:
        view = TopologyView(topology)
        for n in view.neighbors("sw1"):
            print(n.peer_id, n.local_port)
    """

    def __init__(self, topology: Topology, capabilities: CapabilityTable | None = None):
        self.topology = topology
        self.table = capabilities or DEFAULT_TABLE
        self.connections = self._usable_connections()

    def _usable_connections(self) -> list[Connection]:
        usable = []
        for conn in self.topology.connections:
            if conn.is_self_loop:
                logger.debug("Ignoring self-loop connection %s", conn.id)
                continue
            if (
                conn.device_a_id not in self.topology.devices
                or conn.device_b_id not in self.topology.devices
            ):
                logger.debug("Ignoring connection %s to unknown device", conn.id)
                continue
            usable.append(conn)
        return usable

    def capabilities(self, device_id: str) -> Capabilities:
        """Capabilities of a device; unknown devices get the default profile."""
        device = self.topology.get_device(device_id)
        return self.table.lookup(device.device_type if device else "pc")

    def neighbors(self, device_id: str) -> list[Neighbor]:
        """Every connection leaving a device, from that device's side."""
        result = []
        for conn in self.connections:
            if not conn.touches(device_id):
                continue
            peer_id, peer_port = conn.peer_of(device_id)
            result.append(Neighbor(peer_id, peer_port, conn.local_port(device_id), conn.id))
        return result

    def links_at(self, device_id: str, port_number: int) -> list[Connection]:
        """Connections ending on one port."""
        return [c for c in self.connections if c.touches(device_id, port_number)]

    def ports_of(self, device_id: str) -> list[int]:
        """Port numbers of a device, including the Wi-Fi port 0.

        Ports referenced by connections beyond `port_count` are included
        so stale wiring still shows up in traversals.
        """
        device = self.topology.get_device(device_id)
        if device is None:
            return []
        ports = set(range(device.port_count + 1))
        for conn in self.connections:
            if conn.device_a_id == device_id:
                ports.add(conn.port_a)
            if conn.device_b_id == device_id:
                ports.add(conn.port_b)
        return sorted(ports)

    def effective_interface(self, device_id: str, port_number: int) -> Interface | None:
        """The configured interface with out-of-capability fields masked."""
        iface = self.topology.get_interface(device_id, port_number)
        if iface is None:
            return None
        caps = self.capabilities(device_id)
        update: dict[str, object] = {}
        if not caps.per_port_ip:
            update["ip_address"] = None
        if not caps.vlan_support:
            update["vlan"] = None
        if not caps.port_mode_support:
            update["port_mode"] = None
        if not caps.dhcp_capable:
            update.update(dhcp_enabled=False, dhcp_range_start=None, dhcp_range_end=None)
        if not caps.nat_capable:
            update["nat_enabled"] = False
        if not caps.wifi_host:
            update.update(ssid=None, wifi_password=None)
        return iface.model_copy(update=update) if update else iface

    def effective_interfaces(self, device_id: str) -> list[Interface]:
        """All configured interfaces of a device, masked."""
        result = []
        for iface in self.topology.interfaces_of(device_id):
            masked = self.effective_interface(device_id, iface.port_number)
            if masked is not None:
                result.append(masked)
        return result

    def ip_of(self, device_id: str, port_number: int) -> str | None:
        iface = self.effective_interface(device_id, port_number)
        return iface.ip_address if iface else None

    def vlan_of(self, device_id: str, port_number: int) -> int | None:
        """Access VLAN of a port, or None when the port carries any VLAN.

        Ports of devices without VLAN support, and trunk/hybrid ports,
        are unconstrained. Unconfigured access ports sit in VLAN 1.
        """
        if not self.capabilities(device_id).vlan_support:
            return None
        iface = self.effective_interface(device_id, port_number)
        if iface is None:
            return DEFAULT_VLAN
        if iface.port_mode in (PortMode.TRUNK, PortMode.HYBRID):
            return None
        return iface.vlan or DEFAULT_VLAN

    def vlans_compatible(self, a: PortKey, b: PortKey) -> bool:
        va = self.vlan_of(*a)
        vb = self.vlan_of(*b)
        return va is None or vb is None or va == vb

    def device_graph(self, connection_ids: set[str] | None = None) -> nx.MultiGraph:
        """Build a device-level multigraph.

        Args:
            connection_ids: Restrict edges to these connections (all if None)

        Returns:
            MultiGraph with one node per device and one keyed edge per
            connection
        """
        graph = nx.MultiGraph()
        graph.add_nodes_from(self.topology.devices)
        for conn in self.connections:
            if connection_ids is not None and conn.id not in connection_ids:
                continue
            graph.add_edge(
                conn.device_a_id,
                conn.device_b_id,
                key=conn.id,
                ports={conn.device_a_id: conn.port_a, conn.device_b_id: conn.port_b},
                connection_type=conn.connection_type.value,
            )
        return graph
