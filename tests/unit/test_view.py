"""Unit tests for the topology view."""

from cableops.engine.view import TopologyView
from cableops.model.topology import Connection, Device, Interface, Topology


def create_lan() -> Topology:
    """Create a small LAN.

    Topology:
        r1 (P1) -- (P1) sw1 (P2) -- (P1) pc1
    """
    devices = [
        Device(id="r1", name="Router", device_type="router", port_count=2),
        Device(id="sw1", name="Switch", device_type="switch", port_count=4),
        Device(id="pc1", name="PC", device_type="pc", port_count=1),
    ]
    interfaces = [
        Interface(device_id="r1", port_number=1, ip_address="10.0.0.1/24", vlan=30),
        Interface(device_id="sw1", port_number=1, ip_address="10.0.0.2/24", port_mode="trunk"),
        Interface(device_id="sw1", port_number=2, vlan=10),
        Interface(device_id="pc1", port_number=1, ip_address="10.0.0.10/24", vlan=20),
    ]
    connections = [
        Connection(id="c1", device_a_id="r1", port_a=1, device_b_id="sw1", port_b=1),
        Connection(id="c2", device_a_id="sw1", port_a=2, device_b_id="pc1", port_b=1),
    ]
    return Topology.from_records(devices, interfaces, connections)


class TestAdjacency:
    """Tests for neighbor and port queries."""

    def test_neighbors(self):
        """Test neighbors from the local side."""
        view = TopologyView(create_lan())
        neighbors = view.neighbors("sw1")
        assert {(n.peer_id, n.peer_port, n.local_port) for n in neighbors} == {
            ("r1", 1, 1),
            ("pc1", 1, 2),
        }

    def test_links_at_port(self):
        """Test connection lookup by port."""
        view = TopologyView(create_lan())
        assert [c.id for c in view.links_at("sw1", 2)] == ["c2"]
        assert view.links_at("sw1", 3) == []

    def test_ports_include_wifi_port(self):
        """Test that port 0 is always listed."""
        view = TopologyView(create_lan())
        assert view.ports_of("pc1") == [0, 1]
        assert view.ports_of("sw1") == [0, 1, 2, 3, 4]

    def test_ports_of_unknown_device(self):
        """Test that unknown devices have no ports."""
        assert TopologyView(create_lan()).ports_of("ghost") == []

    def test_stale_port_included(self):
        """Test that a connection beyond port_count still shows its port."""
        topology = Topology.from_records(
            [
                Device(id="a", device_type="pc", port_count=1),
                Device(id="b", device_type="pc", port_count=1),
            ],
            connections=[Connection(id="c", device_a_id="a", port_a=5, device_b_id="b", port_b=1)],
        )
        assert TopologyView(topology).ports_of("a") == [0, 1, 5]


class TestUnusableConnections:
    """Tests for dropped connections."""

    def test_self_loop_ignored(self):
        """Test that a device cabled to itself has no neighbors."""
        topology = Topology.from_records(
            [Device(id="r1", device_type="router", port_count=2)],
            connections=[Connection(id="loop", device_a_id="r1", port_a=1, device_b_id="r1", port_b=2)],
        )
        view = TopologyView(topology)
        assert view.neighbors("r1") == []
        assert view.device_graph().number_of_edges() == 0

    def test_unknown_device_ignored(self):
        """Test that connections to missing devices are dropped."""
        topology = Topology.from_records(
            [Device(id="a", device_type="pc", port_count=1)],
            connections=[Connection(id="c", device_a_id="a", port_a=1, device_b_id="ghost", port_b=1)],
        )
        view = TopologyView(topology)
        assert view.connections == []
        assert list(view.device_graph().nodes) == ["a"]


class TestMasking:
    """Tests for capability masking."""

    def test_switch_ip_masked(self):
        """Test that a layer 2 switch port address is ignored."""
        view = TopologyView(create_lan())
        assert view.ip_of("sw1", 1) is None
        assert view.topology.get_interface("sw1", 1).ip_address == "10.0.0.2/24"

    def test_router_ip_kept(self):
        """Test that router addresses pass through."""
        assert TopologyView(create_lan()).ip_of("r1", 1) == "10.0.0.1/24"

    def test_unconfigured_port(self):
        """Test that a port without an interface yields None."""
        view = TopologyView(create_lan())
        assert view.effective_interface("sw1", 3) is None
        assert view.ip_of("sw1", 3) is None

    def test_masking_leaves_snapshot_untouched(self):
        """Test that masking returns a copy."""
        view = TopologyView(create_lan())
        view.effective_interfaces("sw1")
        assert view.topology.get_interface("sw1", 1).port_mode is not None


class TestVlans:
    """Tests for VLAN resolution."""

    def test_default_vlan(self):
        """Test that unconfigured switch ports are in VLAN 1."""
        assert TopologyView(create_lan()).vlan_of("sw1", 3) == 1

    def test_access_vlan(self):
        """Test a configured access VLAN."""
        assert TopologyView(create_lan()).vlan_of("sw1", 2) == 10

    def test_trunk_carries_any_vlan(self):
        """Test that trunk ports are unconstrained."""
        assert TopologyView(create_lan()).vlan_of("sw1", 1) is None

    def test_vlan_ignored_without_support(self):
        """Test that VLAN tags on PCs and routers are ignored."""
        view = TopologyView(create_lan())
        assert view.vlan_of("pc1", 1) is None
        assert view.vlan_of("r1", 1) is None

    def test_compatibility(self):
        """Test VLAN compatibility between ports."""
        view = TopologyView(create_lan())
        assert view.vlans_compatible(("sw1", 2), ("pc1", 1))
        assert view.vlans_compatible(("sw1", 1), ("sw1", 2))
        assert not view.vlans_compatible(("sw1", 2), ("sw1", 3))


class TestDeviceGraph:
    """Tests for the device multigraph."""

    def test_parallel_connections(self):
        """Test that parallel cables become separate keyed edges."""
        topology = Topology.from_records(
            [
                Device(id="sw1", device_type="switch", port_count=4),
                Device(id="sw2", device_type="switch", port_count=4),
            ],
            connections=[
                Connection(id="l1", device_a_id="sw1", port_a=1, device_b_id="sw2", port_b=1),
                Connection(id="l2", device_a_id="sw1", port_a=2, device_b_id="sw2", port_b=2),
            ],
        )
        graph = TopologyView(topology).device_graph()
        assert graph.number_of_edges("sw1", "sw2") == 2
        assert set(graph.get_edge_data("sw1", "sw2")) == {"l1", "l2"}

    def test_restricted_edges(self):
        """Test restricting the graph to chosen connections."""
        graph = TopologyView(create_lan()).device_graph({"c1"})
        assert graph.number_of_nodes() == 3
        assert graph.number_of_edges() == 1
        assert graph.has_edge("r1", "sw1")
