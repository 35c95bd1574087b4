"""Unit tests for connection rules."""

import pytest

from cableops.engine.view import TopologyView
from cableops.engine.wiring import (
    check_new_connection,
    infer_connection_type,
    negotiated_speed,
    parse_speed_to_mbit,
    plan_dhcp_assignment,
    plan_uplink_role,
)
from cableops.errors import WiringError
from cableops.model.topology import Connection, ConnectionType, Device, Interface, Topology


def create_workspace() -> TopologyView:
    """Create a workspace with one cable and one Wi-Fi association.

    Topology:
        pc (P1) -- (P1) sw
        ap (P0) ~~ (P0) lap
        r, ap2, isp, pc2 unconnected
    """
    devices = [
        Device(id="sw", name="Core", device_type="switch", port_count=4),
        Device(id="pc", name="Desk", device_type="pc", port_count=1),
        Device(id="pc2", name="Desk 2", device_type="pc", port_count=1),
        Device(id="ap", name="AP", device_type="access-point", port_count=1),
        Device(id="ap2", name="AP 2", device_type="access-point", port_count=1),
        Device(id="lap", name="Laptop", device_type="laptop", port_count=0),
        Device(id="r", name="Router", device_type="router", port_count=2),
        Device(id="isp", name="Internet", device_type="cloud", port_count=1),
    ]
    interfaces = [
        Interface(
            device_id="r",
            port_number=1,
            ip_address="192.168.1.1/24",
            dhcp_enabled=True,
            dhcp_range_start="192.168.1.100",
            dhcp_range_end="192.168.1.150",
        ),
    ]
    connections = [
        Connection(id="cable", device_a_id="pc", port_a=1, device_b_id="sw", port_b=1),
        Connection(
            id="air", device_a_id="ap", port_a=0, device_b_id="lap", port_b=0, connection_type="wifi"
        ),
    ]
    return TopologyView(Topology.from_records(devices, interfaces, connections))


class TestInferConnectionType:
    """Tests for medium inference."""

    def test_wifi_between_host_and_client(self):
        """Test that port 0 between a host and a client is Wi-Fi."""
        assert infer_connection_type(create_workspace(), "lap", 0, "ap2", 0) == ConnectionType.WIFI

    def test_numbered_ports_are_wired(self):
        """Test that numbered ports are cabled."""
        assert infer_connection_type(create_workspace(), "pc2", 1, "sw", 2) == ConnectionType.WIRED

    def test_port_zero_without_wifi_host(self):
        """Test that port 0 on two non-hosts is not Wi-Fi."""
        assert infer_connection_type(create_workspace(), "pc2", 0, "sw", 0) == ConnectionType.WIRED


class TestCheckNewConnection:
    """Tests for wiring rules."""

    def test_allowed(self):
        """Test a free cable slot."""
        assert check_new_connection(create_workspace(), "sw", 2, "r", 1) == []

    def test_self_connection(self):
        """Test that a device cannot be cabled to itself."""
        problems = check_new_connection(create_workspace(), "sw", 2, "sw", 3)
        assert "Cannot connect a device to itself" in problems

    def test_unknown_device(self):
        """Test a reference to a missing device."""
        problems = check_new_connection(create_workspace(), "ghost", 1, "r", 1)
        assert "Device not found: ghost" in problems

    def test_port_out_of_range(self):
        """Test a port beyond the device's port count."""
        problems = check_new_connection(create_workspace(), "sw", 9, "r", 1)
        assert problems == ["Port 9 does not exist on Core"]

    def test_port_in_use(self):
        """Test that a cabled port cannot take a second cable."""
        problems = check_new_connection(create_workspace(), "sw", 1, "r", 1)
        assert problems == ["Port 1 on device A is already connected"]

    def test_wifi_port_reserved(self):
        """Test that port 0 cannot be cabled."""
        problems = check_new_connection(create_workspace(), "r", 1, "sw", 0)
        assert problems == ["Port 0 on device B is reserved for Wi-Fi"]

    def test_duplicate_wifi(self):
        """Test a second association between the same pair."""
        problems = check_new_connection(create_workspace(), "ap", 0, "lap", 0)
        assert "These devices are already connected via WiFi" in problems

    def test_client_already_joined(self):
        """Test that a client joins one Wi-Fi network at a time."""
        problems = check_new_connection(create_workspace(), "ap2", 0, "lap", 0)
        assert problems == ["Laptop is already joined to a Wi-Fi network"]

    def test_strict_raises(self):
        """Test strict mode."""
        with pytest.raises(WiringError) as exc_info:
            check_new_connection(create_workspace(), "sw", 1, "r", 1, strict=True)
        assert exc_info.value.details["problems"] == ["Port 1 on device A is already connected"]


class TestFollowUps:
    """Tests for configuration derived from a new link."""

    def test_dhcp_assignment(self):
        """Test that a cable to a DHCP port plans a lease."""
        assignment = plan_dhcp_assignment(create_workspace(), "pc2", 1, "r", 1)
        assert assignment.server_device_id == "r"
        assert assignment.client_device_id == "pc2"
        assert assignment.client_port == 1
        assert assignment.ip_address == "192.168.1.100"

    def test_no_dhcp_server(self):
        """Test that no lease is planned without a DHCP side."""
        assert plan_dhcp_assignment(create_workspace(), "pc2", 1, "sw", 2) is None

    def test_wifi_join_without_pool(self):
        """Test that a Wi-Fi join to a host without DHCP plans nothing."""
        assert plan_dhcp_assignment(create_workspace(), "ap2", 0, "lap", 0) is None

    def test_wifi_join_leases_from_host(self):
        """Test that a Wi-Fi join leases from the host's port 0 pool."""
        topology = Topology.from_records(
            [
                Device(id="ap", device_type="access-point", port_count=1),
                Device(id="lap", device_type="laptop", port_count=0),
            ],
            [
                Interface(
                    device_id="ap",
                    port_number=0,
                    ip_address="192.168.1.2/24",
                    dhcp_enabled=True,
                    dhcp_range_start="192.168.1.100",
                    dhcp_range_end="192.168.1.150",
                ),
            ],
        )
        assignment = plan_dhcp_assignment(TopologyView(topology), "lap", 0, "ap", 0)
        assert assignment.server_device_id == "ap"
        assert assignment.server_port == 0
        assert assignment.client_device_id == "lap"
        assert assignment.client_port == 0
        assert assignment.ip_address == "192.168.1.100"

    def test_wifi_join_skips_associated_clients(self):
        """Test that addresses held by joined clients are not leased again."""
        topology = Topology.from_records(
            [
                Device(id="ap", device_type="access-point", port_count=1),
                Device(id="lap", device_type="laptop", port_count=0),
                Device(id="tab", device_type="tablet", port_count=0),
            ],
            [
                Interface(
                    device_id="ap",
                    port_number=0,
                    dhcp_enabled=True,
                    dhcp_range_start="192.168.1.100",
                    dhcp_range_end="192.168.1.150",
                ),
                Interface(device_id="lap", port_number=0, ip_address="192.168.1.100/24"),
            ],
            [
                Connection(
                    id="air", device_a_id="ap", port_a=0, device_b_id="lap", port_b=0, connection_type="wifi"
                ),
            ],
        )
        assignment = plan_dhcp_assignment(TopologyView(topology), "ap", 0, "tab", 0)
        assert assignment.client_device_id == "tab"
        assert assignment.ip_address == "192.168.1.101"

    def test_uplink_role(self):
        """Test that a router cabled to the cloud gets an uplink port."""
        assert plan_uplink_role(create_workspace(), "isp", 1, "r", 2) == ("r", 2)
        assert plan_uplink_role(create_workspace(), "r", 2, "isp", 1) == ("r", 2)

    def test_uplink_role_needs_router(self):
        """Test that a switch cabled to the cloud is left alone."""
        assert plan_uplink_role(create_workspace(), "isp", 1, "sw", 3) is None


class TestSpeeds:
    """Tests for link speed negotiation."""

    @pytest.mark.parametrize(
        "speed,expected",
        [("100 Mbit", 100), ("1 Gbit", 1000), ("2.5 Gbit", 2500), ("10gbit", 10000), ("fast", 0)],
    )
    def test_parse(self, speed, expected):
        """Test speed parsing."""
        assert parse_speed_to_mbit(speed) == expected

    def test_slower_side_wins(self):
        """Test that a link runs at the slower port's speed."""
        assert negotiated_speed("1 Gbit", "100 Mbit") == "100 Mbit"
        assert negotiated_speed("10 Mbit", "1 Gbit") == "10 Mbit"

    def test_missing_side(self):
        """Test negotiation with unknown speeds."""
        assert negotiated_speed(None, "1 Gbit") == "1 Gbit"
        assert negotiated_speed("1 Gbit", None) == "1 Gbit"
        assert negotiated_speed(None, None) is None
