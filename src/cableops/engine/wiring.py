"""Rules for adding connections.

Helpers the editing layer calls around a new cable or Wi-Fi link:
deciding the medium, checking the link is allowed, and working out the
follow-up configuration (DHCP lease for the client, uplink role on a
router facing the cloud).
"""

import re
from dataclasses import dataclass

from cableops.engine.dhcp import next_dhcp_ip
from cableops.engine.view import PortKey, TopologyView
from cableops.errors import WiringError
from cableops.model.topology import WIFI_PORT, ConnectionType

_SPEED_RE = re.compile(r"^([\d.]+)\s*(Mbit|Gbit)$", re.IGNORECASE)


@dataclass(frozen=True)
class DhcpAssignment:
    """Address a DHCP server would hand to the far side of a new link."""

    server_device_id: str
    server_port: int
    client_device_id: str
    client_port: int
    ip_address: str


def infer_connection_type(
    view: TopologyView, a: str, port_a: int, b: str, port_b: int
) -> ConnectionType:
    """Wi-Fi when a port 0 joins a Wi-Fi host to a Wi-Fi client, else wired."""
    if WIFI_PORT not in (port_a, port_b):
        return ConnectionType.WIRED
    caps_a = view.capabilities(a)
    caps_b = view.capabilities(b)
    if (caps_a.wifi_host and caps_b.wifi_client) or (caps_b.wifi_host and caps_a.wifi_client):
        return ConnectionType.WIFI
    return ConnectionType.WIRED


def check_new_connection(
    view: TopologyView,
    a: str,
    port_a: int,
    b: str,
    port_b: int,
    connection_type: ConnectionType | None = None,
    strict: bool = False,
) -> list[str]:
    """List the reasons a proposed connection is not allowed.

    Args:
        strict: Raise WiringError instead of returning problems

    Returns:
        Problems found (empty if the connection is allowed)

    Raises:
        WiringError: In strict mode, when any problem is found
    """
    problems: list[str] = []
    topology = view.topology
    if connection_type is None:
        connection_type = infer_connection_type(view, a, port_a, b, port_b)

    if a == b:
        problems.append("Cannot connect a device to itself")

    for device_id, port in ((a, port_a), (b, port_b)):
        device = topology.get_device(device_id)
        if device is None:
            problems.append(f"Device not found: {device_id}")
        elif port > device.port_count:
            problems.append(f"Port {port} does not exist on {device.label}")

    if connection_type == ConnectionType.WIRED:
        for label, device_id, port in (("A", a, port_a), ("B", b, port_b)):
            if port == WIFI_PORT:
                problems.append(f"Port 0 on device {label} is reserved for Wi-Fi")
            elif view.links_at(device_id, port):
                problems.append(f"Port {port} on device {label} is already connected")
    else:
        for conn in view.connections:
            if conn.is_wifi and conn.touches(a) and conn.touches(b):
                problems.append("These devices are already connected via WiFi")
                break
        for device_id in (a, b):
            caps = view.capabilities(device_id)
            if caps.wifi_host or not caps.wifi_client:
                continue
            if any(c.is_wifi and c.touches(device_id, WIFI_PORT) for c in view.connections):
                problems.append(
                    f"{topology.device_name(device_id)} is already joined to a Wi-Fi network"
                )

    if strict and problems:
        raise WiringError(problems[0], {"problems": problems})
    return problems


def plan_dhcp_assignment(
    view: TopologyView, a: str, port_a: int, b: str, port_b: int
) -> DhcpAssignment | None:
    """Lease for the client side of a new link, if the other side serves DHCP.

    A wired link leases from whichever end has a DHCP pool. A Wi-Fi join
    leases from the host's port 0 pool to the client's port 0.
    """
    if infer_connection_type(view, a, port_a, b, port_b) == ConnectionType.WIFI:
        if view.capabilities(a).wifi_host and view.capabilities(b).wifi_client:
            candidates = [(a, WIFI_PORT, b, WIFI_PORT)]
        else:
            candidates = [(b, WIFI_PORT, a, WIFI_PORT)]
    else:
        candidates = [(a, port_a, b, port_b), (b, port_b, a, port_a)]

    for server, server_port, client, client_port in candidates:
        iface = view.effective_interface(server, server_port)
        if iface is None or not iface.dhcp_enabled:
            continue
        ip = next_dhcp_ip(iface, view.connections, view.topology.interfaces)
        if ip is None:
            return None
        return DhcpAssignment(
            server_device_id=server,
            server_port=server_port,
            client_device_id=client,
            client_port=client_port,
            ip_address=ip,
        )
    return None


def plan_uplink_role(
    view: TopologyView, a: str, port_a: int, b: str, port_b: int
) -> PortKey | None:
    """The routing-device port that should become an uplink when wired to the cloud."""
    for cloud, other, other_port in ((a, b, port_b), (b, a, port_a)):
        if view.capabilities(cloud).is_cloud and view.capabilities(other).is_routing:
            return (other, other_port)
    return None


def parse_speed_to_mbit(speed: str) -> float:
    """Parse a speed like "10 Gbit" into Mbit/s; 0 when unrecognized."""
    match = _SPEED_RE.match(speed.strip())
    if not match:
        return 0
    value = float(match.group(1))
    return value * 1000 if match.group(2).lower() == "gbit" else value


def negotiated_speed(speed_a: str | None, speed_b: str | None) -> str | None:
    """The slower of two port speeds, as the link would negotiate."""
    if not speed_a and not speed_b:
        return None
    if not speed_a:
        return speed_b
    if not speed_b:
        return speed_a
    return speed_a if parse_speed_to_mbit(speed_a) <= parse_speed_to_mbit(speed_b) else speed_b
