"""DHCP lease allocation.

Range bounds are plain dotted addresses (no prefix) and are parsed with
`parse_ipv4`, not the CIDR parser.
"""

import logging
from collections.abc import Iterable

from cableops.engine.view import TopologyView
from cableops.model.addressing import parse_ipv4, strip_cidr, to_ip_string
from cableops.model.topology import WIFI_PORT, Connection, Interface

logger = logging.getLogger(__name__)


def assigned_wifi_addresses(
    host_device_id: str,
    connections: Iterable[Connection],
    interfaces: Iterable[Interface],
) -> set[int]:
    """Addresses held by Wi-Fi clients of a host.

    Reads the port-0 address of every device associated with the host
    over Wi-Fi, ignoring any prefix.
    """
    by_key = {iface.key: iface for iface in interfaces}
    assigned: set[int] = set()
    for conn in connections:
        if not conn.is_wifi or conn.is_self_loop or not conn.touches(host_device_id):
            continue
        client_id, _ = conn.peer_of(host_device_id)
        client_iface = by_key.get((client_id, WIFI_PORT))
        if client_iface is None or not client_iface.ip_address:
            continue
        ip = parse_ipv4(strip_cidr(client_iface.ip_address))
        if ip is not None:
            assigned.add(ip)
    return assigned


def next_dhcp_ip(
    host_interface: Interface,
    connections: Iterable[Connection],
    interfaces: Iterable[Interface],
) -> str | None:
    """Compute the next free address in a DHCP interface's pool.

    Args:
        host_interface: Interface serving DHCP
        connections: All connections of the snapshot
        interfaces: All interfaces of the snapshot

    Returns:
        The lowest address in [start, end] not held by a Wi-Fi client, or
        None when DHCP is off, a bound is malformed, the range is
        inverted, or the pool is exhausted.
    """
    if not host_interface.dhcp_enabled:
        return None
    start = parse_ipv4(host_interface.dhcp_range_start)
    end = parse_ipv4(host_interface.dhcp_range_end)
    if start is None or end is None or start > end:
        return None

    assigned = assigned_wifi_addresses(host_interface.device_id, connections, interfaces)
    for candidate in range(start, end + 1):
        if candidate not in assigned:
            return to_ip_string(candidate)

    logger.debug("DHCP pool exhausted on %s port %d", *host_interface.key)
    return None


def next_dhcp_ip_for(view: TopologyView, device_id: str, port_number: int) -> str | None:
    """Next lease for a port, honoring the device's DHCP capability."""
    iface = view.effective_interface(device_id, port_number)
    if iface is None:
        return None
    return next_dhcp_ip(iface, view.connections, view.topology.interfaces)
