"""Broadcast-domain traversal.

Walks ports the way a broadcast frame would travel: across cables and
Wi-Fi associations, and through every device that does not route. A
routing (layer 3) device is entered but never crossed; the port the
walk arrived on becomes a member and the device's other ports are left
for their own domains.
"""

from collections import deque

from cableops.engine.view import PortKey, TopologyView


def walk_segment(
    view: TopologyView,
    device_id: str,
    port_number: int,
    expand_start_device: bool = False,
) -> list[PortKey]:
    """Collect the ports sharing a broadcast domain with one port.

    The starting port is always expanded through its own connections,
    even on a routing device, so a router port finds the segment it
    faces.

    Args:
        view: Topology view of the current snapshot
        device_id: Device owning the starting port
        port_number: Starting port
        expand_start_device: Cross the starting device even when it
            routes, so its other interfaces join the walk

    Returns:
        Member ports in discovery order, starting port first. Empty when
        the device is not in the snapshot.
    """
    if view.topology.get_device(device_id) is None:
        return []

    start: PortKey = (device_id, port_number)
    visited: set[PortKey] = {start}
    order: list[PortKey] = []
    queue: deque[PortKey] = deque([start])

    while queue:
        current = queue.popleft()
        order.append(current)
        dev, port = current

        # Across the wire
        for conn in view.links_at(dev, port):
            peer = conn.peer_of(dev)
            if peer in visited or not view.vlans_compatible(current, peer):
                continue
            visited.add(peer)
            queue.append(peer)

        # Through the device
        crosses = expand_start_device and dev == device_id
        if view.capabilities(dev).is_routing and not crosses:
            continue
        for other in view.ports_of(dev):
            sibling = (dev, other)
            if sibling in visited or not view.vlans_compatible(current, sibling):
                continue
            visited.add(sibling)
            queue.append(sibling)

    return order
