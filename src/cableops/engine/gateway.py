"""Gateway and subnet resolution.

A segment's gateway is the first interface, in discovery order, that
belongs to a gateway-capable device and carries a parseable address.
No attempt is made to pick a "best" gateway when several exist.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from cableops.engine.broadcast import walk_segment
from cableops.engine.view import PortKey, TopologyView
from cableops.model.addressing import parse_cidr, to_ip_string


@dataclass(frozen=True)
class Gateway:
    """The interface anchoring a segment's subnet."""

    device_id: str
    device_name: str
    port_number: int
    ip_address: str  # as configured, with prefix
    network: int
    cidr: int
    mask: int

    @property
    def subnet(self) -> str:
        """Subnet in CIDR notation, e.g. "192.168.1.0/24"."""
        return f"{to_ip_string(self.network)}/{self.cidr}"

    @property
    def gateway_ip(self) -> str:
        return self.ip_address.split("/")[0]

    @property
    def mask_string(self) -> str:
        return to_ip_string(self.mask)

    def is_port(self, device_id: str, port_number: int) -> bool:
        return self.device_id == device_id and self.port_number == port_number


def find_gateway(view: TopologyView, ports: Iterable[PortKey]) -> Gateway | None:
    """Scan member ports for the first gateway-capable interface with an IP."""
    for device_id, port_number in ports:
        if not view.capabilities(device_id).can_be_gateway:
            continue
        ip = view.ip_of(device_id, port_number)
        parsed = parse_cidr(ip)
        if parsed is None:
            continue
        return Gateway(
            device_id=device_id,
            device_name=view.topology.device_name(device_id),
            port_number=port_number,
            ip_address=ip.strip(),
            network=parsed.network,
            cidr=parsed.cidr,
            mask=parsed.mask,
        )
    return None


def resolve_gateway(view: TopologyView, device_id: str, port_number: int) -> Gateway | None:
    """Find the gateway governing a port's segment.

    The starting device is crossed even when it routes, so a router port
    without an address of its own still sees the router's other subnets.

    Returns:
        The first gateway found walking the port's broadcast domain, or
        None when the segment has no routed interface (a normal state,
        e.g. a LAN without a router yet).
    """
    return find_gateway(view, walk_segment(view, device_id, port_number, expand_start_device=True))
