"""Simulated ping / traceroute between two interfaces.

Success or failure is decided structurally from the snapshot and is
reproducible. Only the per-hop latency is random, drawn from an
injectable `random.Random` so tests can pin it.
"""

import math
import random
from dataclasses import dataclass, field

from cableops.engine.paths import shortest_path
from cableops.engine.view import PortKey, TopologyView
from cableops.model.addressing import same_subnet, strip_cidr

MISSING_ADDRESS = "Source and destination must have IP addresses"
NO_ROUTER = "Destination host unreachable — different subnets with no router in path"


@dataclass(frozen=True)
class PingHop:
    """One device along the simulated path."""

    device_id: str
    device_name: str
    port_number: int
    ip_address: str | None
    latency_ms: int


@dataclass
class PingResult:
    """Outcome of a simulated ping."""

    success: bool
    message: str
    hops: list[PingHop] = field(default_factory=list)
    total_latency_ms: int = 0

    @property
    def round_trip_ms(self) -> int:
        return 2 * self.total_latency_ms

    @property
    def hop_count(self) -> int:
        return max(len(self.hops) - 1, 0)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _hop_latency(rng: random.Random, index: int) -> int:
    return _round_half_up(0.5 + rng.random() * 2 + index * 0.3)


def _egress_port(view: TopologyView, device_id: str, next_id: str) -> int:
    """Port on `device_id` of the first connection leading to `next_id`."""
    for conn in view.connections:
        if conn.touches(device_id) and conn.touches(next_id):
            return conn.local_port(device_id)
    return 0


def _straddles(view: TopologyView, device_id: str, src_ip: str, dst_ip: str) -> bool:
    """True when a device has addresses in both the source and destination subnets."""
    ips = [i.ip_address for i in view.effective_interfaces(device_id) if i.ip_address]
    return any(same_subnet(ip, src_ip) for ip in ips) and any(
        same_subnet(ip, dst_ip) for ip in ips
    )


def simulate_ping(
    view: TopologyView,
    source: PortKey,
    destination: PortKey,
    rng: random.Random | None = None,
) -> PingResult:
    """Simulate a ping from one interface to another.

    Args:
        view: Topology view of the current snapshot
        source: (device_id, port_number) sending the ping
        destination: (device_id, port_number) being pinged
        rng: Random source for hop latency (a fresh unseeded one if None)

    Returns:
        PingResult with the hop list. Fails when either side lacks an
        address, when no path exists, or when the two addresses are in
        different subnets and no device on the path straddles both.
    """
    rng = rng or random.Random()
    src_ip = view.ip_of(*source)
    dst_ip = view.ip_of(*destination)
    if not src_ip or not dst_ip:
        return PingResult(success=False, message=MISSING_ADDRESS)

    path = shortest_path(view, source[0], destination[0])
    if path is None:
        return PingResult(
            success=False,
            message=f"No route to host — {strip_cidr(dst_ip)} is unreachable",
        )

    hops: list[PingHop] = []
    last = len(path) - 1
    for index, device_id in enumerate(path):
        if index == 0:
            port, ip = source[1], src_ip
        elif index == last:
            port, ip = destination[1], dst_ip
        else:
            port = _egress_port(view, device_id, path[index + 1])
            ip = view.ip_of(device_id, port)
        hops.append(
            PingHop(
                device_id=device_id,
                device_name=view.topology.device_name(device_id),
                port_number=port,
                ip_address=ip,
                latency_ms=_hop_latency(rng, index),
            )
        )

    total = sum(h.latency_ms for h in hops)

    if len(hops) >= 2:
        first_ip = hops[0].ip_address
        final_ip = hops[-1].ip_address
        if first_ip and final_ip and not same_subnet(first_ip, final_ip):
            if not any(_straddles(view, h.device_id, first_ip, final_ip) for h in hops[1:-1]):
                return PingResult(success=False, message=NO_ROUTER, hops=hops, total_latency_ms=total)

    n = len(hops) - 1
    return PingResult(
        success=True,
        message=f"Reply from {strip_cidr(dst_ip)}: {n} hop{'' if n == 1 else 's'}, time={total}ms",
        hops=hops,
        total_latency_ms=total,
    )
