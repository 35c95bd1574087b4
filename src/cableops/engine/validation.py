"""Advisory validation of interface configuration.

Nothing here blocks a write. Results describe what is wrong so the
editing layer can warn; persisting an "invalid" address is allowed.
"""

from dataclasses import dataclass, field
from enum import Enum

from cableops.engine.broadcast import walk_segment
from cableops.engine.gateway import Gateway, resolve_gateway
from cableops.engine.view import TopologyView
from cableops.model.addressing import parse_cidr, parse_ip_lenient, parse_ipv4, strip_cidr


class ValidationFailure(str, Enum):
    INVALID_FORMAT = "InvalidFormat"
    SUBNET_MISMATCH = "SubnetMismatch"


@dataclass(frozen=True)
class IpValidationResult:
    """Outcome of checking a proposed address against its segment."""

    valid: bool
    reason: ValidationFailure | None = None
    message: str | None = None
    gateway_subnet: str | None = None
    gateway: Gateway | None = None


def validate_port_ip(
    view: TopologyView,
    proposed_ip: str,
    device_id: str,
    port_number: int,
) -> IpValidationResult:
    """Check a proposed interface address against the segment's gateway.

    Args:
        view: Topology view of the current snapshot
        proposed_ip: Address in CIDR notation
        device_id: Device owning the port
        port_number: Port being configured

    Returns:
        Valid when no gateway governs the segment, when the port is the
        gateway itself, or when the address falls inside the gateway's
        subnet. Otherwise invalid with a warning naming the subnet and
        gateway device.
    """
    parsed = parse_cidr(proposed_ip)
    if parsed is None:
        return IpValidationResult(
            valid=False,
            reason=ValidationFailure.INVALID_FORMAT,
            message=f"Invalid IP address format: {proposed_ip}",
        )

    gateway = resolve_gateway(view, device_id, port_number)
    if gateway is None:
        return IpValidationResult(valid=True)

    if gateway.is_port(device_id, port_number):
        return IpValidationResult(valid=True, gateway_subnet=gateway.subnet, gateway=gateway)

    if (parsed.ip & gateway.mask) != gateway.network:
        return IpValidationResult(
            valid=False,
            reason=ValidationFailure.SUBNET_MISMATCH,
            message=(
                f"IP {proposed_ip} is not in subnet {gateway.subnet} "
                f"(gateway: {gateway.device_name} P{gateway.port_number})"
            ),
            gateway_subnet=gateway.subnet,
            gateway=gateway,
        )

    return IpValidationResult(valid=True, gateway_subnet=gateway.subnet, gateway=gateway)


@dataclass
class InterfaceCheck:
    """Problems found with a proposed interface update."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def check_interface_update(
    view: TopologyView,
    device_id: str,
    port_number: int,
    ip_address: str | None = None,
    gateway: str | None = None,
    dhcp_range_start: str | None = None,
    dhcp_range_end: str | None = None,
) -> InterfaceCheck:
    """Review a proposed interface update before it is saved.

    Addresses may be given with or without a prefix; a plain address is
    treated as /24. Checks address format, duplicates within the
    segment, the gateway subnet, the default-gateway format and the DHCP
    range (well-formed, ordered, inside one /24).
    """
    check = InterfaceCheck()

    if ip_address:
        parsed = parse_ip_lenient(ip_address)
        if parsed is None:
            check.errors.append(f"Invalid IP address format: {ip_address}")
        else:
            proposed = strip_cidr(ip_address)
            for member_device, member_port in walk_segment(view, device_id, port_number):
                if (member_device, member_port) == (device_id, port_number):
                    continue
                existing = view.ip_of(member_device, member_port)
                if existing and strip_cidr(existing) == proposed:
                    check.errors.append(
                        f"IP {proposed} is already assigned to another device in this network segment"
                    )
                    break

            cidr_form = ip_address if "/" in ip_address else f"{proposed}/{parsed.cidr}"
            result = validate_port_ip(view, cidr_form, device_id, port_number)
            if not result.valid and result.message:
                check.warnings.append(result.message)

    if gateway and parse_ip_lenient(gateway) is None:
        check.errors.append("Invalid gateway IP format")

    start = parse_ipv4(dhcp_range_start) if dhcp_range_start else None
    end = parse_ipv4(dhcp_range_end) if dhcp_range_end else None
    if dhcp_range_start and start is None:
        check.errors.append("Invalid DHCP range start IP")
    if dhcp_range_end and end is None:
        check.errors.append("Invalid DHCP range end IP")
    if start is not None and end is not None:
        if start > end:
            check.errors.append("DHCP range start must be less than or equal to end")
        elif (start >> 8) != (end >> 8):
            check.errors.append("DHCP range start and end must be in the same /24 subnet")

    return check
