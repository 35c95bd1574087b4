"""IPv4 and CIDR arithmetic.

Addresses are handled as unsigned 32-bit integers. Parsers return None
for malformed input so callers can degrade to "no result"; use
`require_cidr` when an exception is wanted instead.

Two parsers exist on purpose: `parse_cidr` requires a prefix length
(interface addresses), `parse_ipv4` forbids one (DHCP range bounds).
"""

import re
from dataclasses import dataclass
from ipaddress import IPv4Address

from cableops.errors import AddressFormatError

_IPV4_RE = re.compile(r"^([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})$")
_CIDR_RE = re.compile(r"^([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})/([0-9]{1,2})$")

MAX_U32 = 0xFFFFFFFF


@dataclass(frozen=True)
class ParsedCidr:
    """An interface address with its prefix.

    All fields except `cidr` are unsigned 32-bit integers.
    """

    ip: int
    cidr: int
    network: int
    mask: int

    @property
    def broadcast(self) -> int:
        return self.network | (~self.mask & MAX_U32)

    @property
    def ip_string(self) -> str:
        return to_ip_string(self.ip)

    @property
    def network_string(self) -> str:
        """Network in CIDR notation, e.g. "192.168.1.0/24"."""
        return f"{to_ip_string(self.network)}/{self.cidr}"

    @property
    def mask_string(self) -> str:
        return to_ip_string(self.mask)

    def contains(self, ip: int) -> bool:
        """Check whether an address falls inside this network."""
        return (ip & self.mask) == self.network


def _octets_to_int(octets: tuple[str, ...]) -> int | None:
    values = [int(o) for o in octets]
    if any(v > 255 for v in values):
        return None
    return (values[0] << 24) | (values[1] << 16) | (values[2] << 8) | values[3]


def prefix_to_mask(cidr: int) -> int:
    """Convert a prefix length to a 32-bit netmask."""
    if cidr <= 0:
        return 0
    return (MAX_U32 << (32 - cidr)) & MAX_U32


def parse_cidr(value: str | None) -> ParsedCidr | None:
    """Parse "a.b.c.d/n" into integers.

    Returns None when the string does not match the grammar, an octet
    exceeds 255 or the prefix exceeds 32.

    Example:
        >>> parse_cidr("192.168.1.10/24").network_string
        '192.168.1.0/24'
    """
    if not value:
        return None
    match = _CIDR_RE.match(value.strip())
    if not match:
        return None
    ip = _octets_to_int(match.groups()[:4])
    cidr = int(match.group(5))
    if ip is None or cidr > 32:
        return None
    mask = prefix_to_mask(cidr)
    return ParsedCidr(ip=ip, cidr=cidr, network=ip & mask, mask=mask)


def parse_ipv4(value: str | None) -> int | None:
    """Parse a plain dotted IPv4 address (no prefix) into an integer."""
    if not value:
        return None
    match = _IPV4_RE.match(value.strip())
    if not match:
        return None
    return _octets_to_int(match.groups())


def parse_ip_lenient(value: str | None, default_prefix: int = 24) -> ParsedCidr | None:
    """Parse either CIDR or a plain address, assuming `default_prefix` for the latter."""
    parsed = parse_cidr(value)
    if parsed is not None:
        return parsed
    ip = parse_ipv4(value)
    if ip is None:
        return None
    mask = prefix_to_mask(default_prefix)
    return ParsedCidr(ip=ip, cidr=default_prefix, network=ip & mask, mask=mask)


def require_cidr(value: str) -> ParsedCidr:
    """Parse CIDR or raise.

    Raises:
        AddressFormatError: If the value is not valid CIDR
    """
    parsed = parse_cidr(value)
    if parsed is None:
        raise AddressFormatError(value)
    return parsed


def to_ip_string(value: int) -> str:
    """Format a 32-bit integer as dotted quad."""
    return str(IPv4Address(value & MAX_U32))


def strip_cidr(value: str) -> str:
    """Drop any "/n" suffix from an address string."""
    return value.split("/")[0].strip()


def same_subnet(a: str | None, b: str | None) -> bool:
    """Check whether two CIDR addresses share a subnet.

    Uses the shorter (less specific) of the two prefixes, so a /32 host
    matches a /24 gateway in the same /24. Unparseable input never matches.
    """
    pa = parse_cidr(a)
    pb = parse_cidr(b)
    if pa is None or pb is None:
        return False
    mask = prefix_to_mask(min(pa.cidr, pb.cidr))
    return (pa.ip & mask) == (pb.ip & mask)


def usable_hosts(cidr: int) -> int:
    """Number of assignable host addresses for a prefix length."""
    if cidr >= 32:
        return 1
    if cidr == 31:
        return 2
    return 2 ** (32 - cidr) - 2
