"""CableOps topology semantics engine.

Answers questions about a modeled network: broadcast domains, gateway
subnets, DHCP leases, reachability, live traffic and simulated pings.
"""

__version__ = "0.1.0"
