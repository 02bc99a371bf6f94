"""Network address helpers."""

from __future__ import annotations

import ipaddress


def cidr_total_ips(cidr: str) -> int:
    """Return the number of addresses in a CIDR block such as ``10.0.0.0/24``."""
    address, sep, prefix = cidr.partition("/")
    if not sep or not prefix.isdigit() or not prefix.isascii():
        raise ValueError(f"invalid CIDR: {cidr!r}")
    try:
        network = ipaddress.ip_network(f"{address}/{prefix}", strict=False)
    except ValueError as exc:
        raise ValueError(f"invalid CIDR: {exc}") from exc
    return 1 << (network.max_prefixlen - network.prefixlen)