"""
services/address.py

Responsibility: Holds the resolved public address and classifies it as IPv4
or IPv6, mapping the result to the DNS record type it belongs in.
Does NOT: fetch the address or talk to any DNS provider.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass

RECORD_TYPE_A = "A"
RECORD_TYPE_AAAA = "AAAA"


def ip_version(raw_ip: str) -> int | None:
    """
    Parses a textual IP address and returns its version.

    IPv4-mapped IPv6 addresses (e.g. "::ffff:192.0.2.1") have a 4-byte form
    and therefore count as IPv4.

    Returns:
        4, 6, or None if `raw_ip` is not an IP address.
    """
    try:
        address = ipaddress.ip_address(raw_ip)
    except ValueError:
        return None

    if address.version == 4:
        return 4
    if address.ipv4_mapped is not None:
        return 4
    return 6


@dataclass(frozen=True)
class PublicAddress:
    """The caller's public IP exactly as the echo service returned it."""

    raw_ip: str

    @property
    def version(self) -> int | None:
        return ip_version(self.raw_ip)

    @property
    def is_ipv4(self) -> bool:
        return self.version == 4

    @property
    def is_ipv6(self) -> bool:
        return self.version == 6

    @property
    def is_valid(self) -> bool:
        return self.version is not None

    @property
    def record_type(self) -> str:
        """The record type for this address: "A", "AAAA", or "" if unparseable."""
        if self.is_ipv4:
            return RECORD_TYPE_A
        if self.is_ipv6:
            return RECORD_TYPE_AAAA
        return ""

    def __str__(self) -> str:
        return self.raw_ip


def record_type_for(raw_ip: str) -> str:
    """Maps an IP string to "A", "AAAA", or "" when it cannot be parsed."""
    return PublicAddress(raw_ip).record_type
