"""
providers/dns_provider.py

Responsibility: Defines the DNSProvider Protocol and the value objects that
cross it: the provider response envelope and the record update payload.
Does NOT: make HTTP calls, read configuration, or decide whether to update.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Value objects: stable shapes exchanged with every DNSProvider
# ---------------------------------------------------------------------------


@dataclass
class ProviderResponse:
    """
    The uniform envelope wrapped around every provider response.

    Used for both the listing and the patch call. Each entry of `result`
    is an open mapping: only "id", "type" and "content" are relied upon,
    anything else the provider sends is carried along untouched.
    """

    success: bool
    errors: list[str] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)
    result: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class UpdateRequest:
    """
    The body sent to the provider's patch endpoint.

    Built fresh for every mismatch. `ttl` is kept as the string from the
    configuration file and sent verbatim.
    """

    type: str
    name: str
    content: str
    ttl: str
    proxied: bool

    def to_payload(self) -> dict[str, Any]:
        """Returns the JSON body in the field order the provider documents."""
        return {
            "type": self.type,
            "name": self.name,
            "content": self.content,
            "ttl": self.ttl,
            "proxied": self.proxied,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> UpdateRequest:
        return cls(
            type=payload["type"],
            name=payload["name"],
            content=payload["content"],
            ttl=payload["ttl"],
            proxied=payload["proxied"],
        )


# ---------------------------------------------------------------------------
# Abstract interface: what the reconciler needs from a DNS provider
# ---------------------------------------------------------------------------


@runtime_checkable
class DNSProvider(Protocol):
    """
    Abstract protocol for the two record operations the updater performs.

    DnsService depends on this abstraction, never on a concrete client.
    Every method returns the decoded envelope only when success=true.
    """

    async def list_records(self, zone_id: str, record_type: str, record_name: str) -> ProviderResponse:
        """
        Lists the records of one type and name within a zone.

        Args:
            zone_id: The provider-assigned zone identifier.
            record_type: "A", "AAAA" (or "" which matches nothing).
            record_name: The fully-qualified DNS name to look up.

        Returns:
            The decoded, successful ProviderResponse.

        Raises:
            DnsProviderError: If the API call fails.
        """
        ...

    async def patch_record(self, zone_id: str, record_id: str, update: UpdateRequest) -> ProviderResponse:
        """
        Patches an existing record in place.

        Args:
            zone_id: The provider-assigned zone identifier.
            record_id: The provider-assigned unique identifier of the record.
            update: The new record contents.

        Returns:
            The decoded, successful ProviderResponse.

        Raises:
            DnsProviderError: If the API call fails.
        """
        ...
