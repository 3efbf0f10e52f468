"""
services/dns_service.py

Responsibility: Reconciles the configured DNS record with the host's public
IP. Looks the record up at the provider and patches it when the stored
content differs.
Does NOT: make HTTP calls directly, read the configuration file, or exit
the process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from config import Profile
from exceptions import RecordNotFoundError, RecordTypeMismatchError
from providers.dns_provider import DNSProvider, UpdateRequest
from services.address import PublicAddress

logger = logging.getLogger(__name__)

OUTCOME_UNCHANGED = "unchanged"
OUTCOME_UPDATED = "updated"
OUTCOME_DRY_RUN = "dry-run"


@dataclass
class ReconcileResult:
    """What a reconciliation did, for the caller to report."""

    # One of OUTCOME_UNCHANGED, OUTCOME_UPDATED, OUTCOME_DRY_RUN
    outcome: str

    # The provider record the decision was made on
    record: dict[str, Any]

    # The patch body, when an update was sent (or would have been)
    update: UpdateRequest | None = None

    # Records returned by the patch call
    updated: list[dict[str, Any]] = field(default_factory=list)


def build_update(profile: Profile, address: PublicAddress) -> UpdateRequest:
    """Builds the patch body for `profile` pointing at `address`."""
    return UpdateRequest(
        type=address.record_type,
        name=profile.record_name,
        content=address.raw_ip,
        ttl=profile.ttl,
        proxied=profile.proxy,
    )


class DnsService:
    """
    Runs one reconciliation of a single DNS record.

    Collaborators:
        - DNSProvider: abstract interface satisfied by CloudflareClient
    """

    def __init__(self, dns_provider: DNSProvider, dry_run: bool = False) -> None:
        """
        Initialises the service.

        Args:
            dns_provider: Any DNSProvider implementation (e.g. CloudflareClient).
            dry_run: When True, a mismatch is logged but no patch is sent.
        """
        self._provider = dns_provider
        self._dry_run = dry_run

    async def reconcile(self, profile: Profile, address: PublicAddress) -> ReconcileResult:
        """
        Brings the profile's record in line with the public address.

        Only the first record of the matching type is considered; the listing
        is already filtered by type and name, so more than one is unexpected
        and only logged.

        Args:
            profile: The selected configuration profile.
            address: The host's current public address.

        Returns:
            A ReconcileResult describing the action taken.

        Raises:
            RecordNotFoundError: If the provider has no record for the name.
            RecordTypeMismatchError: If records exist but none has the
                                     address's record type.
            DnsProviderError: If a provider call fails.
        """
        record_type = address.record_type
        listing = await self._provider.list_records(profile.zone_id, record_type, profile.record_name)

        if not listing.result:
            raise RecordNotFoundError(
                f"record not found, it needs to be created "
                f"(name: {profile.record_name}, type: {record_type}, ip: {address}, zone: {profile.zone_id})"
            )

        matching = [r for r in listing.result if str(r.get("type", "")) == record_type]
        if not matching:
            found = sorted({str(r.get("type", "")) for r in listing.result})
            raise RecordTypeMismatchError(
                f"no {record_type} record among {len(listing.result)} result(s) for "
                f"{profile.record_name} (types found: {', '.join(found)})"
            )
        if len(matching) > 1:
            logger.warning(
                "%d %s records found for %s; only the first (id: %s) is reconciled.",
                len(matching), record_type, profile.record_name, matching[0].get("id"),
            )

        record = matching[0]
        on_file = str(record.get("content", ""))
        if on_file == address.raw_ip:
            logger.info(
                "no need to update record, ip has not changed "
                "(type: %s, current public ip: %s, ip on file: %s)",
                record_type, address, on_file,
            )
            return ReconcileResult(outcome=OUTCOME_UNCHANGED, record=record)

        update = build_update(profile, address)
        record_id = str(record.get("id", ""))
        logger.info(
            "IP change detected for %s: %s -> %s.", profile.record_name, on_file, address
        )

        if self._dry_run:
            logger.info(
                "Dry run: would PATCH record %s in zone %s with %s",
                record_id, profile.zone_id, update.to_payload(),
            )
            return ReconcileResult(outcome=OUTCOME_DRY_RUN, record=record, update=update)

        patched = await self._provider.patch_record(profile.zone_id, record_id, update)
        logger.info("successfully updated dns record, %s", patched.result)
        return ReconcileResult(
            outcome=OUTCOME_UPDATED, record=record, update=update, updated=patched.result
        )
