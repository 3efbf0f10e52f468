"""
app.py

Responsibility: Command-line entry point. Wires the loader, IP resolver and
reconciler together for one run and maps the outcome to an exit status.
Does NOT: contain DNS business logic or HTTP calls; those live in the
services and providers.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx

from config import load_config, select_profile
from exceptions import ConfigLoadError, DdnsError
from logger import configure_logging
from providers.cloudflare_client import CloudflareClient
from services.dns_service import DnsService, ReconcileResult
from services.ip_service import IpService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloudflare-ddns-updater",
        description="Point a Cloudflare DNS record at this host's current public IP.",
    )
    # NOTE: optional at the argparse level so a missing path is reported
    # like every other configuration error (exit 1).
    parser.add_argument("config", nargs="?", help="path to the YAML configuration file")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="look the record up and report the change without patching it",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def build_http_client() -> httpx.AsyncClient:
    """
    Returns the HTTP client shared by every call of one run.

    No timeout is set: a hung endpoint blocks until the scheduler that
    invoked the run gives up on it.
    """
    return httpx.AsyncClient(timeout=None)


async def run(config_path: str, dry_run: bool = False) -> ReconcileResult:
    """
    Runs the full pipeline once: load, resolve, classify, reconcile.

    Args:
        config_path: Path of the YAML configuration file.
        dry_run: Skip the patch call and only report the pending change.

    Returns:
        The ReconcileResult from DnsService.

    Raises:
        DdnsError: On any configuration, network, decode or provider failure.
    """
    profile = select_profile(load_config(config_path))

    async with build_http_client() as http_client:
        address = await IpService(http_client).get_public_address()
        logger.debug("Public IP %s resolved as record type %s.", address, address.record_type)

        provider = CloudflareClient(
            http_client,
            email=profile.email,
            key=profile.key,
            use_global_key=profile.uses_global_key,
        )
        return await DnsService(provider, dry_run=dry_run).reconcile(profile, address)


def main(argv: list[str] | None = None) -> int:
    """
    Parses arguments, runs the updater and returns the process exit status.

    Returns:
        0 when the record is up to date, was updated, or a dry run finished;
        1 on any DdnsError.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        if not args.config:
            raise ConfigLoadError("expect at least 1 arg: path to the configuration file")
        result = asyncio.run(run(args.config, dry_run=args.dry_run))
    except DdnsError as exc:
        logger.error("%s", exc)
        return 1

    logger.debug("Run finished: %s", result.outcome)
    return 0


if __name__ == "__main__":
    sys.exit(main())
