"""
services/ip_service.py

Responsibility: Fetches the current public IP address of the host machine.
Does NOT: parse DNS records, interact with Cloudflare, or read config files.
"""

from __future__ import annotations

import logging

import httpx

from exceptions import IpFetchError
from services.address import PublicAddress

logger = logging.getLogger(__name__)

# NOTE: api64.ipify.org answers over IPv6 when the host has it, IPv4 otherwise.
IP_PROVIDER_URL = "https://api64.ipify.org"
_IP_PROVIDER_PARAMS = {"format": "json"}


class IpService:
    """
    Fetches the host machine's current public IPv4 or IPv6 address.

    Uses an injected httpx.AsyncClient so the service is fully testable
    without real network calls (use respx.mock in tests).

    Collaborators:
        - httpx.AsyncClient: injected; must be kept alive externally
    """

    def __init__(self, http_client: httpx.AsyncClient, url: str = IP_PROVIDER_URL) -> None:
        """
        Initialises the service with a shared HTTP client.

        Args:
            http_client: The httpx.AsyncClient opened for this run.
            url: The "echo my IP" endpoint; must answer {"ip": "<address>"}.
        """
        self._client = http_client
        self._url = url

    async def get_public_address(self) -> PublicAddress:
        """
        Returns the current public address of the host machine.

        Returns:
            A PublicAddress wrapping the IP string, e.g. "203.0.113.7".

        Raises:
            IpFetchError: If the upstream provider is unreachable, returns a
                          non-200 response or undecodable JSON, or the
                          returned value is not an IP address.
        """
        try:
            response = await self._client.get(self._url, params=_IP_PROVIDER_PARAMS)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise IpFetchError(
                f"IP provider returned status {exc.response.status_code}."
            ) from exc
        except httpx.RequestError as exc:
            raise IpFetchError(
                f"network failure due to {exc} ({self._url})"
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise IpFetchError(f"failed to unmarshal data due to {exc}") from exc

        raw_ip = body.get("ip") if isinstance(body, dict) else None
        if not isinstance(raw_ip, str):
            raise IpFetchError(f"IP provider response has no 'ip' field: {body!r}")

        address = PublicAddress(raw_ip.strip())
        if not address.is_valid:
            raise IpFetchError(
                f"could not determine public IP: {raw_ip!r} is not a valid IPv4/IPv6 address"
            )

        logger.debug("Current public IP: %s (type %s)", address, address.record_type)
        return address
