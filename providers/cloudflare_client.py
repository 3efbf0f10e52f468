"""
providers/cloudflare_client.py

Responsibility: Implements the DNSProvider protocol using the Cloudflare REST API.
All Cloudflare HTTP calls are concentrated here; no other file may call the
Cloudflare API directly.
Does NOT: read configuration, compare IPs, or decide whether to update.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from exceptions import DnsProviderError
from providers.dns_provider import ProviderResponse, UpdateRequest

logger = logging.getLogger(__name__)

CLOUDFLARE_BASE = "https://api.cloudflare.com/client/v4"


class CloudflareClient:
    """
    Implements DNSProvider for the Cloudflare DNS REST API (v4).

    All outbound Cloudflare requests go through the injected httpx.AsyncClient,
    making this class fully testable without real network calls (use respx.mock).

    Collaborators:
        - httpx.AsyncClient: injected HTTP client; must be kept alive externally
        - DNSProvider: this class satisfies the protocol contract
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        email: str,
        key: str,
        use_global_key: bool = False,
        base_url: str = CLOUDFLARE_BASE,
    ) -> None:
        """
        Initialises the client with an HTTP client and account credentials.

        Args:
            http_client: The httpx.AsyncClient opened for this run.
            email: The Cloudflare account e-mail.
            key: The global API key, or a scoped API token.
            use_global_key: True to authenticate with X-Auth-Key instead of
                            a bearer token.
            base_url: Cloudflare API root; overridable for tests.
        """
        self._client = http_client
        self._base = base_url.rstrip("/")
        self._headers = auth_headers(email, key, use_global_key)

    # ---------------------------------------------------------------------------
    # DNSProvider implementation
    # ---------------------------------------------------------------------------

    async def list_records(self, zone_id: str, record_type: str, record_name: str) -> ProviderResponse:
        """
        Lists the DNS records of one type and name within a zone.

        Args:
            zone_id: The Cloudflare zone ID.
            record_type: "A" or "AAAA".
            record_name: The fully-qualified DNS name to look up.

        Returns:
            The successful response envelope; `result` may be empty.

        Raises:
            DnsProviderError: If the call fails or the API returns success=false.
        """
        # https://developers.cloudflare.com/api/operations/dns-records-for-a-zone-list-dns-records
        url = f"{self._base}/zones/{zone_id}/dns_records"
        params = {"type": record_type, "name": record_name}

        logger.debug("GET %s params=%s", url, params)
        return await self._request("GET", url, params=params)

    async def patch_record(self, zone_id: str, record_id: str, update: UpdateRequest) -> ProviderResponse:
        """
        Patches an existing DNS record with new contents.

        Args:
            zone_id: The Cloudflare zone ID.
            record_id: The Cloudflare-assigned record identifier.
            update: Type, name, content, ttl and proxied flag to write.

        Returns:
            The successful response envelope holding the updated record.

        Raises:
            DnsProviderError: If the call fails or the API returns success=false.
        """
        # https://developers.cloudflare.com/api/operations/dns-records-for-a-zone-patch-dns-record
        url = f"{self._base}/zones/{zone_id}/dns_records/{record_id}"
        payload = update.to_payload()

        logger.debug("PATCH %s payload=%s", url, payload)
        return await self._request("PATCH", url, json=payload)

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> ProviderResponse:
        """
        Sends an authenticated HTTP request to the Cloudflare API.

        Args:
            method: HTTP verb ("GET" or "PATCH").
            url: Full URL of the Cloudflare API endpoint.
            params: Optional query-string parameters.
            json: Optional JSON request body.

        Returns:
            The decoded response envelope.

        Raises:
            DnsProviderError: If the HTTP call fails, the body is not a
                              Cloudflare envelope, or success=false.
        """
        try:
            response = await self._client.request(
                method, url, headers=self._headers, params=params, json=json
            )
        except httpx.RequestError as exc:
            raise DnsProviderError(
                f"unable to send http request to cloudflare api due to {exc} ({method} {url})"
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise DnsProviderError(
                f"unable to unmarshal response from cloudflare api ({response.status_code}) "
                f"due to {exc}: {response.text[:200]!r}"
            ) from exc

        envelope = parse_envelope(body)
        logger.debug("%s %s -> %d success=%s", method, url, response.status_code, envelope.success)

        # NOTE: Cloudflare reports failures in the body; the status code only
        # adds context to the message.
        if not envelope.success or response.is_error:
            raise DnsProviderError(
                f"request to cloudflare api was not successful ({response.status_code}) "
                f"due to {envelope.errors} (additional messages: {envelope.messages})"
            )

        return envelope


def auth_headers(email: str, key: str, use_global_key: bool) -> dict[str, str]:
    """
    Builds the headers sent with every Cloudflare request.

    The global API key travels in X-Auth-Key; any other credential is a
    scoped token sent as a bearer Authorization header.
    """
    headers = {"X-Auth-Email": email}
    if use_global_key:
        headers["X-Auth-Key"] = key
    else:
        headers["Authorization"] = f"Bearer {key}"
    headers["Content-Type"] = "application/json"
    return headers


def parse_envelope(body: Any) -> ProviderResponse:
    """
    Converts a decoded Cloudflare JSON body into a ProviderResponse.

    Errors and messages arrive either as plain strings or as
    {"code": ..., "message": ...} objects; both render as strings. The patch
    endpoint returns a single record object in `result`, which becomes a
    one-element list.

    Raises:
        DnsProviderError: If the body is not a Cloudflare envelope.
    """
    if not isinstance(body, dict) or "success" not in body:
        raise DnsProviderError(f"unable to unmarshal external data: unexpected response {body!r}")

    result = body.get("result")
    if result is None:
        records: list[dict[str, Any]] = []
    elif isinstance(result, dict):
        records = [result]
    elif isinstance(result, list):
        records = [r for r in result if isinstance(r, dict)]
    else:
        raise DnsProviderError(f"unable to unmarshal external data: unexpected result {result!r}")

    return ProviderResponse(
        success=body.get("success") is True,
        errors=[_describe(e) for e in body.get("errors") or []],
        messages=[_describe(m) for m in body.get("messages") or []],
        result=records,
    )


def _describe(entry: Any) -> str:
    if isinstance(entry, dict):
        code = entry.get("code")
        message = entry.get("message", "")
        return f"{code}: {message}" if code is not None else str(message)
    return str(entry)
