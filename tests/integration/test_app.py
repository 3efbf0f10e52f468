"""
tests/integration/test_app.py

End-to-end tests for app.main: a real YAML file on disk, the real services
and client, and respx standing in for ipify and the Cloudflare API.
"""

from __future__ import annotations

import json

import httpx
import pytest

from app import build_http_client, main
from services.ip_service import IP_PROVIDER_URL

_BASE = "https://api.cloudflare.com/client/v4"
_LIST_URL = f"{_BASE}/zones/Z1/dns_records"

_TOKEN_CONFIG = """
    cloudflare:
      email: ops@example.com
      method: token
      key: abc
      zone_id: Z1
      record_name: home.example.com
      time_to_live: "120"
      proxy: false
"""

_GLOBAL_CONFIG = _TOKEN_CONFIG.replace("method: token", "method: global")


def _envelope(result, success=True, errors=None):
    return {"success": success, "errors": errors or [], "messages": [], "result": result}


def _a_record(content):
    return {"id": "rec1", "type": "A", "name": "home.example.com", "content": content}


def _mock_public_ip(mock_http, ip="203.0.113.7"):
    mock_http.get(IP_PROVIDER_URL).mock(return_value=httpx.Response(200, json={"ip": ip}))


# ---------------------------------------------------------------------------
# Successful runs
# ---------------------------------------------------------------------------


def test_stale_record_is_patched(mock_http, write_config):
    """A stale A record is patched once with the configured name, ttl and proxy flag."""
    _mock_public_ip(mock_http)
    list_route = mock_http.get(_LIST_URL).mock(
        return_value=httpx.Response(200, json=_envelope([_a_record("203.0.113.5")]))
    )
    patch_route = mock_http.patch(f"{_LIST_URL}/rec1").mock(
        return_value=httpx.Response(200, json=_envelope(_a_record("203.0.113.7")))
    )

    assert main([write_config(_TOKEN_CONFIG)]) == 0

    params = list_route.calls.last.request.url.params
    assert (params["type"], params["name"]) == ("A", "home.example.com")
    assert patch_route.call_count == 1
    request = patch_route.calls.last.request
    assert json.loads(request.content) == {
        "type": "A",
        "name": "home.example.com",
        "content": "203.0.113.7",
        "ttl": "120",
        "proxied": False,
    }
    assert request.headers["Authorization"] == "Bearer abc"
    assert "X-Auth-Key" not in request.headers


def test_up_to_date_record_is_left_alone(mock_http, write_config):
    _mock_public_ip(mock_http)
    mock_http.get(_LIST_URL).mock(
        return_value=httpx.Response(200, json=_envelope([_a_record("203.0.113.7")]))
    )
    patch_route = mock_http.patch(f"{_LIST_URL}/rec1")

    assert main([write_config(_TOKEN_CONFIG)]) == 0
    assert not patch_route.called


def test_global_method_uses_api_key_headers(mock_http, write_config):
    _mock_public_ip(mock_http)
    list_route = mock_http.get(_LIST_URL).mock(
        return_value=httpx.Response(200, json=_envelope([_a_record("203.0.113.5")]))
    )
    patch_route = mock_http.patch(f"{_LIST_URL}/rec1").mock(
        return_value=httpx.Response(200, json=_envelope(_a_record("203.0.113.7")))
    )

    assert main([write_config(_GLOBAL_CONFIG)]) == 0

    for route in (list_route, patch_route):
        headers = route.calls.last.request.headers
        assert headers["X-Auth-Email"] == "ops@example.com"
        assert headers["X-Auth-Key"] == "abc"
        assert "Authorization" not in headers


def test_dry_run_does_not_patch(mock_http, write_config):
    _mock_public_ip(mock_http)
    mock_http.get(_LIST_URL).mock(
        return_value=httpx.Response(200, json=_envelope([_a_record("203.0.113.5")]))
    )
    patch_route = mock_http.patch(f"{_LIST_URL}/rec1")

    assert main(["--dry-run", write_config(_TOKEN_CONFIG)]) == 0
    assert not patch_route.called


# ---------------------------------------------------------------------------
# Fatal runs: every one exits 1
# ---------------------------------------------------------------------------


def test_missing_argument_exits_1(mock_http):
    assert main([]) == 1


def test_unreadable_config_exits_1(mock_http, tmp_path):
    assert main([str(tmp_path / "missing.yml")]) == 1


def test_config_without_cloudflare_profile_exits_1(mock_http, write_config):
    ip_route = mock_http.get(IP_PROVIDER_URL)
    assert main([write_config("other:\n  key: abc\n")]) == 1
    assert not ip_route.called


def test_record_not_found_exits_1(mock_http, write_config, caplog):
    _mock_public_ip(mock_http)
    mock_http.get(_LIST_URL).mock(return_value=httpx.Response(200, json=_envelope([])))
    patch_route = mock_http.patch(f"{_LIST_URL}/rec1")

    assert main([write_config(_TOKEN_CONFIG)]) == 1
    assert not patch_route.called
    assert "record not found, it needs to be created" in caplog.text


def test_provider_failure_exits_1(mock_http, write_config, caplog):
    _mock_public_ip(mock_http)
    mock_http.get(_LIST_URL).mock(
        return_value=httpx.Response(
            403, json=_envelope([], success=False, errors=[{"code": 10000, "message": "Authentication error"}])
        )
    )

    assert main([write_config(_TOKEN_CONFIG)]) == 1
    assert "10000: Authentication error" in caplog.text


def test_malformed_public_ip_exits_1_without_querying_provider(mock_http, write_config):
    _mock_public_ip(mock_http, ip="not-an-ip")
    list_route = mock_http.get(_LIST_URL)

    assert main([write_config(_TOKEN_CONFIG)]) == 1
    assert not list_route.called


def test_ip_service_unreachable_exits_1(mock_http, write_config):
    mock_http.get(IP_PROVIDER_URL).mock(side_effect=httpx.ConnectError("no route to host"))
    assert main([write_config(_TOKEN_CONFIG)]) == 1


@pytest.mark.asyncio
async def test_http_client_has_no_timeout():
    """Calls block until the endpoint answers; the scheduler bounds the run."""
    async with build_http_client() as client:
        assert client.timeout == httpx.Timeout(None)


def test_octal_looking_ttl_reaches_patch_body_unchanged(mock_http, write_config):
    _mock_public_ip(mock_http)
    mock_http.get(_LIST_URL).mock(
        return_value=httpx.Response(200, json=_envelope([_a_record("203.0.113.5")]))
    )
    patch_route = mock_http.patch(f"{_LIST_URL}/rec1").mock(
        return_value=httpx.Response(200, json=_envelope(_a_record("203.0.113.7")))
    )
    config = _TOKEN_CONFIG.replace('time_to_live: "120"', "time_to_live: 0120")

    assert main([write_config(config)]) == 0
    assert json.loads(patch_route.calls.last.request.content)["ttl"] == "0120"
