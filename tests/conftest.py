"""
tests/conftest.py

Shared pytest fixtures used by both unit and integration test suites.
All HTTP fixtures use respx.mock; no real network calls are made in any test.
"""

from __future__ import annotations

import textwrap

import pytest
import respx

# ---------------------------------------------------------------------------
# HTTP mock fixture: intercepts all httpx calls
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_http():
    """
    Yields a respx router that intercepts all httpx.AsyncClient calls.

    No real network traffic is allowed during tests. Use this fixture
    wherever a service or client would normally make an outbound request.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ---------------------------------------------------------------------------
# Configuration file fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def write_config(tmp_path):
    """
    Returns a helper that writes YAML text to a temp file and returns its path.

    The text is dedented so tests can inline indented YAML blocks.
    """

    def _write(text: str, name: str = "config.yml") -> str:
        path = tmp_path / name
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return str(path)

    return _write
