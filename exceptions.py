"""
exceptions.py

Responsibility: Defines all custom exception classes used across the application.
Does NOT: contain business logic, logging, or HTTP handling.
"""

from __future__ import annotations


class DdnsError(Exception):
    """
    Base class for every error that ends an update run.

    app.main catches this type and turns it into exit status 1; no other
    layer decides to terminate the process.
    """


class ConfigLoadError(DdnsError):
    """
    Raised by the configuration loader when the config file is missing,
    unreadable, not valid YAML, or does not match the expected structure.
    """


class IpFetchError(DdnsError):
    """
    Raised by IpService when the public IP address cannot be determined.

    This may occur due to network connectivity issues, an unexpected
    response from the upstream IP provider (e.g. api64.ipify.org), or a
    returned value that is not a valid IPv4/IPv6 address.
    """


class DnsProviderError(DdnsError):
    """
    Raised by any DNSProvider implementation when a DNS API call fails.

    Covers transport failures, undecodable response bodies and envelopes
    with success=false. The message carries the provider's own errors.
    """


class RecordNotFoundError(DnsProviderError):
    """
    Raised when the provider holds no record for the configured name.

    Records are never created by this tool; the operator must create the
    record once by hand.
    """


class RecordTypeMismatchError(DnsProviderError):
    """
    Raised when the provider returned records for the name, but none of
    them has the record type matching the current public IP.
    """
