"""
Error Types
===========
Exceptions that cross module boundaries.

Only ``SessionError`` and ``InvalidURLError`` are ever surfaced to the CLI
or HTTP caller; every other failure is absorbed into a degraded report.
"""


class TrustScanError(Exception):
    """Base class for all scan errors."""


class SessionError(TrustScanError):
    """The browser session could not be launched or used (fatal)."""


class InvalidURLError(TrustScanError, ValueError):
    """The start URL is malformed and no scan was attempted."""
