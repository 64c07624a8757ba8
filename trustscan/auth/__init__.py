"""
Authentication Module
=====================
Scan authentication as a tagged union.

    - ``BasicAuth``: form login at a known URL, performed by
      ``trustscan.auth.login_manager.LoginManager``
    - ``CookieAuth``: cookie / localStorage injection into the context

Only the plain data types are exported here, so parsing auth blocks does
not pull in Playwright.

Usage::

    from trustscan.auth import parse_auth

    auth = parse_auth({"type": "cookies", "cookies": [...]})
"""

from .variants import (
    AuthVariant,
    BasicAuth,
    CookieAuth,
    CookieSpec,
    describe_auth,
    parse_auth,
)

__all__ = [
    "AuthVariant",
    "BasicAuth",
    "CookieAuth",
    "CookieSpec",
    "describe_auth",
    "parse_auth",
]
