"""
Authentication Variants
=======================
The two mutually exclusive ways a scan can be authenticated:

    - ``BasicAuth``  — fill and submit a login form before crawling
    - ``CookieAuth`` — inject session cookies (+ optional localStorage)

``AuthVariant`` is the union of the two; a scan carries at most one.
``parse_auth`` builds the right variant from the JSON wire format
(``{"type": "basic" | "cookies", ...}``) used by the HTTP API and the
dashboard.

Security:
    - Credentials are never logged; ``__repr__`` masks the password.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class CookieSpec:
    name: str
    value: str
    domain: str
    path: str = "/"

    def to_playwright(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "value": self.value,
            "domain": self.domain,
            "path": self.path or "/",
        }


@dataclass(frozen=True)
class BasicAuth:
    """Form login performed once at the start of the scan."""
    login_url: str
    username: str
    password: str = field(repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.login_url and self.username and self.password)

    @classmethod
    def from_env(
        cls,
        login_url: str = "",
        username: str = "",
        password: str = "",
    ) -> "BasicAuth":
        """Fill missing fields from ``TRUSTSCAN_LOGIN_URL`` / ``_USERNAME`` / ``_PASSWORD``."""
        return cls(
            login_url=login_url or os.environ.get("TRUSTSCAN_LOGIN_URL", ""),
            username=username or os.environ.get("TRUSTSCAN_USERNAME", ""),
            password=password or os.environ.get("TRUSTSCAN_PASSWORD", ""),
        )


@dataclass(frozen=True)
class CookieAuth:
    """Pre-authenticated session injected into the browser context."""
    cookies: Tuple[CookieSpec, ...] = ()
    local_storage: Optional[Dict[str, str]] = None


AuthVariant = Union[BasicAuth, CookieAuth]


def parse_auth(data: Optional[Dict[str, Any]]) -> Optional[AuthVariant]:
    """Build an ``AuthVariant`` from its wire form.

    Raises:
        ValueError: unknown ``type`` or missing required fields.
    """
    if not data:
        return None

    kind = str(data.get("type", "")).lower()
    if kind == "basic":
        auth = BasicAuth(
            login_url=data.get("loginUrl", "") or "",
            username=data.get("username", "") or "",
            password=data.get("password", "") or "",
        )
        if not auth.is_complete:
            raise ValueError("basic auth requires loginUrl, username and password")
        return auth

    if kind == "cookies":
        try:
            cookies = tuple(
                CookieSpec(
                    name=c["name"],
                    value=c["value"],
                    domain=c["domain"],
                    path=c.get("path") or "/",
                )
                for c in data.get("cookies") or []
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValueError(f"malformed cookie entry: {exc}") from exc
        local_storage = data.get("localStorage") or None
        if not cookies and not local_storage:
            raise ValueError("cookie auth requires cookies or localStorage")
        return CookieAuth(cookies=cookies, local_storage=local_storage)

    raise ValueError(f"unknown auth type: {data.get('type')!r}")


def describe_auth(auth: Optional[AuthVariant]) -> str:
    """Short, credential-free label for logs."""
    if isinstance(auth, BasicAuth):
        return f"basic (login form at {auth.login_url})"
    if isinstance(auth, CookieAuth):
        extra = " + localStorage" if auth.local_storage else ""
        return f"cookies ({len(auth.cookies)}){extra}"
    return "none"
