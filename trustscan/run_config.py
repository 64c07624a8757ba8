"""
Unified Run Configuration
=========================
Single source of truth for ALL scan defaults and runtime limits.

``ScanConfig`` is created once at scan start and never mutated. The CLI,
the HTTP server and the dashboard all build it through the factories
below, so every entry point shares the same defaults.

``Settings`` carries the process-level knobs that come from the
environment (API keys, cache location). ``.env`` is loaded by the entry
points before ``Settings.from_env()`` is called.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .auth.variants import AuthVariant, describe_auth
from .utils import validate_start_url

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Canonical defaults; nothing else hardcodes these numbers
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "max_pages": 10,
    "max_depth": 2,
    "headless": True,
    "concurrency": 5,                 # pages per batch
    "navigation_timeout_ms": 5000,    # network-idle wait before DOM fallback
    "output_dir": "./reports",
    "user_agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
    ),
    "viewport_width": 1280,
    "viewport_height": 720,
    # Environment-backed settings
    "llm_model": "gemini-2.5-flash",
    "llm_base_url": "https://generativelanguage.googleapis.com/v1beta/openai/",
    "cache_dir": ".trustscan_cache",
    "cache_ttl_hours": 24.0,
    "port": 3000,
}


@dataclass(frozen=True)
class ScanConfig:
    """
    Immutable configuration for one scan.

    Build via:
      - ``ScanConfig(start_url=...)``               → all defaults
      - ``ScanConfig.from_cli_args(ns)``            → from argparse Namespace
      - ``ScanConfig.from_request(url, ...)``       → from an HTTP body
    """

    start_url: str
    max_pages: int = _DEFAULTS["max_pages"]
    max_depth: int = _DEFAULTS["max_depth"]
    auth: Optional[AuthVariant] = None
    headless: bool = _DEFAULTS["headless"]

    concurrency: int = _DEFAULTS["concurrency"]
    navigation_timeout_ms: int = _DEFAULTS["navigation_timeout_ms"]
    user_agent: str = _DEFAULTS["user_agent"]
    viewport_width: int = _DEFAULTS["viewport_width"]
    viewport_height: int = _DEFAULTS["viewport_height"]

    def __post_init__(self):
        if self.max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        if self.max_depth < 0:
            raise ValueError("max_depth must not be negative")
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")

    # -----------------------------------------------------------------------
    # Factory helpers
    # -----------------------------------------------------------------------
    @classmethod
    def from_cli_args(cls, args, auth: Optional[AuthVariant] = None) -> "ScanConfig":
        """Build config from an argparse Namespace (``__main__.py``).

        Raises:
            InvalidURLError: the positional URL is malformed.
        """
        return cls(
            start_url=validate_start_url(args.url),
            max_pages=getattr(args, "max_pages", _DEFAULTS["max_pages"]),
            max_depth=getattr(args, "max_depth", _DEFAULTS["max_depth"]),
            headless=getattr(args, "headless", _DEFAULTS["headless"]),
            concurrency=getattr(args, "concurrency", _DEFAULTS["concurrency"]),
            auth=auth,
        )

    @classmethod
    def from_request(
        cls,
        url: str,
        max_pages: Optional[int] = None,
        max_depth: Optional[int] = None,
        auth: Optional[AuthVariant] = None,
        headless: bool = _DEFAULTS["headless"],
    ) -> "ScanConfig":
        """Build config from an HTTP / dashboard request."""
        return cls(
            start_url=validate_start_url(url),
            max_pages=max_pages if max_pages is not None else _DEFAULTS["max_pages"],
            max_depth=max_depth if max_depth is not None else _DEFAULTS["max_depth"],
            auth=auth,
            headless=headless,
        )

    def limits(self) -> Dict[str, Any]:
        return {"maxPages": self.max_pages, "maxDepth": self.max_depth}

    # -----------------------------------------------------------------------
    # Logging helper
    # -----------------------------------------------------------------------
    def log_summary(self) -> None:
        """Emit a structured summary to the logger."""
        logger.info("=" * 60)
        logger.info("SCAN RUN CONFIG")
        logger.info("=" * 60)
        logger.info(f"  URL:              {self.start_url}")
        logger.info(f"  Max Pages:        {self.max_pages}")
        logger.info(f"  Max Depth:        {self.max_depth}")
        logger.info(f"  Batch Size:       {self.concurrency}")
        logger.info(f"  Headless:         {self.headless}")
        logger.info(f"  Nav Timeout:      {self.navigation_timeout_ms}ms (network idle)")
        logger.info(f"  Auth:             {describe_auth(self.auth)}")
        logger.info("=" * 60)


@dataclass(frozen=True)
class Settings:
    """Process-level settings resolved from the environment."""

    gemini_api_key: str = ""
    llm_model: str = _DEFAULTS["llm_model"]
    llm_base_url: str = _DEFAULTS["llm_base_url"]
    axe_core_js: str = ""
    cache_dir: str = _DEFAULTS["cache_dir"]
    cache_ttl_hours: float = _DEFAULTS["cache_ttl_hours"]
    cache_enabled: bool = True
    reports_dir: str = _DEFAULTS["output_dir"]
    port: int = _DEFAULTS["port"]

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from ``os.environ`` (call after ``load_dotenv``)."""
        return cls(
            gemini_api_key=os.environ.get("GEMINI_API_KEY", ""),
            llm_model=os.environ.get("TRUSTSCAN_MODEL", _DEFAULTS["llm_model"]),
            llm_base_url=os.environ.get("TRUSTSCAN_LLM_BASE_URL", _DEFAULTS["llm_base_url"]),
            axe_core_js=os.environ.get("AXE_CORE_JS", ""),
            cache_dir=os.environ.get("TRUSTSCAN_CACHE_DIR", _DEFAULTS["cache_dir"]),
            cache_ttl_hours=float(
                os.environ.get("TRUSTSCAN_CACHE_TTL_HOURS", _DEFAULTS["cache_ttl_hours"])
            ),
            cache_enabled=os.environ.get("TRUSTSCAN_CACHE", "on").lower() not in ("0", "off", "false"),
            reports_dir=os.environ.get("TRUSTSCAN_REPORTS_DIR", _DEFAULTS["output_dir"]),
            port=int(os.environ.get("PORT", _DEFAULTS["port"])),
        )


def default(name: str):
    """Look up a canonical default (used by CLI help text)."""
    return _DEFAULTS[name]
