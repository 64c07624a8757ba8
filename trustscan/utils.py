"""
URL Utilities
=============
Canonical form, start-URL validation and outbound link resolution.

The canonical form is deliberately minimal: one trailing ``/`` stripped.
``https://a.com`` and ``https://a.com/`` are the same page; nothing else
about the URL is rewritten.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional
from urllib.parse import urljoin, urlparse

from .errors import InvalidURLError

logger = logging.getLogger(__name__)

# Hrefs that never point at a crawlable page
_SKIP_PREFIXES = ('javascript:', 'mailto:', 'tel:', 'data:', '#')

# File extensions to skip (non-HTML resources)
SKIP_EXTENSIONS = frozenset({
    '.jpg', '.jpeg', '.png', '.gif', '.bmp', '.svg', '.webp', '.ico',
    '.pdf', '.doc', '.docx', '.xls', '.xlsx', '.ppt', '.pptx',
    '.zip', '.rar', '.tar', '.gz', '.7z',
    '.mp3', '.mp4', '.avi', '.mov', '.webm',
    '.css', '.js', '.json', '.xml', '.rss',
    '.woff', '.woff2', '.ttf', '.eot', '.otf',
})

# A second scheme embedded after the first one, e.g. "https://a.comhttps://a.com"
_DOUBLE_SCHEME = re.compile(r'https?:/{0,2}', re.IGNORECASE)


def canonical_url(url: str) -> str:
    """Strip a single trailing slash. Used for every visited/queued check."""
    url = url.strip()
    return url[:-1] if url.endswith('/') else url


def validate_start_url(url: Optional[str]) -> str:
    """Return a usable start URL or raise ``InvalidURLError``.

    A missing scheme defaults to ``https://``. Rejects empty input,
    non-http(s) schemes, missing hosts, embedded whitespace and URLs with
    a second scheme pasted into them (``https://a.comhttps://a.com``).
    """
    if not url or not url.strip():
        raise InvalidURLError("URL cannot be empty")

    url = url.strip()
    if any(ch.isspace() for ch in url):
        raise InvalidURLError(f"URL contains whitespace: {url!r}")

    if not re.match(r'^[a-zA-Z][a-zA-Z0-9+.-]*://', url):
        url = f"https://{url}"

    before_query = url.split("?", 1)[0].split("#", 1)[0]
    if len(_DOUBLE_SCHEME.findall(before_query)) > 1:
        raise InvalidURLError(f"URL looks doubly concatenated: {url}")

    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise InvalidURLError(f"URL parsing error: {exc}") from exc

    if parsed.scheme not in ('http', 'https'):
        raise InvalidURLError(f"Invalid URL scheme: {parsed.scheme} (must be http or https)")
    if not parsed.netloc or not parsed.hostname:
        raise InvalidURLError("Invalid URL format: missing domain")
    if '.' not in parsed.hostname and parsed.hostname != 'localhost':
        raise InvalidURLError(f"Invalid URL format: bad host {parsed.hostname!r}")

    return url


def same_origin(url: str, other: str) -> bool:
    a, b = urlparse(url), urlparse(other)
    return (a.scheme.lower(), a.netloc.lower()) == (b.scheme.lower(), b.netloc.lower())


def resolve_link(href: str, start_url: str) -> Optional[str]:
    """Resolve an extracted ``href`` to an absolute crawlable URL.

    Keeps same-origin absolute links and relative links (resolved against
    ``start_url``). Returns None for everything else: other origins,
    non-page schemes, in-page anchors and binary resources.
    """
    if not href:
        return None
    href = href.strip()
    if not href or href.lower().startswith(_SKIP_PREFIXES):
        return None

    absolute = urljoin(start_url, href)
    parsed = urlparse(absolute)
    if parsed.scheme not in ('http', 'https'):
        return None
    if not same_origin(absolute, start_url):
        return None

    lower_path = parsed.path.lower()
    if any(lower_path.endswith(ext) for ext in SKIP_EXTENSIONS):
        return None

    return absolute.split('#', 1)[0]


def resolve_links(hrefs: Iterable[str], start_url: str) -> List[str]:
    """``resolve_link`` over many hrefs, deduplicated by canonical form."""
    seen = set()
    out: List[str] = []
    for href in hrefs:
        link = resolve_link(href, start_url)
        if not link:
            continue
        key = canonical_url(link)
        if key in seen:
            continue
        seen.add(key)
        out.append(link)
    return out


def url_path(url: str) -> str:
    """Path component for display, ``/`` for the site root."""
    return urlparse(url).path or '/'


def report_base_name(url: str) -> str:
    """Filesystem-safe base name for report files, e.g. ``example_com_docs``."""
    parsed = urlparse(url)
    base = parsed.netloc.replace('.', '_').replace(':', '_')
    if parsed.path and parsed.path != '/':
        path_part = parsed.path.strip('/').replace('/', '_')[:30]
        base = f"{base}_{path_part}"
    return base or "report"
