"""
Key-page sampling for expensive analyzers.

Always accept the pages that carry a site's trust signals (home, about,
contact, trust, terms, privacy); accept any other page with a small
random probability.
"""

from __future__ import annotations

import random
from typing import Optional, Tuple
from urllib.parse import urlparse

KEY_PATH_MARKERS: Tuple[str, ...] = ('about', 'contact', 'trust', 'terms', 'privacy')
DEFAULT_SAMPLE_RATE = 0.1


class KeyPageSampler:
    """Callable ``(url) -> bool`` sampler.

    ``rng`` is injectable so tests can make the random tail deterministic.
    """

    def __init__(
        self,
        sample_rate: float = DEFAULT_SAMPLE_RATE,
        rng: Optional[random.Random] = None,
        markers: Tuple[str, ...] = KEY_PATH_MARKERS,
    ):
        if not 0.0 <= sample_rate <= 1.0:
            raise ValueError("sample_rate must be between 0 and 1")
        self.sample_rate = sample_rate
        self.rng = rng or random.Random()
        self.markers = markers

    def is_key_page(self, url: str) -> bool:
        path = (urlparse(url).path or '/').lower()
        if path == '/':
            return True
        return any(marker in path for marker in self.markers)

    def __call__(self, url: str) -> bool:
        if self.is_key_page(url):
            return True
        return self.rng.random() < self.sample_rate
