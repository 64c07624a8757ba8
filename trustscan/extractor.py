"""
Content Extractor
=================
Plain page text for the language-model analyzer.

The rendered DOM is parsed with BeautifulSoup (lxml); noise tags are
removed and the remaining text is collapsed and truncated so a single
page always fits the model's context.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

MAX_CHARS = 15000

_NOISE_TAGS = ['script', 'style', 'noscript', 'iframe', 'svg']


class ContentExtractor:
    """Turns a rendered page into trimmed plain text."""

    @staticmethod
    def html_to_text(html: str, limit: int = MAX_CHARS) -> str:
        """Parse HTML to clean text (first *limit* characters)."""
        if not html:
            return ''
        soup = BeautifulSoup(html, "lxml")
        root = soup.body or soup
        for tag in root(_NOISE_TAGS):
            tag.decompose()
        text = root.get_text(separator='\n', strip=True)
        text = re.sub(r'\n{3,}', '\n\n', text)
        text = re.sub(r'[ \t]{2,}', ' ', text)
        return text[:limit].strip()

    @classmethod
    async def extract(cls, page, limit: int = MAX_CHARS) -> str:
        """Return the visible text of *page*; empty string on failure."""
        try:
            html = await page.content()
        except Exception as e:
            logger.warning(f"[EXTRACT] Could not read page content: {e}")
            return ''
        return cls.html_to_text(html, limit)
