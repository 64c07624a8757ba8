"""
Crawl Frontier
==============
FIFO queue of ``(url, depth)`` entries plus the visited set that guards
against re-crawling.

Invariants:
    - Every visited/queued check uses ``canonical_url`` (trailing slash
      stripped), so ``https://a.com`` and ``https://a.com/`` are one page.
    - ``visited_count`` never exceeds ``max_pages``.
    - Entries deeper than ``max_depth`` are dropped at push time and never
      enter the queue.

All mutating methods are coroutines guarded by one ``asyncio.Lock`` so
sibling tasks in a batch can share the frontier safely.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Set

from .utils import canonical_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrontierEntry:
    url: str
    depth: int


class Frontier:
    """Queue + visited set for one scan.

    Usage::

        frontier = Frontier(max_pages=10, max_depth=2)
        await frontier.push(start_url, 0)
        batch = await frontier.pop_batch(5)
        if await frontier.reserve(entry.url):
            ...  # this task owns the page
    """

    def __init__(self, max_pages: int, max_depth: int):
        self.max_pages = max_pages
        self.max_depth = max_depth
        self._queue: Deque[FrontierEntry] = deque()
        self._queued: Set[str] = set()
        self._visited: Set[str] = set()
        self._lock = asyncio.Lock()

    # ── Queries ───────────────────────────────────────────────────

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    @property
    def queued_count(self) -> int:
        return len(self._queue)

    def should_stop(self) -> bool:
        """True once the page cap is reached or nothing is left to crawl."""
        return len(self._visited) >= self.max_pages or not self._queue

    # ── Mutations ─────────────────────────────────────────────────

    async def push(self, url: str, depth: int) -> bool:
        """Enqueue *url* at *depth*.

        Returns:
            True if the entry was queued; False if it was too deep or its
            canonical form is already visited or queued.
        """
        if depth > self.max_depth:
            logger.debug(f"[FRONTIER] Depth {depth} > {self.max_depth} — dropped {url[:80]}")
            return False

        key = canonical_url(url)
        async with self._lock:
            if key in self._visited or key in self._queued:
                return False
            self._queued.add(key)
            self._queue.append(FrontierEntry(url=url, depth=depth))
        return True

    async def pop(self) -> Optional[FrontierEntry]:
        """Return the next entry, or None when the queue is empty."""
        async with self._lock:
            if not self._queue:
                return None
            entry = self._queue.popleft()
            self._queued.discard(canonical_url(entry.url))
            return entry

    async def pop_batch(self, size: int) -> List[FrontierEntry]:
        """Pop up to *size* entries in FIFO order."""
        batch: List[FrontierEntry] = []
        while len(batch) < size:
            entry = await self.pop()
            if entry is None:
                break
            batch.append(entry)
        return batch

    async def reserve(self, url: str) -> bool:
        """Atomically claim *url* for processing.

        The cap check, the duplicate check and the visited mark happen in
        one critical section, so two tasks can never process the same page
        and the cap can never be overshot.
        """
        key = canonical_url(url)
        async with self._lock:
            if len(self._visited) >= self.max_pages:
                return False
            if key in self._visited:
                return False
            self._visited.add(key)
            return True
