"""
Tests for the crawl frontier: canonical dedup, depth filter, page cap.
"""

import asyncio

from trustscan.frontier import Frontier


class TestPush:

    def test_trailing_slash_is_same_page(self):
        """https://a.com and https://a.com/ are one queue entry."""
        async def scenario():
            frontier = Frontier(max_pages=10, max_depth=2)
            assert await frontier.push("https://a.com", 0)
            assert not await frontier.push("https://a.com/", 0)
            return frontier.queued_count

        assert asyncio.run(scenario()) == 1

    def test_too_deep_is_dropped(self):
        async def scenario():
            frontier = Frontier(max_pages=10, max_depth=1)
            accepted = await frontier.push("https://a.com/deep", 2)
            return accepted, frontier.queued_count

        assert asyncio.run(scenario()) == (False, 0)

    def test_visited_url_not_requeued(self):
        async def scenario():
            frontier = Frontier(max_pages=10, max_depth=2)
            await frontier.push("https://a.com/x", 1)
            entry = await frontier.pop()
            assert await frontier.reserve(entry.url)
            return await frontier.push("https://a.com/x/", 1)

        assert asyncio.run(scenario()) is False


class TestPopAndReserve:

    def test_pop_batch_is_fifo(self):
        async def scenario():
            frontier = Frontier(max_pages=10, max_depth=2)
            for i in range(7):
                await frontier.push(f"https://a.com/{i}", 1)
            first = await frontier.pop_batch(5)
            second = await frontier.pop_batch(5)
            return [e.url for e in first], [e.url for e in second]

        first, second = asyncio.run(scenario())
        assert first == [f"https://a.com/{i}" for i in range(5)]
        assert second == ["https://a.com/5", "https://a.com/6"]

    def test_pop_empty_returns_none(self):
        assert asyncio.run(Frontier(1, 0).pop()) is None

    def test_reserve_respects_cap(self):
        """Concurrent reservations never overshoot max_pages."""
        async def scenario():
            frontier = Frontier(max_pages=3, max_depth=2)
            urls = [f"https://a.com/{i}" for i in range(10)]
            granted = await asyncio.gather(*(frontier.reserve(u) for u in urls))
            return sum(granted), frontier.visited_count

        assert asyncio.run(scenario()) == (3, 3)

    def test_reserve_twice_fails(self):
        async def scenario():
            frontier = Frontier(max_pages=5, max_depth=2)
            return await frontier.reserve("https://a.com/"), await frontier.reserve("https://a.com")

        assert asyncio.run(scenario()) == (True, False)

    def test_should_stop(self):
        async def scenario():
            frontier = Frontier(max_pages=1, max_depth=2)
            empty = frontier.should_stop()
            await frontier.push("https://a.com", 0)
            pending = frontier.should_stop()
            await frontier.push("https://a.com/b", 1)
            await frontier.reserve("https://a.com")
            capped = frontier.should_stop()
            return empty, pending, capped

        assert asyncio.run(scenario()) == (True, False, True)
