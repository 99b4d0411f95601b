"""High-level service that orchestrates live price lookups."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Sequence

from configs import Settings, settings

from .browser import BrowserSession, BrowserSessionManager, resolve_browser_executable
from .cache import ResultCache, create_result_cache
from .models import AggregateResult, PriceQuote, SessionLaunchError
from .providers.amazon import AMAZON
from .providers.base import StoreExtractor
from .providers.croma import CROMA
from .providers.flipkart import FLIPKART

logger = logging.getLogger("price_search.service")


@dataclass(slots=True)
class _InFlightLookup:
    """A scrape in progress and the number of callers awaiting it."""

    task: "asyncio.Future[AggregateResult]"
    waiters: int = 0


class PriceSearchService:
    """Coordinate one browser session across every store extractor."""

    DEFAULT_FETCH_TIMEOUT_SECONDS = 120.0

    def __init__(
        self,
        extractors: Sequence[StoreExtractor] | None = None,
        session_manager: BrowserSessionManager | None = None,
        cache: ResultCache | None = None,
        fetch_timeout_seconds: float | None = None,
        concurrent: bool = True,
    ) -> None:
        if extractors is None:
            extractors = (
                StoreExtractor(AMAZON),
                StoreExtractor(FLIPKART),
                StoreExtractor(CROMA),
            )
        self.extractors: Sequence[StoreExtractor] = extractors
        self.session_manager = session_manager or BrowserSessionManager()
        self.cache = cache if cache is not None else ResultCache()
        self.fetch_timeout_seconds = (
            fetch_timeout_seconds or self.DEFAULT_FETCH_TIMEOUT_SECONDS
        )
        self.concurrent = concurrent
        self._in_flight: Dict[str, _InFlightLookup] = {}

    async def fetch(self, query: str) -> List[PriceQuote]:
        """Return one quote per store, or an empty list when nothing could run."""
        result = await self.search(query)
        return list(result.quotes)

    async def search(self, query: str) -> AggregateResult:
        """Serve from cache, join an identical lookup in flight, or scrape.

        The scrape runs in a task owned by the service and every caller awaits
        it through ``asyncio.shield``, so cancelling one caller leaves the
        others waiting. The scrape itself is cancelled once no caller is left.
        """
        cached = self.cache.get(query)
        if cached is not None:
            logger.info("Serving cached prices for '%s'", query)
            return cached

        key = self.cache.key_for(query)
        lookup = self._in_flight.get(key)
        if lookup is None:
            lookup = _InFlightLookup(asyncio.ensure_future(self._fetch_live(query)))
            self._in_flight[key] = lookup
            lookup.task.add_done_callback(
                lambda _task: self._forget_lookup(key, lookup)
            )
        else:
            logger.info("Joining in-flight price lookup for '%s'", query)

        lookup.waiters += 1
        try:
            return await asyncio.shield(lookup.task)
        finally:
            lookup.waiters -= 1
            if lookup.waiters == 0 and not lookup.task.done():
                logger.info("Abandoning price lookup for '%s'", query)
                lookup.task.cancel()

    def _forget_lookup(self, key: str, lookup: _InFlightLookup) -> None:
        if self._in_flight.get(key) is lookup:
            del self._in_flight[key]

    async def _fetch_live(self, query: str) -> AggregateResult:
        try:
            session = await self.session_manager.acquire()
        except SessionLaunchError as exc:
            logger.error("Live price fetch for '%s' aborted: %s", query, exc)
            return AggregateResult(query=query, quotes=[])

        try:
            quotes = await self._run_extractors(session, query)
        finally:
            await self.session_manager.release(session)

        result = AggregateResult(query=query, quotes=quotes)
        if self.cache.set(query, result):
            logger.debug("Cached %d quote(s) for '%s'", len(quotes), query)
        return result

    async def _run_extractors(
        self, session: BrowserSession, query: str
    ) -> List[PriceQuote]:
        if self.concurrent:
            quotes = await asyncio.gather(
                *(self._run_store(extractor, session, query) for extractor in self.extractors)
            )
            return list(quotes)

        results: List[PriceQuote] = []
        for extractor in self.extractors:
            results.append(await self._run_store(extractor, session, query))
        return results

    async def _run_store(
        self, extractor: StoreExtractor, session: BrowserSession, query: str
    ) -> PriceQuote:
        try:
            return await asyncio.wait_for(
                extractor.fetch(session, query), timeout=self.fetch_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(
                "%s lookup for '%s' timed out after %.0fs",
                extractor.name,
                query,
                self.fetch_timeout_seconds,
            )
        except Exception:
            logger.exception("%s lookup for '%s' crashed", extractor.name, query)
        return PriceQuote.unavailable_for(extractor.name, query)


def create_price_search_service(app_settings: Settings) -> PriceSearchService:
    """Wire the service from application settings."""
    executable_path: Optional[str] = resolve_browser_executable(
        app_settings.CHROMIUM_EXECUTABLE, app_settings.CHROME_EXECUTABLE_PATH
    )
    session_manager = BrowserSessionManager(
        executable_path=executable_path, headless=app_settings.BROWSER_HEADLESS
    )
    cache = create_result_cache(
        ttl_seconds=app_settings.CACHE_TTL_SECONDS,
        redis_host=app_settings.REDIS_HOST,
        redis_port=app_settings.REDIS_PORT,
        redis_password=app_settings.REDIS_PASSWORD,
        redis_ssl=app_settings.REDIS_SSL,
    )
    return PriceSearchService(
        session_manager=session_manager,
        cache=cache,
        fetch_timeout_seconds=app_settings.FETCH_TIMEOUT_SECONDS,
        concurrent=app_settings.CONCURRENT_STORES,
    )


@lru_cache(maxsize=None)
def get_price_search_service() -> PriceSearchService:
    """FastAPI dependency returning the process wide price search service."""
    return create_price_search_service(settings)
