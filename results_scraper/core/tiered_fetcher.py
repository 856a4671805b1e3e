"""
Tiered Fetcher - acquisition with automatic fallback
Full browser pagination -> quick direct fetch -> lite direct fetch
"""

import asyncio
import logging
import time
from typing import Any, Callable, List, Optional, Sequence

import requests
from cloudscraper.exceptions import CloudflareException

from .browser_session import BrowserSession
from .config import ScraperConfig
from .errors import SoftTierError
from .field_mapper import FieldMapper
from .html_fetcher import HTMLFetcher
from .inline_json_extractor import InlineDataExtractor
from .models import AcquisitionResult
from .pagination_navigator import PaginationNavigator
from .regex_extractor import RegexExtractor, extract_title
from .result_cache import ResultCache
from .row_extractor import RowExtractor
from .selectors import DEFAULT_SELECTORS, SelectorTable
from .timing import SYSTEM_CLOCK, Clock

logger = logging.getLogger(__name__)

# Failures that say something about the target site, not about us
SOFT_ERRORS = (
    SoftTierError,
    requests.RequestException,
    CloudflareException,
    asyncio.TimeoutError,
)


class Tier:
    """
    One acquisition strategy in the fallback chain.

    Subclasses set ``name`` and ``budget`` and implement ``run``; raising or
    returning no competitors hands over to the next tier.
    """

    name = 'tier'
    budget: float = 10.0

    async def run(self, url: str) -> AcquisitionResult:
        raise NotImplementedError


class FullBrowserTier(Tier):
    """Real browser plus pagination; the only tier that sees client-rendered rows"""

    name = 'full'

    def __init__(
        self,
        config: ScraperConfig,
        selectors: SelectorTable = DEFAULT_SELECTORS,
        clock: Clock = SYSTEM_CLOCK,
        session_factory: Optional[Callable[[], Any]] = None
    ):
        self.config = config
        self.selectors = selectors
        self.clock = clock
        self.budget = config.full_budget
        self.session_factory = session_factory or (
            lambda: BrowserSession(config=config, selectors=selectors, clock=clock)
        )

    async def run(self, url: str) -> AcquisitionResult:
        navigator = PaginationNavigator(
            config=self.config,
            row_extractor=RowExtractor(
                selectors=self.selectors,
                field_mapper=FieldMapper(bib_offset=self.config.bib_offset)
            ),
            selectors=self.selectors,
            clock=self.clock
        )

        async with self.session_factory() as session:
            await session.open(url)
            outcome = await navigator.collect_all_pages(session)
            html = await session.content()
            title = await session.title()

        return AcquisitionResult(
            competitors=outcome.records,
            html=html,
            title=title,
            tier=self.name,
            source='pagination',
            url=url,
            total_pages=outcome.pages_visited,
        )


class QuickFetchTier(Tier):
    """One short GET and regex extraction on the served markup"""

    name = 'quick'
    profile = 'quick'

    def __init__(self, config: ScraperConfig, fetcher_factory: Optional[Callable[[], Any]] = None):
        self.config = config
        self.budget = config.quick_budget
        self.timeout = config.quick_timeout
        self.snapshot_chars = config.quick_snapshot_chars
        self.fetcher_factory = fetcher_factory or (lambda: HTMLFetcher(timeout=self.timeout))
        self.regex_extractor = RegexExtractor(FieldMapper(bib_offset=config.bib_offset))

    async def run(self, url: str) -> AcquisitionResult:
        html = await asyncio.to_thread(self._download, url)
        return self.build_result(url, html, self.regex_extractor.extract_from_html(html), 'regex')

    def _download(self, url: str) -> str:
        with self.fetcher_factory() as fetcher:
            return fetcher.fetch(url, profile=self.profile, timeout=self.timeout)['html']

    def build_result(self, url: str, html: str, records, source: str) -> AcquisitionResult:
        return AcquisitionResult(
            competitors=list(records),
            html=html[:self.snapshot_chars],
            title=extract_title(html),
            tier=self.name,
            source=source,
            url=url,
        )


class LiteFetchTier(QuickFetchTier):
    """Conservative-header GET; inline data payload first, regex second"""

    name = 'lite'
    profile = 'lite'

    def __init__(self, config: ScraperConfig, fetcher_factory: Optional[Callable[[], Any]] = None):
        super().__init__(config, fetcher_factory)
        self.budget = config.lite_budget
        self.timeout = config.lite_timeout
        self.snapshot_chars = config.lite_snapshot_chars
        self.inline_extractor = InlineDataExtractor(FieldMapper(bib_offset=config.bib_offset))

    async def run(self, url: str) -> AcquisitionResult:
        html = await asyncio.to_thread(self._download, url)

        inline_records = self.inline_extractor.extract_competitors(html)
        if inline_records:
            return self.build_result(url, html, inline_records, 'inline-data')

        return self.build_result(url, html, self.regex_extractor.extract_from_html(html), 'regex')


class TieredAcquirer:
    """
    Acquisition with automatic fallback

    Strategy:
    1. Return a fresh cached result if a cache was supplied
    2. Run each tier under its own budget, cheapest-last
    3. Stop at the first tier producing competitors
    4. Otherwise return an empty result (hasTable false); never raise
    """

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        tiers: Optional[Sequence[Tier]] = None,
        cache: Optional[ResultCache] = None,
        selectors: Optional[SelectorTable] = None,
        clock: Clock = SYSTEM_CLOCK
    ):
        """
        Initialize Tiered Acquirer

        Args:
            config: Budgets and timeouts (defaults to ScraperConfig())
            tiers: Explicit tier chain; defaults to full -> quick -> lite
            cache: Optional caller-owned advisory cache
            selectors: Selector table for the browser tier
            clock: Time source handed to browser waits
        """
        self.config = config or ScraperConfig()
        self.cache = cache
        self.tiers: List[Tier] = list(tiers) if tiers is not None else [
            FullBrowserTier(self.config, selectors or DEFAULT_SELECTORS, clock),
            QuickFetchTier(self.config),
            LiteFetchTier(self.config),
        ]

    async def acquire(self, url: str) -> AcquisitionResult:
        """
        Acquire competitor rows for url

        Args:
            url: Validated target URL

        Returns:
            AcquisitionResult from the first productive tier, or an empty one
        """
        cached = self._cache_get(url)
        if cached is not None:
            return cached

        attempts = []
        fault: Optional[str] = None

        for index, tier in enumerate(self.tiers):
            is_last = index == len(self.tiers) - 1
            started = time.monotonic()
            logger.info(f"Tier {tier.name}: starting (budget {tier.budget}s)")

            try:
                result = await asyncio.wait_for(tier.run(url), timeout=tier.budget)
            except SOFT_ERRORS as e:
                attempts.append(_attempt(tier, 'failed', started, e))
                logger.warning(f"Tier {tier.name} failed: {_describe(e)}")
                continue
            except Exception as e:
                attempts.append(_attempt(tier, 'fault', started, e))
                if is_last:
                    fault = _describe(e)
                    logger.error(f"Tier {tier.name} machinery fault: {fault}")
                else:
                    logger.warning(f"Tier {tier.name} machinery fault, falling back: {_describe(e)}")
                continue

            if result.has_table:
                attempts.append(_attempt(tier, 'ok', started, rows=result.row_count))
                logger.info(f"Tier {tier.name}: {result.row_count} competitors")
                result.attempts = attempts
                self._cache_set(url, result)
                return result

            attempts.append(_attempt(tier, 'empty', started, rows=0))
            logger.info(f"Tier {tier.name}: no competitors found, falling back")

        logger.warning(f"All tiers exhausted for {url}")
        return AcquisitionResult(url=url, attempts=attempts, fault=fault)

    def _cache_get(self, url: str) -> Optional[AcquisitionResult]:
        """Cached result for url; a failing cache counts as a miss"""
        if self.cache is None:
            return None
        try:
            return self.cache.get(url)
        except Exception as e:
            logger.debug(f"Cache lookup failed for {url}: {e}")
            return None

    def _cache_set(self, url: str, result: AcquisitionResult) -> None:
        if self.cache is None:
            return
        try:
            self.cache.set(url, result)
        except Exception as e:
            logger.debug(f"Cache store failed for {url}: {e}")


def _describe(error: BaseException) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return 'tier budget exceeded'
    return str(error) or error.__class__.__name__


def _attempt(tier: Tier, status: str, started: float, error: Optional[BaseException] = None,
             rows: Optional[int] = None) -> dict:
    attempt = {
        'tier': tier.name,
        'status': status,
        'elapsed': round(time.monotonic() - started, 3),
    }
    if rows is not None:
        attempt['rows'] = rows
    if error is not None:
        attempt['error'] = _describe(error)
    return attempt


__all__ = [
    'FullBrowserTier',
    'LiteFetchTier',
    'QuickFetchTier',
    'Tier',
    'TieredAcquirer',
]
