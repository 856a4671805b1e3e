"""
Pagination Navigator

Drives client-side paginated tables: extract the current page, advance,
decide whether to stop. Strictly sequential, since each click replaces the
table DOM that the previous extraction read.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from .config import ScraperConfig
from .models import CompetitorRecord, PageResult
from .row_extractor import RowExtractor, parse_soup
from .selectors import DEFAULT_SELECTORS, SelectorTable
from .timing import SYSTEM_CLOCK, Clock, poll_until

logger = logging.getLogger(__name__)

DISABLED_CLASSES = ('disabled', 'Mui-disabled', 'mat-mdc-button-disabled')


class StopReason:
    PAGING_COMPLETE = 'paging_complete'
    PAGE_CAP = 'page_cap'
    NO_NEXT = 'no_next'
    EMPTY_PAGE = 'empty_page'
    STALE_PAGE = 'stale_page'


@dataclass
class PaginationOutcome:
    """Everything collected by one collect_all_pages run"""

    records: List[CompetitorRecord] = field(default_factory=list)
    pages_visited: int = 0
    page_counts: List[int] = field(default_factory=list)
    stop_reason: Optional[str] = None


class PaginationNavigator:
    """
    Collects rows across every page of a paginated table.

    Advancement precedence:
    1. An authoritative "(from-to of total)" widget with to >= total stops
    2. First enabled match from the ordered "next" selector list is clicked
    3. Any visible, enabled interactive element whose text contains "Next"

    The max_pages ceiling only prevents runaway loops; the real page count
    is unknown up front.
    """

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        row_extractor: Optional[RowExtractor] = None,
        selectors: Optional[SelectorTable] = None,
        clock: Clock = SYSTEM_CLOCK,
        max_pages: Optional[int] = None
    ):
        self.config = config or ScraperConfig()
        self.selectors = selectors or DEFAULT_SELECTORS
        self.row_extractor = row_extractor or RowExtractor(selectors=self.selectors)
        self.clock = clock
        self.max_pages = max(1, max_pages if max_pages is not None else self.config.max_pages)

    async def collect_all_pages(self, session) -> PaginationOutcome:
        """
        Extract every page reachable from the session's current page

        Args:
            session: Opened BrowserSession (anything with ``content()`` and ``page``)

        Returns:
            PaginationOutcome with accumulated records and the stop reason
        """
        outcome = PaginationOutcome()
        previous_fingerprint: Optional[Tuple] = None

        while True:
            html = await session.content()
            page = self.row_extractor.extract_page(parse_soup(html))
            fingerprint = _fingerprint(page)

            if outcome.pages_visited > 0 and page.count > 0 and fingerprint == previous_fingerprint:
                logger.info("Next control did not change the table, stopping")
                outcome.stop_reason = StopReason.STALE_PAGE
                break

            outcome.pages_visited += 1
            outcome.records.extend(page.records)
            outcome.page_counts.append(page.count)
            logger.info(f"Extracted page {outcome.pages_visited}: {page.count} rows")

            stop_reason = self._stop_reason(page, outcome.pages_visited)
            if stop_reason:
                outcome.stop_reason = stop_reason
                break

            previous_fingerprint = fingerprint
            if not await self.advance(session):
                outcome.stop_reason = StopReason.NO_NEXT
                break

            await self._settle(session, previous_fingerprint)

        logger.info(
            f"Total competitors: {len(outcome.records)} from {outcome.pages_visited} page(s) "
            f"(stopped: {outcome.stop_reason})"
        )
        return outcome

    def _stop_reason(self, page: PageResult, pages_visited: int) -> Optional[str]:
        if page.count == 0 and pages_visited > 1:
            return StopReason.EMPTY_PAGE
        if page.paging is not None and page.paging.is_last:
            logger.info(
                f"Paging widget reports {page.paging.start}-{page.paging.end} "
                f"of {page.paging.total}, last page reached"
            )
            return StopReason.PAGING_COMPLETE
        if pages_visited >= self.max_pages:
            logger.warning(f"Page cap of {self.max_pages} reached, stopping")
            return StopReason.PAGE_CAP
        return None

    async def advance(self, session) -> bool:
        """Click the best "next" candidate; False when there is none"""
        page = session.page

        for selector in self.selectors.next_buttons:
            try:
                element = await page.query_selector(selector)
            except Exception as e:
                logger.debug(f"Next selector {selector!r} failed: {e}")
                continue

            if element is None or not await _is_clickable(element):
                continue

            if await _click(element):
                logger.debug(f"Clicked next via {selector!r}")
                return True

        return await self._advance_by_text(page)

    async def _advance_by_text(self, page: Any) -> bool:
        try:
            candidates = await page.query_selector_all(SelectorTable.union(self.selectors.interactive))
        except Exception as e:
            logger.debug(f"Interactive element scan failed: {e}")
            return False

        for element in candidates:
            try:
                text = await element.inner_text()
            except Exception:
                continue
            if not text or 'Next' not in text:
                continue
            if not await _is_clickable(element, require_visible=True):
                continue
            if await _click(element):
                logger.debug(f"Clicked next via text match {text.strip()!r}")
                return True

        return False

    async def _settle(self, session, previous_fingerprint: Optional[Tuple]) -> bool:
        """Poll until the table differs from the page just read, or the settle deadline passes"""

        async def table_changed() -> bool:
            try:
                html = await session.content()
            except Exception:
                return False
            page = self.row_extractor.extract_page(parse_soup(html))
            return _fingerprint(page) != previous_fingerprint

        changed = await poll_until(
            table_changed,
            timeout=self.config.settle_timeout,
            interval=self.config.poll_interval,
            clock=self.clock
        )
        if not changed:
            logger.debug(f"Table unchanged after {self.config.settle_timeout}s settle")
        return changed


def _fingerprint(page: PageResult) -> Tuple:
    return tuple(record.row.cells for record in page.records)


async def _is_clickable(element: Any, require_visible: bool = False) -> bool:
    try:
        if not await element.is_enabled():
            return False
        if await element.get_attribute('aria-disabled') == 'true':
            return False
        classes = (await element.get_attribute('class') or '').split()
        if any(name in classes for name in DISABLED_CLASSES):
            return False
        if require_visible and not await element.is_visible():
            return False
        return True
    except Exception as e:
        logger.debug(f"Could not inspect pagination control: {e}")
        return False


async def _click(element: Any) -> bool:
    try:
        await element.click()
        return True
    except Exception as e:
        logger.debug(f"Click on pagination control failed: {e}")
        return False
