"""Core scraping modules"""

from .browser_session import BrowserSession
from .config import ScraperConfig
from .errors import (
    InputError,
    MachineryFault,
    NavigationError,
    NavigationTimeout,
    ScraperError,
    SelectorTimeout,
    SoftTierError,
    validate_url,
)
from .field_mapper import FieldMapper
from .html_fetcher import HTMLFetcher
from .inline_json_extractor import InlineDataExtractor
from .models import (
    AcquisitionResult,
    CompetitorRecord,
    PageResult,
    PageType,
    PagingInfo,
    RawRow,
)
from .pagination_navigator import PaginationNavigator, PaginationOutcome
from .regex_extractor import RegexExtractor
from .result_cache import ResultCache
from .row_extractor import RowExtractor
from .selectors import DEFAULT_SELECTORS, SelectorTable
from .tiered_fetcher import (
    FullBrowserTier,
    LiteFetchTier,
    QuickFetchTier,
    Tier,
    TieredAcquirer,
)

__all__ = [
    "AcquisitionResult",
    "BrowserSession",
    "CompetitorRecord",
    "DEFAULT_SELECTORS",
    "FieldMapper",
    "FullBrowserTier",
    "HTMLFetcher",
    "InlineDataExtractor",
    "InputError",
    "LiteFetchTier",
    "MachineryFault",
    "NavigationError",
    "NavigationTimeout",
    "PageResult",
    "PageType",
    "PagingInfo",
    "PaginationNavigator",
    "PaginationOutcome",
    "QuickFetchTier",
    "RawRow",
    "RegexExtractor",
    "ResultCache",
    "RowExtractor",
    "ScraperConfig",
    "ScraperError",
    "SelectorTimeout",
    "SelectorTable",
    "SoftTierError",
    "Tier",
    "TieredAcquirer",
    "validate_url",
]
