"""
Results Scraper
Competitor and timing rows from client-rendered results sites, with tiered fallback
"""

__version__ = "1.0.0"

from .core.config import ScraperConfig
from .core.result_cache import ResultCache
from .core.tiered_fetcher import TieredAcquirer

__all__ = ["ResultCache", "ScraperConfig", "TieredAcquirer"]
