"""
HTML Fetcher with CloudScraper
Single direct GETs for the browserless tiers
"""

import logging
from typing import Any, Dict, Optional

import cloudscraper
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)


class HTMLFetcher:
    """Fetches raw HTML with named header profiles and a per-call timeout"""

    # quick: plain desktop Chrome, cache busting
    # lite: Linux Chrome with full navigation headers, looks like a typed-in URL
    HEADER_PROFILES: Dict[str, Dict[str, str]] = {
        'quick': {
            'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36',
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
            'Cache-Control': 'no-cache',
            'Pragma': 'no-cache',
        },
        'lite': {
            'User-Agent': 'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.9',
            'Accept-Encoding': 'gzip, deflate',
            'Cache-Control': 'no-cache',
            'Pragma': 'no-cache',
            'Sec-Fetch-Dest': 'document',
            'Sec-Fetch-Mode': 'navigate',
            'Sec-Fetch-Site': 'none',
        },
    }

    def __init__(self, timeout: float = 10.0, max_redirects: int = 5, session: Optional[Any] = None):
        """
        Initialize HTML Fetcher

        Args:
            timeout: Default request timeout in seconds
            max_redirects: Redirects followed before giving up
            session: Pre-built requests-compatible session (tests)
        """
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.session = session or self._create_session()

    def _create_session(self):
        """Create CloudScraper session without transport retries"""
        session = cloudscraper.create_scraper(
            browser={
                'browser': 'chrome',
                'platform': 'windows',
                'mobile': False
            }
        )
        session.max_redirects = self.max_redirects

        # One attempt per tier; resilience comes from the next tier, not a retry
        adapter = HTTPAdapter(max_retries=Retry(total=0, raise_on_status=False))
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def fetch(self, url: str, profile: str = 'quick', timeout: Optional[float] = None) -> Dict[str, Any]:
        """
        Fetch HTML content from URL

        Args:
            url: Target URL to fetch
            profile: Header profile name ('quick' or 'lite')
            timeout: Override the default timeout

        Returns:
            Dict with 'html', 'url', 'status_code', 'headers' keys

        Raises:
            requests.RequestException: on transport errors and non-2xx responses
        """
        headers = self.HEADER_PROFILES.get(profile)
        if headers is None:
            raise ValueError(f"Unknown header profile: {profile}")

        timeout = timeout if timeout is not None else self.timeout
        logger.info(f"Fetching ({profile}): {url[:80]}..." if len(url) > 80 else f"Fetching ({profile}): {url}")

        response = self.session.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()

        logger.info(f"Success: {response.status_code} ({len(response.text)} bytes)")
        return {
            'html': response.text,
            'url': response.url,
            'status_code': response.status_code,
            'headers': dict(response.headers),
        }

    def close(self) -> None:
        """Close the session"""
        if self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
