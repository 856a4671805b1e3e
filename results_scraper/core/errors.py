"""
Error taxonomy for the acquisition pipeline
"""

from typing import Optional
from urllib.parse import urlparse


class ScraperError(Exception):
    """Base class for all scraper errors"""


class InputError(ScraperError):
    """Missing or malformed input; never retried"""


class SoftTierError(ScraperError):
    """A failure that only ends the current tier and triggers fallback"""


class NavigationTimeout(SoftTierError):
    """Page navigation did not reach network quiescence in time"""


class NavigationError(SoftTierError):
    """Navigation failed on the site side (DNS, refused connection, aborted load)"""


class SelectorTimeout(SoftTierError):
    """An awaited selector never appeared"""


class MachineryFault(ScraperError):
    """
    The acquisition machinery itself broke (browser failed to launch,
    unexpected internal exception). Only surfaced to the caller when it
    happens on the last remaining tier.
    """


def validate_url(url: Optional[str]) -> str:
    """
    Check a user supplied target URL

    Returns:
        The stripped URL

    Raises:
        InputError: if the URL is missing or not an absolute http(s) URL
    """
    if url is None or not str(url).strip():
        raise InputError("URL parameter required")

    url = str(url).strip()
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise InputError("Invalid URL parameter")

    return url
