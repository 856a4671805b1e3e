"""
Runtime configuration
Timeouts, budgets and limits for every stage of the pipeline
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

ENV_PREFIX = "RESULTS_SCRAPER_"

DESKTOP_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36'
)

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}


@dataclass(frozen=True)
class ScraperConfig:
    """
    All tunables in one place. Durations are in seconds.

    Three nested timeout levels apply during the full tier:
    navigation_timeout and content_timeout inside one page load, and
    full_budget around the whole tier.
    """

    # Browser session
    headless: bool = True
    navigation_timeout: float = 30.0
    content_timeout: float = 10.0
    content_grace_period: float = 5.0
    viewport_width: int = 1920
    viewport_height: int = 1080
    user_agent: str = DESKTOP_USER_AGENT

    # Pagination
    max_pages: int = 50
    settle_timeout: float = 2.0
    poll_interval: float = 0.25

    # Tier budgets
    full_budget: float = 45.0
    quick_timeout: float = 8.0
    quick_budget: float = 10.0
    lite_timeout: float = 10.0
    lite_budget: float = 15.0

    # Advisory cache
    cache_ttl: float = 30.0

    # Field mapping
    bib_offset: int = 0

    # Markup snapshot limits per static tier (characters)
    quick_snapshot_chars: int = 5000
    lite_snapshot_chars: int = 1000

    def with_overrides(self, **overrides: Any) -> 'ScraperConfig':
        """Copy with the given non-None fields replaced"""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ScraperConfig':
        """
        Build a config from RESULTS_SCRAPER_* environment variables

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            ScraperConfig with defaults for unset variables
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == '':
                continue
            try:
                values[f.name] = _coerce(raw, f.type)
            except ValueError:
                logger.warning(f"Ignoring invalid {ENV_PREFIX}{f.name.upper()}={raw!r}")

        return cls(**values)


def _coerce(raw: str, type_hint) -> Any:
    # dataclass field types are plain classes here; tolerate string annotations too
    name = type_hint if isinstance(type_hint, str) else getattr(type_hint, '__name__', '')

    if name == 'bool':
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(raw)
    if name == 'int':
        return int(raw)
    if name == 'float':
        return float(raw)
    return raw
