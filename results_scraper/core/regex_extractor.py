"""
Static Regex Extractor - degraded-mode row extraction on raw HTML text
No DOM, no selectors: tag-boundary patterns only
"""

import html as html_lib
import logging
import re
from typing import List, Optional

from .field_mapper import FieldMapper, clean_cells
from .models import CompetitorRecord, RawRow

logger = logging.getLogger(__name__)

ROW_PATTERN = re.compile(r'<tr[^>]*>(.*?)</tr>', re.IGNORECASE | re.DOTALL)
CELL_PATTERN = re.compile(r'<td[^>]*>(.*?)</td>', re.IGNORECASE | re.DOTALL)
TAG_PATTERN = re.compile(r'<[^>]*>')
TITLE_PATTERN = re.compile(r'<title[^>]*>(.*?)</title>', re.IGNORECASE | re.DOTALL)
HEADER_CELL_PATTERN = re.compile(r'<th[\s>]', re.IGNORECASE)

HEADER_MARKERS = ('Start Time', 'Rank')


class RegexExtractor:
    """
    Pattern based table extraction for HTML served without a browser.

    Less precise than the DOM extractor on purpose: it never fails on
    broken markup, it just finds fewer (or noisier) rows.
    """

    def __init__(self, field_mapper: Optional[FieldMapper] = None):
        self.field_mapper = field_mapper or FieldMapper()

    def extract_rows(self, html: str) -> List[RawRow]:
        rows: List[RawRow] = []
        if not html:
            return rows

        for match in ROW_PATTERN.finditer(html):
            row_html = match.group(1)
            if self._is_header(row_html):
                continue

            cells = [strip_markup(cell) for cell in CELL_PATTERN.findall(row_html)]
            if not cells or not any(cells):
                continue

            rows.append(clean_cells(cells))

        return rows

    def extract_from_html(self, html: str) -> List[CompetitorRecord]:
        """
        Extract competitor records from raw HTML

        Args:
            html: Response body as text

        Returns:
            One record per data row, in document order
        """
        rows = self.extract_rows(html)
        records = self.field_mapper.project_page(rows)
        logger.info(f"Regex extraction found {len(records)} rows")
        return records

    @staticmethod
    def _is_header(row_html: str) -> bool:
        if HEADER_CELL_PATTERN.search(row_html):
            return True
        return any(marker in row_html for marker in HEADER_MARKERS)


def strip_markup(fragment: str) -> str:
    """Remove tags, decode entities and collapse whitespace"""
    text = TAG_PATTERN.sub(' ', fragment)
    text = html_lib.unescape(text).replace('\xa0', ' ')
    return re.sub(r'\s+', ' ', text).strip()


def extract_title(html: str) -> str:
    if not html:
        return ''
    match = TITLE_PATTERN.search(html)
    return strip_markup(match.group(1)) if match else ''
