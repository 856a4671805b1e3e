"""
Field Mapper - column-position projection of raw rows into named fields
Shared by the DOM row extractor and the static regex extractor
"""

import logging
import re
from typing import Iterable, List, Optional, Sequence

from .models import CompetitorRecord, PageType, RawRow

logger = logging.getLogger(__name__)

# Trailing "UTC", "GMT+2", "utc-05" style zone markers
TIMEZONE_PATTERN = re.compile(r'\s*(?:UTC|GMT)[+-]?\d*\s*$', re.IGNORECASE)
TIME_LIKE_PATTERN = re.compile(r'\d{1,2}:\d{2}')
NUMERIC_PATTERN = re.compile(r'^\d+$')
COUNTRY_TOKEN_PATTERN = re.compile(r'\b([A-Z]{3})\b')
WHITESPACE_PATTERN = re.compile(r'\s+')


def clean_cell(text: Optional[str]) -> str:
    """Trim, collapse whitespace and drop a trailing timezone token from time-like text"""
    if not text:
        return ''

    text = WHITESPACE_PATTERN.sub(' ', text).strip()
    if TIME_LIKE_PATTERN.search(text):
        text = TIMEZONE_PATTERN.sub('', text).strip()
    return text


def clean_cells(cells: Iterable[Optional[str]]) -> RawRow:
    return RawRow(clean_cell(c) for c in cells)


def infer_page_type(rows: Sequence[RawRow]) -> PageType:
    """
    Decide the table shape from the first cell of the first row.

    A purely numeric first cell means a rank column, hence results.
    Note that a start list led by a bare bib number is indistinguishable.
    """
    if rows and len(rows[0]) > 0 and NUMERIC_PATTERN.match(rows[0][0] or ''):
        return PageType.RESULTS
    return PageType.START_LIST


class FieldMapper:
    """
    Projects RawRows onto CompetitorRecords.

    Column contract:
        start list -> startTime, name, club, country, bib, card
        results    -> rank, bib, name, country, ..., finalTime (last cell)
    """

    def __init__(self, bib_offset: int = 0):
        """
        Args:
            bib_offset: Event offset subtracted from numeric bibs
        """
        self.bib_offset = bib_offset

    def project_page(self, rows: Sequence[RawRow]) -> List[CompetitorRecord]:
        """Infer the page type once and project every row with it"""
        page_type = infer_page_type(rows)
        records = []
        for row in rows:
            try:
                records.append(self.project(row, page_type))
            except Exception as e:
                # uncontrolled markup: keep the raw cells, give up on structure
                logger.debug(f"Projection failed for {row!r}: {e}")
                records.append(CompetitorRecord(row=row, page_type=page_type))
        return records

    def project(self, row: RawRow, page_type: PageType) -> CompetitorRecord:
        if page_type is PageType.RESULTS:
            return self._project_results(row)
        return self._project_start_list(row)

    def _project_start_list(self, row: RawRow) -> CompetitorRecord:
        club = _value(row, 2)
        return CompetitorRecord(
            row=row,
            page_type=PageType.START_LIST,
            start_time=_value(row, 0),
            name=_value(row, 1),
            club=club,
            country=_value(row, 3) or lift_country(club),
            bib=self.normalize_bib(_value(row, 4)),
            card=_value(row, 5),
        )

    def _project_results(self, row: RawRow) -> CompetitorRecord:
        name = _value(row, 2)
        rank_text = _value(row, 0)
        return CompetitorRecord(
            row=row,
            page_type=PageType.RESULTS,
            rank=int(rank_text) if rank_text and NUMERIC_PATTERN.match(rank_text) else None,
            bib=self.normalize_bib(_value(row, 1)),
            name=name,
            country=_value(row, 3) or lift_country(name),
            final_time=_value(row, len(row) - 1) if len(row) > 1 else None,
        )

    def normalize_bib(self, bib: Optional[str]) -> Optional[str]:
        if not bib or not self.bib_offset or not NUMERIC_PATTERN.match(bib):
            return bib
        return str(max(0, int(bib) - self.bib_offset))


def lift_country(text: Optional[str]) -> Optional[str]:
    """First standalone three-letter uppercase token, e.g. "OK Linne NOR" -> "NOR" """
    if not text:
        return None
    match = COUNTRY_TOKEN_PATTERN.search(text)
    return match.group(1) if match else None


def _value(row: RawRow, index: int) -> Optional[str]:
    if index < 0:
        return None
    value = row.get(index)
    return value if value else None
