"""
Row Extractor - rendered table markup to raw cells and structured records
Tolerates plain tables, ARIA grids, Angular Material and MUI tables
"""

import logging
import re
from typing import List, Optional, Union

from bs4 import BeautifulSoup, Tag

from .field_mapper import FieldMapper, clean_cells
from .models import PageResult, PagingInfo, RawRow
from .selectors import DEFAULT_SELECTORS, SelectorTable

logger = logging.getLogger(__name__)

# "1–10 of 25", "11 - 20 of 25"; MUI uses an en dash
PAGING_PATTERN = re.compile(r'(\d+)\s*[–—-]\s*(\d+)\s+of\s+(\d+)', re.IGNORECASE)


def parse_soup(markup: Union[str, bytes]) -> BeautifulSoup:
    return BeautifulSoup(markup, 'lxml')


class RowExtractor:
    """
    Extracts competitor rows from a parsed DOM.

    The selector table is injected, so the same extractor covers every
    site idiom we have seen; unknown markup yields fewer rows, never an
    exception.
    """

    def __init__(
        self,
        selectors: Optional[SelectorTable] = None,
        field_mapper: Optional[FieldMapper] = None
    ):
        self.selectors = selectors or DEFAULT_SELECTORS
        self.field_mapper = field_mapper or FieldMapper()
        self._row_query = SelectorTable.union(self.selectors.rows)
        self._cell_query = SelectorTable.union(self.selectors.cells)
        self._header_query = SelectorTable.union(self.selectors.header_cells)

    def extract_rows(self, root: Union[BeautifulSoup, Tag, str]) -> List[RawRow]:
        """
        Collect cell texts for every data row under root

        Args:
            root: Parsed document (or raw markup, parsed with lxml)

        Returns:
            RawRows in document order; header rows and cell-less rows dropped
        """
        if isinstance(root, (str, bytes)):
            root = parse_soup(root)

        try:
            row_elements = root.select(self._row_query)
        except Exception as e:
            logger.warning(f"Row query failed: {e}")
            return []

        rows: List[RawRow] = []
        for index, element in enumerate(row_elements):
            if index == 0 and self._is_header_row(element):
                logger.debug("Skipping header row")
                continue

            try:
                cell_elements = element.select(self._cell_query)
            except Exception as e:
                logger.debug(f"Cell query failed on row {index}: {e}")
                continue

            if not cell_elements:
                continue

            rows.append(clean_cells(cell.get_text(' ', strip=True) for cell in cell_elements))

        return rows

    def extract_page(self, root: Union[BeautifulSoup, Tag, str]) -> PageResult:
        """Rows, structured records and paging widget state of the current page"""
        if isinstance(root, (str, bytes)):
            root = parse_soup(root)

        rows = self.extract_rows(root)
        records = self.field_mapper.project_page(rows)
        paging = self.read_paging(root)

        return PageResult(
            records=records,
            has_more=not (paging and paging.is_last),
            paging=paging,
        )

    def read_paging(self, root: Union[BeautifulSoup, Tag]) -> Optional[PagingInfo]:
        """Parse the first "(from-to of total)" label found, if any"""
        for selector in self.selectors.paging_labels:
            try:
                label = root.select_one(selector)
            except Exception:
                continue
            if label is None:
                continue
            paging = parse_paging_text(label.get_text(' ', strip=True))
            if paging:
                return paging
        return None

    def _is_header_row(self, element: Tag) -> bool:
        try:
            return element.select_one(self._header_query) is not None
        except Exception:
            return False


def parse_paging_text(text: str) -> Optional[PagingInfo]:
    if not text:
        return None
    match = PAGING_PATTERN.search(text)
    if not match:
        return None
    start, end, total = (int(g) for g in match.groups())
    return PagingInfo(start=start, end=end, total=total)
