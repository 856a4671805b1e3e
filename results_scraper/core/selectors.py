"""
Selector priority tables
One table drives row extraction, content readiness and pagination
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SelectorTable:
    """
    Ordered CSS selector lists for the DOM idioms seen on results sites.

    Order is priority: earlier selectors are tried (or listed) first.
    Row and cell lists are queried as one union so a row matched by two
    selectors is still read once.
    """

    rows: Tuple[str, ...] = (
        'tbody tr',
        'table.mat-mdc-table tbody tr',
        'mat-table mat-row',
        '.mat-mdc-row',
        'table tr:has(td)',
        '[role="row"]:has([role="cell"])',
        '[role="row"]:has([role="gridcell"])',
        '.MuiDataGrid-row',
        '.competitor-row',
        '.start-list-row',
    )

    cells: Tuple[str, ...] = (
        'td',
        '[role="cell"]',
        '[role="gridcell"]',
        'mat-cell',
        '.mat-mdc-cell',
        '.MuiTableCell-root:not(th)',
        '.MuiDataGrid-cell',
    )

    header_cells: Tuple[str, ...] = (
        'th',
        '[role="columnheader"]',
        'mat-header-cell',
    )

    content_ready: Tuple[str, ...] = (
        'mat-table',
        'table.mat-mdc-table',
        'table tbody tr',
        '.mat-mdc-row',
        '[role="grid"]',
        '.competitor-row',
        '.start-list-row',
        'tbody',
    )

    next_buttons: Tuple[str, ...] = (
        '[aria-label="Next"]:not(:disabled)',
        '[aria-label="Next page"]:not(:disabled)',
        '.MuiTablePagination-actions button:last-child:not(:disabled)',
        '.mat-mdc-paginator-navigation-next:not(:disabled)',
        '.pagination-next:not(:disabled)',
        'button[title="Next page"]:not(:disabled)',
        '.MuiPagination-ul button[aria-label*="next"]:not(.Mui-disabled)',
        '[class*="next"]:not(:disabled):not(.disabled)',
    )

    paging_labels: Tuple[str, ...] = (
        '.MuiTablePagination-displayedRows',
        '.mat-mdc-paginator-range-label',
        '.mat-paginator-range-label',
        '.pagination-info',
    )

    interactive: Tuple[str, ...] = (
        'button',
        'a',
        '[role="button"]',
    )

    @staticmethod
    def union(selectors: Tuple[str, ...]) -> str:
        return ', '.join(selectors)


DEFAULT_SELECTORS = SelectorTable()
