"""
Data model for extracted competitor rows
RawRow -> CompetitorRecord -> PageResult -> AcquisitionResult
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple


class PageType(Enum):
    """Shape of a results table, decided once per page"""

    RESULTS = "results"
    START_LIST = "start_list"


class RawRow:
    """
    Ordered cell texts of one table row.

    Column position carries meaning, so the cells are frozen into a tuple
    when the row is built and never change afterwards.
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: Iterable[str]):
        self._cells: Tuple[str, ...] = tuple(cells)

    @property
    def cells(self) -> Tuple[str, ...]:
        return self._cells

    def get(self, index: int) -> Optional[str]:
        """Cell at index, or None when the row is too short"""
        try:
            return self._cells[index]
        except IndexError:
            return None

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[str]:
        return iter(self._cells)

    def __getitem__(self, index):
        return self._cells[index]

    def __eq__(self, other) -> bool:
        if isinstance(other, RawRow):
            return self._cells == other._cells
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._cells)

    def __repr__(self) -> str:
        return f"RawRow({list(self._cells)!r})"

    def to_list(self) -> List[str]:
        return list(self._cells)


@dataclass(frozen=True)
class CompetitorRecord:
    """Structured projection of a RawRow, kept together with the row itself"""

    row: RawRow
    page_type: PageType
    start_time: Optional[str] = None
    name: Optional[str] = None
    club: Optional[str] = None
    country: Optional[str] = None
    bib: Optional[str] = None
    card: Optional[str] = None
    rank: Optional[int] = None
    final_time: Optional[str] = None

    @property
    def cells(self) -> Tuple[str, ...]:
        return self.row.cells

    def structured(self) -> Dict[str, Any]:
        """Named fields in the camelCase shape the display consumer reads"""
        if self.page_type is PageType.RESULTS:
            return {
                'rank': self.rank,
                'bib': self.bib,
                'name': self.name,
                'country': self.country,
                'finalTime': self.final_time,
            }
        return {
            'startTime': self.start_time,
            'name': self.name,
            'club': self.club,
            'country': self.country,
            'bib': self.bib,
            'card': self.card,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cells': self.row.to_list(),
            'structured': self.structured(),
        }


@dataclass(frozen=True)
class PagingInfo:
    """Authoritative "(from-to of total)" triple read from a paging widget"""

    start: int
    end: int
    total: int

    @property
    def is_last(self) -> bool:
        return self.end >= self.total


@dataclass
class PageResult:
    """One extraction pass over the currently rendered page"""

    records: List[CompetitorRecord]
    has_more: bool = True
    paging: Optional[PagingInfo] = None

    @property
    def count(self) -> int:
        return len(self.records)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class AcquisitionResult:
    """
    Tier-independent outcome of one top-level acquisition.

    Always produced, even when every tier failed: that case is an empty
    record list with has_table False. ``fault`` is only set when the last
    remaining tier hit a machinery fault.
    """

    competitors: List[CompetitorRecord] = field(default_factory=list)
    html: str = ""
    title: str = ""
    tier: str = "none"
    source: str = "none"
    url: str = ""
    total_pages: Optional[int] = None
    attempts: List[Dict[str, Any]] = field(default_factory=list)
    fault: Optional[str] = None
    cached: bool = False
    timestamp: str = field(default_factory=_utc_now_iso)

    @property
    def row_count(self) -> int:
        return len(self.competitors)

    @property
    def has_table(self) -> bool:
        return len(self.competitors) > 0

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'competitors': [c.to_dict() for c in self.competitors],
            'html': self.html,
            'title': self.title,
            'rowCount': self.row_count,
            'hasTable': self.has_table,
            'tier': self.tier,
            'source': self.source,
            'url': self.url,
            'attempts': list(self.attempts),
            'cached': self.cached,
            'timestamp': self.timestamp,
        }
        if self.total_pages is not None:
            data['totalPages'] = self.total_pages
        return data
