from __future__ import annotations

import pytest

from results_scraper.core.models import PageType
from results_scraper.core.regex_extractor import RegexExtractor, extract_title, strip_markup

from .fakes import table_html


@pytest.mark.parametrize("count", [1, 7, 40])
def test_n_well_formed_rows_give_n_records_in_order(count: int) -> None:
    rows = [[f"10:{i:02d}:00", f"Runner {i}", "Club X", "NOR", str(100 + i)] for i in range(count)]

    records = RegexExtractor().extract_from_html(table_html(rows))

    assert len(records) == count
    assert [list(r.cells) for r in records] == rows


def test_header_markers_are_skipped() -> None:
    html = (
        "<table>"
        "<tr><th>Start</th><th>Name</th></tr>"
        "<tr><td>Start Time</td><td>Name</td></tr>"
        "<tr><td>Rank</td><td>Bib</td></tr>"
        "<tr><td>10:00 UTC</td><td>Jane Doe</td></tr>"
        "</table>"
    )

    records = RegexExtractor().extract_from_html(html)

    assert len(records) == 1
    assert records[0].start_time == "10:00"
    assert records[0].name == "Jane Doe"


def test_inner_markup_and_entities_are_cleaned() -> None:
    html = (
        '<table><tr class="odd">'
        '<td class="rank"><span>1</span></td>'
        "<td>101</td>"
        "<td><a href='/r/1'>Jane&nbsp;Doe</a>\n  </td>"
        "<td>Club &amp; Co NOR</td>"
        "<td>0:35:12</td>"
        "</tr></table>"
    )

    record = RegexExtractor().extract_from_html(html)[0]

    assert record.cells == ("1", "101", "Jane Doe", "Club & Co NOR", "0:35:12")
    assert record.page_type is PageType.RESULTS
    assert record.rank == 1
    assert record.final_time == "0:35:12"


def test_empty_rows_are_dropped() -> None:
    html = "<table><tr><td> </td><td></td></tr><tr><td>10:00</td><td>Jane</td></tr></table>"
    assert len(RegexExtractor().extract_from_html(html)) == 1


def test_no_table_returns_empty_list() -> None:
    assert RegexExtractor().extract_from_html("<html><body>Loading...</body></html>") == []
    assert RegexExtractor().extract_from_html("") == []


def test_extraction_is_idempotent() -> None:
    html = table_html([["1", "101", "Jane Doe", "NOR", "0:35:12"], ["2", "102", "John Roe", "SWE", "0:36:40"]])
    extractor = RegexExtractor()

    assert extractor.extract_from_html(html) == extractor.extract_from_html(html)


def test_title_and_strip_markup() -> None:
    assert extract_title("<html><head><title> Sprint &amp; Men </title></head></html>") == "Sprint & Men"
    assert extract_title("<p>no title</p>") == ""
    assert strip_markup("<b>A</b>\n\t<i>B</i>") == "A B"
