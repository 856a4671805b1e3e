from __future__ import annotations

import pytest
import requests
from cloudscraper.exceptions import CloudflareChallengeError

from results_scraper.api import create_app
from results_scraper.core.config import ScraperConfig
from results_scraper.core.models import AcquisitionResult, CompetitorRecord, PageType, RawRow
from results_scraper.core.tiered_fetcher import LiteFetchTier, QuickFetchTier, TieredAcquirer

URL = "https://live.example.org/event/42"


class StubAcquirer:
    def __init__(self, result: AcquisitionResult = None, error: Exception = None) -> None:
        self.result = result
        self.error = error
        self.urls = []

    async def acquire(self, url: str) -> AcquisitionResult:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.result or AcquisitionResult(url=url)


class StubFetcher:
    def __init__(self, error: Exception = None) -> None:
        self.error = error

    def fetch(self, url, profile="quick", timeout=None):
        if self.error is not None:
            raise self.error
        return {"html": "<html>raw</html>", "url": url, "status_code": 200,
                "headers": {"content-type": "text/html; charset=utf-8"}}

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None


def _client(acquirer=None, fetcher=None):
    app = create_app(
        acquirer=acquirer or StubAcquirer(),
        config=ScraperConfig(),
        fetcher_factory=lambda: fetcher or StubFetcher(),
    )
    app.testing = True
    return app.test_client()


def test_missing_url_is_rejected_without_acquiring() -> None:
    acquirer = StubAcquirer()

    response = _client(acquirer).get("/api/scrape")

    assert response.status_code == 400
    assert response.get_json() == {"error": "URL parameter required"}
    assert acquirer.urls == []


@pytest.mark.parametrize("bad", ["not a url", "ftp://host/file", "https://"])
def test_malformed_url_is_rejected(bad) -> None:
    response = _client().get("/api/scrape", query_string={"url": bad})

    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid URL parameter"}


def test_successful_scrape_returns_records() -> None:
    record = CompetitorRecord(
        row=RawRow(["1", "101", "Jane Doe", "NOR", "0:35:12"]),
        page_type=PageType.RESULTS,
        rank=1, bib="101", name="Jane Doe", country="NOR", final_time="0:35:12",
    )
    result = AcquisitionResult(competitors=[record], title="Results", tier="full", source="pagination",
                               url=URL, total_pages=1)

    response = _client(StubAcquirer(result)).get("/api/scrape", query_string={"url": URL})
    body = response.get_json()

    assert response.status_code == 200
    assert response.headers["Cache-Control"] == "public, max-age=30"
    assert body["hasTable"] is True
    assert body["rowCount"] == 1
    assert body["totalPages"] == 1
    assert body["tier"] == "full"
    assert body["competitors"][0]["cells"] == ["1", "101", "Jane Doe", "NOR", "0:35:12"]
    assert body["competitors"][0]["structured"]["finalTime"] == "0:35:12"


def test_no_rows_is_still_200() -> None:
    response = _client().get("/api/scrape", query_string={"url": URL})
    body = response.get_json()

    assert response.status_code == 200
    assert body["hasTable"] is False
    assert body["competitors"] == []


def test_last_tier_fault_maps_to_500() -> None:
    acquirer = StubAcquirer(AcquisitionResult(url=URL, fault="browser binary missing"))

    response = _client(acquirer).get("/api/scrape", query_string={"url": URL})

    assert response.status_code == 500
    assert response.get_json() == {"error": "Failed to scrape data", "message": "browser binary missing", "url": URL}


def test_unexpected_exception_maps_to_500() -> None:
    response = _client(StubAcquirer(error=RuntimeError("boom"))).get("/api/scrape", query_string={"url": URL})

    assert response.status_code == 500
    assert response.get_json()["message"] == "boom"


def test_every_response_allows_any_origin() -> None:
    client = _client()

    assert client.get("/api/scrape").headers["Access-Control-Allow-Origin"] == "*"
    assert client.get("/health").headers["Access-Control-Allow-Origin"] == "*"


def test_health() -> None:
    response = _client().get("/health")
    assert response.get_json() == {"status": "ok"}


def test_fetch_proxies_raw_html() -> None:
    response = _client().get("/api/fetch", query_string={"url": URL})

    assert response.status_code == 200
    assert response.get_data(as_text=True) == "<html>raw</html>"
    assert response.headers["Content-Type"].startswith("text/html")


def test_fetch_failure_maps_to_500() -> None:
    fetcher = StubFetcher(error=requests.ConnectionError("refused"))

    response = _client(fetcher=fetcher).get("/api/fetch", query_string={"url": URL})

    assert response.status_code == 500
    assert response.get_json()["error"] == "Failed to fetch data"


def test_cloudflare_blocked_site_is_empty_not_500() -> None:
    config = ScraperConfig()
    blocked = StubFetcher(error=CloudflareChallengeError("Detected a Cloudflare version 2 challenge"))
    acquirer = TieredAcquirer(config=config, tiers=[
        QuickFetchTier(config, fetcher_factory=lambda: blocked),
        LiteFetchTier(config, fetcher_factory=lambda: blocked),
    ])

    response = _client(acquirer).get("/api/scrape", query_string={"url": URL})
    body = response.get_json()

    assert response.status_code == 200
    assert body["hasTable"] is False
    assert [a["status"] for a in body["attempts"]] == ["failed", "failed"]
