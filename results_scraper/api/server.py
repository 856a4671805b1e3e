"""
HTTP API for Results Scraper
Flask app exposing scrape, raw fetch proxy and health endpoints
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from flask import Flask, Response, jsonify, request

from ..core.config import ScraperConfig
from ..core.errors import InputError, validate_url
from ..core.html_fetcher import HTMLFetcher
from ..core.result_cache import ResultCache
from ..core.tiered_fetcher import TieredAcquirer

logger = logging.getLogger(__name__)

SUCCESS_CACHE_CONTROL = "public, max-age=30"


def create_app(
    acquirer: Optional[TieredAcquirer] = None,
    config: Optional[ScraperConfig] = None,
    fetcher_factory: Optional[Callable[[], Any]] = None,
    enable_cache: bool = True,
) -> Flask:
    """Build the Flask app serving /api/scrape, /api/fetch and /health.

    The acquirer (and the cache it owns) lives as long as the app. Every
    request still gets its own browser session and event loop.
    """

    config = config or ScraperConfig.from_env()
    if acquirer is None:
        cache = ResultCache(ttl=config.cache_ttl) if enable_cache else None
        acquirer = TieredAcquirer(config=config, cache=cache)
    fetcher_factory = fetcher_factory or (lambda: HTMLFetcher(timeout=config.lite_timeout))

    app = Flask(__name__)
    app.config["ACQUIRER"] = acquirer

    @app.after_request
    def _cors(response: Response) -> Response:
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Headers"] = "*"
        return response

    @app.errorhandler(InputError)
    def _input_error(error: InputError):
        return jsonify({"error": str(error)}), 400

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.get("/api/scrape")
    def scrape():
        url = validate_url(request.args.get("url"))

        try:
            result = asyncio.run(app.config["ACQUIRER"].acquire(url))
        except Exception as exc:  # the acquirer never raises; anything here is ours
            logger.exception(f"Acquisition machinery failed for {url}")
            return _failure("Failed to scrape data", exc, url)

        if result.fault:
            return jsonify({"error": "Failed to scrape data", "message": result.fault, "url": url}), 500

        response = jsonify(result.to_dict())
        response.headers["Cache-Control"] = SUCCESS_CACHE_CONTROL
        return response

    @app.get("/api/fetch")
    def fetch():
        url = validate_url(request.args.get("url"))

        try:
            with fetcher_factory() as fetcher:
                fetched = fetcher.fetch(url, profile="quick")
        except Exception as exc:
            logger.warning(f"Proxy fetch failed for {url}: {exc}")
            return _failure("Failed to fetch data", exc, url)

        headers = fetched.get("headers") or {}
        content_type = next(
            (value for key, value in headers.items() if key.lower() == "content-type"),
            "text/html",
        )
        return Response(fetched["html"], status=200, content_type=content_type)

    return app


def _failure(error: str, exc: Exception, url: str):
    return jsonify({"error": error, "message": str(exc), "url": url}), 500


__all__ = ["create_app"]
