"""
Command Line Interface for Results Scraper
"""

import argparse
import asyncio
import csv
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .core.config import ScraperConfig
from .core.errors import InputError, validate_url
from .core.models import AcquisitionResult
from .core.tiered_fetcher import FullBrowserTier, LiteFetchTier, QuickFetchTier, TieredAcquirer

TIER_CHOICES = ('full', 'quick', 'lite')

CSV_FIELDS = ['startTime', 'rank', 'bib', 'name', 'club', 'country', 'card', 'finalTime', 'cells']


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Results Scraper - competitor rows from client-rendered results sites'
    )

    # Input
    parser.add_argument(
        '--url',
        type=str,
        help='Results or start list page to scrape'
    )

    # Acquisition
    parser.add_argument(
        '--tier',
        type=str,
        choices=TIER_CHOICES,
        help='Run a single tier instead of the full fallback chain'
    )
    parser.add_argument(
        '--max-pages',
        type=int,
        help='Pagination ceiling for the browser tier'
    )
    parser.add_argument(
        '--bib-offset',
        type=int,
        help='Event offset subtracted from numeric bibs'
    )
    parser.add_argument(
        '--headed',
        action='store_true',
        help='Show the browser window'
    )

    # Output
    parser.add_argument(
        '--output',
        type=str,
        help='Output file path (JSON or CSV based on extension)'
    )
    parser.add_argument(
        '--format',
        type=str,
        choices=['json', 'csv'],
        default='json',
        help='Output format (default: json)'
    )

    # Server
    parser.add_argument(
        '--serve',
        action='store_true',
        help='Run the HTTP API instead of a one-off scrape'
    )
    parser.add_argument('--host', type=str, default='127.0.0.1', help='API host (default: 127.0.0.1)')
    parser.add_argument('--port', type=int, default=3001, help='API port (default: 3001)')

    # Other
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    config = ScraperConfig.from_env().with_overrides(
        max_pages=args.max_pages,
        bib_offset=args.bib_offset,
        headless=False if args.headed else None
    )

    if args.serve:
        from .api.server import create_app

        create_app(config=config).run(host=args.host, port=args.port)
        return 0

    try:
        url = validate_url(args.url)
    except InputError as e:
        parser.error(str(e))

    acquirer = TieredAcquirer(config=config, tiers=build_tiers(config, args.tier))

    try:
        result = asyncio.run(acquirer.acquire(url))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1

    if args.output:
        save_result(result, args.output, args.format)
    else:
        print(json.dumps(result.to_dict(), indent=2))

    print(f"\nTier: {result.tier}  Rows: {result.row_count}  Pages: {result.total_pages or '-'}", file=sys.stderr)
    if result.fault:
        print(f"Error: {result.fault}", file=sys.stderr)
        return 1
    return 0


def build_tiers(config: ScraperConfig, only: Optional[str] = None) -> Optional[list]:
    """Tier chain for --tier; None keeps the acquirer's default chain"""
    if only is None:
        return None
    tier_classes = {
        'full': FullBrowserTier,
        'quick': QuickFetchTier,
        'lite': LiteFetchTier,
    }
    return [tier_classes[only](config)]


def save_result(result: AcquisitionResult, output_path: str, format: str) -> None:
    """Save competitors to file"""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if format == 'json' and output_path.suffix != '.csv':
        with open(output_path, 'w') as f:
            json.dump(result.to_dict(), f, indent=2)
        print(f"Saved to {output_path} (JSON)", file=sys.stderr)
        return

    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS, extrasaction='ignore')
        writer.writeheader()
        writer.writerows(csv_rows(result))
    print(f"Saved to {output_path} (CSV)", file=sys.stderr)


def csv_rows(result: AcquisitionResult) -> List[Dict[str, Any]]:
    rows = []
    for record in result.competitors:
        row = dict(record.structured())
        row['cells'] = ' | '.join(record.cells)
        rows.append(row)
    return rows


if __name__ == '__main__':
    sys.exit(main())
