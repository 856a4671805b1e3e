"""
Basic Usage Example
Scrape one results page through the full fallback chain
"""

import asyncio
import logging
import sys

from results_scraper import ScraperConfig, TieredAcquirer

URL = sys.argv[1] if len(sys.argv) > 1 else 'https://live.example.org/events/42/results'


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    config = ScraperConfig(max_pages=20)
    acquirer = TieredAcquirer(config=config)

    result = asyncio.run(acquirer.acquire(URL))

    print(f"\n✅ Extracted {result.row_count} competitors")
    print(f"📊 Tier: {result.tier} ({result.source}), pages: {result.total_pages or '-'}")
    for attempt in result.attempts:
        print(f"   {attempt['tier']}: {attempt['status']} in {attempt['elapsed']}s")

    # Display first few rows
    for i, record in enumerate(result.competitors[:5], 1):
        print(f"\nRow {i}:")
        for field, value in record.structured().items():
            print(f"  {field}: {value}")


if __name__ == '__main__':
    main()
