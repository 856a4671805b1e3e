"""
Cache Management Example
Repeated requests inside the TTL window are answered from memory
"""

import asyncio
import sys

from results_scraper import ResultCache, ScraperConfig, TieredAcquirer

URL = sys.argv[1] if len(sys.argv) > 1 else 'https://live.example.org/events/42/startlist'


async def run():
    config = ScraperConfig(cache_ttl=30)
    cache = ResultCache(ttl=config.cache_ttl)
    acquirer = TieredAcquirer(config=config, cache=cache)

    print("🔄 First request (acquires)...")
    first = await acquirer.acquire(URL)
    print(f"   Rows: {first.row_count}  Cached: {first.cached}")

    print("\n🔄 Second request (should use cache)...")
    second = await acquirer.acquire(URL)
    print(f"   Rows: {second.row_count}  Cached: {second.cached}")

    print(f"\n💾 Cache Statistics:")
    print(f"   Entries: {len(cache)}")
    print(f"   Hits: {cache.stats['hits']}  Misses: {cache.stats['misses']}  Expired: {cache.stats['expired']}")

    print("\n🗑️  Clearing cache...")
    cache.clear()
    print(f"   ✅ Cache cleared ({URL in cache})")


if __name__ == '__main__':
    asyncio.run(run())
