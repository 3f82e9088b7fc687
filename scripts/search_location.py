#!/usr/bin/env python3
"""CLI script to search Nominatim or reverse-geocode a point and print resolved locations."""
import argparse
import asyncio
import json
import sys

from mapsearch.core.client import RateLimitedClient, RateLimiter
from mapsearch.core.config import LOG_LEVEL, RATE_LIMIT_MS, SEARCH_LIMIT
from mapsearch.core.location import flag_emoji, resolve_location
from mapsearch.core.pipeline import QueryPipeline
from mapsearch.utils.logging import setup_logging


async def run(args) -> int:
    client = RateLimitedClient(RateLimiter(args.rate_limit_ms), limit=args.limit)
    pipeline = QueryPipeline(client, limit=args.limit)
    try:
        if args.reverse:
            lat, lon = args.reverse
            match = await pipeline.run_reverse(lat, lon)
            candidates = [match] if match else []
        else:
            candidates = await pipeline.run_search(" ".join(args.query))
    finally:
        pipeline.close()
        client.close()

    if not candidates:
        print("No matches found", file=sys.stderr)
        return 1

    for candidate in candidates:
        location = resolve_location(candidate)
        record = location.to_dict()
        record["display_name"] = candidate.display_name
        record["flag"] = flag_emoji(location.country_code)
        print(json.dumps(record, ensure_ascii=False))
    return 0


def main():
    parser = argparse.ArgumentParser(description="Search for a place name or postcode")
    parser.add_argument("query", nargs="*", help="Place name or postcode")
    parser.add_argument("--reverse", nargs=2, type=float, metavar=("LAT", "LON"),
                        help="Reverse-geocode a point instead of searching")
    parser.add_argument("--limit", type=int, default=SEARCH_LIMIT,
                        help=f"Maximum number of matches (default: {SEARCH_LIMIT})")
    parser.add_argument("--rate-limit-ms", type=int, default=RATE_LIMIT_MS,
                        help="Minimum spacing between requests in milliseconds")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Log level")

    args = parser.parse_args()

    if not args.query and not args.reverse:
        parser.error("give a query or --reverse LAT LON")

    setup_logging(args.log_level)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
