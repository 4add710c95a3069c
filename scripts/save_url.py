#!/usr/bin/env python
"""
Ask the Wayback Machine to capture a URL.
    python scripts/save_url.py https://example.com --outlinks --screenshot
"""
import argparse
import asyncio
import logging
import sys

from archivedotorg.core.exceptions import ArchiveError
from archivedotorg.schemas.web import SaveOptions
from archivedotorg.services.web_client import WaybackClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("save_url")


async def main() -> int:
    parser = argparse.ArgumentParser(description="Submit a URL to Save Page Now")
    parser.add_argument("url")
    parser.add_argument("--outlinks", action="store_true", help="Also capture out-links")
    parser.add_argument("--error-pages", action="store_true", help="Keep 4xx/5xx captures")
    parser.add_argument("--screenshot", action="store_true")
    args = parser.parse_args()

    options = SaveOptions(
        save_out_links=args.outlinks,
        save_error_pages=args.error_pages,
        save_screenshot=args.screenshot,
    )
    try:
        result = await WaybackClient().save(args.url, options)
    except ArchiveError:
        logger.exception("Save of %s failed", args.url)
        return 1

    print(result.status_code)
    location = result.headers.get("content-location") or result.headers.get("location")
    if location:
        print(location[0])
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
