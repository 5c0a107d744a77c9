"""Manual adapter runner for testing and debugging storefront extraction.

Runs one storefront adapter against the live store and prints the reviews
and app info it extracts, without starting the API server.

Usage:
    python scripts/run_scraper.py --platform android
    python scripts/run_scraper.py --platform ios --limit 5
    python scripts/run_scraper.py --platform android --info
"""

import asyncio
import argparse
import sys
import os
from collections import Counter

# Add backend to path so we can import reviewhub modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from reviewhub.config import settings
from reviewhub.scrapers.adapters import AppStoreAdapter, GooglePlayAdapter

# Registry of available adapters
ADAPTERS = {
    "android": GooglePlayAdapter,
    "ios": AppStoreAdapter,
}


async def run_scraper(platform: str, limit: int = 10, show_info: bool = False):
    """Run a storefront adapter and display the results.

    Args:
        platform: Platform slug ("android" or "ios")
        limit: Maximum number of reviews to fetch and display (default: 10)
        show_info: Also fetch and display app metadata
    """
    adapter_cls = ADAPTERS.get(platform)
    if not adapter_cls:
        print(f"\n❌ Error: Unknown platform '{platform}'")
        print(f"\n📋 Available platforms:")
        for slug in sorted(ADAPTERS.keys()):
            print(f"   - {slug}")
        return

    print(f"\n{'='*70}")
    print(f"  Running {platform.upper()} Adapter")
    print(f"{'='*70}")
    print(f"  📦 Android package: {settings.ANDROID_PACKAGE_ID}")
    print(f"  🍏 iOS app id: {settings.IOS_APP_ID}")
    print(f"  🌐 Language/country: {settings.LANGUAGE}/{settings.COUNTRY}")
    print(f"  📊 Limit: {limit}")
    print(f"{'='*70}\n")

    adapter = adapter_cls()
    print(f"✅ Initialized {adapter.platform_name} adapter\n")

    try:
        if show_info:
            print("🔍 Fetching app info...\n")
            info = await adapter.get_app_info()
            if info:
                print(f"  Name: {info.name} ({info.source})")
                print(f"  Developer: {info.developer}")
                print(f"  Rating: {info.rating} from {info.reviews_count} ratings")
                print(f"  Version: {info.version}  Updated: {info.updated}")
                print(f"  Price: {info.price}  Installs: {info.installs}\n")
            else:
                print("⚠️  App info could not be extracted.\n")

        print("🔍 Fetching reviews...\n")
        reviews = await adapter.fetch_reviews(limit)

        if not reviews:
            print("⚠️  No reviews found.\n")
            return

        print(f"✅ Found {len(reviews)} reviews\n")

        for i, review in enumerate(reviews, 1):
            print(f"[{i}] {'★' * review.rating}{'☆' * (5 - review.rating)}  {review.author}  ({review.date})")
            if review.title:
                print(f"    📝 {review.title}")
            print(f"    {review.content[:200]}")
            if review.reply_content:
                print(f"    💬 Reply: {review.reply_content[:120]}")
            print()

        # Summary
        ratings = Counter(r.rating for r in reviews)
        print(f"{'='*70}")
        print(f"  Summary")
        print(f"{'='*70}")
        print(f"  Total Reviews: {len(reviews)}")
        print(f"  Ratings:")
        for star in range(5, 0, -1):
            print(f"    - {star}★: {ratings.get(star, 0)}")
        if ratings.get(0):
            print(f"    - unknown: {ratings[0]}")
        print(f"{'='*70}\n")

    except Exception as e:
        print(f"\n❌ Error occurred while fetching reviews:")
        print(f"   {type(e).__name__}: {e}")
        import traceback
        print(f"\n📋 Full traceback:")
        traceback.print_exc()
        print()


def main():
    """Parse arguments and run the adapter."""
    parser = argparse.ArgumentParser(
        description="Run a storefront adapter for testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_scraper.py --platform android
  python scripts/run_scraper.py --platform ios --limit 5
  python scripts/run_scraper.py --platform android --info
        """,
    )

    parser.add_argument(
        "--platform",
        required=True,
        help="Platform slug ('android' or 'ios')",
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum number of reviews to fetch (default: 10)",
    )

    parser.add_argument(
        "--info",
        action="store_true",
        help="Also fetch app metadata",
    )

    args = parser.parse_args()

    asyncio.run(run_scraper(args.platform, args.limit, args.info))


if __name__ == "__main__":
    main()
