"""
Sales Insights command line

Usage:
    sales-insights seed [--url URL | --file PATH]   # Load the transaction feed
    sales-insights report MONTH [--search S] [--page N] [--per-page N]
"""

import argparse
import json
import sys
from functools import partial
from pathlib import Path
from typing import Optional

import anyio

from sales_insights.core.config import get_settings
from sales_insights.core.exceptions import SalesInsightsError
from sales_insights.core.logging import setup_logging
from sales_insights.repositories.factory import create_store
from sales_insights.services.analytics_service import AnalyticsService
from sales_insights.services.seed_service import SeedService


def cmd_seed(url: Optional[str], file: Optional[str]) -> None:
    """Replace the store contents from a feed URL or a local JSON file."""
    settings = get_settings()
    service = SeedService(create_store(settings), timeout=settings.seed_timeout)
    if file:
        count = service.seed_from_file(Path(file))
    else:
        count = service.seed_from_url(url or settings.seed_feed_url)
    print(f"Seeded {count} transactions.")


def cmd_report(month: str, search: Optional[str], page: Optional[str], per_page: Optional[str]) -> None:
    """Print the combined view for a month as JSON."""
    settings = get_settings()
    service = AnalyticsService(
        create_store(settings),
        default_per_page=settings.default_per_page,
        max_per_page=settings.max_per_page,
    )
    result = anyio.run(partial(service.get_combined_view, month, search=search, page=page, per_page=per_page))
    print(json.dumps(result.model_dump(by_alias=True, mode="json"), indent=2, ensure_ascii=False))


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Sales transaction analytics")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # seed command
    seed_parser = subparsers.add_parser("seed", help="Load the transaction feed into the store")
    source = seed_parser.add_mutually_exclusive_group()
    source.add_argument("--url", help="Feed URL (default: SEED_FEED_URL)")
    source.add_argument("--file", help="Local JSON file with a transaction array")

    # report command
    report_parser = subparsers.add_parser("report", help="Show the combined view for a month")
    report_parser.add_argument("month", help="Full month name, e.g. 'March'")
    report_parser.add_argument("--search", help="Title/description text or exact price")
    report_parser.add_argument("--page", help="1-based page number")
    report_parser.add_argument("--per-page", dest="per_page", help="Transactions per page")

    args = parser.parse_args(argv)
    setup_logging(get_settings().log_level, stream=sys.stderr)

    try:
        if args.command == "seed":
            cmd_seed(args.url, args.file)
        elif args.command == "report":
            cmd_report(args.month, args.search, args.page, args.per_page)
        else:
            parser.print_help()
            return 2
    except SalesInsightsError as e:
        print(f"Error ({e.kind}): {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
