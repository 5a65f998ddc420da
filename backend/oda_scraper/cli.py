"""Command-line entry point for the Oda scraper.

Usage:
    # Scrape the configured SCRAPE_URLS once and store the results
    oda-scraper

    # Specific categories, no database, JSON/CSV export
    oda-scraper --url https://oda.com/no/categories/20-frukt-og-gront/ --no-db --export

    # Keep running and scrape on SCHEDULE_CRON
    oda-scraper --schedule
"""

import argparse
import asyncio
import sys
from dataclasses import replace
from functools import partial
from typing import List, Optional

import structlog

from oda_scraper.config import settings
from oda_scraper.core.logging import configure_logging
from oda_scraper.events import EventBus
from oda_scraper.scheduler import ScrapeScheduler
from oda_scraper.scrapers import PlaywrightPageNavigator, ScrapeSummary, Worker
from oda_scraper.scrapers.orchestrator import ScrapeOrchestrator

logger = structlog.get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed Namespace object.
    """
    parser = argparse.ArgumentParser(
        prog="oda-scraper",
        description="Scrape Oda category pages and store the products found.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--url",
        action="append",
        dest="urls",
        metavar="URL",
        help="Top-level category URL (repeatable). Defaults to SCRAPE_URLS.",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=settings.MAX_PAGES_PER_SUBCATEGORY,
        help=f"Page loads per subcategory (default: {settings.MAX_PAGES_PER_SUBCATEGORY})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=settings.MAX_WORKERS,
        help="Concurrent browsers; 0 means one per URL",
    )
    parser.add_argument(
        "--headful",
        action="store_true",
        help="Show the browser window (debugging).",
    )
    parser.add_argument(
        "--no-db",
        action="store_true",
        help="Do not write anything to the database.",
    )
    parser.add_argument(
        "--export",
        action="store_true",
        help=f"Write JSON and CSV files to EXPORT_DIR ({settings.EXPORT_DIR}).",
    )
    parser.add_argument(
        "--schedule",
        action="store_true",
        help=f"Run on the SCHEDULE_CRON cron expression ({settings.SCHEDULE_CRON}) instead of once.",
    )

    args = parser.parse_args(argv)
    if args.max_pages < 1:
        parser.error("--max-pages must be at least 1")
    if args.workers < 0:
        parser.error("--workers cannot be negative")
    return args


def build_worker_factory():
    """Worker factory wired to the configured timeouts and base URL."""
    navigator_factory = partial(PlaywrightPageNavigator, timeout_ms=settings.PAGE_LOAD_TIMEOUT_MS)
    return partial(
        Worker,
        navigator_factory=navigator_factory,
        settle_ms=settings.SETTLE_MS,
        base_url=settings.BASE_URL,
    )


async def scrape(args: argparse.Namespace) -> ScrapeSummary:
    """Perform one full run: scrape every URL, persist and export."""
    urls = args.urls or settings.get_scrape_urls()
    browser_config = settings.get_browser_config()
    if args.headful:
        browser_config = replace(browser_config, headless=False)

    bus = EventBus()
    repository = None
    engine = None

    if not args.no_db:
        from oda_scraper.db.session import build_engine, build_session_factory, create_tables
        from oda_scraper.services import PersistenceHandlers, ScrapeRepository

        engine = build_engine()
        await create_tables(engine)
        repository = ScrapeRepository(build_session_factory(engine))
        PersistenceHandlers(repository).register(bus)

    if args.export:
        from oda_scraper.services import ExportHandlers

        ExportHandlers(directory=settings.EXPORT_DIR).register(bus)

    orchestrator = ScrapeOrchestrator(
        bus,
        repository=repository,
        worker_factory=build_worker_factory(),
        max_workers=args.workers,
    )
    try:
        return await orchestrator.run(
            urls,
            browser_config=browser_config,
            max_pages=args.max_pages,
            excluded_texts=settings.get_excluded_texts(),
        )
    finally:
        if engine is not None:
            await engine.dispose()


async def serve(args: argparse.Namespace) -> None:
    """Run ``scrape`` on the cron schedule until interrupted."""
    scheduler = ScrapeScheduler(partial(scrape, args), cron=settings.SCHEDULE_CRON)
    scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.stop()


def main(argv: Optional[List[str]] = None) -> int:
    """Console script entry point.

    Returns:
        0 when every URL was scraped, 1 otherwise
    """
    args = parse_args(argv)
    configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    urls = args.urls or settings.get_scrape_urls()
    if not urls:
        logger.error("no_urls_configured")
        return 1

    try:
        if args.schedule:
            asyncio.run(serve(args))
            return 0
        summary = asyncio.run(scrape(args))
    except KeyboardInterrupt:
        logger.warning("interrupted")
        return 130

    print(
        f"\nScraped {summary.successful_urls}/{summary.total_urls} URLs, "
        f"{summary.total_products} products"
    )
    for result in summary.results:
        status = "ok" if result.success else f"failed: {result.error}"
        print(f"  [{result.url_index + 1}] {result.url} - {status}")

    return 0 if summary.successful_urls == summary.total_urls else 1


if __name__ == "__main__":
    sys.exit(main())
