"""Tests for ScrapeScheduler and CLI argument handling."""

import pytest

from oda_scraper.cli import parse_args
from oda_scraper.scheduler import JOB_ID, ScrapeScheduler


class TestScrapeScheduler:
    """Tests for the cron-driven scheduler."""

    async def test_start_registers_single_cron_job(self):
        async def run():
            return None

        scheduler = ScrapeScheduler(run, cron="30 2 * * *")
        job = scheduler.start()
        try:
            assert scheduler.is_running()
            assert job.id == JOB_ID
            assert job.max_instances == 1
            assert scheduler.start().id == JOB_ID
            assert len(scheduler.scheduler.get_jobs()) == 1
        finally:
            scheduler.stop()

    async def test_job_failure_is_contained(self):
        calls = []

        async def run():
            calls.append(1)
            raise RuntimeError("browser crashed")

        scheduler = ScrapeScheduler(run)
        await scheduler._run_scrape_wrapper()
        await scheduler._run_scrape_wrapper()

        assert calls == [1, 1]


class TestCliArguments:
    """Tests for parse_args."""

    def test_repeatable_urls_and_flags(self):
        args = parse_args([
            "--url", "https://oda.com/a/",
            "--url", "https://oda.com/b/",
            "--max-pages", "2",
            "--workers", "1",
            "--no-db",
            "--export",
            "--headful",
        ])

        assert args.urls == ["https://oda.com/a/", "https://oda.com/b/"]
        assert args.max_pages == 2
        assert args.workers == 1
        assert args.no_db and args.export and args.headful
        assert args.schedule is False

    def test_defaults(self):
        args = parse_args([])
        assert args.urls is None
        assert args.no_db is False

    def test_invalid_max_pages(self):
        with pytest.raises(SystemExit):
            parse_args(["--max-pages", "0"])
