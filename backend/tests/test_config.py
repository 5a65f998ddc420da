"""Tests for Settings parsing."""

from oda_scraper.config import Settings
from oda_scraper.scrapers.types import BrowserConfig, Viewport


class TestSettings:
    """Tests for environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SCRAPE_URLS", raising=False)
        monkeypatch.delenv("EXCLUDED_LINK_TEXTS", raising=False)
        settings = Settings(_env_file=None)

        assert settings.get_scrape_urls() == [
            "https://oda.com/no/categories/20-frukt-og-gront/",
            "https://oda.com/no/categories/1283-meieri-ost-og-egg/",
        ]
        assert settings.get_excluded_texts() == ["Alle"]
        assert settings.MAX_PAGES_PER_SUBCATEGORY == 5
        assert settings.SCHEDULE_CRON == "0 0 * * *"

    def test_lists_from_environment(self, monkeypatch):
        monkeypatch.setenv("SCRAPE_URLS", " https://oda.com/a/ ,, https://oda.com/b/")
        monkeypatch.setenv("EXCLUDED_LINK_TEXTS", "Alle,Tilbud")

        settings = Settings(_env_file=None)

        assert settings.get_scrape_urls() == ["https://oda.com/a/", "https://oda.com/b/"]
        assert settings.get_excluded_texts() == ["Alle", "Tilbud"]

    def test_database_url_is_rewritten_for_asyncpg(self):
        settings = Settings(_env_file=None, DATABASE_URL="postgres://u:p@db:5432/oda")
        assert settings.DATABASE_URL == "postgresql+asyncpg://u:p@db:5432/oda"

    def test_browser_config(self):
        settings = Settings(_env_file=None, HEADLESS=False, VIEWPORT_WIDTH=1280, VIEWPORT_HEIGHT=720)
        assert settings.get_browser_config() == BrowserConfig(
            headless=False, viewport=Viewport(width=1280, height=720)
        )
