"""Services module for persistence, export and price handling.

Services subscribe to the lifecycle event bus or are called by the
orchestrator while it publishes results.
"""

from oda_scraper.services.export_service import ExportHandlers, export_to_csv, export_to_json
from oda_scraper.services.persistence_handlers import PersistenceHandlers
from oda_scraper.services.price_parser import PriceParser
from oda_scraper.services.scrape_repository import ScrapeRepository

__all__ = [
    "ExportHandlers",
    "export_to_csv",
    "export_to_json",
    "PersistenceHandlers",
    "PriceParser",
    "ScrapeRepository",
]
