"""JSON and CSV export of scraped products."""

import csv
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

import structlog

from oda_scraper.events import AllFinished, EventBus, LifecycleEventType, SubcategoryFinished
from oda_scraper.scrapers.types import ProductRecord

logger = structlog.get_logger(__name__)

CSV_HEADERS = ["category", "name", "description", "price", "pricePerKilo", "brand", "link", "image"]


@dataclass
class CategoryProducts:
    category: str
    products: List[ProductRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "products": [product.to_dict() for product in self.products],
        }


def _export_path(filename: str, directory: str, suffix: str) -> Path:
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
    return out_dir / f"{filename}_{timestamp}.{suffix}"


def export_to_json(
    data: List[CategoryProducts],
    filename: str = "scraped-products",
    directory: str = "data",
) -> Path:
    """Write grouped products to ``<directory>/<filename>_<timestamp>.json``."""
    path = _export_path(filename, directory, "json")
    try:
        with path.open("w", encoding="utf-8") as fh:
            json.dump([group.to_dict() for group in data], fh, ensure_ascii=False, indent=2)
    except OSError as e:
        logger.error("json_export_failed", path=str(path), error=str(e))
        raise
    logger.info("json_exported", path=str(path), groups=len(data))
    return path


def export_to_csv(
    data: List[CategoryProducts],
    filename: str = "scraped-products",
    directory: str = "data",
) -> Path:
    """Write a flattened, fully quoted CSV of every product.

    Raises:
        ValueError: If there are no products to write
    """
    rows = []
    for group in data:
        for product in group.products:
            row = product.to_dict()
            row["category"] = group.category
            rows.append(row)

    if not rows:
        raise ValueError("No data to export")

    path = _export_path(filename, directory, "csv")
    try:
        with path.open("w", encoding="utf-8", newline="") as fh:
            writer = csv.DictWriter(
                fh,
                fieldnames=CSV_HEADERS,
                extrasaction="ignore",
                quoting=csv.QUOTE_ALL,
            )
            writer.writeheader()
            for row in rows:
                writer.writerow({key: row.get(key) or "" for key in CSV_HEADERS})
    except OSError as e:
        logger.error("csv_export_failed", path=str(path), error=str(e))
        raise
    logger.info("csv_exported", path=str(path), rows=len(rows))
    return path


class ExportHandlers:
    """Collects finished subcategories and writes export files at the end of a run."""

    def __init__(self, directory: str = "data", filename: str = "oda-products"):
        self.directory = directory
        self.filename = filename
        self.groups: List[CategoryProducts] = []
        self.written: List[Path] = []

    def register(self, bus: EventBus) -> Callable[[], None]:
        disposers = [
            bus.subscribe(LifecycleEventType.SUBCATEGORY_FINISHED, self.on_subcategory_finished),
            bus.subscribe(LifecycleEventType.ALL_FINISHED, self.on_all_finished),
        ]

        def dispose() -> None:
            for disposer in disposers:
                disposer()

        return dispose

    def on_subcategory_finished(self, event: SubcategoryFinished) -> None:
        self.groups.append(CategoryProducts(event.subcategory_name, list(event.products)))

    def on_all_finished(self, event: AllFinished) -> Optional[List[Path]]:
        if event.total_products == 0 or not any(group.products for group in self.groups):
            logger.warning("nothing_to_export")
            return None
        self.written = [
            export_to_json(self.groups, self.filename, self.directory),
            export_to_csv(self.groups, self.filename, self.directory),
        ]
        return self.written
