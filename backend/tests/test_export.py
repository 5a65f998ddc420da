"""Tests for JSON/CSV export."""

import csv
import json

import pytest

from oda_scraper.events import AllFinished, EventBus, SubcategoryFinished
from oda_scraper.scrapers.types import ProductRecord
from oda_scraper.services.export_service import (
    CSV_HEADERS,
    CategoryProducts,
    ExportHandlers,
    export_to_csv,
    export_to_json,
)


def _groups():
    return [
        CategoryProducts("Frukt", [
            ProductRecord(
                name="Bananer",
                category="Frukt",
                brand="Chiquita",
                description="Chiquita",
                price="kr 24,90",
                price_per_kilo="kr 19,90 /kg",
                link="https://oda.com/no/products/1/",
            ),
        ]),
        CategoryProducts("Bær", [
            ProductRecord(name='Blåbær "Norske"', category="Bær", price="kr 39,90", discount="-20%"),
        ]),
    ]


class TestExport:
    """Tests for export_to_json / export_to_csv."""

    def test_json_export(self, tmp_path):
        path = export_to_json(_groups(), "products", str(tmp_path))

        assert path.parent == tmp_path
        assert path.name.startswith("products_")
        assert path.suffix == ".json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert [group["category"] for group in data] == ["Frukt", "Bær"]
        assert data[0]["products"][0]["pricePerKilo"] == "kr 19,90 /kg"
        assert data[1]["products"][0]["discount"] == "-20%"

    def test_csv_export(self, tmp_path):
        path = export_to_csv(_groups(), "products", str(tmp_path / "out"))

        raw = path.read_text(encoding="utf-8")
        rows = list(csv.DictReader(raw.splitlines()))
        assert raw.splitlines()[0] == ",".join(f'"{h}"' for h in CSV_HEADERS)
        assert [row["category"] for row in rows] == ["Frukt", "Bær"]
        assert rows[0]["pricePerKilo"] == "kr 19,90 /kg"
        assert rows[1]["name"] == 'Blåbær "Norske"'
        assert rows[1]["brand"] == ""

    def test_csv_export_without_rows(self, tmp_path):
        with pytest.raises(ValueError):
            export_to_csv([CategoryProducts("Tom")], "products", str(tmp_path))


class TestExportHandlers:
    """Tests for ExportHandlers on the bus."""

    async def test_writes_files_on_all_finished(self, tmp_path):
        bus = EventBus()
        handlers = ExportHandlers(directory=str(tmp_path))
        handlers.register(bus)

        for group in _groups():
            await bus.emit(SubcategoryFinished(
                url="https://oda.com/no/categories/20-frukt-og-gront/",
                url_index=0,
                category_id=None,
                subcategory_id=None,
                subcategory_name=group.category,
                products=group.products,
                success=True,
            ))
        await bus.emit(AllFinished(total_urls=1, successful_urls=1, total_products=2))

        assert sorted(p.suffix for p in handlers.written) == [".csv", ".json"]
        assert all(p.exists() for p in handlers.written)

    async def test_nothing_written_without_products(self, tmp_path):
        bus = EventBus()
        handlers = ExportHandlers(directory=str(tmp_path))
        handlers.register(bus)

        await bus.emit(AllFinished(total_urls=1, successful_urls=0, total_products=0))

        assert handlers.written == []
        assert list(tmp_path.iterdir()) == []
