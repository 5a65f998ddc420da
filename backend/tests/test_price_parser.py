"""Tests for PriceParser."""

from decimal import Decimal

import pytest

from oda_scraper.services.price_parser import PriceParser


class TestPriceParser:
    """Tests for parsing Norwegian price strings."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("kr 10,90", Decimal("10.90")),
            ("kr 1 234,50", Decimal("1234.50")),
            ("kr\u00a01\u00a0234,50", Decimal("1234.50")),
            ("39,90 kr/kg", Decimal("39.90")),
            ("kr 25", Decimal("25")),
        ],
    )
    def test_parse_price(self, raw, expected):
        assert PriceParser.parse_price(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "Utsolgt"])
    def test_parse_price_without_amount(self, raw):
        assert PriceParser.parse_price(raw) is None

    def test_parse_discount_percent(self):
        assert PriceParser.parse_discount_percent("-20 %") == Decimal("20")
        assert PriceParser.parse_discount_percent("Spar 12,5%") == Decimal("12.5")
        assert PriceParser.parse_discount_percent("3 for 2") is None

    def test_original_price_from_percent(self):
        assert PriceParser.original_price("kr 80,00", "-20%") == Decimal("100.00")

    def test_original_price_from_amount(self):
        assert PriceParser.original_price("kr 29,90", "Spar kr 10,00") == Decimal("39.90")

    def test_original_price_without_discount(self):
        assert PriceParser.original_price("kr 29,90", None) is None
        assert PriceParser.original_price(None, "-20%") is None

    def test_original_price_rejects_full_discount(self):
        assert PriceParser.original_price("kr 10,00", "-100%") is None
