"""Tests for link/product extraction helpers."""

import pytest

from fakes import FakeNavigator, FakePage, chip, tile
from oda_scraper.scrapers.extractor import (
    category_name_from_url,
    classify_secondary_fragment,
    clean_subcategory_name,
    extract_products,
    extract_subcategory_links,
    filter_excluded_links,
    is_valid_subcategory_link,
    normalize_url,
)
from oda_scraper.scrapers.types import ProductRecord, SubcategoryLink

URL = "https://oda.com/no/categories/20-frukt-og-gront/"


async def _navigator_on(page: FakePage) -> FakeNavigator:
    navigator = FakeNavigator({URL: page})
    await navigator.navigate(URL)
    return navigator


# ============================================================================
# TESTS: PURE HELPERS
# ============================================================================

class TestUrlHelpers:
    """Tests for URL normalization and category naming."""

    def test_relative_href_gets_base_prefix(self):
        assert normalize_url("/no/products/123-banan/") == "https://oda.com/no/products/123-banan/"

    def test_relative_href_without_slash(self):
        assert normalize_url("no/products/1/", "https://oda.com/") == "https://oda.com/no/products/1/"

    def test_absolute_href_is_unchanged(self):
        href = "https://cdn.oda.com/images/banan.jpg"
        assert normalize_url(href) == href

    def test_category_name_from_slug(self):
        assert category_name_from_url(URL) == "Frukt Og Gront"

    def test_category_name_falls_back_to_last_segment(self):
        assert category_name_from_url("https://oda.com/no/meieri/?page=2") == "Meieri"


class TestLinkFiltering:
    """Tests for subcategory link validation and exclusion."""

    def test_excluded_marker_is_removed_preserving_order(self):
        links = [
            SubcategoryLink("Fruit", "https://oda.com/a"),
            SubcategoryLink("Vegetables", "https://oda.com/b"),
            SubcategoryLink("All products", "https://oda.com/c"),
            SubcategoryLink("Berries", "https://oda.com/d"),
        ]

        kept = filter_excluded_links(links, ["All"])

        assert [link.text for link in kept] == ["Fruit", "Vegetables", "Berries"]

    def test_exclusion_is_case_insensitive(self):
        links = [SubcategoryLink("alle varer", "x"), SubcategoryLink("Epler", "y")]
        assert [link.text for link in filter_excluded_links(links)] == ["Epler"]

    def test_no_markers_keeps_everything(self):
        links = [SubcategoryLink("Alle", "x")]
        assert filter_excluded_links(links, []) == links

    @pytest.mark.parametrize(
        "text,href,expected",
        [
            ("Frukt", "/frukt", True),
            ("", "/frukt", False),
            ("Frukt", None, False),
            ("   ", "/frukt", False),
        ],
    )
    def test_is_valid_subcategory_link(self, text, href, expected):
        assert is_valid_subcategory_link(text, href) is expected

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Frukt 42", "Frukt"),
            ("Bær (12)", "Bær"),
            ("Salat og kål · 7", "Salat og kål"),
            ("Epler", "Epler"),
            ("42", "42"),
            ("Vitamin B12", "Vitamin B12"),
            ("Omega-3", "Omega-3"),
            ("Omega-3 (4)", "Omega-3"),
        ],
    )
    def test_clean_subcategory_name(self, raw, expected):
        assert clean_subcategory_name(raw) == expected


class TestSecondaryFragment:
    """Tests for unit price / discount classification."""

    def test_currency_marker_means_unit_price(self):
        assert classify_secondary_fragment("kr 39,90 /kg") == ("kr 39,90 /kg", None)

    def test_other_text_is_discount(self):
        assert classify_secondary_fragment("-20%") == (None, "-20%")

    def test_blank_fragment(self):
        assert classify_secondary_fragment("  ") == (None, None)
        assert classify_secondary_fragment(None) == (None, None)

    def test_record_rejects_both_unit_price_and_discount(self):
        with pytest.raises(ValueError):
            ProductRecord(name="Banan", price_per_kilo="kr 20 /kg", discount="-10%")

    def test_record_requires_name(self):
        with pytest.raises(ValueError):
            ProductRecord(name="")


# ============================================================================
# TESTS: PAGE EXTRACTION
# ============================================================================

class TestSubcategoryLinks:
    """Tests for extract_subcategory_links."""

    async def test_links_are_absolute_and_invalid_chips_dropped(self):
        broken = chip("Sitrus", "/sitrus")
        broken.broken = True
        navigator = await _navigator_on(FakePage(links=[
            chip("Frukt 42", "/no/categories/20-frukt-og-gront/21-frukt/"),
            chip("", "/empty"),
            chip("Uten lenke", ""),
            broken,
            chip("Bær", "https://oda.com/no/categories/20-frukt-og-gront/22-baer/"),
        ]))

        links = await extract_subcategory_links(navigator)

        assert links == [
            SubcategoryLink("Frukt 42", "https://oda.com/no/categories/20-frukt-og-gront/21-frukt/"),
            SubcategoryLink("Bær", "https://oda.com/no/categories/20-frukt-og-gront/22-baer/"),
        ]


class TestProductExtraction:
    """Tests for extract_products."""

    async def test_tiles_are_mapped_to_records(self):
        navigator = await _navigator_on(FakePage(batches=[[
            tile(
                "Bananer",
                "Chiquita",
                "kr 24,90",
                fragment="kr 19,90 /kg",
                href="/no/products/1-bananer/",
                src="https://cdn.oda.com/1.jpg",
            ),
            tile("Epler Pink Lady", "Bama", "kr 32,90", fragment="-20%"),
        ]]))

        products = await extract_products(navigator, category="Frukt")

        assert len(products) == 2
        banana, apple = products
        assert banana.name == "Bananer"
        assert banana.brand == "Chiquita"
        assert banana.description == "Chiquita"
        assert banana.price == "kr 24,90"
        assert banana.price_per_kilo == "kr 19,90 /kg"
        assert banana.discount is None
        assert banana.link == "https://oda.com/no/products/1-bananer/"
        assert banana.image == "https://cdn.oda.com/1.jpg"
        assert banana.category == "Frukt"

        assert apple.discount == "-20%"
        assert apple.price_per_kilo is None
        assert apple.link is None
        assert apple.image is None

    async def test_malformed_tiles_are_skipped(self):
        navigator = await _navigator_on(FakePage(batches=[[
            tile("Appelsiner", "Bama", "kr 29,90"),
            tile("Detached", "Bama", "kr 1", broken=True),
            tile(""),
            tile("Pærer", price="kr 39,90"),
        ]]))

        products = await extract_products(navigator)

        assert [p.name for p in products] == ["Appelsiner", "Pærer"]
        assert products[1].brand is None
        assert products[1].price == "kr 39,90"

    async def test_extraction_is_repeatable(self):
        navigator = await _navigator_on(FakePage(batches=[[
            tile("Kiwi", "Zespri", "kr 5,90", fragment="kr 59,00 /kg"),
        ]]))

        first = await extract_products(navigator, category="Frukt")
        second = await extract_products(navigator, category="Frukt")

        assert first == second
