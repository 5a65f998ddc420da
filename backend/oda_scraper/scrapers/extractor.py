"""Extraction of subcategory links and product records from Oda pages.

Every extraction step is fail-soft per element: a tile or link that cannot
be read yields None and is dropped, the rest of the batch is kept.
"""

import re
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import structlog

from oda_scraper.scrapers.navigator import PageNavigator
from oda_scraper.scrapers.types import ProductRecord, SubcategoryLink

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://oda.com"
SUBCATEGORY_SELECTOR = "a.k-choice-chip"
PRODUCT_TILE_SELECTOR = 'article[data-testid="product-tile"]'
DEFAULT_EXCLUDED_TEXTS: Tuple[str, ...] = ("Alle",)

# Secondary fragments containing the currency marker are unit prices
# ("kr 39,90 /kg"), anything else is a discount badge ("-20%").
CURRENCY_MARKER = "kr"

# "Frukt 42", "Bær (12)", "Salat og kål · 7"
_COUNT_SUFFIX_PATTERN = re.compile(r"(?:\s+[·•]?\s*|\s*\()\d+\)?\s*$")


def normalize_url(href: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Make ``href`` absolute by prefixing ``base_url`` when it is relative."""
    if href.startswith("http"):
        return href
    return f"{base_url.rstrip('/')}{href if href.startswith('/') else '/' + href}"


def is_valid_subcategory_link(text: Optional[str], href: Optional[str]) -> bool:
    """Both text and href must be present and non-blank."""
    return bool(text and href and text.strip() and href.strip())


def filter_excluded_links(
    links: Iterable[SubcategoryLink],
    excluded_texts: Sequence[str] = DEFAULT_EXCLUDED_TEXTS,
) -> List[SubcategoryLink]:
    """Drop links whose text contains any excluded marker (case-insensitive)."""
    markers = [text.lower() for text in excluded_texts if text]
    return [
        link for link in links
        if not any(marker in link.text.lower() for marker in markers)
    ]


def clean_subcategory_name(text: str) -> str:
    """Strip a trailing item-count suffix from a chip label."""
    cleaned = _COUNT_SUFFIX_PATTERN.sub("", text.strip()).strip()
    return cleaned or text.strip()


def classify_secondary_fragment(fragment: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Split a tile's secondary text into ``(price_per_kilo, discount)``.

    At most one of the two is populated.
    """
    if not fragment or not fragment.strip():
        return None, None
    fragment = fragment.strip()
    if CURRENCY_MARKER in fragment:
        return fragment, None
    return None, fragment


async def _read_subcategory_link(
    navigator: PageNavigator, element: Any, base_url: str
) -> Optional[SubcategoryLink]:
    try:
        text = await navigator.read_text(element)
        href = await navigator.read_attribute(element, "href")
    except Exception as e:
        logger.warning("subcategory_link_read_failed", error=str(e))
        return None

    if not is_valid_subcategory_link(text, href):
        return None
    return SubcategoryLink(text=text.strip(), href=normalize_url(href.strip(), base_url))


async def extract_subcategory_links(
    navigator: PageNavigator,
    selector: str = SUBCATEGORY_SELECTOR,
    base_url: str = DEFAULT_BASE_URL,
) -> List[SubcategoryLink]:
    """Extract choice-chip subcategory links from the current page."""
    elements = await navigator.locate_all(selector)
    links = []
    for element in elements:
        link = await _read_subcategory_link(navigator, element, base_url)
        if link:
            links.append(link)
    return links


async def _read_texts(navigator: PageNavigator, selector: str, within: Any) -> List[str]:
    texts = []
    for element in await navigator.locate_all(selector, within=within):
        text = await navigator.read_text(element)
        texts.append(text.strip() if text else "")
    return texts


async def _read_first_attribute(
    navigator: PageNavigator, selector: str, name: str, within: Any
) -> Optional[str]:
    element = await navigator.locate_first(selector, within=within)
    if element is None:
        return None
    return await navigator.read_attribute(element, name)


async def extract_product_tile(
    navigator: PageNavigator,
    tile: Any,
    category: str = "",
    base_url: str = DEFAULT_BASE_URL,
) -> Optional[ProductRecord]:
    """Read one product tile.

    Tile paragraphs are, in order, title, description and price; the first
    span holds the secondary fragment (unit price or discount).

    Returns:
        ProductRecord, or None when the tile has no title
    """
    paragraphs = await _read_texts(navigator, "p", tile)
    spans = await _read_texts(navigator, "span", tile)

    title = paragraphs[0] if paragraphs else ""
    if not title:
        return None

    description = paragraphs[1] if len(paragraphs) > 1 and paragraphs[1] else None
    price = paragraphs[2] if len(paragraphs) > 2 and paragraphs[2] else None
    price_per_kilo, discount = classify_secondary_fragment(spans[0] if spans else None)

    link = await _read_first_attribute(navigator, "a", "href", tile)
    image = await _read_first_attribute(navigator, "img", "src", tile)

    return ProductRecord(
        name=title,
        price=price,
        brand=description,
        link=normalize_url(link, base_url) if link else None,
        image=image or None,
        description=description,
        price_per_kilo=price_per_kilo,
        discount=discount,
        category=category,
    )


async def extract_products(
    navigator: PageNavigator,
    selector: str = PRODUCT_TILE_SELECTOR,
    category: str = "",
    base_url: str = DEFAULT_BASE_URL,
) -> List[ProductRecord]:
    """Extract every product tile currently rendered on the page."""
    tiles = await navigator.locate_all(selector)
    products = []
    for index, tile in enumerate(tiles):
        try:
            product = await extract_product_tile(navigator, tile, category, base_url)
        except Exception as e:
            logger.warning(
                "product_tile_extraction_failed",
                tile_index=index,
                category=category,
                error=str(e),
            )
            continue
        if product:
            products.append(product)
    return products


# ".../categories/20-frukt-og-gront/" -> "frukt-og-gront"
_CATEGORY_SLUG_PATTERN = re.compile(r"/categories/\d+-([^/?#]+)")


def category_name_from_url(url: str) -> str:
    """Derive a display name from a category URL.

    ``https://oda.com/no/categories/20-frukt-og-gront/`` -> ``Frukt Og Gront``
    """
    match = _CATEGORY_SLUG_PATTERN.search(url)
    if match:
        slug = match.group(1)
    else:
        segments = [s for s in url.split("?")[0].split("/") if s]
        slug = segments[-1] if segments else url
    words = [word for word in slug.split("-") if word]
    return " ".join(word.capitalize() for word in words) or url
