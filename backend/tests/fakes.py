"""In-memory stand-ins for the browser used by the scraping tests."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from oda_scraper.scrapers.extractor import PRODUCT_TILE_SELECTOR, SUBCATEGORY_SELECTOR
from oda_scraper.scrapers.navigator import PageNavigator
from oda_scraper.scrapers.paginator import LOAD_MORE_SELECTOR


@dataclass
class FakeElement:
    text: Optional[str] = None
    attrs: Dict[str, str] = field(default_factory=dict)
    children: Dict[str, List["FakeElement"]] = field(default_factory=dict)
    broken: bool = False


def chip(text: str, href: str) -> FakeElement:
    return FakeElement(text=text, attrs={"href": href})


def tile(
    title: Optional[str],
    description: Optional[str] = None,
    price: Optional[str] = None,
    fragment: Optional[str] = None,
    href: Optional[str] = None,
    src: Optional[str] = None,
    broken: bool = False,
) -> FakeElement:
    """Product tile laid out as paragraphs (title, description, price) plus spans."""
    paragraphs = [FakeElement(text=title)]
    if description is not None or price is not None:
        paragraphs.append(FakeElement(text=description))
    if price is not None:
        paragraphs.append(FakeElement(text=price))
    children = {
        "p": paragraphs,
        "span": [FakeElement(text=fragment)] if fragment is not None else [],
        "a": [FakeElement(attrs={"href": href})] if href else [],
        "img": [FakeElement(attrs={"src": src})] if src else [],
    }
    element = FakeElement(children=children)
    if broken:
        for paragraph in paragraphs:
            paragraph.broken = True
    return element


@dataclass
class FakePage:
    """A page with chips and product tiles revealed one batch per load-more click.

    ``always_more`` keeps the load-more control visible forever.
    """

    links: List[FakeElement] = field(default_factory=list)
    batches: List[List[FakeElement]] = field(default_factory=list)
    always_more: bool = False
    click_error: Optional[Exception] = None
    navigate_error: Optional[Exception] = None


class FakeNavigator(PageNavigator):
    """PageNavigator over a dict of FakePages keyed by URL."""

    def __init__(self, site: Dict[str, FakePage]):
        self.site = site
        self.current: Optional[FakePage] = None
        self.loaded = 0
        self.visited: List[str] = []
        self.clicks = 0
        self.waits: List[int] = []

    async def navigate(self, url: str) -> None:
        self.visited.append(url)
        page = self.site.get(url)
        if page is None:
            raise RuntimeError(f"404 for {url}")
        if page.navigate_error:
            raise page.navigate_error
        self.current = page
        self.loaded = 0

    async def wait(self, ms: int) -> None:
        self.waits.append(ms)

    async def locate_all(self, selector, within=None):
        if within is not None:
            return list(within.children.get(selector, []))
        if self.current is None:
            return []
        if selector == SUBCATEGORY_SELECTOR:
            return list(self.current.links)
        if selector == PRODUCT_TILE_SELECTOR:
            present = []
            for batch in self.current.batches[: self.loaded + 1]:
                present.extend(batch)
            return present
        return []

    async def locate_first(self, selector, within=None):
        elements = await self.locate_all(selector, within)
        return elements[0] if elements else None

    async def click(self, selector: str) -> None:
        assert selector == LOAD_MORE_SELECTOR
        if self.current.click_error:
            raise self.current.click_error
        self.clicks += 1
        self.loaded += 1

    async def is_visible(self, selector: str) -> bool:
        if self.current is None or selector != LOAD_MORE_SELECTOR:
            return False
        return self.current.always_more or self.loaded + 1 < len(self.current.batches)

    async def read_text(self, element: FakeElement) -> Optional[str]:
        if element.broken:
            raise RuntimeError("element detached")
        return element.text

    async def read_attribute(self, element: FakeElement, name: str) -> Optional[str]:
        if element.broken:
            raise RuntimeError("element detached")
        return element.attrs.get(name)


class FakeBrowserManager:
    """Records launch/close calls instead of starting Chromium."""

    instances: List["FakeBrowserManager"] = []

    def __init__(self, launch_error: Optional[Exception] = None):
        self.launch_error = launch_error
        self.launched = False
        self.closed = False
        self.config = None
        FakeBrowserManager.instances.append(self)

    async def launch(self, config):
        self.config = config
        if self.launch_error:
            raise self.launch_error
        self.launched = True
        return object()

    async def close(self) -> None:
        self.closed = True

    @property
    def is_running(self) -> bool:
        return self.launched and not self.closed
