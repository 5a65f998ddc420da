"""Typed records passed between the extractor, workers and the orchestrator."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Viewport:
    width: int = 1920
    height: int = 1080


@dataclass(frozen=True)
class BrowserConfig:
    """Browser launch settings, shared read-only by every worker."""

    headless: bool = True
    viewport: Viewport = field(default_factory=Viewport)


@dataclass
class SubcategoryLink:
    """A choice-chip link discovered on a category page."""

    text: str
    href: str  # Always absolute


@dataclass
class ProductRecord:
    """One product tile as displayed on the site.

    Prices are kept as raw display strings; numeric parsing happens in the
    persistence layer.
    """

    name: str
    category: str = ""
    price: Optional[str] = None
    brand: Optional[str] = None
    link: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    price_per_kilo: Optional[str] = None
    discount: Optional[str] = None

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.name:
            raise ValueError("name is required")
        if self.price_per_kilo is not None and self.discount is not None:
            raise ValueError("price_per_kilo and discount are mutually exclusive")

    def to_dict(self) -> dict:
        """Serialize using the site's camelCase field names."""
        return {
            "name": self.name,
            "price": self.price,
            "brand": self.brand,
            "link": self.link,
            "image": self.image,
            "description": self.description,
            "pricePerKilo": self.price_per_kilo,
            "discount": self.discount,
            "category": self.category,
        }


@dataclass(frozen=True)
class WorkerTask:
    """Input for a single worker. Built once by the orchestrator."""

    url: str
    url_index: int
    total_urls: int
    browser_config: BrowserConfig
    max_pages: int = 5
    excluded_texts: Tuple[str, ...] = ("Alle",)

    @property
    def label(self) -> str:
        """Human-readable progress label, e.g. '2/5'."""
        return f"{self.url_index + 1}/{self.total_urls}"


@dataclass
class SubcategoryResult:
    name: str
    url: str
    products: List[ProductRecord] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class CategoryInfo:
    name: str
    subcategories: List[SubcategoryResult] = field(default_factory=list)

    @property
    def total_products(self) -> int:
        return sum(len(sub.products) for sub in self.subcategories)


@dataclass
class WorkerResult:
    """Outcome of one worker run.

    ``category_info`` is meaningful only when ``success`` is True,
    ``error`` only when it is False.
    """

    success: bool
    url: str
    url_index: int
    category_info: Optional[CategoryInfo] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, task: WorkerTask, error: str) -> "WorkerResult":
        return cls(success=False, url=task.url, url_index=task.url_index, error=error)


@dataclass
class ScrapeSummary:
    """Aggregate counters for one orchestrator run."""

    total_urls: int = 0
    successful_urls: int = 0
    total_products: int = 0
    results: List[WorkerResult] = field(default_factory=list)
