# storefront/catalog.py
"""
Filter / sort / paginate over an in-memory product list.

Everything here is pure: the fetched list is never modified, so clearing
the filters gives the full list back without another request.

Search text is compared after Unicode NFKD decomposition with combining
marks dropped and case folded, so "fes", "Fès" and "FES" all find
"Atelier Fès", and "fès" also finds "Atelier Fes".
"""
import math
import unicodedata
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import ALL_CATEGORIES, ALL_REGIONS, PAGE_SIZE
from .models import Product


class SortKey(str, Enum):
    POPULARITY = "popularity"
    NEWEST = "newest"
    PRICE_ASC = "price-low"
    PRICE_DESC = "price-high"
    RATING = "rating"

    @property
    def label(self) -> str:
        return SORT_LABELS[self]


SORT_LABELS = {
    SortKey.POPULARITY: "Most Popular",
    SortKey.NEWEST: "Newest",
    SortKey.PRICE_ASC: "Price: Low to High",
    SortKey.PRICE_DESC: "Price: High to Low",
    SortKey.RATING: "Highest Rated",
}

# Changing any of these sends the user back to page 1.
FILTER_FIELDS = ("search", "category", "region", "price_range")


def normalize(text: Optional[str]) -> str:
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def searchable_fields(product: Product) -> Tuple[str, ...]:
    return (
        product.name,
        product.description,
        product.category.name,
        product.region.name,
        product.artisan_name,
        product.materials,
        product.dimensions,
        product.cultural_significance,
    )


@dataclass(frozen=True)
class Criteria:
    search: str = ""
    category: str = ALL_CATEGORIES
    region: str = ALL_REGIONS
    price_range: Optional[Tuple[float, float]] = None
    sort: SortKey = SortKey.POPULARITY

    @property
    def category_filter(self) -> Optional[str]:
        return None if self.category in ("", ALL_CATEGORIES, None) else self.category

    @property
    def region_filter(self) -> Optional[str]:
        return None if self.region in ("", ALL_REGIONS, None) else self.region

    def active_count(self) -> int:
        return sum((
            bool(self.search.strip()),
            self.category_filter is not None,
            self.region_filter is not None,
            self.price_range is not None,
        ))


def matches(product: Product, criteria: Criteria) -> bool:
    category = criteria.category_filter
    if category is not None and product.category.name != category:
        return False
    region = criteria.region_filter
    if region is not None and product.region.name != region:
        return False
    if criteria.price_range is not None:
        low, high = criteria.price_range
        if not (low <= product.price <= high):
            return False
    needle = normalize(criteria.search.strip())
    if needle:
        return any(needle in normalize(value) for value in searchable_fields(product))
    return True


def filter_products(products: Sequence[Product], criteria: Criteria) -> List[Product]:
    return [p for p in products if matches(p, criteria)]


def sort_products(products: Sequence[Product], key: SortKey) -> List[Product]:
    """Stable: ties keep fetch order."""
    key = SortKey(key)
    if key is SortKey.POPULARITY:
        if any(p.review_count is not None for p in products):
            return sorted(products, key=lambda p: -(p.review_count or 0))
        return list(products)
    if key is SortKey.NEWEST:
        return sorted(products, key=lambda p: -p.id)
    if key is SortKey.PRICE_ASC:
        return sorted(products, key=lambda p: p.price)
    if key is SortKey.PRICE_DESC:
        return sorted(products, key=lambda p: -p.price)
    # unrated products go last
    return sorted(products, key=lambda p: (p.rating is None, -(p.rating or 0.0)))


def derive(products: Sequence[Product], criteria: Criteria) -> List[Product]:
    return sort_products(filter_products(products, criteria), criteria.sort)


def paginate(items: Sequence, page: int, size: int = PAGE_SIZE) -> List:
    if size < 1:
        raise ValueError("page size must be positive")
    if page < 1:
        raise ValueError("pages are numbered from 1")
    start = (page - 1) * size
    return list(items[start:start + size])


def page_count(total: int, size: int = PAGE_SIZE) -> int:
    return max(1, math.ceil(total / size)) if size > 0 else 1


def facet_values(products: Iterable[Product], attr: str) -> List[str]:
    """Distinct category or region names, in first-seen order."""
    seen = {}
    for p in products:
        seen.setdefault(getattr(p, attr).name, None)
    return list(seen)


@dataclass(frozen=True)
class Summary:
    count: int
    category_count: int
    average_price: int


def summarize(products: Sequence[Product]) -> Summary:
    """Stats cards on the artisan dashboard."""
    if not products:
        return Summary(0, 0, 0)
    average = sum(p.price for p in products) / len(products)
    return Summary(
        count=len(products),
        category_count=len({p.category.name for p in products}),
        average_price=int(math.floor(average + 0.5)),
    )


@dataclass(frozen=True)
class Page:
    items: List[Product]
    page: int
    page_count: int
    total: int
    matched: int


@dataclass
class CatalogView:
    """The criteria and current page of one product grid."""

    page_size: int = PAGE_SIZE
    criteria: Criteria = field(default_factory=Criteria)
    page: int = 1

    def update(self, **changes) -> Criteria:
        if "sort" in changes:
            changes["sort"] = SortKey(changes["sort"])
        new = replace(self.criteria, **changes)
        if any(getattr(new, f) != getattr(self.criteria, f) for f in FILTER_FIELDS):
            self.page = 1
        self.criteria = new
        return new

    def clear_filters(self) -> Criteria:
        return self.update(search="", category=ALL_CATEGORIES, region=ALL_REGIONS, price_range=None)

    def set_page(self, page: int) -> None:
        if page < 1:
            raise ValueError("pages are numbered from 1")
        self.page = page

    def view(self, products: Sequence[Product]) -> Page:
        matched = derive(products, self.criteria)
        return Page(
            items=paginate(matched, self.page, self.page_size),
            page=self.page,
            page_count=page_count(len(matched), self.page_size),
            total=len(products),
            matched=len(matched),
        )
