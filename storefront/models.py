# storefront/models.py
"""
Client-side copies of the backend entities.

Records are decoded once, at the fetch boundary: prices become floats,
relative image paths become absolute URLs, and a missing category or
region is reported as a malformed response instead of leaking ``None``
into the render code.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .config import BACKEND_URL
from .errors import MalformedResponseError


def to_abs(url: Optional[str], base: str = BACKEND_URL) -> Optional[str]:
    """
    If the API returned an absolute URL (starts with http), use it as-is.
    If it returned a relative path like /media/..., prefix the backend once.
    """
    if not url:
        return None
    if url.startswith("http"):
        return url
    base = (base or "").rstrip("/")
    return f"{base}/{url.lstrip('/')}" if base else url


def parse_price(value: Any) -> float:
    """Backend prices are decimal strings such as ``"120.00"``."""
    if value is None or value == "":
        raise MalformedResponseError("price is missing")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise MalformedResponseError(f"price is not a number: {value!r}") from None


def _require(data: Dict[str, Any], key: str, kind: str) -> Any:
    if not isinstance(data, dict) or key not in data:
        raise MalformedResponseError(f"{kind} payload has no {key!r}")
    return data[key]


def _number(convert, value: Any, what: str):
    try:
        return convert(value)
    except (TypeError, ValueError):
        raise MalformedResponseError(f"{what} is not a number: {value!r}") from None


@dataclass(frozen=True)
class Region:
    id: int
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Region":
        return cls(id=_number(int, _require(data, "id", "region"), "region id"), name=str(_require(data, "name", "region")))


@dataclass(frozen=True)
class Category:
    id: int
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        return cls(id=_number(int, _require(data, "id", "category"), "category id"), name=str(_require(data, "name", "category")))


@dataclass(frozen=True)
class Artisan:
    id: int
    name: str
    biography: str = ""
    phone: str = ""
    region: Optional[Region] = None
    email: Optional[str] = None
    main_image: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_url: str = BACKEND_URL) -> "Artisan":
        region = data.get("region") if isinstance(data, dict) else None
        return cls(
            id=_number(int, _require(data, "id", "artisan"), "artisan id"),
            name=str(_require(data, "name", "artisan")),
            biography=data.get("biography") or "",
            phone=data.get("phone") or "",
            region=Region.from_dict(region) if region else None,
            email=data.get("email") or None,
            main_image=to_abs(data.get("main_image"), base_url),
        )

    def form_fields(self) -> Dict[str, Any]:
        return {"name": self.name, "biography": self.biography, "phone": self.phone}


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    description: str
    materials: str
    dimensions: str
    cultural_significance: str
    category: Category
    region: Region
    artisan: Optional[Artisan]
    price: float
    main_image: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_url: str = BACKEND_URL) -> "Product":
        if not isinstance(data, dict):
            raise MalformedResponseError(f"product payload is {type(data).__name__}, expected object")
        category = _require(data, "category", "product")
        region = _require(data, "region", "product")
        if not category or not region:
            raise MalformedResponseError(f"product {data.get('id')} has no category or region")
        artisan = data.get("artisan")
        rating = data.get("rating")
        reviews = data.get("review_count")
        return cls(
            id=_number(int, _require(data, "id", "product"), "product id"),
            name=str(_require(data, "name", "product")),
            description=data.get("description") or "",
            materials=data.get("materials") or "",
            dimensions=data.get("dimensions") or "",
            cultural_significance=data.get("cultural_significance") or "",
            category=Category.from_dict(category),
            region=Region.from_dict(region),
            # The storefront tolerates products whose artisan was not expanded.
            artisan=Artisan.from_dict(artisan, base_url) if isinstance(artisan, dict) else None,
            price=parse_price(data.get("price")),
            main_image=to_abs(data.get("main_image"), base_url),
            rating=_number(float, rating, "rating") if rating is not None else None,
            review_count=_number(int, reviews, "review count") if reviews is not None else None,
        )

    @property
    def artisan_name(self) -> str:
        return self.artisan.name if self.artisan else ""

    def form_fields(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "materials": self.materials,
            "dimensions": self.dimensions,
            "cultural_significance": self.cultural_significance,
            "price": f"{self.price:.2f}",
            "category_id": self.category.id,
            "region_id": self.region.id,
            "image": None,
        }
