"""
Denormalized property documents for the search read model.

Flattens a property row, its images and its features into a single document
that the document store can index without joins. Documents are derived data:
they are rebuilt on every sync and never written back to the relational store.
"""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel

from listings.core.config import settings

SUMMARY_LENGTH = 240

# Column name first, then the aliases older callers and fixtures use
AREA_KEYS = ("square_meters", "squareMeters", "area")
IMAGE_URL_KEYS = ("image_url", "url")

Number = Union[int, float]


class Neighborhood(BaseModel):
    """City-level stand-in until neighborhoods become their own entity."""
    name: str
    city: str


class PropertyDocument(BaseModel):
    """Read-optimized view of one property."""
    id: str
    title: str
    description: Optional[str] = None
    summary: Optional[str] = None
    features: list[str] = []
    images: list[str] = []
    neighborhood: Optional[Neighborhood] = None
    price: Optional[Number] = None
    price_per_m2: Optional[int] = None
    currency: str

    def to_dict(self) -> dict:
        """Serialize for the document store; fields that could not be derived are left out."""
        return self.model_dump(exclude_none=True)


def _field(record: Any, *keys: str) -> Any:
    """Read the first non-null value among keys from a mapping or an object."""
    for key in keys:
        if isinstance(record, Mapping):
            value = record.get(key)
        else:
            value = getattr(record, key, None)
        if value is not None:
            return value
    return None


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def _as_number(value: Decimal) -> Number:
    return int(value) if value == value.to_integral_value() else float(value)


def summarize(description: Optional[str]) -> Optional[str]:
    """Hard cut at SUMMARY_LENGTH characters; words may be split."""
    if not description:
        return None
    return description[:SUMMARY_LENGTH]


def price_per_area(price: Any, area: Any) -> Optional[int]:
    """
    round(price / area), half-up.

    Returns None when either value is missing or the area is zero, so the
    field is omitted rather than reported as 0.
    """
    price_value = _to_decimal(price)
    area_value = _to_decimal(area)
    if price_value is None or area_value is None or area_value == 0:
        return None
    return int((price_value / area_value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def build_property_document(
    property: Any,
    images: Optional[Iterable[Any]] = None,
    features: Optional[Iterable[Any]] = None,
    currency: Optional[str] = None,
) -> PropertyDocument:
    """
    Build the search document for one property.

    Args:
        property: Row mapping or model with at least ``id`` and ``title``
        images: Image rows in the order they should appear
        features: Feature rows in the order they should appear
        currency: Overrides the configured DEFAULT_CURRENCY

    Returns:
        PropertyDocument. Never raises for missing optional fields.
    """
    description = _field(property, "description")
    city = _field(property, "city")
    price = _to_decimal(_field(property, "price"))

    image_urls = [
        url for url in (_field(image, *IMAGE_URL_KEYS) for image in images or ()) if url
    ]
    feature_names = [
        name for name in (_field(feature, "name") for feature in features or ()) if name
    ]

    return PropertyDocument(
        id=str(_field(property, "id")),
        title=_field(property, "title") or "",
        description=description,
        summary=summarize(description),
        features=feature_names,
        images=image_urls,
        neighborhood=Neighborhood(name=city, city=city) if city else None,
        price=_as_number(price) if price is not None else None,
        price_per_m2=price_per_area(price, _field(property, *AREA_KEYS)),
        currency=currency or settings.DEFAULT_CURRENCY,
    )
