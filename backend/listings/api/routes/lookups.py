"""
Reference data endpoints.

The lookup tables change only through the migration scripts, so each list
is cached for REFERENCE_CACHE_TTL and dropped by ``POST /cache/refresh``.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from listings.core.config import settings
from listings.core.database import get_db
from listings.models import Feature, OperationStatus, PropertyStatus, PropertyType
from listings.services import cache

router = APIRouter(tags=["lookups"])


class LookupResponse(BaseModel):
    id: int
    name: str
    display_name: str
    description: Optional[str] = None
    color: Optional[str] = None

    class Config:
        from_attributes = True


class FeatureResponse(BaseModel):
    id: int
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None

    class Config:
        from_attributes = True


def _cached_list(name: str, load, response_model) -> list:
    key = cache.reference_key(name)
    cached = cache.cache_get(key)
    if cached is not None:
        return cached

    rows = [response_model.model_validate(row).model_dump(mode="json") for row in load()]
    cache.cache_set(key, rows, ttl=settings.REFERENCE_CACHE_TTL)
    return rows


@router.get("/property-types", response_model=List[LookupResponse])
def list_property_types(db: Session = Depends(get_db)):
    """Property types ordered by display name."""
    return _cached_list(
        "property-types",
        lambda: db.query(PropertyType).order_by(PropertyType.display_name).all(),
        LookupResponse,
    )


@router.get("/property-statuses", response_model=List[LookupResponse])
def list_property_statuses(db: Session = Depends(get_db)):
    """Listing statuses ordered by display name."""
    return _cached_list(
        "property-statuses",
        lambda: db.query(PropertyStatus).order_by(PropertyStatus.display_name).all(),
        LookupResponse,
    )


@router.get("/property-operation-statuses", response_model=List[LookupResponse])
def list_operation_statuses(db: Session = Depends(get_db)):
    """Operation statuses in id order (1 is sale, 2 is rent)."""
    return _cached_list(
        "property-operation-statuses",
        lambda: db.query(OperationStatus).order_by(OperationStatus.id).all(),
        LookupResponse,
    )


@router.get("/property-features", response_model=List[FeatureResponse])
def list_property_features(db: Session = Depends(get_db)):
    """Features grouped by category, then by name."""
    return _cached_list(
        "property-features",
        lambda: db.query(Feature).order_by(Feature.category, Feature.name).all(),
        FeatureResponse,
    )
