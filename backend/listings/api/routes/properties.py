"""
Properties API endpoints.

CRUD for listings, the seller dashboard listing and feature assignment.
List and detail responses go through the query cache; every mutation drops
the entries that could show the old state.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from listings.core.database import get_db
from listings.models import Property
from listings.services import cache
from listings.services.features import assign_features_by_name, feature_rows
from listings.services.images import image_rows

router = APIRouter(prefix="/properties", tags=["properties"])
logger = logging.getLogger(__name__)


# =============================================================================
# Request/Response Models
# =============================================================================

class PropertyCreate(BaseModel):
    """Request model for creating a property."""
    title: str
    description: Optional[str] = None
    price: Optional[float] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None
    property_type_id: Optional[int] = None
    property_status_id: Optional[int] = None
    operation_status_id: int = 1
    bedrooms: int = 0
    bathrooms: int = 0
    square_meters: Optional[int] = None
    year_built: Optional[int] = None
    seller_id: Optional[str] = None


class PropertyUpdate(BaseModel):
    """Request model for updating a property. Only the fields sent are changed."""
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None
    property_type_id: Optional[int] = None
    property_status_id: Optional[int] = None
    operation_status_id: Optional[int] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    square_meters: Optional[int] = None
    year_built: Optional[int] = None
    seller_id: Optional[str] = None

    @field_validator("title", "seller_id")
    @classmethod
    def not_null(cls, v: Optional[str]) -> str:
        """Omit a required field to keep it; null cannot clear it."""
        if v is None:
            raise ValueError("may not be null")
        return v


class PropertyResponse(BaseModel):
    """Response model for a property."""
    id: str
    title: str
    description: Optional[str]
    price: Optional[float]
    address: Optional[str]
    city: Optional[str]
    state: Optional[str]
    country: Optional[str]
    zip_code: Optional[str]
    property_type_id: Optional[int]
    property_status_id: Optional[int]
    operation_status_id: Optional[int]
    bedrooms: Optional[int]
    bathrooms: Optional[int]
    square_meters: Optional[int]
    year_built: Optional[int]
    seller_id: str
    latitude: Optional[float]
    longitude: Optional[float]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class ImageSummary(BaseModel):
    id: int
    image_url: str
    is_cover: bool
    display_order: int


class PropertyDetailResponse(PropertyResponse):
    """A property with its gallery (cover first) and feature names."""
    images: List[ImageSummary] = []
    features: List[str] = []


class PropertyListResponse(BaseModel):
    """Response model for list of properties."""
    total: int
    properties: List[PropertyResponse]


class FeatureAssignmentRequest(BaseModel):
    features: List[str]


class FeatureAssignmentResponse(BaseModel):
    property_id: str
    assigned: int
    unknown: List[str]


# =============================================================================
# Helpers
# =============================================================================

def property_state(db_property: Property) -> dict:
    """The fields cache invalidation keys on."""
    return {
        "id": db_property.id,
        "seller_id": db_property.seller_id,
        "city": db_property.city,
        "operation_status_id": db_property.operation_status_id,
    }


def _list_filters(city: Optional[str], operation_status_id: Optional[int]) -> dict:
    op = None
    if operation_status_id is not None:
        op = cache.OPERATION_FILTERS.get(operation_status_id, str(operation_status_id))
    return {"city": city, "op": op}


def _integrity_error(e: IntegrityError) -> HTTPException:
    if "address" in str(e.orig).lower():
        return HTTPException(status_code=409, detail="A property with this address already exists")
    logger.warning(f"Rejected property write: {e.orig}")
    return HTTPException(status_code=400, detail="Property data violates a database constraint")


def _get_property_or_404(db: Session, property_id: str) -> Property:
    db_property = db.query(Property).filter(Property.id == property_id).first()
    if not db_property:
        raise HTTPException(status_code=404, detail="Property not found")
    return db_property


def _list_properties(
    db: Session,
    city: Optional[str],
    operation_status_id: Optional[int],
    seller_id: Optional[str],
    limit: int,
    offset: int,
) -> dict:
    filters = _list_filters(city, operation_status_id)
    filters.update(limit=limit, offset=offset)
    key = (
        cache.seller_list_key(seller_id, filters)
        if seller_id
        else cache.properties_list_key(filters)
    )
    cached = cache.cache_get(key)
    if cached is not None:
        return cached

    query = db.query(Property)
    if city:
        query = query.filter(Property.city.ilike(city))
    if operation_status_id is not None:
        query = query.filter(Property.operation_status_id == operation_status_id)
    if seller_id:
        query = query.filter(Property.seller_id == seller_id)

    total = query.count()
    properties = query.order_by(Property.created_at.desc(), Property.id).offset(offset).limit(limit).all()

    response = PropertyListResponse(total=total, properties=properties).model_dump(mode="json")
    cache.cache_set(key, response)
    return response


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/", response_model=PropertyListResponse)
def list_properties(
    city: Optional[str] = None,
    operation_status_id: Optional[int] = None,
    seller_id: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
    db: Session = Depends(get_db)
):
    """
    List properties, newest first, with optional filters.
    """
    return _list_properties(db, city, operation_status_id, seller_id, limit, offset)


@router.get("/seller/{seller_id}", response_model=PropertyListResponse)
def list_seller_properties(
    seller_id: str,
    city: Optional[str] = None,
    operation_status_id: Optional[int] = None,
    limit: int = 100,
    offset: int = 0,
    db: Session = Depends(get_db)
):
    """
    Listings owned by one seller (seller dashboard).
    """
    return _list_properties(db, city, operation_status_id, seller_id, limit, offset)


@router.post("/", response_model=PropertyResponse)
def create_property(
    property_data: PropertyCreate,
    db: Session = Depends(get_db)
):
    """
    Create a new property listing.
    """
    values = property_data.model_dump(exclude_none=True)
    db_property = Property(**values)

    db.add(db_property)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise _integrity_error(e)
    db.refresh(db_property)

    cache.invalidate_property(property_state(db_property))
    logger.info(f"Created property {db_property.id}")
    return db_property


@router.get("/{property_id}", response_model=PropertyDetailResponse)
def get_property(
    property_id: str,
    db: Session = Depends(get_db)
):
    """
    Get a single property with its images and features.
    """
    key = cache.property_key(property_id)
    cached = cache.cache_get(key)
    if cached is not None:
        return cached

    db_property = _get_property_or_404(db, property_id)
    detail = PropertyDetailResponse.model_validate(db_property, from_attributes=True)
    detail.images = [ImageSummary(**row) for row in image_rows(db, property_id)]
    detail.features = [row["name"] for row in feature_rows(db, property_id)]

    response = detail.model_dump(mode="json")
    cache.cache_set(key, response)
    return response


@router.put("/{property_id}", response_model=PropertyResponse)
def update_property(
    property_id: str,
    property_data: PropertyUpdate,
    db: Session = Depends(get_db)
):
    """
    Update a property.

    Only provided fields will be updated.
    """
    db_property = _get_property_or_404(db, property_id)
    before = property_state(db_property)

    update_data = property_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(db_property, field, value)
    db_property.updated_at = datetime.utcnow()

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise _integrity_error(e)
    db.refresh(db_property)

    # City, seller or operation may have moved: drop both old and new listings
    cache.invalidate_property(before)
    cache.invalidate_property(property_state(db_property))
    return db_property


@router.delete("/{property_id}")
def delete_property(
    property_id: str,
    db: Session = Depends(get_db)
):
    """
    Delete a property together with its images and feature assignments.
    """
    db_property = _get_property_or_404(db, property_id)
    state = property_state(db_property)

    db.delete(db_property)
    db.commit()

    cache.invalidate_property(state)
    logger.info(f"Deleted property {property_id}")
    return {"status": "deleted", "id": property_id}


@router.post("/{property_id}/features", response_model=FeatureAssignmentResponse)
def add_property_features(
    property_id: str,
    request: FeatureAssignmentRequest,
    db: Session = Depends(get_db)
):
    """
    Assign features by name. Already-assigned features are ignored; names
    that match no feature are reported back.
    """
    db_property = _get_property_or_404(db, property_id)
    assigned, unknown = assign_features_by_name(db, property_id, request.features)

    cache.invalidate_property(property_state(db_property))
    return FeatureAssignmentResponse(property_id=property_id, assigned=assigned, unknown=unknown)
