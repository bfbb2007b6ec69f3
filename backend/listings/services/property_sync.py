"""
Sync a canonical property into the search read model.

Reads the property, its images and features from the relational store,
builds the denormalized document, upserts it into the document store and
drops every cached entry that could show stale data.
"""

import logging
from typing import Callable, Optional

from sqlalchemy import select

from listings.core.exceptions import PropertyNotFoundError
from listings.models import Property
from listings.services import cache
from listings.services.blob_storage import resolve_image_url
from listings.services.document_builder import PropertyDocument, build_property_document
from listings.services.features import feature_rows
from listings.services.images import image_rows
from listings.services.read_model import PropertyDocumentStore

logger = logging.getLogger(__name__)


def fetch_property_row(db, property_id: str) -> dict:
    """Property row as a dict. ``db`` is a Session or a Connection."""
    table = Property.__table__
    row = db.execute(select(table).where(table.c.id == property_id)).mappings().first()
    if row is None:
        raise PropertyNotFoundError(property_id)
    return dict(row)


def resolve_images(images: list[dict], resolve_url: Callable[[str], str]) -> list[dict]:
    """Resolve each image URL; a failed resolution keeps the stored value."""
    resolved = []
    for image in images:
        try:
            resolved.append({**image, "image_url": resolve_url(image["image_url"])})
        except Exception as e:
            logger.warning(f"resolve_image_url failed for image {image.get('id')}: {e}")
            resolved.append(image)
    return resolved


def build_document_for(
    db,
    property_id: str,
    resolve_url: Callable[[str], str] = resolve_image_url,
    currency: Optional[str] = None,
) -> tuple[dict, PropertyDocument]:
    """Load one property with its images and features and build its document."""
    property_row = fetch_property_row(db, property_id)
    images = resolve_images(image_rows(db, property_id), resolve_url)
    features = feature_rows(db, property_id)
    return property_row, build_property_document(property_row, images, features, currency=currency)


def sync_property(
    db,
    property_id: str,
    store: PropertyDocumentStore,
    resolve_url: Callable[[str], str] = resolve_image_url,
    currency: Optional[str] = None,
) -> PropertyDocument:
    """
    Rebuild and store the read-model document for one property.

    Raises:
        PropertyNotFoundError: no such property.
    """
    property_row, document = build_document_for(db, property_id, resolve_url, currency)

    store.upsert(document.id, document.to_dict())
    removed = cache.invalidate_property(property_row)
    logger.info(f"Synced property {document.id} to read model ({removed} cache entries invalidated)")
    return document


DRY_RUN_PROPERTY = {
    "id": "dry-prop-1",
    "title": "Dry-run Property",
    "description": "Dry-run description",
    "price": 200000,
    "squareMeters": 80,
    "city": "Drytown",
    "seller_id": "seller-dry",
    "operation_status_id": 1,
}
DRY_RUN_IMAGES = [{"id": 1, "image_url": "https://example.com/dry-1.jpg", "is_cover": True}]
DRY_RUN_FEATURES = [{"id": 1, "name": "Pool"}, {"id": 2, "name": "Balcony"}]


def dry_run_sync(
    property: Optional[dict] = None,
    images: Optional[list[dict]] = None,
    features: Optional[list[dict]] = None,
) -> dict:
    """
    Walk the sync pipeline on fixture data without touching any store.

    Returns the document that would be upserted together with the cache key
    and patterns that would be invalidated.
    """
    property = property or DRY_RUN_PROPERTY
    images = DRY_RUN_IMAGES if images is None else images
    features = DRY_RUN_FEATURES if features is None else features

    document = build_property_document(property, images, features)
    return {
        "document": document.to_dict(),
        "delete_key": cache.property_key(document.id),
        "invalidate_patterns": cache.property_invalidation_patterns(property),
    }
