"""
Property image endpoints.

Uploads go to blob storage first; the returned public URL is what the image
row stores. The first image of a property becomes its cover.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel
from sqlalchemy.orm import Session

from listings.api.routes.properties import property_state
from listings.core.database import get_db
from listings.core.exceptions import (
    BlobUploadError,
    ConfigurationError,
    ImageNotFoundError,
    PropertyNotFoundError,
)
from listings.models import Property
from listings.services import cache
from listings.services.blob_storage import BlobStorageClient, get_blob_client
from listings.services.images import delete_image, set_cover, upload_image

router = APIRouter(prefix="/properties", tags=["images"])
logger = logging.getLogger(__name__)


class ImageResponse(BaseModel):
    id: int
    property_id: str
    image_url: str
    is_cover: bool
    display_order: int
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    original_filename: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


def _invalidate(db: Session, property_id: str):
    db_property = db.get(Property, property_id)
    if db_property is not None:
        cache.invalidate_property(property_state(db_property))


@router.get("/{property_id}/images", response_model=List[ImageResponse])
def list_property_images(
    property_id: str,
    db: Session = Depends(get_db)
):
    """Images for a property, cover first, then by display order."""
    db_property = db.get(Property, property_id)
    if not db_property:
        raise HTTPException(status_code=404, detail="Property not found")
    return db_property.images


@router.post("/{property_id}/images", response_model=ImageResponse)
def upload_property_image(
    property_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    blob_client: BlobStorageClient = Depends(get_blob_client),
):
    """
    Upload an image file and attach it to the property.
    """
    content = file.file.read()
    try:
        image = upload_image(
            db,
            blob_client,
            property_id,
            file.filename or "image",
            content,
            file.content_type,
        )
    except PropertyNotFoundError:
        raise HTTPException(status_code=404, detail="Property not found")
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except BlobUploadError as e:
        logger.error(f"Image upload for {property_id} failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    _invalidate(db, property_id)
    return image


@router.post("/images/{image_id}/cover", response_model=ImageResponse)
def make_cover_image(
    image_id: int,
    db: Session = Depends(get_db)
):
    """Make this image the property's cover; the previous cover is cleared."""
    try:
        image = set_cover(db, image_id)
    except ImageNotFoundError:
        raise HTTPException(status_code=404, detail="Image not found")

    _invalidate(db, image.property_id)
    return image


@router.delete("/images/{image_id}")
def remove_image(
    image_id: int,
    db: Session = Depends(get_db)
):
    """Delete an image row. The blob itself is left in storage."""
    try:
        property_id = delete_image(db, image_id)
    except ImageNotFoundError:
        raise HTTPException(status_code=404, detail="Image not found")

    _invalidate(db, property_id)
    return {"status": "deleted", "id": image_id}
