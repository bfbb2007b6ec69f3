"""
Property image rows.

Cover handling lives here: a property has at most one cover image. Moving
the cover clears the old one and sets the new one in the same transaction,
and the database rejects a second cover through a partial unique index.
"""

import logging
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from listings.core.exceptions import ImageNotFoundError, PropertyNotFoundError
from listings.models import Property, PropertyImage
from listings.services.blob_storage import BlobStorageClient, image_pathname

logger = logging.getLogger(__name__)


def image_rows(db, property_id: str) -> list[dict]:
    """Images for a property, cover first, then by display order."""
    table = PropertyImage.__table__
    result = db.execute(
        select(table.c.id, table.c.property_id, table.c.image_url, table.c.is_cover, table.c.display_order)
        .where(table.c.property_id == property_id)
        .order_by(table.c.is_cover.desc(), table.c.display_order.asc(), table.c.id.asc())
    )
    return [dict(row) for row in result.mappings()]


def register_image(
    db: Session,
    property_id: str,
    image_url: str,
    *,
    blob_path: Optional[str] = None,
    original_filename: Optional[str] = None,
    mime_type: Optional[str] = None,
    file_size: Optional[int] = None,
    alt_text: Optional[str] = None,
    make_cover: bool = False,
) -> PropertyImage:
    """
    Add an image row at the end of the property's gallery.

    The first image of a property becomes its cover automatically.
    """
    if db.get(Property, property_id) is None:
        raise PropertyNotFoundError(property_id)

    count, max_order = db.execute(
        select(func.count(PropertyImage.id), func.max(PropertyImage.display_order))
        .where(PropertyImage.property_id == property_id)
    ).one()

    becomes_cover = make_cover or count == 0
    if becomes_cover:
        db.execute(
            update(PropertyImage)
            .where(PropertyImage.property_id == property_id)
            .values(is_cover=False)
        )

    image = PropertyImage(
        property_id=property_id,
        image_url=image_url,
        blob_path=blob_path,
        original_filename=original_filename,
        mime_type=mime_type,
        file_size=file_size,
        alt_text=alt_text,
        is_cover=becomes_cover,
        display_order=0 if max_order is None else max_order + 1,
    )
    db.add(image)
    db.commit()
    db.refresh(image)
    logger.info(f"Registered image {image.id} for property {property_id} (cover={image.is_cover})")
    return image


def upload_image(
    db: Session,
    blob_client: BlobStorageClient,
    property_id: str,
    filename: str,
    content: bytes,
    content_type: Optional[str] = None,
) -> PropertyImage:
    """Push the file to blob storage, then record it against the property."""
    if db.get(Property, property_id) is None:
        raise PropertyNotFoundError(property_id)

    blob = blob_client.upload(image_pathname(property_id, filename), content, content_type)
    return register_image(
        db,
        property_id,
        blob.url,
        blob_path=blob.pathname,
        original_filename=filename,
        mime_type=content_type,
        file_size=blob.size,
    )


def set_cover(db: Session, image_id: int) -> PropertyImage:
    """Make an image its property's only cover."""
    image = db.get(PropertyImage, image_id)
    if image is None:
        raise ImageNotFoundError(image_id)

    # Clear first so the single-cover index never sees two covers
    db.execute(
        update(PropertyImage)
        .where(PropertyImage.property_id == image.property_id, PropertyImage.id != image_id)
        .values(is_cover=False)
    )
    db.execute(
        update(PropertyImage).where(PropertyImage.id == image_id).values(is_cover=True)
    )
    db.commit()
    db.refresh(image)
    return image


def delete_image(db: Session, image_id: int) -> str:
    """
    Remove an image row and return its property id. When the cover goes, the
    next image in display order takes its place.
    """
    image = db.get(PropertyImage, image_id)
    if image is None:
        raise ImageNotFoundError(image_id)

    property_id, was_cover = image.property_id, image.is_cover
    db.delete(image)
    db.flush()

    if was_cover:
        successor = db.execute(
            select(PropertyImage)
            .where(PropertyImage.property_id == property_id)
            .order_by(PropertyImage.display_order.asc(), PropertyImage.id.asc())
            .limit(1)
        ).scalar_one_or_none()
        if successor is not None:
            successor.is_cover = True

    db.commit()
    return property_id
