"""
Property listing and its images.

A listing belongs to one seller, references the lookup tables by foreign key
and owns its images and feature assignments (deleted with it).
"""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from listings.core.config import settings
from listings.core.database import Base


def _new_property_id() -> str:
    return str(uuid.uuid4())


class Property(Base):
    """A listed property."""

    __tablename__ = "properties"

    id = Column(String(36), primary_key=True, default=_new_property_id)
    title = Column(Text, nullable=False)
    description = Column(Text)
    price = Column(Numeric(14, 2))

    # Address fields
    address = Column(Text, unique=True)
    city = Column(String(100), index=True)
    state = Column(String(100))
    country = Column(String(100))
    zip_code = Column(String(20))

    # Lookups
    property_type_id = Column(Integer, ForeignKey("property_types.id"))
    property_status_id = Column(Integer, ForeignKey("property_statuses.id"))
    operation_status_id = Column(
        Integer, ForeignKey("property_operation_statuses.id"), default=1, index=True
    )

    # Details
    bedrooms = Column(Integer, default=0)
    bathrooms = Column(Integer, default=0)
    square_meters = Column(Integer)
    year_built = Column(Integer)

    seller_id = Column(
        String(255), nullable=False, default=lambda: settings.DEFAULT_SELLER_ID, index=True
    )

    # Null until the geocode backfill has run for this address
    geocode = Column(JSON(none_as_null=True))
    latitude = Column(Float)
    longitude = Column(Float)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    images = relationship(
        "PropertyImage",
        back_populates="property",
        cascade="all, delete-orphan",
        order_by=lambda: [PropertyImage.is_cover.desc(), PropertyImage.display_order],
    )
    feature_assignments = relationship(
        "FeatureAssignment",
        back_populates="property",
        cascade="all, delete-orphan",
    )
    operation_status = relationship("OperationStatus")

    def __repr__(self):
        return f"<Property(id={self.id}, title={self.title!r}, city={self.city})>"


class PropertyImage(Base):
    """
    An image attached to a property.

    At most one image per property is the cover; the partial unique index
    below enforces it.
    """

    __tablename__ = "property_images"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    image_url = Column(String(1000), nullable=False)
    is_cover = Column(Boolean, nullable=False, default=False)
    display_order = Column(Integer, nullable=False, default=0)

    # Upload metadata
    file_size = Column(Integer)
    mime_type = Column(String(100))
    original_filename = Column(String(255))
    blob_path = Column(String(500))
    alt_text = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    property = relationship("Property", back_populates="images")

    __table_args__ = (
        CheckConstraint("display_order >= 0", name="chk_valid_display_order"),
        CheckConstraint("file_size IS NULL OR file_size > 0", name="chk_valid_file_size"),
        Index("idx_property_images_property_id", "property_id"),
        Index("idx_property_images_cover_order", "property_id", "is_cover", "display_order"),
        Index(
            "uq_property_images_single_cover",
            "property_id",
            unique=True,
            postgresql_where=text("is_cover"),
            sqlite_where=text("is_cover = 1"),
        ),
    )

    def __repr__(self):
        return f"<PropertyImage(id={self.id}, property_id={self.property_id}, cover={self.is_cover})>"
