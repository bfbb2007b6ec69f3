from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from listings.core.database import Base


class Feature(Base):
    """An amenity that can be attached to many properties (Pool, Garage...)."""

    __tablename__ = "property_features"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    category = Column(String(50), default="general")
    description = Column(Text)
    icon = Column(String(50))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Feature({self.id}, {self.name})>"


class FeatureAssignment(Base):
    __tablename__ = "property_feature_assignments"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    feature_id = Column(
        Integer, ForeignKey("property_features.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    property = relationship("Property", back_populates="feature_assignments")
    feature = relationship("Feature")

    __table_args__ = (
        UniqueConstraint("property_id", "feature_id", name="uq_property_feature"),
    )
