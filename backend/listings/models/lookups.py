"""
Lookup tables referenced by properties.

Small fixed enumerations (operation status, listing status, property type).
Rows are seeded by the migration catalog; see listings.migrations.seeds.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func

from listings.core.database import Base


class OperationStatus(Base):
    """What the listing is offered for: sale, rent, buy, lease."""

    __tablename__ = "property_operation_statuses"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False, unique=True)
    display_name = Column(String(100), nullable=False)
    description = Column(Text)
    color = Column(String(20))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<OperationStatus({self.id}, {self.name})>"


class PropertyStatus(Base):
    __tablename__ = "property_statuses"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False, unique=True)
    display_name = Column(String(100), nullable=False)
    description = Column(Text)
    color = Column(String(20), default="#000000")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<PropertyStatus({self.id}, {self.name})>"


class PropertyType(Base):
    __tablename__ = "property_types"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False, unique=True)
    display_name = Column(String(100), nullable=False)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<PropertyType({self.id}, {self.name})>"
