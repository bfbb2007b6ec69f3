from listings.models.lookups import OperationStatus, PropertyStatus, PropertyType
from listings.models.property import Property, PropertyImage
from listings.models.feature import Feature, FeatureAssignment

__all__ = [
    "OperationStatus",
    "PropertyStatus",
    "PropertyType",
    "Property",
    "PropertyImage",
    "Feature",
    "FeatureAssignment",
]
