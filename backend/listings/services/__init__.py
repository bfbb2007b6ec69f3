from listings.services.document_builder import PropertyDocument, build_property_document
from listings.services.geocoding import GeocodingService
from listings.services.property_sync import sync_property
from listings.services.read_model import PropertyDocumentStore, get_document_store

__all__ = [
    "PropertyDocument",
    "build_property_document",
    "GeocodingService",
    "sync_property",
    "PropertyDocumentStore",
    "get_document_store",
]
