"""
MongoDB read model holding the denormalized property documents.

Each stored record is ``{property_id, doc, updated_at}``; writes are upserts
keyed on property_id so a re-sync replaces the previous document.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.collection import Collection

from listings.core.config import settings
from listings.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SearchFilters(BaseModel):
    q: Optional[str] = None
    city: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None


class SearchResult(BaseModel):
    results: list[dict]
    page: int
    page_size: int
    total: int


class PropertyDocumentStore:
    """Thin wrapper over the ``property_documents`` collection."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def upsert(self, property_id: str, doc: dict):
        """Insert or replace the document for one property."""
        self.collection.update_one(
            {"property_id": property_id},
            {"$set": {
                "property_id": property_id,
                "doc": doc,
                "updated_at": datetime.now(timezone.utc),
            }},
            upsert=True,
        )
        logger.debug(f"Upserted read-model document for {property_id}")

    def get(self, property_id: str) -> Optional[dict]:
        return self.collection.find_one({"property_id": property_id}, {"_id": 0})

    def delete(self, property_id: str) -> bool:
        result = self.collection.delete_one({"property_id": property_id})
        return result.deleted_count > 0

    @staticmethod
    def build_query(filters: SearchFilters) -> dict:
        query: dict = {}
        if filters.city:
            query["doc.neighborhood.city"] = filters.city

        price: dict = {}
        if filters.price_min is not None:
            price["$gte"] = filters.price_min
        if filters.price_max is not None:
            price["$lte"] = filters.price_max
        if price:
            query["doc.price"] = price

        if filters.q:
            pattern = re.escape(filters.q)
            query["$or"] = [
                {"doc.title": {"$regex": pattern, "$options": "i"}},
                {"doc.description": {"$regex": pattern, "$options": "i"}},
            ]
        return query

    def search(self, filters: SearchFilters, page: int = 1, page_size: int = 20) -> SearchResult:
        """Newest-first paginated search over the stored documents."""
        page = max(page, 1)
        query = self.build_query(filters)
        cursor = (
            self.collection.find(query, {"_id": 0})
            .sort("updated_at", -1)
            .skip((page - 1) * page_size)
            .limit(page_size)
        )
        results = list(cursor)
        total = self.collection.count_documents(query)
        return SearchResult(results=results, page=page, page_size=page_size, total=total)


_store: Optional[PropertyDocumentStore] = None


def get_document_store() -> PropertyDocumentStore:
    """Lazily connect to MongoDB using MONGODB_URI / MONGODB_DB."""
    global _store
    if _store is None:
        if not settings.MONGODB_URI:
            raise ConfigurationError("MONGODB_URI is not set")
        client = MongoClient(settings.MONGODB_URI)
        database = client[settings.mongodb_database]
        _store = PropertyDocumentStore(database[settings.MONGODB_COLLECTION])
        logger.info(f"Connected read model to {settings.mongodb_database}.{settings.MONGODB_COLLECTION}")
    return _store
