"""Search over the denormalized read model."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from listings.api.routes.sync import document_store
from listings.services.read_model import PropertyDocumentStore, SearchFilters, SearchResult

router = APIRouter(prefix="/search", tags=["search"])


@router.get("/", response_model=SearchResult)
def search_properties(
    q: Optional[str] = None,
    city: Optional[str] = None,
    price_min: Optional[float] = None,
    price_max: Optional[float] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    store: PropertyDocumentStore = Depends(document_store),
):
    """
    Newest-first search by free text (title/description), city and price range.
    """
    filters = SearchFilters(q=q, city=city, price_min=price_min, price_max=price_max)
    return store.search(filters, page=page, page_size=page_size)
