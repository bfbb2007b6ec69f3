"""Query cache maintenance."""

from fastapi import APIRouter

from listings.services.cache import clear_cache, get_cache_stats

router = APIRouter(prefix="/cache", tags=["cache"])


@router.get("/stats")
def cache_statistics():
    """
    Get query cache statistics.
    """
    return get_cache_stats()


@router.post("/refresh")
def refresh_cache():
    """
    Drop every cached listing, property and reference entry.
    """
    clear_cache()
    return {"status": "success", "message": "Query cache cleared"}
