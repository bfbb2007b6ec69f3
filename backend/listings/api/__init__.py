from fastapi import APIRouter
from listings.api.routes import (
    properties,
    images,
    lookups,
    sync,
    search,
    cache,
)

api_router = APIRouter()

api_router.include_router(properties.router)
api_router.include_router(images.router)
api_router.include_router(lookups.router)
api_router.include_router(sync.router)
api_router.include_router(search.router)
api_router.include_router(cache.router)
