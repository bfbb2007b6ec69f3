"""
Read-model sync endpoint.

Admin-only: the caller must send the configured secret in ``x-admin-secret``.
The secret is checked before anything else is resolved, so an anonymous
caller never learns whether the read model is configured.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.orm import Session

from listings.core.config import settings
from listings.core.database import get_db
from listings.core.exceptions import ConfigurationError, PropertyNotFoundError
from listings.services.property_sync import sync_property
from listings.services.read_model import PropertyDocumentStore, get_document_store

router = APIRouter(tags=["sync"])
logger = logging.getLogger(__name__)


class SyncRequest(BaseModel):
    property_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("propertyId", "id", "property_id"),
    )


class SyncResponse(BaseModel):
    ok: bool
    id: str


def require_admin_secret(x_admin_secret: Optional[str] = Header(default=None)):
    if not settings.ADMIN_SECRET or x_admin_secret != settings.ADMIN_SECRET:
        raise HTTPException(status_code=401, detail="Unauthorized")


def document_store() -> PropertyDocumentStore:
    """Dependency wrapper so a missing MONGODB_URI becomes a 503."""
    try:
        return get_document_store()
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post(
    "/sync-property",
    response_model=SyncResponse,
    dependencies=[Depends(require_admin_secret)],
)
def sync_property_endpoint(
    request: SyncRequest,
    db: Session = Depends(get_db),
    store: PropertyDocumentStore = Depends(document_store),
):
    """
    Rebuild the search document for one property and push it to the read model.
    """
    if not request.property_id:
        raise HTTPException(status_code=400, detail="propertyId is required")

    try:
        document = sync_property(db, request.property_id, store)
    except PropertyNotFoundError:
        raise HTTPException(status_code=404, detail="Property not found")

    return SyncResponse(ok=True, id=document.id)
