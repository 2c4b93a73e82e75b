"""
Admin (internal) catalog sync router
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Depends, Request
from pydantic import BaseModel, Field
from supabase import Client

from workflow_server.core.security import require_api_key
from workflow_server.services.catalog_sync import CatalogSyncService


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/catalog", tags=["catalog"])


class ProviderEvent(BaseModel):
    id: Optional[str] = None
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)


def get_admin_client(request: Request) -> Client:
    """Privileged client published on app state by the admin server"""
    return request.app.state.supabase_admin


@router.post("/events")
def receive_event(
    event: ProviderEvent,
    _: dict = Depends(require_api_key),
    client: Client = Depends(get_admin_client),
):
    """Apply a verified payments-provider event to the catalog tables."""
    service = CatalogSyncService(client)
    try:
        handled = service.handle_event(event.model_dump())
    except Exception:
        logger.exception(f"catalog event {event.type} failed")
        raise HTTPException(status_code=500, detail="Catalog sync failed")
    return {"received": True, "handled": handled}
