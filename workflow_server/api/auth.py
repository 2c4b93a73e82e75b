# workflow_server/api/auth.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Request

from workflow_server.core.security import get_session_token
from workflow_server.database.public_client import create_user_client

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/me")
def get_current_user(request: Request):
    """Resolve the signed-in user from the auth cookie."""
    token = get_session_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    client = create_user_client(token)

    try:
        response = client.auth.get_user(token)
    except Exception as e:
        logger.warning(f"Auth token rejected: {e}")
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = getattr(response, "user", None) if response else None
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        result = client.table("users").select("*").eq("id", user.id).single().execute()
    except Exception as e:
        logger.error(f"User fetch error: {e}")
        raise HTTPException(status_code=404, detail="User not found")

    user_row = result.data
    if not user_row:
        raise HTTPException(status_code=404, detail="User not found")

    return {
        "user": {
            "id": user_row.get("id"),
            "email": user_row.get("email"),
            "full_name": user_row.get("full_name"),
        },
        "organization": _load_organization(client, user.id),
    }


def _load_organization(client, user_id: str) -> Optional[Dict[str, Any]]:
    """Organization the user belongs to, or None when there is no membership"""
    try:
        result = (
            client.table("organization_members")
            .select("role, organizations!inner(id, name, slug)")
            .eq("user_id", user_id)
            .single()
            .execute()
        )
    except Exception as e:
        logger.warning(f"Organization fetch error: {e}")
        return None

    member = result.data
    if not member:
        return None

    org = member.get("organizations")
    # Embedded relation comes back as an object or a one-element list
    if isinstance(org, list):
        org = org[0] if org else None
    if not org:
        return None

    return {
        "id": org.get("id"),
        "name": org.get("name"),
        "slug": org.get("slug"),
        "role": member.get("role"),
    }
