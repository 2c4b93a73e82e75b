from fastapi import Header, HTTPException, Depends, Request
from typing import Optional, Dict
import os
import secrets

# Cookie set by the frontend once a user signs in
AUTH_COOKIE = "supabase-auth-token"
# Cookie set by the frontend's mock sign-in during local development
MOCK_USER_COOKIE = "mock-user-id"

INTERNAL_API_KEY_ENV = "WORKFLOW_INTERNAL_API_KEY"

def get_session_token(request: Request) -> Optional[str]:
    """Access token from the auth cookie, if any"""
    return request.cookies.get(AUTH_COOKIE) or None

def verify_api_key(x_api_key: Optional[str] = Header(None)) -> bool:
    """Verify the internal API key for protected endpoints"""
    if not x_api_key:
        raise HTTPException(
            status_code=401,
            detail={
                "error": "Authentication required",
                "message": "API key is required for this endpoint",
                "suggestion": "Include X-API-Key header with valid API key"
            }
        )

    internal_api_key = os.getenv(INTERNAL_API_KEY_ENV)
    if not internal_api_key:
        raise HTTPException(
            status_code=500,
            detail={"error": "Server not configured", "message": f"{INTERNAL_API_KEY_ENV} not set"},
        )
    if not secrets.compare_digest(x_api_key, internal_api_key):
        raise HTTPException(
            status_code=403,
            detail={
                "error": "Invalid API key",
                "message": "The provided API key is invalid",
                "suggestion": "Check your API key and try again"
            }
        )

    return True

def require_api_key(_: bool = Depends(verify_api_key)) -> Dict:
    """Dependency for internal-only endpoints. Returns a minimal actor dict."""
    return {"actor": "internal"}
