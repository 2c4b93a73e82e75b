"""
Public (anonymous key) Supabase clients for user-facing code
"""

import logging
import threading
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from supabase import Client

from ..core.config import load_public_credentials
from .factory import PUBLIC_SESSION_POLICY, REQUEST_SESSION_POLICY, SessionPolicy, SupabaseClientFactory

logger = logging.getLogger("supabase")


class SessionUrlError(Exception):
    """The redirect URL carried an auth error instead of a session"""

    def __init__(self, error: str, description: Optional[str] = None):
        self.error = error
        self.description = description
        super().__init__(f"{error}: {description}" if description else error)


# Global public client instance
_public_client: Optional[Client] = None
_public_client_lock = threading.Lock()


def get_public_client() -> Client:
    """
    Get the process-wide public client, creating it on first use.

    Concurrent first calls construct exactly one client; every caller gets
    the same instance.
    """
    global _public_client

    client = _public_client
    if client is not None:
        return client

    with _public_client_lock:
        if _public_client is None:
            _public_client = SupabaseClientFactory.create_public_client(
                load_public_credentials(), PUBLIC_SESSION_POLICY
            )
            logger.info("✅ Public Supabase client initialized")
        return _public_client


def close_public_client() -> None:
    """Drop the cached public client (server shutdown)"""
    global _public_client

    with _public_client_lock:
        _public_client = None


def create_user_client(access_token: str) -> Client:
    """
    Create a short-lived client that acts as the caller.

    The token is sent as the bearer credential so row level security applies
    to the caller. Not cached: build one per request.
    """
    return SupabaseClientFactory.create_public_client(
        load_public_credentials(),
        REQUEST_SESSION_POLICY,
        headers={"Authorization": f"Bearer {access_token}"},
    )


def session_from_url(url: str, client: Optional[Client] = None,
                     policy: SessionPolicy = PUBLIC_SESSION_POLICY):
    """
    Install a session carried in a redirect URL fragment.

    OAuth and magic-link redirects deliver ``#access_token=...&refresh_token=...``.
    Returns the installed session, or None when the URL carries no session or
    the policy does not detect sessions in URLs.
    """
    if not policy.detect_session_in_url:
        return None

    fragment = urlsplit(url).fragment
    if not fragment:
        return None

    params = {k: v[0] for k, v in parse_qs(fragment).items() if v}
    if "error" in params:
        raise SessionUrlError(params["error"], params.get("error_description"))

    access_token = params.get("access_token")
    refresh_token = params.get("refresh_token")
    if not access_token or not refresh_token:
        return None

    client = client or get_public_client()
    response = client.auth.set_session(access_token, refresh_token)
    logger.info("Session restored from redirect URL")
    return response.session
