"""
Supabase Client Factory for the workflow server
Builds backend clients from a credential pair and a session policy
"""

from dataclasses import dataclass
from typing import Dict, Optional
import logging

from supabase import Client, ClientOptions, create_client

from ..core.config import PrivilegedCredentials, PublicCredentials

logger = logging.getLogger("supabase")


@dataclass(frozen=True)
class SessionPolicy:
    """How a client manages the auth session it holds"""
    persist_session: bool
    auto_refresh_token: bool
    detect_session_in_url: bool


# Admin calls are one-shot; there is no interactive session to keep alive
ADMIN_SESSION_POLICY = SessionPolicy(
    persist_session=False,
    auto_refresh_token=False,
    detect_session_in_url=False,
)

# Browser-style sign-in, including OAuth redirects that carry tokens in the fragment
PUBLIC_SESSION_POLICY = SessionPolicy(
    persist_session=True,
    auto_refresh_token=True,
    detect_session_in_url=True,
)

# Per-request clients acting with a caller's access token
REQUEST_SESSION_POLICY = SessionPolicy(
    persist_session=False,
    auto_refresh_token=False,
    detect_session_in_url=False,
)


class SupabaseClientFactory:
    """Factory for creating Supabase clients"""

    @staticmethod
    def client_options(policy: SessionPolicy, headers: Optional[Dict[str, str]] = None) -> ClientOptions:
        options = ClientOptions(
            auto_refresh_token=policy.auto_refresh_token,
            persist_session=policy.persist_session,
        )
        if headers:
            options.headers = {**options.headers, **headers}
        return options

    @staticmethod
    def create_admin_client(credentials: PrivilegedCredentials) -> Client:
        """Create the service-role client"""
        logger.info(f"Creating privileged Supabase client for {credentials.url}")
        client = create_client(
            credentials.url,
            credentials.service_key.get_secret_value(),
            options=SupabaseClientFactory.client_options(ADMIN_SESSION_POLICY),
        )
        return client

    @staticmethod
    def create_public_client(
        credentials: PublicCredentials,
        policy: SessionPolicy = PUBLIC_SESSION_POLICY,
        headers: Optional[Dict[str, str]] = None,
    ) -> Client:
        """Create an anonymous-key client with the given session policy"""
        logger.debug(
            f"Creating public Supabase client for {credentials.url} "
            f"(persist={policy.persist_session}, refresh={policy.auto_refresh_token})"
        )
        client = create_client(
            credentials.url,
            credentials.anon_key,
            options=SupabaseClientFactory.client_options(policy, headers),
        )
        return client

