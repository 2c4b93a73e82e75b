"""
Privileged Supabase client (service role).

Constructed once, when this module is first imported, and shared by every
admin request handler. Only the admin server imports this module; nothing
reachable from the public server may import it.

A missing service URL or key raises ConfigurationError at import time so a
misconfigured admin server never starts serving.
"""

from supabase import Client

from ..core.config import load_privileged_credentials
from .factory import SupabaseClientFactory

__all__ = ["supabase_admin"]

supabase_admin: Client = SupabaseClientFactory.create_admin_client(load_privileged_credentials())
