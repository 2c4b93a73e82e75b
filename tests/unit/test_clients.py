import importlib
import sys
import threading
import time
from unittest.mock import MagicMock

import pytest

from workflow_server.core.config import ConfigurationError
from workflow_server.database import factory, public_client
from workflow_server.database.factory import (
    ADMIN_SESSION_POLICY, PUBLIC_SESSION_POLICY, REQUEST_SESSION_POLICY, SupabaseClientFactory,
)
from workflow_server.database.public_client import (
    SessionUrlError, create_user_client, get_public_client, session_from_url,
)

from conftest import ANON_KEY, SERVICE_KEY, SUPABASE_URL

ADMIN_MODULE = "workflow_server.database.admin_client"


def _import_admin_client(monkeypatch):
    monkeypatch.delitem(sys.modules, ADMIN_MODULE, raising=False)
    return importlib.import_module(ADMIN_MODULE)


class TestSessionPolicies:
    def test_admin_policy_keeps_no_session(self):
        assert ADMIN_SESSION_POLICY.persist_session is False
        assert ADMIN_SESSION_POLICY.auto_refresh_token is False
        assert ADMIN_SESSION_POLICY.detect_session_in_url is False

    def test_public_policy_keeps_browser_session(self):
        assert PUBLIC_SESSION_POLICY.persist_session is True
        assert PUBLIC_SESSION_POLICY.auto_refresh_token is True
        assert PUBLIC_SESSION_POLICY.detect_session_in_url is True

    def test_client_options_follow_policy(self):
        options = SupabaseClientFactory.client_options(ADMIN_SESSION_POLICY)
        assert options.persist_session is False
        assert options.auto_refresh_token is False

    def test_client_options_extra_headers(self):
        options = SupabaseClientFactory.client_options(
            REQUEST_SESSION_POLICY, headers={"Authorization": "Bearer abc"}
        )
        assert options.headers["Authorization"] == "Bearer abc"


class TestAdminClient:
    def test_missing_service_key_fails_at_import(self, monkeypatch, created_clients):
        monkeypatch.setenv("NEXT_PUBLIC_SUPABASE_URL", SUPABASE_URL)

        with pytest.raises(ConfigurationError, match="SUPABASE_SERVICE_ROLE_KEY"):
            _import_admin_client(monkeypatch)

        assert created_clients == []
        assert ADMIN_MODULE not in sys.modules

    def test_missing_url_fails_at_import(self, monkeypatch, created_clients):
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", SERVICE_KEY)

        with pytest.raises(ConfigurationError):
            _import_admin_client(monkeypatch)

        assert created_clients == []

    def test_builds_one_non_persistent_client(self, monkeypatch, admin_env, created_clients):
        module = _import_admin_client(monkeypatch)

        assert len(created_clients) == 1
        call = created_clients[0]
        assert module.supabase_admin is call["client"]
        assert call["url"] == SUPABASE_URL
        assert call["key"] == SERVICE_KEY
        assert call["options"].persist_session is False
        assert call["options"].auto_refresh_token is False

    def test_sole_export(self, monkeypatch, admin_env, created_clients):
        module = _import_admin_client(monkeypatch)
        assert module.__all__ == ["supabase_admin"]


class TestPublicClient:
    def test_same_instance_every_call(self, public_env, created_clients):
        clients = [get_public_client() for _ in range(5)]

        assert all(c is clients[0] for c in clients)
        assert len(created_clients) == 1

    def test_uses_anon_key_and_session_policy(self, public_env, created_clients):
        get_public_client()

        call = created_clients[0]
        assert call["url"] == SUPABASE_URL
        assert call["key"] == ANON_KEY
        assert call["options"].persist_session is True
        assert call["options"].auto_refresh_token is True

    def test_missing_config_fails_fast(self, created_clients):
        with pytest.raises(ConfigurationError):
            get_public_client()

        assert created_clients == []
        assert public_client._public_client is None

    def test_concurrent_first_use_builds_once(self, public_env, monkeypatch):
        built = []

        def slow_create_client(url, key, options=None):
            time.sleep(0.02)
            client = MagicMock()
            built.append(client)
            return client

        monkeypatch.setattr(factory, "create_client", slow_create_client)

        barrier = threading.Barrier(16)
        results = []

        def worker():
            barrier.wait()
            results.append(get_public_client())

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(built) == 1
        assert len(results) == 16
        assert all(r is built[0] for r in results)

    def test_close_drops_cached_client(self, public_env, created_clients):
        first = get_public_client()
        public_client.close_public_client()
        second = get_public_client()

        assert first is not second
        assert len(created_clients) == 2


class TestUserClient:
    def test_carries_bearer_token(self, public_env, created_clients):
        client = create_user_client("user-access-token")

        call = created_clients[0]
        assert client is call["client"]
        assert call["key"] == ANON_KEY
        assert call["options"].headers["Authorization"] == "Bearer user-access-token"
        assert call["options"].persist_session is False
        assert call["options"].auto_refresh_token is False

    def test_not_cached(self, public_env, created_clients):
        assert create_user_client("a") is not create_user_client("b")
        assert len(created_clients) == 2


class TestSessionFromUrl:
    def test_installs_fragment_session(self):
        client = MagicMock()
        url = "https://app.example.com/auth/callback#access_token=at-1&refresh_token=rt-1&token_type=bearer"

        session = session_from_url(url, client=client)

        client.auth.set_session.assert_called_once_with("at-1", "rt-1")
        assert session is client.auth.set_session.return_value.session

    def test_defaults_to_public_client(self, public_env, created_clients):
        url = "https://app.example.com/#access_token=at-1&refresh_token=rt-1"

        session_from_url(url)

        shared = created_clients[0]["client"]
        shared.auth.set_session.assert_called_once_with("at-1", "rt-1")

    def test_no_fragment(self):
        client = MagicMock()
        assert session_from_url("https://app.example.com/auth/callback?code=xyz", client=client) is None
        client.auth.set_session.assert_not_called()

    def test_partial_fragment(self):
        client = MagicMock()
        assert session_from_url("https://app.example.com/#access_token=at-1", client=client) is None
        client.auth.set_session.assert_not_called()

    def test_error_fragment(self):
        client = MagicMock()
        url = "https://app.example.com/#error=access_denied&error_description=Email+link+is+invalid"

        with pytest.raises(SessionUrlError) as exc_info:
            session_from_url(url, client=client)

        assert exc_info.value.error == "access_denied"
        assert exc_info.value.description == "Email link is invalid"
        client.auth.set_session.assert_not_called()

    def test_policy_without_url_detection(self):
        client = MagicMock()
        url = "https://app.example.com/#access_token=at-1&refresh_token=rt-1"

        assert session_from_url(url, client=client, policy=REQUEST_SESSION_POLICY) is None
        client.auth.set_session.assert_not_called()
