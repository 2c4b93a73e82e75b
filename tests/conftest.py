import pytest
from unittest.mock import MagicMock

from workflow_server.core import config
from workflow_server.database import factory
from workflow_server.database.public_client import close_public_client

ENV_VARS = [
    config.SERVICE_URL_ENV,
    config.SERVICE_ROLE_KEY_ENV,
    config.PUBLIC_URL_ENV,
    config.PUBLIC_ANON_KEY_ENV,
    config.APP_URL_ENV,
    config.APP_ENV_ENV,
    "WORKFLOW_INTERNAL_API_KEY",
]

SUPABASE_URL = "https://abcdefgh.supabase.co"
ANON_KEY = "anon-key-for-tests"
SERVICE_KEY = "service-role-key-for-tests"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Start every test from an empty configuration surface"""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    settings_file = tmp_path / "config.yaml"
    settings_file.write_text("logging:\n  enable_file_logging: false\n")
    monkeypatch.setenv("WORKFLOW_CONFIG", str(settings_file))


@pytest.fixture(autouse=True)
def reset_public_client():
    close_public_client()
    yield
    close_public_client()


@pytest.fixture
def public_env(monkeypatch):
    monkeypatch.setenv(config.PUBLIC_URL_ENV, SUPABASE_URL)
    monkeypatch.setenv(config.PUBLIC_ANON_KEY_ENV, ANON_KEY)


@pytest.fixture
def admin_env(monkeypatch):
    monkeypatch.setenv(config.PUBLIC_URL_ENV, SUPABASE_URL)
    monkeypatch.setenv(config.SERVICE_ROLE_KEY_ENV, SERVICE_KEY)


@pytest.fixture
def created_clients(monkeypatch):
    """Replace supabase.create_client; records every construction"""
    calls = []

    def fake_create_client(url, key, options=None):
        client = MagicMock(name=f"supabase-client-{len(calls)}")
        calls.append({"url": url, "key": key, "options": options, "client": client})
        return client

    monkeypatch.setattr(factory, "create_client", fake_create_client)
    return calls
