from __future__ import annotations
from pydantic import BaseModel, ConfigDict, SecretStr
from typing import List, Optional, Dict
import os, yaml, pathlib, logging

logger = logging.getLogger(__name__)

# Environment variable names shared with the frontend deployment
SERVICE_URL_ENV = "SUPABASE_URL"
SERVICE_ROLE_KEY_ENV = "SUPABASE_SERVICE_ROLE_KEY"
PUBLIC_URL_ENV = "NEXT_PUBLIC_SUPABASE_URL"
PUBLIC_ANON_KEY_ENV = "NEXT_PUBLIC_SUPABASE_ANON_KEY"
APP_URL_ENV = "NEXT_PUBLIC_APP_URL"
APP_ENV_ENV = "APP_ENV"


class ConfigurationError(RuntimeError):
    """Raised when a required configuration value is absent"""


class PrivilegedCredentials(BaseModel):
    """Service-role credential pair. Server-only; bypasses row level security."""
    model_config = ConfigDict(frozen=True)

    url: str
    service_key: SecretStr


class PublicCredentials(BaseModel):
    """Anonymous credential pair, safe for user-facing code."""
    model_config = ConfigDict(frozen=True)

    url: str
    anon_key: str


class ServerCfg(BaseModel):
    bind: str = "127.0.0.1"
    public_port: int = 8080
    admin_port: int = 8001
    cors_origins: List[str] = ["*"]
    debug_routes: bool = True

class LoggingCfg(BaseModel):
    level: str = "INFO"
    log_dir: Optional[str] = None
    enable_file_logging: bool = True
    enable_console_logging: bool = True
    structured: bool = False

class Settings(BaseModel):
    server: ServerCfg = ServerCfg()
    logging: LoggingCfg = LoggingCfg()


def _env(name: str) -> Optional[str]:
    return (os.getenv(name, "") or "").strip() or None


def load_settings() -> Settings:
    # Get config path from environment or use default
    config_path = os.environ.get("WORKFLOW_CONFIG", "ops/config.yaml")

    # If it's a relative path, make it relative to the project root
    if not os.path.isabs(config_path):
        current_dir = pathlib.Path(__file__).parent
        project_root = current_dir.parent.parent
        config_path = project_root / config_path

    path = pathlib.Path(config_path)
    if not path.exists():
        logger.debug(f"No settings file at {path}, using defaults")
        return Settings()

    data = yaml.safe_load(path.read_text()) or {}
    return Settings(**data)


def load_privileged_credentials() -> PrivilegedCredentials:
    """
    Read the service-role credential pair from the environment.

    The service URL defaults to the public project URL when SUPABASE_URL is
    not set separately.
    """
    url = _env(SERVICE_URL_ENV) or _env(PUBLIC_URL_ENV)
    key = _env(SERVICE_ROLE_KEY_ENV)

    missing = []
    if url is None:
        missing.append(f"{SERVICE_URL_ENV} (or {PUBLIC_URL_ENV})")
    if key is None:
        missing.append(SERVICE_ROLE_KEY_ENV)
    if missing:
        raise ConfigurationError(
            f"Privileged Supabase client is not configured; missing: {', '.join(missing)}"
        )

    return PrivilegedCredentials(url=url, service_key=SecretStr(key))


def load_public_credentials() -> PublicCredentials:
    """Read the anonymous credential pair from the environment."""
    url = _env(PUBLIC_URL_ENV)
    key = _env(PUBLIC_ANON_KEY_ENV)

    missing = [name for name, value in ((PUBLIC_URL_ENV, url), (PUBLIC_ANON_KEY_ENV, key)) if value is None]
    if missing:
        raise ConfigurationError(
            f"Public Supabase client is not configured; missing: {', '.join(missing)}"
        )

    return PublicCredentials(url=url, anon_key=key)


def environment_status() -> Dict[str, str]:
    """
    Report which configuration values are present without revealing secrets.

    Secret-bearing and endpoint fields report "SET"/"MISSING"; the runtime
    environment and app base URL are reported literally.
    """
    def _presence(name: str) -> str:
        return "SET" if _env(name) else "MISSING"

    return {
        APP_ENV_ENV: _env(APP_ENV_ENV) or "development",
        PUBLIC_URL_ENV: _presence(PUBLIC_URL_ENV),
        PUBLIC_ANON_KEY_ENV: _presence(PUBLIC_ANON_KEY_ENV),
        SERVICE_ROLE_KEY_ENV: _presence(SERVICE_ROLE_KEY_ENV),
        APP_URL_ENV: _env(APP_URL_ENV) or "NOT SET",
    }
