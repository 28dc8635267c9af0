"""Service configuration loaded from environment variables.

All knobs are read once at startup into a frozen ``Settings`` object that the
app factory hands to every component.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal, Mapping

PersistenceBackend = Literal["local", "remote"]

DEFAULT_PORT = 3001
DEFAULT_ADAPTER_TIMEOUT = 30.0
# RemoteAuth default: back the session up every five minutes
DEFAULT_BACKUP_INTERVAL_MS = 300_000


class ConfigError(RuntimeError):
    """Raised when the environment describes an unusable configuration."""


@dataclass(frozen=True)
class PhonePolicy:
    """Destination-id policy for bare phone numbers.

    Attributes:
        default_country_code: Prefix added to numbers of exactly
                              ``local_length`` digits.
        local_length: Length of a national number without country code.
        chat_id_suffix: Messaging-platform domain appended to the digits.
    """

    default_country_code: str = "51"
    local_length: int = 9
    chat_id_suffix: str = "@c.us"


@dataclass(frozen=True)
class BridgeConfig:
    """Connection settings for the browser-automation bridge."""

    base_url: str = "http://localhost:8080"
    api_key: str = ""
    webhook_url: str = "http://localhost:3001/webhooks/session"
    webhook_secret: str = ""
    # Local development only: accept events when webhook_secret is unset
    allow_unsigned_webhooks: bool = False
    headless: bool = True
    browser_args: tuple[str, ...] = (
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-accelerated-2d-canvas",
        "--no-first-run",
        "--disable-gpu",
    )


@dataclass(frozen=True)
class Settings:
    """Process-wide settings."""

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    persistence_backend: PersistenceBackend = "local"
    session_data_path: str = "./whatsapp-session"
    database_url: str | None = None
    client_id: str = "default"
    backup_sync_interval_ms: int = DEFAULT_BACKUP_INTERVAL_MS
    adapter_timeout: float = DEFAULT_ADAPTER_TIMEOUT
    qr_width: int = 300
    qr_margin: int = 2
    cors_allow_origins: tuple[str, ...] = ("*",)
    phone: PhonePolicy = field(default_factory=PhonePolicy)
    bridge: BridgeConfig = field(default_factory=BridgeConfig)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Raises:
            ConfigError: If a value is present but malformed.
        """
        env = os.environ if environ is None else environ

        backend = env.get("PERSISTENCE_BACKEND", "local").strip().lower()
        if backend not in ("local", "remote"):
            raise ConfigError(f"PERSISTENCE_BACKEND must be 'local' or 'remote', got {backend!r}")

        origins = tuple(
            o.strip() for o in env.get("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()
        )

        return cls(
            host=env.get("HOST", "0.0.0.0"),
            port=_int(env, "PORT", DEFAULT_PORT),
            persistence_backend=backend,  # type: ignore[arg-type]
            session_data_path=env.get("SESSION_DATA_PATH", "./whatsapp-session"),
            database_url=env.get("DATABASE_URL") or None,
            client_id=env.get("SESSION_CLIENT_ID", "default"),
            backup_sync_interval_ms=_int(
                env, "SESSION_BACKUP_INTERVAL_MS", DEFAULT_BACKUP_INTERVAL_MS
            ),
            adapter_timeout=_float(env, "ADAPTER_TIMEOUT_SECONDS", DEFAULT_ADAPTER_TIMEOUT),
            qr_width=_int(env, "QR_WIDTH", 300),
            qr_margin=_int(env, "QR_MARGIN", 2),
            cors_allow_origins=origins or ("*",),
            phone=PhonePolicy(
                default_country_code=env.get("PHONE_COUNTRY_CODE", "51"),
                local_length=_int(env, "PHONE_LOCAL_LENGTH", 9),
                chat_id_suffix=env.get("CHAT_ID_SUFFIX", "@c.us"),
            ),
            bridge=BridgeConfig(
                base_url=env.get("BRIDGE_BASE_URL", "http://localhost:8080").rstrip("/"),
                api_key=env.get("BRIDGE_API_KEY", ""),
                webhook_url=env.get(
                    "BRIDGE_WEBHOOK_URL", "http://localhost:3001/webhooks/session"
                ),
                webhook_secret=env.get("BRIDGE_WEBHOOK_SECRET", ""),
                allow_unsigned_webhooks=_bool(env, "BRIDGE_WEBHOOK_ALLOW_UNSIGNED", False),
                headless=_bool(env, "BRIDGE_HEADLESS", True),
            ),
        )


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None


def _bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")
