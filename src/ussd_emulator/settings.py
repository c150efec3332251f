from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


DEFAULT_CONFIG_FILE = "ussd-config.json"
DEFAULT_SESSION_TIMEOUT_SECONDS = 5 * 60
DEFAULT_SWEEP_INTERVAL_SECONDS = 60
DEFAULT_CDP_TIMEOUT_SECONDS = 10


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    config_file: str = DEFAULT_CONFIG_FILE
    session_timeout: int = DEFAULT_SESSION_TIMEOUT_SECONDS
    sweep_interval: int = DEFAULT_SWEEP_INTERVAL_SECONDS
    cdp_api_key: str | None = None
    cdp_pass_key: str | None = None
    cdp_endpoint: str | None = None
    cdp_timeout: int = DEFAULT_CDP_TIMEOUT_SECONDS
    secret_key: str = "dev-secret-key-change-me"

    @property
    def cdp_configured(self) -> bool:
        return bool(self.cdp_api_key and self.cdp_pass_key and self.cdp_endpoint)

    @classmethod
    def from_env(cls) -> Settings:
        load_dotenv()
        return cls(
            config_file=os.getenv("USSD_CONFIG_FILE", DEFAULT_CONFIG_FILE),
            session_timeout=_get_int_env("USSD_SESSION_TIMEOUT_SECONDS", DEFAULT_SESSION_TIMEOUT_SECONDS),
            sweep_interval=_get_int_env("USSD_SWEEP_INTERVAL_SECONDS", DEFAULT_SWEEP_INTERVAL_SECONDS),
            cdp_api_key=os.getenv("CDP_API_KEY") or None,
            cdp_pass_key=os.getenv("CDP_PASS_KEY") or None,
            cdp_endpoint=os.getenv("CDP_ENDPOINT") or None,
            cdp_timeout=_get_int_env("CDP_TIMEOUT_SECONDS", DEFAULT_CDP_TIMEOUT_SECONDS),
            # For local dev only: fallback to a constant if not set.
            secret_key=os.getenv("FLASK_SECRET_KEY", "dev-secret-key-change-me"),
        )
