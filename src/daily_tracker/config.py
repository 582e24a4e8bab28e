# src/daily_tracker/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Components receive settings injected; nothing reads os.environ on its own.
- Sensible local defaults: everything lives under a gitignored data dir.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "DAILY"

ON_CORRUPT_POLICIES = ("reset", "fail")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = (os.getenv(name) or "").strip().lower()
    return raw if raw in choices else default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage ----
    data_dir: Path
    data_file: Path
    # What to do with an unreadable document: "reset" (start fresh) or "fail".
    on_corrupt: str

    # ---- Calendar ----
    # IANA zone name; "today" is always computed in this zone.
    timezone: str

    # ---- Connectors ----
    http_enabled: bool
    host: str
    port: int
    console_enabled: bool

    # ---- Rollover trigger ----
    # 0 disables the periodic check (rollover still happens lazily on access).
    rollover_interval_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "daily-tracker")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/daily"))
        data_file = _env_path(_k("DATA_FILE"), data_dir / "tasks.json")
        on_corrupt = _env_choice(_k("ON_CORRUPT"), ON_CORRUPT_POLICIES, "reset")

        timezone = (_env(_k("TIMEZONE"), "UTC") or "UTC").strip()

        http_enabled = _env_bool(_k("HTTP_ENABLED"), True)
        host = _env(_k("HOST"), "127.0.0.1").strip() or "127.0.0.1"
        # PORT is honoured for platforms that inject it.
        port_raw = _first_env(_k("PORT"), "PORT", default="5000") or "5000"
        try:
            port = int(port_raw)
        except ValueError:
            port = 5000
        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), False)

        rollover_interval_seconds = max(0.0, _env_float(_k("ROLLOVER_INTERVAL_SECONDS"), 0.0))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            data_file=data_file,
            on_corrupt=on_corrupt,
            timezone=timezone,
            http_enabled=http_enabled,
            host=host,
            port=port,
            console_enabled=console_enabled,
            rollover_interval_seconds=rollover_interval_seconds,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
