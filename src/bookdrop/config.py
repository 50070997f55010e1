# ABOUTME: Runtime configuration for bookdrop, read from the environment and an optional .env file.
# ABOUTME: Settings is passed explicitly into the services instead of living in module globals.

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from bookdrop.metadata.gemini import DEFAULT_MODEL
from bookdrop.metadata.http import DEFAULT_CONNECT_TIMEOUT, DEFAULT_REQUEST_TIMEOUT


class ConfigError(Exception):
    """Raised when a configuration value cannot be parsed."""


@dataclass(frozen=True)
class Settings:
    """Credentials, file locations, and timeouts."""

    hardcover_token: str = ""
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_MODEL
    epub_dir: Path = Path("epubs")
    ledger_file: Path = Path("processed_isbns.txt")
    debug_log_file: Path = Path("debug.log")
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


def _float_setting(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def settings_from_env(env: Mapping[str, str]) -> Settings:
    """Build Settings from a mapping of environment variables."""
    defaults = Settings()
    return Settings(
        hardcover_token=env.get("HARDCOVER_BEARER_TOKEN", "").strip(),
        gemini_api_key=env.get("GEMINI_API_KEY", "").strip(),
        gemini_model=env.get("GEMINI_MODEL", "").strip() or defaults.gemini_model,
        epub_dir=Path(env.get("EPUB_DIR") or defaults.epub_dir),
        ledger_file=Path(env.get("ISBN_LIST_FILE") or defaults.ledger_file),
        debug_log_file=Path(env.get("DEBUG_LOG_FILE") or defaults.debug_log_file),
        connect_timeout=_float_setting(env, "BOOKDROP_CONNECT_TIMEOUT", defaults.connect_timeout),
        request_timeout=_float_setting(env, "BOOKDROP_REQUEST_TIMEOUT", defaults.request_timeout),
    )


def load_settings(env_file: Path | None = None) -> Settings:
    """Load a .env file (if present) into the environment, then read Settings.

    Variables already set in the environment win over the file.
    """
    load_dotenv(dotenv_path=env_file)
    return settings_from_env(os.environ)
