from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

import config

# ------------------------------------------------------------
# Paths
# ------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"

# ------------------------------------------------------------
# dotenv (read-only helper, bootstrap owns usage)
# ------------------------------------------------------------


def _load_dotenv(path: Path) -> bool:
    """
    Load KEY=VALUE pairs from a dotenv file.
    Never overrides variables already present in os.environ.
    """
    if not path.exists():
        return False
    return load_dotenv(path, override=False)


# ------------------------------------------------------------
# Errors / helpers
# ------------------------------------------------------------


class ConfigError(RuntimeError):
    pass


_PLAYLIST_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _as_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(v: str, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return default


def _as_float(v: str, default: float) -> float:
    try:
        return float(v)
    except Exception:
        return default


def validate_playlist_id(playlist_id: str) -> str:
    playlist_id = (playlist_id or "").strip()
    if not _PLAYLIST_ID_RE.match(playlist_id):
        raise ConfigError(
            f"Invalid playlist id: {playlist_id!r}. "
            "Must contain only alphanumeric characters, hyphens, and underscores."
        )
    return playlist_id


# ------------------------------------------------------------
# Logging environment (SAFE ANYWHERE)
# ------------------------------------------------------------


@dataclass(frozen=True)
class LoggingEnvironment:
    log_level: str
    log_retention: int
    verbose: bool
    quiet: bool
    interactive: bool


def get_logging_env() -> LoggingEnvironment:
    log_level = os.environ.get("LOG_LEVEL", "INFO")
    log_retention = _as_int(os.environ.get("LOG_RETENTION", "30"), 30)

    verbose = _as_bool(os.environ.get("DISCOTUBE_VERBOSE", "0"))
    quiet = _as_bool(os.environ.get("DISCOTUBE_QUIET", "0"))

    interactive = not quiet and sys.stdin.isatty() and sys.stdout.isatty()

    return LoggingEnvironment(
        log_level=log_level,
        log_retention=log_retention,
        verbose=verbose,
        quiet=quiet,
        interactive=interactive,
    )


# ------------------------------------------------------------
# Full runtime environment
# ------------------------------------------------------------


class Environment:
    def __init__(self):
        # Logging snapshot (immutable)
        self._logging = get_logging_env()

        # ---- SOURCE (Discogs) ----
        self.discogs_api_url = os.environ.get(
            "DISCOGS_API_URL", config.DEFAULT_DISCOGS_API_URL
        ).rstrip("/")
        self.discogs_user_agent = os.environ.get(
            "DISCOGS_USER_AGENT", config.DEFAULT_DISCOGS_USER_AGENT
        )
        self.discogs_token = os.environ.get("DISCOGS_TOKEN", "").strip()
        self.pagination = _as_bool(os.environ.get("DISCOTUBE_PAGINATION", "1"))
        self.release_limit = _as_int(
            os.environ.get("DISCOTUBE_RELEASE_LIMIT", "0"), 0
        )

        # ---- HTTP / BACKOFF ----
        self.request_timeout = _as_int(
            os.environ.get("DISCOTUBE_REQUEST_TIMEOUT", "30"), 30
        )
        self.sleep_sec = _as_float(os.environ.get("DISCOTUBE_SLEEP_SEC", "0"), 0.0)
        self.mutation_sleep_sec = _as_float(
            os.environ.get("DISCOTUBE_MUTATION_SLEEP_SEC", "1.0"), 1.0
        )
        self.backoff_base_sec = _as_float(
            os.environ.get("DISCOTUBE_BACKOFF_BASE_SEC", ""),
            config.DEFAULT_BACKOFF_BASE_SEC,
        )
        self.max_attempts = _as_int(
            os.environ.get("DISCOTUBE_MAX_ATTEMPTS", ""), config.DEFAULT_MAX_ATTEMPTS
        )
        if self.max_attempts < 1:
            raise ConfigError("DISCOTUBE_MAX_ATTEMPTS must be at least 1")

        # ---- DESTINATION (YouTube) ----
        self.playlist_id = os.environ.get("DISCOTUBE_PLAYLIST_ID", "").strip()
        self.oauth_port = _as_int(os.environ.get("DISCOTUBE_OAUTH_PORT", "0"), 0)

        # ---- RUN CONTEXT ----
        self.command = os.environ.get("DISCOTUBE_COMMAND", "bootstrap")
        self.artist_id = os.environ.get("DISCOTUBE_ARTIST_ID", "")

        # ---- RUN FLAGS ----
        self.max_submit = _as_int(os.environ.get("DISCOTUBE_MAX_SUBMIT", "0"), 0)
        self.dry_run = _as_bool(os.environ.get("DISCOTUBE_DRY_RUN", "0"))

    def as_dict(self) -> dict:
        return {
            "Logging": {
                "log_level": self.log_level,
                "log_retention": self.log_retention,
                "verbose": self.verbose,
                "quiet": self.quiet,
                "interactive": self.interactive,
            },
            "Run": {
                "command": self.command,
                "artist_id": self.artist_id,
                "playlist_id": self.playlist_id,
                "dry_run": self.dry_run,
                "max_submit": self.max_submit,
            },
            "Discogs": {
                "api_url": self.discogs_api_url,
                "user_agent": self.discogs_user_agent,
                "token": "set" if self.discogs_token else "not set",
                "pagination": self.pagination,
                "release_limit": self.release_limit,
            },
            "Backoff": {
                "base_sec": self.backoff_base_sec,
                "max_attempts": self.max_attempts,
                "request_timeout": self.request_timeout,
                "sleep_sec": self.sleep_sec,
                "mutation_sleep_sec": self.mutation_sleep_sec,
            },
        }

    # ---- logging passthrough ----
    @property
    def log_level(self) -> str:
        return self._logging.log_level

    @property
    def log_retention(self) -> int:
        return self._logging.log_retention

    @property
    def verbose(self) -> bool:
        return self._logging.verbose

    @property
    def quiet(self) -> bool:
        return self._logging.quiet

    @property
    def interactive(self) -> bool:
        return self._logging.interactive


_ENV: Optional[Environment] = None


def reset_env_caches() -> None:
    """Invalidate cached views of environment variables."""
    global _ENV
    _ENV = None


def get_env() -> Environment:
    global _ENV
    if _ENV is None:
        _ENV = Environment()
    return _ENV
