from __future__ import annotations

import os
from pathlib import Path

from env.env import PROJECT_ROOT

# ---------------------------------------------------------------------
# Base directories (override-friendly)
# ---------------------------------------------------------------------


def _resolve_dir(env_var: str, default: Path) -> Path:
    """
    Resolve a directory path from an environment variable or default.
    Ensures the directory exists.
    """
    raw = os.environ.get(env_var)
    path = Path(raw).expanduser().resolve() if raw else default
    path.mkdir(parents=True, exist_ok=True)
    return path


# ---------------------------------------------------------------------
# Public paths (resolved at call time so overrides apply per run)
# ---------------------------------------------------------------------


def logs_dir() -> Path:
    return _resolve_dir("DISCOTUBE_LOGS_DIR", PROJECT_ROOT / "logs")


def auth_dir() -> Path:
    """OAuth tokens and client secrets."""
    return _resolve_dir("DISCOTUBE_AUTH_DIR", PROJECT_ROOT / "auth")


def data_dir() -> Path:
    """Checkpoint documents."""
    return _resolve_dir("DISCOTUBE_DATA_DIR", PROJECT_ROOT / "data")


# ---------------------------------------------------------------------
# Utility / internal paths
# ---------------------------------------------------------------------


def auth_token_file(filename: str = "oauth_token.json") -> Path:
    return auth_dir() / filename


def auth_client_secrets_file(filename: str = "client_secret.json") -> Path:
    return auth_dir() / filename


def data_file(name: str) -> Path:
    return data_dir() / name


# ---------------------------------------------------------------------
# Log layout helpers
# ---------------------------------------------------------------------


def module_logs_dir(command: str) -> Path:
    """
    Base log directory for a CLI command (e.g. collect, push).
    """
    path = logs_dir() / command
    path.mkdir(parents=True, exist_ok=True)
    return path


def artist_logs_dir(command: str, artist: str) -> Path:
    """
    Log directory for a specific artist under a command.
    """
    path = logs_dir() / command / artist
    path.mkdir(parents=True, exist_ok=True)
    return path
