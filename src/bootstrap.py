from __future__ import annotations

"""bootstrap.py

Process bootstrap for Discotube.

Rules:
1) Only bootstrap mutates os.environ for shared run context.
2) Call bootstrap_base_env() once at the entrypoint.
3) Call bootstrap_run_context() after argparse parsing, before init_logging().

Everything else treats environment variables as the source of truth.
"""

import os
from datetime import datetime

from env import CONFIG_DIR, _load_dotenv, reset_env_caches


_BOOTSTRAPPED = False


def bootstrap_base_env(env_file: str = ".env", required: bool = False) -> None:
    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return

    dotenv_path = CONFIG_DIR / env_file

    if not _load_dotenv(dotenv_path) and required:
        raise RuntimeError(
            f"Missing required env file: {dotenv_path}\n"
            "Expected config/.env relative to project root."
        )

    os.environ.setdefault(
        "DISCOTUBE_RUN_ID",
        datetime.now().strftime("%Y-%m-%d_%H-%M-%S"),
    )

    reset_env_caches()
    _BOOTSTRAPPED = True


def bootstrap_run_context(
    *,
    command: str,
    artist_id: str | None = None,
    playlist_id: str | None = None,
    verbose: bool | None = None,
    quiet: bool | None = None,
) -> None:
    """Establish run-scoped context used by logging and the stages."""

    os.environ["DISCOTUBE_COMMAND"] = command

    if artist_id:
        os.environ["DISCOTUBE_ARTIST_ID"] = str(artist_id)
    else:
        os.environ.pop("DISCOTUBE_ARTIST_ID", None)

    if playlist_id:
        os.environ["DISCOTUBE_PLAYLIST_ID"] = playlist_id

    if verbose is not None:
        os.environ["DISCOTUBE_VERBOSE"] = "1" if verbose else "0"
    if quiet is not None:
        os.environ["DISCOTUBE_QUIET"] = "1" if quiet else "0"

    # Context changes must invalidate cached env views.
    reset_env_caches()
