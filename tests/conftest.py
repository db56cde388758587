import logging

import pytest


def _drop_app_handlers() -> None:
    # pytest installs its own capture handlers on the root logger; keep those.
    root = logging.getLogger()
    for h in list(root.handlers):
        if type(h).__module__.startswith("_pytest"):
            continue
        root.removeHandler(h)
        h.close()


@pytest.fixture(autouse=True)
def clean_env_and_logger(monkeypatch, tmp_path):
    """
    Ensure tests don't leak env, logger state, or cached env views, and that
    every file the code writes lands under tmp_path.
    """

    keys = [
        "DISCOTUBE_COMMAND",
        "DISCOTUBE_ARTIST_ID",
        "DISCOTUBE_RUN_ID",
        "DISCOTUBE_VERBOSE",
        "DISCOTUBE_QUIET",
        "DISCOTUBE_PLAYLIST_ID",
        "DISCOTUBE_PAGINATION",
        "DISCOTUBE_RELEASE_LIMIT",
        "DISCOTUBE_BACKOFF_BASE_SEC",
        "DISCOTUBE_MAX_ATTEMPTS",
        "DISCOTUBE_MAX_SUBMIT",
        "DISCOTUBE_DRY_RUN",
        "DISCOTUBE_SLEEP_SEC",
        "DISCOTUBE_MUTATION_SLEEP_SEC",
        "DISCOTUBE_OAUTH_PORT",
        "DISCOGS_TOKEN",
        "DISCOGS_API_URL",
        "DISCOGS_USER_AGENT",
        "LOG_LEVEL",
        "LOG_RETENTION",
    ]
    for k in keys:
        monkeypatch.delenv(k, raising=False)

    monkeypatch.setenv("DISCOTUBE_LOGS_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("DISCOTUBE_AUTH_DIR", str(tmp_path / "auth"))
    monkeypatch.setenv("DISCOTUBE_DATA_DIR", str(tmp_path / "data"))

    from env import reset_env_caches

    reset_env_caches()

    # Reset logger global state
    import logger.state

    logger.state.INITIALIZED = False
    logger.state.RUN_ID = None
    logger.state.LOG_FILE_PATH = None

    _drop_app_handlers()

    yield

    _drop_app_handlers()
    reset_env_caches()


@pytest.fixture
def sleeps():
    """Recorder passed as the backoff controller's sleep function."""
    return []


@pytest.fixture
def backoff(sleeps):
    from pipeline.backoff import BackoffController

    return BackoffController(base_delay=20, max_attempts=5, sleep=sleeps.append)
