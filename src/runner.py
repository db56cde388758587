from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from branding import DISCOTUBE_HEADER, DISCOTUBE_SECTION_END
from env import Environment, get_env
from env.paths import data_file
from logger import get_logger
from pipeline.backoff import BackoffController
from pipeline.checkpoint import Artist, CheckpointError, CheckpointStore
from pipeline.errors import TargetMissing
from pipeline.paginator import Paginator
from providers.base import PlaylistDestination, SourceCatalog
from stages.collect import TraversalAborted, TraversalEngine
from stages.push import ReplayEngine

log = get_logger("discotube.runner")

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_AUTH_INVALID = 12
EXIT_FAILED = 20


class RunResult(str, Enum):
    OK = "ok"
    AUTH_INVALID = "auth_invalid"
    FAILED = "failed"
    SKIPPED = "skipped"


_EXIT_CODES = {
    RunResult.OK: EXIT_OK,
    RunResult.AUTH_INVALID: EXIT_AUTH_INVALID,
    RunResult.FAILED: EXIT_FAILED,
    RunResult.SKIPPED: EXIT_OK,
}


@dataclass(frozen=True)
class StageResult:
    name: str
    state: RunResult
    exit_code: int
    reason: Optional[str] = None

    @classmethod
    def of(cls, name: str, state: RunResult, reason: Optional[str] = None):
        return cls(name=name, state=state, exit_code=_EXIT_CODES[state], reason=reason)


@dataclass(frozen=True)
class RunOutcome:
    overall: RunResult
    stages: list[StageResult]
    checkpoint: Optional[Path] = None

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self.overall]


# ------------------------------------------------------------
# Component wiring
# ------------------------------------------------------------


def build_backoff(env: Environment) -> BackoffController:
    return BackoffController(
        base_delay=env.backoff_base_sec,
        max_attempts=env.max_attempts,
    )


def build_source(env: Environment) -> SourceCatalog:
    from providers.discogs.client import DiscogsClient

    return DiscogsClient(
        api_url=env.discogs_api_url,
        user_agent=env.discogs_user_agent,
        token=env.discogs_token,
        timeout=env.request_timeout,
        sleep_sec=env.sleep_sec,
    )


def build_destination(env: Environment) -> PlaylistDestination:
    # Imported lazily: building the client may run the OAuth handshake
    from providers.youtube.client import YouTubePlaylist, get_youtube_client

    return YouTubePlaylist(
        get_youtube_client(),
        mutation_sleep_sec=env.mutation_sleep_sec,
    )


def checkpoint_store_for(artist: Artist) -> CheckpointStore:
    return CheckpointStore(data_file(artist.checkpoint_name))


def _log_header(title: str) -> None:
    log.info(DISCOTUBE_HEADER(title).rstrip("\n"))


def _log_footer() -> None:
    log.info(DISCOTUBE_SECTION_END())


# ------------------------------------------------------------
# Stages
# ------------------------------------------------------------


def run_collect(
    artist_id: str,
    *,
    source: Optional[SourceCatalog] = None,
    backoff: Optional[BackoffController] = None,
    env: Optional[Environment] = None,
) -> tuple[StageResult, Optional[CheckpointStore]]:
    env = env or get_env()
    source = source or build_source(env)
    backoff = backoff or build_backoff(env)

    engine = TraversalEngine(
        source,
        backoff,
        paginator=Paginator(source, backoff, follow_next=env.pagination),
        limit=env.release_limit,
    )

    store: Optional[CheckpointStore] = None
    try:
        artist = engine.resolve_artist(artist_id)
        store = checkpoint_store_for(artist)
        report = engine.run(artist, store)
    except TraversalAborted as e:
        log.error(f"Collect failed: {e}")
        return StageResult.of("Collect", RunResult.FAILED, reason=str(e)), store
    except CheckpointError as e:
        log.error(f"Checkpoint unusable: {e}")
        return StageResult.of("Collect", RunResult.FAILED, reason=str(e)), store

    log.info(
        f"Collect done: discovered={report.discovered} fetched={report.fetched} "
        f"skipped_complete={report.skipped_complete} missing={len(report.missing)} "
        f"videos={report.videos_found}"
    )
    return StageResult.of("Collect", RunResult.OK), store


def run_push(
    store: CheckpointStore,
    playlist_id: str,
    *,
    destination: Optional[PlaylistDestination] = None,
    backoff: Optional[BackoffController] = None,
    env: Optional[Environment] = None,
) -> StageResult:
    env = env or get_env()
    backoff = backoff or build_backoff(env)

    try:
        document = store.load()
    except CheckpointError as e:
        log.error(f"Checkpoint unusable: {e}")
        return StageResult.of("Push", RunResult.FAILED, reason=str(e))

    if len(document) == 0:
        log.info(f"No releases in {store.path}; nothing to push")
        return StageResult.of("Push", RunResult.OK, reason="empty checkpoint")

    if destination is None and not env.dry_run:
        from providers.youtube.client import AuthenticationError, YouTubeClientError

        try:
            destination = build_destination(env)
        except AuthenticationError as e:
            log.error(f"OAuth invalid: {e}")
            return StageResult.of("Push", RunResult.AUTH_INVALID, reason=str(e))
        except YouTubeClientError as e:
            log.error(f"Cannot build YouTube client: {e}")
            return StageResult.of("Push", RunResult.FAILED, reason=str(e))

    engine = ReplayEngine(
        destination,
        store,
        backoff,
        playlist_id,
        max_submit=env.max_submit,
        dry_run=env.dry_run,
    )
    try:
        stats = engine.run(document)
    except TargetMissing as e:
        log.error(f"Push stopped: {e}")
        return StageResult.of("Push", RunResult.FAILED, reason="playlist not found")

    # Per-video failures are reported, never escalated
    reason = f"{stats.failures} videos failed" if stats.failures else None
    return StageResult.of("Push", RunResult.OK, reason=reason)


def run_once(
    artist_id: str,
    playlist_id: Optional[str],
    *,
    source: Optional[SourceCatalog] = None,
    destination: Optional[PlaylistDestination] = None,
    backoff: Optional[BackoffController] = None,
    env: Optional[Environment] = None,
) -> RunOutcome:
    """
    Collect, then push. Push is skipped when collect fails or when no
    playlist id is given.
    """
    env = env or get_env()
    backoff = backoff or build_backoff(env)

    _log_header("Stage 1/2: Collect")
    collect, store = run_collect(artist_id, source=source, backoff=backoff, env=env)
    _log_footer()

    stages = [collect]
    checkpoint = store.path if store else None

    if collect.state != RunResult.OK or store is None:
        blocked = f"blocked_by_{collect.state.value}"
        stages.append(StageResult.of("Push", RunResult.SKIPPED, reason=blocked))
        return RunOutcome(overall=collect.state, stages=stages, checkpoint=checkpoint)

    if not playlist_id:
        skipped = StageResult.of("Push", RunResult.SKIPPED, reason="no playlist id")
        stages.append(skipped)
        return RunOutcome(overall=RunResult.OK, stages=stages, checkpoint=checkpoint)

    _log_header("Stage 2/2: Push")
    push = run_push(
        store, playlist_id, destination=destination, backoff=backoff, env=env
    )
    _log_footer()
    stages.append(push)

    return RunOutcome(overall=push.state, stages=stages, checkpoint=checkpoint)
