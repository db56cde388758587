"""
push.py

Replay stage: checkpointed video references -> YouTube playlist.

Per video:
    unprocessed -> submitted   (insert succeeded, or already inserted this run)
    unprocessed -> not_found   (destination answered 404)
    unprocessed -> unprocessed (unparsable URL, or any other failure)

Settled videos are skipped without a write. The checkpoint is saved after
every state change, so stopping the process at any point loses at most the
video in flight.

A missing playlist (TargetMissing) stops the run with every remaining video
left unprocessed.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Set

from logger import get_logger
from pipeline.backoff import BackoffController
from pipeline.checkpoint import (
    CheckpointDocument,
    CheckpointStore,
    Release,
    Settlement,
    Video,
)
from pipeline.errors import Fatal, NotFound, TargetMissing
from providers.base import PlaylistDestination

logger = get_logger(__name__)

UNPARSABLE_URL = "unparsable_url"


class DedupGuard:
    """Video ids confirmed submitted during this process."""

    def __init__(self) -> None:
        self._seen: Set[str] = set()

    def __contains__(self, video_id: object) -> bool:
        return video_id in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def add(self, video_id: str) -> None:
        self._seen.add(video_id)


@dataclass
class ReplayStats:
    total: int = 0
    attempts: int = 0
    successes: int = 0
    not_found: int = 0
    deduplicated: int = 0
    skipped: int = 0
    limited: int = 0
    errors_by_status: Counter = field(default_factory=Counter)

    @property
    def failures(self) -> int:
        return sum(self.errors_by_status.values())

    def record_failure(self, status_key: str) -> None:
        self.errors_by_status[status_key] += 1

    def log_summary(self) -> None:
        logger.info(f"Not found (404):     {self.not_found}")
        logger.info(f"Total requests made: {self.attempts}")
        logger.info(f"Successful inserts:  {self.successes}")
        logger.info(f"Deduplicated:        {self.deduplicated}")
        logger.info(f"Already settled:     {self.skipped}")
        if self.limited:
            logger.info(f"Deferred (limit):    {self.limited}")
        if self.errors_by_status:
            breakdown = ", ".join(
                f"{k}={v}" for k, v in sorted(self.errors_by_status.items())
            )
            logger.info(f"Other errors:        {breakdown}")
        else:
            logger.info("Other errors:        none")


class ReplayEngine:
    """
    Replays checkpointed videos into one playlist.

    Counters and the dedup set belong to the instance; build a new engine
    per run.
    """

    def __init__(
        self,
        destination: Optional[PlaylistDestination],
        store: CheckpointStore,
        backoff: BackoffController,
        playlist_id: str,
        max_submit: int = 0,
        dry_run: bool = False,
    ):
        if destination is None and not dry_run:
            raise ValueError("a destination is required unless dry_run is set")

        self.destination = destination
        self.store = store
        self.backoff = backoff
        self.playlist_id = playlist_id
        self.max_submit = max_submit
        self.dry_run = dry_run

        self.dedup = DedupGuard()
        self.stats = ReplayStats()

    def _limit_reached(self) -> bool:
        return self.max_submit > 0 and self.stats.attempts >= self.max_submit

    def _save(self, document: CheckpointDocument, video: Video) -> None:
        self.store.save(document)
        logger.debug(f"Checkpoint updated for {video.url} ({video.status.value})")

    def run(self, document: Optional[CheckpointDocument] = None) -> ReplayStats:
        if document is None:
            document = self.store.load()

        self.stats.total = sum(len(r.videos) for r in document)
        logger.info(
            f"Replaying {self.stats.total} video references from "
            f"{len(document)} releases into playlist {self.playlist_id}"
        )

        try:
            for release, video in document.iter_videos():
                self.replay_video(document, release, video)
        finally:
            self.stats.log_summary()
        return self.stats

    def replay_video(
        self, document: CheckpointDocument, release: Release, video: Video
    ) -> Settlement:
        if video.settled:
            self.stats.skipped += 1
            logger.debug(f"{video.url} already settled ({video.status.value})")
            return video.status

        video_id = video.video_id
        if video_id is None:
            self.stats.record_failure(UNPARSABLE_URL)
            logger.warning(
                f"Release {release.id}: cannot extract a video id from {video.url!r}; "
                "leaving it unprocessed"
            )
            return video.status

        if video_id in self.dedup:
            logger.info(f"Video {video_id} already added this run; marking submitted")
            self.stats.deduplicated += 1
            if video.settle(Settlement.SUBMITTED):
                self._save(document, video)
            return video.status

        if self._limit_reached():
            self.stats.limited += 1
            return video.status

        if self.dry_run:
            logger.info(f"[DRY-RUN] would add {video_id} to {self.playlist_id}")
            return video.status

        logger.info(f"Adding {video.url} / {video_id} to playlist {self.playlist_id}")
        self.stats.attempts += 1

        try:
            item_id = self.backoff.execute(
                lambda: self.destination.submit(self.playlist_id, video_id),
                name=f"insert {video_id}",
            )
        except NotFound:
            self.stats.not_found += 1
            logger.warning(f"Video {video_id} not found; marking as 404")
            video.settle(Settlement.NOT_FOUND)
            self._save(document, video)
            return video.status
        except TargetMissing as e:
            self.stats.record_failure(e.status_key)
            logger.error(
                f"Playlist {self.playlist_id} is unavailable; stopping replay: {e}"
            )
            raise
        except Fatal as e:
            self.stats.record_failure(e.status_key)
            logger.error(f"Adding video {video_id} failed ({e.status_key}): {e}")
            return video.status

        self.stats.successes += 1
        self.dedup.add(video_id)
        video.settle(Settlement.SUBMITTED)
        self._save(document, video)
        logger.info(f"Video {video_id} added (playlistItemId={item_id})")
        return video.status
