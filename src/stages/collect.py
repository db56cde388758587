"""
collect.py

Traversal stage: Discogs artist -> releases -> video references.

- Discover release ids for the artist (one paginated listing)
- Fetch the videos of every release that is not yet complete
- Save the checkpoint after each release

Guarantees:
- A release is marked complete only after its full video list was fetched
- Complete releases are never fetched again
- Any Fatal while fetching a release aborts the stage; everything saved
  before that point stays on disk
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from logger import get_logger
from pipeline.backoff import BackoffController
from pipeline.checkpoint import (
    Artist,
    CheckpointDocument,
    CheckpointStore,
    Release,
)
from pipeline.errors import Fatal, NotFound
from pipeline.paginator import Paginator
from providers.base import SourceCatalog

logger = get_logger(__name__)


class TraversalAborted(Exception):
    """Traversal stopped on an unrecoverable source failure."""

    def __init__(self, message: str, release_id: Any = None):
        super().__init__(message)
        self.release_id = release_id


@dataclass
class TraversalReport:
    artist: Optional[Artist] = None
    discovered: int = 0
    fetched: int = 0
    skipped_complete: int = 0
    missing: List[Any] = field(default_factory=list)
    videos_found: int = 0


def release_id_of(record: Dict[str, Any]) -> Optional[Any]:
    """
    Master entries point at their main release; plain releases use their
    own id.
    """
    main = record.get("main_release")
    if main:
        return main
    return record.get("id")


class TraversalEngine:
    def __init__(
        self,
        source: SourceCatalog,
        backoff: BackoffController,
        paginator: Optional[Paginator] = None,
        limit: int = 0,
    ):
        self.source = source
        self.backoff = backoff
        self.paginator = paginator or Paginator(source, backoff)
        self.limit = limit

    # ------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------

    def resolve_artist(self, artist_id: str) -> Artist:
        try:
            data = self.backoff.execute(
                lambda: self.source.fetch_json(self.source.artist_url(artist_id)),
                name=f"artist {artist_id}",
            )
        except (NotFound, Fatal) as e:
            raise TraversalAborted(f"Cannot resolve artist {artist_id}: {e}") from e

        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise TraversalAborted(f"Artist {artist_id} has no name")

        return Artist(id=str(artist_id), name=name.strip())

    def discover_release_ids(self, artist_id: str) -> List[Any]:
        try:
            records = self.paginator.fetch_all(
                self.source.artist_releases_url(artist_id)
            )
        except (NotFound, Fatal) as e:
            raise TraversalAborted(
                f"Cannot list releases for artist {artist_id}: {e}"
            ) from e

        ids: List[Any] = []
        seen = set()
        for record in records:
            rid = release_id_of(record)
            if rid is None or rid in seen:
                continue
            seen.add(rid)
            ids.append(rid)
        return ids

    def fetch_video_urls(self, release_id: Any) -> List[str]:
        records = self.paginator.fetch_all(self.source.release_url(release_id))
        return [
            r["uri"] for r in records if isinstance(r.get("uri"), str) and r["uri"]
        ]

    # ------------------------------------------------------------
    # Run
    # ------------------------------------------------------------

    def collect_release(self, release: Release) -> int:
        """
        Fill one incomplete release. Returns the number of videos stored.

        Raises:
            TraversalAborted: on Fatal; the release is left incomplete
        """
        try:
            urls = self.fetch_video_urls(release.id)
        except NotFound:
            logger.warning(
                f"Release {release.id} not found; marking complete with no videos"
            )
            release.replace_videos([])
            release.mark_complete()
            raise
        except Fatal as e:
            raise TraversalAborted(
                f"Fetching release {release.id} failed: {e}", release_id=release.id
            ) from e

        release.replace_videos(urls)
        release.mark_complete()
        return len(urls)

    def run(self, artist: Artist, store: CheckpointStore) -> TraversalReport:
        """
        Traverse one artist into its checkpoint.

        Raises:
            TraversalAborted: listing or release fetch failed fatally
            CheckpointError: the existing checkpoint is unreadable
        """
        report = TraversalReport(artist=artist)

        logger.info(f"Artist: {artist.name} ({artist.id})")
        logger.info(f"Checkpoint: {store.path}")

        document = store.load()
        store.ensure()

        release_ids = self.discover_release_ids(artist.id)
        report.discovered = len(release_ids)
        logger.info(f"Discovered {len(release_ids)} release ids")

        if self.limit > 0:
            release_ids = release_ids[: self.limit]
            logger.info(f"Release limit active: processing {len(release_ids)}")

        self.traverse(release_ids, document, store, report)

        logger.info(f"{len(document)} releases in checkpoint")
        return report

    def traverse(
        self,
        release_ids: List[Any],
        document: CheckpointDocument,
        store: CheckpointStore,
        report: TraversalReport,
    ) -> None:
        total = len(release_ids)

        for i, rid in enumerate(release_ids, start=1):
            existing = document.get(rid)
            if existing is not None and existing.complete:
                report.skipped_complete += 1
                logger.debug(f"Release {rid} already complete; skipping")
                continue

            logger.info(f"Processing release {i}/{total}: {rid}")
            release = document.get_or_create(rid)

            try:
                count = self.collect_release(release)
            except NotFound:
                report.missing.append(rid)
                store.save(document)
                continue
            except TraversalAborted:
                logger.error(f"Traversal aborted at release {rid} ({i}/{total})")
                raise

            report.fetched += 1
            report.videos_found += count
            store.save(document)
            logger.debug(f"Release {rid}: {count} videos saved")
