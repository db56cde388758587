"""
checkpoint.py

Durable traversal + replay state for one artist.

On-disk shape (a JSON array, rewritten whole after every unit of work):

    [
      {
        "id": 123,
        "complete": true,
        "videos": [
          {"url": "https://www.youtube.com/watch?v=...", "uploaded": false},
          {"url": "...", "uploaded": true},
          {"url": "...", "uploaded": 404}
        ]
      }
    ]

`uploaded` is the wire form of Settlement: false/absent = unprocessed,
true = submitted, 404 = not found.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from logger import get_logger
from providers.youtube.urls import extract_video_id
from utils import write_json

logger = get_logger(__name__)

CHECKPOINT_SUFFIX = "_youtube_links.json"


class CheckpointError(Exception):
    """Raised when a checkpoint document exists but cannot be used."""


# ----------------------------
# Settlement
# ----------------------------


class Settlement(str, Enum):
    UNPROCESSED = "unprocessed"
    SUBMITTED = "submitted"
    NOT_FOUND = "not_found"

    @property
    def is_terminal(self) -> bool:
        return self is not Settlement.UNPROCESSED

    @classmethod
    def from_wire(cls, value: Any) -> Settlement:
        # bool must be checked before int: True == 1 in Python
        if value is True:
            return cls.SUBMITTED
        if value is None or value is False:
            return cls.UNPROCESSED
        if isinstance(value, int) and value == 404:
            return cls.NOT_FOUND
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise CheckpointError(f"Unknown settlement value: {value!r}")

    def to_wire(self) -> Any:
        return {
            Settlement.UNPROCESSED: False,
            Settlement.SUBMITTED: True,
            Settlement.NOT_FOUND: 404,
        }[self]


# ----------------------------
# Data model
# ----------------------------


@dataclass(frozen=True)
class Artist:
    id: str
    name: str

    @property
    def checkpoint_name(self) -> str:
        return checkpoint_filename(self.name)


@dataclass
class Video:
    url: str
    status: Settlement = Settlement.UNPROCESSED

    @property
    def video_id(self) -> Optional[str]:
        return extract_video_id(self.url)

    @property
    def settled(self) -> bool:
        return self.status.is_terminal

    def settle(self, status: Settlement) -> bool:
        """
        Move to a terminal state. Returns True if the state changed.

        Terminal states are never left; settling an already settled video
        is a no-op.
        """
        if not status.is_terminal:
            raise ValueError("settle() requires a terminal status")
        if self.settled:
            return False
        self.status = status
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "uploaded": self.status.to_wire()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Video:
        if not isinstance(data, dict):
            raise CheckpointError(f"Video entry is not an object: {data!r}")
        url = data.get("url")
        if not isinstance(url, str):
            raise CheckpointError(f"Video entry without url: {data!r}")
        return cls(url=url, status=Settlement.from_wire(data.get("uploaded")))


@dataclass
class Release:
    id: int
    videos: List[Video] = field(default_factory=list)
    complete: bool = False

    def replace_videos(self, urls: List[str]) -> None:
        """
        Install a freshly fetched video list.

        Settlement already recorded for a URL is carried over so that
        replacing the list can never reset a terminal state.
        """
        known = {v.url: v.status for v in self.videos}
        self.videos = [
            Video(url=u, status=known.get(u, Settlement.UNPROCESSED)) for u in urls
        ]

    def mark_complete(self) -> None:
        self.complete = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "videos": [v.to_dict() for v in self.videos],
            "complete": self.complete,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Release:
        if not isinstance(data, dict):
            raise CheckpointError(f"Release entry is not an object: {data!r}")
        rid = data.get("id", data.get("releaseId"))
        if isinstance(rid, bool) or not isinstance(rid, (int, str)) or rid == "":
            raise CheckpointError(f"Release entry without id: {data!r}")

        videos = data.get("videos") or []
        if not isinstance(videos, list):
            raise CheckpointError(f"Release {rid} videos is not a list")

        return cls(
            id=_normalize_release_id(rid),
            videos=[Video.from_dict(v) for v in videos],
            complete=bool(data.get("complete", False)),
        )


def _normalize_release_id(value: Any) -> Any:
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


class CheckpointDocument:
    """Ordered releases with lookup by id."""

    def __init__(self, releases: Optional[List[Release]] = None):
        self.releases: List[Release] = []
        self._by_id: Dict[Any, Release] = {}
        for r in releases or []:
            self.add(r)

    def __len__(self) -> int:
        return len(self.releases)

    def __iter__(self) -> Iterator[Release]:
        return iter(self.releases)

    def get(self, release_id: Any) -> Optional[Release]:
        return self._by_id.get(_normalize_release_id(release_id))

    def add(self, release: Release) -> Release:
        existing = self._by_id.get(release.id)
        if existing is not None:
            return existing
        self.releases.append(release)
        self._by_id[release.id] = release
        return release

    def get_or_create(self, release_id: Any) -> Release:
        found = self.get(release_id)
        if found is not None:
            return found
        return self.add(Release(id=_normalize_release_id(release_id)))

    def iter_videos(self) -> Iterator[Tuple[Release, Video]]:
        for release in self.releases:
            for video in release.videos:
                yield release, video

    def to_list(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self.releases]

    @classmethod
    def from_list(cls, data: Any) -> CheckpointDocument:
        if not isinstance(data, list):
            raise CheckpointError("Checkpoint document must be a JSON array")
        document = cls()
        for entry in data:
            release = Release.from_dict(entry)
            if document.get(release.id) is not None:
                raise CheckpointError(f"Duplicate release id {release.id!r}")
            document.add(release)
        return document


@dataclass(frozen=True)
class CheckpointSummary:
    releases: int
    complete_releases: int
    total_urls: int
    unique_urls: int
    unprocessed: int
    submitted: int
    not_found: int
    unparsable: int


def summarize(document: CheckpointDocument) -> CheckpointSummary:
    urls: List[str] = []
    counts = {s: 0 for s in Settlement}
    unparsable = 0

    for _release, video in document.iter_videos():
        urls.append(video.url)
        counts[video.status] += 1
        if video.video_id is None:
            unparsable += 1

    return CheckpointSummary(
        releases=len(document),
        complete_releases=sum(1 for r in document if r.complete),
        total_urls=len(urls),
        unique_urls=len(set(urls)),
        unprocessed=counts[Settlement.UNPROCESSED],
        submitted=counts[Settlement.SUBMITTED],
        not_found=counts[Settlement.NOT_FOUND],
        unparsable=unparsable,
    )


# ----------------------------
# Store
# ----------------------------


def checkpoint_filename(artist_name: str) -> str:
    """
    Examples:
        "Kevin McCord" -> "Kevin_McCord_youtube_links.json"
        "AC/DC"        -> "AC_DC_youtube_links.json"
    """
    if not artist_name or not artist_name.strip():
        raise ValueError("Artist name cannot be empty")
    return re.sub(r"[^a-zA-Z0-9]", "_", artist_name) + CHECKPOINT_SUFFIX


class CheckpointStore:
    """
    Sole owner of the checkpoint file.

    Every save() rewrites the whole document through a temp file + rename,
    so the file on disk is always a complete snapshot.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> CheckpointDocument:
        """
        Missing or blank file -> empty document.

        Raises:
            CheckpointError: file exists but is not a valid document
        """
        if not self.path.exists():
            logger.debug(f"No checkpoint at {self.path}; starting empty")
            return CheckpointDocument()

        try:
            text = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise CheckpointError(f"Checkpoint {self.path} is not UTF-8: {e}") from e
        if not text.strip():
            logger.warning(f"Checkpoint {self.path} is empty; starting empty")
            return CheckpointDocument()

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CheckpointError(
                f"Checkpoint {self.path} is not valid JSON: {e}"
            ) from e

        document = CheckpointDocument.from_list(data)
        logger.debug(f"Loaded checkpoint {self.path} ({len(document)} releases)")
        return document

    def save(self, document: CheckpointDocument) -> None:
        write_json(self.path, document.to_list())

    def ensure(self) -> None:
        """Create the file as an empty array if it does not exist yet."""
        if not self.path.exists():
            self.save(CheckpointDocument())
