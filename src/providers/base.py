from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Page:
    """One page of a listing endpoint."""

    records: List[Dict[str, Any]] = field(default_factory=list)
    next_url: Optional[str] = None


class SourceCatalog(ABC):
    """
    Read side: the catalog releases and video references are collected from.

    Implementations raise pipeline.errors.RateLimited / NotFound / Fatal.
    """

    name: str

    @abstractmethod
    def fetch(self, url: str) -> Page:
        """Fetch one listing page."""
        raise NotImplementedError

    @abstractmethod
    def fetch_json(self, url: str) -> Dict[str, Any]:
        """Fetch a single resource document."""
        raise NotImplementedError

    @abstractmethod
    def artist_url(self, artist_id: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def artist_releases_url(self, artist_id: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def release_url(self, release_id: int) -> str:
        raise NotImplementedError


class PlaylistDestination(ABC):
    """
    Write side: the playlist collected videos are appended to.

    Implementations raise pipeline.errors.RateLimited / NotFound / Fatal.
    """

    name: str

    @abstractmethod
    def submit(self, playlist_id: str, video_id: str) -> Optional[str]:
        """Append video_id to playlist_id. Returns the new playlist item id."""
        raise NotImplementedError
