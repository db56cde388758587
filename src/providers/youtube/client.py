from __future__ import annotations

import time
from typing import Any, Optional

from googleapiclient.errors import HttpError

from auth import AuthInvalid, get_provider
from logger import get_logger
from pipeline.errors import Fatal, SyncError, classify_status
from providers.base import PlaylistDestination

logger = get_logger(__name__)

# YouTube client objects are dynamically generated by googleapiclient
YouTubeClient = Any


class YouTubeClientError(Exception):
    pass


class AuthenticationError(YouTubeClientError):
    pass


def get_youtube_client() -> YouTubeClient:
    """
    Build an authorized YouTube Data API client.

    OAuth and token lifecycle live in the auth provider layer; this only
    maps its failures onto client-level exception types.
    """
    try:
        return get_provider("youtube").build_client()
    except AuthInvalid as e:
        logger.error(f"AuthenticationError: {e}")
        raise AuthenticationError(str(e)) from e
    except Exception as e:
        logger.error(f"YouTubeClientError: {e}")
        raise YouTubeClientError(str(e)) from e


def translate_http_error(e: HttpError, context: str) -> SyncError:
    status = getattr(getattr(e, "resp", None), "status", None)
    try:
        status = int(status) if status is not None else None
    except (TypeError, ValueError):
        status = None
    return classify_status(status, getattr(e, "content", None), f"{context}: {e}")


class YouTubePlaylist(PlaylistDestination):
    """Appends videos to a playlist via playlistItems.insert."""

    name = "youtube"

    def __init__(self, youtube: YouTubeClient, mutation_sleep_sec: float = 1.0):
        self.youtube = youtube
        self.mutation_sleep_sec = mutation_sleep_sec

    def submit(self, playlist_id: str, video_id: str) -> Optional[str]:
        if self.mutation_sleep_sec > 0:
            time.sleep(self.mutation_sleep_sec)

        try:
            resp = (
                self.youtube.playlistItems()
                .insert(
                    part="snippet",
                    body={
                        "snippet": {
                            "playlistId": playlist_id,
                            "resourceId": {
                                "kind": "youtube#video",
                                "videoId": video_id,
                            },
                        }
                    },
                )
                .execute()
            )
        except HttpError as e:
            raise translate_http_error(e, f"insert {video_id}") from e
        except OSError as e:
            raise Fatal(f"insert {video_id} failed: {e}", status="network") from e

        return resp.get("id") if isinstance(resp, dict) else None
