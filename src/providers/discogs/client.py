"""
client.py

Discogs REST source.

Responsibilities:
- Static header authentication (User-Agent + optional personal token)
- Page extraction (records + pagination cursor)
- HTTP -> domain error translation

Does NOT:
- Retry (the backoff controller owns that)
- Persist anything
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import requests

from logger import get_logger
from pipeline.errors import Fatal, classify_status
from providers.base import Page, SourceCatalog

logger = get_logger(__name__)

RECORD_FIELDS = ("releases", "videos")


def extract_records(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """First non-empty list among the known record fields."""
    for key in RECORD_FIELDS:
        value = data.get(key)
        if isinstance(value, list) and value:
            return [r for r in value if isinstance(r, dict)]
    return []


def extract_next_url(data: Dict[str, Any]) -> Optional[str]:
    pagination = data.get("pagination")
    if not isinstance(pagination, dict):
        return None
    urls = pagination.get("urls")
    if not isinstance(urls, dict):
        return None
    nxt = urls.get("next")
    return nxt if isinstance(nxt, str) and nxt else None


class DiscogsClient(SourceCatalog):
    name = "discogs"

    def __init__(
        self,
        api_url: str,
        user_agent: str,
        token: str = "",
        timeout: int = 30,
        sleep_sec: float = 0.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.sleep_sec = sleep_sec
        self.session = session or requests.Session()

        self.headers = {"User-Agent": user_agent}
        if token:
            self.headers["Authorization"] = f"Discogs token={token}"

    # ------------------------------------------------------------
    # URL builders
    # ------------------------------------------------------------

    def artist_url(self, artist_id: str) -> str:
        return f"{self.api_url}/artists/{artist_id}"

    def artist_releases_url(self, artist_id: str) -> str:
        return f"{self.api_url}/artists/{artist_id}/releases"

    def release_url(self, release_id: int) -> str:
        return f"{self.api_url}/releases/{release_id}"

    # ------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------

    def fetch_json(self, url: str) -> Dict[str, Any]:
        logger.debug(f"GET {url}")

        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise Fatal(f"GET {url} failed: {e}", status="network") from e

        if response.status_code >= 400:
            payload: Any = None
            try:
                payload = response.json()
            except ValueError:
                payload = None
            raise classify_status(
                response.status_code,
                payload,
                f"GET {url} returned HTTP {response.status_code}",
            )

        try:
            data = response.json()
        except ValueError as e:
            raise Fatal(f"GET {url} returned malformed JSON", status="malformed") from e

        if not isinstance(data, dict):
            raise Fatal(f"GET {url} returned non-object JSON", status="malformed")

        if self.sleep_sec > 0:
            time.sleep(self.sleep_sec)
        return data

    def fetch(self, url: str) -> Page:
        data = self.fetch_json(url)
        return Page(records=extract_records(data), next_url=extract_next_url(data))
