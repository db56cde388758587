from __future__ import annotations

from typing import Any, Dict, Iterator, List

from logger import get_logger
from pipeline.backoff import BackoffController
from pipeline.errors import Fatal
from providers.base import Page, SourceCatalog

logger = get_logger(__name__)


class Paginator:
    """
    Walks a cursor-linked listing endpoint.

    Every page request goes through the backoff controller. Listings are
    never persisted: a new call always starts again from start_url.
    """

    def __init__(
        self,
        source: SourceCatalog,
        backoff: BackoffController,
        follow_next: bool = True,
    ):
        self.source = source
        self.backoff = backoff
        self.follow_next = follow_next

    def iter_pages(self, start_url: str) -> Iterator[Page]:
        url: str | None = start_url
        page_no = 0
        seen: set[str] = set()

        while url:
            if url in seen:
                raise Fatal(
                    f"Pagination loop: {url} was already fetched",
                    status="pagination_loop",
                )
            seen.add(url)

            page_no += 1
            current = url
            page = self.backoff.execute(
                lambda: self.source.fetch(current),
                name=f"fetch page {page_no}",
            )
            logger.debug(
                f"Fetched page {page_no} ({len(page.records)} records): {current}"
            )
            yield page

            url = page.next_url if self.follow_next else None

    def fetch_all(self, start_url: str) -> List[Dict[str, Any]]:
        """
        Concatenate every page's records in order.

        A failure on any page propagates and the records gathered so far
        are dropped; a truncated listing cannot be told apart from a
        complete one.
        """
        records: List[Dict[str, Any]] = []
        for page in self.iter_pages(start_url):
            records.extend(page.records)
        return records
