"""Published content source.

The authoritative copy of a published site lives in the publishing data
store, which this service does not own. Handlers reach it through the
PublishedContentSource protocol; the application wires in a real
implementation at startup.

InMemoryContentSource is the dict-backed implementation used in development
and tests.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol

DEFAULT_VERSION = "v1"
INDEX_SLUG = "index"


@dataclass(frozen=True)
class PublishedPage:
    """One page of a published site as served to visitors."""

    site_id: str
    slug: str
    content: Any
    version: str = DEFAULT_VERSION
    analytics_enabled: bool = False

    def to_payload(self) -> dict[str, Any]:
        """Body returned to the browser (and cached)."""
        return {
            "content": self.content,
            "analytics_enabled": self.analytics_enabled,
        }


class PublishedContentSource(Protocol):
    async def get_page(self, site_id: str, page_slug: str) -> PublishedPage | None:
        """Return the published page, or None if the site/page is not live."""
        ...


class InMemoryContentSource:
    """Dict-backed content source keyed on (site_id, slug)."""

    def __init__(self, pages: Iterable[PublishedPage] = ()) -> None:
        self._pages: dict[tuple[str, str], PublishedPage] = {}
        self.lookups = 0
        for page in pages:
            self.publish(page)

    def publish(self, page: PublishedPage) -> None:
        self._pages[(page.site_id, page.slug)] = page

    async def get_page(self, site_id: str, page_slug: str) -> PublishedPage | None:
        self.lookups += 1
        return self._pages.get((site_id, page_slug))
