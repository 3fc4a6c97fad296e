"""Retrieve the main body text of a discovered article."""

from __future__ import annotations

import logging
from typing import Sequence

import requests
from bs4 import BeautifulSoup

from articlerelay.config import DEFAULT_BODY_SELECTOR, SourceConfig
from articlerelay.errors import TransientNetworkError

from .http import build_session, fetch_html
from .retry import RetryPolicy

__all__ = ["CONTENT_UNAVAILABLE", "FullTextRetriever", "extract_body_text"]

logger = logging.getLogger(__name__)

#: Sentinel returned when an article body could not be retrieved.
CONTENT_UNAVAILABLE = "Error loading content."


def extract_body_text(html: str, selector: str) -> str:
    """Return the trimmed text of every element matching ``selector``."""

    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    blocks = [element.get_text("\n", strip=True) for element in soup.select(selector)]
    return "\n".join(block for block in blocks if block).strip()


class FullTextRetriever:
    """Fetch article pages and apply the per-source body extraction rule.

    :meth:`retrieve` retries transport failures through its
    :class:`RetryPolicy` and degrades to :data:`CONTENT_UNAVAILABLE` instead
    of raising, so callers treat a failed retrieval as a skip.
    """

    def __init__(
        self,
        sources: Sequence[SourceConfig] = (),
        *,
        session: requests.Session | None = None,
        retry: RetryPolicy | None = None,
    ) -> None:
        self._selectors = {source.name: source.body_selector for source in sources}
        self._session = session or build_session()
        self._retry = retry or RetryPolicy(should_retry=self.is_transient)

    @staticmethod
    def is_transient(exc: BaseException) -> bool:
        return isinstance(exc, TransientNetworkError)

    def selector_for(self, source_name: str) -> str:
        return self._selectors.get(source_name, DEFAULT_BODY_SELECTOR)

    async def fetch(self, link: str, source_name: str) -> str:
        """Fetch ``link`` and return its body text, raising on transport errors."""

        try:
            html = await fetch_html(self._session, link)
        except requests.RequestException as exc:
            raise TransientNetworkError(f"Failed to fetch {link}: {exc}") from exc
        return extract_body_text(html, self.selector_for(source_name))

    async def retrieve(self, link: str, source_name: str) -> str:
        try:
            content = await self._retry.call(
                lambda: self.fetch(link, source_name), label=f"fetch of {link}"
            )
        except Exception as exc:  # noqa: BLE001 - any failure becomes a skip
            logger.error("Error fetching full article content: %s", exc)
            return CONTENT_UNAVAILABLE

        if not content:
            logger.warning("No article body matched %r on %s", self.selector_for(source_name), link)
            return CONTENT_UNAVAILABLE
        return content
