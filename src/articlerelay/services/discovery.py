"""Discover candidate articles on the configured source listing pages."""

from __future__ import annotations

import logging
from typing import Iterator, List, Sequence
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from articlerelay.config import SourceConfig
from articlerelay.errors import DiscoveryError
from articlerelay.models import SourceCandidate
from articlerelay.notifications import OperatorNotifier

from .http import build_session, fetch_html

__all__ = ["SourceDiscovery", "extract_candidates"]

logger = logging.getLogger(__name__)


def extract_candidates(html: str, source: SourceConfig) -> Iterator[SourceCandidate]:
    """Yield candidates matched by the source's listing selector.

    Each selected element is either the anchor itself or a container whose
    first ``<a>`` carries the title and link. Relative links are resolved
    against :attr:`SourceConfig.link_base`.
    """

    soup = BeautifulSoup(html, "lxml")
    base = source.link_base

    for element in soup.select(source.selector):
        anchor = element if element.name == "a" else element.find("a")
        if anchor is None:
            continue

        title = anchor.get_text(" ", strip=True)
        href = (anchor.get("href") or "").strip()
        if not title or not href:
            continue

        link = urljoin(base, href).split("#", 1)[0]
        if urlparse(link).scheme not in {"http", "https"}:
            continue

        yield SourceCandidate(title=title, link=link, source_name=source.name)


class SourceDiscovery:
    """Collect a bounded list of candidates from every configured source."""

    def __init__(
        self,
        sources: Sequence[SourceConfig],
        *,
        session: requests.Session | None = None,
        notifier: OperatorNotifier | None = None,
    ) -> None:
        self.sources = list(sources)
        self._session = session or build_session()
        self._notifier = notifier

    async def _report(self, message: str) -> None:
        if self._notifier is not None:
            await self._notifier.notify(message)

    async def discover_source(self, source: SourceConfig) -> List[SourceCandidate]:
        """Return up to ``source.limit`` candidates, raising :class:`DiscoveryError` on failure."""

        try:
            html = await fetch_html(self._session, str(source.url))
        except requests.RequestException as exc:
            raise DiscoveryError(source.name, f"failed to fetch {source.url}: {exc}") from exc

        candidates: List[SourceCandidate] = []
        for candidate in extract_candidates(html, source):
            if len(candidates) >= source.limit:
                break
            candidates.append(candidate)

        if not candidates:
            raise DiscoveryError(source.name, f"no articles matched selector {source.selector!r}")
        return candidates

    async def discover(self) -> List[SourceCandidate]:
        """Return candidates from all sources in configured order.

        Failing sources contribute nothing and are reported; this method never
        raises.
        """

        all_candidates: List[SourceCandidate] = []
        seen: set[str] = set()

        try:
            for source in self.sources:
                try:
                    candidates = await self.discover_source(source)
                except DiscoveryError as exc:
                    logger.error("Error fetching article links from source: %s", exc)
                    await self._report(f"Error fetching articles: {exc}")
                    continue

                for candidate in candidates:
                    if candidate.link in seen:
                        continue
                    seen.add(candidate.link)
                    all_candidates.append(candidate)
        except Exception as exc:  # noqa: BLE001 - discovery must never fail the batch
            logger.exception("Source discovery failed")
            await self._report(f"Error fetching articles: {exc}")
            return []

        logger.info("Fetched %d articles from source", len(all_candidates))
        return all_candidates
