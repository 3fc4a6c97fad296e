"""Pick a previously published article to cite from a new one."""

from __future__ import annotations

import logging
import random
from typing import List, Protocol

from articlerelay.errors import StorageConnectivityError
from articlerelay.models import ArticleRecord, CrossLink
from articlerelay.notifications import OperatorNotifier

__all__ = ["CrossLinkSelector", "PublishedArticleSource"]

logger = logging.getLogger(__name__)


class PublishedArticleSource(Protocol):
    async def find_published(self, exclude_link: str, limit: int = 10) -> List[ArticleRecord]:
        ...


class CrossLinkSelector:
    """Choose a random published article, never the one being rewritten.

    The choice is uniform over up to ``pool_size`` qualifying records so that
    internal links spread across the archive instead of piling onto the
    newest post.
    """

    def __init__(
        self,
        store: PublishedArticleSource,
        *,
        pool_size: int = 10,
        rng: random.Random | None = None,
        notifier: OperatorNotifier | None = None,
    ) -> None:
        self._store = store
        self.pool_size = pool_size
        self._rng = rng or random.Random()
        self._notifier = notifier

    async def select(self, exclude_link: str) -> CrossLink | None:
        try:
            records = await self._store.find_published(exclude_link, self.pool_size)
        except StorageConnectivityError as exc:
            logger.error("Error fetching random article link: %s", exc)
            if self._notifier is not None:
                await self._notifier.notify(f"Error fetching random article link: {exc}")
            return None

        candidates = [
            record
            for record in records
            if record.source_link != exclude_link
            and record.published_url is not None
            and record.generated_title is not None
        ]
        if not candidates:
            logger.info("No other articles available for random link")
            return None

        chosen = self._rng.choice(candidates)
        return CrossLink(url=chosen.published_url, title=chosen.generated_title)
