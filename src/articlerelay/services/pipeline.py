"""End-to-end ingestion, rewrite and publication pipeline.

Each discovered candidate walks through the same sequence::

    discovered -> deduped (skip)
               -> fetch failed (skip, nothing recorded)
               -> rewrite failed (skip, nothing recorded, reported)
               -> published | publish failed (recorded either way)

A record is written whenever the rewrite succeeded, even when publishing
did not, so an unreachable CMS cannot cause the same article to be
rewritten on every run.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Protocol

from articlerelay.blobstore import ArticleStore
from articlerelay.config import AppConfig, Settings
from articlerelay.errors import StorageConnectivityError
from articlerelay.models import (
    ArticleRecord,
    BatchSummary,
    CandidateOutcome,
    PublishedItem,
    PublishedPost,
    RewriteResult,
    SourceCandidate,
)
from articlerelay.notifications import OperatorNotifier

from .crosslink import CrossLinkSelector
from .discovery import SourceDiscovery
from .publisher import WordPressClient
from .retriever import CONTENT_UNAVAILABLE, FullTextRetriever
from .retry import RetryPolicy
from .rewriter import ContentRewriter

__all__ = ["ArticlePipeline", "build_pipeline"]

logger = logging.getLogger(__name__)


class Discovery(Protocol):
    async def discover(self) -> List[SourceCandidate]:
        ...


class Retriever(Protocol):
    async def retrieve(self, link: str, source_name: str) -> str:
        ...


class Rewriter(Protocol):
    async def rewrite(
        self, original_text: str, original_title: str, current_link: str
    ) -> RewriteResult:
        ...


class Publisher(Protocol):
    async def list_existing(self, limit: int = 10) -> List[PublishedItem]:
        ...

    async def publish(self, title: str, content: str) -> PublishedPost:
        ...


class Store(Protocol):
    async def exists(self, link: str) -> bool:
        ...

    async def insert_if_absent(self, record: ArticleRecord) -> bool:
        ...


class ArticlePipeline:
    """Process candidates one at a time and record their outcome."""

    def __init__(
        self,
        *,
        discovery: Discovery,
        retriever: Retriever,
        rewriter: Rewriter,
        publisher: Publisher,
        store: Store,
        notifier: OperatorNotifier | None = None,
        retry: RetryPolicy | None = None,
        fetch_pause: float = 1.0,
        item_pause: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.discovery = discovery
        self.retriever = retriever
        self.rewriter = rewriter
        self.publisher = publisher
        self.store = store
        self.notifier = notifier
        self.retry = retry or RetryPolicy(sleep=sleep)
        self.fetch_pause = fetch_pause
        self.item_pause = item_pause
        self._sleep = sleep
        self._lock = asyncio.Lock()

    async def _report(self, message: str) -> None:
        if self.notifier is not None:
            await self.notifier.notify(message)

    @property
    def running(self) -> bool:
        return self._lock.locked()

    async def process_candidate(self, candidate: SourceCandidate) -> CandidateOutcome:
        """Run one candidate through the pipeline and return where it ended."""

        if await self.store.exists(candidate.link):
            logger.info("Skipped existing article: %s", candidate.title)
            return CandidateOutcome.DEDUPED

        full_content = await self.retriever.retrieve(candidate.link, candidate.source_name)
        if full_content == CONTENT_UNAVAILABLE:
            logger.error("Failed to fetch content for: %s", candidate.title)
            return CandidateOutcome.FETCH_FAILED

        await self._sleep(self.fetch_pause)

        try:
            result = await self.retry.call(
                lambda: self.rewriter.rewrite(full_content, candidate.title, candidate.link),
                label=f"rewrite of {candidate.link}",
            )
        except StorageConnectivityError:
            raise
        except Exception as exc:  # noqa: BLE001 - per-item failures never abort the batch
            logger.error("Failed to regenerate article %s: %s", candidate.link, exc)
            await self._report(f"Failed to regenerate article {candidate.title}: {exc}")
            return CandidateOutcome.REWRITE_FAILED

        logger.info('Processed article with regenerated title: "%s"', result.extracted_title)

        post: PublishedPost | None = None
        try:
            post = await self.retry.call(
                lambda: self.publisher.publish(result.extracted_title, result.markup),
                label=f"publish of {result.extracted_title!r}",
            )
        except Exception as exc:  # noqa: BLE001 - publish failure still records the article
            logger.error("Failed to post to WordPress: %s: %s", result.extracted_title, exc)
            await self._report(f"Error posting to WordPress: {exc}")

        record = ArticleRecord(
            source_link=candidate.link,
            original_title=candidate.title,
            generated_title=result.extracted_title,
            source_name=candidate.source_name,
            full_content=full_content,
            regenerated_content=result.markup,
            word_count=result.word_count,
            seo_keywords=result.keywords,
            published_id=post.id if post is not None else None,
            published_url=post.url if post is not None else None,
        )
        if await self.store.insert_if_absent(record):
            logger.info('Saved article with regenerated title: "%s"', result.extracted_title)
        else:
            logger.warning("Article %s was recorded by another run; keeping that record", candidate.link)

        await self._sleep(self.item_pause)
        return CandidateOutcome.PUBLISHED if post is not None else CandidateOutcome.PUBLISH_FAILED

    async def _log_existing_posts(self) -> None:
        try:
            existing = await self.publisher.list_existing()
        except Exception as exc:  # noqa: BLE001 - listing is informational only
            logger.error("Error fetching WordPress articles: %s", exc)
            await self._report(f"Error fetching WordPress articles: {exc}")
            return
        logger.info("Fetched articles from WordPress: %s", [item.title for item in existing])

    async def run_batch(self) -> BatchSummary:
        """Discover candidates and process them sequentially.

        Concurrent callers are serialised: a second caller waits for the
        in-flight batch and then runs its own. Only storage failures abort the
        batch; they are reported and re-raised.
        """

        async with self._lock:
            await self._log_existing_posts()
            candidates = await self.discovery.discover()

            summary = BatchSummary()
            for candidate in candidates:
                try:
                    outcome = await self.process_candidate(candidate)
                except StorageConnectivityError as exc:
                    logger.error("Error processing articles: %s", exc)
                    await self._report(f"Error processing articles: {exc}")
                    raise
                summary.outcomes[candidate.link] = outcome

            summary.processed = sum(1 for outcome in summary.outcomes.values() if outcome.recorded)
            summary.skipped = len(candidates) - summary.processed
            logger.info("Batch finished: %s", summary.message)
            return summary


def build_pipeline(
    settings: Settings,
    config: AppConfig,
    *,
    store: ArticleStore | None = None,
    notifier: OperatorNotifier | None = None,
) -> ArticlePipeline:
    """Wire the production collaborators from settings and configuration."""

    notifier = notifier or OperatorNotifier.from_settings(settings)
    store = store or ArticleStore(settings.store_root)
    knobs = config.pipeline

    retry = RetryPolicy(max_attempts=knobs.retry_attempts, delay=knobs.retry_delay)
    cross_links = CrossLinkSelector(store, pool_size=knobs.cross_link_pool, notifier=notifier)
    rewriter = ContentRewriter.from_settings(
        settings,
        cross_links,
        footer=config.footer,
        min_words=knobs.min_word_count,
        rotation_delay=knobs.rotation_delay,
        notifier=notifier,
    )

    return ArticlePipeline(
        discovery=SourceDiscovery(config.sources, notifier=notifier),
        retriever=FullTextRetriever(
            config.sources,
            retry=RetryPolicy(
                max_attempts=knobs.retry_attempts,
                delay=knobs.retry_delay,
                should_retry=FullTextRetriever.is_transient,
            ),
        ),
        rewriter=rewriter,
        publisher=WordPressClient.from_settings(settings),
        store=store,
        notifier=notifier,
        retry=retry,
        fetch_pause=knobs.fetch_pause,
        item_pause=knobs.item_pause,
    )
