"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from articlerelay.api.routes import router
from articlerelay.blobstore import ArticleStore
from articlerelay.config import AppConfig, Settings
from articlerelay.errors import StorageConnectivityError
from articlerelay.notifications import OperatorNotifier
from articlerelay.services.pipeline import ArticlePipeline, build_pipeline
from articlerelay.services.scheduler import PipelineScheduler

logger = logging.getLogger(__name__)


def _build_default_pipeline(
    settings: Settings, store: ArticleStore, notifier: OperatorNotifier
) -> ArticlePipeline | None:
    try:
        config = AppConfig.from_file()
        return build_pipeline(settings, config, store=store, notifier=notifier)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Pipeline is not configured: %s", exc)
        return None


def create_app(
    *,
    settings: Settings | None = None,
    pipeline: ArticlePipeline | None = None,
    store: ArticleStore | None = None,
    notifier: OperatorNotifier | None = None,
    start_scheduler: bool | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    notifier = notifier or OperatorNotifier.from_settings(settings)
    store = store or ArticleStore(settings.store_root)
    if pipeline is None:
        pipeline = _build_default_pipeline(settings, store, notifier)
    scheduler_enabled = settings.scheduler_enabled if start_scheduler is None else start_scheduler

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            app.state.store.connect()
            logger.info("Article store ready at %s", app.state.store.root)
        except StorageConnectivityError as exc:
            # Keep serving; every store operation will fail until storage is back.
            logger.error("Article store connection error: %s", exc)
            await notifier.notify(f"Article store connection error: {exc}")

        scheduler: PipelineScheduler | None = None
        if scheduler_enabled and app.state.pipeline is not None:
            scheduler = PipelineScheduler(
                app.state.pipeline,
                interval=settings.poll_interval_seconds,
                notifier=notifier,
            )
            scheduler.start()
        app.state.scheduler = scheduler

        try:
            yield
        finally:
            if scheduler is not None:
                await scheduler.stop()

    app = FastAPI(
        title="Article Relay",
        description="Rewrites newly published source articles into draft posts",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.pipeline = pipeline
    app.state.scheduler = None
    app.include_router(router, prefix="/api")
    return app


app = create_app()
