"""API routes exposing the pipeline trigger and the stored articles."""

from __future__ import annotations

import logging
import re
from typing import List
from urllib.parse import urlparse

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from articlerelay.config import AppConfig
from articlerelay.errors import StorageConnectivityError
from articlerelay.models import ArticleRecord
from articlerelay.services.pipeline import ArticlePipeline

logger = logging.getLogger(__name__)

router = APIRouter()


class ProcessResponse(BaseModel):
    message: str


class StatusResponse(BaseModel):
    pipeline_configured: bool
    batch_running: bool
    scheduler_running: bool


class SourceEntry(BaseModel):
    name: str
    slug: str
    host: str


class SourcesResponse(BaseModel):
    sources: List[SourceEntry] = Field(default_factory=list)


def _slugify_source(name: str) -> str:
    """Return the stable identifier reported for a source by ``/api/sources``."""

    normalized = re.sub(r"[^a-z0-9]+", "-", name.strip().lower())
    slug = normalized.strip("-")
    return slug or "source"


def _get_pipeline(request: Request) -> ArticlePipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=503, detail="Pipeline is not configured.")
    return pipeline


@router.api_route("/process-articles", methods=["GET", "POST"], response_model=ProcessResponse)
async def process_articles(request: Request) -> ProcessResponse:
    """Run one batch of the pipeline and report how many articles were processed."""

    pipeline = _get_pipeline(request)
    try:
        summary = await pipeline.run_batch()
    except Exception as exc:  # noqa: BLE001 - batch-level failures become HTTP 500
        logger.exception("Article processing failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return ProcessResponse(message=summary.message)


@router.get("/articles", response_model=List[ArticleRecord])
async def list_articles(request: Request) -> List[ArticleRecord]:
    """Return every stored article record, newest first."""

    store = request.app.state.store
    try:
        return await store.list_newest_first()
    except StorageConnectivityError as exc:
        logger.error("Failed to list stored articles: %s", exc)
        raise HTTPException(status_code=500, detail="Server error retrieving articles") from exc


@router.get("/status", response_model=StatusResponse)
async def pipeline_status(request: Request) -> StatusResponse:
    """Report whether the pipeline is configured and currently running."""

    pipeline = getattr(request.app.state, "pipeline", None)
    scheduler = getattr(request.app.state, "scheduler", None)
    return StatusResponse(
        pipeline_configured=pipeline is not None,
        batch_running=bool(pipeline is not None and pipeline.running),
        scheduler_running=bool(scheduler is not None and scheduler.running),
    )


@router.get("/sources", response_model=SourcesResponse)
async def list_sources() -> SourcesResponse:
    """Return the configured set of source sites."""

    try:
        config = AppConfig.from_file()
    except FileNotFoundError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    entries: List[SourceEntry] = []
    for source in config.sources:
        host = urlparse(str(source.url)).netloc
        entries.append(SourceEntry(name=source.name, slug=_slugify_source(source.name), host=host))

    return SourcesResponse(sources=entries)
