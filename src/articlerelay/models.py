"""Domain models used across the application."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class SourceCandidate(BaseModel):
    """An article reference discovered on a source listing page."""

    title: str
    link: str
    source_name: str


class ArticleRecord(BaseModel):
    """Durable outcome of running the pipeline for one source link."""

    source_link: str
    original_title: str
    generated_title: Optional[str] = None
    source_name: str
    full_content: str
    regenerated_content: Optional[str] = None
    word_count: Optional[int] = Field(default=None, ge=0)
    published_id: Optional[int] = None
    published_url: Optional[str] = None
    seo_keywords: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class RewriteResult(BaseModel):
    """Structured output of the content rewriter."""

    markup: str
    extracted_title: str
    keywords: List[str] = Field(default_factory=list)
    word_count: int = Field(ge=0)


class CrossLink(BaseModel):
    """A previously published article cited as a "Read More" pointer."""

    url: str
    title: str


class PublishedItem(BaseModel):
    """A post that already exists on the publication backend."""

    id: int
    title: str
    link: str
    raw_content: str = ""


class PublishedPost(BaseModel):
    """Identifiers returned when a new post is created."""

    id: int
    url: str


class CandidateOutcome(str, Enum):
    """Terminal state reached by one candidate in a batch."""

    DEDUPED = "deduped"
    FETCH_FAILED = "fetch_failed"
    REWRITE_FAILED = "rewrite_failed"
    PUBLISHED = "published"
    PUBLISH_FAILED = "publish_failed"

    @property
    def recorded(self) -> bool:
        return self in {CandidateOutcome.PUBLISHED, CandidateOutcome.PUBLISH_FAILED}


class BatchSummary(BaseModel):
    """Counts reported after a batch run."""

    processed: int = 0
    skipped: int = 0
    outcomes: Dict[str, CandidateOutcome] = Field(default_factory=dict)

    @property
    def message(self) -> str:
        return f"{self.processed} processed, {self.skipped} skipped"
