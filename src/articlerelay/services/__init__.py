"""Service layer entry points for Article Relay."""

from __future__ import annotations

from .pipeline import ArticlePipeline, build_pipeline  # noqa: F401
from .retry import RetryPolicy, invoke  # noqa: F401
from .scheduler import PipelineScheduler  # noqa: F401

__all__ = ["ArticlePipeline", "PipelineScheduler", "RetryPolicy", "build_pipeline", "invoke"]
