"""Exceptions raised by the article relay services."""

from __future__ import annotations

from typing import List, Tuple

__all__ = [
    "AllCredentialsExhausted",
    "ArticleRelayError",
    "CredentialExhaustedError",
    "DiscoveryError",
    "MalformedOutputError",
    "PublishError",
    "StorageConnectivityError",
    "TransientNetworkError",
]


class ArticleRelayError(Exception):
    """Base class for every error raised by the pipeline."""


class TransientNetworkError(ArticleRelayError):
    """A network call failed in a way that is worth retrying."""


class MalformedOutputError(ArticleRelayError):
    """The rewriting backend returned output that cannot be published."""


class CredentialExhaustedError(ArticleRelayError):
    """Every credential in a rotation pool failed for the same operation."""

    def __init__(self, failures: List[Tuple[int, BaseException]]) -> None:
        self.failures = list(failures)
        detail = "; ".join(f"credential {position}: {exc}" for position, exc in self.failures)
        message = "All credentials exhausted"
        super().__init__(f"{message} ({detail})" if detail else message)


AllCredentialsExhausted = CredentialExhaustedError


class PublishError(ArticleRelayError):
    """The publication backend rejected or failed to create a post."""


class StorageConnectivityError(ArticleRelayError):
    """The durable article store could not be read or written."""


class DiscoveryError(ArticleRelayError):
    """A source listing could not be fetched or yielded no articles."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"{source}: {message}")
