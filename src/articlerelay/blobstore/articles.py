"""Filesystem-backed dedup store keyed by source link."""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import os
from pathlib import Path
from typing import List

from pydantic import ValidationError

from articlerelay.errors import StorageConnectivityError
from articlerelay.models import ArticleRecord

from . import ensure_blob_root, resolve_blob_root

__all__ = ["ArticleStore", "ARTICLES_SUBDIR"]

logger = logging.getLogger(__name__)

ARTICLES_SUBDIR = "articles"


def record_filename(link: str) -> str:
    """Return the file name used for the record of ``link``."""

    return f"{hashlib.sha1(link.encode('utf-8')).hexdigest()}.json"


class ArticleStore:
    """One JSON document per source link under ``<blob_root>/articles``.

    Insert-if-absent relies on exclusive file creation, so a link can only
    ever be recorded once even if two runs race on it. Every filesystem
    failure surfaces as :class:`StorageConnectivityError`.
    """

    def __init__(self, blob_root: Path | str | None = None) -> None:
        self.root = resolve_blob_root(blob_root)

    @property
    def articles_dir(self) -> Path:
        return self.root / ARTICLES_SUBDIR

    def connect(self) -> None:
        """Create the storage directories, failing fast when they are unusable."""

        ensure_blob_root(self.articles_dir)
        if not os.access(self.articles_dir, os.W_OK):
            raise StorageConnectivityError(f"Article store is not writable: {self.articles_dir}")

    def _path_for(self, link: str) -> Path:
        return self.articles_dir / record_filename(link)

    def _read(self, path: Path) -> ArticleRecord | None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return ArticleRecord.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Ignoring unreadable article record %s: %s", path, exc)
            return None

    # Synchronous primitives -------------------------------------------------

    def exists_sync(self, link: str) -> bool:
        try:
            return self._path_for(link).exists()
        except OSError as exc:
            raise StorageConnectivityError(str(exc)) from exc

    def get_sync(self, link: str) -> ArticleRecord | None:
        path = self._path_for(link)
        try:
            if not path.exists():
                return None
            return self._read(path)
        except OSError as exc:
            raise StorageConnectivityError(str(exc)) from exc

    def insert_if_absent_sync(self, record: ArticleRecord) -> bool:
        """Write ``record`` unless its link is already stored; return ``True`` if written."""

        path = self._path_for(record.source_link)
        payload = record.model_dump_json(indent=2)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("x", encoding="utf-8") as file:
                file.write(payload)
        except FileExistsError:
            return False
        except OSError as exc:
            raise StorageConnectivityError(f"Failed to store {record.source_link}: {exc}") from exc
        return True

    def list_sync(self) -> List[ArticleRecord]:
        """Return every stored record, newest first."""

        if not self.articles_dir.exists():
            return []

        records: List[ArticleRecord] = []
        try:
            for path in self.articles_dir.glob("*.json"):
                record = self._read(path)
                if record is not None:
                    records.append(record)
        except OSError as exc:
            raise StorageConnectivityError(str(exc)) from exc

        records.sort(key=lambda record: record.created_at, reverse=True)
        return records

    def find_published_sync(self, exclude_link: str, limit: int = 10) -> List[ArticleRecord]:
        """Return up to ``limit`` published records with a title, excluding ``exclude_link``."""

        matches = [
            record
            for record in self.list_sync()
            if record.published_url is not None
            and record.generated_title is not None
            and record.source_link != exclude_link
        ]
        return matches[:limit]

    # Async interface used by the pipeline ------------------------------------

    async def exists(self, link: str) -> bool:
        return await asyncio.to_thread(self.exists_sync, link)

    async def insert_if_absent(self, record: ArticleRecord) -> bool:
        return await asyncio.to_thread(self.insert_if_absent_sync, record)

    async def list_newest_first(self) -> List[ArticleRecord]:
        return await asyncio.to_thread(self.list_sync)

    async def find_published(self, exclude_link: str, limit: int = 10) -> List[ArticleRecord]:
        return await asyncio.to_thread(self.find_published_sync, exclude_link, limit)
