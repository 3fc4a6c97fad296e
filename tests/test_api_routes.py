"""Tests for the HTTP surface in :mod:`articlerelay.api.routes`."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

from articlerelay.api.app import create_app
from articlerelay.api.routes import _slugify_source
from articlerelay.blobstore import ArticleStore
from articlerelay.config import AppConfig, Settings, SourceConfig
from articlerelay.errors import StorageConnectivityError
from articlerelay.models import ArticleRecord, BatchSummary


class FakePipeline:
    def __init__(self, summary: BatchSummary | None = None, error: Exception | None = None) -> None:
        self.summary = summary or BatchSummary(processed=2, skipped=3)
        self.error = error
        self.calls = 0
        self.running = False

    async def run_batch(self) -> BatchSummary:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.summary


def make_client(tmp_path: Path, pipeline=None, store=None) -> TestClient:
    app = create_app(
        settings=Settings(store_root=str(tmp_path)),
        pipeline=pipeline,
        store=store or ArticleStore(tmp_path),
        start_scheduler=False,
    )
    return TestClient(app)


def test_slugify_source_normalises_names() -> None:
    assert _slugify_source("123 Telugu!") == "123-telugu"
    assert _slugify_source("   ") == "source"


def test_process_articles_reports_counts(tmp_path: Path) -> None:
    pipeline = FakePipeline()
    client = make_client(tmp_path, pipeline=pipeline)

    assert client.get("/api/process-articles").json() == {"message": "2 processed, 3 skipped"}
    assert client.post("/api/process-articles").json() == {"message": "2 processed, 3 skipped"}
    assert pipeline.calls == 2


def test_process_articles_returns_500_on_batch_failure(tmp_path: Path) -> None:
    client = make_client(tmp_path, pipeline=FakePipeline(error=StorageConnectivityError("disk full")))

    response = client.get("/api/process-articles")

    assert response.status_code == 500
    assert response.json()["detail"] == "disk full"


def test_process_articles_without_pipeline_is_unavailable(tmp_path: Path) -> None:
    with patch("articlerelay.api.app.AppConfig.from_file", side_effect=FileNotFoundError("missing")):
        client = make_client(tmp_path)

    response = client.post("/api/process-articles")

    assert response.status_code == 503


def test_articles_are_listed_newest_first(tmp_path: Path) -> None:
    store = ArticleStore(tmp_path)
    now = datetime.now(UTC)
    for index, age in enumerate([3, 1, 2]):
        store.insert_if_absent_sync(
            ArticleRecord(
                source_link=f"http://s/{index}",
                original_title=f"Story {index}",
                source_name="Example",
                full_content="text",
                created_at=now - timedelta(hours=age),
            )
        )
    client = make_client(tmp_path, pipeline=FakePipeline(), store=store)

    response = client.get("/api/articles")

    assert response.status_code == 200
    assert [item["source_link"] for item in response.json()] == ["http://s/1", "http://s/2", "http://s/0"]


def test_articles_storage_failure_returns_500(tmp_path: Path) -> None:
    class BrokenStore(ArticleStore):
        async def list_newest_first(self):
            raise StorageConnectivityError("disk gone")

    client = make_client(tmp_path, pipeline=FakePipeline(), store=BrokenStore(tmp_path))

    response = client.get("/api/articles")

    assert response.status_code == 500
    assert response.json()["detail"] == "Server error retrieving articles"


def test_status_reports_pipeline_state(tmp_path: Path) -> None:
    client = make_client(tmp_path, pipeline=FakePipeline())

    assert client.get("/api/status").json() == {
        "pipeline_configured": True,
        "batch_running": False,
        "scheduler_running": False,
    }


def test_sources_lists_configured_sites(tmp_path: Path) -> None:
    config = AppConfig(
        sources=[
            SourceConfig(
                name="123Telugu",
                url="https://www.123telugu.com/category/mnews",
                selector=".pcsl-title",
            )
        ]
    )
    client = make_client(tmp_path, pipeline=FakePipeline())

    with patch("articlerelay.api.routes.AppConfig.from_file", return_value=config):
        payload = client.get("/api/sources").json()

    assert payload == {
        "sources": [{"name": "123Telugu", "slug": "123telugu", "host": "www.123telugu.com"}]
    }


def test_lifespan_connects_store(tmp_path: Path) -> None:
    root = tmp_path / "nested"
    with make_client(root, pipeline=FakePipeline()) as client:
        assert client.get("/api/articles").json() == []

    assert (root / "articles").is_dir()
