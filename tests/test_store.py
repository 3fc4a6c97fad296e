from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from articlerelay.blobstore import ArticleStore
from articlerelay.errors import StorageConnectivityError
from articlerelay.models import ArticleRecord


def make_record(link: str, **overrides) -> ArticleRecord:
    values = {
        "source_link": link,
        "original_title": "Original",
        "source_name": "Example",
        "full_content": "text",
    }
    values.update(overrides)
    return ArticleRecord(**values)


def test_insert_if_absent_writes_once(tmp_path: Path) -> None:
    store = ArticleStore(tmp_path)
    store.connect()

    first = make_record("http://s/1", generated_title="First")
    second = make_record("http://s/1", generated_title="Second")

    assert asyncio.run(store.insert_if_absent(first)) is True
    assert asyncio.run(store.insert_if_absent(second)) is False

    assert asyncio.run(store.exists("http://s/1")) is True
    assert asyncio.run(store.exists("http://s/2")) is False
    stored = store.get_sync("http://s/1")
    assert stored is not None
    assert stored.generated_title == "First"
    assert len(list((tmp_path / "articles").glob("*.json"))) == 1


def test_list_is_newest_first(tmp_path: Path) -> None:
    store = ArticleStore(tmp_path)
    now = datetime.now(UTC)
    store.insert_if_absent_sync(make_record("http://s/old", created_at=now - timedelta(hours=2)))
    store.insert_if_absent_sync(make_record("http://s/new", created_at=now))
    store.insert_if_absent_sync(make_record("http://s/mid", created_at=now - timedelta(hours=1)))

    records = asyncio.run(store.list_newest_first())

    assert [record.source_link for record in records] == ["http://s/new", "http://s/mid", "http://s/old"]


def test_list_skips_unreadable_records(tmp_path: Path) -> None:
    store = ArticleStore(tmp_path)
    store.insert_if_absent_sync(make_record("http://s/1"))
    (tmp_path / "articles" / "garbage.json").write_text("{broken", encoding="utf-8")

    assert [record.source_link for record in store.list_sync()] == ["http://s/1"]


def test_find_published_filters_and_excludes(tmp_path: Path) -> None:
    store = ArticleStore(tmp_path)
    store.insert_if_absent_sync(
        make_record("http://s/1", generated_title="One", published_url="https://cms/1", published_id=1)
    )
    store.insert_if_absent_sync(make_record("http://s/2", generated_title="Two"))
    store.insert_if_absent_sync(make_record("http://s/3", published_url="https://cms/3"))
    store.insert_if_absent_sync(
        make_record("http://s/4", generated_title="Four", published_url="https://cms/4", published_id=4)
    )

    found = asyncio.run(store.find_published("http://s/4"))

    assert [record.source_link for record in found] == ["http://s/1"]


def test_find_published_respects_limit(tmp_path: Path) -> None:
    store = ArticleStore(tmp_path)
    for index in range(15):
        store.insert_if_absent_sync(
            make_record(f"http://s/{index}", generated_title=f"T{index}", published_url=f"https://cms/{index}")
        )

    assert len(store.find_published_sync("http://s/none", limit=10)) == 10


def test_connect_failure_raises_storage_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way", encoding="utf-8")
    store = ArticleStore(blocker)

    with pytest.raises(StorageConnectivityError):
        store.connect()

    with pytest.raises(StorageConnectivityError):
        store.insert_if_absent_sync(make_record("http://s/1"))
