from pathlib import Path

import pytest

pytest.importorskip("pydantic")

from articlerelay.config import (
    DEFAULT_BODY_SELECTOR,
    AppConfig,
    FooterConfig,
    PipelineConfig,
    Settings,
    SourceConfig,
)


def test_round_trip(tmp_path: Path) -> None:
    config_path = tmp_path / "sources.json"
    config = AppConfig(
        sources=[SourceConfig(name="Test", url="https://example.com/news", selector=".title a")],
        footer=FooterConfig(label="Follow:", text="Us", url="https://social.example.com"),
        pipeline=PipelineConfig(item_pause=0.5),
    )
    config.dump(config_path)

    loaded = AppConfig.from_file(config_path)
    assert loaded.sources[0].name == "Test"
    assert loaded.sources[0].selector == ".title a"
    assert loaded.sources[0].body_selector == DEFAULT_BODY_SELECTOR
    assert loaded.footer.url == "https://social.example.com"
    assert loaded.pipeline.item_pause == 0.5
    assert loaded.pipeline.min_word_count == 600


def test_from_file_reports_missing_and_invalid_files(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        AppConfig.from_file(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid JSON"):
        AppConfig.from_file(broken)

    invalid = tmp_path / "invalid.json"
    invalid.write_text('{"sources": [{"name": "x"}]}', encoding="utf-8")
    with pytest.raises(ValueError, match="invalid"):
        AppConfig.from_file(invalid)


def test_link_base_defaults_to_listing_host() -> None:
    source = SourceConfig(
        name="Telugu", url="https://www.123telugu.com/category/mnews", selector=".pcsl-title"
    )
    assert source.link_base == "https://www.123telugu.com/"

    explicit = SourceConfig(
        name="Other",
        url="https://news.example.com/listing",
        base_url="https://cdn.example.com/",
        selector="h2",
    )
    assert explicit.link_base == "https://cdn.example.com/"


def test_settings_from_env_parses_keys_and_flags() -> None:
    settings = Settings.from_env(
        {
            "OPENROUTER_API_KEYS": "key-a, key-b,,key-c ",
            "WP_URL": "https://cms.example.com",
            "WP_USERNAME": "editor",
            "WP_PASSWORD": "secret",
            "POLL_INTERVAL_SECONDS": "120",
            "SCHEDULER_ENABLED": "false",
            "SMTP_PORT": "2525",
        }
    )

    assert settings.openrouter_api_keys == ["key-a", "key-b", "key-c"]
    assert settings.wp_url == "https://cms.example.com"
    assert settings.poll_interval_seconds == 120
    assert settings.scheduler_enabled is False
    assert settings.smtp_port == 2525
    assert settings.openrouter_model == "google/gemma-3-12b-it:free"


def test_settings_from_env_rejects_bad_numbers() -> None:
    with pytest.raises(ValueError):
        Settings.from_env({"POLL_INTERVAL_SECONDS": "soon"})
