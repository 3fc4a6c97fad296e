"""Configuration models and helpers for the article relay pipeline."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List, Mapping
from urllib.parse import urlparse

from pydantic import BaseModel, Field, HttpUrl, ValidationError

__all__ = [
    "AppConfig",
    "FooterConfig",
    "PipelineConfig",
    "Settings",
    "SourceConfig",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_BODY_SELECTOR",
]

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "data" / "sources.json"

#: Body selector used for sources that do not declare their own.
DEFAULT_BODY_SELECTOR = ".article_body"


class SourceConfig(BaseModel):
    """Configuration for a single source site."""

    name: str = Field(..., description="Source identity recorded against each article")
    url: HttpUrl = Field(..., description="Listing page that is polled for new articles")
    base_url: HttpUrl | None = Field(
        default=None,
        description=(
            "Base URL used to resolve relative article links. "
            "Defaults to the scheme and host of the listing URL when omitted."
        ),
    )
    selector: str = Field(..., description="CSS selector matching one listing entry per article")
    body_selector: str = Field(
        default=DEFAULT_BODY_SELECTOR,
        description="CSS selector matching the main body of an article page",
    )
    limit: int = Field(default=10, ge=0, description="Maximum candidates taken from the listing")

    @property
    def link_base(self) -> str:
        """Return the URL that relative article links are resolved against."""

        if self.base_url is not None:
            return str(self.base_url)

        parsed = urlparse(str(self.url))
        return f"{parsed.scheme}://{parsed.netloc}/"


class FooterConfig(BaseModel):
    """Promotional paragraph appended to every rewritten article."""

    label: str = "Follow us on Instagram:"
    text: str = "Join us on Instagram"
    url: str = "https://www.instagram.com/south_filmy_nagri_/"


class PipelineConfig(BaseModel):
    """Retry, rotation and pacing knobs for the pipeline."""

    retry_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=2.0, ge=0)
    rotation_delay: float = Field(default=1.0, ge=0)
    fetch_pause: float = Field(default=1.0, ge=0, description="Pause after a successful fetch")
    item_pause: float = Field(default=5.0, ge=0, description="Pause after each recorded article")
    min_word_count: int = Field(default=600, ge=0)
    cross_link_pool: int = Field(default=10, ge=1)


class AppConfig(BaseModel):
    """Collection of :class:`SourceConfig` entries plus pipeline settings."""

    sources: List[SourceConfig] = Field(default_factory=list)
    footer: FooterConfig = Field(default_factory=FooterConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> "AppConfig":
        """Load configuration data from a JSON file."""

        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise FileNotFoundError(f"Configuration file not found: {config_path}") from exc
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in configuration file: {config_path}") from exc

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Configuration file is invalid: {config_path}\n{exc}") from exc

    def dump(self, path: Path | str | None = None) -> None:
        """Persist the configuration back to disk as JSON."""

        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(self.model_dump_json(indent=2), encoding="utf-8")


def _split_list(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _parse_bool(raw: str | None, default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Deployment settings and secrets read from the environment."""

    openrouter_api_keys: List[str] = Field(default_factory=list)
    openrouter_model: str = "google/gemma-3-12b-it:free"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"

    wp_url: str | None = None
    wp_username: str | None = None
    wp_password: str | None = None

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    email_user: str | None = None
    email_pass: str | None = None
    alert_email_to: str | None = None

    store_root: str | None = None
    poll_interval_seconds: float = Field(default=600.0, gt=0)
    scheduler_enabled: bool = True

    log_level: str = "INFO"
    log_dir: str = "logs"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from ``environ`` (defaults to :data:`os.environ`)."""

        env = os.environ if environ is None else environ

        values: dict[str, object] = {
            "openrouter_api_keys": _split_list(env.get("OPENROUTER_API_KEYS")),
            "wp_url": env.get("WP_URL") or None,
            "wp_username": env.get("WP_USERNAME") or None,
            "wp_password": env.get("WP_PASSWORD") or None,
            "email_user": env.get("EMAIL_USER") or None,
            "email_pass": env.get("EMAIL_PASS") or None,
            "alert_email_to": env.get("ALERT_EMAIL_TO") or None,
            "store_root": env.get("ARTICLE_STORE_ROOT") or None,
            "scheduler_enabled": _parse_bool(env.get("SCHEDULER_ENABLED"), True),
        }

        optional = {
            "openrouter_model": "OPENROUTER_MODEL",
            "openrouter_base_url": "OPENROUTER_BASE_URL",
            "smtp_host": "SMTP_HOST",
            "smtp_port": "SMTP_PORT",
            "poll_interval_seconds": "POLL_INTERVAL_SECONDS",
            "log_level": "LOG_LEVEL",
            "log_dir": "LOG_DIR",
        }
        for field_name, env_name in optional.items():
            raw = env.get(env_name)
            if raw:
                values[field_name] = raw.strip()

        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ValueError(f"Environment settings are invalid:\n{exc}") from exc
