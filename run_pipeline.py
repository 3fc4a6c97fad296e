"""Convenience script for running one Article Relay batch locally."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

# Ensure the src directory is on the Python path so the articlerelay package can be imported
SRC_PATH = Path(__file__).resolve().parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from articlerelay.blobstore import ArticleStore  # noqa: E402  (import after path setup)
from articlerelay.config import AppConfig, Settings  # noqa: E402
from articlerelay.errors import ArticleRelayError  # noqa: E402
from articlerelay.logging_config import configure_logging  # noqa: E402
from articlerelay.services.pipeline import build_pipeline  # noqa: E402


def main() -> None:
    """Load configuration, run a single batch and print its summary."""

    try:
        settings = Settings.from_env()
    except ValueError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.log_level, settings.log_dir)

    try:
        config = AppConfig.from_file()
        store = ArticleStore(settings.store_root)
        store.connect()
        pipeline = build_pipeline(settings, config, store=store)
    except (FileNotFoundError, ValueError, ArticleRelayError) as exc:
        logging.error("Could not set up the pipeline: %s", exc)
        sys.exit(1)

    try:
        summary = asyncio.run(pipeline.run_batch())
    except ArticleRelayError as exc:
        logging.error("Batch failed: %s", exc)
        sys.exit(1)

    payload = summary.model_dump(mode="json")
    payload["message"] = summary.message
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
