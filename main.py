"""ASGI entrypoint for running the Article Relay API with Uvicorn."""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the src directory is on the Python path so the articlerelay package can be imported
SRC_PATH = Path(__file__).resolve().parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from articlerelay.config import Settings  # noqa: E402  (import after path setup)
from articlerelay.logging_config import configure_logging  # noqa: E402

_settings = Settings.from_env()
configure_logging(_settings.log_level, _settings.log_dir)

from articlerelay.api.app import app  # noqa: E402

__all__ = ("app",)
