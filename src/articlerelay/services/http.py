"""Shared HTTP session settings for talking to source sites."""

from __future__ import annotations

import asyncio

import requests

__all__ = ["DEFAULT_HEADERS", "REQUEST_TIMEOUT", "build_session", "fetch_html"]

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/129.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}

#: (connect, read) timeout in seconds applied to every page request.
REQUEST_TIMEOUT = (10, 60)


def build_session() -> requests.Session:
    """Return a :class:`requests.Session` carrying browser-like headers."""

    session = requests.Session()
    session.headers.update(DEFAULT_HEADERS)
    return session


async def fetch_html(session: requests.Session, url: str) -> str:
    """GET ``url`` from a worker thread and return the response body."""

    def _get() -> str:
        response = session.get(url, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.text

    return await asyncio.to_thread(_get)
