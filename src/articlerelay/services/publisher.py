"""WordPress REST client used to read and create draft posts."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List

import requests
from requests.auth import HTTPBasicAuth

from articlerelay.config import Settings
from articlerelay.errors import PublishError
from articlerelay.models import PublishedItem, PublishedPost

__all__ = ["WordPressClient", "POSTS_ENDPOINT"]

logger = logging.getLogger(__name__)

POSTS_ENDPOINT = "/wp-json/wp/v2/posts"
REQUEST_TIMEOUT = (10, 60)


def _rendered(value: Any) -> str:
    if isinstance(value, dict):
        return str(value.get("rendered", ""))
    return "" if value is None else str(value)


class WordPressClient:
    """Minimal client for the WordPress posts endpoint.

    The basic-auth session is built once and reused for every request made
    by this client. New posts are always created as drafts.
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._username = username
        self._password = password
        self._session = session

    @classmethod
    def from_settings(cls, settings: Settings) -> "WordPressClient":
        if not (settings.wp_url and settings.wp_username and settings.wp_password):
            raise ValueError("WP_URL, WP_USERNAME and WP_PASSWORD must be configured")
        return cls(settings.wp_url, settings.wp_username, settings.wp_password)

    @property
    def posts_url(self) -> str:
        return f"{self.base_url}{POSTS_ENDPOINT}"

    def _authenticated_session(self) -> requests.Session:
        if self._session is None:
            session = requests.Session()
            session.headers.update({"Accept": "application/json"})
            session.auth = HTTPBasicAuth(self._username, self._password)
            self._session = session
        return self._session

    def list_existing_sync(self, limit: int = 10) -> List[PublishedItem]:
        session = self._authenticated_session()
        response = session.get(
            self.posts_url,
            params={"per_page": limit, "status": "publish,draft"},
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        payload = response.json()

        if not isinstance(payload, list):
            logger.error("Unexpected WordPress API response: %s", payload)
            return []

        return [
            PublishedItem(
                id=post["id"],
                title=_rendered(post.get("title")),
                link=str(post.get("link", "")),
                raw_content=_rendered(post.get("content")),
            )
            for post in payload
            if isinstance(post, dict) and "id" in post
        ]

    def publish_sync(self, title: str, content: str) -> PublishedPost:
        session = self._authenticated_session()
        logger.info('Posting to WordPress with regenerated title: "%s"', title)

        try:
            response = session.post(
                self.posts_url,
                json={"title": title, "content": content, "status": "draft"},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            raise PublishError(f"WordPress request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise PublishError(
                f"WordPress returned a non-JSON response (HTTP {response.status_code})"
            ) from exc

        if isinstance(payload, dict) and payload.get("code"):
            raise PublishError(f"WordPress API error: {payload.get('message', payload['code'])}")
        if not response.ok:
            raise PublishError(f"WordPress API error: HTTP {response.status_code}")
        if not isinstance(payload, dict) or "id" not in payload:
            raise PublishError("WordPress response did not include a post id")

        post = PublishedPost(id=payload["id"], url=str(payload.get("link", "")))
        logger.info("Saved to WordPress. Post ID: %s, URL: %s", post.id, post.url)
        return post

    async def list_existing(self, limit: int = 10) -> List[PublishedItem]:
        return await asyncio.to_thread(self.list_existing_sync, limit)

    async def publish(self, title: str, content: str) -> PublishedPost:
        return await asyncio.to_thread(self.publish_sync, title, content)
