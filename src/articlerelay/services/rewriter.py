"""Rewrite source articles through an OpenAI-compatible chat completion API."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Protocol

from openai import OpenAI

from articlerelay.config import FooterConfig, Settings
from articlerelay.errors import MalformedOutputError
from articlerelay.models import RewriteResult
from articlerelay.notifications import OperatorNotifier

from .credentials import CredentialPool
from .crosslink import CrossLinkSelector
from .markup import KEYWORDS_HEADING, append_footer, insert_read_more, parse_generated_article

__all__ = ["ContentRewriter", "OpenRouterGenerator", "TextGenerator", "build_prompt"]

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "google/gemma-3-12b-it:free"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"

PROMPT_TEMPLATE = """Write a detailed and engaging HTML-formatted article of 800+ words on the following topic, based on the content provided below.

Guidelines:
- Use a professional tone and active voice throughout.
- Structure the article with a compelling <h1> title and multiple <h2> subheadings.
- Start with an engaging introduction that hooks the reader.
- Organize body content into paragraphs with deep insights, relevant examples, and clarity.
- End with a strong conclusion summarizing the article's core message.
- Avoid repetition and AI-like phrasing.
- Do not reference or mention the original source.
- The content should be original and flow naturally like human writing.
- After the conclusion, add an <h2>{keywords_heading}</h2> followed by a <ul> listing 5 to 8 SEO keywords, one per <li>.
- Output must be valid, clean HTML.

Original Title:
"{title}"

Original Content:
\"\"\"{content}\"\"\"
"""


def build_prompt(original_title: str, original_text: str) -> str:
    """Return the rewrite instruction for one article."""

    return PROMPT_TEMPLATE.format(
        keywords_heading=KEYWORDS_HEADING,
        title=original_title,
        content=original_text,
    )


class TextGenerator(Protocol):
    async def generate(self, prompt: str, api_key: str) -> str:
        ...


class OpenRouterGenerator:
    """Chat completion backend reached through the ``openai`` client."""

    def __init__(
        self,
        *,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        temperature: float = 0.7,
    ) -> None:
        self.model = model
        self.base_url = base_url
        self.temperature = temperature
        self._clients: Dict[str, OpenAI] = {}

    def _client_for(self, api_key: str) -> OpenAI:
        client = self._clients.get(api_key)
        if client is None:
            # Retries are handled by the credential pool and the pipeline.
            client = OpenAI(api_key=api_key, base_url=self.base_url, max_retries=0)
            self._clients[api_key] = client
        return client

    def _generate_sync(self, prompt: str, api_key: str) -> str:
        client = self._client_for(api_key)
        response = client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
        )

        if not response.choices:
            raise MalformedOutputError("No choices returned in API response")

        content = response.choices[0].message.content
        if not content:
            raise MalformedOutputError("Empty message returned in API response")
        return content

    async def generate(self, prompt: str, api_key: str) -> str:
        return await asyncio.to_thread(self._generate_sync, prompt, api_key)


class ContentRewriter:
    """Turn an original article into publishable HTML.

    Generation runs through the :class:`CredentialPool`; output that fails
    validation counts as a failure of that credential, so the next key is
    tried before the rewrite gives up.
    """

    def __init__(
        self,
        generator: TextGenerator,
        pool: CredentialPool,
        cross_links: CrossLinkSelector,
        *,
        footer: FooterConfig | None = None,
        min_words: int = 600,
        notifier: OperatorNotifier | None = None,
    ) -> None:
        self._generator = generator
        self._pool = pool
        self._cross_links = cross_links
        self.footer = footer or FooterConfig()
        self.min_words = min_words
        self._notifier = notifier

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        cross_links: CrossLinkSelector,
        *,
        footer: FooterConfig | None = None,
        min_words: int = 600,
        rotation_delay: float = 1.0,
        notifier: OperatorNotifier | None = None,
    ) -> "ContentRewriter":
        generator = OpenRouterGenerator(
            model=settings.openrouter_model, base_url=settings.openrouter_base_url
        )
        pool = CredentialPool(tuple(settings.openrouter_api_keys), delay=rotation_delay)
        return cls(
            generator,
            pool,
            cross_links,
            footer=footer,
            min_words=min_words,
            notifier=notifier,
        )

    async def _report_failure(self, position: int, exc: BaseException) -> None:
        if self._notifier is not None:
            await self._notifier.notify(f"OpenRouter API Error with key {position}: {exc}")

    async def rewrite(
        self, original_text: str, original_title: str, current_link: str
    ) -> RewriteResult:
        prompt = build_prompt(original_title, original_text)

        async def attempt(api_key: str):
            html = await self._generator.generate(prompt, api_key)
            return parse_generated_article(html, min_words=self.min_words)

        article = await self._pool.run(attempt, on_failure=self._report_failure)

        link = await self._cross_links.select(current_link)
        if link is not None:
            insert_read_more(article, link)

        append_footer(article, self.footer)

        logger.info(
            'Regenerated article: "%s", word count: %d', article.title, article.word_count
        )
        return RewriteResult(
            markup=article.render(),
            extracted_title=article.title,
            keywords=article.keywords,
            word_count=article.word_count,
        )
