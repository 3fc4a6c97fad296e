"""Mine structure out of the HTML returned by the rewriting backend.

The backend answers with a single HTML document in which the article title
(the first ``<h1>``) and the SEO keywords (a ``<ul>`` placed directly after an
``<h2>`` that mentions "SEO Keywords") are embedded alongside the article body. The
helpers here turn that text into a :class:`ParsedArticle` and apply the
post-processing steps to the body.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List

from bs4 import BeautifulSoup, Tag

from articlerelay.config import FooterConfig
from articlerelay.errors import MalformedOutputError
from articlerelay.models import CrossLink

__all__ = [
    "KEYWORDS_HEADING",
    "ParsedArticle",
    "append_footer",
    "count_words",
    "insert_read_more",
    "parse_generated_article",
    "strip_code_fence",
]

KEYWORDS_HEADING = "SEO Keywords"

_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*\s*\n(?P<body>.*?)\n?\s*```\s*$", re.DOTALL)


@dataclass
class ParsedArticle:
    """Title, keywords and cleaned body extracted from generated HTML."""

    title: str
    soup: BeautifulSoup
    keywords: List[str] = field(default_factory=list)
    word_count: int = 0

    @property
    def container(self) -> Tag:
        return self.soup.body or self.soup

    def render(self) -> str:
        """Return the body markup without the document wrapper."""

        return "".join(str(child) for child in self.container.contents).strip()


def strip_code_fence(text: str) -> str:
    """Remove a Markdown code fence wrapped around the whole response."""

    match = _FENCE_RE.match(text)
    return match.group("body") if match else text


def count_words(html: str) -> int:
    """Count whitespace separated words in the visible text of ``html``."""

    soup = BeautifulSoup(html, "lxml")
    return len(soup.get_text(" ").split())


def _text_of(tag: Tag) -> str:
    return " ".join(tag.get_text().split())


def _keyword_headings(soup: BeautifulSoup) -> List[Tag]:
    return [h2 for h2 in soup.find_all("h2") if KEYWORDS_HEADING in h2.get_text()]


def parse_generated_article(html: str, *, min_words: int = 600) -> ParsedArticle:
    """Validate generated HTML and split it into title, keywords and body.

    Raises :class:`MalformedOutputError` when the text has fewer than
    ``min_words`` words or carries no ``<h1>`` title.
    """

    html = strip_code_fence(html)
    word_count = count_words(html)
    if word_count < min_words:
        raise MalformedOutputError(f"Generated article too short: {word_count} words")

    soup = BeautifulSoup(html, "lxml")
    heading = soup.find("h1")
    title = _text_of(heading) if heading is not None else ""
    if not title:
        raise MalformedOutputError("Generated title not found in response")

    keywords: List[str] = []
    for h2 in _keyword_headings(soup):
        block = h2.find_next_sibling()
        if block is not None and block.name == "ul":
            keywords.extend(_text_of(li) for li in block.find_all("li"))
            block.decompose()
        h2.decompose()
    keywords = [keyword for keyword in keywords if keyword]

    heading.decompose()

    return ParsedArticle(title=title, soup=soup, keywords=keywords, word_count=word_count)


def insert_read_more(article: ParsedArticle, link: CrossLink) -> bool:
    """Insert a "Read More" paragraph after the middle paragraph.

    Returns ``False`` without touching the body when it has fewer than two
    paragraphs.
    """

    soup = article.soup
    paragraphs = article.container.find_all("p")
    middle = len(paragraphs) // 2
    if middle <= 0:
        return False

    paragraph = soup.new_tag("p")
    strong = soup.new_tag("strong")
    strong.string = "Read More:"
    anchor = soup.new_tag("a", href=link.url, target="_blank")
    anchor.string = link.title
    paragraph.append(strong)
    paragraph.append(" ")
    paragraph.append(anchor)

    paragraphs[middle].insert_after(paragraph)
    return True


def append_footer(article: ParsedArticle, footer: FooterConfig) -> None:
    """Append the promotional footer paragraph at the end of the body."""

    soup = article.soup
    paragraph = soup.new_tag("p")
    strong = soup.new_tag("strong")
    strong.string = footer.label
    anchor = soup.new_tag("a", href=footer.url, target="_blank")
    anchor.string = footer.text
    paragraph.append(strong)
    paragraph.append(" ")
    paragraph.append(anchor)

    article.container.append(paragraph)
