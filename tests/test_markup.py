from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from articlerelay.config import FooterConfig
from articlerelay.errors import MalformedOutputError
from articlerelay.models import CrossLink
from articlerelay.services.markup import (
    append_footer,
    count_words,
    insert_read_more,
    parse_generated_article,
    strip_code_fence,
)


def single_paragraph_article(total_words: int) -> str:
    """Return HTML whose visible text is exactly ``total_words`` words (title included)."""

    return "<h1>Y</h1><p>" + " ".join(["word"] * (total_words - 1)) + "</p>"


def test_word_count_boundary_rejects_599_and_accepts_600() -> None:
    assert count_words(single_paragraph_article(599)) == 599
    assert count_words(single_paragraph_article(600)) == 600

    with pytest.raises(MalformedOutputError, match="too short: 599"):
        parse_generated_article(single_paragraph_article(599))

    parsed = parse_generated_article(single_paragraph_article(600))
    assert parsed.title == "Y"
    assert parsed.word_count == 600


def test_missing_title_is_rejected() -> None:
    html = "<h2>Intro</h2><p>" + " ".join(["word"] * 700) + "</p>"

    with pytest.raises(MalformedOutputError, match="title"):
        parse_generated_article(html)


def test_title_and_keyword_block_are_extracted_and_removed() -> None:
    html = (
        "<h1> Big Premiere Tonight </h1>"
        "<h2>Background</h2>"
        "<p>" + " ".join(["alpha"] * 650) + "</p>"
        "<h2>SEO Keywords</h2>"
        "<ul><li>premiere</li><li> box office </li><li>tollywood</li></ul>"
    )

    parsed = parse_generated_article(html)
    body = parsed.render()

    assert parsed.title == "Big Premiere Tonight"
    assert parsed.keywords == ["premiere", "box office", "tollywood"]
    assert "<h1>" not in body
    assert "SEO Keywords" not in body
    assert "<li>" not in body
    assert "<h2>Background</h2>" in body
    assert "<html>" not in body and "<body>" not in body


def test_inline_markup_keeps_word_spacing_in_title_and_keywords() -> None:
    html = (
        "<h1>Pushpa 2 <em>Box Office</em> Record</h1>"
        "<p>" + " ".join(["alpha"] * 650) + "</p>"
        "<h2>SEO Keywords</h2>"
        "<ul><li><strong>Pushpa</strong> box office</li><li>Allu\n  Arjun</li></ul>"
    )

    parsed = parse_generated_article(html)

    assert parsed.title == "Pushpa 2 Box Office Record"
    assert parsed.keywords == ["Pushpa box office", "Allu Arjun"]


def test_keyword_heading_only_claims_the_list_right_after_it() -> None:
    html = (
        "<h1>Y</h1>"
        "<p>" + " ".join(["alpha"] * 650) + "</p>"
        "<h2>SEO Keywords</h2>"
        "<p>Tags below</p>"
        "<h2>Cast</h2>"
        "<ul><li>Actor A</li></ul>"
    )

    parsed = parse_generated_article(html)
    body = parsed.render()

    assert parsed.keywords == []
    assert "<li>Actor A</li>" in body
    assert "<h2>Cast</h2>" in body
    assert "SEO Keywords" not in body


def test_code_fence_is_stripped() -> None:
    fenced = "```html\n<h1>T</h1>\n<p>text</p>\n```"

    assert strip_code_fence(fenced) == "<h1>T</h1>\n<p>text</p>"
    assert strip_code_fence("<p>plain</p>") == "<p>plain</p>"

    parsed = parse_generated_article("```html\n" + single_paragraph_article(600) + "\n```")
    assert parsed.title == "Y"


def _three_paragraph_article() -> str:
    filler = " ".join(["text"] * 250)
    return f"<h1>Y</h1><p>one {filler}</p><p>two {filler}</p><p>three {filler}</p>"


def test_read_more_goes_after_middle_paragraph() -> None:
    parsed = parse_generated_article(_three_paragraph_article())

    inserted = insert_read_more(parsed, CrossLink(url="https://cms.example.com/1", title="Older story"))

    assert inserted is True
    paragraphs = BeautifulSoup(parsed.render(), "lxml").find_all("p")
    assert [p.get_text().split()[0] for p in paragraphs] == ["one", "two", "Read", "three"]
    anchor = paragraphs[2].find("a")
    assert anchor["href"] == "https://cms.example.com/1"
    assert anchor["target"] == "_blank"
    assert anchor.get_text() == "Older story"


def test_read_more_skipped_for_single_paragraph() -> None:
    parsed = parse_generated_article(single_paragraph_article(650))

    inserted = insert_read_more(parsed, CrossLink(url="https://cms.example.com/1", title="Older"))

    assert inserted is False
    assert "Read More" not in parsed.render()


def test_footer_is_last_paragraph() -> None:
    parsed = parse_generated_article(_three_paragraph_article())
    footer = FooterConfig(label="Follow us:", text="Join us", url="https://social.example.com/")

    append_footer(parsed, footer)

    paragraphs = BeautifulSoup(parsed.render(), "lxml").find_all("p")
    last = paragraphs[-1]
    assert last.find("strong").get_text() == "Follow us:"
    assert last.find("a")["href"] == "https://social.example.com/"
