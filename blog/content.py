"""HTML inspection helpers for post and draft bodies."""

from __future__ import annotations

import math
import re

from bs4 import BeautifulSoup

HANGUL_CHARS_PER_MIN = 600
LATIN_WORDS_PER_MIN = 220
IMAGE_SECONDS = 5
CODE_LINE_SECONDS = 2

HANGUL_RE = re.compile(r"[가-힣]")
LATIN_WORD_RE = re.compile(r"[A-Za-z]+")
MARKDOWN_IMAGE_RE = re.compile(r"!\[[^\]]*\]\(([^)]+)\)")
WHITESPACE_RE = re.compile(r"\s+")

EMPTY_BODIES = {"", "<p></p>"}


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def plain_text(html: str) -> str:
    text = _soup(html).get_text(" ")
    return WHITESPACE_RE.sub(" ", text).strip()


def make_excerpt(html: str, length: int = 200) -> str:
    return plain_text(html)[:length]


def is_empty_body(html: str) -> bool:
    return (html or "").strip() in EMPTY_BODIES


def reading_time(html: str) -> int:
    """Estimated reading time in whole minutes, never less than one.

    Hangul is counted per syllable, Latin text per word; images and lines
    inside ``<pre>`` blocks add a fixed number of seconds each.
    """
    soup = _soup(html)
    images = len(soup.find_all("img"))

    code_lines = 0
    for block in soup.find_all("pre"):
        code_lines += str(block).count("\n") + 1
        block.decompose()

    text = soup.get_text(" ")
    minutes = (
        len(HANGUL_RE.findall(text)) / HANGUL_CHARS_PER_MIN
        + len(LATIN_WORD_RE.findall(text)) / LATIN_WORDS_PER_MIN
        + images * IMAGE_SECONDS / 60
        + code_lines * CODE_LINE_SECONDS / 60
    )
    return max(1, math.ceil(minutes) if minutes >= 0.5 else 0)


def extract_image_urls(html: str, cover_image: str | None = None) -> list[str]:
    """Image URLs referenced by ``<img>`` tags, markdown images and the cover, in order."""
    urls = [img["src"] for img in _soup(html).find_all("img", src=True) if img["src"]]
    urls.extend(MARKDOWN_IMAGE_RE.findall(html or ""))
    if cover_image:
        urls.append(cover_image)
    return list(dict.fromkeys(urls))
