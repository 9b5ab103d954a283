"""HTML extraction helpers that turn rendered pages into crawl records."""

from __future__ import annotations

from typing import List, Optional
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup, Tag
from readability import Document

from .models import CrawledPage
from .utils import unique_preserve_order

_MIN_PLAINTEXT_CHARS = 200
_HEADING_PREFIXES = {"h1": "# ", "h2": "## ", "h3": "### ", "h4": "### ", "h5": "### ", "h6": "### "}
_BLOCK_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6", "p", "li", "blockquote", "pre"]


def _clean_content(soup: BeautifulSoup, strip_chrome: bool = False) -> BeautifulSoup:
    """Remove noisy tags while keeping relevant article markup."""
    for tag in soup(["script", "style", "noscript", "form"]):
        tag.decompose()
    if strip_chrome:
        for tag in soup(["header", "footer", "nav", "aside"]):
            tag.decompose()
    return soup


def _block_text(tag: Tag) -> str:
    return " ".join(tag.get_text(" ", strip=True).split())


def html_to_markdown(soup: BeautifulSoup) -> str:
    """Render headings, paragraphs and list items as simple Markdown lines."""
    lines: List[str] = []
    for tag in soup.find_all(_BLOCK_TAGS):
        # nested blocks are rendered through their innermost element
        if tag.find(_BLOCK_TAGS):
            continue
        text = _block_text(tag)
        if not text:
            continue
        if tag.name in _HEADING_PREFIXES:
            lines.append(_HEADING_PREFIXES[tag.name] + text)
        elif tag.name == "li":
            lines.append(f"- {text}")
        elif tag.name == "blockquote":
            lines.append(f"> {text}")
        else:
            lines.append(text)
    return "\n\n".join(lines)


def _main_content(html: str, soup_full: BeautifulSoup) -> BeautifulSoup:
    """Prefer readability's summary, widening to main/article/body when it is too thin."""
    summary = _clean_content(BeautifulSoup(Document(html).summary(html_partial=True), "html.parser"))
    if len(summary.get_text(strip=True)) >= _MIN_PLAINTEXT_CHARS:
        return summary
    for selector in ("main", "article", "body"):
        candidate = soup_full.select_one(selector)
        if candidate is None:
            continue
        candidate = _clean_content(BeautifulSoup(str(candidate), "html.parser"), strip_chrome=True)
        if len(candidate.get_text(strip=True)) >= _MIN_PLAINTEXT_CHARS:
            return candidate
    return summary


def extract_links(soup: BeautifulSoup, base_url: str) -> List[str]:
    """Absolute http(s) links found in the page, without fragments."""
    links = []
    for anchor in soup.find_all("a", href=True):
        absolute, _ = urldefrag(urljoin(base_url, anchor["href"]))
        if urlparse(absolute).scheme in ("http", "https"):
            links.append(absolute)
    return unique_preserve_order(links)


def extract_page(html: str, final_url: str) -> CrawledPage:
    """Build a crawl record from rendered HTML."""
    soup_full = BeautifulSoup(html, "html.parser")

    title: Optional[str] = None
    if soup_full.title and soup_full.title.string:
        title = soup_full.title.string.strip()
    if not title:
        title = Document(html).short_title() or None

    markdown = html_to_markdown(_main_content(html, soup_full))
    return CrawledPage(
        url=final_url,
        title=title,
        markdown=markdown,
        html=html,
        links=extract_links(soup_full, final_url),
    )
