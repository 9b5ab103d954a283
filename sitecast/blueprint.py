"""Turn crawled pages into a structural blueprint of the site."""

from __future__ import annotations

import re
from collections import Counter
from typing import List, Optional, Sequence, Set
from urllib.parse import unquote, urlparse

from bs4 import BeautifulSoup

from .models import (
    Blueprint,
    BlueprintPage,
    ContentSection,
    CrawledPage,
    HeroSection,
    NavItem,
    Section,
    TitledSection,
)
from .utils import extract_domain, slugify

MAX_IMAGES_PER_PAGE = 10
MAX_NAV_ITEMS = 6
MAX_FALLBACK_CONTENT_CHARS = 1000


def generate_slug(url: str) -> str:
    """Map a page URL to a stable, filesystem-safe slug.

    Bare paths (and previously generated slugs) are accepted as well, so the
    function is idempotent. Only the site root maps to ``index``.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return "page"
    path = parsed.path.strip("/")
    if not path:
        return "index"
    # Non-ASCII paths fall back to their percent-encoded form.
    return slugify(unquote(path), fallback="") or slugify(path)


def extract_sections(markdown: str = "") -> List[Section]:
    """Split markdown into hero/section blocks on ``#`` and ``##`` headings."""
    sections: List[Section] = []
    current: Optional[Section] = None
    content: List[str] = []

    def flush() -> None:
        if current is None:
            return
        if content:
            current.content = "\n".join(content).strip()
        sections.append(current)
        content.clear()

    for line in (markdown or "").splitlines():
        if line.startswith("# "):
            flush()
            current = HeroSection(h1=line[2:].strip())
        elif line.startswith("## "):
            flush()
            current = TitledSection(title=line[3:].strip())
        elif line.strip() and current is not None:
            content.append(line)
    flush()

    if not sections:
        sections.append(ContentSection(content=(markdown or "")[:MAX_FALLBACK_CONTENT_CHARS]))
    return sections


def extract_images(html: str = "") -> List[str]:
    """Return ``<img>`` sources in document order."""
    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    return [img["src"] for img in soup.find_all("img", src=True)][:MAX_IMAGES_PER_PAGE]


def _host(url: str) -> Optional[str]:
    try:
        return extract_domain(url)
    except ValueError:
        return None


def _link_path(link: str, hosts: Set[str]) -> Optional[str]:
    """Path of an absolute link into one of ``hosts``; other links give ``None``."""
    try:
        parsed = urlparse(link)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc or _host(link) not in hosts:
        return None
    return parsed.path or None


def _nav_label(path: str) -> str:
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return "Page"
    label = unquote(segments[-1]).replace("-", " ")
    return re.sub(r"\b\w", lambda match: match.group(0).upper(), label)


def build_navigation(
    pages: Sequence[CrawledPage], domain: Optional[str] = None
) -> List[NavItem]:
    """Build a menu from the same-site paths pages link to most often."""
    hosts = {host for host in map(_host, (page.url for page in pages)) if host}
    if domain:
        hosts.add(domain)
    counts: Counter = Counter()
    for page in pages:
        for link in page.links:
            path = _link_path(link, hosts)
            if path and path != "/":
                counts[path] += 1

    nav = [NavItem(text="Home", href="/")]
    for path, _ in counts.most_common(MAX_NAV_ITEMS - 1):
        nav.append(NavItem(text=_nav_label(path), href=path))
    return nav[:MAX_NAV_ITEMS]


def generate_blueprint(domain: str, pages: Sequence[CrawledPage]) -> Blueprint:
    """Compose navigation and per-page structure; original copy is never rewritten."""
    return Blueprint(
        domain=domain,
        nav=build_navigation(pages, domain),
        pages=[
            BlueprintPage(
                url=page.url,
                slug=generate_slug(page.url),
                title=page.title or "Untitled",
                sections=extract_sections(page.markdown),
                images=extract_images(page.html),
            )
            for page in pages
        ],
    )
