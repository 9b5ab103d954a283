"""Shared fakes for pipeline collaborators."""

from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import urlparse

import pytest

from sitecast.config import PipelineConfig
from sitecast.errors import CollaboratorError
from sitecast.models import CrawledPage


class FakeModel:
    """Generative model returning canned replies in order."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def chat(self, system, messages, max_tokens):
        self.calls.append({"system": system, "messages": list(messages), "max_tokens": max_tokens})
        if not self.replies:
            raise AssertionError("FakeModel ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeCrawler:
    """In-memory crawler keyed by host name."""

    def __init__(self, sites: Dict[str, List[CrawledPage]], respect_limit: bool = True):
        self.sites = sites
        self.respect_limit = respect_limit
        self.mapped: List[str] = []
        self.crawled: List[tuple] = []
        self.map_error: Optional[Exception] = None

    async def map_site(self, url, limit=500):
        self.mapped.append(url)
        if self.map_error is not None:
            raise self.map_error
        host = urlparse(url).netloc
        return [page.url for page in self.sites.get(host, [])]

    async def crawl_pages(self, urls, limit=25):
        self.crawled.append((list(urls), limit))
        if not urls:
            raise CollaboratorError("No URLs to crawl")
        pages = list(self.sites[urlparse(urls[0]).netloc])
        return pages[:limit] if self.respect_limit else pages


def make_page(url, title="Page", markdown="", html="", links=None) -> CrawledPage:
    return CrawledPage(url=url, title=title, markdown=markdown, html=html, links=links or [])


@pytest.fixture
def config(tmp_path: Path) -> PipelineConfig:
    return PipelineConfig(output_root=tmp_path)


@pytest.fixture
def content_site() -> List[CrawledPage]:
    links = ["https://example.com/", "https://example.com/pricing", "https://example.com/about"]
    return [
        make_page(
            "https://example.com/",
            title="Example",
            markdown="# Ship faster\nPricing and features for modern teams.\n## Plans\nStart free.",
            html='<html><body><img src="/hero.png"><h1>Ship faster</h1></body></html>',
            links=links,
        ),
        make_page(
            "https://example.com/pricing",
            title="Pricing",
            markdown="## Pricing\nSimple plans.",
            links=links,
        ),
        make_page(
            "https://example.com/about",
            title="About",
            markdown="## About us\nWe build tools.",
            links=links,
        ),
    ]


@pytest.fixture
def design_site() -> List[CrawledPage]:
    html = (
        "<html><head><style>body{background:#FAFAFA;color:#222222;"
        "font-family:'Playfair Display', serif;}"
        ".card{border-radius:12px;padding:24px}</style></head>"
        "<body><h1>Studio</h1></body></html>"
    )
    return [
        make_page("https://design.io/", title="Studio", markdown="# Studio\nCalm layouts.", html=html),
        make_page("https://design.io/work", title="Work", markdown="## Selected work", html=html),
    ]
