"""Crawl collaborators: the protocol the pipeline needs and a local Playwright crawler."""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Tuple
from urllib.parse import urlparse

from playwright.async_api import (
    Browser,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import PipelineConfig
from .content import extract_page
from .errors import CollaboratorError
from .firecrawl import FirecrawlClient
from .models import CrawledPage
from .utils import should_exclude_url, unique_preserve_order

logger = logging.getLogger("sitecast")

MAX_MAPPED_LINKS = 60


class SiteCrawler(Protocol):
    """Discovery and page retrieval for one site."""

    async def map_site(self, url: str, limit: int = 500) -> List[str]:
        ...

    async def crawl_pages(self, urls: List[str], limit: int = 25) -> List[CrawledPage]:
        ...


async def render_page(browser: Browser, url: str, config: PipelineConfig) -> Tuple[str, str]:
    """Navigate to a URL and return the rendered HTML and final URL."""
    page = await browser.new_page()
    page.set_default_navigation_timeout(config.navigation_timeout * 1000)
    try:
        logger.info("Loading %s", url)
        await page.goto(url, wait_until="networkidle")
        if config.wait_after_load:
            await page.wait_for_timeout(int(config.wait_after_load * 1000))
        html = await page.content()
        final_url = page.url
    finally:
        await page.close()
    return html, final_url


class PlaywrightCrawler:
    """Renders pages in headless Chromium instead of calling a crawl service."""

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config

    async def _fetch(self, browser: Browser, url: str) -> Optional[CrawledPage]:
        try:
            html, final_url = await render_page(browser, url, self.config)
        except PlaywrightTimeoutError as exc:
            logger.error("Timeout while loading %s: %s", url, exc)
            return None
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected error loading %s", url)
            return None
        return extract_page(html, final_url)

    async def map_site(self, url: str, limit: int = 500) -> List[str]:
        """Discover same-host links from the start page."""
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(headless=True)
            try:
                start = await self._fetch(browser, url)
            finally:
                await browser.close()
        if start is None:
            raise CollaboratorError(f"No pages found for {url}. The site may be unavailable.")

        host = urlparse(start.url).netloc
        candidates = [start.url] + [link for link in start.links if urlparse(link).netloc == host]
        urls = [link for link in unique_preserve_order(candidates) if not should_exclude_url(link)]
        urls = urls[: min(limit, MAX_MAPPED_LINKS)]
        logger.info("Found %d valid URLs after filtering", len(urls))
        return urls

    async def crawl_pages(self, urls: List[str], limit: int = 25) -> List[CrawledPage]:
        """Render up to ``limit`` of ``urls`` sequentially."""
        pages: List[CrawledPage] = []
        seen = set()
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(headless=True)
            try:
                for url in urls[:limit]:
                    page = await self._fetch(browser, url)
                    if page is None or page.url in seen or should_exclude_url(page.url):
                        continue
                    seen.add(page.url)
                    pages.append(page)
            finally:
                await browser.close()
        if not pages:
            raise CollaboratorError("Crawl completed but returned 0 pages.")
        return pages


def build_crawler(config: PipelineConfig) -> SiteCrawler:
    """Use Firecrawl when a key is configured, otherwise render locally."""
    if config.firecrawl_api_key:
        return FirecrawlClient(config.firecrawl_api_key, timeout=config.http_timeout)
    return PlaywrightCrawler(config)
