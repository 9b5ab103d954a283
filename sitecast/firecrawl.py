"""Client for the Firecrawl crawling service."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import requests

from .errors import CollaboratorError
from .models import CrawledPage
from .utils import should_exclude_url

logger = logging.getLogger("sitecast")

API_ROOT = "https://api.firecrawl.dev/v1"
MAX_MAPPED_LINKS = 60


class FirecrawlClient:
    """Maps and crawls sites through the Firecrawl REST API."""

    def __init__(
        self,
        api_key: str,
        timeout: float = 60.0,
        poll_interval: float = 2.0,
        max_wait: float = 300.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_key:
            raise CollaboratorError("A Firecrawl API key is required")
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = path if path.startswith("http") else f"{API_ROOT}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise CollaboratorError(f"Firecrawl request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise CollaboratorError(f"Firecrawl returned invalid JSON from {url}") from exc
        if isinstance(data, dict) and data.get("success") is False:
            raise CollaboratorError(f"Firecrawl error: {data.get('error', 'unknown error')}")
        return data

    def map_site_sync(self, url: str, limit: int = 500) -> List[str]:
        """Discover reachable URLs for ``url``, dropping non-content links."""
        data = self._request("POST", "/map", json={"url": url, "limit": limit})
        links = data.get("links")
        if not isinstance(links, list):
            raise CollaboratorError("Failed to map site: no links returned")
        if not links:
            raise CollaboratorError(
                f"No pages found for {url}. The site may be redirecting or unavailable."
            )
        logger.debug("Firecrawl map returned %d links", len(links))

        urls: List[str] = []
        for link in links:
            link_url = link.get("url", "") if isinstance(link, dict) else link
            if isinstance(link_url, str) and link_url and not should_exclude_url(link_url):
                urls.append(link_url)
        urls = urls[:MAX_MAPPED_LINKS]
        logger.info("Found %d valid URLs after filtering", len(urls))
        return urls

    def _wait_for_crawl(self, crawl_id: str) -> List[Dict[str, Any]]:
        deadline = time.monotonic() + self.max_wait
        records: List[Dict[str, Any]] = []
        while True:
            data = self._request("GET", f"/crawl/{crawl_id}")
            status = data.get("status")
            if status == "completed":
                records.extend(data.get("data") or [])
                next_url = data.get("next")
                while next_url:
                    page = self._request("GET", next_url)
                    records.extend(page.get("data") or [])
                    next_url = page.get("next")
                return records
            if status in ("failed", "cancelled"):
                raise CollaboratorError(f"Firecrawl crawl {crawl_id} {status}")
            if time.monotonic() > deadline:
                raise CollaboratorError(f"Firecrawl crawl {crawl_id} did not finish in time")
            logger.debug(
                "Crawl %s is %s (%s/%s)", crawl_id, status, data.get("completed"), data.get("total")
            )
            time.sleep(self.poll_interval)

    def crawl_pages_sync(self, urls: List[str], limit: int = 25) -> List[CrawledPage]:
        """Crawl the site that ``urls`` belong to, starting from its homepage."""
        if not urls:
            raise CollaboratorError("No URLs to crawl")
        parsed = urlparse(urls[0])
        base_url = f"{parsed.scheme}://{parsed.netloc}"
        logger.info("Starting crawl from %s with limit %d", base_url, limit)

        started = self._request(
            "POST",
            "/crawl",
            json={
                "url": base_url,
                "limit": limit,
                "scrapeOptions": {"formats": ["markdown", "html", "links"], "onlyMainContent": True},
            },
        )
        crawl_id = started.get("id")
        if not crawl_id:
            raise CollaboratorError("Firecrawl did not return a crawl id")

        records = self._wait_for_crawl(crawl_id)
        if not records:
            raise CollaboratorError(
                f"Crawl completed but returned 0 pages from {base_url}. "
                "The site may block crawlers or require authentication."
            )

        pages = [CrawledPage.from_firecrawl(record) for record in records]
        kept = [page for page in pages if page.url and not should_exclude_url(page.url)]
        logger.info("Filtered crawl results: %d -> %d pages", len(pages), len(kept))
        if not kept:
            raise CollaboratorError(
                "All crawled pages were filtered out (XML sitemaps, assets, etc.). "
                "Try a different URL."
            )
        return kept

    async def map_site(self, url: str, limit: int = 500) -> List[str]:
        return await asyncio.to_thread(self.map_site_sync, url, limit)

    async def crawl_pages(self, urls: List[str], limit: int = 25) -> List[CrawledPage]:
        return await asyncio.to_thread(self.crawl_pages_sync, urls, limit)
