"""Job orchestration: crawl, blueprint, classify, hand off artifacts, open an issue."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .artifacts import ArtifactStore, IssueTracker, LocalArtifactStore, build_restyle_comment
from .blueprint import generate_blueprint
from .classifier import classify_site
from .config import PipelineConfig
from .crawler import SiteCrawler, build_crawler
from .errors import CollaboratorError, InputRejected
from .generative import GenerativeModel, load_model
from .github import GitHubClient
from .jobs import JobStore
from .models import (
    ArtifactUrls,
    Blueprint,
    CrawledPage,
    DesignSystem,
    Job,
    JobStatus,
    SiteCategory,
    ThemeTokens,
)
from .presets import generate_tokens
from .tokens import extract_design_system
from .utils import extract_domain

logger = logging.getLogger("sitecast")


@dataclass
class SiteAnalysis:
    """Everything derived from one crawl, without a job or any hand-off."""

    blueprint: Blueprint
    category: SiteCategory
    design: DesignSystem


def _domain_of(url: Optional[str], label: str) -> str:
    if not url or not url.strip():
        raise InputRejected(f"{label} URL is required")
    try:
        return extract_domain(url.strip())
    except ValueError as exc:
        raise InputRejected(str(exc)) from exc


class SitePipeline:
    """Runs submitted jobs through every stage, persisting status as it goes."""

    def __init__(
        self,
        config: PipelineConfig,
        store: JobStore,
        crawler: SiteCrawler,
        artifacts: ArtifactStore,
        tracker: IssueTracker,
        model: Optional[GenerativeModel] = None,
    ) -> None:
        self.config = config
        self.store = store
        self.crawler = crawler
        self.artifacts = artifacts
        self.tracker = tracker
        self.model = model

    def _advance(self, job: Job, status: JobStatus) -> None:
        job.transition(status)
        self.store.save(job)
        logger.info("Job %s -> %s", job.id, status.value)

    def _fail(self, job: Job, exc: BaseException) -> None:
        job.error = str(exc) or exc.__class__.__name__
        self._advance(job, JobStatus.FAILED)

    async def submit(
        self,
        url: str,
        design_url: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Job:
        """Run a job to ``issued``; any stage error fails the job and propagates."""
        domain = _domain_of(url, "Content")
        design_domain = _domain_of(design_url, "Design") if design_url else None
        if design_domain and design_domain == domain:
            raise InputRejected("Design and content URLs must point to different sites")

        ceiling = self.config.page_ceiling(design_transfer=design_domain is not None)
        limit = ceiling if limit is None else limit
        if limit < 1:
            raise InputRejected("Page limit must be at least 1")

        job = self.store.create(domain, design_domain)
        if limit > ceiling:
            exc = InputRejected(
                f"Requested {limit} pages, maximum allowed is {ceiling}. "
                "Please try a smaller site."
            )
            self._fail(job, exc)
            raise exc

        try:
            design = None
            if design_url:
                design = await self._design_stage(job, design_url.strip())
            urls = await self._map_stage(job, url.strip())
            pages = await self._crawl_stage(job, urls, limit, ceiling)
            blueprint, category, tokens = await self._blueprint_stage(job, pages, design)
            await self._issue_stage(job, blueprint, category, tokens, design)
        except Exception as exc:
            logger.error("Job %s failed: %s", job.id, exc)
            self._fail(job, exc)
            raise
        return job

    async def _design_stage(self, job: Job, design_url: str) -> DesignSystem:
        urls = await self.crawler.map_site(design_url)
        pages = await self.crawler.crawl_pages(urls, self.config.design_pages)
        if not pages:
            raise CollaboratorError(f"Design crawl of {design_url} returned no pages")
        design = await asyncio.to_thread(
            extract_design_system, pages, self.model, self.config.max_tokens
        )
        self._advance(job, JobStatus.DESIGN_READY)
        return design

    async def _map_stage(self, job: Job, url: str) -> List[str]:
        urls = await self.crawler.map_site(url)
        if not urls:
            raise CollaboratorError(f"No pages found for {url}")
        self._advance(job, JobStatus.MAPPED)
        return urls

    async def _crawl_stage(
        self, job: Job, urls: List[str], limit: int, ceiling: int
    ) -> List[CrawledPage]:
        pages = await self.crawler.crawl_pages(urls, limit)
        if not pages:
            raise CollaboratorError("Crawl returned no pages")
        if len(pages) > ceiling:
            raise InputRejected(
                f"Site has {len(pages)} pages, maximum allowed is {ceiling}. "
                "Please try a smaller site."
            )
        job.page_count = len(pages)
        await self.store.save_pages(job.id, pages)
        self._advance(job, JobStatus.CRAWLED)
        return pages

    async def _blueprint_stage(
        self, job: Job, pages: Sequence[CrawledPage], design: Optional[DesignSystem]
    ) -> Tuple[Blueprint, SiteCategory, ThemeTokens]:
        blueprint = generate_blueprint(job.domain, pages)
        category = await asyncio.to_thread(classify_site, pages, self.model)
        tokens = design.tokens if design else generate_tokens(category)
        job.category = category
        self._advance(job, JobStatus.BLUEPRINTED)
        return blueprint, category, tokens

    async def _issue_stage(
        self,
        job: Job,
        blueprint: Blueprint,
        category: SiteCategory,
        tokens: ThemeTokens,
        design: Optional[DesignSystem],
    ) -> None:
        urls: ArtifactUrls = await asyncio.to_thread(
            self.artifacts.write_artifacts, job.id, blueprint, tokens, design, job.design_domain
        )
        issue_number = await asyncio.to_thread(
            self.tracker.create_issue,
            job.domain,
            category,
            urls,
            design.design_language if design else None,
        )
        job.blueprint_url = urls.blueprint_url
        job.tokens_url = urls.tokens_url
        job.components_url = urls.components_url
        job.issue_number = issue_number
        self._advance(job, JobStatus.ISSUED)

    def _get(self, job_id: str) -> Job:
        job = self.store.get(job_id)
        if job is None:
            raise InputRejected(f"Job {job_id} not found")
        return job

    async def refresh(self, job_id: str) -> Job:
        """Poll the tracker and move an issued job to ``pr_open`` once a PR exists."""
        job = self._get(job_id)
        if job.issue_number is None or job.status == JobStatus.FAILED:
            return job
        status = await asyncio.to_thread(self.tracker.issue_status, job.issue_number)
        changed = False
        if status.preview_url and status.preview_url != job.preview_url:
            job.preview_url = status.preview_url
            changed = True
        if status.pr_url and job.status == JobStatus.ISSUED:
            job.pr_url = status.pr_url
            self._advance(job, JobStatus.PR_OPEN)
        elif changed:
            self.store.save(job)
        return job

    async def restyle(self, job_id: str, prompt: str) -> int:
        """Open a styling-only follow-up issue for an issued job."""
        if not prompt or not prompt.strip():
            raise InputRejected("A styling prompt is required")
        job = self._get(job_id)
        if job.issue_number is None or not job.blueprint_url or not job.tokens_url:
            raise InputRejected(f"Job {job_id} has no issued artifacts to restyle")
        urls = ArtifactUrls(job.blueprint_url, job.tokens_url, job.components_url)
        issue_number = await asyncio.to_thread(
            self.tracker.create_issue,
            job.domain,
            job.category or SiteCategory.PORTFOLIO,
            urls,
            "Styling update request",
        )
        await asyncio.to_thread(
            self.tracker.add_comment,
            issue_number,
            build_restyle_comment(job.id, prompt.strip(), job.issue_number),
        )
        logger.info("Opened styling issue #%d for job %s", issue_number, job.id)
        return issue_number

    async def analyze(self, url: str, limit: Optional[int] = None) -> SiteAnalysis:
        """Crawl ``url`` and derive blueprint, category and design without creating a job."""
        domain = _domain_of(url, "Content")
        if limit is not None and limit < 1:
            raise InputRejected("Page limit must be at least 1")
        limit = min(limit or self.config.max_pages, self.config.max_pages)
        urls = await self.crawler.map_site(url.strip())
        pages = await self.crawler.crawl_pages(urls, limit)
        if not pages:
            raise CollaboratorError("Crawl returned no pages")
        category = await asyncio.to_thread(classify_site, pages, self.model)
        design = await asyncio.to_thread(
            extract_design_system, pages, self.model, self.config.max_tokens
        )
        return SiteAnalysis(
            blueprint=generate_blueprint(domain, pages), category=category, design=design
        )


def build_pipeline(config: PipelineConfig) -> SitePipeline:
    """Wire collaborators from configuration: GitHub when credentials exist, local files otherwise."""
    if config.github_token and config.github_repo:
        github = GitHubClient(config.github_token, config.github_repo, timeout=config.http_timeout)
        artifacts: ArtifactStore = github
        tracker: IssueTracker = github
    else:
        local = LocalArtifactStore(config.output_root)
        artifacts, tracker = local, local
    return SitePipeline(
        config=config,
        store=JobStore(config.output_root),
        crawler=build_crawler(config),
        artifacts=artifacts,
        tracker=tracker,
        model=load_model(config.model_id),
    )
