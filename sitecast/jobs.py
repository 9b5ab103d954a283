"""JSON-file persistence for jobs and their crawled pages."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import List, Optional, Sequence

from .blueprint import generate_slug
from .models import CrawledPage, Job

logger = logging.getLogger("sitecast")


class JobStore:
    """Stores each job as ``jobs/<id>.json`` and its pages under ``jobs/<id>/pages``."""

    def __init__(self, output_root: Path) -> None:
        self.root = Path(output_root) / "jobs"

    def _job_path(self, job_id: str) -> Path:
        return self.root / f"{job_id}.json"

    def create(self, domain: str, design_domain: Optional[str] = None) -> Job:
        job = Job(id=uuid.uuid4().hex, domain=domain, design_domain=design_domain)
        self.save(job)
        logger.info("Created job %s for %s", job.id, domain)
        return job

    def save(self, job: Job) -> None:
        path = self._job_path(job.id)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(job.to_dict(), indent=2), encoding="utf-8")
        tmp_path.replace(path)

    def get(self, job_id: str) -> Optional[Job]:
        path = self._job_path(job_id)
        if not path.exists():
            return None
        return Job.from_dict(json.loads(path.read_text(encoding="utf-8")))

    def list_jobs(self) -> List[Job]:
        if not self.root.exists():
            return []
        jobs = [
            Job.from_dict(json.loads(path.read_text(encoding="utf-8")))
            for path in self.root.glob("*.json")
        ]
        return sorted(jobs, key=lambda job: job.created_at, reverse=True)

    def save_page(self, job_id: str, index: int, page: CrawledPage) -> Path:
        page_dir = self.root / job_id / "pages"
        page_dir.mkdir(parents=True, exist_ok=True)
        path = page_dir / f"{index:03d}-{generate_slug(page.url)[:80]}.json"
        path.write_text(json.dumps(page.to_dict(), indent=2), encoding="utf-8")
        return path

    async def save_pages(self, job_id: str, pages: Sequence[CrawledPage]) -> List[Path]:
        """Write every page concurrently; any failed write fails the batch."""
        return list(
            await asyncio.gather(
                *(
                    asyncio.to_thread(self.save_page, job_id, index, page)
                    for index, page in enumerate(pages)
                )
            )
        )

    def load_pages(self, job_id: str) -> List[CrawledPage]:
        page_dir = self.root / job_id / "pages"
        if not page_dir.exists():
            return []
        return [
            CrawledPage(**json.loads(path.read_text(encoding="utf-8")))
            for path in sorted(page_dir.glob("*.json"))
        ]
