"""Tests for job persistence, the job model and configuration."""

import pytest

from sitecast.config import PipelineConfig
from sitecast.jobs import JobStore
from sitecast.models import CrawledPage, Job, JobStatus, SiteCategory


class TestJobStore:
    def test_create_and_get(self, tmp_path):
        store = JobStore(tmp_path)
        job = store.create("example.com", design_domain="design.io")

        loaded = store.get(job.id)
        assert loaded.domain == "example.com"
        assert loaded.design_domain == "design.io"
        assert loaded.status == JobStatus.NEW
        assert loaded.history == [JobStatus.NEW]

    def test_missing_job(self, tmp_path):
        assert JobStore(tmp_path).get("nope") is None
        assert JobStore(tmp_path).list_jobs() == []

    def test_save_persists_transitions(self, tmp_path):
        store = JobStore(tmp_path)
        job = store.create("example.com")
        job.transition(JobStatus.MAPPED)
        job.category = SiteCategory.BLOG
        store.save(job)

        loaded = store.get(job.id)
        assert loaded.status == JobStatus.MAPPED
        assert loaded.history == [JobStatus.NEW, JobStatus.MAPPED]
        assert loaded.category == SiteCategory.BLOG
        assert not list((tmp_path / "jobs").glob("*.tmp"))

    @pytest.mark.asyncio
    async def test_save_pages_concurrently(self, tmp_path):
        store = JobStore(tmp_path)
        pages = [
            CrawledPage(url=f"https://x.com/p{i}", title=f"P{i}", links=["https://x.com/"])
            for i in range(5)
        ]

        paths = await store.save_pages("job1", pages)

        assert len(paths) == 5
        assert paths[0].name == "000-p0.json"
        assert store.load_pages("job1") == pages


class TestJobModel:
    def test_round_trip(self):
        job = Job(id="abc", domain="example.com", category=SiteCategory.DOCS, issue_number=4)
        job.transition(JobStatus.FAILED)
        job.error = "boom"

        data = job.to_dict()
        assert data["status"] == "failed"
        assert data["history"] == ["new", "failed"]
        assert data["issueNumber"] == 4

        assert Job.from_dict(data) == job

    def test_history_defaults_to_status(self):
        job = Job.from_dict({"id": "a", "domain": "x.com", "status": "issued"})
        assert job.history == [JobStatus.ISSUED]

    def test_failed_is_terminal(self):
        job = Job(id="abc", domain="example.com")
        job.transition(JobStatus.FAILED)

        with pytest.raises(ValueError):
            job.transition(JobStatus.ISSUED)
        assert job.status == JobStatus.FAILED
        assert job.history == [JobStatus.NEW, JobStatus.FAILED]


class TestCrawledPage:
    def test_from_firecrawl_prefers_source_url(self):
        page = CrawledPage.from_firecrawl(
            {
                "markdown": "# Hi",
                "links": ["https://x.com/a", None],
                "metadata": {"sourceURL": "https://x.com/", "url": "https://x.com/final", "title": "Hi"},
            }
        )
        assert page.url == "https://x.com/"
        assert page.title == "Hi"
        assert page.html == ""
        assert page.links == ["https://x.com/a"]

    def test_from_firecrawl_tolerates_missing_metadata(self):
        page = CrawledPage.from_firecrawl({"url": "https://x.com/b"})
        assert page.url == "https://x.com/b"
        assert page.title is None
        assert page.markdown == ""


class TestPipelineConfig:
    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-key")
        monkeypatch.setenv("GITHUB_REPO", "acme/sites")
        monkeypatch.setenv("SITECAST_MAX_PAGES", "30")
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("SITECAST_MODEL", raising=False)
        monkeypatch.delenv("SITECAST_MAX_DESIGN_TRANSFER_PAGES", raising=False)

        config = PipelineConfig.from_env(tmp_path)

        assert config.output_root == tmp_path.resolve()
        assert config.firecrawl_api_key == "fc-key"
        assert config.github_repo == "acme/sites"
        assert config.github_token is None
        assert config.model_id is None
        assert config.page_ceiling(design_transfer=False) == 30
        assert config.page_ceiling(design_transfer=True) == 12

    def test_output_root_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SITECAST_OUTPUT", str(tmp_path / "out"))
        assert PipelineConfig.from_env().output_root == (tmp_path / "out").resolve()

    def test_invalid_integer(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SITECAST_MAX_PAGES", "many")
        with pytest.raises(ValueError, match="SITECAST_MAX_PAGES"):
            PipelineConfig.from_env(tmp_path)
