"""GitHub-backed artifact store and issue tracker."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, List, Optional, Tuple

import requests

from .artifacts import artifact_documents, build_issue_body, issue_title, scan_comments
from .errors import CollaboratorError
from .models import ArtifactUrls, Blueprint, DesignSystem, IssueStatus, SiteCategory, ThemeTokens

logger = logging.getLogger("sitecast")

API_ROOT = "https://api.github.com"


def parse_repo(repo: str) -> Tuple[str, str]:
    owner, _, name = (repo or "").partition("/")
    if not owner or not name or "/" in name:
        raise CollaboratorError("Invalid GitHub repository. Expected: owner/repo-name")
    return owner, name


class GitHubClient:
    """Stores artifacts with the contents API and tracks work as issues."""

    def __init__(
        self,
        token: str,
        repo: str,
        branch: str = "main",
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not token:
            raise CollaboratorError("A GitHub token is required")
        self.owner, self.repo = parse_repo(repo)
        self.branch = branch
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"token {token}",
                "Accept": "application/vnd.github.v3+json",
            }
        )

    @property
    def repo_path(self) -> str:
        return f"{self.owner}/{self.repo}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{API_ROOT}/repos/{self.repo_path}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise CollaboratorError(f"GitHub {method} {path} failed: {exc}") from exc
        return resp.json() if resp.content else None

    def _put_file(self, path: str, document: Any, message: str) -> str:
        content = base64.b64encode(json.dumps(document, indent=2).encode("utf-8")).decode("ascii")
        self._request(
            "PUT",
            f"/contents/{path}",
            json={"message": message, "content": content, "branch": self.branch},
        )
        logger.info("Wrote %s to %s", path, self.repo_path)
        return f"https://github.com/{self.repo_path}/blob/{self.branch}/{path}"

    def write_artifacts(
        self,
        job_id: str,
        blueprint: Blueprint,
        tokens: ThemeTokens,
        design: Optional[DesignSystem] = None,
        design_domain: Optional[str] = None,
    ) -> ArtifactUrls:
        messages = {
            "blueprint.json": f"Add blueprint for {blueprint.domain}",
            "tokens.json": f"Add theme tokens for {blueprint.domain}",
            "components.json": f"Add component guide for {blueprint.domain}",
        }
        urls = {}
        for filename, document in artifact_documents(blueprint, tokens, design, design_domain).items():
            urls[filename] = self._put_file(
                f"artifacts/{job_id}/{filename}", document, messages[filename]
            )
        return ArtifactUrls(
            blueprint_url=urls["blueprint.json"],
            tokens_url=urls["tokens.json"],
            components_url=urls.get("components.json"),
        )

    def issue_url(self, issue_number: int) -> str:
        return f"https://github.com/{self.repo_path}/issues/{issue_number}"

    def create_issue(
        self,
        domain: str,
        category: SiteCategory,
        urls: ArtifactUrls,
        design_language: Optional[str] = None,
    ) -> int:
        data = self._request(
            "POST",
            "/issues",
            json={
                "title": issue_title(domain),
                "body": build_issue_body(domain, category, urls, design_language),
                "labels": ["generate-site", SiteCategory(category).value],
            },
        )
        logger.info("Created issue #%s in %s", data["number"], self.repo_path)
        return int(data["number"])

    def add_comment(self, issue_number: int, body: str) -> None:
        self._request("POST", f"/issues/{issue_number}/comments", json={"body": body})

    def issue_status(self, issue_number: int) -> IssueStatus:
        issue = self._request("GET", f"/issues/{issue_number}")
        comments: List[str] = [
            comment.get("body") or ""
            for comment in self._request("GET", f"/issues/{issue_number}/comments") or []
        ]
        found = scan_comments(comments)
        return IssueStatus(
            issue_number=issue_number,
            state=issue.get("state", "open"),
            pr_url=found["pr_url"],
            preview_url=found["preview_url"],
        )
