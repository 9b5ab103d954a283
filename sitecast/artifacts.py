"""Artifact and issue sinks: protocols, shared formatting and a local filesystem store."""

from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from .errors import CollaboratorError
from .models import (
    ArtifactUrls,
    Blueprint,
    DesignSystem,
    IssueStatus,
    SiteCategory,
    ThemeTokens,
)

logger = logging.getLogger("sitecast")

PREVIEW_URL_PATTERN = re.compile(r"https://[^\s)]+\.vercel\.app")
PULL_URL_PATTERN = re.compile(r"https://github\.com/[^\s)]+/pull/\d+")


class ArtifactStore(Protocol):
    def write_artifacts(
        self,
        job_id: str,
        blueprint: Blueprint,
        tokens: ThemeTokens,
        design: Optional[DesignSystem] = None,
        design_domain: Optional[str] = None,
    ) -> ArtifactUrls:
        ...


class IssueTracker(Protocol):
    def create_issue(
        self,
        domain: str,
        category: SiteCategory,
        urls: ArtifactUrls,
        design_language: Optional[str] = None,
    ) -> int:
        ...

    def add_comment(self, issue_number: int, body: str) -> None:
        ...

    def issue_status(self, issue_number: int) -> IssueStatus:
        ...


def artifact_documents(
    blueprint: Blueprint,
    tokens: ThemeTokens,
    design: Optional[DesignSystem] = None,
    design_domain: Optional[str] = None,
) -> Dict[str, Dict[str, Any]]:
    """Serialize the pipeline outputs into standalone JSON documents keyed by file name."""
    documents: Dict[str, Dict[str, Any]] = {
        "blueprint.json": blueprint.to_dict(),
        "tokens.json": tokens.to_dict(),
    }
    if design is not None and design.components:
        documents["components.json"] = {
            "designDomain": design_domain or blueprint.domain,
            "designLanguage": design.design_language,
            "components": [component.to_dict() for component in design.components],
        }
    return documents


def issue_title(domain: str) -> str:
    return f"Rebuild: {domain}"


def build_issue_body(
    domain: str,
    category: SiteCategory,
    urls: ArtifactUrls,
    design_language: Optional[str] = None,
) -> str:
    """Markdown body linking the artifacts; the generator reads the links back from it."""
    lines = [
        "## Site Rebuild Request",
        "",
        f"**Domain:** {domain}",
        f"**Category:** {SiteCategory(category).value}",
        "",
        "### Artifacts",
        "",
        f"- [Blueprint]({urls.blueprint_url})",
        f"- [Theme Tokens]({urls.tokens_url})",
    ]
    if urls.components_url:
        lines.append(f"- [Component Library]({urls.components_url})")
    lines += [
        "",
        "---",
        "",
        f"Design language: {design_language or 'Derived from source design'}",
        "",
        "This issue was created automatically. The generator action will process these "
        "artifacts and open a pull request with the new site.",
        "",
    ]
    return "\n".join(lines)


def build_restyle_comment(job_id: str, prompt: str, original_issue: Optional[int]) -> str:
    return "\n".join(
        [
            "## Styling Request",
            "",
            f"**Original Issue:** {f'#{original_issue}' if original_issue else 'N/A'}",
            f"**Job ID:** {job_id}",
            "",
            "### Requested Changes:",
            prompt,
            "",
            "---",
            "",
            "**Instructions for Generation:**",
            "This is a styling-only update. Apply ONLY CSS changes. "
            "Do not modify HTML structure or content.",
            "",
        ]
    )


def scan_comments(comments: List[str]) -> Dict[str, Optional[str]]:
    """Find the first pull request and preview deployment URLs mentioned in comments."""
    found: Dict[str, Optional[str]] = {"pr_url": None, "preview_url": None}
    for body in comments:
        if found["pr_url"] is None:
            match = PULL_URL_PATTERN.search(body)
            if match:
                found["pr_url"] = match.group(0)
        if found["preview_url"] is None and "Preview Deployed" in body:
            match = PREVIEW_URL_PATTERN.search(body)
            if match:
                found["preview_url"] = match.group(0)
    return found


class LocalArtifactStore:
    """Writes artifacts and issues as JSON files under the output root."""

    def __init__(self, output_root: Path) -> None:
        self.root = Path(output_root)
        self._lock = threading.Lock()

    def _write_json(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def write_artifacts(
        self,
        job_id: str,
        blueprint: Blueprint,
        tokens: ThemeTokens,
        design: Optional[DesignSystem] = None,
        design_domain: Optional[str] = None,
    ) -> ArtifactUrls:
        artifact_dir = self.root / "artifacts" / job_id
        uris: Dict[str, str] = {}
        for filename, document in artifact_documents(blueprint, tokens, design, design_domain).items():
            path = artifact_dir / filename
            self._write_json(path, document)
            logger.info("Saved %s to %s", filename, path)
            uris[filename] = path.resolve().as_uri()
        return ArtifactUrls(
            blueprint_url=uris["blueprint.json"],
            tokens_url=uris["tokens.json"],
            components_url=uris.get("components.json"),
        )

    def _issue_path(self, issue_number: int) -> Path:
        return self.root / "issues" / f"{issue_number}.json"

    def _load_issue(self, issue_number: int) -> Dict[str, Any]:
        path = self._issue_path(issue_number)
        if not path.exists():
            raise CollaboratorError(f"Issue #{issue_number} does not exist")
        return json.loads(path.read_text(encoding="utf-8"))

    def create_issue(
        self,
        domain: str,
        category: SiteCategory,
        urls: ArtifactUrls,
        design_language: Optional[str] = None,
    ) -> int:
        with self._lock:
            issue_dir = self.root / "issues"
            issue_dir.mkdir(parents=True, exist_ok=True)
            existing = [int(path.stem) for path in issue_dir.glob("*.json") if path.stem.isdigit()]
            number = max(existing, default=0) + 1
            self._write_json(
                self._issue_path(number),
                {
                    "number": number,
                    "title": issue_title(domain),
                    "body": build_issue_body(domain, category, urls, design_language),
                    "labels": ["generate-site", SiteCategory(category).value],
                    "state": "open",
                    "comments": [],
                },
            )
        logger.info("Created local issue #%d for %s", number, domain)
        return number

    def add_comment(self, issue_number: int, body: str) -> None:
        with self._lock:
            issue = self._load_issue(issue_number)
            issue["comments"].append(body)
            self._write_json(self._issue_path(issue_number), issue)

    def issue_status(self, issue_number: int) -> IssueStatus:
        issue = self._load_issue(issue_number)
        found = scan_comments(issue.get("comments", []))
        return IssueStatus(
            issue_number=issue_number,
            state=issue.get("state", "open"),
            pr_url=issue.get("prUrl") or found["pr_url"],
            preview_url=found["preview_url"],
        )
