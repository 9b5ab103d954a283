"""Data models used throughout the site pipeline."""

from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union


def _utcnow() -> str:
    return (
        dt.datetime.now(dt.timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )


class SiteCategory(str, Enum):
    """Closed set of site categories used to pick presets and layouts."""

    PORTFOLIO = "portfolio"
    BLOG = "blog"
    SAAS_LANDING = "saas-landing"
    DOCS = "docs"
    EVENT = "event"
    RESTAURANT = "restaurant"


class JobStatus(str, Enum):
    """Pipeline stage a job has reached."""

    NEW = "new"
    DESIGN_READY = "design_ready"
    MAPPED = "mapped"
    CRAWLED = "crawled"
    BLUEPRINTED = "blueprinted"
    ISSUED = "issued"
    PR_OPEN = "pr_open"
    FAILED = "failed"


@dataclass(frozen=True)
class CrawledPage:
    """A page as returned by the crawl collaborator."""

    url: str
    title: Optional[str] = None
    markdown: str = ""
    html: str = ""
    links: List[str] = field(default_factory=list)

    @classmethod
    def from_firecrawl(cls, record: Mapping[str, Any]) -> "CrawledPage":
        """Build a page from a crawl-service record, tolerating missing fields."""
        metadata = record.get("metadata") or {}
        url = metadata.get("sourceURL") or metadata.get("url") or record.get("url") or ""
        return cls(
            url=url,
            title=metadata.get("title") or record.get("title"),
            markdown=record.get("markdown") or "",
            html=record.get("html") or "",
            links=[link for link in record.get("links") or [] if isinstance(link, str)],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "markdown": self.markdown,
            "html": self.html,
            "links": list(self.links),
        }


@dataclass
class DesignHints:
    """Raw visual observations scraped from page markup."""

    colors: List[str] = field(default_factory=list)
    fonts: List[str] = field(default_factory=list)
    radii: List[float] = field(default_factory=list)
    spacings: List[float] = field(default_factory=list)
    html_samples: List[str] = field(default_factory=list)
    text_samples: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "colors": list(self.colors),
            "fonts": list(self.fonts),
            "radii": list(self.radii),
            "spacings": list(self.spacings),
            "htmlSamples": list(self.html_samples),
            "textSamples": list(self.text_samples),
        }


@dataclass
class HeroSection:
    h1: str
    sub: str = ""
    cta: str = ""
    content: Optional[str] = None
    type: str = field(default="hero", init=False)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type, "h1": self.h1, "sub": self.sub, "cta": self.cta}
        if self.content is not None:
            data["content"] = self.content
        return data


@dataclass
class TitledSection:
    title: str
    content: Optional[str] = None
    type: str = field(default="section", init=False)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type, "title": self.title}
        if self.content is not None:
            data["content"] = self.content
        return data


@dataclass
class ContentSection:
    content: str
    type: str = field(default="content", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "content": self.content}


Section = Union[HeroSection, TitledSection, ContentSection]


@dataclass
class NavItem:
    text: str
    href: str

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "href": self.href}


@dataclass
class BlueprintPage:
    url: str
    slug: str
    title: str
    sections: List[Section] = field(default_factory=list)
    images: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "slug": self.slug,
            "title": self.title,
            "sections": [section.to_dict() for section in self.sections],
            "images": list(self.images),
        }


@dataclass(frozen=True)
class AssetsPolicy:
    use_original_images: bool = True
    rewrite_text: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "useOriginalImages": self.use_original_images,
            "rewriteText": self.rewrite_text,
        }


@dataclass
class Blueprint:
    """Structural description of a crawled site."""

    domain: str
    nav: List[NavItem]
    pages: List[BlueprintPage]
    assets_policy: AssetsPolicy = field(default_factory=AssetsPolicy)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "nav": [item.to_dict() for item in self.nav],
            "pages": [page.to_dict() for page in self.pages],
            "assetsPolicy": self.assets_policy.to_dict(),
        }


@dataclass
class FontTokens:
    heading: str
    body: str


@dataclass
class ColorTokens:
    brand: str
    brandAlt: str
    bg: str
    surface: str
    text: str
    muted: str


@dataclass
class RadiiTokens:
    sm: float
    md: float
    lg: float


@dataclass
class ShadowTokens:
    sm: str
    md: str


@dataclass
class ComponentStyles:
    button: str
    card: str
    menu: str


TOKEN_GROUPS = {
    "fonts": FontTokens,
    "color": ColorTokens,
    "radii": RadiiTokens,
    "shadow": ShadowTokens,
    "components": ComponentStyles,
}


@dataclass
class ThemeTokens:
    """Visual design tokens handed to the site generator."""

    name: str
    fonts: FontTokens
    color: ColorTokens
    radii: RadiiTokens
    shadow: ShadowTokens
    space: List[float]
    components: ComponentStyles

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ThemeTokens":
        """Build tokens from a complete mapping; missing fields raise ``TypeError``."""
        groups = {name: group(**dict(data[name])) for name, group in TOKEN_GROUPS.items()}
        return cls(name=str(data["name"]), space=list(data["space"]), **groups)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DesignComponentSpec:
    """Descriptive guidance for one reusable UI component."""

    name: str
    purpose: str
    description: str
    key_styles: Optional[List[str]] = None
    usage_notes: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DesignComponentSpec":
        return cls(
            name=str(data.get("name") or "Component"),
            purpose=str(data.get("purpose") or ""),
            description=str(data.get("description") or ""),
            key_styles=list(data["keyStyles"]) if data.get("keyStyles") else None,
            usage_notes=list(data["usageNotes"]) if data.get("usageNotes") else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "purpose": self.purpose,
            "description": self.description,
        }
        if self.key_styles is not None:
            data["keyStyles"] = list(self.key_styles)
        if self.usage_notes is not None:
            data["usageNotes"] = list(self.usage_notes)
        return data


@dataclass
class DesignSystem:
    """Tokens plus component guidance extracted from a design source."""

    tokens: ThemeTokens
    components: List[DesignComponentSpec]
    design_language: str


@dataclass
class ArtifactUrls:
    blueprint_url: str
    tokens_url: str
    components_url: Optional[str] = None


@dataclass
class IssueStatus:
    """Snapshot of a tracker issue used to advance a job past ``issued``."""

    issue_number: int
    state: str
    pr_url: Optional[str] = None
    preview_url: Optional[str] = None


@dataclass
class SiteFile:
    path: str
    content: str


@dataclass
class GeneratedSite:
    files: List[SiteFile]
    readme: str = ""


@dataclass
class Job:
    """A submitted rebuild request and everything the pipeline learned about it."""

    id: str
    domain: str
    design_domain: Optional[str] = None
    status: JobStatus = JobStatus.NEW
    category: Optional[SiteCategory] = None
    blueprint_url: Optional[str] = None
    tokens_url: Optional[str] = None
    components_url: Optional[str] = None
    issue_number: Optional[int] = None
    pr_url: Optional[str] = None
    preview_url: Optional[str] = None
    error: Optional[str] = None
    page_count: int = 0
    history: List[JobStatus] = field(default_factory=lambda: [JobStatus.NEW])
    created_at: str = field(default_factory=_utcnow)
    updated_at: str = field(default_factory=_utcnow)

    def transition(self, status: JobStatus) -> None:
        """Move to ``status``; a failed job is terminal."""
        if self.status == JobStatus.FAILED:
            raise ValueError(f"Job {self.id} already failed; cannot move to {status.value}")
        self.status = status
        self.history.append(status)
        self.updated_at = _utcnow()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "domain": self.domain,
            "designDomain": self.design_domain,
            "status": self.status.value,
            "category": self.category.value if self.category else None,
            "blueprintUrl": self.blueprint_url,
            "tokensUrl": self.tokens_url,
            "componentsUrl": self.components_url,
            "issueNumber": self.issue_number,
            "prUrl": self.pr_url,
            "previewUrl": self.preview_url,
            "error": self.error,
            "pageCount": self.page_count,
            "history": [status.value for status in self.history],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Job":
        category = data.get("category")
        return cls(
            id=data["id"],
            domain=data["domain"],
            design_domain=data.get("designDomain"),
            status=JobStatus(data["status"]),
            category=SiteCategory(category) if category else None,
            blueprint_url=data.get("blueprintUrl"),
            tokens_url=data.get("tokensUrl"),
            components_url=data.get("componentsUrl"),
            issue_number=data.get("issueNumber"),
            pr_url=data.get("prUrl"),
            preview_url=data.get("previewUrl"),
            error=data.get("error"),
            page_count=data.get("pageCount", 0),
            history=[JobStatus(value) for value in data.get("history") or [data["status"]]],
            created_at=data.get("createdAt") or _utcnow(),
            updated_at=data.get("updatedAt") or _utcnow(),
        )
