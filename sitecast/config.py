"""Configuration objects and constants for the site pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_MODEL_ID = "mlx-community/Qwen2.5-7B-Instruct-4bit"
DEFAULT_MAX_PAGES = 20
DEFAULT_MAX_DESIGN_TRANSFER_PAGES = 12
DEFAULT_DESIGN_PAGES = 5


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class PipelineConfig:
    """Top-level settings that control crawling, artifact output and generation."""

    output_root: Path
    firecrawl_api_key: Optional[str] = None
    github_token: Optional[str] = None
    github_repo: Optional[str] = None
    model_id: Optional[str] = None
    max_tokens: int = 900
    max_pages: int = DEFAULT_MAX_PAGES
    max_design_transfer_pages: int = DEFAULT_MAX_DESIGN_TRANSFER_PAGES
    design_pages: int = DEFAULT_DESIGN_PAGES
    navigation_timeout: float = 30.0
    wait_after_load: float = 1.0
    http_timeout: float = 60.0

    @classmethod
    def from_env(cls, output_root: Optional[Path] = None) -> "PipelineConfig":
        """Build a configuration from ``SITECAST_*`` and service credential variables."""
        root = output_root or Path(os.getenv("SITECAST_OUTPUT", "output"))
        return cls(
            output_root=Path(root).expanduser().resolve(),
            firecrawl_api_key=os.getenv("FIRECRAWL_API_KEY") or None,
            github_token=os.getenv("GITHUB_TOKEN") or None,
            github_repo=os.getenv("GITHUB_REPO") or None,
            model_id=os.getenv("SITECAST_MODEL") or None,
            max_pages=_env_int("SITECAST_MAX_PAGES", DEFAULT_MAX_PAGES),
            max_design_transfer_pages=_env_int(
                "SITECAST_MAX_DESIGN_TRANSFER_PAGES", DEFAULT_MAX_DESIGN_TRANSFER_PAGES
            ),
        )

    def page_ceiling(self, design_transfer: bool) -> int:
        """Return the content crawl ceiling for the requested flow."""
        return self.max_design_transfer_pages if design_transfer else self.max_pages
