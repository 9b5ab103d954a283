"""Utility helpers for string normalization and model output handling."""

from __future__ import annotations

import json
import re
from typing import Any, Hashable, Iterable, List, Optional, TypeVar
from urllib.parse import urlparse

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")

T = TypeVar("T", bound=Hashable)


def slugify(value: str, fallback: str = "page") -> str:
    """Generate a filesystem-friendly slug using ASCII characters only."""
    normalized = value.lower()
    normalized = SLUG_PATTERN.sub("-", normalized).strip("-")
    return normalized or fallback


def unique_preserve_order(values: Iterable[T]) -> List[T]:
    """Drop repeated values, keeping the first occurrence of each."""
    return list(dict.fromkeys(values))


def extract_domain(url: str) -> str:
    """Return the hostname of ``url`` without a leading ``www.``."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        hostname = None
    if not hostname:
        raise ValueError(f"Invalid URL format: {url!r}")
    return re.sub(r"^www\.", "", hostname)


EXCLUDED_PATHS = (
    "/login",
    "/signin",
    "/signup",
    "/register",
    "/cart",
    "/checkout",
    "/search",
    "/404",
    "/admin",
    "/dashboard",
    "/account",
    "/settings",
)

# Sitemaps, documents, media and CMS plumbing.
EXCLUDED_PATTERNS = (
    ".xml",
    ".pdf",
    ".zip",
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".svg",
    ".webp",
    "/feed",
    "/wp-json",
    "/wp-content",
    "/wp-includes",
)


def should_exclude_url(url: str) -> bool:
    """True for URLs that are not content pages worth crawling."""
    lowered = url.lower()
    if any(pattern in lowered for pattern in EXCLUDED_PATTERNS):
        return True
    try:
        parsed = urlparse(url)
    except ValueError:
        return True
    if not parsed.scheme or not parsed.netloc:
        return True
    path = parsed.path.lower()
    return any(excluded in path for excluded in EXCLUDED_PATHS)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence if the model adds one."""
    text = text.strip()
    if not text.startswith("```"):
        return text

    lines = text.splitlines()
    closing_index = None
    for idx in range(len(lines) - 1, 0, -1):
        if lines[idx].strip().startswith("```"):
            closing_index = idx
            break

    if closing_index is None:
        return "\n".join(lines[1:]).strip()

    return "\n".join(lines[1:closing_index]).strip()


def parse_json_response(text: str) -> Optional[Any]:
    """Parse model output as JSON after removing fences; ``None`` when it is not JSON."""
    cleaned = strip_code_fence(text or "")
    if not cleaned:
        return None
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass
    # Models sometimes wrap the object in prose; try the outermost braces.
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        return json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError:
        return None
