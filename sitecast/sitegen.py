"""Final step: ask the model for a static site built from the artifacts."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional
from urllib.parse import unquote, urlparse

import requests

from .errors import CollaboratorError, GenerationError, InputRejected
from .generative import GenerativeModel, Message
from .models import GeneratedSite, SiteCategory, SiteFile
from .utils import parse_json_response

logger = logging.getLogger("sitecast")

MAX_PAGES_IN_PROMPT = 10
CORRECTION_PROMPT = (
    "That wasn't valid JSON. Return ONLY valid JSON with the exact format specified, "
    "nothing else."
)


def load_artifact(location: str, timeout: float = 30.0) -> Dict[str, Any]:
    """Read a JSON artifact from a local path, ``file://`` URI or GitHub/HTTP URL."""
    parsed = urlparse(location)
    if parsed.scheme in ("http", "https"):
        url = location
        if parsed.netloc == "github.com" and "/blob/" in parsed.path:
            url = location.replace("github.com", "raw.githubusercontent.com", 1).replace(
                "/blob/", "/", 1
            )
        try:
            resp = requests.get(url, timeout=timeout)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise CollaboratorError(f"Failed to fetch {url}: {exc}") from exc
    path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(location)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise InputRejected(f"Cannot read artifact {location}: {exc}") from exc


def _system_prompt(category: SiteCategory) -> str:
    return (
        "You are a code generator that creates Astro websites. Output ONLY valid JSON in "
        'this exact format:\n{\n  "files": [\n    { "path": "...", "content": "..." }\n  ],\n'
        '  "readme": "..."\n}\n\n'
        "Requirements:\n"
        "- Use Astro with TypeScript\n"
        "- Build a navigation menu from blueprint.nav\n"
        "- Follow theme tokens for colors, typography, spacing\n"
        f"- Match layout patterns to the site type ({category.value})\n"
        "- Mobile-first CSS with good contrast (min 4.5:1)\n"
        "- No dead links - only use hrefs from blueprint.nav\n"
        "- Use the original page copy verbatim and the original image URLs\n"
        "- Include proper meta tags for SEO"
    )


def _user_prompt(
    category: SiteCategory, blueprint: Mapping[str, Any], tokens: Mapping[str, Any]
) -> str:
    nav = ", ".join(f"{item.get('text')}: {item.get('href')}" for item in blueprint.get("nav", []))
    pages = [
        {
            "title": page.get("title"),
            "slug": page.get("slug"),
            "sections": page.get("sections", []),
            "images": page.get("images", []),
        }
        for page in blueprint.get("pages", [])[:MAX_PAGES_IN_PROMPT]
    ]
    lines = [
        "Generate a complete Astro site.",
        "",
        f"siteType: {category.value}",
        f"Navigation: {nav}",
        f"Theme tokens: {json.dumps(tokens)}",
        f"Pages: {json.dumps(pages)}",
        "",
        "Requirements:",
        "- Create all necessary pages from the blueprint",
        "- Add a 404.astro page",
        "- Add /sitemap.xml",
    ]
    if category == SiteCategory.BLOG:
        lines.append("- Add /feed.xml for RSS")
    lines.append("- Return ONLY valid JSON with the format specified in the system prompt")
    return "\n".join(lines)


def parse_site(text: str) -> Optional[GeneratedSite]:
    """Validate a model reply as ``{"files": [{path, content}], "readme"}``."""
    data = parse_json_response(text)
    if not isinstance(data, dict) or not isinstance(data.get("files"), list):
        return None
    files: List[SiteFile] = []
    for item in data["files"]:
        if not isinstance(item, dict):
            return None
        path, content = item.get("path"), item.get("content")
        if not isinstance(path, str) or not path or not isinstance(content, str):
            return None
        files.append(SiteFile(path=path, content=content))
    readme = data.get("readme")
    return GeneratedSite(files=files, readme=readme if isinstance(readme, str) else "")


class SiteGenerator:
    """Prompts the model for site files, retrying with backoff on unparseable replies."""

    def __init__(
        self,
        model: GenerativeModel,
        max_retries: int = 3,
        base_delay: float = 30.0,
        max_tokens: int = 4000,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.model = model
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_tokens = max_tokens
        self.sleep = sleep

    def generate(
        self,
        category: SiteCategory,
        blueprint: Mapping[str, Any],
        tokens: Mapping[str, Any],
    ) -> GeneratedSite:
        category = SiteCategory(category)
        system = _system_prompt(category)
        messages: List[Message] = [
            {"role": "user", "content": _user_prompt(category, blueprint, tokens)}
        ]
        text = self.model.chat(system, messages, self.max_tokens)
        site = parse_site(text)
        if site is not None:
            return site

        for attempt in range(1, self.max_retries + 1):
            delay = self.base_delay * 2 ** attempt
            logger.warning(
                "Site generation reply was not valid JSON; retry %d/%d in %.0fs",
                attempt,
                self.max_retries,
                delay,
            )
            self.sleep(delay)
            retry_messages = messages + [
                {"role": "assistant", "content": text},
                {"role": "user", "content": CORRECTION_PROMPT},
            ]
            text = self.model.chat(system, retry_messages, self.max_tokens)
            site = parse_site(text)
            if site is not None:
                logger.info("Retry attempt %d succeeded", attempt)
                return site

        raise GenerationError(
            f"Failed to generate valid JSON after {self.max_retries + 1} attempts"
        )


def write_site(site: GeneratedSite, output_dir: Path) -> List[Path]:
    """Write generated files below ``output_dir``; paths may not escape it."""
    root = Path(output_dir).resolve()
    written: List[Path] = []
    for site_file in site.files:
        destination = (root / site_file.path.lstrip("/")).resolve()
        if root != destination and root not in destination.parents:
            raise GenerationError(f"Refusing to write outside the output directory: {site_file.path}")
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(site_file.content, encoding="utf-8")
        logger.info("Created: %s", site_file.path)
        written.append(destination)
    if site.readme:
        readme = root / "README.md"
        readme.parent.mkdir(parents=True, exist_ok=True)
        readme.write_text(site.readme, encoding="utf-8")
        written.append(readme)
    return written
