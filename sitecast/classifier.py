"""Keyword rules (with a model fallback) that assign a site category."""

from __future__ import annotations

import json
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from .generative import GenerativeModel, complete
from .models import CrawledPage, SiteCategory

logger = logging.getLogger("sitecast")

EXCERPT_CHARS = 200
SAMPLE_PAGES = 3

Rule = Callable[[str], bool]


def _any(*needles: str) -> Rule:
    return lambda text: any(needle in text for needle in needles)


def _all(*needles: str) -> Rule:
    return lambda text: all(needle in text for needle in needles)


# First match wins; order is the tie-break priority.
CATEGORY_RULES: List[Tuple[SiteCategory, Rule]] = [
    (SiteCategory.DOCS, _any("/docs", "/api", "/guide")),
    (SiteCategory.BLOG, _any("/blog", "/posts", "/articles")),
    (
        SiteCategory.SAAS_LANDING,
        lambda text: "pricing" in text and _any("features", "signup")(text),
    ),
    (
        SiteCategory.EVENT,
        lambda text: _any("rsvp", "schedule")(text) or _all("venue", "tickets")(text),
    ),
    (
        SiteCategory.RESTAURANT,
        lambda text: _all("menu", "reservation")(text)
        or "chef" in text
        or _all("hours", "reservation")(text),
    ),
]


def _page_text(pages: Sequence[CrawledPage]) -> str:
    return " ".join(
        f"{page.url} {page.title or ''} {page.markdown or ''}".lower() for page in pages
    )


def classify_by_rules(pages: Sequence[CrawledPage]) -> Optional[SiteCategory]:
    """Return the first category whose keyword rule matches, if any."""
    text = _page_text(pages)
    for category, rule in CATEGORY_RULES:
        if rule(text):
            return category
    return None


def parse_category(response: str) -> SiteCategory:
    """Map a model reply onto a category, defaulting to portfolio."""
    token = (response or "").strip().lower().strip(".\"'`")
    try:
        return SiteCategory(token)
    except ValueError:
        logger.debug("Unrecognised category response %r; defaulting to portfolio", response)
        return SiteCategory.PORTFOLIO


def classify_with_model(pages: Sequence[CrawledPage], model: GenerativeModel) -> SiteCategory:
    sample = [
        {"url": page.url, "title": page.title, "excerpt": (page.markdown or "")[:EXCERPT_CHARS]}
        for page in pages[:SAMPLE_PAGES]
    ]
    categories = ", ".join(category.value for category in SiteCategory)
    prompt = (
        f"Classify this website into ONE category: {categories}.\n\n"
        f"Sample pages:\n{json.dumps(sample, indent=2)}\n\n"
        "Respond with ONLY the category name, nothing else."
    )
    response = complete(model, "You classify websites.", prompt, max_tokens=50)
    return parse_category(response)


def classify_site(
    pages: Sequence[CrawledPage], model: Optional[GenerativeModel] = None
) -> SiteCategory:
    """Classify by rules first; only consult the model when no rule matches."""
    category = classify_by_rules(pages)
    if category is not None:
        logger.info("Classified site as %s by keyword rules", category.value)
        return category
    if model is None:
        logger.info("No classification rule matched and no model configured; using portfolio")
        return SiteCategory.PORTFOLIO
    category = classify_with_model(pages, model)
    logger.info("Classified site as %s by model", category.value)
    return category
