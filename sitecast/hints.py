"""Heuristic extraction of colors, fonts, radii and spacing from crawled markup."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence, Union

from bs4 import BeautifulSoup

from .models import CrawledPage, DesignHints
from .utils import unique_preserve_order

Number = Union[int, float]

MAX_COLORS = 12
MAX_FONTS = 6
MAX_RADII = 5
MAX_SPACINGS = 8
MAX_HTML_SAMPLES = 3
MAX_HTML_SAMPLE_CHARS = 8000
MAX_TEXT_SAMPLES = 5

# Generic fallback family that says nothing about the site's typography.
IGNORED_FONTS = {"sans-serif"}

COLOR_PATTERN = re.compile(r"#[0-9a-fA-F]{3,8}\b|rgba?\([^)]+\)")
HEX_PATTERN = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}(?:[0-9a-fA-F]{2})?")
RGB_PATTERN = re.compile(r"rgba?\([^)]+\)")
FONT_PATTERN = re.compile(r"font-family\s*:\s*[^;}]+", re.IGNORECASE)
RADIUS_PATTERN = re.compile(r"border-radius\s*:\s*[^;}]+", re.IGNORECASE)
SPACING_PATTERN = re.compile(r"(?:padding|margin|gap)\s*:\s*[^;}]+", re.IGNORECASE)
NUMBER_PATTERN = re.compile(r"-?\d*\.?\d+")
COMMENT_PATTERN = re.compile(r"<!--.*?-->")
WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_color(value: str) -> Optional[str]:
    """Return a lower-case six-digit hex color or a verbatim ``rgb()``/``rgba()`` value."""
    hex_match = HEX_PATTERN.search(value)
    if hex_match:
        normalized = hex_match.group(0).lower()
        if len(normalized) == 4:
            return "#" + "".join(char * 2 for char in normalized[1:])
        return normalized

    rgb_match = RGB_PATTERN.search(value)
    if rgb_match:
        return rgb_match.group(0)
    return None


def parse_css_number(value: str) -> Optional[Number]:
    """Read the first number in a CSS declaration, ignoring its unit."""
    match = NUMBER_PATTERN.search(value)
    if not match:
        return None
    number = round(float(match.group(0)), 2)
    return int(number) if number.is_integer() else number


def _split_font_families(declaration: str) -> List[str]:
    _, _, family_raw = declaration.partition(":")
    cleaned = re.sub(r"[\"';]", " ", family_raw)
    families = (family.strip() for family in cleaned.split(","))
    return [family for family in families if family and family not in IGNORED_FONTS]


def _collect_css(html: str) -> List[str]:
    """Return the text of every ``<style>`` block and inline ``style`` attribute."""
    soup = BeautifulSoup(html, "html.parser")
    chunks = [style.get_text() for style in soup.find_all("style")]
    chunks.extend(tag["style"] for tag in soup.find_all(style=True))
    return chunks


def _numbers(pattern: re.Pattern, css: str) -> Iterable[Number]:
    for declaration in pattern.findall(css):
        number = parse_css_number(declaration)
        if number is not None:
            yield number


def _sample(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def extract_design_hints(pages: Sequence[CrawledPage]) -> DesignHints:
    """Scan page markup and markdown for design observations.

    The scan is purely textual: CSS is matched with regular expressions
    rather than parsed, so numeric values lose their units (``16px`` and
    ``1rem`` both become ``16``/``1``). Results are deterministic for a
    given page order.
    """
    colors: List[str] = []
    fonts: List[str] = []
    radii: List[Number] = []
    spacings: List[Number] = []
    html_samples: List[str] = []
    text_samples: List[str] = []

    for page in pages:
        if page.html:
            for css in _collect_css(page.html):
                for match in COLOR_PATTERN.findall(css):
                    color = normalize_color(match)
                    if color:
                        colors.append(color)
                for declaration in FONT_PATTERN.findall(css):
                    fonts.extend(_split_font_families(declaration))
                radii.extend(_numbers(RADIUS_PATTERN, css))
                spacings.extend(_numbers(SPACING_PATTERN, css))

            sample = COMMENT_PATTERN.sub("", _sample(page.html)).strip()
            if sample:
                html_samples.append(sample)

        if page.markdown:
            sample = _sample(page.markdown)
            if sample:
                text_samples.append(sample)

    return DesignHints(
        colors=unique_preserve_order(colors)[:MAX_COLORS],
        fonts=unique_preserve_order(fonts)[:MAX_FONTS],
        radii=sorted(unique_preserve_order(radii))[:MAX_RADII],
        spacings=sorted(unique_preserve_order(spacings))[:MAX_SPACINGS],
        html_samples=[sample[:MAX_HTML_SAMPLE_CHARS] for sample in html_samples[:MAX_HTML_SAMPLES]],
        text_samples=text_samples[:MAX_TEXT_SAMPLES],
    )
