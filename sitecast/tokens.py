"""Design token synthesis from extracted hints, with optional model refinement."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .generative import GenerativeModel, complete
from .hints import extract_design_hints, parse_css_number
from .models import (
    TOKEN_GROUPS,
    ColorTokens,
    ComponentStyles,
    CrawledPage,
    DesignComponentSpec,
    DesignHints,
    DesignSystem,
    FontTokens,
    RadiiTokens,
    ShadowTokens,
    ThemeTokens,
)
from .utils import parse_json_response

logger = logging.getLogger("sitecast")

DEFAULT_COLORS = ("#3b82f6", "#8b5cf6", "#0f172a")
DEFAULT_FONT = "Inter"
DEFAULT_RADII = (8, 16, 24)
DEFAULT_SPACE = [0, 4, 8, 12, 16, 24, 32, 48, 64, 96]
MAX_SPACE_STEPS = 9
MAX_COMPONENTS = 8
DARK_RED_CHANNEL_LIMIT = 140

DARK_SURFACES = {"surface": "#111929", "text": "#f1f5f9", "muted": "#94a3b8"}
LIGHT_SURFACES = {"surface": "#f8fafc", "text": "#1f2937", "muted": "#6b7280"}

REFINEMENT_SYSTEM_PROMPT = (
    "You are a senior product designer. Produce polished design tokens and component "
    "guidelines. Output must be valid JSON matching the requested schema. Never include "
    "markdown fences or commentary."
)

REFINEMENT_SCHEMA = """{
  "tokens": {
    "name": string,
    "fonts": { "heading": string, "body": string },
    "color": { "brand": string, "brandAlt": string, "bg": string,
               "surface": string, "text": string, "muted": string },
    "radii": { "sm": number, "md": number, "lg": number },
    "shadow": { "sm": string, "md": string },
    "space": number[],
    "components": { "button": string, "card": string, "menu": string }
  },
  "components": Array<{ "name": string, "purpose": string, "description": string,
                        "keyStyles"?: string[], "usageNotes"?: string[] }>,
  "designLanguage": string
}"""

HEADING_PATTERN = re.compile(r"^#+\s+(.+)$", re.MULTILINE)


def _is_dark(color: str) -> bool:
    if not color.startswith("#") or len(color) < 4:
        return False
    try:
        return int(color[1:3], 16) < DARK_RED_CHANNEL_LIMIT
    except ValueError:
        return False


def build_fallback_tokens(hints: DesignHints) -> ThemeTokens:
    """Derive a complete token set from hints alone; never raises."""
    colors = list(hints.colors) + list(DEFAULT_COLORS[len(hints.colors):])
    brand, brand_alt, bg = colors[:3]

    heading_font = hints.fonts[0] if hints.fonts else DEFAULT_FONT
    body_font = hints.fonts[1] if len(hints.fonts) > 1 else heading_font

    if hints.radii:
        radii = sorted(hints.radii)[:3]
        radii += [radii[-1]] * (3 - len(radii))
    else:
        radii = list(DEFAULT_RADII)

    if hints.spacings:
        space = [0] + sorted(hints.spacings)[:MAX_SPACE_STEPS]
    else:
        space = list(DEFAULT_SPACE)

    surfaces = DARK_SURFACES if _is_dark(bg) else LIGHT_SURFACES

    return ThemeTokens(
        name="custom-derived",
        fonts=FontTokens(heading=heading_font, body=body_font),
        color=ColorTokens(brand=brand, brandAlt=brand_alt, bg=bg, **surfaces),
        radii=RadiiTokens(sm=radii[0], md=radii[1], lg=radii[2]),
        shadow=ShadowTokens(
            sm="0 4px 12px rgba(15, 23, 42, 0.14)",
            md="0 24px 60px rgba(15, 23, 42, 0.28)",
        ),
        space=space,
        components=ComponentStyles(button="elevated", card="layered", menu="sticky"),
    )


def build_fallback_components(pages: Sequence[CrawledPage]) -> List[DesignComponentSpec]:
    """Describe one component per distinct markdown heading, or two generic ones."""
    components: List[DesignComponentSpec] = []
    seen = set()
    for page in pages:
        for title in HEADING_PATTERN.findall(page.markdown or ""):
            title = title.strip()
            if not title or title.lower() in seen:
                continue
            seen.add(title.lower())
            components.append(
                DesignComponentSpec(
                    name=title,
                    purpose="content-section",
                    description=(
                        "Section detected in source content. Use to lay out related copy "
                        "with cohesive spacing."
                    ),
                    key_styles=["match typography scale", "balance whitespace"],
                    usage_notes=["Maintain hierarchy", "Use consistent spacing tokens"],
                )
            )

    if not components:
        components = [
            DesignComponentSpec(
                name="Hero",
                purpose="page-intro",
                description=(
                    "Large welcoming section with precise typography scale and generous padding."
                ),
                key_styles=[
                    "Full-width background layer",
                    "Bold primary headline",
                    "Prominent call-to-action buttons",
                ],
                usage_notes=[
                    "Keep primary action emphasized with brand color",
                    "Limit hero copy to 2-3 short sentences",
                ],
            ),
            DesignComponentSpec(
                name="Feature Grid",
                purpose="feature-highlights",
                description="Card-based grid for showcasing differentiators with iconography.",
                key_styles=["3 or 4-column layout", "Soft shadows", "Rounded corners"],
                usage_notes=[
                    "Ensure iconography aligns to a consistent size",
                    "Use space tokens to maintain consistent gaps",
                ],
            ),
        ]
    return components[:MAX_COMPONENTS]


def validate_design_candidate(candidate: Any) -> Optional[Dict[str, Any]]:
    """Return the candidate when it has token colors, token fonts and a component list."""
    if not isinstance(candidate, Mapping):
        return None
    tokens = candidate.get("tokens")
    if not isinstance(tokens, Mapping):
        return None
    if not isinstance(tokens.get("color"), Mapping) or not isinstance(tokens.get("fonts"), Mapping):
        return None
    if not isinstance(candidate.get("components"), list):
        return None
    return dict(candidate)


def _coerce_radius(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        return parse_css_number(value)
    return None


def _coerce_space(value: Any) -> Optional[List[float]]:
    if not isinstance(value, list):
        return None
    steps = sorted(
        {step for step in value if isinstance(step, (int, float)) and not isinstance(step, bool)}
    )
    if not steps:
        return None
    if steps[0] != 0:
        steps.insert(0, 0)
    return steps


def merge_tokens(fallback: ThemeTokens, refined: Mapping[str, Any]) -> ThemeTokens:
    """Overlay model-provided token fields on ``fallback`` group by group.

    Model values win for every field they provide; fields they omit (or give
    with an unusable type) keep the fallback value.
    """
    merged: Dict[str, Any] = asdict(fallback)
    for group_name in TOKEN_GROUPS:
        overrides = refined.get(group_name)
        if not isinstance(overrides, Mapping):
            continue
        group = merged[group_name]
        for key in group:
            if key not in overrides or overrides[key] is None:
                continue
            value = overrides[key]
            if group_name == "radii":
                value = _coerce_radius(value)
                if value is None:
                    continue
            elif not isinstance(value, str):
                continue
            group[key] = value

    name = refined.get("name")
    if isinstance(name, str) and name.strip():
        merged["name"] = name.strip()
    space = _coerce_space(refined.get("space"))
    if space:
        merged["space"] = space
    return ThemeTokens.from_dict(merged)


def _refinement_prompt(hints: DesignHints) -> str:
    payload = {"hints": hints.to_dict(), "markdownSamples": hints.text_samples[:3]}
    return (
        "We crawled a website to reuse its visual language. Based on the extracted "
        "observations below, produce an elevated but faithful design system.\n\n"
        f"Return ONLY JSON matching:\n{REFINEMENT_SCHEMA}\n\n"
        "Constraints:\n"
        "- Reuse detected colors and fonts where possible; refine for balance.\n"
        "- Ensure tokens deliver a premium, production-ready aesthetic.\n"
        "- Components must reflect patterns visible in the snippets.\n"
        "- Limit arrays to at most 6 entries.\n\n"
        f"Extracted observations:\n{json.dumps(payload, indent=2)}"
    )


def request_refinement(
    hints: DesignHints, model: GenerativeModel, max_tokens: int = 900
) -> Optional[Dict[str, Any]]:
    """Ask the model for a refined design system; ``None`` when the reply is unusable."""
    try:
        text = complete(model, REFINEMENT_SYSTEM_PROMPT, _refinement_prompt(hints), max_tokens)
    except Exception:  # noqa: BLE001 - refinement is optional
        logger.exception("Design refinement request failed; using fallback tokens")
        return None
    candidate = validate_design_candidate(parse_json_response(text))
    if candidate is None:
        logger.warning("Design refinement did not match the token schema; using fallback tokens")
    return candidate


def extract_design_system(
    pages: Sequence[CrawledPage],
    model: Optional[GenerativeModel] = None,
    max_tokens: int = 900,
) -> DesignSystem:
    """Build tokens and component guidance for ``pages``."""
    hints = extract_design_hints(pages)
    fallback = build_fallback_tokens(hints)
    logger.debug(
        "Design hints: %d colors, %d fonts, %d radii, %d spacings",
        len(hints.colors),
        len(hints.fonts),
        len(hints.radii),
        len(hints.spacings),
    )

    if model is None:
        return DesignSystem(
            tokens=fallback,
            components=build_fallback_components(pages),
            design_language="Custom design derived from source styles (model unavailable)",
        )

    candidate = request_refinement(hints, model, max_tokens)
    if candidate is None:
        return DesignSystem(
            tokens=fallback,
            components=build_fallback_components(pages),
            design_language="Custom design derived from source styles (model fallback)",
        )

    components = [
        DesignComponentSpec.from_dict(item)
        for item in candidate["components"]
        if isinstance(item, Mapping)
    ][:MAX_COMPONENTS]
    design_language = candidate.get("designLanguage")
    return DesignSystem(
        tokens=merge_tokens(fallback, candidate["tokens"]),
        components=components or build_fallback_components(pages),
        design_language=(
            design_language
            if isinstance(design_language, str) and design_language
            else "Curated from design site (model generated description)"
        ),
    )
