"""Tests for design token synthesis and presets."""

import json

import pytest

from sitecast.models import CrawledPage, DesignHints, SiteCategory
from sitecast.presets import THEME_PRESETS, generate_tokens
from sitecast.tokens import (
    DEFAULT_SPACE,
    build_fallback_components,
    build_fallback_tokens,
    extract_design_system,
    merge_tokens,
    validate_design_candidate,
)

from conftest import FakeModel

REFINED = {
    "tokens": {
        "name": "studio-calm",
        "fonts": {"heading": "Playfair Display", "body": "Inter"},
        "color": {"brand": "#222222", "brandAlt": "#333333"},
        "radii": {"sm": "6px", "md": 12},
        "space": [8, 4, 16],
    },
    "components": [
        {"name": "Hero", "purpose": "intro", "description": "Large intro", "keyStyles": ["serif"]},
    ],
    "designLanguage": "Quiet editorial",
}


class TestFallbackTokens:
    def test_empty_hints_give_complete_defaults(self):
        tokens = build_fallback_tokens(DesignHints())
        data = tokens.to_dict()

        assert data["name"] == "custom-derived"
        assert data["color"]["brand"] == "#3b82f6"
        assert data["color"]["bg"] == "#0f172a"
        assert data["fonts"] == {"heading": "Inter", "body": "Inter"}
        assert data["radii"] == {"sm": 8, "md": 16, "lg": 24}
        assert data["space"] == DEFAULT_SPACE
        assert all(data["color"].values())

    def test_dark_background_gets_dark_surfaces(self):
        tokens = build_fallback_tokens(DesignHints(colors=["#ff0000", "#00ff00", "#101010"]))
        assert tokens.color.surface == "#111929"
        assert tokens.color.text == "#f1f5f9"

    def test_light_background_gets_light_surfaces(self):
        tokens = build_fallback_tokens(DesignHints(colors=["#ff0000", "#00ff00", "#ffffff"]))
        assert tokens.color.surface == "#f8fafc"
        assert tokens.color.text == "#1f2937"

    def test_hints_drive_fonts_radii_and_space(self):
        hints = DesignHints(fonts=["Lora", "Inter"], radii=[10, 2], spacings=[24, 8])
        tokens = build_fallback_tokens(hints)
        assert (tokens.fonts.heading, tokens.fonts.body) == ("Lora", "Inter")
        assert (tokens.radii.sm, tokens.radii.md, tokens.radii.lg) == (2, 10, 10)
        assert tokens.space == [0, 8, 24]


class TestFallbackComponents:
    def test_one_per_distinct_heading(self):
        pages = [
            CrawledPage(url="https://x.com/", markdown="# Welcome\n## Services\n## services"),
            CrawledPage(url="https://x.com/b", markdown="## Contact"),
        ]
        names = [component.name for component in build_fallback_components(pages)]
        assert names == ["Welcome", "Services", "Contact"]

    def test_generic_components_without_headings(self):
        names = [c.name for c in build_fallback_components([CrawledPage(url="https://x.com/")])]
        assert names == ["Hero", "Feature Grid"]


class TestMergeTokens:
    def test_model_values_win_and_fallback_fields_survive(self):
        fallback = build_fallback_tokens(DesignHints(colors=["#111"]))
        merged = merge_tokens(fallback, {"color": {"brand": "#222", "brandAlt": "#333"}})

        assert merged.color.brand == "#222"
        assert merged.color.brandAlt == "#333"
        assert merged.color.muted == fallback.color.muted
        assert merged.fonts == fallback.fonts

    def test_radii_coerced_and_space_normalized(self):
        fallback = build_fallback_tokens(DesignHints())
        merged = merge_tokens(fallback, REFINED["tokens"])

        assert merged.name == "studio-calm"
        assert (merged.radii.sm, merged.radii.md, merged.radii.lg) == (6, 12, 24)
        assert merged.space == [0, 4, 8, 16]

    def test_unusable_values_ignored(self):
        fallback = build_fallback_tokens(DesignHints())
        merged = merge_tokens(
            fallback,
            {"color": {"brand": 42}, "radii": {"sm": True}, "name": "  ", "space": "wide"},
        )
        assert merged == fallback


class TestValidateDesignCandidate:
    def test_accepts_complete_candidate(self):
        assert validate_design_candidate(REFINED) == REFINED

    @pytest.mark.parametrize(
        "candidate",
        [
            None,
            [],
            {"components": []},
            {"tokens": {"color": {}}, "components": []},
            {"tokens": {"color": {}, "fonts": {}}, "components": "none"},
        ],
    )
    def test_rejects_incomplete_candidates(self, candidate):
        assert validate_design_candidate(candidate) is None


class TestExtractDesignSystem:
    def test_without_model(self, design_site):
        design = extract_design_system(design_site)
        assert design.tokens.name == "custom-derived"
        assert design.tokens.fonts.heading == "Playfair Display"
        assert design.tokens.color.brand == "#fafafa"
        assert design.design_language.endswith("(model unavailable)")

    def test_refined_by_model(self, design_site):
        model = FakeModel("```json\n" + json.dumps(REFINED) + "\n```")
        design = extract_design_system(design_site, model=model, max_tokens=321)

        assert model.calls[0]["max_tokens"] == 321
        assert design.tokens.name == "studio-calm"
        assert design.tokens.color.brand == "#222222"
        assert design.tokens.color.bg == "#0f172a"
        assert [c.name for c in design.components] == ["Hero"]
        assert design.components[0].key_styles == ["serif"]
        assert design.design_language == "Quiet editorial"

    def test_invalid_reply_falls_back(self, design_site):
        design = extract_design_system(design_site, model=FakeModel('{"tokens": "nope"}'))
        assert design.tokens.name == "custom-derived"
        assert design.design_language.endswith("(model fallback)")

    def test_model_error_falls_back(self, design_site):
        design = extract_design_system(design_site, model=FakeModel(RuntimeError("offline")))
        assert design.design_language.endswith("(model fallback)")
        assert design.components

    def test_missing_design_language_gets_default(self, design_site):
        reply = dict(REFINED, designLanguage="")
        design = extract_design_system(design_site, model=FakeModel(json.dumps(reply)))
        assert design.design_language == "Curated from design site (model generated description)"


class TestPresets:
    def test_every_category_has_a_preset(self):
        assert set(THEME_PRESETS) == set(SiteCategory)

    def test_blog_preset(self):
        tokens = generate_tokens(SiteCategory.BLOG)
        assert tokens.name == "blog-clean"
        assert tokens.fonts.heading == "Merriweather"

    def test_accepts_category_value(self):
        assert generate_tokens("saas-landing").name == "saas-fresh"

    def test_returns_independent_copies(self):
        tokens = generate_tokens(SiteCategory.PORTFOLIO)
        tokens.color.brand = "#000000"
        tokens.space.append(999)
        fresh = generate_tokens(SiteCategory.PORTFOLIO)
        assert fresh.color.brand == "#3b82f6"
        assert 999 not in fresh.space
