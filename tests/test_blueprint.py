"""Tests for blueprint generation."""

import pytest

from sitecast.blueprint import (
    MAX_IMAGES_PER_PAGE,
    build_navigation,
    extract_images,
    extract_sections,
    generate_blueprint,
    generate_slug,
)
from sitecast.models import ContentSection, CrawledPage, HeroSection, TitledSection


class TestGenerateSlug:
    def test_root_is_index(self):
        assert generate_slug("https://x.com/") == "index"
        assert generate_slug("https://x.com") == "index"

    def test_spaces_and_case(self):
        assert generate_slug("https://x.com/About Us/") == "about-us"
        assert generate_slug("https://x.com/About%20Us") == "about-us"

    def test_trailing_slash_insensitive(self):
        assert generate_slug("https://x.com/blog/post-1") == generate_slug("https://x.com/blog/post-1/")

    def test_nested_paths_joined(self):
        assert generate_slug("https://x.com/blog/Post_1") == "blog-post-1"

    def test_non_ascii_path_keeps_encoded_form(self):
        slug = generate_slug("https://x.com/%E2%82%AC")
        assert slug == "e2-82-ac"
        assert slug != generate_slug("https://x.com/")

    @pytest.mark.parametrize(
        "url",
        ["https://x.com/", "https://x.com/a/b", "https://x.com/Über uns", "https://x.com/%E2%82%AC"],
    )
    def test_idempotent(self, url):
        slug = generate_slug(url)
        assert generate_slug(slug) == slug


class TestExtractSections:
    def test_hero_and_section(self):
        sections = extract_sections("# Hello\nworld\n## Two\nmore")
        assert sections == [
            HeroSection(h1="Hello", content="world"),
            TitledSection(title="Two", content="more"),
        ]
        assert sections[0].to_dict() == {
            "type": "hero",
            "h1": "Hello",
            "sub": "",
            "cta": "",
            "content": "world",
        }

    def test_no_headings_single_truncated_content(self):
        sections = extract_sections("x" * 1500)
        assert len(sections) == 1
        assert isinstance(sections[0], ContentSection)
        assert len(sections[0].content) == 1000

    def test_empty_markdown(self):
        assert extract_sections("") == [ContentSection(content="")]

    def test_heading_without_body_has_no_content(self):
        sections = extract_sections("## Lonely")
        assert sections[0].content is None
        assert "content" not in sections[0].to_dict()

    def test_deeper_headings_stay_in_content(self):
        sections = extract_sections("## Team\n### Ada\nEngineer")
        assert sections == [TitledSection(title="Team", content="### Ada\nEngineer")]


def test_extract_images_in_order_and_capped():
    html = "".join(f'<img src="/img/{i}.png">' for i in range(15)) + "<img alt='no src'>"
    images = extract_images(html)
    assert len(images) == MAX_IMAGES_PER_PAGE
    assert images[:2] == ["/img/0.png", "/img/1.png"]


class TestBuildNavigation:
    def test_home_first_and_capped(self):
        links = [f"https://x.com/section-{i}" for i in range(10)]
        pages = [CrawledPage(url="https://x.com/", links=links)]
        nav = build_navigation(pages)
        assert len(nav) <= 6
        assert (nav[0].text, nav[0].href) == ("Home", "/")

    def test_most_linked_paths_win(self):
        pages = [
            CrawledPage(url="https://x.com/", links=["https://x.com/about-us", "https://x.com/rare"]),
            CrawledPage(url="https://x.com/a", links=["https://x.com/about-us", "https://x.com/"]),
        ]
        nav = build_navigation(pages)
        assert [item.href for item in nav] == ["/", "/about-us", "/rare"]
        assert nav[1].text == "About Us"

    def test_relative_links_ignored(self):
        nav = build_navigation([CrawledPage(url="https://x.com/", links=["/about", "#top"])])
        assert [item.href for item in nav] == ["/"]

    def test_other_hosts_ignored(self):
        links = [
            "https://twitter.com/acme",
            "https://twitter.com/acme",
            "https://www.x.com/about",
            "https://cdn.other.net/about",
        ]
        nav = build_navigation([CrawledPage(url="https://x.com/", links=links)])
        assert [item.href for item in nav] == ["/", "/about"]

    def test_domain_counts_as_same_site(self):
        pages = [CrawledPage(url="https://x.com/", links=["https://y.com/team"])]
        assert [item.href for item in build_navigation(pages)] == ["/"]
        assert [item.href for item in build_navigation(pages, "y.com")] == ["/", "/team"]


def test_generate_blueprint(content_site):
    blueprint = generate_blueprint("example.com", content_site)
    data = blueprint.to_dict()

    assert data["domain"] == "example.com"
    assert data["assetsPolicy"] == {"useOriginalImages": True, "rewriteText": False}
    assert [page["slug"] for page in data["pages"]] == ["index", "pricing", "about"]
    assert data["pages"][0]["images"] == ["/hero.png"]
    assert data["pages"][0]["sections"][0]["h1"] == "Ship faster"
    assert data["nav"][0] == {"text": "Home", "href": "/"}


def test_missing_title_defaults():
    blueprint = generate_blueprint("x.com", [CrawledPage(url="https://x.com/", title=None)])
    assert blueprint.pages[0].title == "Untitled"
