"""Tests for string and model-output helpers."""

import pytest

from sitecast.utils import (
    extract_domain,
    parse_json_response,
    should_exclude_url,
    slugify,
    strip_code_fence,
    unique_preserve_order,
)


class TestSlugify:
    def test_lowercases_and_collapses_separators(self):
        assert slugify("Hello,  World!") == "hello-world"

    def test_falls_back_when_nothing_survives(self):
        assert slugify("!!!") == "page"
        assert slugify("", fallback="index") == "index"


def test_unique_preserve_order():
    assert unique_preserve_order(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


class TestExtractDomain:
    def test_strips_www(self):
        assert extract_domain("https://www.example.com/path?q=1") == "example.com"

    def test_keeps_subdomains(self):
        assert extract_domain("http://blog.example.com") == "blog.example.com"

    @pytest.mark.parametrize("value", ["not a url", "", "example.com"])
    def test_rejects_values_without_host(self, value):
        with pytest.raises(ValueError):
            extract_domain(value)


class TestShouldExcludeUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://x.com/login",
            "https://x.com/account/settings",
            "https://x.com/sitemap.xml",
            "https://x.com/files/brochure.PDF",
            "https://x.com/wp-json/wp/v2/posts",
            "/relative/path",
        ],
    )
    def test_excluded(self, url):
        assert should_exclude_url(url)

    @pytest.mark.parametrize("url", ["https://x.com/", "https://x.com/about", "https://x.com/blog/hello"])
    def test_content_pages_kept(self, url):
        assert not should_exclude_url(url)


class TestModelOutput:
    def test_strip_code_fence(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strip_code_fence_without_closing(self):
        assert strip_code_fence('```\n{"a": 1}') == '{"a": 1}'

    def test_plain_text_untouched(self):
        assert strip_code_fence("  portfolio \n") == "portfolio"

    def test_parse_fenced_json(self):
        assert parse_json_response('```json\n{"tokens": {}}\n```') == {"tokens": {}}

    def test_parse_json_wrapped_in_prose(self):
        assert parse_json_response('Sure! Here it is: {"a": [1, 2]} Enjoy.') == {"a": [1, 2]}

    @pytest.mark.parametrize("text", ["", "nope", "{broken", None])
    def test_unparseable_returns_none(self, text):
        assert parse_json_response(text) is None
