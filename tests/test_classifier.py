"""Tests for site classification."""

import pytest

from sitecast.classifier import classify_by_rules, classify_site, parse_category
from sitecast.models import CrawledPage, SiteCategory

from conftest import FakeModel


def _page(url="https://acme.io/", title="Acme", markdown=""):
    return CrawledPage(url=url, title=title, markdown=markdown)


class TestRules:
    def test_pricing_and_features_is_saas_without_model_call(self):
        model = FakeModel()
        pages = [_page(markdown="Features and Pricing for modern teams")]
        assert classify_site(pages, model=model) == SiteCategory.SAAS_LANDING
        assert model.calls == []

    def test_docs_beats_blog(self):
        pages = [_page(url="https://x.com/blog/news"), _page(url="https://x.com/docs/start")]
        assert classify_by_rules(pages) == SiteCategory.DOCS

    def test_blog_beats_saas(self):
        pages = [_page(url="https://x.com/posts/launch", markdown="pricing and features")]
        assert classify_by_rules(pages) == SiteCategory.BLOG

    @pytest.mark.parametrize(
        "markdown, expected",
        [
            ("RSVP by Friday", SiteCategory.EVENT),
            ("Find the venue and buy tickets", SiteCategory.EVENT),
            ("See our menu and make a reservation", SiteCategory.RESTAURANT),
            ("Meet our chef", SiteCategory.RESTAURANT),
        ],
    )
    def test_keyword_rules(self, markdown, expected):
        assert classify_by_rules([_page(markdown=markdown)]) == expected

    def test_pricing_alone_is_not_saas(self):
        assert classify_by_rules([_page(markdown="Our pricing is fair")]) is None


class TestModelFallback:
    def test_no_rule_and_no_model_is_portfolio(self):
        assert classify_site([_page(markdown="Photographs by Jane")]) == SiteCategory.PORTFOLIO

    def test_model_consulted_when_no_rule_matches(self):
        model = FakeModel("Blog.")
        category = classify_site([_page(markdown="Thoughts on gardening")], model=model)

        assert category == SiteCategory.BLOG
        assert len(model.calls) == 1
        assert model.calls[0]["max_tokens"] == 50
        assert "Thoughts on gardening" in model.calls[0]["messages"][0]["content"]


class TestParseCategory:
    @pytest.mark.parametrize(
        "reply, expected",
        [
            ("docs", SiteCategory.DOCS),
            ("  SAAS-LANDING \n", SiteCategory.SAAS_LANDING),
            ('"restaurant"', SiteCategory.RESTAURANT),
            ("a shopping mall", SiteCategory.PORTFOLIO),
            ("", SiteCategory.PORTFOLIO),
        ],
    )
    def test_parse(self, reply, expected):
        assert parse_category(reply) == expected
