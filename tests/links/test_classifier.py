"""Tests for link classification."""

import pytest

from newsletter_links.config.app_config import AppConfig
from newsletter_links.links.classifier import categorize_link, is_intermediate_domain
from newsletter_links.links.models import LinkCategory


class TestCategorizeLink:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://track.example.com/click/redirect?x=1", LinkCategory.TRACKING),
            ("https://example.com/open/123", LinkCategory.TRACKING),
            ("https://example.com/api/v1/links", LinkCategory.TRACKING),
            ("https://twitter.com/share", LinkCategory.SOCIAL),
            ("https://www.linkedin.com/in/someone", LinkCategory.SOCIAL),
            ("https://substack.com/@writer", LinkCategory.SOCIAL),
            ("https://writer.substack.com/", LinkCategory.SOCIAL),
            ("https://writer.substack.com/p/a-post", LinkCategory.KEEP),
            ("https://www.youtube.com/watch?v=abc", LinkCategory.YOUTUBE),
            ("https://youtu.be/abc", LinkCategory.YOUTUBE),
            ("https://example.com/files/handbook.pdf", LinkCategory.BONUS),
            ("https://example.com/ebooks/free-ebook", LinkCategory.BONUS),
            ("https://www.udemy.com/course/python", LinkCategory.SPONSORED),
            ("https://bookshop.org/a/123/9780000000000", LinkCategory.SPONSORED),
            ("https://blog.example.com/post?ref=newsletter", LinkCategory.SPONSORED),
            ("https://blog.example.com/post?utm_source=email&utm_medium=nl", LinkCategory.SPONSORED),
            ("https://example.com/pricing", LinkCategory.SPONSORED),
            ("https://unsubscribe.example.com/u/1", LinkCategory.SPONSORED),
            ("https://shop.example.com/item?code=coupon10", LinkCategory.SPONSORED),
            ("https://blog.example.com/post", LinkCategory.KEEP),
        ],
    )
    def test_rules(self, url, expected):
        assert categorize_link(url) == expected

    def test_github_profile_vs_repository(self):
        assert categorize_link("https://github.com/alice") == LinkCategory.SOCIAL
        assert categorize_link("https://github.com") == LinkCategory.SOCIAL
        assert categorize_link("https://github.com/alice/repo") == LinkCategory.KEEP

    def test_keyword_path_without_resource_directory_is_kept(self):
        assert categorize_link("https://example.com/guide-to-rust") == LinkCategory.KEEP

    def test_course_domain_outside_course_paths_is_kept(self):
        assert categorize_link("https://www.udemy.com/about") == LinkCategory.KEEP

    def test_email_source_alone_is_kept(self):
        assert categorize_link("https://blog.example.com/post?utm_source=email") == LinkCategory.KEEP

    def test_lookalike_hosts_are_not_social(self):
        assert categorize_link("https://notx.com/post") == LinkCategory.KEEP

    def test_unparseable_url_is_kept(self):
        assert categorize_link("not a url") == LinkCategory.KEEP

    def test_deterministic(self):
        url = "https://example.com/deals/today"

        assert {categorize_link(url) for _ in range(5)} == {LinkCategory.SPONSORED}

    def test_intermediate_domain_forced_to_keep(self, daily_dev_config):
        assert categorize_link("https://daily.dev/r/abc", daily_dev_config) == LinkCategory.KEEP
        assert categorize_link("https://app.daily.dev/pricing", daily_dev_config) == LinkCategory.KEEP
        assert categorize_link("https://app.daily.dev/pricing") == LinkCategory.SPONSORED

    def test_tracking_path_beats_intermediate_domain(self, daily_dev_config):
        assert (
            categorize_link("https://api.daily.dev/click/abc", daily_dev_config)
            == LinkCategory.TRACKING
        )

    def test_config_without_intermediate_domains(self):
        assert categorize_link("https://twitter.com/share", AppConfig()) == LinkCategory.SOCIAL


class TestIsIntermediateDomain:
    def test_wildcard_matches_domain_and_subdomains(self):
        assert is_intermediate_domain("https://daily.dev/r/1", ["*.daily.dev"])
        assert is_intermediate_domain("https://app.daily.dev/r/1", ["*.daily.dev"])

    def test_exact_domain_matches_subdomains(self):
        assert is_intermediate_domain("https://app.daily.dev/r/1", ["daily.dev"])

    def test_no_substring_matches(self):
        assert not is_intermediate_domain("https://notdaily.dev/r/1", ["daily.dev"])

    def test_unparseable_url(self):
        assert not is_intermediate_domain("not a url", ["daily.dev"])
