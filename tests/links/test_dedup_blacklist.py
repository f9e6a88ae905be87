"""Tests for seen-URL tracking and blacklist filtering."""

from datetime import datetime

from newsletter_links.config.app_config import NewsletterPattern
from newsletter_links.links.blacklist import filter_blacklisted, is_blacklisted
from newsletter_links.links.dedup import SeenUrls
from newsletter_links.links.models import Article, Newsletter


class TestSeenUrls:
    def test_query_and_fragment_ignored(self):
        seen = SeenUrls()
        seen.add("https://a.com/post?utm_source=x")

        assert seen.is_duplicate("https://a.com/post?id=2#top")
        assert "https://a.com/post" in seen
        assert not seen.is_duplicate("https://a.com/other")

    def test_add_many(self):
        seen = SeenUrls()
        seen.add("https://a.com/1", "https://a.com/2?x=1", "https://a.com/2")

        assert len(seen) == 2

    def test_exact_urls_keep_query(self):
        seen = SeenUrls()
        seen.add_exact("https://www.youtube.com/watch?v=abc")

        assert seen.is_duplicate_exact("https://www.youtube.com/watch?v=abc")
        assert not seen.is_duplicate_exact("https://www.youtube.com/watch?v=def")
        assert not seen.is_duplicate("https://www.youtube.com/watch")


class TestIsBlacklisted:
    def test_exact(self):
        assert is_blacklisted("https://example.com/page", ["https://example.com/page"])

    def test_wildcard_domain(self):
        patterns = ["*.medium.com"]

        assert is_blacklisted("https://medium.com/p/1", patterns)
        assert is_blacklisted("https://blog.medium.com/p/1", patterns)
        assert not is_blacklisted("https://notmedium.com/p/1", patterns)

    def test_path_wildcard(self):
        patterns = ["https://example.com/jobs/*"]

        assert is_blacklisted("https://example.com/jobs/123", patterns)
        assert not is_blacklisted("https://example.com/blog/1", patterns)

    def test_exact_pattern_is_not_a_prefix(self):
        patterns = ["https://example.com/page"]

        assert not is_blacklisted("https://example.com/page-two", patterns)
        assert not is_blacklisted("https://example.com/page/more", patterns)

    def test_unparseable_never_blacklisted(self):
        assert not is_blacklisted("not a url", ["not a url"])


class TestFilterBlacklisted:
    def make_newsletter(self) -> Newsletter:
        return Newsletter(
            id="1",
            pattern=NewsletterPattern(name="Weekly"),
            date=datetime(2026, 10, 1),
            links=["https://good.example.com/a", "https://ads.example.com/b"],
            articles=[
                Article(title="Good", url="https://good.example.com/a"),
                Article(title="Ad", url="https://ads.example.com/c"),
            ],
        )

    def test_filters_links_and_articles(self):
        newsletter = self.make_newsletter()

        [filtered] = filter_blacklisted([newsletter], ["*.ads.example.com"])

        assert filtered.links == ["https://good.example.com/a"]
        assert [a.url for a in filtered.articles] == ["https://good.example.com/a"]
        # input is left untouched
        assert len(newsletter.links) == 2

    def test_no_patterns(self):
        newsletters = [self.make_newsletter()]

        assert filter_blacklisted(newsletters, []) is newsletters
