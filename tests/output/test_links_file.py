"""Tests for LINKS.yaml formatting."""

from datetime import datetime

import yaml

from newsletter_links.config.app_config import NewsletterPattern
from newsletter_links.links.models import Article, Newsletter
from newsletter_links.output.links_file import format_links_document, save_links_yaml


def make_newsletters():
    return [
        Newsletter(
            id="7",
            pattern=NewsletterPattern(name="JavaScript Weekly"),
            date=datetime(2026, 10, 2, 9, 30),
            articles=[
                Article(title="Async iterators", url="https://blog.example.com/async"),
                Article(title="", url="https://blog.example.com/untitled"),
            ],
        )
    ]


class TestFormatLinksDocument:
    def test_structure(self):
        document = format_links_document(make_newsletters())

        [entry] = document["newsletters"]
        assert entry["name"] == "JavaScript Weekly"
        assert entry["pattern_name"] == "JavaScript Weekly"
        assert entry["uid"] == "7"
        assert entry["date"] == "2026-10-02T09:30:00"
        assert entry["links"] == [
            {"title": "Async iterators", "url": "https://blog.example.com/async"},
            {"title": "Untitled", "url": "https://blog.example.com/untitled"},
        ]


class TestSaveLinksYaml:
    def test_writes_header_and_body(self, tmp_path):
        path = tmp_path / "nested" / "LINKS.yaml"

        written = save_links_yaml(make_newsletters(), path, generated_at=datetime(2026, 10, 3, 12, 0))

        assert written == path
        text = path.read_text(encoding="utf-8")
        assert text.startswith("# Generated: 2026-10-03T12:00:00\n")
        assert "# Total newsletters: 1" in text
        assert "# Total links: 2" in text
        assert yaml.safe_load(text) == format_links_document(make_newsletters())

    def test_empty_batch(self, tmp_path):
        path = save_links_yaml([], tmp_path / "LINKS.yaml")

        assert yaml.safe_load(path.read_text()) == {"newsletters": []}
