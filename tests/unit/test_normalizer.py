# tests/unit/test_normalizer.py
"""Unit tests for raw record normalization."""

from datetime import timedelta

import pytest

from newsdigest.core.enums import ArticleCategory, Language, SourceType
from newsdigest.pipeline.normalizer import (
    FeedEntryRecord,
    ProductHuntRecord,
    detect_language,
    extract_tagline,
    normalize_record,
    normalize_records,
)
from newsdigest.utils.date_utils import now_utc, parse_date, to_iso


@pytest.mark.unit
class TestHackerNewsRecords:
    """Tests for HackerNews items."""

    def test_item_becomes_article(self):
        """Should map id, score and comment count."""
        article = normalize_record(
            {
                "kind": "hackernews",
                "id": 39912345,
                "type": "story",
                "by": "pg",
                "time": 1700000000,
                "title": "Show HN: tiny agent",
                "url": "https://example.com/agent",
                "score": 412,
                "descendants": 87,
            }
        )

        assert article.id == "hn-39912345"
        assert article.source_type == SourceType.HACKERNEWS
        assert article.category == ArticleCategory.AI
        assert article.score == 412
        assert article.comment_count == 87
        assert article.published_at == "2023-11-14T22:13:20.000Z"

    def test_missing_url_falls_back_to_item_page(self):
        """Should link to the discussion page for text posts."""
        article = normalize_record({"kind": "hackernews", "id": 7, "title": "Ask HN: agents?", "time": 1700000000})

        assert article.url == "https://news.ycombinator.com/item?id=7"
        assert article.summary == "Ask HN: agents?"

    def test_malformed_optional_field_is_defaulted(self):
        """Should not reject the record for a bad score."""
        article = normalize_record(
            {"kind": "hackernews", "id": 8, "title": "LLM news", "score": "lots", "time": "soon"}
        )

        assert article is not None
        assert article.score == 0
        assert parse_date(article.published_at) is not None

    def test_item_without_title_is_not_an_article(self):
        """Should return None for comments and deleted items."""
        assert normalize_record({"kind": "hackernews", "id": 9, "type": "comment"}) is None


@pytest.mark.unit
class TestFeedRecords:
    """Tests for RSS/Atom entries."""

    def _record(self, **overrides) -> FeedEntryRecord:
        values = {
            "feed_name": "technologyreview.com",
            "title": "A new model",
            "link": "https://www.technologyreview.com/a-new-model",
            "snippet": "<p>Hello <b>world</b></p>",
            "published": "Tue, 02 Jan 2024 10:00:00 GMT",
            "categories": ["AI", "", "Research"],
        }
        values.update(overrides)
        return FeedEntryRecord(**values)

    def test_entry_becomes_article(self):
        """Should strip HTML from the snippet and keep the categories as tags."""
        article = normalize_record(self._record())

        assert article.id.startswith("rss-")
        assert article.summary == "Hello world..."
        assert article.published_at == "2024-01-02T10:00:00.000Z"
        assert article.tags == ["AI", "Research"]

    def test_id_is_stable_for_same_link(self):
        """Should derive the id from the link, not from position or time."""
        first = normalize_record(self._record())
        second = normalize_record(self._record(title="Other title"))

        assert first.id == second.id

    def test_missing_link_is_not_an_article(self):
        """Should drop entries without a link."""
        assert normalize_record(self._record(link=None)) is None
        assert normalize_record(self._record(link="   ")) is None

    def test_unparsable_date_becomes_now(self):
        """Should substitute the current time for a broken date."""
        article = normalize_record(self._record(published="yesterday-ish"))

        published = parse_date(article.published_at)
        assert now_utc() - published < timedelta(minutes=1)

    def test_long_snippet_is_truncated(self):
        """Should keep the first 200 characters plus an ellipsis."""
        article = normalize_record(self._record(snippet="x" * 500))

        assert article.summary == "x" * 200 + "..."

    def test_language_detected_when_feed_has_none(self):
        """Should mark CJK titles as Chinese."""
        article = normalize_record(self._record(title="大模型 发布"))

        assert article.language == Language.ZH

    def test_feed_language_wins(self):
        """Should use the configured feed language."""
        article = normalize_record(
            self._record(source_type=SourceType.V2EX, feed_language=Language.ZH, feed_name="V2EX")
        )

        assert article.language == Language.ZH
        assert article.id.startswith("v2ex-")
        assert article.source == "V2EX"


@pytest.mark.unit
class TestProductHuntRecords:
    """Tests for Product Hunt entries."""

    def test_tagline_and_votes(self):
        """Should build the title from name and tagline and rank by votes."""
        record = ProductHuntRecord(
            name="Notely",
            link="https://www.producthunt.com/posts/notely",
            content="<p>Fast AI notes</p><p><a href='#'>Discussion</a> | <a href='#'>Link</a></p>",
            votes="42",
            comments=3,
        )

        article = normalize_record(record)

        assert article.title == "Notely - Fast AI notes"
        assert article.summary == "Fast AI notes | 42 votes | 3 comments"
        assert article.score == 42
        assert article.tags == ["Product Hunt"]

    def test_extract_tagline_without_paragraphs(self):
        """Should cut the body at the discussion links."""
        assert extract_tagline("Fast notes Discussion | Link") == "Fast notes"
        assert extract_tagline(None) == ""


@pytest.mark.unit
class TestTweetAndRepoRecords:
    """Tests for X posts and GitHub repositories."""

    def test_tweet_title_and_score(self):
        """Should truncate long text and weight reposts twice."""
        text = "word " * 30
        article = normalize_record(
            {
                "kind": "tweet",
                "id": "123",
                "text": text,
                "lang": "zh",
                "like_count": 10,
                "retweet_count": 5,
                "keywords": ["AI"],
            }
        )

        assert article.url == "https://x.com/i/web/status/123"
        assert article.title.endswith("...")
        assert len(article.title) == 93
        assert article.score == 20
        assert article.language == Language.ZH
        assert article.tags == ["AI"]

    def test_repo_summary(self):
        """Should describe stars and creation age."""
        article = normalize_record(
            {
                "kind": "github_repo",
                "id": 99,
                "full_name": "acme/widgets",
                "html_url": "https://github.com/acme/widgets",
                "description": None,
                "stargazers_count": 120,
                "language": "Python",
                "topics": ["llm"],
                "created_at": to_iso(now_utc()),
            }
        )

        assert article.id == "gh-trending-99"
        assert article.author == "acme"
        assert article.summary == "No description | ⭐ 120 stars | created today"
        assert article.tags == ["Python trending", "Python", "llm"]


@pytest.mark.unit
class TestNormalizeRecords:
    """Tests for batch normalization."""

    def test_drops_non_articles_and_unknown_kinds(self):
        """Should skip invalid records without raising."""
        articles = normalize_records(
            [
                {"kind": "hackernews", "id": 1, "title": "LLM"},
                {"kind": "carrier_pigeon", "id": 2},
                {"title": "no kind"},
                {"kind": "hackernews", "id": 3},
            ]
        )

        assert [article.id for article in articles] == ["hn-1"]

    def test_detect_language(self):
        """Should default to English without CJK characters."""
        assert detect_language("Hello") == Language.EN
        assert detect_language("你好") == Language.ZH
