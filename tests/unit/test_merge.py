# tests/unit/test_merge.py
"""Unit tests for merging and deduplication across sources."""

import pytest

from newsdigest.pipeline.dedup import (
    dedup_articles,
    dedup_key,
    filter_by_keywords,
    matches_keywords,
    merge,
    sort_by_recency,
)


@pytest.mark.unit
class TestDedupKey:
    """Tests for the (title, url) identity."""

    def test_title_and_query_string_normalized(self, make_article):
        """Should ignore case, punctuation and the query string."""
        article = make_article(title="Foo Bar!", url="http://X.com/a?ref=1")

        assert dedup_key(article) == ("foo bar", "http://x.com/a")

    def test_cjk_characters_survive(self, make_article):
        """Should keep Chinese characters in the title key."""
        article = make_article(title="大模型：发布！", url="https://a.cn/1")

        assert dedup_key(article)[0] == "大模型发布"


@pytest.mark.unit
class TestDedupArticles:
    """Tests for duplicate removal."""

    def test_same_story_with_tracking_params_is_merged(self, make_article):
        """Should keep one article when title and stripped URL match."""
        first = make_article(title="Foo Bar!", url="http://x.com/a?ref=1")
        second = make_article(title="foo bar", url="http://x.com/a?ref=2")

        assert dedup_articles([first, second]) == [first]

    def test_same_title_different_url_is_kept(self, make_article):
        """Should not merge on title alone."""
        first = make_article(title="Weekly AI roundup", url="https://a.com/roundup")
        second = make_article(title="Weekly AI roundup", url="https://b.com/roundup")

        assert len(dedup_articles([first, second])) == 2

    def test_same_url_different_title_is_kept(self, make_article):
        """Should not merge on URL alone."""
        first = make_article(title="Launch day", url="https://a.com/post")
        second = make_article(title="Launch day recap", url="https://a.com/post")

        assert len(dedup_articles([first, second])) == 2

    def test_idempotent(self, make_article):
        """Should not change its own output."""
        articles = [
            make_article(title="A", url="https://a.com/1"),
            make_article(title="a!", url="https://A.com/1?x=1"),
            make_article(title="B", url="https://a.com/2"),
        ]

        once = dedup_articles(articles)
        assert dedup_articles(once) == once


@pytest.mark.unit
class TestKeywordFilter:
    """Tests for keyword relevance filtering."""

    def test_empty_keywords_keep_everything(self, sample_articles):
        """Should be a no-op without keywords."""
        assert filter_by_keywords(sample_articles, []) == sample_articles

    def test_matches_title_summary_and_tags(self, make_article):
        """Should search title, summary and tags case-insensitively."""
        assert matches_keywords(make_article(title="New LLM release"), ["llm"])
        assert matches_keywords(make_article(summary="about Agents"), ["AGENTS"])
        assert matches_keywords(make_article(tags=["Rust"]), ["rust"])
        assert not matches_keywords(make_article(title="Gardening tips"), ["llm", "rust"])


@pytest.mark.unit
class TestMerge:
    """Tests for the full merge step."""

    def test_sorted_newest_first_with_unparsable_last(self, make_article):
        """Should sort by publication time and put broken dates last."""
        old = make_article(published_at="2024-01-01T00:00:00.000Z")
        broken = make_article(published_at="not a date")
        new = make_article(published_at="2024-01-03T00:00:00.000Z")

        assert merge([[old, broken], [new]]) == [new, old, broken]

    def test_ties_keep_input_order(self, make_article):
        """Should be stable for equal timestamps."""
        first = make_article(published_at="2024-01-01T00:00:00.000Z")
        second = make_article(published_at="2024-01-01T00:00:00.000Z")

        assert sort_by_recency([first, second]) == [first, second]

    def test_first_source_wins_duplicates(self, make_article):
        """Should keep the occurrence from the earlier list."""
        hn = make_article(title="Same story", url="https://s.com/x", source="HackerNews")
        rss = make_article(title="Same story", url="https://s.com/x?utm=1", source="RSS")

        merged = merge([[hn], [rss]])

        assert [article.source for article in merged] == ["HackerNews"]

    def test_keyword_filter_applied(self, make_article):
        """Should drop articles matching no keyword."""
        relevant = make_article(title="Agents are here")
        other = make_article(title="Cooking pasta")

        assert merge([[relevant, other]], keywords=["agent"]) == [relevant]

    def test_empty_inputs(self):
        """Should return an empty list for empty or no sources."""
        assert merge([]) == []
        assert merge([[], []]) == []

    def test_merge_is_idempotent(self, make_article):
        """Should not change when merged again."""
        articles = [
            make_article(title="Foo Bar!", url="http://x.com/a?ref=1"),
            make_article(title="foo bar", url="http://x.com/a?ref=2"),
            make_article(title="Other"),
        ]

        once = merge([articles])
        assert merge([once]) == once
