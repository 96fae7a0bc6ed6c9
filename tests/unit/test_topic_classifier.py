# tests/unit/test_topic_classifier.py
"""Unit tests for topic classification."""

import pytest

from newsdigest.core.enums import Topic
from newsdigest.pipeline.classifiers import (
    HEURISTIC_CONFIDENCE,
    TopicClassifier,
    heuristic_classification,
    heuristic_topic,
    parse_classifications,
)
from newsdigest.utils.exceptions import AIServiceError


@pytest.mark.unit
class TestHeuristic:
    """Tests for the keyword heuristic."""

    def test_first_matching_topic_wins(self, make_article):
        """Should follow table order when several topics match."""
        article = make_article(title="LLM inference on Kubernetes", summary="")

        assert heuristic_topic(article) == Topic.AI

    def test_matches_tags(self, make_article):
        """Should look at tags as well."""
        article = make_article(title="Release notes", summary="", tags=["docker"])

        assert heuristic_topic(article) == Topic.DEVOPS

    def test_no_match_is_other(self, make_article):
        """Should fall back to Other."""
        article = make_article(title="Weekend reading", summary="")

        assert heuristic_topic(article) == Topic.OTHER

    def test_fixed_confidence(self, make_article):
        """Should assign the baseline confidence."""
        classification = heuristic_classification(make_article(title="Kubernetes 2.0", summary=""))

        assert classification.topic == Topic.DEVOPS
        assert classification.confidence == HEURISTIC_CONFIDENCE


@pytest.mark.unit
class TestParseClassifications:
    """Tests for tolerant parsing of LLM replies."""

    def test_array_embedded_in_prose(self):
        """Should extract the bracketed JSON from surrounding text."""
        text = 'Here you go: [{"articleId":"a1","topic":"AI","confidence":0.9}] thanks'

        result = parse_classifications(text)

        assert len(result) == 1
        assert result[0].article_id == "a1"
        assert result[0].topic == Topic.AI
        assert result[0].confidence == 0.9

    def test_trailing_citation_ignored(self):
        """Should parse the array even when the reply cites sources in brackets."""
        text = '[{"articleId":"a1","topic":"Cloud","confidence":0.8}] see [1]'

        result = parse_classifications(text)

        assert [(item.article_id, item.topic) for item in result] == [("a1", Topic.CLOUD)]

    def test_unknown_topic_becomes_other(self):
        """Should coerce labels outside the taxonomy."""
        result = parse_classifications('[{"articleId":"a1","topic":"Gardening","confidence":0.7}]')

        assert result[0].topic == Topic.OTHER

    def test_confidence_is_clamped_or_defaulted(self):
        """Should keep confidence within [0, 1]."""
        result = parse_classifications(
            '[{"articleId":"a","topic":"AI","confidence":3},'
            ' {"articleId":"b","topic":"AI","confidence":"high"}]'
        )

        assert [item.confidence for item in result] == [1.0, 0.6]

    def test_invalid_items_skipped(self):
        """Should skip entries without an id or topic."""
        result = parse_classifications('[{"topic":"AI"}, 5, {"articleId":"a","topic":"Cloud"}]')

        assert [(item.article_id, item.topic) for item in result] == [("a", Topic.CLOUD)]

    def test_not_json(self):
        """Should return None when no array can be parsed."""
        assert parse_classifications("I cannot help with that.") is None
        assert parse_classifications('{"articleId": "a"}') is None


@pytest.mark.unit
@pytest.mark.asyncio
class TestTopicClassifier:
    """Tests for TopicClassifier."""

    async def test_uses_llm_result(self, make_article, mock_llm_client):
        """Should take topics from the LLM reply."""
        article = make_article(id="a1", title="Weekend reading", summary="")
        mock_llm_client.complete.return_value = '[{"articleId":"a1","topic":"Security","confidence":0.8}]'

        result = await TopicClassifier(mock_llm_client).classify([article])

        assert [(item.article_id, item.topic) for item in result] == [("a1", Topic.SECURITY)]
        mock_llm_client.complete.assert_awaited_once()

    async def test_fills_articles_missing_from_reply(self, make_article, mock_llm_client):
        """Should classify skipped articles by heuristic."""
        first = make_article(id="a1", title="Weekend reading", summary="")
        second = make_article(id="a2", title="Docker tips", summary="")
        mock_llm_client.complete.return_value = '[{"articleId":"a1","topic":"Data","confidence":0.8}]'

        result = await TopicClassifier(mock_llm_client).classify([first, second])

        assert [item.article_id for item in result] == ["a1", "a2"]
        assert result[1].topic == Topic.DEVOPS
        assert result[1].confidence == HEURISTIC_CONFIDENCE

    async def test_llm_failure_falls_back(self, sample_articles, mock_llm_client):
        """Should classify everything by heuristic when the LLM fails."""
        mock_llm_client.complete.side_effect = AIServiceError("all providers down")

        result = await TopicClassifier(mock_llm_client).classify(sample_articles)

        assert len(result) == len(sample_articles)
        assert all(item.confidence == HEURISTIC_CONFIDENCE for item in result)

    async def test_garbage_reply_falls_back(self, sample_articles, mock_llm_client):
        """Should use the heuristic for an unparsable reply."""
        mock_llm_client.complete.return_value = "Sorry, no."

        result = await TopicClassifier(mock_llm_client).classify(sample_articles)

        assert [item.article_id for item in result] == [a.id for a in sample_articles]

    async def test_without_client(self, sample_articles):
        """Should not need an LLM."""
        result = await TopicClassifier().classify(sample_articles)

        assert len(result) == len(sample_articles)

    async def test_empty_batch(self, mock_llm_client):
        """Should not call the LLM for no articles."""
        assert await TopicClassifier(mock_llm_client).classify([]) == []
        mock_llm_client.complete.assert_not_awaited()
