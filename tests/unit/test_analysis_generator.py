# tests/unit/test_analysis_generator.py
"""Unit tests for the digest analysis generator."""

import json

import pytest

from newsdigest.core.enums import SummaryStyle
from newsdigest.pipeline.generators.analysis_generator import (
    DEFAULT_TITLE,
    DigestAnalyzer,
    fallback_analysis,
    parse_analysis,
)
from newsdigest.utils.exceptions import AIServiceError, RateLimitError


@pytest.mark.unit
class TestParseAnalysis:
    """Tests for parse_analysis."""

    def test_fenced_json(self):
        """Should read JSON wrapped in a code fence."""
        reply = "```json\n" + json.dumps(
            {
                "title": "Agents week",
                "overview": "Lots of agents.",
                "highlights": ["a", "b"],
                "keywords": ["agents"],
                "topicsAnalysis": "AI dominates",
                "sourceHighlights": "  ",
            }
        ) + "\n```"

        analysis = parse_analysis(reply, ["llm"])

        assert analysis.title == "Agents week"
        assert analysis.overview == "Lots of agents."
        assert analysis.highlights == ["a", "b"]
        assert analysis.keywords == ["agents"]
        assert analysis.topics_analysis == "AI dominates"
        assert analysis.source_highlights is None

    def test_prose_reply_becomes_overview(self):
        """Should fall back to defaults when no JSON is present."""
        analysis = parse_analysis("The week in AI was busy.", ["llm", "agent"])

        assert analysis.title == DEFAULT_TITLE
        assert analysis.overview == "The week in AI was busy."
        assert analysis.highlights == []
        assert analysis.keywords == ["llm", "agent"]

    def test_non_string_highlights_serialized(self):
        """Should keep structured highlights as JSON text."""
        analysis = parse_analysis('{"highlights": [{"point": "x"}, "y"]}', [])

        assert analysis.highlights == ['{"point": "x"}', "y"]

    def test_caps_lists(self):
        """Should keep at most 8 highlights and 20 keywords."""
        reply = json.dumps({"highlights": [str(i) for i in range(12)], "keywords": [str(i) for i in range(25)]})

        analysis = parse_analysis(reply, [])

        assert len(analysis.highlights) == 8
        assert len(analysis.keywords) == 20

    def test_blank_title(self):
        """Should use the default title for blank values."""
        assert parse_analysis('{"title": "  ", "overview": "x"}', []).title == DEFAULT_TITLE


@pytest.mark.unit
class TestFallbackAnalysis:
    """Tests for fallback_analysis."""

    def test_counts_sources_and_lists_titles(self, sample_articles):
        """Should summarize what was collected."""
        analysis = fallback_analysis(sample_articles, ["ai"])

        assert analysis.title == DEFAULT_TITLE
        assert analysis.overview.startswith(
            "Collected 5 articles from 4 sources (GitHub Trending, HackerNews, Reddit, technologyreview.com)"
        )
        assert analysis.highlights[0] == "OpenAI ships a new LLM agent framework"
        assert analysis.keywords == ["ai"]

    def test_no_articles(self):
        """Should still produce an analysis."""
        analysis = fallback_analysis([], [])

        assert analysis.overview.startswith("Collected 0 articles.")
        assert analysis.highlights == []


@pytest.mark.unit
@pytest.mark.asyncio
class TestDigestAnalyzer:
    """Tests for DigestAnalyzer."""

    async def test_uses_llm_reply(self, mock_llm_client, sample_articles):
        """Should pass style, keywords and articles to the model."""
        mock_llm_client.complete.return_value = '{"title": "T", "overview": "O", "highlights": ["h"]}'
        analyzer = DigestAnalyzer(llm_client=mock_llm_client)

        analysis = await analyzer.analyze(sample_articles, SummaryStyle.BRIEF, ["agent"])

        assert analysis.title == "T"
        assert analysis.keywords == ["agent"]
        system_prompt, user_prompt = mock_llm_client.complete.call_args.args
        assert "news editor" in system_prompt
        assert "Style: brief." in user_prompt
        assert "Focus keywords: agent" in user_prompt
        assert "https://github.com/acme/widgets" in user_prompt

    async def test_limits_articles_sent(self, mock_llm_client, sample_articles):
        """Should send at most max_articles items."""
        mock_llm_client.complete.return_value = "{}"
        analyzer = DigestAnalyzer(llm_client=mock_llm_client, max_articles=1)

        await analyzer.analyze(sample_articles)

        user_prompt = mock_llm_client.complete.call_args.args[1]
        assert "hn-1" not in user_prompt
        assert "OpenAI ships" in user_prompt
        assert "React 20" not in user_prompt

    @pytest.mark.parametrize("error", [AIServiceError("down"), RateLimitError("slow down")])
    async def test_llm_failure_uses_fallback(self, mock_llm_client, sample_articles, error):
        """Should never propagate provider errors."""
        mock_llm_client.complete.side_effect = error
        analyzer = DigestAnalyzer(llm_client=mock_llm_client)

        analysis = await analyzer.analyze(sample_articles, keywords=["ai"])

        assert analysis.title == DEFAULT_TITLE
        assert analysis.overview.startswith("Collected 5 articles")

    async def test_without_client(self, sample_articles):
        """Should use the fallback when no provider is configured."""
        analysis = await DigestAnalyzer().analyze(sample_articles)

        assert analysis.title == DEFAULT_TITLE
        assert len(analysis.highlights) == 5
