# tests/conftest.py
"""Shared test fixtures and configuration."""

from datetime import timedelta
from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock

import httpx
import pytest

from newsdigest.core.article import Article
from newsdigest.core.config import Config
from newsdigest.core.digest import DigestAnalysis
from newsdigest.core.enums import Language, SourceType
from newsdigest.utils.date_utils import now_utc, to_iso


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Test configuration with temporary paths and no external services."""
    return Config(
        _env_file=None,
        news_keywords="",
        output_rss_path=tmp_path / "output" / "news-digest.xml",
        output_daily_dir=tmp_path / "docs" / "daily",
        topic_stats_path=tmp_path / "data" / "topic-stats-history.json",
        readme_path=tmp_path / "README.md",
        config_dir=tmp_path / "config",
        openai_api_key=None,
        deepseek_api_key=None,
        google_api_key=None,
        zai_api_key=None,
        anthropic_api_key=None,
        telegram_bot_token=None,
        telegram_chat_id=None,
        email_enabled=False,
        x_bearer_token=None,
        github_token=None,
        docs_base_url=None,
        history_dedup_days=0,
    )


@pytest.fixture
def make_article() -> Callable[..., Article]:
    """Factory for articles with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides) -> Article:
        counter["n"] += 1
        n = counter["n"]
        values = {
            "id": f"rss-{n}",
            "title": f"Article {n}",
            "summary": f"Summary of article {n}",
            "url": f"https://example.com/articles/{n}",
            "source": "Example Feed",
            "source_type": SourceType.RSS,
            "published_at": to_iso(now_utc() - timedelta(hours=n)),
            "language": Language.EN,
        }
        values.update(overrides)
        return Article(**values)

    return _make


@pytest.fixture
def sample_articles(make_article) -> list[Article]:
    """Articles from several sources, newest first."""
    return [
        make_article(
            id="hn-1",
            title="OpenAI ships a new LLM agent framework",
            source="HackerNews",
            source_type=SourceType.HACKERNEWS,
            score=320,
        ),
        make_article(
            title="React 20 brings a new frontend compiler",
            source="technologyreview.com",
        ),
        make_article(
            title="Kubernetes 2.0 released",
            source="technologyreview.com",
        ),
        make_article(
            id="gh-trending-7",
            title="acme/widgets",
            summary="A widget toolkit | ⭐ 120 stars | created today",
            source="GitHub Trending",
            source_type=SourceType.GITHUB,
            url="https://github.com/acme/widgets",
        ),
        make_article(
            title="Weekend reading list",
            summary="Nothing in particular",
            source="Reddit",
            source_type=SourceType.REDDIT,
        ),
    ]


@pytest.fixture
def sample_analysis() -> DigestAnalysis:
    """Structured analysis as returned by the LLM."""
    return DigestAnalysis(
        title="Agents everywhere",
        overview="This week was dominated by **agent** frameworks.",
        highlights=[
            "OpenAI ships an agent framework",
            "React 20 compiler\nwith details on a second line",
            "Kubernetes 2.0",
        ],
        keywords=["agents", "react"],
        topics_analysis="AI leads, Frontend follows.",
        source_highlights="HackerNews had the most discussion.",
    )


@pytest.fixture
def mock_llm_client() -> AsyncMock:
    """LLM client whose completion text is set per test."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value="")
    return client


@pytest.fixture
def mock_http_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build an AsyncClient served by a request handler."""

    def _build(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _build
