"""LLM-backed digest analysis with tolerant parsing and a synthesized fallback."""

import json
from typing import Any, List, Optional, Sequence

from newsdigest.core.article import Article
from newsdigest.core.config import PromptConfig
from newsdigest.core.digest import MAX_HIGHLIGHTS, DigestAnalysis
from newsdigest.core.enums import SummaryStyle
from newsdigest.integrations.provider_factory import LLMClient
from newsdigest.utils.exceptions import APIError
from newsdigest.utils.logging import get_logger
from newsdigest.utils.text_utils import clean_whitespace, extract_json_object, truncate_text

logger = get_logger(__name__)

DEFAULT_TITLE = "AI News Digest"

DEFAULT_PROMPT = PromptConfig(
    system_prompt=(
        "You are a news editor and industry analyst. You extract facts from "
        "many sources and summarize the trends behind them."
    ),
    user_prompt_template=(
        "Analyze the following news items. Style: {style}.\n"
        "Focus keywords: {keywords}\n"
        "Reply with JSON only, no extra commentary:\n"
        "{{\n"
        '  "title": "digest headline, at most 30 words",\n'
        '  "overview": "100-200 word overview",\n'
        '  "highlights": ["point 1", "point 2", "point 3"],\n'
        '  "keywords": ["keyword 1", "keyword 2", "keyword 3"],\n'
        '  "topicsAnalysis": "optional: how the main topics developed",\n'
        '  "sourceHighlights": "optional: notable insights worth a deeper read"\n'
        "}}\n"
        "News data: {articles}"
    ),
)


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_analysis(text: str, keywords: Sequence[str]) -> DigestAnalysis:
    """Build an analysis from an LLM reply, defaulting every missing field.

    Args:
        text: Raw LLM response.
        keywords: Query keywords, used when the reply has none.

    Returns:
        Analysis; the raw reply becomes the overview if no JSON was found.
    """
    data = extract_json_object(text)

    title = data.get("title")
    overview = data.get("overview")
    highlights = data.get("highlights")
    reply_keywords = data.get("keywords")

    return DigestAnalysis(
        title=title.strip() if isinstance(title, str) and title.strip() else DEFAULT_TITLE,
        overview=overview.strip() if isinstance(overview, str) and overview.strip() else text,
        highlights=[_as_text(item) for item in highlights] if isinstance(highlights, list) else [],
        keywords=(
            [_as_text(item) for item in reply_keywords]
            if isinstance(reply_keywords, list)
            else list(keywords)
        ),
        topics_analysis=_optional_text(data.get("topicsAnalysis")),
        source_highlights=_optional_text(data.get("sourceHighlights")),
    )


def fallback_analysis(articles: Sequence[Article], keywords: Sequence[str]) -> DigestAnalysis:
    """Minimal analysis used when no LLM answered: counts plus raw headlines."""
    sources = sorted({article.source for article in articles})
    overview = f"Collected {len(articles)} articles"
    if sources:
        overview += f" from {len(sources)} sources ({', '.join(sources[:5])}{', ...' if len(sources) > 5 else ''})"
    overview += ". Automated analysis is unavailable for this run; the top headlines are listed below."

    return DigestAnalysis(
        title=DEFAULT_TITLE,
        overview=overview,
        highlights=[
            truncate_text(clean_whitespace(article.title), 120)
            for article in articles[:MAX_HIGHLIGHTS]
        ],
        keywords=list(keywords),
    )


class DigestAnalyzer:
    """Produce the structured briefing for one run."""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        prompt: Optional[PromptConfig] = None,
        max_articles: int = 120,
    ):
        """Initialize analyzer.

        Args:
            llm_client: Completion client; None always uses the fallback.
            prompt: Prompt override (defaults to the built-in prompt).
            max_articles: Most articles sent to the model.
        """
        self.llm_client = llm_client
        self.prompt = prompt or DEFAULT_PROMPT
        self.max_articles = max_articles

    async def analyze(
        self,
        articles: Sequence[Article],
        style: SummaryStyle = SummaryStyle.DETAILED,
        keywords: Optional[List[str]] = None,
    ) -> DigestAnalysis:
        """Analyze the merged article set.

        Never raises for LLM trouble: a failed call yields the synthesized
        fallback, an unparsable reply yields defaults.

        Args:
            articles: Merged, deduplicated articles.
            style: Requested summary style.
            keywords: Query keywords.

        Returns:
            Digest analysis.
        """
        keywords = keywords or []

        if self.llm_client is None:
            return fallback_analysis(articles, keywords)

        compact = [
            {
                "title": article.title,
                "summary": article.summary,
                "source": article.source,
                "sourceType": article.source_type.value,
                "url": article.url,
                "publishedAt": article.published_at,
            }
            for article in articles[: self.max_articles]
        ]
        user_prompt = self.prompt.user_prompt_template.format(
            style=style.value,
            keywords=", ".join(keywords) or "(none)",
            articles=json.dumps(compact, ensure_ascii=False),
        )

        try:
            text = await self.llm_client.complete(self.prompt.system_prompt, user_prompt)
        except APIError as e:
            logger.warning("digest_analysis_failed_using_fallback", error=str(e))
            return fallback_analysis(articles, keywords)

        analysis = parse_analysis(text, keywords)
        logger.info(
            "digest_analysis_complete",
            title=analysis.title,
            highlights=len(analysis.highlights),
            keywords=len(analysis.keywords),
        )
        return analysis
