"""Markdown daily document formatter."""

from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Sequence

from newsdigest.core.article import Article
from newsdigest.core.digest import DigestAnalysis, TopicStatsDay
from newsdigest.utils.date_utils import format_datetime
from newsdigest.utils.logging import get_logger
from newsdigest.utils.text_utils import clean_whitespace

logger = get_logger(__name__)

MAX_TOPIC_ROWS = 10
MAX_ARTICLES_PER_SOURCE = 15


def daily_filename(date: str, generated_at: datetime) -> str:
    """File name of the daily document: ``<date>-<HH-MM-SS>-<ms>.md``."""
    generated_at = generated_at.astimezone(timezone.utc)
    return f"{date}-{generated_at.strftime('%H-%M-%S')}-{generated_at.microsecond // 1000:03d}.md"


def _link_text(text: str) -> str:
    # Brackets would end the link label early
    return clean_whitespace(text).replace("[", "(").replace("]", ")")


class MarkdownFormatter:
    """Format the daily digest document."""

    def format(
        self,
        date: str,
        analysis: DigestAnalysis,
        articles: Sequence[Article],
        topic_stats: TopicStatsDay,
    ) -> str:
        """Format digest as Markdown.

        Args:
            date: ISO date of the run.
            analysis: Digest analysis.
            articles: All merged articles.
            topic_stats: The day's topic counts.

        Returns:
            Markdown string.
        """
        generated = analysis.generated_at.astimezone(timezone.utc)
        lines = [
            f"# {analysis.title} - {date}",
            "",
            f"Generated: {format_datetime(generated)} UTC",
            "",
        ]

        if analysis.overview:
            lines.extend(["## 📝 Briefing", "", analysis.overview, ""])

        if analysis.highlights:
            lines.extend(["## ⭐ Highlights", ""])
            lines.extend(f"{i}. {item}" for i, item in enumerate(analysis.highlights, start=1))
            lines.append("")

        if analysis.source_highlights:
            lines.extend(["## 💡 Insights", "", analysis.source_highlights, ""])

        if analysis.topics_analysis:
            lines.extend(["## 🧭 Topic Analysis", "", analysis.topics_analysis, ""])

        lines.extend(["---", "", "## 📊 Topic Distribution", ""])
        lines.extend(self._topic_lines(topic_stats))
        lines.append("")

        lines.extend(["## 📂 Sources", ""])
        lines.extend(self._source_lines(articles))

        markdown = "\n".join(lines).rstrip() + "\n"
        logger.info("markdown_formatted", date=date, size=len(markdown), articles=len(articles))
        return markdown

    def _topic_lines(self, topic_stats: TopicStatsDay) -> List[str]:
        counts = [(topic, count) for topic, count in topic_stats.by_topic.items() if count > 0]
        counts.sort(key=lambda item: item[1], reverse=True)
        rows = [f"- {topic}: {count}" for topic, count in counts[:MAX_TOPIC_ROWS]]
        return rows or ["- Other: 0"]

    def _source_lines(self, articles: Sequence[Article]) -> List[str]:
        grouped: Dict[str, List[Article]] = defaultdict(list)
        for article in articles:
            grouped[article.source].append(article)

        lines: List[str] = []
        for source, items in sorted(grouped.items(), key=lambda item: len(item[1]), reverse=True):
            lines.append(f"### {source} ({len(items)} articles)")
            lines.append("")
            for i, article in enumerate(items[:MAX_ARTICLES_PER_SOURCE], start=1):
                lines.append(f"{i}. [{_link_text(article.title)}]({article.url})")
                lines.append(f"   - Summary: {clean_whitespace(article.summary)}")
                lines.append(f"   - Published: {self._published(article)}")
            lines.append("")
        return lines

    @staticmethod
    def _published(article: Article) -> str:
        published = article.published_datetime
        if published is None:
            return article.published_at
        return f"{format_datetime(published.astimezone(timezone.utc))} UTC"
