"""README status blocks: latest briefing and topic trend table."""

from typing import Optional, Sequence

from newsdigest.core.digest import DigestAnalysis, TopicStatsDay, TopicTrendSummary
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)

LATEST_START = "<!-- digest:latest:start -->"
LATEST_END = "<!-- digest:latest:end -->"
TREND_START = "<!-- digest:trend:start -->"
TREND_END = "<!-- digest:trend:end -->"

DEFAULT_README = "# Self News Agent\n\n"
MAX_README_HIGHLIGHTS = 5
MAX_TREND_ROWS = 10


def replace_block(content: str, start: str, end: str, block: str) -> str:
    """Swap the marker-delimited block in ``content``, or prepend it.

    Args:
        content: Existing document.
        start: Opening marker.
        end: Closing marker.
        block: Replacement, markers included.

    Returns:
        Updated document.
    """
    start_index = content.find(start)
    end_index = content.find(end, start_index + len(start)) if start_index >= 0 else -1
    if start_index >= 0 and end_index > start_index:
        return content[:start_index] + block + content[end_index + len(end):]
    return f"{block}\n\n{content}"


class ReadmeFormatter:
    """Maintain the generated blocks of the project README."""

    def latest_block(self, date: str, analysis: DigestAnalysis, doc_link: str) -> str:
        highlights = [
            f"{i}. {item}"
            for i, item in enumerate(analysis.highlights[:MAX_README_HIGHLIGHTS], start=1)
        ]
        return "\n".join(
            [
                LATEST_START,
                f"## Latest Briefing ({date})",
                "",
                analysis.overview,
                "",
                "Highlights:",
                *highlights,
                "",
                f"Full digest: [{doc_link}]({doc_link})",
                LATEST_END,
            ]
        )

    def trend_block(self, topic_stats: TopicStatsDay, trend: Sequence[TopicTrendSummary]) -> str:
        rows = [
            f"| {item.topic} | {item.count_7d} | {item.count_30d} | {', '.join(str(n) for n in item.trend_7d)} |"
            for item in trend[:MAX_TREND_ROWS]
        ]
        return "\n".join(
            [
                TREND_START,
                f"## Topic Trends ({topic_stats.date})",
                "",
                "| Topic | 7d | 30d | 7-day trend |",
                "| --- | --- | --- | --- |",
                *(rows or ["| Other | 0 | 0 | 0, 0, 0, 0, 0, 0, 0 |"]),
                TREND_END,
            ]
        )

    def update(
        self,
        content: Optional[str],
        date: str,
        analysis: DigestAnalysis,
        doc_link: str,
        topic_stats: TopicStatsDay,
        trend: Sequence[TopicTrendSummary],
    ) -> str:
        """Refresh both generated blocks.

        Args:
            content: Current README text, None if the file does not exist.
            date: ISO date of the run.
            analysis: Digest analysis.
            doc_link: Link to the daily document.
            topic_stats: The day's topic counts.
            trend: Trend summary from the history ledger.

        Returns:
            New README text.
        """
        updated = replace_block(
            content if content is not None else DEFAULT_README,
            LATEST_START,
            LATEST_END,
            self.latest_block(date, analysis, doc_link),
        )
        updated = replace_block(updated, TREND_START, TREND_END, self.trend_block(topic_stats, trend))

        logger.info("readme_formatted", date=date, trend_rows=min(len(trend), MAX_TREND_ROWS))
        return updated
