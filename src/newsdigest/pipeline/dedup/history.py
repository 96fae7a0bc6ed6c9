"""Cross-run deduplication against previously written daily documents."""

import re
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, List, Optional, Set

from newsdigest.core.article import Article
from newsdigest.utils.date_utils import utc_today
from newsdigest.utils.logging import get_logger
from newsdigest.utils.text_utils import normalize_dedup_url, normalize_title

logger = get_logger(__name__)

_SOURCE_HEADING_RE = re.compile(r"^###\s*(.+?)\s*\(\d+\s*articles?\)")
_ARTICLE_LINK_RE = re.compile(r"^\d+\.\s*\[([^\]]+)\]\(([^)]+)\)")
_FILE_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})")


@dataclass
class HistoricalArticle:
    """Article listed in an earlier daily document."""

    title: str
    url: str
    source: str


def parse_daily_markdown(content: str) -> List[HistoricalArticle]:
    """Extract the per-source article listing of a daily document.

    Args:
        content: Markdown written by the daily document formatter.

    Returns:
        Articles found under ``### <source> (<n> articles)`` headings.
    """
    articles = []
    current_source: Optional[str] = None

    for line in content.splitlines():
        heading = _SOURCE_HEADING_RE.match(line)
        if heading:
            current_source = heading.group(1).strip()
            continue

        if current_source is None:
            continue

        link = _ARTICLE_LINK_RE.match(line)
        if link:
            articles.append(
                HistoricalArticle(
                    title=link.group(1).strip(),
                    url=link.group(2).strip(),
                    source=current_source,
                )
            )

    return articles


class HistoricalArticleIndex:
    """Normalized URLs and titles already reported in recent daily documents.

    An article counts as already reported when its URL OR its title was seen,
    which is deliberately looser than in-run dedup.
    """

    def __init__(self, daily_dir: Path, days: int = 7):
        """Initialize index.

        Args:
            daily_dir: Directory holding ``YYYY-MM-DD-*.md`` documents.
            days: Look-back window in days; 0 disables the index.
        """
        self.daily_dir = Path(daily_dir)
        self.days = days
        self.urls: Set[str] = set()
        self.titles: Set[str] = set()
        self.files_loaded = 0

    def load(self, today: Optional[date] = None) -> "HistoricalArticleIndex":
        """Read every document within the look-back window.

        Unreadable files are skipped with a warning.
        """
        if self.days <= 0 or not self.daily_dir.is_dir():
            return self

        cutoff = (today or utc_today()) - timedelta(days=self.days)

        for path in sorted(self.daily_dir.glob("*.md")):
            match = _FILE_DATE_RE.match(path.name)
            if not match:
                continue
            try:
                file_date = date.fromisoformat(match.group(1))
            except ValueError:
                continue
            if file_date < cutoff:
                continue

            try:
                content = path.read_text(encoding="utf-8")
            except OSError as e:
                logger.warning("history_file_unreadable", path=str(path), error=str(e))
                continue

            for item in parse_daily_markdown(content):
                self.urls.add(normalize_dedup_url(item.url))
                self.titles.add(normalize_title(item.title))
            self.files_loaded += 1

        logger.info(
            "history_index_loaded",
            files=self.files_loaded,
            urls=len(self.urls),
            titles=len(self.titles),
        )
        return self

    def contains(self, article: Article) -> bool:
        """Check whether the article was already reported."""
        return (
            normalize_dedup_url(article.url) in self.urls
            or normalize_title(article.title) in self.titles
        )

    def filter(self, articles: Iterable[Article]) -> List[Article]:
        """Drop the articles that were already reported."""
        articles = list(articles)
        fresh = [article for article in articles if not self.contains(article)]
        if len(fresh) != len(articles):
            logger.info("history_duplicates_removed", count=len(articles) - len(fresh))
        return fresh
