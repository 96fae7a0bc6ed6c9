"""Product Hunt collector (Atom feed)."""

from typing import Any, List

from newsdigest.core.article import Article
from newsdigest.pipeline.collectors.rss import RSSCollector, entry_tags
from newsdigest.pipeline.normalizer import ProductHuntRecord, normalize_record
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)


def entry_content(entry: Any) -> str:
    """HTML body of an Atom entry, falling back to its summary."""
    content = entry.get("content") or []
    if content:
        return content[0].get("value", "")
    return entry.get("summary", "")


class ProductHuntCollector(RSSCollector):
    """Collector for Product Hunt launches, ranked by votes."""

    def _to_record(self, entry: Any) -> ProductHuntRecord:
        return ProductHuntRecord(
            name=entry.get("title"),
            link=entry.get("link"),
            content=entry_content(entry),
            published=entry.get("published") or entry.get("updated"),
            votes=entry.get("ph_votes"),
            comments=entry.get("ph_comments"),
            topics=entry_tags(entry),
        )

    def _extract_articles(self, entries: List[Any]) -> List[Article]:
        articles = []
        for entry in entries:
            article = normalize_record(self._to_record(entry))
            if article is not None:
                articles.append(article)

        articles.sort(key=lambda article: article.score or 0, reverse=True)
        return articles[: self.limit]
