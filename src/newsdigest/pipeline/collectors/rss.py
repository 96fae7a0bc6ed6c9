"""RSS/Atom feed collector."""

from typing import Any, List, Optional, Sequence

import feedparser
import httpx

from newsdigest.core.article import Article
from newsdigest.core.config import FeedConfig
from newsdigest.core.enums import TimeRange
from newsdigest.pipeline.collectors.base import BaseCollector
from newsdigest.pipeline.dedup.merge import matches_keywords
from newsdigest.pipeline.normalizer import FeedEntryRecord, normalize_record
from newsdigest.utils.exceptions import CollectorError
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)


def entry_tags(entry: Any) -> List[str]:
    """Category terms of a feedparser entry."""
    return [tag.get("term") for tag in entry.get("tags", []) or [] if tag.get("term")]


class RSSCollector(BaseCollector):
    """Collector for one syndication feed (generic RSS, Reddit, V2EX, Linux.do)."""

    def __init__(
        self,
        feed_config: FeedConfig,
        keywords: Sequence[str] = (),
        time_range: TimeRange = TimeRange.WEEK,
        limit: Optional[int] = 20,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize RSS collector.

        Args:
            feed_config: Feed configuration.
            keywords: Relevance keywords, applied when the feed asks for filtering.
            time_range: Collection window.
            limit: Maximum number of articles, None for the whole feed.
            timeout: Default HTTP timeout, overridden by the feed's own timeout.
            client: Shared HTTP client.
        """
        super().__init__(
            time_range=time_range,
            limit=limit,
            timeout=feed_config.timeout_sec or timeout,
            client=client,
        )
        self.feed_config = feed_config
        self.keywords = list(keywords)

    @property
    def name(self) -> str:
        return self.feed_config.name

    async def collect(self) -> List[Article]:
        """Collect articles from the feed.

        Returns:
            Feed articles in feed order, at most ``limit`` long.

        Raises:
            CollectorError: If the feed cannot be fetched.
        """
        logger.info(
            "collecting_rss",
            feed_name=self.feed_config.name,
            feed_url=str(self.feed_config.url),
        )

        feed = feedparser.parse(await self._fetch_feed())

        if feed.bozo:
            logger.warning(
                "rss_parse_warning",
                feed_name=self.feed_config.name,
                exception=str(feed.get("bozo_exception")),
            )

        articles = self._extract_articles(feed.entries)

        logger.info(
            "rss_collection_complete",
            feed_name=self.feed_config.name,
            entries=len(feed.entries),
            articles_collected=len(articles),
        )

        return articles

    async def _fetch_feed(self) -> bytes:
        """Fetch raw feed content.

        Raises:
            CollectorError: If HTTP request fails.
        """
        try:
            async with self._http() as client:
                response = await client.get(str(self.feed_config.url), timeout=self.timeout)
                response.raise_for_status()
                return response.content
        except httpx.HTTPError as e:
            raise CollectorError(f"HTTP request failed for {self.feed_config.url}: {e}") from e

    def _to_record(self, entry: Any) -> FeedEntryRecord:
        return FeedEntryRecord(
            feed_name=self.feed_config.name,
            source_type=self.feed_config.source_type,
            feed_language=self.feed_config.language,
            category=self.feed_config.category,
            title=entry.get("title"),
            link=entry.get("link"),
            snippet=entry.get("summary"),
            author=entry.get("author"),
            published=entry.get("published") or entry.get("updated"),
            categories=entry_tags(entry),
        )

    def _extract_articles(self, entries: List[Any]) -> List[Article]:
        filter_keywords = self.feed_config.filter_keywords and self.keywords
        articles = []

        for entry in entries:
            article = normalize_record(self._to_record(entry))
            if article is None:
                logger.debug("rss_entry_skipped", feed_name=self.feed_config.name)
                continue

            if not self._should_include_article(article):
                continue

            if filter_keywords and not matches_keywords(article, self.keywords):
                continue

            articles.append(article)
            if self.limit is not None and len(articles) >= self.limit:
                break

        return articles
