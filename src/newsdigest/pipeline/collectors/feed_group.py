"""Collector treating all feeds of one source group as a single source."""

import asyncio
from typing import Callable, Iterable, List, Sequence

from newsdigest.core.article import Article
from newsdigest.core.enums import SourceType
from newsdigest.pipeline.collectors.base import BaseCollector
from newsdigest.pipeline.collectors.rss import RSSCollector
from newsdigest.pipeline.dedup.merge import sort_by_recency
from newsdigest.utils.exceptions import CollectorError
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)

FEED_GROUP_NAMES = {
    SourceType.RSS: "RSS",
    SourceType.REDDIT: "Reddit",
    SourceType.V2EX: "V2EX",
    SourceType.LINUX_DO: "Linux.do",
    SourceType.PRODUCT_HUNT: "Product Hunt",
}

Ranking = Callable[[Iterable[Article]], List[Article]]


def rank_by_score(articles: Iterable[Article]) -> List[Article]:
    """Highest score first, ties keep input order."""
    return sorted(articles, key=lambda article: article.score or 0, reverse=True)


class FeedGroupCollector(BaseCollector):
    """Fetch every feed of a group concurrently and cap the group at ``limit``.

    Member feeds are collected uncapped and already windowed. A failing feed
    contributes nothing; the group fails only when every feed fails.
    """

    def __init__(
        self,
        name: str,
        feeds: Sequence[RSSCollector],
        limit: int = 20,
        rank: Ranking = sort_by_recency,
    ):
        super().__init__(limit=limit)
        self._name = name
        self.feeds = list(feeds)
        self.rank = rank

    @property
    def name(self) -> str:
        return self._name

    async def collect(self) -> List[Article]:
        """Collect the group.

        Returns:
            The group's articles ranked (newest first by default), at most ``limit`` long.

        Raises:
            CollectorError: If every feed of the group fails.
        """
        results = await asyncio.gather(
            *(feed.collect() for feed in self.feeds), return_exceptions=True
        )

        articles: List[Article] = []
        failed = 0
        for feed, result in zip(self.feeds, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failed += 1
                logger.warning(
                    "feed_collection_failed",
                    group=self.name,
                    feed_url=str(feed.feed_config.url),
                    error=str(result),
                )
                continue
            articles.extend(result)

        if self.feeds and failed == len(self.feeds):
            raise CollectorError(f"All {failed} feeds failed for {self.name}")

        ranked = self.rank(articles)[: self.limit]

        logger.info(
            "feed_group_collection_complete",
            group=self.name,
            feeds=len(self.feeds),
            failed_feeds=failed,
            articles_found=len(articles),
            articles_collected=len(ranked),
        )

        return ranked
