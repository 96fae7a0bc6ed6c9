"""Base collector interface."""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

import httpx

from newsdigest.core.article import Article
from newsdigest.core.enums import TimeRange
from newsdigest.utils.date_utils import is_within_hours

USER_AGENT = "Mozilla/5.0 (compatible; NewsDigest/1.0)"


class BaseCollector(ABC):
    """Abstract base class for news collectors."""

    name: str = "collector"

    def __init__(
        self,
        time_range: TimeRange = TimeRange.WEEK,
        limit: Optional[int] = 20,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize collector.

        Args:
            time_range: Only items published within this window are kept.
            limit: Maximum number of articles returned by one collection, None for no cap.
            timeout: HTTP request timeout in seconds.
            client: Shared HTTP client; a private one is opened per collection otherwise.
        """
        self.time_range = time_range
        self.limit = limit
        self.timeout = timeout
        self._client = client

    @abstractmethod
    async def collect(self) -> List[Article]:
        """Collect articles from the news source.

        Returns:
            Normalized articles, time-windowed and at most ``limit`` long.

        Raises:
            CollectorError: If collection fails.
        """

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return

        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        ) as client:
            yield client

    def _should_include_article(self, article: Article) -> bool:
        """Check if article falls inside the collection window.

        Args:
            article: Normalized article.

        Returns:
            True if published within the window, or the date is unknown.
        """
        published_at = article.published_datetime
        if published_at is None:
            return True

        return is_within_hours(published_at, self.time_range.hours)
