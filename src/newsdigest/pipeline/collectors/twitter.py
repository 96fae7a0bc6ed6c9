"""X (Twitter) recent-search collector."""

from datetime import timedelta
from typing import List, Optional, Sequence

import httpx

from newsdigest.core.article import Article
from newsdigest.core.enums import TimeRange
from newsdigest.pipeline.collectors.base import BaseCollector
from newsdigest.pipeline.normalizer import TweetRecord, normalize_records
from newsdigest.utils.date_utils import now_utc, to_iso
from newsdigest.utils.exceptions import CollectorError
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)

X_SEARCH_API = "https://api.x.com/2/tweets/search/recent"


def build_query(keywords: Sequence[str]) -> str:
    """Build a recent-search query excluding reposts and replies.

    Args:
        keywords: Search terms, each matched as a phrase.

    Returns:
        Query string
    """
    phrases = [f'"{keyword.strip()}"' for keyword in keywords if keyword.strip()]
    keywords_query = f"({' OR '.join(phrases)})" if phrases else "(AI OR LLM)"
    return f"{keywords_query} -is:retweet -is:reply lang:en OR lang:zh"


class TwitterCollector(BaseCollector):
    """Collector for popular posts matching the configured keywords."""

    name = "X"

    def __init__(
        self,
        bearer_token: Optional[str],
        keywords: Sequence[str] = (),
        time_range: TimeRange = TimeRange.WEEK,
        limit: int = 20,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(time_range=time_range, limit=limit, timeout=timeout, client=client)
        self.bearer_token = bearer_token
        self.keywords = list(keywords)

    async def collect(self) -> List[Article]:
        """Collect posts ranked by likes plus weighted reposts.

        Returns:
            Articles, empty when no bearer token is configured.

        Raises:
            CollectorError: If the search request fails.
        """
        if not self.bearer_token:
            logger.warning("x_bearer_token_missing_skipping")
            return []

        params = {
            "query": build_query(self.keywords),
            "max_results": str(min(max(self.limit, 10), 100)),
            "tweet.fields": "created_at,lang,author_id,public_metrics",
            "start_time": to_iso(now_utc() - timedelta(hours=self.time_range.hours)),
        }
        headers = {"Authorization": f"Bearer {self.bearer_token}"}

        logger.info("collecting_x", query=params["query"])

        try:
            async with self._http() as client:
                response = await client.get(X_SEARCH_API, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise CollectorError(f"X search request failed: {e}") from e

        if response.status_code >= 400:
            raise CollectorError(f"X API {response.status_code}: {response.text[:300]}")

        records = []
        for tweet in response.json().get("data") or []:
            metrics = tweet.get("public_metrics") or {}
            records.append(
                TweetRecord(
                    id=str(tweet.get("id")),
                    text=tweet.get("text") or "",
                    author_id=tweet.get("author_id"),
                    created_at=tweet.get("created_at"),
                    lang=tweet.get("lang"),
                    like_count=metrics.get("like_count", 0),
                    retweet_count=metrics.get("retweet_count", 0),
                    reply_count=metrics.get("reply_count"),
                    keywords=self.keywords,
                )
            )

        articles = normalize_records(records)
        articles.sort(key=lambda article: article.score or 0, reverse=True)

        logger.info("x_collection_complete", articles_collected=min(len(articles), self.limit))

        return articles[: self.limit]
