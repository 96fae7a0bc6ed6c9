"""GitHub trending collector.

GitHub has no trending API; newly created repositories sorted by stars
stand in for it. Unauthenticated search is limited to 60 requests per hour,
so configuring ``GITHUB_TOKEN`` is strongly recommended.
"""

import asyncio
import math
from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from newsdigest.core.article import Article
from newsdigest.core.enums import TimeRange
from newsdigest.pipeline.collectors.base import BaseCollector
from newsdigest.pipeline.normalizer import GitHubRepoRecord, normalize_records
from newsdigest.utils.date_utils import from_timestamp, now_utc
from newsdigest.utils.exceptions import CollectorError
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)

GITHUB_SEARCH_API = "https://api.github.com/search/repositories"
RATE_LIMIT_WARNING_THRESHOLD = 10


class GitHubTrendingCollector(BaseCollector):
    """Collector for fast-rising new repositories per language."""

    name = "GitHub Trending"

    def __init__(
        self,
        languages: Sequence[str] = (),
        token: Optional[str] = None,
        time_range: TimeRange = TimeRange.WEEK,
        limit: int = 20,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(time_range=time_range, limit=limit, timeout=timeout, client=client)
        self.languages = [language for language in languages if language]
        self.token = token

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "newsdigest/1.0",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _query(self, language: Optional[str]) -> str:
        since = (now_utc() - timedelta(hours=self.time_range.hours)).date().isoformat()
        parts = [f"created:>={since}"]
        if language:
            parts.append(f"language:{language}")
        parts.extend(["fork:false", "stars:>=10"])
        return " ".join(parts)

    async def collect(self) -> List[Article]:
        """Collect trending repositories across the configured languages.

        Returns:
            Repositories sorted by stars, at most ``limit`` long.

        Raises:
            CollectorError: If every language search failed.
        """
        if not self.token:
            logger.warning("github_token_missing_unauthenticated_requests")

        languages: List[Optional[str]] = list(self.languages) or [None]
        per_language = math.ceil(self.limit / len(languages))

        async with self._http() as client:
            results = await asyncio.gather(
                *(self._search(client, language, per_language) for language in languages),
                return_exceptions=True,
            )

        repos: List[Dict[str, Any]] = []
        errors = []
        for language, result in zip(languages, results):
            if isinstance(result, BaseException):
                logger.warning("github_search_failed", language=language or "all", error=str(result))
                errors.append(result)
            else:
                repos.extend(result)

        if errors and len(errors) == len(languages):
            raise CollectorError(f"GitHub search failed: {errors[0]}")

        records = self._unique_records(repos)
        records.sort(key=lambda record: record.stargazers_count, reverse=True)
        articles = normalize_records(records[: self.limit])

        logger.info("github_collection_complete", languages=len(languages), articles_collected=len(articles))

        return articles

    @staticmethod
    def _unique_records(repos: List[Dict[str, Any]]) -> List[GitHubRepoRecord]:
        seen = set()
        records = []
        for repo in repos:
            try:
                record = GitHubRepoRecord.model_validate(repo)
            except ValidationError:
                continue

            key = record.full_name.lower()
            if key in seen:
                continue
            seen.add(key)
            records.append(record)
        return records

    async def _search(
        self, client: httpx.AsyncClient, language: Optional[str], per_page: int
    ) -> List[Dict[str, Any]]:
        params = {
            "q": self._query(language),
            "sort": "stars",
            "order": "desc",
            "per_page": str(min(per_page, 100)),
        }

        try:
            response = await client.get(GITHUB_SEARCH_API, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            raise CollectorError(f"GitHub search request failed: {e}") from e

        remaining = response.headers.get("x-ratelimit-remaining")
        if remaining and remaining.isdigit() and int(remaining) < RATE_LIMIT_WARNING_THRESHOLD:
            reset = response.headers.get("x-ratelimit-reset")
            logger.warning(
                "github_rate_limit_low",
                remaining=int(remaining),
                resets_at=from_timestamp(int(reset)).isoformat() if reset and reset.isdigit() else None,
            )

        if response.status_code == 403:
            raise CollectorError("GitHub API rate limit exceeded, configure GITHUB_TOKEN")
        if response.status_code == 401:
            raise CollectorError("GitHub API token invalid, check GITHUB_TOKEN")
        if response.status_code >= 400:
            raise CollectorError(f"GitHub API error: {response.status_code}")

        return response.json().get("items") or []
