"""HackerNews collector (Firebase API)."""

import asyncio
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from newsdigest.core.article import Article
from newsdigest.pipeline.collectors.base import BaseCollector
from newsdigest.pipeline.normalizer import HackerNewsItemRecord, normalize_records
from newsdigest.utils.date_utils import from_timestamp, is_within_hours
from newsdigest.utils.exceptions import CollectorError
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)

HN_API_BASE = "https://hacker-news.firebaseio.com/v0"
ITEM_BATCH_SIZE = 20
BATCH_DELAY_SEC = 0.1
REQUEST_TIMEOUT_SEC = 10.0

AI_KEYWORDS = (
    # General
    "ai", "artificial intelligence", "machine learning", "ml", "deep learning",
    "neural network", "transformer", "llm", "large language model",
    # Models
    "gpt", "chatgpt", "claude", "gemini", "llama", "mistral", "palm",
    "bert", "dalle", "midjourney", "stable diffusion", "diffusion model",
    # NLP
    "nlp", "natural language processing", "text generation", "sentiment analysis",
    "translation", "embedding", "tokenization",
    # Vision
    "computer vision", "cv", "image recognition", "object detection",
    "face recognition", "ocr", "image generation",
    # Techniques
    "reinforcement learning", "supervised learning", "unsupervised learning",
    "transfer learning", "fine-tuning", "rag", "retrieval augmented",
    # Frameworks and vendors
    "pytorch", "tensorflow", "huggingface", "langchain", "openai",
    "anthropic", "google ai", "deepmind", "openrouter",
    # Robotics
    "robotics", "autonomous", "self-driving", "automation",
    # Chinese
    "人工智能", "机器学习", "深度学习", "神经网络", "大模型",
    "自然语言处理", "计算机视觉", "智能体", "agent",
)


def is_ai_related(item: HackerNewsItemRecord) -> bool:
    """Check whether the item's title or text mentions an AI keyword."""
    text = f"{item.title or ''} {item.text or ''}".lower()
    return any(keyword in text for keyword in AI_KEYWORDS)


class HackerNewsCollector(BaseCollector):
    """Collector for AI-related stories from HackerNews top and best lists."""

    name = "HackerNews"

    async def collect(self) -> List[Article]:
        """Collect AI-related HackerNews stories.

        Returns:
            Stories sorted by score, at most ``limit`` long.

        Raises:
            CollectorError: If neither story list could be fetched.
        """
        logger.info("collecting_hackernews", limit=self.limit, time_range=self.time_range.value)

        # Over-fetch so enough stories survive the AI filter
        fetch_limit = min(self.limit * 5, 200)

        async with self._http() as client:
            results = await asyncio.gather(
                self._fetch_story_ids(client, "topstories", fetch_limit),
                self._fetch_story_ids(client, "beststories", fetch_limit),
                return_exceptions=True,
            )

            id_lists = []
            for listing, result in zip(("topstories", "beststories"), results):
                if isinstance(result, BaseException):
                    logger.warning("hackernews_listing_failed", listing=listing, error=str(result))
                else:
                    id_lists.append(result)

            if not id_lists:
                raise CollectorError(f"Failed to fetch HackerNews story lists: {results[0]}")

            story_ids = list(dict.fromkeys(i for ids in id_lists for i in ids))
            items = await self._fetch_items(client, story_ids)

        stories = [
            item
            for item in items
            if item.type == "story" and is_ai_related(item) and self._within_window(item)
        ]
        stories.sort(key=lambda item: item.score or 0, reverse=True)

        articles = normalize_records(stories[: self.limit])

        logger.info(
            "hackernews_collection_complete",
            items_fetched=len(items),
            articles_collected=len(articles),
        )

        return articles

    def _within_window(self, item: HackerNewsItemRecord) -> bool:
        if item.time is None:
            return False
        return is_within_hours(from_timestamp(item.time), self.time_range.hours)

    async def _fetch_story_ids(self, client: httpx.AsyncClient, listing: str, limit: int) -> List[int]:
        data = await self._get_json(client, f"{HN_API_BASE}/{listing}.json")
        if not isinstance(data, list):
            raise CollectorError(f"Unexpected {listing} payload")
        return [story_id for story_id in data if isinstance(story_id, int)][:limit]

    async def _fetch_items(self, client: httpx.AsyncClient, ids: List[int]) -> List[HackerNewsItemRecord]:
        """Fetch item details in small concurrent batches.

        Args:
            client: HTTP client.
            ids: Item ids.

        Returns:
            Items that were fetched and validated; failures are skipped.
        """
        items: List[HackerNewsItemRecord] = []

        for start in range(0, len(ids), ITEM_BATCH_SIZE):
            batch = ids[start:start + ITEM_BATCH_SIZE]
            results = await asyncio.gather(
                *(self._fetch_item(client, item_id) for item_id in batch),
                return_exceptions=True,
            )

            for item_id, result in zip(batch, results):
                if isinstance(result, BaseException):
                    logger.debug("hackernews_item_failed", item_id=item_id, error=str(result))
                elif result is not None:
                    items.append(result)

            if start + ITEM_BATCH_SIZE < len(ids):
                await asyncio.sleep(BATCH_DELAY_SEC)

        return items

    async def _fetch_item(self, client: httpx.AsyncClient, item_id: int) -> Optional[HackerNewsItemRecord]:
        data = await self._get_json(client, f"{HN_API_BASE}/item/{item_id}.json")
        # Deleted items come back as null
        if not isinstance(data, dict):
            return None

        try:
            return HackerNewsItemRecord.model_validate(data)
        except ValidationError:
            return None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        retry=retry_if_exception_type(httpx.HTTPError),
        reraise=True,
    )
    async def _get_json(self, client: httpx.AsyncClient, url: str) -> Any:
        response = await client.get(url, timeout=REQUEST_TIMEOUT_SEC)
        response.raise_for_status()
        return response.json()
