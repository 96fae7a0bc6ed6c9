"""News collectors for the supported source types."""

from typing import Dict, List, Optional, Sequence

import httpx

from newsdigest.core.config import Config, FeedConfig
from newsdigest.core.enums import SourceType
from newsdigest.pipeline.collectors.base import BaseCollector
from newsdigest.pipeline.collectors.feed_group import FEED_GROUP_NAMES, FeedGroupCollector, rank_by_score
from newsdigest.pipeline.collectors.github_trending import GitHubTrendingCollector
from newsdigest.pipeline.collectors.hackernews import HackerNewsCollector
from newsdigest.pipeline.collectors.product_hunt import ProductHuntCollector
from newsdigest.pipeline.collectors.rss import RSSCollector
from newsdigest.pipeline.collectors.twitter import TwitterCollector
from newsdigest.pipeline.dedup.merge import sort_by_recency
from newsdigest.services.config_loader import ConfigLoader

__all__ = [
    "BaseCollector",
    "FeedGroupCollector",
    "GitHubTrendingCollector",
    "HackerNewsCollector",
    "ProductHuntCollector",
    "RSSCollector",
    "TwitterCollector",
    "create_collector",
    "create_collectors",
    "create_feed_groups",
]


def create_collector(
    feed_config: FeedConfig,
    config: Config,
    limit: Optional[int] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> RSSCollector:
    """Factory function to create the collector for a feed.

    Args:
        feed_config: Feed configuration.
        config: Application configuration (keywords, window, timeouts).
        limit: Per-source item limit override.
        client: Shared HTTP client.

    Returns:
        Collector instance for the feed's source type.
    """
    collector_class = {
        SourceType.PRODUCT_HUNT: ProductHuntCollector,
    }.get(feed_config.source_type, RSSCollector)

    return collector_class(
        feed_config,
        keywords=config.keywords,
        time_range=config.news_time_range,
        limit=limit or config.max_items_per_source,
        timeout=config.request_timeout_sec,
        client=client,
    )


def create_feed_groups(
    feeds: Sequence[FeedConfig],
    config: Config,
    limit: Optional[int] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[FeedGroupCollector]:
    """Group feeds by source type, one collector per group.

    Each group is capped at ``limit`` as a whole; its feeds are fetched uncapped.

    Args:
        feeds: Feed configurations, groups keep the order of their first feed.
        config: Application configuration.
        limit: Per-source item limit override.
        client: Shared HTTP client.

    Returns:
        One collector per feed group.
    """
    limit = limit or config.max_items_per_source
    grouped: Dict[SourceType, List[RSSCollector]] = {}
    for feed in feeds:
        member = create_collector(feed, config, client=client)
        member.limit = None  # capped by the group
        grouped.setdefault(feed.source_type, []).append(member)

    return [
        FeedGroupCollector(
            FEED_GROUP_NAMES.get(source_type, source_type.value),
            members,
            limit=limit,
            rank=rank_by_score if source_type == SourceType.PRODUCT_HUNT else sort_by_recency,
        )
        for source_type, members in grouped.items()
    ]


def create_collectors(
    config: Config,
    limit: Optional[int] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[BaseCollector]:
    """Build every enabled collector.

    Feeds come from ``config/feeds.yaml`` when present, otherwise from the
    environment-configured feed groups.

    Args:
        config: Application configuration.
        limit: Per-source item limit override.
        client: Shared HTTP client.

    Returns:
        Collectors in source priority order.
    """
    limit = limit or config.max_items_per_source
    common = {
        "time_range": config.news_time_range,
        "limit": limit,
        "timeout": config.request_timeout_sec,
        "client": client,
    }
    collectors: List[BaseCollector] = []

    if config.include_hackernews:
        collectors.append(HackerNewsCollector(**common))

    loader = ConfigLoader(config.config_dir)
    feeds = loader.load_feeds_config() if loader.has_feeds_config() else config.feed_configs()
    collectors.extend(create_feed_groups(feeds, config, limit, client))

    if config.include_twitter:
        collectors.append(
            TwitterCollector(config.x_bearer_token, keywords=config.x_query_keywords, **common)
        )

    if config.include_github_trending:
        collectors.append(
            GitHubTrendingCollector(
                languages=config.github_language_list,
                token=config.github_token,
                **common,
            )
        )

    return collectors
