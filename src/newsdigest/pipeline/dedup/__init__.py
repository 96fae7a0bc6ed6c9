"""Merging and duplicate removal across sources."""

from newsdigest.pipeline.dedup.history import HistoricalArticleIndex
from newsdigest.pipeline.dedup.merge import (
    dedup_articles,
    dedup_key,
    filter_by_keywords,
    matches_keywords,
    merge,
    sort_by_recency,
)

__all__ = [
    "HistoricalArticleIndex",
    "dedup_articles",
    "dedup_key",
    "filter_by_keywords",
    "matches_keywords",
    "merge",
    "sort_by_recency",
]
