"""Core domain models and configuration."""

from newsdigest.core.article import Article, TopicClassification
from newsdigest.core.config import Config, FeedConfig, PipelineConfig, PromptConfig
from newsdigest.core.digest import DigestAnalysis, TopicStatsDay, TopicTrendSummary
from newsdigest.core.enums import (
    ArticleCategory,
    Language,
    SourceType,
    SummaryStyle,
    TimeRange,
    Topic,
)

__all__ = [
    "Article",
    "ArticleCategory",
    "Config",
    "DigestAnalysis",
    "FeedConfig",
    "Language",
    "PipelineConfig",
    "PromptConfig",
    "SourceType",
    "SummaryStyle",
    "TimeRange",
    "Topic",
    "TopicClassification",
    "TopicStatsDay",
    "TopicTrendSummary",
]
