"""Configuration models."""

from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import AliasChoices, BaseModel, Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from newsdigest.core.enums import ArticleCategory, Language, SourceType, SummaryStyle, TimeRange
from newsdigest.utils.text_utils import split_csv

DEFAULT_RSS_FEEDS = [
    "https://www.jiqizhixin.com/rss",
    "https://www.technologyreview.com/feed/",
    "https://hnrss.org/frontpage",
]

DEFAULT_V2EX_FEEDS = ["https://www.v2ex.com/index.xml"]

DEFAULT_LINUX_DO_FEEDS = ["https://linux.do/latest.rss"]

DEFAULT_REDDIT_FEEDS = [
    "https://www.reddit.com/r/artificial/.rss",
    "https://www.reddit.com/r/MachineLearning/.rss",
    "https://www.reddit.com/r/deeplearning/.rss",
    "https://www.reddit.com/r/LocalLLaMA/.rss",
    "https://www.reddit.com/r/OpenAI/.rss",
    "https://www.reddit.com/r/CharacterAI/.rss",
    "https://www.reddit.com/r/compsci/.rss",
]

DEFAULT_PRODUCT_HUNT_FEEDS = ["https://www.producthunt.com/feed"]

DEFAULT_GITHUB_LANGUAGES = ["typescript", "python", "rust"]

DEFAULT_LLM_CANDIDATES = (
    "openai:deepseek-chat,"
    "zai:glm-4.7,"
    "openai:gpt-4o,"
    "anthropic:claude-sonnet-4-20250514,"
    "google:gemini-2.5-flash"
)


class FeedConfig(BaseModel):
    """One syndication feed to collect."""

    name: str
    source_type: SourceType = SourceType.RSS
    url: HttpUrl
    language: Optional[Language] = None  # None: detect per entry
    category: ArticleCategory = ArticleCategory.ALL
    filter_keywords: bool = False
    timeout_sec: Optional[int] = Field(default=None, gt=0)
    enabled: bool = True


class PipelineConfig(BaseModel):
    """Pipeline execution configuration."""

    skip_notifications: bool = False
    skip_readme: bool = False
    limit: Optional[int] = Field(default=None, gt=0)  # Overrides max items per source


class PromptConfig(BaseModel):
    """Prompt template configuration."""

    system_prompt: str
    user_prompt_template: str


class Config(BaseSettings):
    """Main application configuration from environment variables."""

    # Collection
    news_keywords: Optional[str] = Field(
        default=None,
        description="Comma-separated keywords; empty disables keyword filtering",
    )
    news_time_range: TimeRange = TimeRange.WEEK
    max_items_per_source: int = Field(default=20, gt=0)
    request_timeout_sec: int = Field(default=15, gt=0)
    source_timeout_sec: int = Field(default=30, gt=0)
    history_dedup_days: int = Field(default=0, ge=0)

    # Feed groups (comma-separated URLs, empty means built-in defaults)
    rss_feeds: Optional[str] = None
    v2ex_feeds: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("v2ex_feeds", "ve2x_feeds")
    )
    linux_do_feeds: Optional[str] = None
    reddit_feeds: Optional[str] = None
    product_hunt_feeds: Optional[str] = None

    # Source switches
    include_hackernews: bool = True
    include_rss: bool = True
    include_v2ex: bool = Field(
        default=True, validation_alias=AliasChoices("include_v2ex", "include_ve2x")
    )
    include_linux_do: bool = True
    include_reddit: bool = True
    include_product_hunt: bool = True
    include_github_trending: bool = True
    include_twitter: bool = False

    # X (Twitter)
    x_bearer_token: Optional[str] = None
    x_keywords: Optional[str] = None

    # GitHub
    github_token: Optional[str] = None
    github_trending_languages: Optional[str] = None

    # LLM
    llm_provider: str = "openai"
    llm_model: str = "deepseek-chat"
    llm_candidates: str = DEFAULT_LLM_CANDIDATES
    llm_timeout_sec: int = Field(default=120, gt=0)
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    deepseek_api_key: Optional[str] = None
    deepseek_base_url: str = "https://api.deepseek.com"
    google_api_key: Optional[str] = None
    zai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    summary_style: SummaryStyle = SummaryStyle.DETAILED

    # Notifications
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    email_enabled: bool = False
    resend_api_key: Optional[str] = None
    email_from: Optional[str] = None
    email_to: Optional[str] = Field(
        default=None,
        description="Comma-separated list of email recipients",
    )

    # Output
    output_rss_path: Path = Path("output/news-digest.xml")
    output_daily_dir: Path = Path("docs/daily")
    topic_stats_path: Path = Path("data/topic-stats-history.json")
    readme_path: Path = Path("README.md")
    update_readme: bool = True
    docs_base_url: Optional[str] = Field(
        default=None,
        description="Public URL of the daily docs directory, used for push links",
    )
    rss_channel_link: str = "https://example.com/self-news-agent"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_dir: Optional[Path] = None

    config_dir: Path = Path("config")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def keywords(self) -> List[str]:
        """Keywords used for relevance filtering."""
        return split_csv(self.news_keywords)

    @property
    def x_query_keywords(self) -> List[str]:
        """Search keywords for X, falling back to the news keywords."""
        return split_csv(self.x_keywords) or self.keywords

    @property
    def github_language_list(self) -> List[str]:
        return split_csv(self.github_trending_languages) or list(DEFAULT_GITHUB_LANGUAGES)

    @property
    def email_recipient_list(self) -> List[str]:
        """Get list of email recipients."""
        return split_csv(self.email_to)

    def feed_configs(self) -> List[FeedConfig]:
        """Build feed configurations from the enabled feed groups."""
        feeds: List[FeedConfig] = []

        if self.include_rss:
            for url in split_csv(self.rss_feeds) or DEFAULT_RSS_FEEDS:
                feeds.append(
                    FeedConfig(
                        name=urlparse(url).netloc.removeprefix("www.") or url,
                        source_type=SourceType.RSS,
                        url=url,
                        filter_keywords=True,
                        timeout_sec=self.request_timeout_sec,
                    )
                )

        groups = [
            (self.include_v2ex, self.v2ex_feeds, DEFAULT_V2EX_FEEDS,
             "V2EX", SourceType.V2EX, Language.ZH, False),
            (self.include_linux_do, self.linux_do_feeds, DEFAULT_LINUX_DO_FEEDS,
             "Linux.do", SourceType.LINUX_DO, Language.ZH, False),
            (self.include_reddit, self.reddit_feeds, DEFAULT_REDDIT_FEEDS,
             "Reddit", SourceType.REDDIT, Language.EN, True),
            (self.include_product_hunt, self.product_hunt_feeds, DEFAULT_PRODUCT_HUNT_FEEDS,
             "Product Hunt", SourceType.PRODUCT_HUNT, Language.EN, False),
        ]
        for enabled, raw, defaults, name, source_type, language, filter_keywords in groups:
            if not enabled:
                continue
            for url in split_csv(raw) or defaults:
                feeds.append(
                    FeedConfig(
                        name=name,
                        source_type=source_type,
                        url=url,
                        language=language,
                        filter_keywords=filter_keywords,
                        # Product Hunt responds slowly
                        timeout_sec=30 if source_type == SourceType.PRODUCT_HUNT else self.request_timeout_sec,
                    )
                )

        return feeds

    def validate_paths(self) -> None:
        """Create the directories output artifacts are written into."""
        self.output_rss_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_daily_dir.mkdir(parents=True, exist_ok=True)
        self.topic_stats_path.parent.mkdir(parents=True, exist_ok=True)

        if self.log_dir:
            self.log_dir.mkdir(parents=True, exist_ok=True)
