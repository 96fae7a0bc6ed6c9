"""Article domain models."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from newsdigest.core.enums import ArticleCategory, Language, SourceType, Topic
from newsdigest.utils.date_utils import parse_date


class Article(BaseModel):
    """One normalized news item, whatever source it came from."""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    summary: str = ""
    url: str = Field(..., min_length=1)
    source: str
    source_type: SourceType
    author: Optional[str] = None
    published_at: str
    category: ArticleCategory = ArticleCategory.ALL
    language: Language = Language.EN
    score: Optional[int] = None
    comment_count: Optional[int] = None
    tags: List[str] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "hn-39912345",
                "title": "Show HN: A tiny LLM agent framework",
                "summary": "A minimal agent loop in 300 lines...",
                "url": "https://example.com/agent",
                "source": "HackerNews",
                "source_type": "hackernews",
                "author": "pg",
                "published_at": "2024-04-03T08:15:00.000Z",
                "category": "ai",
                "language": "en",
                "score": 412,
                "comment_count": 87,
                "tags": [],
            }
        }
    }

    @field_validator("tags", mode="before")
    @classmethod
    def drop_empty_tags(cls, v):
        """Keep only non-empty string tags."""
        if not v:
            return []
        return [str(tag).strip() for tag in v if tag is not None and str(tag).strip()]

    @property
    def published_datetime(self) -> Optional[datetime]:
        """Publication time as an aware datetime, None when unparsable."""
        return parse_date(self.published_at)

    @property
    def search_text(self) -> str:
        """Case-folded title, summary and tags used for keyword matching."""
        return f"{self.title} {self.summary} {' '.join(self.tags)}".lower()


class TopicClassification(BaseModel):
    """Topic assigned to one article."""

    article_id: str
    topic: Topic = Topic.OTHER
    confidence: float = Field(..., ge=0.0, le=1.0)

    @field_validator("topic", mode="before")
    @classmethod
    def coerce_topic(cls, v):
        """Labels outside the taxonomy are stored as Other."""
        return Topic.coerce(v)
