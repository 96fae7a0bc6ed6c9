"""Digest and topic statistics models."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from newsdigest.core.enums import Topic
from newsdigest.utils.date_utils import now_utc

MAX_HIGHLIGHTS = 8
MAX_KEYWORDS = 20


class DigestAnalysis(BaseModel):
    """Structured briefing produced for one pipeline run."""

    title: str
    overview: str
    highlights: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=now_utc)
    topics_analysis: Optional[str] = None
    source_highlights: Optional[str] = None

    @field_validator("highlights")
    @classmethod
    def limit_highlights(cls, v: List[str]) -> List[str]:
        return v[:MAX_HIGHLIGHTS]

    @field_validator("keywords")
    @classmethod
    def limit_keywords(cls, v: List[str]) -> List[str]:
        return v[:MAX_KEYWORDS]


def empty_topic_counts() -> Dict[str, int]:
    """Zero count for every topic, in taxonomy order."""
    return {topic.value: 0 for topic in Topic}


class TopicStatsDay(BaseModel):
    """Per-topic article counts for one calendar day.

    Serialized with the ``byTopic`` key so stored history stays readable by
    other tools that share the ledger file.
    """

    model_config = ConfigDict(populate_by_name=True)

    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    total: int = Field(..., ge=0)
    by_topic: Dict[str, int] = Field(default_factory=empty_topic_counts, alias="byTopic")

    @model_validator(mode="after")
    def zero_fill_topics(self) -> "TopicStatsDay":
        """Every taxonomy topic is present, missing ones count zero."""
        filled = empty_topic_counts()
        filled.update(self.by_topic)
        self.by_topic = filled
        return self

    def to_record(self) -> dict:
        """JSON-ready dict as written to the history ledger."""
        return self.model_dump(by_alias=True)


class TopicTrendSummary(BaseModel):
    """Rolling counts for one topic over the last 7 and 30 days."""

    topic: str
    count_7d: int = 0
    count_30d: int = 0
    trend_7d: List[int] = Field(default_factory=list)
