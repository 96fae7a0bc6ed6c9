"""Enums for NewsDigest system."""

from enum import Enum


class SourceType(str, Enum):
    """Upstream system an article was collected from."""

    HACKERNEWS = "hackernews"
    RSS = "rss"
    TWITTER = "twitter"
    GITHUB = "github"
    REDDIT = "reddit"
    PRODUCT_HUNT = "producthunt"
    V2EX = "v2ex"
    LINUX_DO = "linuxdo"


class Topic(str, Enum):
    """Fixed topic taxonomy used by classification and trend tracking.

    NOTE: Member order is the canonical display and zero-fill order.
    """

    AI = "AI"
    FRONTEND = "Frontend"
    BACKEND = "Backend"
    DEVOPS = "DevOps"
    DATA = "Data"
    SECURITY = "Security"
    CLOUD = "Cloud"
    MOBILE = "Mobile"
    STARTUP = "Startup"
    OPEN_SOURCE = "OpenSource"
    OTHER = "Other"

    @classmethod
    def coerce(cls, value: object) -> "Topic":
        """Map any value onto the taxonomy, unknown labels become OTHER."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class Language(str, Enum):
    """Article language."""

    ZH = "zh"
    EN = "en"


class ArticleCategory(str, Enum):
    """Coarse content category."""

    AI = "ai"
    ML = "ml"
    NLP = "nlp"
    CV = "cv"
    ROBOTICS = "robotics"
    ALL = "all"


class TimeRange(str, Enum):
    """Collection time window."""

    DAY = "1d"
    THREE_DAYS = "3d"
    WEEK = "7d"

    @property
    def hours(self) -> int:
        return {"1d": 24, "3d": 72, "7d": 168}[self.value]


class SummaryStyle(str, Enum):
    """Requested depth of the digest analysis."""

    BRIEF = "brief"
    DETAILED = "detailed"
    KEYWORDS = "keywords"
