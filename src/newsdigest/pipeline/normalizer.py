"""Conversion of raw source records into canonical articles.

Each collector hands over a tagged raw record (discriminated on ``kind``).
Records are validated at this boundary; optional fields that fail to parse
are coerced to ``None`` instead of rejecting the whole record. A record that
lacks what makes it an article (title, link) normalizes to ``None`` and is
dropped by the caller.
"""

import re
from typing import Annotated, Any, Iterable, List, Literal, Optional, TypeVar, Union

from bs4 import BeautifulSoup
from pydantic import BaseModel, BeforeValidator, Field, TypeAdapter, ValidationError, WrapValidator

from newsdigest.core.article import Article
from newsdigest.core.enums import ArticleCategory, Language, SourceType
from newsdigest.utils.date_utils import days_since, from_timestamp, now_utc, parse_date, to_iso
from newsdigest.utils.logging import get_logger
from newsdigest.utils.text_utils import clean_whitespace, excerpt, hash_url, strip_html

logger = get_logger(__name__)

_CJK_RE = re.compile(r"[一-鿿]")

_ID_PREFIXES = {
    SourceType.RSS: "rss",
    SourceType.REDDIT: "reddit",
    SourceType.V2EX: "v2ex",
    SourceType.LINUX_DO: "linuxdo",
    SourceType.PRODUCT_HUNT: "ph",
}


def _none_on_error(value: Any, handler: Any) -> Any:
    try:
        return handler(value)
    except ValidationError:
        return None


def _zero_on_error(value: Any, handler: Any) -> Any:
    try:
        return handler(value)
    except ValidationError:
        return 0


T = TypeVar("T")

# Optional field that degrades to None instead of failing the record
Lenient = Annotated[Optional[T], WrapValidator(_none_on_error)]
Count = Annotated[int, WrapValidator(_zero_on_error)]


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if item]


StringList = Annotated[List[str], BeforeValidator(_string_list)]


class HackerNewsItemRecord(BaseModel):
    """Item from the HackerNews Firebase API."""

    kind: Literal["hackernews"] = "hackernews"
    id: int
    type: Lenient[str] = None
    by: Lenient[str] = None
    time: Lenient[int] = None
    title: Lenient[str] = None
    url: Lenient[str] = None
    text: Lenient[str] = None
    score: Lenient[int] = None
    descendants: Lenient[int] = None


class FeedEntryRecord(BaseModel):
    """Entry of an RSS/Atom feed (generic feeds, Reddit, V2EX, Linux.do)."""

    kind: Literal["feed"] = "feed"
    feed_name: str
    source_type: SourceType = SourceType.RSS
    feed_language: Optional[Language] = None
    category: ArticleCategory = ArticleCategory.ALL
    title: Lenient[str] = None
    link: Lenient[str] = None
    snippet: Lenient[str] = None
    author: Lenient[str] = None
    published: Lenient[str] = None
    categories: StringList = Field(default_factory=list)


class ProductHuntRecord(BaseModel):
    """Entry of the Product Hunt feed."""

    kind: Literal["product_hunt"] = "product_hunt"
    name: Lenient[str] = None
    link: Lenient[str] = None
    content: Lenient[str] = None
    published: Lenient[str] = None
    votes: Lenient[int] = None
    comments: Lenient[int] = None
    topics: StringList = Field(default_factory=list)


class TweetRecord(BaseModel):
    """Post returned by the X recent-search API."""

    kind: Literal["tweet"] = "tweet"
    id: str
    text: str = ""
    author_id: Lenient[str] = None
    created_at: Lenient[str] = None
    lang: Lenient[str] = None
    like_count: Count = 0
    retweet_count: Count = 0
    reply_count: Lenient[int] = None
    keywords: StringList = Field(default_factory=list)


class GitHubRepoRecord(BaseModel):
    """Repository returned by the GitHub search API."""

    kind: Literal["github_repo"] = "github_repo"
    id: int
    full_name: str
    html_url: str
    description: Lenient[str] = None
    stargazers_count: Count = 0
    language: Lenient[str] = None
    topics: StringList = Field(default_factory=list)
    created_at: Lenient[str] = None


RawRecord = Annotated[
    Union[HackerNewsItemRecord, FeedEntryRecord, ProductHuntRecord, TweetRecord, GitHubRepoRecord],
    Field(discriminator="kind"),
]

_raw_record_adapter: TypeAdapter = TypeAdapter(RawRecord)


def detect_language(text: str, default: Language = Language.EN) -> Language:
    """Chinese when the text contains CJK ideographs, else the default."""
    return Language.ZH if _CJK_RE.search(text or "") else default


def extract_tagline(content: Optional[str]) -> str:
    """Product tagline: the first paragraph of a Product Hunt entry body."""
    if not content:
        return ""

    paragraph = BeautifulSoup(content, "html.parser").find("p")
    if paragraph is not None:
        return clean_whitespace(paragraph.get_text(" "))

    # Body without paragraphs ends with "Discussion | Link"
    return strip_html(re.split(r"Discussion|Link", content, flags=re.IGNORECASE)[0])


def _published_or_now(value: Optional[str]) -> str:
    return to_iso(parse_date(value) or now_utc())


def _normalize_hackernews(record: HackerNewsItemRecord) -> Optional[Article]:
    if not record.title:
        return None

    published = from_timestamp(record.time) if record.time else now_utc()
    return Article(
        id=f"hn-{record.id}",
        title=record.title,
        summary=excerpt(record.text, fallback=record.title),
        url=record.url or f"https://news.ycombinator.com/item?id={record.id}",
        source="HackerNews",
        source_type=SourceType.HACKERNEWS,
        author=record.by,
        published_at=to_iso(published),
        category=ArticleCategory.AI,
        language=Language.EN,
        score=record.score or 0,
        comment_count=record.descendants or 0,
    )


def _normalize_feed_entry(record: FeedEntryRecord) -> Optional[Article]:
    title = (record.title or "").strip()
    link = (record.link or "").strip()
    if not title or not link:
        return None

    prefix = _ID_PREFIXES.get(record.source_type, record.source_type.value)
    language = record.feed_language or detect_language(title)
    return Article(
        id=f"{prefix}-{hash_url(link)[:16]}",
        title=title,
        summary=excerpt(record.snippet, fallback=title),
        url=link,
        source=record.feed_name,
        source_type=record.source_type,
        author=record.author,
        published_at=_published_or_now(record.published),
        category=record.category,
        language=language,
        tags=record.categories,
    )


def _normalize_product_hunt(record: ProductHuntRecord) -> Optional[Article]:
    name = (record.name or "").strip()
    link = (record.link or "").strip()
    if not name or not link:
        return None

    tagline = extract_tagline(record.content)
    stats = []
    if record.votes:
        stats.append(f"{record.votes} votes")
    if record.comments:
        stats.append(f"{record.comments} comments")
    summary = " | ".join([tagline[:300], *stats]) if tagline else " | ".join(stats) or name

    main_topic = record.topics[0] if record.topics else "Product Hunt"
    tags = [main_topic, "Product Hunt", *record.topics[:3]]
    return Article(
        id=f"ph-{hash_url(link)[:16]}",
        title=f"{name} - {tagline}" if tagline else name,
        summary=summary,
        url=link,
        source="Product Hunt",
        source_type=SourceType.PRODUCT_HUNT,
        author=name,
        published_at=_published_or_now(record.published),
        language=Language.EN,
        score=record.votes or 0,
        comment_count=record.comments,
        tags=list(dict.fromkeys(tags)),
    )


def _normalize_tweet(record: TweetRecord) -> Optional[Article]:
    text = clean_whitespace(record.text)
    if not text:
        return None

    return Article(
        id=f"x-{record.id}",
        title=f"{text[:90]}..." if len(text) > 90 else text,
        summary=text,
        url=f"https://x.com/i/web/status/{record.id}",
        source="X",
        source_type=SourceType.TWITTER,
        author=record.author_id,
        published_at=_published_or_now(record.created_at),
        category=ArticleCategory.AI,
        language=Language.ZH if record.lang == "zh" else Language.EN,
        score=record.like_count + record.retweet_count * 2,
        comment_count=record.reply_count,
        tags=record.keywords,
    )


def _normalize_github_repo(record: GitHubRepoRecord) -> Optional[Article]:
    owner = record.full_name.split("/", 1)[0]
    created = parse_date(record.created_at)
    if created is None:
        created_text = "created recently"
    else:
        days = days_since(created)
        created_text = {0: "created today", 1: "created yesterday"}.get(days, f"created {days} days ago")

    tags = [
        f"{record.language} trending" if record.language else "GitHub trending",
        record.language or "unknown",
        *record.topics,
    ]
    return Article(
        id=f"gh-trending-{record.id}",
        title=record.full_name,
        summary=f"{record.description or 'No description'} | ⭐ {record.stargazers_count} stars | {created_text}",
        url=record.html_url,
        source="GitHub Trending",
        source_type=SourceType.GITHUB,
        author=owner,
        published_at=to_iso(now_utc()),
        language=Language.EN,
        score=record.stargazers_count,
        tags=tags,
    )


_NORMALIZERS = {
    "hackernews": _normalize_hackernews,
    "feed": _normalize_feed_entry,
    "product_hunt": _normalize_product_hunt,
    "tweet": _normalize_tweet,
    "github_repo": _normalize_github_repo,
}


def normalize_record(record: Union[dict, BaseModel]) -> Optional[Article]:
    """Convert one raw record into an Article.

    Args:
        record: Raw record model, or a dict carrying a ``kind`` tag.

    Returns:
        The article, or None when the record is not an article.
    """
    if isinstance(record, dict):
        try:
            record = _raw_record_adapter.validate_python(record)
        except ValidationError as e:
            logger.debug("raw_record_rejected", kind=record.get("kind"), error=str(e))
            return None

    normalizer = _NORMALIZERS[record.kind]
    try:
        return normalizer(record)
    except ValidationError as e:
        logger.debug("article_validation_failed", kind=record.kind, error=str(e))
        return None


def normalize_records(records: Iterable[Union[dict, BaseModel]]) -> List[Article]:
    """Normalize many records, dropping the ones that are not articles."""
    articles = []
    for record in records:
        article = normalize_record(record)
        if article is not None:
            articles.append(article)
    return articles
