"""Merge per-source article lists into one deduplicated, recency-sorted list.

Two articles are the same story only when BOTH their normalized title and
their normalized URL match. A shared link with a different headline (or the
same headline on a different page) is kept.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from newsdigest.core.article import Article
from newsdigest.utils.logging import get_logger
from newsdigest.utils.text_utils import normalize_dedup_url, normalize_title

logger = get_logger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def matches_keywords(article: Article, keywords: Sequence[str]) -> bool:
    """Check whether any keyword occurs in the article's title, summary or tags.

    Args:
        article: Article to test.
        keywords: Keyword substrings; an empty list matches everything.

    Returns:
        True if the article is relevant.
    """
    if not keywords:
        return True

    text = article.search_text
    return any(keyword.lower() in text for keyword in keywords if keyword)


def filter_by_keywords(articles: Iterable[Article], keywords: Sequence[str]) -> List[Article]:
    """Keep the articles matching at least one keyword."""
    return [article for article in articles if matches_keywords(article, keywords)]


def dedup_key(article: Article) -> Tuple[str, str]:
    """Identity of a story: (normalized title, normalized URL)."""
    return normalize_title(article.title), normalize_dedup_url(article.url)


def dedup_articles(articles: Iterable[Article]) -> List[Article]:
    """Drop repeated stories, the first occurrence wins.

    Args:
        articles: Articles in priority order.

    Returns:
        Articles with duplicates removed, original order preserved.
    """
    seen = set()
    unique = []
    for article in articles:
        key = dedup_key(article)
        if key in seen:
            continue
        seen.add(key)
        unique.append(article)
    return unique


def _sort_key(article: Article) -> datetime:
    return article.published_datetime or _OLDEST


def sort_by_recency(articles: Iterable[Article]) -> List[Article]:
    """Newest first; unparsable dates sort last, ties keep input order."""
    return sorted(articles, key=_sort_key, reverse=True)


def merge(
    article_lists: Iterable[Iterable[Article]],
    keywords: Optional[Sequence[str]] = None,
) -> List[Article]:
    """Combine article lists from all sources.

    Steps: concatenate, keyword filter, dedup, sort newest first.

    Args:
        article_lists: One list per source.
        keywords: Relevance keywords; None or empty disables filtering.

    Returns:
        Merged article list.
    """
    combined = [article for articles in article_lists for article in articles]
    relevant = filter_by_keywords(combined, keywords or [])
    unique = dedup_articles(relevant)
    merged = sort_by_recency(unique)

    logger.info(
        "articles_merged",
        input_count=len(combined),
        keyword_filtered=len(combined) - len(relevant),
        duplicates_removed=len(relevant) - len(unique),
        output_count=len(merged),
    )
    return merged
