"""Reduce one day's articles and classifications into per-topic counts."""

from typing import Dict, Iterable, Sequence

from newsdigest.core.article import Article, TopicClassification
from newsdigest.core.digest import TopicStatsDay, empty_topic_counts
from newsdigest.core.enums import Topic
from newsdigest.pipeline.classifiers.topic_classifier import heuristic_topic


def summarize_by_day(
    date: str,
    articles: Sequence[Article],
    classifications: Iterable[TopicClassification],
) -> TopicStatsDay:
    """Count articles per topic for one day.

    Articles without a classification are counted under their heuristic
    topic, so ``total`` always equals the sum of the topic counts.

    Args:
        date: ISO date (YYYY-MM-DD).
        articles: The day's articles.
        classifications: Topic per article id.

    Returns:
        Zero-filled stats for the day.
    """
    topic_by_id: Dict[str, Topic] = {}
    for item in classifications:
        topic_by_id[item.article_id] = item.topic

    by_topic = empty_topic_counts()
    for article in articles:
        topic = topic_by_id.get(article.id) or heuristic_topic(article)
        by_topic[topic.value] += 1

    return TopicStatsDay(date=date, total=len(articles), by_topic=by_topic)
