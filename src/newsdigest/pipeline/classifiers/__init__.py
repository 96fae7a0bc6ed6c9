"""Topic classification."""

from newsdigest.pipeline.classifiers.topic_classifier import (
    HEURISTIC_CONFIDENCE,
    TOPIC_KEYWORDS,
    TopicClassifier,
    heuristic_classification,
    heuristic_topic,
    parse_classifications,
)

__all__ = [
    "HEURISTIC_CONFIDENCE",
    "TOPIC_KEYWORDS",
    "TopicClassifier",
    "heuristic_classification",
    "heuristic_topic",
    "parse_classifications",
]
