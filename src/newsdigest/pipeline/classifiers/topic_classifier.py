"""Topic classifier: one LLM call for the batch, keyword heuristic as fallback."""

import json
from typing import List, Optional, Sequence, Tuple

from newsdigest.core.article import Article, TopicClassification
from newsdigest.core.config import PromptConfig
from newsdigest.core.enums import Topic
from newsdigest.integrations.provider_factory import LLMClient
from newsdigest.utils.exceptions import APIError
from newsdigest.utils.logging import get_logger
from newsdigest.utils.text_utils import extract_json_array

logger = get_logger(__name__)

# First matching row wins, so order matters
TOPIC_KEYWORDS: Tuple[Tuple[Topic, Tuple[str, ...]], ...] = (
    (Topic.AI, ("ai", "llm", "model", "agent", "machine learning", "deep learning", "prompt")),
    (Topic.FRONTEND, ("react", "vue", "frontend", "css", "ui", "ux", "next.js")),
    (Topic.BACKEND, ("backend", "api", "server", "database", "microservice", "node.js")),
    (Topic.DEVOPS, ("devops", "ci/cd", "kubernetes", "docker", "infra", "sre")),
    (Topic.DATA, ("data", "analytics", "etl", "warehouse", "bi")),
    (Topic.SECURITY, ("security", "vulnerability", "cve", "auth", "encryption")),
    (Topic.CLOUD, ("cloud", "aws", "azure", "gcp", "serverless")),
    (Topic.MOBILE, ("ios", "android", "mobile", "react native", "flutter")),
    (Topic.STARTUP, ("startup", "funding", "growth", "saas", "product")),
    (Topic.OPEN_SOURCE, ("open source", "github", "repository", "oss")),
)

HEURISTIC_CONFIDENCE = 0.55
DEFAULT_LLM_CONFIDENCE = 0.6

DEFAULT_PROMPT = PromptConfig(
    system_prompt=(
        "You are a technology news editor who sorts stories into topics. "
        "Answer with JSON only."
    ),
    user_prompt_template=(
        "Assign each news item to exactly one topic.\n"
        "Allowed topics: {topics}\n"
        "Return a JSON array and nothing else, e.g.\n"
        '[{{"articleId": "...", "topic": "AI", "confidence": 0.8}}]\n'
        "News items: {articles}"
    ),
)


def heuristic_topic(article: Article) -> Topic:
    """Pick the first topic whose keyword occurs in the article text.

    Args:
        article: Article to classify.

    Returns:
        Matching topic, or Other when nothing matches.
    """
    text = article.search_text
    for topic, keywords in TOPIC_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return topic
    return Topic.OTHER


def heuristic_classification(article: Article) -> TopicClassification:
    return TopicClassification(
        article_id=article.id,
        topic=heuristic_topic(article),
        confidence=HEURISTIC_CONFIDENCE,
    )


def _confidence(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_LLM_CONFIDENCE
    return min(max(float(value), 0.0), 1.0)


def parse_classifications(text: str) -> Optional[List[TopicClassification]]:
    """Parse an LLM classification reply.

    The first well-formed array in the reply is decoded. Items without a
    string ``articleId`` and ``topic`` are skipped; topics outside the
    taxonomy become Other.

    Args:
        text: Raw LLM response.

    Returns:
        Parsed classifications, or None if no JSON array could be read.
    """
    parsed = extract_json_array(text)
    if not isinstance(parsed, list):
        return None

    results = []
    for item in parsed:
        if not isinstance(item, dict):
            continue
        article_id = item.get("articleId")
        topic = item.get("topic")
        if not isinstance(article_id, str) or not isinstance(topic, str):
            continue
        results.append(
            TopicClassification(
                article_id=article_id,
                topic=Topic.coerce(topic),
                confidence=_confidence(item.get("confidence")),
            )
        )
    return results


class TopicClassifier:
    """Assign exactly one topic to every article."""

    def __init__(self, llm_client: Optional[LLMClient] = None, prompt: Optional[PromptConfig] = None):
        """Initialize classifier.

        Args:
            llm_client: Completion client; None classifies by heuristic only.
            prompt: Prompt override (defaults to the built-in prompt).
        """
        self.llm_client = llm_client
        self.prompt = prompt or DEFAULT_PROMPT

    async def classify(self, articles: Sequence[Article]) -> List[TopicClassification]:
        """Classify a batch of articles.

        The LLM answer is used where it covers an article; any article it
        skipped, and every article when the call or the parse fails, gets
        the heuristic topic.

        Args:
            articles: Articles to classify.

        Returns:
            One classification per article, in article order.
        """
        if not articles:
            return []

        llm_results = await self._classify_with_llm(articles)
        if not llm_results:
            logger.info("topic_classification_heuristic", articles=len(articles))
            return [heuristic_classification(article) for article in articles]

        by_id = {}
        for item in llm_results:
            by_id.setdefault(item.article_id, item)

        classifications = []
        missing = 0
        for article in articles:
            item = by_id.get(article.id)
            if item is None:
                missing += 1
                item = heuristic_classification(article)
            classifications.append(item)

        logger.info(
            "topic_classification_complete",
            articles=len(articles),
            llm_classified=len(articles) - missing,
            heuristic_filled=missing,
        )
        return classifications

    async def _classify_with_llm(self, articles: Sequence[Article]) -> Optional[List[TopicClassification]]:
        if self.llm_client is None:
            return None

        compact = [
            {
                "articleId": article.id,
                "title": article.title,
                "summary": article.summary,
                "source": article.source,
            }
            for article in articles
        ]
        user_prompt = self.prompt.user_prompt_template.format(
            topics=", ".join(topic.value for topic in Topic),
            articles=json.dumps(compact, ensure_ascii=False),
        )

        try:
            text = await self.llm_client.complete(self.prompt.system_prompt, user_prompt)
        except APIError as e:
            logger.warning("topic_classification_llm_failed", error=str(e))
            return None

        parsed = parse_classifications(text)
        if not parsed:
            logger.warning("topic_classification_unparsable", response_preview=text[:200])
        return parsed
