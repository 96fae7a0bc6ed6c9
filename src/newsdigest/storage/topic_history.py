"""Topic history ledger and rolling trend summaries.

The ledger file holds a JSON array of ``{date, total, byTopic}`` objects,
one per calendar day, ordered by date. It is read and rewritten in full once
per run. Concurrent runs against the same file are not supported; nothing
locks it.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from newsdigest.core.digest import TopicStatsDay, TopicTrendSummary
from newsdigest.storage.json_store import JsonFileStore
from newsdigest.utils.date_utils import last_n_dates
from newsdigest.utils.exceptions import StorageError
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)

TREND_DAYS = 7
LONG_TREND_DAYS = 30


class TopicHistoryLedger:
    """Per-day topic counts persisted across runs."""

    def __init__(self, store: JsonFileStore):
        """Initialize ledger.

        Args:
            store: Backing JSON file.
        """
        self.store = store

    def read_history(self) -> List[TopicStatsDay]:
        """Load the history, oldest day first.

        Missing or corrupt storage yields an empty history. Entries that do
        not validate are skipped; for repeated dates the last entry wins.

        Returns:
            Days sorted ascending by date.
        """
        try:
            data = self.store.read()
        except StorageError as e:
            logger.warning("topic_history_unreadable", path=str(self.store.path), error=str(e))
            return []

        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning("topic_history_not_a_list", path=str(self.store.path))
            return []

        by_date: Dict[str, TopicStatsDay] = {}
        for entry in data:
            try:
                day = TopicStatsDay.model_validate(entry)
            except ValidationError as e:
                logger.warning("topic_history_entry_invalid", entry=str(entry)[:200], error=str(e))
                continue
            by_date[day.date] = day

        return sorted(by_date.values(), key=lambda day: day.date)

    def upsert_day(self, day: TopicStatsDay) -> List[TopicStatsDay]:
        """Insert or replace the entry for ``day.date`` and persist.

        Args:
            day: Stats for one day.

        Returns:
            The full history as written, sorted ascending by date.

        Raises:
            StorageError: If the history cannot be written.
        """
        history = [entry for entry in self.read_history() if entry.date != day.date]
        history.append(day)
        history.sort(key=lambda entry: entry.date)

        self.store.write([entry.to_record() for entry in history])

        logger.info("topic_history_updated", date=day.date, days_stored=len(history))
        return history


def build_trend_summary(
    history: Iterable[TopicStatsDay],
    today: Optional[date] = None,
) -> List[TopicTrendSummary]:
    """Compute 7-day and 30-day counts for every topic seen in the history.

    Windows end at ``today`` (the current UTC date by default), not at the
    newest history entry, so a stale history yields trailing zeros.

    Args:
        history: Stored days, any order.
        today: Last day of both windows.

    Returns:
        One summary per topic, sorted by 7-day count descending.
    """
    history = list(history)
    counts_by_date = {day.date: day.by_topic for day in history}

    topics: List[str] = []
    for day in history:
        for topic in day.by_topic:
            if topic not in topics:
                topics.append(topic)

    week = last_n_dates(TREND_DAYS, today)
    month = last_n_dates(LONG_TREND_DAYS, today)

    summaries = []
    for topic in topics:
        trend = [counts_by_date.get(day, {}).get(topic, 0) for day in week]
        summaries.append(
            TopicTrendSummary(
                topic=topic,
                count_7d=sum(trend),
                count_30d=sum(counts_by_date.get(day, {}).get(topic, 0) for day in month),
                trend_7d=trend,
            )
        )

    summaries.sort(key=lambda item: item.count_7d, reverse=True)
    return summaries
