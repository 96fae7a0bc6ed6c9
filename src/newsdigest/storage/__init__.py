"""Persistent state."""

from newsdigest.storage.json_store import JsonFileStore
from newsdigest.storage.topic_history import TopicHistoryLedger, build_trend_summary

__all__ = ["JsonFileStore", "TopicHistoryLedger", "build_trend_summary"]
