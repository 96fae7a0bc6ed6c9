"""Daily aggregation of classified articles."""

from newsdigest.pipeline.aggregators.topic_stats import summarize_by_day

__all__ = ["summarize_by_day"]
