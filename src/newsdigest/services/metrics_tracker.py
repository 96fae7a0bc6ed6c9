"""Metrics tracking for digest pipeline runs."""

import time
from collections import defaultdict
from typing import Any, Dict, Optional

from newsdigest.utils.date_utils import now_utc, to_iso
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)


class MetricsTracker:
    """Track and aggregate metrics across pipeline stages."""

    def __init__(self):
        self.metrics: Dict[str, Any] = defaultdict(int)
        self.timers: Dict[str, float] = {}
        self.stage_metrics: Dict[str, Dict[str, Any]] = {}
        self.start_time: Optional[float] = None

    def start_pipeline(self) -> None:
        """Reset all metrics and mark the start of a run."""
        self.start_time = time.monotonic()
        self.metrics.clear()
        self.timers.clear()
        self.stage_metrics.clear()
        logger.info("pipeline_started", timestamp=to_iso(now_utc()))

    def start_timer(self, timer_name: str) -> None:
        self.timers[timer_name] = time.monotonic()

    def stop_timer(self, timer_name: str) -> float:
        """
        Stop a named timer and return elapsed time.

        Args:
            timer_name: Name of the timer

        Returns:
            Elapsed time in seconds, or 0 if timer not found
        """
        started = self.timers.pop(timer_name, None)
        if started is None:
            return 0.0
        return time.monotonic() - started

    def increment(self, metric_name: str, value: int = 1) -> None:
        self.metrics[metric_name] += value

    def set_metric(self, metric_name: str, value: Any) -> None:
        self.metrics[metric_name] = value

    def record_stage_metrics(self, stage_name: str, metrics: Dict[str, Any]) -> None:
        """
        Record metrics for a specific pipeline stage.

        Args:
            stage_name: Name of the pipeline stage
            metrics: Dictionary of metrics for this stage
        """
        self.stage_metrics[stage_name] = {
            **metrics,
            "timestamp": to_iso(now_utc()),
        }

        logger.info(f"stage_metrics_{stage_name}", stage=stage_name, **metrics)

    def get_pipeline_duration(self) -> float:
        if self.start_time is None:
            return 0.0
        return time.monotonic() - self.start_time

    def get_metrics_summary(self) -> Dict[str, Any]:
        """
        Get comprehensive metrics summary.

        Returns:
            Dictionary with all metrics and per-stage data
        """
        return {
            "pipeline_duration_seconds": round(self.get_pipeline_duration(), 2),
            "timestamp": to_iso(now_utc()),
            "overall_metrics": dict(self.metrics),
            "stage_metrics": dict(self.stage_metrics),
        }

    def log_metrics_summary(self) -> None:
        summary = self.get_metrics_summary()

        logger.info(
            "pipeline_metrics_summary",
            duration_seconds=summary["pipeline_duration_seconds"],
            overall_metrics=summary["overall_metrics"],
            stage_count=len(summary["stage_metrics"]),
        )
