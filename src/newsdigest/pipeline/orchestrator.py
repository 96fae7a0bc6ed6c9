"""Pipeline orchestrator for one digest run."""

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from newsdigest.core.article import Article, TopicClassification
from newsdigest.core.config import Config, PipelineConfig
from newsdigest.core.digest import DigestAnalysis, TopicStatsDay, TopicTrendSummary
from newsdigest.integrations.provider_factory import LLMClient, ProviderFactory
from newsdigest.pipeline.aggregators import summarize_by_day
from newsdigest.pipeline.classifiers import TopicClassifier
from newsdigest.pipeline.classifiers.topic_classifier import DEFAULT_PROMPT as CLASSIFICATION_PROMPT
from newsdigest.pipeline.collectors import BaseCollector, create_collectors
from newsdigest.pipeline.dedup import HistoricalArticleIndex, merge
from newsdigest.pipeline.formatters import (
    MarkdownFormatter,
    NotificationFormatter,
    ReadmeFormatter,
    RSSFormatter,
    daily_filename,
)
from newsdigest.pipeline.generators import DigestAnalyzer
from newsdigest.pipeline.generators.analysis_generator import DEFAULT_PROMPT as ANALYSIS_PROMPT
from newsdigest.services.config_loader import ConfigLoader
from newsdigest.services.email_service import EmailService
from newsdigest.services.metrics_tracker import MetricsTracker
from newsdigest.services.telegram_service import TelegramService
from newsdigest.storage import JsonFileStore, TopicHistoryLedger, build_trend_summary
from newsdigest.utils.date_utils import utc_today
from newsdigest.utils.exceptions import PipelineError, RenderError, StorageError
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)

PREVIEW_FEED_ITEMS = 10


class PipelineOrchestrator:
    """Orchestrates one digest run.

    Coordinates: Collection → Merge → (Analysis ‖ Classification) → Topic
    ledger → Outputs → Notifications

    Every component is built once here and handed to the stage that uses it.
    Only collection and merging are required; any later stage that fails is
    logged and the remaining artifacts are still produced.

    The topic history file is read and rewritten once per run without
    locking, so two runs must not share the same ``TOPIC_STATS_PATH``
    concurrently.
    """

    def __init__(
        self,
        config: Config,
        pipeline_config: Optional[PipelineConfig] = None,
        llm_client: Optional[LLMClient] = None,
        collectors: Optional[Sequence[BaseCollector]] = None,
        telegram: Optional[TelegramService] = None,
        email: Optional[EmailService] = None,
    ):
        """Initialize pipeline orchestrator.

        Args:
            config: Application configuration.
            pipeline_config: Per-run switches.
            llm_client: Completion client (built from the provider chain if omitted).
            collectors: Source collectors (built from configuration if omitted).
            telegram: Telegram service (built from configuration if omitted).
            email: Email service (built from configuration if omitted).
        """
        self.config = config
        self.pipeline_config = pipeline_config or PipelineConfig()

        self.config_loader = ConfigLoader(config.config_dir)

        if llm_client is None:
            fallback = ProviderFactory(config).create_fallback_client()
            if fallback.clients:
                llm_client = fallback
            else:
                logger.warning("llm_not_configured_using_heuristics")
        self.llm_client = llm_client

        self.collectors = (
            list(collectors)
            if collectors is not None
            else create_collectors(config, limit=self.pipeline_config.limit)
        )

        self.analyzer = DigestAnalyzer(
            llm_client=llm_client,
            prompt=self.config_loader.load_prompt_or_default("digest_analysis", ANALYSIS_PROMPT),
        )
        self.classifier = TopicClassifier(
            llm_client=llm_client,
            prompt=self.config_loader.load_prompt_or_default("topic_classification", CLASSIFICATION_PROMPT),
        )
        self.ledger = TopicHistoryLedger(JsonFileStore(config.topic_stats_path))

        self.markdown_formatter = MarkdownFormatter()
        self.rss_formatter = RSSFormatter(channel_link=config.rss_channel_link)
        self.readme_formatter = ReadmeFormatter()
        self.notification_formatter = NotificationFormatter()

        self.telegram = telegram or TelegramService(
            config.telegram_bot_token,
            config.telegram_chat_id,
            timeout=config.request_timeout_sec,
        )
        self.email = email or EmailService(
            api_key=config.resend_api_key,
            sender=config.email_from,
            recipients=config.email_recipient_list,
            enabled=config.email_enabled,
            timeout=config.request_timeout_sec,
        )

        self.metrics = MetricsTracker()

        logger.info(
            "pipeline_initialized",
            collectors=[collector.name for collector in self.collectors],
            llm_enabled=llm_client is not None,
        )

    async def run(self) -> Dict[str, Any]:
        """Run the pipeline.

        Returns:
            Statistics dict for the run.

        Raises:
            PipelineError: If collection or merging fails unexpectedly.
        """
        self.metrics.start_pipeline()
        date = utc_today().isoformat()

        stats: Dict[str, Any] = {
            "date": date,
            "sources": {},
            "collected": 0,
            "merged": 0,
            "classified": 0,
            "rss_written": False,
            "markdown_written": False,
            "readme_updated": False,
            "telegram_sent": False,
            "email_sent": False,
        }

        try:
            # Stage 1: Collection
            article_lists = await self._run_collection(stats)

            # Stage 2: Merge, dedup and optional cross-run dedup
            articles = self._run_merge(article_lists)
            stats["merged"] = len(articles)
            self.metrics.set_metric("articles_merged", len(articles))
        except Exception as e:
            logger.error("pipeline_failed", error=str(e))
            self.metrics.log_metrics_summary()
            raise PipelineError(f"Pipeline execution failed: {e}") from e

        if not articles:
            logger.warning("no_articles_after_merge")
            self.metrics.log_metrics_summary()
            return stats

        # Stage 3: Analysis and classification
        analysis, classifications = await self._run_analysis(articles)
        stats["classified"] = len(classifications)
        stats["title"] = analysis.title

        # Stage 4: Topic statistics
        today_stats, trend = self._run_topic_stats(date, articles, classifications)

        # Stage 5: Outputs
        filename = daily_filename(date, analysis.generated_at)
        daily_path = self.config.output_daily_dir / filename
        doc_link = self._doc_link(daily_path, filename)
        stats.update(self._write_outputs(date, analysis, articles, today_stats, trend, daily_path, doc_link))

        # Stage 6: Notifications
        if self.pipeline_config.skip_notifications:
            logger.info("notifications_skipped")
        else:
            stats.update(await self._run_notifications(date, analysis, doc_link))

        self.metrics.log_metrics_summary()
        logger.info("pipeline_completed", stats=stats)

        return stats

    async def _run_collection(self, stats: Dict[str, Any]) -> List[List[Article]]:
        """Run every collector concurrently.

        Args:
            stats: Run statistics, per-source counts are recorded here.

        Returns:
            One article list per collector, empty for failed sources.
        """
        logger.info("stage_collection_starting", sources=len(self.collectors))
        self.metrics.start_timer("collection")

        article_lists = await asyncio.gather(
            *(self._collect_source(collector) for collector in self.collectors)
        )

        for collector, articles in zip(self.collectors, article_lists):
            stats["sources"][collector.name] = stats["sources"].get(collector.name, 0) + len(articles)
        stats["collected"] = sum(len(articles) for articles in article_lists)

        self.metrics.record_stage_metrics(
            "collection",
            {
                "sources": len(self.collectors),
                "collected": stats["collected"],
                "duration_seconds": round(self.metrics.stop_timer("collection"), 2),
            },
        )

        return list(article_lists)

    async def _collect_source(self, collector: BaseCollector) -> List[Article]:
        """Collect one source in isolation: any failure yields no articles."""
        try:
            return await asyncio.wait_for(collector.collect(), timeout=self.config.source_timeout_sec)
        except asyncio.TimeoutError:
            logger.error("collection_timed_out", source=collector.name, timeout=self.config.source_timeout_sec)
        except Exception as e:
            logger.error("collection_failed", source=collector.name, error=str(e))

        self.metrics.increment("failed_sources")
        return []

    def _run_merge(self, article_lists: List[List[Article]]) -> List[Article]:
        articles = merge(article_lists, keywords=self.config.keywords)

        if self.config.history_dedup_days > 0 and articles:
            index = HistoricalArticleIndex(
                self.config.output_daily_dir,
                days=self.config.history_dedup_days,
            ).load()
            before = len(articles)
            articles = index.filter(articles)
            logger.info(
                "history_dedup_complete",
                days=self.config.history_dedup_days,
                removed=before - len(articles),
            )

        return articles

    async def _run_analysis(
        self, articles: List[Article]
    ) -> Tuple[DigestAnalysis, List[TopicClassification]]:
        """Run the digest analysis and topic classification concurrently."""
        logger.info("stage_analysis_starting", articles=len(articles))
        self.metrics.start_timer("analysis")

        analysis, classifications = await asyncio.gather(
            self.analyzer.analyze(
                articles,
                style=self.config.summary_style,
                keywords=self.config.keywords,
            ),
            self.classifier.classify(articles),
        )

        self.metrics.record_stage_metrics(
            "analysis",
            {
                "highlights": len(analysis.highlights),
                "classified": len(classifications),
                "duration_seconds": round(self.metrics.stop_timer("analysis"), 2),
            },
        )

        return analysis, classifications

    def _run_topic_stats(
        self,
        date: str,
        articles: List[Article],
        classifications: List[TopicClassification],
    ) -> Tuple[TopicStatsDay, List[TopicTrendSummary]]:
        today_stats = summarize_by_day(date, articles, classifications)

        try:
            history = self.ledger.upsert_day(today_stats)
        except StorageError as e:
            logger.error("topic_history_write_failed", error=str(e))
            history = [today_stats]

        return today_stats, build_trend_summary(history)

    def _doc_link(self, daily_path: Path, filename: str) -> str:
        if self.config.docs_base_url:
            return f"{self.config.docs_base_url.rstrip('/')}/{filename}"
        return daily_path.as_posix()

    def _write_outputs(
        self,
        date: str,
        analysis: DigestAnalysis,
        articles: List[Article],
        today_stats: TopicStatsDay,
        trend: List[TopicTrendSummary],
        daily_path: Path,
        doc_link: str,
    ) -> Dict[str, bool]:
        """Write the feed, the daily document and the README blocks.

        Each artifact is written independently of the others.

        Returns:
            Which artifacts were written.
        """
        results = {"rss_written": False, "markdown_written": False, "readme_updated": False}

        try:
            xml = self.rss_formatter.format(
                analysis,
                articles[:PREVIEW_FEED_ITEMS],
                channel_title=f"{analysis.title} ({date})",
            )
            _write_text(self.config.output_rss_path, xml)
            results["rss_written"] = True
            logger.info("rss_written", path=str(self.config.output_rss_path))
        except (OSError, RenderError) as e:
            logger.error("rss_write_failed", error=str(e))

        try:
            markdown = self.markdown_formatter.format(date, analysis, articles, today_stats)
            _write_text(daily_path, markdown)
            results["markdown_written"] = True
            logger.info("daily_markdown_written", path=str(daily_path))
        except (OSError, RenderError) as e:
            logger.error("daily_markdown_write_failed", error=str(e))

        if self.pipeline_config.skip_readme or not self.config.update_readme:
            logger.info("readme_update_skipped")
            return results

        readme_path = self.config.readme_path
        try:
            current = readme_path.read_text(encoding="utf-8") if readme_path.exists() else None
            updated = self.readme_formatter.update(current, date, analysis, doc_link, today_stats, trend)
            _write_text(readme_path, updated)
            results["readme_updated"] = True
        except (OSError, RenderError) as e:
            logger.error("readme_update_failed", error=str(e))

        return results

    async def _run_notifications(self, date: str, analysis: DigestAnalysis, doc_link: str) -> Dict[str, bool]:
        telegram_result, email_result = await asyncio.gather(
            self.telegram.send_message(self.notification_formatter.telegram_text(analysis, doc_link)),
            self.email.send_email(
                self.notification_formatter.email_subject(date),
                self.notification_formatter.email_text(analysis, doc_link),
            ),
        )

        for channel, result in (("telegram", telegram_result), ("email", email_result)):
            if result.success:
                self.metrics.increment("notifications_sent")
            elif not result.skipped:
                logger.warning("notification_failed", channel=channel, message=result.message)

        return {"telegram_sent": telegram_result.success, "email_sent": email_result.success}


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
