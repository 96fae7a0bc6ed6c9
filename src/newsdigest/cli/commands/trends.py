"""Topic trend command."""

from pathlib import Path
from typing import Optional

import click

from newsdigest.core.config import Config
from newsdigest.storage import JsonFileStore, TopicHistoryLedger, build_trend_summary


@click.command()
@click.option(
    "--path",
    "history_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Topic history file (defaults to TOPIC_STATS_PATH)",
)
def trends(history_path: Optional[Path]) -> None:
    """Show 7-day and 30-day topic counts from the history ledger.

    Examples:
        newsdigest trends
        newsdigest trends --path data/topic-stats-history.json
    """
    if history_path is None:
        history_path = Config().topic_stats_path  # type: ignore

    history = TopicHistoryLedger(JsonFileStore(history_path)).read_history()
    if not history:
        click.echo(f"No topic history found at {history_path}")
        return

    summary = build_trend_summary(history)

    click.echo(f"Topic trends ({len(history)} days stored, last: {history[-1].date})")
    click.echo("=" * 60)
    click.echo(f"{'Topic':<12} {'7d':>5} {'30d':>5}   7-day trend")
    click.echo("-" * 60)
    for item in summary:
        trend = " ".join(str(count) for count in item.trend_7d)
        click.echo(f"{item.topic:<12} {item.count_7d:>5} {item.count_30d:>5}   {trend}")
